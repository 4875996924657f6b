"""User photo bookkeeping: ids, ribbon placement and non-repeating focus picks."""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

import numpy as np

from config import PHOTO_ID_BASE
from mode_state import Mode, ModeState
from pose_catalog import PoseCatalog
from scene_objects import ChoreographedObject, DecorationStyle, ObjectKind, Pose, Texture, frozen_vector

if TYPE_CHECKING:
    from gallery import GalleryPanel
    from renderer import BaseRenderer


logger = logging.getLogger(__name__)

PHOTO_MAX_SIDE = 2.5
PHOTO_DEFAULT_SIDE = 2.6
FRAME_BORDER = 0.4


def photo_frame_size(texture: Optional[Texture]) -> Tuple[float, float]:
    """Frame width/height for a texture, keeping its aspect ratio."""
    w = h = PHOTO_DEFAULT_SIDE
    if texture is not None and texture.width and texture.height:
        aspect = texture.width / texture.height
        if aspect > 1:
            w, h = PHOTO_MAX_SIDE, PHOTO_MAX_SIDE / aspect
        else:
            w, h = PHOTO_MAX_SIDE * aspect, PHOTO_MAX_SIDE
    return w + FRAME_BORDER, h + FRAME_BORDER


class PhotoPool:
    """Live photo objects plus the shuffle bag used for random focus picks.

    The bag only ever holds ids of live photos and never holds an id twice.
    """

    def __init__(
        self,
        catalog: PoseCatalog,
        state: ModeState,
        renderer: Optional["BaseRenderer"] = None,
        gallery: Optional["GalleryPanel"] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self.catalog = catalog
        # independent of catalog.rng: picks must not shift later photo positions
        self.rng = rng if rng is not None else np.random.default_rng()
        self.state = state
        self.renderer = renderer
        self.gallery = gallery
        self._photos: "OrderedDict[int, ChoreographedObject]" = OrderedDict()
        self._textures: Dict[int, Texture] = {}
        self._bag: List[int] = []
        self._next_id = PHOTO_ID_BASE
        self._placed = 0
        self._last_pick: Optional[int] = None

    def __len__(self) -> int:
        return len(self._photos)

    def __contains__(self, photo_id: object) -> bool:
        return photo_id in self._photos

    @property
    def photos(self) -> List[ChoreographedObject]:
        return list(self._photos.values())

    @property
    def photo_ids(self) -> List[int]:
        return list(self._photos.keys())

    @property
    def shuffle_bag(self) -> Tuple[int, ...]:
        return tuple(self._bag)

    def get(self, photo_id: int) -> Optional[ChoreographedObject]:
        return self._photos.get(photo_id)

    def texture(self, photo_id: int) -> Optional[Texture]:
        return self._textures.get(photo_id)

    def add_photo(
        self,
        texture: Optional[Texture],
        image_bytes: Optional[bytes] = None,
        thumbnail: Optional[np.ndarray] = None,
    ) -> int:
        """Register a photo on the ribbon and return its id.

        ``image_bytes`` marks a user-added photo; only those are shown in the
        gallery. A prebuilt ``thumbnail`` spares the gallery a second decode.
        """
        photo_id = self._next_id
        self._next_id += 1

        position, rotation = self.catalog.ribbon_slot(self._placed)
        self._placed += 1
        obj = ChoreographedObject(
            id=photo_id,
            kind=ObjectKind.PHOTO,
            tree_position=position,
            scatter_position=self.catalog.scatter_position(),
            heart_position=self.catalog.heart_position(),
            rotation_drift=self.catalog.rotation_drift(),
            base_scale=frozen_vector((1.0, 1.0, 1.0)),
            pose=Pose(rotation=rotation),
            style=DecorationStyle.FRAME,
            color=(204, 204, 204),
            frame_size=photo_frame_size(texture),
        )

        self._photos[photo_id] = obj
        if texture is not None:
            self._textures[photo_id] = texture
        self._bag.append(photo_id)

        if self.renderer is not None:
            self.renderer.add_object(obj, texture)
        if image_bytes is not None and self.gallery is not None:
            self.gallery.add(photo_id, image_bytes, thumbnail=thumbnail)

        logger.info(f"Added photo {photo_id} ({len(self._photos)} in pool)")
        return photo_id

    def remove_photo(self, photo_id: int) -> bool:
        """Delete a photo; unknown ids are ignored and return False."""
        obj = self._photos.pop(photo_id, None)
        if obj is None:
            return False

        self._textures.pop(photo_id, None)
        if photo_id in self._bag:
            self._bag.remove(photo_id)
        if self._last_pick == photo_id:
            self._last_pick = None

        if self.renderer is not None:
            self.renderer.remove_object(photo_id)
        if self.gallery is not None:
            self.gallery.remove(photo_id)

        if self.state.focus_target_id == photo_id:
            self.state.clear_focus()
            self.state.mode = Mode.TREE
            logger.info(f"Focused photo {photo_id} deleted, returning to {Mode.TREE.value}")

        logger.info(f"Removed photo {photo_id} ({len(self._photos)} in pool)")
        return True

    def pick_random_focus_target(self) -> Optional[int]:
        """Draw the next focus id from the shuffle bag, refilling it when empty."""
        if not self._photos:
            return None
        if not self._bag:
            self._bag = list(self._photos.keys())

        candidates = self._bag
        if len(self._bag) > 1 and self._last_pick in self._bag:
            candidates = [pid for pid in self._bag if pid != self._last_pick]

        chosen = candidates[int(self.rng.integers(len(candidates)))]
        self._bag.remove(chosen)
        self._last_pick = chosen
        return chosen
