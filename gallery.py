"""Thumbnail sidebar for user-added photos."""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Callable, List, Optional, Tuple

import cv2
import numpy as np

from utils.drawing import draw_gallery_strip


logger = logging.getLogger(__name__)

THUMB_SIZE = 96


def make_thumbnail(image: np.ndarray, size: int = THUMB_SIZE) -> np.ndarray:
    """Square thumbnail of a decoded BGR image."""
    return cv2.resize(image, (size, size), interpolation=cv2.INTER_AREA)


class GalleryPanel:
    """Keeps one thumbnail per user photo, keyed by photo id.

    Deletions requested from the panel are routed to ``on_delete`` (normally
    :meth:`PhotoPool.remove_photo`), which calls back into :meth:`remove`.
    """

    def __init__(self, on_delete: Optional[Callable[[int], bool]] = None, thumb_size: int = THUMB_SIZE) -> None:
        self.on_delete = on_delete
        self.thumb_size = thumb_size
        self.visible = True
        self._thumbs: "OrderedDict[int, np.ndarray]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._thumbs)

    def __contains__(self, photo_id: object) -> bool:
        return photo_id in self._thumbs

    @property
    def photo_ids(self) -> List[int]:
        return list(self._thumbs.keys())

    def add(self, photo_id: int, image_bytes: bytes, thumbnail: Optional[np.ndarray] = None) -> None:
        if thumbnail is not None:
            if thumbnail.shape[:2] != (self.thumb_size, self.thumb_size):
                thumbnail = make_thumbnail(thumbnail, self.thumb_size)
            self._thumbs[photo_id] = thumbnail
            return
        image = cv2.imdecode(np.frombuffer(image_bytes, dtype=np.uint8), cv2.IMREAD_COLOR) if image_bytes else None
        if image is None:
            # Thumbnail only; the photo itself is already in the scene.
            logger.warning(f"Could not build thumbnail for photo {photo_id}")
            image = np.full((self.thumb_size, self.thumb_size, 3), 60, dtype=np.uint8)
        self._thumbs[photo_id] = make_thumbnail(image, self.thumb_size)

    def remove(self, photo_id: int) -> None:
        self._thumbs.pop(photo_id, None)

    def request_delete(self, photo_id: int) -> bool:
        """User pressed delete on a thumbnail."""
        if self.on_delete is None:
            existed = photo_id in self._thumbs
            self.remove(photo_id)
            return existed
        return self.on_delete(photo_id)

    def thumbnails(self) -> List[Tuple[int, np.ndarray]]:
        return list(self._thumbs.items())

    def draw(self, frame: np.ndarray, selected_id: Optional[int] = None) -> np.ndarray:
        if not self.visible or not self._thumbs:
            return frame
        return draw_gallery_strip(frame, self.thumbnails(), selected_id=selected_id, thumb_size=72)
