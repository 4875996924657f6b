"""Scene assembly and the per-frame tick."""

from __future__ import annotations

import logging
from typing import List, Optional

import numpy as np

from choreography import Choreographer, SnowField, StarOrnament
from config import SceneConfig
from gallery import GalleryPanel
from gesture_classifier import GestureReading, classify_gesture
from mode_state import ModeState, ModeStateMachine
from photo_ingest import PhotoIngestor
from photo_pool import PhotoPool
from pose_catalog import PoseCatalog
from renderer import BaseRenderer
from scene_objects import ChoreographedObject, Texture
from utils.drawing import make_placeholder_photo


logger = logging.getLogger(__name__)


class HolidayScene:
    """Wires the catalog, photo pool, state machine and choreography together.

    Everything here runs on the tick thread. Photos decoded in the background
    arrive through ``ingestor`` and are registered at the start of the next
    :meth:`tick`.
    """

    def __init__(
        self,
        config: Optional[SceneConfig] = None,
        renderer: Optional[BaseRenderer] = None,
        gallery: Optional[GalleryPanel] = None,
        ingestor: Optional[PhotoIngestor] = None,
        seed: Optional[int] = None,
    ) -> None:
        self.config = config or SceneConfig()
        # separate streams: focus picks and snow recycling never perturb catalog positions
        catalog_seed, pick_seed, snow_seed = np.random.SeedSequence(seed).spawn(3)
        self.rng = np.random.default_rng(catalog_seed)
        self.renderer = renderer
        self.gallery = gallery
        self.ingestor = ingestor

        self.state = ModeState()
        self.catalog = PoseCatalog(self.config, self.rng)
        self.pool = PhotoPool(
            self.catalog,
            self.state,
            renderer=renderer,
            gallery=gallery,
            rng=np.random.default_rng(pick_seed),
        )
        self.machine = ModeStateMachine(self.state, self.pool)
        self.choreographer = Choreographer(self.state)
        self.star = StarOrnament()
        self.snow = SnowField(self.config.snow_count, np.random.default_rng(snow_seed))
        if gallery is not None and gallery.on_delete is None:
            gallery.on_delete = self.pool.remove_photo

        count = self.config.particle_count
        self.decorations: List[ChoreographedObject] = [
            self.catalog.build_decoration(i, count) for i in range(count)
        ]
        if renderer is not None:
            for obj in self.decorations:
                renderer.add_object(obj)
        if self.config.include_placeholder_photo:
            self.pool.add_photo(Texture(make_placeholder_photo(), name="placeholder"))

        self.last_reading: Optional[GestureReading] = None
        logger.info(f"Scene ready: {len(self.decorations)} decorations, {len(self.pool)} photos")

    def live_objects(self) -> List[ChoreographedObject]:
        return self.decorations + self.pool.photos

    def add_photo(self, texture: Optional[Texture], image_bytes: Optional[bytes] = None) -> int:
        return self.pool.add_photo(texture, image_bytes)

    def remove_photo(self, photo_id: int) -> bool:
        return self.pool.remove_photo(photo_id)

    def register_ingested(self) -> List[int]:
        """Move decoded photos from the ingestion queue into the pool."""
        if self.ingestor is None:
            return []
        return [
            self.pool.add_photo(item.texture, item.image_bytes, thumbnail=item.thumbnail)
            for item in self.ingestor.drain()
        ]

    def tick(self, dt: float, landmarks=None, fresh: bool = True) -> GestureReading:
        """Advance one frame given the latest hand landmarks (or None).

        ``fresh=False`` means the tracker produced nothing for this frame (e.g. a
        dropped camera read); the previous reading is reused instead of being
        treated as a lost hand.
        """
        self.register_ingested()
        if not fresh and self.last_reading is not None:
            reading = self.last_reading
        else:
            reading = classify_gesture(landmarks)
        self.machine.apply(reading)
        self.choreographer.update(dt, self.live_objects(), star=self.star, snow=self.snow)
        self.last_reading = reading
        return reading

    def render(self) -> Optional[np.ndarray]:
        if self.renderer is None:
            return None
        return self.renderer.render(
            self.live_objects(),
            self.choreographer.group_rotation,
            star=self.star,
            snow=self.snow,
        )
