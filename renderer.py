"""Renderer collaborator: owns per-object render handles and draws the scene."""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Tuple

import cv2
import numpy as np

from choreography import SnowField, StarOrnament
from config import CAMERA_FOV_DEG, CAMERA_POSITION, COLORS
from scene_objects import ChoreographedObject, DecorationStyle, Texture, euler_to_matrix
from utils.drawing import make_candy_cane_texture


logger = logging.getLogger(__name__)

BACKGROUND = (5, 5, 5)


class BaseRenderer(ABC):
    """Abstract base class for scene renderers.

    Objects are linked to render resources only by id; removing an object must
    release whatever the renderer allocated for it.
    """

    @abstractmethod
    def add_object(self, obj: ChoreographedObject, texture: Optional[Texture] = None) -> None:
        """Allocate render resources for an object."""

    @abstractmethod
    def remove_object(self, object_id: int) -> bool:
        """Dispose of an object's render resources; unknown ids return False."""

    @abstractmethod
    def render(
        self,
        objects: Iterable[ChoreographedObject],
        group_rotation: np.ndarray,
        star: Optional[StarOrnament] = None,
        snow: Optional[SnowField] = None,
    ) -> np.ndarray:
        """Draw one frame and return it."""


@dataclass
class RenderHandle:
    object_id: int
    texture: Optional[np.ndarray] = None
    sprites: Dict[Tuple[int, int], np.ndarray] = field(default_factory=dict)

    def sprite(self, width: int, height: int) -> Optional[np.ndarray]:
        if self.texture is None:
            return None
        key = (width, height)
        if key not in self.sprites:
            if len(self.sprites) > 16:
                self.sprites.clear()
            self.sprites[key] = cv2.resize(self.texture, key, interpolation=cv2.INTER_AREA)
        return self.sprites[key]

    def dispose(self) -> None:
        self.sprites.clear()
        self.texture = None


class PreviewRenderer(BaseRenderer):
    """Perspective preview drawn with OpenCV primitives into a numpy frame."""

    def __init__(self, width: int, height: int, fov_deg: float = CAMERA_FOV_DEG) -> None:
        self.width = width
        self.height = height
        self.camera = np.array(CAMERA_POSITION, dtype=np.float64)
        self.focal = (height / 2) / math.tan(math.radians(fov_deg) / 2)
        self._handles: Dict[int, RenderHandle] = {}
        self._cane = make_candy_cane_texture(32)

    def __len__(self) -> int:
        return len(self._handles)

    def __contains__(self, object_id: object) -> bool:
        return object_id in self._handles

    def add_object(self, obj: ChoreographedObject, texture: Optional[Texture] = None) -> None:
        image = texture.image if texture is not None else None
        self._handles[obj.id] = RenderHandle(object_id=obj.id, texture=image)

    def remove_object(self, object_id: int) -> bool:
        handle = self._handles.pop(object_id, None)
        if handle is None:
            return False
        handle.dispose()
        logger.debug(f"Disposed render handle {object_id}")
        return True

    def project(self, points: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """World points (N, 3) -> pixel coordinates (N, 2) and camera depth (N,)."""
        rel = np.atleast_2d(points) - self.camera
        depth = -rel[:, 2]
        safe = np.where(depth > 1e-3, depth, 1e-3)
        xs = self.width / 2 + self.focal * rel[:, 0] / safe
        ys = self.height / 2 - self.focal * rel[:, 1] / safe
        return np.stack([xs, ys], axis=1), depth

    def render(
        self,
        objects: Iterable[ChoreographedObject],
        group_rotation: np.ndarray,
        star: Optional[StarOrnament] = None,
        snow: Optional[SnowField] = None,
    ) -> np.ndarray:
        frame = np.full((self.height, self.width, 3), BACKGROUND, dtype=np.uint8)
        group = euler_to_matrix(group_rotation)

        items = list(objects)
        if items:
            local = np.array([obj.pose.position for obj in items])
            pixels, depth = self.project(local @ group.T)
            for i in np.argsort(-depth):
                if depth[i] > 1.0:
                    self._draw_object(frame, items[i], pixels[i], depth[i], group_rotation)

        if star is not None:
            self._draw_star(frame, group @ star.position, star.rotation[1])
        if snow is not None and len(snow):
            self._draw_snow(frame, snow)
        return frame

    def _draw_object(self, frame, obj: ChoreographedObject, pixel, depth: float, group_rotation) -> None:
        cx, cy = int(pixel[0]), int(pixel[1])
        px_per_unit = self.focal / depth
        scale = float(obj.pose.scale[0])

        if obj.style is DecorationStyle.FRAME:
            fw, fh = obj.frame_size or (3.0, 3.0)
            facing = abs(math.cos(obj.pose.rotation[1] + group_rotation[1]))
            w = max(2, int(fw * scale * px_per_unit * max(0.15, facing)))
            h = max(2, int(fh * scale * px_per_unit))
            handle = self._handles.get(obj.id)
            sprite = handle.sprite(w, h) if handle is not None else None
            self._blit(frame, sprite, (cx - w // 2, cy - h // 2), (w, h), obj.color)
            return

        radius = max(1, int(0.5 * scale * px_per_unit))
        if obj.style is DecorationStyle.SPHERE:
            cv2.circle(frame, (cx, cy), radius, obj.color, -1, lineType=cv2.LINE_AA)
        elif obj.style is DecorationStyle.CANE:
            size = max(2, radius)
            sprite = cv2.resize(self._cane, (max(1, size // 2), size), interpolation=cv2.INTER_NEAREST)
            self._blit(frame, sprite, (cx - size // 4, cy - size // 2), sprite.shape[1::-1], obj.color)
        else:
            angle = math.degrees(obj.pose.rotation[1])
            box = cv2.boxPoints(((float(cx), float(cy)), (2.0 * radius, 2.0 * radius), angle))
            cv2.fillConvexPoly(frame, box.astype(np.int32), obj.color, lineType=cv2.LINE_AA)

    def _blit(self, frame, sprite, origin, size, fallback_color) -> None:
        x, y = origin
        w, h = size
        x1, y1 = max(0, x), max(0, y)
        x2, y2 = min(self.width, x + w), min(self.height, y + h)
        if x1 >= x2 or y1 >= y2:
            return
        if sprite is None:
            cv2.rectangle(frame, (x1, y1), (x2 - 1, y2 - 1), fallback_color, -1)
            return
        frame[y1:y2, x1:x2] = sprite[y1 - y:y2 - y, x1 - x:x2 - x]

    def _draw_star(self, frame, world_position, spin: float) -> None:
        (pixel,), (depth,) = self.project(world_position[None, :])
        if depth <= 1.0:
            return
        outer = 2.5 * self.focal / depth
        inner = outer * 0.4
        points = []
        for k in range(8):
            r = outer if k % 2 == 0 else inner
            a = spin + k * math.pi / 4
            points.append((pixel[0] + r * math.cos(a), pixel[1] + r * math.sin(a)))
        cv2.fillPoly(frame, [np.array(points, dtype=np.int32)], COLORS["gold"], lineType=cv2.LINE_AA)

    def _draw_snow(self, frame, snow: SnowField) -> None:
        spin = euler_to_matrix((0.0, snow.rotation_y, 0.0))
        pixels, depth = self.project(snow.positions @ spin.T)
        xs = pixels[:, 0].astype(np.int32)
        ys = pixels[:, 1].astype(np.int32)
        visible = (depth > 1.0) & (xs >= 0) & (xs < self.width) & (ys >= 0) & (ys < self.height)
        frame[ys[visible], xs[visible]] = COLORS["white"]
