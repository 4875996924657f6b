"""Deterministic per-object destinations for every layout mode."""

from __future__ import annotations

import math
from typing import Optional, Tuple

import numpy as np

from config import HEART_LIFT, HEART_SCALE, PHOTO_ID_BASE, SceneConfig
from scene_objects import (
    ChoreographedObject,
    DecorationStyle,
    ObjectKind,
    Pose,
    euler_to_matrix,
    frozen_vector,
    matrix_to_euler,
)

RIBBON_SAMPLES = 2000


def ribbon_fraction(photo_index: int) -> float:
    """Arc-length fraction of the n-th photo on the ribbon.

    Wraps with ``mod 0.95`` so placements start overlapping after a handful of
    photos.
    """
    return (0.1 + photo_index * 0.15) % 0.95


class SpiralRibbon:
    """Conical spiral wound around the tree, parameterised by arc length."""

    def __init__(self, height: float, base_radius: float, turns: float, samples: int = RIBBON_SAMPLES) -> None:
        t = np.linspace(0.0, 1.0, samples + 1)
        angle = t * math.pi * 2 * turns
        radius = base_radius * (1.0 - t)
        self.points = np.stack(
            [np.cos(angle) * radius, t * height - height / 2, np.sin(angle) * radius],
            axis=1,
        )
        seg = np.linalg.norm(np.diff(self.points, axis=0), axis=1)
        self._arc = np.concatenate([[0.0], np.cumsum(seg)])
        self.length = float(self._arc[-1])

    def point_at(self, u: float) -> np.ndarray:
        """Point at arc-length fraction ``u`` in [0, 1]."""
        s = float(np.clip(u, 0.0, 1.0)) * self.length
        return np.array([np.interp(s, self._arc, self.points[:, k]) for k in range(3)])


class PoseCatalog:
    """Assigns tree, scatter and heart positions plus ribbon slots.

    All randomness comes from the injected generator, so the same seed and the
    same insertion order reproduce the same layout.
    """

    def __init__(self, config: Optional[SceneConfig] = None, rng: Optional[np.random.Generator] = None) -> None:
        self.config = config or SceneConfig()
        self.rng = rng if rng is not None else np.random.default_rng()
        self.ribbon = SpiralRibbon(
            self.config.tree_height,
            self.config.tree_base_radius + 2,
            self.config.spiral_turns,
        )

    def tree_position(self, index: int, count: int) -> np.ndarray:
        h = self.config.tree_height
        progress = index / count if count else 0.0
        y = progress * h - h / 2
        max_radius = self.config.tree_base_radius * (1.1 - progress)
        angle = self.rng.random() * math.pi * 2
        r = max_radius * (0.6 + self.rng.random() * 0.5)
        return frozen_vector((math.cos(angle) * r, y, math.sin(angle) * r))

    def scatter_position(self) -> np.ndarray:
        inner = self.config.scatter_inner_radius
        outer = self.config.scatter_outer_radius
        r = inner + self.rng.random() * (outer - inner)
        theta = self.rng.random() * math.pi * 2
        # arccos of a uniform cosine keeps the solid-angle density isotropic
        phi = math.acos(2 * self.rng.random() - 1)
        return frozen_vector((
            r * math.sin(phi) * math.cos(theta),
            r * math.sin(phi) * math.sin(theta),
            r * math.cos(phi),
        ))

    def heart_position(self) -> np.ndarray:
        u = self.rng.random() * math.pi * 2
        v = self.rng.random() * math.pi
        sv2 = math.sin(v) ** 2
        x = 16 * math.sin(u) ** 3 * sv2
        y = (13 * math.cos(u) - 5 * math.cos(2 * u) - 2 * math.cos(3 * u) - math.cos(4 * u)) * sv2
        z = 6 * math.cos(v)
        return frozen_vector((x * HEART_SCALE, y * HEART_SCALE + HEART_LIFT, z * HEART_SCALE))

    def rotation_drift(self) -> np.ndarray:
        return frozen_vector((self.rng.random(3) - 0.5) * 0.02)

    def decoration_appearance(self) -> Tuple[DecorationStyle, Tuple[int, int, int], float]:
        roll = self.rng.random()
        if roll < 0.5:
            if self.rng.random() > 0.6:
                color = self.config.colors["gold"]
            else:
                color = self.config.colors["green"] if self.rng.random() > 0.5 else self.config.colors["red"]
            return DecorationStyle.BOX, color, 0.5 + self.rng.random() * 1.5
        if roll < 0.9:
            color = self.config.colors["red"] if self.rng.random() > 0.5 else self.config.colors["gold"]
            return DecorationStyle.SPHERE, color, 0.3 + self.rng.random() * 0.7
        return DecorationStyle.CANE, self.config.colors["white"], 1.5

    def build_decoration(self, index: int, count: int) -> ChoreographedObject:
        if index >= PHOTO_ID_BASE:
            raise ValueError(f"decoration index {index} collides with the photo id range")
        style, color, scale = self.decoration_appearance()
        drift = self.rotation_drift()
        scatter = self.scatter_position()
        heart = self.heart_position()
        tree = self.tree_position(index, count)
        return ChoreographedObject(
            id=index,
            kind=ObjectKind.DECORATION,
            tree_position=tree,
            scatter_position=scatter,
            heart_position=heart,
            rotation_drift=drift,
            base_scale=frozen_vector((scale, scale, scale)),
            pose=Pose(scale=np.full(3, scale)),
            style=style,
            color=color,
        )

    def ribbon_slot(self, photo_index: int) -> Tuple[np.ndarray, np.ndarray]:
        """Position and outward-facing Euler rotation of the n-th photo."""
        point = self.ribbon.point_at(ribbon_fraction(photo_index))
        outward = np.array([point[0], 0.0, point[2]])
        norm = np.linalg.norm(outward)
        yaw = math.atan2(outward[0], outward[2]) if norm > 1e-9 else 0.0
        tilt_x = self.rng.random() * 0.2
        tilt_z = (self.rng.random() - 0.5) * 0.5
        facing = euler_to_matrix((0.0, yaw, 0.0)) @ euler_to_matrix((tilt_x, 0.0, 0.0)) @ euler_to_matrix((0.0, 0.0, tilt_z))
        return frozen_vector(point), matrix_to_euler(facing)
