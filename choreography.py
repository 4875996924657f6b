"""Per-frame pose convergence for every live object."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, Optional

import numpy as np

from config import (
    DECORATION_SPIN,
    FOCUS_POINT,
    FOCUS_SCALE,
    FOCUS_SPREAD,
    IDLE_YAW_DRIFT,
    POSITION_LERP,
    ROTATION_LERP,
    SCALE_LERP,
    TREE_HEIGHT,
)
from mode_state import Mode, ModeState
from scene_objects import ChoreographedObject, euler_to_matrix

SNOW_FLOOR = -20.0
SNOW_CEILING = 25.0
SNOW_SPREAD = 70.0


@dataclass
class StarOrnament:
    """Tree-top star: spins and rocks independently of the layout mode."""

    position: np.ndarray = field(default_factory=lambda: np.array([0.0, TREE_HEIGHT / 2 + 1.5, 0.0]))
    rotation: np.ndarray = field(default_factory=lambda: np.zeros(3))

    def update(self, elapsed: float) -> None:
        self.rotation[1] += 0.01
        self.rotation[2] = math.sin(elapsed) * 0.1


class SnowField:
    """Ambient snow particles with fixed per-particle velocities."""

    def __init__(self, count: int, rng: Optional[np.random.Generator] = None) -> None:
        self.rng = rng if rng is not None else np.random.default_rng()
        self.positions = (self.rng.random((count, 3)) - 0.5) * SNOW_SPREAD
        self.positions[:, 1] += 20
        self.velocities = np.empty((count, 3))
        self.velocities[:, 1] = -(0.05 + self.rng.random(count) * 0.15)
        self.velocities[:, 0] = (self.rng.random(count) - 0.5) * 0.02
        self.velocities[:, 2] = (self.rng.random(count) - 0.5) * 0.02
        self.rotation_y = 0.0

    def __len__(self) -> int:
        return len(self.positions)

    def step(self) -> None:
        self.positions += self.velocities
        fallen = self.positions[:, 1] < SNOW_FLOOR
        n = int(fallen.sum())
        if n:
            self.positions[fallen, 1] = SNOW_CEILING
            self.positions[fallen, 0] = (self.rng.random(n) - 0.5) * SNOW_SPREAD
            self.positions[fallen, 2] = (self.rng.random(n) - 0.5) * SNOW_SPREAD
        self.rotation_y += 0.001


class Choreographer:
    """Moves the scene group and every object toward the current mode's layout.

    All factors are per frame: position eases by 8 %, scale by 10 % and the group
    rotation by 5 % of the remaining distance each tick.
    """

    def __init__(self, state: ModeState) -> None:
        self.state = state
        self.group_rotation = np.zeros(3)
        self.elapsed = 0.0

    def focus_pose(self):
        """Group-local position and rotation that keep a photo in front of the camera."""
        inverse = euler_to_matrix(self.group_rotation).T
        return inverse @ np.array(FOCUS_POINT), -self.group_rotation

    def update_group_rotation(self) -> None:
        state = self.state
        intent_x, intent_y = state.rotation_intent
        self.group_rotation[1] += (intent_y - self.group_rotation[1]) * ROTATION_LERP
        self.group_rotation[0] += (intent_x - self.group_rotation[0]) * ROTATION_LERP
        if state.mode is Mode.TREE and not state.hand_detected:
            self.group_rotation[1] += IDLE_YAW_DRIFT

    def update(
        self,
        dt: float,
        objects: Iterable[ChoreographedObject],
        star: Optional[StarOrnament] = None,
        snow: Optional[SnowField] = None,
    ) -> None:
        self.elapsed += dt
        self.update_group_rotation()

        if star is not None:
            star.update(self.elapsed)

        mode = self.state.mode
        focus_id = self.state.focus_target_id if mode is Mode.FOCUS else None
        focus_position, focus_rotation = self.focus_pose() if focus_id is not None else (None, None)

        for obj in objects:
            is_focus = focus_id is not None and obj.is_photo and obj.id == focus_id
            if mode is Mode.TREE:
                obj.target_position = np.array(obj.tree_position)
            elif mode is Mode.SCATTER:
                obj.target_position = np.array(obj.scatter_position)
            elif mode is Mode.HEART:
                obj.target_position = np.array(obj.heart_position)
            elif is_focus:
                obj.target_position = focus_position.copy()
                obj.pose.rotation = focus_rotation.copy()
            else:
                obj.target_position = obj.scatter_position * FOCUS_SPREAD
            self._advance(obj, mode, is_focus)

        if snow is not None:
            snow.step()

    def _advance(self, obj: ChoreographedObject, mode: Mode, is_focus: bool) -> None:
        pose = obj.pose
        pose.position += (obj.target_position - pose.position) * POSITION_LERP

        target_scale = np.full(3, FOCUS_SCALE) if is_focus else obj.base_scale
        pose.scale += (target_scale - pose.scale) * SCALE_LERP

        if mode is Mode.SCATTER:
            pose.rotation += obj.rotation_drift
        elif not is_focus and not obj.is_photo:
            pose.rotation[1] += DECORATION_SPIN
