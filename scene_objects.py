"""Plain data records shared by the catalog, the photo pool and the choreography loop."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional, Tuple

import numpy as np


class ObjectKind(enum.Enum):
    DECORATION = "decoration"
    PHOTO = "photo"


class DecorationStyle(enum.Enum):
    BOX = "box"
    SPHERE = "sphere"
    CANE = "cane"
    FRAME = "frame"


def frozen_vector(values) -> np.ndarray:
    """Return a read-only float64 copy of a 3-vector."""
    vec = np.array(values, dtype=np.float64).reshape(3)
    vec.setflags(write=False)
    return vec


def euler_to_matrix(rotation) -> np.ndarray:
    """Rotation matrix for intrinsic XYZ Euler angles (R = Rx @ Ry @ Rz)."""
    x, y, z = (float(a) for a in rotation)
    cx, sx = np.cos(x), np.sin(x)
    cy, sy = np.cos(y), np.sin(y)
    cz, sz = np.cos(z), np.sin(z)
    rx = np.array([[1, 0, 0], [0, cx, -sx], [0, sx, cx]])
    ry = np.array([[cy, 0, sy], [0, 1, 0], [-sy, 0, cy]])
    rz = np.array([[cz, -sz, 0], [sz, cz, 0], [0, 0, 1]])
    return rx @ ry @ rz


def matrix_to_euler(matrix: np.ndarray) -> np.ndarray:
    """Inverse of :func:`euler_to_matrix`."""
    m = np.asarray(matrix, dtype=np.float64)
    y = float(np.arcsin(np.clip(m[0, 2], -1.0, 1.0)))
    if abs(m[0, 2]) < 0.9999999:
        x = float(np.arctan2(-m[1, 2], m[2, 2]))
        z = float(np.arctan2(-m[0, 1], m[0, 0]))
    else:
        x = float(np.arctan2(m[2, 1], m[1, 1]))
        z = 0.0
    return np.array([x, y, z])


@dataclass
class Pose:
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    rotation: np.ndarray = field(default_factory=lambda: np.zeros(3))  # Euler XYZ, radians
    scale: np.ndarray = field(default_factory=lambda: np.ones(3))


@dataclass
class Texture:
    """Decoded image handed to the renderer (BGR pixels)."""

    image: np.ndarray
    name: str = ""

    @property
    def width(self) -> int:
        return int(self.image.shape[1]) if self.image is not None and self.image.ndim >= 2 else 0

    @property
    def height(self) -> int:
        return int(self.image.shape[0]) if self.image is not None and self.image.ndim >= 2 else 0


@dataclass
class ChoreographedObject:
    """One decoration or photo and its per-mode destinations.

    The catalog positions and the rotation drift are read-only arrays set once at
    creation. Only the choreography loop mutates ``pose`` and ``target_position``.
    """

    id: int
    kind: ObjectKind
    tree_position: np.ndarray
    scatter_position: np.ndarray
    heart_position: np.ndarray
    rotation_drift: np.ndarray
    base_scale: np.ndarray
    pose: Pose = field(default_factory=Pose)
    target_position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    style: DecorationStyle = DecorationStyle.BOX
    color: Tuple[int, int, int] = (255, 255, 255)
    frame_size: Optional[Tuple[float, float]] = None

    @property
    def is_photo(self) -> bool:
        return self.kind is ObjectKind.PHOTO
