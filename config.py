"""
Tunable constants for the gesture-driven holiday scene.

Thresholds, smoothing factors, scene dimensions and colours live here so they
can be adjusted in one place without touching the choreography logic.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Tuple

# ---------------------------------------------------------------------------
# Colours (BGR)
# ---------------------------------------------------------------------------
COLORS: Dict[str, Tuple[int, int, int]] = {
    "gold": (55, 175, 212),
    "green": (20, 66, 15),
    "red": (3, 3, 138),
    "cream": (167, 238, 252),
    "blue_light": (138, 58, 30),
    "white": (255, 255, 255),
}

# ---------------------------------------------------------------------------
# Scene layout
# ---------------------------------------------------------------------------
PARTICLE_COUNT = 1200
SNOW_COUNT = 1000
TREE_HEIGHT = 35.0
TREE_BASE_RADIUS = 14.0
SPIRAL_TURNS = 4.5

SCATTER_INNER_RADIUS = 10.0
SCATTER_OUTER_RADIUS = 30.0
HEART_SCALE = 0.7
HEART_LIFT = 5.0

# Photos get ids from here upwards; decorations use their index.
PHOTO_ID_BASE = 10000

# ---------------------------------------------------------------------------
# Motion (all factors are per rendered frame)
# ---------------------------------------------------------------------------
ROTATION_LERP = 0.05
IDLE_YAW_DRIFT = 0.002
POSITION_LERP = 0.08
SCALE_LERP = 0.1
DECORATION_SPIN = 0.005
FOCUS_SCALE = 4.5
FOCUS_POINT: Tuple[float, float, float] = (0.0, 5.0, 65.0)
FOCUS_SPREAD = 1.5
ROTATION_INTENT_DECAY = 0.95

# ---------------------------------------------------------------------------
# Gesture thresholds (normalized landmark units)
# ---------------------------------------------------------------------------
PINCH_THRESHOLD = 0.05
VICTORY_EXTENDED = 0.25
VICTORY_CURLED = 0.2
FIST_THRESHOLD = 0.25
OPEN_HAND_THRESHOLD = 0.4

# ---------------------------------------------------------------------------
# Camera / display
# ---------------------------------------------------------------------------
TARGET_FPS = 60
CAMERA_WIDTH = 320
CAMERA_HEIGHT = 240
DISPLAY_WIDTH = 1280
DISPLAY_HEIGHT = 720
CAMERA_POSITION: Tuple[float, float, float] = (0.0, 5.0, 90.0)
CAMERA_FOV_DEG = 45.0

MODEL_URL = (
    "https://storage.googleapis.com/mediapipe-models/hand_landmarker/"
    "hand_landmarker/float16/1/hand_landmarker.task"
)
MODEL_PATH = Path("models/hand_landmarker.task")
PHOTO_DIR = Path("photos")
PHOTO_EXTENSIONS = (".jpg", ".jpeg", ".png", ".bmp", ".webp")


@dataclass(frozen=True)
class SceneConfig:
    """Scene dimensions and counts, injected into the catalog and scene."""

    particle_count: int = PARTICLE_COUNT
    snow_count: int = SNOW_COUNT
    tree_height: float = TREE_HEIGHT
    tree_base_radius: float = TREE_BASE_RADIUS
    spiral_turns: float = SPIRAL_TURNS
    scatter_inner_radius: float = SCATTER_INNER_RADIUS
    scatter_outer_radius: float = SCATTER_OUTER_RADIUS
    include_placeholder_photo: bool = True
    colors: Dict[str, Tuple[int, int, int]] = field(default_factory=lambda: dict(COLORS))

    def __post_init__(self) -> None:
        if not 0 <= self.particle_count < PHOTO_ID_BASE:
            raise ValueError(
                f"particle_count must be in [0, {PHOTO_ID_BASE}), got {self.particle_count}"
            )
        if self.snow_count < 0:
            raise ValueError(f"snow_count must be non-negative, got {self.snow_count}")
        if self.scatter_inner_radius > self.scatter_outer_radius:
            raise ValueError("scatter_inner_radius must not exceed scatter_outer_radius")
