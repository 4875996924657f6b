"""Single-hand landmark classification into layout modes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from config import (
    FIST_THRESHOLD,
    OPEN_HAND_THRESHOLD,
    PINCH_THRESHOLD,
    VICTORY_CURLED,
    VICTORY_EXTENDED,
)
from mode_state import Mode

WRIST = 0
THUMB_TIP = 4
INDEX_TIP = 8
MIDDLE_TIP = 12
RING_TIP = 16
PINKY_TIP = 20
PALM = 9
LANDMARK_COUNT = 21

LABEL_NO_HAND = "No Hand Detected"
LABEL_HAND = "Hand Detected"
LABEL_PINCH = "Pinch (Focus)"
LABEL_VICTORY = "Victory (Heart)"
LABEL_FIST = "Fist (Tree)"
LABEL_OPEN = "Open Hand (Scatter)"


@dataclass(frozen=True)
class GestureReading:
    """Classifier output for one frame.

    ``mode`` is None when the frame should not cause a transition.
    ``rotation_intent`` is None when no hand was seen, in which case the stored
    intent decays instead of being replaced.
    """

    mode: Optional[Mode]
    rotation_intent: Optional[Tuple[float, float]]
    label: str
    hand_detected: bool


NO_HAND = GestureReading(mode=None, rotation_intent=None, label=LABEL_NO_HAND, hand_detected=False)


def _as_points(landmarks) -> Optional[np.ndarray]:
    if landmarks is None:
        return None
    points = np.asarray(landmarks, dtype=np.float64)
    if points.ndim != 2 or points.shape[0] < LANDMARK_COUNT or points.shape[1] < 2:
        return None
    return points[:, :2]


def fingertip_distances(points: np.ndarray) -> np.ndarray:
    """Index, middle, ring and pinky tip distances to the wrist."""
    tips = points[[INDEX_TIP, MIDDLE_TIP, RING_TIP, PINKY_TIP]]
    return np.linalg.norm(tips - points[WRIST], axis=1)


def classify_gesture(landmarks: Optional[Sequence[Sequence[float]]]) -> GestureReading:
    """Map one hand (21 normalized points) or None to a :class:`GestureReading`."""
    points = _as_points(landmarks)
    if points is None:
        return NO_HAND

    palm_x, palm_y = points[PALM]
    rotation_intent = (float((palm_y - 0.5) * 2), float((palm_x - 0.5) * 2))

    pinch = float(np.linalg.norm(points[THUMB_TIP] - points[INDEX_TIP]))
    d_index, d_middle, d_ring, d_pinky = (float(d) for d in fingertip_distances(points))
    average = (d_index + d_middle + d_ring + d_pinky) / 4
    victory = (
        d_index > VICTORY_EXTENDED
        and d_middle > VICTORY_EXTENDED
        and d_ring < VICTORY_CURLED
        and d_pinky < VICTORY_CURLED
    )

    if pinch < PINCH_THRESHOLD:
        mode, label = Mode.FOCUS, LABEL_PINCH
    elif victory:
        mode, label = Mode.HEART, LABEL_VICTORY
    elif average < FIST_THRESHOLD:
        mode, label = Mode.TREE, LABEL_FIST
    elif average > OPEN_HAND_THRESHOLD:
        mode, label = Mode.SCATTER, LABEL_OPEN
    else:
        mode, label = None, LABEL_HAND

    return GestureReading(mode=mode, rotation_intent=rotation_intent, label=label, hand_detected=True)
