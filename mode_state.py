"""Layout mode state and the transitions driven by classifier readings."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Tuple

from config import ROTATION_INTENT_DECAY

if TYPE_CHECKING:
    from gesture_classifier import GestureReading
    from photo_pool import PhotoPool


logger = logging.getLogger(__name__)


class Mode(enum.Enum):
    TREE = "Tree"
    SCATTER = "Scatter"
    FOCUS = "Focus"
    HEART = "Heart"


@dataclass
class ModeState:
    """Shared scene state, owned by the tick thread and passed by reference."""

    mode: Mode = Mode.TREE
    focus_target_id: Optional[int] = None
    rotation_intent: Tuple[float, float] = (0.0, 0.0)  # (pitch about X, yaw about Y)
    hand_detected: bool = False
    gesture_label: str = "Detecting..."

    def clear_focus(self) -> None:
        self.focus_target_id = None


class ModeStateMachine:
    """Applies one :class:`GestureReading` per frame to a :class:`ModeState`.

    A reading with ``mode=None`` (no hand, or an ambiguous hand shape) leaves the
    mode untouched; that carried-over mode is the only memory between frames.
    """

    def __init__(self, state: ModeState, pool: "PhotoPool") -> None:
        self.state = state
        self.pool = pool

    def apply(self, reading: "GestureReading") -> ModeState:
        state = self.state
        state.hand_detected = reading.hand_detected
        state.gesture_label = reading.label

        if reading.rotation_intent is not None:
            state.rotation_intent = reading.rotation_intent
        else:
            x, y = state.rotation_intent
            state.rotation_intent = (x * ROTATION_INTENT_DECAY, y * ROTATION_INTENT_DECAY)

        if reading.mode is not None:
            self.transition(reading.mode)
        return state

    def transition(self, mode: Mode) -> None:
        state = self.state
        previous = state.mode
        state.mode = mode

        if mode is Mode.FOCUS:
            if state.focus_target_id is None:
                state.focus_target_id = self.pool.pick_random_focus_target()
                if state.focus_target_id is not None:
                    logger.info(f"Focusing photo {state.focus_target_id}")
        else:
            state.clear_focus()

        if previous is not mode:
            logger.info(f"Mode {previous.value} -> {mode.value}")
