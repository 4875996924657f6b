import numpy as np
import pytest

from gesture_classifier import (
    LABEL_FIST,
    LABEL_HAND,
    LABEL_NO_HAND,
    LABEL_OPEN,
    LABEL_PINCH,
    LABEL_VICTORY,
    NO_HAND,
    classify_gesture,
    fingertip_distances,
)
from mode_state import Mode


def test_no_hand():
    reading = classify_gesture(None)
    assert reading is NO_HAND
    assert reading.mode is None
    assert reading.rotation_intent is None
    assert reading.label == LABEL_NO_HAND
    assert not reading.hand_detected


def test_fingertip_distances(hand):
    points = hand(0.1, 0.2, 0.3, 0.4)[:, :2]
    assert np.allclose(fingertip_distances(points), [0.1, 0.2, 0.3, 0.4])


def test_fist_selects_tree(fist):
    reading = classify_gesture(fist)
    assert reading.mode is Mode.TREE
    assert reading.label == LABEL_FIST
    assert reading.hand_detected


def test_open_hand_selects_scatter(open_hand):
    reading = classify_gesture(open_hand)
    assert reading.mode is Mode.SCATTER
    assert reading.label == LABEL_OPEN


def test_victory_selects_heart(victory):
    # average distance is below the fist threshold, victory is checked first
    reading = classify_gesture(victory)
    assert reading.mode is Mode.HEART
    assert reading.label == LABEL_VICTORY


def test_pinch_wins_over_open_hand(pinch):
    reading = classify_gesture(pinch)
    assert reading.mode is Mode.FOCUS
    assert reading.label == LABEL_PINCH


def test_pinch_wins_over_victory(hand):
    landmarks = hand(0.35, 0.35, 0.1, 0.1, thumb=(0.5, 0.56))
    assert classify_gesture(landmarks).mode is Mode.FOCUS


def test_in_between_hand_holds_mode(hand):
    reading = classify_gesture(hand(0.3, 0.3, 0.3, 0.3))
    assert reading.mode is None
    assert reading.label == LABEL_HAND
    assert reading.hand_detected
    assert reading.rotation_intent is not None


@pytest.mark.parametrize(
    "distances",
    [
        (0.24, 0.3, 0.1, 0.1),  # index not extended far enough for victory
        (0.35, 0.35, 0.25, 0.1),  # ring finger not curled
    ],
)
def test_near_victory_is_not_heart(hand, distances):
    assert classify_gesture(hand(*distances)).mode is not Mode.HEART


def test_rotation_intent_follows_palm(hand):
    reading = classify_gesture(hand(0.3, 0.3, 0.3, 0.3, palm=(0.75, 0.25)))
    pitch, yaw = reading.rotation_intent
    assert pitch == pytest.approx(-0.5)
    assert yaw == pytest.approx(0.5)


def test_centered_palm_has_no_rotation(fist):
    assert classify_gesture(fist).rotation_intent == pytest.approx((0.0, 0.0))


def test_two_dimensional_landmarks_are_accepted(open_hand):
    assert classify_gesture(open_hand[:, :2]).mode is Mode.SCATTER


def test_list_input_is_accepted(fist):
    assert classify_gesture(fist.tolist()).mode is Mode.TREE


@pytest.mark.parametrize("landmarks", [np.zeros((5, 3)), np.zeros(21), np.zeros((21, 1)), []])
def test_malformed_landmarks_count_as_no_hand(landmarks):
    assert classify_gesture(landmarks) == NO_HAND


def test_classification_is_deterministic(victory):
    assert classify_gesture(victory) == classify_gesture(victory.copy())
