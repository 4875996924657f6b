import os
import sys

import numpy as np
import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from config import SceneConfig

WRIST_XY = (0.5, 0.9)


def build_hand(index, middle, ring, pinky, thumb=(0.9, 0.1), palm=(0.5, 0.5)):
    """21 normalized landmarks with each fingertip at the given distance from the wrist.

    Tips sit straight above the wrist, so the distances are exact.
    """
    points = np.zeros((21, 3))
    points[:, :2] = WRIST_XY
    for tip, distance in ((8, index), (12, middle), (16, ring), (20, pinky)):
        points[tip, :2] = (WRIST_XY[0], WRIST_XY[1] - distance)
    points[4, :2] = thumb
    points[9, :2] = palm
    return points


@pytest.fixture
def hand():
    return build_hand


@pytest.fixture
def fist():
    return build_hand(0.1, 0.1, 0.1, 0.1)


@pytest.fixture
def open_hand():
    return build_hand(0.5, 0.5, 0.5, 0.5)


@pytest.fixture
def victory():
    return build_hand(0.35, 0.35, 0.1, 0.1)


@pytest.fixture
def pinch():
    # thumb tip right next to the index tip
    return build_hand(0.5, 0.5, 0.5, 0.5, thumb=(0.51, 0.4))


@pytest.fixture
def small_config():
    return SceneConfig(particle_count=24, snow_count=12, include_placeholder_photo=False)
