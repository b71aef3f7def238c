import numpy as np
import pytest


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def shifted_pair(rng):
    """Right image is the left image shifted by 3 columns, disparity known everywhere it is defined."""
    shift = 3
    right = rng.integers(0, 256, size=(48, 64), dtype=np.uint8)
    left = np.zeros_like(right)
    left[:, shift:] = right[:, :-shift]
    left[:, :shift] = right[:, :shift]

    disparity = np.full(left.shape, shift, dtype=np.uint8)
    disparity[:, :shift] = 255
    return left, right, disparity, shift
