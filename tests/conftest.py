"""Pytest configuration and fixtures."""
import numpy as np
import pytest

from posterizer.types import PixelBuffer


def split_array(width: int = 10, height: int = 8) -> np.ndarray:
    """Black left half, white right half, opaque."""
    image = np.zeros((height, width, 3), dtype=np.uint8)
    image[:, width // 2:] = 255
    return image


@pytest.fixture
def split_image():
    """10x8 buffer with a hard vertical black/white edge between columns 4 and 5."""
    return PixelBuffer.from_array(split_array())


@pytest.fixture
def photo_image():
    """Seeded random 40x30 buffer with varied alpha."""
    rng = np.random.default_rng(1234)
    return PixelBuffer(rng.integers(0, 256, (30, 40, 4), dtype=np.uint8))


@pytest.fixture
def flat_image():
    """Uniform mid-gray 32x24 buffer."""
    return PixelBuffer.from_array(np.full((24, 32, 3), 128, dtype=np.uint8))
