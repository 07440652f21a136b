"""Per-pixel posterization with saturation boost."""
import numpy as np

from posterizer.color_space import rgb_to_hsl_array, hsl_to_rgb_array, round_half_up
from posterizer.types import PixelBuffer


def boost_saturation(rgb: np.ndarray, amount: float) -> np.ndarray:
    """
    Push saturation toward 1 by `s + amount * (1 - s)`.

    Args:
        rgb: Array (..., 3) with channels in [0, 255]
        amount: Boost in [0, 1]

    Returns:
        Array (..., 3) of RGB channels in [0, 255] (float64)
    """
    hsl = rgb_to_hsl_array(rgb)
    s = hsl[..., 1]
    hsl[..., 1] = np.clip(s + amount * (1.0 - s), 0.0, 1.0)
    return hsl_to_rgb_array(hsl)


def quantize_channels(rgb: np.ndarray, levels: int) -> np.ndarray:
    """Snap each channel to the nearest of `levels` evenly spaced values in [0, 255]."""
    if levels < 2:
        raise ValueError(f"levels must be >= 2, got {levels}")
    step = 255.0 / (levels - 1)
    snapped = round_half_up(np.asarray(rgb, dtype=np.float64) / step) * step
    return np.clip(round_half_up(snapped), 0, 255).astype(np.uint8)


def posterize(image: PixelBuffer, levels: int, saturation_boost: float = 0.0) -> PixelBuffer:
    """
    Posterize an image after boosting its saturation.

    Alpha is passed through unchanged.

    Args:
        image: Source buffer
        levels: Number of levels per channel (must be >= 2)
        saturation_boost: Boost amount in [0, 1]

    Returns:
        New buffer with identical dimensions

    Raises:
        ValueError: If levels < 2
    """
    if levels < 2:
        raise ValueError(f"levels must be >= 2, got {levels}")
    boosted = boost_saturation(image.rgb, float(np.clip(saturation_boost, 0.0, 1.0)))
    return image.with_rgb(quantize_channels(boosted, levels))
