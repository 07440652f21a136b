"""RGB <-> HSL color space conversion."""
import numpy as np

from posterizer.types import RGBColor, HSLColor

LUMA_WEIGHTS = np.array([0.2126, 0.7152, 0.0722])


def round_half_up(values: np.ndarray) -> np.ndarray:
    """Round to nearest integer with halves going up (not to even)."""
    return np.floor(np.asarray(values, dtype=np.float64) + 0.5)


def luminance(rgb: np.ndarray) -> np.ndarray:
    """
    Perceptual luminance of RGB values.

    Args:
        rgb: Array (..., 3) with channels in [0, 255]

    Returns:
        Array (...) of luminance values in [0, 255]
    """
    return np.asarray(rgb, dtype=np.float64)[..., :3] @ LUMA_WEIGHTS


def rgb_to_hsl_array(rgb: np.ndarray) -> np.ndarray:
    """
    Convert RGB to HSL.

    Achromatic colors (max == min) get saturation 0 and hue 0.

    Args:
        rgb: Array (..., 3) with channels in [0, 255]

    Returns:
        Array (..., 3) of (h, s, l), each in [0, 1]
    """
    rgb = np.asarray(rgb, dtype=np.float64)[..., :3] / 255.0
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]

    mx = rgb.max(axis=-1)
    mn = rgb.min(axis=-1)
    lightness = (mx + mn) / 2.0
    delta = mx - mn
    chromatic = delta > 0

    # Avoid division by zero on the achromatic pixels; they are masked out below
    safe_delta = np.where(chromatic, delta, 1.0)
    denom = np.where(lightness > 0.5, 2.0 - mx - mn, mx + mn)
    safe_denom = np.where(chromatic, denom, 1.0)
    saturation = np.where(chromatic, delta / safe_denom, 0.0)

    hue = np.select(
        [mx == r, mx == g],
        [
            (g - b) / safe_delta + np.where(g < b, 6.0, 0.0),
            (b - r) / safe_delta + 2.0,
        ],
        default=(r - g) / safe_delta + 4.0,
    )
    hue = np.where(chromatic, hue / 6.0, 0.0)

    return np.stack([hue, saturation, lightness], axis=-1)


def _hue_to_channel(p: np.ndarray, q: np.ndarray, t: np.ndarray) -> np.ndarray:
    t = np.where(t < 0, t + 1.0, t)
    t = np.where(t > 1, t - 1.0, t)
    return np.select(
        [t < 1.0 / 6.0, t < 0.5, t < 2.0 / 3.0],
        [p + (q - p) * 6.0 * t, q, p + (q - p) * (2.0 / 3.0 - t) * 6.0],
        default=p,
    )


def hsl_to_rgb_array(hsl: np.ndarray) -> np.ndarray:
    """
    Convert HSL to RGB.

    Hue wraps modulo 1.0.

    Args:
        hsl: Array (..., 3) of (h, s, l) in [0, 1]

    Returns:
        Array (..., 3) of RGB channels, rounded, in [0, 255] (float64)
    """
    hsl = np.asarray(hsl, dtype=np.float64)
    h = np.mod(hsl[..., 0], 1.0)
    s = hsl[..., 1]
    lightness = hsl[..., 2]

    q = np.where(lightness < 0.5, lightness * (1 + s), lightness + s - lightness * s)
    p = 2 * lightness - q

    r = _hue_to_channel(p, q, h + 1.0 / 3.0)
    g = _hue_to_channel(p, q, h)
    b = _hue_to_channel(p, q, h - 1.0 / 3.0)
    rgb = np.stack([r, g, b], axis=-1)

    achromatic = (s == 0)[..., np.newaxis]
    rgb = np.where(achromatic, lightness[..., np.newaxis], rgb)

    return np.clip(round_half_up(rgb * 255.0), 0, 255)


def rgb_to_hsl(color: RGBColor) -> HSLColor:
    """Convert a single RGB color to HSL."""
    h, s, l = rgb_to_hsl_array(np.array(color.as_tuple()))
    return HSLColor(float(h), float(s), float(l))


def hsl_to_rgb(color: HSLColor) -> RGBColor:
    """Convert a single HSL color to 8-bit RGB."""
    r, g, b = hsl_to_rgb_array(np.array([color.h, color.s, color.l]))
    return RGBColor(int(r), int(g), int(b))
