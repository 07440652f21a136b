"""Sobel edge detection and ink-line thickening."""
import logging

import numpy as np
from PIL import Image, ImageFilter
from scipy import ndimage

from posterizer.color_space import luminance
from posterizer.types import PixelBuffer

logger = logging.getLogger(__name__)

SOBEL_X = np.array([
    [-1, 0, 1],
    [-2, 0, 2],
    [-1, 0, 1],
], dtype=np.float64)

SOBEL_Y = np.array([
    [-1, -2, -1],
    [0, 0, 0],
    [1, 2, 1],
], dtype=np.float64)


def gradient_magnitude(image: PixelBuffer) -> np.ndarray:
    """
    Sobel gradient magnitude of the image luminance.

    Returns:
        Float array (h, w). Border values are computed with edge
        replication and are not meaningful.
    """
    lum = luminance(image.rgb)
    gx = ndimage.correlate(lum, SOBEL_X, mode='nearest')
    gy = ndimage.correlate(lum, SOBEL_Y, mode='nearest')
    return np.hypot(gx, gy)


def edge_mask_array(image: PixelBuffer, threshold: float) -> np.ndarray:
    """
    Boolean edge mask where gradient magnitude exceeds `threshold`.

    The outermost row and column on every side are never evaluated and
    stay False.
    """
    mask = np.zeros((image.height, image.width), dtype=bool)
    if image.height < 3 or image.width < 3:
        return mask
    magnitude = gradient_magnitude(image)
    mask[1:-1, 1:-1] = magnitude[1:-1, 1:-1] > threshold
    return mask


def detect_edges(image: PixelBuffer, threshold: float) -> PixelBuffer:
    """
    Extract an edge mask: black RGB, alpha 255 on edges and 0 elsewhere.

    Args:
        image: Source buffer (read as luminance)
        threshold: Gradient magnitude threshold

    Returns:
        New buffer with the same dimensions as `image`
    """
    mask = edge_mask_array(image, threshold)
    out = np.zeros((image.height, image.width, 4), dtype=np.uint8)
    out[..., 3] = np.where(mask, 255, 0)
    return PixelBuffer(out)


def edge_density(image: PixelBuffer, threshold: float = 50.0) -> float:
    """Fraction of pixels marked as edge."""
    mask = edge_mask_array(image, threshold)
    return float(np.count_nonzero(mask)) / mask.size


def thicken_radius(outline_weight: float) -> int:
    """Blur radius in pixels for a given outline weight."""
    return int(np.floor(1 + outline_weight * 3 + 0.5))


def thicken_edges(edges: PixelBuffer, outline_weight: float) -> PixelBuffer:
    """
    Thicken an edge mask into a soft ink line.

    A Gaussian-blurred copy of the mask is drawn over the sharp mask,
    so every pixel the blur reaches carries some ink while the original
    edge pixels stay fully opaque.

    Args:
        edges: Edge mask from `detect_edges`
        outline_weight: Outline weight in [0.3, 1]

    Returns:
        New mask buffer with black RGB and soft alpha
    """
    radius = thicken_radius(outline_weight)
    alpha = Image.fromarray(np.ascontiguousarray(edges.alpha))
    blurred = np.asarray(alpha.filter(ImageFilter.GaussianBlur(radius)), dtype=np.float64) / 255.0
    sharp = edges.alpha.astype(np.float64) / 255.0

    # blurred copy composited source-over the sharp mask
    combined = blurred + sharp * (1.0 - blurred)
    logger.debug(f"Thickened edges with blur radius {radius}px")

    out = np.zeros_like(edges.pixels)
    out[..., 3] = np.clip(np.floor(combined * 255.0 + 0.5), 0, 255).astype(np.uint8)
    return PixelBuffer(out)
