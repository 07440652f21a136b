"""Palette extraction by k-means and nearest-color palette transfer."""
import logging
from typing import List, Optional, Sequence

import numpy as np
from sklearn.metrics import pairwise_distances_argmin

from posterizer.color_space import luminance, round_half_up
from posterizer.types import PixelBuffer, RGBColor

logger = logging.getLogger(__name__)


def palette_to_array(palette: Sequence[RGBColor]) -> np.ndarray:
    """(K, 3) float array of palette colors."""
    return np.array([c.as_tuple() for c in palette], dtype=np.float64).reshape(-1, 3)


def array_to_palette(colors: np.ndarray) -> List[RGBColor]:
    return [RGBColor(int(r), int(g), int(b)) for r, g, b in np.asarray(colors).tolist()]


def sample_pixels(image: PixelBuffer, max_samples: int = 4000) -> np.ndarray:
    """
    Take RGB samples at a uniform stride over the row-major pixel order.

    The stride is `max(1, pixel_count // max_samples)`, so a few more
    than `max_samples` samples may be returned when the division is
    not exact.

    Returns:
        (N, 3) uint8 array
    """
    flat = image.rgb.reshape(-1, 3)
    step = max(1, flat.shape[0] // max_samples)
    return flat[::step]


def kmeans_palette(
    samples: np.ndarray,
    n_colors: int = 6,
    iterations: int = 8,
    rng: Optional[np.random.Generator] = None,
) -> List[RGBColor]:
    """
    Cluster RGB samples into a palette with a fixed number of k-means rounds.

    Centers start as uniform random draws from the samples. Each round
    assigns samples to the nearest center (Euclidean RGB) and moves each
    center to the rounded mean of its members; a center with no members
    stays where it is.

    Args:
        samples: (N, 3) RGB samples in [0, 255]
        n_colors: Number of clusters
        iterations: Number of assignment/update rounds
        rng: Random generator for initialization (unseeded if None)

    Returns:
        Palette sorted ascending by luminance; empty if there are no samples
    """
    samples = np.asarray(samples, dtype=np.float64).reshape(-1, 3)
    if samples.shape[0] == 0 or n_colors <= 0:
        return []
    if rng is None:
        rng = np.random.default_rng()

    n = samples.shape[0]
    centers = samples[rng.integers(0, n, size=n_colors)].copy()

    for _ in range(iterations):
        labels = pairwise_distances_argmin(samples, centers)
        counts = np.bincount(labels, minlength=n_colors)
        sums = np.stack(
            [np.bincount(labels, weights=samples[:, c], minlength=n_colors) for c in range(3)],
            axis=1,
        )
        populated = counts > 0
        centers[populated] = round_half_up(sums[populated] / counts[populated, np.newaxis])

    order = np.argsort(luminance(centers), kind='stable')
    logger.debug(f"k-means palette from {n} samples: {centers[order].astype(int).tolist()}")
    return array_to_palette(centers[order])


def extract_palette(
    images: Sequence[PixelBuffer],
    n_colors: int = 6,
    max_samples: int = 4000,
    iterations: int = 8,
    rng: Optional[np.random.Generator] = None,
) -> List[RGBColor]:
    """Pool samples from several buffers and cluster them into one palette."""
    if not images:
        return []
    pool = np.concatenate([sample_pixels(img, max_samples) for img in images], axis=0)
    return kmeans_palette(pool, n_colors, iterations, rng)


def apply_palette(image: PixelBuffer, palette: Sequence[RGBColor]) -> PixelBuffer:
    """
    Replace every pixel's RGB with its nearest palette color.

    Alpha is untouched. An empty palette returns `image` itself.
    """
    if not palette:
        return image
    colors = palette_to_array(palette)
    flat = image.rgb.reshape(-1, 3).astype(np.float64)
    nearest = pairwise_distances_argmin(flat, colors)
    mapped = colors[nearest].reshape(image.height, image.width, 3).astype(np.uint8)
    return image.with_rgb(mapped)
