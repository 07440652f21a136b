"""Style profile analysis over a set of reference images."""
import logging
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from functools import partial
from typing import List, Optional, Sequence, Tuple

import numpy as np
from PIL import Image

from posterizer.advisor import suggest_parameters
from posterizer.color_space import rgb_to_hsl_array
from posterizer.edges import edge_density
from posterizer.palette import kmeans_palette, sample_pixels
from posterizer.types import (
    EmptyInputError,
    ParameterSet,
    PixelBuffer,
    ProfileConfig,
    StyleProfile,
)

logger = logging.getLogger(__name__)


@dataclass
class ImageStats:
    """Statistics of one reference image."""
    samples: np.ndarray  # (N, 3) RGB
    mean_saturation: float
    saturation_std: float
    contrast_index: float
    edge_density: float


def fit_within(width: int, height: int, max_width: int, max_height: int) -> Tuple[int, int]:
    """
    Scale (width, height) down to fit a box, preserving aspect ratio.

    Never upscales; each side is rounded and kept at least 1 px.
    """
    ratio = min(max_width / width, max_height / height, 1.0)
    return (
        max(1, int(np.floor(width * ratio + 0.5))),
        max(1, int(np.floor(height * ratio + 0.5))),
    )


def downsample(image: PixelBuffer, max_side: int) -> PixelBuffer:
    """Resize so neither side exceeds `max_side`. Returns `image` if it already fits."""
    size = fit_within(image.width, image.height, max_side, max_side)
    if size == image.size:
        return image
    resized = Image.fromarray(image.pixels).resize(size, Image.Resampling.BILINEAR)
    return PixelBuffer(np.array(resized.convert('RGBA'), dtype=np.uint8))


def image_statistics(image: PixelBuffer, config: ProfileConfig) -> ImageStats:
    """
    Sample one reference image and compute its statistics.

    Saturation and lightness statistics are population moments over the
    sampled pixels; edge density is measured over the whole downsampled
    image.
    """
    small = downsample(image, config.sample_size)
    samples = sample_pixels(small, config.max_samples)
    hsl = rgb_to_hsl_array(samples)
    saturation = hsl[:, 1]
    lightness = hsl[:, 2]

    stats = ImageStats(
        samples=samples,
        mean_saturation=float(saturation.mean()),
        saturation_std=float(saturation.std()),
        contrast_index=float(lightness.std()),
        edge_density=edge_density(small, config.edge_threshold),
    )
    logger.debug(
        f"Reference {image.width}x{image.height} -> {small.width}x{small.height}: "
        f"{len(samples)} samples, sat={stats.mean_saturation:.3f}, "
        f"contrast={stats.contrast_index:.3f}, edges={stats.edge_density:.3f}"
    )
    return stats


def _collect_statistics(
    references: Sequence[PixelBuffer], config: ProfileConfig
) -> List[ImageStats]:
    if config.workers > 1 and len(references) > 1:
        with ProcessPoolExecutor(max_workers=config.workers) as executor:
            return list(executor.map(partial(image_statistics, config=config), references))
    return [image_statistics(image, config) for image in references]


def analyze(
    references: Sequence[PixelBuffer],
    config: Optional[ProfileConfig] = None,
    rng: Optional[np.random.Generator] = None,
    base: Optional[ParameterSet] = None,
) -> StyleProfile:
    """
    Build a style profile from reference images.

    Per-image statistics are averaged across references; all samples are
    pooled into a single k-means palette.

    Args:
        references: Decoded reference images
        config: Analysis configuration (defaults if None)
        rng: Random generator for palette initialization
        base: Parameters supplying fields the advisor does not suggest

    Returns:
        StyleProfile with palette, statistics and suggested parameters

    Raises:
        EmptyInputError: If `references` is empty
    """
    config = config or ProfileConfig()
    if len(references) == 0:
        raise EmptyInputError("Cannot build a style profile from zero reference images")

    logger.info(f"Analyzing {len(references)} reference image(s)")
    stats = _collect_statistics(references, config)

    mean_saturation = float(np.mean([s.mean_saturation for s in stats]))
    saturation_std = float(np.mean([s.saturation_std for s in stats]))
    density = float(np.mean([s.edge_density for s in stats]))
    contrast_index = float(np.mean([s.contrast_index for s in stats]))

    pool = np.concatenate([s.samples for s in stats], axis=0)
    palette = kmeans_palette(pool, config.n_colors, config.iterations, rng)
    logger.info(f"Extracted {len(palette)}-color palette from {len(pool)} samples")

    suggested = suggest_parameters(mean_saturation, density, contrast_index, palette, base)
    return StyleProfile(
        name=config.name,
        palette=tuple(palette),
        mean_saturation=mean_saturation,
        saturation_std=saturation_std,
        edge_density=density,
        contrast_index=contrast_index,
        suggested=suggested,
    )
