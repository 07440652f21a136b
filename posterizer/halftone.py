"""Deterministic halftone dot grid."""
import math
from typing import Tuple

import numpy as np
from PIL import Image, ImageDraw


def halftone_spacing(density: float) -> int:
    """Lattice spacing in pixels; denser halftone means tighter spacing."""
    return max(1, 12 - int(math.floor(density * 20)))


def halftone_radius(spacing: int) -> int:
    return max(1, spacing // 4)


def halftone_opacity(density: float) -> float:
    return 0.15 + density * 0.25


def halftone_centers(width: int, height: int, density: float) -> Tuple[np.ndarray, np.ndarray]:
    """Dot center coordinates along x and y, starting at the dot radius."""
    spacing = halftone_spacing(density)
    radius = halftone_radius(spacing)
    return np.arange(radius, width, spacing), np.arange(radius, height, spacing)


def render_halftone(width: int, height: int, density: float) -> np.ndarray:
    """
    Render the dot lattice as a coverage mask.

    Args:
        width: Canvas width
        height: Canvas height
        density: Halftone density in [0, 0.4]

    Returns:
        Float array (height, width) with 1.0 inside dots, 0.0 elsewhere
    """
    radius = halftone_radius(halftone_spacing(density))
    xs, ys = halftone_centers(width, height, density)

    mask = Image.new('L', (width, height), 0)
    draw = ImageDraw.Draw(mask)
    for y in ys.tolist():
        for x in xs.tolist():
            draw.ellipse((x - radius, y - radius, x + radius, y + radius), fill=255)

    return np.asarray(mask, dtype=np.float64) / 255.0
