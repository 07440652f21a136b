"""Radial sunburst rays."""
import math
from typing import List, Tuple

import numpy as np
from PIL import Image, ImageDraw

from posterizer.blend import stacked_alpha

RAY_START = 20
RAY_WIDTH = 3


def ray_count(strength: float) -> int:
    return 16 + int(math.floor(64 * strength))


def burst_opacity(strength: float) -> float:
    return 0.25 * strength


def burst_rays(width: int, height: int, strength: float) -> List[Tuple[float, float, float, float]]:
    """
    Ray segments (x1, y1, x2, y2) from radius 20 out past the canvas.

    Returns an empty list when strength <= 0.01.
    """
    if strength <= 0.01:
        return []
    cx, cy = width / 2.0, height / 2.0
    reach = max(width, height)
    rays = ray_count(strength)
    segments = []
    for i in range(rays):
        angle = (i / rays) * math.pi * 2
        segments.append((
            cx + math.cos(angle) * RAY_START,
            cy + math.sin(angle) * RAY_START,
            cx + math.cos(angle) * reach,
            cy + math.sin(angle) * reach,
        ))
    return segments


def ray_mask(width: int, height: int, ray: Tuple[float, float, float, float]) -> np.ndarray:
    """Coverage mask of a single ray."""
    mask = Image.new('L', (width, height), 0)
    ImageDraw.Draw(mask).line(ray, fill=255, width=RAY_WIDTH)
    return np.asarray(mask, dtype=np.float64) / 255.0


def render_burst(width: int, height: int, strength: float) -> np.ndarray:
    """
    Render the burst layer's alpha, (height, width) in [0, 1].

    Each ray is laid down separately at the burst opacity, so rays
    crowding near the center darken where they overlap.
    """
    rays = burst_rays(width, height, strength)
    return stacked_alpha(
        (height, width),
        (ray_mask(width, height, ray) for ray in rays),
        burst_opacity(strength),
    )
