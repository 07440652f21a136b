"""Procedural decorative motifs: waves, flames and psychedelic spirals.

Waves are fully deterministic. Flame heights and wobble, and spiral
placement and size, are drawn from the supplied random generator, so
those packs differ per call unless the caller passes a seeded one.
"""
import math
from dataclasses import dataclass
from typing import List, Optional, Union

import numpy as np
from PIL import Image, ImageDraw

from posterizer.blend import stacked_alpha
from posterizer.types import MotifPack

BEZIER_SEGMENTS = 24


@dataclass
class MotifShape:
    """Stroked polyline in canvas coordinates."""
    points: np.ndarray  # (N, 2) x, y
    width: int
    closed: bool = False


def motif_opacity(intensity: float) -> float:
    return 0.4 * intensity


def cubic_bezier(p0, p1, p2, p3, segments: int = BEZIER_SEGMENTS) -> np.ndarray:
    """Sample a cubic bezier curve into (segments + 1, 2) points."""
    t = np.linspace(0.0, 1.0, segments + 1)[:, np.newaxis]
    p0, p1, p2, p3 = (np.asarray(p, dtype=np.float64) for p in (p0, p1, p2, p3))
    return (
        (1 - t) ** 3 * p0
        + 3 * (1 - t) ** 2 * t * p1
        + 3 * (1 - t) * t ** 2 * p2
        + t ** 3 * p3
    )


def wave_curl(cx: float, cy: float, radius: float, tightness: float) -> MotifShape:
    """
    Open arc over [0.2pi, 1.4pi) whose radius tapers linearly to zero.

    `tightness` scales the vertical extent, giving a curling crest.
    """
    start = math.pi * 0.2
    sweep = math.pi * 1.2
    angles = np.arange(start, math.pi * 1.4, 0.05)
    taper = radius * (1 - (angles - start) / sweep)
    points = np.stack([
        cx + np.cos(angles) * taper,
        cy + np.sin(angles) * taper * tightness,
    ], axis=1)
    return MotifShape(points, width=3)


def flame_tongue(x: float, y: float, height: float, wobble: float) -> MotifShape:
    """Closed flame silhouette rising `height` pixels above (x, y)."""
    left = cubic_bezier(
        (x, y),
        (x - 10 + wobble, y - height * 0.3),
        (x - 6 + wobble, y - height * 0.7),
        (x, y - height),
    )
    right = cubic_bezier(
        (x, y - height),
        (x + 6 + wobble, y - height * 0.7),
        (x + 10 + wobble, y - height * 0.3),
        (x, y),
    )
    return MotifShape(np.vstack([left, right[1:]]), width=2, closed=True)


def spiral(cx: float, cy: float, radius: float, turns: int = 3, steps: int = 200) -> MotifShape:
    """Spiral whose radius grows linearly with angle."""
    frac = np.arange(steps) / steps
    angles = frac * math.pi * 2 * turns
    points = np.stack([
        cx + np.cos(angles) * frac * radius,
        cy + np.sin(angles) * frac * radius,
    ], axis=1)
    return MotifShape(points, width=2)


def generate_waves(width: int, height: int, intensity: float) -> List[MotifShape]:
    curls = int(math.floor(3 + intensity * 5))
    radius = min(width, height) * 0.35
    shapes = []
    for i in range(curls):
        cx = (width / (curls + 1)) * (i + 1)
        cy = height * (0.65 + 0.25 * math.sin(i))
        shapes.append(wave_curl(cx, cy, radius, 0.8 + 0.2 * math.cos(i)))
    return shapes


def generate_flames(
    width: int, height: int, intensity: float, rng: np.random.Generator
) -> List[MotifShape]:
    tongues = int(math.floor(25 + intensity * 40))
    base_y = height * 0.85
    shapes = []
    for i in range(tongues):
        x = (i / tongues) * width
        tongue_height = height * (0.2 + rng.random() * 0.25)
        wobble = (rng.random() - 0.5) * 20
        shapes.append(flame_tongue(x, base_y, tongue_height, wobble))
    return shapes


def generate_spirals(
    width: int, height: int, intensity: float, rng: np.random.Generator
) -> List[MotifShape]:
    count = int(math.floor(4 + intensity * 6))
    shapes = []
    for i in range(count):
        # Alternate left/right columns, first half in the top row
        cx = (width * 0.25 if i % 2 == 0 else width * 0.75) + (rng.random() - 0.5) * width * 0.1
        cy = (height * 0.3 if i < count / 2 else height * 0.7) + (rng.random() - 0.5) * height * 0.1
        radius = min(width, height) * (0.15 + rng.random() * 0.2)
        shapes.append(spiral(cx, cy, radius))
    return shapes


def generate_motifs(
    width: int,
    height: int,
    pack: Union[MotifPack, str],
    intensity: float,
    rng: Optional[np.random.Generator] = None,
) -> List[MotifShape]:
    """
    Build the shapes for a motif pack.

    Args:
        width: Canvas width
        height: Canvas height
        pack: Motif pack (enum or its name)
        intensity: Style intensity in [0, 1]
        rng: Random generator for the randomized packs

    Returns:
        List of shapes; empty for MotifPack.NONE
    """
    pack = MotifPack(pack)
    if pack is MotifPack.NONE:
        return []
    if pack is MotifPack.WAVES:
        return generate_waves(width, height, intensity)

    if rng is None:
        rng = np.random.default_rng()
    if pack is MotifPack.FLAMES:
        return generate_flames(width, height, intensity, rng)
    return generate_spirals(width, height, intensity, rng)


def shape_mask(width: int, height: int, shape: MotifShape) -> np.ndarray:
    """Stroke one shape into a (height, width) coverage mask in [0, 1]."""
    mask = Image.new('L', (width, height), 0)
    points = [tuple(p) for p in shape.points.tolist()]
    if shape.closed:
        points.append(points[0])
    if len(points) >= 2:
        ImageDraw.Draw(mask).line(points, fill=255, width=shape.width, joint='curve')
    return np.asarray(mask, dtype=np.float64) / 255.0


def render_motifs(
    width: int,
    height: int,
    pack: Union[MotifPack, str],
    intensity: float,
    rng: Optional[np.random.Generator] = None,
) -> np.ndarray:
    """
    Generate a motif pack and render the layer's alpha.

    Every stroke is laid down separately at the motif opacity, so
    crossing strokes and tight spiral turns darken where they overlap.
    """
    shapes = generate_motifs(width, height, pack, intensity, rng)
    return stacked_alpha(
        (height, width),
        (shape_mask(width, height, shape) for shape in shapes),
        motif_opacity(intensity),
    )
