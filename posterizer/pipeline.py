"""Composite stylization pipeline."""
import logging
import math
from typing import List, Optional, Sequence, Tuple

import numpy as np

from posterizer.blend import BlendMode, Canvas
from posterizer.burst import render_burst
from posterizer.edges import detect_edges, thicken_edges
from posterizer.halftone import halftone_opacity, render_halftone
from posterizer.motifs import motif_opacity, render_motifs
from posterizer.palette import apply_palette
from posterizer.posterize import posterize
from posterizer.types import (
    InvalidDimensionsError,
    MotifPack,
    ParameterSet,
    PixelBuffer,
    RGBColor,
)

logger = logging.getLogger(__name__)

BACKGROUND_COLOR = (246, 246, 246)
EDGE_OPACITY = 0.9


def poster_levels(style_intensity: float) -> int:
    """Posterization levels per channel, 5 to 10."""
    return int(math.floor(5 + style_intensity * 5))


def effective_saturation_boost(params: ParameterSet) -> float:
    return params.saturation_boost * (0.3 + params.style_intensity * 0.7)


def edge_threshold(outline_weight: float) -> float:
    """Sobel threshold; heavier outlines use a lower threshold."""
    return 100 - outline_weight * 80


def ensure_same_size(expected: Tuple[int, int], image: PixelBuffer, stage: str) -> None:
    if image.size != expected:
        raise InvalidDimensionsError(
            f"{stage} produced {image.width}x{image.height}, "
            f"expected {expected[0]}x{expected[1]}"
        )


class StylizePipeline:
    """
    Poster stylization: background, burst, posterized base, motifs,
    inked edges and halftone, with an optional palette-transfer pass.

    Every call recomputes the full layer stack from the source.
    """

    def __init__(
        self,
        params: Optional[ParameterSet] = None,
        rng: Optional[np.random.Generator] = None,
        debug: bool = False,
    ):
        """
        Initialize pipeline.

        Args:
            params: Stylization parameters (defaults if None)
            rng: Random generator for the randomized motif packs
            debug: If True, keep a snapshot of the canvas after each stage
        """
        self.params = params or ParameterSet()
        self.rng = rng
        self.debug = debug
        self.debug_stages: List[Tuple[str, PixelBuffer]] = []

    def process(
        self,
        source: PixelBuffer,
        palette: Optional[Sequence[RGBColor]] = None,
    ) -> PixelBuffer:
        """
        Stylize a source buffer.

        Args:
            source: Decoded source image
            palette: Palette for the transfer pass, applied only when
                the parameters enable it and the palette is non-empty

        Returns:
            New stylized buffer with the source's dimensions

        Raises:
            InvalidDimensionsError: If a stage yields a mismatched buffer
        """
        params = self.params
        width, height = source.size
        self.debug_stages = []

        canvas = Canvas(width, height)
        logger.debug(f"Stylizing {width}x{height} image")

        if not params.transparent_background:
            canvas.fill(BACKGROUND_COLOR)
            self._snapshot("1_background", canvas)

        strength = params.burst_strength * params.style_intensity
        if strength > 0.01:
            canvas.draw_ink(
                render_burst(width, height, strength),
                1.0,
                BlendMode.MULTIPLY,
            )
            self._snapshot("2_burst", canvas)

        levels = poster_levels(params.style_intensity)
        boost = effective_saturation_boost(params)
        base = posterize(source, levels, boost)
        ensure_same_size(source.size, base, "Posterizer")
        canvas.draw_buffer(base)
        logger.debug(f"Posterized base: {levels} levels, saturation boost {boost:.3f}")
        self._snapshot("3_posterized", canvas)

        opacity = motif_opacity(params.style_intensity)
        if params.motif_pack is not MotifPack.NONE and opacity > 0:
            coverage = render_motifs(
                width, height, params.motif_pack, params.style_intensity, self.rng
            )
            canvas.draw_ink(coverage, 1.0, BlendMode.MULTIPLY)
            self._snapshot("4_motifs", canvas)

        # Edges come from the original source, not the posterized base
        edges = thicken_edges(
            detect_edges(source, edge_threshold(params.outline_weight)),
            params.outline_weight,
        )
        ensure_same_size(source.size, edges, "EdgeDetector")
        canvas.draw_buffer(edges, EDGE_OPACITY)
        self._snapshot("5_edges", canvas)

        if params.halftone_enabled and params.halftone_density > 0.01:
            canvas.draw_ink(
                render_halftone(width, height, params.halftone_density),
                halftone_opacity(params.halftone_density),
            )
            self._snapshot("6_halftone", canvas)

        result = canvas.to_buffer()

        if params.apply_palette_transfer and palette:
            result = apply_palette(result, palette)
            logger.debug(f"Applied {len(palette)}-color palette transfer")
            if self.debug:
                self.debug_stages.append(("7_palette", result))

        return result

    def _snapshot(self, name: str, canvas: Canvas) -> None:
        if self.debug:
            self.debug_stages.append((name, canvas.to_buffer()))


def stylize(
    source: PixelBuffer,
    params: Optional[ParameterSet] = None,
    palette: Optional[Sequence[RGBColor]] = None,
    rng: Optional[np.random.Generator] = None,
) -> PixelBuffer:
    """
    Stylize a source buffer into a poster illustration.

    Convenience function for one-off processing.

    Example:
        >>> out = stylize(buffer, ParameterSet(motif_pack="flames"))
    """
    return StylizePipeline(params, rng=rng).process(source, palette)
