"""Heuristic mapping from profile statistics to stylization parameters."""
from dataclasses import replace
from typing import Optional, Sequence

from posterizer.color_space import rgb_to_hsl
from posterizer.types import (
    MotifPack,
    ParameterSet,
    RGBColor,
    StyleProfile,
    clamp01,
)

MIN_CHROMA = 0.15
BIAS_RATIO = 1.2

MOTIF_FOR_BIAS = {
    "warm": MotifPack.FLAMES,
    "cool": MotifPack.WAVES,
    "mixed": MotifPack.PSYCHEDELIA,
}


def estimate_hue_bias(palette: Sequence[RGBColor]) -> str:
    """
    Classify a palette as "warm", "cool" or "mixed".

    Near-gray entries (saturation < 0.15) are ignored. Reds through
    oranges (hue < 1/6 or > 5/6) count as warm, cyans through blues
    (1/3 < hue < 2/3) count as cool.
    """
    warm = cool = 0
    for color in palette:
        hsl = rgb_to_hsl(color)
        if hsl.s < MIN_CHROMA:
            continue
        if hsl.h < 1 / 6 or hsl.h > 5 / 6:
            warm += 1
        elif 1 / 3 < hsl.h < 2 / 3:
            cool += 1
    if warm > cool * BIAS_RATIO:
        return "warm"
    if cool > warm * BIAS_RATIO:
        return "cool"
    return "mixed"


def suggest_parameters(
    mean_saturation: float,
    edge_density: float,
    contrast_index: float,
    palette: Sequence[RGBColor] = (),
    base: Optional[ParameterSet] = None,
) -> ParameterSet:
    """
    Suggest stylization parameters for a reference style.

    Fields without a heuristic (halftone toggle, background) are taken
    from `base`. Palette transfer is always switched on.
    """
    base = base or ParameterSet()
    return replace(
        base,
        outline_weight=clamp01(0.4 + edge_density * 2),
        saturation_boost=clamp01(0.2 + (0.6 - mean_saturation) * 0.6),
        halftone_density=clamp01(0.05 + contrast_index * 0.6),
        burst_strength=clamp01(0.3 + contrast_index * 0.5),
        style_intensity=clamp01(0.6 + contrast_index * 0.3),
        motif_pack=MOTIF_FOR_BIAS[estimate_hue_bias(palette)],
        apply_palette_transfer=True,
    )


def suggest_for_profile(profile: StyleProfile, base: Optional[ParameterSet] = None) -> ParameterSet:
    return suggest_parameters(
        profile.mean_saturation,
        profile.edge_density,
        profile.contrast_index,
        profile.palette,
        base,
    )
