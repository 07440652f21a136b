"""Posterizer package."""
from posterizer.types import (
    PixelBuffer,
    RGBColor,
    HSLColor,
    ParameterSet,
    MotifPack,
    StyleProfile,
    ProfileConfig,
    PosterizerError,
    InvalidDimensionsError,
    EmptyInputError,
    MalformedProfileError,
)
from posterizer.pipeline import stylize, StylizePipeline
from posterizer.profile import analyze

__all__ = [
    "PixelBuffer",
    "RGBColor",
    "HSLColor",
    "ParameterSet",
    "MotifPack",
    "StyleProfile",
    "ProfileConfig",
    "PosterizerError",
    "InvalidDimensionsError",
    "EmptyInputError",
    "MalformedProfileError",
    "stylize",
    "StylizePipeline",
    "analyze",
]
