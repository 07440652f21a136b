"""Core types for the poster stylization pipeline."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple
import numpy as np


def clamp(value: float, low: float, high: float) -> float:
    """Clamp value into [low, high]."""
    return max(low, min(high, float(value)))


def clamp01(value: float) -> float:
    return clamp(value, 0.0, 1.0)


class PosterizerError(Exception):
    """Base exception for stylization and profiling errors."""
    pass


class InvalidDimensionsError(PosterizerError):
    """Buffer has zero, mismatched or malformed dimensions."""
    pass


class EmptyInputError(PosterizerError):
    """Analysis was requested over an empty reference set."""
    pass


class MalformedProfileError(PosterizerError):
    """Imported profile data is missing fields or out of range."""
    pass


class MotifPack(Enum):
    """Decorative motif families."""
    NONE = "none"
    WAVES = "waves"
    FLAMES = "flames"
    PSYCHEDELIA = "psychedelia"


@dataclass(frozen=True)
class RGBColor:
    """8-bit RGB color."""
    r: int
    g: int
    b: int

    def as_tuple(self) -> Tuple[int, int, int]:
        return (self.r, self.g, self.b)

    @property
    def luminance(self) -> float:
        return 0.2126 * self.r + 0.7152 * self.g + 0.0722 * self.b


@dataclass(frozen=True)
class HSLColor:
    """Hue, saturation and lightness, each in [0, 1]."""
    h: float
    s: float
    l: float


@dataclass(frozen=True)
class PixelBuffer:
    """Row-major RGBA image with 8-bit channels.

    The wrapped array has shape (height, width, 4) and dtype uint8.
    Stages treat it as read-only and return new buffers.
    """
    pixels: np.ndarray

    def __post_init__(self):
        pixels = self.pixels
        if not isinstance(pixels, np.ndarray):
            raise InvalidDimensionsError("Pixel data must be a numpy array")
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise InvalidDimensionsError(
                f"Expected (h, w, 4) array, got shape {pixels.shape}"
            )
        if pixels.shape[0] == 0 or pixels.shape[1] == 0:
            raise InvalidDimensionsError(
                f"Buffer dimensions must be positive, got {pixels.shape[1]}x{pixels.shape[0]}"
            )
        if pixels.dtype != np.uint8:
            raise InvalidDimensionsError(f"Expected uint8 pixels, got {pixels.dtype}")

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    @property
    def rgb(self) -> np.ndarray:
        return self.pixels[..., :3]

    @property
    def alpha(self) -> np.ndarray:
        return self.pixels[..., 3]

    @classmethod
    def from_array(cls, array: np.ndarray) -> "PixelBuffer":
        """
        Build a buffer from an (h, w, 3) or (h, w, 4) array.

        RGB input gets an opaque alpha channel. Values are clipped to
        [0, 255] and copied, so the caller keeps ownership of `array`.
        """
        array = np.asarray(array)
        if array.ndim != 3 or array.shape[2] not in (3, 4):
            raise InvalidDimensionsError(
                f"Expected (h, w, 3) or (h, w, 4) array, got shape {array.shape}"
            )
        data = np.clip(array, 0, 255).astype(np.uint8)
        if data.shape[2] == 3:
            alpha = np.full(data.shape[:2] + (1,), 255, dtype=np.uint8)
            data = np.concatenate([data, alpha], axis=2)
        return cls(np.ascontiguousarray(data))

    @classmethod
    def blank(cls, width: int, height: int) -> "PixelBuffer":
        """Fully transparent black buffer."""
        if width <= 0 or height <= 0:
            raise InvalidDimensionsError(
                f"Buffer dimensions must be positive, got {width}x{height}"
            )
        return cls(np.zeros((height, width, 4), dtype=np.uint8))

    def with_rgb(self, rgb: np.ndarray) -> "PixelBuffer":
        """New buffer with replaced RGB channels and this buffer's alpha."""
        out = self.pixels.copy()
        out[..., :3] = rgb
        return PixelBuffer(out)


@dataclass(frozen=True)
class ParameterSet:
    """Bounded parameters driving the stylization pipeline.

    Numeric fields are clamped into their declared range on construction.
    """
    style_intensity: float = 0.7
    outline_weight: float = 0.8
    saturation_boost: float = 0.3
    halftone_enabled: bool = True
    halftone_density: float = 0.15
    burst_strength: float = 0.5
    motif_pack: MotifPack = MotifPack.WAVES
    transparent_background: bool = False
    apply_palette_transfer: bool = True

    def __post_init__(self):
        # frozen dataclass: normalise through object.__setattr__
        object.__setattr__(self, "style_intensity", clamp(self.style_intensity, 0.0, 1.0))
        object.__setattr__(self, "outline_weight", clamp(self.outline_weight, 0.3, 1.0))
        object.__setattr__(self, "saturation_boost", clamp(self.saturation_boost, 0.0, 0.5))
        object.__setattr__(self, "halftone_density", clamp(self.halftone_density, 0.0, 0.4))
        object.__setattr__(self, "burst_strength", clamp(self.burst_strength, 0.0, 1.0))
        object.__setattr__(self, "motif_pack", MotifPack(self.motif_pack))
        object.__setattr__(self, "halftone_enabled", bool(self.halftone_enabled))
        object.__setattr__(self, "transparent_background", bool(self.transparent_background))
        object.__setattr__(self, "apply_palette_transfer", bool(self.apply_palette_transfer))


@dataclass(frozen=True)
class StyleProfile:
    """Palette and statistical fingerprint of a reference image set."""
    name: str
    palette: Tuple[RGBColor, ...]
    mean_saturation: float
    saturation_std: float
    edge_density: float
    contrast_index: float
    suggested: ParameterSet = field(default_factory=ParameterSet)


@dataclass
class ProfileConfig:
    """Configuration for reference-set analysis."""
    # Downsampling
    sample_size: int = 256  # max side in pixels

    # Sampling
    max_samples: int = 4000  # per image

    # Palette clustering
    n_colors: int = 6
    iterations: int = 8

    # Edge density
    edge_threshold: float = 50.0

    # Performance
    workers: int = 1  # >1 computes per-image statistics in a process pool

    name: str = "CustomProfile"
