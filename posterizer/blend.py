"""Layer compositing onto a floating point RGBA canvas."""
from enum import Enum
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np

from posterizer.color_space import round_half_up
from posterizer.types import PixelBuffer, InvalidDimensionsError


class BlendMode(Enum):
    """Separable blend modes used by the layer stack."""
    NORMAL = "normal"
    MULTIPLY = "multiply"


class Canvas:
    """
    Straight-alpha RGBA canvas with source-over compositing.

    Color channels are floats in [0, 1]. Layers are drawn as a color
    plus a coverage mask, blended against the backdrop and then
    composited source-over.
    """

    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise InvalidDimensionsError(
                f"Canvas dimensions must be positive, got {width}x{height}"
            )
        self.width = width
        self.height = height
        self.rgb = np.zeros((height, width, 3), dtype=np.float64)
        self.alpha = np.zeros((height, width), dtype=np.float64)

    def fill(self, color: Sequence[int]) -> None:
        """Fill the whole canvas with an opaque color."""
        self.rgb[...] = np.asarray(color[:3], dtype=np.float64) / 255.0
        self.alpha[...] = 1.0

    def draw(
        self,
        rgb: np.ndarray,
        alpha: np.ndarray,
        opacity: float = 1.0,
        mode: BlendMode = BlendMode.NORMAL,
    ) -> None:
        """
        Composite a layer onto the canvas.

        Args:
            rgb: Layer color, (h, w, 3) or broadcastable (3,), in [0, 1]
            alpha: Layer coverage (h, w) in [0, 1]
            opacity: Global layer opacity in [0, 1]
            mode: Blend mode applied against the backdrop
        """
        if alpha.shape != self.alpha.shape:
            raise InvalidDimensionsError(
                f"Layer size {alpha.shape[::-1]} does not match canvas "
                f"{self.width}x{self.height}"
            )
        src_a = np.clip(alpha * opacity, 0.0, 1.0)
        src_rgb = np.broadcast_to(np.asarray(rgb, dtype=np.float64), self.rgb.shape)
        dst_a = self.alpha
        dst_rgb = self.rgb

        if mode is BlendMode.MULTIPLY:
            mixed = src_rgb * dst_rgb
        else:
            mixed = src_rgb
        # Blend only where the backdrop has coverage
        src_rgb = (1.0 - dst_a)[..., np.newaxis] * src_rgb + dst_a[..., np.newaxis] * mixed

        out_a = src_a + dst_a * (1.0 - src_a)
        premult = (
            src_a[..., np.newaxis] * src_rgb
            + (dst_a * (1.0 - src_a))[..., np.newaxis] * dst_rgb
        )
        safe_a = np.where(out_a > 0, out_a, 1.0)[..., np.newaxis]
        self.rgb = np.where(out_a[..., np.newaxis] > 0, premult / safe_a, 0.0)
        self.alpha = out_a

    def draw_ink(
        self,
        coverage: np.ndarray,
        opacity: float = 1.0,
        mode: BlendMode = BlendMode.NORMAL,
        color: Optional[Sequence[int]] = None,
    ) -> None:
        """Draw a solid-color (default black) layer through a coverage mask."""
        ink = np.zeros(3) if color is None else np.asarray(color[:3], dtype=np.float64) / 255.0
        self.draw(ink, coverage, opacity, mode)

    def draw_buffer(
        self,
        image: PixelBuffer,
        opacity: float = 1.0,
        mode: BlendMode = BlendMode.NORMAL,
    ) -> None:
        """Composite a pixel buffer using its own alpha channel."""
        self.draw(
            image.rgb.astype(np.float64) / 255.0,
            image.alpha.astype(np.float64) / 255.0,
            opacity,
            mode,
        )

    def to_buffer(self) -> PixelBuffer:
        """Quantize the canvas into a new 8-bit buffer."""
        out = np.empty((self.height, self.width, 4), dtype=np.uint8)
        out[..., :3] = np.clip(round_half_up(self.rgb * 255.0), 0, 255)
        out[..., 3] = np.clip(round_half_up(self.alpha * 255.0), 0, 255)
        return PixelBuffer(out)


def stacked_alpha(
    shape: Tuple[int, int], masks: Iterable[np.ndarray], opacity: float
) -> np.ndarray:
    """
    Coverage of single-color strokes each composited on its own at `opacity`.

    Drawing N black strokes one after another equals drawing one layer
    with alpha `1 - prod(1 - opacity * coverage_i)`, so overlaps darken
    further. This holds for NORMAL and MULTIPLY alike since black
    multiplies to black.

    Args:
        shape: (height, width) of the canvas
        masks: Per-stroke coverage masks in [0, 1]
        opacity: Opacity of each stroke

    Returns:
        Float array (height, width) to draw at opacity 1.0
    """
    remaining = np.ones(shape, dtype=np.float64)
    for mask in masks:
        remaining *= 1.0 - np.clip(mask * opacity, 0.0, 1.0)
    return 1.0 - remaining
