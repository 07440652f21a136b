"""Raster image loading and saving at the pipeline boundary."""
from pathlib import Path
from typing import Optional, Union

import numpy as np
from PIL import Image
from PIL import ImageOps

from posterizer.profile import downsample
from posterizer.types import PixelBuffer, PosterizerError

WORKING_MAX_SIDE = 768


def ingest(path: Union[str, Path], max_side: Optional[int] = WORKING_MAX_SIDE) -> PixelBuffer:
    """
    Load an image file as an RGBA pixel buffer.

    Args:
        path: Path to image file
        max_side: Downscale so neither side exceeds this; None keeps full size

    Returns:
        PixelBuffer

    Raises:
        FileNotFoundError: If file doesn't exist
        PosterizerError: If file cannot be loaded
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")

    if not path.is_file():
        raise PosterizerError(f"Path is not a file: {path}")

    try:
        with Image.open(path) as img:
            # Apply EXIF orientation transformation to handle rotation
            img = ImageOps.exif_transpose(img)
            buffer = PixelBuffer(np.array(img.convert('RGBA'), dtype=np.uint8))
    except (IOError, OSError) as e:
        raise PosterizerError(f"Failed to load image {path}: {e}") from e

    if max_side is not None:
        buffer = downsample(buffer, max_side)
    return buffer


def save(buffer: PixelBuffer, path: Union[str, Path]) -> None:
    """Write a pixel buffer to disk; format follows the file extension."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.fromarray(buffer.pixels).save(path)
