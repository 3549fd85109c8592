"""Image export for rendered RGBA buffers.

A render produces a flat buffer of ``width * height * 4`` bytes, row-major
from the top row of the picture, in R, G, B, A order. This module turns it
into a NumPy array and writes it out as a PNG via Pillow.

Example:
    >>> from bandtracer.core.orchestrator import render
    >>> from bandtracer.preview.export import save_png
    >>> buffer = render(200, 100)
    >>> save_png(buffer, 200, 100, "spheres.png")
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

BYTES_PER_PIXEL = 4


def buffer_to_array(buffer: bytes, width: int, height: int) -> npt.NDArray[np.uint8]:
    """View an RGBA buffer as an image array.

    Args:
        buffer: ``width * height * 4`` bytes, row-major from the top row.
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        A uint8 array of shape (height, width, 4).

    Raises:
        ValueError: If the buffer length does not match the size.
    """
    expected = width * height * BYTES_PER_PIXEL
    if width <= 0 or height <= 0 or len(buffer) != expected:
        raise ValueError(
            f"Buffer of {len(buffer)} bytes does not match a {width}x{height} RGBA image"
        )
    return np.frombuffer(buffer, dtype=np.uint8).reshape(height, width, BYTES_PER_PIXEL).copy()


def save_png(buffer: bytes, width: int, height: int, filepath: str) -> None:
    """Save an RGBA buffer as a PNG file.

    Args:
        buffer: ``width * height * 4`` bytes, row-major from the top row.
        width: Image width in pixels.
        height: Image height in pixels.
        filepath: Output file path (should end in .png).

    Raises:
        ValueError: If the buffer length does not match the size.
    """
    image = buffer_to_array(buffer, width, height)
    PILImage.fromarray(image).save(filepath)
