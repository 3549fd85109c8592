"""Splitting an image into horizontal bands and stitching them back.

An image of height H rendered by N workers is cut into N contiguous bands of
``H // N`` rows; the last band also takes the ``H % N`` leftover rows. Band i
starts at row ``i * (H // N)``. Bands are reassembled in band order, so the
final buffer is row-major from the top of the picture, 4 bytes per pixel.

This module is plain Python and safe to import before Taichi is initialised.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np

from bandtracer.config import RenderSettings

logger = logging.getLogger(__name__)

BYTES_PER_PIXEL = 4


@dataclass(frozen=True)
class RenderChunkConfig:
    """Everything one worker needs to render its band.

    Attributes:
        core_index: Position of the band in the final image.
        start: First image row of the band.
        num_scan_lines: Number of rows in the band.
        width: Image width in pixels.
        height: Full image height in pixels.
        random_sequence: Shared seed sequence for scene layout.
        settings: Sampling, depth and camera parameters.
    """

    core_index: int
    start: int
    num_scan_lines: int
    width: int
    height: int
    random_sequence: tuple[float, ...]
    settings: RenderSettings = field(default_factory=RenderSettings)

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image size must be positive, got {self.width}x{self.height}")
        if self.start < 0:
            raise ValueError(f"Band start must be >= 0, got {self.start}")
        if self.num_scan_lines < 1:
            raise ValueError(f"Band must have at least one row, got {self.num_scan_lines}")
        if self.start + self.num_scan_lines > self.height:
            raise ValueError(
                f"Band rows [{self.start}, {self.start + self.num_scan_lines}) "
                f"exceed image height {self.height}"
            )


def resolve_worker_count(worker_count: int | None, height: int) -> int:
    """Number of bands to use for an image.

    None means one per CPU. The count is at least 1 and at most the image
    height, so no band is empty.
    """
    if worker_count is None:
        worker_count = os.cpu_count() or 1
    return max(1, min(worker_count, height))


def plan_bands(
    width: int,
    height: int,
    worker_count: int | None,
    random_sequence: Sequence[float],
    settings: RenderSettings | None = None,
) -> list[RenderChunkConfig]:
    """Cut an image into one band per worker.

    Raises:
        ValueError: If width or height is not positive.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image size must be positive, got {width}x{height}")
    if settings is None:
        settings = RenderSettings()

    n = resolve_worker_count(worker_count, height)
    rows_per_band = height // n
    sequence = tuple(random_sequence)

    bands = []
    for i in range(n):
        num_rows = rows_per_band
        if i == n - 1:
            num_rows += height % n
        bands.append(
            RenderChunkConfig(
                core_index=i,
                start=i * rows_per_band,
                num_scan_lines=num_rows,
                width=width,
                height=height,
                random_sequence=sequence,
                settings=settings,
            )
        )

    logger.debug("Planned %d bands of %d rows for %dx%d", n, rows_per_band, width, height)
    return bands


def assemble_bands(
    band_rows: Sequence[Sequence[Sequence[Sequence[int]]]],
    width: int,
    height: int,
) -> bytes:
    """Concatenate band results, in band order, into one RGBA buffer.

    Args:
        band_rows: For each band, its rows; each row a list of [r, g, b, a].
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        ``width * height * 4`` bytes, row-major from the top row.

    Raises:
        ValueError: If the bands do not add up to the image size.
    """
    pieces = [
        np.asarray(rows, dtype=np.int32).reshape(-1, width, BYTES_PER_PIXEL)
        for rows in band_rows
    ]
    image = np.concatenate(pieces, axis=0) if pieces else np.zeros((0, width, BYTES_PER_PIXEL))

    if image.shape[0] != height:
        raise ValueError(f"Bands cover {image.shape[0]} rows, expected {height}")

    return np.clip(image, 0, 255).astype(np.uint8).tobytes()
