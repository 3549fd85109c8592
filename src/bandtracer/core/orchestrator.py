"""Parallel rendering of an image in horizontal bands.

Each band is rendered by a separate worker process that shares nothing with
the others. A worker receives a RenderChunkConfig, rebuilds the scene from
the shared seed sequence, uploads it together with the camera, renders its
rows and returns them as nested lists of ``[r, g, b, a]``. The orchestrator
waits for every band and concatenates them in band order.

Workers are started with the ``spawn`` method and initialise their own Taichi
runtime with a single CPU thread; process-level parallelism replaces Taichi's
thread pool. Each worker seeds ``ti.random`` from fresh entropy, so sample
jitter and metal fuzz differ between workers while the scene layout does not.

Example:
    >>> from bandtracer.core.orchestrator import render
    >>> buffer = render(200, 100, worker_count=4)
    >>> len(buffer)
    80000
"""

from __future__ import annotations

import logging
import multiprocessing
import time
from concurrent.futures import Executor, ProcessPoolExecutor

import numpy as np

from bandtracer import runtime
from bandtracer.config import RenderSettings
from bandtracer.core.bands import RenderChunkConfig, assemble_bands, plan_bands
from bandtracer.scene.builder import build_scene, make_random_sequence

logger = logging.getLogger(__name__)


def _fresh_seed() -> int:
    return int(np.random.SeedSequence().generate_state(1)[0] & 0x7FFFFFFF)


def _init_worker() -> None:
    """Process pool initializer: one Taichi runtime per worker."""
    runtime.init_taichi(random_seed=_fresh_seed(), num_threads=1)


def render_chunk(config: RenderChunkConfig) -> list[list[list[int]]]:
    """Render one band of the image.

    Builds the scene from ``config.random_sequence``, so every band of a
    render sees the same spheres, then renders rows
    ``[config.start, config.start + config.num_scan_lines)``.

    Initialises Taichi if the calling process has not done so.

    Args:
        config: The band to render.

    Returns:
        ``num_scan_lines`` rows of ``width`` pixels, each ``[r, g, b, 255]``.

    Raises:
        ValueError: If the seed sequence is too short to build the scene.
    """
    if not runtime.is_initialized():
        runtime.init_taichi(random_seed=_fresh_seed())

    # Field-bearing modules must be imported after Taichi is initialised
    from bandtracer.camera.thin_lens import setup_camera
    from bandtracer.core.integrator import render_band
    from bandtracer.scene.manager import SceneManager

    settings = config.settings
    started = time.perf_counter()

    description = build_scene(config.random_sequence, fuzz_rng=np.random.default_rng())
    scene = SceneManager()
    scene.load_description(description)
    setup_camera(settings.camera(config.width, config.height))

    rows = render_band(
        start_row=config.start,
        num_rows=config.num_scan_lines,
        width=config.width,
        height=config.height,
        samples=settings.samples,
        max_depth=settings.max_depth,
    )

    logger.debug(
        "Band %d: %d rows from %d, %d spheres, %.2fs",
        config.core_index,
        config.num_scan_lines,
        config.start,
        scene.get_sphere_count(),
        time.perf_counter() - started,
    )
    return rows.tolist()


def render(
    width: int,
    height: int,
    worker_count: int | None = None,
    *,
    settings: RenderSettings | None = None,
    random_sequence: tuple[float, ...] | None = None,
    executor: Executor | None = None,
) -> bytes:
    """Render the sphere field into an RGBA buffer.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        worker_count: Number of bands. None means one per CPU; the count is
            clamped to [1, height].
        settings: Sampling and camera parameters. Defaults to RenderSettings().
        random_sequence: Seed sequence for the scene layout. A fresh one is
            generated if None.
        executor: Executor to run the bands on. A spawn-based process pool
            sized to the band count is created and shut down if None.

    Returns:
        ``width * height * 4`` bytes, row-major from the top row, RGBA.

    Raises:
        ValueError: If width or height is not positive.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image size must be positive, got {width}x{height}")
    if settings is None:
        settings = RenderSettings()
    if random_sequence is None:
        random_sequence = make_random_sequence(settings.sequence_length)

    bands = plan_bands(width, height, worker_count, random_sequence, settings)
    logger.info("Rendering %dx%d in %d bands", width, height, len(bands))
    started = time.perf_counter()

    if executor is None:
        with ProcessPoolExecutor(
            max_workers=len(bands),
            mp_context=multiprocessing.get_context("spawn"),
            initializer=_init_worker,
        ) as pool:
            results = list(pool.map(render_chunk, bands))
    else:
        results = list(executor.map(render_chunk, bands))

    buffer = assemble_bands(results, width, height)
    logger.info("Rendered %dx%d in %.2fs", width, height, time.perf_counter() - started)
    return buffer
