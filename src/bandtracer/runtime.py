"""Taichi runtime initialisation.

Every process that renders must call :func:`init_taichi` before importing a
module that declares Taichi fields (``scene.intersection``, ``scene.manager``,
the material registries and the camera). The CPU backend is used in double
precision.
"""

from __future__ import annotations

import taichi as ti

_initialized = False


def init_taichi(random_seed: int = 0, num_threads: int | None = None) -> None:
    """Initialise Taichi on the CPU backend with 64-bit floats.

    Args:
        random_seed: Seed for ``ti.random``. Only sample-level jitter depends
            on it; scene layout comes from the shared seed sequence.
        num_threads: Upper bound on Taichi's CPU worker threads. Band workers
            pass 1 so parallelism comes from the process pool.
    """
    global _initialized

    kwargs = {}
    if num_threads is not None:
        kwargs["cpu_max_num_threads"] = num_threads

    ti.init(arch=ti.cpu, default_fp=ti.f64, random_seed=random_seed, **kwargs)
    _initialized = True


def is_initialized() -> bool:
    """Return whether :func:`init_taichi` has run in this process."""
    return _initialized
