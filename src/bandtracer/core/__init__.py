"""Core rendering module.

Components:
    ray: Ray data structure and vector helpers (Taichi functions)
    integrator: Path color estimation and the band rendering kernel
    bands: Splitting an image into bands and reassembling the results
    orchestrator: Rendering bands in parallel worker processes
    session: Single-flight re-rendering for a viewer

Note: ray and integrator declare Taichi structs and fields, so they are NOT
imported here. Import them directly after ``init_taichi`` has run::

    from bandtracer.core.integrator import render_band

The remaining modules are plain Python.
"""

from .bands import RenderChunkConfig, assemble_bands, plan_bands, resolve_worker_count
from .orchestrator import render, render_chunk
from .session import RenderSession

__all__ = [
    "RenderChunkConfig",
    "plan_bands",
    "assemble_bands",
    "resolve_worker_count",
    "render",
    "render_chunk",
    "RenderSession",
]
