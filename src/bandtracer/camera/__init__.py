"""Camera module for primary ray generation.

Components:
    thin_lens: Look-at camera with a circular lens for defocus blur

Ray generation uses normalized image coordinates:
    s in [0, 1]: left to right across the image
    t in [0, 1]: bottom to top across the image

Importing this package declares Taichi fields; call
``bandtracer.runtime.init_taichi`` first.
"""

from .thin_lens import (
    CameraFrame,
    ThinLensCamera,
    compute_camera_frame,
    get_ray,
    setup_camera,
)

__all__ = [
    "ThinLensCamera",
    "CameraFrame",
    "compute_camera_frame",
    "setup_camera",
    "get_ray",
]
