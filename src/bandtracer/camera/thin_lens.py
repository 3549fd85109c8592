"""Thin-lens camera with defocus blur.

The camera is positioned with look-at parameters and focused on the look-at
point. Its frame is built on the host with NumPy:

- ``w = normalize(lookfrom - lookat)`` points backward
- ``u = normalize(vup x w)`` points right, with ``vup = (0, 1, 0)``
- ``v = w x u`` points up

The image plane sits at the focus distance ``|lookfrom - lookat|``. Rays for
image coordinates (s, t) in [0, 1]^2 start from a random point on a lens disk
of radius ``aperture / 2`` spanned by u and v, and pass through the matching
point of the image plane, so geometry at the focus distance stays sharp.

Example:
    >>> from bandtracer.runtime import init_taichi
    >>> init_taichi()
    >>> from bandtracer.camera.thin_lens import ThinLensCamera, setup_camera
    >>> camera = ThinLensCamera(width=200, height=100, vfov=65.0,
    ...                         lookfrom=(4.0, 4.0, -8.0), lookat=(0.0, 1.0, -1.0),
    ...                         aperture=0.5)
    >>> setup_camera(camera)
    >>> # get_ray(s, t) within a Taichi kernel
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti

from bandtracer.core.ray import Ray, make_ray, random_in_unit_disk

WORLD_UP = (0.0, 1.0, 0.0)


@dataclass
class ThinLensCamera:
    """Configuration for a thin-lens camera.

    Attributes:
        width: Image width in pixels; with height sets the aspect ratio.
        height: Image height in pixels.
        vfov: Vertical field of view in degrees.
        lookfrom: Camera position in world space.
        lookat: Point the camera looks at. Also the focus point.
        aperture: Lens diameter. 0 gives a pinhole camera.
        vup: World up direction.
    """

    width: int
    height: int
    vfov: float
    lookfrom: tuple[float, float, float]
    lookat: tuple[float, float, float]
    aperture: float
    vup: tuple[float, float, float] = WORLD_UP

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    @property
    def lens_radius(self) -> float:
        return self.aperture / 2.0


@dataclass
class CameraFrame:
    """Derived camera geometry, all in world space."""

    origin: np.ndarray
    u: np.ndarray
    v: np.ndarray
    w: np.ndarray
    lower_left_corner: np.ndarray
    horizontal: np.ndarray
    vertical: np.ndarray
    lens_radius: float
    focus_distance: float


def compute_camera_frame(camera: ThinLensCamera) -> CameraFrame:
    """Compute the camera basis and image plane for a configuration.

    Raises:
        ValueError: If the image size is not positive, or lookfrom equals
            lookat.
    """
    if camera.width <= 0 or camera.height <= 0:
        raise ValueError(
            f"Camera image size must be positive, got {camera.width}x{camera.height}"
        )

    theta = math.radians(camera.vfov)
    half_height = math.tan(theta / 2.0)
    half_width = camera.aspect_ratio * half_height

    lookfrom = np.array(camera.lookfrom, dtype=np.float64)
    lookat = np.array(camera.lookat, dtype=np.float64)
    vup = np.array(camera.vup, dtype=np.float64)

    view = lookfrom - lookat
    focus_distance = float(np.linalg.norm(view))
    if focus_distance == 0.0:
        raise ValueError("lookfrom and lookat must be distinct points")

    w = view / focus_distance
    u = np.cross(vup, w)
    u = u / np.linalg.norm(u)
    v = np.cross(w, u)

    lower_left = (
        lookfrom
        - u * half_width * focus_distance
        - v * half_height * focus_distance
        - w * focus_distance
    )

    return CameraFrame(
        origin=lookfrom,
        u=u,
        v=v,
        w=w,
        lower_left_corner=lower_left,
        horizontal=u * 2.0 * half_width * focus_distance,
        vertical=v * 2.0 * half_height * focus_distance,
        lens_radius=camera.lens_radius,
        focus_distance=focus_distance,
    )


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=float, shape=())
_camera_u = ti.Vector.field(3, dtype=float, shape=())
_camera_v = ti.Vector.field(3, dtype=float, shape=())
_lower_left_corner = ti.Vector.field(3, dtype=float, shape=())
_horizontal = ti.Vector.field(3, dtype=float, shape=())
_vertical = ti.Vector.field(3, dtype=float, shape=())
_lens_radius = ti.field(dtype=float, shape=())


def setup_camera(camera: ThinLensCamera) -> CameraFrame:
    """Upload a camera configuration for use by ``get_ray``.

    Returns:
        The computed frame, for inspection.
    """
    frame = compute_camera_frame(camera)

    _camera_origin[None] = frame.origin.tolist()
    _camera_u[None] = frame.u.tolist()
    _camera_v[None] = frame.v.tolist()
    _lower_left_corner[None] = frame.lower_left_corner.tolist()
    _horizontal[None] = frame.horizontal.tolist()
    _vertical[None] = frame.vertical.tolist()
    _lens_radius[None] = frame.lens_radius

    return frame


@ti.func
def get_ray(s: float, t: float) -> Ray:
    """Generate a primary ray through image coordinates (s, t).

    Args:
        s: Horizontal coordinate, 0 at the left edge and 1 at the right.
        t: Vertical coordinate, 0 at the bottom edge and 1 at the top.

    Returns:
        A ray from a random point on the lens toward the image-plane point.
        The direction is not normalized.
    """
    rd = random_in_unit_disk() * _lens_radius[None]
    offset = _camera_u[None] * rd.x + _camera_v[None] * rd.y
    origin = _camera_origin[None] + offset
    target = _lower_left_corner[None] + _horizontal[None] * s + _vertical[None] * t
    return make_ray(origin, target - origin)

