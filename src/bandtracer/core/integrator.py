"""Recursive-style ray color estimation and the band rendering kernel.

A path starts at depth 0 and follows the closest hit in the world over the
interval (T_MIN, T_MAX):

- On a miss, the path returns the sky gradient
  ``(1 - t) * white + t * (0.5, 0.7, 1.0)`` with ``t = (dir.y / |dir| + 1) / 2``,
  scaled by the product of attenuations collected so far.
- On a hit below ``max_depth`` the material scatters. An absorbed ray is
  black; otherwise the attenuation multiplies into the path and the scattered
  ray continues from the hit point.
- A hit at ``max_depth`` is black.

This is the recursion ``color(r, depth) = attenuation * color(scattered,
depth + 1)`` written as a bounded loop, since Taichi functions cannot
recurse. There are no light sources; all light comes from the sky.

The band kernel renders rows ``[start_row, start_row + num_rows)`` of the
image. Row ``y`` of the band samples the vertical pixel coordinate
``height - start_row - y``, so row 0 of the final image is the top of the
picture. Each pixel averages ``samples`` jittered estimates, applies gamma 2
(square root) and quantizes with ``floor(255.99 * c)``; alpha is 255.

Example:
    >>> from bandtracer.runtime import init_taichi
    >>> init_taichi()
    >>> from bandtracer.core.integrator import render_band
    >>> # After uploading a scene and setting up the camera:
    >>> rows = render_band(start_row=0, num_rows=10, width=200, height=100,
    ...                    samples=32, max_depth=32)
    >>> rows.shape
    (10, 200, 4)
"""

import numpy as np
import taichi as ti
import taichi.math as tm

from bandtracer.camera.thin_lens import get_ray
from bandtracer.core.ray import Ray, make_ray
from bandtracer.materials.dielectric import get_dielectric_ior, scatter_dielectric
from bandtracer.materials.lambertian import get_lambertian_albedo, scatter_lambertian
from bandtracer.materials.metal import get_metal_albedo, get_metal_fuzz, scatter_metal
from bandtracer.scene.intersection import intersect_world
from bandtracer.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Accepted hit interval; T_MIN keeps a scattered ray off its own surface
T_MIN = 0.001
T_MAX = 1.0e300

# Quantization scale from [0, 1] to bytes
BYTE_SCALE = 255.99

# Alpha written to every pixel
OPAQUE_ALPHA = 255


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def _scatter_material(material_id: ti.i32, incident_direction: vec3, point: vec3, normal: vec3):
    """Dispatch to the scatter function of the material's type.

    Returns:
        A tuple of (did_scatter, attenuation, direction). Unknown material
        ids absorb the ray.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    did_scatter = 0
    attenuation = vec3(0.0, 0.0, 0.0)
    direction = vec3(0.0, 0.0, 0.0)

    if mat_type == int(MaterialType.LAMBERTIAN):
        albedo = get_lambertian_albedo(type_index)
        did_scatter, attenuation, direction = scatter_lambertian(albedo, point, normal)

    elif mat_type == int(MaterialType.METAL):
        albedo = get_metal_albedo(type_index)
        fuzz = get_metal_fuzz(type_index)
        did_scatter, attenuation, direction = scatter_metal(albedo, fuzz, incident_direction, normal)

    elif mat_type == int(MaterialType.DIELECTRIC):
        ior = get_dielectric_ior(type_index)
        did_scatter, attenuation, direction = scatter_dielectric(ior, incident_direction, normal)

    return did_scatter, attenuation, direction


# =============================================================================
# Color Estimation
# =============================================================================


@ti.func
def sky_color(direction: vec3) -> vec3:
    """Vertical white-to-blue gradient seen by rays that hit nothing."""
    unit_direction = tm.normalize(direction)
    t = 0.5 * (unit_direction.y + 1.0)
    return vec3(1.0, 1.0, 1.0) * (1.0 - t) + vec3(0.5, 0.7, 1.0) * t


@ti.func
def trace(ray: Ray, max_depth: ti.i32) -> vec3:
    """Estimate the color carried back along a ray.

    Args:
        ray: The primary ray.
        max_depth: Depth at which a hit is terminated as black.

    Returns:
        The color estimate; each channel in [0, 1].
    """
    result = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    origin = ray.origin
    direction = ray.direction

    # Taichi funcs cannot break out of loops, so a flag ends the path
    active = 1

    for depth in range(max_depth + 1):
        if active == 1:
            rec = intersect_world(make_ray(origin, direction), T_MIN, T_MAX)

            if rec.hit == 0:
                result = throughput * sky_color(direction)
                active = 0
            elif depth >= max_depth:
                active = 0
            else:
                did_scatter, attenuation, scattered = _scatter_material(
                    rec.material_id, direction, rec.point, rec.normal
                )
                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    origin = rec.point
                    direction = scattered

    return result


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_band_kernel(
    out: ti.types.ndarray(dtype=ti.i32, ndim=3),
    start_row: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples: ti.i32,
    max_depth: ti.i32,
):
    for y, x in ti.ndrange(out.shape[0], width):
        j = height - start_row - y
        col = vec3(0.0, 0.0, 0.0)

        for _ in range(samples):
            s = (ti.cast(x, float) + ti.random(float)) / ti.cast(width, float)
            t = (ti.cast(j, float) + ti.random(float)) / ti.cast(height, float)
            col += trace(get_ray(s, t), max_depth)

        col = tm.sqrt(col / ti.cast(samples, float))

        for c in ti.static(range(3)):
            out[y, x, c] = ti.cast(ti.floor(BYTE_SCALE * col[c]), ti.i32)
        out[y, x, 3] = OPAQUE_ALPHA


@ti.kernel
def _trace_single_ray(origin: vec3, direction: vec3, max_depth: ti.i32) -> vec3:
    return trace(make_ray(origin, direction), max_depth)


# =============================================================================
# Public Rendering API
# =============================================================================


def render_band(
    start_row: int,
    num_rows: int,
    width: int,
    height: int,
    samples: int,
    max_depth: int,
) -> np.ndarray:
    """Render a horizontal band of the image with the uploaded scene and camera.

    Args:
        start_row: Index of the band's first row in the final image.
        num_rows: Number of rows in the band.
        width: Image width in pixels.
        height: Full image height in pixels.
        samples: Jittered samples averaged per pixel.
        max_depth: Bounce depth at which paths are terminated.

    Returns:
        An int32 array of shape (num_rows, width, 4) holding RGBA bytes.

    Raises:
        ValueError: If the band lies outside the image or samples < 1.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image size must be positive, got {width}x{height}")
    if start_row < 0 or num_rows < 0 or start_row + num_rows > height:
        raise ValueError(
            f"Band rows [{start_row}, {start_row + num_rows}) outside image of height {height}"
        )
    if samples < 1:
        raise ValueError(f"samples must be >= 1, got {samples}")

    out = np.zeros((num_rows, width, 4), dtype=np.int32)
    if num_rows > 0:
        _render_band_kernel(out, start_row, width, height, samples, max_depth)
    return out


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_depth: int,
) -> tuple[float, float, float]:
    """Estimate the color along a single ray. Useful for debugging scenes."""
    color = _trace_single_ray(
        vec3(origin[0], origin[1], origin[2]),
        vec3(direction[0], direction[1], direction[2]),
        max_depth,
    )
    return (float(color[0]), float(color[1]), float(color[2]))
