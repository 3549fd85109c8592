"""Metal (specular reflective) material implementation.

A metal mirrors the normalized incoming direction about the surface normal::

    R = I - 2(I . N)N

and perturbs the result by ``fuzz`` times a random point in the unit sphere.
Rays perturbed below the surface (``dot(R', N) <= 0``) are absorbed.

Fuzz is clamped into [0, 1] when a material is registered; larger values are
not an error.

Example:
    >>> from bandtracer.runtime import init_taichi
    >>> init_taichi()
    >>> from bandtracer.materials.metal import scatter_metal
    >>> # Use within a Taichi kernel:
    >>> # did_scatter, attenuation, direction = scatter_metal(
    >>> #     albedo, fuzz, incident_dir, normal
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from bandtracer.core.ray import random_in_unit_sphere, reflect

# Type alias for 3D vectors
vec3 = tm.vec3

# Upper bound applied to the fuzz parameter
MAX_FUZZ = 1.0


@ti.func
def scatter_metal(albedo: vec3, fuzz: float, incident_direction: vec3, normal: vec3):
    """Reflect a ray off a metal surface.

    Args:
        albedo: The reflective color (RGB).
        fuzz: The surface roughness in [0, 1].
        incident_direction: The incoming ray direction (any length).
        normal: The outward surface normal.

    Returns:
        A tuple of (did_scatter, attenuation, direction) where:
        - did_scatter: 1 if the perturbed reflection leaves the surface,
          0 if the ray is absorbed.
        - attenuation: The albedo.
        - direction: The perturbed reflection direction (not normalized).
    """
    reflected = reflect(tm.normalize(incident_direction), normal)
    direction = reflected + random_in_unit_sphere() * fuzz

    did_scatter = 0
    if tm.dot(direction, normal) > 0.0:
        did_scatter = 1

    return did_scatter, albedo, direction


def clamp_fuzz(fuzz: float) -> float:
    """Clamp a fuzz value into [0, MAX_FUZZ]."""
    return min(max(fuzz, 0.0), MAX_FUZZ)


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of metal materials in the scene
MAX_METAL_MATERIALS = 256

# Storage for metal material properties
metal_albedos = ti.Vector.field(3, dtype=float, shape=MAX_METAL_MATERIALS)
metal_fuzzes = ti.field(dtype=float, shape=MAX_METAL_MATERIALS)
num_metal_materials = ti.field(dtype=ti.i32, shape=())


def clear_metal_materials() -> None:
    """Clear all metal materials."""
    num_metal_materials[None] = 0


def add_metal_material(
    albedo: tuple[float, float, float],
    fuzz: float = 0.0,
) -> int:
    """Add a metal material to the material registry.

    Args:
        albedo: The reflective color as (R, G, B) tuple.
            Each component should be in [0, 1].
        fuzz: The surface roughness. Default is 0 (perfect mirror).
            Values outside [0, 1] are clamped.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component is outside [0, 1].
    """
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )

    idx = num_metal_materials[None]
    if idx >= MAX_METAL_MATERIALS:
        raise RuntimeError(
            f"Maximum number of metal materials ({MAX_METAL_MATERIALS}) exceeded"
        )

    metal_albedos[idx] = [albedo[0], albedo[1], albedo[2]]
    metal_fuzzes[idx] = clamp_fuzz(fuzz)
    num_metal_materials[None] = idx + 1
    return idx


def get_metal_material_count() -> int:
    """Get the number of metal materials in the registry."""
    return int(num_metal_materials[None])


@ti.func
def get_metal_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a metal material by index."""
    return metal_albedos[material_idx]


@ti.func
def get_metal_fuzz(material_idx: ti.i32) -> float:
    """Get the fuzz for a metal material by index."""
    return metal_fuzzes[material_idx]
