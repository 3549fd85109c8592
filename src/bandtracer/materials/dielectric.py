"""Dielectric (glass/water) material implementation.

A dielectric never absorbs light (attenuation is white). Which side of the
surface the ray is on comes from the sign of ``dot(direction, normal)``:

- positive: the ray is inside and leaving, so the refraction normal is
  ``-normal``, ``eta = ior`` and ``cosine = ior * dot(d, n) / |d|``;
- otherwise: the ray is entering, the refraction normal is ``normal``,
  ``eta = 1 / ior`` and ``cosine = -dot(d, n) / |d|^2``.

When refraction succeeds the reflection probability is Schlick's
approximation. When it fails (total internal reflection) the probability is
the fixed value ``TIR_REFLECT_PROBABILITY`` = 0.1. Physically it would be
1.0; since the failed refraction leaves the candidate direction at the
mirror direction, both outcomes of the draw reflect in that case.

Example:
    >>> from bandtracer.runtime import init_taichi
    >>> init_taichi()
    >>> from bandtracer.materials.dielectric import scatter_dielectric
    >>> # Use within a Taichi kernel:
    >>> # did_scatter, attenuation, direction = scatter_dielectric(
    >>> #     ior, incident_dir, normal
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from bandtracer.core.ray import reflect, refract, schlick

# Type alias for 3D vectors
vec3 = tm.vec3

# Reflection probability used when refraction is impossible
TIR_REFLECT_PROBABILITY = 0.1


@ti.func
def _interface_terms(ior: float, incident_direction: vec3, normal: vec3):
    """Return (outward_normal, ni_over_nt, cosine) for the side the ray is on."""
    d_dot_n = tm.dot(incident_direction, normal)
    outward_normal = normal
    ni_over_nt = 1.0 / ior
    cosine = -d_dot_n / tm.dot(incident_direction, incident_direction)
    if d_dot_n > 0.0:
        outward_normal = -normal
        ni_over_nt = ior
        cosine = ior * d_dot_n / tm.length(incident_direction)
    return outward_normal, ni_over_nt, cosine


@ti.func
def dielectric_reflect_probability(ior: float, incident_direction: vec3, normal: vec3) -> float:
    """Probability that a dielectric reflects rather than refracts a ray.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        normal: The outward surface normal.

    Returns:
        Schlick reflectance, or TIR_REFLECT_PROBABILITY on total internal
        reflection.
    """
    outward_normal, ni_over_nt, cosine = _interface_terms(ior, incident_direction, normal)
    did_refract, _ = refract(incident_direction, outward_normal, ni_over_nt, vec3(0.0, 0.0, 0.0))

    reflect_prob = TIR_REFLECT_PROBABILITY
    if did_refract == 1:
        reflect_prob = schlick(cosine, ior)
    return reflect_prob


@ti.func
def scatter_dielectric(ior: float, incident_direction: vec3, normal: vec3):
    """Reflect or refract a ray at a dielectric surface.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        normal: The outward surface normal.

    Returns:
        A tuple of (did_scatter, attenuation, direction) where:
        - did_scatter: Always 1 for dielectrics.
        - attenuation: White, (1, 1, 1).
        - direction: The reflected or refracted direction.
    """
    attenuation = vec3(1.0, 1.0, 1.0)
    reflected = reflect(incident_direction, normal)

    outward_normal, ni_over_nt, _ = _interface_terms(ior, incident_direction, normal)
    # On total internal reflection the candidate stays at the mirror direction
    _, refracted = refract(incident_direction, outward_normal, ni_over_nt, reflected)

    reflect_prob = dielectric_reflect_probability(ior, incident_direction, normal)
    direction = refracted
    if ti.random(float) < reflect_prob:
        direction = reflected

    return 1, attenuation, direction


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of dielectric materials in the scene
MAX_DIELECTRIC_MATERIALS = 256

# Storage for dielectric material properties
dielectric_iors = ti.field(dtype=float, shape=MAX_DIELECTRIC_MATERIALS)
num_dielectric_materials = ti.field(dtype=ti.i32, shape=())


def clear_dielectric_materials() -> None:
    """Clear all dielectric materials."""
    num_dielectric_materials[None] = 0


def add_dielectric_material(ior: float = 1.5) -> int:
    """Add a dielectric material to the material registry.

    Args:
        ior: Index of refraction. Default is 1.5 (typical glass).
            Must be >= 1.0.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If IOR is less than 1.0.
    """
    if ior < 1.0:
        raise ValueError(
            f"Index of refraction = {ior} is less than 1.0. "
            "IOR must be >= 1.0 for physically meaningful materials."
        )

    idx = num_dielectric_materials[None]
    if idx >= MAX_DIELECTRIC_MATERIALS:
        raise RuntimeError(
            f"Maximum number of dielectric materials ({MAX_DIELECTRIC_MATERIALS}) exceeded"
        )

    dielectric_iors[idx] = ior
    num_dielectric_materials[None] = idx + 1
    return idx


def get_dielectric_material_count() -> int:
    """Get the number of dielectric materials in the registry."""
    return int(num_dielectric_materials[None])


@ti.func
def get_dielectric_ior(material_idx: ti.i32) -> float:
    """Get the IOR for a dielectric material by index."""
    return dielectric_iors[material_idx]
