"""Ray data structure and vector utilities.

This module provides the Ray dataclass and the vector helpers used by the
materials and the integrator. All functions are Taichi functions and run
inside kernels; vectors are ``tm.vec3`` in the runtime's default float type
(64-bit, see ``bandtracer.runtime``).

Example:
    >>> from bandtracer.runtime import init_taichi
    >>> init_taichi()
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Iteration cap for the rejection samplers; the acceptance rate is above 50%
MAX_REJECTION_TRIES = 100


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Not required to be
            unit length, but never the zero vector when intersected.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: float) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + ray.direction * t.
    """
    return ray.origin + ray.direction * t


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length_squared(v: vec3) -> float:
    """Compute the squared length of a vector."""
    return tm.dot(v, v)


@ti.func
def reflect(v: vec3, normal: vec3) -> vec3:
    """Reflect a vector about a normal.

    Computes ``v - 2 (v . n) n``. The normal should be unit length.

    Args:
        v: The incoming direction (pointing toward the surface).
        normal: The surface normal.

    Returns:
        The mirrored direction.
    """
    return v - normal * tm.dot(v, normal) * 2.0


@ti.func
def refract(v: vec3, normal: vec3, ni_over_nt: float, refracted: vec3):
    """Refract a vector through a surface using Snell's law.

    The incoming vector is normalized first. Refraction fails when the
    discriminant ``1 - eta^2 (1 - (v.n)^2)`` is not positive, which is total
    internal reflection.

    Args:
        v: The incoming direction (any length).
        normal: The normal on the incident side of the surface.
        ni_over_nt: Ratio of the incident to the transmitted refractive index.
        refracted: Value returned unchanged when refraction fails.

    Returns:
        A tuple of (did_refract, direction) where did_refract is 1 when the
        ray refracts and direction is the refracted vector, or ``refracted``
        untouched on total internal reflection.
    """
    uv = tm.normalize(v)
    dt = tm.dot(uv, normal)
    discriminant = 1.0 - ni_over_nt * ni_over_nt * (1.0 - dt * dt)
    did_refract = 0
    result = refracted
    if discriminant > 0.0:
        result = (uv - normal * dt) * ni_over_nt - normal * ti.sqrt(discriminant)
        did_refract = 1
    return did_refract, result


@ti.func
def schlick(cosine: float, refraction_index: float) -> float:
    """Compute Fresnel reflectance using Schlick's approximation.

    Args:
        cosine: Cosine of the angle between the ray and the normal.
        refraction_index: Refractive index of the material.

    Returns:
        ``r0 + (1 - r0)(1 - cosine)^5`` with ``r0 = ((1 - ri)/(1 + ri))^2``.
    """
    r = (1.0 - refraction_index) / (1.0 + refraction_index)
    r0 = r * r
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_in_unit_sphere() -> vec3:
    """Generate a random point inside the unit sphere.

    Uses rejection sampling from the [-1, 1] cube.

    Returns:
        A random point with length < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = False
    # Rejection sampling loop
    for _ in range(MAX_REJECTION_TRIES):
        if not found:
            p = vec3(ti.random(float), ti.random(float), ti.random(float)) * 2.0 - vec3(1.0, 1.0, 1.0)
            if length_squared(p) < 1.0:
                found = True
    return p


@ti.func
def random_in_unit_disk() -> vec3:
    """Generate a random point inside the unit disk in the xy-plane.

    Used by the thin-lens camera to jitter ray origins across the aperture.

    Returns:
        A random point (x, y, 0) with x^2 + y^2 < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(MAX_REJECTION_TRIES):
        if not found:
            p = vec3(ti.random(float), ti.random(float), 0.0) * 2.0 - vec3(1.0, 1.0, 0.0)
            if tm.dot(p, p) < 1.0:
                found = True
    return p
