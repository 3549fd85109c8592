"""Sphere primitive with analytic ray-sphere intersection.

The intersection solves ``a t^2 + b t + c = 0`` with::

    a  = dot(direction, direction)
    b  = 2 * dot(oc, direction)
    c  = dot(oc, oc) - radius^2
    oc = origin - center

and accepts the smaller root first, then the larger one, taking the first
that lies strictly inside ``(t_min, t_max)``. The stored normal is the
geometric outward normal ``(point - center) / radius``; materials work out
which side was hit from the sign of ``dot(direction, normal)``.

Example:
    >>> from bandtracer.runtime import init_taichi
    >>> init_taichi()
    >>> from bandtracer.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5, material_id=0)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from bandtracer.core.ray import Ray, ray_at

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point, radius and material.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
        material_id: Unified material id (see ``scene.manager``).
    """

    center: vec3
    radius: float
    material_id: ti.i32


@ti.dataclass
class HitRecord:
    """Record of a ray-surface intersection.

    Attributes:
        hit: 1 if the ray intersected the surface, 0 on a miss.
        t: Ray parameter of the intersection. Only valid if hit == 1.
        point: World-space intersection point. Only valid if hit == 1.
        normal: Unit outward normal at the intersection point.
            Only valid if hit == 1.
        material_id: Material of the surface that was hit, -1 on a miss.
    """

    hit: ti.i32
    t: float
    point: vec3
    normal: vec3
    material_id: ti.i32


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        material_id=-1,
    )


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere, t_min: float, t_max: float) -> HitRecord:
    """Test for ray-sphere intersection.

    Args:
        ray: The ray to test. Its direction need not be normalized.
        sphere: The sphere to test intersection against.
        t_min: Exclusive lower bound on accepted t (avoids self-intersection).
        t_max: Exclusive upper bound on accepted t (closest hit so far).

    Returns:
        A HitRecord for the nearest root inside (t_min, t_max). Check the
        hit field to determine if an intersection occurred.
    """
    oc = ray.origin - sphere.center
    a = tm.dot(ray.direction, ray.direction)
    b = 2.0 * tm.dot(oc, ray.direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = b * b - 4.0 * a * c

    record = make_miss_record()

    if discriminant > 0.0:
        sqrt_d = ti.sqrt(discriminant)

        # Smaller root first: it is the nearer intersection
        t = (-b - sqrt_d) / (2.0 * a)
        valid = t > t_min and t < t_max

        if not valid:
            t = (-b + sqrt_d) / (2.0 * a)
            valid = t > t_min and t < t_max

        if valid:
            point = ray_at(ray, t)
            record = HitRecord(
                hit=1,
                t=t,
                point=point,
                normal=(point - sphere.center) / sphere.radius,
                material_id=sphere.material_id,
            )

    return record


@ti.func
def make_sphere(center: vec3, radius: float, material_id: ti.i32) -> Sphere:
    """Create a sphere within a Taichi kernel."""
    return Sphere(center=center, radius=radius, material_id=material_id)
