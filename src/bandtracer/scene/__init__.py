"""Scene module for world construction and ray-scene queries.

Components:
    builder: Host-side scene description and the seeded sphere-field factory
    intersection: Sphere storage in Taichi fields and the closest-hit query
    manager: Unified material ids and upload of scene descriptions

Note: intersection and manager declare Taichi fields at import time, so they
are NOT imported here. Import them directly after ``init_taichi`` has run::

    from bandtracer.scene.manager import SceneManager

The builder is plain Python and is safe to import anywhere.
"""

from .builder import (
    Dielectric,
    Lambertian,
    Material,
    Metal,
    SceneDescription,
    SphereSpec,
    build_scene,
    make_random_sequence,
)

__all__ = [
    "Lambertian",
    "Metal",
    "Dielectric",
    "Material",
    "SphereSpec",
    "SceneDescription",
    "build_scene",
    "make_random_sequence",
]
