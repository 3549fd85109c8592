"""Band-parallel stochastic ray tracer built on Taichi.

This package renders a static field of spheres with Lambertian, metal and
dielectric materials. The image is split into horizontal bands that are
rendered independently in worker processes and reassembled in row order.

Subpackages:
    core: Ray primitives, light transport integrator, band planning,
        the parallel orchestrator and the single-flight render session
    geometry: Sphere primitive and ray-sphere intersection
    materials: Lambertian, metal and dielectric scattering
    scene: Scene storage, closest-hit queries and the seeded scene builder
    camera: Thin-lens camera with depth of field
    preview: RGBA buffer export and static preview
"""

__version__ = "0.1.0"
