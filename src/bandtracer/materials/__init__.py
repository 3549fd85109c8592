"""Materials module for surface scattering.

Components:
    lambertian: Ideal diffuse reflection
    metal: Mirror reflection perturbed by a fuzz radius
    dielectric: Glass-like reflection/refraction with Schlick's approximation

Each material provides a ``scatter_*`` Taichi function returning a
``(did_scatter, attenuation, direction)`` tuple, plus a field-backed
registry of material parameters indexed by a type-local id.

Importing this package declares Taichi fields; call
``bandtracer.runtime.init_taichi`` first.
"""

from .dielectric import (
    TIR_REFLECT_PROBABILITY,
    add_dielectric_material,
    clear_dielectric_materials,
    dielectric_reflect_probability,
    get_dielectric_ior,
    get_dielectric_material_count,
    scatter_dielectric,
)
from .lambertian import (
    add_lambertian_material,
    clear_lambertian_materials,
    get_lambertian_albedo,
    get_lambertian_material_count,
    scatter_lambertian,
)
from .metal import (
    MAX_FUZZ,
    add_metal_material,
    clamp_fuzz,
    clear_metal_materials,
    get_metal_albedo,
    get_metal_fuzz,
    get_metal_material_count,
    scatter_metal,
)

__all__ = [
    # Lambertian
    "scatter_lambertian",
    "add_lambertian_material",
    "clear_lambertian_materials",
    "get_lambertian_material_count",
    "get_lambertian_albedo",
    # Metal
    "MAX_FUZZ",
    "clamp_fuzz",
    "scatter_metal",
    "add_metal_material",
    "clear_metal_materials",
    "get_metal_material_count",
    "get_metal_albedo",
    "get_metal_fuzz",
    # Dielectric
    "TIR_REFLECT_PROBABILITY",
    "scatter_dielectric",
    "dielectric_reflect_probability",
    "add_dielectric_material",
    "clear_dielectric_materials",
    "get_dielectric_material_count",
    "get_dielectric_ior",
]
