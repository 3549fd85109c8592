"""Scene manager tying spheres to materials.

The integrator needs to know, for every sphere hit, which scatter function to
call and where that material's parameters live. The SceneManager keeps one
unified material id space on top of the three type-specific registries:

- ``material_types[id]`` holds the MaterialType of material ``id``
- ``material_type_indices[id]`` holds its index in the type's own registry

Spheres store the unified id. ``load_description`` uploads a host-side
SceneDescription, registering each distinct material once so spheres that
share a material share its id.

Example:
    >>> from bandtracer.runtime import init_taichi
    >>> init_taichi()
    >>> from bandtracer.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> red = scene.add_lambertian_material(albedo=(0.8, 0.3, 0.3))
    >>> scene.add_sphere(center=(0, 0, -1), radius=0.5, material_id=red)
    0
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any

import taichi as ti

from bandtracer.materials.dielectric import (
    add_dielectric_material,
    clear_dielectric_materials,
)
from bandtracer.materials.lambertian import (
    add_lambertian_material,
    clear_lambertian_materials,
)
from bandtracer.materials.metal import (
    add_metal_material,
    clear_metal_materials,
)
from bandtracer.scene.builder import (
    Dielectric,
    Lambertian,
    Material,
    Metal,
    SceneDescription,
)
from bandtracer.scene.intersection import add_sphere, clear_scene, get_sphere_count


class MaterialType(IntEnum):
    """Material kinds understood by the integrator's scatter dispatch."""

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


# Maximum number of materials across all types
MAX_MATERIALS = 768

# material_types[i] is the MaterialType of material i
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
# material_type_indices[i] is the index of material i in its type registry
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def _clear_material_tracking() -> None:
    num_materials[None] = 0


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Get the MaterialType of a material, or -1 for an unknown id."""
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Get the index of a material within its type registry, or -1."""
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_type_indices[material_id]
    return result


@dataclass
class MaterialInfo:
    """Host-side record of a registered material.

    Attributes:
        material_id: The unified material ID.
        material_type: The kind of material.
        type_index: The index within the type-specific registry.
        params: The parameters the material was created with.
    """

    material_id: int
    material_type: MaterialType
    type_index: int
    params: dict[str, Any]


@dataclass
class SphereInfo:
    """Host-side record of a sphere in the scene."""

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int


class SceneManager:
    """Builds the device-side world from materials and spheres.

    Creating a SceneManager clears every sphere and material registry, so
    there is one live scene per process.

    Attributes:
        materials: MaterialInfo for every registered material, by id.
        spheres: SphereInfo for every sphere, in scan order.
    """

    def __init__(self) -> None:
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self._clear_all()

    def _clear_all(self) -> None:
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        _clear_material_tracking()
        self.materials.clear()
        self.spheres.clear()

    def clear(self) -> None:
        """Remove every sphere and material."""
        self._clear_all()

    # =========================================================================
    # Material Management
    # =========================================================================

    def _register_material(
        self,
        material_type: MaterialType,
        type_index: int,
        params: dict[str, Any],
    ) -> int:
        material_id = num_materials[None]
        if material_id >= MAX_MATERIALS:
            raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

        material_types[material_id] = int(material_type)
        material_type_indices[material_id] = type_index
        num_materials[None] = material_id + 1

        self.materials.append(
            MaterialInfo(
                material_id=material_id,
                material_type=material_type,
                type_index=type_index,
                params=params,
            )
        )
        return material_id

    def add_lambertian_material(self, albedo: tuple[float, float, float]) -> int:
        """Add a diffuse material.

        Args:
            albedo: The diffuse reflectance as (R, G, B), each in [0, 1].

        Returns:
            The unified material ID.

        Raises:
            RuntimeError: If a material registry is full.
            ValueError: If any albedo component is outside [0, 1].
        """
        type_index = add_lambertian_material(albedo)
        return self._register_material(
            MaterialType.LAMBERTIAN, type_index, {"albedo": tuple(albedo)}
        )

    def add_metal_material(
        self,
        albedo: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> int:
        """Add a metal material.

        Args:
            albedo: The reflective tint as (R, G, B), each in [0, 1].
            fuzz: Surface roughness. Clamped into [0, 1].

        Returns:
            The unified material ID.

        Raises:
            RuntimeError: If a material registry is full.
            ValueError: If any albedo component is outside [0, 1].
        """
        type_index = add_metal_material(albedo, fuzz)
        return self._register_material(
            MaterialType.METAL, type_index, {"albedo": tuple(albedo), "fuzz": fuzz}
        )

    def add_dielectric_material(self, ior: float = 1.5) -> int:
        """Add a glass-like material.

        Args:
            ior: Index of refraction, at least 1.0.

        Returns:
            The unified material ID.

        Raises:
            RuntimeError: If a material registry is full.
            ValueError: If ior is less than 1.0.
        """
        type_index = add_dielectric_material(ior)
        return self._register_material(MaterialType.DIELECTRIC, type_index, {"ior": ior})

    def add_material(self, material: Material) -> int:
        """Register a host-side material description.

        Raises:
            TypeError: If material is not a Lambertian, Metal or Dielectric.
        """
        if isinstance(material, Lambertian):
            return self.add_lambertian_material(material.albedo)
        if isinstance(material, Metal):
            return self.add_metal_material(material.albedo, material.fuzz)
        if isinstance(material, Dielectric):
            return self.add_dielectric_material(material.refraction_index)
        raise TypeError(f"Unsupported material: {material!r}")

    def get_material_count(self) -> int:
        """Get the total number of materials in the scene."""
        return int(num_materials[None])

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Get the record of a material, or None for an unknown id."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    # =========================================================================
    # Primitive Management
    # =========================================================================

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Add a sphere made of an already registered material.

        Returns:
            The index of the sphere in scan order.

        Raises:
            RuntimeError: If the sphere storage is full.
            ValueError: If material_id is not registered.
        """
        if material_id < 0 or material_id >= num_materials[None]:
            raise ValueError(f"Invalid material_id: {material_id}")

        sphere_index = add_sphere(center, radius, material_id)
        self.spheres.append(
            SphereInfo(
                sphere_index=sphere_index,
                center=tuple(center),
                radius=radius,
                material_id=material_id,
            )
        )
        return sphere_index

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return get_sphere_count()

    # =========================================================================
    # Scene Descriptions
    # =========================================================================

    def load_description(self, description: SceneDescription) -> None:
        """Replace the current scene with a host-side description.

        Spheres are added in description order. Equal materials are registered
        once and shared.
        """
        self._clear_all()
        material_ids: dict[Material, int] = {}
        for sphere in description.spheres:
            material_id = material_ids.get(sphere.material)
            if material_id is None:
                material_id = self.add_material(sphere.material)
                material_ids[sphere.material] = material_id
            self.add_sphere(sphere.center, sphere.radius, material_id)
