"""Unit tests for the SceneManager.

Tests cover:
- Material registration (Lambertian, Metal, Dielectric)
- Material type tracking and device-side lookup
- Sphere addition with materials
- Loading a scene description, including shared materials
- Scene clearing
"""

import numpy as np
import pytest
import taichi as ti


@pytest.fixture
def fresh_scene():
    """Create a fresh SceneManager for each test."""
    from bandtracer.scene.manager import SceneManager

    scene = SceneManager()
    yield scene
    scene.clear()


class TestMaterialRegistration:
    """Tests for material registration."""

    def test_add_lambertian_material(self, fresh_scene):
        """Test that material ids are assigned in order."""
        from bandtracer.scene.manager import MaterialType

        first = fresh_scene.add_lambertian_material((0.5, 0.5, 0.5))
        second = fresh_scene.add_lambertian_material((0.1, 0.2, 0.3))

        assert (first, second) == (0, 1)
        assert fresh_scene.get_material_count() == 2
        assert fresh_scene.get_material_info(1).material_type == MaterialType.LAMBERTIAN
        assert fresh_scene.get_material_info(1).type_index == 1

    def test_unified_ids_across_types(self, fresh_scene):
        """Test that type-local indices restart per type."""
        from bandtracer.scene.manager import MaterialType

        lam = fresh_scene.add_lambertian_material((0.5, 0.5, 0.5))
        metal = fresh_scene.add_metal_material((0.7, 0.6, 0.5), fuzz=0.0)
        glass = fresh_scene.add_dielectric_material(1.5)

        assert (lam, metal, glass) == (0, 1, 2)
        assert fresh_scene.get_material_info(metal).material_type == MaterialType.METAL
        assert fresh_scene.get_material_info(metal).type_index == 0
        assert fresh_scene.get_material_info(glass).material_type == MaterialType.DIELECTRIC
        assert fresh_scene.get_material_info(glass).type_index == 0

    def test_metal_fuzz_clamped(self, fresh_scene):
        """Test that metal fuzz above 1 is clamped, not rejected."""
        from bandtracer.materials.metal import metal_fuzzes

        material_id = fresh_scene.add_metal_material((0.8, 0.8, 0.8), fuzz=3.0)
        type_index = fresh_scene.get_material_info(material_id).type_index
        assert metal_fuzzes[type_index] == 1.0

    def test_invalid_albedo_rejected(self, fresh_scene):
        """Test that albedo outside [0, 1] raises ValueError."""
        with pytest.raises(ValueError):
            fresh_scene.add_lambertian_material((1.5, 0.5, 0.5))

    def test_invalid_ior_rejected(self, fresh_scene):
        """Test that an index of refraction below 1 raises ValueError."""
        with pytest.raises(ValueError):
            fresh_scene.add_dielectric_material(0.5)

    def test_unknown_material_info_is_none(self, fresh_scene):
        assert fresh_scene.get_material_info(5) is None


class TestSpheres:
    """Tests for adding spheres."""

    def test_add_sphere(self, fresh_scene):
        """Test adding a sphere with a registered material."""
        material_id = fresh_scene.add_lambertian_material((0.5, 0.5, 0.5))
        idx = fresh_scene.add_sphere((0.0, 0.0, -1.0), 0.5, material_id)

        assert idx == 0
        assert fresh_scene.get_sphere_count() == 1
        assert fresh_scene.spheres[0].material_id == material_id

    def test_add_sphere_invalid_material(self, fresh_scene):
        """Test that an unregistered material id raises ValueError."""
        with pytest.raises(ValueError):
            fresh_scene.add_sphere((0.0, 0.0, -1.0), 0.5, 0)

    def test_clear(self, fresh_scene):
        """Test that clear removes spheres and materials."""
        material_id = fresh_scene.add_lambertian_material((0.5, 0.5, 0.5))
        fresh_scene.add_sphere((0.0, 0.0, -1.0), 0.5, material_id)

        fresh_scene.clear()

        assert fresh_scene.get_sphere_count() == 0
        assert fresh_scene.get_material_count() == 0
        assert fresh_scene.materials == []
        assert fresh_scene.spheres == []


class TestLoadDescription:
    """Tests for uploading host-side scene descriptions."""

    def test_load_description_shares_materials(self, fresh_scene):
        """Test that equal materials are registered once."""
        from bandtracer.scene.builder import (
            Dielectric,
            Lambertian,
            SceneDescription,
            SphereSpec,
        )

        glass = Dielectric(1.5)
        description = SceneDescription(
            spheres=[
                SphereSpec((0.0, 0.0, -1.0), 0.5, glass),
                SphereSpec((1.0, 0.0, -1.0), 0.5, Lambertian((0.1, 0.2, 0.3))),
                SphereSpec((2.0, 0.0, -1.0), 0.5, glass),
            ]
        )

        fresh_scene.load_description(description)

        assert fresh_scene.get_sphere_count() == 3
        assert fresh_scene.get_material_count() == 2
        assert fresh_scene.spheres[0].material_id == fresh_scene.spheres[2].material_id

    def test_load_description_replaces_scene(self, fresh_scene):
        """Test that loading discards previously added spheres."""
        from bandtracer.scene.builder import Metal, SceneDescription, SphereSpec

        material_id = fresh_scene.add_lambertian_material((0.5, 0.5, 0.5))
        fresh_scene.add_sphere((0.0, 0.0, -1.0), 0.5, material_id)

        fresh_scene.load_description(
            SceneDescription(spheres=[SphereSpec((3.0, 1.0, -1.0), 1.0, Metal((0.7, 0.6, 0.5)))])
        )

        assert fresh_scene.get_sphere_count() == 1
        assert fresh_scene.get_material_count() == 1
        assert fresh_scene.spheres[0].center == (3.0, 1.0, -1.0)

    def test_load_built_scene(self, fresh_scene):
        """Test uploading the generated sphere field."""
        from bandtracer.scene.builder import build_scene, make_random_sequence

        description = build_scene(make_random_sequence(3000, np.random.default_rng(1)))
        fresh_scene.load_description(description)

        assert fresh_scene.get_sphere_count() == len(description.spheres)
        assert fresh_scene.get_material_count() == len(description.materials())


class TestDeviceLookup:
    """Tests for the Taichi-side material type lookup."""

    def test_material_type_lookup(self, fresh_scene):
        """Test get_material_type and get_material_type_index in a kernel."""
        from bandtracer.scene.manager import (
            MaterialType,
            get_material_type,
            get_material_type_index,
        )

        fresh_scene.add_lambertian_material((0.5, 0.5, 0.5))
        fresh_scene.add_dielectric_material(1.5)
        fresh_scene.add_metal_material((0.5, 0.5, 0.5))

        types = ti.field(dtype=ti.i32, shape=4)
        indices = ti.field(dtype=ti.i32, shape=4)

        @ti.kernel
        def test_kernel():
            for i in range(4):
                types[i] = get_material_type(i)
                indices[i] = get_material_type_index(i)

        test_kernel()
        assert types[0] == int(MaterialType.LAMBERTIAN)
        assert types[1] == int(MaterialType.DIELECTRIC)
        assert types[2] == int(MaterialType.METAL)
        assert indices[2] == 0
        # Unknown ids report -1
        assert types[3] == -1
        assert indices[3] == -1
