"""Unit tests for the Metal material module.

Tests cover:
- Perfect mirror reflection (fuzz = 0)
- Fuzzy reflection stays within the fuzz radius
- Absorption when the perturbed ray points into the surface
- Fuzz clamping
- Material registry operations
"""

import math

import numpy as np
import pytest
import taichi as ti


class TestPerfectReflection:
    """Tests for mirror reflection (fuzz = 0)."""

    def test_perfect_reflection_normal_incidence(self):
        """Test reflection of a ray hitting the surface head-on."""
        from bandtracer.materials.metal import scatter_metal

        result_dir = ti.Vector.field(3, dtype=float, shape=())
        result_scatter = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            albedo = ti.math.vec3(1.0, 1.0, 1.0)
            incident = ti.math.vec3(0.0, -3.0, 0.0)
            normal = ti.math.vec3(0.0, 1.0, 0.0)
            did_scatter, _, direction = scatter_metal(albedo, 0.0, incident, normal)
            result_dir[None] = direction
            result_scatter[None] = did_scatter

        test_kernel()
        d = result_dir[None]
        # Incident direction is normalized before reflecting
        assert abs(d[0]) < 1e-12
        assert abs(d[1] - 1.0) < 1e-12
        assert abs(d[2]) < 1e-12
        assert result_scatter[None] == 1

    def test_perfect_reflection_45_degrees(self):
        """Test reflection at a 45 degree angle."""
        from bandtracer.materials.metal import scatter_metal

        result_dir = ti.Vector.field(3, dtype=float, shape=())
        result_att = ti.Vector.field(3, dtype=float, shape=())

        @ti.kernel
        def test_kernel():
            albedo = ti.math.vec3(0.7, 0.6, 0.5)
            incident = ti.math.vec3(1.0, -1.0, 0.0)
            normal = ti.math.vec3(0.0, 1.0, 0.0)
            _, attenuation, direction = scatter_metal(albedo, 0.0, incident, normal)
            result_dir[None] = direction
            result_att[None] = attenuation

        test_kernel()
        d = result_dir[None]
        inv_sqrt2 = 1.0 / math.sqrt(2.0)
        assert abs(d[0] - inv_sqrt2) < 1e-12
        assert abs(d[1] - inv_sqrt2) < 1e-12
        a = result_att[None]
        assert abs(a[0] - 0.7) < 1e-12
        assert abs(a[2] - 0.5) < 1e-12


class TestFuzzyReflection:
    """Tests for fuzzy reflection."""

    def test_fuzzy_reflection_within_fuzz_radius(self):
        """Test that directions stay within fuzz of the mirror direction."""
        from bandtracer.materials.metal import scatter_metal

        n = 1000
        fuzz = 0.3
        directions = ti.Vector.field(3, dtype=float, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                albedo = ti.math.vec3(1.0, 1.0, 1.0)
                incident = ti.math.vec3(0.0, -1.0, 0.0)
                normal = ti.math.vec3(0.0, 1.0, 0.0)
                _, _, direction = scatter_metal(albedo, fuzz, incident, normal)
                directions[i] = direction

        test_kernel()
        d = directions.to_numpy()
        offsets = d - np.array([0.0, 1.0, 0.0])
        assert np.sqrt((offsets**2).sum(axis=1)).max() < fuzz
        # The samples are not all identical
        assert d[:, 0].std() > 0.01

    def test_grazing_fuzzy_reflection_can_be_absorbed(self):
        """Test that heavy fuzz at grazing incidence absorbs some rays."""
        from bandtracer.materials.metal import scatter_metal

        n = 1000
        scattered = ti.field(dtype=ti.i32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                albedo = ti.math.vec3(1.0, 1.0, 1.0)
                incident = ti.math.vec3(1.0, -0.01, 0.0)
                normal = ti.math.vec3(0.0, 1.0, 0.0)
                did_scatter, _, _ = scatter_metal(albedo, 1.0, incident, normal)
                scattered[i] = did_scatter

        test_kernel()
        s = scattered.to_numpy()
        assert 0 < s.sum() < n

    def test_ray_into_surface_is_absorbed(self):
        """Test that a reflection pointing into the surface is absorbed."""
        from bandtracer.materials.metal import scatter_metal

        result_scatter = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            albedo = ti.math.vec3(1.0, 1.0, 1.0)
            # Incident ray leaves the surface, so the mirror points inward
            incident = ti.math.vec3(0.0, 1.0, 0.0)
            normal = ti.math.vec3(0.0, 1.0, 0.0)
            did_scatter, _, _ = scatter_metal(albedo, 0.0, incident, normal)
            result_scatter[None] = did_scatter

        test_kernel()
        assert result_scatter[None] == 0


class TestFuzzClamping:
    """Tests for fuzz clamping."""

    def test_clamp_fuzz(self):
        from bandtracer.materials.metal import MAX_FUZZ, clamp_fuzz

        assert clamp_fuzz(0.25) == 0.25
        assert clamp_fuzz(2.0) == MAX_FUZZ
        assert clamp_fuzz(-1.0) == 0.0


class TestMaterialRegistry:
    """Tests for the metal material registry."""

    def test_add_and_get_material(self):
        """Test storing and reading back albedo and fuzz."""
        from bandtracer.materials.metal import (
            add_metal_material,
            get_metal_albedo,
            get_metal_fuzz,
        )

        idx = add_metal_material((0.7, 0.6, 0.5), fuzz=0.25)
        albedo = ti.Vector.field(3, dtype=float, shape=())
        fuzz = ti.field(dtype=float, shape=())

        @ti.kernel
        def test_kernel(mat_idx: ti.i32):
            albedo[None] = get_metal_albedo(mat_idx)
            fuzz[None] = get_metal_fuzz(mat_idx)

        test_kernel(idx)
        assert abs(albedo[None][0] - 0.7) < 1e-12
        assert abs(fuzz[None] - 0.25) < 1e-12

    def test_fuzz_clamped_on_registration(self):
        """Test that oversized fuzz is stored as MAX_FUZZ."""
        from bandtracer.materials.metal import MAX_FUZZ, add_metal_material, metal_fuzzes

        idx = add_metal_material((0.5, 0.5, 0.5), fuzz=5.0)
        assert metal_fuzzes[idx] == MAX_FUZZ

    def test_material_count(self):
        from bandtracer.materials.metal import (
            add_metal_material,
            clear_metal_materials,
            get_metal_material_count,
        )

        add_metal_material((0.5, 0.5, 0.5))
        add_metal_material((0.6, 0.6, 0.6))
        assert get_metal_material_count() == 2

        clear_metal_materials()
        assert get_metal_material_count() == 0

    def test_albedo_validation(self):
        """Test that albedo components outside [0, 1] are rejected."""
        from bandtracer.materials.metal import add_metal_material

        with pytest.raises(ValueError):
            add_metal_material((0.5, 0.5, 1.5))
