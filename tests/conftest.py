"""Pytest configuration for bandtracer tests.

Taichi is initialised once for the whole session, before any module that
declares fields is imported. Tests therefore import field-bearing modules
inside the test functions.
"""

import pytest

from bandtracer.runtime import init_taichi


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls, which would
    invalidate fields declared by already imported modules.
    """
    init_taichi(random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear spheres and material registries around each test."""
    from bandtracer.materials.dielectric import clear_dielectric_materials
    from bandtracer.materials.lambertian import clear_lambertian_materials
    from bandtracer.materials.metal import clear_metal_materials
    from bandtracer.scene.intersection import clear_scene
    from bandtracer.scene.manager import _clear_material_tracking

    def _clear_all():
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        _clear_material_tracking()

    _clear_all()
    yield
    _clear_all()


class SerialExecutor:
    """Runs band tasks one after another in the test process."""

    def map(self, fn, iterable):
        return map(fn, iterable)


@pytest.fixture
def serial_executor():
    return SerialExecutor()
