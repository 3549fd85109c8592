"""Seeded construction of the sphere-field scene.

The scene is described on the host with plain frozen dataclasses so every
worker can rebuild it without Taichi. Layout comes from a precomputed
sequence of uniform [0, 1) floats consumed one value at a time, so any two
workers handed the same sequence produce identical centers, radii, material
kinds and albedos. Metal fuzz is the exception: it is drawn from a separate,
worker-owned generator and is not expected to match across workers.

Layout:
    - A grid of small spheres (radius 0.2) for ``a, b`` in ``-4..4``, jittered
      within each unit cell. Cells whose center falls within 0.9 of
      (4, 0.2, 0) are skipped.
    - Material by the first value drawn for the cell: < 0.8 Lambertian with
      albedo ``r()*r()`` per channel, < 0.95 Metal with albedo in [0.5, 1]
      per channel, otherwise glass (index 1.5).
    - A ground sphere of radius 1000 and three hero spheres of radius 1:
      glass, diffuse brown and a polished metal.

Example:
    >>> from bandtracer.scene.builder import build_scene, make_random_sequence
    >>> sequence = make_random_sequence(3000)
    >>> scene = build_scene(sequence)
    >>> len(scene.spheres) > 4
    True
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Union

import numpy as np

# Radius of the small grid spheres
SMALL_SPHERE_RADIUS = 0.2

# Grid spans -GRID_HALF_EXTENT..GRID_HALF_EXTENT on the x and z axes
GRID_HALF_EXTENT = 4

# Grid cells within this distance of KEEP_CLEAR_POINT are left empty
KEEP_CLEAR_DISTANCE = 0.9
KEEP_CLEAR_POINT = (4.0, 0.2, 0.0)

LAMBERTIAN_THRESHOLD = 0.8
METAL_THRESHOLD = 0.95
GLASS_INDEX = 1.5


# =============================================================================
# Material and Geometry Descriptions
# =============================================================================


@dataclass(frozen=True)
class Lambertian:
    """Diffuse material with the given albedo."""

    albedo: tuple[float, float, float]


@dataclass(frozen=True)
class Metal:
    """Reflective material.

    Attributes:
        albedo: Reflective tint (RGB).
        fuzz: Roughness. Clamped into [0, 1] on construction.
    """

    albedo: tuple[float, float, float]
    fuzz: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "fuzz", min(max(self.fuzz, 0.0), 1.0))


@dataclass(frozen=True)
class Dielectric:
    """Refractive material with the given index of refraction."""

    refraction_index: float = GLASS_INDEX


Material = Union[Lambertian, Metal, Dielectric]


@dataclass(frozen=True)
class SphereSpec:
    """A sphere and the material it is made of."""

    center: tuple[float, float, float]
    radius: float
    material: Material


@dataclass
class SceneDescription:
    """Ordered list of spheres making up the world.

    The order is the scan order of the closest-hit query.
    """

    spheres: list[SphereSpec] = field(default_factory=list)

    def materials(self) -> list[Material]:
        """Distinct materials in first-use order."""
        seen: dict[Material, None] = {}
        for sphere in self.spheres:
            seen.setdefault(sphere.material, None)
        return list(seen)

    def __len__(self) -> int:
        return len(self.spheres)


# =============================================================================
# Seed Sequence
# =============================================================================


def make_random_sequence(
    count: int = 3000,
    rng: np.random.Generator | None = None,
) -> tuple[float, ...]:
    """Generate the shared scene seed sequence.

    Args:
        count: Number of uniform [0, 1) values to generate.
        rng: Generator to draw from. A fresh unseeded one if None.

    Returns:
        An immutable tuple of floats, safe to hand to every worker.
    """
    if rng is None:
        rng = np.random.default_rng()
    return tuple(float(x) for x in rng.random(count))


class SequenceCursor:
    """Hands out values from a seed sequence one at a time.

    Raises:
        ValueError: When called after the sequence is exhausted.
    """

    def __init__(self, values: Iterable[float]) -> None:
        self._iterator: Iterator[float] = iter(values)
        self.consumed = 0

    def __call__(self) -> float:
        try:
            value = next(self._iterator)
        except StopIteration:
            raise ValueError(
                f"Random sequence exhausted after {self.consumed} values"
            ) from None
        self.consumed += 1
        return float(value)


# =============================================================================
# Scene Factory
# =============================================================================


def build_scene(
    random_sequence: Iterable[float],
    fuzz_rng: np.random.Generator | None = None,
    grid_half_extent: int = GRID_HALF_EXTENT,
) -> SceneDescription:
    """Build the sphere field from a seed sequence.

    Args:
        random_sequence: Uniform [0, 1) values driving the layout.
        fuzz_rng: Independent generator for metal fuzz. A fresh unseeded one
            if None.
        grid_half_extent: Grid spans ``-n..n`` on both axes.

    Returns:
        The scene description, small spheres first in grid order followed by
        the ground and the three hero spheres.

    Raises:
        ValueError: If the sequence runs out before the grid is complete.
    """
    if fuzz_rng is None:
        fuzz_rng = np.random.default_rng()

    r = SequenceCursor(random_sequence)
    scene = SceneDescription()

    for a in range(-grid_half_extent, grid_half_extent + 1):
        for b in range(-grid_half_extent, grid_half_extent + 1):
            choose_material = r()
            center = (a + 0.9 * r(), SMALL_SPHERE_RADIUS, b + 0.9 * r())

            if math.dist(center, KEEP_CLEAR_POINT) <= KEEP_CLEAR_DISTANCE:
                continue

            material: Material
            if choose_material < LAMBERTIAN_THRESHOLD:
                material = Lambertian(albedo=(r() * r(), r() * r(), r() * r()))
            elif choose_material < METAL_THRESHOLD:
                material = Metal(
                    albedo=(0.5 * (1.0 + r()), 0.5 * (1.0 + r()), 0.5 * (1.0 + r())),
                    fuzz=0.5 * float(fuzz_rng.random()),
                )
            else:
                material = Dielectric(refraction_index=GLASS_INDEX)

            scene.spheres.append(SphereSpec(center, SMALL_SPHERE_RADIUS, material))

    scene.spheres.append(
        SphereSpec((0.0, -1000.0, 0.0), 1000.0, Lambertian(albedo=(0.5, 0.5, 0.5)))
    )
    scene.spheres.append(SphereSpec((0.0, 1.0, -1.0), 1.0, Dielectric(refraction_index=GLASS_INDEX)))
    scene.spheres.append(SphereSpec((-3.0, 1.0, -1.0), 1.0, Lambertian(albedo=(0.4, 0.2, 0.1))))
    scene.spheres.append(SphereSpec((3.0, 1.0, -1.0), 1.0, Metal(albedo=(0.7, 0.6, 0.5), fuzz=0.0)))

    return scene
