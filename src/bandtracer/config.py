"""Render configuration.

The defaults give the standard sphere-field render: 32 anti-aliasing samples, a
32-bounce depth cutoff, a 65 degree vertical field of view and a thin lens
with aperture 0.5 looking from (4, 4, -8) toward (0, 1, -1).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bandtracer.camera.thin_lens import ThinLensCamera

DEFAULT_SAMPLES = 32
DEFAULT_MAX_DEPTH = 32
DEFAULT_SEQUENCE_LENGTH = 3000


@dataclass(frozen=True)
class RenderSettings:
    """Tunable parameters shared by every band of a render.

    Attributes:
        samples: Jittered samples averaged per pixel.
        max_depth: Bounce count at which a path is terminated as black.
        vfov: Vertical field of view in degrees.
        lookfrom: Camera position.
        lookat: Point the camera looks at; also sets the focus distance.
        aperture: Lens diameter. 0 gives a pinhole camera.
        sequence_length: Number of seed values generated for scene layout.
    """

    samples: int = DEFAULT_SAMPLES
    max_depth: int = DEFAULT_MAX_DEPTH
    vfov: float = 65.0
    lookfrom: tuple[float, float, float] = (4.0, 4.0, -8.0)
    lookat: tuple[float, float, float] = (0.0, 1.0, -1.0)
    aperture: float = 0.5
    sequence_length: int = DEFAULT_SEQUENCE_LENGTH

    def __post_init__(self) -> None:
        if self.samples < 1:
            raise ValueError(f"samples must be >= 1, got {self.samples}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")

    def camera(self, width: int, height: int) -> ThinLensCamera:
        """Build the camera for an image of the given size."""
        from bandtracer.camera.thin_lens import ThinLensCamera

        return ThinLensCamera(
            width=width,
            height=height,
            vfov=self.vfov,
            lookfrom=self.lookfrom,
            lookat=self.lookat,
            aperture=self.aperture,
        )
