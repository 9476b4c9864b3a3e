"""Pinhole camera model for primary ray generation.

The camera sits at a fixed position looking down the -z axis with +y up. The
image plane is at unit distance; pixel (i, j), counted from the top-left
corner, maps to the direction

    x =  (2 * (i + 0.5) / width  - 1) * tan(fov / 2) * width / height
    y = -(2 * (j + 0.5) / height - 1) * tan(fov / 2)
    direction = normalize(x, y, -1)

so rays pass through pixel centers and fov is the vertical field of view in
radians.

Example:
    >>> import math
    >>> from src.whitted.camera.pinhole import PinholeCamera
    >>> camera = PinholeCamera(width=640, height=480, fov=math.pi / 3)
    >>> camera.direction(320, 240)  # Ray through the pixel below-right of center
"""

import math
from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3

# Default image size and vertical field of view
DEFAULT_WIDTH = 1024
DEFAULT_HEIGHT = 768
DEFAULT_FOV = math.pi / 3.0


@dataclass(frozen=True)
class PinholeCamera:
    """Configuration for a pinhole (perspective) camera.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        fov: Vertical field of view in radians, in (0, pi).
        origin: Camera position in world space (x, y, z).
    """

    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    fov: float = DEFAULT_FOV
    origin: tuple[float, float, float] = (0.0, 0.0, 0.0)

    def __post_init__(self) -> None:
        for name in ("width", "height"):
            value = getattr(self, name)
            if isinstance(value, bool) or int(value) != value or value <= 0:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")
            object.__setattr__(self, name, int(value))
        fov = float(self.fov)
        if not (0.0 < fov < math.pi):
            raise ValueError(f"fov must be in (0, pi) radians, got {self.fov!r}")
        origin = tuple(float(c) for c in self.origin)
        if len(origin) != 3 or not all(math.isfinite(c) for c in origin):
            raise ValueError(f"origin must be 3 finite numbers, got {self.origin!r}")
        object.__setattr__(self, "fov", fov)
        object.__setattr__(self, "origin", origin)

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height."""
        return self.width / self.height

    @property
    def tan_half_fov(self) -> float:
        """tan(fov / 2), the half-height of the image plane."""
        return math.tan(self.fov / 2.0)

    def direction(self, i: float, j: float) -> tuple[float, float, float]:
        """Compute the unit primary ray direction for pixel (i, j) in Python.

        Args:
            i: Pixel column (0 = left).
            j: Pixel row (0 = top).

        Returns:
            The normalized direction as (x, y, z).
        """
        scale = self.tan_half_fov
        x = (2.0 * (i + 0.5) / self.width - 1.0) * scale * self.aspect_ratio
        y = -(2.0 * (j + 0.5) / self.height - 1.0) * scale
        norm = math.sqrt(x * x + y * y + 1.0)
        return (x / norm, y / norm, -1.0 / norm)

    def pixel_of(self, direction: tuple[float, float, float]) -> tuple[int, int]:
        """Find the pixel whose primary ray is closest to a direction.

        Inverse of direction(); useful for locating a world point in the
        image. The direction must point into the half-space z < 0.

        Raises:
            ValueError: If the direction does not point in front of the camera.
        """
        dx, dy, dz = direction
        if dz >= 0.0:
            raise ValueError(f"direction must have negative z, got {direction!r}")
        x = dx / -dz
        y = dy / -dz
        scale = self.tan_half_fov
        i = ((x / (scale * self.aspect_ratio)) + 1.0) * self.width / 2.0 - 0.5
        j = ((-y / scale) + 1.0) * self.height / 2.0 - 0.5
        return int(round(i)), int(round(j))


@ti.func
def primary_direction(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    tan_half_fov: ti.f32,
) -> vec3:
    """Generate the unit primary ray direction for a pixel.

    Args:
        pixel_i: Pixel x-coordinate (0 = left).
        pixel_j: Pixel y-coordinate (0 = top).
        width: Image width in pixels.
        height: Image height in pixels.
        tan_half_fov: tan(fov / 2) of the camera.

    Returns:
        The normalized direction through the pixel center.
    """
    w = ti.cast(width, ti.f32)
    h = ti.cast(height, ti.f32)
    x = (2.0 * (ti.cast(pixel_i, ti.f32) + 0.5) / w - 1.0) * tan_half_fov * w / h
    y = -(2.0 * (ti.cast(pixel_j, ti.f32) + 0.5) / h - 1.0) * tan_half_fov
    return tm.normalize(vec3(x, y, -1.0))
