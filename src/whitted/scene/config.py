"""Immutable scene description: materials, spheres and point lights.

These are plain Python value objects. They are validated on construction so
that a malformed scene fails before any rendering work starts, and they are
frozen so the same scene can be shared between renders.

Example:
    >>> ivory = Material(
    ...     albedo=(0.6, 0.3, 0.1, 0.0),
    ...     diffuse_color=(0.4, 0.4, 0.3),
    ...     specular_exponent=50.0,
    ... )
    >>> scene = SceneConfig(
    ...     spheres=[Sphere(center=(-3.0, 0.0, -16.0), radius=2.0, material=ivory)],
    ...     lights=[PointLight(position=(-20.0, 20.0, 20.0), intensity=1.5)],
    ... )
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field


class SceneConfigError(ValueError):
    """Raised when a scene description is malformed."""


def _as_vector(name: str, values: Sequence[float], size: int = 3) -> tuple[float, ...]:
    """Convert a sequence to a tuple of finite floats of the given size.

    Raises:
        ValueError: If the arity is wrong or a component is not finite.
    """
    try:
        result = tuple(float(v) for v in values)
    except TypeError as e:
        raise ValueError(f"{name} must be a sequence of {size} numbers, got {values!r}") from e
    if len(result) != size:
        raise ValueError(f"{name} must have {size} components, got {len(result)}")
    if not all(math.isfinite(v) for v in result):
        raise ValueError(f"{name} components must be finite, got {result}")
    return result


def _as_finite(name: str, value: float) -> float:
    result = float(value)
    if not math.isfinite(result):
        raise ValueError(f"{name} must be finite, got {value!r}")
    return result


@dataclass(frozen=True)
class Material:
    """Surface appearance of a sphere.

    Attributes:
        refractive_index: Index of refraction. 1.0 means the material does
            not bend transmitted rays.
        albedo: Weights of the (diffuse, specular, reflection, refraction)
            contributions. They need not sum to 1.
        diffuse_color: RGB color modulating the diffuse term.
        specular_exponent: Phong shininess (>= 0).
    """

    refractive_index: float = 1.0
    albedo: tuple[float, float, float, float] = (1.0, 0.0, 0.0, 0.0)
    diffuse_color: tuple[float, float, float] = (0.0, 0.0, 0.0)
    specular_exponent: float = 0.0

    def __post_init__(self) -> None:
        refractive_index = _as_finite("refractive_index", self.refractive_index)
        if refractive_index <= 0.0:
            raise ValueError(f"refractive_index must be positive, got {refractive_index}")
        specular_exponent = _as_finite("specular_exponent", self.specular_exponent)
        if specular_exponent < 0.0:
            raise ValueError(f"specular_exponent must be >= 0, got {specular_exponent}")

        object.__setattr__(self, "refractive_index", refractive_index)
        object.__setattr__(self, "albedo", _as_vector("albedo", self.albedo, size=4))
        object.__setattr__(self, "diffuse_color", _as_vector("diffuse_color", self.diffuse_color))
        object.__setattr__(self, "specular_exponent", specular_exponent)


@dataclass(frozen=True)
class Sphere:
    """A sphere primitive.

    Attributes:
        center: Center point (x, y, z).
        radius: Radius, strictly positive.
        material: Surface material.
    """

    center: tuple[float, float, float]
    radius: float
    material: Material

    def __post_init__(self) -> None:
        radius = _as_finite("radius", self.radius)
        if radius <= 0.0:
            raise ValueError(f"Sphere radius must be positive, got {radius}")
        if not isinstance(self.material, Material):
            raise TypeError(f"material must be a Material, got {type(self.material).__name__}")
        object.__setattr__(self, "center", _as_vector("center", self.center))
        object.__setattr__(self, "radius", radius)


@dataclass(frozen=True)
class PointLight:
    """An omnidirectional point light.

    Attributes:
        position: Light position (x, y, z).
        intensity: Scalar intensity, strictly positive.
    """

    position: tuple[float, float, float]
    intensity: float

    def __post_init__(self) -> None:
        intensity = _as_finite("intensity", self.intensity)
        if intensity <= 0.0:
            raise ValueError(f"Light intensity must be positive, got {intensity}")
        object.__setattr__(self, "position", _as_vector("position", self.position))
        object.__setattr__(self, "intensity", intensity)


@dataclass(frozen=True)
class SceneConfig:
    """The full static scene: spheres and lights.

    Lists are converted to tuples so that the configuration stays immutable
    once built.

    Attributes:
        spheres: Sphere primitives, intersected in this order.
        lights: Point lights used for shading.
    """

    spheres: tuple[Sphere, ...] = field(default_factory=tuple)
    lights: tuple[PointLight, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        spheres = tuple(self.spheres)
        lights = tuple(self.lights)
        for sphere in spheres:
            if not isinstance(sphere, Sphere):
                raise TypeError(f"spheres must contain Sphere objects, got {type(sphere).__name__}")
        for light in lights:
            if not isinstance(light, PointLight):
                raise TypeError(f"lights must contain PointLight objects, got {type(light).__name__}")
        object.__setattr__(self, "spheres", spheres)
        object.__setattr__(self, "lights", lights)

    @property
    def materials(self) -> tuple[Material, ...]:
        """Distinct materials in first-use order."""
        return unique_materials(sphere.material for sphere in self.spheres)


def unique_materials(materials: Iterable[Material]) -> tuple[Material, ...]:
    """De-duplicate equal materials, keeping first-use order."""
    seen: dict[Material, None] = {}
    for material in materials:
        seen.setdefault(material, None)
    return tuple(seen)
