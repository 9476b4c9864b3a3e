"""Phong local illumination with hard shadows.

For each point light the shader casts a shadow ray toward the light. If any
sphere lies strictly between the shaded point and the light, that light is
skipped entirely. Otherwise it contributes

    diffuse  += intensity * max(0, L . N)
    specular += intensity * max(0, -reflect(-L, N) . D) ^ specular_exponent

where L is the unit direction to the light, N the surface normal and D the
incoming ray direction. The two sums are returned separately so that the
caller can weight them with albedo[0] and albedo[1].

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.materials.phong import PhongShader
    >>> shader = PhongShader(store, epsilon=1e-3)
    >>> diffuse, specular = shader.query(point, normal, incoming, 50.0)
"""

from collections.abc import Sequence

import taichi as ti
import taichi.math as tm

from src.whitted.core.ray import length, reflect
from src.whitted.scene.store import SceneStore

# Type alias for 3D vectors
vec3 = tm.vec3

# Default shadow ray origin offset
DEFAULT_EPSILON = 1e-3


@ti.func
def lambert_term(light_dir: vec3, normal: vec3) -> ti.f32:
    """Cosine falloff of the diffuse term, clamped at zero."""
    return tm.max(0.0, tm.dot(light_dir, normal))


@ti.func
def phong_term(light_dir: vec3, normal: vec3, incoming: vec3, exponent: ti.f32) -> ti.f32:
    """Phong specular lobe for one light.

    Args:
        light_dir: Unit direction from the surface point to the light.
        normal: Unit surface normal.
        incoming: Unit direction of the ray that hit the surface.
        exponent: Phong shininess.

    Returns:
        max(0, -reflect(-light_dir, normal) . incoming) ^ exponent
    """
    cos_alpha = tm.max(0.0, -tm.dot(reflect(-light_dir, normal), incoming))
    return cos_alpha**exponent


@ti.data_oriented
class PhongShader:
    """Evaluates diffuse and specular light sums at a surface point.

    Attributes:
        scene: The scene providing lights and shadow-ray occluders.
        epsilon: Offset of the shadow ray origin toward the light.
    """

    def __init__(self, scene: SceneStore, epsilon: float = DEFAULT_EPSILON) -> None:
        if not epsilon > 0.0:
            raise ValueError(f"epsilon must be positive, got {epsilon}")
        self.scene = scene
        self.epsilon = float(epsilon)

        self._query_diffuse = ti.field(dtype=ti.f32, shape=())
        self._query_specular = ti.field(dtype=ti.f32, shape=())

    @ti.func
    def is_occluded(self, point: vec3, light_dir: vec3, light_distance: ti.f32) -> ti.i32:
        """Check whether a sphere blocks the segment from point to a light.

        Args:
            point: The shaded surface point.
            light_dir: Unit direction toward the light.
            light_distance: Distance from point to the light.

        Returns:
            1 if a hit lies strictly closer than the light, 0 otherwise.
        """
        shadow_origin = point + light_dir * self.epsilon
        shadow = self.scene.intersect(shadow_origin, light_dir)
        occluded = 0
        if shadow.hit == 1 and shadow.t < light_distance:
            occluded = 1
        return occluded

    @ti.func
    def shade(self, point: vec3, normal: vec3, incoming: vec3, exponent: ti.f32):
        """Accumulate diffuse and specular intensity over all lights.

        Args:
            point: The surface point being shaded.
            normal: Unit surface normal at point.
            incoming: Unit direction of the ray that hit the point.
            exponent: Phong shininess of the surface material.

        Returns:
            A tuple (diffuse_sum, specular_sum).
        """
        diffuse_sum = 0.0
        specular_sum = 0.0

        for k in range(self.scene.num_lights):
            to_light = self.scene.light_positions[k] - point
            light_distance = length(to_light)
            if light_distance > 0.0:
                light_dir = to_light / light_distance
                if self.is_occluded(point, light_dir, light_distance) == 0:
                    intensity = self.scene.light_intensities[k]
                    diffuse_sum += intensity * lambert_term(light_dir, normal)
                    specular_sum += intensity * phong_term(light_dir, normal, incoming, exponent)

        return diffuse_sum, specular_sum

    @ti.kernel
    def _query_kernel(self, point: vec3, normal: vec3, incoming: vec3, exponent: ti.f32):
        for _ in range(1):
            diffuse, specular = self.shade(point, normal, incoming, exponent)
            self._query_diffuse[None] = diffuse
            self._query_specular[None] = specular

    def query(
        self,
        point: Sequence[float],
        normal: Sequence[float],
        incoming: Sequence[float],
        exponent: float,
    ) -> tuple[float, float]:
        """Shade a single point from Python.

        Args:
            point: The surface point.
            normal: Unit surface normal.
            incoming: Unit incoming ray direction.
            exponent: Phong shininess.

        Returns:
            Tuple of (diffuse_sum, specular_sum).
        """
        self._query_kernel(
            vec3(*(float(c) for c in point)),
            vec3(*(float(c) for c in normal)),
            vec3(*(float(c) for c in incoming)),
            float(exponent),
        )
        return float(self._query_diffuse[None]), float(self._query_specular[None])
