"""Whitted-style recursive ray caster.

This module implements the light transport of the renderer: local Phong
shading with hard shadows plus recursively traced mirror reflection and
dielectric refraction, bounded by a maximum recursion depth.

For a ray at recursion depth d the color is

    background                              if d > max_depth or the ray misses
    diffuse_color * diffuse  * albedo[0]
      + white     * specular * albedo[1]
      + cast(reflected ray, d + 1) * albedo[2]
      + cast(refracted ray, d + 1) * albedo[3]   otherwise

Taichi functions are inlined and cannot recurse, so the recursion tree is
walked depth first with a small per-ray stack. The combination above is
linear in the child colors, so every tree node simply adds its local color
(or the background) scaled by the product of reflection/refraction weights
along its path. A tree of height max_depth + 1 needs at most max_depth + 2
stack entries.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.core.integrator import RenderSettings, WhittedIntegrator
    >>> from src.whitted.scene.demo import create_demo_scene
    >>> from src.whitted.scene.store import SceneStore
    >>>
    >>> settings = RenderSettings()
    >>> store = SceneStore(create_demo_scene(), max_distance=settings.max_distance)
    >>> integrator = WhittedIntegrator(store, settings)
    >>> integrator.cast_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.whitted.camera.pinhole import primary_direction
from src.whitted.core.ray import normalize, offset_origin, reflect, refract
from src.whitted.materials.phong import PhongShader
from src.whitted.scene.store import DEFAULT_MAX_DISTANCE, SceneStore, _normalized

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Maximum recursion depth of reflection/refraction rays
MAX_DEPTH = 4

# Ray offset epsilon to avoid self-intersection
RAY_EPSILON = 1e-3

# Background color for rays that escape the scene
BACKGROUND_COLOR = (0.2, 0.7, 0.8)


@dataclass(frozen=True)
class RenderSettings:
    """Tunable constants of the ray caster.

    Attributes:
        max_depth: Deepest recursion level that is still shaded. Rays at a
            greater depth return the background color.
        epsilon: Offset applied to shadow, reflection and refraction ray
            origins to avoid self-intersection.
        max_distance: Nearest-hit cutoff; farther hits count as misses.
        background: Color returned by rays that miss every sphere.
    """

    max_depth: int = MAX_DEPTH
    epsilon: float = RAY_EPSILON
    max_distance: float = DEFAULT_MAX_DISTANCE
    background: tuple[float, float, float] = BACKGROUND_COLOR

    def __post_init__(self) -> None:
        if isinstance(self.max_depth, bool) or int(self.max_depth) != self.max_depth:
            raise ValueError(f"max_depth must be an integer, got {self.max_depth!r}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
        if not (math.isfinite(self.epsilon) and self.epsilon > 0.0):
            raise ValueError(f"epsilon must be positive and finite, got {self.epsilon}")
        if not (math.isfinite(self.max_distance) and self.max_distance > 0.0):
            raise ValueError(f"max_distance must be positive and finite, got {self.max_distance}")
        background = tuple(float(c) for c in self.background)
        if len(background) != 3 or not all(math.isfinite(c) for c in background):
            raise ValueError(f"background must be 3 finite numbers, got {self.background!r}")
        object.__setattr__(self, "max_depth", int(self.max_depth))
        object.__setattr__(self, "background", background)

    @property
    def max_rays_per_pixel(self) -> int:
        """Upper bound on rays cast per primary ray (binary recursion tree)."""
        return 2 ** (self.max_depth + 1) - 1


@ti.data_oriented
class WhittedIntegrator:
    """Recursive ray caster over an immutable scene.

    Attributes:
        scene: The scene store used for all intersection queries.
        settings: Recursion depth, offsets and background color.
        shader: The Phong shader sharing the same scene.
    """

    def __init__(self, scene: SceneStore, settings: RenderSettings | None = None) -> None:
        """Create an integrator for a scene.

        Args:
            scene: The scene to render.
            settings: Render settings. Defaults to RenderSettings().

        Raises:
            ValueError: If the store's cutoff disagrees with settings.max_distance.
        """
        self.settings = settings if settings is not None else RenderSettings()
        if scene.max_distance != self.settings.max_distance:
            raise ValueError(
                f"SceneStore max_distance ({scene.max_distance}) does not match "
                f"settings.max_distance ({self.settings.max_distance})"
            )
        self.scene = scene
        self.shader = PhongShader(scene, epsilon=self.settings.epsilon)

        self.max_depth = self.settings.max_depth
        self.epsilon = self.settings.epsilon
        self.background = self.settings.background
        # Unpacked so kernels see plain float constants
        self._background_r, self._background_g, self._background_b = self.background
        # Exact depth-first bound for a tree of height max_depth + 1
        self._stack_size = self.max_depth + 2

        self._query_color = ti.Vector.field(3, dtype=ti.f32, shape=())

    # =========================================================================
    # Ray Casting Core
    # =========================================================================

    @ti.func
    def _local_color(self, point: vec3, normal: vec3, direction: vec3, material_id: ti.i32) -> vec3:
        """Weighted diffuse and specular color at a hit point."""
        albedo = self.scene.material_albedo[material_id]
        diffuse_color = self.scene.material_diffuse_color[material_id]
        exponent = self.scene.material_specular_exponent[material_id]
        diffuse, specular = self.shader.shade(point, normal, direction, exponent)
        return (
            diffuse_color * diffuse * albedo[0]
            + vec3(1.0, 1.0, 1.0) * specular * albedo[1]
        )

    @ti.func
    def trace(self, origin: vec3, direction: vec3, depth: ti.i32) -> vec3:
        """Compute the color seen along a ray.

        Args:
            origin: The ray origin.
            direction: The unit ray direction.
            depth: Recursion depth of this ray (0 for camera rays). Must be
                non-negative.

        Returns:
            The accumulated RGB color.
        """
        background = vec3(self._background_r, self._background_g, self._background_b)
        color = vec3(0.0, 0.0, 0.0)

        # Pending rays: origin, direction, path weight and depth
        stack_origin = ti.Matrix.zero(ti.f32, self._stack_size, 3)
        stack_direction = ti.Matrix.zero(ti.f32, self._stack_size, 3)
        stack_weight = ti.Vector.zero(ti.f32, self._stack_size)
        stack_depth = ti.Vector.zero(ti.i32, self._stack_size)

        for c in ti.static(range(3)):
            stack_origin[0, c] = origin[c]
            stack_direction[0, c] = direction[c]
        stack_weight[0] = 1.0
        stack_depth[0] = depth
        top = 1

        while top > 0:
            top -= 1
            ray_origin = vec3(stack_origin[top, 0], stack_origin[top, 1], stack_origin[top, 2])
            ray_direction = vec3(
                stack_direction[top, 0], stack_direction[top, 1], stack_direction[top, 2]
            )
            weight = stack_weight[top]
            ray_depth = stack_depth[top]

            if ray_depth > self.max_depth:
                # Recursion exhausted before intersecting
                color += weight * background
            else:
                rec = self.scene.intersect(ray_origin, ray_direction)
                if rec.hit == 0:
                    color += weight * background
                else:
                    material_id = rec.material_id
                    albedo = self.scene.material_albedo[material_id]
                    point = rec.point
                    normal = rec.normal

                    color += weight * self._local_color(point, normal, ray_direction, material_id)

                    # Refraction is pushed first so reflection is traced first
                    refract_weight = weight * albedo[3]
                    if refract_weight != 0.0:
                        refract_dir = normalize(
                            refract(
                                ray_direction,
                                normal,
                                self.scene.material_refractive_index[material_id],
                            )
                        )
                        refract_origin = offset_origin(point, normal, refract_dir, self.epsilon)
                        for c in ti.static(range(3)):
                            stack_origin[top, c] = refract_origin[c]
                            stack_direction[top, c] = refract_dir[c]
                        stack_weight[top] = refract_weight
                        stack_depth[top] = ray_depth + 1
                        top += 1

                    reflect_weight = weight * albedo[2]
                    if reflect_weight != 0.0:
                        reflect_dir = normalize(reflect(ray_direction, normal))
                        reflect_origin = offset_origin(point, normal, reflect_dir, self.epsilon)
                        for c in ti.static(range(3)):
                            stack_origin[top, c] = reflect_origin[c]
                            stack_direction[top, c] = reflect_dir[c]
                        stack_weight[top] = reflect_weight
                        stack_depth[top] = ray_depth + 1
                        top += 1

        return color

    # =========================================================================
    # Rendering Kernels
    # =========================================================================

    @ti.kernel
    def _render_kernel(
        self,
        framebuffer: ti.types.ndarray(dtype=vec3, ndim=2),
        camera_origin: vec3,
        tan_half_fov: ti.f32,
    ):
        """Cast one primary ray per pixel into a (height, width) buffer.

        Args:
            framebuffer: Output array of shape (height, width) with vec3 items.
            camera_origin: Position of the pinhole.
            tan_half_fov: tan(fov / 2) of the camera.
        """
        height = framebuffer.shape[0]
        width = framebuffer.shape[1]
        for j, i in ti.ndrange(height, width):
            direction = primary_direction(i, j, width, height, tan_half_fov)
            framebuffer[j, i] = self.trace(camera_origin, direction, 0)

    @ti.kernel
    def _cast_ray_kernel(self, origin: vec3, direction: vec3, depth: ti.i32):
        for _ in range(1):
            self._query_color[None] = self.trace(origin, direction, depth)

    # =========================================================================
    # Python API
    # =========================================================================

    def cast_ray(
        self,
        origin: Sequence[float],
        direction: Sequence[float],
        depth: int = 0,
    ) -> tuple[float, float, float]:
        """Cast a single ray from Python.

        Args:
            origin: Ray origin (x, y, z).
            direction: Ray direction; normalized before casting.
            depth: Recursion depth to start at (0 for camera rays).

        Returns:
            Tuple of (R, G, B) color values.

        Raises:
            ValueError: If depth is negative or direction is the zero vector.
        """
        if depth < 0:
            raise ValueError(f"depth must be >= 0, got {depth}")
        unit = _normalized(direction)
        self._cast_ray_kernel(vec3(*(float(c) for c in origin)), vec3(*unit), int(depth))
        color = self._query_color[None]
        return (float(color[0]), float(color[1]), float(color[2]))

    def render_into(
        self,
        framebuffer: npt.NDArray[np.float32],
        tan_half_fov: float,
        camera_origin: Sequence[float] = (0.0, 0.0, 0.0),
    ) -> None:
        """Render a frame into a preallocated float32 array.

        Args:
            framebuffer: Array of shape (height, width, 3), dtype float32.
            tan_half_fov: tan(fov / 2) of the camera.
            camera_origin: Position of the pinhole.
        """
        if framebuffer.ndim != 3 or framebuffer.shape[2] != 3 or framebuffer.dtype != np.float32:
            raise ValueError(
                f"framebuffer must be a float32 array of shape (H, W, 3), "
                f"got {framebuffer.dtype} {framebuffer.shape}"
            )
        self._render_kernel(
            framebuffer,
            vec3(*(float(c) for c in camera_origin)),
            float(tan_half_fov),
        )
