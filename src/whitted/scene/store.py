"""Scene store and scene-level ray intersection.

The SceneStore copies an immutable SceneConfig into Taichi fields once, at
construction, and exposes the nearest-hit query used for primary, shadow,
reflection and refraction rays. It has no mutators: to change the scene,
build a new store.

Spheres are intersected by exhaustive linear scan. Among all valid hits the
smallest distance wins; ties keep the sphere that comes first in the scene.
A nearest distance at or beyond max_distance is reported as a miss.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.scene.demo import create_demo_scene
    >>> from src.whitted.scene.store import SceneStore
    >>> store = SceneStore(create_demo_scene())
    >>> info = store.query((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
    >>> # Use store.intersect(origin, direction) within a Taichi kernel
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from src.whitted.core.ray import length_squared
from src.whitted.geometry.sphere import hit_sphere, sphere_normal
from src.whitted.scene.config import Material, SceneConfig

# Type alias for 3D vectors
vec3 = tm.vec3
vec4 = tm.vec4

# Default distance beyond which a hit counts as "no geometry in range"
DEFAULT_MAX_DISTANCE = 1000.0

# Initial nearest distance, larger than any cutoff in practice
_FAR = 1e30


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection.

    Attributes:
        hit: Whether the ray intersected any sphere (1 if hit, 0 if miss).
        t: Distance along the (unit) ray direction to the hit point.
            Only valid if hit == 1.
        point: The 3D point where the ray intersected the surface.
            Only valid if hit == 1.
        normal: The outward surface normal at the hit point (unit length,
            pointing away from the sphere center). Only valid if hit == 1.
        material_id: Index into the store's material table.
            -1 indicates a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    material_id: ti.i32


@dataclass(frozen=True)
class HitInfo:
    """Python-side copy of a SceneHitRecord."""

    hit: bool
    t: float
    point: tuple[float, float, float]
    normal: tuple[float, float, float]
    material_id: int

    @property
    def material_index(self) -> int | None:
        """Material table index, or None on a miss."""
        return self.material_id if self.hit else None


def _normalized(direction: Sequence[float]) -> tuple[float, float, float]:
    """Normalize a Python-side direction, rejecting zero vectors."""
    x, y, z = (float(c) for c in direction)
    norm = math.sqrt(x * x + y * y + z * z)
    if norm == 0.0 or not math.isfinite(norm):
        raise ValueError(f"Ray direction must be a finite non-zero vector, got {direction!r}")
    return (x / norm, y / norm, z / norm)


@ti.data_oriented
class SceneStore:
    """GPU-resident, read-only copy of a scene.

    Sphere data is kept in Structure of Arrays layout; materials live in a
    separate table referenced by index so that spheres sharing a material
    share one entry.

    Attributes:
        config: The scene this store was built from.
        materials: The de-duplicated material table.
        max_distance: Nearest-hit cutoff.
    """

    def __init__(
        self,
        config: SceneConfig,
        max_distance: float = DEFAULT_MAX_DISTANCE,
        track_stats: bool = False,
    ) -> None:
        """Build the store from a scene description.

        Args:
            config: The scene to upload.
            max_distance: Hits at or beyond this distance are misses.
            track_stats: Count intersection queries (diagnostics and tests).

        Raises:
            ValueError: If max_distance is not a positive finite number.
        """
        if not (math.isfinite(max_distance) and max_distance > 0.0):
            raise ValueError(f"max_distance must be positive and finite, got {max_distance}")

        self.config = config
        self.materials: tuple[Material, ...] = config.materials
        self.max_distance = float(max_distance)
        self.num_spheres = len(config.spheres)
        self.num_lights = len(config.lights)
        self.num_materials = len(self.materials)
        self._track_stats = bool(track_stats)

        # Taichi fields cannot be empty, so keep at least one slot
        n_spheres = max(self.num_spheres, 1)
        n_lights = max(self.num_lights, 1)
        n_materials = max(self.num_materials, 1)

        self.sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=n_spheres)
        self.sphere_radii = ti.field(dtype=ti.f32, shape=n_spheres)
        self.sphere_material_ids = ti.field(dtype=ti.i32, shape=n_spheres)

        self.material_refractive_index = ti.field(dtype=ti.f32, shape=n_materials)
        self.material_albedo = ti.Vector.field(4, dtype=ti.f32, shape=n_materials)
        self.material_diffuse_color = ti.Vector.field(3, dtype=ti.f32, shape=n_materials)
        self.material_specular_exponent = ti.field(dtype=ti.f32, shape=n_materials)

        self.light_positions = ti.Vector.field(3, dtype=ti.f32, shape=n_lights)
        self.light_intensities = ti.field(dtype=ti.f32, shape=n_lights)

        self._intersect_count = ti.field(dtype=ti.i32, shape=())

        # Result slots for single-ray queries from Python
        self._query_hit = ti.field(dtype=ti.i32, shape=())
        self._query_t = ti.field(dtype=ti.f32, shape=())
        self._query_point = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._query_normal = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._query_material_id = ti.field(dtype=ti.i32, shape=())

        self._upload()

    def _upload(self) -> None:
        """Copy the scene description into the Taichi fields."""
        material_index = {material: idx for idx, material in enumerate(self.materials)}

        for idx, material in enumerate(self.materials):
            self.material_refractive_index[idx] = material.refractive_index
            self.material_albedo[idx] = list(material.albedo)
            self.material_diffuse_color[idx] = list(material.diffuse_color)
            self.material_specular_exponent[idx] = material.specular_exponent

        for idx, sphere in enumerate(self.config.spheres):
            self.sphere_centers[idx] = list(sphere.center)
            self.sphere_radii[idx] = sphere.radius
            self.sphere_material_ids[idx] = material_index[sphere.material]

        for idx, light in enumerate(self.config.lights):
            self.light_positions[idx] = list(light.position)
            self.light_intensities[idx] = light.intensity

    # =========================================================================
    # Statistics
    # =========================================================================

    @property
    def track_stats(self) -> bool:
        """Whether intersection queries are being counted."""
        return self._track_stats

    @property
    def intersect_count(self) -> int:
        """Number of intersection queries since the last reset.

        Always 0 when the store was built with track_stats=False.
        """
        return int(self._intersect_count[None])

    def reset_stats(self) -> None:
        """Reset the intersection counter."""
        self._intersect_count[None] = 0

    # =========================================================================
    # Intersection (Taichi-side)
    # =========================================================================

    @ti.func
    def _make_miss_record(self) -> SceneHitRecord:
        """Create a SceneHitRecord indicating no intersection."""
        return SceneHitRecord(
            hit=0,
            t=0.0,
            point=vec3(0.0, 0.0, 0.0),
            normal=vec3(0.0, 0.0, 0.0),
            material_id=-1,
        )

    @ti.func
    def intersect(self, ray_origin: vec3, ray_direction: vec3) -> SceneHitRecord:
        """Find the nearest sphere hit along a ray.

        Args:
            ray_origin: The starting point of the ray.
            ray_direction: The unit direction of the ray. A zero vector is
                reported as a miss.

        Returns:
            A SceneHitRecord for the nearest hit closer than max_distance,
            or a miss record.
        """
        if ti.static(self._track_stats):
            ti.atomic_add(self._intersect_count[None], 1)

        result = self._make_miss_record()

        if length_squared(ray_direction) > 0.0:
            nearest_t = _FAR
            nearest_idx = -1
            for i in range(self.num_spheres):
                did_hit, t = hit_sphere(
                    ray_origin, ray_direction, self.sphere_centers[i], self.sphere_radii[i]
                )
                if did_hit == 1 and t < nearest_t:
                    nearest_t = t
                    nearest_idx = i

            if nearest_idx >= 0 and nearest_t < self.max_distance:
                point = ray_origin + nearest_t * ray_direction
                result = SceneHitRecord(
                    hit=1,
                    t=nearest_t,
                    point=point,
                    normal=sphere_normal(point, self.sphere_centers[nearest_idx]),
                    material_id=self.sphere_material_ids[nearest_idx],
                )

        return result

    @ti.kernel
    def _query_kernel(self, ray_origin: vec3, ray_direction: vec3):
        # Single-iteration outer loop keeps the sphere scan serial
        for _ in range(1):
            rec = self.intersect(ray_origin, ray_direction)
            self._query_hit[None] = rec.hit
            self._query_t[None] = rec.t
            self._query_point[None] = rec.point
            self._query_normal[None] = rec.normal
            self._query_material_id[None] = rec.material_id

    # =========================================================================
    # Python API
    # =========================================================================

    def query(
        self,
        origin: Sequence[float],
        direction: Sequence[float],
    ) -> HitInfo:
        """Intersect a single ray from Python.

        Args:
            origin: Ray origin (x, y, z).
            direction: Ray direction; normalized before the query.

        Returns:
            A HitInfo with the nearest hit, or hit=False.

        Raises:
            ValueError: If direction is the zero vector.
        """
        unit = _normalized(direction)
        self._query_kernel(vec3(*(float(c) for c in origin)), vec3(*unit))
        point = self._query_point[None]
        normal = self._query_normal[None]
        return HitInfo(
            hit=bool(self._query_hit[None]),
            t=float(self._query_t[None]),
            point=(float(point[0]), float(point[1]), float(point[2])),
            normal=(float(normal[0]), float(normal[1]), float(normal[2])),
            material_id=int(self._query_material_id[None]),
        )

    def material(self, material_id: int) -> Material:
        """Look up a material table entry."""
        return self.materials[material_id]

    def __repr__(self) -> str:
        return (
            f"SceneStore(spheres={self.num_spheres}, lights={self.num_lights}, "
            f"materials={self.num_materials}, max_distance={self.max_distance})"
        )
