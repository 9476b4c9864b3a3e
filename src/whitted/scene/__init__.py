"""Scene module for scene description, storage and intersection.

Components:
    config: Immutable Material, Sphere, PointLight and SceneConfig values
    store: GPU-resident SceneStore with the nearest-hit intersector
    demo: Built-in demo scenes
    loader: JSON scene files (import directly, see note below)

A scene is described once with the config dataclasses, validated on
construction, and uploaded to a SceneStore that is read-only for the rest
of its life.
"""

from .config import Material, PointLight, SceneConfig, SceneConfigError, Sphere
from .demo import GLASS, IVORY, MIRROR, RED_RUBBER, create_demo_scene, create_single_sphere_scene
from .store import DEFAULT_MAX_DISTANCE, HitInfo, SceneHitRecord, SceneStore

# Note: loader is NOT imported here to avoid circular imports (it depends on
# core.integrator, which depends on the store). Import it from
# src.whitted.scene.loader.

__all__ = [
    # Scene description
    "Material",
    "Sphere",
    "PointLight",
    "SceneConfig",
    "SceneConfigError",
    # Scene store
    "SceneStore",
    "SceneHitRecord",
    "HitInfo",
    "DEFAULT_MAX_DISTANCE",
    # Demo scenes
    "create_demo_scene",
    "create_single_sphere_scene",
    "IVORY",
    "GLASS",
    "RED_RUBBER",
    "MIRROR",
]
