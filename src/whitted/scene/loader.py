"""Scene serialization to and from dictionaries and JSON files.

A scene file holds a named material table, the spheres referencing those
materials by name, the point lights and, optionally, camera and render
settings:

    {
      "materials": {"ivory": {"albedo": [0.6, 0.3, 0.1, 0.0],
                               "diffuse_color": [0.4, 0.4, 0.3],
                               "specular_exponent": 50.0}},
      "spheres": [{"center": [-3, 0, -16], "radius": 2, "material": "ivory"}],
      "lights": [{"position": [-20, 20, 20], "intensity": 1.5}],
      "camera": {"width": 1024, "height": 768, "fov": 1.0472},
      "render": {"max_depth": 4}
    }

Example:
    >>> from src.whitted.scene.loader import load_scene_file
    >>> scene_file = load_scene_file("examples/scenes/four_spheres.json")
    >>> scene_file.scene.spheres[0].radius
    2.0
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from src.whitted.camera.pinhole import PinholeCamera
from src.whitted.core.integrator import RenderSettings
from src.whitted.scene.config import (
    Material,
    PointLight,
    SceneConfig,
    SceneConfigError,
    Sphere,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SceneFile:
    """Everything a scene file describes.

    Attributes:
        scene: Spheres and lights.
        camera: Camera configuration (defaults when absent from the file).
        settings: Render settings (defaults when absent from the file).
    """

    scene: SceneConfig
    camera: PinholeCamera = field(default_factory=PinholeCamera)
    settings: RenderSettings = field(default_factory=RenderSettings)


def _require(data: dict[str, Any], key: str, context: str) -> Any:
    if not isinstance(data, dict):
        raise SceneConfigError(f"{context}: expected an object, got {type(data).__name__}")
    if key not in data:
        raise SceneConfigError(f"{context}: missing required key '{key}'")
    return data[key]


def _section(data: dict[str, Any], key: str, kind: type) -> Any:
    """Fetch an optional top-level section, checking its JSON type."""
    value = data.get(key, kind())
    if not isinstance(value, kind):
        expected = "an object" if kind is dict else "a list"
        raise SceneConfigError(f"{key}: expected {expected}, got {type(value).__name__}")
    return value


def _build(context: str, factory: Any, **kwargs: Any) -> Any:
    """Call a config constructor, reporting failures as SceneConfigError."""
    try:
        return factory(**kwargs)
    except (TypeError, ValueError) as e:
        raise SceneConfigError(f"{context}: {e}") from e


def _material_from_dict(name: str, data: dict[str, Any]) -> Material:
    context = f"material '{name}'"
    if not isinstance(data, dict):
        raise SceneConfigError(f"{context}: expected an object, got {type(data).__name__}")
    return _build(
        context,
        Material,
        refractive_index=data.get("refractive_index", 1.0),
        albedo=data.get("albedo", (1.0, 0.0, 0.0, 0.0)),
        diffuse_color=data.get("diffuse_color", (0.0, 0.0, 0.0)),
        specular_exponent=data.get("specular_exponent", 0.0),
    )


def _material_to_dict(material: Material) -> dict[str, Any]:
    return {
        "refractive_index": material.refractive_index,
        "albedo": list(material.albedo),
        "diffuse_color": list(material.diffuse_color),
        "specular_exponent": material.specular_exponent,
    }


def scene_from_dict(data: dict[str, Any]) -> SceneFile:
    """Build a scene (and optional camera/settings) from a dictionary.

    Args:
        data: Dictionary with 'materials', 'spheres', 'lights' and optional
            'camera' and 'render' keys.

    Returns:
        The parsed SceneFile.

    Raises:
        SceneConfigError: If the data is malformed or references an
            unknown material.
    """
    if not isinstance(data, dict):
        raise SceneConfigError(f"scene: expected an object, got {type(data).__name__}")

    materials = {
        name: _material_from_dict(name, mat_data)
        for name, mat_data in _section(data, "materials", dict).items()
    }

    spheres = []
    for idx, sphere_data in enumerate(_section(data, "spheres", list)):
        context = f"sphere {idx}"
        mat_name = _require(sphere_data, "material", context)
        if not isinstance(mat_name, str) or mat_name not in materials:
            raise SceneConfigError(f"{context}: unknown material {mat_name!r}")
        spheres.append(
            _build(
                context,
                Sphere,
                center=_require(sphere_data, "center", context),
                radius=_require(sphere_data, "radius", context),
                material=materials[mat_name],
            )
        )

    lights = []
    for idx, light_data in enumerate(_section(data, "lights", list)):
        context = f"light {idx}"
        lights.append(
            _build(
                context,
                PointLight,
                position=_require(light_data, "position", context),
                intensity=_require(light_data, "intensity", context),
            )
        )

    camera = _build("camera", PinholeCamera, **_section(data, "camera", dict))
    settings = _build("render", RenderSettings, **_section(data, "render", dict))

    return SceneFile(
        scene=SceneConfig(spheres=spheres, lights=lights),
        camera=camera,
        settings=settings,
    )


def scene_to_dict(
    scene: SceneConfig,
    camera: PinholeCamera | None = None,
    settings: RenderSettings | None = None,
) -> dict[str, Any]:
    """Export a scene to a dictionary (for JSON serialization).

    Materials are named material_0, material_1, ... in first-use order.

    Args:
        scene: The scene to export.
        camera: Optional camera to include.
        settings: Optional render settings to include.

    Returns:
        A dictionary accepted by scene_from_dict().
    """
    names = {material: f"material_{idx}" for idx, material in enumerate(scene.materials)}

    data: dict[str, Any] = {
        "materials": {names[m]: _material_to_dict(m) for m in scene.materials},
        "spheres": [
            {
                "center": list(sphere.center),
                "radius": sphere.radius,
                "material": names[sphere.material],
            }
            for sphere in scene.spheres
        ],
        "lights": [
            {"position": list(light.position), "intensity": light.intensity}
            for light in scene.lights
        ],
    }
    if camera is not None:
        data["camera"] = {
            "width": camera.width,
            "height": camera.height,
            "fov": camera.fov,
            "origin": list(camera.origin),
        }
    if settings is not None:
        data["render"] = {
            "max_depth": settings.max_depth,
            "epsilon": settings.epsilon,
            "max_distance": settings.max_distance,
            "background": list(settings.background),
        }
    return data


def load_scene_file(path: str | Path) -> SceneFile:
    """Load a scene from a JSON file.

    Raises:
        SceneConfigError: If the file is not valid JSON or the scene is
            malformed.
        OSError: If the file cannot be read.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        raise SceneConfigError(f"{path}: invalid JSON: {e}") from e

    scene_file = scene_from_dict(data)
    logger.info(
        "Loaded %s: %d spheres, %d materials, %d lights",
        path,
        len(scene_file.scene.spheres),
        len(scene_file.scene.materials),
        len(scene_file.scene.lights),
    )
    return scene_file


def save_scene_file(
    path: str | Path,
    scene: SceneConfig,
    camera: PinholeCamera | None = None,
    settings: RenderSettings | None = None,
) -> None:
    """Write a scene to a JSON file."""
    path = Path(path)
    path.write_text(json.dumps(scene_to_dict(scene, camera, settings), indent=2) + "\n")
    logger.info("Saved scene to %s", path)
