"""Built-in demo scenes.

The demo scene is the classic four-sphere arrangement: an ivory sphere, a
glass sphere, a red rubber sphere and a mirror, lit by three point lights.
The single-sphere scene places one ivory sphere in front of the camera and
is handy as a smoke test.

Example:
    >>> from src.whitted.scene.demo import create_demo_scene
    >>> scene = create_demo_scene()
    >>> len(scene.spheres), len(scene.lights)
    (4, 3)
"""

from src.whitted.scene.config import Material, PointLight, SceneConfig, Sphere

# =============================================================================
# Materials
# =============================================================================

IVORY = Material(
    refractive_index=1.0,
    albedo=(0.6, 0.3, 0.1, 0.0),
    diffuse_color=(0.4, 0.4, 0.3),
    specular_exponent=50.0,
)

GLASS = Material(
    refractive_index=1.5,
    albedo=(0.0, 0.5, 0.1, 0.8),
    diffuse_color=(0.6, 0.7, 0.8),
    specular_exponent=125.0,
)

RED_RUBBER = Material(
    refractive_index=1.0,
    albedo=(0.9, 0.1, 0.0, 0.0),
    diffuse_color=(0.3, 0.1, 0.1),
    specular_exponent=10.0,
)

MIRROR = Material(
    refractive_index=1.0,
    albedo=(0.0, 10.0, 0.8, 0.0),
    diffuse_color=(1.0, 1.0, 1.0),
    specular_exponent=1425.0,
)


# =============================================================================
# Scene Factories
# =============================================================================


def create_demo_scene() -> SceneConfig:
    """Create the four-sphere, three-light demo scene."""
    spheres = [
        Sphere(center=(-3.0, 0.0, -16.0), radius=2.0, material=IVORY),
        Sphere(center=(-1.0, -1.5, -12.0), radius=2.0, material=GLASS),
        Sphere(center=(1.5, -0.5, -18.0), radius=3.0, material=RED_RUBBER),
        Sphere(center=(7.0, 5.0, -18.0), radius=4.0, material=MIRROR),
    ]
    lights = [
        PointLight(position=(-20.0, 20.0, 20.0), intensity=1.5),
        PointLight(position=(30.0, 50.0, -25.0), intensity=1.8),
        PointLight(position=(30.0, 20.0, 30.0), intensity=1.7),
    ]
    return SceneConfig(spheres=spheres, lights=lights)


def create_single_sphere_scene(with_light: bool = False) -> SceneConfig:
    """Create a scene with one unit ivory sphere at (1, 1, -10).

    Args:
        with_light: Add a point light behind the camera.
    """
    lights = [PointLight(position=(-20.0, 20.0, 20.0), intensity=1.5)] if with_light else []
    return SceneConfig(
        spheres=[Sphere(center=(1.0, 1.0, -10.0), radius=1.0, material=IVORY)],
        lights=lights,
    )
