"""Tests for the recursive ray caster.

Tests cover:
- Render settings validation
- Background on miss and beyond the maximum depth
- Mirror reflection and refraction paths
- Total internal reflection fallback
- Pruning of zero-weight branches and the per-pixel ray bound
"""

import math

import pytest


BACKGROUND = (0.2, 0.7, 0.8)


def _integrator(spheres=(), lights=(), track_stats=False, **settings_kwargs):
    from src.whitted.core.integrator import RenderSettings, WhittedIntegrator
    from src.whitted.scene.config import SceneConfig
    from src.whitted.scene.store import SceneStore

    settings = RenderSettings(**settings_kwargs)
    store = SceneStore(
        SceneConfig(spheres=spheres, lights=lights),
        max_distance=settings.max_distance,
        track_stats=track_stats,
    )
    return WhittedIntegrator(store, settings)


def _assert_color(actual, expected, tol=1e-5):
    for a, e in zip(actual, expected):
        assert abs(a - e) < tol, f"{actual} != {expected}"


def _sphere(center, radius, material):
    from src.whitted.scene.config import Sphere

    return Sphere(center=center, radius=radius, material=material)


class TestRenderSettings:
    """Tests for RenderSettings."""

    def test_defaults(self):
        """Test the default constants."""
        from src.whitted.core.integrator import RenderSettings

        settings = RenderSettings()
        assert settings.max_depth == 4
        assert settings.epsilon == 1e-3
        assert settings.max_distance == 1000.0
        assert settings.background == BACKGROUND

    @pytest.mark.parametrize("max_depth,rays", [(0, 1), (1, 3), (4, 31)])
    def test_max_rays_per_pixel(self, max_depth, rays):
        """Test the binary recursion tree bound 2^(d+1) - 1."""
        from src.whitted.core.integrator import RenderSettings

        assert RenderSettings(max_depth=max_depth).max_rays_per_pixel == rays

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_depth": -1},
            {"max_depth": 1.5},
            {"epsilon": 0.0},
            {"max_distance": -10.0},
            {"background": (0.0, 0.0)},
        ],
    )
    def test_invalid_settings(self, kwargs):
        """Test invalid settings are rejected at construction."""
        from src.whitted.core.integrator import RenderSettings

        with pytest.raises(ValueError):
            RenderSettings(**kwargs)

    def test_store_cutoff_must_match(self):
        """Test the integrator refuses a store with a different cutoff."""
        from src.whitted.core.integrator import RenderSettings, WhittedIntegrator
        from src.whitted.scene.config import SceneConfig
        from src.whitted.scene.store import SceneStore

        store = SceneStore(SceneConfig(), max_distance=500.0)
        with pytest.raises(ValueError):
            WhittedIntegrator(store, RenderSettings())


class TestBackground:
    """Tests for rays that end in the background."""

    def test_miss_returns_background(self):
        """Test a ray in an empty scene returns the background color."""
        integrator = _integrator()
        _assert_color(integrator.cast_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0)), BACKGROUND)

    def test_custom_background(self):
        """Test the background color is configurable."""
        integrator = _integrator(background=(1.0, 0.0, 0.5))
        _assert_color(integrator.cast_ray((0.0, 0.0, 0.0), (0.0, 1.0, 0.0)), (1.0, 0.0, 0.5))

    def test_beyond_max_depth_skips_intersection(self, ivory):
        """Test depth > max_depth returns the background without intersecting."""
        integrator = _integrator(
            spheres=[_sphere((0.0, 0.0, -10.0), 1.0, ivory)], track_stats=True
        )
        integrator.scene.reset_stats()
        color = integrator.cast_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), depth=5)
        _assert_color(color, BACKGROUND)
        assert integrator.scene.intersect_count == 0

    def test_at_max_depth_children_are_background(self, mirror):
        """Test children of a ray at max_depth are not intersected."""
        integrator = _integrator(
            spheres=[_sphere((0.0, 0.0, -10.0), 1.0, mirror)], track_stats=True
        )
        integrator.scene.reset_stats()
        color = integrator.cast_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), depth=4)
        _assert_color(color, BACKGROUND)
        assert integrator.scene.intersect_count == 1

    def test_invalid_arguments(self):
        """Test negative depths and zero directions are rejected."""
        integrator = _integrator()
        with pytest.raises(ValueError):
            integrator.cast_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), depth=-1)
        with pytest.raises(ValueError):
            integrator.cast_ray((0.0, 0.0, 0.0), (0.0, 0.0, 0.0))


class TestLocalShading:
    """Tests for the diffuse and specular terms of a hit."""

    def test_unlit_ivory_reflects_background(self, ivory):
        """Test an unlit ivory sphere shows only its reflected background."""
        integrator = _integrator(spheres=[_sphere((1.0, 1.0, -10.0), 1.0, ivory)])
        norm = math.sqrt(1.0 + 1.0 + 100.0)
        color = integrator.cast_ray((0.0, 0.0, 0.0), (1.0 / norm, 1.0 / norm, -10.0 / norm))
        _assert_color(color, tuple(0.1 * c for c in BACKGROUND))

    def test_lit_diffuse_sphere(self):
        """Test a light behind the camera shades the sphere's front."""
        from src.whitted.scene.config import Material, PointLight

        white = Material(albedo=(1.0, 0.0, 0.0, 0.0), diffuse_color=(1.0, 0.5, 0.25))
        integrator = _integrator(
            spheres=[_sphere((0.0, 0.0, -10.0), 1.0, white)],
            lights=[PointLight(position=(0.0, 0.0, 10.0), intensity=2.0)],
        )
        color = integrator.cast_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        # Light along the normal: diffuse = intensity
        _assert_color(color, (2.0, 1.0, 0.5), tol=1e-4)


class TestReflection:
    """Tests for mirror reflection."""

    def test_mirror_equals_cast_of_reflected_ray(self, mirror):
        """Test a pure mirror shows exactly what its reflected ray sees."""
        from src.whitted.scene.config import PointLight
        from src.whitted.scene.demo import RED_RUBBER

        integrator = _integrator(
            spheres=[
                _sphere((0.0, 0.0, -10.0), 1.0, mirror),
                _sphere((9.16, 0.0, -4.13), 1.5, RED_RUBBER),
            ],
            lights=[PointLight(position=(0.0, 20.0, 0.0), intensity=1.5)],
        )
        origin = (0.5, 0.0, 0.0)
        direction = (0.0, 0.0, -1.0)

        info = integrator.scene.query(origin, direction)
        assert info.hit
        n = info.normal
        d_dot_n = sum(d * c for d, c in zip(direction, n))
        reflected = tuple(d - 2.0 * d_dot_n * c for d, c in zip(direction, n))
        offset = tuple(p + 1e-3 * c for p, c in zip(info.point, n))

        expected = integrator.cast_ray(offset, reflected, depth=1)
        actual = integrator.cast_ray(origin, direction)
        _assert_color(actual, expected, tol=1e-3)
        # The reflected ray lands on the rubber sphere, not the sky
        assert abs(actual[2] - BACKGROUND[2]) > 0.1


class TestRefraction:
    """Tests for transmission through dielectric spheres."""

    def test_index_one_sphere_is_transparent(self):
        """Test a fully transmissive sphere with index 1 does not bend rays."""
        from src.whitted.scene.config import Material, PointLight
        from src.whitted.scene.demo import RED_RUBBER

        clear = Material(refractive_index=1.0, albedo=(0.0, 0.0, 0.0, 1.0))
        target = _sphere((0.0, 0.0, -20.0), 1.0, RED_RUBBER)
        light = PointLight(position=(0.0, 20.0, -15.0), intensity=1.5)

        with_glass = _integrator(
            spheres=[_sphere((0.0, 0.0, -10.0), 1.0, clear), target], lights=[light]
        )
        without_glass = _integrator(spheres=[target], lights=[light])

        expected = without_glass.cast_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        actual = with_glass.cast_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        _assert_color(actual, expected, tol=1e-3)

    def test_total_internal_reflection_returns_background(self):
        """Test a steep exit from glass contributes the background."""
        from src.whitted.scene.config import Material

        glass = Material(refractive_index=1.5, albedo=(0.0, 0.0, 0.0, 1.0))
        integrator = _integrator(spheres=[_sphere((0.0, 0.0, 0.0), 1.0, glass)])
        # Exit at 53 degrees from the normal, past the 41.8 degree critical angle
        color = integrator.cast_ray((0.0, -0.8, 0.0), (1.0, 0.0, 0.0))
        _assert_color(color, BACKGROUND)


class TestRayBudget:
    """Tests for branch pruning and the recursion bound."""

    def test_zero_weight_branches_are_pruned(self, ivory):
        """Test refraction is not traced for a material with albedo[3] == 0."""
        integrator = _integrator(
            spheres=[_sphere((0.0, 0.0, -10.0), 1.0, ivory)], track_stats=True
        )
        integrator.scene.reset_stats()
        integrator.cast_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        # Primary ray plus the escaping reflection ray
        assert integrator.scene.intersect_count == 2

    def test_demo_scene_respects_ray_bound(self):
        """Test every primary ray stays within the recursion tree bound."""
        from src.whitted.camera.pinhole import PinholeCamera
        from src.whitted.core.integrator import RenderSettings, WhittedIntegrator
        from src.whitted.scene.demo import create_demo_scene
        from src.whitted.scene.store import SceneStore

        scene = create_demo_scene()
        settings = RenderSettings()
        store = SceneStore(scene, track_stats=True)
        integrator = WhittedIntegrator(store, settings)
        camera = PinholeCamera(width=16, height=12)

        # Each traced ray does one intersection plus one shadow ray per light
        bound = settings.max_rays_per_pixel * (1 + len(scene.lights))
        for j in range(camera.height):
            for i in range(camera.width):
                store.reset_stats()
                color = integrator.cast_ray(camera.origin, camera.direction(i, j))
                assert store.intersect_count <= bound
                assert all(math.isfinite(c) for c in color)
