"""Frame renderer producing a single still image.

This module provides a convenient wrapper around the integrator that:
- Builds the scene store, shader and integrator from a SceneConfig
- Allocates a framebuffer per render call
- Renders every pixel with one primary ray through a pinhole camera
- Reports timing (and optionally intersection counts) through logging

Example:
    >>> import math
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.core.renderer import FrameRenderer
    >>> from src.whitted.scene.demo import create_demo_scene
    >>>
    >>> renderer = FrameRenderer(create_demo_scene())
    >>> framebuffer = renderer.render(1024, 768, math.pi / 3)
    >>> framebuffer.shape
    (768, 1024, 3)
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence

import numpy as np
import numpy.typing as npt

from src.whitted.camera.pinhole import PinholeCamera
from src.whitted.core.integrator import RenderSettings, WhittedIntegrator
from src.whitted.scene.config import SceneConfig
from src.whitted.scene.store import SceneStore

logger = logging.getLogger(__name__)

# Framebuffer layout: (height, width, 3) float32, row-major
Framebuffer = npt.NDArray[np.float32]


class FrameRenderer:
    """Renders frames of a fixed scene.

    The renderer owns the GPU-side scene store and integrator. Each call to
    render() allocates a fresh framebuffer, so frames never share storage.

    Attributes:
        scene: The scene description being rendered.
        settings: Recursion depth, offsets, cutoff and background.
    """

    def __init__(
        self,
        scene: SceneConfig,
        settings: RenderSettings | None = None,
        *,
        track_stats: bool = False,
    ) -> None:
        """Initialize the renderer.

        Args:
            scene: The scene to render.
            settings: Render settings. Defaults to RenderSettings().
            track_stats: Count intersection queries per render.
        """
        self._scene = scene
        self._settings = settings if settings is not None else RenderSettings()
        self._store = SceneStore(
            scene,
            max_distance=self._settings.max_distance,
            track_stats=track_stats,
        )
        self._integrator = WhittedIntegrator(self._store, self._settings)

    @property
    def scene(self) -> SceneConfig:
        """Get the scene description."""
        return self._scene

    @property
    def settings(self) -> RenderSettings:
        """Get the render settings."""
        return self._settings

    @property
    def store(self) -> SceneStore:
        """Get the GPU-side scene store."""
        return self._store

    @property
    def integrator(self) -> WhittedIntegrator:
        """Get the ray caster."""
        return self._integrator

    def render(self, width: int, height: int, fov: float) -> Framebuffer:
        """Render a frame from a camera at the origin looking down -z.

        Args:
            width: Image width in pixels.
            height: Image height in pixels.
            fov: Vertical field of view in radians.

        Returns:
            Float32 array of shape (height, width, 3). Colors are not
            clamped; pixel (i, j) is framebuffer[j, i].

        Raises:
            ValueError: If the camera parameters are invalid.
        """
        return self.render_camera(PinholeCamera(width=width, height=height, fov=fov))

    def render_camera(self, camera: PinholeCamera) -> Framebuffer:
        """Render a frame for a camera configuration.

        Args:
            camera: The camera to render from.

        Returns:
            Float32 array of shape (camera.height, camera.width, 3).
        """
        framebuffer = np.zeros((camera.height, camera.width, 3), dtype=np.float32)

        logger.info(
            "Rendering %dx%d, fov=%.4f rad: %d spheres, %d lights, max depth %d",
            camera.width,
            camera.height,
            camera.fov,
            self._store.num_spheres,
            self._store.num_lights,
            self._settings.max_depth,
        )
        if self._store.track_stats:
            self._store.reset_stats()

        start_time = time.perf_counter()
        self._integrator.render_into(framebuffer, camera.tan_half_fov, camera.origin)
        elapsed = time.perf_counter() - start_time

        logger.info("Rendered frame in %.3fs", elapsed)
        if self._store.track_stats:
            logger.info(
                "Intersection queries: %d (%.2f per pixel)",
                self._store.intersect_count,
                self._store.intersect_count / (camera.width * camera.height),
            )

        return framebuffer

    def cast_ray(
        self,
        origin: Sequence[float],
        direction: Sequence[float],
        depth: int = 0,
    ) -> tuple[float, float, float]:
        """Cast a single ray and return its color.

        See WhittedIntegrator.cast_ray.
        """
        return self._integrator.cast_ray(origin, direction, depth)

    def __repr__(self) -> str:
        """Return a string representation of the renderer."""
        return (
            f"FrameRenderer(spheres={self._store.num_spheres}, "
            f"lights={self._store.num_lights}, max_depth={self._settings.max_depth})"
        )


def flatten_framebuffer(framebuffer: Framebuffer) -> Framebuffer:
    """View a (height, width, 3) framebuffer as a row-major pixel sequence.

    Pixel (i, j) ends up at index i + j * width.
    """
    return framebuffer.reshape(-1, 3)
