"""Core rendering module.

This module contains the fundamental building blocks of the ray caster:

Components:
    ray: Vector utilities (normalize, reflect, refract, offsets)
    integrator: Whitted-style recursive ray caster and render settings
    renderer: Frame renderer producing a framebuffer for a camera

The integrator evaluates local Phong shading plus recursively traced
reflection and refraction rays, bounded by a maximum recursion depth.

All compute-intensive operations use Taichi kernels.
"""

from .ray import (
    length,
    length_squared,
    normalize,
    offset_origin,
    reflect,
    refract,
    vec3,
)

# Note: integrator and renderer are NOT imported here to avoid circular imports.
# Import directly from src.whitted.core.integrator or src.whitted.core.renderer.

__all__ = [
    "vec3",
    "length",
    "length_squared",
    "normalize",
    "reflect",
    "refract",
    "offset_origin",
]
