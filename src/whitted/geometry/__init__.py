"""Geometry module for shape primitives.

Components:
    sphere: Geometric ray-sphere intersection and surface normals

The scene is intersected by exhaustive linear scan, so there is no
acceleration structure here. Intersection routines are Taichi functions:

    did_hit, t = hit_sphere(ray_origin, ray_direction, center, radius)
"""

from .sphere import hit_sphere, sphere_normal

__all__ = [
    "hit_sphere",
    "sphere_normal",
]
