"""Sphere primitive with geometric ray-sphere intersection.

The intersection is solved geometrically: project the vector from the ray
origin to the sphere center onto the ray, then measure how far the closest
approach lies from the center.

    L   = center - origin
    tca = L . direction
    d2  = L . L - tca^2
    thc = sqrt(radius^2 - d2)
    t0  = tca - thc,  t1 = tca + thc

The ray misses when d2 > radius^2. The near root t0 is used unless it lies
behind the origin (origin inside the sphere or past the near surface), in
which case the far root t1 is used. If both are negative the sphere is
behind the ray.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.geometry.sphere import hit_sphere, vec3
    >>> # Use hit_sphere within a Taichi kernel:
    >>> # did_hit, t = hit_sphere(origin, direction, center, radius)
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    center: vec3,
    radius: ti.f32,
):
    """Test a ray against a single sphere.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray (must be unit length, the
            returned distance is measured in units of this vector).
        center: The center of the sphere.
        radius: The radius of the sphere.

    Returns:
        A tuple (did_hit, t) where did_hit is 1 on a valid intersection and
        t is the distance to it along the ray. t is only meaningful when
        did_hit is 1.
    """
    L = center - ray_origin
    tca = tm.dot(L, ray_direction)
    d2 = tm.dot(L, L) - tca * tca
    radius2 = radius * radius

    did_hit = 0
    t = 0.0

    if d2 <= radius2:
        thc = ti.sqrt(radius2 - d2)
        t0 = tca - thc
        t1 = tca + thc
        if t0 < 0.0:
            t0 = t1
        if t0 >= 0.0:
            did_hit = 1
            t = t0

    return did_hit, t


@ti.func
def sphere_normal(point: vec3, center: vec3) -> vec3:
    """Outward unit normal of a sphere at a surface point."""
    return tm.normalize(point - center)
