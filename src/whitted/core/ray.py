"""Vector utilities for the Whitted ray caster.

This module provides the small set of vector helpers the intersector,
shader and integrator share. All helpers are Taichi functions and are
meant to be called from within kernels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> @ti.kernel
    ... def mirror() -> ti.math.vec3:
    ...     return reflect(vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))
    >>> mirror()  # [1.0, 1.0, 0.0]
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the Euclidean length of a vector."""
    return tm.length(v)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector.

    Cheaper than length() when only comparing magnitudes.
    """
    return tm.dot(v, v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    Args:
        v: The input vector.

    Returns:
        A unit vector in the same direction as v. A zero-length input
        returns the zero vector instead of NaNs.
    """
    result = vec3(0.0, 0.0, 0.0)
    len_sq = tm.dot(v, v)
    if len_sq > 0.0:
        result = v / ti.sqrt(len_sq)
    return result


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Computes R = I - 2(I . N)N. The normal should be unit length.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (should be normalized).

    Returns:
        The reflected direction vector.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def refract(incident: vec3, normal: vec3, refractive_index: ti.f32) -> vec3:
    """Refract an incident vector through a sphere surface using Snell's law.

    The outside medium is air (index 1). When the incident direction and the
    normal point the same way the ray is leaving the medium: the cosine is
    negated, the indices are swapped and the normal is flipped to the ray's
    side.

    Args:
        incident: The incoming direction vector (should be normalized).
        normal: The outward surface normal (should be normalized).
        refractive_index: Index of refraction of the sphere's material.

    Returns:
        The refracted direction vector, or the zero vector on total internal
        reflection.
    """
    cos_i = -tm.clamp(tm.dot(incident, normal), -1.0, 1.0)
    eta_i = 1.0
    eta_t = refractive_index
    n = normal
    if cos_i < 0.0:
        # Ray is inside the object: swap the media and face the normal inward
        cos_i = -cos_i
        temp = eta_i
        eta_i = eta_t
        eta_t = temp
        n = -normal
    eta = eta_i / eta_t
    k = 1.0 - eta * eta * (1.0 - cos_i * cos_i)
    result = vec3(0.0, 0.0, 0.0)
    if k >= 0.0:
        result = incident * eta + n * (eta * cos_i - ti.sqrt(k))
    return result


@ti.func
def offset_origin(point: vec3, normal: vec3, direction: vec3, epsilon: ti.f32) -> vec3:
    """Offset a secondary ray origin to avoid self-intersection.

    Pushes the point along the normal to the side the new ray travels
    (outside for reflection, inside for transmission).

    Args:
        point: The intersection point.
        normal: The surface normal.
        direction: The direction of the spawned ray.
        epsilon: The offset distance.

    Returns:
        The offset origin point.
    """
    offset_dir = normal
    if tm.dot(direction, normal) < 0.0:
        offset_dir = -normal
    return point + epsilon * offset_dir
