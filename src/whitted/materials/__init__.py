"""Materials module: local illumination.

Components:
    phong: Phong diffuse + specular shading with hard shadows

Material parameters themselves (refractive index, albedo weights, diffuse
color, shininess) are plain values defined in src.whitted.scene.config; this
module evaluates the lighting they describe.
"""

from .phong import DEFAULT_EPSILON, PhongShader, lambert_term, phong_term

__all__ = [
    "PhongShader",
    "lambert_term",
    "phong_term",
    "DEFAULT_EPSILON",
]
