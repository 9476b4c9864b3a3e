"""Whitted-style sphere ray tracer built on Taichi.

This package renders a still image of a static scene of spheres and point
lights, casting one ray per pixel through a pinhole camera and evaluating:
- Phong diffuse and specular shading with hard shadows
- Recursive mirror reflection
- Dielectric refraction with total internal reflection
- A fixed maximum recursion depth

Subpackages:
    core: Vector utilities, the recursive ray caster and the frame renderer
    geometry: Ray-sphere intersection
    materials: Phong local illumination
    scene: Scene description, storage, loading and demo scenes
    camera: Pinhole camera and primary ray directions
    preview: Image export and preview
"""

__version__ = "0.1.0"
