"""Camera module for primary ray generation.

Components:
    pinhole: Fixed pinhole camera looking down -z

Ray generation uses pixel coordinates counted from the top-left corner,
one ray through the center of each pixel. The Python-side PinholeCamera
holds the configuration; primary_direction is the Taichi function the
frame renderer calls per pixel.
"""

from .pinhole import (
    DEFAULT_FOV,
    DEFAULT_HEIGHT,
    DEFAULT_WIDTH,
    PinholeCamera,
    primary_direction,
)

__all__ = [
    "PinholeCamera",
    "primary_direction",
    "DEFAULT_WIDTH",
    "DEFAULT_HEIGHT",
    "DEFAULT_FOV",
]
