"""Preview module for output and visualization.

Components:
    export: PPM/PNG export of float framebuffers (via Pillow)
    display: Matplotlib-based still preview

Example:
    >>> from src.whitted.preview import save_image, show_preview
    >>> framebuffer = renderer.render(640, 480, math.pi / 3)
    >>> save_image(framebuffer, "out.ppm")
    >>> show_preview(framebuffer)
"""

from src.whitted.preview.display import show_preview
from src.whitted.preview.export import (
    compute_rmse,
    save_image,
    save_png,
    save_ppm,
    to_image,
    to_uint8,
)

__all__ = [
    # Display functions
    "show_preview",
    # Export functions
    "save_image",
    "save_ppm",
    "save_png",
    "to_image",
    "to_uint8",
    "compute_rmse",
]
