"""Matplotlib-based preview of a finished frame.

Example:
    >>> from src.whitted.preview.display import show_preview
    >>> framebuffer = renderer.render(640, 480, math.pi / 3)
    >>> show_preview(framebuffer, title="Demo scene")
"""

from __future__ import annotations

import matplotlib.pyplot as plt
import numpy as np
import numpy.typing as npt

from src.whitted.preview.export import to_uint8


def show_preview(
    framebuffer: npt.NDArray[np.floating],
    title: str | None = None,
    *,
    block: bool = True,
) -> plt.Figure:
    """Display a framebuffer in a Matplotlib window.

    The image is shown exactly as it would be exported (clamped and
    quantized to 8 bits).

    Args:
        framebuffer: Array of shape (H, W, 3) with linear float colors.
        title: Optional window/axes title.
        block: Whether plt.show() blocks until the window is closed.

    Returns:
        The Matplotlib figure.
    """
    height, width = framebuffer.shape[:2]
    # One inch per 100 pixels, at least 2 inches on each side
    figsize = (max(width / 100.0, 2.0), max(height / 100.0, 2.0))
    fig, ax = plt.subplots(figsize=figsize, dpi=100)
    ax.imshow(to_uint8(framebuffer), interpolation="nearest")
    ax.set_axis_off()
    if title:
        ax.set_title(title)
    fig.tight_layout()
    plt.show(block=block)
    return fig
