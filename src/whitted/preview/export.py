"""Image export utilities for rendered framebuffers.

Framebuffer colors are unconstrained floats. On export each channel is
clamped to [0, 1] and mapped to a byte as round(255 * c), rounding halves
up, row-major with no padding.

Supported formats:
    - PPM (binary P6, "P6\\n<width> <height>\\n255\\n" header)
    - PNG (8-bit RGB)

Both are written with Pillow.

Example:
    >>> from src.whitted.preview.export import save_image
    >>> framebuffer = renderer.render(1024, 768, math.pi / 3)
    >>> save_image(framebuffer, "out.ppm")
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

logger = logging.getLogger(__name__)

# Pillow format name per supported file suffix
_FORMATS = {
    ".ppm": "PPM",
    ".png": "PNG",
}


def _check_framebuffer(framebuffer: npt.NDArray[np.floating]) -> None:
    if framebuffer.ndim != 3 or framebuffer.shape[2] != 3:
        raise ValueError(f"framebuffer must have shape (H, W, 3), got {framebuffer.shape}")


def to_uint8(framebuffer: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Convert a float framebuffer to 8-bit channels.

    Args:
        framebuffer: Array of shape (H, W, 3) with linear float colors.

    Returns:
        uint8 array of shape (H, W, 3) with floor(255 * clamp(c, 0, 1) + 0.5).

    Raises:
        ValueError: If the array is not shaped (H, W, 3).
    """
    _check_framebuffer(framebuffer)
    clamped = np.clip(framebuffer.astype(np.float64), 0.0, 1.0)
    # NaN channels (never produced by the renderer) map to black
    clamped = np.nan_to_num(clamped, nan=0.0)
    return np.floor(255.0 * clamped + 0.5).astype(np.uint8)


def to_image(framebuffer: npt.NDArray[np.floating]) -> PILImage.Image:
    """Convert a float framebuffer to an RGB Pillow image."""
    # uint8 (H, W, 3) is inferred as RGB
    return PILImage.fromarray(to_uint8(framebuffer))


def save_ppm(framebuffer: npt.NDArray[np.floating], filepath: str | Path) -> None:
    """Save a framebuffer as a binary P6 PPM file.

    Args:
        framebuffer: Array of shape (H, W, 3) with linear float colors.
        filepath: Output file path.
    """
    to_image(framebuffer).save(filepath, format="PPM")
    logger.info("Saved PPM to %s", filepath)


def save_png(framebuffer: npt.NDArray[np.floating], filepath: str | Path) -> None:
    """Save a framebuffer as an 8-bit PNG file.

    Args:
        framebuffer: Array of shape (H, W, 3) with linear float colors.
        filepath: Output file path.
    """
    to_image(framebuffer).save(filepath, format="PNG")
    logger.info("Saved PNG to %s", filepath)


def save_image(framebuffer: npt.NDArray[np.floating], filepath: str | Path) -> None:
    """Save a framebuffer, choosing the format from the file suffix.

    Args:
        framebuffer: Array of shape (H, W, 3) with linear float colors.
        filepath: Output path ending in .ppm or .png.

    Raises:
        ValueError: If the suffix is not a supported format.
    """
    suffix = Path(filepath).suffix.lower()
    if suffix not in _FORMATS:
        raise ValueError(
            f"Unsupported image format '{suffix}', expected one of {sorted(_FORMATS)}"
        )
    if _FORMATS[suffix] == "PPM":
        save_ppm(framebuffer, filepath)
    else:
        save_png(framebuffer, filepath)


def compute_rmse(
    image_a: npt.NDArray[np.floating],
    image_b: npt.NDArray[np.floating],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
