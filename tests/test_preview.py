"""Tests for image export and preview.

Tests cover:
- Clamping and round-half-up quantization
- Binary PPM layout
- PNG export through Pillow
- Suffix dispatch and error handling
- Matplotlib preview
"""

import numpy as np
import pytest
from PIL import Image as PILImage


def _gradient():
    framebuffer = np.zeros((2, 4, 3), dtype=np.float32)
    framebuffer[0, 0] = (1.0, 0.0, 0.5)
    framebuffer[0, 1] = (2.0, -1.0, 0.2)
    framebuffer[1, 3] = (0.25, 0.75, 1.0)
    return framebuffer


class TestToUint8:
    """Tests for float to byte conversion."""

    def test_clamp_and_round(self):
        """Test out-of-range values clamp and halves round up."""
        from src.whitted.preview.export import to_uint8

        out = to_uint8(_gradient())
        assert out.dtype == np.uint8
        assert out.shape == (2, 4, 3)
        assert tuple(out[0, 0]) == (255, 0, 128)
        assert tuple(out[0, 1]) == (255, 0, 51)
        assert tuple(out[1, 3]) == (64, 191, 255)

    def test_rejects_wrong_shape(self):
        """Test a framebuffer must have three channels."""
        from src.whitted.preview.export import to_uint8

        with pytest.raises(ValueError):
            to_uint8(np.zeros((2, 2, 4), dtype=np.float32))


class TestSave:
    """Tests for PPM and PNG output."""

    def test_ppm_layout(self, tmp_path):
        """Test the P6 header and row-major RGB payload."""
        from src.whitted.preview.export import save_ppm, to_uint8

        framebuffer = _gradient()
        path = tmp_path / "out.ppm"
        save_ppm(framebuffer, path)

        data = path.read_bytes()
        header = b"P6\n4 2\n255\n"
        assert data.startswith(header)
        payload = data[len(header):]
        assert len(payload) == 4 * 2 * 3
        assert payload == to_uint8(framebuffer).tobytes()
        assert payload[:3] == bytes((255, 0, 128))

    def test_png_round_trip(self, tmp_path):
        """Test the PNG decodes to the quantized framebuffer."""
        from src.whitted.preview.export import save_png, to_uint8

        framebuffer = _gradient()
        path = tmp_path / "out.png"
        save_png(framebuffer, path)

        with PILImage.open(path) as image:
            assert image.mode == "RGB"
            assert image.size == (4, 2)
            np.testing.assert_array_equal(np.asarray(image), to_uint8(framebuffer))

    @pytest.mark.parametrize("name,magic", [("a.ppm", b"P6"), ("b.PNG", b"\x89PNG")])
    def test_save_image_dispatch(self, tmp_path, name, magic):
        """Test the format follows the file suffix."""
        from src.whitted.preview.export import save_image

        path = tmp_path / name
        save_image(_gradient(), path)
        assert path.read_bytes().startswith(magic)

    def test_save_image_unknown_suffix(self, tmp_path):
        """Test unsupported suffixes raise ValueError."""
        from src.whitted.preview.export import save_image

        with pytest.raises(ValueError):
            save_image(_gradient(), tmp_path / "out.jpg")


class TestRmse:
    """Tests for compute_rmse."""

    def test_identical_images(self):
        """Test RMSE of an image with itself is zero."""
        from src.whitted.preview.export import compute_rmse

        image = _gradient()
        assert compute_rmse(image, image) == 0.0

    def test_constant_offset(self):
        """Test a uniform offset gives that offset as RMSE."""
        from src.whitted.preview.export import compute_rmse

        image = _gradient()
        assert abs(compute_rmse(image, image + 0.5) - 0.5) < 1e-6

    def test_shape_mismatch(self):
        """Test images of different shapes are rejected."""
        from src.whitted.preview.export import compute_rmse

        with pytest.raises(ValueError):
            compute_rmse(_gradient(), np.zeros((4, 2, 3), dtype=np.float32))


class TestShowPreview:
    """Tests for the Matplotlib preview."""

    def test_show_preview_non_blocking(self):
        """Test the preview builds a figure of the framebuffer."""
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt

        from src.whitted.preview.display import show_preview

        fig = show_preview(_gradient(), title="gradient", block=False)
        try:
            image = fig.axes[0].get_images()[0]
            assert image.get_array().shape == (2, 4, 3)
            assert fig.axes[0].get_title() == "gradient"
        finally:
            plt.close(fig)
