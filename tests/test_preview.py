"""Tests for the preview module.

This module tests the preview/display, preview/export and preview/interactive
functionality including:
- Gamma correction
- Float to 8-bit conversion
- PNG export
- RMSE computation
- Frame layout for the interactive window

Note: Tests avoid opening windows. The processing functions and the frame
conversion of InteractivePreview are tested directly.
"""

import numpy as np
import pytest
from PIL import Image as PILImage


class TestGammaCorrection:
    """Test gamma correction."""

    def test_gamma_one_is_identity(self):
        """Test gamma 1.0 leaves in-range values unchanged."""
        from pixelray.preview.display import apply_gamma

        image = np.linspace(0.0, 1.0, 12).reshape(2, 2, 3)
        np.testing.assert_allclose(apply_gamma(image, 1.0), image)

    def test_gamma_brightens_midtones(self):
        """Test gamma 2.2 maps 0.5 to 0.5 ** (1 / 2.2)."""
        from pixelray.preview.display import apply_gamma

        image = np.full((2, 2, 3), 0.5)
        np.testing.assert_allclose(apply_gamma(image, 2.2), 0.5 ** (1.0 / 2.2))

    def test_gamma_clamps(self):
        """Test out-of-range values are clamped before the curve."""
        from pixelray.preview.display import apply_gamma

        image = np.array([[[-1.0, 2.0, 0.0]]])
        np.testing.assert_allclose(apply_gamma(image, 2.0), [[[0.0, 1.0, 0.0]]])

    @pytest.mark.parametrize("gamma", [0.0, -2.2])
    def test_gamma_must_be_positive(self, gamma):
        """Test non-positive gamma is rejected."""
        from pixelray.preview.display import apply_gamma

        with pytest.raises(ValueError, match="gamma"):
            apply_gamma(np.zeros((1, 1, 3)), gamma)

    def test_process_image_for_display_range(self):
        """Test processed images stay in [0, 1]."""
        from pixelray.preview.display import process_image_for_display

        image = np.random.default_rng(0).normal(0.5, 1.0, size=(8, 8, 3))
        result = process_image_for_display(image, gamma=2.2)
        assert result.min() >= 0.0
        assert result.max() <= 1.0


class TestImageConversion:
    """Test float to uint8 conversion."""

    def test_image_to_uint8_rounding(self):
        """Test channels round to the nearest byte value."""
        from pixelray.preview.export import image_to_uint8

        image = np.array([[[0.0, 0.5, 1.0], [0.1, 1.2, -0.3]]])
        result = image_to_uint8(image)
        assert result.dtype == np.uint8
        assert result.tolist() == [[[0, 128, 255], [26, 255, 0]]]

    def test_image_to_uint8_halves_round_up(self):
        """Test values halfway between bytes round up, not to even."""
        from pixelray.preview.export import image_to_uint8

        k = np.arange(0, 255, 2)
        values = (k + 0.5) / 255.0
        exact = values * 255.0 == k + 0.5
        assert exact.any()

        image = np.repeat(values[np.newaxis, :, np.newaxis], 3, axis=2)
        result = image_to_uint8(image)
        np.testing.assert_array_equal(result[0, exact, 1], k[exact] + 1)

    def test_matches_display_bytes(self):
        """Test PNG conversion agrees with the RGBA display frames."""
        from pixelray.core.accumulation import AccumulationBuffer, display_array
        from pixelray.preview.export import image_to_uint8

        buffer = AccumulationBuffer(4, 3)
        rng = np.random.default_rng(1)
        buffer.add_samples(rng.integers(0, 4, 30), rng.integers(0, 3, 30), rng.random((30, 3)))
        image = np.flipud(buffer.snapshot())
        np.testing.assert_array_equal(image_to_uint8(image), display_array(buffer)[..., :3])


class TestPNGExport:
    """Test PNG export functionality."""

    def test_save_png_from_array(self, tmp_path):
        """Test saving an array writes a readable PNG with the same pixels."""
        from pixelray.preview.export import image_to_uint8, save_png_from_array

        image = np.random.default_rng(2).random((6, 9, 3))
        path = tmp_path / "test.png"
        save_png_from_array(image, str(path))

        with PILImage.open(path) as loaded:
            assert loaded.size == (9, 6)
            assert loaded.mode == "RGB"
            np.testing.assert_array_equal(np.asarray(loaded), image_to_uint8(image))

    def test_save_png_from_renderer(self, tmp_path, make_scene):
        """Test exporting a renderer's estimate, top row first."""
        from pixelray.config import RenderConfig
        from pixelray.core.progressive import ProgressiveRenderer
        from pixelray.preview.export import save_png

        renderer = ProgressiveRenderer(make_scene([], aspect_ratio=2.0), RenderConfig(width=8, height=4, seed=0))
        renderer.render_full_pass()
        path = tmp_path / "render.png"
        save_png(renderer, str(path))

        with PILImage.open(path) as loaded:
            pixels = np.asarray(loaded)
        assert pixels.shape == (4, 8, 3)
        # Sky: top rows are bluer (less red) than bottom rows
        assert pixels[0, :, 0].mean() < pixels[-1, :, 0].mean()
        assert np.all(pixels[..., 2] == 255)


class TestRMSE:
    """Test RMSE computation."""

    def test_identical_images(self):
        """Test RMSE of identical images is zero."""
        from pixelray.preview.export import compute_rmse

        image = np.random.default_rng(3).random((4, 4, 3))
        assert compute_rmse(image, image) == 0.0

    def test_known_difference(self):
        """Test RMSE of a constant offset equals the offset."""
        from pixelray.preview.export import compute_rmse

        a = np.zeros((4, 4, 3))
        b = np.full((4, 4, 3), 0.25)
        assert abs(compute_rmse(a, b) - 0.25) < 1e-12

    def test_shape_mismatch(self):
        """Test mismatched shapes are rejected."""
        from pixelray.preview.export import compute_rmse

        with pytest.raises(ValueError, match="shapes"):
            compute_rmse(np.zeros((2, 2, 3)), np.zeros((2, 3, 3)))


class TestInteractivePreview:
    """Test the window-free parts of InteractivePreview."""

    def _preview(self, make_scene, scale_factor=2):
        from pixelray.config import RenderConfig
        from pixelray.core.progressive import ProgressiveRenderer
        from pixelray.preview.interactive import InteractivePreview

        config = RenderConfig(width=3, height=2, samples_per_tick=20, max_depth=4, seed=5)
        renderer = ProgressiveRenderer(make_scene([], aspect_ratio=1.5), config)
        return InteractivePreview(renderer, scale_factor=scale_factor)

    def test_window_size(self, make_scene):
        """Test the window is the image scaled by the factor."""
        preview = self._preview(make_scene, scale_factor=2)
        assert preview.window_size == (6, 4)
        assert preview.display_image.shape == (6, 4)

    def test_invalid_scale_factor(self, make_scene):
        """Test a scale factor below 1 is rejected."""
        from pixelray.preview.interactive import InteractivePreview

        renderer = self._preview(make_scene).renderer
        with pytest.raises(ValueError, match="scale_factor"):
            InteractivePreview(renderer, scale_factor=0)

    def test_frame_to_image_layout(self, make_scene):
        """Test the frame is upscaled and indexed (x, y) with y up."""
        preview = self._preview(make_scene, scale_factor=2)
        buffer = preview.renderer.buffer
        buffer.add_color(0, 0, (1.0, 0.0, 0.0))
        buffer.add_color(2, 1, (0.0, 0.0, 1.0))
        preview.renderer.write_display(preview._frame)

        image = preview.frame_to_image()
        assert image.shape == (6, 4, 3)
        # Bottom-left image pixel covers window x, y in [0, 2)
        np.testing.assert_allclose(image[0:2, 0:2], np.tile([1.0, 0.0, 0.0], (2, 2, 1)))
        # Top-right image pixel covers window x in [4, 6), y in [2, 4)
        np.testing.assert_allclose(image[4:6, 2:4], np.tile([0.0, 0.0, 1.0], (2, 2, 1)))

    def test_update_ticks_renderer(self, make_scene):
        """Test one update renders one batch and fills the display field."""
        preview = self._preview(make_scene)
        preview.update()
        assert preview.renderer.tick_count == 1
        assert preview.renderer.sample_count == 20
        assert preview.display_image.to_numpy().max() > 0.0

    def test_export_png(self, make_scene, tmp_path):
        """Test exporting writes to the requested path."""
        preview = self._preview(make_scene)
        preview.update()
        path = preview.export_png(str(tmp_path / "frame.png"))
        assert (tmp_path / "frame.png").exists()
        assert path.endswith("frame.png")

    def test_display_detection(self, monkeypatch):
        """Test a headless Linux session reports no display."""
        import os

        from pixelray.preview.interactive import InteractivePreview

        if os.name == "nt" or os.uname().sysname == "Darwin":
            pytest.skip("Display detection differs on this platform")
        monkeypatch.delenv("DISPLAY", raising=False)
        monkeypatch.delenv("WAYLAND_DISPLAY", raising=False)
        assert InteractivePreview.is_display_available() is False
        monkeypatch.setenv("DISPLAY", ":0")
        assert InteractivePreview.is_display_available() is True


class TestShowPreview:
    """Test the Matplotlib preview without opening a window."""

    def test_show_preview_draws_image(self, make_scene, monkeypatch):
        """Test the figure shows the processed render with a progress title."""
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt

        from pixelray.config import RenderConfig
        from pixelray.core.progressive import ProgressiveRenderer
        from pixelray.preview.display import show_preview

        shown = []
        monkeypatch.setattr(plt, "show", lambda block=True: shown.append(block))

        renderer = ProgressiveRenderer(make_scene([], aspect_ratio=2.0), RenderConfig(width=8, height=4, seed=1))
        renderer.render_full_pass()
        show_preview(renderer, gamma=2.2, block=False)

        assert shown == [False]
        ax = plt.gcf().axes[0]
        assert "1 ticks" in ax.get_title()
        assert "32 samples" in ax.get_title()
        np.testing.assert_allclose(
            ax.images[0].get_array(), renderer.get_image_numpy(gamma=2.2)
        )
        plt.close("all")
