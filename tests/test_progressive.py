"""Tests for progressive rendering functionality.

This module tests the ProgressiveRenderer class including:
- Initialization and configuration
- Tick accounting and sample accumulation
- Progress callbacks and the generator interface
- Reset and resize
- Image and display output
- Reproducibility for a fixed seed

The conftest.py fixture initializes Taichi before tests run.
"""

import numpy as np
import pytest


def _diffuse_scene(make_scene, aspect_ratio=1.5):
    from pixelray.materials import Lambertian
    from pixelray.scene.manager import SceneObject

    ground = SceneObject((0.0, -100.5, -1.0), 100.0, Lambertian((0.5, 0.5, 0.5)))
    ball = SceneObject((0.0, 0.0, -1.0), 0.5, Lambertian((0.7, 0.3, 0.3)))
    return make_scene([ground, ball], aspect_ratio=aspect_ratio)


@pytest.fixture
def renderer(make_scene):
    from pixelray.config import RenderConfig
    from pixelray.core.progressive import ProgressiveRenderer

    config = RenderConfig(width=12, height=8, max_depth=6, samples_per_tick=200, seed=11)
    return ProgressiveRenderer(_diffuse_scene(make_scene), config)


class TestProgressiveRendererInit:
    """Test ProgressiveRenderer initialization."""

    def test_init_creates_render_target(self, renderer):
        """Test dimensions and an empty buffer."""
        assert renderer.width == 12
        assert renderer.height == 8
        assert renderer.tick_count == 0
        assert renderer.sample_count == 0

    def test_default_config(self, make_scene):
        """Test the default configuration matches the viewer."""
        from pixelray.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(make_scene([]))
        assert (renderer.width, renderer.height) == (600, 400)
        assert renderer.config.samples_per_tick == 10_000
        assert renderer.config.max_depth == 50

    def test_explicit_generator_is_used(self, make_scene):
        """Test a caller-supplied generator drives the samples."""
        from pixelray.config import RenderConfig
        from pixelray.core.progressive import ProgressiveRenderer

        rng = np.random.default_rng(0)
        renderer = ProgressiveRenderer(make_scene([]), RenderConfig(width=4, height=4), rng)
        assert renderer.rng is rng


class TestProgressiveRendererTick:
    """Test tick and full-pass rendering."""

    def test_tick_accumulates_samples(self, renderer):
        """Test each tick adds samples_per_tick samples."""
        renderer.tick()
        renderer.tick()
        assert renderer.tick_count == 2
        assert renderer.sample_count == 400

    def test_full_pass_samples_every_pixel(self, renderer):
        """Test a full pass adds one sample per pixel."""
        renderer.render_full_pass()
        assert renderer.sample_count == 12 * 8
        assert renderer.buffer.pixel_sample_count(11, 7) == 1

    def test_zero_samples_per_tick(self, make_scene):
        """Test a zero-sample tick still counts as a tick."""
        from pixelray.config import RenderConfig
        from pixelray.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(make_scene([]), RenderConfig(width=4, height=4, samples_per_tick=0))
        renderer.tick()
        assert renderer.tick_count == 1
        assert renderer.sample_count == 0


class TestProgressiveRendererCallbacks:
    """Test progress reporting."""

    def test_callback_receives_progress(self, renderer):
        """Test the callback sees every tick."""
        progress = []
        renderer.render(num_ticks=3, callback=lambda done, target: progress.append((done, target)))
        assert progress == [(1, 3), (2, 3), (3, 3)]

    def test_callback_with_existing_ticks(self, renderer):
        """Test progress counts continue from earlier ticks."""
        renderer.tick()
        progress = []
        renderer.render(num_ticks=2, callback=lambda done, target: progress.append((done, target)))
        assert progress == [(2, 3), (3, 3)]

    def test_render_without_callback(self, renderer):
        """Test render works with no callback."""
        renderer.render(num_ticks=2)
        assert renderer.tick_count == 2


class TestProgressiveRendererGenerator:
    """Test the generator interface."""

    def test_render_progressive_yields_progress(self, renderer):
        """Test one yield per tick."""
        assert list(renderer.render_progressive(num_ticks=2)) == [(1, 2), (2, 2)]

    @pytest.mark.parametrize("num_ticks", [0, -3])
    def test_render_progressive_nothing_to_do(self, renderer, num_ticks):
        """Test non-positive tick counts yield nothing."""
        assert list(renderer.render_progressive(num_ticks=num_ticks)) == []
        assert renderer.tick_count == 0

    def test_render_progressive_interruptible(self, renderer):
        """Test stopping the generator early stops rendering."""
        for done, _ in renderer.render_progressive(num_ticks=10):
            if done == 2:
                break
        assert renderer.tick_count == 2


class TestProgressiveRendererReset:
    """Test reset and resize."""

    def test_reset_clears_samples(self, renderer):
        """Test reset forgets accumulated samples."""
        renderer.render(num_ticks=2)
        renderer.reset()
        assert renderer.tick_count == 0
        assert renderer.sample_count == 0
        assert np.all(renderer.get_image_numpy() == 0.0)

    def test_resize_changes_dimensions(self, renderer):
        """Test resize swaps the buffer and keeps the other settings."""
        renderer.tick()
        renderer.resize(6, 4)
        assert (renderer.width, renderer.height) == (6, 4)
        assert renderer.sample_count == 0
        assert renderer.config.samples_per_tick == 200
        assert len(renderer.get_display_bytes()) == 6 * 4 * 4

    def test_resize_rejects_bad_dimensions(self, renderer):
        """Test non-positive sizes are rejected."""
        with pytest.raises(ValueError):
            renderer.resize(0, 4)


class TestProgressiveRendererImageOutput:
    """Test image and display output."""

    def test_get_image_numpy_shape_and_range(self, renderer):
        """Test the image is (height, width, 3) in [0, 1]."""
        renderer.render(num_ticks=2)
        image = renderer.get_image_numpy()
        assert image.shape == (8, 12, 3)
        assert image.min() >= 0.0
        assert image.max() <= 1.0
        assert np.all(np.isfinite(image))

    def test_get_image_numpy_is_top_row_first(self, renderer):
        """Test the float image is the flipped buffer snapshot."""
        renderer.render_full_pass()
        np.testing.assert_allclose(
            renderer.get_image_numpy(), np.clip(np.flipud(renderer.buffer.snapshot()), 0.0, 1.0)
        )

    def test_get_image_numpy_with_gamma(self, renderer):
        """Test gamma brightens the image."""
        renderer.render_full_pass()
        linear = renderer.get_image_numpy()
        corrected = renderer.get_image_numpy(gamma=2.2)
        assert np.all(corrected >= linear - 1e-12)

    def test_display_bytes(self, renderer):
        """Test display bytes and write_display agree."""
        renderer.render(num_ticks=1)
        frame = bytearray(12 * 8 * 4)
        renderer.write_display(frame)
        assert bytes(frame) == renderer.get_display_bytes()

    def test_save_image(self, renderer, tmp_path):
        """Test save_image writes a PNG."""
        renderer.render_full_pass()
        path = tmp_path / "out.png"
        renderer.save_image(str(path))
        assert path.stat().st_size > 0

    def test_repr_shows_state(self, renderer):
        """Test repr reports dimensions and progress."""
        renderer.tick()
        text = repr(renderer)
        assert "width=12" in text
        assert "ticks=1" in text
        assert "samples=200" in text


class TestReproducibility:
    """Test seeded renders are reproducible."""

    def test_same_seed_same_frame(self, make_scene):
        """Test two renderers with one seed produce identical bytes."""
        from pixelray.config import RenderConfig
        from pixelray.core.progressive import ProgressiveRenderer

        config = RenderConfig(width=10, height=10, max_depth=5, samples_per_tick=300, seed=4)
        frames = []
        for _ in range(2):
            renderer = ProgressiveRenderer(_diffuse_scene(make_scene, 1.0), config)
            renderer.render(num_ticks=3)
            frames.append(renderer.get_display_bytes())
        assert frames[0] == frames[1]

    def test_estimate_converges(self, renderer):
        """Test more samples move the estimate less."""
        from pixelray.preview.export import compute_rmse

        renderer.render(num_ticks=5)
        early = renderer.get_image_numpy()
        renderer.render(num_ticks=5)
        middle = renderer.get_image_numpy()
        renderer.render(num_ticks=30)
        late = renderer.get_image_numpy()
        assert compute_rmse(middle, late) < compute_rmse(early, late)


class TestRandomSpheresRenderer:
    """Test the random spheres convenience constructor."""

    def test_for_random_spheres(self):
        """Test the scene and samples share one seeded generator."""
        from pixelray.config import RenderConfig
        from pixelray.core.progressive import ProgressiveRenderer

        config = RenderConfig(width=6, height=4, max_depth=3, samples_per_tick=50, seed=8)
        a = ProgressiveRenderer.for_random_spheres(config)
        b = ProgressiveRenderer.for_random_spheres(config)
        assert list(a.scene) == list(b.scene)
        assert a.scene.camera.params.aspect_ratio == 1.5
        a.tick()
        b.tick()
        assert a.get_display_bytes() == b.get_display_bytes()
