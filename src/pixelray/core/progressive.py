"""Progressive renderer driving the tick loop.

The ProgressiveRenderer owns everything a host needs between frames: the
scene, the accumulation buffer and the seeded generator. Each :meth:`tick`
traces one batch of random samples and folds it into the buffer; the display
can then be refreshed from :meth:`get_display_bytes` or
:meth:`write_display`.

Example:
    >>> from pixelray.config import RenderConfig
    >>> from pixelray.core.progressive import ProgressiveRenderer
    >>> from pixelray.scene.random_spheres import create_random_spheres_scene
    >>>
    >>> config = RenderConfig(width=300, height=200, seed=3)
    >>> renderer = ProgressiveRenderer.for_random_spheres(config)
    >>> renderer.render(num_ticks=20)
    >>> renderer.save_image("spheres.png")
"""

import logging
from collections.abc import Callable, Generator
from typing import Optional

import numpy as np
import numpy.typing as npt

from pixelray.config import RenderConfig
from pixelray.core.accumulation import (
    AccumulationBuffer,
    WritableBuffer,
    to_display_bytes,
    write_display_bytes,
)
from pixelray.core.integrator import render_batch, render_pass
from pixelray.core.sampler import make_rng

logger = logging.getLogger(__name__)

# Callback receives (ticks_done, target_ticks)
ProgressCallback = Callable[[int, int], None]


class ProgressiveRenderer:
    """A progressive renderer that accumulates random samples over time.

    Attributes:
        scene: The Scene being rendered.
        config: The active render configuration.
    """

    def __init__(
        self,
        scene,
        config: Optional[RenderConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        """Initialize the progressive renderer.

        Args:
            scene: The Scene to render.
            config: Render configuration. Defaults to RenderConfig().
            rng: Generator to draw samples from. Defaults to one seeded
                from ``config.seed``.
        """
        self.scene = scene
        self.config = config if config is not None else RenderConfig()
        self._rng = rng if rng is not None else make_rng(self.config.seed)
        self._buffer = AccumulationBuffer(self.config.width, self.config.height)
        self._ticks = 0

    @classmethod
    def for_random_spheres(cls, config: Optional[RenderConfig] = None) -> "ProgressiveRenderer":
        """Build the random spheres scene and a renderer sharing one generator.

        The scene is drawn from the same generator that later drives the
        samples, so one seed reproduces the whole render.
        """
        from pixelray.scene.random_spheres import create_random_spheres_scene

        config = config if config is not None else RenderConfig()
        rng = make_rng(config.seed)
        scene = create_random_spheres_scene(rng, config.aspect_ratio)
        return cls(scene, config, rng)

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._buffer.width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._buffer.height

    @property
    def buffer(self) -> AccumulationBuffer:
        """The accumulation buffer."""
        return self._buffer

    @property
    def rng(self) -> np.random.Generator:
        """The generator driving the render."""
        return self._rng

    @property
    def tick_count(self) -> int:
        """Number of ticks rendered since the last reset."""
        return self._ticks

    @property
    def sample_count(self) -> int:
        """Total samples accumulated since the last reset."""
        return self._buffer.sample_count

    def tick(self) -> None:
        """Trace one batch of ``config.samples_per_tick`` samples."""
        render_batch(
            self.scene,
            self._buffer,
            self._rng,
            sample_count=self.config.samples_per_tick,
            max_depth=self.config.max_depth,
        )
        self._ticks += 1

    def render_full_pass(self) -> None:
        """Trace one sample through every pixel."""
        render_pass(self.scene, self._buffer, self._rng, max_depth=self.config.max_depth)
        self._ticks += 1

    def reset(self) -> None:
        """Reset the accumulator for a new render.

        The generator keeps its state, so the next ticks draw fresh samples.
        """
        self._buffer.reset()
        self._ticks = 0

    def resize(self, width: int, height: int) -> None:
        """Resize the render target and reset the accumulator.

        The scene camera keeps its aspect ratio; rebuild the scene if the new
        size changes it.

        Raises:
            ValueError: If either dimension is not positive.
        """
        self.config = RenderConfig(
            width=width,
            height=height,
            max_depth=self.config.max_depth,
            samples_per_tick=self.config.samples_per_tick,
            seed=self.config.seed,
        )
        self._buffer = AccumulationBuffer(width, height)
        self._ticks = 0
        logger.info("Resized render target to %dx%d", width, height)

    def render(self, num_ticks: int = 1, callback: Optional[ProgressCallback] = None) -> None:
        """Render several ticks with an optional progress callback.

        Args:
            num_ticks: Number of ticks to render.
            callback: Called after each tick with (ticks_done, target_ticks).
        """
        for done, target in self.render_progressive(num_ticks):
            if callback is not None:
                callback(done, target)

    def render_progressive(self, num_ticks: int = 1) -> Generator[tuple[int, int], None, None]:
        """Render ticks, yielding progress after each one.

        Yields:
            Tuple of (ticks_done, target_ticks) counted since the last reset.
        """
        if num_ticks <= 0:
            return

        target = self._ticks + num_ticks
        while self._ticks < target:
            self.tick()
            yield (self._ticks, target)

    def get_image_numpy(self, gamma: float = 1.0) -> npt.NDArray[np.float64]:
        """Get the current estimate as a top-row-first float image.

        Args:
            gamma: Gamma correction value. 1.0 keeps linear values.

        Returns:
            Array of shape (height, width, 3) clamped to [0, 1].
        """
        image = np.clip(np.flipud(self._buffer.snapshot()), 0.0, 1.0)
        if gamma != 1.0:
            image = np.power(image, 1.0 / gamma)
        return image

    def get_display_bytes(self) -> bytes:
        """Packed RGBA bytes of the current estimate, top row first."""
        return to_display_bytes(self._buffer)

    def write_display(self, frame: WritableBuffer) -> None:
        """Write the current estimate into a borrowed RGBA frame."""
        write_display_bytes(self._buffer, frame)

    def save_image(self, filepath: str, gamma: float = 1.0) -> None:
        """Save the current estimate as a PNG file.

        Args:
            filepath: Path to save the image (e.g., "output.png").
            gamma: Gamma correction value. 1.0 matches the window output.
        """
        from pixelray.preview.export import save_png

        save_png(self, filepath, gamma=gamma)

    def __repr__(self) -> str:
        return (
            f"ProgressiveRenderer(width={self.width}, height={self.height}, "
            f"ticks={self.tick_count}, samples={self.sample_count})"
        )
