"""Interactive preview window using Taichi GGUI.

The window is the host of the tick loop: every frame it asks the renderer for
one batch of samples, converts the accumulation buffer to RGBA bytes in a
borrowed frame, scales the frame up by an integer factor and presents it.

Controls:
    - Escape: close the window
    - P: export the current estimate to a timestamped PNG

Example:
    >>> from pixelray.config import RenderConfig
    >>> from pixelray.core.progressive import ProgressiveRenderer
    >>> from pixelray.preview.interactive import InteractivePreview
    >>>
    >>> renderer = ProgressiveRenderer.for_random_spheres(RenderConfig())
    >>> InteractivePreview(renderer, scale_factor=2).run()
"""

from __future__ import annotations

import logging
import os
from datetime import datetime
from typing import TYPE_CHECKING

import numpy as np
import taichi as ti

from pixelray.core.accumulation import BYTES_PER_PIXEL

if TYPE_CHECKING:
    import numpy.typing as npt

    from pixelray.core.progressive import ProgressiveRenderer

logger = logging.getLogger(__name__)


class InteractivePreview:
    """Interactive preview window driving a ProgressiveRenderer.

    Attributes:
        renderer: The renderer ticked once per frame.
        scale_factor: Integer upscaling from image pixels to window pixels.
        display_image: Taichi field holding the scaled RGB frame.
    """

    def __init__(
        self,
        renderer: ProgressiveRenderer,
        *,
        scale_factor: int = 2,
        title: str = "Ray",
    ) -> None:
        """Initialize the preview.

        The window itself is created lazily by :meth:`run` so the object can
        be built in headless environments.

        Args:
            renderer: The renderer to drive.
            scale_factor: Window pixels per image pixel along each axis.
            title: Window title.

        Raises:
            ValueError: If scale_factor is not a positive integer.
        """
        if scale_factor < 1:
            raise ValueError(f"scale_factor must be >= 1, got {scale_factor}")

        self.renderer = renderer
        self.scale_factor = int(scale_factor)
        self._title = title

        self._window: ti.ui.Window | None = None
        self._canvas: ti.ui.Canvas | None = None

        # Borrowed by write_display on every frame
        self._frame = bytearray(renderer.width * renderer.height * BYTES_PER_PIXEL)

        self.display_image: ti.MatrixField = ti.Vector.field(
            3, dtype=ti.f32, shape=self.window_size
        )

    @property
    def window_size(self) -> tuple[int, int]:
        """Window resolution in pixels (width, height)."""
        return (
            self.renderer.width * self.scale_factor,
            self.renderer.height * self.scale_factor,
        )

    def _initialize_window(self) -> None:
        """Create the Taichi GGUI window and canvas."""
        if self._window is not None:
            return
        self._window = ti.ui.Window(name=self._title, res=self.window_size, vsync=True)
        self._canvas = self._window.get_canvas()

    def frame_to_image(self) -> npt.NDArray[np.float32]:
        """Convert the current RGBA frame to the scaled display layout.

        Returns:
            Array of shape (width * scale, height * scale, 3) indexed (x, y)
            with y = 0 at the bottom, as the GGUI canvas expects.
        """
        rgba = np.frombuffer(self._frame, dtype=np.uint8).reshape(
            self.renderer.height, self.renderer.width, BYTES_PER_PIXEL
        )
        rgb = rgba[..., :3].astype(np.float32) / 255.0
        if self.scale_factor > 1:
            rgb = np.repeat(np.repeat(rgb, self.scale_factor, axis=0), self.scale_factor, axis=1)
        # Frame rows are top first; the canvas is (x, y) with y up
        return np.ascontiguousarray(np.transpose(np.flipud(rgb), (1, 0, 2)))

    def update(self) -> None:
        """Render one tick and refresh the display field."""
        self.renderer.tick()
        self.renderer.write_display(self._frame)
        self.display_image.from_numpy(self.frame_to_image())

    def _handle_events(self) -> None:
        assert self._window is not None
        while self._window.get_event(ti.ui.PRESS):
            key = self._window.event.key
            if key == ti.ui.ESCAPE:
                self._window.running = False
            elif key in ("p", "P"):
                self.export_png()

    def run(self, max_frames: int | None = None) -> None:
        """Run the window loop until it is closed.

        Args:
            max_frames: Optional cap on the number of frames to render.
        """
        self._initialize_window()
        assert self._window is not None and self._canvas is not None

        frames = 0
        while self._window.running:
            if max_frames is not None and frames >= max_frames:
                break
            self._handle_events()
            self.update()
            self._canvas.set_image(self.display_image)
            self._window.show()
            frames += 1
        logger.info(
            "Preview closed after %d frames (%d samples)", frames, self.renderer.sample_count
        )

    def export_png(self, filename: str | None = None) -> str:
        """Export the current estimate to a PNG file.

        Args:
            filename: Output path. Defaults to ``spheres_YYYYMMDD_HHMMSS.png``.

        Returns:
            The path written.
        """
        from pixelray.preview.export import save_png

        if filename is None:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            filename = f"spheres_{timestamp}.png"
        save_png(self.renderer, filename)
        logger.info("Exported %s (%d samples)", filename, self.renderer.sample_count)
        return filename

    @staticmethod
    def is_display_available() -> bool:
        """Check if a display is available for GUI rendering.

        Returns:
            True if a display is available, False for headless environments.
        """
        display = os.environ.get("DISPLAY")
        wayland = os.environ.get("WAYLAND_DISPLAY")

        if os.name == "nt":
            return True

        if os.uname().sysname == "Darwin":
            # SSH session without X forwarding
            return not (os.environ.get("SSH_CONNECTION") and not display)

        return bool(display or wayland)
