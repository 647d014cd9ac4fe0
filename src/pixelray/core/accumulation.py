"""Per-pixel accumulation buffer and display conversion.

Each pixel keeps a running color sum and a sample count; the estimate is the
sum divided by the count, or black for pixels nobody has sampled yet. Reads
never mutate the buffer, so a snapshot can be taken after every batch.

Row 0 is the bottom of the image, matching the camera's upward ``t`` axis.
Display frames are written top row first, so :func:`to_display_bytes` flips
the rows.

Example:
    >>> buffer = AccumulationBuffer(4, 2)
    >>> buffer.add_color(0, 0, (1.0, 0.0, 0.0))
    >>> buffer.add_color(0, 0, (0.0, 0.0, 1.0))
    >>> buffer.snapshot()[0, 0]
    array([0.5, 0. , 0.5])
"""

from collections.abc import Iterator
from typing import Union

import numpy as np
import numpy.typing as npt

Color = tuple[float, float, float]
WritableBuffer = Union[bytearray, memoryview, npt.NDArray[np.uint8]]

BYTES_PER_PIXEL = 4


class AccumulationBuffer:
    """Running per-pixel color sums and sample counts.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
    """

    def __init__(self, width: int, height: int) -> None:
        """Create an empty buffer.

        Args:
            width: Image width in pixels (positive).
            height: Image height in pixels (positive).

        Raises:
            ValueError: If either dimension is not positive.
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
        self._width = int(width)
        self._height = int(height)
        self._sums = np.zeros((self._height, self._width, 3), dtype=np.float64)
        self._counts = np.zeros((self._height, self._width), dtype=np.int64)

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._height

    @property
    def sample_count(self) -> int:
        """Total number of samples added across all pixels."""
        return int(self._counts.sum())

    def pixel_sample_count(self, x: int, y: int) -> int:
        """Number of samples added at pixel (x, y)."""
        return int(self._counts[y, x])

    def add_color(self, x: int, y: int, color: Color) -> None:
        """Add one sample to pixel (x, y).

        Args:
            x: Column, 0 is the left edge.
            y: Row, 0 is the bottom edge.
            color: The sample's RGB value.
        """
        self._sums[y, x] += color
        self._counts[y, x] += 1

    def add_samples(
        self,
        xs: npt.ArrayLike,
        ys: npt.ArrayLike,
        colors: npt.ArrayLike,
    ) -> None:
        """Add a batch of samples.

        Samples are folded in the order given; repeated pixels accumulate.

        Args:
            xs: Column of each sample, shape (n,).
            ys: Row of each sample, shape (n,).
            colors: RGB of each sample, shape (n, 3).
        """
        xs = np.asarray(xs, dtype=np.intp)
        ys = np.asarray(ys, dtype=np.intp)
        colors = np.asarray(colors, dtype=np.float64).reshape(-1, 3)
        if not xs.shape == ys.shape == (colors.shape[0],):
            raise ValueError(
                f"Sample arrays disagree: xs {xs.shape}, ys {ys.shape}, "
                f"colors {colors.shape}"
            )
        np.add.at(self._sums, (ys, xs), colors)
        np.add.at(self._counts, (ys, xs), 1)

    def snapshot(self) -> npt.NDArray[np.float64]:
        """Return the averaged image without modifying the buffer.

        Returns:
            Array of shape (height, width, 3), bottom row first. Pixels with
            no samples are black.
        """
        counts = self._counts[..., np.newaxis]
        averaged = np.zeros_like(self._sums)
        np.divide(self._sums, counts, out=averaged, where=counts > 0)
        return averaged

    def __iter__(self) -> Iterator[Color]:
        """Yield per-pixel averages in index order, bottom row first."""
        for row in self.snapshot():
            for color in row:
                yield (float(color[0]), float(color[1]), float(color[2]))

    def reset(self) -> None:
        """Forget every sample."""
        self._sums.fill(0.0)
        self._counts.fill(0)

    def __repr__(self) -> str:
        return (
            f"AccumulationBuffer(width={self.width}, height={self.height}, "
            f"samples={self.sample_count})"
        )


def display_array(buffer: AccumulationBuffer) -> npt.NDArray[np.uint8]:
    """Convert a buffer to an RGBA8 image, top row first.

    Each channel maps to ``round(clamp(c, 0, 1) * 255)`` with halves rounding
    up; alpha is 255.

    Returns:
        Array of shape (height, width, 4) with dtype uint8.
    """
    image = np.flipud(buffer.snapshot())
    rgba = np.empty((buffer.height, buffer.width, BYTES_PER_PIXEL), dtype=np.uint8)
    rgba[..., :3] = np.floor(np.clip(image, 0.0, 1.0) * 255.0 + 0.5).astype(np.uint8)
    rgba[..., 3] = 255
    return rgba


def to_display_bytes(buffer: AccumulationBuffer) -> bytes:
    """Encode a buffer as packed RGBA bytes, row-major, top row first.

    Returns:
        ``width * height * 4`` bytes.
    """
    return display_array(buffer).tobytes()


def write_display_bytes(buffer: AccumulationBuffer, frame: WritableBuffer) -> None:
    """Fill a borrowed RGBA frame in place.

    The frame is only written during this call; no reference to it is kept.

    Args:
        buffer: The accumulation buffer to convert.
        frame: Writable buffer of exactly ``width * height * 4`` bytes.

    Raises:
        ValueError: If the frame has the wrong length.
    """
    expected = buffer.width * buffer.height * BYTES_PER_PIXEL
    target = np.frombuffer(frame, dtype=np.uint8)
    if target.size != expected:
        raise ValueError(f"Frame holds {target.size} bytes, expected {expected}")
    target[:] = display_array(buffer).reshape(-1)
