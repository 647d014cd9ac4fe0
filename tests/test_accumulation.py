"""Unit tests for the accumulation buffer and display conversion.

Tests cover:
- Per-pixel averaging and sample counts
- Reads do not mutate the buffer
- RGBA conversion: length, alpha, rounding and row order
- Writing into borrowed frames
"""

import numpy as np
import pytest

from pixelray.core.accumulation import (
    BYTES_PER_PIXEL,
    AccumulationBuffer,
    display_array,
    to_display_bytes,
    write_display_bytes,
)


class TestAccumulationBuffer:
    """Tests for AccumulationBuffer."""

    def test_new_buffer_is_black(self):
        """Test unsampled pixels average to black."""
        buffer = AccumulationBuffer(3, 2)
        assert buffer.sample_count == 0
        np.testing.assert_array_equal(buffer.snapshot(), np.zeros((2, 3, 3)))

    def test_average_of_samples(self):
        """Test the estimate is the mean of the added samples."""
        buffer = AccumulationBuffer(2, 2)
        buffer.add_color(1, 0, (1.0, 0.0, 0.5))
        buffer.add_color(1, 0, (0.0, 1.0, 0.5))
        buffer.add_color(1, 0, (0.5, 0.5, 0.5))
        np.testing.assert_allclose(buffer.snapshot()[0, 1], [0.5, 0.5, 0.5])
        assert buffer.pixel_sample_count(1, 0) == 3
        assert buffer.pixel_sample_count(0, 0) == 0
        assert buffer.sample_count == 3

    def test_add_samples_repeated_pixels(self):
        """Test a batch hitting the same pixel twice accumulates both."""
        buffer = AccumulationBuffer(2, 1)
        buffer.add_samples([0, 0, 1], [0, 0, 0], [[1.0, 1.0, 1.0], [0.0, 0.0, 0.0], [0.2, 0.4, 0.6]])
        assert buffer.pixel_sample_count(0, 0) == 2
        np.testing.assert_allclose(buffer.snapshot()[0, 0], [0.5, 0.5, 0.5])
        np.testing.assert_allclose(buffer.snapshot()[0, 1], [0.2, 0.4, 0.6])

    def test_add_samples_shape_mismatch(self):
        """Test mismatched batch arrays are rejected."""
        buffer = AccumulationBuffer(2, 2)
        with pytest.raises(ValueError, match="disagree"):
            buffer.add_samples([0, 1], [0], [[0.0, 0.0, 0.0], [1.0, 1.0, 1.0]])

    def test_snapshot_is_idempotent(self):
        """Test reading twice gives the same image and leaves the buffer alone."""
        buffer = AccumulationBuffer(2, 2)
        buffer.add_color(0, 1, (0.3, 0.6, 0.9))
        first = buffer.snapshot()
        first[...] = 7.0
        second = buffer.snapshot()
        np.testing.assert_allclose(second[1, 0], [0.3, 0.6, 0.9])
        assert buffer.sample_count == 1

    def test_iteration_order(self):
        """Test iteration walks rows bottom first, columns left to right."""
        buffer = AccumulationBuffer(2, 2)
        buffer.add_color(1, 0, (1.0, 0.0, 0.0))
        buffer.add_color(0, 1, (0.0, 1.0, 0.0))
        colors = list(buffer)
        assert len(colors) == 4
        assert colors[1] == (1.0, 0.0, 0.0)
        assert colors[2] == (0.0, 1.0, 0.0)
        assert list(buffer) == colors

    def test_reset(self):
        """Test reset forgets all samples."""
        buffer = AccumulationBuffer(2, 2)
        buffer.add_color(0, 0, (1.0, 1.0, 1.0))
        buffer.reset()
        assert buffer.sample_count == 0
        np.testing.assert_array_equal(buffer.snapshot(), 0.0)

    @pytest.mark.parametrize("width,height", [(0, 2), (2, 0), (-1, 3)])
    def test_invalid_dimensions(self, width, height):
        """Test non-positive dimensions are rejected."""
        with pytest.raises(ValueError, match="positive"):
            AccumulationBuffer(width, height)

    def test_repr(self):
        """Test repr reports size and samples."""
        assert "samples=0" in repr(AccumulationBuffer(4, 3))


class TestDisplayConversion:
    """Tests for RGBA display output."""

    def test_length_and_alpha(self):
        """Test the frame has 4 bytes per pixel and opaque alpha."""
        buffer = AccumulationBuffer(5, 3)
        data = to_display_bytes(buffer)
        assert len(data) == 5 * 3 * BYTES_PER_PIXEL
        assert data[3::4] == bytes([255]) * 15

    def test_rounding_and_clamping(self):
        """Test channels are clamped then rounded to the nearest byte."""
        buffer = AccumulationBuffer(1, 1)
        buffer.add_color(0, 0, (1.5, -0.2, 0.5))
        rgba = display_array(buffer)
        assert rgba[0, 0].tolist() == [255, 0, 128, 255]

    def test_halves_round_up(self):
        """Test channel values exactly halfway between bytes round up."""
        k = np.arange(0, 255, 2)
        values = (k + 0.5) / 255.0
        # Keep the inputs whose scaled value lands exactly on the half
        exact = values * 255.0 == k + 0.5
        assert exact.any()

        buffer = AccumulationBuffer(len(k), 1)
        for x, v in enumerate(values):
            buffer.add_color(x, 0, (v, v, v))
        rgba = display_array(buffer)
        np.testing.assert_array_equal(rgba[0, exact, 0], k[exact] + 1)

    def test_bottom_row_written_last(self):
        """Test row 0 of the buffer becomes the last display row."""
        buffer = AccumulationBuffer(2, 3)
        buffer.add_color(0, 0, (1.0, 0.0, 0.0))
        buffer.add_color(1, 2, (0.0, 0.0, 1.0))
        data = to_display_bytes(buffer)
        row_bytes = 2 * BYTES_PER_PIXEL
        # Top display row holds buffer row 2
        assert data[BYTES_PER_PIXEL:row_bytes] == bytes([0, 0, 255, 255])
        # Bottom display row holds buffer row 0
        assert data[2 * row_bytes:2 * row_bytes + 4] == bytes([255, 0, 0, 255])

    def test_write_into_bytearray(self):
        """Test write_display_bytes fills a borrowed frame in place."""
        buffer = AccumulationBuffer(3, 2)
        buffer.add_color(2, 1, (0.2, 0.4, 0.6))
        frame = bytearray(3 * 2 * BYTES_PER_PIXEL)
        write_display_bytes(buffer, frame)
        assert bytes(frame) == to_display_bytes(buffer)

    def test_write_into_numpy_frame(self):
        """Test numpy uint8 frames are accepted."""
        buffer = AccumulationBuffer(2, 2)
        frame = np.zeros((2, 2, 4), dtype=np.uint8)
        write_display_bytes(buffer, frame)
        assert np.all(frame[..., 3] == 255)

    def test_write_wrong_length(self):
        """Test a frame of the wrong size is rejected."""
        buffer = AccumulationBuffer(3, 2)
        with pytest.raises(ValueError, match="expected 24"):
            write_display_bytes(buffer, bytearray(20))
