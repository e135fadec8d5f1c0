"""Unit tests for the frame buffer.

Tests cover:
- Size, resize and clearing
- Pixel writes with clamping and bounds checking
- NumPy export orientation
- Presenter callbacks
"""

import numpy as np
import pytest


class TestFrameBufferSize:
    """Tests for allocation and resizing."""

    def test_size(self):
        """Test the buffer reports its dimensions."""
        from phongtrace.core.framebuffer import FrameBuffer

        fb = FrameBuffer(8, 4)
        assert fb.get_window_width() == 8
        assert fb.get_window_height() == 4
        assert (fb.width, fb.height) == (8, 4)
        assert fb.colors.shape == (8, 4)

    @pytest.mark.parametrize("size", [(0, 4), (4, 0), (-2, 3)])
    def test_invalid_size(self, size):
        """Test non-positive sizes are rejected."""
        from phongtrace.core.framebuffer import FrameBuffer

        with pytest.raises(ValueError, match="positive"):
            FrameBuffer(*size)

    def test_resize_clears(self):
        """Test resizing reallocates and fills with the clear color."""
        from phongtrace.core.framebuffer import FrameBuffer

        fb = FrameBuffer(2, 2, clear_color=(0.25, 0.5, 0.75))
        fb.set_color(0, 0, (1.0, 1.0, 1.0))
        fb.set_frame_buffer_size(3, 5)

        assert fb.to_numpy().shape == (5, 3, 3)
        assert fb.get_color(2, 4) == pytest.approx((0.25, 0.5, 0.75))


class TestFrameBufferPixels:
    """Tests for pixel access."""

    def test_initial_clear_color(self):
        """Test a new buffer is filled with the clear color."""
        from phongtrace.core.framebuffer import FrameBuffer

        fb = FrameBuffer(3, 3, clear_color=(0.1, 0.2, 0.3))
        image = fb.to_numpy()
        assert np.allclose(image, np.array([0.1, 0.2, 0.3], dtype=np.float32))

    def test_set_and_get(self):
        """Test a written pixel reads back unchanged."""
        from phongtrace.core.framebuffer import FrameBuffer

        fb = FrameBuffer(4, 4)
        fb.set_color(1, 2, (0.2, 0.4, 0.6))
        assert fb.get_color(1, 2) == pytest.approx((0.2, 0.4, 0.6))
        assert fb.get_color(2, 1) == (0.0, 0.0, 0.0)

    def test_set_color_clamps(self):
        """Test out-of-range channels are clamped to [0, 1]."""
        from phongtrace.core.framebuffer import FrameBuffer

        fb = FrameBuffer(2, 2)
        fb.set_color(0, 0, (1.5, -0.5, 0.5))
        assert fb.get_color(0, 0) == pytest.approx((1.0, 0.0, 0.5))

    @pytest.mark.parametrize("xy", [(-1, 0), (0, -1), (4, 0), (0, 3)])
    def test_out_of_bounds(self, xy):
        """Test pixel access outside the buffer raises ValueError."""
        from phongtrace.core.framebuffer import FrameBuffer

        fb = FrameBuffer(4, 3)
        with pytest.raises(ValueError, match="outside"):
            fb.set_color(*xy, (1.0, 1.0, 1.0))
        with pytest.raises(ValueError, match="outside"):
            fb.get_color(*xy)

    def test_clear_color_buffer(self):
        """Test clearing overwrites written pixels with the new clear color."""
        from phongtrace.core.framebuffer import FrameBuffer

        fb = FrameBuffer(2, 2)
        fb.set_color(1, 1, (1.0, 0.0, 0.0))
        fb.set_clear_color((0.0, 1.0, 0.0))
        fb.clear_color_buffer()
        assert fb.get_color(1, 1) == pytest.approx((0.0, 1.0, 0.0))


class TestFrameBufferExport:
    """Tests for to_numpy."""

    def test_orientation(self):
        """Test pixel (0, 0) ends up in the last row of the image."""
        from phongtrace.core.framebuffer import FrameBuffer

        fb = FrameBuffer(3, 2)
        fb.set_color(0, 0, (1.0, 0.0, 0.0))
        fb.set_color(2, 1, (0.0, 0.0, 1.0))

        image = fb.to_numpy()
        assert image.shape == (2, 3, 3)
        assert image.dtype == np.float32
        assert tuple(image[1, 0]) == (1.0, 0.0, 0.0)
        assert tuple(image[0, 2]) == (0.0, 0.0, 1.0)


class TestFrameBufferPresent:
    """Tests for show_color_buffer."""

    def test_present_without_presenter(self):
        """Test presenting only counts frames when no presenter is set."""
        from phongtrace.core.framebuffer import FrameBuffer

        fb = FrameBuffer(2, 2)
        fb.show_color_buffer()
        fb.show_color_buffer()
        assert fb.present_count == 2

    def test_presenter_called(self):
        """Test the presenter receives the frame buffer."""
        from phongtrace.core.framebuffer import FrameBuffer

        seen = []
        fb = FrameBuffer(2, 2, presenter=seen.append)
        fb.show_color_buffer()
        assert seen == [fb]
        assert fb.present_count == 1
