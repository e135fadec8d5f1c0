"""Unit tests for the texture registry.

Tests cover:
- Adding uint8 and float images
- Checkerboard generation
- Loading textures from image files with Pillow
- Nearest-neighbour sampling orientation and edge clamping
- Validation and capacity limits
"""

import numpy as np
import pytest
import taichi as ti


def _sample(texture_id: int, u: float, v: float):
    from phongtrace.materials.texture import sample_texture

    result = ti.field(dtype=ti.math.vec3, shape=())

    @ti.kernel
    def test_kernel(tid: ti.i32, su: ti.f32, sv: ti.f32):
        result[None] = sample_texture(tid, su, sv)

    test_kernel(texture_id, u, v)
    r = result[None]
    return (float(r[0]), float(r[1]), float(r[2]))


def _quadrant_image() -> np.ndarray:
    """2x2 image: top-left red, top-right green, bottom-left blue, bottom-right white."""
    return np.array(
        [
            [[255, 0, 0], [0, 255, 0]],
            [[0, 0, 255], [255, 255, 255]],
        ],
        dtype=np.uint8,
    )


class TestAddTexture:
    """Tests for add_texture."""

    def test_ids_and_size(self):
        """Test IDs are sequential and sizes are recorded."""
        from phongtrace.materials.texture import add_texture, get_texture_count, get_texture_size

        a = add_texture(np.zeros((4, 8, 3), dtype=np.float32))
        b = add_texture(np.zeros((2, 3, 3), dtype=np.uint8))
        assert (a, b) == (0, 1)
        assert get_texture_count() == 2
        assert get_texture_size(0) == (8, 4)
        assert get_texture_size(1) == (3, 2)

    def test_bad_shape(self):
        """Test non-RGB arrays are rejected."""
        from phongtrace.materials.texture import add_texture

        with pytest.raises(ValueError, match="shape"):
            add_texture(np.zeros((4, 4), dtype=np.float32))

    def test_empty_image(self):
        """Test empty images are rejected."""
        from phongtrace.materials.texture import add_texture

        with pytest.raises(ValueError, match="empty"):
            add_texture(np.zeros((0, 4, 3), dtype=np.float32))

    def test_invalid_size_query(self):
        """Test size queries reject unregistered IDs."""
        from phongtrace.materials.texture import get_texture_size

        with pytest.raises(ValueError, match="Invalid texture_id"):
            get_texture_size(0)

    def test_too_many_texels(self):
        """Test exceeding MAX_TEXELS raises RuntimeError."""
        from phongtrace.materials.texture import MAX_TEXELS, add_texture

        side = int(np.sqrt(MAX_TEXELS)) + 1
        with pytest.raises(RuntimeError, match="texels"):
            add_texture(np.zeros((side, side, 3), dtype=np.uint8))


class TestSampleTexture:
    """Tests for sample_texture."""

    def test_orientation(self):
        """Test v = 0 is the bottom row and u = 0 the left column."""
        from phongtrace.materials.texture import add_texture

        tid = add_texture(_quadrant_image())
        assert _sample(tid, 0.25, 0.75) == pytest.approx((1.0, 0.0, 0.0))
        assert _sample(tid, 0.75, 0.75) == pytest.approx((0.0, 1.0, 0.0))
        assert _sample(tid, 0.25, 0.25) == pytest.approx((0.0, 0.0, 1.0))
        assert _sample(tid, 0.75, 0.25) == pytest.approx((1.0, 1.0, 1.0))

    def test_edges(self):
        """Test u = v = 1 maps to the last texel instead of overflowing."""
        from phongtrace.materials.texture import add_texture

        tid = add_texture(_quadrant_image())
        assert _sample(tid, 1.0, 1.0) == pytest.approx((0.0, 1.0, 0.0))
        assert _sample(tid, 0.0, 0.0) == pytest.approx((0.0, 0.0, 1.0))

    def test_second_texture_offset(self):
        """Test samples of a later texture use its own texels."""
        from phongtrace.materials.texture import add_texture

        add_texture(np.zeros((3, 3, 3), dtype=np.float32))
        tid = add_texture(np.full((2, 2, 3), 0.5, dtype=np.float32))
        assert _sample(tid, 0.5, 0.5) == pytest.approx((0.5, 0.5, 0.5))

    def test_invalid_id_is_black(self):
        """Test sampling an unregistered texture returns black."""
        assert _sample(5, 0.5, 0.5) == (0.0, 0.0, 0.0)


class TestCheckerboard:
    """Tests for checkerboard generation."""

    def test_pattern(self):
        """Test squares alternate, starting with color_a at the top-left."""
        from phongtrace.materials.texture import make_checkerboard

        image = make_checkerboard(4, 4, squares=2, color_a=(1.0, 0.0, 0.0), color_b=(0.0, 0.0, 1.0))
        assert image.shape == (4, 4, 3)
        assert tuple(image[0, 0]) == (1.0, 0.0, 0.0)
        assert tuple(image[0, 3]) == (0.0, 0.0, 1.0)
        assert tuple(image[3, 0]) == (0.0, 0.0, 1.0)
        assert tuple(image[3, 3]) == (1.0, 0.0, 0.0)

    def test_invalid_dimensions(self):
        """Test non-positive dimensions are rejected."""
        from phongtrace.materials.texture import make_checkerboard

        with pytest.raises(ValueError):
            make_checkerboard(0, 4)

    def test_add_checkerboard_texture(self):
        """Test the generated checkerboard is registered and sampled."""
        from phongtrace.materials.texture import add_checkerboard_texture

        tid = add_checkerboard_texture(8, 8, squares=2)
        # Bottom-left square of a 2x2 board starting white at the top-left is black
        assert _sample(tid, 0.1, 0.1) == pytest.approx((0.0, 0.0, 0.0))
        assert _sample(tid, 0.1, 0.9) == pytest.approx((1.0, 1.0, 1.0))


class TestLoadTexture:
    """Tests for load_texture."""

    def test_load_png(self, tmp_path):
        """Test an image written with Pillow loads with the same orientation."""
        from PIL import Image

        from phongtrace.materials.texture import get_texture_size, load_texture

        path = tmp_path / "quadrants.png"
        Image.fromarray(_quadrant_image()).save(path)

        tid = load_texture(path)
        assert get_texture_size(tid) == (2, 2)
        assert _sample(tid, 0.25, 0.75) == pytest.approx((1.0, 0.0, 0.0))
        assert _sample(tid, 0.75, 0.25) == pytest.approx((1.0, 1.0, 1.0))
