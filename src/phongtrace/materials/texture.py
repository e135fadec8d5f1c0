"""Image textures sampled by (u, v) coordinates.

Textures bypass the lighting model: a surface carrying a texture displays
the texel found at its hit-record (u, v) directly.

All texels of all textures live in one flat Taichi field. Each texture
records its offset into that field and its width/height. Rows are stored
bottom-up so that v = 0 is the bottom of the image, matching the (u, v)
produced by the primitives.

Lookups use nearest-neighbour filtering. Callers clamp (u, v) to [0, 1]
before sampling.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from phongtrace.materials.texture import add_checkerboard_texture
    >>> checker = add_checkerboard_texture(64, 64, squares=8)
    >>> # Use sample_texture(checker, u, v) within a Taichi kernel
"""

from pathlib import Path

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm
from PIL import Image as PILImage

# Type alias for 3D vectors
vec3 = tm.vec3

Color = tuple[float, float, float]

# Registry capacity
MAX_TEXTURES = 64
MAX_TEXELS = 1 << 20

texels = ti.Vector.field(3, dtype=ti.f32, shape=MAX_TEXELS)
texture_offsets = ti.field(dtype=ti.i32, shape=MAX_TEXTURES)
texture_widths = ti.field(dtype=ti.i32, shape=MAX_TEXTURES)
texture_heights = ti.field(dtype=ti.i32, shape=MAX_TEXTURES)
num_textures = ti.field(dtype=ti.i32, shape=())
num_texels = ti.field(dtype=ti.i32, shape=())


@ti.kernel
def _copy_texels(src: ti.types.ndarray(), offset: ti.i32, count: ti.i32):
    """Copy a flat (count, 3) float32 array into the texel field."""
    for k in range(count):
        texels[offset + k] = vec3(src[k, 0], src[k, 1], src[k, 2])


def clear_textures() -> None:
    """Clear all textures from the registry."""
    num_textures[None] = 0
    num_texels[None] = 0


def _to_float_image(image: npt.NDArray) -> npt.NDArray[np.float32]:
    """Convert an (H, W, 3) uint8 or float image to float32 in [0, 1]."""
    if image.ndim != 3 or image.shape[2] < 3:
        raise ValueError(f"Texture image must have shape (H, W, 3), got {image.shape}")
    rgb = image[:, :, :3]
    if np.issubdtype(rgb.dtype, np.integer):
        return (rgb.astype(np.float32) / 255.0).astype(np.float32)
    return np.clip(rgb.astype(np.float32), 0.0, 1.0)


def add_texture(image: npt.NDArray) -> int:
    """Add an RGB image to the texture registry.

    Args:
        image: Array of shape (H, W, 3) in standard top-down row order.
            uint8 images are scaled to [0, 1]; float images are clamped.

    Returns:
        The texture ID.

    Raises:
        ValueError: If the image shape is invalid or empty.
        RuntimeError: If the registry capacity is exceeded.
    """
    rgb = _to_float_image(np.asarray(image))
    height, width = rgb.shape[0], rgb.shape[1]
    if width == 0 or height == 0:
        raise ValueError("Texture image must not be empty")

    idx = num_textures[None]
    if idx >= MAX_TEXTURES:
        raise RuntimeError(f"Maximum number of textures ({MAX_TEXTURES}) exceeded")

    offset = num_texels[None]
    count = width * height
    if offset + count > MAX_TEXELS:
        raise RuntimeError(f"Maximum number of texels ({MAX_TEXELS}) exceeded")

    # Store bottom row first so that v = 0 addresses the bottom of the image
    flat = np.ascontiguousarray(np.flipud(rgb).reshape(count, 3), dtype=np.float32)
    _copy_texels(flat, offset, count)

    texture_offsets[idx] = offset
    texture_widths[idx] = width
    texture_heights[idx] = height
    num_texels[None] = offset + count
    num_textures[None] = idx + 1
    return idx


def load_texture(filepath: str | Path) -> int:
    """Load an image file with Pillow and add it as a texture.

    Args:
        filepath: Path to any image format Pillow can read.

    Returns:
        The texture ID.
    """
    with PILImage.open(filepath) as img:
        image = np.asarray(img.convert("RGB"))
    return add_texture(image)


def make_checkerboard(
    width: int,
    height: int,
    squares: int = 8,
    color_a: Color = (1.0, 1.0, 1.0),
    color_b: Color = (0.0, 0.0, 0.0),
) -> npt.NDArray[np.float32]:
    """Build a checkerboard image.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        squares: Number of squares along each axis.
        color_a: Color of the square containing the top-left pixel.
        color_b: Color of the alternate squares.

    Returns:
        Float32 array of shape (height, width, 3).

    Raises:
        ValueError: If any dimension is not positive.
    """
    if width <= 0 or height <= 0 or squares <= 0:
        raise ValueError("Checkerboard width, height and squares must be positive")

    cols = (np.arange(width) * squares) // width
    rows = (np.arange(height) * squares) // height
    parity = (rows[:, None] + cols[None, :]) % 2

    image = np.empty((height, width, 3), dtype=np.float32)
    image[parity == 0] = color_a
    image[parity == 1] = color_b
    return image


def add_checkerboard_texture(
    width: int = 64,
    height: int = 64,
    squares: int = 8,
    color_a: Color = (1.0, 1.0, 1.0),
    color_b: Color = (0.0, 0.0, 0.0),
) -> int:
    """Generate a checkerboard and add it to the registry.

    Returns:
        The texture ID.
    """
    return add_texture(make_checkerboard(width, height, squares, color_a, color_b))


def get_texture_count() -> int:
    """Get the number of textures in the registry."""
    return int(num_textures[None])


def get_texture_size(texture_id: int) -> tuple[int, int]:
    """Get (width, height) of a registered texture.

    Raises:
        ValueError: If the texture ID is not registered.
    """
    if texture_id < 0 or texture_id >= num_textures[None]:
        raise ValueError(f"Invalid texture_id: {texture_id}")
    return int(texture_widths[texture_id]), int(texture_heights[texture_id])


@ti.func
def sample_texture(texture_id: ti.i32, u: ti.f32, v: ti.f32) -> vec3:
    """Nearest-neighbour texel lookup.

    Args:
        texture_id: The texture to sample.
        u: Horizontal coordinate in [0, 1] (left to right).
        v: Vertical coordinate in [0, 1] (bottom to top).

    Returns:
        The texel color, or black for an unregistered texture ID.
    """
    result = vec3(0.0, 0.0, 0.0)
    if 0 <= texture_id < num_textures[None]:
        width = texture_widths[texture_id]
        height = texture_heights[texture_id]
        i = ti.min(ti.cast(u * ti.cast(width, ti.f32), ti.i32), width - 1)
        j = ti.min(ti.cast(v * ti.cast(height, ti.f32), ti.i32), height - 1)
        i = ti.max(i, 0)
        j = ti.max(j, 0)
        result = texels[texture_offsets[texture_id] + j * width + i]
    return result
