"""Frame buffer holding the rendered colors.

The FrameBuffer is an explicitly constructed object passed to the tracer,
not a process-wide singleton. It owns a Taichi color field of shape
(width, height); pixel (0, 0) is the bottom-left corner of the image.

Presenting the image is delegated to an optional presenter callback, for
example preview.display.matplotlib_presenter or a closure that saves a
PNG. Without a presenter, show_color_buffer() only records that a frame
was presented.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from phongtrace.core.framebuffer import FrameBuffer
    >>> fb = FrameBuffer(320, 240)
    >>> fb.set_color(10, 20, (1.0, 0.0, 0.0))
    >>> image = fb.to_numpy()  # (240, 320, 3), top row first
"""

from collections.abc import Callable

import numpy as np
import numpy.typing as npt
import taichi as ti

Color = tuple[float, float, float]

# Callback invoked by show_color_buffer()
Presenter = Callable[["FrameBuffer"], None]


@ti.kernel
def _fill_color(buffer: ti.template(), r: ti.f32, g: ti.f32, b: ti.f32):
    """Set every cell of a color field to (r, g, b)."""
    for i, j in buffer:
        buffer[i, j] = ti.math.vec3(r, g, b)


def _clamp01(value: float) -> float:
    return min(max(float(value), 0.0), 1.0)


class FrameBuffer:
    """A 2D RGB pixel store backed by a Taichi field.

    Attributes:
        clear_color: Color written by clear_color_buffer().
        present_count: Number of times show_color_buffer() was called.
    """

    def __init__(
        self,
        width: int,
        height: int,
        *,
        clear_color: Color = (0.0, 0.0, 0.0),
        presenter: Presenter | None = None,
    ) -> None:
        """Allocate a frame buffer.

        Args:
            width: Width in pixels.
            height: Height in pixels.
            clear_color: Initial (and clear) color.
            presenter: Optional callback run by show_color_buffer().

        Raises:
            ValueError: If width or height is not positive.
        """
        self.clear_color = clear_color
        self.presenter = presenter
        self.present_count = 0
        self._width = 0
        self._height = 0
        self._colors: ti.MatrixField | None = None
        self.set_frame_buffer_size(width, height)

    @property
    def width(self) -> int:
        """Get the buffer width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the buffer height."""
        return self._height

    @property
    def colors(self) -> ti.MatrixField:
        """The underlying (width, height) Taichi color field."""
        return self._colors

    def get_window_width(self) -> int:
        """Width in pixels."""
        return self._width

    def get_window_height(self) -> int:
        """Height in pixels."""
        return self._height

    def set_frame_buffer_size(self, width: int, height: int) -> None:
        """Resize the buffer, discarding its contents.

        Raises:
            ValueError: If width or height is not positive.
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Frame buffer size ({width}x{height}) must be positive")
        if self._colors is None or (width, height) != (self._width, self._height):
            self._colors = ti.Vector.field(3, dtype=ti.f32, shape=(width, height))
            self._width = width
            self._height = height
        self.clear_color_buffer()

    def set_clear_color(self, color: Color) -> None:
        """Change the color used by clear_color_buffer()."""
        self.clear_color = color

    def clear_color_buffer(self) -> None:
        """Fill every pixel with the clear color."""
        r, g, b = (_clamp01(c) for c in self.clear_color)
        _fill_color(self._colors, r, g, b)

    def _check_bounds(self, x: int, y: int) -> None:
        if not (0 <= x < self._width and 0 <= y < self._height):
            raise ValueError(
                f"Pixel ({x}, {y}) is outside the {self._width}x{self._height} frame buffer"
            )

    def set_color(self, x: int, y: int, color: Color) -> None:
        """Write one pixel, clamping each channel to [0, 1].

        Raises:
            ValueError: If (x, y) is outside the buffer.
        """
        self._check_bounds(x, y)
        self._colors[x, y] = [_clamp01(color[0]), _clamp01(color[1]), _clamp01(color[2])]

    def get_color(self, x: int, y: int) -> Color:
        """Read one pixel.

        Raises:
            ValueError: If (x, y) is outside the buffer.
        """
        self._check_bounds(x, y)
        c = self._colors[x, y]
        return (float(c[0]), float(c[1]), float(c[2]))

    def to_numpy(self) -> npt.NDArray[np.float32]:
        """Get the image as a NumPy array.

        Returns:
            Float32 array of shape (height, width, 3) in standard image
            order (top row first).
        """
        image = self._colors.to_numpy()
        # (width, height, 3) -> (height, width, 3), then flip to top-left origin
        image = np.transpose(image, (1, 0, 2))
        image = np.flipud(image)
        return np.ascontiguousarray(image, dtype=np.float32)

    def show_color_buffer(self) -> None:
        """Present the current image through the presenter callback."""
        self.present_count += 1
        if self.presenter is not None:
            self.presenter(self)
