"""Image export utilities for rendered images.

Supported formats:
    - PNG (8-bit RGB via Pillow)

Example:
    >>> from phongtrace.preview.export import save_png
    >>> save_png(frame_buffer, "output.png")
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from phongtrace.preview.display import process_image_for_display

if TYPE_CHECKING:
    from phongtrace.core.framebuffer import FrameBuffer


def image_to_uint8(
    image: npt.NDArray[np.float32],
    *,
    gamma: float = 1.0,
) -> npt.NDArray[np.uint8]:
    """Convert a float image in [0, 1] to uint8.

    Args:
        image: Image array of shape (H, W, 3).
        gamma: Gamma correction value.

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.
    """
    processed = process_image_for_display(image, gamma=gamma)
    return np.round(processed * 255.0).astype(np.uint8)


def save_png_from_array(
    image: npt.NDArray[np.float32],
    filepath: str | Path,
    *,
    gamma: float = 1.0,
) -> None:
    """Save a NumPy array as a PNG file.

    Args:
        image: Image array of shape (H, W, 3), top row first.
        filepath: Output file path (should end in .png).
        gamma: Gamma correction value.
    """
    image_uint8 = image_to_uint8(image, gamma=gamma)
    pil_image = PILImage.fromarray(image_uint8)
    pil_image.save(filepath)


def save_png(
    frame_buffer: FrameBuffer,
    filepath: str | Path,
    *,
    gamma: float = 1.0,
) -> None:
    """Save the contents of a frame buffer as a PNG file.

    Args:
        frame_buffer: The frame buffer to save.
        filepath: Output file path (should end in .png).
        gamma: Gamma correction value.
    """
    save_png_from_array(frame_buffer.to_numpy(), filepath, gamma=gamma)


def png_presenter(filepath: str | Path, *, gamma: float = 1.0) -> Callable[[FrameBuffer], None]:
    """Build a FrameBuffer presenter that writes each presented frame to a PNG."""

    def _present(frame_buffer: FrameBuffer) -> None:
        save_png(frame_buffer, filepath, gamma=gamma)

    return _present


def compute_rmse(
    image_a: npt.NDArray[np.floating[npt.NBitBase]],
    image_b: npt.NDArray[np.floating[npt.NBitBase]],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
