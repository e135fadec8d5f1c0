"""Matplotlib-based preview display for rendered images.

The ray tracer writes display-ready colors in [0, 1], so the display
pipeline is only an optional gamma curve followed by a final clamp.

Features:
    - Static preview window for a FrameBuffer
    - A presenter callback so show_color_buffer() opens the preview
    - Side-by-side comparison of two renders

Example:
    >>> from phongtrace.core.framebuffer import FrameBuffer
    >>> from phongtrace.preview.display import matplotlib_presenter
    >>>
    >>> fb = FrameBuffer(320, 240, presenter=matplotlib_presenter)
    >>> # RayTracer().raytrace_scene(fb, 2, scene) now opens a preview window
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

if TYPE_CHECKING:
    from phongtrace.core.framebuffer import FrameBuffer


def apply_gamma(
    image: npt.NDArray[np.float32],
    gamma: float = 1.0,
) -> npt.NDArray[np.float32]:
    """Apply gamma correction for display.

    Args:
        image: Image array of shape (H, W, 3) in [0, 1] range.
        gamma: Gamma value. 1.0 leaves the image unchanged, 2.2 encodes
            linear values for an sRGB monitor.

    Returns:
        Gamma corrected image.

    Raises:
        ValueError: If gamma is not positive.
    """
    if gamma <= 0.0:
        raise ValueError(f"Gamma = {gamma} must be positive")
    if gamma == 1.0:
        return image

    # Clamp to [0, 1] before gamma to avoid NaN from negative values
    image = np.clip(image, 0.0, 1.0)

    result = np.power(image, 1.0 / gamma)

    return result.astype(np.float32)


def process_image_for_display(
    image: npt.NDArray[np.float32],
    gamma: float = 1.0,
) -> npt.NDArray[np.float32]:
    """Gamma-correct and clamp an image to [0, 1].

    Non-finite values are replaced with 0.

    Args:
        image: Image array of shape (H, W, 3).
        gamma: Gamma correction value.

    Returns:
        Processed image ready for display, in [0, 1] range.
    """
    result = np.nan_to_num(image.astype(np.float32), nan=0.0, posinf=0.0, neginf=0.0)
    result = apply_gamma(result, gamma)
    result = np.clip(result, 0.0, 1.0)
    return result.astype(np.float32)


def show_preview(
    frame_buffer: FrameBuffer,
    *,
    gamma: float = 1.0,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 6),
    block: bool = True,
) -> None:
    """Display a frame buffer as a Matplotlib figure.

    Args:
        frame_buffer: The frame buffer to display.
        gamma: Gamma correction value.
        title: Custom title (default shows the image size).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    display_image = process_image_for_display(frame_buffer.to_numpy(), gamma=gamma)

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(display_image)
    ax.axis("off")

    if title is None:
        title = f"Render Preview - {frame_buffer.width}x{frame_buffer.height}"
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)


def matplotlib_presenter(frame_buffer: FrameBuffer) -> None:
    """FrameBuffer presenter that opens a blocking preview window."""
    show_preview(frame_buffer)


def show_comparison(
    image_a: npt.NDArray[np.float32],
    image_b: npt.NDArray[np.float32],
    *,
    labels: tuple[str, str] = ("A", "B"),
    diff_scale: float = 10.0,
    figsize: tuple[float, float] = (16, 6),
    block: bool = True,
) -> float:
    """Display two images side by side with an amplified difference view.

    Args:
        image_a: First image array (H, W, 3).
        image_b: Second image array (H, W, 3).
        labels: Labels for the two images.
        diff_scale: Scale factor for difference amplification.
        figsize: Figure size in inches.
        block: Whether to block execution until figure is closed.

    Returns:
        RMSE between the two displayed images.
    """
    import matplotlib.pyplot as plt

    display_a = process_image_for_display(image_a)
    display_b = process_image_for_display(image_b)

    diff = display_a.astype(np.float64) - display_b.astype(np.float64)
    rmse = float(np.sqrt(np.mean(diff**2)))
    diff_amplified = np.clip(np.abs(diff) * diff_scale, 0.0, 1.0)

    fig, axes = plt.subplots(1, 3, figsize=figsize)

    axes[0].imshow(display_a)
    axes[0].set_title(labels[0])
    axes[0].axis("off")

    axes[1].imshow(display_b)
    axes[1].set_title(labels[1])
    axes[1].axis("off")

    axes[2].imshow(diff_amplified)
    axes[2].set_title(f"Difference ({diff_scale}x) - RMSE: {rmse:.6f}")
    axes[2].axis("off")

    plt.tight_layout()
    plt.show(block=block)

    return rmse
