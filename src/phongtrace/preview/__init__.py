"""Preview module for output and visualization.

Components:
    display: Matplotlib-based preview display
    export: PNG export utilities

Example:
    >>> from phongtrace.preview import save_png, show_preview
    >>> save_png(frame_buffer, "output.png")
    >>> show_preview(frame_buffer)
"""

from phongtrace.preview.display import (
    apply_gamma,
    matplotlib_presenter,
    process_image_for_display,
    show_comparison,
    show_preview,
)
from phongtrace.preview.export import (
    compute_rmse,
    image_to_uint8,
    png_presenter,
    save_png,
    save_png_from_array,
)

__all__ = [
    # Display functions
    "show_preview",
    "show_comparison",
    "matplotlib_presenter",
    "apply_gamma",
    "process_image_for_display",
    # Export functions
    "save_png",
    "save_png_from_array",
    "png_presenter",
    "image_to_uint8",
    "compute_rmse",
]
