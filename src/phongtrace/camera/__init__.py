"""Camera module for primary ray generation.

Ray generation uses continuous pixel coordinates with (0, 0) at the
bottom-left corner of the image, so supersampling can request rays at
fractional positions.
"""

from .pinhole import (
    RaytracingCamera,
    get_camera_basis,
    get_camera_info,
    get_camera_origin,
    get_ray,
    get_ray_uv,
    setup_camera,
)

__all__ = [
    "RaytracingCamera",
    "setup_camera",
    "get_ray",
    "get_ray_uv",
    "get_camera_origin",
    "get_camera_basis",
    "get_camera_info",
]
