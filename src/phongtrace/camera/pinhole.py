"""Pinhole camera model producing rays for fractional pixel coordinates.

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from lookat toward lookfrom (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

The basis doubles as the camera's coordinate frame: lights tied to the
camera are expressed in (u, v, w) with the camera position as origin.

Pixel coordinates are continuous: pixel (x, y) covers [x, x+1) x [y, y+1),
with (0, 0) at the bottom-left corner of the image. Supersampling asks for
rays at fractional positions such as (x + 0.5, y + 0.25).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from phongtrace.camera.pinhole import RaytracingCamera, setup_camera, get_ray
    >>> camera = RaytracingCamera(
    ...     lookfrom=(0.0, 0.0, 3.0),
    ...     lookat=(0.0, 0.0, 0.0),
    ...     vup=(0.0, 1.0, 0.0),
    ...     vfov=60.0,
    ... )
    >>> setup_camera(camera, 640, 480)
    >>> # Inside a kernel: ray = get_ray(320.0, 240.0)  # ray through image center
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti
import taichi.math as tm

from phongtrace.core.ray import Ray, make_ray, vec3

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class RaytracingCamera:
    """Configuration for a pinhole (perspective) camera.

    Attributes:
        lookfrom: Camera position in world space (x, y, z).
        lookat: Point the camera is looking at in world space (x, y, z).
        vup: Up direction vector for camera orientation (typically (0, 1, 0)).
        vfov: Vertical field of view in degrees.
    """

    lookfrom: tuple[float, float, float] = (0.0, 0.0, 0.0)
    lookat: tuple[float, float, float] = (0.0, 0.0, -1.0)
    vup: tuple[float, float, float] = (0.0, 1.0, 0.0)
    vfov: float = 60.0

    def __post_init__(self) -> None:
        if self.vfov <= 0.0 or self.vfov >= 180.0:
            raise ValueError(f"Camera vfov = {self.vfov} is outside (0, 180) degrees.")


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())

# Orthonormal basis vectors
_camera_u = ti.Vector.field(3, dtype=ti.f32, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f32, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f32, shape=())  # Backward (opposite view)

# Viewport vectors for ray computation
_viewport_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())  # Full width
_viewport_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())  # Full height
_lower_left_corner = ti.Vector.field(3, dtype=ti.f32, shape=())  # Lower-left of viewport

# Image size used to convert pixel coordinates to viewport coordinates
_image_width = ti.field(dtype=ti.f32, shape=())
_image_height = ti.field(dtype=ti.f32, shape=())


# =============================================================================
# Camera Setup (Python-side)
# =============================================================================


def setup_camera(camera: RaytracingCamera, width: int = 1, height: int = 1) -> None:
    """Initialize camera state for an image of the given size.

    The viewport is a virtual image plane at unit distance from the camera
    whose aspect ratio matches width / height.

    Args:
        camera: Camera configuration with position, orientation, and FOV.
        width: Image width in pixels.
        height: Image height in pixels.

    Raises:
        ValueError: If the image size is not positive or the view is degenerate.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image size ({width}x{height}) must be positive")

    theta = math.radians(camera.vfov)
    h = math.tan(theta / 2.0)

    viewport_height = 2.0 * h
    viewport_width = (width / height) * viewport_height

    lookfrom = np.array(camera.lookfrom, dtype=np.float64)
    lookat = np.array(camera.lookat, dtype=np.float64)
    vup = np.array(camera.vup, dtype=np.float64)

    w = lookfrom - lookat
    w_norm = np.linalg.norm(w)
    if w_norm < 1e-12:
        raise ValueError("Camera lookfrom and lookat must differ")
    w = w / w_norm

    u = np.cross(vup, w)
    u_norm = np.linalg.norm(u)
    if u_norm < 1e-12:
        raise ValueError("Camera vup must not be parallel to the view direction")
    u = u / u_norm

    v = np.cross(w, u)

    _camera_origin[None] = lookfrom.tolist()
    _camera_u[None] = u.tolist()
    _camera_v[None] = v.tolist()
    _camera_w[None] = w.tolist()

    horizontal = viewport_width * u
    vertical = viewport_height * v

    # Viewport plane one unit in front of the camera
    lower_left = lookfrom - w - horizontal / 2.0 - vertical / 2.0

    _viewport_horizontal[None] = horizontal.tolist()
    _viewport_vertical[None] = vertical.tolist()
    _lower_left_corner[None] = lower_left.tolist()

    _image_width[None] = float(width)
    _image_height[None] = float(height)


# =============================================================================
# Ray Generation (Taichi functions)
# =============================================================================


@ti.func
def get_ray_uv(u: ti.f32, v: ti.f32) -> Ray:
    """Generate a ray through normalized image coordinates (u, v).

    Args:
        u: Horizontal coordinate in [0, 1] (left to right).
        v: Vertical coordinate in [0, 1] (bottom to top).

    Returns:
        A Ray from the camera origin with a normalized direction.
    """
    point_on_viewport = (
        _lower_left_corner[None] + u * _viewport_horizontal[None] + v * _viewport_vertical[None]
    )
    origin = _camera_origin[None]
    direction = tm.normalize(point_on_viewport - origin)
    return make_ray(origin, direction)


@ti.func
def get_ray(px: ti.f32, py: ti.f32) -> Ray:
    """Generate a ray through a (possibly fractional) pixel coordinate.

    Deterministic: identical inputs always produce identical rays.

    Args:
        px: Horizontal pixel coordinate, 0 at the left edge.
        py: Vertical pixel coordinate, 0 at the bottom edge.

    Returns:
        A Ray with origin at the camera position.
    """
    return get_ray_uv(px / _image_width[None], py / _image_height[None])


@ti.func
def get_camera_origin() -> vec3:
    """Get the camera origin (position) in world space."""
    return _camera_origin[None]


@ti.func
def get_camera_basis():
    """Get the camera's orthonormal basis vectors.

    Returns:
        A tuple (u, v, w) of right, up and backward directions.
    """
    return _camera_u[None], _camera_v[None], _camera_w[None]


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, ...]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, u, v, w, horizontal, vertical, lower_left
        and image_size.
    """

    def _triple(field: ti.MatrixField) -> tuple[float, float, float]:
        vec = field[None]
        return (float(vec[0]), float(vec[1]), float(vec[2]))

    return {
        "origin": _triple(_camera_origin),
        "u": _triple(_camera_u),
        "v": _triple(_camera_v),
        "w": _triple(_camera_w),
        "horizontal": _triple(_viewport_horizontal),
        "vertical": _triple(_viewport_vertical),
        "lower_left": _triple(_lower_left_corner),
        "image_size": (float(_image_width[None]), float(_image_height[None])),
    }
