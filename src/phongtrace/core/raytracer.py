"""Whitted-style ray tracer with Phong direct lighting.

For every pixel the tracer averages an anti_aliasing x anti_aliasing grid
of camera rays, resolves the closest hit, and colors it:

    miss              -> default (background) color
    textured surface  -> texel at the clamped (u, v), no lighting
    otherwise         -> sum of illuminate() over every light, starting
                         from black (the default color is only used
                         for misses)

The specular term is always evaluated toward the scene camera origin,
for primary and reflected rays alike.

Reflection: when the remaining depth is positive and the material has a
non-zero reflectivity, a mirror ray is traced with depth - 1 and its color
is added, weighted by the reflectivity. A secondary ray that escapes
contributes the default color. Depth 0 never spawns secondary rays.
Taichi functions cannot recurse, so the recursion is unrolled into a loop
carrying the product of reflectivities as a throughput weight.

Shadows: by default every light is treated as unoccluded. With shadows
enabled, the shadow flag of each (point, light) pair comes from an any-hit
query toward the light.

Pixels are traced in parallel by a Taichi kernel; each pixel writes only
its own frame-buffer cell.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from phongtrace.core.framebuffer import FrameBuffer
    >>> from phongtrace.core.raytracer import RayTracer
    >>> from phongtrace.scene.demo import create_demo_scene
    >>> scene = create_demo_scene()
    >>> fb = FrameBuffer(320, 240)
    >>> RayTracer(default_color=(0.1, 0.1, 0.2), anti_aliasing=2).raytrace_scene(fb, 2, scene)
"""

from typing import TYPE_CHECKING

import taichi as ti
import taichi.math as tm

from phongtrace.camera.pinhole import (
    get_camera_basis,
    get_camera_origin,
    get_ray,
    setup_camera,
)
from phongtrace.core.ray import reflect, sanitize_color
from phongtrace.lighting.lights import illuminate, num_lights, resolve_light
from phongtrace.materials.phong import PhongMaterial, get_phong_material
from phongtrace.materials.texture import sample_texture
from phongtrace.scene.intersection import (
    NO_TEXTURE,
    RAY_EPSILON,
    T_MAX,
    T_MIN,
    SceneHitRecord,
    intersect_scene,
    is_shadowed,
)

if TYPE_CHECKING:
    from phongtrace.core.framebuffer import FrameBuffer
    from phongtrace.scene.manager import SceneManager

# Type alias for 3D vectors
vec3 = tm.vec3

Color = tuple[float, float, float]

# =============================================================================
# Rendering Constants
# =============================================================================

# Supersampling grid side length per pixel
DEFAULT_ANTI_ALIASING = 1

# Default number of reflection bounces
DEFAULT_MAX_DEPTH = 2

# Background color, set from the active RayTracer before each launch
_default_color = ti.Vector.field(3, dtype=ti.f32, shape=())


# =============================================================================
# Tracing Core
# =============================================================================


@ti.func
def shade_direct(
    rec: SceneHitRecord,
    material: PhongMaterial,
    shadows: ti.i32,
) -> vec3:
    """Sum the contribution of every light at a hit point.

    Args:
        rec: The hit being shaded.
        material: The hit surface's material.
        shadows: 1 to test each light for occlusion, 0 to treat all as visible.

    Returns:
        The accumulated direct illumination.
    """
    eye_origin = get_camera_origin()
    eye_u, eye_v, eye_w = get_camera_basis()

    result = vec3(0.0, 0.0, 0.0)
    for i in range(num_lights[None]):
        light = resolve_light(i, eye_origin, eye_u, eye_v, eye_w)
        in_shadow = 0
        if shadows == 1 and light.is_on == 1:
            in_shadow = is_shadowed(rec.point, rec.normal, light.position)
        result += illuminate(light, rec.point, rec.normal, material, eye_origin, in_shadow)
    return result


@ti.func
def trace_ray(
    ray_origin: vec3,
    ray_direction: vec3,
    recursion_level: ti.i32,
    shadows: ti.i32,
) -> vec3:
    """Trace one ray and its mirror reflections.

    Args:
        ray_origin: Starting point of the ray.
        ray_direction: Unit direction of the ray.
        recursion_level: Number of reflection bounces still allowed.
        shadows: 1 to enable shadow testing.

    Returns:
        The color seen along the ray.
    """
    origin = ray_origin
    direction = ray_direction

    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    level = recursion_level

    # Taichi doesn't support break in ti.func loops
    active = 1

    for _ in range(recursion_level + 1):
        if active == 1:
            rec = intersect_scene(origin, direction, T_MIN, T_MAX)

            if rec.t >= T_MAX:
                color += throughput * _default_color[None]
                active = 0
            else:
                material = get_phong_material(rec.material_id)

                local = vec3(0.0, 0.0, 0.0)
                if rec.texture_id != NO_TEXTURE:
                    u = tm.clamp(rec.u, 0.0, 1.0)
                    v = tm.clamp(rec.v, 0.0, 1.0)
                    local = sample_texture(rec.texture_id, u, v)
                else:
                    local = shade_direct(rec, material, shadows)

                color += throughput * local

                if level > 0 and material.reflectivity > 0.0:
                    throughput *= material.reflectivity
                    direction = tm.normalize(reflect(direction, rec.normal))
                    origin = rec.point + RAY_EPSILON * rec.normal
                    level -= 1
                else:
                    active = 0

    return color


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _raytrace_kernel(
    buffer: ti.template(),
    width: ti.i32,
    height: ti.i32,
    anti_aliasing: ti.i32,
    max_depth: ti.i32,
    shadows: ti.i32,
):
    """Supersample every pixel and write the averaged color."""
    weight = 1.0 / ti.cast(anti_aliasing * anti_aliasing, ti.f32)
    step = 1.0 / ti.cast(anti_aliasing, ti.f32)

    for x, y in ti.ndrange(width, height):
        pixel_color = vec3(0.0, 0.0, 0.0)
        for sub_x in range(anti_aliasing):
            for sub_y in range(anti_aliasing):
                px = ti.cast(x, ti.f32) + ti.cast(sub_x, ti.f32) * step
                py = ti.cast(y, ti.f32) + ti.cast(sub_y, ti.f32) * step
                ray = get_ray(px, py)
                pixel_color += weight * trace_ray(ray.origin, ray.direction, max_depth, shadows)
        buffer[x, y] = sanitize_color(pixel_color)


@ti.kernel
def _trace_single_ray(
    ox: ti.f32,
    oy: ti.f32,
    oz: ti.f32,
    dx: ti.f32,
    dy: ti.f32,
    dz: ti.f32,
    recursion_level: ti.i32,
    shadows: ti.i32,
) -> vec3:
    """Trace one ray given by its components."""
    return trace_ray(
        vec3(ox, oy, oz), tm.normalize(vec3(dx, dy, dz)), recursion_level, shadows
    )


@ti.kernel
def _trace_pixel(
    px: ti.f32,
    py: ti.f32,
    recursion_level: ti.i32,
    shadows: ti.i32,
) -> vec3:
    """Trace the camera ray through one (fractional) pixel coordinate."""
    ray = get_ray(px, py)
    return trace_ray(ray.origin, ray.direction, recursion_level, shadows)


# =============================================================================
# Public Rendering API
# =============================================================================


class RayTracer:
    """Renders a scene into a frame buffer.

    Attributes:
        default_color: Color returned for rays that hit nothing.
        anti_aliasing: Supersampling grid side length (>= 1).
        shadows: Whether to test lights for occlusion.
    """

    def __init__(
        self,
        default_color: Color = (0.0, 0.0, 0.0),
        anti_aliasing: int = DEFAULT_ANTI_ALIASING,
        shadows: bool = False,
    ) -> None:
        """Configure the tracer.

        Raises:
            ValueError: If anti_aliasing is smaller than 1.
        """
        if anti_aliasing < 1:
            raise ValueError(f"anti_aliasing = {anti_aliasing} must be at least 1")
        self.default_color = default_color
        self.anti_aliasing = anti_aliasing
        self.shadows = shadows

    def _bind(self, scene: "SceneManager", width: int, height: int) -> None:
        """Upload per-render state: camera and background color."""
        if scene.camera is None:
            raise RuntimeError("Scene has no camera. Call scene.set_camera() first.")
        setup_camera(scene.camera, width, height)
        _default_color[None] = list(self.default_color)

    @staticmethod
    def _check_depth(depth: int) -> None:
        if depth < 0:
            raise ValueError(f"Recursion depth = {depth} must be non-negative")

    def raytrace_scene(
        self,
        frame_buffer: "FrameBuffer",
        max_depth: int,
        scene: "SceneManager",
    ) -> None:
        """Render every pixel of the frame buffer, then present it.

        Args:
            frame_buffer: Destination buffer; its size sets the image size.
            max_depth: Reflection bounces allowed per camera ray.
            scene: The scene to render (not modified).

        Raises:
            RuntimeError: If the scene has no camera.
            ValueError: If max_depth is negative.
        """
        self._check_depth(max_depth)
        width = frame_buffer.get_window_width()
        height = frame_buffer.get_window_height()
        self._bind(scene, width, height)

        _raytrace_kernel(
            frame_buffer.colors,
            width,
            height,
            self.anti_aliasing,
            max_depth,
            int(self.shadows),
        )

        frame_buffer.show_color_buffer()

    def trace_individual_ray(
        self,
        origin: tuple[float, float, float],
        direction: tuple[float, float, float],
        scene: "SceneManager",
        recursion_level: int = 0,
    ) -> Color:
        """Trace a single ray through the scene.

        The camera of the scene still defines the frame of camera-tied
        lights.

        Args:
            origin: Ray origin.
            direction: Ray direction (normalized here).
            scene: The scene to trace against.
            recursion_level: Reflection bounces allowed.

        Returns:
            The (unclamped) color seen along the ray.
        """
        self._check_depth(recursion_level)
        self._bind(scene, 1, 1)
        color = _trace_single_ray(
            origin[0],
            origin[1],
            origin[2],
            direction[0],
            direction[1],
            direction[2],
            recursion_level,
            int(self.shadows),
        )
        return (float(color[0]), float(color[1]), float(color[2]))

    def trace_pixel(
        self,
        px: float,
        py: float,
        width: int,
        height: int,
        scene: "SceneManager",
        recursion_level: int = 0,
    ) -> Color:
        """Trace the camera ray through one pixel coordinate of a width x height image.

        Useful for testing and debugging individual pixels.
        """
        self._check_depth(recursion_level)
        self._bind(scene, width, height)
        color = _trace_pixel(px, py, recursion_level, int(self.shadows))
        return (float(color[0]), float(color[1]), float(color[2]))
