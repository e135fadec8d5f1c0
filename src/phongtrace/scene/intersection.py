"""Scene-level primitive intersection testing.

This module stores every visible object of the scene in Taichi fields and
answers two queries for the tracer:

    intersect_scene:     closest hit along a ray, with material, texture
                         and (u, v) information
    intersect_scene_any: whether anything blocks a segment (shadow rays)

A miss is reported with t equal to T_MAX, the largest float32. Ties
between primitives are resolved in favour of the smallest positive t.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from phongtrace.scene.intersection import add_sphere, add_quad, clear_scene
    >>> clear_scene()
    >>> add_sphere((0, 0, -1), 0.5, material_id=0)
    >>> add_quad((-1, -0.5, -2), (2, 0, 0), (0, 0, 2), material_id=1, texture_id=0)
    >>> # Use intersect_scene within a Taichi kernel
"""

import numpy as np
import taichi as ti
import taichi.math as tm

from phongtrace.geometry.quad import Quad, hit_quad
from phongtrace.geometry.sphere import HitRecord, Sphere, hit_sphere

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

Vec3Tuple = tuple[float, float, float]

# Distance sentinel meaning "no hit"
T_MAX = float(np.finfo(np.float32).max)

# Minimum t accepted for a hit (avoids self-intersection)
T_MIN = 1e-4

# Offset applied along the normal when spawning secondary rays
RAY_EPSILON = 1e-4

# Texture ID meaning "no texture"
NO_TEXTURE = -1


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection.

    Attributes:
        hit: 1 if any primitive was hit.
        t: Distance along the ray; T_MAX on a miss.
        point: The 3D point where the ray intersected the surface.
        normal: Unit surface normal facing the ray origin.
        front_face: 1 if the ray hit the outside of the surface.
        material_id: Material of the hit primitive, -1 on a miss.
        texture_id: Texture of the hit primitive, NO_TEXTURE if untextured.
        u: Horizontal texture coordinate.
        v: Vertical texture coordinate.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32
    texture_id: ti.i32
    u: ti.f32
    v: ti.f32


# Maximum number of primitives supported in the scene
MAX_SPHERES = 1024
MAX_QUADS = 1024

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
sphere_texture_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Quad storage: Structure of Arrays layout
quad_corners = ti.Vector.field(3, dtype=ti.f32, shape=MAX_QUADS)
quad_edge_u = ti.Vector.field(3, dtype=ti.f32, shape=MAX_QUADS)
quad_edge_v = ti.Vector.field(3, dtype=ti.f32, shape=MAX_QUADS)
quad_material_ids = ti.field(dtype=ti.i32, shape=MAX_QUADS)
quad_texture_ids = ti.field(dtype=ti.i32, shape=MAX_QUADS)
num_quads = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all primitives from the scene."""
    num_spheres[None] = 0
    num_quads[None] = 0


def add_sphere(
    center: Vec3Tuple,
    radius: float,
    material_id: int = 0,
    texture_id: int = NO_TEXTURE,
) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere.
        material_id: The material ID to associate with this sphere.
        texture_id: The texture to display, or NO_TEXTURE.

    Returns:
        The index of the added sphere.

    Raises:
        ValueError: If the radius is not positive.
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    if radius <= 0.0:
        raise ValueError(f"Sphere radius = {radius} must be positive.")
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = list(center)
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    sphere_texture_ids[idx] = texture_id
    num_spheres[None] = idx + 1
    return idx


def add_quad(
    q: Vec3Tuple,
    u: Vec3Tuple,
    v: Vec3Tuple,
    material_id: int = 0,
    texture_id: int = NO_TEXTURE,
) -> int:
    """Add a quad to the scene.

    The quad represents a parallelogram with vertices at Q, Q+u, Q+v, Q+u+v.

    Args:
        q: The corner point of the quad.
        u: Edge vector from q to adjacent corner.
        v: Edge vector from q to other adjacent corner.
        material_id: The material ID to associate with this quad.
        texture_id: The texture to display, or NO_TEXTURE.

    Returns:
        The index of the added quad.

    Raises:
        RuntimeError: If the maximum number of quads is exceeded.
    """
    idx = num_quads[None]
    if idx >= MAX_QUADS:
        raise RuntimeError(f"Maximum number of quads ({MAX_QUADS}) exceeded")
    quad_corners[idx] = list(q)
    quad_edge_u[idx] = list(u)
    quad_edge_v[idx] = list(v)
    quad_material_ids[idx] = material_id
    quad_texture_ids[idx] = texture_id
    num_quads[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


def get_quad_count() -> int:
    """Get the number of quads in the scene."""
    return int(num_quads[None])


@ti.func
def _to_scene_hit_record(
    rec: HitRecord, material_id: ti.i32, texture_id: ti.i32
) -> SceneHitRecord:
    """Attach material and texture IDs to a primitive hit record."""
    return SceneHitRecord(
        hit=rec.hit,
        t=rec.t,
        point=rec.point,
        normal=rec.normal,
        front_face=rec.front_face,
        material_id=material_id,
        texture_id=texture_id,
        u=rec.u,
        v=rec.v,
    )


@ti.func
def _make_miss_record() -> SceneHitRecord:
    """A SceneHitRecord for a ray that hits nothing (t = T_MAX)."""
    return SceneHitRecord(
        hit=0,
        t=T_MAX,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
        texture_id=NO_TEXTURE,
        u=0.0,
        v=0.0,
    )


@ti.func
def intersect_scene(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> SceneHitRecord:
    """Find the closest primitive hit along a ray.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        t_min: Minimum t value to consider a valid hit.
        t_max: Maximum t value to consider a valid hit.

    Returns:
        The closest hit, or a miss record with t = T_MAX.
    """
    closest_t = t_max
    result = _make_miss_record()

    n_spheres = num_spheres[None]
    for i in range(n_spheres):
        sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i])
        rec = hit_sphere(ray_origin, ray_direction, sphere, t_min, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = _to_scene_hit_record(rec, sphere_material_ids[i], sphere_texture_ids[i])

    n_quads = num_quads[None]
    for i in range(n_quads):
        quad = Quad(Q=quad_corners[i], u=quad_edge_u[i], v=quad_edge_v[i])
        rec = hit_quad(ray_origin, ray_direction, quad, t_min, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = _to_scene_hit_record(rec, quad_material_ids[i], quad_texture_ids[i])

    return result


@ti.func
def intersect_scene_any(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> ti.i32:
    """Test if a ray hits any primitive within (t_min, t_max).

    Returns:
        1 if any primitive was hit, 0 otherwise.
    """
    hit_any = 0

    n_spheres = num_spheres[None]
    for i in range(n_spheres):
        if hit_any == 0:
            sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i])
            rec = hit_sphere(ray_origin, ray_direction, sphere, t_min, t_max)
            if rec.hit == 1:
                hit_any = 1

    n_quads = num_quads[None]
    for i in range(n_quads):
        if hit_any == 0:
            quad = Quad(Q=quad_corners[i], u=quad_edge_u[i], v=quad_edge_v[i])
            rec = hit_quad(ray_origin, ray_direction, quad, t_min, t_max)
            if rec.hit == 1:
                hit_any = 1

    return hit_any


@ti.func
def is_shadowed(point: vec3, normal: vec3, light_position: vec3) -> ti.i32:
    """Check whether any primitive lies between a surface point and a light.

    The shadow ray starts RAY_EPSILON above the surface and stops just
    short of the light, so neither the surface itself nor geometry behind
    the light counts as an occluder.

    Args:
        point: Surface point.
        normal: Unit surface normal facing the viewer.
        light_position: World-space light position.

    Returns:
        1 if the point is in shadow, 0 otherwise.
    """
    origin = point + RAY_EPSILON * normal
    to_light = light_position - origin
    distance = tm.length(to_light)
    shadowed = 0
    if distance > RAY_EPSILON:
        direction = to_light / distance
        shadowed = intersect_scene_any(origin, direction, T_MIN, distance - RAY_EPSILON)
    return shadowed
