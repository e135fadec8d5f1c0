"""Geometry module for shape primitives.

All intersection routines are Taichi functions returning a HitRecord
with the hit distance, a normal facing the ray and texture coordinates.
"""

from .quad import Quad, hit_quad, quad_normal
from .sphere import HitRecord, Sphere, hit_sphere, sphere_uv

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "sphere_uv",
    "Quad",
    "hit_quad",
    "quad_normal",
]
