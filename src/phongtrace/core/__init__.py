"""Core rendering module.

Components:
    ray: Ray data structure, reflection and color clean-up
    framebuffer: Frame buffer holding the rendered colors
    raytracer: Supersampling render loop and recursive ray tracing
"""

from .framebuffer import FrameBuffer
from .ray import (
    Ray,
    clamp_color,
    make_ray,
    reflect,
    sanitize_color,
    vec3,
)

# Note: raytracer is NOT imported here to avoid circular imports.
# Import it directly: from phongtrace.core.raytracer import RayTracer

__all__ = [
    "FrameBuffer",
    "Ray",
    "make_ray",
    "vec3",
    "reflect",
    "clamp_color",
    "sanitize_color",
]
