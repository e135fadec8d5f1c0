"""Ray data structure and vector utilities for Whitted-style ray tracing.

This module provides the Ray dataclass, mirror reflection and the color
clean-up helpers used by the tracer.
All operations are Taichi functions so they can be called from kernels.

Colors use the same vec3 type as points and directions. Products between
colors are component-wise (``a * b``), never dot or cross products.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors (points, directions and RGB colors)
vec3 = tm.vec3

# IEEE-754 single precision exponent bits
FLOAT_EXPONENT_MASK = 0x7F800000


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Camera rays are
            always normalized; this is not enforced.
    """

    origin: vec3
    direction: vec3


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction.

    Args:
        origin: The starting point of the ray.
        direction: The direction vector (should typically be normalized).

    Returns:
        A new Ray instance.
    """
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Used for mirror rays. Note the convention differs from the Phong
    reflection vector, which reflects the direction *toward* the light.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (should be normalized).

    Returns:
        The reflected direction vector.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def clamp_color(color: vec3) -> vec3:
    """Clamp every channel of a color to [0, 1]."""
    return tm.clamp(color, 0.0, 1.0)


@ti.func
def sanitize_color(color: vec3) -> vec3:
    """Replace NaN/Inf channels with zero and clamp to [0, 1].

    Args:
        color: The color to clean up.

    Returns:
        A displayable color.
    """
    result = color
    for c in ti.static(range(3)):
        # All-ones exponent marks NaN or Inf; tm.isnan is folded under fast_math
        if (ti.bit_cast(result[c], ti.i32) & FLOAT_EXPONENT_MASK) == FLOAT_EXPONENT_MASK:
            result[c] = 0.0
    return clamp_color(result)
