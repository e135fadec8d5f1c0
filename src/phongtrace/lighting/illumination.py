"""Phong illumination primitives.

This module implements the per-light, per-point Phong reflection model used
by every light variant:

    I = ambient + f_att * diffuse + f_att * specular

where:
    ambient  = clamp(k_a * L_a)
    diffuse  = clamp(k_d * L_d * max(0, l . n))
    specular = clamp(k_s * L_s * max(0, v . r)^shininess)
    f_att    = 1 / (constant + linear * d + quadratic * d^2)

Each term is clamped to [0, 1] per channel at the point it is computed. The
ambient term is never attenuated; diffuse and specular share one factor.

All functions are pure Taichi functions with no side effects.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from phongtrace.lighting.illumination import ambient_color
    >>> # Use ambient_color(mat_ambient, light_ambient) within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from phongtrace.core.ray import clamp_color
from phongtrace.materials.phong import PhongMaterial

# Type alias for 3D vectors
vec3 = tm.vec3

# Smallest attenuation denominator allowed before dividing
ATTENUATION_EPSILON = 1e-6


@ti.dataclass
class LightColor:
    """Ambient, diffuse and specular emission of a light.

    Attributes:
        ambient: Ambient light color (RGB).
        diffuse: Diffuse light color (RGB).
        specular: Specular light color (RGB).
    """

    ambient: vec3
    diffuse: vec3
    specular: vec3


@ti.dataclass
class Attenuation:
    """Inverse-distance falloff coefficients.

    Attributes:
        constant: Constant term (> 0).
        linear: Linear term (>= 0).
        quadratic: Quadratic term (>= 0).
    """

    constant: ti.f32
    linear: ti.f32
    quadratic: ti.f32


@ti.func
def ambient_color(mat: vec3, light: vec3) -> vec3:
    """Compute the ambient color produced by a single light.

    Args:
        mat: Ambient material color.
        light: Ambient light color.

    Returns:
        The component-wise product, clamped to [0, 1].
    """
    return clamp_color(mat * light)


@ti.func
def diffuse_color(mat: vec3, light: vec3, light_dir: vec3, normal: vec3) -> vec3:
    """Compute the Lambertian diffuse color produced by a single light.

    Surfaces facing away from the light (l . n <= 0) receive nothing.

    Args:
        mat: Diffuse material color.
        light: Diffuse light color.
        light_dir: Unit vector from the surface point toward the light.
        normal: Unit surface normal.

    Returns:
        The diffuse color, clamped to [0, 1].
    """
    return clamp_color(mat * light * tm.max(0.0, tm.dot(light_dir, normal)))


@ti.func
def specular_color(
    mat: vec3,
    light: vec3,
    shininess: ti.f32,
    reflect_dir: vec3,
    view_dir: vec3,
) -> vec3:
    """Compute the Phong specular highlight produced by a single light.

    A non-positive v . r yields zero for any shininess, including zero,
    so pow() is never evaluated on a non-positive base.

    Args:
        mat: Specular material color.
        light: Specular light color.
        shininess: Phong exponent (>= 0).
        reflect_dir: Light direction reflected about the normal.
        view_dir: Unit vector from the surface point toward the viewer.

    Returns:
        The specular color, clamped to [0, 1].
    """
    cos_alpha = tm.dot(view_dir, reflect_dir)
    highlight = 0.0
    if cos_alpha > 0.0:
        highlight = tm.pow(cos_alpha, shininess)
    return clamp_color(mat * light * highlight)


@ti.func
def attenuation_factor(attenuation: Attenuation, distance: ti.f32) -> ti.f32:
    """Compute 1 / (c + l*d + q*d^2).

    The denominator is floored at ATTENUATION_EPSILON. Builders reject
    non-positive constant terms, so the floor only matters for fields
    written directly.

    Args:
        attenuation: Falloff coefficients.
        distance: Distance from the light to the surface point.

    Returns:
        The attenuation factor.
    """
    denom = (
        attenuation.constant
        + attenuation.linear * distance
        + attenuation.quadratic * distance * distance
    )
    return 1.0 / tm.max(denom, ATTENUATION_EPSILON)


@ti.func
def total_color(
    material: PhongMaterial,
    light_color: LightColor,
    view_dir: vec3,
    normal: vec3,
    light_position: vec3,
    point: vec3,
    attenuation_on: ti.i32,
    attenuation: Attenuation,
) -> vec3:
    """Color produced by a single light at a single point.

    Args:
        material: Surface material.
        light_color: The light's ambient/diffuse/specular emission.
        view_dir: Unit vector from the point toward the viewer.
        normal: Unit surface normal.
        light_position: World-space light position.
        point: World-space intersection point.
        attenuation_on: 1 to apply distance attenuation.
        attenuation: Attenuation coefficients (ignored when disabled).

    Returns:
        ambient + factor * diffuse + factor * specular.
    """
    to_light = light_position - point
    light_dir = tm.normalize(to_light)
    reflect_dir = 2.0 * tm.dot(light_dir, normal) * normal - light_dir

    factor = 1.0
    if attenuation_on == 1:
        factor = attenuation_factor(attenuation, tm.length(to_light))

    ambient = ambient_color(material.ambient, light_color.ambient)
    diffuse = diffuse_color(material.diffuse, light_color.diffuse, light_dir, normal)
    specular = specular_color(
        material.specular, light_color.specular, material.shininess, reflect_dir, view_dir
    )
    return ambient + factor * diffuse + factor * specular
