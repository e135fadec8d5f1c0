"""Positional and spot lights.

Lights form a closed set of variants distinguished by a LightKind tag:

    POSITIONAL: a point light with optional distance attenuation
    SPOT:       a positional light restricted to a cone around a direction

Both share one `illuminate` capability which applies the on/off, cone and
shadow rules and then calls into the Phong primitives:

    off                       -> black
    spot and outside the cone -> black
    in shadow                 -> ambient only
    otherwise                 -> ambient + f_att * (diffuse + specular)

Python code describes lights with the PositionalLight and SpotLight
dataclasses and registers them with add_light(). The registry lives in
Taichi fields (Structure of Arrays); kernels gather one light at a time
with get_light() / resolve_light().

Lights can be tied to the world or to the camera. A camera-tied light
stores its position and direction in the camera frame (right, up,
backward) and follows the camera.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from phongtrace.lighting.lights import PositionalLight, add_light
    >>> lamp = PositionalLight(position=(0.0, 5.0, 0.0))
    >>> idx = add_light(lamp)
"""

import math
from dataclasses import dataclass, field
from enum import IntEnum

import taichi as ti
import taichi.math as tm

from phongtrace.lighting.illumination import (
    Attenuation,
    LightColor,
    ambient_color,
    total_color,
)
from phongtrace.materials.phong import PhongMaterial

# Type alias for 3D vectors
vec3 = tm.vec3

Color = tuple[float, float, float]
Vec3Tuple = tuple[float, float, float]


class LightKind(IntEnum):
    """Tag of each light variant, used for dispatch inside kernels."""

    POSITIONAL = 0
    SPOT = 1


# =============================================================================
# Python-side Light Descriptions
# =============================================================================


@dataclass(frozen=True)
class LightColorComponents:
    """Ambient, diffuse and specular emission of a light.

    Attributes:
        ambient: Ambient light color.
        diffuse: Diffuse light color.
        specular: Specular light color.
    """

    ambient: Color = (0.1, 0.1, 0.1)
    diffuse: Color = (1.0, 1.0, 1.0)
    specular: Color = (1.0, 1.0, 1.0)

    def __post_init__(self) -> None:
        for name in ("ambient", "diffuse", "specular"):
            color = getattr(self, name)
            if len(color) != 3:
                raise ValueError(f"Light {name} color must have 3 components")
            for i, component in enumerate(color):
                if component < 0.0 or component > 1.0:
                    raise ValueError(
                        f"Light {name} component {i} = {component} is outside [0, 1]."
                    )


@dataclass(frozen=True)
class AttenuationParameters:
    """Coefficients of 1 / (constant + linear*d + quadratic*d^2).

    The constant term must be strictly positive and the other two
    non-negative, which keeps the denominator positive at every distance.

    Attributes:
        constant: Constant term.
        linear: Linear term.
        quadratic: Quadratic term.
    """

    constant: float = 1.0
    linear: float = 0.0
    quadratic: float = 0.0

    def __post_init__(self) -> None:
        if self.constant <= 0.0:
            raise ValueError(f"Attenuation constant = {self.constant} must be positive.")
        if self.linear < 0.0:
            raise ValueError(f"Attenuation linear = {self.linear} is negative.")
        if self.quadratic < 0.0:
            raise ValueError(f"Attenuation quadratic = {self.quadratic} is negative.")

    def factor(self, distance: float) -> float:
        """Attenuation factor at a given distance (Python scope)."""
        return 1.0 / (self.constant + self.linear * distance + self.quadratic * distance**2)

    def __str__(self) -> str:
        return f"[{self.constant}, {self.linear}, {self.quadratic}]"


@dataclass
class PositionalLight:
    """A point light.

    Attributes:
        position: Light position (world space, or camera frame when
            tied_to_world is False).
        colors: Emitted ambient/diffuse/specular colors.
        is_on: Whether the light contributes at all.
        tied_to_world: True for a world-space light, False for a light
            that moves with the camera.
        attenuation_on: Whether distance attenuation applies.
        attenuation: Attenuation coefficients.
    """

    position: Vec3Tuple
    colors: LightColorComponents = field(default_factory=LightColorComponents)
    is_on: bool = True
    tied_to_world: bool = True
    attenuation_on: bool = False
    attenuation: AttenuationParameters = field(default_factory=AttenuationParameters)

    kind = LightKind.POSITIONAL

    def __str__(self) -> str:
        lines = [
            "ON" if self.is_on else "OFF",
            "WORLD" if self.tied_to_world else "CAMERA",
            f" position {self.position}",
            f" ambient {self.colors.ambient}",
            f" diffuse {self.colors.diffuse}",
            f" specular {self.colors.specular}",
            f"Attenuation: {'ON' if self.attenuation_on else 'OFF'} {self.attenuation}",
        ]
        return "\n".join(lines)


@dataclass
class SpotLight(PositionalLight):
    """A positional light restricted to a cone.

    Attributes:
        direction: Cone axis. Normalized on construction.
        fov: Full opening angle of the cone in radians, in (0, 2*pi].
    """

    direction: Vec3Tuple = (0.0, -1.0, 0.0)
    fov: float = math.pi / 2.0

    kind = LightKind.SPOT

    def __post_init__(self) -> None:
        norm = math.sqrt(sum(c * c for c in self.direction))
        if norm < 1e-12:
            raise ValueError("Spot light direction must not be zero-length.")
        self.direction = (
            self.direction[0] / norm,
            self.direction[1] / norm,
            self.direction[2] / norm,
        )
        if self.fov <= 0.0 or self.fov > 2.0 * math.pi:
            raise ValueError(f"Spot light fov = {self.fov} is outside (0, 2*pi].")

    def __str__(self) -> str:
        return f"{super().__str__()}\n FOV {self.fov}"


# =============================================================================
# Light Field Storage
# =============================================================================

# Maximum number of lights in the scene
MAX_LIGHTS = 64

light_kinds = ti.field(dtype=ti.i32, shape=MAX_LIGHTS)
light_is_on = ti.field(dtype=ti.i32, shape=MAX_LIGHTS)
light_tied_to_world = ti.field(dtype=ti.i32, shape=MAX_LIGHTS)
light_positions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_directions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_cos_half_fov = ti.field(dtype=ti.f32, shape=MAX_LIGHTS)
light_ambients = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_diffuses = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_speculars = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_attenuation_on = ti.field(dtype=ti.i32, shape=MAX_LIGHTS)
# (constant, linear, quadratic)
light_attenuations = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
num_lights = ti.field(dtype=ti.i32, shape=())


def clear_lights() -> None:
    """Remove all lights from the registry."""
    num_lights[None] = 0


def add_light(light: PositionalLight) -> int:
    """Add a positional or spot light to the registry.

    Args:
        light: The light description.

    Returns:
        The index of the added light.

    Raises:
        RuntimeError: If the maximum number of lights is exceeded.
    """
    idx = num_lights[None]
    if idx >= MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")

    light_kinds[idx] = int(light.kind)
    light_is_on[idx] = int(light.is_on)
    light_tied_to_world[idx] = int(light.tied_to_world)
    light_positions[idx] = list(light.position)
    light_ambients[idx] = list(light.colors.ambient)
    light_diffuses[idx] = list(light.colors.diffuse)
    light_speculars[idx] = list(light.colors.specular)
    light_attenuation_on[idx] = int(light.attenuation_on)
    light_attenuations[idx] = [
        light.attenuation.constant,
        light.attenuation.linear,
        light.attenuation.quadratic,
    ]

    if isinstance(light, SpotLight):
        light_directions[idx] = list(light.direction)
        light_cos_half_fov[idx] = math.cos(light.fov / 2.0)
    else:
        light_directions[idx] = [0.0, 0.0, 0.0]
        light_cos_half_fov[idx] = -1.0

    num_lights[None] = idx + 1
    return idx


def get_light_count() -> int:
    """Get the number of lights in the registry."""
    return int(num_lights[None])


def set_light_on(light_idx: int, is_on: bool) -> None:
    """Switch a registered light on or off.

    Raises:
        ValueError: If the index is not a registered light.
    """
    if light_idx < 0 or light_idx >= num_lights[None]:
        raise ValueError(f"Invalid light index: {light_idx}")
    light_is_on[light_idx] = int(is_on)


def is_light_on(light_idx: int) -> bool:
    """Check whether a registered light is on.

    Raises:
        ValueError: If the index is not a registered light.
    """
    if light_idx < 0 or light_idx >= num_lights[None]:
        raise ValueError(f"Invalid light index: {light_idx}")
    return bool(light_is_on[light_idx])


# =============================================================================
# Kernel-side Light Evaluation
# =============================================================================


@ti.dataclass
class LightData:
    """One light gathered from the registry, in world space.

    Attributes:
        kind: LightKind tag.
        is_on: 1 if the light is on.
        position: World-space position.
        direction: Unit cone axis (spot lights only).
        cos_half_fov: cos(fov / 2) (spot lights only).
        ambient: Ambient emission.
        diffuse: Diffuse emission.
        specular: Specular emission.
        attenuation_on: 1 if distance attenuation applies.
        attenuation: (constant, linear, quadratic).
    """

    kind: ti.i32
    is_on: ti.i32
    position: vec3
    direction: vec3
    cos_half_fov: ti.f32
    ambient: vec3
    diffuse: vec3
    specular: vec3
    attenuation_on: ti.i32
    attenuation: vec3


@ti.func
def get_light(light_idx: ti.i32) -> LightData:
    """Gather a light from the registry without any frame conversion."""
    return LightData(
        kind=light_kinds[light_idx],
        is_on=light_is_on[light_idx],
        position=light_positions[light_idx],
        direction=light_directions[light_idx],
        cos_half_fov=light_cos_half_fov[light_idx],
        ambient=light_ambients[light_idx],
        diffuse=light_diffuses[light_idx],
        specular=light_speculars[light_idx],
        attenuation_on=light_attenuation_on[light_idx],
        attenuation=light_attenuations[light_idx],
    )


@ti.func
def resolve_light(
    light_idx: ti.i32,
    eye_origin: vec3,
    eye_u: vec3,
    eye_v: vec3,
    eye_w: vec3,
) -> LightData:
    """Gather a light and express it in world space.

    Camera-tied lights are transformed out of the camera frame whose
    origin is eye_origin and whose axes are (eye_u, eye_v, eye_w).

    Args:
        light_idx: Index in the registry.
        eye_origin: Camera position.
        eye_u: Camera right vector.
        eye_v: Camera up vector.
        eye_w: Camera backward vector.

    Returns:
        The light in world space.
    """
    light = get_light(light_idx)
    if light_tied_to_world[light_idx] == 0:
        p = light.position
        d = light.direction
        light.position = eye_origin + p.x * eye_u + p.y * eye_v + p.z * eye_w
        light.direction = d.x * eye_u + d.y * eye_v + d.z * eye_w
    return light


@ti.func
def is_outside_cone(to_point: vec3, axis: vec3, cos_half_fov: ti.f32) -> ti.i32:
    """Cone membership test.

    A point is inside the cone only when the angle between its direction
    and the axis is strictly less than half the FOV, i.e. when
    dot(to_point, axis) > cos(fov / 2). The boundary counts as outside.

    Args:
        to_point: Unit vector from the light to the point.
        axis: Unit cone axis.
        cos_half_fov: cos(fov / 2).

    Returns:
        1 if the point is outside the cone, 0 otherwise.
    """
    outside = 1
    if tm.dot(to_point, axis) > cos_half_fov:
        outside = 0
    return outside


@ti.func
def _lit_color(
    light: LightData,
    point: vec3,
    normal: vec3,
    material: PhongMaterial,
    eye_position: vec3,
    in_shadow: ti.i32,
) -> vec3:
    """Shadow rule shared by both variants: ambient only when shadowed."""
    result = vec3(0.0, 0.0, 0.0)
    if in_shadow == 1:
        result = ambient_color(material.ambient, light.ambient)
    else:
        light_color = LightColor(
            ambient=light.ambient, diffuse=light.diffuse, specular=light.specular
        )
        attenuation = Attenuation(
            constant=light.attenuation[0],
            linear=light.attenuation[1],
            quadratic=light.attenuation[2],
        )
        result = total_color(
            material,
            light_color,
            tm.normalize(eye_position - point),
            normal,
            light.position,
            point,
            light.attenuation_on,
            attenuation,
        )
    return result


@ti.func
def illuminate_positional(
    light: LightData,
    point: vec3,
    normal: vec3,
    material: PhongMaterial,
    eye_position: vec3,
    in_shadow: ti.i32,
) -> vec3:
    """Color a positional light produces at a surface point.

    Args:
        light: The light, in world space.
        point: Intersection point.
        normal: Unit surface normal.
        material: Surface material.
        eye_position: Position of the viewer.
        in_shadow: 1 if the point is shadowed from this light.

    Returns:
        Black when off, ambient only when shadowed, full Phong otherwise.
    """
    result = vec3(0.0, 0.0, 0.0)
    if light.is_on == 1:
        result = _lit_color(light, point, normal, material, eye_position, in_shadow)
    return result


@ti.func
def illuminate_spot(
    light: LightData,
    point: vec3,
    normal: vec3,
    material: PhongMaterial,
    eye_position: vec3,
    in_shadow: ti.i32,
) -> vec3:
    """Color a spot light produces at a surface point.

    On/off and cone membership are checked before the shadow flag: an off
    or out-of-cone spot contributes nothing, not even ambient.

    Args:
        light: The light, in world space.
        point: Intersection point.
        normal: Unit surface normal.
        material: Surface material.
        eye_position: Position of the viewer.
        in_shadow: 1 if the point is shadowed from this light.

    Returns:
        The contributed color.
    """
    to_point = tm.normalize(point - light.position)
    outside = is_outside_cone(to_point, light.direction, light.cos_half_fov)

    result = vec3(0.0, 0.0, 0.0)
    if light.is_on == 1 and outside == 0:
        result = _lit_color(light, point, normal, material, eye_position, in_shadow)
    return result


@ti.func
def illuminate(
    light: LightData,
    point: vec3,
    normal: vec3,
    material: PhongMaterial,
    eye_position: vec3,
    in_shadow: ti.i32,
) -> vec3:
    """Dispatch to the variant-specific illumination rule."""
    result = vec3(0.0, 0.0, 0.0)
    if light.kind == int(LightKind.SPOT):
        result = illuminate_spot(light, point, normal, material, eye_position, in_shadow)
    else:
        result = illuminate_positional(
            light, point, normal, material, eye_position, in_shadow
        )
    return result
