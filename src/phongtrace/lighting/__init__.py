"""Lighting module: Phong illumination primitives and light variants.

Components:
    illumination: Per-light ambient, diffuse and specular terms
    lights: Positional and spot lights with the illuminate() dispatch
"""

from .illumination import (
    ATTENUATION_EPSILON,
    Attenuation,
    LightColor,
    ambient_color,
    attenuation_factor,
    diffuse_color,
    specular_color,
    total_color,
)
from .lights import (
    MAX_LIGHTS,
    AttenuationParameters,
    LightColorComponents,
    LightData,
    LightKind,
    PositionalLight,
    SpotLight,
    add_light,
    clear_lights,
    get_light,
    get_light_count,
    illuminate,
    is_light_on,
    resolve_light,
    set_light_on,
)

__all__ = [
    # Illumination primitives
    "ATTENUATION_EPSILON",
    "Attenuation",
    "LightColor",
    "ambient_color",
    "diffuse_color",
    "specular_color",
    "attenuation_factor",
    "total_color",
    # Lights
    "MAX_LIGHTS",
    "LightKind",
    "LightColorComponents",
    "AttenuationParameters",
    "PositionalLight",
    "SpotLight",
    "LightData",
    "add_light",
    "clear_lights",
    "get_light",
    "get_light_count",
    "set_light_on",
    "is_light_on",
    "resolve_light",
    "illuminate",
]
