"""Phong material model and material registry.

A Phong material describes how a surface responds to each of the three
light components:

    ambient:     color reflected from the constant ambient term
    diffuse:     color reflected by Lambertian scattering
    specular:    color of the highlight
    shininess:   Phong exponent controlling highlight tightness (>= 0)
    reflectivity: weight of the recursive mirror ray in [0, 1]

Materials are stored in Taichi fields (Structure of Arrays) so the tracer
can look them up by ID inside kernels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from phongtrace.materials.phong import add_phong_material, add_preset_material
    >>> red = add_phong_material((0.1, 0.0, 0.0), (0.7, 0.0, 0.0), (0.5, 0.5, 0.5), 32.0)
    >>> gold = add_preset_material("gold")
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3

Color = tuple[float, float, float]


@ti.dataclass
class PhongMaterial:
    """Phong material properties.

    Attributes:
        ambient: Ambient reflectance (RGB, each component in [0, 1]).
        diffuse: Diffuse reflectance (RGB, each component in [0, 1]).
        specular: Specular reflectance (RGB, each component in [0, 1]).
        shininess: Phong exponent (>= 0).
        reflectivity: Weight of the mirror-reflected ray in [0, 1].
    """

    ambient: vec3
    diffuse: vec3
    specular: vec3
    shininess: ti.f32
    reflectivity: ti.f32


@dataclass(frozen=True)
class MaterialPreset:
    """Python-side description of a named material.

    Attributes:
        ambient: Ambient reflectance.
        diffuse: Diffuse reflectance.
        specular: Specular reflectance.
        shininess: Phong exponent.
    """

    ambient: Color
    diffuse: Color
    specular: Color
    shininess: float


# Classic OpenGL material table (shininess already scaled by 128)
MATERIAL_PRESETS: dict[str, MaterialPreset] = {
    "brass": MaterialPreset(
        (0.329412, 0.223529, 0.027451),
        (0.780392, 0.568627, 0.113725),
        (0.992157, 0.941176, 0.807843),
        27.8974,
    ),
    "bronze": MaterialPreset(
        (0.2125, 0.1275, 0.054),
        (0.714, 0.4284, 0.18144),
        (0.393548, 0.271906, 0.166721),
        25.6,
    ),
    "chrome": MaterialPreset(
        (0.25, 0.25, 0.25),
        (0.4, 0.4, 0.4),
        (0.774597, 0.774597, 0.774597),
        76.8,
    ),
    "copper": MaterialPreset(
        (0.19125, 0.0735, 0.0225),
        (0.7038, 0.27048, 0.0828),
        (0.256777, 0.137622, 0.086014),
        12.8,
    ),
    "gold": MaterialPreset(
        (0.24725, 0.1995, 0.0745),
        (0.75164, 0.60648, 0.22648),
        (0.628281, 0.555802, 0.366065),
        51.2,
    ),
    "silver": MaterialPreset(
        (0.19225, 0.19225, 0.19225),
        (0.50754, 0.50754, 0.50754),
        (0.508273, 0.508273, 0.508273),
        51.2,
    ),
    "pewter": MaterialPreset(
        (0.105882, 0.058824, 0.113725),
        (0.427451, 0.470588, 0.541176),
        (0.333333, 0.333333, 0.521569),
        9.84615,
    ),
    "black_plastic": MaterialPreset(
        (0.0, 0.0, 0.0),
        (0.01, 0.01, 0.01),
        (0.5, 0.5, 0.5),
        32.0,
    ),
    "red_plastic": MaterialPreset(
        (0.0, 0.0, 0.0),
        (0.5, 0.0, 0.0),
        (0.7, 0.6, 0.6),
        32.0,
    ),
    "green_plastic": MaterialPreset(
        (0.0, 0.0, 0.0),
        (0.1, 0.35, 0.1),
        (0.45, 0.55, 0.45),
        32.0,
    ),
    "white_plastic": MaterialPreset(
        (0.0, 0.0, 0.0),
        (0.55, 0.55, 0.55),
        (0.7, 0.7, 0.7),
        32.0,
    ),
}


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of Phong materials in the scene
MAX_MATERIALS = 256

# Storage for Phong material properties
material_ambients = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_diffuses = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_speculars = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_shininess = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
material_reflectivity = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def _validate_color(name: str, color: Color) -> None:
    """Raise ValueError unless color is an RGB triple in [0, 1]."""
    if len(color) != 3:
        raise ValueError(f"{name} color must have 3 components, got {len(color)}")
    for i, component in enumerate(color):
        if component < 0.0 or component > 1.0:
            raise ValueError(f"{name} component {i} = {component} is outside [0, 1].")


def clear_phong_materials() -> None:
    """Clear all Phong materials.

    Resets the material count to zero. Existing data in the fields will be
    overwritten when new materials are added.
    """
    num_materials[None] = 0


def add_phong_material(
    ambient: Color,
    diffuse: Color,
    specular: Color,
    shininess: float,
    reflectivity: float = 0.0,
) -> int:
    """Add a Phong material to the material registry.

    Args:
        ambient: Ambient reflectance as (R, G, B), each in [0, 1].
        diffuse: Diffuse reflectance as (R, G, B), each in [0, 1].
        specular: Specular reflectance as (R, G, B), each in [0, 1].
        shininess: Phong exponent (>= 0).
        reflectivity: Mirror reflection weight in [0, 1].

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any parameter is out of range.
    """
    _validate_color("Ambient", ambient)
    _validate_color("Diffuse", diffuse)
    _validate_color("Specular", specular)
    if shininess < 0.0:
        raise ValueError(f"Shininess = {shininess} is negative.")
    if reflectivity < 0.0 or reflectivity > 1.0:
        raise ValueError(f"Reflectivity = {reflectivity} is outside [0, 1].")

    idx = num_materials[None]
    if idx >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    material_ambients[idx] = vec3(ambient[0], ambient[1], ambient[2])
    material_diffuses[idx] = vec3(diffuse[0], diffuse[1], diffuse[2])
    material_speculars[idx] = vec3(specular[0], specular[1], specular[2])
    material_shininess[idx] = shininess
    material_reflectivity[idx] = reflectivity
    num_materials[None] = idx + 1
    return idx


def add_preset_material(name: str, reflectivity: float = 0.0) -> int:
    """Add one of the named MATERIAL_PRESETS to the registry.

    Args:
        name: Preset name, e.g. "gold" or "red_plastic".
        reflectivity: Mirror reflection weight in [0, 1].

    Returns:
        The index of the added material.

    Raises:
        ValueError: If the preset name is unknown.
    """
    preset = MATERIAL_PRESETS.get(name)
    if preset is None:
        raise ValueError(f"Unknown material preset: {name}")
    return add_phong_material(
        preset.ambient, preset.diffuse, preset.specular, preset.shininess, reflectivity
    )


def get_phong_material_count() -> int:
    """Get the number of Phong materials in the registry."""
    return int(num_materials[None])


def get_phong_material_python(material_idx: int) -> dict[str, object]:
    """Read a registered material back from the Taichi fields.

    Args:
        material_idx: The index of the material in the registry.

    Returns:
        Dictionary with ambient, diffuse, specular, shininess, reflectivity.

    Raises:
        ValueError: If the index is not a registered material.
    """
    if material_idx < 0 or material_idx >= num_materials[None]:
        raise ValueError(f"Invalid material index: {material_idx}")

    def _triple(field: ti.MatrixField) -> Color:
        v = field[material_idx]
        return (float(v[0]), float(v[1]), float(v[2]))

    return {
        "ambient": _triple(material_ambients),
        "diffuse": _triple(material_diffuses),
        "specular": _triple(material_speculars),
        "shininess": float(material_shininess[material_idx]),
        "reflectivity": float(material_reflectivity[material_idx]),
    }


@ti.func
def get_phong_material(material_idx: ti.i32) -> PhongMaterial:
    """Get a Phong material by index.

    Invalid indices yield an all-zero (black, non-reflective) material.

    Args:
        material_idx: The index of the material in the registry.

    Returns:
        The PhongMaterial stored at that index.
    """
    result = PhongMaterial(
        ambient=vec3(0.0, 0.0, 0.0),
        diffuse=vec3(0.0, 0.0, 0.0),
        specular=vec3(0.0, 0.0, 0.0),
        shininess=0.0,
        reflectivity=0.0,
    )
    if 0 <= material_idx < num_materials[None]:
        result = PhongMaterial(
            ambient=material_ambients[material_idx],
            diffuse=material_diffuses[material_idx],
            specular=material_speculars[material_idx],
            shininess=material_shininess[material_idx],
            reflectivity=material_reflectivity[material_idx],
        )
    return result
