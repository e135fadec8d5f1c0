"""Materials module: Phong materials and textures.

Components:
    phong: Phong material registry and named presets
    texture: Texel registry with nearest-neighbour lookup
"""

from .phong import (
    MATERIAL_PRESETS,
    MAX_MATERIALS,
    MaterialPreset,
    PhongMaterial,
    add_phong_material,
    add_preset_material,
    clear_phong_materials,
    get_phong_material,
    get_phong_material_count,
    get_phong_material_python,
)
from .texture import (
    MAX_TEXELS,
    MAX_TEXTURES,
    add_checkerboard_texture,
    add_texture,
    clear_textures,
    get_texture_count,
    get_texture_size,
    load_texture,
    make_checkerboard,
    sample_texture,
)

__all__ = [
    # Phong materials
    "PhongMaterial",
    "MaterialPreset",
    "MATERIAL_PRESETS",
    "MAX_MATERIALS",
    "add_phong_material",
    "add_preset_material",
    "clear_phong_materials",
    "get_phong_material",
    "get_phong_material_count",
    "get_phong_material_python",
    # Textures
    "MAX_TEXTURES",
    "MAX_TEXELS",
    "add_texture",
    "load_texture",
    "make_checkerboard",
    "add_checkerboard_texture",
    "clear_textures",
    "get_texture_count",
    "get_texture_size",
    "sample_texture",
]
