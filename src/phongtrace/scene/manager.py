"""Scene manager coordinating camera, primitives, materials, textures and lights.

The SceneManager is the Scene aggregate consumed by the ray tracer: a
camera, an ordered collection of visible objects (spheres, then quads) and
an ordered collection of lights. It writes everything into the Taichi
registries and keeps Python-side records for queries and serialization.

The tracer only reads the scene; edits between renders are safe.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from phongtrace.camera.pinhole import RaytracingCamera
    >>> from phongtrace.lighting.lights import PositionalLight
    >>> from phongtrace.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> gold = scene.add_preset_material("gold")
    >>> scene.add_sphere((0, 0, -3), 1.0, gold)
    >>> scene.add_light(PositionalLight(position=(2.0, 4.0, 0.0)))
    >>> scene.set_camera(RaytracingCamera(lookfrom=(0, 0, 0), lookat=(0, 0, -1)))
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import numpy.typing as npt

from phongtrace.camera.pinhole import RaytracingCamera
from phongtrace.lighting.lights import (
    MAX_LIGHTS,
    AttenuationParameters,
    LightColorComponents,
    PositionalLight,
    SpotLight,
    add_light,
    clear_lights,
    get_light_count,
    set_light_on,
)
from phongtrace.materials.phong import (
    MATERIAL_PRESETS,
    MAX_MATERIALS,
    add_phong_material,
    clear_phong_materials,
    num_materials,
)
from phongtrace.materials.texture import (
    MAX_TEXTURES,
    add_checkerboard_texture,
    add_texture,
    clear_textures,
    load_texture,
    num_textures,
)
from phongtrace.scene.intersection import (
    MAX_QUADS,
    MAX_SPHERES,
    NO_TEXTURE,
    add_quad,
    add_sphere,
    clear_scene,
    get_quad_count,
    get_sphere_count,
)

Vec3Tuple = tuple[float, float, float]


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        material_id: The material ID.
        params: The material parameters as provided during creation.
    """

    material_id: int
    params: dict[str, Any]


@dataclass
class TextureInfo:
    """Information about a registered texture.

    Attributes:
        texture_id: The texture ID.
        params: How the texture was created ("checkerboard", "image" or "array").
    """

    texture_id: int
    params: dict[str, Any]


@dataclass
class SphereInfo:
    """Information about a sphere in the scene."""

    sphere_index: int
    center: Vec3Tuple
    radius: float
    material_id: int
    texture_id: int = NO_TEXTURE


@dataclass
class QuadInfo:
    """Information about a quad in the scene."""

    quad_index: int
    corner: Vec3Tuple
    edge_u: Vec3Tuple
    edge_v: Vec3Tuple
    material_id: int
    texture_id: int = NO_TEXTURE


@dataclass
class SceneConfig:
    """Serializable scene description.

    Attributes:
        materials: List of material configurations.
        textures: List of texture configurations.
        spheres: List of sphere configurations.
        quads: List of quad configurations.
        lights: List of light configurations.
        camera: Camera configuration, or None.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    textures: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)
    quads: list[dict[str, Any]] = field(default_factory=list)
    lights: list[dict[str, Any]] = field(default_factory=list)
    camera: dict[str, Any] | None = None


def _triple(values: Any) -> Vec3Tuple:
    return (float(values[0]), float(values[1]), float(values[2]))


def _light_to_dict(light: PositionalLight) -> dict[str, Any]:
    data: dict[str, Any] = {
        "type": "spot" if isinstance(light, SpotLight) else "positional",
        "position": list(light.position),
        "ambient": list(light.colors.ambient),
        "diffuse": list(light.colors.diffuse),
        "specular": list(light.colors.specular),
        "is_on": light.is_on,
        "tied_to_world": light.tied_to_world,
        "attenuation_on": light.attenuation_on,
        "attenuation": [
            light.attenuation.constant,
            light.attenuation.linear,
            light.attenuation.quadratic,
        ],
    }
    if isinstance(light, SpotLight):
        data["direction"] = list(light.direction)
        data["fov"] = light.fov
    return data


def _light_from_dict(data: dict[str, Any]) -> PositionalLight:
    light_type = data.get("type", "positional").lower()
    colors = LightColorComponents(
        ambient=_triple(data.get("ambient", [0.1, 0.1, 0.1])),
        diffuse=_triple(data.get("diffuse", [1.0, 1.0, 1.0])),
        specular=_triple(data.get("specular", [1.0, 1.0, 1.0])),
    )
    constant, linear, quadratic = data.get("attenuation", [1.0, 0.0, 0.0])
    common: dict[str, Any] = {
        "position": _triple(data.get("position", [0.0, 0.0, 0.0])),
        "colors": colors,
        "is_on": bool(data.get("is_on", True)),
        "tied_to_world": bool(data.get("tied_to_world", True)),
        "attenuation_on": bool(data.get("attenuation_on", False)),
        "attenuation": AttenuationParameters(constant, linear, quadratic),
    }
    if light_type == "positional":
        return PositionalLight(**common)
    if light_type == "spot":
        return SpotLight(
            **common,
            direction=_triple(data.get("direction", [0.0, -1.0, 0.0])),
            fov=float(data.get("fov", 1.0)),
        )
    raise ValueError(f"Unknown light type: {light_type}")


class SceneManager:
    """Scene aggregate: camera, visible objects and lights.

    Attributes:
        camera: The camera used to generate primary rays.
        materials: MaterialInfo for all registered materials.
        textures: TextureInfo for all registered textures.
        spheres: SphereInfo for all spheres.
        quads: QuadInfo for all quads.
        lights: The registered lights, in registry order.
    """

    def __init__(self, camera: RaytracingCamera | None = None) -> None:
        """Initialize an empty scene, clearing all registries."""
        self.camera = camera
        self.materials: list[MaterialInfo] = []
        self.textures: list[TextureInfo] = []
        self.spheres: list[SphereInfo] = []
        self.quads: list[QuadInfo] = []
        self.lights: list[PositionalLight] = []
        self._clear_all()

    def _clear_all(self) -> None:
        clear_scene()
        clear_phong_materials()
        clear_textures()
        clear_lights()
        self.materials.clear()
        self.textures.clear()
        self.spheres.clear()
        self.quads.clear()
        self.lights.clear()

    def clear(self) -> None:
        """Remove every primitive, material, texture and light.

        The camera is kept.
        """
        self._clear_all()

    def set_camera(self, camera: RaytracingCamera) -> None:
        """Set the camera used for primary rays."""
        self.camera = camera

    # =========================================================================
    # Materials and Textures
    # =========================================================================

    def add_material(
        self,
        ambient: Vec3Tuple,
        diffuse: Vec3Tuple,
        specular: Vec3Tuple,
        shininess: float,
        reflectivity: float = 0.0,
    ) -> int:
        """Add a Phong material.

        Returns:
            The material ID.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any parameter is out of range.
        """
        material_id = add_phong_material(ambient, diffuse, specular, shininess, reflectivity)
        self.materials.append(
            MaterialInfo(
                material_id=material_id,
                params={
                    "ambient": list(ambient),
                    "diffuse": list(diffuse),
                    "specular": list(specular),
                    "shininess": shininess,
                    "reflectivity": reflectivity,
                },
            )
        )
        return material_id

    def add_preset_material(self, name: str, reflectivity: float = 0.0) -> int:
        """Add one of the named material presets.

        Raises:
            ValueError: If the preset name is unknown.
        """
        preset = MATERIAL_PRESETS.get(name)
        if preset is None:
            raise ValueError(f"Unknown material preset: {name}")
        return self.add_material(
            preset.ambient, preset.diffuse, preset.specular, preset.shininess, reflectivity
        )

    def get_material_count(self) -> int:
        """Get the number of registered materials."""
        return len(self.materials)

    def add_texture(self, image: npt.NDArray) -> int:
        """Add an in-memory RGB image as a texture.

        Textures added this way cannot be serialized by to_config().
        """
        texture_id = add_texture(image)
        self.textures.append(
            TextureInfo(texture_id=texture_id, params={"type": "array", "shape": list(image.shape)})
        )
        return texture_id

    def load_texture(self, filepath: str | Path) -> int:
        """Load an image file as a texture."""
        texture_id = load_texture(filepath)
        self.textures.append(
            TextureInfo(texture_id=texture_id, params={"type": "image", "path": str(filepath)})
        )
        return texture_id

    def add_checkerboard_texture(
        self,
        width: int = 64,
        height: int = 64,
        squares: int = 8,
        color_a: Vec3Tuple = (1.0, 1.0, 1.0),
        color_b: Vec3Tuple = (0.0, 0.0, 0.0),
    ) -> int:
        """Generate a checkerboard texture."""
        texture_id = add_checkerboard_texture(width, height, squares, color_a, color_b)
        self.textures.append(
            TextureInfo(
                texture_id=texture_id,
                params={
                    "type": "checkerboard",
                    "width": width,
                    "height": height,
                    "squares": squares,
                    "color_a": list(color_a),
                    "color_b": list(color_b),
                },
            )
        )
        return texture_id

    def get_texture_count(self) -> int:
        """Get the number of registered textures."""
        return len(self.textures)

    # =========================================================================
    # Visible Objects
    # =========================================================================

    def _check_ids(self, material_id: int, texture_id: int | None) -> int:
        if material_id < 0 or material_id >= num_materials[None]:
            raise ValueError(f"Invalid material_id: {material_id}")
        if texture_id is None:
            return NO_TEXTURE
        if texture_id < 0 or texture_id >= num_textures[None]:
            raise ValueError(f"Invalid texture_id: {texture_id}")
        return texture_id

    def add_sphere(
        self,
        center: Vec3Tuple,
        radius: float,
        material_id: int,
        texture_id: int | None = None,
    ) -> int:
        """Add a sphere to the scene.

        Args:
            center: The center point of the sphere.
            radius: The radius of the sphere.
            material_id: The material ID to assign.
            texture_id: Optional texture displayed instead of lighting.

        Returns:
            The index of the added sphere.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
            ValueError: If an ID or the radius is invalid.
        """
        tex = self._check_ids(material_id, texture_id)
        sphere_index = add_sphere(center, radius, material_id, tex)
        self.spheres.append(
            SphereInfo(
                sphere_index=sphere_index,
                center=_triple(center),
                radius=radius,
                material_id=material_id,
                texture_id=tex,
            )
        )
        return sphere_index

    def add_quad(
        self,
        corner: Vec3Tuple,
        edge_u: Vec3Tuple,
        edge_v: Vec3Tuple,
        material_id: int,
        texture_id: int | None = None,
    ) -> int:
        """Add a quad (parallelogram) to the scene.

        Args:
            corner: The corner point (Q) of the quad.
            edge_u: The first edge vector.
            edge_v: The second edge vector.
            material_id: The material ID to assign.
            texture_id: Optional texture displayed instead of lighting.

        Returns:
            The index of the added quad.

        Raises:
            RuntimeError: If the maximum number of quads is exceeded.
            ValueError: If an ID is invalid.
        """
        tex = self._check_ids(material_id, texture_id)
        quad_index = add_quad(corner, edge_u, edge_v, material_id, tex)
        self.quads.append(
            QuadInfo(
                quad_index=quad_index,
                corner=_triple(corner),
                edge_u=_triple(edge_u),
                edge_v=_triple(edge_v),
                material_id=material_id,
                texture_id=tex,
            )
        )
        return quad_index

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return get_sphere_count()

    def get_quad_count(self) -> int:
        """Get the number of quads in the scene."""
        return get_quad_count()

    def get_primitive_count(self) -> int:
        """Get the total number of primitives in the scene."""
        return self.get_sphere_count() + self.get_quad_count()

    # =========================================================================
    # Lights
    # =========================================================================

    def add_light(self, light: PositionalLight) -> int:
        """Add a positional or spot light.

        Returns:
            The index of the light.

        Raises:
            RuntimeError: If the maximum number of lights is exceeded.
        """
        light_index = add_light(light)
        self.lights.append(light)
        return light_index

    def set_light_on(self, light_index: int, is_on: bool) -> None:
        """Switch a light on or off.

        Raises:
            ValueError: If the index is not a registered light.
        """
        set_light_on(light_index, is_on)
        self.lights[light_index].is_on = is_on

    def toggle_light(self, light_index: int) -> bool:
        """Flip a light's on/off state.

        Returns:
            The new state.
        """
        if light_index < 0 or light_index >= len(self.lights):
            raise ValueError(f"Invalid light index: {light_index}")
        new_state = not self.lights[light_index].is_on
        self.set_light_on(light_index, new_state)
        return new_state

    def get_light_count(self) -> int:
        """Get the number of lights in the scene."""
        return get_light_count()

    def describe_lights(self) -> str:
        """Multi-line description of every light."""
        return "\n".join(f"Light {i}:\n{light}" for i, light in enumerate(self.lights))

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object.

        Raises:
            ValueError: If the scene holds in-memory textures.
        """
        config = SceneConfig()

        for mat in self.materials:
            config.materials.append(dict(mat.params))

        for tex in self.textures:
            if tex.params["type"] == "array":
                raise ValueError(
                    f"Texture {tex.texture_id} was created from an array and cannot be serialized"
                )
            config.textures.append(dict(tex.params))

        for sphere in self.spheres:
            config.spheres.append(
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "material_id": sphere.material_id,
                    "texture_id": sphere.texture_id,
                }
            )

        for quad in self.quads:
            config.quads.append(
                {
                    "corner": list(quad.corner),
                    "edge_u": list(quad.edge_u),
                    "edge_v": list(quad.edge_v),
                    "material_id": quad.material_id,
                    "texture_id": quad.texture_id,
                }
            )

        for light in self.lights:
            config.lights.append(_light_to_dict(light))

        if self.camera is not None:
            config.camera = {
                "lookfrom": list(self.camera.lookfrom),
                "lookat": list(self.camera.lookat),
                "vup": list(self.camera.vup),
                "vfov": self.camera.vfov,
            }

        return config

    def from_config(self, config: SceneConfig) -> None:
        """Replace the scene with a configuration.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        self.clear()

        for mat_config in config.materials:
            self.add_material(
                _triple(mat_config.get("ambient", [0.1, 0.1, 0.1])),
                _triple(mat_config.get("diffuse", [0.5, 0.5, 0.5])),
                _triple(mat_config.get("specular", [0.0, 0.0, 0.0])),
                float(mat_config.get("shininess", 1.0)),
                float(mat_config.get("reflectivity", 0.0)),
            )

        for tex_config in config.textures:
            tex_type = tex_config.get("type", "").lower()
            if tex_type == "checkerboard":
                self.add_checkerboard_texture(
                    int(tex_config.get("width", 64)),
                    int(tex_config.get("height", 64)),
                    int(tex_config.get("squares", 8)),
                    _triple(tex_config.get("color_a", [1.0, 1.0, 1.0])),
                    _triple(tex_config.get("color_b", [0.0, 0.0, 0.0])),
                )
            elif tex_type == "image":
                self.load_texture(tex_config["path"])
            else:
                raise ValueError(f"Unknown texture type: {tex_type}")

        def _texture(entry: dict[str, Any]) -> int | None:
            texture_id = entry.get("texture_id", NO_TEXTURE)
            return None if texture_id == NO_TEXTURE else int(texture_id)

        for sphere_config in config.spheres:
            self.add_sphere(
                _triple(sphere_config.get("center", [0, 0, 0])),
                float(sphere_config.get("radius", 1.0)),
                int(sphere_config.get("material_id", 0)),
                _texture(sphere_config),
            )

        for quad_config in config.quads:
            self.add_quad(
                _triple(quad_config.get("corner", [0, 0, 0])),
                _triple(quad_config.get("edge_u", [1, 0, 0])),
                _triple(quad_config.get("edge_v", [0, 1, 0])),
                int(quad_config.get("material_id", 0)),
                _texture(quad_config),
            )

        for light_config in config.lights:
            self.add_light(_light_from_dict(light_config))

        if config.camera is not None:
            self.camera = RaytracingCamera(
                lookfrom=_triple(config.camera.get("lookfrom", [0.0, 0.0, 0.0])),
                lookat=_triple(config.camera.get("lookat", [0.0, 0.0, -1.0])),
                vup=_triple(config.camera.get("vup", [0.0, 1.0, 0.0])),
                vfov=float(config.camera.get("vfov", 60.0)),
            )

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.to_config()
        return {
            "materials": config.materials,
            "textures": config.textures,
            "spheres": config.spheres,
            "quads": config.quads,
            "lights": config.lights,
            "camera": config.camera,
        }

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary produced by to_dict()."""
        config = SceneConfig(
            materials=data.get("materials", []),
            textures=data.get("textures", []),
            spheres=data.get("spheres", []),
            quads=data.get("quads", []),
            lights=data.get("lights", []),
            camera=data.get("camera"),
        )
        self.from_config(config)

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_spheres() -> int:
        """Get the maximum number of spheres supported."""
        return MAX_SPHERES

    @staticmethod
    def get_max_quads() -> int:
        """Get the maximum number of quads supported."""
        return MAX_QUADS

    @staticmethod
    def get_max_materials() -> int:
        """Get the maximum number of materials supported."""
        return MAX_MATERIALS

    @staticmethod
    def get_max_textures() -> int:
        """Get the maximum number of textures supported."""
        return MAX_TEXTURES

    @staticmethod
    def get_max_lights() -> int:
        """Get the maximum number of lights supported."""
        return MAX_LIGHTS
