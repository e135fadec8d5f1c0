"""Demo scene exercising every feature of the renderer.

The demo scene consists of:
- A checkerboard-textured floor quad (textures bypass lighting)
- A gold sphere, a reflective silver sphere and a red plastic sphere
- A positional light with distance attenuation
- A spot light aimed at the red sphere
- A dim headlight tied to the camera

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from phongtrace.scene.demo import create_demo_scene
    >>> scene = create_demo_scene()
    >>> scene.get_sphere_count()
    3
"""

import math
from dataclasses import dataclass

from phongtrace.camera.pinhole import RaytracingCamera
from phongtrace.lighting.lights import (
    AttenuationParameters,
    LightColorComponents,
    PositionalLight,
    SpotLight,
)
from phongtrace.scene.manager import SceneManager

Vec3Tuple = tuple[float, float, float]


@dataclass
class DemoSceneParams:
    """Parameters for configuring the demo scene.

    Attributes:
        mirror_reflectivity: Reflectivity of the silver sphere, in [0, 1].
        checker_squares: Number of checker squares along each floor edge.
        spot_fov: Full opening angle of the spot light in radians.
        headlight_on: Whether the camera-tied headlight starts switched on.
        lookfrom: Camera position.
        lookat: Camera target.
        vfov: Vertical field of view in degrees.
    """

    mirror_reflectivity: float = 0.6
    checker_squares: int = 8
    spot_fov: float = math.radians(30.0)
    headlight_on: bool = True
    lookfrom: Vec3Tuple = (0.0, 1.5, 4.0)
    lookat: Vec3Tuple = (0.0, 0.5, -2.0)
    vfov: float = 50.0


# Floor spans x in [-4, 4], z in [-7, 1] at y = 0
FLOOR_CORNER = (-4.0, 0.0, -7.0)
FLOOR_EDGE_U = (0.0, 0.0, 8.0)
FLOOR_EDGE_V = (8.0, 0.0, 0.0)

GOLD_SPHERE = ((-1.4, 0.6, -2.5), 0.6)
MIRROR_SPHERE = ((0.0, 0.8, -3.5), 0.8)
RED_SPHERE = ((1.3, 0.5, -2.0), 0.5)


def _direction(source: Vec3Tuple, target: Vec3Tuple) -> Vec3Tuple:
    return (target[0] - source[0], target[1] - source[1], target[2] - source[2])


def create_demo_scene(params: DemoSceneParams | None = None) -> SceneManager:
    """Build the demo scene.

    Args:
        params: Optional DemoSceneParams. If None, uses DemoSceneParams().

    Returns:
        A SceneManager holding geometry, materials, lights and the camera.
    """
    if params is None:
        params = DemoSceneParams()

    scene = SceneManager()

    # Materials
    floor_mat = scene.add_preset_material("white_plastic")
    gold_mat = scene.add_preset_material("gold")
    mirror_mat = scene.add_preset_material("silver", reflectivity=params.mirror_reflectivity)
    red_mat = scene.add_preset_material("red_plastic")

    checker = scene.add_checkerboard_texture(
        width=256,
        height=256,
        squares=params.checker_squares,
        color_a=(0.9, 0.9, 0.9),
        color_b=(0.2, 0.2, 0.25),
    )

    # Geometry
    scene.add_quad(FLOOR_CORNER, FLOOR_EDGE_U, FLOOR_EDGE_V, floor_mat, checker)
    scene.add_sphere(GOLD_SPHERE[0], GOLD_SPHERE[1], gold_mat)
    scene.add_sphere(MIRROR_SPHERE[0], MIRROR_SPHERE[1], mirror_mat)
    scene.add_sphere(RED_SPHERE[0], RED_SPHERE[1], red_mat)

    # Lights
    key_position = (-3.0, 5.0, 2.0)
    scene.add_light(
        PositionalLight(
            position=key_position,
            colors=LightColorComponents(
                ambient=(0.1, 0.1, 0.1),
                diffuse=(1.0, 1.0, 1.0),
                specular=(1.0, 1.0, 1.0),
            ),
            attenuation_on=True,
            attenuation=AttenuationParameters(constant=1.0, linear=0.05, quadratic=0.01),
        )
    )

    spot_position = (2.5, 4.0, 0.0)
    scene.add_light(
        SpotLight(
            position=spot_position,
            colors=LightColorComponents(
                ambient=(0.0, 0.0, 0.0),
                diffuse=(1.0, 0.9, 0.7),
                specular=(1.0, 1.0, 1.0),
            ),
            direction=_direction(spot_position, RED_SPHERE[0]),
            fov=params.spot_fov,
        )
    )

    # Slightly above the camera, in the camera frame
    scene.add_light(
        PositionalLight(
            position=(0.0, 0.5, 0.0),
            colors=LightColorComponents(
                ambient=(0.0, 0.0, 0.0),
                diffuse=(0.3, 0.3, 0.3),
                specular=(0.2, 0.2, 0.2),
            ),
            is_on=params.headlight_on,
            tied_to_world=False,
        )
    )

    scene.set_camera(
        RaytracingCamera(
            lookfrom=params.lookfrom,
            lookat=params.lookat,
            vup=(0.0, 1.0, 0.0),
            vfov=params.vfov,
        )
    )

    return scene
