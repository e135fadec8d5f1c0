"""Scene module: primitive storage, scene queries and scene building.

Components:
    intersection: Sphere/quad storage with closest-hit and shadow queries
    manager: SceneManager coordinating camera, objects, materials and lights
    demo: Factory for a demo scene exercising every renderer feature
"""

from .demo import DemoSceneParams, create_demo_scene
from .intersection import (
    MAX_QUADS,
    MAX_SPHERES,
    NO_TEXTURE,
    RAY_EPSILON,
    T_MAX,
    T_MIN,
    SceneHitRecord,
    add_quad,
    add_sphere,
    clear_scene,
    get_quad_count,
    get_sphere_count,
    intersect_scene,
    intersect_scene_any,
    is_shadowed,
)
from .manager import (
    MaterialInfo,
    QuadInfo,
    SceneConfig,
    SceneManager,
    SphereInfo,
    TextureInfo,
)

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "T_MIN",
    "T_MAX",
    "RAY_EPSILON",
    "NO_TEXTURE",
    "MAX_SPHERES",
    "MAX_QUADS",
    "add_sphere",
    "add_quad",
    "clear_scene",
    "get_sphere_count",
    "get_quad_count",
    "intersect_scene",
    "intersect_scene_any",
    "is_shadowed",
    # Manager module
    "SceneManager",
    "SceneConfig",
    "MaterialInfo",
    "TextureInfo",
    "SphereInfo",
    "QuadInfo",
    # Demo scene
    "DemoSceneParams",
    "create_demo_scene",
]
