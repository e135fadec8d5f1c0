"""Taichi-accelerated Whitted-style ray tracer with Phong illumination.

This package renders scenes of spheres and quads lit by positional and
spot lights, with support for:
- Phong ambient/diffuse/specular shading with distance attenuation
- Spot light cones and lights tied to the camera
- Recursive mirror reflection and optional hard shadows
- Regular-grid supersampling
- Nearest-neighbour textures

Subpackages:
    core: Ray type, frame buffer and the ray tracer
    camera: Pinhole camera with fractional pixel ray generation
    geometry: Sphere and quad primitives
    lighting: Phong illumination primitives and light variants
    materials: Phong material and texture registries
    scene: Scene intersection, scene manager and the demo scene
    preview: Matplotlib preview and PNG export

Taichi must be initialised with ti.init() before importing any subpackage.
"""

__version__ = "0.1.0"
