"""Unit tests for scene-level intersection.

Tests cover:
- Adding and clearing primitives, validation and capacity
- Closest-hit queries over mixed spheres and quads
- Material, texture and (u, v) propagation into SceneHitRecord
- The miss sentinel
- Any-hit and shadow queries
"""

import pytest
import taichi as ti


def _intersect(origin, direction, t_min=None, t_max=None):
    """Run intersect_scene in a kernel and return the record as a dict."""
    from phongtrace.scene.intersection import T_MAX, T_MIN, intersect_scene, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    normal = ti.field(dtype=ti.math.vec3, shape=())
    ids = ti.field(dtype=ti.i32, shape=2)
    uv = ti.field(dtype=ti.math.vec2, shape=())

    @ti.kernel
    def test_kernel(
        ox: ti.f32, oy: ti.f32, oz: ti.f32,
        dx: ti.f32, dy: ti.f32, dz: ti.f32,
        tmin: ti.f32, tmax: ti.f32,
    ):
        rec = intersect_scene(vec3(ox, oy, oz), vec3(dx, dy, dz), tmin, tmax)
        hit[None] = rec.hit
        t_val[None] = rec.t
        normal[None] = rec.normal
        ids[0] = rec.material_id
        ids[1] = rec.texture_id
        uv[None] = ti.math.vec2(rec.u, rec.v)

    test_kernel(
        *origin,
        *direction,
        T_MIN if t_min is None else t_min,
        T_MAX if t_max is None else t_max,
    )
    return {
        "hit": hit[None],
        "t": t_val[None],
        "normal": tuple(float(c) for c in normal[None].to_numpy()),
        "material_id": ids[0],
        "texture_id": ids[1],
        "uv": tuple(float(c) for c in uv[None].to_numpy()),
    }


def _any_hit(origin, direction, t_max):
    from phongtrace.scene.intersection import T_MIN, intersect_scene_any, vec3

    result = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(
        ox: ti.f32, oy: ti.f32, oz: ti.f32,
        dx: ti.f32, dy: ti.f32, dz: ti.f32,
        tmax: ti.f32,
    ):
        result[None] = intersect_scene_any(vec3(ox, oy, oz), vec3(dx, dy, dz), T_MIN, tmax)

    test_kernel(*origin, *direction, t_max)
    return result[None]


def _shadowed(point, normal, light_position):
    from phongtrace.scene.intersection import is_shadowed, vec3

    result = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(
        px: ti.f32, py: ti.f32, pz: ti.f32,
        nx: ti.f32, ny: ti.f32, nz: ti.f32,
        lx: ti.f32, ly: ti.f32, lz: ti.f32,
    ):
        result[None] = is_shadowed(vec3(px, py, pz), vec3(nx, ny, nz), vec3(lx, ly, lz))

    test_kernel(*point, *normal, *light_position)
    return result[None]


class TestSceneStorage:
    """Tests for adding and clearing primitives."""

    def test_add_and_count(self):
        """Test primitives get sequential indices."""
        from phongtrace.scene.intersection import (
            add_quad,
            add_sphere,
            get_quad_count,
            get_sphere_count,
        )

        assert add_sphere((0.0, 0.0, -1.0), 0.5, 0) == 0
        assert add_sphere((1.0, 0.0, -1.0), 0.5, 1) == 1
        assert add_quad((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0), 2) == 0
        assert get_sphere_count() == 2
        assert get_quad_count() == 1

    def test_clear_scene(self):
        """Test clear_scene removes every primitive."""
        from phongtrace.scene.intersection import (
            add_quad,
            add_sphere,
            clear_scene,
            get_quad_count,
            get_sphere_count,
        )

        add_sphere((0.0, 0.0, -1.0), 0.5)
        add_quad((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0))
        clear_scene()
        assert get_sphere_count() == 0
        assert get_quad_count() == 0

    def test_invalid_radius(self):
        """Test non-positive radii are rejected."""
        from phongtrace.scene.intersection import add_sphere

        with pytest.raises(ValueError, match="radius"):
            add_sphere((0.0, 0.0, 0.0), 0.0)

    def test_sphere_capacity(self):
        """Test exceeding MAX_SPHERES raises RuntimeError."""
        from phongtrace.scene.intersection import MAX_SPHERES, add_sphere, num_spheres

        num_spheres[None] = MAX_SPHERES
        with pytest.raises(RuntimeError, match="Maximum number of spheres"):
            add_sphere((0.0, 0.0, 0.0), 1.0)

    def test_quad_capacity(self):
        """Test exceeding MAX_QUADS raises RuntimeError."""
        from phongtrace.scene.intersection import MAX_QUADS, add_quad, num_quads

        num_quads[None] = MAX_QUADS
        with pytest.raises(RuntimeError, match="Maximum number of quads"):
            add_quad((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0))


class TestClosestHit:
    """Tests for intersect_scene."""

    def test_empty_scene_is_miss(self):
        """Test a miss reports t = T_MAX, material -1 and no texture."""
        from phongtrace.scene.intersection import NO_TEXTURE, T_MAX

        rec = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert rec["hit"] == 0
        assert rec["t"] == pytest.approx(T_MAX, rel=1e-6)
        assert rec["material_id"] == -1
        assert rec["texture_id"] == NO_TEXTURE

    def test_single_sphere(self):
        """Test a sphere hit carries its material ID."""
        from phongtrace.scene.intersection import NO_TEXTURE, add_sphere

        add_sphere((0.0, 0.0, -5.0), 1.0, material_id=3)
        rec = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert rec["hit"] == 1
        assert rec["t"] == pytest.approx(4.0, abs=1e-5)
        assert rec["material_id"] == 3
        assert rec["texture_id"] == NO_TEXTURE
        assert rec["normal"] == pytest.approx((0.0, 0.0, 1.0), abs=1e-5)

    def test_closest_of_two_spheres(self):
        """Test the nearer sphere wins regardless of insertion order."""
        from phongtrace.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -10.0), 1.0, material_id=0)
        add_sphere((0.0, 0.0, -5.0), 1.0, material_id=1)
        rec = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert rec["material_id"] == 1
        assert rec["t"] == pytest.approx(4.0, abs=1e-5)

    def test_quad_closer_than_sphere(self):
        """Test a quad in front of a sphere is reported."""
        from phongtrace.scene.intersection import add_quad, add_sphere

        add_sphere((0.0, 0.0, -5.0), 1.0, material_id=0)
        add_quad((-1.0, -1.0, -2.0), (2.0, 0.0, 0.0), (0.0, 2.0, 0.0), material_id=1)
        rec = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert rec["material_id"] == 1
        assert rec["t"] == pytest.approx(2.0, abs=1e-5)

    def test_sphere_closer_than_quad(self):
        """Test a sphere in front of a quad is reported."""
        from phongtrace.scene.intersection import add_quad, add_sphere

        add_quad((-1.0, -1.0, -8.0), (2.0, 0.0, 0.0), (0.0, 2.0, 0.0), material_id=1)
        add_sphere((0.0, 0.0, -5.0), 1.0, material_id=0)
        rec = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert rec["material_id"] == 0

    def test_texture_and_uv_propagated(self):
        """Test texture ID and (u, v) of a textured quad reach the record."""
        from phongtrace.scene.intersection import add_quad

        add_quad((-1.0, -1.0, -2.0), (2.0, 0.0, 0.0), (0.0, 2.0, 0.0), 0, texture_id=4)
        rec = _intersect((0.5, -0.5, 0.0), (0.0, 0.0, -1.0))
        assert rec["texture_id"] == 4
        assert rec["uv"] == pytest.approx((0.75, 0.25), abs=1e-5)

    def test_t_bounds(self):
        """Test hits outside (t_min, t_max) are ignored."""
        from phongtrace.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -5.0), 1.0)
        assert _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), t_max=3.0)["hit"] == 0


class TestShadowQueries:
    """Tests for intersect_scene_any and is_shadowed."""

    def test_any_hit_with_occluder(self):
        """Test an occluder within range is detected."""
        from phongtrace.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -5.0), 1.0)
        assert _any_hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 10.0) == 1

    def test_any_hit_out_of_range(self):
        """Test an occluder beyond t_max is ignored."""
        from phongtrace.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -5.0), 1.0)
        assert _any_hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 3.0) == 0

    def test_any_hit_quad(self):
        """Test quads occlude too."""
        from phongtrace.scene.intersection import add_quad

        add_quad((-1.0, -1.0, -2.0), (2.0, 0.0, 0.0), (0.0, 2.0, 0.0))
        assert _any_hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 10.0) == 1

    def test_any_hit_empty_scene(self):
        """Test nothing blocks in an empty scene."""
        assert _any_hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 10.0) == 0

    def test_shadowed_by_sphere(self):
        """Test a sphere between the floor point and the light casts a shadow."""
        from phongtrace.scene.intersection import add_sphere

        add_sphere((0.0, 2.0, 0.0), 0.5)
        assert _shadowed((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 5.0, 0.0)) == 1

    def test_not_shadowed_by_geometry_beyond_light(self):
        """Test geometry behind the light does not cast a shadow."""
        from phongtrace.scene.intersection import add_sphere

        add_sphere((0.0, 8.0, 0.0), 0.5)
        assert _shadowed((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 5.0, 0.0)) == 0

    def test_surface_does_not_shadow_itself(self):
        """Test the lit surface itself is not an occluder."""
        from phongtrace.scene.intersection import add_quad

        add_quad((-1.0, 0.0, 1.0), (2.0, 0.0, 0.0), (0.0, 0.0, -2.0))
        assert _shadowed((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 5.0, 0.0)) == 0
