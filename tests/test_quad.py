"""Unit tests for quad intersection.

Tests cover:
- Quad normal
- Hits at the center, edges and corners; front and back faces
- Misses outside the parallelogram, parallel rays and quads behind the ray
- (u, v) texture coordinates from the local quad frame
"""

import pytest
import taichi as ti


def _vec(v):
    return tuple(float(c) for c in v.to_numpy())


def _hit(origin, direction, q, u, v, t_min=0.001, t_max=1000.0):
    """Run hit_quad in a kernel and return the record as a dict."""
    from phongtrace.geometry.quad import Quad, hit_quad, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    point = ti.field(dtype=ti.math.vec3, shape=())
    normal = ti.field(dtype=ti.math.vec3, shape=())
    front_face = ti.field(dtype=ti.i32, shape=())
    uv = ti.field(dtype=ti.math.vec2, shape=())

    @ti.kernel
    def test_kernel(
        ox: ti.f32, oy: ti.f32, oz: ti.f32,
        dx: ti.f32, dy: ti.f32, dz: ti.f32,
        qx: ti.f32, qy: ti.f32, qz: ti.f32,
        ux: ti.f32, uy: ti.f32, uz: ti.f32,
        vx: ti.f32, vy: ti.f32, vz: ti.f32,
        tmin: ti.f32, tmax: ti.f32,
    ):
        quad = Quad(Q=vec3(qx, qy, qz), u=vec3(ux, uy, uz), v=vec3(vx, vy, vz))
        record = hit_quad(vec3(ox, oy, oz), vec3(dx, dy, dz), quad, tmin, tmax)
        hit[None] = record.hit
        t_val[None] = record.t
        point[None] = record.point
        normal[None] = record.normal
        front_face[None] = record.front_face
        uv[None] = ti.math.vec2(record.u, record.v)

    test_kernel(*origin, *direction, *q, *u, *v, t_min, t_max)
    return {
        "hit": hit[None],
        "t": t_val[None],
        "point": _vec(point[None]),
        "normal": _vec(normal[None]),
        "front_face": front_face[None],
        "uv": _vec(uv[None]),
    }


# Unit square in the z=0 plane facing +z
Q = (0.0, 0.0, 0.0)
U = (1.0, 0.0, 0.0)
V = (0.0, 1.0, 0.0)


class TestQuadBasics:
    """Tests for quad_normal."""

    def test_quad_normal(self):
        """Test the normal is normalize(cross(u, v))."""
        from phongtrace.geometry.quad import Quad, quad_normal, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            quad = Quad(Q=vec3(0.0, 0.0, 0.0), u=vec3(2.0, 0.0, 0.0), v=vec3(0.0, 0.0, 3.0))
            result[None] = quad_normal(quad)

        test_kernel()
        assert _vec(result[None]) == pytest.approx((0.0, -1.0, 0.0), abs=1e-6)


class TestQuadIntersection:
    """Tests for ray-quad intersection."""

    def test_hit_center(self):
        """Test a ray through the center of the quad."""
        rec = _hit((0.5, 0.5, 5.0), (0.0, 0.0, -1.0), Q, U, V)
        assert rec["hit"] == 1
        assert rec["t"] == pytest.approx(5.0, abs=1e-5)
        assert rec["point"] == pytest.approx((0.5, 0.5, 0.0), abs=1e-5)
        assert rec["normal"] == pytest.approx((0.0, 0.0, 1.0), abs=1e-5)
        assert rec["front_face"] == 1

    def test_hit_back_face(self):
        """Test hitting from behind flips the normal toward the ray."""
        rec = _hit((0.5, 0.5, -5.0), (0.0, 0.0, 1.0), Q, U, V)
        assert rec["hit"] == 1
        assert rec["normal"] == pytest.approx((0.0, 0.0, -1.0), abs=1e-5)
        assert rec["front_face"] == 0

    def test_hit_edge_and_corner(self):
        """Test edges and corners are inclusive."""
        assert _hit((0.5, 0.0, 5.0), (0.0, 0.0, -1.0), Q, U, V)["hit"] == 1
        assert _hit((1.0, 1.0, 5.0), (0.0, 0.0, -1.0), Q, U, V)["hit"] == 1

    def test_miss_outside(self):
        """Test rays hitting the plane outside the parallelogram miss."""
        assert _hit((1.5, 0.5, 5.0), (0.0, 0.0, -1.0), Q, U, V)["hit"] == 0
        assert _hit((0.5, -0.1, 5.0), (0.0, 0.0, -1.0), Q, U, V)["hit"] == 0

    def test_miss_parallel(self):
        """Test a ray parallel to the plane misses."""
        assert _hit((0.5, 0.5, 1.0), (1.0, 0.0, 0.0), Q, U, V)["hit"] == 0

    def test_miss_behind(self):
        """Test a quad behind the ray origin is missed."""
        assert _hit((0.5, 0.5, 5.0), (0.0, 0.0, 1.0), Q, U, V)["hit"] == 0

    def test_t_bounds(self):
        """Test hits outside (t_min, t_max) are rejected."""
        assert _hit((0.5, 0.5, 5.0), (0.0, 0.0, -1.0), Q, U, V, t_max=4.0)["hit"] == 0
        assert _hit((0.5, 0.5, 5.0), (0.0, 0.0, -1.0), Q, U, V, t_min=6.0)["hit"] == 0

    def test_degenerate_quad_misses(self):
        """Test a quad with parallel edges can never be hit."""
        rec = _hit((0.5, 0.0, 5.0), (0.0, 0.0, -1.0), Q, U, (2.0, 0.0, 0.0))
        assert rec["hit"] == 0


class TestQuadUV:
    """Tests for quad texture coordinates."""

    def test_uv_is_local_frame(self):
        """Test (u, v) equals the (alpha, beta) coordinates of the hit."""
        rec = _hit((0.25, 0.75, 5.0), (0.0, 0.0, -1.0), Q, U, V)
        assert rec["uv"] == pytest.approx((0.25, 0.75), abs=1e-5)

    def test_uv_scaled_quad(self):
        """Test coordinates are normalized by the edge lengths."""
        rec = _hit(
            (-1.0, 3.0, -2.0), (0.0, -1.0, 0.0), (-4.0, 0.0, -7.0), (0.0, 0.0, 8.0), (8.0, 0.0, 0.0)
        )
        assert rec["hit"] == 1
        # alpha along +z from -7: (-2 + 7) / 8, beta along +x from -4: (-1 + 4) / 8
        assert rec["uv"] == pytest.approx((5.0 / 8.0, 3.0 / 8.0), abs=1e-5)
        assert rec["normal"] == pytest.approx((0.0, 1.0, 0.0), abs=1e-5)
