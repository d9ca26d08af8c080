import math

import numpy as np
import pytest

from bfgeom.bezier import (
    BezierSurfaceC0,
    BezierSurfaceC2,
    bernstein,
    bernstein_d,
    bernstein_dd,
)

H = 1e-5


def _bumpy(surface):
    for k, idx in enumerate(range(len(surface.points))):
        surface.points[idx] = surface.points[idx] + np.array([0.0, 0.0, 0.1 * math.sin(1.7 * k)])
    return surface


def _flat_c0(size=(3.0, 3.0), segs=(3, 3), origin=(0.0, 0.0, 0.0)):
    s = BezierSurfaceC0(segs=segs)
    s.generate_points(size, origin)
    return s


def _flat_c2(size=(6.0, 6.0), segs=(3, 3), origin=(0.0, 0.0, 0.0)):
    s = BezierSurfaceC2(segs=segs)
    s.generate_points(size, origin)
    return s


@pytest.mark.parametrize("t", [0.0, 0.2, 0.5, 0.77, 1.0])
def test_bernstein_partition_of_unity(t):
    assert sum(bernstein(t)) == pytest.approx(1.0)
    assert sum(bernstein_d(t)) == pytest.approx(0.0, abs=1e-12)
    assert sum(bernstein_dd(t)) == pytest.approx(0.0, abs=1e-12)


def test_bernstein_endpoints():
    assert list(bernstein(0.0)) == [1.0, 0.0, 0.0, 0.0]
    assert list(bernstein(1.0)) == [0.0, 0.0, 0.0, 1.0]


@pytest.mark.parametrize("t", [0.1, 0.4, 0.9])
def test_bernstein_derivatives_match_finite_differences(t):
    fd1 = (bernstein(t + H) - bernstein(t - H)) / (2 * H)
    fd2 = (bernstein_d(t + H) - bernstein_d(t - H)) / (2 * H)
    assert np.allclose(bernstein_d(t), fd1, atol=1e-6)
    assert np.allclose(bernstein_dd(t), fd2, atol=1e-5)


def test_c0_generated_layout():
    s = BezierSurfaceC0(segs=(3, 2))
    indices = s.generate_points((3.0, 2.0))
    assert len(s.points) == (3 * 2 + 1) * (3 * 3 + 1)
    assert len(indices) == 2 and all(len(row) == 3 for row in indices)
    assert indices[0][0][:4] == [0, 1, 2, 3]
    assert indices[0][0][4] == 10
    assert [seg.point_indices for seg in s.segments[1]] == indices[1]


def test_c0_empty_edges():
    s = _flat_c0()
    assert s.segments[0][0].is_left_empty() and s.segments[0][0].is_bottom_empty()
    assert s.segments[2][2].is_right_empty() and s.segments[2][2].is_top_empty()
    assert s.segments[1][1].is_internal()


def test_c0_flat_reproduces_linear_map():
    s = _flat_c0(origin=(1.0, 2.0, 3.0))
    for u, v in [(0.3, 0.6), (1.5, 0.5), (2.2, 2.9), (1.0, 1.0)]:
        assert np.allclose(s.point(u, v), [1.0 + u, 2.0 + v, 3.0], atol=1e-9)
        assert np.allclose(s.gradient_u(u, v), [1.0, 0.0, 0.0], atol=1e-9)
        assert np.allclose(s.gradient_v(u, v), [0.0, 1.0, 0.0], atol=1e-9)
        assert np.allclose(s.hesse_uv(u, v), 0.0, atol=1e-9)


def test_c0_corner_is_origin():
    s = _flat_c0(origin=(0.5, -1.0, 2.0))
    assert np.allclose(s.point(0.0, 0.0), [0.5, -1.0, 2.0])
    assert np.allclose(s.point(3.0, 3.0), [3.5, 2.0, 2.0])


def test_c0_rotation_applied():
    rot = np.array([[0.0, -1.0, 0.0], [1.0, 0.0, 0.0], [0.0, 0.0, 1.0]])
    s = BezierSurfaceC0(rotation=rot)
    s.generate_points((3.0, 3.0))
    assert np.allclose(s.point(2.0, 0.0), [0.0, 2.0, 0.0], atol=1e-9)


def test_c0_derivatives_match_finite_differences():
    s = _bumpy(_flat_c0())
    u, v = 1.4, 1.6
    fd_u = (s.point(u + H, v) - s.point(u - H, v)) / (2 * H)
    fd_v = (s.point(u, v + H) - s.point(u, v - H)) / (2 * H)
    fd_uu = (s.gradient_u(u + H, v) - s.gradient_u(u - H, v)) / (2 * H)
    fd_uv = (s.gradient_u(u, v + H) - s.gradient_u(u, v - H)) / (2 * H)
    fd_vv = (s.gradient_v(u, v + H) - s.gradient_v(u, v - H)) / (2 * H)
    assert np.allclose(s.gradient_u(u, v), fd_u, atol=1e-5)
    assert np.allclose(s.gradient_v(u, v), fd_v, atol=1e-5)
    assert np.allclose(s.hesse_uu(u, v), fd_uu, atol=1e-4)
    assert np.allclose(s.hesse_uv(u, v), fd_uv, atol=1e-4)
    assert np.allclose(s.hesse_vv(u, v), fd_vv, atol=1e-4)


def test_c0_continuous_across_segment_border():
    s = _bumpy(_flat_c0())
    left = s.point(1.0 - 2e-4, 1.5)
    right = s.point(1.0 + 2e-4, 1.5)
    assert np.linalg.norm(left - right) < 1e-3


def test_c0_wrapped_cylinder():
    s = BezierSurfaceC0(segs=(3, 2), wrapped_x=True)
    s.generate_points((1.0, 2.0))
    assert len(s.points) == (3 * 2 + 1) * (3 * 3)
    for p in s.points:
        assert p[0] ** 2 + p[2] ** 2 == pytest.approx(1.0)
    assert s.wrapping_u()
    seam_a = s.point(3.0 - 1e-6, 1.3)
    seam_b = s.point(1e-6, 1.3)
    assert np.linalg.norm(seam_a - seam_b) < 1e-3
    assert s.mark_empty_edges() is None and not s.segments[0][0].is_left_empty()


def test_generate_twice_raises():
    s = _flat_c0()
    with pytest.raises(ValueError):
        s.generate_points((3.0, 3.0))


def test_empty_surface_evaluation_raises():
    with pytest.raises(ValueError):
        BezierSurfaceC0().point(0.5, 0.5)
    with pytest.raises(ValueError):
        BezierSurfaceC2().point(0.5, 0.5)


def test_bad_rotation_rejected():
    with pytest.raises(ValueError):
        BezierSurfaceC2(rotation=np.identity(4))


def test_c2_generated_layout():
    s = BezierSurfaceC2(segs=(3, 2))
    indices = s.generate_points((6.0, 5.0))
    assert len(s.points) == (2 + 3) * (3 + 3)
    assert indices[0][1][:4] == [1, 2, 3, 4]
    assert indices[1][0][4] == 12
    assert s.is_c2 and all(seg.is_c2 for row in s.segments for seg in row)
    assert s.segments[0][0].is_internal()


def test_c2_flat_reproduces_linear_map():
    s = _flat_c2()
    for u, v in [(0.0, 0.0), (0.5, 1.5), (2.7, 0.3), (3.0, 3.0)]:
        assert np.allclose(s.point(u, v), [u + 1.0, v + 1.0, 0.0], atol=1e-9)
        assert np.allclose(s.gradient_u(u, v), [1.0, 0.0, 0.0], atol=1e-9)
        assert np.allclose(s.gradient_v(u, v), [0.0, 1.0, 0.0], atol=1e-9)
        assert np.allclose(s.hesse_uu(u, v), 0.0, atol=1e-9)
        assert np.allclose(s.hesse_vv(u, v), 0.0, atol=1e-9)


def test_c2_derivatives_match_finite_differences():
    s = _bumpy(_flat_c2())
    u, v = 1.3, 2.4
    fd_u = (s.point(u + H, v) - s.point(u - H, v)) / (2 * H)
    fd_uu = (s.gradient_u(u + H, v) - s.gradient_u(u - H, v)) / (2 * H)
    fd_uv = (s.gradient_u(u, v + H) - s.gradient_u(u, v - H)) / (2 * H)
    fd_vv = (s.gradient_v(u, v + H) - s.gradient_v(u, v - H)) / (2 * H)
    assert np.allclose(s.gradient_u(u, v), fd_u, atol=1e-5)
    assert np.allclose(s.hesse_uu(u, v), fd_uu, atol=1e-4)
    assert np.allclose(s.hesse_uv(u, v), fd_uv, atol=1e-4)
    assert np.allclose(s.hesse_vv(u, v), fd_vv, atol=1e-4)


def test_c2_second_derivative_continuous_across_border():
    s = _bumpy(_flat_c2())
    a = s.hesse_uu(1.0 - 1e-7, 1.5)
    b = s.hesse_uu(1.0 + 1e-7, 1.5)
    assert np.allclose(a, b, atol=1e-4)


def test_c2_wrapped_cylinder():
    s = BezierSurfaceC2(segs=(4, 2), wrapped_x=True)
    s.generate_points((1.0, 6.0))
    assert len(s.points) == (2 + 4) * 4
    for p in s.points:
        assert p[0] ** 2 + p[2] ** 2 == pytest.approx(1.0)
    seam_a = s.point(4.0 - 1e-7, 1.0)
    seam_b = s.point(1e-7, 1.0)
    assert np.allclose(seam_a, seam_b, atol=1e-5)