"""Bicubic Bézier (C0) and uniform B-spline (C2) surfaces over a shared point list."""

from __future__ import annotations

import math
from typing import Callable, Optional, Sequence

import numpy as np

from bfgeom.patches import POINTS_PER_SEGMENT, BezierSurfaceBase
from bfgeom.util import lerp

# Half-width of the band around a segment border in which neighbouring
# segments are blended, so that evaluation is continuous across the seam.
BLEND_EPS = 0.0001

# Columns of the cubic uniform B-spline basis matrix, stored as rows.
_M6 = np.array(
    [
        [1.0, -3.0, 3.0, -1.0],
        [4.0, 0.0, -6.0, 3.0],
        [1.0, 3.0, 3.0, -3.0],
        [0.0, 0.0, 0.0, 1.0],
    ]
)

Basis = Callable[[float], np.ndarray]


def bernstein(t: float) -> np.ndarray:
    """Cubic Bernstein polynomials at ``t``."""
    t1 = 1.0 - t
    return np.array([t1 * t1 * t1, 3.0 * t1 * t1 * t, 3.0 * t1 * t * t, t * t * t])


def bernstein_d(t: float) -> np.ndarray:
    """First derivatives of the cubic Bernstein polynomials at ``t``."""
    t1 = 1.0 - t
    return np.array(
        [
            -3.0 * t1 * t1,
            3.0 * (t - 1.0) * (3.0 * t - 1.0),
            3.0 * t * (2.0 - 3.0 * t),
            3.0 * t * t,
        ]
    )


def bernstein_dd(t: float) -> np.ndarray:
    """Second derivatives of the cubic Bernstein polynomials at ``t``."""
    return np.array([6.0 * (1.0 - t), 18.0 * t - 12.0, 6.0 - 18.0 * t, 6.0 * t])


def _rotation_matrix(rotation) -> np.ndarray:
    if rotation is None:
        return np.identity(3)
    m = np.asarray(rotation, dtype=float)
    if m.shape != (3, 3):
        raise ValueError(f"rotation must be a 3x3 matrix, got {m.shape}")
    return m.copy()


class _GeneratedSurface(BezierSurfaceBase):
    """Common construction of a surface whose control points it creates itself."""

    def __init__(
        self,
        points: Optional[list] = None,
        segs: tuple[int, int] = (3, 3),
        samples: tuple[int, int] = (4, 4),
        wrapped_x: bool = False,
        wrapped_y: bool = False,
        name: Optional[str] = None,
        rotation=None,
        *,
        is_c2: bool,
    ) -> None:
        super().__init__(
            points=points,
            segs=segs,
            samples=samples,
            wrapped_x=wrapped_x,
            wrapped_y=wrapped_y,
            is_c2=is_c2,
            name=name,
        )
        self.rotation = _rotation_matrix(rotation)

    def _add_point(self, origin: np.ndarray, offset) -> None:
        self.points.append(origin + self.rotation @ np.asarray(offset, dtype=float))

    def _finish(self, point_indices: list[list[list[int]]]) -> list[list[list[int]]]:
        self.init_segments(point_indices)
        self.mark_empty_edges()
        return point_indices

    def _check_empty(self) -> None:
        if self.segments:
            raise ValueError("surface already has segments")

    def _control_net(self, iu: int, iv: int) -> np.ndarray:
        """Control points of segment (iu, iv) as a [row][column] 4x4 grid of 3D points."""
        seg = self.segments[iv][iu]
        ctrl = np.array([np.asarray(self.points[i], dtype=float) for i in seg.point_indices])
        return ctrl.reshape(4, 4, -1)


class BezierSurfaceC0(_GeneratedSurface):
    """Surface made of bicubic Bézier patches sharing their border control points."""

    def __init__(
        self,
        points: Optional[list] = None,
        segs: tuple[int, int] = (3, 3),
        samples: tuple[int, int] = (4, 4),
        wrapped_x: bool = False,
        wrapped_y: bool = False,
        name: Optional[str] = None,
        rotation=None,
    ) -> None:
        super().__init__(
            points, segs, samples, wrapped_x, wrapped_y, name, rotation, is_c2=False
        )

    def generate_points(self, total_size, origin=(0.0, 0.0, 0.0)) -> list[list[list[int]]]:
        """Create control points and segments; return the 16-index groups by row.

        A flat surface spans ``total_size`` in the local XY plane; a wrapped
        one is a unit-radius cylinder of height ``total_size[1]``.
        """
        self._check_empty()
        origin = np.asarray(origin, dtype=float)
        sx, sy = self.segs
        first = len(self.points)
        dy = float(total_size[1]) / sy / 3.0
        if not self.wrapped_x:
            dx = float(total_size[0]) / sx / 3.0
            for i in range(3 * sy + 1):
                for j in range(3 * sx + 1):
                    self._add_point(origin, (dx * j, dy * i, 0.0))
            stride = 3 * sx + 1

            def index(j: int, k: int, l: int) -> int:
                return 3 * j + l
        else:
            dt = 2.0 * math.pi / (3.0 * sx)
            for i in range(3 * sy + 1):
                for j in range(3 * sx):
                    self._add_point(origin, (math.cos(dt * j), dy * i, math.sin(dt * j)))
            stride = 3 * sx

            def index(j: int, k: int, l: int) -> int:
                return (3 * j + l) % stride

        point_indices = [
            [
                [
                    first + index(j, k, l) + stride * (3 * i + k)
                    for k in range(4)
                    for l in range(4)
                ]
                for j in range(sx)
            ]
            for i in range(sy)
        ]
        return self._finish(point_indices)

    def _evaluate(self, u: float, v: float, iu: int, iv: int, bu_func: Basis, bv_func: Basis) -> np.ndarray:
        mx, my = int(self.parameter_max()[0]), int(self.parameter_max()[1])
        iu %= mx
        iv %= my
        ctrl = self._control_net(iu, iv)
        return np.einsum("i,j,jik->k", bu_func(u), bv_func(v), ctrl)

    def _blended(self, ud: float, vd: float, bu_func: Basis, bv_func: Basis) -> np.ndarray:
        iu, iv, u, v = self.split_parameters(ud, vd)

        def f(a: float, b: float, i: int, j: int) -> np.ndarray:
            return self._evaluate(a, b, i, j, bu_func, bv_func)

        p = f(u, v, iu, iv)
        cols = len(self.segments[0])
        rows = len(self.segments)
        wrap_u = self.wrapping_u()
        wrap_v = self.wrapping_v()
        if u < BLEND_EPS and (iu > 0 or wrap_u):
            return lerp(f(u + 1.0, v, iu - 1, iv), p, 0.5 + u / (2.0 * BLEND_EPS))
        if u > 1.0 - BLEND_EPS and (iu < cols - 1 or wrap_u):
            return lerp(f(u - 1.0, v, iu + 1, iv), p, 0.5 + (1.0 - u) / (2.0 * BLEND_EPS))
        if v < BLEND_EPS and (iv > 0 or wrap_v):
            return lerp(f(u, v + 1.0, iu, iv - 1), p, 0.5 + v / (2.0 * BLEND_EPS))
        if v > 1.0 - BLEND_EPS and (iv < rows - 1 or wrap_v):
            return lerp(f(u, v - 1.0, iu, iv + 1), p, 0.5 + (1.0 - v) / (2.0 * BLEND_EPS))
        return p

    def point(self, u: float, v: float) -> np.ndarray:
        return self._blended(u, v, bernstein, bernstein)

    def gradient_u(self, u: float, v: float) -> np.ndarray:
        return self._blended(u, v, bernstein_d, bernstein)

    def gradient_v(self, u: float, v: float) -> np.ndarray:
        return self._blended(u, v, bernstein, bernstein_d)

    def hesse_uu(self, u: float, v: float) -> np.ndarray:
        return self._blended(u, v, bernstein_dd, bernstein)

    def hesse_uv(self, u: float, v: float) -> np.ndarray:
        return self._blended(u, v, bernstein_d, bernstein_d)

    def hesse_vv(self, u: float, v: float) -> np.ndarray:
        return self._blended(u, v, bernstein, bernstein_dd)


def _bspline_weights(powers: Sequence[float]) -> np.ndarray:
    return _M6 @ np.asarray(powers, dtype=float) / 6.0


def _powers(t: float) -> list[float]:
    return [1.0, t, t * t, t * t * t]


def _powers_d(t: float) -> list[float]:
    return [0.0, 1.0, 2.0 * t, 3.0 * t * t]


def _powers_dd(t: float) -> list[float]:
    return [0.0, 0.0, 2.0, 6.0 * t]


class BezierSurfaceC2(_GeneratedSurface):
    """Surface made of uniform bicubic B-spline patches (C2 continuous)."""

    def __init__(
        self,
        points: Optional[list] = None,
        segs: tuple[int, int] = (3, 3),
        samples: tuple[int, int] = (4, 4),
        wrapped_x: bool = False,
        wrapped_y: bool = False,
        name: Optional[str] = None,
        rotation=None,
    ) -> None:
        super().__init__(
            points, segs, samples, wrapped_x, wrapped_y, name, rotation, is_c2=True
        )

    def generate_points(self, total_size, origin=(0.0, 0.0, 0.0)) -> list[list[list[int]]]:
        """Create de Boor points and segments; return the 16-index groups by row.

        A flat surface spans ``total_size`` in the local XY plane; a wrapped
        one is a unit-radius cylinder of height ``total_size[1]``.
        """
        self._check_empty()
        origin = np.asarray(origin, dtype=float)
        sx, sy = self.segs
        first = len(self.points)
        dy = float(total_size[1]) / (sy + 3.0)
        if not self.wrapped_x:
            dx = float(total_size[0]) / (sx + 3.0)
            for i in range(sy + 3):
                for j in range(sx + 3):
                    self._add_point(origin, (dx * j, dy * i, 0.0))
            stride = sx + 3

            def index(j: int, l: int) -> int:
                return j + l
        else:
            dt = 2.0 * math.pi / sx
            for i in range(sy + 4):
                for j in range(sx):
                    self._add_point(origin, (math.cos(dt * j), dy * i, math.sin(dt * j)))
            stride = sx

            def index(j: int, l: int) -> int:
                return (j + l) % stride

        point_indices = [
            [
                [first + index(j, l) + stride * (i + k) for k in range(4) for l in range(4)]
                for j in range(sx)
            ]
            for i in range(sy)
        ]
        return self._finish(point_indices)

    def _evaluate(self, ud: float, vd: float, u_powers, v_powers) -> np.ndarray:
        iu, iv, u, v = self.split_parameters(ud, vd)
        left = _bspline_weights(u_powers(u))
        right = _bspline_weights(v_powers(v))
        ctrl = self._control_net(iu, iv)
        return np.einsum("i,j,jik->k", left, right, ctrl)

    def point(self, u: float, v: float) -> np.ndarray:
        return self._evaluate(u, v, _powers, _powers)

    def gradient_u(self, u: float, v: float) -> np.ndarray:
        return self._evaluate(u, v, _powers_d, _powers)

    def gradient_v(self, u: float, v: float) -> np.ndarray:
        return self._evaluate(u, v, _powers, _powers_d)

    def hesse_uu(self, u: float, v: float) -> np.ndarray:
        return self._evaluate(u, v, _powers_dd, _powers)

    def hesse_uv(self, u: float, v: float) -> np.ndarray:
        return self._evaluate(u, v, _powers_d, _powers_d)

    def hesse_vv(self, u: float, v: float) -> np.ndarray:
        return self._evaluate(u, v, _powers, _powers_dd)


__all__ = [
    "BLEND_EPS",
    "POINTS_PER_SEGMENT",
    "BezierSurfaceC0",
    "BezierSurfaceC2",
    "bernstein",
    "bernstein_d",
    "bernstein_dd",
]