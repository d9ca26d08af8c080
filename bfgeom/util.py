"""Small numeric, raster and screen-space helpers shared by the modeller."""

from __future__ import annotations

import math
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, MutableSequence, Optional, Sequence

import numpy as np


@dataclass(frozen=True)
class SegmentIntersectionResult:
    """Parameters of the closest points on two segments and their squared distance."""

    u: float
    v: float
    error: float


class DeltaTimer:
    """Measures the time that passed between consecutive ticks."""

    def __init__(self, clock: Callable[[], float] = time.perf_counter) -> None:
        self._clock = clock
        self._start = clock()

    def tick(self) -> float:
        """Return seconds since the previous tick (or construction) and restart."""
        now = self._clock()
        elapsed = now - self._start
        self._start = now
        return elapsed


def _vec(v) -> np.ndarray:
    return np.asarray(v, dtype=float)


def read_whole_file(path) -> str:
    """Return the whole content of a text file."""
    with open(path, encoding="utf-8") as handle:
        return handle.read()


def vec_to_string(v) -> str:
    """Format a 3- or 4-component vector as ``(x,y, z)`` or ``(x,y, z,w)``."""
    parts = [f"{float(x):f}" for x in v]
    if len(parts) == 3:
        return f"({parts[0]},{parts[1]}, {parts[2]})"
    if len(parts) == 4:
        return f"({parts[0]},{parts[1]}, {parts[2]},{parts[3]})"
    raise ValueError(f"expected a vector of 3 or 4 components, got {len(parts)}")


def has_nan(v) -> bool:
    """Tell whether any component of the vector is NaN."""
    return any(math.isnan(float(x)) for x in v)


def fast_pow(base, power: int):
    """Raise ``base`` to an integer power by repeated squaring."""
    if isinstance(power, bool) or not isinstance(power, (int, np.integer)):
        raise TypeError("power must be an integer")
    power = int(power)
    if power == 0:
        return type(base)(1)
    if power < 0:
        power = -power
        base = 1 / base
    result = type(base)(1)
    while power > 1:
        if power & 1:
            result *= base
        base *= base
        power >>= 1
    return base * result


def lerp(p1, p2, t):
    """Linear interpolation between numbers or numpy vectors."""
    return p1 * (1 - t) + p2 * t


def tridiagonal_matrix_algorithm(a, b, c, d) -> list:
    """Solve a tridiagonal system with the Thomas algorithm.

    ``a`` is the lower diagonal (n-1), ``b`` the main diagonal (n), ``c`` the
    upper diagonal (n-1) and ``d`` the right-hand side (n); the entries of
    ``d`` may be numbers or numpy vectors.
    """
    n = len(d)
    if n == 0 or len(a) != n - 1 or len(b) != n or len(c) != n - 1:
        raise ValueError("diagonal sizes do not match the right-hand side")
    if n == 1:
        return [d[0] * (1 / b[0])]
    ck = [c[0] / b[0]]
    dk = [d[0] * (1 / b[0])]
    for i in range(1, n):
        denom = b[i] - a[i - 1] * ck[i - 1]
        if i < n - 1:
            ck.append(c[i] / denom)
        dk.append((d[i] - a[i - 1] * dk[i - 1]) * (1 / denom))
    x = [dk[-1]]
    for ck_i, dk_i in zip(reversed(ck), reversed(dk[:-1])):
        x.append(dk_i - ck_i * x[-1])
    return x[::-1]


def segment_intersection(p1, p2, q1, q2) -> Optional[SegmentIntersectionResult]:
    """Intersect segments p1-p2 and q1-q2 in the XY plane.

    Returns ``None`` for (nearly) parallel segments or when the closest points
    are too far apart.
    """
    p1, p2, q1, q2 = (_vec(p) for p in (p1, p2, q1, q2))
    a = p2 - p1
    b = q1 - q2
    c = q1 - p1
    n = a[0] * b[1] - a[1] * b[0]
    if abs(n) < 1e-5:
        return None
    u = (c[0] * b[1] - c[1] * b[0]) / n
    v = (a[0] * c[1] - a[1] * c[0]) / n
    u = min(max(u, 0.0), 1.0)
    v = min(max(v, 0.0), 1.0)
    diff = lerp(p1, p2, u) - lerp(q1, q2, v)
    error = float(np.dot(diff, diff))
    if error < 0.0016:
        return SegmentIntersectionResult(float(u), float(v), error)
    return None


def sign(a):
    """Return -1, 0 or 1 in the type of ``a``."""
    if a == 0:
        return type(a)(0)
    return type(a)(1) if a >= 0 else type(a)(-1)


def flood_fill(
    array: MutableSequence[int],
    tn: int,
    i: int,
    j: int,
    wrap_x: bool,
    wrap_y: bool,
    color1: int,
    color2: int = 63,
) -> None:
    """Fill a square ``tn`` x ``tn`` pixel buffer in place from pixel (i, j).

    Pixels below ``color2`` and different from ``color1`` get ``color1``;
    edges wrap around when requested.
    """
    if not (0 <= i < tn and 0 <= j < tn) or array[i + tn * j] > color2:
        return
    queue = deque([(i, j)])
    while queue:
        pi, pj = queue.popleft()
        value = array[pi + tn * pj]
        if value < color2 and value != color1:
            array[pi + tn * pj] = color1
            if pi > 0 or wrap_x:
                queue.append(((tn + pi - 1) % tn, pj))
            if pi < tn - 1 or wrap_x:
                queue.append(((pi + 1) % tn, pj))
            if pj > 0 or wrap_y:
                queue.append((pi, (tn + pj - 1) % tn))
            if pj < tn - 1 or wrap_y:
                queue.append((pi, (pj + 1) % tn))


def set_pixel(array: MutableSequence[int], width: int, i: int, j: int, color: int) -> None:
    """Set a pixel of a square buffer, wrapping coordinates around."""
    array[(i % width) + width * (j % width)] = color


def get_pixel(array: Sequence[int], width: int, i: int, j: int) -> int:
    """Read a pixel of a square buffer, wrapping coordinates around."""
    return array[(i % width) + width * (j % width)]


def bresenham_line(
    array: MutableSequence[int], width: int, x1: int, y1: int, x2: int, y2: int, color: int
) -> None:
    """Draw a line on a square wrapping buffer.

    Lines spanning most of the buffer are drawn the short way across the seam.
    """
    big = int(width * 0.8)
    if x2 - x1 >= big:
        x1 += width
    if x2 - x1 <= -big:
        x2 += width
    if y2 - y1 >= big:
        y1 += width
    if y2 - y1 <= -big:
        y2 += width
    x, y = x1, y1
    xi, dx = (1, x2 - x1) if x1 < x2 else (-1, x1 - x2)
    yi, dy = (1, y2 - y1) if y1 < y2 else (-1, y1 - y2)
    set_pixel(array, width, x, y, color)
    if dx > dy:
        ai = (dy - dx) * 2
        bi = dy * 2
        d = bi - dx
        while x != x2:
            if d >= 0:
                x += xi
                y += yi
                d += ai
            else:
                d += bi
                x += xi
            set_pixel(array, width, x, y, color)
    else:
        ai = (dx - dy) * 2
        bi = dx * 2
        d = bi - dy
        while y != y2:
            if d >= 0:
                x += xi
                y += yi
                d += ai
            else:
                d += bi
                y += yi
            set_pixel(array, width, x, y, color)


def almost_equal(a1: float, a2: float, eps: float = 1e-7) -> bool:
    """Relative comparison of two numbers."""
    return abs(a1 - a2) <= eps * max(abs(a1), abs(a2), 1e-5)


def almost_equal_vec(v1, v2, eps: float = 1e-5) -> bool:
    """Tell whether the squared distance of two vectors is at most ``eps``."""
    return sqr_distance(v1, v2) <= eps


def to_screen_pos(screen_width, screen_height, world_pos, view, projection) -> np.ndarray:
    """Project a world position to window pixels; depth stays in NDC.

    Matrices are 4x4 arrays indexed ``[row, column]``.
    """
    v = _vec(projection) @ _vec(view) @ np.append(_vec(world_pos), 1.0)
    v = v / v[3]
    x = (v[0] + 1.0) * screen_width * 0.5
    y = (1.0 - v[1]) * screen_height * 0.5
    return np.array([x, y, v[2]])


def to_global_pos(screen_width, screen_height, mouse_pos, inverse_view, inverse_projection) -> np.ndarray:
    """Unproject a window position with NDC depth back to world space."""
    mp = _vec(mouse_pos).copy()
    mp[0] = 2.0 * mp[0] / screen_width - 1.0
    mp[1] = 1.0 - 2.0 * mp[1] / screen_height
    v = _vec(inverse_view) @ _vec(inverse_projection) @ np.append(mp, 1.0)
    v = v / v[3]
    return v[:3].copy()


def is_in_bounds(screen_width, screen_height, pos) -> bool:
    """Tell whether a 2D screen position or 3D position with NDC depth is visible."""
    x, y = float(pos[0]), float(pos[1])
    z = float(pos[2]) if len(pos) > 2 else 0.0
    if abs(z) > 1.0:
        return False
    if x < 0 or x > screen_width:
        return False
    if y < 0 or y > screen_height:
        return False
    return True


def sqr_length(a) -> float:
    a = _vec(a)
    return float(np.dot(a, a))


def length(a) -> float:
    return math.sqrt(sqr_length(a))


def distance(a, b) -> float:
    return length(_vec(a) - _vec(b))


def sqr_distance(a, b) -> float:
    return sqr_length(_vec(a) - _vec(b))


def degrees(a):
    """Convert radians to degrees; works on numbers and vectors."""
    if np.ndim(a):
        return _vec(a) * (180.0 / math.pi)
    return 180.0 / math.pi * a


def radians(a):
    """Convert degrees to radians; works on numbers and vectors."""
    if np.ndim(a):
        return _vec(a) * (math.pi / 180.0)
    return a * math.pi / 180.0


def matrix_to_euler_xyz(m) -> np.ndarray:
    """Extract XYZ Euler angles (radians) from a rotation matrix indexed ``[row, column]``."""
    m = _vec(m)
    x = math.atan2(m[1, 2], m[2, 2])
    cy = math.sqrt(m[0, 0] ** 2 + m[0, 1] ** 2)
    y = math.atan2(-m[0, 2], cy)
    sx, cx = math.sin(x), math.cos(x)
    z = math.atan2(sx * m[2, 0] - cx * m[1, 0], cx * m[1, 1] - sx * m[2, 1])
    return np.array([-x, -y, -z])


def matrix_to_euler_yxz(m) -> np.ndarray:
    """Extract YXZ Euler angles (radians) from a rotation matrix indexed ``[row, column]``."""
    m = _vec(m)
    x = math.atan2(m[0, 2], m[2, 2])
    cy = math.sqrt(m[1, 0] ** 2 + m[1, 1] ** 2)
    y = math.atan2(-m[1, 2], cy)
    sx, cx = math.sin(x), math.cos(x)
    z = math.atan2(sx * m[2, 1] - cx * m[0, 1], cx * m[0, 0] - sx * m[2, 0])
    return np.array([-x, -y, -z])