"""Gregory patches filling triangular holes between three C0 Bézier surfaces."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from bfgeom.patches import SurfaceSegment
from bfgeom.util import lerp

CORNER_INDICES = (0, 3, 12, 15)
PATCH_VERTEX_COUNT = 20
PATCH_INDEX_COUNT = 3 * PATCH_VERTEX_COUNT
VERTEX_COUNT = 49
MIN_SAMPLES = 1
MAX_SAMPLES = 100


def is_correct_index(segment: SurfaceSegment, index: int) -> bool:
    """Tell whether corner number ``index`` (0..3) of a segment lies on one of its free borders."""
    return (
        (segment.is_left_empty() and index % 2 == 0)
        or (segment.is_right_empty() and index % 2 == 1)
        or (segment.is_bottom_empty() and index <= 1)
        or (segment.is_top_empty() and index >= 2)
    )


def indices_ok(a: int, b: int) -> bool:
    """Tell whether two corner indices of a segment form one of its edges."""
    if a == b:
        return False
    lo, hi = min(a, b), max(a, b)
    return not ((lo == 0 and hi == 15) or (lo == 3 and hi == 12))


def find_triangle_orders(
    a: Optional[SurfaceSegment], b: Optional[SurfaceSegment], c: Optional[SurfaceSegment]
) -> list[tuple[int, int, int, int, int, int]]:
    """Corner orders by which three segments close a triangle of border edges.

    Each result ``(i1, i2, i3, i4, i5, i6)`` says that edge i1-i2 of ``a``
    ends where edge i3-i4 of ``b`` starts, that one ends where edge i5-i6 of
    ``c`` starts, and that one ends where the edge of ``a`` starts.
    """
    if a is None or b is None or c is None:
        return []
    pa, pb, pc = a.point_indices, b.point_indices, c.point_indices
    result = []
    for i1 in a.tmp_indices:
        for i2 in a.tmp_indices:
            if not indices_ok(i1, i2):
                continue
            for i3 in b.tmp_indices:
                for i4 in b.tmp_indices:
                    if not indices_ok(i3, i4):
                        continue
                    for i5 in c.tmp_indices:
                        for i6 in c.tmp_indices:
                            if not indices_ok(i5, i6):
                                continue
                            if pa[i2] == pb[i3] and pb[i4] == pc[i5] and pc[i6] == pa[i1]:
                                result.append((i1, i2, i3, i4, i5, i6))
    return result


@dataclass(eq=False)
class GregoryCandidate:
    """Three border segments (and their surfaces) that enclose a triangular hole."""

    surfaces: tuple
    segments: tuple
    order: tuple

    def __post_init__(self) -> None:
        self.surfaces = tuple(self.surfaces)
        self.segments = tuple(self.segments)
        self.order = tuple(int(i) for i in self.order)
        if len(self.surfaces) != 3 or len(self.segments) != 3 or len(self.order) != 6:
            raise ValueError("a candidate needs 3 surfaces, 3 segments and 6 corner indices")

    def __eq__(self, other) -> bool:
        """Equal when the same triangle is described, up to rotation and reversal."""
        if not isinstance(other, GregoryCandidate):
            return NotImplemented
        if self is other:
            return True
        for i in range(6):
            same = all(
                self.surfaces[j] is other.surfaces[(i + j) % 3 if i < 3 else (i + 6 - j) % 3]
                and self.segments[j] is other.segments[(i + j) % 3 if i < 3 else (i + 6 - j) % 3]
                for j in range(3)
            )
            if same and all(
                self.order[j] == other.order[(2 * i + j) % 6 if i < 3 else (7 + 2 * i - j) % 6]
                for j in range(6)
            ):
                return True
        return False

    __hash__ = None


def find_gregories(surfaces: Sequence) -> list[GregoryCandidate]:
    """Find every triangular hole bounded by non-internal segments of the surfaces.

    The surfaces must share one point list, since points are matched by index.
    """
    border = [
        (surface, segment)
        for surface in surfaces
        if surface is not None
        for row in surface.segments
        for segment in row
        if not segment.is_internal()
    ]
    found = []
    for i, (sf1, sg1) in enumerate(border):
        for j in range(i + 1, len(border)):
            sf2, sg2 = border[j]
            for k in range(j + 1, len(border)):
                sf3, sg3 = border[k]
                for order in find_triangle_orders(sg1, sg2, sg3):
                    found.append(GregoryCandidate((sf1, sf2, sf3), (sg1, sg2, sg3), order))
    return found


def bezier2(t: float, p0, p1, p2):
    """Quadratic Bézier curve through control points p0, p1, p2 at ``t``."""
    return p0 * (1 - t) * (1 - t) + 2.0 * p1 * t * (1 - t) + p2 * t * t


def _build_indices() -> list[int]:
    patch = [0] * PATCH_INDEX_COUNT
    for i in range(3):
        b = PATCH_VERTEX_COUNT * i
        patch[b] = 6 * i
        for j in (1, 2, 3):
            patch[b + j] = 6 * i + j
            patch[b + 12 - j] = (6 * i + 18 - j) % 18
        for j in (1, 2):
            patch[b + 11 + j] = 17 + 4 * i + j
            patch[b + 20 - j] = 20 + (22 - j + 4 * i) % 12
            patch[b + 3 + j] = 29 + 2 * i + j
            patch[b + 6 + j] = 30 + (6 + 2 * i - j) % 6
            patch[b + 13 + j] = 35 + 2 * i + j
            patch[b + 15 + j] = 42 + (6 + 2 * i - j) % 6
        patch[b + 6] = 48
    lines: list[int] = []
    antenna = 18
    for i in range(18):
        lines += [i, (i + 1) % 18]
        if i % 3:
            lines += [i, antenna]
            antenna += 1
        elif i % 6:
            lines += [i, 30 + 2 * (i // 6)]
    for i in range(6):
        lines += [30 + i, 36 + i, 30 + i, 42 + i]
    for i in range(3):
        lines += [31 + i, 30 + i, 31 + i, 48]
    return patch + lines


class GregoryPatch:
    """Three Gregory patches filling the hole described by a candidate."""

    def __init__(self, candidate: GregoryCandidate, samples: int = 4) -> None:
        samples = int(samples)
        if not MIN_SAMPLES <= samples <= MAX_SAMPLES:
            raise ValueError(f"samples must be in [{MIN_SAMPLES}, {MAX_SAMPLES}], got {samples}")
        order = candidate.order
        for a, b in zip(order[0::2], order[1::2]):
            if a not in CORNER_INDICES or b not in CORNER_INDICES or not indices_ok(a, b):
                raise ValueError(f"corner pair ({a}, {b}) is not an edge of a segment")
        self.surfaces = candidate.surfaces
        self.segments = candidate.segments
        self.order = order
        self.samples = samples
        self.is_debug = True
        self.vertices = np.zeros((0, 3))
        self.indices: list[int] = []

    @property
    def candidate(self) -> GregoryCandidate:
        return GregoryCandidate(self.surfaces, self.segments, self.order)

    @property
    def patch_indices(self) -> list[int]:
        """Indices of the three 20-point patches."""
        return self.indices[:PATCH_INDEX_COUNT]

    @property
    def debug_indices(self) -> list[int]:
        """Line pairs drawing the control net."""
        return self.indices[PATCH_INDEX_COUNT:]

    def depends_on(self, index: int) -> bool:
        """Tell whether point ``index`` is a control point of a bounding segment."""
        return any(index in s.point_indices for s in self.segments)

    def recalculate(self, points: Sequence) -> np.ndarray:
        """Rebuild the 49 control vertices and the index list from the shared points."""
        boundary = np.zeros((3, 6, 3))
        antennas = np.zeros((3, 4, 3))
        central = np.zeros((6, 3))
        for i in range(3):
            corner, other = self.order[2 * i], self.order[2 * i + 1]
            x_step = (other - corner) // 3
            y_step = abs(4 // x_step) * (-1 if max(corner, other) == 15 else 1)
            indices = self.segments[i].point_indices

            def at(x: int, y: int) -> np.ndarray:
                return np.asarray(points[indices[corner + y * y_step + x * x_step]], dtype=float)

            t = [lerp(at(j, 1), at(j + 1, 1), 0.5) for j in range(3)]
            s = [lerp(at(j, 0), at(j + 1, 0), 0.5) for j in range(3)]
            o = [lerp(t[j], t[j + 1], 0.5) for j in range(2)]
            centre = lerp(o[0], o[1], 0.5)
            p = boundary[i]
            p[0] = at(0, 0)
            p[1] = s[0]
            p[5] = s[2]
            p[2] = lerp(p[1], s[1], 0.5)
            p[4] = lerp(p[5], s[1], 0.5)
            p[3] = lerp(p[2], p[4], 0.5)
            antennas[i][0] = lerp(p[1], t[0], -1.0)
            antennas[i][1] = lerp(p[2], o[0], -1.0)
            antennas[i][2] = lerp(p[4], o[1], -1.0)
            antennas[i][3] = lerp(p[5], t[2], -1.0)
            central[2 * i] = lerp(p[3], centre, -1.0)

        cen = (central[0] + central[2] + central[4]) / 3.0
        for i in range(3):
            central[2 * i + 1] = lerp(central[2 * i], cen, 0.5)
        plus = np.zeros((6, 3))
        minus = np.zeros((6, 3))
        for i in range(3):
            g0 = boundary[i][2] - boundary[i][3]
            g2 = (cen - central[(2 * i + 3) % 6] + central[(2 * i + 5) % 6] - cen) * 0.5
            g1 = (g0 + g2) * 0.5
            gp1 = bezier2(1.0 / 3.0, g0, g1, g2)
            gp2 = bezier2(2.0 / 3.0, g0, g1, g2)
            plus[2 * i] = central[2 * i] + gp1
            plus[2 * i + 1] = central[2 * i + 1] + gp2
            minus[2 * i] = central[2 * i] - gp1
            minus[2 * i + 1] = central[2 * i + 1] - gp2

        vertices = np.zeros((VERTEX_COUNT, 3))
        vertices[0:18] = boundary.reshape(18, 3)
        vertices[18:30] = antennas.reshape(12, 3)
        vertices[30:36] = central
        vertices[36:42] = plus
        vertices[42:48] = minus
        vertices[48] = cen
        self.vertices = vertices
        self.indices = _build_indices()
        return vertices