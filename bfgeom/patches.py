"""Bézier surface patches: 16-point segments and the surface grid that holds them."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np

from bfgeom.solid import ParametricSurface, Vertex

POINTS_PER_SEGMENT = 16

BOTTOM_EMPTY = 0x1
TOP_EMPTY = 0x2
LEFT_EMPTY = 0x4
RIGHT_EMPTY = 0x8

_segment_counter = itertools.count()
_surface_counter = itertools.count(1)


def polygon_indices() -> list[int]:
    """Element indices of one segment.

    The first 16 entries list the control points as a patch; the remaining 48
    are pairs drawing the 4x4 control polygon as lines.
    """
    indices = list(range(POINTS_PER_SEGMENT))
    for i in range(3):
        for j in range(3):
            base = i * 4 + j
            indices.extend((base, base + 4, base, base + 1))
    for i in range(3):
        indices.extend((4 * i + 3, 4 * i + 7, 12 + i, 13 + i))
    return indices


@dataclass
class SurfaceSegment:
    """One bicubic patch of a surface, referencing 16 points of a shared point list."""

    point_indices: list[int]
    samples: tuple[int, int] = (4, 4)
    is_c2: bool = False
    name: str = ""
    empty_edges: int = 0
    tmp_indices: list[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.point_indices = [int(i) for i in self.point_indices]
        if len(self.point_indices) != POINTS_PER_SEGMENT:
            raise ValueError(
                f"a segment needs {POINTS_PER_SEGMENT} point indices, got {len(self.point_indices)}"
            )
        self.samples = (int(self.samples[0]), int(self.samples[1]))
        if not self.name:
            self.name = f"Segment {next(_segment_counter)}"

    def vertices(self, points: Sequence) -> list[Vertex]:
        """Vertices of the control points, in segment order."""
        return [Vertex.from_position(points[i]) for i in self.point_indices]

    def on_point_removed(self, index: int) -> None:
        """Shift indices after a point at ``index`` was removed from the shared list."""
        self.point_indices = [i - 1 if i > index else i for i in self.point_indices]

    def replace_point(self, old: int, new: int) -> None:
        """Make every reference to point ``old`` refer to ``new``."""
        self.point_indices = [new if i == old else i for i in self.point_indices]

    def object_range(self, points: Sequence) -> tuple[np.ndarray, np.ndarray]:
        """Axis-aligned bounding box of the control points."""
        coords = np.array([np.asarray(points[i], dtype=float) for i in self.point_indices])
        return coords.min(axis=0), coords.max(axis=0)

    def is_left_empty(self) -> bool:
        return bool(self.empty_edges & LEFT_EMPTY)

    def is_right_empty(self) -> bool:
        return bool(self.empty_edges & RIGHT_EMPTY)

    def is_top_empty(self) -> bool:
        return bool(self.empty_edges & TOP_EMPTY)

    def is_bottom_empty(self) -> bool:
        return bool(self.empty_edges & BOTTOM_EMPTY)

    def is_internal(self) -> bool:
        return self.empty_edges == 0


class BezierSurfaceBase(ParametricSurface):
    """A grid of segments over a shared point list; ``u`` runs along rows, ``v`` across them."""

    def __init__(
        self,
        points: Optional[list] = None,
        segs: tuple[int, int] = (3, 3),
        samples: tuple[int, int] = (4, 4),
        wrapped_x: bool = False,
        wrapped_y: bool = False,
        is_c2: bool = False,
        name: Optional[str] = None,
    ) -> None:
        self.points: list = points if points is not None else []
        self.segs = (int(segs[0]), int(segs[1]))
        self.samples = (int(samples[0]), int(samples[1]))
        self.wrapped_x = bool(wrapped_x)
        self.wrapped_y = bool(wrapped_y)
        self.is_c2 = bool(is_c2)
        self.name = name if name is not None else f"Bézier surface0 {next(_surface_counter)}"
        self.segments: list[list[SurfaceSegment]] = []

    def init_segments(
        self,
        point_indices: Sequence[Sequence[Sequence[int]]],
        names: Optional[Sequence[Sequence[str]]] = None,
        samples: Optional[Sequence[Sequence[Sequence[int]]]] = None,
    ) -> None:
        """Append rows of segments built from 16-index groups.

        Corner indices lying on a free border are recorded in ``tmp_indices``
        so that gap-filling patches can find them.
        """
        rows = len(point_indices)
        for i, row in enumerate(point_indices):
            seg_row = []
            cols = len(row)
            for j, indices in enumerate(row):
                left_free = j == 0 and not self.wrapped_x
                right_free = j == cols - 1 and not self.wrapped_x
                bottom_free = i == 0 and not self.wrapped_y
                top_free = i == rows - 1 and not self.wrapped_y
                tmp = []
                if left_free or bottom_free:
                    tmp.append(0)
                if right_free or bottom_free:
                    tmp.append(3)
                if left_free or top_free:
                    tmp.append(12)
                if right_free or top_free:
                    tmp.append(15)
                seg_samples = tuple(samples[i][j]) if samples else self.samples
                seg_row.append(
                    SurfaceSegment(
                        point_indices=list(indices),
                        samples=seg_samples,
                        is_c2=self.is_c2,
                        name=names[i][j] if names else "",
                        tmp_indices=tmp,
                    )
                )
            self.segments.append(seg_row)

    def mark_empty_edges(self) -> None:
        """Flag segment borders that lie on the open edges of a C0 surface."""
        if self.is_c2 or not self.segments:
            return
        if not self.wrapped_y:
            for s in self.segments[0]:
                s.empty_edges |= BOTTOM_EMPTY
            for s in self.segments[-1]:
                s.empty_edges |= TOP_EMPTY
        if not self.wrapped_x:
            for row in self.segments:
                if not row:
                    continue
                row[0].empty_edges |= LEFT_EMPTY
                row[-1].empty_edges |= RIGHT_EMPTY

    def _all_segments(self):
        return (s for row in self.segments for s in row)

    def set_samples(self, samples) -> None:
        """Set the sampling of the whole surface and of every segment."""
        self.samples = (int(samples[0]), int(samples[1]))
        for s in self._all_segments():
            s.samples = self.samples

    def on_remove_point(self, index: int) -> None:
        """Keep segment indices valid after a point was removed from the shared list."""
        for s in self._all_segments():
            s.on_point_removed(index)

    def on_merge_points(self, p1: int, p2: int) -> None:
        """Redirect all references to point ``p2`` to point ``p1``."""
        for s in self._all_segments():
            s.replace_point(p2, p1)

    def object_range(self) -> tuple[np.ndarray, np.ndarray]:
        """Bounding box of all control points; zeros for an empty surface."""
        if not self.segments or not self.segments[0]:
            return np.zeros(3), np.zeros(3)
        ranges = [s.object_range(self.points) for s in self._all_segments()]
        mins = np.array([r[0] for r in ranges])
        maxs = np.array([r[1] for r in ranges])
        return mins.min(axis=0), maxs.max(axis=0)

    def split_parameters(self, u: float, v: float) -> tuple[int, int, float, float]:
        """Map global (u, v) to (segment column, segment row, local u, local v)."""
        if not self.segments or not self.segments[0]:
            raise ValueError("surface has no segments")
        u, v = self._wrap_parameters(u, v)
        iu = int(np.floor(u))
        iv = int(np.floor(v))
        fu = u - iu
        fv = v - iv
        if iu >= len(self.segments[0]):
            iu -= 1
            fu += 1.0
        if iv >= len(self.segments):
            iv -= 1
            fv += 1.0
        return iu, iv, fu, fv

    def parameter_min(self) -> np.ndarray:
        return np.array([0.0, 0.0])

    def parameter_max(self) -> np.ndarray:
        return np.array([float(self.segs[0]), float(self.segs[1])])

    def wrapping_u(self) -> bool:
        return self.wrapped_x

    def wrapping_v(self) -> bool:
        return self.wrapped_y