"""Vertices and the parametric-surface interface shared by the modeller's solids."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass

import numpy as np

from bfgeom.util import lerp

DEBUG_ANTENNA_LENGTH = 0.1


@dataclass
class Vertex:
    """A mesh vertex: position and texture coordinates."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    tx: float = 0.0
    ty: float = 0.0

    @classmethod
    def from_position(cls, position, texture=(0.0, 0.0)) -> "Vertex":
        px, py, pz = (float(c) for c in position)
        tx, ty = (float(c) for c in texture)
        return cls(px, py, pz, tx, ty)

    @property
    def position(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z])

    @position.setter
    def position(self, p) -> None:
        self.x, self.y, self.z = (float(c) for c in p)

    @property
    def texture_position(self) -> np.ndarray:
        return np.array([self.tx, self.ty])

    @texture_position.setter
    def texture_position(self, t) -> None:
        self.tx, self.ty = (float(c) for c in t)


class ParametricSurface(ABC):
    """A surface given by a point function of two parameters and its derivatives."""

    @abstractmethod
    def parameter_min(self) -> np.ndarray:
        """Lower corner of the parameter domain."""

    @abstractmethod
    def parameter_max(self) -> np.ndarray:
        """Upper corner of the parameter domain."""

    def wrapping_u(self) -> bool:
        """Tell whether the surface is closed along ``u``."""
        return False

    def wrapping_v(self) -> bool:
        """Tell whether the surface is closed along ``v``."""
        return False

    @abstractmethod
    def point(self, u: float, v: float) -> np.ndarray:
        """Surface point at (u, v)."""

    @abstractmethod
    def gradient_u(self, u: float, v: float) -> np.ndarray:
        """First derivative along ``u``."""

    @abstractmethod
    def gradient_v(self, u: float, v: float) -> np.ndarray:
        """First derivative along ``v``."""

    @abstractmethod
    def hesse_uu(self, u: float, v: float) -> np.ndarray:
        """Second derivative along ``u`` twice."""

    @abstractmethod
    def hesse_uv(self, u: float, v: float) -> np.ndarray:
        """Mixed second derivative."""

    @abstractmethod
    def hesse_vv(self, u: float, v: float) -> np.ndarray:
        """Second derivative along ``v`` twice."""

    def _wrap_parameters(self, u: float, v: float) -> tuple[float, float]:
        """Bring (u, v) into the domain: wrap closed directions, clamp open ones."""
        pmin = self.parameter_min()
        pmax = self.parameter_max()
        wraps = (self.wrapping_u(), self.wrapping_v())
        result = []
        for value, lo, hi, wrap in zip((u, v), pmin, pmax, wraps):
            lo, hi = float(lo), float(hi)
            span = hi - lo
            if wrap and span > 0:
                value = lo + math.fmod(float(value) - lo, span)
                if value < lo:
                    value += span
            else:
                value = min(max(float(value), lo), hi)
            result.append(value)
        return result[0], result[1]


def _normalized(v: np.ndarray) -> np.ndarray:
    norm = float(np.linalg.norm(v))
    if norm == 0.0:
        return np.zeros_like(v, dtype=float)
    return v / norm


def debug_info(surface: ParametricSurface, n: int = 20) -> tuple[list[Vertex], list[int]]:
    """Sample the surface on an (n+1) x (n+1) grid with short tangent antennas.

    Each sample gives three vertices: the point and the point moved along the
    normalised ``u`` and ``v`` gradients. The index list holds first one index
    per sample (points), then four per sample (two antenna lines).
    """
    n = max(int(n), 1)
    pmin = surface.parameter_min()
    pmax = surface.parameter_max()
    vertices: list[Vertex] = []
    point_indices: list[int] = []
    line_indices: list[int] = []
    for i in range(n + 1):
        u = lerp(float(pmin[0]), float(pmax[0]), i / n)
        for j in range(n + 1):
            v = lerp(float(pmin[1]), float(pmax[1]), j / n)
            k = len(vertices)
            p = np.asarray(surface.point(u, v), dtype=float)
            pu = np.asarray(surface.gradient_u(u, v), dtype=float)
            pv = np.asarray(surface.gradient_v(u, v), dtype=float)
            vertices.append(Vertex.from_position(p))
            vertices.append(Vertex.from_position(p + _normalized(pu) * DEBUG_ANTENNA_LENGTH))
            vertices.append(Vertex.from_position(p + _normalized(pv) * DEBUG_ANTENNA_LENGTH))
            point_indices.append(k)
            line_indices.extend((k, k + 1, k, k + 2))
    return vertices, point_indices + line_indices