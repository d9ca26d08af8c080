"""Torus solid described as a wrapping parametric surface."""

from __future__ import annotations

import math
from typing import Optional

import numpy as np

from bfgeom.solid import ParametricSurface

MIN_BIG_RADIUS = 1e-6


class Torus(ParametricSurface):
    """Torus around the local Z axis; ``u`` runs around the tube, ``v`` around the axis."""

    def __init__(
        self,
        big_radius: float = 1.0,
        small_radius: float = 0.3,
        big_fragments: int = 15,
        small_fragments: int = 10,
        model: Optional[np.ndarray] = None,
    ) -> None:
        self.big_radius = float(big_radius)
        self.small_radius = float(small_radius)
        self.big_fragments = int(big_fragments)
        self.small_fragments = int(small_fragments)
        if model is None:
            model = np.identity(4)
        model = np.asarray(model, dtype=float)
        if model.shape != (4, 4):
            raise ValueError(f"model matrix must be 4x4, got {model.shape}")
        self.model = model.copy()

    def resize(self, big_radius: float, small_radius: float) -> None:
        """Change the radii, keeping the big one positive and the small one non-negative."""
        self.big_radius = max(float(big_radius), MIN_BIG_RADIUS)
        self.small_radius = max(float(small_radius), 0.0)

    @property
    def position(self) -> np.ndarray:
        return self.model[:3, 3].copy()

    def parameter_min(self) -> np.ndarray:
        return np.array([0.0, 0.0])

    def parameter_max(self) -> np.ndarray:
        return np.array([2.0 * math.pi, 2.0 * math.pi])

    def wrapping_u(self) -> bool:
        return True

    def wrapping_v(self) -> bool:
        return True

    def _apply(self, x: float, y: float, z: float, w: float) -> np.ndarray:
        return (self.model @ np.array([x, y, z, w]))[:3]

    def point(self, u: float, v: float) -> np.ndarray:
        u, v = self._wrap_parameters(u, v)
        ring = self.big_radius + self.small_radius * math.cos(u)
        return self._apply(
            ring * math.cos(v), ring * math.sin(v), self.small_radius * math.sin(u), 1.0
        )

    def gradient_u(self, u: float, v: float) -> np.ndarray:
        u, v = self._wrap_parameters(u, v)
        r = self.small_radius
        return self._apply(
            -r * math.sin(u) * math.cos(v), -r * math.sin(u) * math.sin(v), r * math.cos(u), 0.0
        )

    def gradient_v(self, u: float, v: float) -> np.ndarray:
        u, v = self._wrap_parameters(u, v)
        ring = self.big_radius + self.small_radius * math.cos(u)
        return self._apply(-ring * math.sin(v), ring * math.cos(v), 0.0, 0.0)

    def hesse_uu(self, u: float, v: float) -> np.ndarray:
        u, v = self._wrap_parameters(u, v)
        r = self.small_radius
        return self._apply(
            -r * math.cos(u) * math.cos(v), -r * math.cos(u) * math.sin(v), -r * math.sin(u), 0.0
        )

    def hesse_uv(self, u: float, v: float) -> np.ndarray:
        u, v = self._wrap_parameters(u, v)
        r = self.small_radius
        return self._apply(r * math.sin(u) * math.sin(v), -r * math.sin(u) * math.cos(v), 0.0, 0.0)

    def hesse_vv(self, u: float, v: float) -> np.ndarray:
        u, v = self._wrap_parameters(u, v)
        ring = self.big_radius + self.small_radius * math.cos(u)
        return self._apply(-ring * math.cos(v), -ring * math.sin(v), 0.0, 0.0)

    def object_range(self) -> tuple[np.ndarray, np.ndarray]:
        """Axis-aligned box around the torus position (a loose bound)."""
        extent = self.small_radius + self.big_radius
        pos = self.position
        return pos - extent, pos + extent