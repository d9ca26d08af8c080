"""Shader program registry: active program, shared uniforms, colour and GL state."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional

import numpy as np

from bfgeom.util import lerp


class ShaderType(IntEnum):
    BASIC = 0
    BEZIER = 1
    POINT = 2
    BEZIER_SURFACE0 = 3
    BEZIER_SURFACE2 = 4
    GREGORY = 5
    TORUS = 6
    CURSOR = 7
    LINK = 8
    MULTIPLE = 9


class StereoscopicState(IntEnum):
    NONE = 0
    LEFT_EYE = 1
    RIGHT_EYE = 2


_PATCH_VERTICES = {
    ShaderType.TORUS: 1,
    ShaderType.BEZIER: 4,
    ShaderType.BEZIER_SURFACE0: 16,
    ShaderType.BEZIER_SURFACE2: 16,
    ShaderType.GREGORY: 20,
}
_LINE_MODE = {
    ShaderType.TORUS,
    ShaderType.BEZIER_SURFACE0,
    ShaderType.BEZIER_SURFACE2,
    ShaderType.GREGORY,
}
_UNIFORM_SHAPES = {(2,), (3,), (4,), (2, 2), (3, 3), (4, 4)}


@dataclass
class ShaderProgramSpec:
    """A shader program: its stage source paths and the uniforms last set on it."""

    vertex: str
    fragment: str
    tess_control: Optional[str] = None
    tess_eval: Optional[str] = None
    geometry: Optional[str] = None
    uniforms: dict = field(default_factory=dict, compare=False)


def gray(color) -> np.ndarray:
    """Luminance of an RGB colour as a gray RGB colour."""
    r, g, b = (float(x) for x in color)
    f = 0.2126 * r + 0.7152 * g + 0.0722 * b
    return np.array([f, f, f])


def eye_color(color, gray_percentage: float, state: StereoscopicState) -> np.ndarray:
    """Colour actually sent to the shader for the given desaturation and eye."""
    c = np.asarray(color, dtype=float)
    v = lerp(c, gray(c), gray_percentage)
    if state == StereoscopicState.LEFT_EYE:
        return np.array([v[0], 0.0, 0.0])
    if state == StereoscopicState.RIGHT_EYE:
        return np.array([0.0, v[1], v[2]])
    return v


def patch_vertices(shader_type: ShaderType) -> Optional[int]:
    """Patch size a tessellation shader type needs, or None for other types."""
    return _PATCH_VERTICES.get(ShaderType(shader_type))


def _coerce_uniform(value):
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    if isinstance(value, (int, np.integer)):
        return int(value)
    if isinstance(value, (float, np.floating)):
        return float(value)
    if isinstance(value, (str, bytes)):
        raise TypeError(f"unsupported uniform value: {value!r}")
    try:
        arr = np.array(value, dtype=float)
    except (TypeError, ValueError) as exc:
        raise TypeError(f"unsupported uniform value: {value!r}") from exc
    if arr.shape not in _UNIFORM_SHAPES:
        raise TypeError(f"unsupported uniform shape: {arr.shape}")
    return arr


class ShaderSet:
    """The modeller's shader programs and the state that switching between them sets."""

    def __init__(self, shader_path: str = "shaders/") -> None:
        self.shader_path = shader_path
        self.shaders: list[ShaderProgramSpec] = []
        self.common_uniforms: dict = {}
        self.active_index = 0
        self.stereoscopic_state = StereoscopicState.NONE
        self.gray_percentage = 0.0
        self.color = np.zeros(3)
        self.polygon_mode = "fill"
        self.patch_size: Optional[int] = None
        self.add_basic_shader("shader")
        self.add_tessellation_shader("bezierShader", False, True)
        self.add_basic_shader("pointShader", "shader")
        self.add_tessellation_shader("surfaceShader0", False, True)
        self.add_tessellation_shader("surfaceShader2", False, True)
        self.add_tessellation_shader("gregoryShader", False, True)
        self.add_tessellation_shader("torusShader", False, True)
        self.add_basic_shader("cursorShader", "shader")
        self.add_basic_shader("linkShader")

    def add_basic_shader(self, vert_file: str, frag_file: str = "") -> None:
        """Register a vertex+fragment program; the fragment name defaults to the vertex one."""
        frag = frag_file or vert_file
        self.shaders.append(
            ShaderProgramSpec(
                vertex=f"{self.shader_path}{vert_file}.vert",
                fragment=f"{self.shader_path}{frag}.frag",
            )
        )

    def add_tessellation_shader(self, path: str, is_geometric: bool, is_common_used: bool = True) -> None:
        """Register a tessellation program, optionally using the shared vertex/fragment stages."""
        geometry = f"{path}.geom" if is_geometric else None
        base = self.shader_path
        if is_common_used:
            vertex, fragment = f"{base}commonTess.vert", f"{base}commonTess.frag"
        else:
            vertex, fragment = f"{base}{path}.vert", f"{base}{path}.frag"
        self.shaders.append(
            ShaderProgramSpec(
                vertex=vertex,
                fragment=fragment,
                tess_control=f"{base}{path}.tesc",
                tess_eval=f"{base}{path}.tese",
                geometry=geometry,
            )
        )

    def _apply_uniform(self, name: str, value) -> None:
        self.shaders[self.active_index].uniforms[name] = value

    def change_shader(self, n: int) -> None:
        """Make program ``n`` active, adjusting polygon mode, patch size and shared uniforms."""
        if not 0 <= n < len(self.shaders):
            raise IndexError(f"no shader program with index {n}")
        old = ShaderType(self.active_index)
        if old in (ShaderType.BEZIER_SURFACE0, ShaderType.BEZIER_SURFACE2, ShaderType.GREGORY):
            self.polygon_mode = "fill"
        self.active_index = n
        new = ShaderType(n)
        if new in _PATCH_VERTICES:
            self.patch_size = _PATCH_VERTICES[new]
        if new in _LINE_MODE:
            self.polygon_mode = "line"
        if n < ShaderType.LINK:
            for name, value in self.common_uniforms.items():
                self._apply_uniform(name, value)

    def add_common_uniform(self, name: str, value) -> None:
        """Store a uniform shared by all programs and set it on the active one."""
        coerced = _coerce_uniform(value)
        self.common_uniforms[name] = coerced
        self._apply_uniform(name, coerced)

    def remove_common_uniform(self, name: str) -> bool:
        """Forget a shared uniform; tell whether it existed."""
        return self.common_uniforms.pop(name, None) is not None

    def set_gray_percentage(self, g: float) -> None:
        self.gray_percentage = min(max(float(g), 0.0), 1.0)

    def set_color(self, color) -> None:
        """Set the drawing colour on the active program, honouring gray level and eye."""
        self.color = np.asarray(color, dtype=float).copy()
        self._apply_uniform("color", eye_color(self.color, self.gray_percentage, self.stereoscopic_state))

    def set_color_bytes(self, r: int, g: int, b: int) -> None:
        self.set_color((r / 255.0, g / 255.0, b / 255.0))

    def set_stereoscopic_state(self, state: StereoscopicState) -> None:
        """Switch to the basic program and select which eye is being drawn."""
        self.change_shader(ShaderType.BASIC)
        self.stereoscopic_state = StereoscopicState(state)