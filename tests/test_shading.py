import numpy as np
import pytest

from bfgeom.shading import (
    ShaderProgramSpec,
    ShaderSet,
    ShaderType,
    StereoscopicState,
    eye_color,
    gray,
    patch_vertices,
)


def test_default_programs():
    s = ShaderSet()
    assert len(s.shaders) == 9
    assert s.shaders[ShaderType.BASIC] == ShaderProgramSpec("shaders/shader.vert", "shaders/shader.frag")
    assert s.shaders[ShaderType.POINT].fragment == "shaders/shader.frag"
    bez = s.shaders[ShaderType.BEZIER]
    assert bez.vertex == "shaders/commonTess.vert"
    assert bez.tess_control == "shaders/bezierShader.tesc"
    assert bez.tess_eval == "shaders/bezierShader.tese"
    assert bez.geometry is None
    assert s.shaders[ShaderType.LINK].vertex == "shaders/linkShader.vert"


def test_tessellation_without_common_stages():
    s = ShaderSet(shader_path="gl/")
    s.add_tessellation_shader("foo", True, False)
    spec = s.shaders[-1]
    assert spec.vertex == "gl/foo.vert"
    assert spec.fragment == "gl/foo.frag"
    assert spec.geometry == "foo.geom"


def test_change_shader_out_of_range():
    s = ShaderSet()
    with pytest.raises(IndexError):
        s.change_shader(9)
    with pytest.raises(IndexError):
        s.change_shader(-1)
    assert s.active_index == 0


def test_change_shader_sets_gl_state():
    s = ShaderSet()
    s.change_shader(ShaderType.TORUS)
    assert s.active_index == ShaderType.TORUS
    assert s.patch_size == 1
    assert s.polygon_mode == "line"
    s.change_shader(ShaderType.BASIC)
    assert s.polygon_mode == "line"
    s.change_shader(ShaderType.BEZIER_SURFACE0)
    assert s.patch_size == 16
    s.change_shader(ShaderType.BASIC)
    assert s.polygon_mode == "fill"


def test_patch_vertices():
    assert patch_vertices(ShaderType.GREGORY) == 20
    assert patch_vertices(ShaderType.BEZIER_SURFACE2) == 16
    assert patch_vertices(ShaderType.BEZIER) == 4
    assert patch_vertices(ShaderType.BASIC) is None


def test_common_uniforms_applied_on_change():
    s = ShaderSet()
    s.add_common_uniform("scale", 2)
    assert s.shaders[0].uniforms["scale"] == 2
    s.change_shader(ShaderType.POINT)
    assert s.shaders[ShaderType.POINT].uniforms["scale"] == 2
    s.change_shader(ShaderType.LINK)
    assert "scale" not in s.shaders[ShaderType.LINK].uniforms


def test_common_uniform_types():
    s = ShaderSet()
    s.add_common_uniform("flag", True)
    s.add_common_uniform("count", np.int64(3))
    s.add_common_uniform("v", [1.0, 2.0, 3.0])
    assert s.common_uniforms["flag"] is True
    assert type(s.common_uniforms["count"]) is int
    assert s.common_uniforms["v"].shape == (3,)
    with pytest.raises(TypeError):
        s.add_common_uniform("bad", "text")
    with pytest.raises(TypeError):
        s.add_common_uniform("bad", [1.0, 2.0, 3.0, 4.0, 5.0])


def test_remove_common_uniform():
    s = ShaderSet()
    s.add_common_uniform("x", 1.5)
    assert s.remove_common_uniform("x") is True
    assert s.remove_common_uniform("x") is False
    assert "x" not in s.common_uniforms


def test_gray_percentage_clamped():
    s = ShaderSet()
    s.set_gray_percentage(3.0)
    assert s.gray_percentage == 1.0
    s.set_gray_percentage(-1.0)
    assert s.gray_percentage == 0.0


def test_gray_of_white_is_white():
    assert np.allclose(gray((1.0, 1.0, 1.0)), (1.0, 1.0, 1.0))
    g = gray((0.2, 0.5, 0.9))
    assert g[0] == g[1] == g[2]


def test_eye_color():
    c = (0.2, 0.4, 0.6)
    assert np.allclose(eye_color(c, 0.0, StereoscopicState.NONE), c)
    assert np.allclose(eye_color(c, 0.0, StereoscopicState.LEFT_EYE), (0.2, 0.0, 0.0))
    assert np.allclose(eye_color(c, 0.0, StereoscopicState.RIGHT_EYE), (0.0, 0.4, 0.6))
    assert np.allclose(eye_color(c, 1.0, StereoscopicState.NONE), gray(c))


def test_set_color_and_stereo():
    s = ShaderSet()
    s.change_shader(ShaderType.POINT)
    s.set_stereoscopic_state(StereoscopicState.LEFT_EYE)
    assert s.active_index == ShaderType.BASIC
    s.set_color_bytes(255, 255, 0)
    assert np.allclose(s.color, (1.0, 1.0, 0.0))
    assert np.allclose(s.shaders[0].uniforms["color"], (1.0, 0.0, 0.0))
    s.set_stereoscopic_state(StereoscopicState.NONE)
    s.set_color((0.1, 0.2, 0.3))
    assert np.allclose(s.shaders[0].uniforms["color"], (0.1, 0.2, 0.3))