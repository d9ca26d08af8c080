# bfgeom

Geometry for interactive surface modelling: parametric tori, C0 Bézier and
C2 B-spline surfaces built over a shared list of control points, Gregory
patches that fill triangular holes between C0 surfaces, and a set of small
vector, projection and raster helpers. Everything is plain Python on top of
numpy.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `bfgeom.util`: vector helpers (`lerp`, `length`, `sqr_length`,
  `distance`, `sqr_distance`, `degrees`, `radians`, `has_nan`,
  `vec_to_string`, `almost_equal`, `almost_equal_vec`, `sign`, `fast_pow`),
  screen/world projections (`to_screen_pos`, `to_global_pos`,
  `is_in_bounds`), Euler-angle extraction (`matrix_to_euler_xyz`,
  `matrix_to_euler_yxz`), `tridiagonal_matrix_algorithm` (raises
  `ValueError` on mismatched sizes), `segment_intersection` (returns a
  `SegmentIntersectionResult` or `None`), `read_whole_file`, `DeltaTimer`,
  and raster tools on square wrapping pixel buffers (`flood_fill`,
  `bresenham_line`, `set_pixel`, `get_pixel`).
- `bfgeom.shading`: `ShaderSet` keeps a list of `ShaderProgramSpec`
  entries (stage file paths and the uniforms last set on each), the common
  uniforms shared by all programs, the active program index, the polygon
  mode and patch size that switching programs implies, and the drawing
  colour. `ShaderType`, `StereoscopicState`, `gray`, `eye_color` and
  `patch_vertices` describe that state.
- `bfgeom.solid`: `Vertex`, the abstract `ParametricSurface` interface
  (point, first and second derivatives over a parameter rectangle, with
  wrapping or clamping of parameters) and `debug_info`, which samples a
  surface into points with short tangent lines.
- `bfgeom.torus`: `Torus`, a parametric surface wrapping in both
  parameters, placed by a 4x4 model matrix.
- `bfgeom.patches`: `SurfaceSegment` and `BezierSurfaceBase`, the
  bookkeeping shared by patch surfaces: 16-index segments, free-border
  flags, point removal and merging, bounding boxes and the split of a
  global parameter into segment and local parameter. `polygon_indices`
  gives the element indices of one segment's control polygon.
- `bfgeom.bezier`: `BezierSurfaceC0` (bicubic Bézier patches, blended at
  segment borders) and `BezierSurfaceC2` (uniform bicubic B-spline
  patches), both able to generate flat or cylindrical control nets; and the
  Bernstein basis functions `bernstein`, `bernstein_d`, `bernstein_dd`.
- `bfgeom.gregory`: `find_gregories` finds triangular holes bounded by
  three non-internal segments of the given surfaces and returns them as
  `GregoryCandidate` objects; `GregoryPatch.recalculate` computes the 49
  control vertices and the index list of the three 20-point patches that
  fill such a hole.

## Example

```python
import numpy as np
from bfgeom.torus import Torus
from bfgeom.solid import debug_info
from bfgeom.bezier import BezierSurfaceC0

torus = Torus(big_radius=2.0, small_radius=0.5, big_fragments=15,
              small_fragments=10, model=np.eye(4))
print(torus.point(0.0, 0.0))        # [2.5 0.  0. ]
print(torus.gradient_v(0.0, 0.0))   # tangent along the big circle
vertices, indices = debug_info(torus, 8)

surface = BezierSurfaceC0(segs=(2, 2))
surface.generate_points((4.0, 4.0))
print(len(surface.points))          # 49 control points
print(surface.point(0.0, 0.0))      # the first control point, the origin
```

## What it does not do

The package computes geometry only. It opens no window, draws nothing and
has no user interface; `ShaderSet` records shader file paths and uniform
values but does not read, compile or bind any shader. There is no scene,
no object list with selection, and no saving or loading of models to
files.