[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bfgeom"
version = "0.1.0"
description = "Parametric surface geometry: tori, C0 Bezier and C2 B-spline surfaces, Gregory patches and raster helpers"
requires-python = ">=3.10"
dependencies = ["numpy"]
keywords = [
    "geometry",
    "bezier",
    "b-spline",
    "gregory patch",
    "torus",
    "parametric surface",
    "bresenham",
    "flood fill",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics :: 3D Modeling",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["bfgeom"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
