"""Parametric surface geometry: tori, Bezier and B-spline surfaces, Gregory patches and helpers."""

__version__ = "0.1.0"
__all__ = ["util", "shading", "solid", "torus", "patches", "bezier", "gregory"]