# -*- coding: utf-8 -*-
# sv/geometry/__init__.py

"""
Modules:
--------
- curves:        resampling, Fourier smoothing, Kochanek splines, transport frames.
- ops:           profile alignment, loop sampling and polygon utilities.
- loft_options:  LoftOptions / LoftNurbsOptions parameter containers.
- loft:          spline and NURBS lofting through profiles.
"""

from .loft import loft_solid, loft_solid_using_nurbs
from .loft_options import LoftNurbsOptions, LoftOptions
from .ops import (
    align_profile,
    average_point,
    bbox,
    interpolate_closed_curve,
    orient_profile,
    point_in_poly,
    polygon_normal,
    sample_loop,
    surface_area,
)

__all__ = [
    "LoftOptions",
    "LoftNurbsOptions",
    "loft_solid",
    "loft_solid_using_nurbs",
    "align_profile",
    "average_point",
    "bbox",
    "interpolate_closed_curve",
    "orient_profile",
    "point_in_poly",
    "polygon_normal",
    "sample_loop",
    "surface_area",
]
