# -*- coding: utf-8 -*-
# sv/path/__init__.py

"""
Modules:
--------
- calc_method: CalculationMethod names (SPACING, SUBDIVISION, TOTAL).
- path:        Path (control points, spline curve points and frames).
- group:       Group of paths per time step, read/written as .pth files.
"""

from .calc_method import CalculationMethod
from .group import Group
from .path import Path, PathPoint

__all__ = ["CalculationMethod", "Group", "Path", "PathPoint"]
