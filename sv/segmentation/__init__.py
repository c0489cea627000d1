# -*- coding: utf-8 -*-
# sv/segmentation/__init__.py

"""
Modules:
--------
- contour:     Contour base class (frame, control/contour points, measures, smoothing).
- shapes:      Circle and Ellipse kernels.
- polygon:     Polygon and SplinePolygon kernels.
- image_based: Threshold and LevelSet kernels (image reslicing + extraction).
- kernel:      Kernel names and the `create` factory.
- group:       Contour group read/written as .ctgr files.
"""

from .contour import Contour, SubdivisionType
from .group import Group
from .image_based import LevelSet, Threshold
from .kernel import Kernel, create
from .polygon import Polygon, SplinePolygon
from .shapes import Circle, Ellipse

__all__ = [
    "Contour",
    "SubdivisionType",
    "Circle",
    "Ellipse",
    "Polygon",
    "SplinePolygon",
    "Threshold",
    "LevelSet",
    "Kernel",
    "create",
    "Group",
]
