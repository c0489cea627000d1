# -*- coding: utf-8 -*-
# sv/segmentation/kernel.py

"""
Contour kernel names and the name → contour class map.

    >>> from sv import segmentation
    >>> c = segmentation.create(segmentation.Kernel.CIRCLE, radius=1.0)
"""

from ..tools.kernels import KernelMap, KernelSpec
from .contour import Contour
from .image_based import LevelSet, Threshold
from .polygon import Polygon, SplinePolygon
from .shapes import Circle, Ellipse


class Kernel:
    """Contour kernel names."""
    CIRCLE = "CIRCLE"
    ELLIPSE = "ELLIPSE"
    LEVEL_SET = "LEVEL_SET"
    POLYGON = "POLYGON"
    SPLINE_POLYGON = "SPLINE_POLYGON"
    THRESHOLD = "THRESHOLD"

    @staticmethod
    def get_names():
        return CONTOUR_KERNELS.names()


CONTOUR_KERNELS = KernelMap("contour")


def _register():
    CONTOUR_KERNELS.add(KernelSpec(Kernel.CIRCLE, Circle, description="center + radius point"))
    CONTOUR_KERNELS.add(KernelSpec(Kernel.ELLIPSE, Ellipse, description="center + two axis points"))
    CONTOUR_KERNELS.add(KernelSpec(Kernel.LEVEL_SET, LevelSet, description="geodesic active contour"))
    CONTOUR_KERNELS.add(KernelSpec(Kernel.POLYGON, Polygon, description="linear polygon"))
    CONTOUR_KERNELS.add(KernelSpec(Kernel.SPLINE_POLYGON, SplinePolygon,
                                   description="periodic cubic spline polygon"))
    CONTOUR_KERNELS.add(KernelSpec(Kernel.THRESHOLD, Threshold, description="image iso-contour"))


_register()

# File type names (the `type` attribute of .ctgr contours) → contour classes. Smoothed and
# image-based segmentations are stored as a generic "Contour" holding only its points.
CONTOUR_TYPES = {cls.kernel_type: cls for cls in (Contour, Circle, Ellipse, LevelSet, Polygon,
                                                  SplinePolygon, Threshold)}


def create(kernel, **kwargs):
    """Create a contour for a kernel name; extra keywords go to the contour constructor."""
    return CONTOUR_KERNELS.create(kernel, operation="create", **kwargs)
