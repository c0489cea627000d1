# -*- coding: utf-8 -*-
# sv/segmentation/contour.py

"""
Project: sv
Date: 10/18/2026

Purpose:
--------
Base contour: a closed (or open) planar curve located at a path point. Concrete
kernels (circle, ellipse, polygon, spline polygon, threshold, level set) derive from
`Contour` and only implement how control points become contour points.

Main Tasks:
-----------
    1. Hold the path frame (pos, tangent, rotation) and project points onto its plane.
    2. Validate and store control points, regenerate contour points on every edit.
    3. Provide measures (center, area, perimeter), PolyData export and Fourier smoothing.

Notes:
------
- In-plane axes are u = rotation and v = tangent × rotation.
- Control-point counts are bounded by `min_control_number` / `max_control_number`.
"""

import copy
import logging
import math
from typing import Dict, List, Optional

import numpy as np
import pyvista as pv

from ..errors import SegmentationError
from ..geometry.curves import perpendicular_unit, smooth_curve, unit
from ..path.path import PathPoint
from ..tools.utils import check_index, check_point, check_points

logger = logging.getLogger(__name__)


class SubdivisionType:
    """How many contour points are generated between control points."""
    TOTAL = "TOTAL"
    SUBDIVISION = "SUBDIVISION"
    SPACING = "SPACING"

    # Codes stored in the `subdivision_type` attribute of .ctgr files.
    CODES = {TOTAL: 0, SUBDIVISION: 1, SPACING: 2}

    @classmethod
    def check(cls, name, operation="set_subdivision_params") -> str:
        if isinstance(name, str) and name.upper() in cls.CODES:
            return name.upper()
        for k, v in cls.CODES.items():
            if str(v) == str(name):
                return k
        raise SegmentationError("Unknown subdivision type '{}'. Valid names are: SPACING, "
                                "SUBDIVISION or TOTAL.".format(name), operation=operation)


def as_path_point(value, operation: str = "Contour") -> PathPoint:
    """Accept a PathPoint or a dict with 'pos', 'tangent', 'rotation' (and optional 'id')."""
    if value is None:
        return PathPoint(0, np.zeros(3), np.array([0.0, 0.0, 1.0]), np.array([1.0, 0.0, 0.0]))
    if isinstance(value, PathPoint):
        pp = value
    elif isinstance(value, dict):
        for key in ("pos", "tangent", "rotation"):
            if key not in value:
                raise SegmentationError("The path point argument has no '{}' key.".format(key),
                                        operation=operation)
        pp = PathPoint(int(value.get("id", 0)),
                       check_point(value["pos"], operation, "path point pos", SegmentationError),
                       check_point(value["tangent"], operation, "path point tangent", SegmentationError),
                       check_point(value["rotation"], operation, "path point rotation", SegmentationError))
    else:
        raise SegmentationError("The path point argument is not a dict or PathPoint.",
                                operation=operation)
    tangent = unit(pp.tangent)
    rotation = pp.rotation - np.dot(pp.rotation, tangent) * tangent
    rotation = unit(rotation) if np.linalg.norm(rotation) > 1e-12 else perpendicular_unit(tangent)
    return PathPoint(pp.id, np.asarray(pp.pos, float), tangent, rotation)


class Contour:
    """
    Base class of all contour kernels.

    Parameters
    ----------
    path_point : PathPoint or dict, optional
        Frame the contour lies in; defaults to the XY plane at the origin.
    closed : bool
        Whether the contour curve is closed.
    """

    kernel_type = "Contour"
    default_method = "Manual"
    min_control_number = 0
    max_control_number = 10000

    def __init__(self, path_point=None, closed: bool = True):
        self._path_point = as_path_point(path_point, type(self).__name__)
        self._closed = bool(closed)
        self._method = self.default_method
        self._control_points = np.zeros((0, 3))
        self._contour_points = np.zeros((0, 3))
        self._subdivision_type = SubdivisionType.TOTAL
        self._subdivision_number = 36
        self._subdivision_spacing = 0.0
        self._image = None

    # --------------------
    # Frame
    # --------------------
    def _axes(self):
        t = self._path_point.tangent
        u = self._path_point.rotation
        return u, np.cross(t, u)

    def project(self, point: np.ndarray) -> np.ndarray:
        """Orthogonal projection of a point onto the contour plane."""
        pos, t = self._path_point.pos, self._path_point.tangent
        return point - np.dot(point - pos, t) * t

    def _to_plane_2d(self, points: np.ndarray) -> np.ndarray:
        u, v = self._axes()
        d = np.asarray(points, float) - self._path_point.pos
        return np.column_stack([d @ u, d @ v])

    def _from_plane_2d(self, xy: np.ndarray) -> np.ndarray:
        u, v = self._axes()
        xy = np.asarray(xy, float)
        return self._path_point.pos + xy[:, :1] * u + xy[:, 1:2] * v

    def get_path_point(self) -> Dict[str, object]:
        return self._path_point.as_dict()

    def set_path_point(self, path_point) -> None:
        """Move the contour to a new frame, keeping its in-plane shape."""
        xy = self._to_plane_2d(self._control_points) if len(self._control_points) else None
        cxy = self._to_plane_2d(self._contour_points) if len(self._contour_points) else None
        self._path_point = as_path_point(path_point, "set_path_point")
        if xy is not None:
            self._control_points = self._from_plane_2d(xy)
        if cxy is not None:
            self._contour_points = self._from_plane_2d(cxy)

    # --------------------
    # Accessors
    # --------------------
    def get_type(self) -> str:
        return self.kernel_type

    def get_method(self) -> str:
        return self._method

    def is_closed(self) -> bool:
        return self._closed

    def get_control_points(self) -> List[List[float]]:
        return self._control_points.tolist()

    def get_contour_points(self) -> List[List[float]]:
        return self._contour_points.tolist()

    def get_subdivision_params(self):
        return self._subdivision_type, self._subdivision_number, self._subdivision_spacing

    def set_subdivision_params(self, subdivision_type=SubdivisionType.TOTAL, number: int = 36,
                               spacing: float = 0.0) -> None:
        op = "set_subdivision_params"
        self._subdivision_type = SubdivisionType.check(subdivision_type, op)
        if int(number) < 1:
            raise SegmentationError("The subdivision number must be >= 1.", operation=op)
        if float(spacing) < 0.0:
            raise SegmentationError("The subdivision spacing must be >= 0.0.", operation=op)
        if self._subdivision_type == SubdivisionType.SPACING and float(spacing) <= 0.0:
            raise SegmentationError("The subdivision spacing must be > 0.0 for the SPACING type.",
                                    operation=op)
        self._subdivision_number = int(number)
        self._subdivision_spacing = float(spacing)
        if len(self._control_points):
            self._update_contour_points()

    def set_image(self, image) -> None:
        if not isinstance(image, pv.ImageData):
            raise SegmentationError("The image argument is not a pyvista.ImageData object.",
                                    operation="set_image")
        if image.n_points == 0 or (image.active_scalars is None and not image.point_data):
            raise SegmentationError("The image has no scalar data.", operation="set_image")
        self._image = image

    # --------------------
    # Measures
    # --------------------
    def _planar_polygon(self) -> np.ndarray:
        if len(self._contour_points) < 3:
            raise SegmentationError("The contour has fewer than three points.",
                                    operation="area")
        return self._to_plane_2d(self._contour_points)

    def area(self) -> float:
        xy = self._planar_polygon()
        x, y = xy[:, 0], xy[:, 1]
        return float(abs(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1))) / 2.0)

    def perimeter(self) -> float:
        pts = self._contour_points
        if len(pts) < 2:
            return 0.0
        seg = np.diff(np.vstack([pts, pts[:1]]) if self._closed else pts, axis=0)
        return float(np.linalg.norm(seg, axis=1).sum())

    def get_center(self) -> List[float]:
        """Area centroid of a closed contour (mean of points for degenerate/open curves)."""
        pts = self._contour_points
        if len(pts) == 0:
            return self._path_point.pos.tolist()
        if not self._closed or len(pts) < 3:
            return pts.mean(axis=0).tolist()
        xy = self._to_plane_2d(pts)
        x, y = xy[:, 0], xy[:, 1]
        xn, yn = np.roll(x, -1), np.roll(y, -1)
        cross = x * yn - xn * y
        a = cross.sum() / 2.0
        if abs(a) < 1e-300:
            return pts.mean(axis=0).tolist()
        cx = ((x + xn) * cross).sum() / (6.0 * a)
        cy = ((y + yn) * cross).sum() / (6.0 * a)
        return self._from_plane_2d(np.array([[cx, cy]]))[0].tolist()

    def get_polydata(self) -> pv.PolyData:
        """Contour points as a polyline (closed when the contour is closed)."""
        pts = self._contour_points
        if len(pts) == 0:
            return pv.PolyData()
        ids = list(range(len(pts)))
        if self._closed:
            ids.append(0)
        poly = pv.PolyData(pts.copy())
        poly.lines = np.array([len(ids)] + ids)
        return poly

    # --------------------
    # Control points
    # --------------------
    def _check_control_count(self, n: int, operation: str) -> None:
        if n < self.min_control_number or n > self.max_control_number:
            raise SegmentationError(
                "The number of control points must be between {} and {} for a {} contour."
                .format(self.min_control_number, self.max_control_number, self.kernel_type),
                operation=operation)

    def set_control_points(self, points) -> None:
        op = "set_control_points"
        pts = check_points(points, op, name="control points", error=SegmentationError)
        pts = np.array([self.project(p) for p in pts]).reshape(-1, 3)
        self._control_points = self._control_points_from_input(pts, op)
        self._update_contour_points()

    def set_control_point(self, index: int, point) -> None:
        op = "set_control_point"
        i = check_index(index, len(self._control_points), op, what="control point",
                        error=SegmentationError)
        pt = self.project(check_point(point, op, "control point", SegmentationError))
        self._move_control_point(i, pt)
        self._update_contour_points()

    def _control_points_from_input(self, points: np.ndarray, operation: str) -> np.ndarray:
        self._check_control_count(len(points), operation)
        return points

    def _move_control_point(self, index: int, point: np.ndarray) -> None:
        self._control_points[index] = point

    def _update_contour_points(self) -> None:
        self._contour_points = self._create_contour_points()

    def _create_contour_points(self) -> np.ndarray:
        return self._control_points.copy()

    def _num_samples(self, perimeter: float) -> int:
        """Contour point count of smooth kernels (circle, ellipse)."""
        if self._subdivision_type == SubdivisionType.SPACING and self._subdivision_spacing > 0.0:
            return max(3, int(math.ceil(perimeter / self._subdivision_spacing)))
        return max(3, self._subdivision_number)

    def set_control_points_by_radius(self, center, radius) -> None:
        raise SegmentationError("Contour kernel is not set to 'Circle'.",
                                operation="set_control_points_by_radius")

    def set_threshold_value(self, value) -> None:
        raise SegmentationError("Contour kernel is not set to 'Threshold'.",
                                operation="set_threshold_value")

    # --------------------
    # Derived contours
    # --------------------
    def create_smooth_contour(self, num_modes: int) -> "Contour":
        """
        Return a Fourier-smoothed copy of this contour.

        The copy keeps the kernel type; its method gets a ' + Smoothed' suffix unless it
        already names smoothing. Fewer than three contour points yields an unmodified copy.
        """
        op = "create_smooth_contour"
        if isinstance(num_modes, bool) or not isinstance(num_modes, int) or num_modes < 1:
            raise SegmentationError("The number of modes argument must be an integer >= 1.",
                                    operation=op)
        out = copy.deepcopy(self)
        n = len(self._contour_points)
        if n < 3:
            return out
        num_out = 3 * num_modes if 2 * n < num_modes else n
        out._contour_points = smooth_curve(self._contour_points, closed=self._closed,
                                           num_modes=num_modes, num_out=num_out)
        out._contour_points = np.array([out.project(p) for p in out._contour_points])
        if "Smoothed" not in self._method:
            out._method = self._method + " + Smoothed"
        logger.debug("[Contour] Smoothed %s contour (%d → %d points, %d modes).",
                     self.kernel_type, n, num_out, num_modes)
        return out

    # --------------------
    # File support
    # --------------------
    def _set_state(self, control_points: np.ndarray, contour_points: np.ndarray,
                   method: Optional[str] = None) -> None:
        """Install stored points without regenerating (used by the .ctgr reader)."""
        self._control_points = np.asarray(control_points, float).reshape(-1, 3)
        self._contour_points = np.asarray(contour_points, float).reshape(-1, 3)
        if method:
            self._method = method
