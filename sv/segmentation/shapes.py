# -*- coding: utf-8 -*-
# sv/segmentation/shapes.py

"""
Analytic contour kernels: Circle and Ellipse.

Circle  control points: [center, boundary point]
Ellipse control points: [center, major-axis point, minor-axis point]
"""

import math

import numpy as np

from ..errors import SegmentationError
from ..geometry.curves import unit
from ..tools.utils import check_point
from .contour import Contour


class Circle(Contour):
    """
    Circular contour.

    Parameters
    ----------
    radius : float, optional
        Radius; builds the contour centered at the path point when given.
    center : list[float], optional
        Center (projected onto the path plane); defaults to the path point.
    path_point : PathPoint or dict, optional
    """

    kernel_type = "Circle"
    min_control_number = 2
    max_control_number = 2

    def __init__(self, radius=None, center=None, path_point=None):
        super(Circle, self).__init__(path_point=path_point, closed=True)
        if radius is not None:
            if center is None:
                center = self._path_point.pos.tolist()
            self.set_control_points_by_radius(center, radius)

    def set_control_points_by_radius(self, center, radius) -> None:
        op = "set_control_points_by_radius"
        c = self.project(check_point(center, op, "center", SegmentationError))
        try:
            r = float(radius)
        except (TypeError, ValueError):
            raise SegmentationError("Radius argument is not a float.", operation=op)
        if r <= 0.0:
            raise SegmentationError("Radius argument must be > 0.0.", operation=op)
        u, _ = self._axes()
        self._control_points = np.vstack([c, c + r * u])
        self._update_contour_points()

    def get_radius(self) -> float:
        if len(self._control_points) < 2:
            return 0.0
        return float(np.linalg.norm(self._control_points[1] - self._control_points[0]))

    def _control_points_from_input(self, points, operation):
        if len(points) != 2:
            raise SegmentationError("A Circle contour needs exactly 2 control points "
                                    "(center and a point on the circle).", operation=operation)
        if np.linalg.norm(points[1] - points[0]) <= 0.0:
            raise SegmentationError("The circle radius is zero.", operation=operation)
        return points

    def _move_control_point(self, index, point):
        if index == 0:
            self._control_points = self._control_points + (point - self._control_points[0])
        else:
            if np.linalg.norm(point - self._control_points[0]) <= 0.0:
                raise SegmentationError("The circle radius is zero.", operation="set_control_point")
            self._control_points[1] = point

    def _create_contour_points(self):
        c, p = self._control_points
        r = float(np.linalg.norm(p - c))
        e1 = unit(p - c)
        e2 = np.cross(self._path_point.tangent, e1)
        n = self._num_samples(2.0 * math.pi * r)
        theta = np.linspace(0.0, 2.0 * math.pi, n, endpoint=False)
        return c + r * (np.cos(theta)[:, None] * e1 + np.sin(theta)[:, None] * e2)


class Ellipse(Contour):
    """
    Elliptical contour from a center and two axis points.

    The first axis point fixes the major axis direction and length; the distance of
    the second one from that axis sets the minor radius.
    """

    kernel_type = "Ellipse"
    min_control_number = 3
    max_control_number = 3

    def __init__(self, path_point=None):
        super(Ellipse, self).__init__(path_point=path_point, closed=True)

    def _control_points_from_input(self, points, operation):
        if len(points) != 3:
            raise SegmentationError("An Ellipse contour needs exactly 3 control points "
                                    "(center and two axis points).", operation=operation)
        return self._normalized(points, operation)

    def _normalized(self, points, operation):
        c, p1, p2 = points
        a = float(np.linalg.norm(p1 - c))
        if a <= 0.0:
            raise SegmentationError("The first ellipse axis has zero length.", operation=operation)
        e1 = (p1 - c) / a
        e2 = np.cross(self._path_point.tangent, e1)
        b = abs(float(np.dot(p2 - c, e2)))
        if b <= 0.0:
            raise SegmentationError("The second ellipse axis point lies on the first axis.",
                                    operation=operation)
        return np.vstack([c, p1, c + b * e2])

    def _move_control_point(self, index, point):
        if index == 0:
            self._control_points = self._control_points + (point - self._control_points[0])
            return
        pts = self._control_points.copy()
        pts[index] = point
        self._control_points = self._normalized(pts, "set_control_point")

    def get_radii(self):
        c, p1, p2 = self._control_points
        return float(np.linalg.norm(p1 - c)), float(np.linalg.norm(p2 - c))

    def _create_contour_points(self):
        c, p1, p2 = self._control_points
        a, b = float(np.linalg.norm(p1 - c)), float(np.linalg.norm(p2 - c))
        e1, e2 = unit(p1 - c), unit(p2 - c)
        h = ((a - b) / (a + b)) ** 2
        perimeter = math.pi * (a + b) * (1 + 3 * h / (10 + math.sqrt(4 - 3 * h)))
        n = self._num_samples(perimeter)
        theta = np.linspace(0.0, 2.0 * math.pi, n, endpoint=False)
        return c + a * np.cos(theta)[:, None] * e1 + b * np.sin(theta)[:, None] * e2
