# -*- coding: utf-8 -*-
# sv/segmentation/polygon.py

"""
Project: sv
Date: 10/18/2026

Purpose:
--------
Polygon and spline-polygon contour kernels.

Control point layout:
    [0]    center of the vertices
    [1]    scaling point (moving it scales the contour about the center)
    [2..]  polygon vertices

Main Tasks:
-----------
    1. Accept vertex lists (>= 3) and derive the center and scaling points.
    2. Translate (index 0), scale (index 1) or move a vertex (index >= 2).
    3. Interpolate contour points linearly (Polygon) or with a periodic cubic spline
       (SplinePolygon) following the subdivision rules:
         TOTAL        ceil(number / vertices)           (closed)
                      ceil((number - 1) / (vertices-1)) (open)
         SUBDIVISION  number per segment
         SPACING      ceil(segment length / spacing)
"""

import math
from typing import List

import numpy as np
from scipy.interpolate import splev, splprep

from ..errors import SegmentationError
from .contour import Contour, SubdivisionType


class Polygon(Contour):
    """Polygonal contour with linear interpolation between vertices."""

    kernel_type = "Polygon"
    min_control_number = 4
    max_control_number = 200

    def __init__(self, path_point=None, closed: bool = True):
        super(Polygon, self).__init__(path_point=path_point, closed=closed)

    def _control_points_from_input(self, points, operation):
        if len(points) < 3:
            raise SegmentationError("A {} contour needs at least 3 control points."
                                    .format(self.kernel_type), operation=operation)
        if len(points) + 2 > self.max_control_number:
            raise SegmentationError("A {} contour accepts at most {} control points."
                                    .format(self.kernel_type, self.max_control_number - 2),
                                    operation=operation)
        center = points.mean(axis=0)
        return np.vstack([center, points[0], points])

    def get_vertices(self) -> List[List[float]]:
        return self._control_points[2:].tolist()

    def _move_control_point(self, index, point):
        cps = self._control_points
        center = cps[0]
        if index == 0:
            self._control_points = cps + (point - center)
        elif index == 1:
            old = np.linalg.norm(cps[1] - center)
            new = np.linalg.norm(point - center)
            if old <= 0.0 or new <= 0.0:
                raise SegmentationError("The scaling point coincides with the center.",
                                        operation="set_control_point")
            self._control_points = center + (cps - center) * (new / old)
            self._control_points[1] = point
        else:
            cps[index] = point

    def _interval_counts(self, vertices: np.ndarray) -> List[int]:
        n = len(vertices)
        segments = n if self._closed else n - 1
        kind = self._subdivision_type
        if kind == SubdivisionType.SPACING and self._subdivision_spacing > 0.0:
            counts = []
            for k in range(segments):
                d = np.linalg.norm(vertices[(k + 1) % n] - vertices[k])
                counts.append(max(1, int(math.ceil(d / self._subdivision_spacing))))
            return counts
        if kind == SubdivisionType.SUBDIVISION:
            return [max(1, self._subdivision_number)] * segments
        if self._closed:
            per = int(math.ceil(self._subdivision_number / float(n)))
        else:
            per = int(math.ceil((self._subdivision_number - 1) / float(max(n - 1, 1))))
        return [max(1, per)] * segments

    def _create_contour_points(self):
        vertices = self._control_points[2:]
        n = len(vertices)
        counts = self._interval_counts(vertices)
        out = []
        for k, m in enumerate(counts):
            p1, p2 = vertices[k], vertices[(k + 1) % n]
            d = (p2 - p1) / m
            for i in range(m):
                out.append(p1 + i * d)
        if not self._closed:
            out.append(vertices[-1])
        return np.array(out)


class SplinePolygon(Polygon):
    """Polygon vertices interpolated by a (periodic when closed) cubic spline."""

    kernel_type = "SplinePolygon"

    def _create_contour_points(self):
        vertices = self._control_points[2:]
        n = len(vertices)
        total = int(sum(self._interval_counts(vertices)))
        pts = np.vstack([vertices, vertices[:1]]) if self._closed else vertices
        k = 3 if n > 3 else n - 1
        try:
            tck, u = splprep(pts.T, s=0.0, k=k, per=1 if self._closed else 0)
        except (ValueError, TypeError) as e:
            raise SegmentationError("Unable to fit a spline through the vertices: {}".format(e),
                                    operation="set_control_points") from e
        if self._closed:
            params = np.linspace(0.0, 1.0, total, endpoint=False)
        else:
            params = np.linspace(0.0, 1.0, total + 1)
        x, y, z = splev(params, tck)
        return np.column_stack((x, y, z))
