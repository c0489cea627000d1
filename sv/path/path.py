# -*- coding: utf-8 -*-
# sv/path/path.py

"""
Project: sv
Date: 10/18/2026

Purpose:
--------
Vessel centerline path: an ordered list of 3D control points interpolated by a cubic
spline and sampled into curve (path) points, each carrying a local frame
(position, unit tangent, rotation vector).

Main Tasks:
-----------
    1. Edit control points (add by distance or index, remove, replace) with validation.
    2. Sample the spline according to the calculation method (TOTAL, SUBDIVISION, SPACING).
    3. Propagate rotation vectors along the curve by parallel transport.
    4. Fourier-smooth a path into a new one and export the curve as pyvista.PolyData.

Pipeline:
---------
control points → splprep(s=0, chord-length u) → per-segment sampling → splev(pos, der=1)
            → unit tangents → transported rotation vectors → PathPoint list

Notes:
------
- Curve points are recomputed lazily after any edit.
- Paths read from a .pth file keep their stored path points until edited.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional

import numpy as np
import pyvista as pv
from scipy.interpolate import splev, splprep

from ..errors import PathError
from ..geometry.curves import perpendicular_unit, smooth_curve, transport_frames, unit
from ..tools.utils import check_index, check_point
from .calc_method import CalculationMethod

logger = logging.getLogger(__name__)


@dataclass
class PathPoint:
    """One sampled point of a path with its local frame."""
    id: int
    pos: np.ndarray
    tangent: np.ndarray
    rotation: np.ndarray

    def as_dict(self):
        return {"id": self.id, "pos": self.pos.tolist(), "tangent": self.tangent.tolist(),
                "rotation": self.rotation.tolist()}


class Path:
    """
    Path defined by control points.

    Parameters
    ----------
    method : str
        Calculation method name (SPACING, SUBDIVISION or TOTAL).
    calculation_number : int
        Total number of curve points (TOTAL) or subdivisions per segment (SUBDIVISION).
    spacing : float
        Distance between curve points (SPACING).
    """

    def __init__(self, method: str = CalculationMethod.TOTAL, calculation_number: int = 100,
                 spacing: float = 0.0):
        self._method = CalculationMethod.check(method, operation="Path")
        self._calculation_number = self._check_calculation_number(calculation_number, "Path")
        self._spacing = self._check_spacing(spacing, "Path")
        self._control_points: List[np.ndarray] = []
        self._path_points: Optional[List[PathPoint]] = []
        self._dirty = False

    # --------------------
    # Calculation parameters
    # --------------------
    @staticmethod
    def _check_calculation_number(value, operation):
        try:
            v = int(value)
        except (TypeError, ValueError):
            raise PathError("The calculation number argument is not an integer.", operation=operation)
        if v < 0:
            raise PathError("The calculation number argument must be >= 0.", operation=operation)
        return v

    @staticmethod
    def _check_spacing(value, operation):
        try:
            v = float(value)
        except (TypeError, ValueError):
            raise PathError("The spacing argument is not a float.", operation=operation)
        if v < 0.0:
            raise PathError("The spacing argument must be >= 0.0.", operation=operation)
        return v

    def get_method(self) -> str:
        return self._method

    def set_method(self, method: str) -> None:
        self._method = CalculationMethod.check(method, operation="set_method")
        self._dirty = True

    def get_calculation_number(self) -> int:
        return self._calculation_number

    def set_calculation_number(self, number: int) -> None:
        self._calculation_number = self._check_calculation_number(number, "set_calculation_number")
        self._dirty = True

    def get_spacing(self) -> float:
        return self._spacing

    def set_spacing(self, spacing: float) -> None:
        self._spacing = self._check_spacing(spacing, "set_spacing")
        self._dirty = True

    # --------------------
    # Control points
    # --------------------
    def get_num_control_points(self) -> int:
        return len(self._control_points)

    def get_control_points(self) -> List[List[float]]:
        return [p.tolist() for p in self._control_points]

    def _find_control_point(self, point: np.ndarray, tol: float = 1e-12) -> int:
        for i, cp in enumerate(self._control_points):
            if np.linalg.norm(cp - point) <= tol:
                return i
        return -1

    def insert_index_by_distance(self, point) -> int:
        """
        Index at which a new control point is inserted when no index is given:
        inside the nearest segment, or before/after the path ends when the point
        projects beyond them.
        """
        pt = check_point(point, "insert_index_by_distance", error=PathError)
        cps = self._control_points
        n = len(cps)
        if n < 2:
            return n
        best, best_dist, best_t = 0, None, 0.0
        for i in range(n - 1):
            a, b = cps[i], cps[i + 1]
            ab = b - a
            denom = float(np.dot(ab, ab))
            t = float(np.dot(pt - a, ab) / denom) if denom > 0.0 else 0.0
            proj = a + min(max(t, 0.0), 1.0) * ab
            dist = float(np.linalg.norm(pt - proj))
            if best_dist is None or dist < best_dist:
                best, best_dist, best_t = i, dist, t
        if best == 0 and best_t < 0.0:
            return 0
        if best == n - 2 and best_t > 1.0:
            return n
        return best + 1

    def add_control_point(self, point, index: Optional[int] = None) -> int:
        """
        Add a control point.

        Parameters
        ----------
        point : list[float]
            [x, y, z] coordinates.
        index : int, optional
            Insert position (0 <= index <= number of control points). When omitted the
            position is chosen by distance to the existing segments.

        Returns
        -------
        int
            Index of the inserted control point.

        Raises
        ------
        PathError
            If the point is malformed, already defined, or the index is out of range.
        """
        op = "add_control_point"
        pt = check_point(point, op, name="control point", error=PathError)
        if self._find_control_point(pt) != -1:
            raise PathError("The control point ({}, {}, {}) has already been defined for the path."
                            .format(*[float(v) for v in pt]), operation=op)
        n = len(self._control_points)
        if index is None:
            index = self.insert_index_by_distance(pt)
        else:
            if isinstance(index, bool) or not isinstance(index, int):
                raise PathError("The index argument is not an integer.", operation=op)
            if index < 0 or index > n:
                raise PathError("The index argument must be between 0 and {}.".format(n), operation=op)
        self._control_points.insert(index, pt)
        self._dirty = True
        return index

    def remove_control_point(self, index: int) -> None:
        op = "remove_control_point"
        i = check_index(index, len(self._control_points), op, what="control point", error=PathError)
        del self._control_points[i]
        self._dirty = True

    def replace_control_point(self, index: int, point) -> None:
        op = "replace_control_point"
        i = check_index(index, len(self._control_points), op, what="control point", error=PathError)
        pt = check_point(point, op, name="control point", error=PathError)
        found = self._find_control_point(pt)
        if found not in (-1, i):
            raise PathError("The control point ({}, {}, {}) has already been defined for the path."
                            .format(*[float(v) for v in pt]), operation=op)
        self._control_points[i] = pt
        self._dirty = True

    # --------------------
    # Curve points
    # --------------------
    def _segment_intervals(self, cps: np.ndarray) -> List[int]:
        """Number of curve intervals per control-point segment for the current method."""
        n_seg = len(cps) - 1
        lengths = np.linalg.norm(np.diff(cps, axis=0), axis=1)
        if self._method == CalculationMethod.SUBDIVISION:
            return [max(1, self._calculation_number)] * n_seg
        if self._method == CalculationMethod.SPACING:
            if self._spacing <= 0.0:
                raise PathError("The spacing must be > 0.0 for the SPACING calculation method.",
                                operation="get_curve_points")
            return [max(1, int(math.ceil(length / self._spacing))) for length in lengths]

        # TOTAL: distribute (total - 1) intervals over segments by length, >= 1 each.
        total_intervals = max(self._calculation_number - 1, n_seg)
        share = lengths / max(float(lengths.sum()), 1e-300) * total_intervals
        counts = np.maximum(np.floor(share).astype(int), 1)
        while counts.sum() < total_intervals:
            counts[int(np.argmax(share - counts))] += 1
        while counts.sum() > total_intervals:
            candidates = np.where(counts > 1)[0]
            counts[candidates[int(np.argmin((share - counts)[candidates]))]] -= 1
        return counts.tolist()

    def _compute_path_points(self) -> List[PathPoint]:
        cps = np.array(self._control_points, dtype=np.float64).reshape(-1, 3)
        n = len(cps)
        if n == 0:
            return []
        if n == 1:
            tangent = np.array([0.0, 0.0, 1.0])
            return [PathPoint(0, cps[0].copy(), tangent, perpendicular_unit(tangent))]

        k = min(3, n - 1)
        try:
            tck, u_cp = splprep(cps.T, s=0.0, k=k)
        except (ValueError, TypeError) as e:
            raise PathError("Unable to interpolate the control points: {}".format(e),
                            operation="get_curve_points") from e

        params: List[float] = []
        for i, m in enumerate(self._segment_intervals(cps)):
            params.extend(np.linspace(u_cp[i], u_cp[i + 1], m, endpoint=False).tolist())
        params.append(float(u_cp[-1]))
        u = np.asarray(params)

        pos = np.column_stack(splev(u, tck))
        der = np.column_stack(splev(u, tck, der=1))
        tangents = np.array([unit(d) for d in der])
        rotations = transport_frames(tangents)
        return [PathPoint(i, pos[i], tangents[i], rotations[i]) for i in range(len(u))]

    def get_path_points(self) -> List[PathPoint]:
        if self._dirty or self._path_points is None:
            self._path_points = self._compute_path_points()
            self._dirty = False
            logger.debug("[Path] Computed %d curve points from %d control points.",
                         len(self._path_points), len(self._control_points))
        return self._path_points

    def set_path_points(self, path_points: List[PathPoint]) -> None:
        """Install precomputed path points (used when reading .pth files)."""
        self._path_points = list(path_points)
        self._dirty = False

    def get_num_curve_points(self) -> int:
        return len(self.get_path_points())

    def get_curve_points(self) -> List[List[float]]:
        return [p.pos.tolist() for p in self.get_path_points()]

    def _curve_point(self, index, operation) -> PathPoint:
        pts = self.get_path_points()
        return pts[check_index(index, len(pts), operation, what="curve point", error=PathError)]

    def get_curve_point(self, index: int) -> List[float]:
        return self._curve_point(index, "get_curve_point").pos.tolist()

    def get_curve_tangent(self, index: int) -> List[float]:
        return self._curve_point(index, "get_curve_tangent").tangent.tolist()

    def get_curve_normal(self, index: int) -> List[float]:
        return self._curve_point(index, "get_curve_normal").rotation.tolist()

    def get_curve_frame(self, index: int) -> PathPoint:
        return self._curve_point(index, "get_curve_frame")

    # --------------------
    # Derived objects
    # --------------------
    def smooth(self, sample_rate: int, num_modes: int, control_point_based: bool = False) -> "Path":
        """
        Create a smoothed copy of this path.

        Parameters
        ----------
        sample_rate : int
            Keep every `sample_rate`-th point (the last point is always kept).
        num_modes : int
            Number of Fourier modes retained.
        control_point_based : bool
            Smooth the control points (True) or the curve points (False).

        Returns
        -------
        Path
            New path whose control points are the smoothed samples.
        """
        op = "smooth"
        if int(sample_rate) < 1:
            raise PathError("The sample rate argument must be >= 1.", operation=op)
        if int(num_modes) < 1:
            raise PathError("The number of modes argument must be >= 1.", operation=op)
        src = self.get_control_points() if control_point_based else self.get_curve_points()
        src = np.asarray(src, dtype=np.float64).reshape(-1, 3)
        if len(src) < 3:
            raise PathError("The path needs at least three points to be smoothed.", operation=op)

        idx = list(range(0, len(src), int(sample_rate)))
        if idx[-1] != len(src) - 1:
            idx.append(len(src) - 1)
        samples = src[idx]
        smoothed = smooth_curve(samples, closed=False, num_modes=int(num_modes),
                                num_out=len(samples)) if len(samples) >= 3 else samples

        out = Path(self._method, self._calculation_number, self._spacing)
        for p in smoothed:
            if out._find_control_point(p, tol=1e-9) == -1:
                out._control_points.append(np.asarray(p, dtype=np.float64))
        out._dirty = True
        logger.info("[Path] Smoothed %d points into %d control points (%d modes).",
                    len(src), len(out._control_points), int(num_modes))
        return out

    def get_polydata(self) -> pv.PolyData:
        """Curve points as a polyline with `tangent` and `rotation` point arrays."""
        pts = self.get_path_points()
        if not pts:
            return pv.PolyData()
        pos = np.array([p.pos for p in pts])
        poly = pv.lines_from_points(pos) if len(pos) > 1 else pv.PolyData(pos)
        poly.point_data["tangent"] = np.array([p.tangent for p in pts])
        poly.point_data["rotation"] = np.array([p.rotation for p in pts])
        return poly
