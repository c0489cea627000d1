# -*- coding: utf-8 -*-
# sv/geometry/ops.py

"""
Project: sv
Date: 10/18/2026

Purpose:
--------
Geometric utilities on closed profiles and surfaces used before lofting and by
scripts: profile alignment, loop sampling, normals, centroids, bounding boxes,
point-in-polygon tests and surface area.

Main Tasks:
-----------
    1. align_profile: roll (and optionally flip) a profile so it best matches a reference.
    2. sample_loop / interpolate_closed_curve: evenly resample closed loops.
    3. average_point, bbox, polygon_normal, point_in_poly, surface_area.

Notes:
------
- Profiles are (N, 3) arrays or pyvista.PolyData polylines (their points are used).
- Every public function raises GeometryError prefixed with its own name.
"""

import numpy as np
import pyvista as pv

from ..errors import GeometryError
from ..tools.utils import check_point
from .curves import resample_curve, unit


def as_points(obj, operation, min_points=1) -> np.ndarray:
    """Coerce a PolyData / array-like into an (N, 3) float64 array."""
    if isinstance(obj, pv.DataSet):
        pts = np.asarray(obj.points, dtype=np.float64)
    else:
        try:
            pts = np.asarray(obj, dtype=np.float64)
        except (TypeError, ValueError) as e:
            raise GeometryError("The points argument is not a list of 3D points.",
                                operation=operation) from e
    if pts.ndim != 2 or pts.shape[1] != 3:
        raise GeometryError("The points argument is not a list of 3D points.",
                            context={"shape": pts.shape}, operation=operation)
    if len(pts) < min_points:
        raise GeometryError("At least {} points are required.".format(min_points),
                            operation=operation)
    return pts


def average_point(points) -> np.ndarray:
    """Mean of the input points."""
    pts = as_points(points, "average_point")
    return pts.mean(axis=0)


def bbox(points) -> np.ndarray:
    """[xmin, xmax, ymin, ymax, zmin, zmax] of the input points."""
    pts = as_points(points, "bbox")
    lo = pts.min(axis=0)
    hi = pts.max(axis=0)
    return np.array([lo[0], hi[0], lo[1], hi[1], lo[2], hi[2]])


def polygon_normal(points) -> np.ndarray:
    """
    Unit normal of a closed polygon (Newell's method), oriented by the right-hand
    rule with respect to the point order.
    """
    pts = as_points(points, "polygon_normal", min_points=3)
    nxt = np.roll(pts, -1, axis=0)
    n = np.array([
        np.sum((pts[:, 1] - nxt[:, 1]) * (pts[:, 2] + nxt[:, 2])),
        np.sum((pts[:, 2] - nxt[:, 2]) * (pts[:, 0] + nxt[:, 0])),
        np.sum((pts[:, 0] - nxt[:, 0]) * (pts[:, 1] + nxt[:, 1])),
    ])
    if np.linalg.norm(n) < 1e-14:
        raise GeometryError("The polygon is degenerate (zero area).", operation="polygon_normal")
    return unit(n)


def plane_axes(normal: np.ndarray):
    """Two orthonormal in-plane axes (u, v) with u × v = normal."""
    n = unit(normal)
    ref = np.array([1.0, 0.0, 0.0]) if abs(n[0]) < 0.9 else np.array([0.0, 1.0, 0.0])
    u = unit(np.cross(ref, n))
    v = np.cross(n, u)
    return u, v


def point_in_poly(point, polygon, use_previous_polygon=False) -> bool:
    """
    Test whether a point lies inside a planar closed polygon.

    The point is projected onto the polygon plane; the test is a 2D ray-crossing test
    in the plane coordinates.
    """
    pt = check_point(point, "point_in_poly", error=GeometryError)
    poly = as_points(polygon, "point_in_poly", min_points=3)
    center = poly.mean(axis=0)
    u, v = plane_axes(polygon_normal(poly))
    xy = np.column_stack([(poly - center) @ u, (poly - center) @ v])
    px, py = (pt - center) @ u, (pt - center) @ v

    inside = False
    n = len(xy)
    j = n - 1
    for i in range(n):
        xi, yi = xy[i]
        xj, yj = xy[j]
        if (yi > py) != (yj > py):
            x_cross = xj + (py - yj) * (xi - xj) / (yi - yj)
            if px < x_cross:
                inside = not inside
        j = i
    return inside


def sample_loop(points, num_points: int) -> np.ndarray:
    """
    Evenly resample a closed loop to `num_points` points (no duplicated end point).
    """
    pts = as_points(points, "sample_loop", min_points=3)
    if num_points < 3:
        raise GeometryError("The number of sample points must be >= 3.", operation="sample_loop")
    if np.allclose(pts[0], pts[-1]):
        pts = pts[:-1]
    return resample_curve(pts, int(num_points), closed=True)


def interpolate_closed_curve(points, num_points: int) -> np.ndarray:
    """
    Periodic cubic spline resampling of a closed curve.

    Uses scipy's parametric B-spline with per=1 so the result is C2 across the seam.
    """
    from scipy.interpolate import splprep, splev

    pts = as_points(points, "interpolate_closed_curve", min_points=3)
    if np.allclose(pts[0], pts[-1]):
        pts = pts[:-1]
    closed = np.vstack([pts, pts[:1]])
    k = 3 if len(pts) > 3 else len(pts) - 1
    try:
        tck, _ = splprep(closed.T, s=0.0, k=k, per=1)
    except ValueError as e:
        raise GeometryError("Unable to fit a closed spline: {}".format(e),
                            operation="interpolate_closed_curve") from e
    u = np.linspace(0.0, 1.0, int(num_points), endpoint=False)
    x, y, z = splev(u, tck)
    return np.column_stack((x, y, z))


def orient_profile(points, normal) -> np.ndarray:
    """Return the profile ordered counter-clockwise around `normal`."""
    pts = as_points(points, "orient_profile", min_points=3)
    n = check_point(normal, "orient_profile", name="normal", error=GeometryError)
    if np.dot(polygon_normal(pts), n) < 0.0:
        return pts[::-1].copy()
    return pts.copy()


def align_profile(reference, curve, use_distance=True) -> np.ndarray:
    """
    Reorder `curve` so its points line up with `reference`.

    Parameters
    ----------
    reference : (N, 3) array or PolyData
        Profile to align to.
    curve : (N, 3) array or PolyData
        Profile to reorder; must have the same number of points.
    use_distance : bool
        True: choose the cyclic shift (and direction) minimizing the summed squared
        distance. False: match orientation and start at the point whose direction
        from the centroid best matches the reference's first point.

    Returns
    -------
    np.ndarray
        (N, 3) reordered copy of `curve`.
    """
    ref = as_points(reference, "align_profile", min_points=3)
    cur = as_points(curve, "align_profile", min_points=3)
    if ref.shape != cur.shape:
        raise GeometryError("The profiles do not have the same number of points.",
                            context={"reference": len(ref), "curve": len(cur)},
                            operation="align_profile")

    if not use_distance:
        if np.dot(polygon_normal(ref), polygon_normal(cur)) < 0.0:
            cur = cur[::-1]
        d_ref = unit(ref[0] - ref.mean(axis=0))
        dirs = cur - cur.mean(axis=0)
        dirs /= np.maximum(np.linalg.norm(dirs, axis=1), 1e-12)[:, None]
        return np.roll(cur, -int(np.argmax(dirs @ d_ref)), axis=0)

    def best_shift(ring):
        best, best_score = 0, None
        for shift in range(len(ring)):
            score = np.sum((ref - np.roll(ring, -shift, axis=0)) ** 2)
            if best_score is None or score < best_score:
                best, best_score = shift, score
        return np.roll(ring, -best, axis=0), best_score

    aligned, score = best_shift(cur)
    flipped, score_flip = best_shift(cur[::-1].copy())
    return flipped if score_flip < score else aligned


def surface_area(surface) -> float:
    """Total area of a surface (triangulated first)."""
    if not isinstance(surface, pv.PolyData):
        raise GeometryError("The surface argument is not a PolyData object.",
                            operation="surface_area")
    return float(surface.triangulate().area)
