# -*- coding: utf-8 -*-
# sv/segmentation/image_based.py

"""
Project: sv
Date: 10/18/2026

Purpose:
--------
Image-driven contour kernels: Threshold (iso-value contour) and LevelSet (geodesic
active contour). Both reslice the image on the path plane and extract a closed curve.

Main Tasks:
-----------
    1. Reslice a `pyvista.ImageData` on a square plane of `reslice_size` centered at
       the path point, with axes (rotation, tangent × rotation).
    2. Threshold: iso-contour of the slice at the threshold value, keeping the closed
       curve that encloses the path point (or the nearest one).
    3. LevelSet: evolve a geodesic active contour from a disk seeded at the path point,
       then extract the 0.5 iso-line of the final level set.

Notes:
------
- Control points of image contours are [center, scaling point]; moving index 0 translates
  the contour and index 1 scales it about the center.
- Contour points are resampled to the subdivision settings after extraction.
"""

import logging
import math
from typing import Optional

import numpy as np
import pyvista as pv
from skimage import measure
from skimage import segmentation as sk_segmentation

from ..errors import SegmentationError
from ..geometry.curves import resample_curve
from .contour import Contour

logger = logging.getLogger(__name__)

MAX_RESLICE_SAMPLES = 512


def reslice_image(image: pv.ImageData, path_point, reslice_size: float,
                  operation: str = "create"):
    """
    Sample an image on a square plane centered at a path point.

    Parameters
    ----------
    image : pyvista.ImageData
    path_point : PathPoint
        Frame of the plane; the plane normal is the tangent.
    reslice_size : float
        Edge length of the square plane.

    Returns
    -------
    (values, coords) : (np.ndarray, np.ndarray)
        values is an (n, n) array indexed [i along rotation, j along tangent × rotation];
        coords is the (n,) array of in-plane coordinates shared by both axes.
    """
    if image is None:
        raise SegmentationError("No image has been set for the contour.", operation=operation)
    spacing = min(float(s) for s in image.spacing) or 1.0
    n = int(min(MAX_RESLICE_SAMPLES, max(16, math.ceil(reslice_size / spacing) + 1)))
    half = reslice_size / 2.0
    coords = np.linspace(-half, half, n)

    u = path_point.rotation
    v = np.cross(path_point.tangent, u)
    a, b = np.meshgrid(coords, coords, indexing="ij")
    pts = path_point.pos + a.reshape(-1, 1) * u + b.reshape(-1, 1) * v

    name = image.active_scalars_name or image.point_data.keys()[0]
    sampled = pv.PolyData(pts).sample(image)
    values = np.asarray(sampled.point_data[name], dtype=float)
    if values.ndim > 1:
        values = np.linalg.norm(values, axis=1)
    valid = sampled.point_data.get("vtkValidPointMask")
    if valid is not None:
        valid = np.asarray(valid).astype(bool)
        if not valid.any():
            raise SegmentationError("The reslice plane does not intersect the image.",
                                    operation=operation)
        values[~valid] = values[valid].min()
    logger.debug("[Reslice] %dx%d samples, size=%g, array='%s'.", n, n, reslice_size, name)
    return values.reshape(n, n), coords


def _index_to_plane(contour_rc: np.ndarray, coords: np.ndarray) -> np.ndarray:
    step = coords[1] - coords[0]
    return coords[0] + contour_rc * step


def _pick_closed_contour(curves, origin=np.zeros(2)) -> Optional[np.ndarray]:
    """Prefer the smallest closed curve around the origin, else the nearest curve."""
    enclosing = []
    for c in curves:
        closed = len(c) > 3 and np.allclose(c[0], c[-1])
        if closed and measure.points_in_poly(origin[None, :], c)[0]:
            x, y = c[:, 0], c[:, 1]
            area = abs(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1))) / 2.0
            enclosing.append((area, c))
    if enclosing:
        return min(enclosing, key=lambda t: t[0])[1]
    if not curves:
        return None
    return min(curves, key=lambda c: np.linalg.norm(c - origin, axis=1).min())


class ImageContour(Contour):
    """Common part of the image-driven kernels (reslicing, extraction, center/scale edits)."""

    min_control_number = 2
    max_control_number = 2

    def __init__(self, path_point=None, reslice_size: float = 5.0):
        super(ImageContour, self).__init__(path_point=path_point, closed=True)
        self._reslice_size = float(reslice_size)
        self._raw_points = None

    def get_reslice_size(self) -> float:
        return self._reslice_size

    def set_reslice_size(self, size: float) -> None:
        if float(size) <= 0.0:
            raise SegmentationError("The reslice size argument must be > 0.0.",
                                    operation="set_reslice_size")
        self._reslice_size = float(size)

    def set_path_point(self, path_point) -> None:
        super(ImageContour, self).set_path_point(path_point)
        if self._raw_points is not None:
            self._raw_points = self._contour_points.copy()

    def set_control_points(self, points) -> None:
        raise SegmentationError("Control points of a {} contour are computed from the image; "
                                "call create().".format(self.kernel_type),
                                operation="set_control_points")

    def create(self) -> None:
        """Extract the contour from the image at the current path point."""
        op = "create"
        values, coords = reslice_image(self._image, self._path_point, self._reslice_size, op)
        curves = self._extract(values, op)
        best = _pick_closed_contour([_index_to_plane(c, coords) for c in curves])
        if best is None:
            raise SegmentationError("No {} contour was found at the path point."
                                    .format(self.kernel_type), operation=op)
        if np.allclose(best[0], best[-1]):
            best = best[:-1]
        pts = self._from_plane_2d(best)
        self._raw_points = pts
        self._update_contour_points()
        center = np.asarray(self.get_center())
        self._control_points = np.vstack([center, self._contour_points[0]])
        logger.info("[%s] Extracted contour with %d points (area=%.4g).",
                    self.kernel_type, len(self._contour_points), self.area())

    def _extract(self, values: np.ndarray, operation: str):
        raise NotImplementedError

    def _create_contour_points(self):
        raw = self._raw_points
        if raw is None or len(raw) < 3:
            return self._contour_points.copy()
        seg = np.diff(np.vstack([raw, raw[:1]]), axis=0)
        perimeter = float(np.linalg.norm(seg, axis=1).sum())
        return resample_curve(raw, self._num_samples(perimeter), closed=True)

    def _move_control_point(self, index, point):
        center = self._control_points[0]
        raw = self._raw_points if self._raw_points is not None else self._contour_points
        if index == 0:
            shift = point - center
            self._control_points = self._control_points + shift
            self._raw_points = raw + shift
            return
        old = np.linalg.norm(self._control_points[1] - center)
        new = np.linalg.norm(point - center)
        if old <= 0.0 or new <= 0.0:
            raise SegmentationError("The scaling point coincides with the center.",
                                    operation="set_control_point")
        self._raw_points = center + (raw - center) * (new / old)
        self._control_points[1] = point

    def _set_state(self, control_points, contour_points, method=None):
        super(ImageContour, self)._set_state(control_points, contour_points, method)
        self._raw_points = self._contour_points.copy()


class Threshold(ImageContour):
    """Iso-value contour of the resliced image."""

    kernel_type = "Threshold"
    default_method = "Threshold"

    def __init__(self, path_point=None, reslice_size: float = 5.0, threshold=None):
        super(Threshold, self).__init__(path_point=path_point, reslice_size=reslice_size)
        self._threshold = None
        if threshold is not None:
            self.set_threshold_value(threshold)

    def set_threshold_value(self, value) -> None:
        try:
            self._threshold = float(value)
        except (TypeError, ValueError):
            raise SegmentationError("The threshold argument is not a float.",
                                    operation="set_threshold_value")

    def get_threshold_value(self) -> Optional[float]:
        return self._threshold

    def _extract(self, values, operation):
        if self._threshold is None:
            raise SegmentationError("The threshold value has not been set.", operation=operation)
        return measure.find_contours(values, self._threshold)


class LevelSet(ImageContour):
    """
    Geodesic active contour seeded with a disk at the path point.

    Parameters (see `set_level_set_parameters`)
    ----------
    iterations : int
        Number of evolution steps.
    smoothing : int
        Curvature smoothing steps per iteration.
    balloon : float
        Expansion force (> 0 grows the seed, < 0 shrinks it).
    sigma : float
        Gaussian scale of the edge map.
    seed_radius : float, optional
        Seed disk radius; defaults to a tenth of the reslice size.
    """

    kernel_type = "LevelSet"
    default_method = "LevelSet"

    def __init__(self, path_point=None, reslice_size: float = 5.0):
        super(LevelSet, self).__init__(path_point=path_point, reslice_size=reslice_size)
        self._params = {"iterations": 200, "smoothing": 1, "balloon": 1.0, "sigma": 1.0,
                        "seed_radius": None}

    def get_level_set_parameters(self):
        return dict(self._params)

    def set_level_set_parameters(self, **kwargs) -> None:
        op = "set_level_set_parameters"
        for key, value in kwargs.items():
            if key not in self._params:
                raise SegmentationError("Unknown level set parameter '{}'. Valid names are: {}."
                                        .format(key, ", ".join(sorted(self._params))), operation=op)
            if value is None and key == "seed_radius":
                self._params[key] = None
                continue
            if key in ("iterations", "smoothing"):
                if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                    raise SegmentationError("The {} argument must be an integer >= 1.".format(key),
                                            operation=op)
            elif key in ("sigma", "seed_radius") and float(value) <= 0.0:
                raise SegmentationError("The {} argument is <= 0.0.".format(key), operation=op)
            self._params[key] = value if key in ("iterations", "smoothing") else float(value)

    def _extract(self, values, operation):
        p = self._params
        n = values.shape[0]
        lo, hi = float(values.min()), float(values.max())
        norm = (values - lo) / (hi - lo) if hi > lo else np.zeros_like(values)
        edge_map = sk_segmentation.inverse_gaussian_gradient(norm, sigma=p["sigma"])

        radius = p["seed_radius"] if p["seed_radius"] is not None else self._reslice_size / 10.0
        radius_px = max(2.0, radius / self._reslice_size * (n - 1))
        ii, jj = np.mgrid[:n, :n]
        c = (n - 1) / 2.0
        seed = ((ii - c) ** 2 + (jj - c) ** 2 <= radius_px ** 2).astype(np.int8)

        level = sk_segmentation.morphological_geodesic_active_contour(
            edge_map, p["iterations"], init_level_set=seed,
            smoothing=p["smoothing"], balloon=p["balloon"])
        logger.debug("[LevelSet] Evolved %d iterations, %d pixels inside.",
                     p["iterations"], int(level.sum()))
        return measure.find_contours(level.astype(float), 0.5)
