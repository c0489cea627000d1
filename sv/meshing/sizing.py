# -*- coding: utf-8 -*-
# sv/meshing/sizing.py

"""
Project: sv
Date: 10/18/2026

Purpose:
--------
Point-wise target edge size used by the surface remesher and the volume meshers.
Mirrors the Distance + Threshold field composition of a Gmsh background field, but
evaluated in numpy so the same field drives Gmsh callbacks and TetGen background meshes.

Main Tasks:
-----------
    1. Start from the global edge size.
    2. Combine refinements with a Min rule: spheres, cylinders, per-face sizes,
       wall grading (boundary layer emulation), and sampled size functions.
    3. Evaluate sizes for (N, 3) query points.

Notes:
------
- Face and wall refinements use Threshold tapering: SizeMin within DistMin of the
  source points, linear up to the global size at DistMax.
- Sampled size functions extend into the volume by nearest surface sample.
"""

import logging
from typing import List

import numpy as np
from scipy.spatial import cKDTree

logger = logging.getLogger(__name__)


class _Threshold:
    def __init__(self, points, size_min, dist_min, dist_max):
        self.tree = cKDTree(np.asarray(points, dtype=float))
        self.size_min = float(size_min)
        self.dist_min = float(dist_min)
        self.dist_max = float(max(dist_max, dist_min + 1e-12))

    def __call__(self, xyz, size_max):
        d, _ = self.tree.query(xyz)
        t = np.clip((d - self.dist_min) / (self.dist_max - self.dist_min), 0.0, 1.0)
        return self.size_min + t * (size_max - self.size_min)


class SizeField:
    """
    Target edge size as a function of position.

    Parameters
    ----------
    global_size : float
        Size used away from every refinement (> 0).
    """

    def __init__(self, global_size: float):
        self.global_size = float(global_size)
        self._spheres: List[tuple] = []
        self._cylinders: List[tuple] = []
        self._thresholds: List[_Threshold] = []
        self._samples = None

    def add_sphere(self, size, radius, center):
        self._spheres.append((float(size), float(radius), np.asarray(center, dtype=float)))

    def add_cylinder(self, size, radius, length, center, normal):
        n = np.asarray(normal, dtype=float)
        n = n / np.linalg.norm(n)
        self._cylinders.append((float(size), float(radius), float(length),
                                np.asarray(center, dtype=float), n))

    def add_surface_size(self, points, size, reach=None):
        """Refine near the given surface points (one model face)."""
        reach = 2.0 * size if reach is None else reach
        self._thresholds.append(_Threshold(points, size, 0.0, reach))

    def add_wall_grading(self, points, first_size, thickness):
        """Grade from `first_size` on the walls to the global size at `thickness`."""
        self._thresholds.append(_Threshold(points, first_size, 0.0, thickness))

    def set_samples(self, points, sizes):
        """Sampled size function (e.g. edge_size * distance to centerlines)."""
        sizes = np.asarray(sizes, dtype=float)
        keep = np.isfinite(sizes) & (sizes > 0.0)
        if not keep.any():
            raise ValueError("The size function has no positive values.")
        self._samples = (cKDTree(np.asarray(points, dtype=float)[keep]), sizes[keep])

    def has_refinements(self) -> bool:
        return bool(self._spheres or self._cylinders or self._thresholds or self._samples)

    def __call__(self, xyz) -> np.ndarray:
        xyz = np.atleast_2d(np.asarray(xyz, dtype=float))
        if self._samples is not None:
            tree, sizes = self._samples
            _, idx = tree.query(xyz)
            h = sizes[idx].copy()
        else:
            h = np.full(len(xyz), self.global_size)
        for size, radius, center in self._spheres:
            inside = np.linalg.norm(xyz - center, axis=1) <= radius
            h[inside] = np.minimum(h[inside], size)
        for size, radius, length, center, n in self._cylinders:
            rel = xyz - center
            axial = rel @ n
            radial = np.linalg.norm(rel - np.outer(axial, n), axis=1)
            inside = (np.abs(axial) <= 0.5 * length) & (radial <= radius)
            h[inside] = np.minimum(h[inside], size)
        for th in self._thresholds:
            h = np.minimum(h, th(xyz, self.global_size))
        return h

    def size_at(self, x, y, z) -> float:
        return float(self(np.array([[x, y, z]]))[0])

    def min_size(self) -> float:
        sizes = [self.global_size]
        sizes += [s[0] for s in self._spheres] + [c[0] for c in self._cylinders]
        sizes += [t.size_min for t in self._thresholds]
        if self._samples is not None:
            sizes.append(float(self._samples[1].min()))
        return min(sizes)
