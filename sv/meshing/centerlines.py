# -*- coding: utf-8 -*-
# sv/meshing/centerlines.py

"""
Project: sv
Date: 10/18/2026

Purpose:
--------
Approximate vessel centerlines of a closed model surface and the distance from the
surface to them, used for radius-based mesh sizing.

Main Tasks:
-----------
    1. Voxelize the interior of the surface on a regular image grid.
    2. Thin the voxel mask to a one-voxel skeleton (scikit-image).
    3. Connect neighboring skeleton voxels into line segments.
    4. Store the inscribed radius per centerline point and the surface distance
       to the centerlines (DistanceToCenterlines).

Notes:
------
- Accuracy is bounded by the voxel spacing; the default uses about 96 voxels along
  the largest bounding-box side.
"""

import logging
from typing import Optional

import numpy as np
import pyvista as pv
from scipy.spatial import cKDTree
from skimage.morphology import skeletonize

logger = logging.getLogger(__name__)

RADIUS_ARRAY = "MaximumInscribedSphereRadius"
DISTANCE_ARRAY = "DistanceToCenterlines"


def compute_centerlines(surface: pv.PolyData, spacing: Optional[float] = None,
                        resolution: int = 96) -> pv.PolyData:
    """
    Skeleton-based centerlines of a closed surface.

    Parameters
    ----------
    surface : pv.PolyData
        Closed, triangulated surface.
    spacing : float, optional
        Voxel size. Defaults to the largest bounding-box side / `resolution`.

    Returns
    -------
    pv.PolyData
        Line segments with the MaximumInscribedSphereRadius point array.

    Raises
    ------
    ValueError
        If the surface encloses no voxels or the skeleton is empty.
    """
    xmin, xmax, ymin, ymax, zmin, zmax = surface.bounds
    extent = np.array([xmax - xmin, ymax - ymin, zmax - zmin])
    if spacing is None:
        spacing = float(extent.max()) / float(resolution)
    if spacing <= 0.0:
        raise ValueError("The surface has an empty bounding box.")
    origin = np.array([xmin, ymin, zmin]) - spacing
    dims = np.ceil(extent / spacing).astype(int) + 3

    grid = pv.ImageData(dimensions=dims.tolist(), spacing=(spacing,) * 3, origin=origin.tolist())
    enclosed = grid.select_enclosed_points(surface, check_surface=False)
    mask = np.asarray(enclosed.point_data["SelectedPoints"]).reshape(dims, order="F").astype(bool)
    if not mask.any():
        raise ValueError("The surface does not enclose any voxel; is it closed?")

    skeleton = skeletonize(mask)
    idx = np.argwhere(skeleton)
    if len(idx) == 0:
        raise ValueError("The voxel skeleton is empty.")
    points = origin + idx * spacing

    pairs = cKDTree(points).query_pairs(r=spacing * np.sqrt(3.0) * 1.01, output_type="ndarray")
    lines = np.hstack([np.full((len(pairs), 1), 2, dtype=np.int64), pairs]).ravel()
    centerlines = pv.PolyData(points, lines=lines) if len(pairs) else pv.PolyData(points)

    radius, _ = cKDTree(np.asarray(surface.points)).query(points)
    centerlines.point_data[RADIUS_ARRAY] = radius
    logger.info("[Centerlines] %d skeleton points, %d segments (voxel %.4g).",
                len(points), len(pairs), spacing)
    return centerlines


def distance_to_centerlines(surface: pv.PolyData, centerlines: pv.PolyData) -> np.ndarray:
    """Distance from every surface point to the closest centerline point."""
    if centerlines.n_points == 0:
        raise ValueError("The centerlines have no points.")
    d, _ = cKDTree(np.asarray(centerlines.points)).query(np.asarray(surface.points))
    return d
