# -*- coding: utf-8 -*-
# sv/post/plot.py

"""
Project: sv
Date: 10/18/2026

Purpose:
--------
Quick-look matplotlib figures for scripted modeling sessions: a path with its control
points, the contours of a segmentation group in 3D, and tetrahedral mesh quality
histograms.

Main Tasks:
-----------
    1) Provide a pyplot getter that works headless (Agg when there is no DISPLAY).
    2) plot_path: curve points, control points and optional tangents.
    3) plot_contours: closed contour polylines with their centers.
    4) plot_tetra_quality: radius-ratio and aspect histograms of a volume mesh.

Notes:
------
- matplotlib is imported only when a plotting function is called.
- Every function accepts an existing Axes; otherwise a figure is created and either
  shown or closed after saving.
"""

import logging
import os
from typing import Iterable, Optional

import numpy as np

logger = logging.getLogger(__name__)


def _get_pyplot():
    """
    Lazy-import matplotlib.pyplot, selecting the Agg backend when headless.

    Raises
    ------
    RuntimeError
        If matplotlib is unavailable.
    """
    try:
        import matplotlib
        if not os.environ.get("DISPLAY"):
            matplotlib.use("Agg")
        import matplotlib.pyplot as plt
        return plt
    except ImportError as e:
        raise RuntimeError("matplotlib required: {}".format(e))


def _new_3d_axes(plt, figsize=(7, 6)):
    fig = plt.figure(figsize=figsize)
    return fig.add_subplot(111, projection="3d")


def _finish(plt, ax, created_fig: bool, show: bool, save_path: Optional[str]) -> None:
    if save_path:
        ax.figure.savefig(save_path, dpi=300)
        logger.info("[Plot] Saved '%s'.", save_path)
    if show and created_fig:
        plt.show()
    elif created_fig:
        plt.close(ax.figure)


def plot_path(path,
              *,
              name: str = "path",
              tangents: bool = False,
              show: bool = True,
              save_path: Optional[str] = None,
              ax=None) -> None:
    """
    Plot a path's curve points and control points in 3D.

    Parameters
    ----------
    path : sv.path.Path
        Path with at least one control point.
    name : str
        Title label.
    tangents : bool
        Draw the unit tangent at every curve point.
    show, save_path, ax
        Display the created figure / save it / draw on an existing 3D Axes.
    """
    ctrl = np.asarray(path.get_control_points(), dtype=float).reshape(-1, 3)
    if ctrl.shape[0] == 0:
        raise ValueError("The path has no control points.")
    curve = np.asarray(path.get_curve_points(), dtype=float).reshape(-1, 3)

    plt = _get_pyplot()
    created_fig = ax is None
    if created_fig:
        ax = _new_3d_axes(plt)

    if curve.shape[0]:
        ax.plot(curve[:, 0], curve[:, 1], curve[:, 2], "b-", lw=1.5, label="curve")
    ax.plot(ctrl[:, 0], ctrl[:, 1], ctrl[:, 2], "ro", ms=5, label="control points")
    if tangents and curve.shape[0]:
        t = np.array([path.get_curve_tangent(i) for i in range(curve.shape[0])], dtype=float)
        span = np.ptp(curve, axis=0).max() if curve.shape[0] > 1 else 1.0
        ax.quiver(curve[:, 0], curve[:, 1], curve[:, 2], t[:, 0], t[:, 1], t[:, 2],
                  length=0.05 * span, color="g", lw=0.8)

    ax.set_title("Path: {}".format(name))
    ax.set_xlabel("x")
    ax.set_ylabel("y")
    ax.set_zlabel("z")
    ax.legend()
    _finish(plt, ax, created_fig, show, save_path)


def plot_contours(contours: Iterable,
                  *,
                  name: str = "segmentations",
                  centers: bool = True,
                  show: bool = True,
                  save_path: Optional[str] = None,
                  ax=None) -> None:
    """
    Plot contour polylines in 3D (closed contours are drawn closed).

    Parameters
    ----------
    contours : Iterable[sv.segmentation.Contour]
        Contours, e.g. from `segmentation.Group.get_contour`.
    centers : bool
        Mark each contour center.
    """
    contours = [c for c in contours if c is not None]
    if not contours:
        raise ValueError("No contours to plot.")

    plt = _get_pyplot()
    created_fig = ax is None
    if created_fig:
        ax = _new_3d_axes(plt)

    for i, contour in enumerate(contours):
        pts = np.asarray(contour.get_contour_points(), dtype=float).reshape(-1, 3)
        if pts.shape[0] == 0:
            logger.debug("[Plot] Contour %d has no points.", i)
            continue
        if contour.is_closed():
            pts = np.vstack([pts, pts[:1]])
        ax.plot(pts[:, 0], pts[:, 1], pts[:, 2], lw=1.2)
        if centers:
            c = contour.get_center()
            ax.plot([c[0]], [c[1]], [c[2]], "k.", ms=4)

    ax.set_title("Contours: {} ({})".format(name, len(contours)))
    ax.set_xlabel("x")
    ax.set_ylabel("y")
    ax.set_zlabel("z")
    _finish(plt, ax, created_fig, show, save_path)


def plot_tetra_quality(mesher,
                       *,
                       bins: int = 40,
                       show: bool = True,
                       save_path: Optional[str] = None) -> None:
    """
    Histograms of the tetrahedron radius ratio and edge aspect of a generated mesh.

    Parameters
    ----------
    mesher : sv.meshing.Mesher
        Mesher holding a volume mesh.
    """
    from ..meshing.io import tetra_cells, tetra_metrics

    grid = mesher.get_unstructured_grid()
    tets = tetra_cells(grid)
    if len(tets) == 0:
        raise ValueError("The mesh has no tetrahedra.")
    m = tetra_metrics(np.asarray(grid.points), tets)

    plt = _get_pyplot()
    fig, (ax0, ax1) = plt.subplots(1, 2, figsize=(10, 4))
    ax0.hist(m["radius_ratio"], bins=int(bins), range=(0.0, 1.0), color="C0")
    ax0.axvline(0.1, color="r", ls="--", lw=1.0)
    ax0.set_xlabel("radius ratio")
    ax0.set_ylabel("count")
    ax0.set_title("Radius ratio (1 = regular)")
    ax1.hist(m["aspect"], bins=int(bins), color="C1")
    ax1.set_xlabel("max edge / min edge")
    ax1.set_title("Edge aspect")
    for a in (ax0, ax1):
        a.grid(True)
    fig.tight_layout()
    _finish(plt, ax0, True, show, save_path)
