# -*- coding: utf-8 -*-
# sv/geometry/loft.py

"""
Project: sv
Date: 10/18/2026

Purpose:
--------
Loft a surface through an ordered list of closed profiles (vessel cross sections).

Main Tasks:
-----------
    1. loft_solid: resample/align profiles, run a Kochanek spline along the length
       through corresponding points, optionally resample linearly and FFT-smooth,
       and assemble a (capped) triangulated surface.
    2. loft_solid_using_nurbs: build closed splines per profile and an OpenCascade
       through-sections solid with Gmsh, then tessellate it.

Pipeline:
---------
profiles → sample_loop(num_out_pts_in_segs) → align_profile → splines along length
        → grid (num_out_pts_along_length × num_out_pts_in_segs) → triangles (+ caps)

Notes:
------
- The output PolyData carries a `ModelFaceID` cell array: wall=1, inlet cap=2,
  outlet cap=3.
"""

import logging
from typing import List, Optional, Sequence

import numpy as np
import pyvista as pv

from ..errors import GeometryError
from ..tools.gmsh_session import FACE_ID_ARRAY, occ_session, tessellate
from .curves import kochanek_spline, resample_curve, smooth_curve
from .loft_options import LoftNurbsOptions, LoftOptions
from .ops import align_profile, as_points, sample_loop

logger = logging.getLogger(__name__)

WALL_ID, INLET_ID, OUTLET_ID = 1, 2, 3

_PARAMETRIZATION = {
    "equal": "IsoParametric",
    "chord": "ChordLength",
    "centripetal": "Centripetal",
}


def unsupported_nurbs_options(opts: LoftNurbsOptions) -> List[str]:
    """
    Names of NURBS options set away from their defaults that through-sections lofting
    cannot apply. Knot span types and the profile (u) parameterization are never passed on;
    only one maximum degree is, so a u degree that differs from the v degree is reported.
    """
    default = LoftNurbsOptions()
    names = [name for name in ("u_knot_span_type", "v_knot_span_type", "u_parametric_span_type")
             if getattr(opts, name) != getattr(default, name)]
    if int(opts.u_degree) != int(opts.v_degree):
        names.append("u_degree")
    return names


def _prepare_profiles(profiles: Sequence, num_pts: int, operation: str) -> List[np.ndarray]:
    if profiles is None or len(profiles) < 2:
        raise GeometryError("At least two profiles are required.", operation=operation)
    out: List[np.ndarray] = []
    for i, prof in enumerate(profiles):
        try:
            pts = sample_loop(as_points(prof, operation, min_points=3), num_pts)
        except GeometryError as e:
            raise GeometryError("Profile {}: {}".format(i, e.message), operation=operation) from e
        if out:
            pts = align_profile(out[-1], pts)
        out.append(pts)
    return out


def _grid_to_surface(grid: np.ndarray, cap: bool) -> pv.PolyData:
    """(L, N, 3) grid of rings → triangulated tube (plus fan caps)."""
    n_len, n_seg, _ = grid.shape
    pts = grid.reshape(-1, 3)
    idx = np.arange(n_len * n_seg).reshape(n_len, n_seg)

    a = idx[:-1, :]
    b = np.roll(idx[:-1, :], -1, axis=1)
    c = idx[1:, :]
    d = np.roll(idx[1:, :], -1, axis=1)
    tris = [np.stack([a, b, d], axis=-1).reshape(-1, 3),
            np.stack([a, d, c], axis=-1).reshape(-1, 3)]
    ids = [np.full(2 * a.size, WALL_ID)]

    if cap:
        for ring, face_id, flip in ((0, INLET_ID, True), (n_len - 1, OUTLET_ID, False)):
            center_index = len(pts)
            pts = np.vstack([pts, grid[ring].mean(axis=0)])
            r = idx[ring]
            fan = np.stack([np.full(n_seg, center_index), r, np.roll(r, -1)], axis=-1)
            if flip:
                fan = fan[:, [0, 2, 1]]
            tris.append(fan)
            ids.append(np.full(n_seg, face_id))

    tris = np.vstack(tris)
    cells = np.hstack([np.full((len(tris), 1), 3), tris]).ravel()
    surf = pv.PolyData(pts, cells)
    surf.cell_data[FACE_ID_ARRAY] = np.concatenate(ids).astype(np.int32)
    return surf


def loft_solid(profiles: Sequence, options: Optional[LoftOptions] = None,
               cap: bool = True) -> pv.PolyData:
    """
    Spline-loft a surface through closed profiles.

    Parameters
    ----------
    profiles : Sequence[(N, 3) array | PolyData]
        Ordered cross sections (at least two).
    options : LoftOptions, optional
        Lofting parameters; defaults are used when omitted.
    cap : bool
        Close the ends with planar fan caps.

    Returns
    -------
    pv.PolyData
        Triangulated surface with a `ModelFaceID` cell array.

    Raises
    ------
    GeometryError
        For invalid options or profiles.
    """
    opts = options or LoftOptions()
    opts.validate("loft_solid")
    rings = _prepare_profiles(profiles, int(opts.num_out_pts_in_segs), "loft_solid")
    stack = np.stack(rings)                      # (P, N, 3)
    n_prof, n_seg, _ = stack.shape
    n_len = int(opts.num_out_pts_along_length)

    if opts.spline_type == 0:
        bias, tension, continuity = opts.bias, opts.tension, opts.continuity
    else:
        bias, tension, continuity = 0.0, opts.tension, 0.0

    grid = np.empty((n_len, n_seg, 3))
    for j in range(n_seg):
        column = stack[:, j, :]
        if opts.use_linear_sample_along_length:
            u = np.linspace(0.0, n_prof - 1, int(opts.num_linear_pts_along_length))
            dense = kochanek_spline(column, u, bias, tension, continuity)
            curve = resample_curve(dense, n_len, closed=False)
        else:
            u = np.linspace(0.0, n_prof - 1, n_len)
            curve = kochanek_spline(column, u, bias, tension, continuity)
        if opts.use_fft:
            curve = smooth_curve(curve, closed=False, num_modes=int(opts.num_modes), num_out=n_len)
        grid[:, j, :] = curve

    surf = _grid_to_surface(grid, cap)
    logger.info("[loft_solid] Lofted %d profiles into %d triangles.", n_prof, surf.n_cells)
    return surf


def loft_solid_using_nurbs(profiles: Sequence, options: Optional[LoftNurbsOptions] = None,
                           num_profile_points: int = 40) -> pv.PolyData:
    """
    Loft a closed solid through profiles with OpenCascade through-sections.

    Parameters
    ----------
    profiles : Sequence[(N, 3) array | PolyData]
        Ordered cross sections (at least two).
    options : LoftNurbsOptions, optional
        Degrees, spacing and parameterization; defaults are used when omitted.
    num_profile_points : int
        Points per profile used to build each closed interpolating spline.

    Returns
    -------
    pv.PolyData
        Tessellated boundary of the lofted solid with a `ModelFaceID` cell array
        (OpenCascade face tags).
    """
    opts = options or LoftNurbsOptions()
    opts.validate("loft_solid_using_nurbs")
    rings = _prepare_profiles(profiles, int(num_profile_points), "loft_solid_using_nurbs")
    ignored = unsupported_nurbs_options(opts)
    if ignored:
        logger.warning("[loft_solid_using_nurbs] Options not supported by through-sections lofting "
                       "are ignored: %s (max degree %d is used).", ", ".join(ignored),
                       max(int(opts.u_degree), int(opts.v_degree)))

    perimeter = float(np.mean([np.sum(np.linalg.norm(np.roll(r, -1, 0) - r, axis=1))
                               for r in rings]))
    mesh_size = max(perimeter * min(opts.u_spacing, opts.v_spacing) * 2.0, 1e-6)

    with occ_session("loft_nurbs") as g:
        wires = []
        for ring in rings:
            tags = [g.model.occ.addPoint(*p) for p in ring]
            curve = g.model.occ.addSpline(tags + [tags[0]])
            wires.append(g.model.occ.addWire([curve]))
        try:
            g.model.occ.addThruSections(
                wires, makeSolid=True, makeRuled=False,
                maxDegree=int(max(opts.u_degree, opts.v_degree)),
                parametrization=_PARAMETRIZATION[opts.v_parametric_span_type],
            )
        except Exception as e:
            raise GeometryError("OpenCascade lofting failed: {}".format(e),
                                operation="loft_solid_using_nurbs") from e
        surf = tessellate(mesh_size)

    logger.info("[loft_solid_using_nurbs] Lofted %d profiles into %d triangles.",
                len(rings), surf.n_cells)
    return surf
