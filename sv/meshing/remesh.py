# -*- coding: utf-8 -*-
# sv/meshing/remesh.py

"""
Project: sv
Date: 10/18/2026

Purpose:
--------
Surface remeshing and Gmsh volume meshing of triangulated model surfaces.

Main Tasks:
-----------
    1. Load a face-tagged surface into Gmsh as discrete surfaces.
    2. Classify and reparametrize it, then remesh with a SizeField callback.
    3. Optionally fill the closed surface with tetrahedra.
    4. Carry model face ids over to the new triangles (nearest cell center).

Notes:
------
- Reparametrization follows the Gmsh STL remeshing recipe (classifySurfaces +
  createGeometry); the feature angle controls where patches are split.
- Face ids are restored with a KD-tree lookup, so triangles on a face border take
  the id of the closest original triangle.
"""

import logging
import math
from typing import Optional, Tuple

import numpy as np
import pyvista as pv
from scipy.spatial import cKDTree

from ..tools.gmsh_session import FACE_ID_ARRAY, mesh_to_polydata, occ_session, polydata_to_discrete
from .sizing import SizeField

logger = logging.getLogger(__name__)

TETRA_TYPE = 4  # Gmsh 4-node tetrahedron


def face_ids_of(surface: pv.PolyData) -> np.ndarray:
    if FACE_ID_ARRAY in surface.cell_data:
        return np.asarray(surface.cell_data[FACE_ID_ARRAY], dtype=np.int32)
    return np.ones(surface.n_cells, dtype=np.int32)


def transfer_face_ids(source: pv.PolyData, target: pv.PolyData) -> np.ndarray:
    """Face id of the nearest source triangle for every target cell."""
    ids = face_ids_of(source)
    tree = cKDTree(np.asarray(source.cell_centers().points))
    _, idx = tree.query(np.asarray(target.cell_centers().points))
    return ids[idx]


def _tetra_grid(g) -> Optional[pv.UnstructuredGrid]:
    node_tags, coords, _ = g.model.mesh.getNodes()
    coords = np.asarray(coords, dtype=np.float64).reshape(-1, 3)
    index = {int(t): i for i, t in enumerate(node_tags)}
    blocks = []
    for _, tag in g.model.getEntities(3):
        etypes, _, enodes = g.model.mesh.getElements(3, tag)
        for etype, nodes in zip(etypes, enodes):
            if etype == TETRA_TYPE:
                blocks.append(np.array([index[int(n)] for n in nodes], dtype=np.int64).reshape(-1, 4))
    if not blocks:
        return None
    tets = np.vstack(blocks)
    cells = np.hstack([np.full((len(tets), 1), 4, dtype=np.int64), tets]).ravel()
    types = np.full(len(tets), pv.CellType.TETRA, dtype=np.uint8)
    grid = pv.UnstructuredGrid(cells, types, coords)
    return grid.clean()


def remesh(surface: pv.PolyData, size_field: SizeField, volume: bool = False,
           angle: float = 40.0, optimize: bool = True
           ) -> Tuple[pv.PolyData, Optional[pv.UnstructuredGrid]]:
    """
    Remesh a face-tagged triangulated surface, optionally meshing its interior.

    Parameters
    ----------
    surface : pv.PolyData
        Closed (for volume meshing) triangulated surface with ModelFaceID.
    size_field : SizeField
        Target edge size callback.
    volume : bool
        Also generate tetrahedra inside the surface.
    angle : float
        Feature angle (degrees) used to split the surface into patches.
    optimize : bool
        Run the Gmsh tetrahedron optimizer.

    Returns
    -------
    (pv.PolyData, pv.UnstructuredGrid or None)
    """
    surface = surface.triangulate().clean()
    with occ_session("remesh") as g:
        polydata_to_discrete(surface, face_ids_of(surface))
        g.model.mesh.classifySurfaces(math.radians(angle), True, True, math.pi)
        g.model.mesh.createGeometry()
        if volume:
            loop = g.model.geo.addSurfaceLoop([tag for _, tag in g.model.getEntities(2)])
            g.model.geo.addVolume([loop])
        g.model.geo.synchronize()

        for name, value in (("Mesh.MeshSizeExtendFromBoundary", 0),
                            ("Mesh.MeshSizeFromPoints", 0),
                            ("Mesh.MeshSizeFromCurvature", 0),
                            ("Mesh.Optimize", 1 if optimize else 0)):
            g.option.setNumber(name, value)
        g.model.mesh.setSizeCallback(lambda dim, tag, x, y, z, lc: size_field.size_at(x, y, z))
        g.model.mesh.generate(3 if volume else 2)

        new_surface = mesh_to_polydata(2)
        grid = _tetra_grid(g) if volume else None

    if new_surface.n_cells == 0:
        raise RuntimeError("Gmsh produced an empty surface mesh.")
    new_surface.cell_data[FACE_ID_ARRAY] = transfer_face_ids(surface, new_surface)
    logger.info("[Remesh] %d -> %d triangles%s.", surface.n_cells, new_surface.n_cells,
                "" if grid is None else ", {} tetrahedra".format(grid.n_cells))
    return new_surface, grid
