# -*- coding: utf-8 -*-
# sv/tools/gmsh_session.py

"""
Project: sv
Date: 10/18/2026

Purpose:
--------
Shared helpers around the Gmsh Python API (OpenCascade kernel): private model
sessions, tessellation of the current model into a pyvista surface tagged with
face ids, and BREP/STEP import/export.

Main Tasks:
-----------
   1) Open a private Gmsh model for one operation and always clean it up.
   2) Surface-mesh the current OCC model and collect triangles per surface entity.
   3) Convert between Gmsh node/element blocks and pyvista.PolyData (ModelFaceID).

Notes:
------
   - Gmsh keeps global state; sessions never finalize an interpreter-wide Gmsh that
     was initialized by someone else.
   - Face ids are the Gmsh surface tags of the model.
"""

import contextlib
import itertools
import logging
from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np
import pyvista as pv

try:
    import gmsh  # type: ignore
except Exception as _e:  # pragma: no cover
    gmsh = None
    _GMSH_IMPORT_ERROR = _e

logger = logging.getLogger(__name__)

FACE_ID_ARRAY = "ModelFaceID"

_counter = itertools.count(1)


def require_gmsh(operation: str = "gmsh"):
    """Return the gmsh module or raise RuntimeError with the import failure."""
    if gmsh is None:
        raise RuntimeError(
            "{}() The 'gmsh' Python module is required. Original import error: {}"
            .format(operation, _GMSH_IMPORT_ERROR)
        )
    return gmsh


@contextlib.contextmanager
def occ_session(label: str = "sv") -> Iterator[object]:
    """
    Context manager yielding the gmsh module with a fresh, current model.

    The model is removed on exit; Gmsh is finalized only if this session started it.
    """
    g = require_gmsh(label)
    already_initialized = g.isInitialized()
    if not already_initialized:
        g.initialize(interruptible=False)
        g.option.setNumber("General.Terminal", 0)
    name = "{}_{}".format(label, next(_counter))
    g.model.add(name)
    try:
        yield g
    finally:
        try:
            g.model.setCurrent(name)
            g.model.remove()
        finally:
            if not already_initialized:
                g.finalize()


def import_shapes(file_name: str) -> List[Tuple[int, int]]:
    """Import a BREP/STEP/IGES file into the current model and synchronize."""
    g = require_gmsh("import_shapes")
    dim_tags = g.model.occ.importShapes(file_name)
    g.model.occ.synchronize()
    return list(dim_tags)


def top_dim_tags() -> List[Tuple[int, int]]:
    """Entities of the highest dimension present in the OCC model."""
    g = require_gmsh("top_dim_tags")
    for dim in (3, 2, 1):
        ents = g.model.occ.getEntities(dim)
        if ents:
            return list(ents)
    return []


def mesh_to_polydata(dim: int = 2) -> pv.PolyData:
    """
    Collect the triangles of every surface entity of the current (meshed) model
    into one PolyData with a `ModelFaceID` cell array.
    """
    g = require_gmsh("mesh_to_polydata")
    node_tags, coords, _ = g.model.mesh.getNodes()
    if len(node_tags) == 0:
        return pv.PolyData()
    coords = np.asarray(coords, dtype=np.float64).reshape(-1, 3)
    index = {int(t): i for i, t in enumerate(node_tags)}

    faces: List[np.ndarray] = []
    ids: List[np.ndarray] = []
    for (_, tag) in g.model.getEntities(dim):
        etypes, _, enodes = g.model.mesh.getElements(dim, tag)
        for etype, nodes in zip(etypes, enodes):
            if etype != 2:  # 3-node triangles only
                continue
            tri = np.array([index[int(n)] for n in nodes], dtype=np.int64).reshape(-1, 3)
            faces.append(tri)
            ids.append(np.full(len(tri), tag, dtype=np.int32))

    if not faces:
        return pv.PolyData()
    tris = np.vstack(faces)
    cells = np.hstack([np.full((len(tris), 1), 3, dtype=np.int64), tris]).ravel()
    surf = pv.PolyData(coords, cells)
    surf.cell_data[FACE_ID_ARRAY] = np.concatenate(ids)
    return surf.clean(point_merging=False)


def tessellate(mesh_size: Optional[float] = None) -> pv.PolyData:
    """
    Surface-mesh the current OCC model and return it as PolyData.

    Parameters
    ----------
    mesh_size : float, optional
        Target edge length. Defaults to 1/20 of the bounding-box diagonal.
    """
    g = require_gmsh("tessellate")
    g.model.occ.synchronize()
    if mesh_size is None:
        xmin, ymin, zmin, xmax, ymax, zmax = g.model.getBoundingBox(-1, -1)
        diag = float(np.linalg.norm([xmax - xmin, ymax - ymin, zmax - zmin]))
        mesh_size = max(diag / 20.0, 1e-6)
    g.option.setNumber("Mesh.MeshSizeMax", float(mesh_size))
    g.option.setNumber("Mesh.MeshSizeMin", float(mesh_size) / 10.0)
    g.model.mesh.clear()
    g.model.mesh.generate(2)
    surf = mesh_to_polydata(2)
    logger.debug("[gmsh] Tessellated %d surfaces into %d triangles.",
                 len(g.model.getEntities(2)), surf.n_cells)
    return surf


def polydata_to_discrete(surface: pv.PolyData, face_ids: Optional[np.ndarray] = None) -> Dict[int, int]:
    """
    Load a triangulated surface into the current model as discrete surfaces,
    one entity per face id. Returns {face_id: gmsh surface tag}.
    """
    g = require_gmsh("polydata_to_discrete")
    tri = surface.triangulate()
    faces = tri.faces.reshape(-1, 4)[:, 1:]
    if face_ids is None:
        face_ids = np.ones(len(faces), dtype=int)
    pts = np.asarray(tri.points, dtype=np.float64)
    node_tags = np.arange(1, len(pts) + 1)

    out: Dict[int, int] = {}
    first = True
    for fid in np.unique(face_ids):
        tag = g.model.addDiscreteEntity(2)
        if first:
            g.model.mesh.addNodes(2, tag, node_tags.tolist(), pts.ravel().tolist())
            first = False
        sel = faces[face_ids == fid]
        g.model.mesh.addElementsByType(tag, 2, [], (sel + 1).ravel().tolist())
        out[int(fid)] = tag
    return out
