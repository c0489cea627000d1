# -*- coding: utf-8 -*-
# sv/meshing/io.py

"""
Project: sv
Date: 10/18/2026

Purpose:
--------
Mesh output: volume/surface mesh files, element-quality statistics, and the element
adjacency graph used for domain partitioning.

Main Tasks:
-----------
    1. Write meshes: VTK formats through pyvista, everything else through meshio.
    2. Compute tetrahedron quality metrics and summary statistics.
    3. Export statistics as JSON (numpy scalars converted).
    4. Write the face-adjacency graph of tetrahedra in METIS graph format.

Notes:
------
- Statistics follow the min/max/mean/std/p5/p95 summary layout.
- All writes go through a temporary file in the target directory and os.replace.
"""

import json
import logging
import os
import tempfile
from typing import Any, Dict, Optional

import meshio
import numpy as np
import pyvista as pv

from ..tools.gmsh_session import FACE_ID_ARRAY

logger = logging.getLogger(__name__)

VTK_EXTENSIONS = (".vtu", ".vtk")


def _atomic_write_text(text: str, file_name: str) -> str:
    parent = os.path.dirname(os.path.abspath(file_name))
    os.makedirs(parent, exist_ok=True)
    tf = tempfile.NamedTemporaryFile("w", encoding="utf-8", dir=parent, delete=False)
    try:
        with tf:
            tf.write(text)
        os.replace(tf.name, file_name)
    except OSError:
        if os.path.exists(tf.name):
            os.remove(tf.name)
        raise
    return file_name


def tetra_cells(grid: pv.UnstructuredGrid) -> np.ndarray:
    """(T, 4) connectivity of the linear tetrahedra of a grid."""
    cells = grid.cells_dict.get(int(pv.CellType.TETRA))
    if cells is None:
        return np.zeros((0, 4), dtype=np.int64)
    return np.asarray(cells, dtype=np.int64)


# --------------------
# Mesh files
# --------------------
def write_mesh(grid: Optional[pv.UnstructuredGrid], surface: Optional[pv.PolyData],
               file_name: str) -> str:
    """
    Write a mesh by extension: `.vtp` writes the surface, `.vtu`/`.vtk` the volume,
    other extensions (`.msh`, `.xdmf`, `.inp`, ...) the volume through meshio.
    """
    ext = os.path.splitext(file_name)[1].lower()
    if ext == ".vtp":
        if surface is None:
            raise ValueError("There is no surface mesh to write.")
        surface.save(file_name)
        return file_name
    if grid is None:
        raise ValueError("There is no volume mesh to write.")
    if ext in VTK_EXTENSIONS:
        grid.save(file_name)
        return file_name
    tets = tetra_cells(grid)
    cells = [("tetra", tets)]
    cell_data: Dict[str, Any] = {}
    if surface is not None and surface.n_cells:
        faces = surface.faces.reshape(-1, 4)[:, 1:]
        # surface points are a subset of the volume points
        lookup = {tuple(np.round(p, 12)): i for i, p in enumerate(np.asarray(grid.points))}
        tris = np.array([[lookup.get(tuple(np.round(surface.points[j], 12)), -1) for j in f]
                         for f in faces], dtype=np.int64)
        if (tris >= 0).all():
            cells.append(("triangle", tris))
            if FACE_ID_ARRAY in surface.cell_data:
                ids = np.asarray(surface.cell_data[FACE_ID_ARRAY], dtype=int)
            else:
                ids = np.ones(len(tris), dtype=int)
            cell_data["face_id"] = [np.zeros(len(tets), dtype=int), ids]
    mesh = meshio.Mesh(np.asarray(grid.points), cells, cell_data=cell_data)
    meshio.write(file_name, mesh)
    return file_name


def read_volume(file_name: str) -> pv.UnstructuredGrid:
    data = pv.read(file_name)
    if isinstance(data, pv.MultiBlock):
        data = data.combine()
    if not isinstance(data, pv.UnstructuredGrid):
        data = data.cast_to_unstructured_grid()
    return data


def read_surface(file_name: str) -> pv.PolyData:
    data = pv.read(file_name)
    if not isinstance(data, pv.PolyData):
        data = data.extract_surface()
    return data


# --------------------
# Statistics
# --------------------
def _stats(arr) -> Dict[str, float]:
    arr = np.asarray(arr, dtype=float)
    if arr.size == 0:
        return {}
    return {
        "min": float(np.min(arr)),
        "max": float(np.max(arr)),
        "mean": float(np.mean(arr)),
        "std": float(np.std(arr)),
        "p5": float(np.percentile(arr, 5)),
        "p95": float(np.percentile(arr, 95)),
    }


def tetra_metrics(points: np.ndarray, tets: np.ndarray) -> Dict[str, np.ndarray]:
    """
    Per-element tetrahedron metrics: signed volume, the six edge lengths, aspect
    (max/min edge) and the normalized radius ratio (3 * inradius / circumradius,
    1 for a regular tetrahedron).
    """
    tets = np.asarray(tets, dtype=np.int64).reshape(-1, 4)
    p = points[tets]
    a, b, c = p[:, 1] - p[:, 0], p[:, 2] - p[:, 0], p[:, 3] - p[:, 0]
    vol = np.einsum("ij,ij->i", a, np.cross(b, c)) / 6.0

    pairs = ((0, 1), (0, 2), (0, 3), (1, 2), (1, 3), (2, 3))
    edges = np.stack([np.linalg.norm(p[:, j] - p[:, i], axis=1) for i, j in pairs], axis=1)
    aspect = edges.max(axis=1) / np.maximum(edges.min(axis=1), 1e-300)

    faces = ((1, 2, 3), (0, 2, 3), (0, 1, 3), (0, 1, 2))
    area = sum(0.5 * np.linalg.norm(np.cross(p[:, j] - p[:, i], p[:, k] - p[:, i]), axis=1)
               for i, j, k in faces)
    inradius = 3.0 * np.abs(vol) / np.maximum(area, 1e-300)
    # circumradius: |a|^2 (b x c) + |b|^2 (c x a) + |c|^2 (a x b) over 12 V
    num = (np.sum(a * a, axis=1)[:, None] * np.cross(b, c)
           + np.sum(b * b, axis=1)[:, None] * np.cross(c, a)
           + np.sum(c * c, axis=1)[:, None] * np.cross(a, b))
    circumradius = np.linalg.norm(num, axis=1) / np.maximum(12.0 * np.abs(vol), 1e-300)
    radius_ratio = 3.0 * inradius / np.maximum(circumradius, 1e-300)

    return {"volume": vol, "edges": edges, "aspect": aspect, "radius_ratio": radius_ratio}


def tetra_quality(points: np.ndarray, tets: np.ndarray) -> Dict[str, Any]:
    """Summary statistics of `tetra_metrics` plus the count of inverted elements."""
    if len(tets) == 0:
        return {}
    m = tetra_metrics(points, tets)
    return {
        "n": int(len(tets)),
        "inverted": int(np.count_nonzero(m["volume"] <= 0.0)),
        "volume": _stats(np.abs(m["volume"])),
        "edge_length": _stats(m["edges"].ravel()),
        "aspect": _stats(m["aspect"]),
        "radius_ratio": _stats(m["radius_ratio"]),
    }


def mesh_stats(grid: Optional[pv.UnstructuredGrid], surface: Optional[pv.PolyData]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    if grid is not None:
        tets = tetra_cells(grid)
        out["num_nodes"] = int(grid.n_points)
        out["num_elements"] = int(grid.n_cells)
        out["tetrahedra"] = tetra_quality(np.asarray(grid.points), tets)
    if surface is not None:
        out["num_surface_nodes"] = int(surface.n_points)
        out["num_surface_triangles"] = int(surface.n_cells)
        if FACE_ID_ARRAY in surface.cell_data:
            ids, counts = np.unique(surface.cell_data[FACE_ID_ARRAY], return_counts=True)
            out["faces"] = {str(int(i)): int(n) for i, n in zip(ids, counts)}
    return out


def write_stats(stats: Dict[str, Any], file_name: str) -> str:
    def _default(o):
        if isinstance(o, np.generic):
            return o.item()
        return str(o)

    return _atomic_write_text(json.dumps(stats, indent=2, default=_default) + "\n", file_name)


# --------------------
# Adjacency
# --------------------
def tetra_adjacency(tets: np.ndarray):
    """Pairs (i, j), i < j, of tetrahedra sharing a triangular face."""
    if len(tets) == 0:
        return np.zeros((0, 2), dtype=np.int64)
    local = np.array([[1, 2, 3], [0, 2, 3], [0, 1, 3], [0, 1, 2]])
    faces = np.sort(tets[:, local].reshape(-1, 3), axis=1)
    owner = np.repeat(np.arange(len(tets)), 4)
    order = np.lexsort(faces.T[::-1])
    faces, owner = faces[order], owner[order]
    same = np.all(faces[1:] == faces[:-1], axis=1)
    pairs = np.stack([owner[:-1][same], owner[1:][same]], axis=1)
    return np.sort(pairs, axis=1)


def write_metis_adjacency(grid: pv.UnstructuredGrid, file_name: str) -> str:
    """
    METIS graph file: header "<num elements> <num edges>", then one line per element
    with the 1-based ids of its face neighbors.
    """
    tets = tetra_cells(grid)
    pairs = tetra_adjacency(tets)
    neighbors = [[] for _ in range(len(tets))]
    for i, j in pairs:
        neighbors[i].append(j + 1)
        neighbors[j].append(i + 1)
    lines = ["{} {}".format(len(tets), len(pairs))]
    lines += [" ".join(str(n) for n in sorted(nb)) for nb in neighbors]
    return _atomic_write_text("\n".join(lines) + "\n", file_name)
