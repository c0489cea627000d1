# -*- coding: utf-8 -*-
# sv/modeling/polydata.py

"""
Project: sv
Date: 10/18/2026

Purpose:
--------
Discrete (triangulated surface) solid kernel backed by `pyvista.PolyData`.

Main Tasks:
-----------
    1. Primitives (box, cylinder, sphere, ellipsoid) as closed triangulated surfaces.
    2. Booleans through VTK's polydata boolean filters.
    3. Face partitioning by feature angle, face deletion, transforms and VTP I/O.

Notes:
------
- Faces are the connected components of the triangle adjacency graph after cutting
  every edge whose dihedral angle exceeds the feature angle.
- Face ids of the second boolean operand are offset past the first operand's ids.
"""

import logging
from typing import List

import numpy as np
import pyvista as pv
from scipy.sparse import coo_matrix
from scipy.sparse.csgraph import connected_components

from ..errors import ModelingError
from ..tools.gmsh_session import FACE_ID_ARRAY
from .base import Model, check_matrix

logger = logging.getLogger(__name__)

DEFAULT_FEATURE_ANGLE = 50.0


def feature_faces(surface: pv.PolyData, angle: float) -> np.ndarray:
    """
    Label triangles by region growing across edges sharper than `angle` degrees.

    Returns
    -------
    np.ndarray
        (n_cells,) int32 labels starting at 1, ordered by first appearance.
    """
    tris = surface.faces.reshape(-1, 4)[:, 1:]
    n = len(tris)
    if n == 0:
        return np.zeros(0, dtype=np.int32)
    normals = np.asarray(surface.compute_normals(cell_normals=True, point_normals=False,
                                                 consistent_normals=False, auto_orient_normals=False,
                                                 split_vertices=False).cell_data["Normals"])

    # Pair up triangles sharing an (unordered) edge.
    edges = np.vstack([tris[:, [0, 1]], tris[:, [1, 2]], tris[:, [2, 0]]])
    owner = np.tile(np.arange(n), 3)
    edges.sort(axis=1)
    order = np.lexsort((edges[:, 1], edges[:, 0]))
    edges, owner = edges[order], owner[order]
    same = np.all(edges[1:] == edges[:-1], axis=1)
    a, b = owner[:-1][same], owner[1:][same]

    cos_limit = np.cos(np.radians(angle))
    smooth = np.einsum("ij,ij->i", normals[a], normals[b]) >= cos_limit
    a, b = a[smooth], b[smooth]
    graph = coo_matrix((np.ones(len(a)), (a, b)), shape=(n, n))
    _, labels = connected_components(graph, directed=False)

    # Relabel so the first triangle of each region sets the order.
    _, first = np.unique(labels, return_index=True)
    remap = np.empty(len(first), dtype=np.int32)
    remap[np.argsort(np.argsort(first))] = np.arange(1, len(first) + 1)
    return remap[labels]


class PolyDataModel(Model):
    """Solid model stored as a triangulated surface with `ModelFaceID` cell data."""

    kernel = "POLYDATA"
    type_name = "PolyData"
    native_extension = "vtp"
    write_formats = ("stl", "ply", "vtk", "obj")

    def __init__(self, surface: pv.PolyData = None):
        super(PolyDataModel, self).__init__()
        self._surface = pv.PolyData()
        if surface is not None:
            self.set_surface(surface)

    def set_surface(self, surface: pv.PolyData, angle: float = None) -> None:
        """Install a surface; faces are computed when the surface carries no face ids."""
        if not isinstance(surface, pv.PolyData):
            raise ModelingError("The surface argument is not a pyvista.PolyData object.",
                                operation="set_surface")
        surf = surface.triangulate().clean()
        self._surface = surf
        if FACE_ID_ARRAY not in surf.cell_data or angle is not None:
            self.calculate_boundary_faces(DEFAULT_FEATURE_ANGLE if angle is None else angle)
        else:
            surf.cell_data[FACE_ID_ARRAY] = np.asarray(surf.cell_data[FACE_ID_ARRAY], dtype=np.int32)

    def get_polydata(self, max_dist: float = -1.0) -> pv.PolyData:
        return self._surface.copy()

    def get_face_ids(self) -> List[int]:
        if FACE_ID_ARRAY not in self._surface.cell_data:
            return []
        return [int(i) for i in np.unique(self._surface.cell_data[FACE_ID_ARRAY])]

    def calculate_boundary_faces(self, angle: float) -> List[int]:
        op = "calculate_boundary_faces"
        try:
            angle = float(angle)
        except (TypeError, ValueError):
            raise ModelingError("The angle argument is not a float.", operation=op)
        if angle < 0.0:
            raise ModelingError("The angle argument < 0.0.", operation=op)
        if self._surface.n_cells == 0:
            raise ModelingError("Error calculating boundary faces for the solid model using "
                                "angle '{}'.".format(angle), operation=op)
        self._surface.cell_data[FACE_ID_ARRAY] = feature_faces(self._surface, angle)
        ids = self.get_face_ids()
        self._face_info = {}
        logger.info("[PolyDataModel] Found %d faces (feature angle %.1f).", len(ids), angle)
        return ids

    def delete_faces(self, face_ids) -> None:
        op = "delete_faces"
        if not isinstance(face_ids, (list, tuple)):
            raise ModelingError("The face IDs argument is not a list.", operation=op)
        valid = set(self.get_face_ids())
        for fid in face_ids:
            if fid not in valid:
                raise ModelingError("The face ID {} is not a valid face ID for the model."
                                    .format(fid), operation=op)
        keep = ~np.isin(self._surface.cell_data[FACE_ID_ARRAY], list(face_ids))
        self._surface = self._surface.extract_cells(np.flatnonzero(keep)).extract_surface()
        for fid in face_ids:
            self._face_info.pop(int(fid), None)

    def apply4x4(self, matrix) -> None:
        self._surface = self._surface.transform(check_matrix(matrix), inplace=False)

    def write_native(self, file_name: str) -> str:
        self._surface.save(file_name)
        return file_name

    def read_native(self, file_name: str) -> None:
        self.set_surface(pv.read(file_name))

    # --------------------
    # Construction helpers used by the modeler
    # --------------------
    @classmethod
    def box(cls, center, width, height, length) -> "PolyDataModel":
        cube = pv.Cube(center=tuple(center), x_length=width, y_length=height, z_length=length)
        return cls(cube.triangulate().subdivide(2, subfilter="linear").clean())

    @classmethod
    def cylinder(cls, radius, length, center, axis, resolution: int = 64) -> "PolyDataModel":
        cyl = pv.Cylinder(center=tuple(center), direction=tuple(axis), radius=radius,
                          height=length, resolution=resolution, capping=True)
        return cls(cyl.triangulate().clean())

    @classmethod
    def sphere(cls, radius, center, resolution: int = 48) -> "PolyDataModel":
        sph = pv.Sphere(radius=radius, center=tuple(center), theta_resolution=resolution,
                        phi_resolution=resolution)
        model = cls()
        model._install_single_face(sph)
        return model

    @classmethod
    def ellipsoid(cls, radii, center, resolution: int = 48) -> "PolyDataModel":
        ell = pv.ParametricEllipsoid(radii[0], radii[1], radii[2], u_res=resolution,
                                     v_res=resolution, w_res=resolution)
        ell = ell.translate(tuple(center), inplace=False)
        model = cls()
        model._install_single_face(ell)
        return model

    def _install_single_face(self, surface: pv.PolyData) -> None:
        surf = surface.triangulate().clean()
        surf.cell_data[FACE_ID_ARRAY] = np.ones(surf.n_cells, dtype=np.int32)
        self._surface = surf

    def boolean(self, other: "PolyDataModel", operation: str) -> "PolyDataModel":
        """Boolean with another PolyData model ('union', 'intersection' or 'difference')."""
        a = self.get_polydata()
        b = other.get_polydata()
        offset = max(self.get_face_ids() or [0])
        b.cell_data[FACE_ID_ARRAY] = np.asarray(b.cell_data[FACE_ID_ARRAY]) + offset
        func = {"union": a.boolean_union, "intersection": a.boolean_intersection,
                "difference": a.boolean_difference}[operation]
        result = func(b)
        if result.n_cells == 0:
            raise ModelingError("The Boolean {} produced an empty model.".format(operation),
                                operation=operation)
        out = PolyDataModel()
        if FACE_ID_ARRAY in result.cell_data:
            out._surface = result.triangulate()
            ids = np.asarray(out._surface.cell_data[FACE_ID_ARRAY])
            inverse = np.unique(ids, return_inverse=True)[1]
            out._surface.cell_data[FACE_ID_ARRAY] = (inverse.ravel() + 1).astype(np.int32)
        else:
            out.set_surface(result)
        return out
