# -*- coding: utf-8 -*-
# sv/modeling/occt.py

"""
Project: sv
Date: 10/18/2026

Purpose:
--------
OpenCascade solid kernel driven through Gmsh's OCC API. A model holds its shape as
BREP text; every operation loads it into a private Gmsh model, edits it, and stores
the result back.

Main Tasks:
-----------
   1) Primitives (box, cylinder, sphere, ellipsoid) and Booleans (fuse, intersect, cut).
   2) Face queries, face deletion and affine transforms on B-rep faces.
   3) Tessellation into PolyData (face id = Gmsh surface tag) and BREP/STEP export.

Notes:
------
   - B-rep faces are the model faces; `calculate_boundary_faces` does not re-partition.
   - Tessellations are cached per edge size until the shape changes.
"""

import contextlib
import logging
import os
import tempfile
from typing import Dict, List, Optional

import numpy as np
import pyvista as pv

from ..errors import ModelingError
from ..tools.gmsh_session import import_shapes, occ_session, tessellate, top_dim_tags
from .base import Model, check_matrix

logger = logging.getLogger(__name__)


class OpenCascadeModel(Model):
    """Solid model stored as an OpenCascade BREP shape."""

    kernel = "OCCT"
    type_name = "OpenCASCADE"
    native_extension = "brep"
    write_formats = ("step", "stl", "vtp", "vtk", "ply")

    def __init__(self):
        super(OpenCascadeModel, self).__init__()
        self._brep: Optional[str] = None
        self._tessellations: Dict[float, pv.PolyData] = {}

    # --------------------
    # Session helpers
    # --------------------
    @contextlib.contextmanager
    def _session(self, label: str):
        with occ_session("occt_" + label) as g:
            if self._brep is not None:
                self._load_into(g)
            yield g

    def _load_into(self, g) -> list:
        with tempfile.TemporaryDirectory() as d:
            path = os.path.join(d, "shape.brep")
            with open(path, "w", encoding="utf-8") as f:
                f.write(self._brep)
            return import_shapes(path)

    def _store(self, g) -> None:
        g.model.occ.synchronize()
        with tempfile.TemporaryDirectory() as d:
            path = os.path.join(d, "shape.brep")
            g.write(path)
            with open(path, "r", encoding="utf-8") as f:
                self._brep = f.read()
        self._tessellations = {}

    def _require_shape(self, operation: str) -> None:
        if self._brep is None:
            raise ModelingError("The solid model has no geometry.", operation=operation)

    # --------------------
    # Construction
    # --------------------
    @classmethod
    def _build(cls, label: str, make) -> "OpenCascadeModel":
        model = cls()
        with model._session(label) as g:
            make(g.model.occ)
            model._store(g)
        return model

    @classmethod
    def box(cls, center, width, height, length) -> "OpenCascadeModel":
        c = np.asarray(center, float)
        d = np.array([width, height, length], float)
        x, y, z = c - d / 2.0
        return cls._build("box", lambda occ: occ.addBox(x, y, z, d[0], d[1], d[2]))

    @classmethod
    def cylinder(cls, radius, length, center, axis) -> "OpenCascadeModel":
        a = np.asarray(axis, float)
        a = a / np.linalg.norm(a)
        base = np.asarray(center, float) - a * length / 2.0
        dx, dy, dz = a * length
        return cls._build("cylinder", lambda occ: occ.addCylinder(base[0], base[1], base[2],
                                                                  dx, dy, dz, radius))

    @classmethod
    def sphere(cls, radius, center) -> "OpenCascadeModel":
        return cls._build("sphere", lambda occ: occ.addSphere(center[0], center[1], center[2], radius))

    @classmethod
    def ellipsoid(cls, radii, center) -> "OpenCascadeModel":
        def make(occ):
            tag = occ.addSphere(center[0], center[1], center[2], 1.0)
            occ.dilate([(3, tag)], center[0], center[1], center[2], radii[0], radii[1], radii[2])
        return cls._build("ellipsoid", make)

    def boolean(self, other: "OpenCascadeModel", operation: str) -> "OpenCascadeModel":
        """Boolean with another OpenCascade model ('union', 'intersection' or 'difference')."""
        self._require_shape(operation)
        other._require_shape(operation)
        out = OpenCascadeModel()
        with self._session(operation) as g:
            obj = top_dim_tags()
            tool = [dt for dt in other._load_into(g) if dt[0] == obj[0][0]] if obj else []
            occ = g.model.occ
            if operation == "union":
                occ.fuse(obj, tool)
            elif operation == "intersection":
                occ.intersect(obj, tool)
            else:
                occ.cut(obj, tool)
            occ.synchronize()
            if not g.model.getEntities(2):
                raise ModelingError("The Boolean {} produced an empty model.".format(operation),
                                    operation=operation)
            out._store(g)
        return out

    # --------------------
    # Model interface
    # --------------------
    def get_polydata(self, max_dist: float = -1.0) -> pv.PolyData:
        self._require_shape("get_polydata")
        key = float(max_dist) if max_dist and max_dist > 0 else -1.0
        if key not in self._tessellations:
            with self._session("tessellate") as g:
                self._tessellations[key] = tessellate(key if key > 0 else None)
                logger.debug("[OpenCascadeModel] Tessellated %d faces.", len(g.model.getEntities(2)))
        return self._tessellations[key].copy()

    def get_face_ids(self) -> List[int]:
        if self._brep is None:
            return []
        with self._session("face_ids") as g:
            return [int(tag) for _, tag in g.model.getEntities(2)]

    def calculate_boundary_faces(self, angle: float) -> List[int]:
        op = "calculate_boundary_faces"
        if float(angle) < 0.0:
            raise ModelingError("The angle argument < 0.0.", operation=op)
        self._require_shape(op)
        ids = self.get_face_ids()
        logger.info("[OpenCascadeModel] Using %d B-rep faces; the feature angle is not used.",
                    len(ids))
        return ids

    def delete_faces(self, face_ids) -> None:
        op = "delete_faces"
        if not isinstance(face_ids, (list, tuple)):
            raise ModelingError("The face IDs argument is not a list.", operation=op)
        self._require_shape(op)
        valid = set(self.get_face_ids())
        for fid in face_ids:
            if fid not in valid:
                raise ModelingError("The face ID {} is not a valid face ID for the model."
                                    .format(fid), operation=op)
        with self._session(op) as g:
            occ = g.model.occ
            occ.remove(occ.getEntities(3))
            occ.remove([(2, int(f)) for f in face_ids], recursive=True)
            self._store(g)
        for fid in face_ids:
            self._face_info.pop(int(fid), None)

    def apply4x4(self, matrix) -> None:
        m = check_matrix(matrix)
        self._require_shape("apply4x4")
        with self._session("apply4x4") as g:
            g.model.occ.affineTransform(top_dim_tags(), m[:3, :].ravel().tolist())
            self._store(g)

    def write_native(self, file_name: str) -> str:
        self._require_shape("write")
        with open(file_name, "w", encoding="utf-8") as f:
            f.write(self._brep)
        return file_name

    def read_native(self, file_name: str) -> None:
        with occ_session("occt_read") as g:
            import_shapes(file_name)
            if not g.model.getEntities(2):
                raise ModelingError("No surfaces were found in '{}'.".format(file_name),
                                    operation="read")
            self._store(g)
        self._face_info = {}

    def _write_format(self, file_name: str, fmt: str) -> None:
        if fmt == "step":
            with self._session("export") as g:
                g.write(file_name)
            return
        super(OpenCascadeModel, self)._write_format(file_name, fmt)
