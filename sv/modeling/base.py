# -*- coding: utf-8 -*-
# sv/modeling/base.py

"""
Project: sv
Date: 10/18/2026

Purpose:
--------
Abstract solid model interface so PolyData, OpenCascade and licensed kernels expose the
same calls to scripts, the modeler, the model group and the meshers.

Abstract Classes:
-----------------
- Model: face-labelled solid model (surface PolyData view + native storage).

Notes:
------
- Face ids are positive integers; every kernel can render its surface as a PolyData
  with a `ModelFaceID` cell array.
- Face names/types are bookkeeping for the `.mdl` file and mesh face naming.
"""

import logging
import os
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

import numpy as np
import pyvista as pv

from ..errors import ModelingError
from ..tools.gmsh_session import FACE_ID_ARRAY

logger = logging.getLogger(__name__)


class Model(ABC):
    """
    Abstract base class for solid models.

    Subclasses set `kernel` (kernel name), `type_name` (name stored in `.mdl` files) and
    `native_extension` (file extension of the native geometry file).
    """

    kernel = "INVALID"
    type_name = "Invalid"
    native_extension = ""
    write_formats = ()

    def __init__(self):
        self._face_info: Dict[int, Dict[str, str]] = {}

    @classmethod
    def available(cls) -> bool:
        return True

    # --------------------
    # Geometry access
    # --------------------
    @abstractmethod
    def get_polydata(self, max_dist: float = -1.0) -> pv.PolyData:
        """
        Surface of the model with a `ModelFaceID` cell array.

        Parameters
        ----------
        max_dist : float
            Maximum tessellation edge length for analytic kernels (<= 0: kernel default).
        """
        pass

    @abstractmethod
    def get_face_ids(self) -> List[int]:
        pass

    @abstractmethod
    def calculate_boundary_faces(self, angle: float) -> List[int]:
        """Partition the surface into faces separated by edges sharper than `angle` degrees."""
        pass

    @abstractmethod
    def delete_faces(self, face_ids) -> None:
        pass

    @abstractmethod
    def apply4x4(self, matrix) -> None:
        """Apply a 4x4 homogeneous transform to the model."""
        pass

    @abstractmethod
    def write_native(self, file_name: str) -> str:
        """Write the model in its native format to `file_name` (extension included)."""
        pass

    @abstractmethod
    def read_native(self, file_name: str) -> None:
        pass

    # --------------------
    # Shared operations
    # --------------------
    def _check_face_id(self, face_id, operation) -> int:
        if isinstance(face_id, bool) or not isinstance(face_id, (int, np.integer)):
            raise ModelingError("The face ID argument is not an integer.", operation=operation)
        if face_id <= 0:
            raise ModelingError("The face ID argument <= 0.", operation=operation)
        if int(face_id) not in self.get_face_ids():
            raise ModelingError("The face ID argument is not a valid face ID for the model.",
                                context={"face_id": int(face_id)}, operation=operation)
        return int(face_id)

    def get_face_polydata(self, face_id: int, max_dist: float = -1.0) -> pv.PolyData:
        fid = self._check_face_id(face_id, "get_face_polydata")
        surf = self.get_polydata(max_dist)
        ids = np.flatnonzero(np.asarray(surf.cell_data[FACE_ID_ARRAY]) == fid)
        return surf.extract_cells(ids).extract_surface()

    def get_face_normal(self, face_id: int, u: float = 0.0, v: float = 0.0) -> List[float]:
        """
        Area-weighted mean normal of a face.

        `u` and `v` are accepted for compatibility with parametric kernels and ignored for
        tessellated faces.
        """
        face = self.get_face_polydata(face_id).compute_normals(cell_normals=True,
                                                               point_normals=False)
        areas = face.compute_cell_sizes(length=False, volume=False)["Area"]
        n = (np.asarray(face.cell_data["Normals"]) * areas[:, None]).sum(axis=0)
        norm = np.linalg.norm(n)
        if norm == 0.0:
            raise ModelingError("Error getting the face normal for the solid model face ID '{}'."
                                .format(face_id), operation="get_face_normal")
        return (n / norm).tolist()

    def find_centroid(self) -> List[float]:
        surf = self.get_polydata()
        if surf.n_points == 0:
            raise ModelingError("Error finding centroid of the solid model.",
                                operation="find_centroid")
        return list(surf.center_of_mass())

    def check(self) -> int:
        """Number of boundary and non-manifold edges of the surface (0 for a closed solid)."""
        surf = self.get_polydata()
        edges = surf.extract_feature_edges(boundary_edges=True, non_manifold_edges=True,
                                           feature_edges=False, manifold_edges=False)
        return int(edges.n_cells)

    # --------------------
    # Face names
    # --------------------
    def get_face_names(self) -> Dict[int, str]:
        return {fid: self._face_info.get(fid, {}).get("name", "face_{}".format(fid))
                for fid in self.get_face_ids()}

    def set_face_names(self, names: Dict[int, str]) -> None:
        op = "set_face_names"
        if not isinstance(names, dict):
            raise ModelingError("The names argument is not a dict.", operation=op)
        for fid, name in names.items():
            fid = self._check_face_id(fid, op)
            self._face_info.setdefault(fid, {})["name"] = str(name)

    def get_face_attributes(self, face_id: int) -> Dict[str, str]:
        fid = self._check_face_id(face_id, "get_face_attributes")
        info = {"name": "face_{}".format(fid), "type": "wall"}
        info.update(self._face_info.get(fid, {}))
        return info

    def set_face_attributes(self, face_id: int, **attrs) -> None:
        fid = self._check_face_id(face_id, "set_face_attributes")
        self._face_info.setdefault(fid, {}).update({k: str(v) for k, v in attrs.items()})

    # --------------------
    # Files
    # --------------------
    def write(self, file_name: str, format: Optional[str] = None) -> str:
        """
        Write the model. `file_name` is given without extension; `format` is appended
        (defaults to the native extension).
        """
        op = "write"
        ext = os.path.splitext(file_name)[1]
        if ext:
            raise ModelingError("The file name argument has a file extension '{}'."
                                .format(ext.lstrip(".")), operation=op)
        fmt = (format or self.native_extension).lower().lstrip(".")
        if fmt != self.native_extension and fmt not in self.write_formats:
            raise ModelingError("Unsupported file format '{}'. Valid formats are: {}."
                                .format(fmt, ", ".join((self.native_extension,) + tuple(self.write_formats))),
                                operation=op)
        out = "{}.{}".format(file_name, fmt)
        try:
            if fmt == self.native_extension:
                self.write_native(out)
            else:
                self._write_format(out, fmt)
        except (OSError, RuntimeError, ValueError) as e:
            raise ModelingError("Error writing the solid model to the file '{}'.".format(out),
                                operation=op) from e
        logger.info("[Model] Wrote %s model to '%s'.", self.kernel, out)
        return out

    def _write_format(self, file_name: str, fmt: str) -> None:
        self.get_polydata().save(file_name)

    def __repr__(self):
        return "<{} kernel={}>".format(type(self).__name__, self.kernel)


def check_matrix(matrix, operation="apply4x4") -> np.ndarray:
    try:
        m = np.asarray(matrix, dtype=float)
    except (TypeError, ValueError):
        m = np.zeros(0)
    if m.shape != (4, 4):
        raise ModelingError("The matrix argument is not a 4x4 matrix.", operation=operation)
    return m
