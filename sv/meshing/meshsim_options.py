# -*- coding: utf-8 -*-
# sv/meshing/meshsim_options.py

"""
MeshSim meshing options.

The MeshSim mesher itself needs a licensed library (see meshsim.py), but its options
are plain data and can be built, validated and stored in `.msh` files regardless.
"""

from typing import Any, Dict

from ..errors import MeshingError

OPTION_NAMES = {
    "global_edge_size": "GlobalEdgeSize",
    "local_edge_size": "LocalEdgeSize",
    "surface_mesh_flag": "SurfaceMeshFlag",
    "volume_mesh_flag": "VolumeMeshFlag",
}

GLOBAL_EDGE_SIZE_FORMAT = "{ 'absolute':double, 'relative':double }"
LOCAL_EDGE_SIZE_FORMAT = "{ 'face_id':int, 'edge_size':double }"


def _check_global_edge_size(value, operation):
    msg = "The global_edge_size parameter must be a dictionary " + GLOBAL_EDGE_SIZE_FORMAT + "."
    if not isinstance(value, dict) or not value or not set(value) <= {"absolute", "relative"}:
        raise MeshingError(msg, operation=operation)
    out = {}
    for key, v in value.items():
        try:
            size = float(v)
        except (TypeError, ValueError):
            raise MeshingError(msg, operation=operation)
        if size <= 0.0:
            raise MeshingError("The {} edge size parameter must be > 0.".format(key),
                               operation=operation)
        out[key] = size
    return out


def _check_local_edge_size(value, operation):
    msg = "The local_edge_size parameter must be a dictionary " + LOCAL_EDGE_SIZE_FORMAT + "."
    if not isinstance(value, dict) or set(value) != {"face_id", "edge_size"}:
        raise MeshingError(msg, operation=operation)
    try:
        face_id = int(value["face_id"])
        size = float(value["edge_size"])
    except (TypeError, ValueError):
        raise MeshingError(msg, operation=operation)
    if face_id <= 0:
        raise MeshingError("The region ID paramter must be > 0.", operation=operation)
    if size <= 0.0:
        raise MeshingError("The size parameter must be > 0.", operation=operation)
    return {"face_id": face_id, "edge_size": size}


class MeshSimOptions:
    """
    MeshSim options.

    Parameters
    ----------
    global_edge_size : dict
        {'absolute': float} and/or {'relative': float}, values > 0.
    surface_mesh_flag, volume_mesh_flag : bool
    """

    def __init__(self, global_edge_size=None, surface_mesh_flag=True, volume_mesh_flag=True):
        self._global_edge_size = None
        self._local_edge_size = []
        self.surface_mesh_flag = bool(surface_mesh_flag)
        self.volume_mesh_flag = bool(volume_mesh_flag)
        if global_edge_size is not None:
            self.global_edge_size = global_edge_size

    @property
    def global_edge_size(self):
        return self._global_edge_size

    @global_edge_size.setter
    def global_edge_size(self, value):
        self._global_edge_size = _check_global_edge_size(value, "global_edge_size")

    @property
    def local_edge_size(self):
        return self._local_edge_size

    @local_edge_size.setter
    def local_edge_size(self, value):
        if isinstance(value, dict):
            value = [value]
        self._local_edge_size = [_check_local_edge_size(v, "local_edge_size") for v in value]

    @staticmethod
    def create_local_edge_size_parameter(face_id, edge_size) -> Dict[str, Any]:
        op = "create_local_edge_size_parameter"
        try:
            fid, size = int(face_id), float(edge_size)
        except (TypeError, ValueError):
            raise MeshingError("The local_edge_size parameter must be a dictionary "
                               + LOCAL_EDGE_SIZE_FORMAT + ".", operation=op)
        if size <= 0.0:
            raise MeshingError("The 'edge_size' must be > 0.", operation=op)
        if fid <= 0:
            raise MeshingError("The 'face_id' must be > 0.", operation=op)
        return {"face_id": fid, "edge_size": size}

    def get_values(self) -> Dict[str, Any]:
        values = {}
        for name, sv_name in OPTION_NAMES.items():
            value = getattr(self, name)
            if value is None or value == []:
                continue
            values[sv_name] = value
        return values

    def validate(self, operation="generate_mesh"):
        if self._global_edge_size is None:
            raise MeshingError("The global_edge_size option has not been set.", operation=operation)

    def __repr__(self):
        return "MeshSimOptions({})".format(self.get_values())
