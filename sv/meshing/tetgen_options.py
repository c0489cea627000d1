# -*- coding: utf-8 -*-
# sv/meshing/tetgen_options.py

"""
Project: sv
Date: 10/18/2026

Purpose:
--------
TetGen meshing options: plain attributes with script-friendly names, a translation
table to the mesher option names used in `.msh` command histories, and parsing of
those command histories back into an options object.

Main Tasks:
-----------
    1. Hold every TetGen option (None means "not set, do not send").
    2. Validate composite parameters (local edge sizes, subdomains, holes, spheres).
    3. Translate to/from the mesher option names (GlobalEdgeSize, LocalEdgeSize, ...).
    4. Parse `.msh` command histories ("option surface 1", "localSize wall 0.5", ...).

Notes:
------
- `sphere_refinement` is applied through Mesher.set_sphere_refinement and is not part
  of the option-name table.
- Commands without the "option" prefix are mesher parameters (e.g. "setWalls",
  "AllowMultipleRegions 0"); they are returned to the caller untouched.
"""

import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from ..errors import MeshingError
from ..tools.utils import check_point

logger = logging.getLogger(__name__)

# Script attribute name -> mesher option name.
OPTION_NAMES = {
    "add_hole": "AddHole",
    "add_subdomain": "AddSubDomain",
    "boundary_layer_direction": "BoundaryLayerDirection",
    "check": "Check",
    "coarsen_percent": "CoarsenPercent",
    "diagnose": "Diagnose",
    "epsilon": "Epsilon",
    "global_edge_size": "GlobalEdgeSize",
    "hausd": "Hausd",
    "local_edge_size": "LocalEdgeSize",
    "mesh_wall_first": "MeshWallFirst",
    "new_region_boundary_layer": "NewRegionBoundaryLayer",
    "no_bisect": "NoBisect",
    "no_merge": "NoMerge",
    "optimization": "Optimization",
    "quality_ratio": "QualityRatio",
    "quiet": "Quiet",
    "start_with_volume": "StartWithVolume",
    "surface_mesh_flag": "SurfaceMeshFlag",
    "use_mmg": "UseMMG",
    "verbose": "Verbose",
    "volume_mesh_flag": "VolumeMeshFlag",
}

SV_NAMES = {v: k for k, v in OPTION_NAMES.items()}

# Names used by the legacy command history that differ from the option names.
COMMAND_ALIASES = {
    "localSize": "LocalEdgeSize",
    "surface": "SurfaceMeshFlag",
    "volume": "VolumeMeshFlag",
}

_FLOAT_OPTIONS = ("coarsen_percent", "epsilon", "global_edge_size", "hausd", "quality_ratio")
_INT_OPTIONS = ("boundary_layer_direction", "optimization")
_BOOL_OPTIONS = ("check", "diagnose", "mesh_wall_first", "new_region_boundary_layer",
                 "no_bisect", "no_merge", "quiet", "start_with_volume", "surface_mesh_flag",
                 "use_mmg", "verbose", "volume_mesh_flag")

LOCAL_EDGE_SIZE_FORMAT = "{ 'face_id':int, 'edge_size':double }"
ADD_SUBDOMAIN_FORMAT = "{ 'coordinate':[x,y,z], 'region_size':int }"
SPHERE_REFINEMENT_FORMAT = "{ 'edge_size':double, 'radius':double, 'center':[x,y,z] }"


def _to_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def check_local_edge_size(value, operation):
    msg = "The local_edge_size parameter must be a dictionary " + LOCAL_EDGE_SIZE_FORMAT + "."
    if not isinstance(value, dict) or set(value) != {"face_id", "edge_size"}:
        raise MeshingError(msg, operation=operation)
    try:
        face_id = int(value["face_id"])
        edge_size = float(value["edge_size"])
    except (TypeError, ValueError):
        raise MeshingError(msg, operation=operation)
    if edge_size <= 0.0:
        raise MeshingError("The 'edge_size' must be > 0.", operation=operation)
    if face_id <= 0:
        raise MeshingError("The 'face_id' must be > 0.", operation=operation)
    return {"face_id": face_id, "edge_size": edge_size}


class TetGenOptions:
    """
    TetGen meshing options.

    Parameters
    ----------
    global_edge_size : float
        Target edge length for the whole mesh (> 0).
    surface_mesh_flag : bool, optional
        Remesh the model surface before volume meshing.
    volume_mesh_flag : bool, optional
        Generate the tetrahedral volume mesh.

    Attributes left as None are not sent to the mesher.
    """

    def __init__(self, global_edge_size=None, surface_mesh_flag=True, volume_mesh_flag=True):
        self.add_hole = None
        self.add_subdomain = None
        self.boundary_layer_direction = None
        self.check = None
        self.coarsen_percent = None
        self.diagnose = None
        self.epsilon = None
        self.global_edge_size = None
        self.hausd = None
        self.local_edge_size = []
        self.mesh_wall_first = True
        self.new_region_boundary_layer = None
        self.no_bisect = True
        self.no_merge = None
        self.optimization = 3
        self.quality_ratio = 1.4
        self.quiet = None
        self.sphere_refinement = None
        self.start_with_volume = None
        self.surface_mesh_flag = bool(surface_mesh_flag)
        self.use_mmg = None
        self.verbose = None
        self.volume_mesh_flag = bool(volume_mesh_flag)
        if global_edge_size is not None:
            self.set_global_edge_size(global_edge_size)

    # --------------------
    # Composite parameters
    # --------------------
    def set_global_edge_size(self, value):
        try:
            size = float(value)
        except (TypeError, ValueError):
            raise MeshingError("The global_edge_size parameter is not a float.",
                               operation="set_global_edge_size")
        if size <= 0.0:
            raise MeshingError("The global_edge_size parameter must be > 0.",
                               operation="set_global_edge_size")
        self.global_edge_size = size

    def set_add_hole(self, point):
        try:
            self.add_hole = check_point(point, "add_hole", "add_hole", MeshingError).tolist()
        except MeshingError:
            raise MeshingError("The add_hole parameter must be a list of three floats.",
                               operation="add_hole")

    def add_local_edge_size(self, face_id, edge_size):
        """Append a per-face edge size; returns the new entry."""
        entry = self.create_local_edge_size_parameter(face_id, edge_size)
        self.local_edge_size.append(entry)
        return entry

    # Name kept by older scripts.
    add_local_edge_size_parameter = add_local_edge_size

    @staticmethod
    def create_local_edge_size_parameter(face_id, edge_size) -> Dict[str, Any]:
        op = "create_local_edge_size_parameter"
        return check_local_edge_size({"face_id": face_id, "edge_size": edge_size}, op)

    @staticmethod
    def create_add_subdomain_parameter(coordinate, region_size) -> Dict[str, Any]:
        op = "create_add_subdomain_parameter"
        try:
            xyz = check_point(coordinate, op, "coordinate", MeshingError)
        except MeshingError:
            raise MeshingError("The add_subdomain 'coordinate' parameter must be a list of "
                               "three floats.", operation=op)
        try:
            size = int(region_size)
        except (TypeError, ValueError):
            raise MeshingError("The add_subdomain parameter must be a " + ADD_SUBDOMAIN_FORMAT + ".",
                               operation=op)
        if size <= 0:
            raise MeshingError("The 'region_size' must be > 0.", operation=op)
        return {"coordinate": xyz.tolist(), "region_size": size}

    @staticmethod
    def create_sphere_refinement_parameter(edge_size, radius, center) -> Dict[str, Any]:
        op = "create_sphere_refinement_parameter"
        c = check_point(center, op, "sphere center", MeshingError)
        try:
            es, r = float(edge_size), float(radius)
        except (TypeError, ValueError):
            raise MeshingError("The sphere_refinement parameter must be a "
                               + SPHERE_REFINEMENT_FORMAT + ".", operation=op)
        if es <= 0.0 or r <= 0.0:
            raise MeshingError("The sphere_refinement 'edge_size' and 'radius' must be > 0.",
                               operation=op)
        return {"edge_size": es, "radius": r, "center": c.tolist()}

    # --------------------
    # Values
    # --------------------
    def validate(self, operation="generate_mesh"):
        """Check the options can be sent to the mesher."""
        if self.global_edge_size is None:
            raise MeshingError("The global_edge_size option has not been set.", operation=operation)
        self.local_edge_size = [check_local_edge_size(v, operation) for v in self.local_edge_size]

    def get_values(self) -> Dict[str, Any]:
        """Options that are set, keyed by their mesher option name."""
        values = {}
        for name, sv_name in OPTION_NAMES.items():
            value = getattr(self, name)
            if value is None or (name == "local_edge_size" and not value):
                continue
            values[sv_name] = value
        return values

    def set_value(self, sv_name: str, value, operation="set_value"):
        """Set one option from its mesher option name (string values are converted)."""
        name = SV_NAMES.get(sv_name)
        if name is None:
            raise MeshingError("Unknown TetGen option '{}'.".format(sv_name), operation=operation)
        try:
            if name in _FLOAT_OPTIONS:
                value = float(value)
            elif name in _INT_OPTIONS:
                value = int(float(value))
            elif name in _BOOL_OPTIONS:
                value = _to_bool(value)
        except (TypeError, ValueError):
            raise MeshingError("The value '{}' of the TetGen option '{}' is not valid."
                               .format(value, sv_name), operation=operation)
        if name == "local_edge_size":
            self.local_edge_size.append(check_local_edge_size(value, operation))
        else:
            setattr(self, name, value)

    def __repr__(self):
        return "TetGenOptions({})".format(self.get_values())

    # --------------------
    # Command history
    # --------------------
    @classmethod
    def create_from_commands(cls, commands, face_map: Optional[Dict[str, int]] = None
                             ) -> Tuple["TetGenOptions", List[List[str]]]:
        """
        Build options from a `.msh` command history.

        Parameters
        ----------
        commands : Iterable[str]
            Command lines, e.g. "option surface 1", "option GlobalEdgeSize 0.4",
            "localSize wall_aorta 0.2".
        face_map : dict, optional
            Face name -> face id used to resolve local edge size commands.

        Returns
        -------
        (TetGenOptions, list of list of str)
            The options and the remaining mesher parameter commands split into words.
        """
        op = "create_from_commands"
        face_map = face_map or {}
        options = cls()
        params = []
        for command in commands:
            words = [w for w in re.split(r"[\s,]+", command.strip()) if w]
            if not words:
                continue
            if words[0] == "option":
                words = words[1:]
            elif words[0] != "localSize":
                params.append(words)
                continue
            if not words:
                continue
            name = COMMAND_ALIASES.get(words[0], words[0])
            if name == "LocalEdgeSize":
                options.local_edge_size.append(cls._local_size_command(words, face_map, op))
            elif name in SV_NAMES:
                options.set_value(name, words[1] if len(words) > 1 else True, op)
            else:
                logger.debug("[TetGenOptions] Ignoring unknown option command '%s'.", command)
        return options, params

    @staticmethod
    def _local_size_command(words, face_map, op):
        if len(words) != 3:
            raise MeshingError("The localSize command '{}' must be 'localSize <face> <size>'."
                               .format(" ".join(words)), operation=op)
        face = words[1]
        if face in face_map:
            face_id = face_map[face]
        else:
            try:
                face_id = int(face)
            except ValueError:
                raise MeshingError("The face '{}' in a localSize command is not a face of the model."
                                   .format(face), operation=op)
        return check_local_edge_size({"face_id": face_id, "edge_size": words[2]}, op)

    def to_commands(self, face_names: Optional[Dict[int, str]] = None) -> List[str]:
        """Render the options as `.msh` command history lines."""
        face_names = face_names or {}
        out = []
        for sv_name, value in self.get_values().items():
            if sv_name == "LocalEdgeSize":
                for v in value:
                    out.append("localSize {} {}".format(face_names.get(v["face_id"], v["face_id"]),
                                                        v["edge_size"]))
                continue
            if sv_name in ("AddHole", "AddSubDomain"):
                continue
            if isinstance(value, bool):
                value = int(value)
            alias = {v: k for k, v in COMMAND_ALIASES.items()}.get(sv_name, sv_name)
            out.append("option {} {}".format(alias, value))
        return out
