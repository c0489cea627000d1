# -*- coding: utf-8 -*-
# sv/meshing/gmsh_mesher.py

"""
Gmsh meshing kernel (kernel name GMSH).

The model surface is reparametrized and remeshed by Gmsh and the enclosed volume is
filled with Gmsh's 3D Delaunay/Frontal algorithms in the same session; sizes come
from the mesher SizeField through a size callback.
"""

import logging
from typing import Any, Dict, Optional, Tuple

import pyvista as pv

from ..errors import MeshingError
from .base import Mesher
from .remesh import remesh
from .sizing import SizeField
from .tetgen_options import TetGenOptions, check_local_edge_size

logger = logging.getLogger(__name__)

# Command history options only the Gmsh mesher reads.
_GMSH_COMMANDS = ("FeatureAngle", "Optimize")


class GmshOptions:
    """
    Gmsh options.

    Parameters
    ----------
    global_edge_size : float
        Target edge length (> 0).
    feature_angle : float
        Angle (degrees) at which the model surface is split into patches.
    """

    def __init__(self, global_edge_size=None, surface_mesh_flag=True, volume_mesh_flag=True,
                 feature_angle=40.0, optimize=True):
        self.global_edge_size = None if global_edge_size is None else float(global_edge_size)
        self.local_edge_size = []
        self.surface_mesh_flag = bool(surface_mesh_flag)
        self.volume_mesh_flag = bool(volume_mesh_flag)
        self.feature_angle = float(feature_angle)
        self.optimize = bool(optimize)

    def add_local_edge_size(self, face_id, edge_size):
        entry = check_local_edge_size({"face_id": face_id, "edge_size": edge_size},
                                      "add_local_edge_size")
        self.local_edge_size.append(entry)
        return entry

    def validate(self, operation="generate_mesh"):
        if self.global_edge_size is None or self.global_edge_size <= 0.0:
            raise MeshingError("The global_edge_size option must be > 0.", operation=operation)
        self.local_edge_size = [check_local_edge_size(v, operation) for v in self.local_edge_size]

    def get_values(self) -> Dict[str, Any]:
        values = dict(vars(self))
        if not values["local_edge_size"]:
            del values["local_edge_size"]
        return {k: v for k, v in values.items() if v is not None}

    def to_commands(self, face_names: Optional[Dict[int, str]] = None):
        """`.msh` command history lines (same vocabulary as TetGen)."""
        face_names = face_names or {}
        out = ["option GlobalEdgeSize {}".format(self.global_edge_size),
               "option surface {}".format(int(self.surface_mesh_flag)),
               "option volume {}".format(int(self.volume_mesh_flag)),
               "option FeatureAngle {}".format(self.feature_angle),
               "option Optimize {}".format(int(self.optimize))]
        for v in self.local_edge_size:
            out.append("localSize {} {}".format(face_names.get(v["face_id"], v["face_id"]),
                                                v["edge_size"]))
        return out

    @classmethod
    def create_from_commands(cls, commands, face_map=None):
        """Parse a command history; TetGen-only options are dropped."""
        op = "create_from_commands"
        gmsh_only, rest = {}, []
        for command in commands:
            words = command.split()
            if len(words) == 3 and words[0] == "option" and words[1] in _GMSH_COMMANDS:
                gmsh_only[words[1]] = words[2]
            else:
                rest.append(command)
        tg, params = TetGenOptions.create_from_commands(rest, face_map)
        try:
            angle = float(gmsh_only.get("FeatureAngle", 40.0))
            optimize = str(gmsh_only.get("Optimize", "1")).lower() in ("1", "true")
        except ValueError:
            raise MeshingError("The FeatureAngle command value '{}' is not a number."
                               .format(gmsh_only["FeatureAngle"]), operation=op)
        options = cls(tg.global_edge_size, tg.surface_mesh_flag, tg.volume_mesh_flag,
                      feature_angle=angle, optimize=optimize)
        options.local_edge_size = list(tg.local_edge_size)
        return options, params

    def __repr__(self):
        return "GmshOptions({})".format(self.get_values())


class GmshMesher(Mesher):
    """Gmsh surface and volume mesher."""

    kernel = "GMSH"
    options_class = GmshOptions

    def _generate(self, solid: pv.PolyData, size_field: SizeField
                  ) -> Tuple[pv.PolyData, Optional[pv.UnstructuredGrid]]:
        opts = self._options
        if not opts.surface_mesh_flag and not opts.volume_mesh_flag:
            return solid.triangulate().clean(), None
        if not opts.surface_mesh_flag:
            logger.info("[Gmsh] Volume meshing always remeshes the surface.")
        return remesh(solid, size_field, volume=opts.volume_mesh_flag,
                      angle=opts.feature_angle, optimize=opts.optimize)
