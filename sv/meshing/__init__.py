# -*- coding: utf-8 -*-
# sv/meshing/__init__.py

"""
Modules:
--------
- base:            Mesher interface, refinements, mesh queries and file output.
- kernel:          kernel names, create/set_kernel and mesh-kernel log files.
- tetgen:          TetGen mesher and radius-based sizing.
- gmsh_mesher:     Gmsh surface and volume mesher.
- meshsim:         MeshSim placeholder (registered, unavailable).
- tetgen_options / meshsim_options: option objects and `.msh` command histories.
- sizing / remesh: size field and Gmsh surface remeshing.
- centerlines:     skeleton centerlines and distance to centerlines.
- io:              mesh files, statistics and METIS adjacency.
- group:           meshing group read/written as .msh files.
"""

from .base import Mesher
from .gmsh_mesher import GmshMesher, GmshOptions
from .group import Group
from .kernel import Kernel, create, get_kernel, logging_off, logging_on, set_kernel
from .meshsim import MeshSimMesher
from .meshsim_options import MeshSimOptions
from .tetgen import TetGenMesher, TetGenRadiusBased
from .tetgen_options import TetGenOptions

# Kernel class names used by scripts.
TetGen = TetGenMesher
MeshSim = MeshSimMesher
Gmsh = GmshMesher

__all__ = [
    "Mesher",
    "Kernel",
    "create",
    "set_kernel",
    "get_kernel",
    "logging_on",
    "logging_off",
    "TetGen",
    "TetGenMesher",
    "TetGenOptions",
    "TetGenRadiusBased",
    "MeshSim",
    "MeshSimMesher",
    "MeshSimOptions",
    "Gmsh",
    "GmshMesher",
    "GmshOptions",
    "Group",
]
