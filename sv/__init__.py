# -*- coding: utf-8 -*-
# sv/__init__.py

"""
Project: sv
Date: 10/18/2026

Modules:
--------
- path:         centerline paths and .pth groups.
- segmentation: contour kernels and .ctgr groups.
- geometry:     profile alignment and lofting.
- modeling:     solid kernels (PolyData, OpenCascade, Parasolid) and .mdl groups.
- meshing:      meshing kernels (TetGen, Gmsh, MeshSim) and .msh groups.
- solver:       MPI/solver preferences and the solver runner.
- post:         quick-look plots.
- tools:        validation, kernel registries, XML, logging and gmsh helpers.
- errors:       exception types.
"""

__version__ = "0.1.0"

__all__ = ["path", "segmentation", "geometry", "modeling", "meshing", "solver", "post",
           "tools", "errors"]
