# -*- coding: utf-8 -*-
# sv/modeling/__init__.py

"""
Modules:
--------
- base:     Model interface shared by every solid kernel.
- polydata: triangulated-surface kernel (pyvista).
- occt:     OpenCascade kernel through Gmsh's OCC API.
- licensed: Parasolid / MeshSim placeholders (registered, unavailable).
- kernel:   kernel names and the name → model class map.
- modeler:  primitives, Booleans and file reading for one kernel.
- group:    solid model group read/written as .mdl files.
"""

from .base import Model
from .group import Group
from .kernel import Kernel
from .licensed import DiscreteModel, MeshSimSolidModel, ParasolidModel
from .modeler import Modeler
from .occt import OpenCascadeModel
from .polydata import PolyDataModel

# Kernel class names used by scripts.
PolyData = PolyDataModel
OpenCascade = OpenCascadeModel
Parasolid = ParasolidModel

__all__ = [
    "Model",
    "Modeler",
    "Kernel",
    "Group",
    "PolyData",
    "PolyDataModel",
    "OpenCascade",
    "OpenCascadeModel",
    "Parasolid",
    "ParasolidModel",
    "DiscreteModel",
    "MeshSimSolidModel",
]
