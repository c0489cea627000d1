# -*- coding: utf-8 -*-
# sv/modeling/licensed.py

"""
Proprietary solid kernels (Parasolid, MeshSim discrete and MeshSim solid).

Their names are registered so scripts and project files can refer to them, but no
implementation ships with this package: `available()` is False and construction raises.
`.mdl` groups of these types can still be read and written; only their geometry cannot
be loaded.
"""

from ..errors import ModelingError
from .base import Model


class LicensedModel(Model):
    """Placeholder for a kernel that needs a commercial library."""

    library = ""

    def __init__(self):
        raise ModelingError("The {} kernel is not available: it requires the licensed {} library."
                            .format(self.kernel, self.library), operation=type(self).__name__)

    @classmethod
    def available(cls) -> bool:
        return False

    # The abstract interface is satisfied but unreachable since construction fails.
    def get_polydata(self, max_dist=-1.0):
        raise NotImplementedError

    def get_face_ids(self):
        raise NotImplementedError

    def calculate_boundary_faces(self, angle):
        raise NotImplementedError

    def delete_faces(self, face_ids):
        raise NotImplementedError

    def apply4x4(self, matrix):
        raise NotImplementedError

    def write_native(self, file_name):
        raise NotImplementedError

    def read_native(self, file_name):
        raise NotImplementedError


class ParasolidModel(LicensedModel):
    kernel = "PARASOLID"
    type_name = "Parasolid"
    native_extension = "xmt_txt"
    library = "Parasolid"


class DiscreteModel(LicensedModel):
    kernel = "DISCRETE"
    type_name = "Discrete"
    native_extension = "dsm"
    library = "MeshSim Discrete"


class MeshSimSolidModel(LicensedModel):
    kernel = "MESHSIMSOLID"
    type_name = "MeshSimSolid"
    native_extension = "sms"
    library = "MeshSim"
