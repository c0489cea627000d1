# -*- coding: utf-8 -*-
# sv/modeling/kernel.py

"""
Solid kernel names and the name → model class map.

Unknown names raise listing "DISCRETE, MESHSIMSOLID, OCCT, PARASOLID or POLYDATA".
"""

from ..errors import ModelingError
from ..tools.kernels import KernelMap, KernelSpec
from .licensed import DiscreteModel, MeshSimSolidModel, ParasolidModel
from .occt import OpenCascadeModel
from .polydata import PolyDataModel


class Kernel:
    """Solid kernel names."""
    DISCRETE = "DISCRETE"
    MESHSIMSOLID = "MESHSIMSOLID"
    OCCT = "OCCT"
    PARASOLID = "PARASOLID"
    POLYDATA = "POLYDATA"

    @staticmethod
    def get_names():
        return SOLID_KERNELS.names()


SOLID_KERNELS = KernelMap("solid")

for _cls in (DiscreteModel, MeshSimSolidModel, OpenCascadeModel, ParasolidModel, PolyDataModel):
    SOLID_KERNELS.add(KernelSpec(_cls.kernel, _cls, available=_cls.available(),
                                 description=_cls.type_name))

# `type` attribute of .mdl files → model classes.
MODEL_TYPES = {cls.type_name.lower(): cls
               for cls in (DiscreteModel, MeshSimSolidModel, OpenCascadeModel, ParasolidModel,
                           PolyDataModel)}
MODEL_TYPES["occt"] = OpenCascadeModel


def model_class(kernel, operation: str = "Model"):
    """Resolve a kernel name to its model class, rejecting unknown or unavailable kernels."""
    spec = SOLID_KERNELS.get(kernel, operation=operation)
    if not spec.available:
        raise ModelingError("The '{}' kernel is not supported.".format(spec.name), operation=operation)
    return spec.factory


def model_class_for_type(type_name: str, operation: str = "read"):
    cls = MODEL_TYPES.get(str(type_name).lower())
    if cls is None:
        raise ModelingError("Unknown solid model type '{}'.".format(type_name), operation=operation)
    return cls
