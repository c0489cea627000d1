# -*- coding: utf-8 -*-
# sv/meshing/meshsim.py

"""
MeshSim mesher placeholder (kernel name MESHSIM).

MeshSim is a licensed library: the kernel name is registered, `available()` is False
and construction raises. MeshSimOptions remain usable for `.msh` files.
"""

from ..errors import MeshingError
from .base import Mesher
from .meshsim_options import MeshSimOptions


class MeshSimMesher(Mesher):

    kernel = "MESHSIM"
    options_class = MeshSimOptions

    def __init__(self):
        raise MeshingError("The MESHSIM kernel is not available: it requires the licensed "
                           "MeshSim library.", operation="MeshSim")

    @classmethod
    def available(cls) -> bool:
        return False

    def _generate(self, solid, size_field):
        raise NotImplementedError
