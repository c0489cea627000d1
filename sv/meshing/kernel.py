# -*- coding: utf-8 -*-
# sv/meshing/kernel.py

"""
Meshing kernel names, the name → mesher map and the module-level current kernel.

Unknown names raise listing "GMSH, MESHSIM or TETGEN"; INVALID is a registered
placeholder that cannot be built.
"""

import logging
from typing import Optional

from ..errors import MeshingError
from ..tools.kernels import KernelMap, KernelSpec
from . import base
from .gmsh_mesher import GmshMesher
from .meshsim import MeshSimMesher
from .tetgen import TetGenMesher

logger = logging.getLogger(__name__)


class Kernel:
    """Meshing kernel names."""
    GMSH = "GMSH"
    INVALID = "INVALID"
    MESHSIM = "MESHSIM"
    TETGEN = "TETGEN"

    @staticmethod
    def get_names():
        return MESH_KERNELS.names()


MESH_KERNELS = KernelMap("meshing")
MESH_KERNELS.add(KernelSpec("GMSH", GmshMesher, description="Gmsh"))
MESH_KERNELS.add(KernelSpec("INVALID", None, available=False))
MESH_KERNELS.add(KernelSpec("MESHSIM", MeshSimMesher, available=MeshSimMesher.available(),
                            description="MeshSim (licensed)"))
MESH_KERNELS.add(KernelSpec("TETGEN", TetGenMesher, description="TetGen"))

_current_kernel = None  # type: Optional[str]


def create(kernel=Kernel.TETGEN):
    """Create a mesher for `kernel` (MESHSIM raises: the library is not available)."""
    mesher = MESH_KERNELS.create(kernel, operation="create")
    logger.debug("[Meshing] Created %s mesher.", mesher.kernel)
    return mesher


def set_kernel(kernel) -> None:
    """Select the module-level meshing kernel used for logging and defaults."""
    global _current_kernel
    _current_kernel = MESH_KERNELS.get(kernel, operation="set_kernel").name


def get_kernel() -> Optional[str]:
    return _current_kernel


def logging_on(file_name: str) -> None:
    if _current_kernel is None:
        raise MeshingError("The mesh kernel is not set.", operation="logging_on")
    base.logging_on(file_name)


def logging_off() -> Optional[str]:
    if _current_kernel is None:
        raise MeshingError("The mesh kernel is not set.", operation="logging_off")
    return base.logging_off()
