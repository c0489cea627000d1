# -*- coding: utf-8 -*-
# sv/solver/__init__.py

"""
Modules:
--------
- preferences: MPI launcher and svpre/svsolver/svpost paths (org.sv.views.simulation).
- mpi:         launcher lookup, implementation detection, command prefix.
- run:         run_solver / run_program with timeout and early-stop.
- monitor:     output tails and failure-pattern detection.
"""

from .mpi import build_mpi_cmd, detect_implementation
from .preferences import Preferences
from .run import run_program, run_solver

__all__ = ["Preferences", "build_mpi_cmd", "detect_implementation", "run_program", "run_solver"]
