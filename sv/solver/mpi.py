# -*- coding: utf-8 -*-
# sv/solver/mpi.py

"""
Project: sv
Date: 10/18/2026

Purpose
-------
MPI launcher helpers for the simulation executables. Resolves a usable launcher
(user-specified or common fallbacks), identifies its implementation from the
`--version` banner and builds the command prefix prepended to solver invocations.

Main Tasks
----------
    1. Short-circuit to serial (empty prefix) when `nprocs<=1`.
    2. Locate an MPI launcher via `shutil.which` (user name, then mpiexec/mpirun).
    3. Detect the implementation: OpenMPI, MPICH or Unknown.

Notes
-----
- If no launcher is found, `build_mpi_cmd` returns an empty list so the caller can
  decide whether to error (when `nprocs>1`) or fall back to serial execution.
- Both OpenMPI and MPICH accept `-n`; we standardize on it.
"""

import logging
import shutil
import subprocess
from typing import List, Optional

logger = logging.getLogger(__name__)

OPENMPI = "OpenMPI"
MPICH = "MPICH"
UNKNOWN = "Unknown"
IMPLEMENTATIONS = (OPENMPI, MPICH, UNKNOWN)

# Launcher path shown when nothing usable was found.
UNKNOWN_BINARY = "not found"

_LAUNCHERS = ("mpiexec", "mpirun")


def find_mpiexec(mpi_exec: Optional[str] = None) -> Optional[str]:
    """
    Resolve an MPI launcher.

    Parameters
    ----------
    mpi_exec : str, optional
        Preferred launcher name or path. Empty strings and UNKNOWN_BINARY fall back
        to the launchers found on PATH.

    Returns
    -------
    Optional[str]
        Absolute path of the launcher, or None.
    """
    names = []
    if mpi_exec and mpi_exec.strip() and mpi_exec.strip() != UNKNOWN_BINARY:
        names.append(mpi_exec.strip())
    names.extend(_LAUNCHERS)
    for name in names:
        found = shutil.which(name)
        if found:
            return found
    return None


def implementation_from_banner(text: str) -> str:
    """Classify a `--version` banner as OpenMPI, MPICH or Unknown."""
    s = (text or "").lower()
    if "open mpi" in s or "openrte" in s or "open-mpi" in s:
        return OPENMPI
    if "mpich" in s or "hydra" in s:
        return MPICH
    return UNKNOWN


def detect_implementation(mpi_exec: Optional[str], timeout_s: float = 10.0) -> str:
    """
    Run `<mpi_exec> --version` and classify the output.

    Returns UNKNOWN when the launcher is missing, fails to start or times out.
    """
    if not mpi_exec or mpi_exec == UNKNOWN_BINARY:
        return UNKNOWN
    try:
        proc = subprocess.run([mpi_exec, "--version"], stdout=subprocess.PIPE,
                              stderr=subprocess.STDOUT, universal_newlines=True,
                              timeout=timeout_s)
    except (OSError, subprocess.SubprocessError) as e:
        logger.warning("[MPI] Unable to run '%s --version': %s", mpi_exec, e)
        return UNKNOWN
    impl = implementation_from_banner(proc.stdout)
    logger.info("[MPI] '%s' is %s.", mpi_exec, impl)
    return impl


def build_mpi_cmd(mpi_exec: str, nprocs: int) -> List[str]:
    """
    Build a launcher prefix for MPI execution.

    Parameters
    ----------
    mpi_exec : str
        Preferred MPI launcher name or path (e.g., "mpiexec", "mpirun").
    nprocs : int
        Requested number of MPI ranks.

    Returns
    -------
    List[str]
        Command prefix (e.g., ["/usr/bin/mpiexec", "-n", "4"]) or `[]` if serial
        or no launcher is available.
    """
    try:
        n = int(nprocs or 0)
    except (TypeError, ValueError):
        n = 0

    if n <= 1:
        return []

    launcher = find_mpiexec(mpi_exec)
    if not launcher:
        return []
    return [launcher, "-n", str(n)]
