# -*- coding: utf-8 -*-
# sv/tools/utils.py

"""
Project: sv
Date: 10/18/2026

Purpose
-------
Argument validation and environment helpers shared by every subsystem:
    1. 3D point / point-list validation with the scripting-layer error messages.
    2. Index range checks for control points, curve points and group members.
    3. Executable lookup with an env-var override.

Notes:
------
    - Validation helpers raise the error class handed to them so each subsystem keeps
      its own exception type while sharing the message wording.
    - ensure_exec_on_path prefers <NAME>_BIN over PATH; quotes in env vars are stripped.
"""

import numbers
import os
import shutil

import numpy as np

from ..errors import SvError


def check_point(value, operation, name="point", error=SvError):
    """
    Validate a 3D point and return it as a float64 array of shape (3,).

    Parameters
    ----------
    value : Sequence[float]
        List, tuple or 1D array with three numbers.
    operation : str
        Name of the calling operation (used as the message prefix).
    name : str
        Argument description used in the message, e.g. 'Control point'.
    error : type
        Exception class to raise (an SvError subclass).

    Returns
    -------
    np.ndarray
        (3,) float64 array.

    Raises
    ------
    SvError
        If the value is not a sequence of three finite numbers.
    """
    if isinstance(value, np.ndarray):
        value = value.tolist()
    if not isinstance(value, (list, tuple)):
        raise error("The {} argument is not a Python list.".format(name), operation=operation)
    if len(value) != 3:
        raise error("The {} argument is not a 3D point (three float values).".format(name),
                    operation=operation)
    for i, v in enumerate(value):
        if isinstance(v, bool) or not isinstance(v, numbers.Real):
            raise error("The {} argument data at {} in the list is not a float.".format(name, i),
                        operation=operation)
    pt = np.asarray(value, dtype=np.float64)
    if not np.isfinite(pt).all():
        raise error("The {} argument has non-finite values.".format(name), operation=operation)
    return pt


def check_points(values, operation, name="points", error=SvError, min_count=0):
    """
    Validate a list of 3D points and return an (N, 3) float64 array.

    Raises
    ------
    SvError
        If the list is malformed or holds fewer than `min_count` points.
    """
    if isinstance(values, np.ndarray):
        values = values.tolist()
    if not isinstance(values, (list, tuple)):
        raise error("The {} argument is not a Python list.".format(name), operation=operation)
    if len(values) < min_count:
        raise error("The {} argument must contain at least {} points.".format(name, min_count),
                    operation=operation)
    pts = [check_point(v, operation, name="{} {}".format(name, i), error=error)
           for i, v in enumerate(values)]
    if not pts:
        return np.zeros((0, 3), dtype=np.float64)
    return np.vstack(pts)


def check_index(index, size, operation, what="point", error=SvError):
    """
    Validate 0 <= index < size and return the index as int.

    Raises
    ------
    SvError
        "The <what> index must be between 0 and N-1." or "... has no <what>s."
    """
    if isinstance(index, bool) or not isinstance(index, numbers.Integral):
        raise error("The {} index argument is not an integer.".format(what), operation=operation)
    if size <= 0:
        raise error("There are no {}s.".format(what), operation=operation)
    if index < 0 or index >= size:
        raise error("The {} index must be between 0 and {}.".format(what, size - 1),
                    context={"index": int(index)}, operation=operation)
    return int(index)


def check_positive(value, operation, name, error=SvError):
    """Return float(value) when > 0, else raise "The <name> argument is <= 0.0."."""
    try:
        v = float(value)
    except (TypeError, ValueError):
        raise error("The {} argument is not a float.".format(name), operation=operation)
    if v <= 0.0:
        raise error("The {} argument is <= 0.0.".format(name), operation=operation)
    return v


def ensure_exec_on_path(exe_name):
    """
    Find an executable on PATH (or via env var) or raise a clear error.

    Checks the environment variable '<NAME>_BIN' first (uppercased), then PATH.

    Parameters
    ----------
    exe_name : str
        Name of the executable, e.g. 'mpiexec' or 'svsolver'.

    Returns
    -------
    str
        Absolute path to the executable.

    Raises
    ------
    RuntimeError
        If the executable is not found on the system PATH.
    """
    env_key = (exe_name + "_BIN").upper().replace("-", "_")
    candidate = os.environ.get(env_key)
    if candidate:
        candidate = candidate.strip().strip('"').strip("'")
        if os.path.isfile(candidate) and os.access(candidate, os.X_OK):
            return os.path.abspath(candidate)

    exe = shutil.which(exe_name) or shutil.which(exe_name + ".exe")
    if exe is None:
        raise RuntimeError(
            "'{}' not found on PATH. "
            "Install it or set the {} environment variable to its full path."
            .format(exe_name, env_key)
        )
    return os.path.abspath(exe)
