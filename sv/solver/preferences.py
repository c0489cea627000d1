# -*- coding: utf-8 -*-
# sv/solver/preferences.py

"""
Project: sv
Date: 10/18/2026

Purpose
-------
Persisted key-value store for the MPI launcher and the svpre/svsolver/svpost
executables, kept under the node `org.sv.views.simulation` of a JSON file.

Main Tasks
----------
    1. Flatten sectioned defaults (MPI, SOLVER) into one key set.
    2. Merge stored values over the defaults; reject unknown keys.
    3. Resolve empty/unknown executable paths to the defaults found on PATH and
       re-detect the MPI implementation whenever the launcher path changes.
    4. Save atomically (tempfile + os.replace); `mpiexec_path` is only saved when
       `use_mpi` is on.

Notes
-----
- Other nodes in the same file are preserved on save.
- Executables are resolved with `ensure_exec_on_path`, so `<NAME>_BIN` env vars win.
"""

import copy
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from ..errors import PreferencesError
from ..tools.utils import ensure_exec_on_path
from . import mpi

logger = logging.getLogger(__name__)

NODE = "org.sv.views.simulation"

DEFAULT_FILE = os.path.join(os.path.expanduser("~"), ".sv", "preferences.json")

# -----------------------------
_DEFAULTS_SECTIONS = [
    ("MPI", {
        "use_mpi": True,
        "mpiexec_path": "",
        "mpi_implementation": mpi.UNKNOWN,
    }),
    ("SOLVER", {
        "svpre_path": "",
        "svsolver_path": "",
        "svpost_path": "",
    }),
]

_EXECUTABLES = {
    "svpre_path": "svpre",
    "svsolver_path": "svsolver",
    "svpost_path": "svpost",
}


def _flatten_defaults(sections):
    flat = {}  # type: Dict[str, Any]
    for _name, block in sections:
        flat.update(block)
    return flat


_DEFAULTS = _flatten_defaults(_DEFAULTS_SECTIONS)


def default_executable(name: str) -> str:
    """Path of `name` from <NAME>_BIN or PATH, or mpi.UNKNOWN_BINARY."""
    try:
        return ensure_exec_on_path(name)
    except RuntimeError:
        return mpi.UNKNOWN_BINARY


def _is_unset(path) -> bool:
    return not path or not str(path).strip() or str(path).strip() == mpi.UNKNOWN_BINARY


def _write_json(data, path):
    # type: (Mapping[str, Any], str) -> str
    p = Path(path)
    if not p.parent.exists():
        p.parent.mkdir(parents=True)
    tf = tempfile.NamedTemporaryFile("w", encoding="utf-8", dir=str(p.parent), delete=False)
    try:
        json.dump(data, tf, indent=2, sort_keys=True)
        tf.write("\n")
        tmp_name = tf.name
    finally:
        tf.close()
    os.replace(tmp_name, str(p))
    return str(p)


class Preferences:
    """
    Solver and MPI preferences.

    Parameters
    ----------
    file_name : str, optional
        JSON store; defaults to ~/.sv/preferences.json. A missing file means defaults.
    detect : bool
        Resolve unset executables and the MPI implementation on load.
    """

    def __init__(self, file_name: Optional[str] = None, detect: bool = True):
        self.file_name = file_name or DEFAULT_FILE
        self._values = copy.deepcopy(_DEFAULTS)  # type: Dict[str, Any]
        self.load()
        if detect:
            self.initialize_locations()

    # --------------------
    # Store
    # --------------------
    def _read_store(self) -> Dict[str, Any]:
        if not os.path.isfile(self.file_name):
            return {}
        try:
            with open(self.file_name, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise PreferencesError("Unable to read the preferences file '{}'."
                                   .format(self.file_name), operation="load") from e
        if not isinstance(data, dict):
            raise PreferencesError("The preferences file '{}' is not a JSON object."
                                   .format(self.file_name), operation="load")
        return data

    def load(self) -> None:
        """Merge the stored node over the defaults; unknown stored keys are ignored."""
        node = self._read_store().get(NODE, {})
        values = copy.deepcopy(_DEFAULTS)
        for key, value in node.items():
            if key in values:
                values[key] = value
            else:
                logger.warning("[Preferences] Ignoring unknown key '%s' in '%s'.",
                               key, self.file_name)
        values["use_mpi"] = bool(values["use_mpi"])
        self._values = values

    def save(self) -> str:
        """Write the node atomically; other nodes in the file are kept."""
        data = self._read_store()
        node = {k: v for k, v in self._values.items() if k != "mpiexec_path"}
        if self._values["use_mpi"]:
            node["mpiexec_path"] = self._values["mpiexec_path"]
        elif "mpiexec_path" in data.get(NODE, {}):
            node["mpiexec_path"] = data[NODE]["mpiexec_path"]
        data[NODE] = node
        try:
            out = _write_json(data, self.file_name)
        except OSError as e:
            raise PreferencesError("Unable to write the preferences file '{}'."
                                   .format(self.file_name), operation="save") from e
        logger.info("[Preferences] Saved '%s'.", out)
        return out

    # --------------------
    # Access
    # --------------------
    def get(self, key: str) -> Any:
        if key not in self._values:
            raise PreferencesError("Unknown preference '{}'. Valid names are: {}."
                                   .format(key, ", ".join(sorted(self._values))), operation="get")
        return self._values[key]

    def set(self, key: str, value: Any) -> None:
        op = "set"
        if key not in self._values:
            raise PreferencesError("Unknown preference '{}'. Valid names are: {}."
                                   .format(key, ", ".join(sorted(self._values))), operation=op)
        if key == "use_mpi":
            self.set_use_mpi(value)
        elif key == "mpiexec_path":
            self.set_mpiexec_path(value)
        elif key == "mpi_implementation":
            if value not in mpi.IMPLEMENTATIONS:
                raise PreferencesError("Unknown MPI implementation '{}'. Valid names are: {}."
                                       .format(value, ", ".join(mpi.IMPLEMENTATIONS)), operation=op)
            self._values[key] = value
        else:
            self._values[key] = "" if value is None else str(value).strip()

    def as_dict(self) -> Dict[str, Any]:
        return dict(self._values)

    # --------------------
    # MPI
    # --------------------
    def use_mpi(self) -> bool:
        return bool(self._values["use_mpi"])

    def set_use_mpi(self, flag) -> None:
        if not isinstance(flag, bool):
            raise PreferencesError("The use_mpi argument is not a bool.", operation="set_use_mpi")
        self._values["use_mpi"] = flag

    def get_mpiexec_path(self) -> str:
        return self._values["mpiexec_path"]

    def set_mpiexec_path(self, path: Optional[str]) -> str:
        """Set the launcher; an empty/unknown path resolves to the PATH default."""
        path = "" if path is None else str(path).strip()
        if _is_unset(path):
            path = mpi.find_mpiexec() or mpi.UNKNOWN_BINARY
        self._values["mpiexec_path"] = path
        self._values["mpi_implementation"] = mpi.detect_implementation(path)
        return path

    def get_mpi_implementation(self) -> str:
        return self._values["mpi_implementation"]

    # --------------------
    # Executables
    # --------------------
    def get_executable(self, name: str) -> str:
        """Path of svpre, svsolver or svpost."""
        key = name + "_path"
        if key not in _EXECUTABLES:
            raise PreferencesError("Unknown solver executable '{}'. Valid names are: {}."
                                   .format(name, ", ".join(sorted(_EXECUTABLES.values()))),
                                   operation="get_executable")
        return self._values[key]

    def initialize_locations(self) -> None:
        """Fill unset executable paths and the MPI implementation."""
        for key, exe in _EXECUTABLES.items():
            if _is_unset(self._values[key]):
                self._values[key] = default_executable(exe)
        path = self._values["mpiexec_path"]
        if _is_unset(path) or self._values["mpi_implementation"] == mpi.UNKNOWN:
            self.set_mpiexec_path(path)
