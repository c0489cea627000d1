# -*- coding: utf-8 -*-
# sv/meshing/group.py

"""
Project: sv
Date: 10/18/2026

Purpose:
--------
Time-indexed meshing group backed by the legacy `.msh` project file. A mesh entry is
the mesher type plus the command history that configured it; `get_mesh` rebuilds a
ready-to-run mesher from it.

Main Tasks:
-----------
    1. Read/write `.msh` XML: <mitk_mesh type model_name> → <timestep id> →
       <mesh type> → <command_history><command content/>.
    2. Locate the solid model in the project's Models/<model_name>.mdl and load it.
    3. Load the mesh data beside the `.msh` file (<name>.vtu volume, <name>.vtp surface).
    4. Turn command histories into meshing options (face names → face ids).

Notes:
------
- A `.msh` file lives in <project>/Meshes/; the model group is read from
  <project>/Models/<model_name>.mdl.
- The "setWalls" command selects the model faces whose type is "wall".
"""

import copy
import logging
import os
import xml.etree.ElementTree as ET
from typing import Dict, List, Optional, Tuple

from ..errors import MeshingError, ProjectFileError, SvError
from ..modeling.group import Group as ModelGroup
from ..tools.utils import check_index
from ..tools.xmlio import get_attr, read_xml, write_xml
from .base import Mesher
from .gmsh_mesher import GmshOptions
from .kernel import MESH_KERNELS, create
from .tetgen_options import TetGenOptions

logger = logging.getLogger(__name__)

FILE_VERSION = "1.0"

_TYPE_NAMES = {"TETGEN": "TetGen", "MESHSIM": "MeshSim", "GMSH": "Gmsh"}
_OPTION_PARSERS = {"TETGEN": TetGenOptions, "GMSH": GmshOptions}


class _MeshEntry:
    """One time step: mesher type, command history and the unparsed XML."""

    def __init__(self, mesh_type: str, commands: List[str], xml: Optional[ET.Element] = None):
        self.mesh_type = mesh_type
        self.commands = list(commands)
        self.xml = xml
        self.mesher = None  # type: Optional[Mesher]


def project_models_dir(file_name: str) -> str:
    """<project>/Models for a `.msh` file stored under <project>/Meshes."""
    path = os.path.abspath(file_name)
    parts = path.split(os.sep)
    if "Meshes" not in parts:
        raise MeshingError("No 'Models' directory found. The .msh file is not part of a "
                           "SimVascular project.", operation="get_mesh")
    idx = len(parts) - 1 - parts[::-1].index("Meshes")
    return os.sep.join(parts[:idx] + ["Models"])


class Group:
    """
    Meshing group.

    Parameters
    ----------
    file_name : str, optional
        `.msh` file to read on construction.
    """

    def __init__(self, file_name: Optional[str] = None):
        self.file_name = None  # type: Optional[str]
        self._type = "TetGen"
        self._model_name = ""
        self._meshes = []  # type: List[Optional[_MeshEntry]]
        if file_name is not None:
            self.read(file_name)

    # --------------------
    # File I/O
    # --------------------
    def read(self, file_name: str) -> None:
        op = "read"
        doc = read_xml(file_name, op)
        root = doc.find("mitk_mesh")
        if root is None:
            raise ProjectFileError("Error reading the mesh group file '{}'.".format(file_name),
                                   operation=op)
        self._type = root.get("type", "TetGen")
        self._model_name = root.get("model_name", "")
        meshes = []  # type: List[Optional[_MeshEntry]]
        for ts in root.findall("timestep"):
            idx = get_attr(ts, "id", len(meshes), int)
            while len(meshes) <= idx:
                meshes.append(None)
            el = ts.find("mesh")
            if el is None:
                continue
            history = el.find("command_history")
            commands = [] if history is None else [c.get("content", "")
                                                   for c in history.findall("command")]
            meshes[idx] = _MeshEntry(el.get("type", self._type), commands, copy.deepcopy(el))
        self._meshes = meshes
        self.file_name = file_name
        logger.info("[MeshGroup] Read %d time steps of type %s (model '%s') from '%s'.",
                    len(meshes), self._type, self._model_name, file_name)

    def write(self, file_name: str) -> str:
        """Write the `.msh` file; mesh data of time step 0 goes to <name>.vtu/.vtp."""
        op = "write"
        fmt_el = ET.Element("format", {"version": FILE_VERSION})
        root = ET.Element("mitk_mesh", {"type": self._type, "model_name": self._model_name,
                                        "version": FILE_VERSION})
        for t, entry in enumerate(self._meshes):
            ts = ET.SubElement(root, "timestep", {"id": str(t)})
            if entry is None:
                continue
            el = copy.deepcopy(entry.xml) if entry.xml is not None else ET.Element("mesh")
            el.set("type", entry.mesh_type)
            old = el.find("command_history")
            if old is not None:
                el.remove(old)
            history = ET.Element("command_history")
            for c in entry.commands:
                ET.SubElement(history, "command", {"content": c})
            el.insert(0, history)
            ts.append(el)
        out = write_xml([fmt_el, root], file_name, op, what="mesh group")
        self._write_mesh_data(file_name)
        logger.info("[MeshGroup] Wrote %d time steps to '%s'.", len(self._meshes), out)
        return out

    def _write_mesh_data(self, file_name: str) -> None:
        entry = self._meshes[0] if self._meshes else None
        if entry is None or entry.mesher is None:
            return
        base = os.path.splitext(file_name)[0]
        mesher = entry.mesher
        try:
            if mesher.has_volume_mesh():
                mesher.write(base + ".vtu")
            if mesher.has_surface_mesh():
                mesher.write(base + ".vtp")
        except MeshingError as e:
            raise ProjectFileError("Error writing mesh group to the file '{}'.".format(file_name),
                                   operation="write") from e

    # --------------------
    # Queries
    # --------------------
    def get_time_size(self) -> int:
        return len(self._meshes)

    def number_of_meshes(self) -> int:
        return sum(1 for m in self._meshes if m is not None)

    def get_mesh_type(self) -> str:
        return self._type

    def get_model_name(self) -> str:
        return self._model_name

    def set_model_name(self, name: str) -> None:
        self._model_name = str(name)

    def get_commands(self, index: int) -> List[str]:
        i = check_index(index, len(self._meshes), "get_commands", what="mesh", error=MeshingError)
        entry = self._meshes[i]
        return [] if entry is None else list(entry.commands)

    def set_mesh(self, mesher: Mesher, time_step: int = 0, options=None) -> None:
        """Record a mesher (and its options as a command history) at a time step."""
        op = "set_mesh"
        if not isinstance(mesher, Mesher):
            raise MeshingError("The mesher argument is not a Mesher object.", operation=op)
        if isinstance(time_step, bool) or not isinstance(time_step, int) or time_step < 0:
            raise MeshingError("The time step argument must be >= 0.", operation=op)
        options = options if options is not None else mesher.get_meshing_options()
        face_names = {}
        if mesher.get_model() is not None:
            face_names = mesher.get_model().get_face_names()
        commands = options.to_commands(face_names) if options is not None else []
        if mesher.get_walls():
            commands.insert(0, "setWalls")
        type_name = _TYPE_NAMES.get(mesher.kernel, mesher.kernel)
        self._type = type_name
        while len(self._meshes) <= time_step:
            self._meshes.append(None)
        entry = _MeshEntry(type_name, commands)
        entry.mesher = mesher
        self._meshes[time_step] = entry

    # --------------------
    # Meshers
    # --------------------
    def get_mesh(self, index: int) -> Tuple[Mesher, object]:
        """
        Build the mesher of time step `index` with its model, mesh data and options.

        Returns
        -------
        (Mesher, options)
        """
        op = "get_mesh"
        i = check_index(index, len(self._meshes), op, what="mesh", error=MeshingError)
        entry = self._meshes[i]
        if entry is None:
            raise MeshingError("ERROR getting the mesh for the index argument '{}'.".format(i),
                               operation=op)
        kernel = entry.mesh_type.upper()
        if kernel not in MESH_KERNELS:
            raise MeshingError("Unknown meshing type '{}'. Valid names are: {}."
                               .format(kernel, MESH_KERNELS.valid_names()), operation=op)
        mesher = create(kernel)
        face_map = {}  # type: Dict[str, int]
        if self.file_name is not None:
            face_map = self._set_model(mesher, i)
            self._load_mesh_data(mesher)
        options, params = _OPTION_PARSERS[kernel].create_from_commands(entry.commands, face_map)
        for words in params:
            logger.debug("[MeshGroup] Mesher parameter command: %s", " ".join(words))
        mesher.set_meshing_options(options)
        entry.mesher = mesher
        return mesher, options

    def _set_model(self, mesher: Mesher, index: int) -> Dict[str, int]:
        op = "get_mesh"
        models_dir = project_models_dir(self.file_name)
        mdl = os.path.join(models_dir, self._model_name + ".mdl")
        try:
            models = ModelGroup(mdl)
        except SvError as e:
            raise MeshingError("Unable to read the model file '{}' used by the mesher.".format(mdl),
                               operation=op) from e
        if index >= models.get_time_size():
            raise MeshingError("There is no solid for time '{}'".format(index), operation=op)
        try:
            model = models.get_model(index)
        except SvError as e:
            raise MeshingError("Error loading a solid model from the file '{}'.".format(mdl),
                               operation=op) from e
        mesher.set_model(model)

        names = model.get_face_names()
        walls = [fid for fid in model.get_face_ids()
                 if model.get_face_attributes(fid).get("type", "wall") == "wall"]
        if walls:
            mesher.set_walls(walls)
        return {name: fid for fid, name in names.items() if name}

    def _load_mesh_data(self, mesher: Mesher) -> None:
        base = os.path.splitext(self.file_name)[0]
        volume, surface = base + ".vtu", base + ".vtp"
        if os.path.isfile(volume):
            mesher.load_mesh(volume, surface if os.path.isfile(surface) else None)
