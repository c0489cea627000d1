# -*- coding: utf-8 -*-
# sv/modeling/group.py

"""
Project: sv
Date: 10/18/2026

Purpose:
--------
Time-indexed solid model group backed by the legacy `.mdl` project file.

Main Tasks:
-----------
    1. Read `.mdl` XML: model type, per-time-step model elements, face attributes.
    2. Load geometry from the sibling native file (`.vtp`, `.brep`, `.xmt_txt`).
    3. Replace models per time step and write the `.mdl` plus geometry files.

Notes:
------
- File layout: <format version/> + <model type version> → <timestep id> →
  <model_element type num_sampling ...> with <segmentations><seg name/>, <faces><face id
  name type visible opacity color1 color2 color3/>, <blend_radii>, <blend_param>.
- Time step 0 stores geometry in `<base>.<ext>`; later steps in `<base>_<t>.<ext>`.
- Model elements of licensed kernels are kept as-is; only their geometry cannot load.
"""

import copy
import logging
import os
import shutil
import xml.etree.ElementTree as ET
from typing import Dict, List, Optional

from ..errors import ModelingError, ProjectFileError
from ..tools.utils import check_index
from ..tools.xmlio import get_attr, read_xml, write_xml
from .base import Model
from .kernel import model_class_for_type

logger = logging.getLogger(__name__)

FILE_VERSION = "1.0"

_FACE_DEFAULTS = {"type": "wall", "visible": "true", "opacity": "1",
                  "color1": "1", "color2": "1", "color3": "1"}


class _Element:
    """One time step: the `<model_element>` XML plus the loaded model (if any)."""

    def __init__(self, xml: ET.Element, geometry_file: Optional[str] = None,
                 model: Optional[Model] = None):
        self.xml = xml
        self.geometry_file = geometry_file
        self.model = model


def _geometry_name(base: str, ext: str, time_step: int) -> str:
    return "{}.{}".format(base, ext) if time_step == 0 else "{}_{}.{}".format(base, time_step, ext)


class Group:
    """
    Solid model group.

    Parameters
    ----------
    file_name : str, optional
        `.mdl` file to read on construction.
    """

    def __init__(self, file_name: Optional[str] = None):
        self._elements: List[Optional[_Element]] = []
        self._type = "PolyData"
        if file_name is not None:
            self.read(file_name)

    # --------------------
    # File I/O
    # --------------------
    def read(self, file_name: str) -> None:
        op = "read"
        doc = read_xml(file_name, op)
        root = doc.find("model")
        if root is None:
            raise ProjectFileError("Error reading the model group file '{}'.".format(file_name),
                                   operation=op)
        self._type = root.get("type", "PolyData")
        try:
            cls = model_class_for_type(self._type, op)
        except ModelingError as e:
            raise ProjectFileError("Error reading the model group file '{}': {}"
                                   .format(file_name, e.message), operation=op) from e
        base = os.path.splitext(file_name)[0]
        elements: List[Optional[_Element]] = []
        for ts in root.findall("timestep"):
            idx = get_attr(ts, "id", len(elements), int)
            while len(elements) <= idx:
                elements.append(None)
            el = ts.find("model_element")
            if el is None:
                continue
            geom = _geometry_name(base, cls.native_extension, idx)
            elements[idx] = _Element(copy.deepcopy(el), geom if os.path.isfile(geom) else None)
        self._elements = elements
        logger.info("[ModelGroup] Read %d time steps of type %s from '%s'.",
                    len(elements), self._type, file_name)

    def write(self, file_name: str) -> str:
        """Write the `.mdl` file and each model's native geometry file beside it."""
        op = "write"
        base = os.path.splitext(file_name)[0]
        os.makedirs(os.path.dirname(os.path.abspath(file_name)), exist_ok=True)
        fmt_el = ET.Element("format", {"version": FILE_VERSION})
        root = ET.Element("model", {"type": self._type, "version": FILE_VERSION})
        for t, elem in enumerate(self._elements):
            ts = ET.SubElement(root, "timestep", {"id": str(t)})
            if elem is None:
                continue
            ts.append(self._element_xml(elem))
            self._write_geometry(elem, base, t, file_name)
        out = write_xml([fmt_el, root], file_name, op, what="model group")
        logger.info("[ModelGroup] Wrote %d time steps to '%s'.", len(self._elements), file_name)
        return out

    def _write_geometry(self, elem: _Element, base: str, t: int, file_name: str) -> None:
        if elem.model is not None:
            ext = elem.model.native_extension
            target = _geometry_name(base, ext, t)
            try:
                elem.model.write_native(target)
            except (OSError, RuntimeError, ValueError) as e:
                raise ProjectFileError("Error writing model group to the file '{}'."
                                       .format(file_name), operation="write") from e
            elem.geometry_file = target
        elif elem.geometry_file is not None:
            ext = os.path.splitext(elem.geometry_file)[1].lstrip(".")
            target = _geometry_name(base, ext, t)
            if os.path.abspath(target) != os.path.abspath(elem.geometry_file):
                shutil.copyfile(elem.geometry_file, target)
                elem.geometry_file = target

    def _element_xml(self, elem: _Element) -> ET.Element:
        el = copy.deepcopy(elem.xml)
        model = elem.model
        if model is None:
            return el
        el.set("type", model.type_name)
        faces = el.find("faces")
        if faces is None:
            faces = ET.SubElement(el, "faces")
        old = {get_attr(f, "id", 0, int): dict(f.attrib) for f in faces.findall("face")}
        for f in list(faces):
            faces.remove(f)
        for fid in model.get_face_ids():
            attrs = {"id": str(fid)}
            attrs.update(model.get_face_attributes(fid))
            for k, v in list(old.get(fid, {}).items()) + list(_FACE_DEFAULTS.items()):
                attrs.setdefault(k, v)
            ET.SubElement(faces, "face", attrs)
        for tag in ("segmentations", "blend_radii"):
            if el.find(tag) is None:
                ET.SubElement(el, tag)
        return el

    # --------------------
    # Models
    # --------------------
    def get_time_size(self) -> int:
        return len(self._elements)

    def number_of_models(self) -> int:
        return sum(1 for e in self._elements if e is not None)

    def get_model_type(self) -> str:
        return self._type

    def get_model(self, index: int) -> Model:
        """Load (once) and return the model of time step `index`."""
        op = "get_model"
        i = check_index(index, len(self._elements), op, what="model", error=ModelingError)
        elem = self._elements[i]
        if elem is None:
            raise ModelingError("No solid model is defined for time step {}.".format(i), operation=op)
        if elem.model is None:
            if elem.geometry_file is None:
                raise ModelingError("No geometry file was found for the solid model at time step {}."
                                    .format(i), operation=op)
            cls = model_class_for_type(elem.xml.get("type", self._type), op)
            model = cls()
            try:
                model.read_native(elem.geometry_file)
            except (OSError, RuntimeError, ValueError) as e:
                raise ModelingError("Error reading the solid model file '{}'."
                                    .format(elem.geometry_file), operation=op) from e
            self._apply_faces(model, elem.xml)
            elem.model = model
        return elem.model

    @staticmethod
    def _apply_faces(model: Model, xml: ET.Element) -> None:
        faces = xml.find("faces")
        if faces is None:
            return
        ids = set(model.get_face_ids())
        for f in faces.findall("face"):
            fid = get_attr(f, "id", 0, int)
            if fid in ids:
                model._face_info[fid] = {k: v for k, v in f.attrib.items() if k != "id"}

    def set_model(self, model: Model, time_step: int = 0) -> None:
        op = "set_model"
        if not isinstance(model, Model):
            raise ModelingError("The model argument is not a Model object.", operation=op)
        if isinstance(time_step, bool) or not isinstance(time_step, int) or time_step < 0:
            raise ModelingError("The time step argument must be >= 0.", operation=op)
        if any(e is not None for e in self._elements) and model.type_name != self._type:
            raise ModelingError("The model type '{}' does not match the group type '{}'."
                                .format(model.type_name, self._type), operation=op)
        self._type = model.type_name
        while len(self._elements) <= time_step:
            self._elements.append(None)
        xml = ET.Element("model_element", {"type": model.type_name, "num_sampling": "0"})
        old = self._elements[time_step]
        if old is not None:
            xml = copy.deepcopy(old.xml)
        self._elements[time_step] = _Element(xml, model=model)

    def get_face_names(self, index: int = 0) -> Dict[int, str]:
        return self.get_model(index).get_face_names()
