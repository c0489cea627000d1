# -*- coding: utf-8 -*-
# sv/path/group.py

"""
Project: sv
Date: 10/18/2026

Purpose:
--------
Time-indexed collection of paths backed by the legacy `.pth` project file.

Main Tasks:
-----------
    1. Read `.pth` XML into Path objects (control points + stored path points).
    2. Hold group-level settings (id, method, calculation number, spacing, reslice size).
    3. Replace/extend paths per time step and write the group back atomically.

Notes:
------
- File layout: <format version/> + <path id method calculation_number spacing version
  reslice_size ...> → <timestep id> → <path_element ...> → <control_points>, <path_points>.
- Paths read from disk keep their stored path points so a read/write cycle is lossless.
"""

import logging
import xml.etree.ElementTree as ET
from typing import List, Optional

import numpy as np

from ..errors import PathError, ProjectFileError
from ..tools.utils import check_index
from ..tools.xmlio import (fmt, get_attr, point_element, read_point_list, read_xml, read_xyz,
                           write_point_list, write_xml)
from .calc_method import CalculationMethod
from .path import Path, PathPoint

logger = logging.getLogger(__name__)

FILE_VERSION = "1.0"


def read_path_point(el: ET.Element, default_id: int = 0) -> PathPoint:
    """Parse `<path_point id><pos/><tangent/><rotation/></path_point>`."""
    def vec(tag):
        child = el.find(tag)
        return read_xyz(child) if child is not None else np.zeros(3)
    return PathPoint(get_attr(el, "id", default_id, int), vec("pos"), vec("tangent"), vec("rotation"))


def write_path_point(parent: ET.Element, pp: PathPoint) -> ET.Element:
    el = ET.SubElement(parent, "path_point", {"id": str(pp.id)})
    point_element(el, "pos", pp.pos)
    point_element(el, "tangent", pp.tangent)
    point_element(el, "rotation", pp.rotation)
    return el


def _read_path_element(el: ET.Element) -> Path:
    path = Path(
        method=CalculationMethod.from_code(el.get("method", "0")),
        calculation_number=get_attr(el, "calculation_number", 100, int),
        spacing=get_attr(el, "spacing", 0.0, float),
    )
    for pt in read_point_list(el.find("control_points")):
        path._control_points.append(pt)
    pps = el.find("path_points")
    if pps is not None:
        path.set_path_points([read_path_point(p, i) for i, p in enumerate(pps.findall("path_point"))])
    else:
        path._dirty = True
    return path


class Group:
    """
    Group of paths indexed by time step.

    Parameters
    ----------
    file_name : str, optional
        `.pth` file to read on construction.
    """

    def __init__(self, file_name: Optional[str] = None):
        self._paths: List[Optional[Path]] = []
        self._path_group_id = 1
        self._method = CalculationMethod.TOTAL
        self._calculation_number = 100
        self._spacing = 0.0
        self._reslice_size = 5.0
        self._extra_attrs = {}
        if file_name is not None:
            self.read(file_name)

    # --------------------
    # File I/O
    # --------------------
    def read(self, file_name: str) -> None:
        op = "read"
        doc = read_xml(file_name, op)
        root = doc.find("path")
        if root is None:
            raise ProjectFileError("Error reading file '{}': no <path> element.".format(file_name),
                                   operation=op)
        try:
            self._path_group_id = get_attr(root, "id", 1, int)
            self._method = CalculationMethod.from_code(root.get("method", "0"), operation=op)
            self._calculation_number = get_attr(root, "calculation_number", 100, int)
            self._spacing = get_attr(root, "spacing", 0.0, float)
            self._reslice_size = get_attr(root, "reslice_size", 5.0, float)
            self._extra_attrs = {k: v for k, v in root.attrib.items()
                                 if k in ("point_2d_display_size", "point_size")}
            paths: List[Optional[Path]] = []
            for ts in root.findall("timestep"):
                idx = get_attr(ts, "id", len(paths), int)
                while len(paths) <= idx:
                    paths.append(None)
                el = ts.find("path_element")
                paths[idx] = _read_path_element(el) if el is not None else None
        except (PathError, ProjectFileError) as e:
            raise ProjectFileError("Error reading file '{}': {}".format(file_name, e.message),
                                   operation=op) from e
        self._paths = paths
        logger.info("[PathGroup] Read %d time steps from '%s'.", len(paths), file_name)

    def write(self, file_name: str) -> str:
        """Write the group to a `.pth` file."""
        fmt_el = ET.Element("format", {"version": FILE_VERSION})
        root = ET.Element("path", {
            "id": str(self._path_group_id),
            "method": str(CalculationMethod.to_code(self._method)),
            "calculation_number": str(self._calculation_number),
            "spacing": fmt(self._spacing),
            "version": FILE_VERSION,
            "reslice_size": fmt(self._reslice_size),
        })
        for k, v in self._extra_attrs.items():
            root.set(k, v)
        for t, path in enumerate(self._paths):
            ts = ET.SubElement(root, "timestep", {"id": str(t)})
            if path is None:
                continue
            pe = ET.SubElement(ts, "path_element", {
                "method": str(CalculationMethod.to_code(path.get_method())),
                "calculation_number": str(path.get_calculation_number()),
                "spacing": fmt(path.get_spacing()),
            })
            write_point_list(pe, "control_points", path.get_control_points())
            pps = ET.SubElement(pe, "path_points")
            for pp in path.get_path_points():
                write_path_point(pps, pp)
        out = write_xml([fmt_el, root], file_name, "write", what="path group")
        logger.info("[PathGroup] Wrote %d time steps to '%s'.", len(self._paths), file_name)
        return out

    # --------------------
    # Paths
    # --------------------
    def get_time_size(self) -> int:
        return len(self._paths)

    def get_path(self, index: int = 0) -> Path:
        op = "get_path"
        i = check_index(index, len(self._paths), op, what="time step", error=PathError)
        path = self._paths[i]
        if path is None:
            raise PathError("No path is defined for time step {}.".format(i), operation=op)
        return path

    def set_path(self, path: Path, time_step: int = 0) -> None:
        op = "set_path"
        if not isinstance(path, Path):
            raise PathError("The path argument is not a Path object.", operation=op)
        if isinstance(time_step, bool) or not isinstance(time_step, int) or time_step < 0:
            raise PathError("The time step argument must be >= 0.", operation=op)
        while len(self._paths) <= time_step:
            self._paths.append(None)
        self._paths[time_step] = path

    # --------------------
    # Group settings
    # --------------------
    def get_path_group_id(self) -> int:
        return self._path_group_id

    def set_path_group_id(self, group_id: int) -> None:
        if isinstance(group_id, bool) or not isinstance(group_id, int):
            raise PathError("The id argument is not an integer.", operation="set_path_group_id")
        self._path_group_id = group_id

    def get_spacing(self) -> float:
        return self._spacing

    def set_spacing(self, spacing: float) -> None:
        self._spacing = Path._check_spacing(spacing, "set_spacing")

    def get_method(self) -> str:
        return self._method

    def set_method(self, method: str) -> None:
        self._method = CalculationMethod.check(method, operation="set_method")

    def get_calculation_number(self) -> int:
        return self._calculation_number

    def set_calculation_number(self, number: int) -> None:
        self._calculation_number = Path._check_calculation_number(number, "set_calculation_number")

    def get_reslice_size(self) -> float:
        return self._reslice_size

    def set_reslice_size(self, size: float) -> None:
        if float(size) <= 0.0:
            raise PathError("The reslice size argument must be > 0.0.", operation="set_reslice_size")
        self._reslice_size = float(size)
