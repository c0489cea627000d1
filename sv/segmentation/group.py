# -*- coding: utf-8 -*-
# sv/segmentation/group.py

"""
Project: sv
Date: 10/18/2026

Purpose:
--------
Time-indexed contour group backed by the legacy `.ctgr` project file.

Main Tasks:
-----------
    1. Read `.ctgr` XML into contour objects of the stored type (Circle, Polygon, ...).
    2. Keep per-time-step lofting parameters and expose them as LoftOptions.
    3. Replace/append contours and write the group back atomically.

Notes:
------
- File layout: <format version/> + <contourgroup path_name path_id reslice_size
  point_2d_display_size point_size version> → <timestep id> → <lofting_parameters/>
  and <contour id type method closed min_control_number max_control_number
  subdivision_type subdivision_number subdivision_spacing> with <path_point>,
  <control_points>, <contour_points>.
- Stored control and contour points are installed as-is, so a read/write cycle does not
  regenerate (and perturb) the contour points.
"""

import logging
import xml.etree.ElementTree as ET
from typing import Dict, List, Optional

from ..errors import ProjectFileError, SegmentationError
from ..geometry.loft_options import LoftNurbsOptions, LoftOptions
from ..path.group import read_path_point, write_path_point
from ..tools.utils import check_index
from ..tools.xmlio import fmt, get_attr, read_point_list, read_xml, write_point_list, write_xml
from .contour import Contour, SubdivisionType, as_path_point
from .image_based import ImageContour
from .kernel import CONTOUR_TYPES

logger = logging.getLogger(__name__)

FILE_VERSION = "1.0"

DEFAULT_LOFTING_PARAMETERS = {
    "method": "nurbs",
    "sampling": "60",
    "sample_per_seg": "12",
    "use_linear_sample": "1",
    "linear_factor": "10",
    "use_fft": "0",
    "num_modes": "20",
    "u_degree": "2",
    "v_degree": "2",
    "u_knot_type": "derivative",
    "v_knot_type": "average",
    "u_parametric_type": "centripetal",
    "v_parametric_type": "chord",
}

# Knot span names used in .ctgr files → LoftNurbsOptions names.
_KNOT_TYPES = {"equal": "equal", "average": "avg", "avg": "avg",
               "derivative": "endderiv", "endderiv": "endderiv"}


def read_contour(el: ET.Element) -> Contour:
    """Build a contour object from a `<contour>` element."""
    ctype = el.get("type", "Contour")
    cls = CONTOUR_TYPES.get(ctype)
    if cls is None:
        raise SegmentationError("Unknown contour type '{}'.".format(ctype), operation="read")
    pp_el = el.find("path_point")
    pp = as_path_point(read_path_point(pp_el) if pp_el is not None else None, "read")
    contour = cls(path_point=pp)
    contour._closed = get_attr(el, "closed", True, bool)
    contour._subdivision_type = SubdivisionType.check(el.get("subdivision_type", "0"), "read")
    contour._subdivision_number = max(1, get_attr(el, "subdivision_number", 36, int) or 36)
    contour._subdivision_spacing = get_attr(el, "subdivision_spacing", 0.0, float)
    contour._set_state(read_point_list(el.find("control_points")),
                       read_point_list(el.find("contour_points")),
                       method=el.get("method"))
    return contour


def write_contour(parent: ET.Element, contour: Contour, index: int) -> ET.Element:
    el = ET.SubElement(parent, "contour", {
        "id": str(index),
        "type": contour.get_type(),
        "method": contour.get_method(),
        "closed": "true" if contour.is_closed() else "false",
        "min_control_number": str(contour.min_control_number),
        "max_control_number": str(contour.max_control_number),
        "subdivision_type": str(SubdivisionType.CODES[contour._subdivision_type]),
        "subdivision_number": str(contour._subdivision_number),
        "subdivision_spacing": fmt(contour._subdivision_spacing),
    })
    write_path_point(el, contour._path_point)
    write_point_list(el, "control_points", contour._control_points)
    write_point_list(el, "contour_points", contour._contour_points)
    return el


class Group:
    """
    Contour group (one list of contours per time step).

    Parameters
    ----------
    file_name : str, optional
        `.ctgr` file to read on construction.
    """

    def __init__(self, file_name: Optional[str] = None):
        self._contours: List[List[Contour]] = []
        self._lofting: List[Dict[str, str]] = []
        self._attrs = {"path_name": "", "path_id": "-1", "reslice_size": "5",
                       "point_2d_display_size": "", "point_size": ""}
        if file_name is not None:
            self.read(file_name)

    # --------------------
    # File I/O
    # --------------------
    def read(self, file_name: str) -> None:
        op = "read"
        doc = read_xml(file_name, op)
        root = doc.find("contourgroup")
        if root is None:
            raise ProjectFileError("Error reading the contour group file '{}'.".format(file_name),
                                   operation=op)
        contours, lofting = [], []
        try:
            for ts in root.findall("timestep"):
                idx = get_attr(ts, "id", len(contours), int)
                while len(contours) <= idx:
                    contours.append([])
                    lofting.append(dict(DEFAULT_LOFTING_PARAMETERS))
                lp = ts.find("lofting_parameters")
                if lp is not None:
                    lofting[idx].update(lp.attrib)
                items = sorted(ts.findall("contour"), key=lambda e: get_attr(e, "id", 0, int))
                contours[idx] = [read_contour(e) for e in items]
        except (SegmentationError, ProjectFileError) as e:
            raise ProjectFileError("Error reading the contour group file '{}': {}"
                                   .format(file_name, e.message), operation=op) from e
        for key in self._attrs:
            if key in root.attrib:
                self._attrs[key] = root.get(key)
        self._contours, self._lofting = contours, lofting
        logger.info("[ContourGroup] Read %d time steps (%d contours at t=0) from '%s'.",
                    len(contours), len(contours[0]) if contours else 0, file_name)

    def write(self, file_name: str) -> str:
        """Write the group to a `.ctgr` file."""
        fmt_el = ET.Element("format", {"version": FILE_VERSION})
        root = ET.Element("contourgroup", dict(self._attrs, version=FILE_VERSION))
        for t, contours in enumerate(self._contours):
            ts = ET.SubElement(root, "timestep", {"id": str(t)})
            ET.SubElement(ts, "lofting_parameters", self._lofting[t])
            for i, contour in enumerate(contours):
                write_contour(ts, contour, i)
        out = write_xml([fmt_el, root], file_name, "write", what="contour group")
        logger.info("[ContourGroup] Wrote %d time steps to '%s'.", len(self._contours), file_name)
        return out

    # --------------------
    # Contours
    # --------------------
    def get_time_size(self) -> int:
        return len(self._contours)

    def _time_step(self, time_step: int, operation: str) -> int:
        return check_index(time_step, len(self._contours), operation, what="time step",
                           error=SegmentationError)

    def number_of_contours(self, time_step: int = 0) -> int:
        if not self._contours:
            return 0
        return len(self._contours[self._time_step(time_step, "number_of_contours")])

    def get_contour(self, index: int, time_step: int = 0) -> Contour:
        op = "get_contour"
        contours = self._contours[self._time_step(time_step, op)]
        return contours[check_index(index, len(contours), op, what="contour",
                                    error=SegmentationError)]

    def set_contour(self, index: int, contour: Contour, time_step: int = 0) -> None:
        """Replace the contour at `index`, or append when `index` equals the contour count."""
        op = "set_contour"
        if not isinstance(contour, Contour):
            raise SegmentationError("The contour argument is not a Contour object.", operation=op)
        if isinstance(time_step, bool) or not isinstance(time_step, int) or time_step < 0:
            raise SegmentationError("The time step argument must be >= 0.", operation=op)
        while len(self._contours) <= time_step:
            self._contours.append([])
            self._lofting.append(dict(DEFAULT_LOFTING_PARAMETERS))
        contours = self._contours[time_step]
        if index == len(contours):
            contours.append(contour)
            return
        contours[check_index(index, len(contours), op, what="contour",
                             error=SegmentationError)] = contour

    def get_path_name(self) -> str:
        return self._attrs["path_name"]

    def get_path_id(self) -> int:
        return int(self._attrs["path_id"] or -1)

    def get_reslice_size(self) -> float:
        return float(self._attrs["reslice_size"] or 5.0)

    def set_reslice_size(self, size: float) -> None:
        if float(size) <= 0.0:
            raise SegmentationError("The reslice size argument must be > 0.0.",
                                    operation="set_reslice_size")
        self._attrs["reslice_size"] = fmt(size)
        for contours in self._contours:
            for c in contours:
                if isinstance(c, ImageContour):
                    c.set_reslice_size(size)

    # --------------------
    # Lofting
    # --------------------
    def get_lofting_parameters(self, time_step: int = 0) -> Dict[str, str]:
        return dict(self._lofting[self._time_step(time_step, "get_lofting_parameters")])

    def get_loft_method(self, time_step: int = 0) -> str:
        return self.get_lofting_parameters(time_step).get("method", "nurbs")

    def get_loft_options(self, time_step: int = 0) -> LoftOptions:
        """
        Spline loft options derived from the stored lofting parameters.

        The number of points along the vessel is `sample_per_seg` times the number of
        contour segments; the dense linear sampling multiplies that by `linear_factor`.
        """
        p = self.get_lofting_parameters(time_step)
        num_segs = max(1, self.number_of_contours(time_step) - 1)
        along = max(2, int(p.get("sample_per_seg", 12)) * num_segs)
        return LoftOptions(
            num_out_pts_in_segs=int(p.get("sampling", 60)),
            num_out_pts_along_length=along,
            num_linear_pts_along_length=along * int(p.get("linear_factor", 10)),
            num_modes=int(p.get("num_modes", 20)),
            use_fft=p.get("use_fft", "0") in ("1", "true"),
            use_linear_sample_along_length=p.get("use_linear_sample", "1") in ("1", "true"),
        )

    def get_loft_nurbs_options(self, time_step: int = 0) -> LoftNurbsOptions:
        p = self.get_lofting_parameters(time_step)
        return LoftNurbsOptions(
            u_degree=int(p.get("u_degree", 2)),
            v_degree=int(p.get("v_degree", 2)),
            u_knot_span_type=_KNOT_TYPES.get(p.get("u_knot_type", "equal"), "equal"),
            v_knot_span_type=_KNOT_TYPES.get(p.get("v_knot_type", "equal"), "equal"),
            u_parametric_span_type=p.get("u_parametric_type", "equal"),
            v_parametric_span_type=p.get("v_parametric_type", "equal"),
        )
