# -*- coding: utf-8 -*-
# sv/tools/xmlio.py

"""
Project: sv
Date: 10/18/2026

Purpose
-------
Small XML helpers used by the legacy project file readers/writers (.pth, .ctgr,
.mdl, .msh): parse with clear errors, emit pretty-printed UTF-8 atomically, and
convert points/vectors to and from `x= y= z=` attribute elements.

Notes
-----
- Files are written to a temporary sibling and moved into place with os.replace.
- Some legacy files hold more than one top-level element (`<format/>` followed by
  the data element); `read_xml` wraps the text in a synthetic root when needed.
"""

import os
import tempfile
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Iterable, List

import numpy as np

from ..errors import ProjectFileError


def read_xml(file_name, operation):
    # type: (str, str) -> ET.Element
    """
    Parse an XML project file and return a root element holding every top-level node.

    Raises
    ------
    ProjectFileError
        "Error reading file '...'" for missing files or malformed XML.
    """
    p = Path(file_name)
    if not p.is_file():
        raise ProjectFileError("Error reading file '{}': file not found.".format(file_name),
                               operation=operation)
    try:
        text = p.read_text(encoding="utf-8").lstrip("\ufeff").lstrip()
        if text.startswith("<?xml"):
            text = text.split("?>", 1)[1]
        return ET.fromstring("<sv_document>" + text + "</sv_document>")
    except (OSError, ET.ParseError) as e:
        raise ProjectFileError("Error reading file '{}': {}".format(file_name, e),
                               operation=operation) from e


def write_xml(elements, file_name, operation, what="data"):
    # type: (Iterable[ET.Element], str, str, str) -> str
    """
    Atomic UTF-8 write of one or more top-level elements with an XML declaration.

    Raises
    ------
    ProjectFileError
        "Error writing <what> to the file '...'".
    """
    p = Path(file_name)
    chunks = []
    for el in elements:
        ET.indent(el, space="    ")
        chunks.append(ET.tostring(el, encoding="unicode"))
    text = '<?xml version="1.0" encoding="UTF-8" ?>\n' + "\n".join(chunks) + "\n"
    tf = None
    try:
        if not p.parent.exists():
            p.parent.mkdir(parents=True)
        tf = tempfile.NamedTemporaryFile("w", encoding="utf-8", dir=str(p.parent), delete=False)
        with tf:
            tf.write(text)
        os.replace(tf.name, str(p))
    except OSError as e:
        if tf is not None and os.path.exists(tf.name):
            os.remove(tf.name)
        raise ProjectFileError("Error writing {} to the file '{}': {}".format(what, file_name, e),
                               operation=operation) from e
    return str(p)


def fmt(value):
    # type: (float) -> str
    """Render a float the way the legacy files do (shortest round-trip repr)."""
    return repr(float(value))


def point_element(parent, tag, xyz, **attrs):
    """Append `<tag [attrs] x= y= z=/>` to parent and return it."""
    el = ET.SubElement(parent, tag, {k: str(v) for k, v in attrs.items()})
    el.set("x", fmt(xyz[0]))
    el.set("y", fmt(xyz[1]))
    el.set("z", fmt(xyz[2]))
    return el


def read_xyz(el):
    # type: (ET.Element) -> np.ndarray
    try:
        return np.array([float(el.get("x", 0.0)), float(el.get("y", 0.0)), float(el.get("z", 0.0))])
    except ValueError as e:
        raise ProjectFileError("Invalid <{}> element: {}".format(el.tag, e), operation="read") from e


def read_point_list(parent, tag="point"):
    # type: (ET.Element, str) -> np.ndarray
    """Read `<point id x y z/>` children ordered by id into an (N, 3) array."""
    if parent is None:
        return np.zeros((0, 3))
    items = []  # type: List[tuple]
    for i, el in enumerate(parent.findall(tag)):
        try:
            pid = int(el.get("id", i))
        except ValueError as e:
            raise ProjectFileError("Invalid <{}> element in <{}>: {}".format(tag, parent.tag, e),
                                   operation="read") from e
        items.append((pid, read_xyz(el)))
    items.sort(key=lambda t: t[0])
    if not items:
        return np.zeros((0, 3))
    return np.vstack([xyz for _, xyz in items])


def write_point_list(parent, tag, points, item_tag="point"):
    """Append `<tag>` with one `<point id x y z/>` child per row of points."""
    el = ET.SubElement(parent, tag)
    for i, xyz in enumerate(np.asarray(points, dtype=float).reshape(-1, 3)):
        point_element(el, item_tag, xyz, id=i)
    return el


def get_attr(el, name, default=None, cast=str):
    """Typed attribute lookup; legacy files spell booleans as true/false or 1/0."""
    raw = el.get(name)
    if raw is None:
        return default
    if cast is bool:
        return raw.strip().lower() in ("1", "true", "yes")
    try:
        return cast(raw)
    except (TypeError, ValueError):
        return default
