# -*- coding: utf-8 -*-
# tests/test_tools.py

import logging
import os

import numpy as np
import pytest

from sv.errors import KernelNameError, PathError, SvError, valid_names_text
from sv.tools.kernels import KernelMap, KernelSpec
from sv.tools.logs import attach_file_log, detach_file_log
from sv.tools.utils import check_index, check_point, check_positive, ensure_exec_on_path
from sv.tools.xmlio import read_xml, write_xml
import xml.etree.ElementTree as ET


def test_error_prefix_and_context():
    err = SvError("Bad value.", context={"index": 4}, operation="get_curve_point")
    assert str(err) == "get_curve_point() Bad value. | index=4"
    assert isinstance(err, RuntimeError)
    assert err.message == "Bad value."


def test_valid_names_text():
    assert valid_names_text([]) == ""
    assert valid_names_text(["A"]) == "A"
    assert valid_names_text(["A", "B", "C"]) == "A, B or C"


def test_kernel_map_lookup_and_errors():
    kernels = KernelMap("test")
    kernels.add(KernelSpec("CIRCLE", dict))
    kernels.add(KernelSpec("POLYGON", list))
    kernels.add(KernelSpec("INVALID", None, available=False))

    assert kernels.names() == ["CIRCLE", "INVALID", "POLYGON"]
    assert kernels.valid_names() == "CIRCLE or POLYGON"
    assert kernels.get("circle").name == "CIRCLE"
    assert kernels.create("circle", a=1) == {"a": 1}
    assert "INVALID" in kernels

    with pytest.raises(KernelNameError, match=r"^create\(\) Unknown kernel name 'BOX'. "
                                              r"Valid names are: CIRCLE or POLYGON."):
        kernels.create("BOX")
    with pytest.raises(KernelNameError, match="Unknown kernel name 'INVALID'"):
        kernels.get("INVALID")
    with pytest.raises(KernelNameError, match="is not a string"):
        kernels.get(3)
    with pytest.raises(ValueError, match="Duplicate"):
        kernels.add(KernelSpec("circle", dict))


def test_check_point():
    pt = check_point((1, 2.5, 3), "op")
    assert pt.dtype == np.float64 and pt.tolist() == [1.0, 2.5, 3.0]
    with pytest.raises(PathError, match=r"^op\(\) The point argument is not a 3D point"):
        check_point([1.0, 2.0], "op", error=PathError)
    with pytest.raises(SvError, match="data at 1 in the list is not a float"):
        check_point([1.0, "a", 2.0], "op")
    with pytest.raises(SvError, match="not a Python list"):
        check_point("abc", "op")
    with pytest.raises(SvError, match="not a float"):
        check_point([True, 0.0, 0.0], "op")


def test_check_index_and_positive():
    assert check_index(2, 3, "op") == 2
    with pytest.raises(SvError, match="between 0 and 2"):
        check_index(3, 3, "op")
    with pytest.raises(SvError, match="There are no points"):
        check_index(0, 0, "op")
    with pytest.raises(SvError, match="not an integer"):
        check_index(1.0, 3, "op")
    assert check_positive("2.5", "op", "radius") == 2.5
    with pytest.raises(SvError, match="radius argument is <= 0.0"):
        check_positive(0, "op", "radius")


def test_ensure_exec_on_path_env_override(tmp_path, monkeypatch):
    exe = tmp_path / "svfake"
    exe.write_text("#!/bin/sh\n")
    exe.chmod(0o755)
    monkeypatch.setenv("SVFAKE_BIN", '"{}"'.format(exe))
    assert ensure_exec_on_path("svfake") == str(exe)

    monkeypatch.delenv("SVFAKE_BIN")
    monkeypatch.setenv("PATH", str(tmp_path / "empty"))
    with pytest.raises(RuntimeError, match="SVFAKE_BIN"):
        ensure_exec_on_path("svfake")


def test_xml_round_trip_and_errors(tmp_path):
    out = tmp_path / "sub" / "doc.xml"
    write_xml([ET.Element("format", {"version": "1.0"}), ET.Element("path", {"id": "2"})],
              str(out), "write")
    doc = read_xml(str(out), "read")
    assert doc.find("format").get("version") == "1.0"
    assert doc.find("path").get("id") == "2"
    assert not [f for f in os.listdir(str(out.parent)) if f != "doc.xml"]

    with pytest.raises(SvError, match=r"^read\(\) Error reading file"):
        read_xml(str(tmp_path / "missing.xml"), "read")
    bad = tmp_path / "bad.xml"
    bad.write_text("<path><timestep></path>")
    with pytest.raises(SvError, match="Error reading file"):
        read_xml(str(bad), "read")


def test_file_log_attach_detach(tmp_path):
    log_file = tmp_path / "kernel.log"
    attach_file_log("sv.test_kernel", str(log_file))
    logging.getLogger("sv.test_kernel.child").info("[Test] hello")
    assert detach_file_log("sv.test_kernel") == str(log_file)
    assert "[Test] hello" in log_file.read_text()
    assert detach_file_log("sv.test_kernel") is None
