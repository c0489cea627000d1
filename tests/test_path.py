# -*- coding: utf-8 -*-
# tests/test_path.py

import numpy as np
import pytest

from sv.errors import PathError, ProjectFileError
from sv.path import CalculationMethod, Group, Path


def _path(n=100, method=CalculationMethod.TOTAL):
    p = Path(method=method, calculation_number=n)
    for pt in ([0.0, 0.0, 0.0], [0.0, 0.0, 5.0], [2.0, 1.0, 10.0], [4.0, 1.0, 14.0]):
        p.add_control_point(pt)
    return p


def test_calculation_method_names():
    assert CalculationMethod.get_names() == ["SPACING", "SUBDIVISION", "TOTAL"]
    assert CalculationMethod.check("total") == "TOTAL"
    with pytest.raises(PathError, match="Valid names are: SPACING, SUBDIVISION or TOTAL."):
        Path(method="RANDOM")


def test_add_control_point_errors():
    p = Path()
    p.add_control_point([1.0, 2.0, 3.0])
    with pytest.raises(PathError, match=r"^add_control_point\(\) The control point "
                                        r"\(1.0, 2.0, 3.0\) has already been defined"):
        p.add_control_point([1.0, 2.0, 3.0])
    with pytest.raises(PathError, match="between 0 and 1"):
        p.add_control_point([0.0, 0.0, 0.0], index=2)
    with pytest.raises(PathError, match="not a 3D point"):
        p.add_control_point([0.0, 0.0])


def test_insert_by_distance():
    p = Path()
    p.add_control_point([0.0, 0.0, 0.0])
    p.add_control_point([0.0, 0.0, 10.0])
    assert p.add_control_point([0.5, 0.0, 5.0]) == 1
    assert p.add_control_point([0.0, 0.0, -3.0]) == 0
    assert p.add_control_point([0.0, 0.0, 13.0]) == 4
    assert p.get_control_points()[-1] == [0.0, 0.0, 13.0]


def test_remove_and_replace():
    p = _path()
    p.remove_control_point(1)
    assert p.get_num_control_points() == 3
    p.replace_control_point(0, [0.0, 0.0, -1.0])
    assert p.get_control_points()[0] == [0.0, 0.0, -1.0]
    with pytest.raises(PathError, match="control point index must be between 0 and 2"):
        p.remove_control_point(3)
    with pytest.raises(PathError, match="already been defined"):
        p.replace_control_point(0, p.get_control_points()[1])


def test_total_method_curve_points():
    p = _path(50)
    pts = np.array(p.get_curve_points())
    assert p.get_num_curve_points() == 50
    assert np.allclose(pts[0], [0.0, 0.0, 0.0])
    assert np.allclose(pts[-1], [4.0, 1.0, 14.0])
    for i in (0, 10, 49):
        t = np.array(p.get_curve_tangent(i))
        n = np.array(p.get_curve_normal(i))
        assert np.isclose(np.linalg.norm(t), 1.0)
        assert abs(np.dot(t, n)) < 1e-6
    with pytest.raises(PathError, match="curve point index must be between 0 and 49"):
        p.get_curve_point(50)


def test_subdivision_and_spacing_methods():
    p = _path(4, CalculationMethod.SUBDIVISION)
    assert p.get_num_curve_points() == 3 * 4 + 1

    p.set_method(CalculationMethod.SPACING)
    with pytest.raises(PathError, match="spacing must be > 0.0"):
        p.get_curve_points()
    p.set_spacing(0.5)
    pts = np.array(p.get_curve_points())
    steps = np.linalg.norm(np.diff(pts, axis=0), axis=1)
    assert steps.max() < 0.8


def test_smooth_returns_new_path():
    p = _path(80)
    s = p.smooth(sample_rate=5, num_modes=4)
    assert s is not p
    assert 2 < s.get_num_control_points() <= 17
    with pytest.raises(PathError, match="sample rate"):
        p.smooth(0, 4)


def test_polydata():
    poly = _path(20).get_polydata()
    assert poly.n_points == 20
    assert "tangent" in poly.point_data


def test_group_round_trip(tmp_path):
    g = Group()
    g.set_path(_path(30))
    g.set_path(_path(40), time_step=2)
    out = g.write(str(tmp_path / "aorta.pth"))

    back = Group(out)
    assert back.get_time_size() == 3
    path = back.get_path(0)
    assert path.get_num_control_points() == 4
    assert path.get_num_curve_points() == 30
    assert np.allclose(path.get_curve_points(), _path(30).get_curve_points())
    with pytest.raises(PathError, match="No path is defined for time step 1"):
        back.get_path(1)


def test_group_read_errors(tmp_path):
    with pytest.raises(ProjectFileError, match="Error reading file"):
        Group(str(tmp_path / "missing.pth"))
    bad = tmp_path / "bad.pth"
    bad.write_text('<?xml version="1.0" ?><format version="1.0"/>')
    with pytest.raises(ProjectFileError, match="no <path> element"):
        Group(str(bad))


def test_group_bad_point_id(tmp_path):
    g = Group()
    g.set_path(_path(30))
    out = tmp_path / "aorta.pth"
    g.write(str(out))
    out.write_text(out.read_text().replace('<point id="0" ', '<point id="first" ', 1))
    with pytest.raises(ProjectFileError, match="Error reading file .*Invalid <point> element"):
        Group(str(out))
