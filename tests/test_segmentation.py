# -*- coding: utf-8 -*-
# tests/test_segmentation.py

import math

import numpy as np
import pytest
import pyvista as pv

from sv import segmentation
from sv.errors import KernelNameError, ProjectFileError, SegmentationError
from sv.segmentation import (Circle, Contour, Ellipse, Group, Kernel, LevelSet, Polygon,
                             SplinePolygon, Threshold)

FRAME = {"pos": [0.0, 0.0, 2.0], "tangent": [0.0, 0.0, 1.0], "rotation": [1.0, 0.0, 0.0]}

# Contour group as saved by SimVascular: a circle followed by a smoothed level set contour.
LEGACY_CTGR = """<?xml version="1.0" encoding="UTF-8" ?>
<format version="1.0" />
<contourgroup path_name="aorta" path_id="1" reslice_size="5" point_2d_display_size="" point_size="" version="1.0">
    <timestep id="0">
        <lofting_parameters method="nurbs" sampling="60" sample_per_seg="12" use_linear_sample="1" linear_factor="10" use_fft="0" num_modes="20" u_degree="2" v_degree="2" u_knot_type="derivative" v_knot_type="average" u_parametric_type="centripetal" v_parametric_type="chord" />
        <contour id="0" type="Circle" method="Manual" closed="true" min_control_number="2" max_control_number="2" subdivision_type="0" subdivision_number="0" subdivision_spacing="0">
            <path_point id="0">
                <pos x="0" y="0" z="0" />
                <tangent x="0" y="0" z="1" />
                <rotation x="1" y="0" z="0" />
            </path_point>
            <control_points>
                <point id="0" x="0" y="0" z="0" />
                <point id="1" x="1" y="0" z="0" />
            </control_points>
            <contour_points>
                <point id="0" x="1" y="0" z="0" />
                <point id="1" x="0" y="1" z="0" />
                <point id="2" x="-1" y="0" z="0" />
                <point id="3" x="0" y="-1" z="0" />
            </contour_points>
        </contour>
        <contour id="1" type="Contour" method="LevelSet + Smoothed" closed="true" min_control_number="2" max_control_number="2" subdivision_type="0" subdivision_number="0" subdivision_spacing="0">
            <path_point id="10">
                <pos x="0" y="0" z="4" />
                <tangent x="0" y="0" z="1" />
                <rotation x="1" y="0" z="0" />
            </path_point>
            <control_points>
                <point id="0" x="0" y="0" z="4" />
                <point id="1" x="1" y="0" z="4" />
            </control_points>
            <contour_points>
                <point id="0" x="1" y="1" z="4" />
                <point id="1" x="-1" y="1" z="4" />
                <point id="2" x="-1" y="-1" z="4" />
                <point id="3" x="1" y="-1" z="4" />
            </contour_points>
        </contour>
    </timestep>
</contourgroup>
"""


def _tube_image():
    """Distance to the z axis sampled on a 4x4x4 box."""
    image = pv.ImageData(dimensions=(41, 41, 41), spacing=(0.1, 0.1, 0.1), origin=(-2.0, -2.0, 0.0))
    image.point_data["distance"] = np.linalg.norm(np.asarray(image.points)[:, :2], axis=1)
    image.set_active_scalars("distance")
    return image


def test_kernel_names_and_create():
    assert Kernel.get_names() == ["CIRCLE", "ELLIPSE", "LEVEL_SET", "POLYGON",
                                  "SPLINE_POLYGON", "THRESHOLD"]
    c = segmentation.create("circle", radius=1.0, path_point=FRAME)
    assert isinstance(c, Circle)
    with pytest.raises(KernelNameError, match="Valid names are: CIRCLE, ELLIPSE, LEVEL_SET, "
                                              "POLYGON, SPLINE_POLYGON or THRESHOLD."):
        segmentation.create("SQUARE")


def test_circle_measures():
    c = Circle(radius=2.0, path_point=FRAME)
    c.set_subdivision_params("TOTAL", 120)
    pts = np.array(c.get_contour_points())
    assert len(pts) == 120
    assert np.allclose(pts[:, 2], 2.0)
    assert np.allclose(np.linalg.norm(pts[:, :2], axis=1), 2.0)
    assert c.get_radius() == pytest.approx(2.0)
    assert c.area() == pytest.approx(math.pi * 4.0, rel=1e-2)
    assert c.perimeter() == pytest.approx(4.0 * math.pi, rel=1e-2)
    assert np.allclose(c.get_center(), [0.0, 0.0, 2.0], atol=1e-9)


def test_circle_errors():
    c = Circle(path_point=FRAME)
    with pytest.raises(SegmentationError, match=r"^set_control_points_by_radius\(\) "
                                                r"Radius argument must be > 0.0."):
        c.set_control_points_by_radius([0.0, 0.0, 2.0], 0.0)
    with pytest.raises(SegmentationError, match="exactly 2 control points"):
        c.set_control_points([[0.0, 0.0, 2.0]])
    with pytest.raises(SegmentationError, match="not set to 'Threshold'"):
        c.set_threshold_value(1.0)


def test_circle_move_center_and_radius():
    c = Circle(radius=1.0, path_point=FRAME)
    c.set_control_point(0, [1.0, 1.0, 5.0])
    assert np.allclose(c.get_control_points()[0], [1.0, 1.0, 2.0])
    c.set_control_point(1, [1.0, 4.0, 2.0])
    assert c.get_radius() == pytest.approx(3.0)


def test_ellipse_radii():
    e = Ellipse(path_point=FRAME)
    e.set_control_points([[0.0, 0.0, 2.0], [3.0, 0.0, 2.0], [1.0, 1.0, 2.0]])
    a, b = e.get_radii()
    assert (a, b) == (pytest.approx(3.0), pytest.approx(1.0))
    assert e.area() == pytest.approx(math.pi * 3.0, rel=2e-2)
    with pytest.raises(SegmentationError, match="lies on the first axis"):
        e.set_control_points([[0.0, 0.0, 2.0], [3.0, 0.0, 2.0], [1.0, 0.0, 2.0]])


def test_polygon_and_spline_polygon():
    square = [[-1.0, -1.0, 2.0], [1.0, -1.0, 2.0], [1.0, 1.0, 2.0], [-1.0, 1.0, 2.0]]
    p = Polygon(path_point=FRAME)
    p.set_control_points(square)
    assert p.get_vertices() == square
    assert np.allclose(p.get_control_points()[0], [0.0, 0.0, 2.0])
    assert p.area() == pytest.approx(4.0)

    p.set_control_point(1, [-2.0, -2.0, 2.0])
    assert p.area() == pytest.approx(16.0)

    s = SplinePolygon(path_point=FRAME)
    s.set_control_points(square)
    assert 4.0 < s.area() < 7.0
    with pytest.raises(SegmentationError, match="at least 3 control points"):
        s.set_control_points(square[:2])


def test_smooth_contour_copy():
    p = Polygon(path_point=FRAME)
    p.set_control_points([[-1.0, -1.0, 2.0], [1.0, -1.0, 2.0], [1.0, 1.0, 2.0], [-1.0, 1.0, 2.0]])
    s = p.create_smooth_contour(3)
    assert s is not p
    assert s.get_method() == p.get_method() + " + Smoothed"
    assert s.create_smooth_contour(3).get_method() == "Manual + Smoothed"
    assert np.allclose(np.array(s.get_contour_points())[:, 2], 2.0)
    with pytest.raises(SegmentationError, match="number of modes"):
        p.create_smooth_contour(0)


def test_threshold_contour_from_image():
    t = Threshold(path_point=FRAME, reslice_size=3.0, threshold=1.0)
    with pytest.raises(SegmentationError, match="No image has been set"):
        t.create()
    t.set_image(_tube_image())
    t.create()
    assert t.area() == pytest.approx(math.pi, rel=5e-2)
    assert np.allclose(t.get_center(), [0.0, 0.0, 2.0], atol=0.05)

    t.set_control_point(1, np.array(t.get_control_points()[0]) + [2.0, 0.0, 0.0])
    assert t.area() == pytest.approx(4.0 * math.pi, rel=1e-1)
    with pytest.raises(SegmentationError, match="computed from the image"):
        t.set_control_points([[0.0, 0.0, 2.0], [1.0, 0.0, 2.0]])


def test_level_set_parameters():
    ls = LevelSet(path_point=FRAME)
    ls.set_level_set_parameters(iterations=20, balloon=-1.0)
    assert ls.get_level_set_parameters()["iterations"] == 20
    with pytest.raises(SegmentationError, match="Unknown level set parameter 'speed'"):
        ls.set_level_set_parameters(speed=1.0)
    with pytest.raises(SegmentationError, match="integer >= 1"):
        ls.set_level_set_parameters(iterations=0)


def test_group_round_trip(tmp_path):
    g = Group()
    g.set_contour(0, Circle(radius=1.0, path_point=FRAME))
    poly = Polygon(path_point=FRAME)
    poly.set_control_points([[-1.0, -1.0, 2.0], [1.0, -1.0, 2.0], [0.0, 1.0, 2.0]])
    g.set_contour(1, poly)
    out = g.write(str(tmp_path / "seg.ctgr"))

    back = Group(out)
    assert back.get_time_size() == 1
    assert back.number_of_contours() == 2
    c0, c1 = back.get_contour(0), back.get_contour(1)
    assert c0.get_type() == "Circle" and c1.get_type() == "Polygon"
    assert np.allclose(c0.get_contour_points(), g.get_contour(0).get_contour_points())
    with pytest.raises(SegmentationError, match="contour index must be between 0 and 1"):
        back.get_contour(2)
    assert back.get_loft_options().num_out_pts_in_segs > 0


def test_group_bad_file(tmp_path):
    bad = tmp_path / "bad.ctgr"
    bad.write_text("<format version='1.0'/>")
    with pytest.raises(ProjectFileError, match="Error reading the contour group file"):
        Group(str(bad))


def test_group_reads_legacy_file(tmp_path):
    legacy = tmp_path / "aorta.ctgr"
    legacy.write_text(LEGACY_CTGR)
    g = Group(str(legacy))
    assert g.get_path_name() == "aorta"
    assert g.number_of_contours() == 2

    circle, smoothed = g.get_contour(0), g.get_contour(1)
    assert isinstance(circle, Circle)
    assert type(smoothed) is Contour
    assert smoothed.get_type() == "Contour"
    assert smoothed.get_method() == "LevelSet + Smoothed"
    assert smoothed.area() == pytest.approx(4.0)
    assert np.allclose(smoothed.get_center(), [0.0, 0.0, 4.0])
    assert smoothed.create_smooth_contour(2).get_method() == "LevelSet + Smoothed"

    opts = g.get_loft_options()
    assert opts.num_out_pts_in_segs == 60
    assert opts.num_out_pts_along_length == 12
    assert opts.num_linear_pts_along_length == 120
    assert not opts.use_fft
    nurbs = g.get_loft_nurbs_options()
    assert (nurbs.u_knot_span_type, nurbs.v_knot_span_type) == ("endderiv", "avg")
    assert (nurbs.u_parametric_span_type, nurbs.v_parametric_span_type) == ("centripetal", "chord")

    back = Group(g.write(str(tmp_path / "copy.ctgr")))
    assert back.get_contour(1).get_type() == "Contour"
    assert back.get_contour(1).get_contour_points() == smoothed.get_contour_points()


def test_group_bad_point_coordinates(tmp_path):
    legacy = tmp_path / "aorta.ctgr"
    legacy.write_text(LEGACY_CTGR.replace('x="-1" y="0" z="0"', 'x="-1" y="zero" z="0"'))
    with pytest.raises(ProjectFileError, match="Error reading the contour group file .*Invalid <point>"):
        Group(str(legacy))
