# -*- coding: utf-8 -*-
# tests/test_geometry.py

import logging
import math

import numpy as np
import pytest

from sv.errors import GeometryError
from sv.geometry import (
    LoftNurbsOptions,
    LoftOptions,
    align_profile,
    average_point,
    bbox,
    interpolate_closed_curve,
    loft_solid,
    loft_solid_using_nurbs,
    orient_profile,
    point_in_poly,
    polygon_normal,
    sample_loop,
    surface_area,
)
from sv.geometry.loft import INLET_ID, OUTLET_ID, WALL_ID, unsupported_nurbs_options
from sv.tools.gmsh_session import FACE_ID_ARRAY


def _ring(z, r=1.0, n=24, phase=0.0):
    t = np.linspace(0.0, 2.0 * math.pi, n, endpoint=False) + phase
    return np.column_stack([r * np.cos(t), r * np.sin(t), np.full(n, z)])


def test_point_helpers():
    sq = np.array([[0.0, 0.0, 0.0], [2.0, 0.0, 0.0], [2.0, 2.0, 0.0], [0.0, 2.0, 0.0]])
    assert np.allclose(average_point(sq), [1.0, 1.0, 0.0])
    assert np.allclose(bbox(sq), [0.0, 2.0, 0.0, 2.0, 0.0, 0.0])
    assert np.allclose(polygon_normal(sq), [0.0, 0.0, 1.0])
    assert point_in_poly([1.0, 1.0, 0.5], sq)
    assert not point_in_poly([3.0, 1.0, 0.0], sq)
    with pytest.raises(GeometryError, match="not a list of 3D points"):
        bbox([[1.0, 2.0]])


def test_orient_and_align_profile():
    ring = _ring(0.0)
    assert np.allclose(orient_profile(ring[::-1], [0.0, 0.0, 1.0]), ring)

    shifted = np.roll(ring, 5, axis=0)
    assert np.allclose(align_profile(ring, shifted), ring)
    assert np.allclose(align_profile(ring, shifted[::-1]), ring)
    assert np.allclose(align_profile(ring, shifted, use_distance=False), ring)
    with pytest.raises(GeometryError, match="same number of points"):
        align_profile(ring, ring[:-1])


def test_sampling():
    ring = _ring(0.0, n=40)
    out = sample_loop(np.vstack([ring, ring[:1]]), 12)
    assert out.shape == (12, 3)
    assert np.allclose(np.linalg.norm(out[:, :2], axis=1), 1.0, atol=0.02)
    smooth = interpolate_closed_curve(ring[::4], 50)
    assert smooth.shape == (50, 3)
    assert np.allclose(np.linalg.norm(smooth[:, :2], axis=1), 1.0, atol=0.02)
    with pytest.raises(GeometryError, match=">= 3"):
        sample_loop(ring, 2)


def test_loft_options_validation():
    LoftOptions().validate()
    with pytest.raises(GeometryError, match=r"^loft_solid\(\) The 'bias' option must be in"):
        loft_solid([_ring(0.0), _ring(1.0)], LoftOptions(bias=2.0))
    with pytest.raises(GeometryError, match="u_knot_span_type"):
        LoftNurbsOptions(u_knot_span_type="bad").validate()


def test_loft_solid_capped_tube():
    profiles = [_ring(0.0, 1.0), _ring(5.0, 1.2, phase=0.3), _ring(10.0, 1.0)]
    surf = loft_solid(profiles, LoftOptions(num_out_pts_in_segs=30, num_out_pts_along_length=40))
    ids = set(np.unique(surf.cell_data[FACE_ID_ARRAY]).tolist())
    assert ids == {WALL_ID, INLET_ID, OUTLET_ID}
    assert surf.n_open_edges == 0
    assert 30.0 < surf.volume < 50.0
    assert surface_area(surf) > 2.0 * math.pi * 10.0 * 0.9


def test_loft_needs_two_profiles():
    with pytest.raises(GeometryError):
        loft_solid([_ring(0.0)])


def test_loft_nurbs():
    pytest.importorskip("gmsh")
    surf = loft_solid_using_nurbs([_ring(0.0), _ring(4.0, 1.5), _ring(8.0)],
                                  LoftNurbsOptions(u_spacing=0.05, v_spacing=0.05))
    assert surf.n_cells > 0
    assert FACE_ID_ARRAY in surf.cell_data
    assert len(np.unique(surf.cell_data[FACE_ID_ARRAY])) >= 3


def test_nurbs_options_not_applied_by_through_sections():
    assert unsupported_nurbs_options(LoftNurbsOptions()) == []
    assert unsupported_nurbs_options(LoftNurbsOptions(v_degree=2, v_parametric_span_type="chord")) == []
    opts = LoftNurbsOptions(u_degree=3, u_knot_span_type="avg", u_parametric_span_type="chord")
    assert unsupported_nurbs_options(opts) == ["u_knot_span_type", "u_parametric_span_type", "u_degree"]


def test_loft_nurbs_warns_about_ignored_options(caplog):
    pytest.importorskip("gmsh")
    opts = LoftNurbsOptions(u_spacing=0.05, v_spacing=0.05, v_knot_span_type="endderiv")
    with caplog.at_level(logging.WARNING, logger="sv.geometry.loft"):
        loft_solid_using_nurbs([_ring(0.0), _ring(4.0)], opts)
    assert "are ignored: v_knot_span_type (max degree 2 is used)" in caplog.text
