# -*- coding: utf-8 -*-
# tests/test_post.py

import numpy as np
import pytest
import pyvista as pv

pytest.importorskip("matplotlib")

from sv import meshing  # noqa: E402
from sv.path import Path  # noqa: E402
from sv.post import plot_contours, plot_path, plot_tetra_quality  # noqa: E402
from sv.segmentation import Circle  # noqa: E402


@pytest.fixture(autouse=True)
def headless(monkeypatch):
    monkeypatch.delenv("DISPLAY", raising=False)


def test_plot_path(tmp_path):
    p = Path(calculation_number=30)
    for pt in ([0.0, 0.0, 0.0], [0.0, 1.0, 4.0], [1.0, 0.0, 8.0]):
        p.add_control_point(pt)
    out = tmp_path / "path.png"
    plot_path(p, tangents=True, show=False, save_path=str(out))
    assert out.stat().st_size > 0
    with pytest.raises(ValueError, match="no control points"):
        plot_path(Path(), show=False)


def test_plot_contours(tmp_path):
    frames = [{"pos": [0.0, 0.0, z], "tangent": [0.0, 0.0, 1.0], "rotation": [1.0, 0.0, 0.0]}
              for z in (0.0, 2.0, 4.0)]
    contours = [Circle(radius=1.0 + 0.1 * i, path_point=f) for i, f in enumerate(frames)]
    out = tmp_path / "contours.png"
    plot_contours(contours, show=False, save_path=str(out))
    assert out.stat().st_size > 0
    with pytest.raises(ValueError, match="No contours to plot"):
        plot_contours([], show=False)


def test_plot_tetra_quality(tmp_path):
    points = np.array([[1.0, 1.0, 1.0], [1.0, -1.0, -1.0], [-1.0, 1.0, -1.0], [-1.0, -1.0, 1.0]])
    grid = pv.UnstructuredGrid({pv.CellType.TETRA: np.array([[0, 2, 1, 3]])}, points)
    volume = tmp_path / "tet.vtu"
    grid.save(str(volume))
    mesher = meshing.create("TETGEN")
    mesher.load_mesh(str(volume))
    out = tmp_path / "quality.png"
    plot_tetra_quality(mesher, show=False, save_path=str(out))
    assert out.stat().st_size > 0
