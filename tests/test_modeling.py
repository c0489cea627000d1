# -*- coding: utf-8 -*-
# tests/test_modeling.py

import numpy as np
import pytest
import pyvista as pv

from sv import modeling
from sv.errors import KernelNameError, ModelingError, ProjectFileError
from sv.modeling import Group, Kernel, Modeler, PolyDataModel
from sv.modeling.kernel import model_class
from sv.tools.gmsh_session import FACE_ID_ARRAY


def test_kernel_names():
    assert Kernel.get_names() == ["DISCRETE", "MESHSIMSOLID", "OCCT", "PARASOLID", "POLYDATA"]
    assert model_class("polydata") is PolyDataModel
    with pytest.raises(ModelingError, match="The 'PARASOLID' kernel is not supported."):
        Modeler(Kernel.PARASOLID)
    with pytest.raises(KernelNameError, match="Valid names are: .*POLYDATA"):
        Modeler("ACIS")


def test_licensed_kernel_cannot_be_built():
    assert not modeling.Parasolid.available()
    with pytest.raises(ModelingError, match="requires the licensed Parasolid library"):
        modeling.Parasolid()


def test_polydata_primitives():
    m = Modeler(Kernel.POLYDATA)
    box = m.box([0.0, 0.0, 0.0], width=2.0, height=3.0, length=4.0)
    assert len(box.get_face_ids()) == 6
    assert box.check() == 0
    assert box.get_polydata().volume == pytest.approx(24.0, rel=1e-6)

    cyl = m.cylinder(1.0, 5.0, [0.0, 0.0, 0.0], [0.0, 0.0, 1.0])
    assert len(cyl.get_face_ids()) == 3
    assert np.allclose(cyl.find_centroid(), [0.0, 0.0, 0.0], atol=1e-6)

    sph = m.sphere(2.0, [1.0, 1.0, 1.0])
    assert sph.get_face_ids() == [1]
    assert sph.get_polydata().volume == pytest.approx(4.0 / 3.0 * np.pi * 8.0, rel=2e-2)

    ell = m.ellipsoid([1.0, 2.0, 3.0], [0.0, 0.0, 0.0])
    assert np.allclose(ell.get_polydata().bounds, [-1.0, 1.0, -2.0, 2.0, -3.0, 3.0], atol=0.05)


def test_primitive_argument_errors():
    m = Modeler("POLYDATA")
    with pytest.raises(ModelingError, match=r"^cylinder\(\) The cylinder axis argument has zero length."):
        m.cylinder(1.0, 1.0, [0.0, 0.0, 0.0], [0.0, 0.0, 0.0])
    with pytest.raises(ModelingError, match="radius argument is <= 0.0"):
        m.sphere(-1.0, [0.0, 0.0, 0.0])
    with pytest.raises(ModelingError, match="values <= 0.0"):
        m.ellipsoid([1.0, 0.0, 1.0], [0.0, 0.0, 0.0])
    with pytest.raises(ModelingError, match="not a 3D point"):
        m.box([0.0, 0.0])


def test_boolean_argument_errors():
    m = Modeler(Kernel.POLYDATA)
    box = m.box([0.0, 0.0, 0.0])
    with pytest.raises(ModelingError, match="The first model argument is not a Model object."):
        m.union("box", box)
    with pytest.raises(ModelingError, match="The subtract model argument is not a Model object."):
        m.subtract(box, None)


def test_boolean_kernel_mismatch():
    pytest.importorskip("gmsh")
    occt_box = Modeler(Kernel.OCCT).box([0.0, 0.0, 0.0])
    m = Modeler(Kernel.POLYDATA)
    with pytest.raises(ModelingError, match="does not match the modeler kernel 'POLYDATA'"):
        m.intersect(m.box([0.0, 0.0, 0.0]), occt_box)


def test_face_names_and_attributes():
    model = PolyDataModel(pv.Cylinder(radius=1.0, height=4.0, resolution=32))
    ids = model.get_face_ids()
    assert len(ids) == 3
    model.set_face_names({ids[0]: "wall"})
    assert model.get_face_names()[ids[0]] == "wall"
    assert model.get_face_names()[ids[1]] == "face_{}".format(ids[1])
    model.set_face_attributes(ids[1], type="cap", name="inlet")
    assert model.get_face_attributes(ids[1]) == {"name": "inlet", "type": "cap"}
    with pytest.raises(ModelingError, match="not a valid face ID"):
        model.get_face_attributes(99)
    with pytest.raises(ModelingError, match="face ID argument <= 0"):
        model.set_face_attributes(0, name="x")


def test_delete_faces_opens_surface():
    model = Modeler(Kernel.POLYDATA).cylinder(1.0, 4.0, [0.0, 0.0, 0.0], [0.0, 0.0, 1.0])
    caps = [fid for fid in model.get_face_ids()
            if model.get_face_polydata(fid).n_cells < model.get_polydata().n_cells / 2]
    model.delete_faces(caps[:1])
    assert model.check() > 0
    with pytest.raises(ModelingError, match="not a list"):
        model.delete_faces(1)


def test_write_formats(tmp_path):
    model = Modeler(Kernel.POLYDATA).sphere(1.0, [0.0, 0.0, 0.0])
    out = model.write(str(tmp_path / "sphere"), format="stl")
    assert out.endswith("sphere.stl")
    with pytest.raises(ModelingError, match="has a file extension 'vtp'"):
        model.write(str(tmp_path / "sphere.vtp"))
    with pytest.raises(ModelingError, match="Unsupported file format 'iges'"):
        model.write(str(tmp_path / "sphere"), format="iges")

    back = Modeler(Kernel.POLYDATA).read(model.write(str(tmp_path / "native")))
    assert back.get_face_ids() == [1]
    with pytest.raises(ModelingError, match="Error reading a solid model from the file"):
        Modeler(Kernel.POLYDATA).read(str(tmp_path / "missing.vtp"))


def test_apply4x4_translates():
    model = Modeler(Kernel.POLYDATA).sphere(1.0, [0.0, 0.0, 0.0])
    mat = np.eye(4)
    mat[:3, 3] = [1.0, 2.0, 3.0]
    model.apply4x4(mat)
    assert np.allclose(model.find_centroid(), [1.0, 2.0, 3.0], atol=1e-3)


def test_occt_primitives():
    pytest.importorskip("gmsh")
    m = Modeler(Kernel.OCCT)
    box = m.box([0.0, 0.0, 0.0], 1.0, 2.0, 3.0)
    assert len(box.get_face_ids()) == 6
    surf = box.get_polydata()
    assert FACE_ID_ARRAY in surf.cell_data
    assert set(np.unique(surf.cell_data[FACE_ID_ARRAY]).tolist()) == set(box.get_face_ids())
    cut = m.subtract(box, m.sphere(0.3, [0.0, 0.0, 0.0]))
    assert len(cut.get_face_ids()) == 7


def test_group_round_trip(tmp_path):
    model = Modeler(Kernel.POLYDATA).cylinder(1.0, 4.0, [0.0, 0.0, 0.0], [0.0, 0.0, 1.0])
    ids = model.get_face_ids()
    model.set_face_attributes(ids[0], name="wall", type="wall")

    g = Group()
    g.set_model(model)
    out = g.write(str(tmp_path / "vessel.mdl"))
    assert (tmp_path / "vessel.vtp").exists()

    back = Group(out)
    assert back.get_time_size() == 1
    assert back.get_model_type() == "PolyData"
    loaded = back.get_model(0)
    assert loaded.get_face_ids() == ids
    assert back.get_face_names()[ids[0]] == "wall"
    with pytest.raises(ModelingError, match="model index must be between 0 and 0"):
        back.get_model(1)


def test_group_errors(tmp_path):
    pytest.importorskip("gmsh")
    g = Group()
    g.set_model(Modeler(Kernel.POLYDATA).sphere(1.0, [0.0, 0.0, 0.0]))
    with pytest.raises(ModelingError, match="does not match the group type 'PolyData'"):
        g.set_model(Modeler(Kernel.OCCT).sphere(1.0, [0.0, 0.0, 0.0]), time_step=1)
    with pytest.raises(ModelingError, match="not a Model object"):
        g.set_model("sphere")

    bad = tmp_path / "bad.mdl"
    bad.write_text('<?xml version="1.0" ?><format version="1.0"/>')
    with pytest.raises(ProjectFileError, match="Error reading the model group file"):
        Group(str(bad))
