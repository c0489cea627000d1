# -*- coding: utf-8 -*-
# tests/test_meshing.py

import logging

import numpy as np
import pytest
import pyvista as pv

from sv import meshing, modeling
from sv.errors import KernelNameError, MeshingError
from sv.meshing import Group, Kernel, MeshSimOptions, TetGenOptions, TetGenRadiusBased
from sv.meshing import io as mesh_io
from sv.meshing.group import project_models_dir
from sv.meshing.sizing import SizeField
from sv.tools.gmsh_session import FACE_ID_ARRAY

# Regular tetrahedron, positively oriented.
REGULAR_POINTS = np.array([[1.0, 1.0, 1.0], [1.0, -1.0, -1.0], [-1.0, 1.0, -1.0],
                           [-1.0, -1.0, 1.0]])
REGULAR_TET = np.array([[0, 2, 1, 3]])


def _cylinder_model():
    return modeling.Modeler(modeling.Kernel.POLYDATA).cylinder(1.0, 4.0, [0.0, 0.0, 0.0],
                                                               [0.0, 0.0, 1.0])


def _cap_ids(model):
    total = model.get_polydata().n_cells
    return [fid for fid in model.get_face_ids()
            if model.get_face_polydata(fid).n_cells < total / 2]


# --------------------
# Kernels
# --------------------
def test_kernel_names_and_create():
    assert Kernel.get_names() == ["GMSH", "INVALID", "MESHSIM", "TETGEN"]
    assert isinstance(meshing.create(), meshing.TetGen)
    assert isinstance(meshing.create("gmsh"), meshing.Gmsh)
    with pytest.raises(KernelNameError, match="Valid names are: GMSH, MESHSIM or TETGEN."):
        meshing.create("NETGEN")
    with pytest.raises(MeshingError, match="requires the licensed MeshSim library"):
        meshing.create(Kernel.MESHSIM)


def test_module_logging_needs_kernel(tmp_path, monkeypatch):
    monkeypatch.setattr("sv.meshing.kernel._current_kernel", None)
    with pytest.raises(MeshingError, match="The mesh kernel is not set."):
        meshing.logging_on(str(tmp_path / "mesh.log"))
    meshing.set_kernel("tetgen")
    assert meshing.get_kernel() == "TETGEN"
    meshing.logging_on(str(tmp_path / "mesh.log"))
    assert meshing.logging_off() == str(tmp_path / "mesh.log")


# --------------------
# Options
# --------------------
def test_tetgen_options_values():
    opts = TetGenOptions(global_edge_size=0.5)
    opts.add_local_edge_size(2, 0.1)
    values = opts.get_values()
    assert values["GlobalEdgeSize"] == 0.5
    assert values["LocalEdgeSize"] == [{"face_id": 2, "edge_size": 0.1}]
    assert "AddHole" not in values
    with pytest.raises(MeshingError, match="The 'edge_size' must be > 0."):
        opts.add_local_edge_size(1, 0.0)
    with pytest.raises(MeshingError, match="The 'face_id' must be > 0."):
        opts.add_local_edge_size(0, 1.0)
    with pytest.raises(MeshingError, match="global_edge_size parameter must be > 0"):
        TetGenOptions(global_edge_size=-1.0)
    with pytest.raises(MeshingError, match="has not been set"):
        TetGenOptions().validate()


def test_tetgen_option_parameters():
    assert TetGenOptions.create_sphere_refinement_parameter(0.1, 2.0, [0, 0, 1]) == \
        {"edge_size": 0.1, "radius": 2.0, "center": [0.0, 0.0, 1.0]}
    assert TetGenOptions.create_add_subdomain_parameter([1, 2, 3], 4) == \
        {"coordinate": [1.0, 2.0, 3.0], "region_size": 4}
    with pytest.raises(MeshingError, match="'region_size' must be > 0"):
        TetGenOptions.create_add_subdomain_parameter([1, 2, 3], 0)
    opts = TetGenOptions()
    with pytest.raises(MeshingError, match="list of three floats"):
        opts.set_add_hole([1.0, 2.0])
    with pytest.raises(MeshingError, match="Unknown TetGen option 'Speed'"):
        opts.set_value("Speed", 1)


def test_tetgen_command_history():
    commands = ["option surface 1", "option volume 0", "option GlobalEdgeSize 0.4",
                "option Optimization 5", "localSize inlet 0.1", "localSize 3 0.2", "setWalls"]
    opts, params = TetGenOptions.create_from_commands(commands, {"inlet": 2})
    assert opts.global_edge_size == 0.4
    assert opts.surface_mesh_flag is True and opts.volume_mesh_flag is False
    assert opts.optimization == 5
    assert opts.local_edge_size == [{"face_id": 2, "edge_size": 0.1},
                                    {"face_id": 3, "edge_size": 0.2}]
    assert params == [["setWalls"]]

    lines = opts.to_commands({2: "inlet"})
    assert "option GlobalEdgeSize 0.4" in lines
    assert "option volume 0" in lines
    assert "localSize inlet 0.1" in lines
    again, _ = TetGenOptions.create_from_commands(lines, {"inlet": 2})
    assert again.get_values() == opts.get_values()

    with pytest.raises(MeshingError, match="is not a face of the model"):
        TetGenOptions.create_from_commands(["localSize outlet 0.1"])


def test_gmsh_command_history():
    opts = meshing.GmshOptions(global_edge_size=0.5, feature_angle=60.0, optimize=False)
    opts.add_local_edge_size(2, 0.25)
    lines = opts.to_commands({2: "inlet"})
    assert "option FeatureAngle 60.0" in lines
    assert "option Optimize 0" in lines

    back, params = meshing.GmshOptions.create_from_commands(lines + ["setWalls"], {"inlet": 2})
    assert back.get_values() == opts.get_values()
    assert params == [["setWalls"]]

    defaults, _ = meshing.GmshOptions.create_from_commands(["option GlobalEdgeSize 1.0"])
    assert (defaults.feature_angle, defaults.optimize) == (40.0, True)
    with pytest.raises(MeshingError, match="FeatureAngle command value 'steep'"):
        meshing.GmshOptions.create_from_commands(["option FeatureAngle steep"])


def test_meshsim_options():
    opts = MeshSimOptions(global_edge_size={"absolute": 0.5})
    opts.local_edge_size = {"face_id": 1, "edge_size": 0.2}
    assert opts.local_edge_size == [{"face_id": 1, "edge_size": 0.2}]
    with pytest.raises(MeshingError, match="global_edge_size parameter must be a dictionary"):
        opts.global_edge_size = 0.5
    with pytest.raises(MeshingError, match="relative edge size parameter must be > 0"):
        opts.global_edge_size = {"relative": 0.0}
    with pytest.raises(MeshingError, match="region ID paramter must be > 0"):
        opts.local_edge_size = [{"face_id": 0, "edge_size": 0.2}]
    with pytest.raises(MeshingError, match="has not been set"):
        MeshSimOptions().validate()


# --------------------
# Mesher setup
# --------------------
def test_mesher_model_and_walls():
    mesher = meshing.create("TETGEN")
    with pytest.raises(MeshingError, match="A solid model has not been loaded"):
        mesher.set_walls([1])
    with pytest.raises(MeshingError, match="not a solid Model object"):
        mesher.set_model("model")

    model = _cylinder_model()
    mesher.set_model(model)
    assert mesher.get_model_face_ids() == model.get_face_ids()
    assert len(mesher.get_model_face_info().splitlines()) == 3
    mesher.set_walls([1])
    assert mesher.get_walls() == [1]
    with pytest.raises(MeshingError, match="Error setting walls.") as err:
        mesher.set_walls([1, 9])
    assert "invalid_face_ids=[9]" in str(err.value)


def test_mesher_refinement_arguments():
    mesher = meshing.create("GMSH")
    mesher.set_model(_cylinder_model())
    with pytest.raises(MeshingError, match="radius argument is <= 0.0"):
        mesher.set_sphere_refinement(0.1, 0.0, [0.0, 0.0, 0.0])
    with pytest.raises(MeshingError, match="normal argument has zero length"):
        mesher.set_cylinder_refinement(0.1, 1.0, 1.0, [0.0, 0.0, 0.0], [0.0, 0.0, 0.0])
    with pytest.raises(MeshingError, match="Error setting size function"):
        mesher.set_size_function_based_mesh(0.5, "missing")
    with pytest.raises(MeshingError, match="Error setting boundary layer"):
        mesher.set_boundary_layer(0, 99, 0, 2, [0.1])
    with pytest.raises(MeshingError, match="meshing options have not been set"):
        mesher.generate_mesh()
    with pytest.raises(MeshingError, match="not a GmshOptions object"):
        mesher.set_meshing_options(TetGenOptions(global_edge_size=0.5))
    with pytest.raises(MeshingError, match="Could not get polydata for the mesh"):
        mesher.get_polydata()


def test_radius_based_requires_model_and_centerlines(tmp_path):
    with pytest.raises(MeshingError, match="not a TetGen mesher"):
        TetGenRadiusBased(meshing.create("GMSH"))
    rb = TetGenRadiusBased(meshing.create("TETGEN"))
    with pytest.raises(MeshingError, match="A solid model must be defined"):
        rb.compute_centerlines()
    with pytest.raises(MeshingError, match="Centerlines have not been computed"):
        rb.compute_size_function(0.5)
    with pytest.raises(MeshingError, match="Centerlines have not been computed"):
        rb.write_centerlines(str(tmp_path / "cl.vtp"))


def test_radius_based_size_function():
    mesher = meshing.create("TETGEN")
    mesher.set_model(_cylinder_model())
    rb = TetGenRadiusBased(mesher)
    line = pv.Line((0.0, 0.0, -2.0), (0.0, 0.0, 2.0), resolution=20)
    rb.set_centerlines(line)
    rb.compute_size_function(0.5)
    assert mesher._size_function == (0.5, TetGenRadiusBased.SIZE_FUNCTION)


# --------------------
# Size field
# --------------------
def test_size_field_refinements():
    field = SizeField(1.0)
    assert not field.has_refinements()
    field.add_sphere(0.2, 1.0, [0.0, 0.0, 0.0])
    field.add_cylinder(0.3, 0.5, 2.0, [5.0, 0.0, 0.0], [0.0, 0.0, 1.0])
    field.add_surface_size(np.array([[0.0, 10.0, 0.0]]), 0.1, reach=1.0)
    assert field.has_refinements()
    assert field.size_at(0.0, 0.0, 0.5) == pytest.approx(0.2)
    assert field.size_at(5.0, 0.2, 0.9) == pytest.approx(0.3)
    assert field.size_at(0.0, 10.0, 0.0) == pytest.approx(0.1)
    assert field.size_at(0.0, 10.5, 0.0) == pytest.approx(0.55)
    assert field.size_at(20.0, 20.0, 20.0) == pytest.approx(1.0)
    assert field.min_size() == pytest.approx(0.1)
    with pytest.raises(ValueError, match="no positive values"):
        field.set_samples([[0.0, 0.0, 0.0]], [0.0])


# --------------------
# Mesh io
# --------------------
def test_tetra_quality_regular():
    q = mesh_io.tetra_quality(REGULAR_POINTS, REGULAR_TET)
    assert q["n"] == 1
    assert q["inverted"] == 0
    assert q["aspect"]["max"] == pytest.approx(1.0)
    assert q["radius_ratio"]["min"] == pytest.approx(1.0)
    assert q["volume"]["max"] == pytest.approx(8.0 / 3.0)
    assert mesh_io.tetra_quality(REGULAR_POINTS, np.zeros((0, 4), dtype=int)) == {}

    flipped = mesh_io.tetra_metrics(REGULAR_POINTS, np.array([[0, 1, 2, 3]]))
    assert flipped["volume"][0] < 0.0


def test_metis_adjacency(tmp_path):
    points = np.vstack([REGULAR_POINTS, [[-1.5, -1.5, -1.5]]])
    tets = np.array([[0, 2, 1, 3], [1, 2, 3, 4]])
    assert mesh_io.tetra_adjacency(tets).tolist() == [[0, 1]]

    grid = pv.UnstructuredGrid({pv.CellType.TETRA: tets}, points)
    out = mesh_io.write_metis_adjacency(grid, str(tmp_path / "adj.txt"))
    assert open(out).read().split("\n")[:3] == ["2 1", "2", "1"]

    stats = mesh_io.mesh_stats(grid, None)
    assert stats["num_elements"] == 2
    assert stats["tetrahedra"]["n"] == 2


# --------------------
# Mesh generation
# --------------------
def _check_generated(mesher, model):
    assert mesher.has_volume_mesh()
    grid = mesher.get_unstructured_grid()
    assert grid.n_cells > 0
    surface = mesher.get_polydata()
    assert set(np.unique(surface.cell_data[FACE_ID_ARRAY]).tolist()) <= set(model.get_face_ids())
    stats = mesher.get_stats()
    assert stats["tetrahedra"]["n"] == len(mesh_io.tetra_cells(grid))
    assert abs(grid.volume - model.get_polydata().volume) / model.get_polydata().volume < 0.05


def test_generate_mesh_tetgen(tmp_path):
    pytest.importorskip("tetgen")
    model = _cylinder_model()
    mesher = meshing.create(Kernel.TETGEN)
    mesher.set_model(model)
    mesher.generate_mesh(TetGenOptions(global_edge_size=0.4, surface_mesh_flag=False))
    _check_generated(mesher, model)

    out = mesher.write(str(tmp_path / "cyl.vtu"))
    back = meshing.create(Kernel.TETGEN)
    back.load_mesh(out)
    assert back.get_unstructured_grid().n_cells == mesher.get_unstructured_grid().n_cells
    mesher.write_stats(str(tmp_path / "stats.json"))
    assert (tmp_path / "stats.json").exists()


def test_generate_mesh_gmsh():
    pytest.importorskip("gmsh")
    model = _cylinder_model()
    mesher = meshing.create(Kernel.GMSH)
    mesher.set_model(model)
    opts = meshing.GmshOptions(global_edge_size=0.5)
    opts.add_local_edge_size(_cap_ids(model)[0], 0.25)
    mesher.generate_mesh(opts)
    _check_generated(mesher, model)


def test_generate_surface_only_gmsh():
    pytest.importorskip("gmsh")
    model = _cylinder_model()
    mesher = meshing.create(Kernel.GMSH)
    mesher.set_model(model)
    mesher.generate_mesh(meshing.GmshOptions(global_edge_size=0.5, volume_mesh_flag=False))
    assert mesher.has_surface_mesh() and not mesher.has_volume_mesh()
    assert mesher.get_face_polydata(model.get_face_ids()[0]).n_cells > 0
    with pytest.raises(MeshingError, match="Error performing adapt"):
        mesher.adapt()


def test_adapt_replaces_size_function(caplog):
    pytest.importorskip("gmsh")
    model = _cylinder_model()
    mesher = meshing.create(Kernel.GMSH)
    mesher.set_model(model)
    mesher.add_size_function("uniform", np.ones(model.get_polydata().n_points))
    mesher.set_size_function_based_mesh(0.6, "uniform")
    mesher.generate_mesh(meshing.GmshOptions(global_edge_size=0.6))
    volume = mesher._volume
    volume.point_data["ErrorMetric"] = np.full(volume.n_points, 0.5)
    with caplog.at_level(logging.INFO, logger="sv.meshing.base"):
        mesher.adapt()
    assert "adapt() replaces the size function set from 'uniform'" in caplog.text
    assert mesher.has_volume_mesh()


# --------------------
# Groups
# --------------------
def test_project_models_dir(tmp_path):
    msh = tmp_path / "proj" / "Meshes" / "vessel.msh"
    assert project_models_dir(str(msh)) == str(tmp_path / "proj" / "Models")
    with pytest.raises(MeshingError, match="No 'Models' directory found"):
        project_models_dir(str(tmp_path / "vessel.msh"))


def test_group_round_trip_in_project(tmp_path):
    model = _cylinder_model()
    caps = _cap_ids(model)
    wall = [fid for fid in model.get_face_ids() if fid not in caps][0]
    model.set_face_attributes(wall, name="wall", type="wall")
    model.set_face_attributes(caps[0], name="inlet", type="cap")
    model.set_face_attributes(caps[1], name="outlet", type="cap")
    models = modeling.Group()
    models.set_model(model)
    models.write(str(tmp_path / "Models" / "vessel.mdl"))

    mesher = meshing.create(Kernel.TETGEN)
    mesher.set_model(model)
    mesher.set_walls([wall])
    opts = TetGenOptions(global_edge_size=0.5)
    opts.add_local_edge_size(caps[0], 0.2)
    mesher.set_meshing_options(opts)

    g = Group()
    g.set_model_name("vessel")
    g.set_mesh(mesher)
    out = g.write(str(tmp_path / "Meshes" / "vessel.msh"))
    assert g.get_commands(0)[0] == "setWalls"
    assert "localSize inlet 0.2" in g.get_commands(0)

    back = Group(out)
    assert back.get_mesh_type() == "TetGen"
    assert back.get_model_name() == "vessel"
    loaded, options = back.get_mesh(0)
    assert isinstance(loaded, meshing.TetGen)
    assert options.global_edge_size == 0.5
    assert options.local_edge_size == [{"face_id": caps[0], "edge_size": 0.2}]
    assert loaded.get_walls() == [wall]
    assert loaded.get_model_face_ids() == model.get_face_ids()
    with pytest.raises(MeshingError, match="mesh index must be between 0 and 0"):
        back.get_mesh(1)


def test_group_missing_model(tmp_path):
    g = Group()
    g.set_model_name("nothing")
    g.set_mesh(meshing.create("GMSH"), options=meshing.GmshOptions(global_edge_size=1.0))
    out = g.write(str(tmp_path / "Meshes" / "nothing.msh"))
    back = Group(out)
    assert back.get_mesh_type() == "Gmsh"
    with pytest.raises(MeshingError, match="Unable to read the model file"):
        back.get_mesh(0)
