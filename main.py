# -*- coding: utf-8 -*-
# main.py

"""
End-to-end driver:
  1) Build a vessel centerline path (+ preview)
  2) Place circular segmentations along the path and save .pth/.ctgr groups
  3) Loft the segmentations into a capped PolyData solid and save the .mdl group
  4) Mesh the solid with TetGen (or Gmsh when tetgen is not installed)
  5) Mesh QA summary + quality histograms
  6) Solver/MPI preferences report
"""

import json
import logging
import os

import numpy as np

from sv import meshing, modeling, path, segmentation
from sv.geometry import LoftOptions, loft_solid
from sv.geometry.loft import INLET_ID, OUTLET_ID, WALL_ID
from sv.post import plot_contours, plot_path, plot_tetra_quality
from sv.solver import Preferences
from sv.tools.logs import setup_logging


if __name__ == "__main__":
    # ------------------------------------------------------------------
    # 0) Logging and project folders
    # ------------------------------------------------------------------
    setup_logging("INFO")
    log = logging.getLogger("sv")

    project = os.path.abspath("demo_project")
    for sub in ("Paths", "Segmentations", "Models", "Meshes", "plots"):
        os.makedirs(os.path.join(project, sub), exist_ok=True)

    # ------------------------------------------------------------------
    # 1) Centerline path
    # ------------------------------------------------------------------
    aorta = path.Path(method=path.CalculationMethod.TOTAL, calculation_number=60)
    for pt in ([0.0, 0.0, 0.0], [0.0, 0.0, 4.0], [1.0, 0.5, 8.0], [2.5, 0.5, 11.0]):
        aorta.add_control_point(pt)
    plot_path(aorta, name="aorta", show=False,
              save_path=os.path.join(project, "plots", "path.png"))

    paths = path.Group()
    paths.set_path(aorta)
    paths.write(os.path.join(project, "Paths", "aorta.pth"))

    # ------------------------------------------------------------------
    # 2) Segmentations along the path (radius tapers 1.2 → 0.8)
    # ------------------------------------------------------------------
    n_curve = aorta.get_num_curve_points()
    stations = np.linspace(0, n_curve - 1, 6).astype(int)
    radii = np.linspace(1.2, 0.8, len(stations))
    contours = [segmentation.Circle(radius=float(r), path_point=aorta.get_curve_frame(int(i)))
                for i, r in zip(stations, radii)]
    plot_contours(contours, name="aorta", show=False,
                  save_path=os.path.join(project, "plots", "contours.png"))

    segs = segmentation.Group()
    for i, c in enumerate(contours):
        segs.set_contour(i, c)
    segs.write(os.path.join(project, "Segmentations", "aorta.ctgr"))

    # ------------------------------------------------------------------
    # 3) Loft → solid model
    # ------------------------------------------------------------------
    options = LoftOptions()
    options.num_out_pts_along_length = 40
    surface = loft_solid([c.get_contour_points() for c in contours], options)
    model = modeling.PolyData(surface)
    model.set_face_names({WALL_ID: "wall_aorta", INLET_ID: "inflow", OUTLET_ID: "outflow"})
    for fid in (INLET_ID, OUTLET_ID):
        model.set_face_attributes(fid, type="cap")
    model.set_face_attributes(WALL_ID, type="wall")

    models = modeling.Group()
    models.set_model(model)
    models.write(os.path.join(project, "Models", "aorta.mdl"))
    log.info("Model faces: %s", model.get_face_names())

    # ------------------------------------------------------------------
    # 4) Mesh
    # ------------------------------------------------------------------
    if meshing.TetGen.available():
        mesher = meshing.create(meshing.Kernel.TETGEN)
        mesh_options = meshing.TetGenOptions(global_edge_size=0.3)
    else:
        log.warning("TetGen unavailable; meshing with Gmsh.")
        mesher = meshing.create(meshing.Kernel.GMSH)
        mesh_options = meshing.GmshOptions(global_edge_size=0.3)
    mesher.set_model(model)
    mesher.set_walls([WALL_ID])
    mesh_options.add_local_edge_size(INLET_ID, 0.2)
    mesher.set_sphere_refinement(0.15, 1.0, [1.0, 0.5, 8.0])
    mesher.generate_mesh(mesh_options)

    msh_path = os.path.join(project, "Meshes", "aorta.msh")
    meshes = meshing.Group()
    meshes.set_model_name("aorta")
    meshes.set_mesh(mesher, options=mesh_options)
    meshes.write(msh_path)
    log.info("Mesh group written to: %s", msh_path)

    # ------------------------------------------------------------------
    # 5) Mesh QA summary + quality plots
    # ------------------------------------------------------------------
    stats = mesher.get_stats()
    log.info("Mesh summary:\n%s", json.dumps(stats, indent=2))
    mesher.write_stats(os.path.join(project, "Meshes", "aorta.stats.json"))
    try:
        plot_tetra_quality(mesher, show=False,
                           save_path=os.path.join(project, "plots", "tetra_quality.png"))
    except (RuntimeError, ValueError) as e:
        log.warning("Skipping quality plots: %s", e)

    # ------------------------------------------------------------------
    # 6) Solver preferences
    # ------------------------------------------------------------------
    prefs = Preferences(os.path.join(project, "preferences.json"))
    prefs.save()
    for key, value in sorted(prefs.as_dict().items()):
        print(" - {:<20s} {}".format(key, value))
