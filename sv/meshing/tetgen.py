# -*- coding: utf-8 -*-
# sv/meshing/tetgen.py

"""
Project: sv
Date: 10/18/2026

Purpose:
--------
TetGen meshing kernel: optional Gmsh surface remeshing followed by constrained
Delaunay tetrahedralization with the `tetgen` package, plus radius-based sizing from
vessel centerlines.

Main Tasks:
-----------
    1. Remesh the model surface when surface_mesh_flag is set.
    2. Translate TetGenOptions into tetgen switches (quality, bisection, optimization).
    3. Apply local refinements through a background mesh carrying target_size.
    4. Restore model face ids on the boundary of the volume mesh.
    5. TetGenRadiusBased: centerlines → DistanceToCenterlines → size function.

Notes:
------
- The global edge size bounds the tetrahedron volume by that of a regular tetrahedron.
- AddHole / AddSubDomain and MMG remeshing are not available through the
  `tetgen` package; requesting them logs a warning.
"""

import logging
import math
import os
from typing import Optional, Tuple

import numpy as np
import pyvista as pv

try:
    import tetgen  # type: ignore
except Exception as _e:  # pragma: no cover
    tetgen = None
    _TETGEN_IMPORT_ERROR = _e

from ..errors import MeshingError
from ..tools.gmsh_session import FACE_ID_ARRAY
from . import centerlines as cl
from .base import Mesher
from .remesh import remesh, transfer_face_ids
from .sizing import SizeField
from .tetgen_options import TetGenOptions

logger = logging.getLogger(__name__)

# Options recorded for project files but not supported by the `tetgen` package.
_UNSUPPORTED = ("add_hole", "add_subdomain", "use_mmg", "hausd",
                "start_with_volume", "new_region_boundary_layer", "boundary_layer_direction")


def _require_tetgen():
    if tetgen is None:
        raise RuntimeError("The 'tetgen' Python module is required. Original import error: {}"
                           .format(_TETGEN_IMPORT_ERROR))
    return tetgen


def regular_tet_volume(edge: float) -> float:
    return edge ** 3 / (6.0 * math.sqrt(2.0))


def tetgen_switches(options: TetGenOptions, max_volume: Optional[float] = None) -> dict:
    """Keyword switches of tetgen.TetGen.tetrahedralize for the given options."""
    kw = {"plc": True, "quality": True, "order": 1,
          "minratio": float(options.quality_ratio if options.quality_ratio is not None else 2.0),
          "nobisect": bool(options.no_bisect)}
    if max_volume is not None:
        kw["maxvolume"] = float(max_volume)
    if options.optimization is not None:
        kw["opt_max_flip_level"] = int(options.optimization)
    if options.epsilon is not None:
        kw["epsilon"] = float(options.epsilon)
    if options.coarsen_percent is not None:
        kw["coarsen"] = True
        kw["coarsen_percent"] = float(options.coarsen_percent)
    if options.no_merge:
        kw["nomergefacet"] = True
        kw["nomergevertex"] = True
    if options.check:
        kw["docheck"] = True
    if options.diagnose:
        kw["diagnose"] = True
    if options.quiet:
        kw["quiet"] = True
    if options.verbose:
        kw["verbose"] = 1
    return kw


class TetGenMesher(Mesher):
    """TetGen mesher (kernel name TETGEN)."""

    kernel = "TETGEN"
    options_class = TetGenOptions

    @classmethod
    def available(cls) -> bool:
        return tetgen is not None

    def _generate(self, solid: pv.PolyData, size_field: SizeField
                  ) -> Tuple[pv.PolyData, Optional[pv.UnstructuredGrid]]:
        opts = self._options
        for name in _UNSUPPORTED:
            if getattr(opts, name) not in (None, False):
                logger.warning("[TetGen] Option '%s' is not supported and is ignored.", name)

        surface = solid.triangulate().clean()
        if opts.surface_mesh_flag:
            surface, _ = remesh(surface, size_field, volume=False)
        if not opts.volume_mesh_flag:
            return surface, None

        grid = self._tetrahedralize(surface, size_field)
        boundary = grid.extract_surface(pass_pointid=False, pass_cellid=False)
        boundary.cell_data[FACE_ID_ARRAY] = transfer_face_ids(surface, boundary)
        return boundary, grid

    def _tetrahedralize(self, surface: pv.PolyData, size_field: SizeField) -> pv.UnstructuredGrid:
        tg = _require_tetgen()
        faces = surface.faces.reshape(-1, 4)[:, 1:]
        switches = tetgen_switches(self._options, regular_tet_volume(size_field.global_size))

        mesh = tg.TetGen(np.asarray(surface.points), faces)
        if size_field.has_refinements():
            # Coarse pass to carry the size field, then a sized pass.
            mesh.tetrahedralize(plc=True, quality=False, order=1, quiet=True)
            background = mesh.grid.copy()
            background.point_data["target_size"] = size_field(background.points)
            mesh = tg.TetGen(np.asarray(surface.points), faces)
            mesh.tetrahedralize(bgmesh=background, **switches)
        else:
            mesh.tetrahedralize(**switches)
        grid = mesh.grid
        if grid is None or grid.n_cells == 0:
            raise RuntimeError("TetGen produced no tetrahedra.")
        logger.info("[TetGen] %d nodes, %d tetrahedra.", grid.n_points, grid.n_cells)
        return grid


class TetGenRadiusBased:
    """
    Radius-based sizing for a TetGen mesher.

    The edge size near a point of the model surface is `edge_size` times its distance
    to the vessel centerlines.

    Parameters
    ----------
    mesher : TetGenMesher
        Mesher whose model is sized; the size function is installed on it.
    """

    SIZE_FUNCTION = cl.DISTANCE_ARRAY

    def __init__(self, mesher: TetGenMesher):
        if not isinstance(mesher, TetGenMesher):
            raise MeshingError("The mesher argument is not a TetGen mesher.",
                               operation="TetGenRadiusBased")
        self.mesher = mesher
        self.centerlines = None  # type: Optional[pv.PolyData]

    def _solid(self, operation: str, what: str) -> pv.PolyData:
        if self.mesher.get_model() is None:
            raise MeshingError("A solid model must be defined for the mesh to {}.".format(what),
                               operation=operation)
        return self.mesher.get_solid()

    def _install_distance(self, operation: str) -> None:
        solid = self.mesher.get_solid()
        try:
            d = cl.distance_to_centerlines(solid, self.centerlines)
        except ValueError as e:
            raise MeshingError("Unable to compute the distance to centerlines.",
                               operation=operation) from e
        self.mesher.add_size_function(self.SIZE_FUNCTION, d)

    def compute_centerlines(self) -> pv.PolyData:
        op = "compute_centerlines"
        solid = self._solid(op, "compute centerlines")
        try:
            self.centerlines = cl.compute_centerlines(solid)
        except (RuntimeError, ValueError) as e:
            raise MeshingError("Unable to compute centerlines.", operation=op) from e
        self._install_distance(op)
        return self.centerlines

    def compute_size_function(self, edge_size) -> None:
        op = "compute_size_function"
        if self.centerlines is None:
            raise MeshingError("Centerlines have not been computed.", operation=op)
        try:
            self.mesher.set_size_function_based_mesh(edge_size, self.SIZE_FUNCTION)
        except MeshingError as e:
            raise MeshingError("Unable to compute the distance to centerlines size function.",
                               context={"reason": e.message}, operation=op) from e

    def load_centerlines(self, file_name: str) -> pv.PolyData:
        op = "load_centerlines"
        self._solid(op, "load centerlines")
        try:
            data = pv.read(file_name)
        except (OSError, ValueError, FileNotFoundError) as e:
            raise MeshingError("Unable to read the file named '{}'.".format(file_name),
                               operation=op) from e
        if not isinstance(data, pv.PolyData):
            raise MeshingError("Unable to read the file named '{}'.".format(file_name),
                               operation=op)
        self.centerlines = data
        logger.info("[TetGenRadiusBased] Number of centerline points: %d", data.n_points)
        self._install_distance(op)
        return data

    def set_centerlines(self, centerlines: pv.PolyData) -> None:
        op = "set_centerlines"
        self._solid(op, "set centerlines")
        if not isinstance(centerlines, pv.PolyData) or centerlines.n_points == 0:
            raise MeshingError("The centerlines argument is not a non-empty vtkPolyData object.",
                               operation=op)
        self.centerlines = centerlines
        self._install_distance(op)

    def get_centerlines(self) -> Optional[pv.PolyData]:
        return self.centerlines

    def write_centerlines(self, file_name: str) -> str:
        op = "write_centerlines"
        if self.centerlines is None:
            raise MeshingError("Centerlines have not been computed.", operation=op)
        try:
            self.centerlines.save(file_name)
        except (OSError, ValueError) as e:
            raise MeshingError("Unable to write to the file named '{}'.".format(file_name),
                               operation=op) from e
        if not os.path.isfile(file_name):
            raise MeshingError("Unable to write to the file named '{}'.".format(file_name),
                               operation=op)
        return file_name
