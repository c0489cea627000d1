# -*- coding: utf-8 -*-
# sv/meshing/base.py

"""
Project: sv
Date: 10/18/2026

Purpose:
--------
Abstract mesher shared by the meshing kernels. Holds the solid model being meshed,
the meshing options, refinement requests and the resulting surface/volume meshes;
kernels only implement the generation step.

Abstract Classes:
-----------------
- Mesher: model loading, refinements, mesh queries and output for every kernel.

Notes:
------
- Meshes are pyvista objects: the surface is PolyData with a ModelFaceID cell array,
  the volume an UnstructuredGrid of linear tetrahedra.
- Refinements (spheres, cylinders, size functions, boundary layers) are stored on the
  mesher and folded into one SizeField when a mesh is generated.
- Boundary layers are emulated by grading sizes towards the wall faces; prismatic
  layers are not inserted.
"""

import logging
import os
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import pyvista as pv

from ..errors import MeshingError, SvError
from ..modeling.base import Model
from ..modeling.kernel import MODEL_TYPES, SOLID_KERNELS, model_class
from ..modeling.polydata import PolyDataModel, feature_faces
from ..tools.gmsh_session import FACE_ID_ARRAY
from ..tools.logs import attach_file_log, detach_file_log
from ..tools.utils import check_point, check_positive
from . import io as mesh_io
from .sizing import SizeField

logger = logging.getLogger(__name__)

MESHING_LOGGER = "sv.meshing"

# Extensions readable by the PolyData kernel besides its native .vtp.
_SURFACE_EXTENSIONS = ("vtp", "vtk", "stl", "ply", "obj")


class Mesher(ABC):
    """
    Base class of the meshing kernels.

    Subclasses set `kernel` and `options_class` and implement `_generate`.
    """

    kernel = ""
    options_class = None  # type: Optional[type]

    def __init__(self):
        self._model = None          # type: Optional[Model]
        self._solid_kernel = None   # type: Optional[str]
        self._options = None
        self._surface = None        # type: Optional[pv.PolyData]
        self._volume = None         # type: Optional[pv.UnstructuredGrid]
        self._walls = []            # type: List[int]
        self._spheres = []          # type: List[Dict[str, Any]]
        self._cylinders = []        # type: List[Dict[str, Any]]
        self._size_function = None  # type: Optional[Tuple[float, str]]
        self._boundary_layer = None  # type: Optional[Dict[str, Any]]
        self._point_functions = {}  # type: Dict[str, np.ndarray]

    @classmethod
    def available(cls) -> bool:
        return True

    # --------------------
    # Generation hook
    # --------------------
    @abstractmethod
    def _generate(self, solid: pv.PolyData, size_field: SizeField
                  ) -> Tuple[pv.PolyData, Optional[pv.UnstructuredGrid]]:
        """
        Mesh the model surface.

        Parameters
        ----------
        solid : pv.PolyData
            Triangulated model surface with ModelFaceID.
        size_field : SizeField
            Target edge sizes assembled from the options and refinements.

        Returns
        -------
        (pv.PolyData, pv.UnstructuredGrid or None)
            Surface mesh and, when volume meshing is enabled, the volume mesh.
        """

    def _global_edge_size(self, solid: pv.PolyData) -> float:
        return float(self._options.global_edge_size)

    # --------------------
    # Model
    # --------------------
    def set_solid_modeler_kernel(self, kernel) -> None:
        op = "set_solid_modeler_kernel"
        spec = SOLID_KERNELS.get(kernel, operation=op)
        model_class(spec.name, operation=op)
        self._solid_kernel = spec.name

    def get_solid_modeler_kernel(self) -> Optional[str]:
        return self._solid_kernel

    def _model_class_for_file(self, file_name: str):
        if self._solid_kernel is not None:
            return model_class(self._solid_kernel, operation="load_model")
        ext = os.path.splitext(file_name)[1].lstrip(".").lower()
        if ext in _SURFACE_EXTENSIONS:
            return PolyDataModel
        for cls in MODEL_TYPES.values():
            if cls.native_extension == ext and cls.available():
                return cls
        raise MeshingError("The solid modeler kernel is not set and the file extension '{}' is "
                           "not recognized.".format(ext), operation="load_model")

    def load_model(self, file_name: str) -> None:
        """Read the solid model to mesh (kernel from set_solid_modeler_kernel or extension)."""
        op = "load_model"
        if not isinstance(file_name, str) or not os.path.isfile(file_name):
            raise MeshingError("Error loading solid model from the file '{}'.".format(file_name),
                               operation=op)
        cls = self._model_class_for_file(file_name)
        model = cls()
        try:
            model.read_native(file_name)
        except (SvError, OSError, RuntimeError, ValueError) as e:
            raise MeshingError("Error loading solid model from the file '{}'.".format(file_name),
                               operation=op) from e
        self._set_model(model)
        logger.info("[Mesher] Loaded %s model from '%s' (%d faces).",
                    model.kernel, file_name, len(model.get_face_ids()))

    def set_model(self, model: Model) -> None:
        if not isinstance(model, Model):
            raise MeshingError("The model argument is not a solid Model object.",
                               operation="set_model")
        self._set_model(model)

    def _set_model(self, model: Model) -> None:
        self._model = model
        self._solid_kernel = model.kernel
        self._walls = []
        self._point_functions = {}
        self._size_function = None
        self.new_mesh()

    def get_model(self) -> Optional[Model]:
        return self._model

    def set_vtk_polydata(self, polydata: pv.PolyData) -> None:
        """Use a triangulated surface (PolyData) as the model to mesh."""
        op = "set_vtk_polydata"
        if not isinstance(polydata, pv.PolyData) or polydata.n_cells == 0:
            raise MeshingError("The polydata argument is not a non-empty vtkPolyData object.",
                               operation=op)
        self._set_model(PolyDataModel(polydata))

    def _require_model(self, operation: str) -> Model:
        if self._model is None:
            raise MeshingError("A solid model has not been loaded for the mesher.",
                               operation=operation)
        return self._model

    def get_solid(self) -> pv.PolyData:
        """Triangulated model surface with face ids."""
        model = self._require_model("get_solid")
        try:
            return model.get_polydata()
        except (SvError, RuntimeError, ValueError) as e:
            raise MeshingError("Could not get polydata for the mesh solid model.",
                               operation="get_solid") from e

    def get_model_face_ids(self) -> List[int]:
        return self._require_model("get_model_face_ids").get_face_ids()

    def get_model_face_info(self) -> str:
        """One line per model face: id, name and type."""
        model = self._require_model("get_model_face_info")
        names = model.get_face_names()
        lines = []
        for fid in model.get_face_ids():
            attrs = model.get_face_attributes(fid)
            lines.append("{} {} {}".format(fid, names.get(fid, ""), attrs.get("type", "")).rstrip())
        return "\n".join(lines)

    def set_walls(self, face_ids) -> None:
        op = "set_walls"
        model = self._require_model(op)
        try:
            ids = [int(f) for f in face_ids]
        except (TypeError, ValueError):
            raise MeshingError("Error setting walls.", operation=op)
        valid = set(model.get_face_ids())
        bad = [f for f in ids if f not in valid]
        if bad:
            raise MeshingError("Error setting walls.", context={"invalid_face_ids": bad}, operation=op)
        self._walls = ids

    def get_walls(self) -> List[int]:
        return list(self._walls)

    # --------------------
    # Options and refinements
    # --------------------
    def set_meshing_options(self, options) -> None:
        op = "set_meshing_options"
        if not isinstance(options, self.options_class):
            raise MeshingError("The options argument is not a {} object."
                               .format(self.options_class.__name__), operation=op)
        self._options = options

    def get_meshing_options(self):
        return self._options

    def create_options(self, *args, **kwargs):
        return self.options_class(*args, **kwargs)

    def set_sphere_refinement(self, edge_size, radius, center) -> None:
        op = "set_sphere_refinement"
        c = check_point(center, op, "sphere center", MeshingError)
        size = check_positive(edge_size, op, "edge size", MeshingError)
        r = check_positive(radius, op, "radius", MeshingError)
        self._spheres.append({"edge_size": size, "radius": r, "center": c.tolist()})

    def set_cylinder_refinement(self, edge_size, radius, length, center, normal) -> None:
        op = "set_cylinder_refinement"
        c = check_point(center, op, "cylinder center", MeshingError)
        n = check_point(normal, op, "normal", MeshingError)
        if np.linalg.norm(n) == 0.0:
            raise MeshingError("The normal argument has zero length.", operation=op)
        size = check_positive(edge_size, op, "edge size", MeshingError)
        r = check_positive(radius, op, "radius", MeshingError)
        ln = check_positive(length, op, "length", MeshingError)
        self._cylinders.append({"edge_size": size, "radius": r, "length": ln,
                                "center": c.tolist(), "normal": n.tolist()})

    def set_size_function_based_mesh(self, edge_size, function_name: str) -> None:
        """
        Size the mesh by `edge_size` times the named point array of the model surface.
        """
        op = "set_size_function_based_mesh"
        size = check_positive(edge_size, op, "edge size", MeshingError)
        if self._size_function_values(function_name) is None:
            raise MeshingError("Error setting size function. size={}  function={}."
                               .format(size, function_name), operation=op)
        self._size_function = (size, function_name)

    def add_size_function(self, name: str, values) -> None:
        """Attach a named per-point array (model surface points) usable as a size function."""
        values = np.asarray(values, dtype=float).ravel()
        if len(values) != self.get_solid().n_points:
            raise MeshingError("The size function '{}' does not have one value per model "
                               "surface point.".format(name), operation="add_size_function")
        self._point_functions[name] = values

    def _size_function_values(self, name: str) -> Optional[np.ndarray]:
        if name in self._point_functions:
            return self._point_functions[name]
        solid = self.get_solid()
        if name in solid.point_data:
            return np.asarray(solid.point_data[name], dtype=float)
        return None

    def set_boundary_layer(self, layer_type, face_id, side, num_layers, heights) -> None:
        """
        Request a boundary layer on a wall face (0 selects every wall).

        Parameters
        ----------
        layer_type, side : int
            Kept for project files; only their validity is checked.
        face_id : int
            Model face id or 0 for all faces set by set_walls.
        num_layers : int
            Number of layers (> 0).
        heights : list of float
            Layer heights, first layer first; one value is repeated for every layer.
        """
        op = "set_boundary_layer"
        try:
            layer_type, face_id, side, num_layers = (int(layer_type), int(face_id), int(side),
                                                     int(num_layers))
            heights = [float(h) for h in heights]
        except (TypeError, ValueError):
            raise MeshingError("Error setting boundary layer.", operation=op)
        if num_layers <= 0 or not heights or min(heights) <= 0.0:
            raise MeshingError("Error setting boundary layer.", operation=op)
        if face_id != 0 and face_id not in self.get_model_face_ids():
            raise MeshingError("Error setting boundary layer.", context={"face_id": face_id},
                               operation=op)
        if len(heights) == 1:
            heights = heights * num_layers
        self._boundary_layer = {"type": layer_type, "face_id": face_id, "side": side,
                                "num_layers": num_layers, "heights": heights[:num_layers]}

    def _face_points(self, solid: pv.PolyData, face_ids) -> np.ndarray:
        ids = np.asarray(solid.cell_data[FACE_ID_ARRAY])
        sel = solid.extract_cells(np.flatnonzero(np.isin(ids, list(face_ids))))
        return np.asarray(sel.points)

    def _build_size_field(self, solid: pv.PolyData) -> SizeField:
        field = SizeField(self._global_edge_size(solid))
        for entry in getattr(self._options, "local_edge_size", None) or []:
            pts = self._face_points(solid, [entry["face_id"]])
            if len(pts) == 0:
                raise MeshingError("The local edge size face ID {} is not a face of the model."
                                   .format(entry["face_id"]), operation="generate_mesh")
            field.add_surface_size(pts, entry["edge_size"])
        for s in self._spheres:
            field.add_sphere(s["edge_size"], s["radius"], s["center"])
        for c in self._cylinders:
            field.add_cylinder(c["edge_size"], c["radius"], c["length"], c["center"], c["normal"])
        if self._size_function is not None:
            size, name = self._size_function
            field.set_samples(solid.points, size * self._size_function_values(name))
        if self._boundary_layer is not None:
            bl = self._boundary_layer
            walls = [bl["face_id"]] if bl["face_id"] else (self._walls or self.get_model_face_ids())
            logger.warning("[Mesher] Boundary layers are approximated by grading the edge size "
                           "towards faces %s.", walls)
            field.add_wall_grading(self._face_points(solid, walls), bl["heights"][0],
                                   float(sum(bl["heights"])))
        return field

    # --------------------
    # Generation
    # --------------------
    def new_mesh(self) -> None:
        """Discard the current mesh."""
        self._surface = None
        self._volume = None

    def generate_mesh(self, options=None) -> None:
        op = "generate_mesh"
        if options is not None:
            self.set_meshing_options(options)
        if self._options is None:
            raise MeshingError("The meshing options have not been set.", operation=op)
        self._options.validate(op)
        solid = self.get_solid()
        field = self._build_size_field(solid)
        try:
            surface, volume = self._generate(solid, field)
        except (RuntimeError, ValueError) as e:
            raise MeshingError("Error generating a mesh.", context={"reason": str(e)},
                               operation=op) from e
        self._surface, self._volume = surface, volume
        logger.info("[%s] Generated %d surface triangles and %d volume elements.", self.kernel,
                    surface.n_cells, 0 if volume is None else volume.n_cells)

    def adapt(self, metric: str = "ErrorMetric", min_size: Optional[float] = None,
              max_size: Optional[float] = None) -> None:
        """
        Regenerate the mesh with target sizes from a point array of the current volume mesh.
        """
        op = "adapt"
        if self._volume is None or metric not in self._volume.point_data:
            raise MeshingError("Error performing adapt mesh operation.",
                               context={"metric": metric}, operation=op)
        sizes = np.asarray(self._volume.point_data[metric], dtype=float)
        if min_size is not None or max_size is not None:
            sizes = np.clip(sizes, min_size, max_size)
        solid = self.get_solid()
        field = self._build_size_field(solid)
        if self._size_function is not None:
            logger.info("[Mesher] adapt() replaces the size function set from '%s' "
                        "with the '%s' sizes.", self._size_function[1], metric)
        try:
            field.set_samples(self._volume.points, sizes)
            surface, volume = self._generate(solid, field)
        except (RuntimeError, ValueError) as e:
            raise MeshingError("Error performing adapt mesh operation.",
                               context={"reason": str(e)}, operation=op) from e
        self._surface, self._volume = surface, volume
        logger.info("[%s] Adapted mesh: %d volume elements.", self.kernel,
                    0 if volume is None else volume.n_cells)

    # --------------------
    # Mesh queries
    # --------------------
    def get_polydata(self) -> pv.PolyData:
        """Surface mesh with ModelFaceID."""
        if self._surface is None:
            raise MeshingError("Could not get polydata for the mesh.", operation="get_polydata")
        return self._surface

    get_surface = get_polydata

    def has_surface_mesh(self) -> bool:
        return self._surface is not None

    def has_volume_mesh(self) -> bool:
        return self._volume is not None

    def get_unstructured_grid(self) -> pv.UnstructuredGrid:
        if self._volume is None:
            raise MeshingError("Could not get the unstructured grid for the mesh.",
                               operation="get_unstructured_grid")
        return self._volume

    def get_face_polydata(self, face_id) -> pv.PolyData:
        op = "get_face_polydata"
        surface = self._surface
        if surface is None or FACE_ID_ARRAY not in surface.cell_data:
            raise MeshingError("Could not get mesh polydata for the face '{}'.".format(face_id),
                               operation=op)
        ids = np.asarray(surface.cell_data[FACE_ID_ARRAY])
        cells = np.flatnonzero(ids == face_id)
        if len(cells) == 0:
            raise MeshingError("Could not get mesh polydata for the face '{}'.".format(face_id),
                               operation=op)
        return surface.extract_cells(cells).extract_surface()

    def get_boundary_faces(self, angle) -> List[int]:
        """Relabel the surface mesh faces by feature angle; returns the new face ids."""
        op = "get_boundary_faces"
        try:
            a = float(angle)
        except (TypeError, ValueError):
            raise MeshingError("Error getting boundary faces for angle '{}'.".format(angle),
                               operation=op)
        if self._surface is None or a < 0.0:
            raise MeshingError("Error getting boundary faces for angle '{}'.".format(angle),
                               operation=op)
        self._surface.cell_data[FACE_ID_ARRAY] = feature_faces(self._surface, a)
        return sorted(int(i) for i in np.unique(self._surface.cell_data[FACE_ID_ARRAY]))

    # --------------------
    # Files
    # --------------------
    def load_mesh(self, volume_file: str, surface_file: Optional[str] = None) -> None:
        op = "load_mesh"
        for name in (volume_file, surface_file):
            if name is not None and not os.path.isfile(name):
                raise MeshingError("Error reading in a mesh from the file '{}'.".format(name),
                                   operation=op)
        try:
            volume = mesh_io.read_volume(volume_file)
            if surface_file is not None:
                surface = mesh_io.read_surface(surface_file)
            else:
                surface = volume.extract_surface()
        except (OSError, RuntimeError, ValueError) as e:
            raise MeshingError("Error reading in a mesh from the file '{}'.".format(volume_file),
                               operation=op) from e
        self._volume, self._surface = volume, surface
        logger.info("[Mesher] Loaded mesh from '%s': %d elements.", volume_file, volume.n_cells)

    def write(self, file_name: str) -> str:
        """Write the volume mesh (or the surface mesh for `.vtp`)."""
        op = "write"
        try:
            out = mesh_io.write_mesh(self._volume, self._surface, file_name)
        except (OSError, RuntimeError, ValueError, KeyError) as e:
            raise MeshingError("Error writing the mesh to the file '{}'.".format(file_name),
                               operation=op) from e
        logger.info("[Mesher] Wrote mesh to '%s'.", out)
        return out

    def write_stats(self, file_name: str) -> str:
        op = "write_stats"
        if self._volume is None and self._surface is None:
            raise MeshingError("Error writing mesh statistics to the file '{}'.".format(file_name),
                               operation=op)
        try:
            return mesh_io.write_stats(mesh_io.mesh_stats(self._volume, self._surface), file_name)
        except OSError as e:
            raise MeshingError("Error writing mesh statistics to the file '{}'.".format(file_name),
                               operation=op) from e

    def get_stats(self) -> Dict[str, Any]:
        return mesh_io.mesh_stats(self._volume, self._surface)

    def write_metis_adjacency(self, file_name: str) -> str:
        op = "write_metis_adjacency"
        if self._volume is None:
            raise MeshingError("Error writing the mesh adjacency to the file '{}'."
                               .format(file_name), operation=op)
        try:
            return mesh_io.write_metis_adjacency(self._volume, file_name)
        except OSError as e:
            raise MeshingError("Error writing the mesh adjacency to the file '{}'."
                               .format(file_name), operation=op) from e

    # --------------------
    # Logging
    # --------------------
    def logging_on(self, file_name: str) -> None:
        logging_on(file_name)

    def logging_off(self) -> None:
        logging_off()

    def __repr__(self):
        return "<{} kernel={} model={}>".format(type(self).__name__, self.kernel,
                                                None if self._model is None else self._model.kernel)


def logging_on(file_name: str) -> None:
    """Send the meshing log to `file_name`."""
    op = "logging_on"
    if not isinstance(file_name, str) or not file_name:
        raise MeshingError("Unable to open the log file '{}'.".format(file_name), operation=op)
    try:
        attach_file_log(MESHING_LOGGER, file_name)
    except OSError as e:
        raise MeshingError("Unable to open the log file '{}'.".format(file_name),
                           operation=op) from e


def logging_off() -> Optional[str]:
    """Stop writing the meshing log file; returns its name (None when logging was off)."""
    return detach_file_log(MESHING_LOGGER)
