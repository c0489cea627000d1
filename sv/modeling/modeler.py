# -*- coding: utf-8 -*-
# sv/modeling/modeler.py

"""
Project: sv
Date: 10/18/2026

Purpose:
--------
Kernel-bound factory for solid models: primitives, Booleans and file reading.

Main Tasks:
-----------
    1. Validate primitive arguments at the boundary (centers, radii, lengths > 0).
    2. Dispatch construction to the kernel's model class.
    3. Wrap kernel failures into ModelingError with the operation name.
"""

import logging
import os

import numpy as np

from ..errors import ModelingError
from ..tools.utils import check_point, check_positive
from .base import Model
from .kernel import model_class

logger = logging.getLogger(__name__)


class Modeler:
    """
    Solid modeler for one kernel.

    Parameters
    ----------
    kernel : str
        Kernel name ('OCCT' or 'POLYDATA'; licensed kernels raise).
    """

    def __init__(self, kernel):
        self.kernel = str(kernel).upper() if isinstance(kernel, str) else kernel
        self._cls = model_class(kernel, operation="Modeler")

    def _run(self, operation, what, build):
        try:
            model = build()
        except ModelingError:
            raise
        except (RuntimeError, ValueError) as e:
            raise ModelingError("Error creating {}.".format(what), operation=operation) from e
        logger.info("[Modeler] %s: created %s model.", operation, self.kernel)
        return model

    # --------------------
    # Primitives
    # --------------------
    def box(self, center, width=1.0, height=1.0, length=1.0) -> Model:
        op = "box"
        c = check_point(center, op, "box center", ModelingError)
        w = check_positive(width, op, "box width", ModelingError)
        h = check_positive(height, op, "box height", ModelingError)
        ln = check_positive(length, op, "box length", ModelingError)
        return self._run(op, "a 3D box solid model", lambda: self._cls.box(c, w, h, ln))

    def cylinder(self, radius, length, center, axis) -> Model:
        op = "cylinder"
        c = check_point(center, op, "cylinder center", ModelingError)
        a = check_point(axis, op, "cylinder axis", ModelingError)
        if np.linalg.norm(a) == 0.0:
            raise ModelingError("The cylinder axis argument has zero length.", operation=op)
        r = check_positive(radius, op, "radius", ModelingError)
        ln = check_positive(length, op, "length", ModelingError)
        return self._run(op, "a cylinder solid model", lambda: self._cls.cylinder(r, ln, c, a))

    def sphere(self, radius, center) -> Model:
        op = "sphere"
        c = check_point(center, op, "sphere center", ModelingError)
        r = check_positive(radius, op, "radius", ModelingError)
        return self._run(op, "a sphere solid model", lambda: self._cls.sphere(r, c))

    def ellipsoid(self, radii, center) -> Model:
        op = "ellipsoid"
        c = check_point(center, op, "ellipsoid center", ModelingError)
        rv = check_point(radii, op, "ellipsoid radius vector", ModelingError)
        if (rv <= 0.0).any():
            raise ModelingError("The ellipsoid radius vector argument has values <= 0.0.",
                                operation=op)
        return self._run(op, "an ellipsoid solid model", lambda: self._cls.ellipsoid(rv, c))

    # --------------------
    # Booleans
    # --------------------
    def _boolean(self, op, kind, first, second, first_label, second_label):
        if not isinstance(first, Model):
            raise ModelingError("The {} model argument is not a Model object.".format(first_label),
                                operation=op)
        if not isinstance(second, Model):
            raise ModelingError("The {} model argument is not a Model object.".format(second_label),
                                operation=op)
        for m in (first, second):
            if not isinstance(m, self._cls):
                raise ModelingError("The model kernel '{}' does not match the modeler kernel '{}'."
                                    .format(m.kernel, self.kernel), operation=op)
        return self._run(op, "a Boolean {}".format(kind), lambda: first.boolean(second, kind))

    def intersect(self, model1, model2) -> Model:
        return self._boolean("intersect", "intersection", model1, model2, "first", "second")

    def union(self, model1, model2) -> Model:
        return self._boolean("union", "union", model1, model2, "first", "second")

    def subtract(self, main, subtract) -> Model:
        return self._boolean("subtract", "difference", main, subtract, "main", "subtract")

    # --------------------
    # Files
    # --------------------
    def read(self, file_name: str) -> Model:
        op = "read"
        if not isinstance(file_name, str) or not os.path.isfile(file_name):
            raise ModelingError("Error reading a solid model from the file '{}'.".format(file_name),
                                operation=op)
        model = self._cls()
        try:
            model.read_native(file_name)
        except (ModelingError, OSError, RuntimeError, ValueError) as e:
            raise ModelingError("Error reading a solid model from the file '{}'.".format(file_name),
                                operation=op) from e
        logger.info("[Modeler] Read %s model from '%s'.", self.kernel, file_name)
        return model
