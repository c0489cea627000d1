# -*- coding: utf-8 -*-
# sv/geometry/loft_options.py

"""
Project: sv
Date: 10/18/2026

Purpose
-------
Parameter containers for lofting a surface through a sequence of profiles:
spline lofting (`LoftOptions`) and NURBS lofting (`LoftNurbsOptions`).

Notes
-----
- Defaults follow the values written by the segmentation tool into .ctgr files.
- `validate()` is called by the loft functions; it raises GeometryError naming the
  offending field.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict

from ..errors import GeometryError

KNOT_SPAN_TYPES = ("equal", "avg", "endderiv")
PARAMETRIC_SPAN_TYPES = ("equal", "chord", "centripetal")


@dataclass
class LoftOptions:
    """
    Spline lofting parameters.

    Attributes
    ----------
    num_out_pts_in_segs : int
        Points per profile after resampling.
    num_out_pts_along_length : int
        Profiles in the output surface along the vessel.
    num_linear_pts_along_length : int
        Dense samples used when `use_linear_sample_along_length` is set.
    num_modes : int
        Fourier modes kept when `use_fft` is set.
    use_fft : bool
        Smooth the longitudinal curves with a Fourier filter.
    use_linear_sample_along_length : bool
        Resample longitudinal curves evenly in arc length.
    spline_type : int
        0 = Kochanek spline (bias/tension/continuity), 1 = cardinal spline.
    bias, tension, continuity : float
        Kochanek parameters in [-1, 1].
    """
    num_out_pts_in_segs: int = 30
    num_out_pts_along_length: int = 60
    num_linear_pts_along_length: int = 600
    num_modes: int = 20
    use_fft: bool = False
    use_linear_sample_along_length: bool = True
    spline_type: int = 0
    bias: float = 0.0
    tension: float = 0.0
    continuity: float = 0.0

    def validate(self, operation: str = "loft") -> None:
        for name in ("num_out_pts_in_segs", "num_out_pts_along_length",
                     "num_linear_pts_along_length", "num_modes"):
            if int(getattr(self, name)) < 1:
                raise GeometryError(f"The '{name}' option must be >= 1.", operation=operation)
        if self.num_out_pts_in_segs < 3:
            raise GeometryError("The 'num_out_pts_in_segs' option must be >= 3.", operation=operation)
        if self.num_out_pts_along_length < 2:
            raise GeometryError("The 'num_out_pts_along_length' option must be >= 2.",
                                operation=operation)
        if self.spline_type not in (0, 1):
            raise GeometryError("The 'spline_type' option must be 0 or 1.", operation=operation)
        for name in ("bias", "tension", "continuity"):
            v = float(getattr(self, name))
            if v < -1.0 or v > 1.0:
                raise GeometryError(f"The '{name}' option must be in [-1, 1].", operation=operation)

    def get_values(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class LoftNurbsOptions:
    """
    NURBS lofting parameters.

    Attributes
    ----------
    u_degree, v_degree : int
        Surface degrees around the profile (u) and along the vessel (v).
    u_spacing, v_spacing : float
        Parametric sampling spacing used when tessellating the surface.
    u_knot_span_type, v_knot_span_type : str
        'equal', 'avg' or 'endderiv'.
    u_parametric_span_type, v_parametric_span_type : str
        'equal', 'chord' or 'centripetal'.
    """
    u_degree: int = 2
    v_degree: int = 2
    u_spacing: float = 0.01
    v_spacing: float = 0.01
    u_knot_span_type: str = "equal"
    v_knot_span_type: str = "equal"
    u_parametric_span_type: str = "equal"
    v_parametric_span_type: str = "equal"

    def validate(self, operation: str = "loft_solid_using_nurbs") -> None:
        for name in ("u_degree", "v_degree"):
            if int(getattr(self, name)) < 1:
                raise GeometryError(f"The '{name}' option must be >= 1.", operation=operation)
        for name in ("u_spacing", "v_spacing"):
            v = float(getattr(self, name))
            if v <= 0.0 or v > 1.0:
                raise GeometryError(f"The '{name}' option must be in (0, 1].", operation=operation)
        for name in ("u_knot_span_type", "v_knot_span_type"):
            if getattr(self, name) not in KNOT_SPAN_TYPES:
                raise GeometryError(
                    f"The '{name}' option must be one of: {', '.join(KNOT_SPAN_TYPES)}.",
                    operation=operation)
        for name in ("u_parametric_span_type", "v_parametric_span_type"):
            if getattr(self, name) not in PARAMETRIC_SPAN_TYPES:
                raise GeometryError(
                    f"The '{name}' option must be one of: {', '.join(PARAMETRIC_SPAN_TYPES)}.",
                    operation=operation)

    def get_values(self) -> Dict[str, Any]:
        return asdict(self)
