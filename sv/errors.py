# -*- coding: utf-8 -*-
# sv/errors.py

"""
Project: sv
Date: 10/18/2026

Purpose
-------
Typed exceptions for the scripting layer. Every message is prefixed with the name of
the operation that failed (``"add_control_point() ..."``) and may carry a compact
context suffix for debugging.

Main Tasks
----------
    1. Define SvError(message, context, operation) rendering "op() message | k=v".
    2. Provide one subclass per subsystem (path, segmentation, modeling, meshing, ...).
    3. Supply the shared message helpers used by argument validation.

Notes
-----
- SvError derives from RuntimeError so scripts may catch the generic error channel.
- Context is optional; long values are truncated for readability.
"""

__all__ = [
    "SvError",
    "KernelNameError",
    "PathError",
    "SegmentationError",
    "ModelingError",
    "MeshingError",
    "GeometryError",
    "ProjectFileError",
    "PreferencesError",
    "valid_names_text",
]


def _format_context(ctx):
    """Return a compact ' | key1=val1, key2=val2' string or '' if no context."""
    if not ctx:
        return ""
    try:
        parts = []
        for k in sorted(ctx.keys()):
            sv = repr(ctx[k])
            if len(sv) > 120:
                sv = sv[:117] + "..."
            parts.append("{}={}".format(k, sv))
        return " | " + ", ".join(parts)
    except Exception:
        # Context should never break error rendering
        return ""


def valid_names_text(names):
    """
    Join names the way error messages list them: 'A, B or C'.

    Parameters
    ----------
    names : Iterable[str]

    Returns
    -------
    str
    """
    names = list(names)
    if not names:
        return ""
    if len(names) == 1:
        return names[0]
    return ", ".join(names[:-1]) + " or " + names[-1]


class SvError(RuntimeError):
    """
    Base class for all errors raised by the scripting layer.

    Parameters
    ----------
    message : str
        Human-readable error.
    context : dict, optional
        Extra fields appended in the string form (e.g., {"index": 4, "size": 3}).
    operation : str, optional
        Name of the failing operation; rendered as the ``"operation() "`` prefix.
    """
    def __init__(self, message, context=None, operation=None):
        self.operation = operation
        self.message = message
        self.context = dict(context) if context else None
        prefix = "{}() ".format(operation) if operation else ""
        super(SvError, self).__init__(prefix + message)

    def __str__(self):
        base = super(SvError, self).__str__()
        return base + _format_context(self.context)


class KernelNameError(SvError, ValueError):
    """Unknown kernel name passed to a kernel factory map."""


class PathError(SvError):
    """Invalid control points, indices, or calculation parameters of a path."""


class SegmentationError(SvError):
    """Contour construction or contour-group errors."""


class ModelingError(SvError):
    """Solid modeling primitives, booleans, faces and kernel availability."""


class MeshingError(SvError):
    """Mesher configuration, options, and mesh generation failures."""


class GeometryError(SvError):
    """Profile alignment, sampling and lofting errors."""


class ProjectFileError(SvError):
    """
    Reading or writing a legacy project file (.pth, .ctgr, .mdl, .msh) failed.
    The underlying I/O or parse error is chained as ``__cause__``.
    """


class PreferencesError(SvError):
    """Solver preference store errors (bad keys, unreadable store)."""
