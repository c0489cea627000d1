# -*- coding: utf-8 -*-
# sv/tools/kernels.py

"""
Project: sv
Date: 10/18/2026

Purpose:
--------
Kernel-name → factory registries shared by the segmentation, modeling and meshing
modules. Each kernel is defined once with its metadata (name, factory, availability),
giving a single source of truth for name lookup and error messages.

Main Tasks:
-----------
   - Bind kernel factories into frozen `KernelSpec` objects.
   - Collect them in a `KernelMap` that rejects duplicate names.
   - Resolve names case-insensitively and raise `KernelNameError` listing valid names.

Notes:
------
   - A kernel may be registered without a factory (placeholder names such as INVALID)
     or with `available=False` (licensed kernels); both are listed but cannot be built.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from ..errors import KernelNameError, valid_names_text


@dataclass(frozen=True)
class KernelSpec:
    name: str
    factory: Optional[Callable] = None   # signature: factory(**kwargs) -> kernel object
    available: bool = True
    description: str = ""


class KernelMap:
    """
    Ordered registry of kernels for one subsystem.

    Parameters
    ----------
    subsystem : str
        Label used in log/error messages (e.g. 'contour', 'solid', 'meshing').
    """

    def __init__(self, subsystem: str):
        self.subsystem = subsystem
        self._specs: Dict[str, KernelSpec] = {}

    def add(self, spec: KernelSpec) -> None:
        key = spec.name.upper()
        if key in self._specs:
            raise ValueError(f"Duplicate {self.subsystem} kernel name in registry: {spec.name}")
        self._specs[key] = spec

    def names(self, buildable_only: bool = False) -> List[str]:
        """Kernel names in sorted order (optionally only those with a factory)."""
        out = []
        for key in sorted(self._specs):
            spec = self._specs[key]
            if buildable_only and spec.factory is None:
                continue
            out.append(spec.name)
        return out

    def valid_names(self) -> str:
        return valid_names_text(self.names(buildable_only=True))

    def get(self, name, operation: str = "kernel") -> KernelSpec:
        """
        Look up a kernel by name.

        Raises
        ------
        KernelNameError
            "Unknown kernel name 'X'. Valid names are: A, B or C."
        """
        if not isinstance(name, str):
            raise KernelNameError(
                f"The kernel argument is not a string. Valid names are: {self.valid_names()}.",
                operation=operation)
        spec = self._specs.get(name.upper())
        if spec is None or spec.factory is None:
            raise KernelNameError(
                f"Unknown kernel name '{name}'. Valid names are: {self.valid_names()}.",
                operation=operation)
        return spec

    def create(self, name, operation: str = "create", **kwargs):
        """Build a kernel object from its registered factory."""
        return self.get(name, operation=operation).factory(**kwargs)

    def __contains__(self, name) -> bool:
        return isinstance(name, str) and name.upper() in self._specs
