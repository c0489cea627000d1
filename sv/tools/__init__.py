# -*- coding: utf-8 -*-
# sv/tools/__init__.py

"""
Modules:
--------
- utils:   argument validation and executable lookup.
- kernels: kernel-name → factory registries.
- xmlio:   XML helpers for the legacy project files.
- logs:    logging setup and kernel log files.
- gmsh_session: gmsh session handling and mesh ↔ PolyData conversion.
"""

__all__ = ["utils", "kernels", "xmlio", "logs", "gmsh_session"]
