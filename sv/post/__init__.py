# -*- coding: utf-8 -*-
# sv/post/__init__.py

from .plot import plot_contours, plot_path, plot_tetra_quality

__all__ = ["plot_path", "plot_contours", "plot_tetra_quality"]
