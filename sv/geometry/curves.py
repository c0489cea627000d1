# -*- coding: utf-8 -*-
# sv/geometry/curves.py

"""
Project: sv
Date: 10/18/2026

Purpose:
--------
Numerical curve primitives shared by paths, contours and lofting.

Main Tasks:
-----------
    1. Arc-length parameterization and linear resampling of open/closed polylines.
    2. Fourier (low-pass FFT) smoothing of open and closed curves.
    3. Kochanek–Bartels (bias/tension/continuity) cubic Hermite splines.
    4. Parallel-transport frames along a sampled curve.

Notes:
------
- All functions take and return float64 arrays of shape (N, 3) (or (N, D) where noted).
- Closed curves are passed WITHOUT a duplicated end point.
"""

from typing import Tuple
import numpy as np


def arc_lengths(points: np.ndarray, closed: bool = False) -> np.ndarray:
    """
    Cumulative arc length at each vertex (starting at 0).

    For closed curves the returned array has N+1 entries, the last being the
    full perimeter (the closing segment included).
    """
    pts = np.asarray(points, dtype=np.float64)
    if closed and len(pts) > 0:
        pts = np.vstack([pts, pts[:1]])
    if len(pts) == 0:
        return np.zeros(0)
    seg = np.linalg.norm(np.diff(pts, axis=0), axis=1)
    return np.concatenate([[0.0], np.cumsum(seg)])


def resample_curve(points: np.ndarray, num_points: int, closed: bool = False) -> np.ndarray:
    """
    Linearly resample a polyline to `num_points` points evenly spaced in arc length.

    Parameters
    ----------
    points : np.ndarray
        (N, D) vertices.
    num_points : int
        Number of output points (>= 2 for open curves, >= 3 for closed ones).
    closed : bool
        If True, the closing segment is part of the curve and the output does not
        repeat the first point.

    Returns
    -------
    np.ndarray
        (num_points, D) resampled vertices.
    """
    pts = np.asarray(points, dtype=np.float64)
    if len(pts) < 2 or num_points < 1:
        return pts.copy()
    s = arc_lengths(pts, closed=closed)
    total = s[-1]
    if total <= 0.0:
        return np.repeat(pts[:1], num_points, axis=0)
    src = np.vstack([pts, pts[:1]]) if closed else pts
    if closed:
        targets = np.linspace(0.0, total, num_points, endpoint=False)
    else:
        targets = np.linspace(0.0, total, num_points)
    out = np.empty((num_points, pts.shape[1]))
    for d in range(pts.shape[1]):
        out[:, d] = np.interp(targets, s, src[:, d])
    return out


def smooth_curve(points: np.ndarray, closed: bool, num_modes: int, num_out: int) -> np.ndarray:
    """
    Fourier low-pass smoothing: keep the first `num_modes` modes and evaluate at
    `num_out` evenly spaced parameters.

    Open curves are mirrored into a periodic signal first so the ends are not pulled
    towards each other.

    Parameters
    ----------
    points : np.ndarray
        (N, D) curve samples (closed curves without duplicate end point).
    closed : bool
    num_modes : int
        Number of retained modes (>= 1; mode 0 is the mean).
    num_out : int
        Number of output points.

    Returns
    -------
    np.ndarray
        (num_out, D) smoothed curve.
    """
    pts = np.asarray(points, dtype=np.float64)
    n = len(pts)
    if num_modes < 1:
        raise ValueError("num_modes must be >= 1.")
    if n < 3 or num_out < 2:
        return pts.copy()

    if closed:
        signal = pts
        n_eval = num_out
    else:
        signal = np.vstack([pts, pts[-2:0:-1]])
        n_eval = 2 * (num_out - 1)

    m = len(signal)
    coeffs = np.fft.rfft(signal, axis=0)
    keep = min(num_modes, coeffs.shape[0])
    coeffs[keep:] = 0.0
    smoothed = np.fft.irfft(coeffs, n=n_eval, axis=0) * (float(n_eval) / m)

    if closed:
        return smoothed
    return smoothed[:num_out]


def kochanek_tangents(points: np.ndarray, bias: float = 0.0, tension: float = 0.0,
                      continuity: float = 0.0) -> Tuple[np.ndarray, np.ndarray]:
    """
    Incoming and outgoing Kochanek–Bartels tangents at every control point.

    End points use one-sided differences.
    """
    p = np.asarray(points, dtype=np.float64)
    n = len(p)
    t_in = np.zeros_like(p)
    t_out = np.zeros_like(p)
    if n < 2:
        return t_in, t_out
    d_prev = np.zeros_like(p)
    d_next = np.zeros_like(p)
    d_prev[1:] = p[1:] - p[:-1]
    d_next[:-1] = p[1:] - p[:-1]
    d_prev[0] = d_next[0]
    d_next[-1] = d_prev[-1]

    a = 1.0 - tension
    t_in[:] = (a * (1 + bias) * (1 - continuity) / 2.0) * d_prev + \
              (a * (1 - bias) * (1 + continuity) / 2.0) * d_next
    t_out[:] = (a * (1 + bias) * (1 + continuity) / 2.0) * d_prev + \
               (a * (1 - bias) * (1 - continuity) / 2.0) * d_next
    return t_in, t_out


def kochanek_spline(points: np.ndarray, params: np.ndarray, bias: float = 0.0,
                    tension: float = 0.0, continuity: float = 0.0) -> np.ndarray:
    """
    Evaluate a Kochanek–Bartels spline through `points` (knots at 0..N-1) at `params`.

    Parameters
    ----------
    points : np.ndarray
        (N, D) control points, N >= 2.
    params : np.ndarray
        (M,) parameters in [0, N-1].

    Returns
    -------
    np.ndarray
        (M, D) evaluated points.
    """
    p = np.asarray(points, dtype=np.float64)
    u = np.clip(np.asarray(params, dtype=np.float64), 0.0, len(p) - 1)
    if len(p) == 1:
        return np.repeat(p, len(u), axis=0)
    t_in, t_out = kochanek_tangents(p, bias, tension, continuity)
    seg = np.minimum(np.floor(u).astype(int), len(p) - 2)
    s = (u - seg)[:, None]
    h00 = 2 * s ** 3 - 3 * s ** 2 + 1
    h10 = s ** 3 - 2 * s ** 2 + s
    h01 = -2 * s ** 3 + 3 * s ** 2
    h11 = s ** 3 - s ** 2
    return h00 * p[seg] + h10 * t_out[seg] + h01 * p[seg + 1] + h11 * t_in[seg + 1]


def perpendicular_unit(v: np.ndarray) -> np.ndarray:
    """Any unit vector perpendicular to v (crossed with the axis of its smallest component)."""
    v = np.asarray(v, dtype=np.float64)
    axis = np.zeros(3)
    axis[int(np.argmin(np.abs(v)))] = 1.0
    n = np.cross(v, axis)
    norm = np.linalg.norm(n)
    if norm < 1e-12:
        return np.array([1.0, 0.0, 0.0])
    return n / norm


def transport_frames(tangents: np.ndarray, first_normal=None) -> np.ndarray:
    """
    Propagate a normal (rotation) vector along unit tangents by parallel transport.

    Parameters
    ----------
    tangents : np.ndarray
        (N, 3) unit tangents.
    first_normal : array-like, optional
        Normal at the first point; a perpendicular is chosen when omitted.

    Returns
    -------
    np.ndarray
        (N, 3) unit normals, each orthogonal to its tangent.
    """
    t = np.asarray(tangents, dtype=np.float64)
    normals = np.zeros_like(t)
    if len(t) == 0:
        return normals
    prev = perpendicular_unit(t[0]) if first_normal is None else np.asarray(first_normal, float)
    for i in range(len(t)):
        n = prev - np.dot(prev, t[i]) * t[i]
        norm = np.linalg.norm(n)
        if norm < 1e-9:
            n = perpendicular_unit(t[i])
        else:
            n = n / norm
        normals[i] = n
        prev = n
    return normals


def unit(v: np.ndarray, fallback=(0.0, 0.0, 1.0)) -> np.ndarray:
    """Normalize a vector; return `fallback` for (near) zero vectors."""
    v = np.asarray(v, dtype=np.float64)
    n = np.linalg.norm(v)
    if n < 1e-12:
        return np.asarray(fallback, dtype=np.float64)
    return v / n
