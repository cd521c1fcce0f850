from __future__ import annotations

import math
from typing import Any

TINY: float = 1e-12


def normalize(xp: Any, v: Any, eps: float = TINY) -> Any:
    """Normalize vector with division-by-zero guard."""
    n = xp.linalg.norm(v)
    if float(n) <= eps:
        return v
    return v / n


def normalize_batch(xp: Any, v: Any) -> Any:
    """Normalize vectors along the last axis with division-by-zero guard."""
    n = xp.linalg.norm(v, axis=-1, keepdims=True)
    n = xp.maximum(n, xp.asarray(TINY, dtype=xp.float64))
    return v / n


def dot_batch(xp: Any, a: Any, b: Any) -> Any:
    """Dot product along the last axis, (..., D) x (..., D) -> (...)."""
    return xp.sum(a * b, axis=-1)


def cross(xp: Any, a: Any, b: Any) -> Any:
    """Cross product that works for NumPy/CuPy and array-likes."""
    if hasattr(xp, "cross"):
        return xp.cross(a, b)
    ax, ay, az = a[..., 0], a[..., 1], a[..., 2]
    bx, by, bz = b[..., 0], b[..., 1], b[..., 2]
    return xp.stack([ay * bz - az * by, az * bx - ax * bz, ax * by - ay * bx], axis=-1)


def rotation_z(xp: Any, angle: float) -> Any:
    """Rotation by angle (radians) about the z axis."""
    c, s = math.cos(angle), math.sin(angle)
    return xp.asarray([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]], dtype=xp.float64)


def rotation_y(xp: Any, angle: float) -> Any:
    """Rotation by angle (radians) about the y axis."""
    c, s = math.cos(angle), math.sin(angle)
    return xp.asarray([[c, 0.0, s], [0.0, 1.0, 0.0], [-s, 0.0, c]], dtype=xp.float64)
