"""Quaternion algebra on arrays of shape (..., 4).

Components are stored in the order (real, i, j, k). All functions take the array
module ``xp`` first so they run unchanged on NumPy and CuPy, and broadcast over any
leading batch axes.

Multiplication is the Hamilton product and does NOT commute: ``qmul(a, b)`` is
``a * b``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import numpy as np

from juliamarch.math_utils import TINY, cross

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from juliamarch.backend import ArrayModule

# Used as the rotation axis of a quaternion with no imaginary part.
DEFAULT_AXIS: tuple[float, float, float] = (1.0, 0.0, 0.0)


@dataclass(frozen=True, slots=True)
class Quaternion:
    """Immutable quaternion value r + i*I + j*J + k*K."""

    r: float
    i: float = 0.0
    j: float = 0.0
    k: float = 0.0

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> Quaternion:
        r, i, j, k = (float(v) for v in values)
        return cls(r=r, i=i, j=j, k=k)

    def as_array(self, xp: ArrayModule) -> Any:
        return xp.asarray([self.r, self.i, self.j, self.k], dtype=xp.float64)

    def __iter__(self) -> Iterator[float]:
        return iter((self.r, self.i, self.j, self.k))

    def __add__(self, other: Quaternion) -> Quaternion:
        return Quaternion.from_sequence(qadd(np, self.as_array(np), other.as_array(np)))

    def __mul__(self, other: Quaternion) -> Quaternion:
        return Quaternion.from_sequence(qmul(np, self.as_array(np), other.as_array(np)))

    def conjugate(self) -> Quaternion:
        return Quaternion(self.r, -self.i, -self.j, -self.k)

    def squared_norm(self) -> float:
        return float(qsqnorm(np, self.as_array(np)))

    def norm(self) -> float:
        return float(qnorm(np, self.as_array(np)))


def qadd(xp: ArrayModule, a: Any, b: Any) -> Any:  # noqa: ARG001
    return a + b


def qconj(xp: ArrayModule, q: Any) -> Any:
    return q * xp.asarray([1.0, -1.0, -1.0, -1.0], dtype=xp.float64)


def qmul(xp: ArrayModule, a: Any, b: Any) -> Any:
    """Hamilton product a * b.

    real = r1 * r2 - dot(v1, v2)
    vec  = r1 * v2 + r2 * v1 + cross(v1, v2)
    """
    ar, av = a[..., 0], a[..., 1:]
    br, bv = b[..., 0], b[..., 1:]
    real = ar * br - xp.sum(av * bv, axis=-1)
    vec = ar[..., None] * bv + br[..., None] * av + cross(xp, av, bv)
    return xp.concatenate([real[..., None], vec], axis=-1)


def qsquare(xp: ArrayModule, q: Any) -> Any:
    """q * q without the cross product, which vanishes for equal operands."""
    r, v = q[..., 0], q[..., 1:]
    real = r * r - xp.sum(v * v, axis=-1)
    vec = 2.0 * r[..., None] * v
    return xp.concatenate([real[..., None], vec], axis=-1)


def qsqnorm(xp: ArrayModule, q: Any) -> Any:
    return xp.sum(q * q, axis=-1)


def qnorm(xp: ArrayModule, q: Any) -> Any:
    return xp.sqrt(qsqnorm(xp, q))


def _polar(xp: ArrayModule, q: Any) -> tuple[Any, Any, Any, Any]:
    """Split q into (norm, angle, unit axis, imaginary length).

    The axis falls back to DEFAULT_AXIS where the imaginary part vanishes.
    """
    n = qnorm(xp, q)
    vec = q[..., 1:]
    s = xp.linalg.norm(vec, axis=-1)

    safe_n = xp.where(n > TINY, n, 1.0)
    phi = xp.arccos(xp.clip(q[..., 0] / safe_n, -1.0, 1.0))

    has_axis = s > TINY
    safe_s = xp.where(has_axis, s, 1.0)
    fallback = xp.asarray(DEFAULT_AXIS, dtype=xp.float64)
    axis = xp.where(has_axis[..., None], vec / safe_s[..., None], fallback)
    return n, phi, axis, s


def qpow(xp: ArrayModule, q: Any, x: float) -> Any:
    """Real power of q via the polar form n^x * (cos(x*phi), axis * sin(x*phi))."""
    n, phi, axis, _ = _polar(xp, q)
    scale = xp.where(n > TINY, n ** x, 0.0)
    real = scale * xp.cos(x * phi)
    vec = axis * (scale * xp.sin(x * phi))[..., None]
    return xp.concatenate([real[..., None], vec], axis=-1)


def left_matrix(xp: ArrayModule, q: Any) -> Any:
    """Matrix L(q) with L(q) @ h == qmul(q, h), shape (..., 4, 4)."""
    a, b, c, d = q[..., 0], q[..., 1], q[..., 2], q[..., 3]
    rows = [
        xp.stack([a, -b, -c, -d], axis=-1),
        xp.stack([b, a, -d, c], axis=-1),
        xp.stack([c, d, a, -b], axis=-1),
        xp.stack([d, -c, b, a], axis=-1),
    ]
    return xp.stack(rows, axis=-2)


def right_matrix(xp: ArrayModule, q: Any) -> Any:
    """Matrix R(q) with R(q) @ h == qmul(h, q), shape (..., 4, 4)."""
    a, b, c, d = q[..., 0], q[..., 1], q[..., 2], q[..., 3]
    rows = [
        xp.stack([a, -b, -c, -d], axis=-1),
        xp.stack([b, a, d, -c], axis=-1),
        xp.stack([c, -d, a, b], axis=-1),
        xp.stack([d, c, -b, a], axis=-1),
    ]
    return xp.stack(rows, axis=-2)


def square_jacobian(xp: ArrayModule, q: Any) -> Any:
    """Derivative of q -> q^2, the map h -> q*h + h*q."""
    return left_matrix(xp, q) + right_matrix(xp, q)


def power_jacobian(xp: ArrayModule, q: Any, x: float) -> Any:
    """Derivative of q -> q^x for real x, shape (..., 4, 4).

    With q = (a, s*u) the power acts on the complex number a + i*s and keeps u, so
    with p*z^(p-1) = alpha + i*beta and g = n^x * sin(x*phi):

        [[alpha,     -beta * u^T                     ],
         [beta * u,  alpha * uu^T + g/s * (I - uu^T) ]]

    As s -> 0, g/s tends to alpha.
    """
    n, phi, u, s = _polar(xp, q)
    growth = x * n ** (x - 1.0)
    alpha = growth * xp.cos((x - 1.0) * phi)
    beta = growth * xp.sin((x - 1.0) * phi)

    g = n ** x * xp.sin(x * phi)
    has_axis = s > TINY
    ratio = xp.where(has_axis, g / xp.where(has_axis, s, 1.0), alpha)

    uu = u[..., :, None] * u[..., None, :]
    eye = xp.eye(3, dtype=xp.float64)
    lower_right = alpha[..., None, None] * uu + ratio[..., None, None] * (eye - uu)

    top = xp.concatenate([alpha[..., None], -beta[..., None] * u], axis=-1)
    bottom = xp.concatenate([(beta[..., None] * u)[..., :, None], lower_right], axis=-1)
    return xp.concatenate([top[..., None, :], bottom], axis=-2)


def lift(xp: ArrayModule, p: Any, w: float) -> Any:
    """Lift points (..., 3) into quaternions (w, x, y, z) on the slice real == w."""
    real = xp.full(p.shape[:-1] + (1,), w, dtype=xp.float64)
    return xp.concatenate([real, p], axis=-1)
