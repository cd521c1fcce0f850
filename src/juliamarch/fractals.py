from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from juliamarch.backend import ArrayModule
from juliamarch.math_utils import normalize_batch
from juliamarch.protocols import SDF
from juliamarch.quaternion import lift, power_jacobian, qpow, qsqnorm, qsquare, square_jacobian

# Floor for |q|^2 and the derivative accumulator ahead of log() and division.
_FLOOR: float = 1e-18


@dataclass(frozen=True, slots=True)
class JuliaSDF(SDF):
    """Distance estimate to the quaternion Julia set of q -> q^2 + c.

    Points are lifted to the 4D slice with real part ``slice_w``. The iteration runs at
    most ``max_iterations`` times and stops once |q|^2 exceeds ``escape``; the estimate is

        d = 0.25 * ln(|q|^2) * sqrt(|q|^2 / |dq|^2)

    Beyond ``bound_radius + epsilon`` the exact distance to the bounding sphere is
    returned instead, which leaves a visible seam at that radius.
    """

    xp: ArrayModule
    constant: Any
    max_iterations: int
    escape: float
    epsilon: float
    slice_w: float = 0.1
    bound_radius: float = 2.0

    def _step(self, q: Any) -> Any:
        return qsquare(self.xp, q) + self.constant

    def _growth(self, qq: Any) -> Any:
        # p^2 * |q|^(2(p-1)) with p = 2
        return 4.0 * qq

    def _jacobian(self, q: Any) -> Any:
        return square_jacobian(self.xp, q)

    def sdf(self, p: Any) -> Any:
        xp = self.xp
        p = xp.asarray(p, dtype=xp.float64)
        r = xp.linalg.norm(p, axis=-1)
        outside = r > self.bound_radius + self.epsilon

        # far lanes iterate from the slice origin; their result is replaced below
        q = lift(xp, xp.where(outside[..., None], 0.0, p), self.slice_w)
        qq = qsqnorm(xp, q)
        dq = xp.ones_like(qq)
        active = xp.ones(qq.shape, dtype=bool)

        for _ in range(self.max_iterations):
            dq = xp.where(active, dq * self._growth(qq), dq)
            q = xp.where(active[..., None], self._step(q), q)
            qq = qsqnorm(xp, q)
            active = active & ~(qq > self.escape)
            if not bool(xp.any(active)):
                break

        qq = xp.maximum(qq, _FLOOR)
        dq = xp.maximum(dq, _FLOOR)
        estimate = 0.25 * xp.log(qq) * xp.sqrt(qq / dq)
        return xp.where(outside, r - self.bound_radius, estimate)

    def normal(self, p: Any) -> Any:
        """Analytic normal from the Jacobian of the iteration.

        J accumulates d(q_n)/d(q_0); the gradient of |q_n|^2 is then J^T q_n and its
        imaginary part is the spatial normal. J is rescaled every step since only its
        direction is used.

        This departs on purpose from the cheaper left-multiplication recurrence
        J <- L(q) J with normal imag(J q_0), which is only an approximation of the
        derivative since quaternion multiplication does not commute.
        """
        xp = self.xp
        p = xp.asarray(p, dtype=xp.float64)
        q = lift(xp, p, self.slice_w)
        jac = xp.broadcast_to(xp.eye(4, dtype=xp.float64), q.shape[:-1] + (4, 4)).copy()
        active = xp.ones(q.shape[:-1], dtype=bool)

        for _ in range(self.max_iterations):
            stepped = self._jacobian(q) @ jac
            scale = xp.max(xp.abs(stepped), axis=(-2, -1), keepdims=True)
            stepped = stepped / xp.maximum(scale, _FLOOR)
            jac = xp.where(active[..., None, None], stepped, jac)
            q = xp.where(active[..., None], self._step(q), q)
            active = active & ~(qsqnorm(xp, q) > self.escape)
            if not bool(xp.any(active)):
                break

        grad = xp.sum(jac * q[..., :, None], axis=-2)
        return normalize_batch(xp, grad[..., 1:])


@dataclass(frozen=True, slots=True)
class GeneralizedJuliaSDF(JuliaSDF):
    """Julia set of q -> q^power + c for real power >= 1."""

    power: float = 2.0

    def _step(self, q: Any) -> Any:
        return qpow(self.xp, q, self.power) + self.constant

    def _growth(self, qq: Any) -> Any:
        return self.power * self.power * qq ** (self.power - 1.0)

    def _jacobian(self, q: Any) -> Any:
        return power_jacobian(self.xp, q, self.power)
