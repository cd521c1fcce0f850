from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal

from juliamarch.math_utils import normalize_batch
from juliamarch.protocols import AnalyticNormal

if TYPE_CHECKING:
    from juliamarch.backend import ArrayModule
    from juliamarch.protocols import SDF

NormalMethod = Literal["analytic", "gradient"]

GRADIENT_STEP: float = 1e-4


def gradient_normal(xp: ArrayModule, surface: SDF, p: Any, h: float = GRADIENT_STEP) -> Any:
    """Normal from central differences of the distance field.

    Costs six distance evaluations per point and works for any field.
    """
    p = xp.asarray(p, dtype=xp.float64)
    offsets = xp.eye(3, dtype=xp.float64) * h
    grad = xp.stack(
        [surface.sdf(p + offsets[i]) - surface.sdf(p - offsets[i]) for i in range(3)],
        axis=-1,
    )
    return normalize_batch(xp, grad)


def estimate_normal(xp: ArrayModule, surface: SDF, p: Any, method: NormalMethod = "analytic") -> Any:
    """Surface normal at points p already within epsilon of the surface."""
    if method == "analytic":
        if isinstance(surface, AnalyticNormal):
            return surface.normal(p)
        return gradient_normal(xp, surface, p)
    if method == "gradient":
        return gradient_normal(xp, surface, p)
    msg = f"Unknown normal method: {method!r}"
    raise ValueError(msg)
