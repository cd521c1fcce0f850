from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:
    from juliamarch.normals import NormalMethod
    from juliamarch.options import Color, SceneOptions


@dataclass(frozen=True, slots=True)
class RayMarchConfig:
    """March limits and colouring. Heatmap pixels are scaled from fractal_color on every layer."""

    max_steps: int = 200
    eps: float = 1e-3
    max_distance: float = 100.0
    background_color: Color = (0.0, 0.0, 0.0, 1.0)
    fractal_color: Color = (200 / 255, 200 / 255, 200 / 255, 1.0)
    is_heatmap: bool = False
    normal_method: NormalMethod = "analytic"

    @classmethod
    def from_options(cls, options: SceneOptions) -> RayMarchConfig:
        return cls(
            max_steps=int(options.max_iterations),
            eps=float(options.epsilon),
            max_distance=float(options.max_distance),
            background_color=tuple(options.background_color),
            fractal_color=tuple(options.fractal_color),
            is_heatmap=bool(options.is_heatmap),
            normal_method=options.normal_method,  # type: ignore[arg-type]
        )


Termination = Literal["hit", "escaped", "exhausted"]


@dataclass(frozen=True, slots=True)
class Collision:
    """Outcome of tracing one ray.

    valid is True only for a hit; escaped and exhausted rays both carry the
    background (or heatmap) colour. iterations counts distance evaluations.
    points holds the marched positions when recording was requested.
    """

    valid: bool
    color: tuple[float, ...]
    travel_distance: float
    iterations: int
    termination: Termination
    points: Any = None


@dataclass(frozen=True, slots=True)
class ImageCollision:
    """Per-pixel outcome of marching a whole grid of rays."""

    hit: Any
    color: Any
    travel: Any
    iterations: Any
