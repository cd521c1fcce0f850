from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Any

import yaml

from juliamarch.quaternion import Quaternion

logger = logging.getLogger(__name__)

Color = tuple[float, float, float, float]


class FractalGroup(IntEnum):
    """Family of shapes to display."""

    # Preset shapes only; kaleidoscopic IFS fractals would plug in here.
    KALEIDOSCOPIC_IFS = 0
    JULIA_SET = 1
    GENERALIZED_JULIA_SET = 2


class PrimitiveShape(IntEnum):
    SPHERE = 0
    CYLINDER = 1
    BOX = 2
    TORUS = 3
    SIERPINSKI_TETRAHEDRON = 4
    BUNNY = 5


def _rgb(r: int, g: int, b: int) -> Color:
    return (r / 255.0, g / 255.0, b / 255.0, 1.0)


@dataclass(frozen=True, slots=True)
class SceneOptions:
    """Read-only render settings, captured once per frame.

    Fields:
      power:
        Exponent of the generalized Julia map q -> q^power + c.
      constant:
        Julia constant c.
      max_iterations:
        Cap on both the marching steps per ray and the fractal iteration.
      max_distance:
        Far distance of the march; also the escape threshold on |q|^2.
      epsilon:
        Surface hit threshold.
      fractal_group_id, primitive_id:
        Scene selectors, see FractalGroup and PrimitiveShape. Unknown ids render
        nothing.
      slice_w:
        Real part of the 3D slice through the 4D set.
      normal_method:
        "analytic" or "gradient".
    """

    power: float = 2.0
    constant: Quaternion = field(default_factory=lambda: Quaternion(-0.1, 0.6, 0.9, -0.3))
    max_iterations: int = 200
    max_distance: float = 100.0
    epsilon: float = 1e-3
    fractal_group_id: int = FractalGroup.JULIA_SET
    primitive_id: int = PrimitiveShape.SPHERE
    fractal_color: Color = _rgb(200, 200, 200)
    background_color: Color = (0.0, 0.0, 0.0, 1.0)
    is_heatmap: bool = False
    show_axes: bool = False
    slice_w: float = 0.1
    normal_method: str = "analytic"

    def validate(self) -> SceneOptions:
        """Check the ranges the settings UI allows; returns self for chaining."""
        checks = [
            (1.0 <= self.power <= 10.0, f"power must be in [1, 10], got {self.power}"),
            (
                all(-1.0 <= c <= 1.0 for c in self.constant),
                f"constant components must be in [-1, 1], got {tuple(self.constant)}",
            ),
            (
                1 <= self.max_iterations <= 1000,
                f"max_iterations must be in [1, 1000], got {self.max_iterations}",
            ),
            (
                10.0 <= self.max_distance <= 10000.0,
                f"max_distance must be in [10, 10000], got {self.max_distance}",
            ),
            (1e-6 <= self.epsilon <= 1.0, f"epsilon must be in [1e-6, 1], got {self.epsilon}"),
            (
                self.normal_method in ("analytic", "gradient"),
                f"normal_method must be 'analytic' or 'gradient', got {self.normal_method!r}",
            ),
        ]
        for name in ("fractal_color", "background_color"):
            color = getattr(self, name)
            checks.append(
                (
                    len(color) == 4 and all(0.0 <= c <= 1.0 for c in color),
                    f"{name} must be 4 channels in [0, 1], got {color}",
                ),
            )
        for ok, msg in checks:
            if not ok:
                raise ValueError(msg)
        return self


def options_to_dict(options: SceneOptions) -> dict[str, Any]:
    """Convert SceneOptions to plain types for YAML serialization."""
    data = asdict(options)
    data["constant"] = list(options.constant)
    data["fractal_color"] = list(options.fractal_color)
    data["background_color"] = list(options.background_color)
    data["fractal_group_id"] = int(options.fractal_group_id)
    data["primitive_id"] = int(options.primitive_id)
    return data


def options_from_dict(data: dict[str, Any]) -> SceneOptions:
    """Build validated SceneOptions; missing keys keep their defaults."""
    known = set(SceneOptions.__dataclass_fields__)
    unknown = sorted(set(data) - known)
    if unknown:
        msg = f"Unknown option keys: {', '.join(unknown)}"
        raise ValueError(msg)

    kwargs = dict(data)
    if "constant" in kwargs:
        kwargs["constant"] = Quaternion.from_sequence(kwargs["constant"])
    for name in ("fractal_color", "background_color"):
        if name in kwargs:
            kwargs[name] = tuple(float(c) for c in kwargs[name])
    return SceneOptions(**kwargs).validate()


def save_options(options: SceneOptions, path: str | Path) -> None:
    with Path(path).open("w") as file:
        yaml.dump(options_to_dict(options), file, default_flow_style=False)
    logger.info("Options saved to %s", path)


def load_options(path: str | Path) -> SceneOptions:
    with Path(path).open() as file:
        data = yaml.safe_load(file) or {}
    options = options_from_dict(data)
    logger.info("Options loaded from %s", path)
    return options
