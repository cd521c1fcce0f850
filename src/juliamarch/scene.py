from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import reduce
from typing import TYPE_CHECKING, Any

from juliamarch.fractals import GeneralizedJuliaSDF, JuliaSDF
from juliamarch.geometry import (
    AxesSDF,
    BoxSDF,
    CylinderSDF,
    NoGeometrySDF,
    SphereSDF,
    TorusSDF,
    UnionSDF,
)
from juliamarch.options import FractalGroup, PrimitiveShape
from juliamarch.raymarch.config import Collision, ImageCollision, RayMarchConfig
from juliamarch.raymarch.marcher import ImageMarcher, RayMarcher

if TYPE_CHECKING:
    from juliamarch.backend import ArrayModule
    from juliamarch.options import Color, SceneOptions
    from juliamarch.protocols import SDF

logger = logging.getLogger(__name__)

OVERLAY_COLOR: Color = (1.0, 1.0, 1.0, 1.0)


def primitive_surface(xp: ArrayModule, primitive_id: int) -> SDF:
    """Preset shape centred at the origin; unmapped ids give an empty scene."""
    origin = xp.zeros(3, dtype=xp.float64)
    if primitive_id == PrimitiveShape.SPHERE:
        return SphereSDF(xp=xp, center=origin, radius=1.0)
    if primitive_id == PrimitiveShape.CYLINDER:
        return CylinderSDF(xp=xp, center=origin, radius=0.75, half_height=1.0)
    if primitive_id == PrimitiveShape.BOX:
        half = xp.asarray([1.0, 1.0, 1.0], dtype=xp.float64)
        return BoxSDF(xp=xp, center=origin, half_extents=half)
    if primitive_id == PrimitiveShape.TORUS:
        return TorusSDF(xp=xp, center=origin, major_radius=1.0, minor_radius=0.35)
    return NoGeometrySDF(xp=xp)


def select_surface(xp: ArrayModule, options: SceneOptions) -> SDF:
    """Resolve the fractal group and primitive selectors into one distance field."""
    group = options.fractal_group_id
    if group == FractalGroup.KALEIDOSCOPIC_IFS:
        return primitive_surface(xp, options.primitive_id)

    julia_args: dict[str, Any] = {
        "xp": xp,
        "constant": options.constant.as_array(xp),
        "max_iterations": int(options.max_iterations),
        "escape": float(options.max_distance),
        "epsilon": float(options.epsilon),
        "slice_w": float(options.slice_w),
    }
    if group == FractalGroup.JULIA_SET:
        return JuliaSDF(**julia_args)
    if group == FractalGroup.GENERALIZED_JULIA_SET:
        return GeneralizedJuliaSDF(**julia_args, power=float(options.power))
    return NoGeometrySDF(xp=xp)


def merge_collisions(first: Collision, second: Collision) -> Collision:
    """Nearest valid hit wins; with no valid hit the shorter travel wins. Ties keep first."""
    if first.valid != second.valid:
        return first if first.valid else second
    return second if second.travel_distance < first.travel_distance else first


def merge_image_collisions(xp: ArrayModule, first: ImageCollision, second: ImageCollision) -> ImageCollision:
    """Per-pixel merge_collisions."""
    same = first.hit == second.hit
    take_second = (second.hit & ~first.hit) | (same & (second.travel < first.travel))
    return ImageCollision(
        hit=xp.where(take_second, second.hit, first.hit),
        color=xp.where(take_second[..., None], second.color, first.color),
        travel=xp.where(take_second, second.travel, first.travel),
        iterations=xp.where(take_second, second.iterations, first.iterations),
    )


@dataclass(frozen=True, slots=True)
class SceneLayer:
    """Distance field marched on its own, with the colour its hits are shaded with."""

    surface: SDF
    color: Color


@dataclass(frozen=True, slots=True)
class Scene:
    """Complete scene definition."""

    xp: ArrayModule
    layers: tuple[SceneLayer, ...]
    config: RayMarchConfig

    def distance(self, p: Any) -> Any:
        """Combined distance field of all layers."""
        return UnionSDF(self.xp, tuple(layer.surface for layer in self.layers)).sdf(p)

    def trace(self, origin: Any, direction: Any, *, record: bool = False) -> Collision:
        """Trace one ray through every layer and keep the nearest hit."""
        collisions = [
            RayMarcher(self.xp, self.config, layer).trace(origin, direction, record=record)
            for layer in self.layers
        ]
        return reduce(merge_collisions, collisions)

    def march(self, ro: Any, rd: Any) -> ImageCollision:
        """Trace a grid of rays through every layer and keep the nearest hits."""
        collisions = [ImageMarcher(self.xp, self.config, layer).march(ro, rd) for layer in self.layers]
        return reduce(lambda a, b: merge_image_collisions(self.xp, a, b), collisions)


def build_scene(xp: ArrayModule, options: SceneOptions) -> Scene:
    surface = select_surface(xp, options)
    layers = [SceneLayer(surface=surface, color=tuple(options.fractal_color))]
    if options.show_axes:
        layers.append(SceneLayer(surface=AxesSDF(xp=xp), color=OVERLAY_COLOR))

    logger.debug(
        "Built scene: %s%s",
        type(surface).__name__,
        " with axes overlay" if options.show_axes else "",
    )
    return Scene(xp=xp, layers=tuple(layers), config=RayMarchConfig.from_options(options))
