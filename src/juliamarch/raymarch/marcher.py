from __future__ import annotations

from typing import TYPE_CHECKING, Any

from juliamarch.math_utils import normalize, normalize_batch
from juliamarch.normals import estimate_normal
from juliamarch.protocols import Colored
from juliamarch.raymarch.config import Collision, ImageCollision, RayMarchConfig, Termination

if TYPE_CHECKING:
    from juliamarch.backend import ArrayModule
    from juliamarch.scene import SceneLayer

LIGHT_DIRECTION: tuple[float, float, float] = (1.0, 1.0, 1.0)
AMBIENT: float = 0.1


def shade(xp: ArrayModule, normal: Any, color: Any) -> Any:
    """Lambert shading, ambient + (1 - ambient) * clamp(n . l, 0, 1), alpha untouched."""
    light = normalize_batch(xp, xp.asarray(LIGHT_DIRECTION, dtype=xp.float64))
    diffuse = AMBIENT + (1.0 - AMBIENT) * xp.clip(xp.sum(normal * light, axis=-1), 0.0, 1.0)
    rgb = color[..., :3] * diffuse[..., None]
    return xp.concatenate([rgb, color[..., 3:]], axis=-1)


def heat(xp: ArrayModule, iterations: Any, max_steps: int, color: Any) -> Any:
    """Heatmap colour, the share of the step budget used times the surface colour."""
    ratio = xp.asarray(iterations, dtype=xp.float64) / float(max_steps)
    rgb = color[..., :3] * ratio[..., None]
    return xp.concatenate([rgb, color[..., 3:]], axis=-1)


class _LayerMarcher:
    def __init__(self, xp: ArrayModule, config: RayMarchConfig, layer: SceneLayer) -> None:
        """Initialise the marcher."""
        self.xp = xp
        self.cfg = config
        self.layer = layer

    def _heat_color(self, iterations: Any) -> Any:
        xp = self.xp
        iterations = xp.asarray(iterations)
        base = xp.asarray(self.cfg.fractal_color, dtype=xp.float64)
        return heat(xp, iterations, self.cfg.max_steps, xp.broadcast_to(base, iterations.shape + (4,)))

    def _surface_color(self, p: Any) -> Any:
        xp = self.xp
        surface = self.layer.surface
        if isinstance(surface, Colored):
            return surface.color_at(p)
        base = xp.asarray(self.layer.color, dtype=xp.float64)
        return xp.broadcast_to(base, p.shape[:-1] + (4,))


class RayMarcher(_LayerMarcher):
    """Sphere tracer for a single ray."""

    def trace(self, origin: Any, direction: Any, *, record: bool = False) -> Collision:
        """March until hit, escape past max_distance, or the step budget runs out."""
        xp = self.xp
        cfg = self.cfg
        surface = self.layer.surface

        ro = xp.asarray(origin, dtype=xp.float64)
        d = normalize(xp, xp.asarray(direction, dtype=xp.float64))

        p = ro.copy()
        points: list[Any] = [p.copy()]
        traveled = 0.0

        for step in range(cfg.max_steps):
            dist = float(surface.sdf(p))
            if dist < cfg.eps:
                return self._resolve("hit", p, traveled, step + 1, points, record)

            traveled += dist
            p = ro + d * traveled
            points.append(p.copy())

            if traveled >= cfg.max_distance:
                return self._resolve("escaped", p, traveled, step + 1, points, record)

        return self._resolve("exhausted", p, traveled, cfg.max_steps, points, record)

    def _resolve(
            self,
            termination: Termination,
            p: Any,
            traveled: float,
            iterations: int,
            points: list[Any],
            record: bool,
    ) -> Collision:
        xp = self.xp
        cfg = self.cfg
        hit = termination == "hit"

        if cfg.is_heatmap:
            color = self._heat_color(iterations)
        elif hit:
            normal = estimate_normal(xp, self.layer.surface, p, cfg.normal_method)
            color = shade(xp, normal, self._surface_color(p))
        else:
            color = xp.asarray(cfg.background_color, dtype=xp.float64)

        return Collision(
            valid=hit,
            color=tuple(float(c) for c in color),
            travel_distance=float(traveled),
            iterations=iterations,
            termination=termination,
            points=xp.stack(points) if record else None,
        )


class ImageMarcher(_LayerMarcher):
    """Sphere tracer for a whole grid of rays sharing one origin."""

    def march(self, ro: Any, rd: Any) -> ImageCollision:
        """March.

        ro: (3,)
        rd: (..., 3), typically (H, W, 3)
        """
        xp = self.xp
        cfg = self.cfg
        surface = self.layer.surface

        ro = xp.asarray(ro, dtype=xp.float64)
        rd = normalize_batch(xp, xp.asarray(rd, dtype=xp.float64))
        shape = rd.shape[:-1]

        p = xp.broadcast_to(ro, rd.shape).copy()
        hit = xp.zeros(shape, dtype=bool)
        escaped = xp.zeros(shape, dtype=bool)
        traveled = xp.zeros(shape, dtype=xp.float64)
        iterations = xp.zeros(shape, dtype=xp.int64)

        for _ in range(int(cfg.max_steps)):
            active = (~hit) & (~escaped)
            if not bool(xp.any(active)):
                break

            dist = xp.full(shape, xp.inf, dtype=xp.float64)
            dist[active] = surface.sdf(p[active])
            iterations = iterations + active

            newly_hit = active & (dist < float(cfg.eps))
            hit = hit | newly_hit

            moving = active & ~newly_hit
            traveled = xp.where(moving, traveled + dist, traveled)
            escaped = escaped | (moving & (traveled >= float(cfg.max_distance)))

            p = ro + rd * traveled[..., None]

        return ImageCollision(
            hit=hit,
            color=self._resolve(p, hit, iterations),
            travel=traveled,
            iterations=iterations,
        )

    def _resolve(self, p: Any, hit: Any, iterations: Any) -> Any:
        xp = self.xp
        cfg = self.cfg

        if cfg.is_heatmap:
            return self._heat_color(iterations)

        background = xp.asarray(cfg.background_color, dtype=xp.float64)
        color = xp.broadcast_to(background, hit.shape + (4,)).copy()
        if bool(xp.any(hit)):
            p_hit = p[hit]
            normal = estimate_normal(xp, self.layer.surface, p_hit, cfg.normal_method)
            color[hit] = shade(xp, normal, self._surface_color(p_hit))
        return color
