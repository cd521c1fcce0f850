from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from juliamarch.backend import ArrayModule
from juliamarch.protocols import SDF

# Returned where no geometry is defined; large enough to end any march in one step.
NO_GEOMETRY_DISTANCE: float = 1.0e10


@dataclass(frozen=True, slots=True)
class SphereSDF(SDF):
    """Sphere of given radius around center."""

    xp: ArrayModule
    center: Any
    radius: float

    def sdf(self, p: Any) -> Any:
        # For p shaped (..., 3) this returns shape (...)
        return self.xp.linalg.norm(p - self.center, axis=-1) - self.radius


@dataclass(frozen=True, slots=True)
class BoxSDF(SDF):
    """Axis-aligned box with the given half extents."""

    xp: ArrayModule
    center: Any
    half_extents: Any

    def sdf(self, p: Any) -> Any:
        xp = self.xp
        q = xp.abs(p - self.center) - self.half_extents
        outside = xp.linalg.norm(xp.maximum(q, 0.0), axis=-1)
        inside = xp.minimum(xp.max(q, axis=-1), 0.0)
        return outside + inside


@dataclass(frozen=True, slots=True)
class CylinderSDF(SDF):
    """Cylinder along z, capped at center.z +- half_height."""

    xp: ArrayModule
    center: Any
    radius: float
    half_height: float

    def sdf(self, p: Any) -> Any:
        xp = self.xp
        local = p - self.center
        radial = xp.linalg.norm(local[..., :2], axis=-1) - self.radius
        axial = xp.abs(local[..., 2]) - self.half_height
        d = xp.stack([radial, axial], axis=-1)
        outside = xp.linalg.norm(xp.maximum(d, 0.0), axis=-1)
        inside = xp.minimum(xp.maximum(radial, axial), 0.0)
        return outside + inside


@dataclass(frozen=True, slots=True)
class TorusSDF(SDF):
    """Torus lying in the xy plane, revolving around the z axis."""

    xp: ArrayModule
    center: Any
    major_radius: float
    minor_radius: float

    def sdf(self, p: Any) -> Any:
        xp = self.xp
        local = p - self.center
        ring = xp.linalg.norm(local[..., :2], axis=-1) - self.major_radius
        tube = xp.stack([ring, local[..., 2]], axis=-1)
        return xp.linalg.norm(tube, axis=-1) - self.minor_radius


@dataclass(frozen=True, slots=True)
class NoGeometrySDF(SDF):
    """Empty scene; every point is far from any surface."""

    xp: ArrayModule

    def sdf(self, p: Any) -> Any:
        return self.xp.full(p.shape[:-1], NO_GEOMETRY_DISTANCE, dtype=self.xp.float64)


@dataclass(frozen=True, slots=True)
class UnionSDF(SDF):
    """Union of distance fields, the minimum over all parts."""

    xp: ArrayModule
    parts: tuple[SDF, ...] = field(default_factory=tuple)

    def sdf(self, p: Any) -> Any:
        if not self.parts:
            return NoGeometrySDF(self.xp).sdf(p)
        d = self.parts[0].sdf(p)
        for part in self.parts[1:]:
            d = self.xp.minimum(d, part.sdf(p))
        return d


@dataclass(frozen=True, slots=True)
class AxesSDF(SDF):
    """Debug overlay: thin capped rods along the x, y and z axes through the origin."""

    xp: ArrayModule
    length: float = 3.0
    radius: float = 0.02
    colors: tuple[tuple[float, float, float, float], ...] = (
        (1.0, 0.0, 0.0, 1.0),
        (0.0, 1.0, 0.0, 1.0),
        (0.0, 0.0, 1.0, 1.0),
    )

    def _axis_distances(self, p: Any) -> Any:
        """Distance to each rod, shape (..., 3) in x, y, z order."""
        xp = self.xp
        out = []
        for axis in range(3):
            others = [i for i in range(3) if i != axis]
            radial = xp.linalg.norm(p[..., others], axis=-1) - self.radius
            axial = xp.abs(p[..., axis]) - self.length
            d = xp.stack([radial, axial], axis=-1)
            outside = xp.linalg.norm(xp.maximum(d, 0.0), axis=-1)
            inside = xp.minimum(xp.maximum(radial, axial), 0.0)
            out.append(outside + inside)
        return xp.stack(out, axis=-1)

    def sdf(self, p: Any) -> Any:
        return self.xp.min(self._axis_distances(p), axis=-1)

    def color_at(self, p: Any) -> Any:
        xp = self.xp
        nearest = xp.argmin(self._axis_distances(p), axis=-1)
        palette = xp.asarray(self.colors, dtype=xp.float64)
        return palette[nearest]
