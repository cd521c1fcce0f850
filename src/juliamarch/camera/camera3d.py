from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

from juliamarch.math_utils import normalize, normalize_batch, rotation_y, rotation_z

if TYPE_CHECKING:
    from juliamarch.backend import ArrayModule

TWO_PI: float = 2.0 * math.pi


@dataclass(frozen=True, slots=True)
class OrbitCamera:
    """Camera orbiting the origin at origin_distance.

    phi is the azimuth around z, theta the elevation above the xy plane (radians).
    The basis matrix is Rz(phi) @ Ry(-theta); its columns are

      forward: unit vector from the origin towards the camera
      right:   screen x axis
      up:      screen y axis (world up at theta == 0)

    Rays leave the camera along -forward.
    """

    origin_distance: float = 15.0
    min_distance: float = 5.0
    phi: float = math.radians(-45.0)
    theta: float = math.radians(20.0)

    def matrix(self, xp: ArrayModule) -> Any:
        return rotation_z(xp, self.phi) @ rotation_y(xp, -self.theta)

    def basis(self, xp: ArrayModule) -> tuple[Any, Any, Any]:
        m = self.matrix(xp)
        return m[:, 0], m[:, 1], m[:, 2]

    def origin(self, xp: ArrayModule) -> Any:
        forward, _, _ = self.basis(xp)
        return forward * self.origin_distance

    def zoomed(self, distance: float) -> OrbitCamera:
        """Dolly towards the origin by distance, never closer than min_distance."""
        return replace(self, origin_distance=max(self.min_distance, self.origin_distance - distance))

    def rotated(self, delta_phi: float, delta_theta: float) -> OrbitCamera:
        """Orbit by the given angles; phi wraps to [0, 2pi), theta is clamped to +-pi/2."""
        phi = (self.phi + delta_phi) % TWO_PI
        theta = min(max(self.theta + delta_theta, -math.pi / 2.0), math.pi / 2.0)
        return replace(self, phi=phi, theta=theta)

    @staticmethod
    def pixel_uv(x: float, y: float, width: int, height: int) -> tuple[float, float]:
        """Map pixel coordinates to [-aspect, aspect] x [-1, 1]; y grows downwards."""
        aspect = width / height
        u = (2.0 * x / width - 1.0) * aspect
        v = 2.0 * y / height - 1.0
        return u, v

    def ray_direction(self, xp: ArrayModule, x: float, y: float, width: int, height: int) -> Any:
        """Unit direction through pixel coordinate (x, y)."""
        forward, right, up = self.basis(xp)
        u, v = self.pixel_uv(x, y, width, height)
        return normalize(xp, u * right - v * up - forward)

    def ray_directions_grid(self, xp: ArrayModule, width: int, height: int, row_start: int = 0,
                            row_stop: int | None = None) -> Any:
        """Return unit directions through pixel centres, shape (rows, W, 3).

        row_start/row_stop select a horizontal band of the full (height, width) image.
        """
        forward, right, up = self.basis(xp)
        row_stop = height if row_stop is None else row_stop

        xs = xp.arange(width, dtype=xp.float64) + 0.5
        ys = xp.arange(row_start, row_stop, dtype=xp.float64) + 0.5
        aspect = width / height
        us = (2.0 * xs / width - 1.0) * aspect
        vs = 2.0 * ys / height - 1.0

        rd = (
                us[None, :, None] * right[None, None, :]
                - vs[:, None, None] * up[None, None, :]
                - forward[None, None, :]
        )
        return normalize_batch(xp, rd)
