from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


class SDF(Protocol):
    """Pure signed distance field contract."""

    def sdf(self, p: Any) -> Any:
        """Signed distance to surface at points p of shape (..., 3)."""
        ...


@runtime_checkable
class AnalyticNormal(Protocol):
    """Distance field that can differentiate itself."""

    def normal(self, p: Any) -> Any:
        """Unit surface normals at points p of shape (..., 3)."""
        ...


@runtime_checkable
class Colored(Protocol):
    """Distance field with a position dependent surface colour."""

    def color_at(self, p: Any) -> Any:
        """RGBA colours of shape (..., 4) at points p."""
        ...
