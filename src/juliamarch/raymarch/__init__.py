from juliamarch.raymarch.config import Collision, ImageCollision, RayMarchConfig
from juliamarch.raymarch.marcher import ImageMarcher, RayMarcher

__all__ = [
    "Collision",
    "ImageCollision",
    "ImageMarcher",
    "RayMarchConfig",
    "RayMarcher",
]
