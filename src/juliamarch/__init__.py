from juliamarch.options import FractalGroup, PrimitiveShape, SceneOptions
from juliamarch.quaternion import Quaternion
from juliamarch.scene import Scene, build_scene

__all__ = [
    "FractalGroup",
    "PrimitiveShape",
    "Quaternion",
    "Scene",
    "SceneOptions",
    "build_scene",
]
