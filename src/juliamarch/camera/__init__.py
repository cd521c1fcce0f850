from juliamarch.camera.camera3d import OrbitCamera

__all__ = [
    "OrbitCamera",
]
