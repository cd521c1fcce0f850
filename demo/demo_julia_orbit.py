from __future__ import annotations

import logging
import math

from juliamarch.backend import get_array_module
from juliamarch.camera import OrbitCamera
from juliamarch.log import setup_logging
from juliamarch.options import FractalGroup, SceneOptions
from juliamarch.quaternion import Quaternion
from juliamarch.render import FrameRenderer, FrameSnapshot, Viewport
from juliamarch.viz.plot3d import FramePlotter, save_frame


def main() -> None:
    setup_logging(logging.INFO)

    xp = get_array_module()

    options = SceneOptions(
        fractal_group_id=FractalGroup.GENERALIZED_JULIA_SET,
        power=3.0,
        constant=Quaternion(-0.2, 0.6, 0.2, 0.2),
        max_iterations=120,
        show_axes=True,
    ).validate()

    viewport = Viewport(width=240, height=160)
    renderer = FrameRenderer(xp, workers=4, band_rows=16)

    camera = OrbitCamera(origin_distance=6.0, min_distance=2.5)
    frames_n = 12
    frames = []
    for _ in range(frames_n):
        img = renderer.render(FrameSnapshot(options=options, camera=camera, viewport=viewport), progress=True)
        if img is not None:
            frames.append(img)
        camera = camera.rotated(2.0 * math.pi / frames_n, 0.0)

    save_frame("julia_orbit_0.png", frames[0])

    plotter = FramePlotter(title="Generalized quaternion Julia set, p = 3")
    animation = plotter.animate(frames, interval_ms=120)  # noqa: F841
    plotter.show()


if __name__ == "__main__":
    main()
