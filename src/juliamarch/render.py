from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
from tqdm import tqdm

from juliamarch.backend import to_numpy
from juliamarch.scene import build_scene

if TYPE_CHECKING:
    from juliamarch.backend import ArrayModule
    from juliamarch.camera.camera3d import OrbitCamera
    from juliamarch.options import SceneOptions

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Viewport:
    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            msg = f"Viewport must be positive, got {self.width}x{self.height}"
            raise ValueError(msg)

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height


@dataclass(frozen=True, slots=True)
class FrameSnapshot:
    """Everything one frame reads, captured together before any pixel is traced."""

    options: SceneOptions
    camera: OrbitCamera
    viewport: Viewport


class FrameRenderer:
    """Render frames as RGBA float images, one row band per worker task.

    Every call to render() starts a new generation. Once a newer render() or
    cancel() has started, the older frame stops scheduling bands and returns None.
    """

    def __init__(self, xp: ArrayModule, workers: int | None = None, band_rows: int = 32) -> None:
        """Initialise the renderer."""
        self.xp = xp
        self.workers = workers
        self.band_rows = max(1, int(band_rows))
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    def cancel(self) -> None:
        """Supersede the frame in flight, if any."""
        self._generation += 1

    def render(self, snapshot: FrameSnapshot, *, progress: bool = False) -> np.ndarray | None:
        self._generation += 1
        generation = self._generation

        xp = self.xp
        width, height = snapshot.viewport.width, snapshot.viewport.height
        scene = build_scene(xp, snapshot.options)
        camera = snapshot.camera
        origin = camera.origin(xp)

        bands = [(start, min(start + self.band_rows, height)) for start in range(0, height, self.band_rows)]
        image = np.empty((height, width, 4), dtype=np.float64)

        def _render_band(start: int, stop: int) -> np.ndarray | None:
            if generation != self._generation:
                return None
            rd = camera.ray_directions_grid(xp, width, height, row_start=start, row_stop=stop)
            return to_numpy(xp, scene.march(origin, rd).color)

        logger.info("Rendering frame %d at %dx%d", generation, width, height)
        start_time = time.perf_counter()
        stale = False

        with ThreadPoolExecutor(max_workers=self.workers) as pool:
            futures = {pool.submit(_render_band, start, stop): (start, stop) for start, stop in bands}
            done = as_completed(futures)
            if progress:
                done = tqdm(done, total=len(futures), desc=f"Frame {generation}")

            for future in done:
                colors = future.result()
                if colors is None or generation != self._generation:
                    stale = True
                    for pending in futures:
                        pending.cancel()
                    break
                start, stop = futures[future]
                image[start:stop] = colors

        if stale:
            logger.warning("Discarded stale frame %d, superseded by %d", generation, self._generation)
            return None

        logger.info("Frame %d rendered in %.2f seconds", generation, time.perf_counter() - start_time)
        return image
