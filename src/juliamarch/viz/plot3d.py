from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

import matplotlib as mpl
import numpy as np
from matplotlib.animation import FuncAnimation

logger = logging.getLogger(__name__)

BACKEND_ENV_VAR = "JULIAMARCH_MPL_BACKEND"
_INTERACTIVE_BACKENDS = ("TkAgg", "QtAgg")


def _select_backend() -> str:
    """Pick the matplotlib backend; must run before pyplot is imported."""
    requested = os.environ.get(BACKEND_ENV_VAR, "").strip()
    if requested:
        mpl.use(requested, force=True)
        return requested
    for name in _INTERACTIVE_BACKENDS:
        # noinspection PyBroadException
        try:
            mpl.use(name, force=True)
        except Exception:  # pragma: no cover  # noqa: BLE001, S112
            continue
        return name
    mpl.use("Agg", force=True)
    return "Agg"


BACKEND = _select_backend()

import matplotlib.pyplot as plt  # noqa: E402

if TYPE_CHECKING:
    from collections.abc import Sequence


def save_frame(path: str | Path, rgba: np.ndarray) -> None:
    """Write an (H, W, 4) float image in [0, 1] to disk."""
    plt.imsave(Path(path), np.clip(rgba, 0.0, 1.0))
    logger.info("Frame saved to %s", path)


class FramePlotter:
    """Single image axes showing rendered frames, still or as a looping orbit."""

    def __init__(self, title: str = "Rendered view") -> None:
        """Create the figure with one borderless image axes."""
        self.fig, self.ax = plt.subplots(1, 1, figsize=(8, 6))
        self.ax.set_axis_off()
        self.ax.set_title(title)
        self.im: Any = None

    def show_frame(self, rgba: np.ndarray) -> None:
        self.im = self.ax.imshow(np.clip(rgba, 0.0, 1.0))

    def animate(self, frames: Sequence[np.ndarray], interval_ms: int = 120) -> FuncAnimation:
        """Cycle through frames; keep a reference to the result while it plays."""
        if not frames:
            msg = "frames is empty"
            raise ValueError(msg)

        self.show_frame(frames[0])

        def _next_frame(index: int) -> list[Any]:
            self.im.set_data(np.clip(frames[index], 0.0, 1.0))
            return [self.im]

        return FuncAnimation(self.fig, _next_frame, frames=len(frames), interval=interval_ms, blit=False)

    @staticmethod
    def show() -> None:
        plt.tight_layout()
        plt.show()
