import logging

import numpy as np
import pytest

from juliamarch.log import setup_logging
from juliamarch.viz.plot3d import FramePlotter, save_frame


def test_save_frame_writes_png(tmp_path):
    rgba = np.zeros((6, 8, 4))
    rgba[..., 0] = 1.5
    rgba[..., 3] = 1.0
    path = tmp_path / "frame.png"
    save_frame(path, rgba)
    assert path.stat().st_size > 0


def test_animate_needs_frames():
    plotter = FramePlotter()
    with pytest.raises(ValueError, match="frames is empty"):
        plotter.animate([])


def test_animate_builds_animation():
    plotter = FramePlotter(title="orbit")
    frames = [np.full((4, 4, 4), v) for v in (0.2, 0.6)]
    animation = plotter.animate(frames, interval_ms=50)
    assert animation is not None
    assert plotter.im is not None


def test_setup_logging_writes_file(tmp_path):
    log_file = tmp_path / "render.log"
    logger = setup_logging(logging.DEBUG, log_file=log_file)
    try:
        logging.getLogger("juliamarch.scene").debug("hello %s", "scene")
        for handler in logger.handlers:
            handler.flush()
        text = log_file.read_text()
        assert "DEBUG - hello scene" in text
    finally:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        logger.setLevel(logging.NOTSET)


def test_setup_logging_twice_keeps_one_set_of_handlers(tmp_path):
    log_file = tmp_path / "render.log"
    setup_logging(logging.INFO, log_file=log_file)
    logger = setup_logging(logging.INFO, log_file=log_file)
    try:
        assert len(logger.handlers) == 2
        logging.getLogger("juliamarch.render").info("frame done")
        for handler in logger.handlers:
            handler.flush()
        assert log_file.read_text().count("frame done") == 1
    finally:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        logger.setLevel(logging.NOTSET)
