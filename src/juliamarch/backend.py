from __future__ import annotations

import logging
import os
from typing import Any

import numpy as np

try:
    import cupy as cp  # type: ignore
except ImportError:  # pragma: no cover
    cp = None

ArrayModule = Any

CUDA_ENV_VAR = "JULIAMARCH_USE_CUDA"

logger = logging.getLogger(__name__)


def cuda_requested() -> bool:
    """True when JULIAMARCH_USE_CUDA is set to 1, true, yes or on."""
    return os.environ.get(CUDA_ENV_VAR, "").strip().lower() in ("1", "true", "yes", "on")


def get_array_module(use_cuda: bool | None = None) -> ArrayModule:
    """Return the array module every kernel runs on.

    use_cuda=None defers to the JULIAMARCH_USE_CUDA environment variable. A CUDA
    request without CuPy installed degrades to NumPy.
    """
    if use_cuda is None:
        use_cuda = cuda_requested()
    if not use_cuda:
        return np
    if cp is None:
        logger.warning("CuPy requested but not available, falling back to NumPy")
        return np
    logger.info("Using CuPy array backend")
    return cp


def is_cupy(xp: ArrayModule) -> bool:
    return cp is not None and xp is cp


def to_numpy(xp: ArrayModule, a: Any) -> np.ndarray:
    """Host copy of an xp array, for plotting and saving."""
    if is_cupy(xp):
        return cp.asnumpy(a)  # type: ignore[union-attr]
    return np.asarray(a)
