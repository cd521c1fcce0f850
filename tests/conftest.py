import os

os.environ.setdefault("JULIAMARCH_MPL_BACKEND", "Agg")

import numpy as np  # noqa: E402
import pytest  # noqa: E402


@pytest.fixture
def xp():
    return np


@pytest.fixture
def rng():
    return np.random.default_rng(1234)
