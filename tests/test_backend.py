import logging

import numpy as np
import pytest

from juliamarch import backend


@pytest.mark.parametrize(("value", "expected"), [("1", True), ("Yes", True), ("on", True), ("0", False), ("", False)])
def test_cuda_requested_reads_environment(monkeypatch, value, expected):
    monkeypatch.setenv(backend.CUDA_ENV_VAR, value)
    assert backend.cuda_requested() is expected


def test_numpy_by_default(monkeypatch):
    monkeypatch.delenv(backend.CUDA_ENV_VAR, raising=False)
    assert backend.get_array_module() is np
    assert backend.get_array_module(False) is np
    assert not backend.is_cupy(np)


def test_missing_cupy_falls_back_with_warning(monkeypatch, caplog):
    monkeypatch.setattr(backend, "cp", None)
    monkeypatch.setenv(backend.CUDA_ENV_VAR, "true")
    with caplog.at_level(logging.WARNING, logger="juliamarch.backend"):
        assert backend.get_array_module() is np
    assert "falling back to NumPy" in caplog.text


def test_to_numpy_passes_numpy_through():
    a = np.arange(6.0).reshape(2, 3)
    np.testing.assert_array_equal(backend.to_numpy(np, a), a)
