"""Shared pytest fixtures for the spectral_viz test suite."""

import logging

import numpy as np
import pytest

from spectral_viz.signals import sine_wave

SAMPLE_RATE = 44100
WINDOW_LENGTH = 2048

ENV_VARS = (
    "SPECTRAL_WINDOW_LENGTH",
    "SPECTRAL_SAMPLE_RATE",
    "SPECTRAL_WINDOW",
    "SPECTRAL_SCALE",
    "SPECTRAL_DB_FLOOR",
    "SPECTRAL_VIZ_ENV",
    "SPECTRAL_VIZ_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep SPECTRAL_* settings from the shell out of the tests."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def restore_root_logger():
    """configure_logging() replaces root handlers; put them back afterwards."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def sine_440() -> np.ndarray:
    """2048 samples of a 440Hz sine at 44.1kHz."""
    return sine_wave(440.0, SAMPLE_RATE, WINDOW_LENGTH)
