"""
Error types raised by the spectral analysis core.

Configuration errors are fatal for the object being built; input errors are
per-call and the caller can recover by fixing the block it passes in.
"""


class SpectralError(Exception):
    """Base class for all spectral_viz errors."""


class InvalidConfiguration(SpectralError, ValueError):
    """Bad window length, sample rate, window name or scale at construction."""


class InvalidInput(SpectralError, ValueError):
    """Sample block (or output buffer) does not match the configured shape."""


class AnalyzerClosedError(SpectralError, RuntimeError):
    """Analyzer was used after close()."""
