"""
Windowing functions for spectral analysis.

Windows are generated periodic (DFT-even) since they feed an FFT of the same
length rather than a filter design.
"""

from typing import List

import numpy as np
from scipy.signal import get_window

from .errors import InvalidConfiguration

# Public name -> scipy window name
WINDOW_NAMES = {
    "hann": "hann",
    "hamming": "hamming",
    "blackman": "blackman",
    "rectangular": "boxcar",
}


def available_windows() -> List[str]:
    """List supported window names."""
    return list(WINDOW_NAMES.keys())


def get_window_coefficients(name: str, length: int) -> np.ndarray:
    """
    Generate window coefficients.

    Args:
        name: One of available_windows() (case-insensitive)
        length: Number of coefficients

    Returns:
        float64 array of `length` coefficients

    Raises:
        InvalidConfiguration: Unknown window name or non-positive length
    """
    if not isinstance(name, str) or name.lower() not in WINDOW_NAMES:
        raise InvalidConfiguration(
            f"Unknown window {name!r}, expected one of {', '.join(available_windows())}"
        )
    if length <= 0:
        raise InvalidConfiguration(f"Window length must be positive, got {length}")

    coefficients = get_window(WINDOW_NAMES[name.lower()], length, fftbins=True)
    return np.ascontiguousarray(coefficients, dtype=np.float64)


def coherent_gain(window: np.ndarray) -> float:
    """Sum of the window coefficients (DC gain of the window)."""
    return float(np.sum(window))
