"""Tests for window coefficient generation."""

import numpy as np
import pytest

from spectral_viz.errors import InvalidConfiguration
from spectral_viz.windows import available_windows, coherent_gain, get_window_coefficients


class TestWindows:
    def test_available(self):
        assert set(available_windows()) == {"hann", "hamming", "blackman", "rectangular"}

    def test_hann_is_periodic(self):
        """DFT-even Hann: starts at 0, peaks at N/2, no trailing zero."""
        window = get_window_coefficients("hann", 8)
        assert window[0] == pytest.approx(0.0)
        assert window[4] == pytest.approx(1.0)
        assert window[-1] > 0.0
        for k in range(1, 8):
            assert window[k] == pytest.approx(window[8 - k])

    def test_rectangular(self):
        assert np.array_equal(get_window_coefficients("rectangular", 16), np.ones(16))

    def test_case_insensitive(self):
        assert np.array_equal(
            get_window_coefficients("HANN", 32), get_window_coefficients("hann", 32)
        )

    @pytest.mark.parametrize("name", available_windows())
    def test_length_and_dtype(self, name):
        window = get_window_coefficients(name, 2048)
        assert window.shape == (2048,)
        assert window.dtype == np.float64

    def test_unknown_window(self):
        with pytest.raises(InvalidConfiguration):
            get_window_coefficients("kaiser", 64)

    def test_non_positive_length(self):
        with pytest.raises(InvalidConfiguration):
            get_window_coefficients("hann", 0)

    def test_coherent_gain(self):
        """Periodic Hann sums to exactly N/2."""
        assert coherent_gain(get_window_coefficients("hann", 1024)) == pytest.approx(512.0)
        assert coherent_gain(get_window_coefficients("rectangular", 64)) == pytest.approx(64.0)
