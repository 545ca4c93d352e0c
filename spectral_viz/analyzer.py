"""
Real-time spectral analyzer.

Converts one fixed-length block of time-domain samples per rendering tick
into a normalized magnitude spectrum ready to be used as a visual intensity.

Normalization policy:
- linear: magnitude * 2 / sum(window), clamped to [0, 1]. A full-scale sine
  centred on a bin reads 1.0.
- db: the linear value in dBFS mapped from [db_floor, 0] onto [0, 1] and
  clamped, so anything at or below db_floor reads 0.

The analyzer is not reentrant. Run one instance per thread/audio source.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .config import AnalyzerConfig
from .errors import AnalyzerClosedError, InvalidConfiguration, InvalidInput
from .fft_plan import Radix2Plan, is_power_of_two
from .windows import coherent_gain, get_window_coefficients

logger = logging.getLogger(__name__)


@dataclass
class SpectrumStats:
    """Summary of one spectrum frame."""

    minimum: float
    maximum: float
    peak_bin: int
    peak_frequency: float  # Hz

    def to_dict(self) -> dict:
        return {
            "min": self.minimum,
            "max": self.maximum,
            "peak_bin": self.peak_bin,
            "peak_hz": self.peak_frequency,
        }


def spectrum_stats(spectrum: np.ndarray, sample_rate: float, window_length: int) -> SpectrumStats:
    """
    Compute min/max and the loudest bin of a spectrum.

    Args:
        spectrum: Magnitude spectrum (window_length // 2 bins)
        sample_rate: Sample rate the spectrum was computed at
        window_length: Window length the spectrum was computed with

    Raises:
        InvalidInput: Empty spectrum
    """
    spectrum = np.asarray(spectrum)
    if spectrum.ndim != 1 or spectrum.size == 0:
        raise InvalidInput("Spectrum must be a non-empty 1-D array")

    peak_bin = int(np.argmax(spectrum))
    return SpectrumStats(
        minimum=float(np.min(spectrum)),
        maximum=float(np.max(spectrum)),
        peak_bin=peak_bin,
        peak_frequency=peak_bin * sample_rate / window_length,
    )


class SpectralAnalyzer:
    """
    Windowed radix-2 FFT magnitude analyzer with reusable buffers.

    All scratch memory is allocated in the constructor and owned by the
    instance; none of it is handed to callers. process() returns a new array
    per frame, process_into() writes into a caller-owned array without
    allocating.
    """

    SCALES = ("linear", "db")

    def __init__(
        self,
        window_length: int = 2048,
        sample_rate: float = 44100,
        window: str = "hann",
        scale: str = "linear",
        db_floor: float = -80.0,
    ):
        """
        Initialize the analyzer.

        Args:
            window_length: Samples per block, a power of two >= 2
            sample_rate: Sample rate of the incoming audio (Hz)
            window: Window function name (see windows.available_windows())
            scale: "linear" or "db" normalization
            db_floor: Level (dBFS, negative) mapped to 0 in db scale

        Raises:
            InvalidConfiguration: Any parameter is out of range
        """
        if isinstance(window_length, bool) or not isinstance(window_length, (int, np.integer)):
            raise InvalidConfiguration(f"window_length must be an integer, got {window_length!r}")
        window_length = int(window_length)
        if window_length < 2 or not is_power_of_two(window_length):
            raise InvalidConfiguration(
                f"window_length must be a power of two >= 2, got {window_length}"
            )

        try:
            sample_rate = float(sample_rate)
        except (TypeError, ValueError) as e:
            raise InvalidConfiguration(f"Invalid sample_rate: {sample_rate!r}") from e
        if not math.isfinite(sample_rate) or sample_rate <= 0:
            raise InvalidConfiguration(f"sample_rate must be positive, got {sample_rate}")

        if not isinstance(scale, str) or scale.lower() not in self.SCALES:
            raise InvalidConfiguration(f"scale must be one of {self.SCALES}, got {scale!r}")

        try:
            db_floor = float(db_floor)
        except (TypeError, ValueError) as e:
            raise InvalidConfiguration(f"Invalid db_floor: {db_floor!r}") from e
        if not math.isfinite(db_floor) or db_floor >= 0:
            raise InvalidConfiguration(f"db_floor must be negative, got {db_floor}")

        self.window_length = window_length
        self.sample_rate = sample_rate
        self.window_name = window.lower() if isinstance(window, str) else window
        self.scale = scale.lower()
        self.db_floor = db_floor

        # Fixed coefficients
        self._window = get_window_coefficients(window, window_length)
        self._linear_scale = 2.0 / coherent_gain(self._window)
        self._db_min_amplitude = 10.0 ** (db_floor / 20.0)
        self._db_slope = 20.0 / -db_floor
        self._plan: Optional[Radix2Plan] = Radix2Plan(window_length)

        # Scratch buffers (reused every call)
        half = window_length // 2
        self._windowed = np.zeros(window_length, dtype=np.float64)
        self._magnitude = np.zeros(half, dtype=np.float64)
        self._output = np.zeros(half, dtype=np.float32)

        self._frequencies = np.arange(half, dtype=np.float64) * (sample_rate / window_length)
        self._frequencies.flags.writeable = False

        self._frames_processed = 0
        self._closed = False

        logger.debug(
            f"SpectralAnalyzer initialized: window_length={window_length}, "
            f"sample_rate={sample_rate:g}Hz, window={self.window_name}, scale={self.scale}",
            extra={"window_length": window_length, "sample_rate": sample_rate},
        )

    @classmethod
    def from_config(cls, config: AnalyzerConfig) -> "SpectralAnalyzer":
        """Create an analyzer from an AnalyzerConfig."""
        return cls(
            window_length=config.window_length,
            sample_rate=config.sample_rate,
            window=config.window,
            scale=config.scale,
            db_floor=config.db_floor,
        )

    def process(self, samples) -> np.ndarray:
        """
        Analyze one block of samples.

        Args:
            samples: 1-D real array-like of exactly window_length samples,
                amplitude roughly in [-1, 1]

        Returns:
            New float32 array of window_length // 2 values in [0, 1]

        Raises:
            InvalidInput: Wrong length, shape or dtype, or non-finite samples
            AnalyzerClosedError: close() was already called
        """
        self._check_open()
        block = self._validate_block(samples)
        self._analyze(block, self._output)
        return self._output.copy()

    def process_into(self, samples, out: np.ndarray) -> np.ndarray:
        """
        Analyze one block of samples into a caller-owned array.

        Args:
            samples: Same as process()
            out: Writable float32 or float64 array of window_length // 2 values

        Returns:
            `out`
        """
        self._check_open()
        block = self._validate_block(samples)

        half = self.window_length // 2
        if not isinstance(out, np.ndarray) or out.ndim != 1 or out.shape[0] != half:
            raise InvalidInput(f"Output buffer must be a 1-D array of {half} values")
        if out.dtype not in (np.float32, np.float64):
            raise InvalidInput(f"Output buffer must be float32 or float64, got {out.dtype}")
        if not out.flags.writeable:
            raise InvalidInput("Output buffer is read-only")

        self._analyze(block, out)
        return out

    def _validate_block(self, samples) -> np.ndarray:
        """Check a sample block against the configured window."""
        try:
            block = np.asarray(samples)
        except (TypeError, ValueError) as e:
            raise InvalidInput(f"Samples could not be converted to an array: {e}") from e

        if block.ndim != 1:
            raise InvalidInput(f"Samples must be 1-D, got shape {block.shape}")
        if block.shape[0] != self.window_length:
            raise InvalidInput(
                f"Expected {self.window_length} samples, got {block.shape[0]}"
            )
        if block.dtype.kind not in "fiu":
            raise InvalidInput(f"Samples must be real numbers, got dtype {block.dtype}")
        return block

    def _analyze(self, block: np.ndarray, out: np.ndarray) -> None:
        """Window, transform, take magnitudes and normalize into `out`."""
        # max(|x|) is NaN or inf only if some sample is
        np.abs(block, out=self._windowed)
        if not np.isfinite(np.max(self._windowed)):
            raise InvalidInput("Samples contain non-finite values")

        np.multiply(block, self._window, out=self._windowed)

        half = self.window_length // 2
        magnitude = self._magnitude

        # Samples near the float64 limit can overflow inside the butterflies
        with np.errstate(over="ignore", invalid="ignore"):
            re, im = self._plan.execute(self._windowed)

            np.hypot(re[:half], im[:half], out=magnitude)
            np.multiply(magnitude, self._linear_scale, out=magnitude)

            if self.scale == "db":
                # dBFS mapped from [db_floor, 0] to [0, 1]
                np.maximum(magnitude, self._db_min_amplitude, out=magnitude)
                np.log10(magnitude, out=magnitude)
                np.multiply(magnitude, self._db_slope, out=magnitude)
                np.add(magnitude, 1.0, out=magnitude)

        # fmin maps an overflowed NaN bin to full scale
        np.fmin(magnitude, 1.0, out=magnitude)
        np.fmax(magnitude, 0.0, out=magnitude)
        np.copyto(out, magnitude, casting="same_kind")
        self._frames_processed += 1

    def bin_frequency(self, index: int) -> float:
        """Centre frequency (Hz) of a spectrum bin."""
        if not 0 <= index < self.spectrum_length:
            raise InvalidInput(
                f"Bin index must be in [0, {self.spectrum_length}), got {index}"
            )
        return index * self.sample_rate / self.window_length

    def stats(self, spectrum: np.ndarray) -> SpectrumStats:
        """Summary of a spectrum produced by this analyzer."""
        return spectrum_stats(spectrum, self.sample_rate, self.window_length)

    def close(self):
        """Release scratch buffers. Further process() calls raise."""
        if self._closed:
            return
        self._closed = True
        self._plan = None
        self._windowed = None
        self._magnitude = None
        logger.debug(f"SpectralAnalyzer closed after {self._frames_processed} frames")

    def _check_open(self):
        if self._closed:
            raise AnalyzerClosedError("SpectralAnalyzer has been closed")

    def __enter__(self) -> "SpectralAnalyzer":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __repr__(self) -> str:
        return (
            f"SpectralAnalyzer(window_length={self.window_length}, "
            f"sample_rate={self.sample_rate:g}, window={self.window_name!r}, "
            f"scale={self.scale!r})"
        )

    @property
    def spectrum_length(self) -> int:
        """Number of bins in each spectrum (window_length // 2)."""
        return self.window_length // 2

    @property
    def bin_width(self) -> float:
        """Frequency resolution in Hz (sample_rate / window_length)."""
        return self.sample_rate / self.window_length

    @property
    def frequencies(self) -> np.ndarray:
        """Read-only centre frequencies of every bin."""
        return self._frequencies

    @property
    def frames_processed(self) -> int:
        """Number of blocks analyzed successfully."""
        return self._frames_processed

    @property
    def closed(self) -> bool:
        return self._closed
