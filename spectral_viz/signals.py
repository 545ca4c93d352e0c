"""
Synthetic audio for demos and tests.

Generates deterministic test tones and noise, and slices long recordings into
analysis frames the way a capture loop would hand them over tick by tick.
"""

from typing import Iterator, Optional

import numpy as np

from .errors import InvalidConfiguration


def sine_wave(
    frequency: float,
    sample_rate: float,
    length: int,
    amplitude: float = 1.0,
    phase: float = 0.0,
) -> np.ndarray:
    """
    Generate a pure tone.

    Args:
        frequency: Tone frequency in Hz
        sample_rate: Samples per second
        length: Number of samples
        amplitude: Peak amplitude
        phase: Starting phase in radians

    Returns:
        float32 array of `length` samples
    """
    if sample_rate <= 0:
        raise InvalidConfiguration(f"sample_rate must be positive, got {sample_rate}")
    t = np.arange(length, dtype=np.float64) / sample_rate
    return (amplitude * np.sin(2 * np.pi * frequency * t + phase)).astype(np.float32)


def white_noise(length: int, amplitude: float = 1.0, seed: Optional[int] = None) -> np.ndarray:
    """Uniform white noise in [-amplitude, amplitude] (seeded for repeatability)."""
    rng = np.random.default_rng(seed)
    return (amplitude * rng.uniform(-1.0, 1.0, length)).astype(np.float32)


def iter_frames(
    samples: np.ndarray, frame_length: int, hop_length: Optional[int] = None
) -> Iterator[np.ndarray]:
    """
    Slice a signal into full analysis frames.

    A trailing partial frame is dropped rather than padded.

    Args:
        samples: 1-D signal
        frame_length: Samples per frame
        hop_length: Samples between frame starts (default: frame_length)
    """
    if hop_length is None:
        hop_length = frame_length
    if frame_length <= 0 or hop_length <= 0:
        raise InvalidConfiguration("frame_length and hop_length must be positive")

    for start in range(0, len(samples) - frame_length + 1, hop_length):
        yield samples[start : start + frame_length]
