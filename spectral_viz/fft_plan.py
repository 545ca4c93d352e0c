"""
Iterative radix-2 FFT with a reusable plan.

All tables (bit-reversal permutation, per-stage twiddles) and work arrays are
built once in the constructor. execute() only runs numpy ufuncs with `out=`
on views prepared ahead of time, so a plan can be driven once per rendering
tick without allocating new arrays.

Usage:
    plan = Radix2Plan(2048)
    re, im = plan.execute(windowed_samples)
"""

import logging
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from .errors import InvalidConfiguration

logger = logging.getLogger(__name__)


def is_power_of_two(value: int) -> bool:
    """Check if value is a positive power of two."""
    return value > 0 and (value & (value - 1)) == 0


def bit_reversal_permutation(size: int) -> np.ndarray:
    """Index table mapping each position to its bit-reversed position."""
    bits = size.bit_length() - 1
    indices = np.arange(size, dtype=np.intp)
    reversed_indices = np.zeros(size, dtype=np.intp)
    for bit in range(bits):
        reversed_indices |= ((indices >> bit) & 1) << (bits - 1 - bit)
    return reversed_indices


@dataclass
class _Stage:
    """Pre-built views for one butterfly stage."""

    half: int
    top_re: np.ndarray
    top_im: np.ndarray
    bottom_re: np.ndarray
    bottom_im: np.ndarray
    twiddle_re: np.ndarray
    twiddle_im: np.ndarray
    product_re: np.ndarray
    product_im: np.ndarray
    scratch: np.ndarray


class Radix2Plan:
    """
    Decimation-in-time radix-2 FFT for real input of a fixed power-of-two size.

    The plan owns its work arrays. The (re, im) pair returned by execute()
    are views of those arrays and are overwritten on the next call.
    """

    def __init__(self, size: int):
        """
        Build the plan.

        Args:
            size: Transform length, a power of two >= 2

        Raises:
            InvalidConfiguration: size is not a power of two >= 2
        """
        if isinstance(size, bool) or not isinstance(size, (int, np.integer)):
            raise InvalidConfiguration(f"FFT size must be an integer, got {size!r}")
        size = int(size)
        if size < 2 or not is_power_of_two(size):
            raise InvalidConfiguration(f"FFT size must be a power of two >= 2, got {size}")

        self.size = size
        self._bitrev = bit_reversal_permutation(size)

        # Work arrays (float64 for accuracy, output is cast by the caller)
        self._re = np.zeros(size, dtype=np.float64)
        self._im = np.zeros(size, dtype=np.float64)
        self._product_re = np.zeros(size // 2, dtype=np.float64)
        self._product_im = np.zeros(size // 2, dtype=np.float64)
        self._scratch = np.zeros(size // 2, dtype=np.float64)

        self._stages = self._build_stages()

        logger.debug(f"Radix2Plan ready: size={size}, stages={len(self._stages)}")

    def _build_stages(self) -> List[_Stage]:
        """Prepare twiddles and array views for every butterfly stage."""
        stages = []
        half = 1
        while half < self.size:
            blocks = self.size // (2 * half)

            # Shape (blocks, 2, half): [:, 0, :] is the top half of each block
            re_blocks = self._re.reshape(blocks, 2, half)
            im_blocks = self._im.reshape(blocks, 2, half)

            angles = -np.pi * np.arange(half, dtype=np.float64) / half

            stages.append(
                _Stage(
                    half=half,
                    top_re=re_blocks[:, 0, :],
                    top_im=im_blocks[:, 0, :],
                    bottom_re=re_blocks[:, 1, :],
                    bottom_im=im_blocks[:, 1, :],
                    twiddle_re=np.cos(angles),
                    twiddle_im=np.sin(angles),
                    product_re=self._product_re.reshape(blocks, half),
                    product_im=self._product_im.reshape(blocks, half),
                    scratch=self._scratch.reshape(blocks, half),
                )
            )
            half *= 2
        return stages

    @property
    def stages(self) -> int:
        """Number of butterfly stages (log2 of size)."""
        return len(self._stages)

    def execute(self, real_input: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        Transform one block of real samples.

        Args:
            real_input: 1-D array of exactly `size` samples. float64 input
                avoids a conversion copy.

        Returns:
            Tuple of (real, imaginary) views of the full complex spectrum
        """
        if real_input.dtype != np.float64:
            real_input = np.asarray(real_input, dtype=np.float64)

        # Bit-reversed load, imaginary part starts at zero
        np.take(real_input, self._bitrev, out=self._re, mode="clip")
        self._im.fill(0.0)

        for stage in self._stages:
            wr = stage.twiddle_re
            wi = stage.twiddle_im
            pr = stage.product_re
            pi = stage.product_im
            tmp = stage.scratch

            # product = bottom * twiddle
            np.multiply(stage.bottom_re, wr, out=pr)
            np.multiply(stage.bottom_im, wi, out=tmp)
            np.subtract(pr, tmp, out=pr)
            np.multiply(stage.bottom_re, wi, out=pi)
            np.multiply(stage.bottom_im, wr, out=tmp)
            np.add(pi, tmp, out=pi)

            # bottom = top - product, then top = top + product
            np.subtract(stage.top_re, pr, out=stage.bottom_re)
            np.add(stage.top_re, pr, out=stage.top_re)
            np.subtract(stage.top_im, pi, out=stage.bottom_im)
            np.add(stage.top_im, pi, out=stage.top_im)

        return self._re, self._im
