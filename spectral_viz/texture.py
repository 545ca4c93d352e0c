"""
RGBA texture row for a spectrum.

Each bin becomes one grayscale texel: floor(value * 255) in R, G and B,
alpha fully opaque. The buffer is allocated once and rewritten every frame,
ready to be uploaded as a width x 1 data texture.
"""

import numpy as np

from .errors import InvalidConfiguration, InvalidInput


class SpectrumTexture:
    """Reusable width x 1 RGBA8 texture fed from a normalized spectrum."""

    def __init__(self, width: int):
        """
        Args:
            width: Number of texels (normally the analyzer's spectrum_length)
        """
        if isinstance(width, bool) or not isinstance(width, (int, np.integer)) or width <= 0:
            raise InvalidConfiguration(f"Texture width must be a positive integer, got {width!r}")

        self.width = int(width)
        self._rgba = np.zeros((self.width, 4), dtype=np.uint8)
        self._rgba[:, 3] = 255
        self._scaled = np.zeros(self.width, dtype=np.float32)

    def update(self, spectrum: np.ndarray) -> np.ndarray:
        """
        Write a spectrum into the texture.

        Args:
            spectrum: 1-D array of `width` values, nominally in [0, 1]

        Returns:
            The (width, 4) uint8 RGBA buffer
        """
        spectrum = np.asarray(spectrum)
        if spectrum.ndim != 1 or spectrum.shape[0] != self.width:
            raise InvalidInput(
                f"Spectrum must have {self.width} values, got shape {spectrum.shape}"
            )

        np.multiply(spectrum, 255.0, out=self._scaled, casting="unsafe")
        np.nan_to_num(self._scaled, copy=False, nan=0.0, posinf=255.0, neginf=0.0)
        np.clip(self._scaled, 0.0, 255.0, out=self._scaled)
        np.floor(self._scaled, out=self._scaled)

        for channel in range(3):
            np.copyto(self._rgba[:, channel], self._scaled, casting="unsafe")
        return self._rgba

    def to_bytes(self) -> bytes:
        """Flattened RGBA bytes, row-major."""
        return self._rgba.tobytes()

    @property
    def rgba(self) -> np.ndarray:
        return self._rgba
