"""
spectral-viz
Real-time spectral analysis for audio visualization.
"""

from .analyzer import SpectralAnalyzer, SpectrumStats, spectrum_stats
from .config import AnalyzerConfig, get_preset, list_presets, load_config, save_config
from .errors import AnalyzerClosedError, InvalidConfiguration, InvalidInput, SpectralError
from .fft_plan import Radix2Plan
from .texture import SpectrumTexture

__version__ = "0.1.0"

__all__ = [
    'SpectralAnalyzer',
    'SpectrumStats',
    'spectrum_stats',
    'AnalyzerConfig',
    'get_preset',
    'list_presets',
    'load_config',
    'save_config',
    'SpectralError',
    'InvalidConfiguration',
    'InvalidInput',
    'AnalyzerClosedError',
    'Radix2Plan',
    'SpectrumTexture',
]
