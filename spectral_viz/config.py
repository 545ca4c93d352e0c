"""
Spectral analyzer configuration.

Provides:
- Type-safe configuration dataclass
- Presets for common latency/resolution trade-offs
- Loading from environment variables and JSON files
"""

import json
import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, List, Optional

from .errors import InvalidConfiguration

logger = logging.getLogger(__name__)


@dataclass
class AnalyzerConfig:
    """Spectral analyzer configuration."""

    # Samples per analysis block (power of two)
    window_length: int = 2048

    # Sample rate of the incoming audio (Hz)
    sample_rate: int = 44100

    # Window function applied before the FFT
    window: str = "hann"

    # Output normalization: "linear" or "db"
    scale: str = "linear"

    # Level mapped to 0 in db scale (dBFS)
    db_floor: float = -80.0

    @property
    def bin_width(self) -> float:
        """Frequency resolution in Hz."""
        return self.sample_rate / self.window_length

    @property
    def latency_ms(self) -> float:
        """Duration of one analysis window in milliseconds."""
        return self.window_length / self.sample_rate * 1000

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "AnalyzerConfig":
        """Create from dictionary, ignoring unknown keys."""
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})

    @classmethod
    def from_env(cls, base: Optional["AnalyzerConfig"] = None) -> "AnalyzerConfig":
        """
        Load configuration from environment variables.

        Unset variables keep the value from `base` (or the defaults).

        Raises:
            InvalidConfiguration: A numeric variable does not parse
        """
        config = base if base is not None else cls()
        return cls(
            window_length=_env_number("SPECTRAL_WINDOW_LENGTH", config.window_length, int),
            sample_rate=_env_number("SPECTRAL_SAMPLE_RATE", config.sample_rate, int),
            window=os.environ.get("SPECTRAL_WINDOW", config.window),
            scale=os.environ.get("SPECTRAL_SCALE", config.scale),
            db_floor=_env_number("SPECTRAL_DB_FLOOR", config.db_floor, float),
        )


def _env_number(name: str, default, cast):
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    try:
        return cast(value)
    except ValueError as e:
        raise InvalidConfiguration(f"Invalid value for {name}: {value!r}") from e


# Pre-tuned presets
PRESETS: Dict[str, AnalyzerConfig] = {
    "default": AnalyzerConfig(),
    "low_latency": AnalyzerConfig(
        window_length=1024,  # 23ms window at 44.1kHz
    ),
    "high_resolution": AnalyzerConfig(
        window_length=4096,  # ~10.8Hz bins, 93ms window
        window="blackman",  # Lower sidelobes for close tones
    ),
    "visual": AnalyzerConfig(
        scale="db",  # Quiet content still shows up on screen
        db_floor=-80.0,
    ),
}


def get_preset(name: str) -> AnalyzerConfig:
    """Get a preset by name, returns 'default' if not found."""
    preset = PRESETS.get(name.lower())
    if preset is None:
        logger.warning(f"Unknown preset '{name}', using default")
        preset = PRESETS["default"]
    # Hand out a copy so callers can't mutate the shared preset
    return AnalyzerConfig.from_dict(preset.to_dict())


def list_presets() -> List[str]:
    """List available preset names."""
    return list(PRESETS.keys())


# Default config file location
DEFAULT_CONFIG_PATH = Path.home() / ".config" / "spectral-viz" / "config.json"


def load_config(path: Optional[Path] = None) -> AnalyzerConfig:
    """
    Load configuration from a JSON file or return defaults.

    Raises:
        InvalidConfiguration: File exists but cannot be read or is not a JSON object
    """
    if path is None:
        path = DEFAULT_CONFIG_PATH
    path = Path(path)

    if not path.exists():
        logger.debug(f"No config at {path}, using defaults")
        return AnalyzerConfig()

    try:
        with open(path) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise InvalidConfiguration(f"Config file {path} is not valid JSON: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise InvalidConfiguration(f"Could not read config file {path}: {e}") from e

    # Accept both a bare config and {"analyzer": {...}}
    if isinstance(data, dict):
        data = data.get("analyzer", data)
    if not isinstance(data, dict):
        raise InvalidConfiguration(f"Config file {path} must contain a JSON object")

    return AnalyzerConfig.from_dict(data)


def save_config(config: AnalyzerConfig, path: Optional[Path] = None) -> None:
    """
    Save configuration to a JSON file.

    Raises:
        InvalidConfiguration: File or its parent directory cannot be written
    """
    if path is None:
        path = DEFAULT_CONFIG_PATH
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump({"analyzer": config.to_dict()}, f, indent=2)
    except OSError as e:
        raise InvalidConfiguration(f"Could not write config file {path}: {e}") from e
    logger.info(f"Saved config to {path}")
