"""
spectral-viz CLI - run the spectral analyzer over a test tone or WAV file.

Feeds the analyzer one window per tick, exactly like a render loop would,
and reports the loudest bin and min/max of every frame.

Entry point:
    spectral-viz
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import numpy as np
from scipy.io import wavfile

from .analyzer import SpectralAnalyzer
from .config import AnalyzerConfig, PRESETS, get_preset, list_presets, load_config, save_config
from .errors import InvalidConfiguration, InvalidInput, SpectralError
from .logging_config import configure_logging
from .signals import iter_frames, sine_wave, white_noise
from .texture import SpectrumTexture
from .windows import available_windows

logger = logging.getLogger(__name__)


def validate_positive_int(value: str) -> int:
    """Validate positive integer."""
    try:
        num = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid integer: {value}")

    if num <= 0:
        raise argparse.ArgumentTypeError(f"Value must be positive, got: {num}")
    return num


def validate_non_negative_float(value: str) -> float:
    """Validate non-negative float."""
    try:
        num = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid number: {value}")

    if not num >= 0:
        raise argparse.ArgumentTypeError(f"Value must be non-negative, got: {value}")
    return num


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spectral-viz",
        description="spectral-viz - Real-time magnitude spectrum analysis",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  spectral-viz                              # 440Hz test tone, 8 frames
  spectral-viz --sine 1000 --noise 0.1      # Tone plus white noise
  spectral-viz --wav song.wav --json        # Analyze a recording
  spectral-viz --preset visual --scale db   # dB scaled output
  spectral-viz --list-presets               # Show presets and exit
        """,
    )

    # Signal source
    source_group = parser.add_argument_group("Signal Source")
    source = source_group.add_mutually_exclusive_group()
    source.add_argument(
        "--sine", type=float, default=440.0, help="Test tone frequency in Hz (default: 440)"
    )
    source.add_argument("--wav", type=str, default=None, help="WAV file to analyze")
    source_group.add_argument(
        "--amplitude",
        type=validate_non_negative_float,
        default=0.8,
        help="Test tone amplitude (default: 0.8)",
    )
    source_group.add_argument(
        "--noise",
        type=validate_non_negative_float,
        default=0.0,
        help="White noise amplitude mixed into the test tone (default: 0)",
    )
    source_group.add_argument(
        "--seed", type=int, default=None, help="Noise seed for repeatable output"
    )
    source_group.add_argument(
        "--frames",
        type=validate_positive_int,
        default=8,
        help="Number of test tone frames to analyze (default: 8)",
    )

    # Analyzer settings
    analysis_group = parser.add_argument_group("Analyzer")
    base_settings = analysis_group.add_mutually_exclusive_group()
    base_settings.add_argument(
        "--preset",
        type=str,
        default=None,
        choices=list_presets(),
        help="Start from a named preset",
    )
    base_settings.add_argument(
        "--config", type=str, default=None, help="Load settings from a JSON config file"
    )
    analysis_group.add_argument(
        "--window-length", type=int, default=None, help="Samples per window (power of two)"
    )
    analysis_group.add_argument(
        "--sample-rate",
        type=validate_positive_int,
        default=None,
        help="Sample rate for the test tone (WAV files use their own)",
    )
    analysis_group.add_argument(
        "--window", type=str, default=None, choices=available_windows(), help="Window function"
    )
    analysis_group.add_argument(
        "--scale", type=str, default=None, choices=SpectralAnalyzer.SCALES, help="Normalization"
    )
    analysis_group.add_argument(
        "--db-floor", type=float, default=None, help="dBFS level mapped to 0 in db scale"
    )
    analysis_group.add_argument(
        "--hop", type=validate_positive_int, default=None, help="Samples between frames"
    )

    # Output
    output_group = parser.add_argument_group("Output")
    output_group.add_argument("--json", action="store_true", help="Print frames as JSON")
    output_group.add_argument(
        "--texture", type=str, default=None, help="Write the last frame's RGBA texture row here"
    )
    output_group.add_argument(
        "--save-config", type=str, default=None, help="Save the effective settings and continue"
    )
    output_group.add_argument(
        "--list-presets", action="store_true", help="List presets and exit"
    )
    output_group.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    return parser


def resolve_config(args: argparse.Namespace) -> AnalyzerConfig:
    """Preset or config file, then environment, then command-line flags."""
    if args.config:
        config = load_config(Path(args.config))
    elif args.preset:
        config = get_preset(args.preset)
    else:
        config = AnalyzerConfig()

    config = AnalyzerConfig.from_env(config)

    overrides = {
        "window_length": args.window_length,
        "sample_rate": args.sample_rate,
        "window": args.window,
        "scale": args.scale,
        "db_floor": args.db_floor,
    }
    for key, value in overrides.items():
        if value is not None:
            setattr(config, key, value)
    return config


def read_wav_mono(path: str) -> Tuple[int, np.ndarray]:
    """
    Read a WAV file as mono float32 in [-1, 1].

    Raises:
        InvalidInput: File missing or not a readable WAV
    """
    try:
        sample_rate, data = wavfile.read(path)
    except (OSError, ValueError) as e:
        raise InvalidInput(f"Could not read WAV file {path}: {e}") from e

    if data.dtype == np.uint8:
        samples = (data.astype(np.float32) - 128.0) / 128.0
    elif data.dtype.kind == "i":
        samples = data.astype(np.float32) / float(np.iinfo(data.dtype).max + 1)
    else:
        samples = data.astype(np.float32)

    # Convert to mono by averaging channels
    if samples.ndim > 1:
        samples = np.mean(samples, axis=1, dtype=np.float32)

    return int(sample_rate), samples


def analyze_frames(
    analyzer: SpectralAnalyzer,
    samples: np.ndarray,
    hop_length: int,
    texture: Optional[SpectrumTexture] = None,
) -> List[dict]:
    """Run the analyzer over every full frame and collect per-frame stats."""
    results = []
    for index, frame in enumerate(iter_frames(samples, analyzer.window_length, hop_length)):
        spectrum = analyzer.process(frame)
        stats = analyzer.stats(spectrum)
        logger.debug(
            f"Frame {index}: peak {stats.peak_frequency:.1f}Hz max={stats.maximum:.2f}",
            extra={"frame": index},
        )
        if texture is not None:
            texture.update(spectrum)
        results.append({"frame": index, **stats.to_dict()})
    return results


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        Process exit code (0 on success, 1 on analysis errors)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        level=logging.DEBUG if args.verbose else logging.WARNING, stream=sys.stderr
    )

    if args.list_presets:
        for name in list_presets():
            preset = PRESETS[name]
            print(
                f"{name:16s} window_length={preset.window_length:<5d} "
                f"window={preset.window:<12s} scale={preset.scale}"
            )
        return 0

    try:
        config = resolve_config(args)

        if args.wav:
            sample_rate, samples = read_wav_mono(args.wav)
            if sample_rate != config.sample_rate:
                logger.info(f"Using WAV sample rate {sample_rate}Hz")
            config.sample_rate = sample_rate
            source = args.wav
        else:
            samples = None
            source = f"sine:{args.sine:g}Hz"
        logger.info(f"Analyzing {source}", extra={"source": source})

        if args.save_config:
            save_config(config, Path(args.save_config))

        analyzer = SpectralAnalyzer.from_config(config)
        hop_length = args.hop or analyzer.window_length

        if samples is None:
            length = analyzer.window_length + (args.frames - 1) * hop_length
            samples = sine_wave(args.sine, config.sample_rate, length, amplitude=args.amplitude)
            if args.noise > 0:
                samples = samples + white_noise(length, amplitude=args.noise, seed=args.seed)

        if len(samples) < analyzer.window_length:
            raise InvalidInput(
                f"Signal has {len(samples)} samples, need at least {analyzer.window_length}"
            )

        texture = SpectrumTexture(analyzer.spectrum_length) if args.texture else None
        with analyzer:
            results = analyze_frames(analyzer, samples, hop_length, texture)

        if texture is not None:
            try:
                Path(args.texture).write_bytes(texture.to_bytes())
            except OSError as e:
                raise InvalidConfiguration(f"Could not write texture to {args.texture}: {e}") from e
            logger.info(f"Wrote {texture.width}x1 RGBA texture to {args.texture}")

    except SpectralError as e:
        logger.error(str(e))
        return 1

    if args.json:
        print(json.dumps(results, indent=2))
    else:
        print(
            f"window_length={analyzer.window_length} sample_rate={analyzer.sample_rate:g}Hz "
            f"bin_width={analyzer.bin_width:.2f}Hz window={analyzer.window_name} "
            f"scale={analyzer.scale}"
        )
        for result in results:
            print(
                f"frame {result['frame']:4d}  peak bin {result['peak_bin']:5d} "
                f"({result['peak_hz']:8.1f} Hz)  Min={result['min']:.2f}, Max={result['max']:.2f}"
            )

    return 0


if __name__ == "__main__":
    sys.exit(main())
