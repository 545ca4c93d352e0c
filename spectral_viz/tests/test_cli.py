"""Tests for the spectral-viz command line interface."""

import json

import numpy as np
import pytest
from scipy.io import wavfile

from spectral_viz.cli import main, read_wav_mono
from spectral_viz.config import load_config
from spectral_viz.errors import InvalidInput


def run_json(capsys, argv):
    """Run the CLI with --json and return (exit code, parsed frames)."""
    code = main(argv + ["--json"])
    out = capsys.readouterr().out
    return code, json.loads(out) if code == 0 else None


@pytest.fixture
def tone_wav(tmp_path):
    """Half a second of 1kHz int16 stereo at 22.05kHz."""
    sample_rate = 22050
    t = np.arange(sample_rate // 2) / sample_rate
    mono = (0.5 * np.sin(2 * np.pi * 1000.0 * t) * 32767).astype(np.int16)
    path = tmp_path / "tone.wav"
    wavfile.write(str(path), sample_rate, np.column_stack([mono, mono]))
    return path


class TestSineSource:
    """Tests for the built-in test tone."""

    def test_default_run(self, capsys):
        assert main([]) == 0
        out = capsys.readouterr().out
        assert "window_length=2048" in out
        assert out.count("peak bin") == 8

    def test_json_frames(self, capsys):
        code, frames = run_json(capsys, ["--frames", "3"])
        assert code == 0
        assert [f["frame"] for f in frames] == [0, 1, 2]
        for frame in frames:
            assert abs(frame["peak_hz"] - 440.0) <= 44100 / 2048
            assert 0.0 <= frame["min"] <= frame["max"] <= 1.0

    def test_custom_tone_and_window(self, capsys):
        code, frames = run_json(
            capsys,
            ["--sine", "5000", "--window-length", "1024", "--sample-rate", "48000",
             "--window", "blackman", "--frames", "2", "--hop", "512"],
        )
        assert code == 0
        assert len(frames) == 2
        assert abs(frames[0]["peak_hz"] - 5000.0) <= 48000 / 1024

    def test_noise_is_repeatable_with_seed(self, capsys):
        argv = ["--noise", "0.2", "--seed", "9", "--frames", "2"]
        _, first = run_json(capsys, argv)
        _, second = run_json(capsys, argv)
        assert first == second

    def test_db_scale(self, capsys):
        code, frames = run_json(capsys, ["--scale", "db", "--frames", "1"])
        assert code == 0
        assert frames[0]["max"] <= 1.0

    def test_environment_settings(self, capsys, monkeypatch):
        monkeypatch.setenv("SPECTRAL_WINDOW_LENGTH", "512")
        assert main([]) == 0
        assert "window_length=512" in capsys.readouterr().out


class TestWavSource:
    """Tests for WAV file analysis."""

    def test_analyze_wav(self, capsys, tone_wav):
        code, frames = run_json(capsys, ["--wav", str(tone_wav), "--window-length", "1024"])
        assert code == 0
        assert len(frames) == 10  # 11025 samples, partial frame dropped
        for frame in frames:
            assert abs(frame["peak_hz"] - 1000.0) <= 22050 / 1024

    def test_read_wav_mono(self, tone_wav):
        sample_rate, samples = read_wav_mono(str(tone_wav))
        assert sample_rate == 22050
        assert samples.ndim == 1
        assert samples.dtype == np.float32
        assert np.max(np.abs(samples)) == pytest.approx(0.5, abs=1e-3)

    def test_missing_wav(self, tmp_path):
        with pytest.raises(InvalidInput):
            read_wav_mono(str(tmp_path / "nope.wav"))
        assert main(["--wav", str(tmp_path / "nope.wav")]) == 1

    def test_wav_shorter_than_window(self, tmp_path):
        path = tmp_path / "short.wav"
        wavfile.write(str(path), 44100, np.zeros(100, dtype=np.int16))
        assert main(["--wav", str(path)]) == 1


class TestOptions:
    """Tests for configuration and output options."""

    def test_invalid_window_length(self, capsys):
        assert main(["--window-length", "3000"]) == 1
        assert "power of two" in capsys.readouterr().err

    def test_list_presets(self, capsys):
        assert main(["--list-presets"]) == 0
        out = capsys.readouterr().out
        for name in ("default", "low_latency", "high_resolution", "visual"):
            assert name in out

    def test_preset(self, capsys):
        assert main(["--preset", "low_latency", "--frames", "1"]) == 0
        assert "window_length=1024" in capsys.readouterr().out

    def test_config_file_and_save(self, capsys, tmp_path):
        saved = tmp_path / "saved.json"
        assert main(["--window-length", "256", "--scale", "db", "--save-config", str(saved),
                     "--frames", "1"]) == 0
        config = load_config(saved)
        assert config.window_length == 256
        assert config.scale == "db"

        assert main(["--config", str(saved), "--frames", "1"]) == 0
        assert "window_length=256" in capsys.readouterr().out

    def test_texture_output(self, tmp_path):
        path = tmp_path / "texture.rgba"
        assert main(["--window-length", "512", "--frames", "1", "--texture", str(path)]) == 0
        data = path.read_bytes()
        assert len(data) == 256 * 4
        assert data[3] == 255

    def test_usage_error(self):
        with pytest.raises(SystemExit) as exc_info:
            main(["--frames", "0"])
        assert exc_info.value.code == 2

    def test_sine_and_wav_are_exclusive(self, tone_wav):
        with pytest.raises(SystemExit):
            main(["--sine", "100", "--wav", str(tone_wav)])

    def test_preset_and_config_are_exclusive(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"window_length": 256}))
        with pytest.raises(SystemExit) as exc_info:
            main(["--preset", "visual", "--config", str(path)])
        assert exc_info.value.code == 2


class TestFileErrors:
    """Unreadable or unwritable paths fail with exit code 1, not a traceback."""

    def test_config_is_a_directory(self, capsys, tmp_path):
        assert main(["--config", str(tmp_path), "--frames", "1"]) == 1
        assert "Could not read config file" in capsys.readouterr().err

    def test_config_not_utf8(self, capsys, tmp_path):
        path = tmp_path / "config.json"
        path.write_bytes(b"\xff\xfe\xfa")
        assert main(["--config", str(path), "--frames", "1"]) == 1

    def test_save_config_to_directory(self, capsys, tmp_path):
        assert main(["--save-config", str(tmp_path), "--frames", "1"]) == 1
        assert "Could not write config file" in capsys.readouterr().err

    def test_texture_to_directory(self, capsys, tmp_path):
        assert main(["--window-length", "256", "--frames", "1", "--texture", str(tmp_path)]) == 1
        err = capsys.readouterr().err
        assert "Could not write texture" in err
        assert "Traceback" not in err


class TestLogging:
    """Structured log fields emitted during a run."""

    def test_json_records_carry_context(self, capsys, monkeypatch):
        monkeypatch.setenv("SPECTRAL_VIZ_ENV", "production")

        assert main(["--window-length", "256", "--sine", "1000", "--frames", "2", "-v"]) == 0

        records = [json.loads(line) for line in capsys.readouterr().err.splitlines() if line]
        sources = [r["source"] for r in records if "source" in r]
        frames = [r["frame"] for r in records if "frame" in r]
        created = [r for r in records if "window_length" in r]

        assert sources == ["sine:1000Hz"]
        assert frames == [0, 1]
        assert created[0]["window_length"] == 256
        assert created[0]["sample_rate"] == 44100
