"""Tests for recorder configuration loading and validation."""

from __future__ import annotations

import os

import pytest

from gamerecorder.loaders.recorder_config_loader import (
    RECORDING_SUFFIX,
    RecorderConfig,
    RecordingConfig,
    default_output_path,
    load_recorder_config,
)


class TestRecordingConfig:
    def test_defaults(self):
        cfg = RecordingConfig()
        assert cfg.keyframe_interval_sec == 0.5
        assert cfg.queue_capacity == 1000
        assert cfg.quantize_decimals == 2
        assert cfg.output_path.startswith(os.path.join("recordings", "game_"))
        assert cfg.output_path.endswith(RECORDING_SUFFIX)

    @pytest.mark.parametrize("kwargs", [
        {"keyframe_interval_sec": 0.0},
        {"keyframe_interval_sec": -1.0},
        {"queue_capacity": 0},
        {"quantize_decimals": -1},
    ])
    def test_invalid_values_rejected(self, kwargs):
        with pytest.raises(ValueError):
            RecordingConfig(**kwargs)

    def test_zero_decimals_allowed(self):
        assert RecordingConfig(quantize_decimals=0).quantize_decimals == 0

    def test_is_immutable(self):
        cfg = RecordingConfig(output_path="x.jsonl")
        with pytest.raises(AttributeError):
            cfg.queue_capacity = 5


class TestDefaultOutputPath:
    def test_timestamped_name(self):
        path = default_output_path("out", "demo", now=0.0)
        name = os.path.basename(path)
        assert os.path.dirname(path) == "out"
        assert name.startswith("demo_") and name.endswith(".jsonl")
        stamp = name[len("demo_"):-len(".jsonl")]
        date, clock = stamp.split("_")
        assert len(date) == 8 and len(clock) == 6


class TestLoadRecorderConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_recorder_config(tmp_path / "nope.yaml") == RecorderConfig()

    def test_partial_file_overrides(self, tmp_path):
        path = tmp_path / "recorder.yaml"
        path.write_text("keyframe_interval_sec: 0.25\nrecordings_dir: caps\nunknown_key: 1\n")
        cfg = load_recorder_config(path)
        assert cfg.keyframe_interval_sec == 0.25
        assert cfg.recordings_dir == "caps"
        assert cfg.queue_capacity == 1000

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "recorder.yaml"
        path.write_text("")
        assert load_recorder_config(path) == RecorderConfig()

    def test_session_config(self, tmp_path):
        cfg = RecorderConfig(keyframe_interval_sec=1.0, queue_capacity=8, quantize_decimals=3,
                             recordings_dir=str(tmp_path), file_prefix="run")
        session = cfg.session_config()
        assert session.keyframe_interval_sec == 1.0
        assert session.queue_capacity == 8
        assert session.quantize_decimals == 3
        assert os.path.dirname(session.output_path) == str(tmp_path)
        assert os.path.basename(session.output_path).startswith("run_")
        assert cfg.session_config("fixed.jsonl").output_path == "fixed.jsonl"

    def test_session_config_validates(self):
        with pytest.raises(ValueError):
            RecorderConfig(queue_capacity=0).session_config("x.jsonl")

    def test_shipped_config_matches_defaults(self):
        shipped = os.path.join(os.path.dirname(__file__), "..", "config", "recorder.yaml")
        assert load_recorder_config(shipped) == RecorderConfig()
