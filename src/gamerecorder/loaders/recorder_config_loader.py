"""Recorder configuration — loads tunable constants from config/recorder.yaml.

Two levels of configuration exist:

- ``RecorderConfig``: every application tunable, loaded once at startup.
- ``RecordingConfig``: the immutable per-session value handed to a
  ``RecordingSession``.  A fresh one is derived for every recording so
  each gets its own timestamped output file.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path

import yaml

log = logging.getLogger(__name__)

DEFAULT_RECORDER_CONFIG_PATH = "config/recorder.yaml"
DEFAULT_RECORDINGS_DIR = "recordings"
DEFAULT_FILE_PREFIX = "game"
RECORDING_SUFFIX = ".jsonl"


def default_output_path(
    recordings_dir: str = DEFAULT_RECORDINGS_DIR,
    prefix: str = DEFAULT_FILE_PREFIX,
    now: float | None = None,
) -> str:
    """Timestamped log path, e.g. ``recordings/game_20260101_120000.jsonl``."""
    stamp = time.strftime("%Y%m%d_%H%M%S", time.localtime(now))
    return os.path.join(recordings_dir, f"{prefix}_{stamp}{RECORDING_SUFFIX}")


@dataclass(frozen=True)
class RecordingConfig:
    """Fixed parameters of one recording session.

    Attributes:
        keyframe_interval_sec: Seconds between keyframes (> 0).
        output_path: Log file to write.
        queue_capacity: Maximum number of encoded lines waiting for the
            writer (> 0).  A full queue blocks the sampling tick.
        quantize_decimals: Fractional digits of every encoded number (>= 0).
    """

    keyframe_interval_sec: float = 0.5
    output_path: str = ""
    queue_capacity: int = 1000
    quantize_decimals: int = 2

    def __post_init__(self) -> None:
        if not self.keyframe_interval_sec > 0:
            raise ValueError(f"keyframe_interval_sec must be > 0, got {self.keyframe_interval_sec}")
        if self.queue_capacity <= 0:
            raise ValueError(f"queue_capacity must be > 0, got {self.queue_capacity}")
        if self.quantize_decimals < 0:
            raise ValueError(f"quantize_decimals must be >= 0, got {self.quantize_decimals}")
        if not self.output_path:
            object.__setattr__(self, "output_path", default_output_path())


@dataclass
class RecorderConfig:
    """All tunable recorder/replay constants.

    Loaded from ``config/recorder.yaml``.  Every field has a sensible
    default so the tool works even without the file.
    """

    # -- Recording ---------------------------------------------------
    keyframe_interval_sec: float = 0.5
    queue_capacity: int = 1000
    quantize_decimals: int = 2
    recordings_dir: str = DEFAULT_RECORDINGS_DIR
    file_prefix: str = DEFAULT_FILE_PREFIX

    # -- Background writer -------------------------------------------
    writer_poll_sec: float = 0.002
    writer_join_timeout_sec: float = 0.5

    # -- Simulation / window -----------------------------------------
    tick_hz: float = 60.0
    width: int = 800
    height: int = 600

    # -- Network -----------------------------------------------------
    rest_port: int = 8080

    def session_config(self, output_path: str | None = None) -> RecordingConfig:
        """Derive the immutable config for a new recording session."""
        return RecordingConfig(
            keyframe_interval_sec=self.keyframe_interval_sec,
            output_path=output_path or default_output_path(self.recordings_dir, self.file_prefix),
            queue_capacity=self.queue_capacity,
            quantize_decimals=self.quantize_decimals,
        )


def load_recorder_config(path: str | Path = DEFAULT_RECORDER_CONFIG_PATH) -> RecorderConfig:
    """Load recorder configuration from a YAML file.

    Missing keys fall back to dataclass defaults.  If the file does not
    exist, a warning is logged and pure defaults are returned.
    """
    p = Path(path)
    if not p.exists():
        log.warning("Recorder config not found at %s — using defaults", p)
        return RecorderConfig()

    with p.open() as f:
        raw = yaml.safe_load(f) or {}

    log.info("Loaded recorder config from %s (%d keys)", p, len(raw))

    return RecorderConfig(**{
        k: v for k, v in raw.items()
        if k in RecorderConfig.__dataclass_fields__
    })
