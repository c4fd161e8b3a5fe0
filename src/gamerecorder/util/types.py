"""Formatting utilities for progress and log output."""

from __future__ import annotations


def format_time(seconds: float) -> str:
    """Format seconds into a human-readable time string."""
    if seconds < 60:
        return f"{seconds:.1f}s"
    if seconds < 3600:
        return f"{int(seconds // 60)}m {int(seconds % 60)}s"
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    return f"{hours}h {minutes}m"


def format_progress(clock: float, total: float) -> str:
    """Playback progress, e.g. ``12.3 / 40.0``."""
    return f"{clock:.1f} / {total:.1f}"


def format_size(num_bytes: int) -> str:
    """Format a byte count with a binary unit."""
    if num_bytes < 1024:
        return f"{num_bytes} B"
    if num_bytes < 1024 * 1024:
        return f"{num_bytes / 1024:.1f} KiB"
    return f"{num_bytes / (1024 * 1024):.1f} MiB"
