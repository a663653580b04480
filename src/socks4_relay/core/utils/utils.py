"""Formatting helpers for log lines and the CLI summary."""

from typing import Final

BYTES_PER_KB: Final = 1024
BYTE_UNITS: Final = ("B", "KB", "MB", "GB", "TB")


def format_bytes(bytes_: float) -> str:
    """Format a byte count with a binary unit, e.g. ``1.5 KB``."""
    value = float(bytes_)
    for unit in BYTE_UNITS[:-1]:
        if value < BYTES_PER_KB:
            return f"{value:.1f} {unit}"
        value /= BYTES_PER_KB
    return f"{value:.1f} {BYTE_UNITS[-1]}"


def format_duration(seconds: float) -> str:
    """Format seconds as ``H:MM:SS``."""
    minutes, secs = divmod(int(seconds), 60)
    hours, minutes = divmod(minutes, 60)
    return f"{hours}:{minutes:02d}:{secs:02d}"
