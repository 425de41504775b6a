"""
Helper functions for formatting data into human-readable strings.
"""

from datetime import datetime


def format_size(bytes_size: int) -> str:
    """Formats bytes into a human-readable size string (e.g., '145.3 KB')."""
    if bytes_size <= 0:
        return "0 B"
    size = float(bytes_size)
    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TB"


def format_timestamp(value: datetime) -> str:
    """Formats a record time in local time, e.g. '2024-03-01 14:02:11'."""
    return value.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def truncate(text: str | None, width: int = 60) -> str:
    """Shortens long titles and error messages for table cells."""
    if not text:
        return ""
    return text if len(text) <= width else f"{text[: width - 1]}…"
