"""
Display formatting helpers shared by replies, exports and the terminal UI.
"""

from datetime import datetime


def format_time(value: datetime) -> str:
    """Clock time (HH:MM) in local time."""
    if value.tzinfo is not None:
        value = value.astimezone()
    return value.strftime("%H:%M")


def format_datetime(value: datetime) -> str:
    """Date and time in local time, e.g. ``2024-05-01 14:03:22``."""
    if value.tzinfo is not None:
        value = value.astimezone()
    return value.strftime("%Y-%m-%d %H:%M:%S")
