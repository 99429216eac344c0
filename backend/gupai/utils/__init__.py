"""Utility helpers."""

from .formatting import format_time, format_datetime

__all__ = ['format_time', 'format_datetime']
