"""
Utility functions for the Kampfgericht scorer application.

This module contains common time helpers used throughout the application.
"""
import time


def fmt_mmss(seconds: int) -> str:
    """
    Format seconds as MM:SS string.

    Negative values are shown as 00:00.

    Example:
        >>> fmt_mmss(90)
        '01:30'
        >>> fmt_mmss(-5)
        '00:00'
    """
    seconds = max(0, int(seconds))
    m = seconds // 60
    s = seconds % 60
    return f"{m:02d}:{s:02d}"


def now_ts() -> float:
    """
    Get current timestamp in epoch seconds.

    Returns:
        Current time as floating point epoch seconds
    """
    return time.time()
