"""
Clock helpers for rate windows.
"""

from datetime import datetime, timedelta, timezone


def utcnow():
    return datetime.now(timezone.utc)


def window_start(now, minutes):
    """Start of the trailing window of ``minutes`` ending at ``now``"""
    return now - timedelta(minutes=minutes)
