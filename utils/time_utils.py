"""
utils/time_utils.py

Purpose: Time and expiry helpers

- Session idle checks
- File age checks for the document sweep
"""

import time
from datetime import datetime, timedelta, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def is_session_expired(last_interaction: Optional[datetime], timeout_minutes: int = 30,
                       now: Optional[datetime] = None) -> bool:
    """
    Checks if a session has expired based on last interaction time.
    """
    if not last_interaction:
        return True

    expiry_time = last_interaction + timedelta(minutes=timeout_minutes)
    return (now or utcnow()) > expiry_time


def is_older_than(mtime: float, max_age_seconds: float, now: Optional[float] = None) -> bool:
    """
    Checks if a file modification time (epoch seconds) is older than max_age_seconds.
    """
    return (now if now is not None else time.time()) - mtime > max_age_seconds
