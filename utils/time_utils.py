"""Time helpers.

Keep all timestamps consistent and timezone-aware.
Python 3.12 deprecates naive UTC helpers like datetime.utcnow(); use this module instead.
"""

from __future__ import annotations

from datetime import date, datetime, timezone


def utcnow() -> datetime:
    """Return the current time as a timezone-aware datetime in UTC (+00:00)."""

    return datetime.now(timezone.utc)


def utcnow_sa_default() -> datetime:
    """SQLAlchemy-friendly default callable for UTC timestamps."""

    return utcnow()


def utc_today() -> date:
    """Current calendar day in UTC; used for "not in the future" checks."""

    return utcnow().date()


def now_epoch_s() -> int:
    return int(utcnow().timestamp())
