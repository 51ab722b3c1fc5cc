"""
Calendar bucketing of snapshot timestamps.

Every frequency maps a timestamp to the period it belongs to:

    frequently  2026-01-25 14:15   (minute floored to the interval)
    hourly      2026-01-25 14
    daily       2026-01-25
    weekly      2026-W04           (ISO-8601 week and week-year)
    monthly     2026-01
    yearly      2026

Unknown frequencies fall back to the full timestamp so every snapshot is
its own period. All keys are computed in UTC.
"""

from datetime import datetime, timezone
from typing import Optional, Union

from zfs_snapshot_operator.models.models import Frequency

DEFAULT_INTERVAL_MINUTES = 15


def to_utc(t: datetime) -> datetime:
    """Return ``t`` in UTC; naive datetimes are taken to be UTC already."""
    if t.tzinfo is None:
        return t.replace(tzinfo=timezone.utc)
    return t.astimezone(timezone.utc)


def _as_frequency(frequency: Union[Frequency, str, None]) -> Optional[Frequency]:
    if isinstance(frequency, Frequency):
        return frequency
    return Frequency.from_label(frequency)


def time_period_key(t: datetime, frequency: Union[Frequency, str, None],
                    interval_minutes: int = DEFAULT_INTERVAL_MINUTES) -> str:
    """Return the canonical period key of ``t`` for ``frequency``."""
    t = to_utc(t)
    freq = _as_frequency(frequency)

    if freq is Frequency.FREQUENTLY:
        minute = (t.minute // interval_minutes) * interval_minutes
        return f"{t:%Y-%m-%d %H}:{minute:02d}"
    if freq is Frequency.HOURLY:
        return t.strftime("%Y-%m-%d %H")
    if freq is Frequency.DAILY:
        return t.strftime("%Y-%m-%d")
    if freq is Frequency.WEEKLY:
        iso_year, iso_week, _ = t.isocalendar()
        return f"{iso_year}-W{iso_week:02d}"
    if freq is Frequency.MONTHLY:
        return t.strftime("%Y-%m")
    if freq is Frequency.YEARLY:
        return f"{t.year:04d}"
    return t.strftime("%Y-%m-%d %H:%M:%S")


def same_period(a: datetime, b: datetime, frequency: Union[Frequency, str, None],
                interval_minutes: int = DEFAULT_INTERVAL_MINUTES) -> bool:
    return time_period_key(a, frequency, interval_minutes) == time_period_key(b, frequency, interval_minutes)
