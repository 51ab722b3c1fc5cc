"""Retention window and freshness rules per snapshot frequency."""

from datetime import datetime, timedelta
from typing import Dict, Optional

from zfs_snapshot_operator.models.models import Frequency, Snapshot
from .period import DEFAULT_INTERVAL_MINUTES, same_period, time_period_key

# Months and years are approximated as 4 and 52 weeks. Bucketing stays
# calendar-exact; only the edge of the retention window drifts.
PERIOD_LENGTHS = {
    Frequency.HOURLY: timedelta(hours=1),
    Frequency.DAILY: timedelta(days=1),
    Frequency.WEEKLY: timedelta(weeks=1),
    Frequency.MONTHLY: timedelta(weeks=4),
    Frequency.YEARLY: timedelta(weeks=52),
}


class RetentionPolicy:
    """Computes retention cutoffs and freshness boundaries from per-frequency counts."""

    def __init__(self, max_counts: Dict[Frequency, int],
                 interval_minutes: int = DEFAULT_INTERVAL_MINUTES):
        for frequency, count in max_counts.items():
            if count < 0:
                raise ValueError(f"Retention count for {frequency.value} must not be negative, got {count}")
        self.max_counts = dict(max_counts)
        self.interval_minutes = interval_minutes

    @classmethod
    def from_config(cls, config) -> "RetentionPolicy":
        return cls(config.retention, config.frequent_interval_minutes)

    def max_count(self, frequency: Frequency) -> int:
        if frequency not in self.max_counts:
            raise ValueError(f"No retention count configured for {frequency.value}")
        return self.max_counts[frequency]

    def is_disabled(self, frequency: Frequency) -> bool:
        """Only an explicit zero count retires a frequency: nothing is created, everything goes."""
        return self.max_count(frequency) == 0

    def period_length(self, frequency: Optional[Frequency]) -> timedelta:
        if frequency is Frequency.FREQUENTLY:
            return timedelta(minutes=self.interval_minutes)
        return PERIOD_LENGTHS.get(frequency, timedelta(0))

    def max_retained_date(self, frequency: Frequency, now: datetime) -> datetime:
        """Oldest creation time whose keeper is still retained."""
        return now - self.max_count(frequency) * self.period_length(frequency)

    def freshness_boundary(self, frequency: Frequency, now: datetime) -> datetime:
        """Oldest creation time that can still count as covering the current period."""
        return now - self.period_length(frequency)

    def period_key(self, t: datetime, frequency: Frequency) -> str:
        return time_period_key(t, frequency, self.interval_minutes)

    def is_fresh(self, snapshot: Snapshot, frequency: Frequency, now: datetime) -> bool:
        """True if ``snapshot`` already covers the period ``now`` falls in.

        Period keys are compared instead of ages so a schedule that fires a
        few seconds late or early still produces one snapshot per period.
        """
        if snapshot.frequency is not frequency:
            return False
        return same_period(snapshot.date_time, now, frequency, self.interval_minutes)
