"""Unified data models for the snapshot operator."""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


# Enums
class Frequency(Enum):
    FREQUENTLY = "frequently"  # sub-hourly, fixed N-minute interval
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @classmethod
    def from_label(cls, label: Optional[str]) -> Optional["Frequency"]:
        """Map a frequency tag to its enum member, or None if it is not ours."""
        if not label:
            return None
        try:
            return cls(label.strip().lower())
        except ValueError:
            return None


STANDARD_FREQUENCIES = (
    Frequency.HOURLY,
    Frequency.DAILY,
    Frequency.WEEKLY,
    Frequency.MONTHLY,
    Frequency.YEARLY,
)


# Core Storage Models
@dataclass(frozen=True)
class Snapshot:
    """A point-in-time copy of a ZFS filesystem.

    ``filesystem_name`` already contains the pool (e.g. ``tank/data``).
    A snapshot without a frequency was not created by the operator and is
    never classified, kept or deleted.
    """
    pool_name: str
    filesystem_name: str
    snapshot_name: str
    date_time: datetime = EPOCH
    frequency: Optional[Frequency] = None

    @property
    def full_name(self) -> str:
        return f"{self.filesystem_name}@{self.snapshot_name}"

    @property
    def is_managed(self) -> bool:
        return self.frequency is not None


@dataclass
class Pool:
    """A ZFS pool root or a filesystem inside a pool."""
    pool_name: str
    filesystem_name: str = ""
    used: str = ""
    avail: str = ""
    mountpoint: str = ""

    @property
    def is_root(self) -> bool:
        return not self.filesystem_name

    @property
    def display_name(self) -> str:
        return self.filesystem_name or self.pool_name


# Health Models
@dataclass
class PoolStatus:
    """Health status of a ZFS pool as reported by ``zpool status``."""
    name: str
    state: str = ""
    status: str = ""
    action: str = ""
    error_count: str = ""
    last_scrub_time: int = 0  # Unix timestamp of last scrub end time
    scrub_state: str = "none"  # finished, in_progress, scanning, none
    scrub_function: str = ""  # scrub or resilver
    alloc_space: str = ""
    total_space: str = ""
    read_errors: str = ""
    write_errors: str = ""
    checksum_errors: str = ""

    def problems(self) -> List[str]:
        """Reasons this pool is unsafe for snapshot operations."""
        problems = []
        if self.state != "ONLINE":
            problems.append(f"state is {self.state or 'unknown'}")
        for label, value in (
            ("pool errors", self.error_count),
            ("read errors", self.read_errors),
            ("write errors", self.write_errors),
            ("checksum errors", self.checksum_errors),
        ):
            if value and value != "0":
                problems.append(f"{value} {label}")
        return problems

    def is_healthy(self) -> bool:
        return not self.problems()
