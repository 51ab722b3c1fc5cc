"""Informational logging: configuration, pool health, scrub age, usage and snapshot summaries."""

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from zfs_snapshot_operator.config.base_config import OperatorConfig
from zfs_snapshot_operator.models.models import Pool, PoolStatus
from zfs_snapshot_operator.retention.policy import RetentionPolicy
from zfs_snapshot_operator.storage.interfaces import SnapshotBackend
from zfs_snapshot_operator.utils.errors import ListingError

logger = logging.getLogger(__name__)

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

SIZE_PATTERN = re.compile(r"^\s*([0-9]*\.?[0-9]+)\s*([a-zA-Z]*)\s*$")
SIZE_UNITS = {
    "": 1,
    "B": 1,
    "K": 1024,
    "M": 1024 ** 2,
    "G": 1024 ** 3,
    "T": 1024 ** 4,
    "P": 1024 ** 5,
}


def parse_size(size_str: str) -> int:
    """Convert a human-readable ZFS size such as ``9.07T`` to bytes.

    Units are binary and case-insensitive, with an optional trailing ``B``.
    Unparseable input gives 0; an unknown unit is taken as bytes.
    """
    if not size_str:
        return 0
    match = SIZE_PATTERN.match(size_str)
    if not match:
        return 0
    value = float(match.group(1))
    unit = match.group(2).upper()
    if len(unit) == 2 and unit.endswith("B"):
        unit = unit[0]
    return int(value * SIZE_UNITS.get(unit, 1))


class PoolReporter:
    """Writes the operator's informational log lines. Never changes anything."""

    def __init__(self, config: OperatorConfig, policy: RetentionPolicy):
        self.config = config
        self.policy = policy

    def log_config(self, now: datetime):
        logger.info("Current config")
        logger.info(f"Mode: {self.config.mode}")
        logger.info(f"Log level: {self.config.log_level}")
        logger.info(f"Dry run: {self.config.dry_run}")
        logger.info(f"Max deletions per run: {self.config.max_deletions_per_run}")
        for frequency in self.config.frequencies:
            logger.info(f"Max {frequency.value} snapshots: {self.policy.max_count(frequency)}")

        if self.config.pool_whitelist:
            logger.info(f"Pool whitelist: {self.config.pool_whitelist}")
        else:
            logger.info("Pool whitelist: all pools")
        if self.config.filesystem_whitelist:
            logger.info(f"Filesystem whitelist: {self.config.filesystem_whitelist}")
        else:
            logger.info("Filesystem whitelist: all filesystems")

        for frequency in self.config.frequencies:
            logger.info(
                f"Max {frequency.value} snapshot age: "
                f"{self.policy.max_retained_date(frequency, now).strftime(TIME_FORMAT)}"
            )
        for frequency in self.config.frequencies:
            logger.info(
                f"Min {frequency.value} snapshot age: "
                f"{self.policy.freshness_boundary(frequency, now).strftime(TIME_FORMAT)}"
            )

    def log_pool_status(self, pool_name: str, statuses: Dict[str, PoolStatus]) -> bool:
        """Warn about device errors on ``pool_name``. Returns True if any were found."""
        status = statuses.get(pool_name)
        if status is None:
            return False

        has_errors = False
        for label, value in (
            ("read", status.read_errors),
            ("write", status.write_errors),
            ("checksum", status.checksum_errors),
        ):
            if value and value != "0":
                logger.warning(f"Pool {pool_name} has {value} {label} error(s)")
                has_errors = True

        if has_errors:
            logger.warning(f"Pool {pool_name} has errors - consider running 'zpool scrub {pool_name}'")
        return has_errors

    def check_scrub_age(self, pool_name: str, statuses: Dict[str, PoolStatus], now: datetime) -> Optional[int]:
        """Log how long ago the pool was scrubbed. Returns the age in whole days, if known."""
        status = statuses.get(pool_name)
        if status is None:
            return None

        if status.scrub_state == "none" or not status.last_scrub_time:
            logger.warning(
                f"Pool {pool_name} has no scrub information - consider running 'zpool scrub {pool_name}'"
            )
            return None

        last_scrub = datetime.fromtimestamp(status.last_scrub_time, tz=timezone.utc)
        age = now - last_scrub
        days = age // timedelta(days=1)
        finished = last_scrub.strftime(TIME_FORMAT)

        if age > timedelta(days=self.config.scrub_age_threshold_days):
            logger.warning(
                f"Pool {pool_name} last scrub was {days} days ago (last scrub: {finished}) "
                f"- consider running 'zpool scrub {pool_name}'"
            )
        elif status.scrub_state == "in_progress":
            logger.info(f"Pool {pool_name} scrub is currently in progress (started: {finished})")
        elif days == 0:
            hours = age // timedelta(hours=1)
            logger.info(f"Pool {pool_name} last scrub completed {hours} hour(s) ago (finished: {finished})")
        else:
            logger.info(f"Pool {pool_name} last scrub completed {days} day(s) ago (finished: {finished})")
        return days

    def log_filesystem_usage(self, pool: Pool):
        if not pool.used or not pool.avail:
            return

        used = parse_size(pool.used)
        avail = parse_size(pool.avail)
        if used > 0 and avail > 0:
            percent = used / (used + avail) * 100
            logger.info(
                f"Filesystem {pool.filesystem_name} usage: {pool.used} used, {pool.avail} available ({percent:.1f}%)"
            )
        else:
            logger.info(f"Filesystem {pool.filesystem_name} usage: {pool.used} used, {pool.avail} available")

    def log_snapshot_summary(self, backend: SnapshotBackend, pool: Pool):
        logger.info(f"Snapshot summary for {pool.filesystem_name}:")

        for frequency in self.config.frequencies:
            try:
                snapshots = backend.list_snapshots(pool.pool_name, pool.filesystem_name, frequency)
            except ListingError as e:
                logger.error(f"  Error getting {frequency.value} snapshots: {e.message}")
                continue

            if not snapshots:
                logger.info(f"  {frequency.value}: 0 snapshot(s)")
                continue

            oldest = min(s.date_time for s in snapshots)
            newest = max(s.date_time for s in snapshots)
            logger.info(
                f"  {frequency.value}: {len(snapshots)} snapshot(s) "
                f"[oldest: {oldest.strftime(TIME_FORMAT)}, newest: {newest.strftime(TIME_FORMAT)}]"
            )
