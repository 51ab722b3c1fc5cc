"""
Run coordination across pools, filesystems and frequencies.

One run takes the lock and logs the configuration and ZFS version. It then
fetches pool health once and walks every listed volume. Pool roots are
only reported on. Filesystems get one sequencer pass per configured
frequency.
"""

import logging
from contextlib import nullcontext
from datetime import datetime, timezone
from typing import Callable, Dict, Optional

from zfs_snapshot_operator.config.base_config import OperatorConfig
from zfs_snapshot_operator.models.models import Pool, PoolStatus
from zfs_snapshot_operator.monitoring.metrics import record_run
from zfs_snapshot_operator.retention.policy import RetentionPolicy
from zfs_snapshot_operator.storage.interfaces import SnapshotBackend
from zfs_snapshot_operator.storage.zfs_manager import ZFSManager
from zfs_snapshot_operator.utils.errors import (
    ListingError,
    OperatorError,
    SnapshotCreateError,
    UnhealthyPoolError,
)
from .lock import LockFile
from .reporting import PoolReporter
from .run_state import RunState
from .sequencer import FrequencySequencer

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SnapshotOperator:
    """Drives one snapshot management run against a backend."""

    def __init__(self, config: OperatorConfig, backend: Optional[SnapshotBackend] = None,
                 clock: Callable[[], datetime] = utc_now):
        self.config = config
        self.backend = backend if backend is not None else ZFSManager(config)
        self.clock = clock
        self.policy = RetentionPolicy.from_config(config)
        self.reporter = PoolReporter(config, self.policy)
        self.sequencer = FrequencySequencer(
            self.backend, self.policy, config.snapshot_prefix, config.dry_run
        )

    def _lock(self):
        if not self.config.lock_enabled:
            return nullcontext()
        return LockFile(self.config.lock_file_path)

    def run(self) -> RunState:
        """Execute one run.

        Per-pool and per-filesystem problems are collected on the returned
        state; check ``state.succeeded``.

        Raises:
            LockError: another run holds the lock.
            ListingError: version, pool status or volumes could not be listed.
        """
        with self._lock():
            now = self.clock()
            state = RunState(
                started_at=now,
                max_deletions=self.config.max_deletions_per_run,
                dry_run=self.config.dry_run,
            )
            if self.config.dry_run:
                logger.info("Dry-run mode enabled - no snapshots will be created or deleted")

            self.reporter.log_config(now)

            userland, kernel = self.backend.get_version()
            logger.info(f"ZFS Version - Userland: {userland}, Kernel: {kernel}")

            statuses = self.backend.get_health_status()
            pools = self.backend.list_volumes()

            for pool in pools:
                self.process_pool(pool, now, statuses, state)

            if self.config.metrics_textfile:
                record_run(state, self.config.metrics_textfile, self.clock())

            self._log_summary(state)
            return state

    def process_pool(self, pool: Pool, now: datetime, statuses: Dict[str, PoolStatus], state: RunState):
        """Handle one listed volume: a pool root or a filesystem."""
        if not self.config.is_pool_allowed(pool.pool_name):
            logger.info(f"Skipping pool {pool.pool_name} (not in whitelist)")
            return

        status = statuses.get(pool.pool_name)
        if status is None or not status.is_healthy():
            if pool.pool_name not in state.unhealthy_pools:
                problems = status.problems() if status is not None else ["no status reported"]
                error = UnhealthyPoolError(pool.pool_name, problems)
                logger.error(f"Skipping pool {pool.pool_name} due to health issues: {error.message}")
                state.unhealthy_pools.add(pool.pool_name)
                state.record_error(f"pool {pool.pool_name}", error.message)

        if pool.is_root:
            logger.info(f"Processing pool {pool.pool_name} (root)")
            self.reporter.log_pool_status(pool.pool_name, statuses)
            self.reporter.check_scrub_age(pool.pool_name, statuses, now)
            logger.info(f"Ignoring pool root without filesystem {pool.pool_name}")
            return

        if not self.config.is_filesystem_allowed(pool.filesystem_name):
            logger.info(f"Skipping filesystem {pool.filesystem_name} (not in whitelist)")
            return

        self.reporter.log_filesystem_usage(pool)
        if pool.pool_name in state.unhealthy_pools:
            logger.info(f"Skipping filesystem {pool.filesystem_name} (pool {pool.pool_name} is not healthy)")
            return

        logger.info(f"Processing filesystem {pool.filesystem_name}")

        for frequency in self.config.frequencies:
            try:
                self.sequencer.process(pool, frequency, now, state)
            except SnapshotCreateError as e:
                state.record_error(f"{pool.filesystem_name} {frequency.value}", e.message)
            except ListingError as e:
                logger.error(f"Error processing frequency {frequency.value}: {e.message}")
                state.record_error(f"{pool.filesystem_name} {frequency.value}", e.message)
                break
            except OperatorError as e:
                logger.error(f"Unexpected {e.code} processing frequency {frequency.value}: {e.message}")
                state.record_error(f"{pool.filesystem_name} {frequency.value}", e.message)
                break

        self.reporter.log_snapshot_summary(self.backend, pool)
        logger.info(f"Finished filesystem {pool.filesystem_name}")

    def _log_summary(self, state: RunState):
        prefix = "[DRY-RUN] " if state.dry_run else ""
        for warning in state.warnings:
            logger.warning(f"Non-fatal: {warning}")

        if state.succeeded:
            logger.info(
                f"{prefix}Run completed successfully - created {state.creation_count} snapshot(s), "
                f"deleted {state.deletion_count} snapshot(s)"
            )
            return

        for error in state.errors:
            logger.error(f"Run error: {error}")
        logger.error(
            f"{prefix}Operator encountered {len(state.errors)} error(s) during execution - "
            f"created {state.creation_count} snapshot(s), deleted {state.deletion_count} snapshot(s)"
        )
