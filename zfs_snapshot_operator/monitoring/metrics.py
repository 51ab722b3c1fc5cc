"""Prometheus metrics for a single operator run, written in node_exporter textfile format."""

import logging
from datetime import datetime, timezone
from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Gauge, write_to_textfile

logger = logging.getLogger(__name__)


class RunMetrics:
    """Metric families for one run, held in a private registry."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry if registry is not None else CollectorRegistry()

        self.snapshots_created = Counter(
            'zfs_snapshot_operator_snapshots_created',
            'Snapshots created (or simulated in dry-run) during the last run',
            ['frequency'],
            registry=self.registry
        )
        self.snapshots_deleted = Counter(
            'zfs_snapshot_operator_snapshots_deleted',
            'Snapshots deleted (or simulated in dry-run) during the last run',
            ['frequency'],
            registry=self.registry
        )
        self.deletions_failed = Counter(
            'zfs_snapshot_operator_deletions_failed',
            'Snapshot deletions that failed during the last run',
            registry=self.registry
        )
        self.deletions_skipped = Counter(
            'zfs_snapshot_operator_deletions_skipped',
            'Deletion candidates left in place by the per-run deletion limit',
            registry=self.registry
        )
        self.run_errors = Counter(
            'zfs_snapshot_operator_errors',
            'Errors recorded during the last run',
            registry=self.registry
        )
        self.unhealthy_pools = Gauge(
            'zfs_snapshot_operator_unhealthy_pools',
            'Pools skipped because of health issues',
            registry=self.registry
        )
        self.dry_run = Gauge(
            'zfs_snapshot_operator_dry_run',
            'Whether the last run was a dry run (1) or not (0)',
            registry=self.registry
        )
        self.last_run_success = Gauge(
            'zfs_snapshot_operator_last_run_success',
            'Whether the last run finished without errors (1) or not (0)',
            registry=self.registry
        )
        self.last_run_timestamp = Gauge(
            'zfs_snapshot_operator_last_run_timestamp_seconds',
            'Unix time the last run finished',
            registry=self.registry
        )
        self.last_run_duration = Gauge(
            'zfs_snapshot_operator_last_run_duration_seconds',
            'Wall-clock duration of the last run',
            registry=self.registry
        )

    def observe(self, state, finished_at: datetime):
        """Load the counters and gauges from a finished run."""
        for outcome in state.outcomes:
            if outcome.created is not None:
                self.snapshots_created.labels(frequency=outcome.frequency.value).inc()
            if outcome.deleted:
                self.snapshots_deleted.labels(frequency=outcome.frequency.value).inc(len(outcome.deleted))
            self.deletions_failed.inc(len(outcome.failed_deletions))
            self.deletions_skipped.inc(len(outcome.skipped_deletions))

        self.run_errors.inc(len(state.errors))
        self.unhealthy_pools.set(len(state.unhealthy_pools))
        self.dry_run.set(1 if state.dry_run else 0)
        self.last_run_success.set(1 if state.succeeded else 0)
        self.last_run_timestamp.set(finished_at.timestamp())
        self.last_run_duration.set(max((finished_at - state.started_at).total_seconds(), 0))


def record_run(state, path: str, finished_at: Optional[datetime] = None) -> bool:
    """Write run metrics to ``path``. Failures are logged and never fail the run."""
    finished_at = finished_at or datetime.now(timezone.utc)
    metrics = RunMetrics()
    metrics.observe(state, finished_at)
    try:
        write_to_textfile(path, metrics.registry)
    except OSError as e:
        logger.warning(f"Failed to write metrics to {path}: {e}")
        return False
    logger.debug(f"Wrote run metrics to {path}")
    return True
