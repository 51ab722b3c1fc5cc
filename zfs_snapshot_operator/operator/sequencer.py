"""
Create-then-delete sequencing for one (pool, filesystem, frequency).

    Start -> DetermineNeed -> CreateAttempt -> Classify -> Guard -> DeleteLoop -> Done
                                    |
                                 failure -> Abort (no deletions this pass)

Creation always precedes any deletion, also in dry-run mode and when an
existing snapshot already covers the current period.
"""

import logging
from datetime import datetime
from typing import List, Optional

from zfs_snapshot_operator.models.models import Frequency, Pool, Snapshot
from zfs_snapshot_operator.retention.classifier import (
    apply_safety_guard,
    classify_snapshots,
    snapshot_order,
)
from zfs_snapshot_operator.retention.period import to_utc
from zfs_snapshot_operator.retention.policy import RetentionPolicy
from zfs_snapshot_operator.storage.interfaces import SnapshotBackend
from zfs_snapshot_operator.storage.parser import format_snapshot_name
from zfs_snapshot_operator.utils.errors import SnapshotCreateError, SnapshotDeleteError
from .run_state import FrequencyOutcome, RunState

logger = logging.getLogger(__name__)


class FrequencySequencer:
    """Runs one frequency pass: create if needed, then delete what retention allows."""

    def __init__(self, backend: SnapshotBackend, policy: RetentionPolicy,
                 snapshot_prefix: str = "autosnap", dry_run: bool = False):
        self.backend = backend
        self.policy = policy
        self.snapshot_prefix = snapshot_prefix
        self.dry_run = dry_run

    def process(self, pool: Pool, frequency: Frequency, now: datetime, state: RunState) -> FrequencyOutcome:
        """Process ``frequency`` for ``pool``.

        Raises:
            ListingError: snapshots could not be listed; nothing was changed.
            SnapshotCreateError: creation failed; no deletions were issued.
        """
        now = to_utc(now)
        logger.info(f"Processing frequency {frequency.value}")

        outcome = FrequencyOutcome(
            pool_name=pool.pool_name,
            filesystem_name=pool.filesystem_name,
            frequency=frequency,
            dry_run=self.dry_run,
        )
        state.outcomes.append(outcome)

        snapshots = [
            s for s in self.backend.list_snapshots(pool.pool_name, pool.filesystem_name, frequency)
            if s.frequency is frequency
        ]

        if self.policy.is_disabled(frequency):
            logger.info(
                f"Frequency {frequency.value} is disabled - removing {len(snapshots)} existing snapshot(s)"
            )
            self._delete(sorted(snapshots, key=snapshot_order), outcome, state)
            return outcome

        outcome.fresh = self._find_fresh(snapshots, frequency, now)
        if outcome.fresh is not None:
            logger.info(f"Found recent snapshot {outcome.fresh.snapshot_name}")
        else:
            logger.info(f"Did not find any recent snapshot for frequency {frequency.value}")
            outcome.created = self._create(pool, frequency, now, outcome)
            state.creation_count += 1
            snapshots.append(outcome.created)

        classification = classify_snapshots(snapshots, frequency, now, self.policy)
        classification = apply_safety_guard(classification, replacement_guaranteed=outcome.created is not None)
        outcome.kept = list(classification.keep)
        outcome.rescued = classification.rescued

        logger.info(
            f"Keeping {len(classification.keep)} {frequency.value} snapshot(s), "
            f"{len(classification.delete)} eligible for deletion "
            f"(retention cutoff {classification.cutoff:%Y-%m-%d %H:%M:%S})"
        )
        for snapshot in classification.keep:
            logger.debug(f"Keeping snapshot {snapshot.snapshot_name}")

        self._delete(classification.delete, outcome, state)
        return outcome

    def _find_fresh(self, snapshots: List[Snapshot], frequency: Frequency, now: datetime) -> Optional[Snapshot]:
        fresh = [s for s in snapshots if self.policy.is_fresh(s, frequency, now)]
        return max(fresh, key=snapshot_order) if fresh else None

    def new_snapshot(self, pool: Pool, frequency: Frequency, now: datetime) -> Snapshot:
        # Names carry second precision; keep date_time identical to what a re-listing would parse
        created_at = to_utc(now).replace(microsecond=0)
        return Snapshot(
            pool_name=pool.pool_name,
            filesystem_name=pool.filesystem_name,
            snapshot_name=format_snapshot_name(self.snapshot_prefix, created_at, frequency),
            date_time=created_at,
            frequency=frequency,
        )

    def _create(self, pool: Pool, frequency: Frequency, now: datetime, outcome: FrequencyOutcome) -> Snapshot:
        snapshot = self.new_snapshot(pool, frequency, now)
        if self.dry_run:
            logger.info(f"[DRY-RUN] Would create snapshot {snapshot.full_name}")
            return snapshot

        try:
            self.backend.create_snapshot(snapshot)
        except SnapshotCreateError as e:
            outcome.aborted = True
            outcome.error = e.message
            logger.error(
                f"{e.message} - skipping all {frequency.value} deletions for {pool.filesystem_name} this run"
            )
            raise
        logger.info(f"Created snapshot {snapshot.full_name}")
        return snapshot

    def _delete(self, candidates: List[Snapshot], outcome: FrequencyOutcome, state: RunState) -> None:
        for index, snapshot in enumerate(candidates):
            if state.deletion_budget_exhausted():
                remaining = candidates[index:]
                outcome.skipped_deletions.extend(remaining)
                if not state.deletion_limit_reached:
                    state.deletion_limit_reached = True
                    logger.warning(
                        f"Reached deletion limit of {state.max_deletions} snapshots - skipping remaining deletions"
                    )
                logger.info(
                    f"Deletion limit reached - skipped {len(remaining)} {outcome.frequency.value} "
                    f"snapshot(s) on {outcome.filesystem_name}"
                )
                return

            if self.dry_run:
                logger.info(f"[DRY-RUN] Would delete snapshot {snapshot.full_name}")
                state.deletion_count += 1
                outcome.deleted.append(snapshot)
                continue

            try:
                self.backend.delete_snapshot(snapshot)
            except SnapshotDeleteError as e:
                logger.error(f"Failed to delete snapshot: {e.message}")
                outcome.failed_deletions.append(snapshot)
                state.warnings.append(e.message)
                continue

            state.deletion_count += 1
            outcome.deleted.append(snapshot)
