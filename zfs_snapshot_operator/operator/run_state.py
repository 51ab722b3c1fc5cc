"""Per-run bookkeeping: counters, collected errors and every create/delete decision."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Set

from zfs_snapshot_operator.models.models import Frequency, Snapshot


@dataclass
class FrequencyOutcome:
    """What one frequency pass over one filesystem decided and did."""
    pool_name: str
    filesystem_name: str
    frequency: Frequency
    dry_run: bool = False
    fresh: Optional[Snapshot] = None
    created: Optional[Snapshot] = None
    kept: List[Snapshot] = field(default_factory=list)
    rescued: Optional[Snapshot] = None
    deleted: List[Snapshot] = field(default_factory=list)
    failed_deletions: List[Snapshot] = field(default_factory=list)
    skipped_deletions: List[Snapshot] = field(default_factory=list)
    aborted: bool = False
    error: Optional[str] = None


@dataclass
class RunState:
    """Transient state of one operator run. Never persisted."""
    started_at: datetime
    max_deletions: int
    dry_run: bool = False
    creation_count: int = 0
    deletion_count: int = 0
    deletion_limit_reached: bool = False
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    outcomes: List[FrequencyOutcome] = field(default_factory=list)
    unhealthy_pools: Set[str] = field(default_factory=set)

    @property
    def succeeded(self) -> bool:
        return not self.errors

    def deletion_budget_exhausted(self) -> bool:
        return self.deletion_count >= self.max_deletions

    def record_error(self, scope: str, error) -> None:
        self.errors.append(f"{scope}: {error}")

    def outcomes_for(self, filesystem_name: str, frequency: Optional[Frequency] = None) -> List[FrequencyOutcome]:
        return [
            o for o in self.outcomes
            if o.filesystem_name == filesystem_name and (frequency is None or o.frequency is frequency)
        ]
