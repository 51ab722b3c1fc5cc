"""
Snapshot classification for a single (pool, filesystem, frequency).

Snapshots are grouped by calendar period; the newest snapshot of each
period is that period's keeper and everything else in the period is a
duplicate. Keepers older than the retention window are dropped as well.
The safety guard then makes sure a pass never removes the last snapshot
of a frequency unless a successor exists.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from zfs_snapshot_operator.models.models import Frequency, Snapshot
from .period import to_utc
from .policy import RetentionPolicy

logger = logging.getLogger(__name__)


def snapshot_order(snapshot: Snapshot):
    """Deterministic ordering: creation time, then name."""
    return (to_utc(snapshot.date_time), snapshot.snapshot_name)


@dataclass
class Classification:
    """Disjoint keep/delete split for one frequency."""
    frequency: Frequency
    cutoff: datetime
    keep: List[Snapshot] = field(default_factory=list)
    delete: List[Snapshot] = field(default_factory=list)
    keepers: Dict[str, Snapshot] = field(default_factory=dict)
    rescued: Optional[Snapshot] = None


def classify_snapshots(snapshots: Iterable[Snapshot], frequency: Frequency,
                       now: datetime, policy: RetentionPolicy) -> Classification:
    """Split ``snapshots`` of ``frequency`` into keepers and deletion candidates.

    Snapshots of other frequencies and foreign snapshots are ignored.
    """
    cutoff = policy.max_retained_date(frequency, to_utc(now))

    periods = defaultdict(list)
    for snapshot in snapshots:
        if snapshot.frequency is not frequency:
            continue
        periods[policy.period_key(snapshot.date_time, frequency)].append(snapshot)

    result = Classification(frequency=frequency, cutoff=cutoff)
    for key in sorted(periods):
        members = sorted(periods[key], key=snapshot_order)
        keeper = members[-1]
        result.keepers[key] = keeper
        result.delete.extend(members[:-1])

        if to_utc(keeper.date_time) >= cutoff:
            result.keep.append(keeper)
        else:
            result.delete.append(keeper)

    result.delete.sort(key=snapshot_order)
    return result


def apply_safety_guard(classification: Classification, replacement_guaranteed: bool) -> Classification:
    """Keep the newest deletion candidate if the pass would otherwise leave nothing.

    ``replacement_guaranteed`` is true when a snapshot for the current
    period was created in this pass.
    """
    if classification.keep or not classification.delete or replacement_guaranteed:
        return classification

    newest = max(classification.delete, key=snapshot_order)
    logger.warning(
        f"Refusing to delete all {len(classification.delete)} {classification.frequency.value} "
        f"snapshot(s) - keeping newest snapshot {newest.snapshot_name} as safety measure"
    )
    return Classification(
        frequency=classification.frequency,
        cutoff=classification.cutoff,
        keep=[newest],
        delete=[s for s in classification.delete if s is not newest],
        keepers=dict(classification.keepers),
        rescued=newest,
    )
