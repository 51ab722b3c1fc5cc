"""Test utilities and snapshot builders."""
from datetime import datetime, timedelta, timezone
from pathlib import Path

from zfs_snapshot_operator.models.models import Frequency, Pool, Snapshot
from zfs_snapshot_operator.storage.memory_backend import InMemorySnapshotBackend
from zfs_snapshot_operator.storage.parser import format_snapshot_name

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def utc(*args):
    """Timezone-aware UTC datetime."""
    return datetime(*args, tzinfo=timezone.utc)


def make_snapshot(filesystem_name, when, frequency, prefix="autosnap"):
    """Create an operator snapshot the way a listing would report it."""
    return Snapshot(
        pool_name=filesystem_name.split("/")[0],
        filesystem_name=filesystem_name,
        snapshot_name=format_snapshot_name(prefix, when, frequency),
        date_time=when,
        frequency=frequency,
    )


def make_foreign_snapshot(filesystem_name, name):
    return Snapshot(
        pool_name=filesystem_name.split("/")[0],
        filesystem_name=filesystem_name,
        snapshot_name=name,
    )


def hourly_series(filesystem_name, start, count):
    """``count`` hourly snapshots, one per hour, starting at ``start``."""
    return [
        make_snapshot(filesystem_name, start + timedelta(hours=i), Frequency.HOURLY)
        for i in range(count)
    ]


def create_backend(snapshots=(), statuses=None):
    """In-memory backend with two pools, each with a root and filesystems."""
    pools = [
        Pool("tank", "", used="1.50T", avail="7.57T"),
        Pool("tank", "tank/data", used="1.00T", avail="3.00T"),
        Pool("tank", "tank/scratch", used="10G", avail="3.00T"),
        Pool("backup", "", used="200G", avail="800G"),
        Pool("backup", "backup/archive", used="150G", avail="800G"),
    ]
    return InMemorySnapshotBackend(pools=pools, snapshots=snapshots, statuses=statuses)
