"""Unit tests for the in-memory snapshot backend."""

import pytest

from zfs_snapshot_operator.models.models import Frequency, Pool
from zfs_snapshot_operator.storage.memory_backend import InMemorySnapshotBackend
from zfs_snapshot_operator.utils.errors import ListingError, SnapshotCreateError, SnapshotDeleteError

from tests.test_utils import make_foreign_snapshot, make_snapshot, utc


@pytest.fixture
def backend():
    return InMemorySnapshotBackend(
        pools=[Pool("tank"), Pool("tank", "tank/data")],
        snapshots=[
            make_snapshot("tank/data", utc(2024, 1, 15, 10), Frequency.HOURLY),
            make_snapshot("tank/data", utc(2024, 1, 15), Frequency.DAILY),
            make_foreign_snapshot("tank/data", "manual"),
        ],
    )


def test_default_statuses_are_healthy(backend):
    statuses = backend.get_health_status()
    assert list(statuses) == ["tank"]
    assert statuses["tank"].is_healthy()


def test_list_snapshots_filters(backend):
    assert len(backend.list_snapshots()) == 3
    assert len(backend.list_snapshots("tank", "tank/data")) == 3
    assert len(backend.list_snapshots(filesystem_name="tank/other")) == 0
    hourly, = backend.list_snapshots(frequency=Frequency.HOURLY)
    assert hourly.frequency is Frequency.HOURLY


def test_create_and_delete_are_journaled(backend):
    snapshot = make_snapshot("tank/data", utc(2024, 1, 15, 11), Frequency.HOURLY)

    backend.create_snapshot(snapshot)
    backend.delete_snapshot(snapshot)

    assert backend.calls == [("create", snapshot.full_name), ("delete", snapshot.full_name)]
    assert backend.created == [snapshot]
    assert backend.deleted == [snapshot]
    assert snapshot not in backend.snapshots


def test_failure_injection(backend):
    snapshot = backend.snapshots[0]
    backend.create_error = "out of space"
    backend.delete_errors = {snapshot.snapshot_name}
    backend.list_error = "pool is busy"

    with pytest.raises(SnapshotCreateError):
        backend.create_snapshot(make_snapshot("tank/data", utc(2024, 1, 15, 11), Frequency.HOURLY))
    with pytest.raises(SnapshotDeleteError):
        backend.delete_snapshot(snapshot)
    with pytest.raises(ListingError):
        backend.list_snapshots()
    assert snapshot in backend.snapshots
