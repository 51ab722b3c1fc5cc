"""In-memory snapshot backend with failure injection."""

from typing import Dict, Iterable, List, Optional, Set, Tuple

from zfs_snapshot_operator.models.models import Frequency, Pool, PoolStatus, Snapshot
from zfs_snapshot_operator.utils.errors import ListingError, SnapshotCreateError, SnapshotDeleteError
from .interfaces import SnapshotBackend, filter_snapshots


class InMemorySnapshotBackend(SnapshotBackend):
    def __init__(self, pools: Iterable[Pool] = (), snapshots: Iterable[Snapshot] = (),
                 statuses: Optional[Dict[str, PoolStatus]] = None):
        self.pools = list(pools)
        self.snapshots = list(snapshots)
        self.statuses = dict(statuses) if statuses is not None else {
            pool.pool_name: PoolStatus(name=pool.pool_name, state="ONLINE", error_count="0")
            for pool in self.pools
        }
        self.version = ("zfs-2.3.3-1", "zfs-kmod-2.3.3-1")

        # Failure injection
        self.create_error: Optional[str] = None
        self.delete_errors: Set[str] = set()
        self.list_error: Optional[str] = None

        # Call journal
        self.created: List[Snapshot] = []
        self.deleted: List[Snapshot] = []
        self.calls: List[Tuple[str, str]] = []

    def list_volumes(self) -> List[Pool]:
        return list(self.pools)

    def list_snapshots(self, pool_name: str = "", filesystem_name: str = "",
                       frequency: Optional[Frequency] = None) -> List[Snapshot]:
        if self.list_error:
            raise ListingError(self.list_error)
        return filter_snapshots(self.snapshots, pool_name, filesystem_name, frequency)

    def create_snapshot(self, snapshot: Snapshot) -> None:
        self.calls.append(("create", snapshot.full_name))
        if self.create_error:
            raise SnapshotCreateError(snapshot.full_name, self.create_error)
        self.snapshots.append(snapshot)
        self.created.append(snapshot)

    def delete_snapshot(self, snapshot: Snapshot) -> None:
        self.calls.append(("delete", snapshot.full_name))
        if snapshot.snapshot_name in self.delete_errors:
            raise SnapshotDeleteError(snapshot.full_name, "dataset is busy")
        self.snapshots = [s for s in self.snapshots if s.full_name != snapshot.full_name]
        self.deleted.append(snapshot)

    def get_health_status(self) -> Dict[str, PoolStatus]:
        return dict(self.statuses)

    def get_version(self) -> Tuple[str, str]:
        return self.version
