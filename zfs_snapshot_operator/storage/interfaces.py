"""Storage interfaces for the snapshot operator."""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple

from zfs_snapshot_operator.models.models import Frequency, Pool, PoolStatus, Snapshot


class SnapshotBackend(ABC):
    """Narrow interface to the volume-management subsystem."""

    @abstractmethod
    def list_volumes(self) -> List[Pool]:
        """List pool roots and filesystems."""
        pass

    @abstractmethod
    def list_snapshots(self, pool_name: str = "", filesystem_name: str = "",
                       frequency: Optional[Frequency] = None) -> List[Snapshot]:
        """List snapshots, filtered by every argument that is given."""
        pass

    @abstractmethod
    def create_snapshot(self, snapshot: Snapshot) -> None:
        """Create a snapshot; raises SnapshotCreateError on failure."""
        pass

    @abstractmethod
    def delete_snapshot(self, snapshot: Snapshot) -> None:
        """Destroy a snapshot; raises SnapshotDeleteError on failure."""
        pass

    @abstractmethod
    def get_health_status(self) -> Dict[str, PoolStatus]:
        """Health status keyed by pool name."""
        pass

    @abstractmethod
    def get_version(self) -> Tuple[str, str]:
        """Userland and kernel module versions."""
        pass


def filter_snapshots(snapshots: List[Snapshot], pool_name: str = "", filesystem_name: str = "",
                     frequency: Optional[Frequency] = None) -> List[Snapshot]:
    """Apply the list_snapshots filter semantics to an already listed set."""
    result = []
    for snapshot in snapshots:
        if pool_name and snapshot.pool_name != pool_name:
            continue
        if filesystem_name and snapshot.filesystem_name != filesystem_name:
            continue
        if frequency is not None and snapshot.frequency is not frequency:
            continue
        result.append(snapshot)
    return result
