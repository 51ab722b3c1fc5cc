"""Storage backends for the snapshot operator."""
from .interfaces import SnapshotBackend, filter_snapshots
from .zfs_manager import ZFSManager
from .memory_backend import InMemorySnapshotBackend

__all__ = ['SnapshotBackend', 'filter_snapshots', 'ZFSManager', 'InMemorySnapshotBackend']
