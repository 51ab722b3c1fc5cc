"""
ZFS command-line backend.

Runs ``zfs``/``zpool`` synchronously and decodes their JSON output. The
exact argument vectors come from the configuration so the same code
serves direct, chroot and fixture-driven test modes.
"""

import logging
import subprocess
from typing import Dict, List, Optional, Tuple

from zfs_snapshot_operator.config.base_config import OperatorConfig
from zfs_snapshot_operator.models.models import Frequency, Pool, PoolStatus, Snapshot
from zfs_snapshot_operator.utils.errors import (
    CommandError,
    ListingError,
    ParseError,
    SnapshotCreateError,
    SnapshotDeleteError,
)
from .interfaces import SnapshotBackend, filter_snapshots
from .parser import (
    parse_pool_status_json,
    parse_pools_json,
    parse_snapshots_json,
    parse_version_json,
)

logger = logging.getLogger(__name__)


class ZFSManager(SnapshotBackend):
    """Snapshot backend driving the ZFS command-line tools."""

    def __init__(self, config: OperatorConfig):
        self.config = config
        self.commands = config.commands

    def _run(self, args: List[str]) -> str:
        """Run a command and return its stdout; raise CommandError on failure."""
        logger.debug(f"Executing command: {args}")
        try:
            result = subprocess.run(
                args,
                capture_output=True,
                text=True,
                timeout=self.config.command_timeout,
            )
        except subprocess.TimeoutExpired:
            raise CommandError(args, output=f"timed out after {self.config.command_timeout}s")
        except OSError as e:
            raise CommandError(args, output=str(e))

        logger.debug(f"Exit code: {result.returncode}")
        if result.stdout:
            logger.debug(f"stdout: {result.stdout}")
        if result.stderr:
            logger.debug(f"stderr: {result.stderr}")

        if result.returncode != 0:
            raise CommandError(args, result.returncode, (result.stderr or result.stdout or ""))
        return result.stdout

    def _target_args(self, base: List[str], snapshot: Snapshot) -> List[str]:
        # Test mode commands are no-ops and take no target
        if self.config.mode == "test":
            return list(base)
        return list(base) + [snapshot.full_name]

    def get_version(self) -> Tuple[str, str]:
        try:
            return parse_version_json(self._run(self.commands.zfs_version))
        except (CommandError, ParseError) as e:
            raise ListingError(f"failed to get ZFS version: {e.message}")

    def list_volumes(self) -> List[Pool]:
        try:
            return parse_pools_json(self._run(self.commands.list_pools))
        except (CommandError, ParseError) as e:
            raise ListingError(f"failed to list pools: {e.message}")

    def list_snapshots(self, pool_name: str = "", filesystem_name: str = "",
                       frequency: Optional[Frequency] = None) -> List[Snapshot]:
        try:
            snapshots = parse_snapshots_json(
                self._run(self.commands.list_snapshots), self.config.snapshot_prefix
            )
        except (CommandError, ParseError) as e:
            raise ListingError(f"failed to list snapshots: {e.message}")
        return filter_snapshots(snapshots, pool_name, filesystem_name, frequency)

    def create_snapshot(self, snapshot: Snapshot) -> None:
        logger.info(f"Creating snapshot {snapshot.full_name}")
        try:
            self._run(self._target_args(self.commands.create_snapshot, snapshot))
        except CommandError as e:
            raise SnapshotCreateError(snapshot.full_name, e.message)

    def delete_snapshot(self, snapshot: Snapshot) -> None:
        # Never hand a bare dataset name to zfs destroy
        if not snapshot.filesystem_name or not snapshot.snapshot_name or "@" in snapshot.snapshot_name:
            raise SnapshotDeleteError(snapshot.full_name, "refusing to destroy a malformed snapshot path")

        logger.info(f"Deleting snapshot {snapshot.full_name}")
        try:
            self._run(self._target_args(self.commands.delete_snapshot, snapshot))
        except CommandError as e:
            raise SnapshotDeleteError(snapshot.full_name, e.message)

    def get_health_status(self) -> Dict[str, PoolStatus]:
        try:
            return parse_pool_status_json(self._run(self.commands.pool_status))
        except (CommandError, ParseError) as e:
            raise ListingError(f"failed to get pool status: {e.message}")
