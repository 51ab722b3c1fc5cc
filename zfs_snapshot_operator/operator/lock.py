"""Lock file guarding against concurrent operator runs."""

import logging
import os

from zfs_snapshot_operator.utils.errors import LockError

logger = logging.getLogger(__name__)


class LockFile:
    """Context manager that owns an exclusive lock file for the duration of a run.

    The file is created atomically and holds the PID of the owner. It is
    removed on every exit path, including exceptions.
    """

    def __init__(self, path: str):
        self.path = path
        self.acquired = False

    def acquire(self):
        try:
            fd = os.open(self.path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError:
            raise LockError(f"lock file exists at {self.path} - another instance may be running")
        except OSError as e:
            raise LockError(f"failed to create lock file {self.path}: {e}")

        pid = os.getpid()
        try:
            with os.fdopen(fd, "w") as f:
                f.write(f"{pid}\n")
        except OSError as e:
            self._remove()
            raise LockError(f"failed to write PID to lock file {self.path}: {e}")

        self.acquired = True
        logger.info(f"Acquired lock (PID {pid}) at {self.path}")

    def release(self):
        if not self.acquired:
            return
        self.acquired = False
        if self._remove():
            logger.info(f"Released lock at {self.path}")

    def _remove(self) -> bool:
        try:
            os.remove(self.path)
            return True
        except OSError as e:
            logger.warning(f"Failed to remove lock file {self.path}: {e}")
            return False

    def __enter__(self):
        self.acquire()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()
