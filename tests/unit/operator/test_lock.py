"""Unit tests for the run lock file."""

import os

import pytest

from zfs_snapshot_operator.operator.lock import LockFile
from zfs_snapshot_operator.utils.errors import LockError


@pytest.fixture
def lock_path(tmp_path):
    return tmp_path / "zfs-snapshot-operator.lock"


def test_acquire_writes_pid(lock_path):
    lock = LockFile(str(lock_path))
    lock.acquire()

    assert lock.acquired
    assert lock_path.read_text() == f"{os.getpid()}\n"

    lock.release()
    assert not lock_path.exists()


def test_second_instance_is_refused(lock_path):
    with LockFile(str(lock_path)):
        with pytest.raises(LockError) as exc_info:
            LockFile(str(lock_path)).acquire()
        assert "another instance may be running" in exc_info.value.message
        assert lock_path.exists()


def test_released_on_exception(lock_path):
    with pytest.raises(RuntimeError):
        with LockFile(str(lock_path)):
            raise RuntimeError("boom")
    assert not lock_path.exists()


def test_release_without_acquire_leaves_foreign_lock(lock_path):
    lock_path.write_text("1\n")
    LockFile(str(lock_path)).release()
    assert lock_path.exists()


def test_unwritable_location(tmp_path):
    with pytest.raises(LockError):
        LockFile(str(tmp_path / "missing" / "operator.lock")).acquire()
