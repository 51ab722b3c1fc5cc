"""Global test configuration and fixtures."""
import logging

import pytest

from zfs_snapshot_operator.config.base_config import OperatorConfig
from zfs_snapshot_operator.models.models import Frequency, Pool
from zfs_snapshot_operator.operator.run_state import RunState
from zfs_snapshot_operator.retention.policy import RetentionPolicy

from tests.test_utils import FIXTURES_DIR, utc

# Configure logging for tests
logging.basicConfig(level=logging.INFO)


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "integration: runs real commands against fixture files")


@pytest.fixture
def now():
    return utc(2024, 1, 15, 12, 30, 0)


@pytest.fixture
def policy():
    return RetentionPolicy({
        Frequency.FREQUENTLY: 4,
        Frequency.HOURLY: 24,
        Frequency.DAILY: 7,
        Frequency.WEEKLY: 4,
        Frequency.MONTHLY: 12,
        Frequency.YEARLY: 3,
    })


@pytest.fixture
def pool():
    return Pool("tank", "tank/data", used="1.00T", avail="3.00T")


@pytest.fixture
def run_state(now):
    return RunState(started_at=now, max_deletions=100)


@pytest.fixture
def test_config():
    """Operator configuration that never touches real pools or the lock file."""
    return OperatorConfig(
        mode="test",
        lock_enabled=False,
        frequencies=[Frequency.HOURLY, Frequency.DAILY],
        test_fixtures_dir=str(FIXTURES_DIR),
    )
