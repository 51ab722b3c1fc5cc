"""Tests for the command-line entry point, driven by fixture files in test mode."""

import json
import os
from unittest.mock import patch

import pytest

from zfs_snapshot_operator import __version__
from zfs_snapshot_operator.scripts.operator_cli import main, parse_args

from tests.test_utils import FIXTURES_DIR


@pytest.fixture
def fixture_env(tmp_path):
    env = {
        "TEST_FIXTURES_DIR": str(FIXTURES_DIR),
        "LOCK_ENABLED": "true",
        "LOCK_FILE_PATH": str(tmp_path / "operator.lock"),
        "POOL_WHITELIST": "",
        "FILESYSTEM_WHITELIST": "",
        "FREQUENCIES": "",
        "DRY_RUN": "",
    }
    with patch.dict(os.environ, env):
        yield tmp_path


def test_version(capsys):
    assert main(["--version"]) == 0
    assert capsys.readouterr().out.strip() == f"zfs-snapshot-operator version {__version__}"


def test_run_is_the_default_command():
    args = parse_args(["--mode", "test"])
    assert args.command is None
    assert args.mode == "test"
    assert not args.dry_run


def test_invalid_mode_is_rejected():
    with pytest.raises(SystemExit):
        parse_args(["--mode", "remote"])


@pytest.mark.integration
class TestFixtureRuns:
    def test_degraded_pool_fails_the_run(self, fixture_env):
        assert main(["--mode", "test", "run"]) == 1
        assert not (fixture_env / "operator.lock").exists()

    def test_healthy_pools_succeed(self, fixture_env):
        with patch.dict(os.environ, {"POOL_WHITELIST": "tank"}):
            assert main(["--mode", "test", "--dry-run"]) == 0

    def test_held_lock_fails(self, fixture_env):
        (fixture_env / "operator.lock").write_text("4242\n")
        assert main(["--mode", "test", "run"]) == 1

    def test_metrics_textfile(self, fixture_env):
        metrics_path = fixture_env / "operator.prom"
        with patch.dict(os.environ, {"POOL_WHITELIST": "tank", "METRICS_TEXTFILE": str(metrics_path)}):
            assert main(["--mode", "test"]) == 0
        assert "zfs_snapshot_operator_last_run_success 1.0" in metrics_path.read_text()

    def test_status_json(self, fixture_env, capsys):
        assert main(["--mode", "test", "status", "--format", "json"]) == 0

        rows = json.loads(capsys.readouterr().out)
        by_volume = {row["volume"]: row for row in rows}
        assert list(by_volume) == ["backup", "backup/archive", "tank", "tank/data"]
        assert by_volume["tank"]["type"] == "pool"
        assert by_volume["tank/data"]["healthy"]
        assert by_volume["tank/data"]["hourly"] == 2
        assert by_volume["tank/data"]["daily"] == 1
        assert by_volume["backup/archive"]["monthly"] == 1
        assert by_volume["backup/archive"]["daily"] == 0
        assert not by_volume["backup"]["healthy"]

    def test_status_table(self, fixture_env, capsys):
        assert main(["--mode", "test", "status"]) == 0

        out = capsys.readouterr().out
        assert "tank/data" in out
        assert "DEGRADED" in out
