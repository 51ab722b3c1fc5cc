"""Operator configuration management."""

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from dotenv import load_dotenv

from zfs_snapshot_operator.models.models import Frequency, STANDARD_FREQUENCIES

logger = logging.getLogger(__name__)

MODES = ("test", "direct", "chroot")
LOG_LEVELS = ("info", "debug")

DEFAULT_RETENTION = {
    Frequency.FREQUENTLY: 4,
    Frequency.HOURLY: 24,
    Frequency.DAILY: 7,
    Frequency.WEEKLY: 4,
    Frequency.MONTHLY: 12,
    Frequency.YEARLY: 3,
}

DEFAULT_FREQUENT_INTERVAL_MINUTES = 15


@dataclass
class ZFSCommands:
    """Argument vectors for every external command the operator runs."""
    list_pools: List[str]
    list_snapshots: List[str]
    create_snapshot: List[str]
    delete_snapshot: List[str]
    pool_status: List[str]
    zfs_version: List[str]


@dataclass
class OperatorConfig:
    mode: str = "direct"
    log_level: str = "info"

    # Safety features
    dry_run: bool = False
    max_deletions_per_run: int = 100
    lock_enabled: bool = True
    lock_file_path: str = "/tmp/zfs-snapshot-operator.lock"

    # Retention
    snapshot_prefix: str = "autosnap"
    frequencies: List[Frequency] = field(default_factory=lambda: list(STANDARD_FREQUENCIES))
    retention: Dict[Frequency, int] = field(default_factory=lambda: dict(DEFAULT_RETENTION))
    frequent_interval_minutes: int = DEFAULT_FREQUENT_INTERVAL_MINUTES

    # Filtering (empty = everything)
    pool_whitelist: List[str] = field(default_factory=list)
    filesystem_whitelist: List[str] = field(default_factory=list)

    # Scrub monitoring
    scrub_age_threshold_days: int = 90

    # Command execution
    chroot_host_path: str = "/host"
    chroot_bin_path: str = "/usr/local/sbin"
    test_fixtures_dir: str = "test"
    command_timeout: int = 300
    commands: Optional[ZFSCommands] = None

    # Prometheus textfile output (empty = disabled)
    metrics_textfile: str = ""

    def __post_init__(self):
        if self.commands is None:
            self.commands = build_commands(
                self.mode, self.chroot_host_path, self.chroot_bin_path, self.test_fixtures_dir
            )

    def is_debug(self) -> bool:
        return self.log_level == "debug"

    def is_pool_allowed(self, pool_name: str) -> bool:
        return not self.pool_whitelist or pool_name in self.pool_whitelist

    def is_filesystem_allowed(self, filesystem_name: str) -> bool:
        return not self.filesystem_whitelist or filesystem_name in self.filesystem_whitelist

    def max_snapshots(self, frequency: Frequency) -> int:
        return self.retention.get(frequency, 0)


def build_commands(mode: str, host_path: str = "/host", bin_path: str = "/usr/local/sbin",
                   fixtures_dir: str = "test") -> ZFSCommands:
    """Build command vectors for the given operation mode."""
    if mode == "test":
        # Listing reads fixtures, mutations are no-ops
        return ZFSCommands(
            list_pools=["cat", os.path.join(fixtures_dir, "zfs_list_pools.json")],
            list_snapshots=["cat", os.path.join(fixtures_dir, "zfs_list_snapshots.json")],
            create_snapshot=["true"],
            delete_snapshot=["true"],
            pool_status=["cat", os.path.join(fixtures_dir, "zpool_status.json")],
            zfs_version=["cat", os.path.join(fixtures_dir, "zfs_version.json")],
        )
    if mode == "chroot":
        zfs_bin = ["chroot", host_path, f"{bin_path}/zfs"]
        zpool_bin = ["chroot", host_path, f"{bin_path}/zpool"]
    elif mode == "direct":
        zfs_bin = ["zfs"]
        zpool_bin = ["zpool"]
    else:
        raise ValueError(f"Invalid mode: {mode}. Must be one of: {', '.join(MODES)}")

    return ZFSCommands(
        list_pools=zfs_bin + ["list", "-j"],
        list_snapshots=zfs_bin + ["list", "-j", "-t", "snapshot"],
        create_snapshot=zfs_bin + ["snapshot"],
        delete_snapshot=zfs_bin + ["destroy"],
        pool_status=zpool_bin + ["status", "-j"],
        zfs_version=zfs_bin + ["version", "-j"],
    )


def get_env_int(key: str, default: int) -> int:
    """Integer from the environment; unset or invalid values give the default."""
    value = os.getenv(key, "")
    if not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Ignoring invalid integer for {key}: {value!r}")
        return default


def get_env_count(key: str, default: int) -> int:
    """Non-negative count from the environment; negative values give the default."""
    value = get_env_int(key, default)
    if value < 0:
        logger.warning(f"Ignoring negative count for {key}: {value}, using {default}")
        return default
    return value


def get_env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key, "").strip().lower()
    if not value:
        return default
    if value in ("1", "t", "true", "yes", "on"):
        return True
    if value in ("0", "f", "false", "no", "off"):
        return False
    logger.warning(f"Ignoring invalid boolean for {key}: {value!r}")
    return default


def get_env_str(key: str, default: str) -> str:
    return os.getenv(key) or default


def get_env_list(key: str, default: Optional[List[str]] = None) -> List[str]:
    """Comma-separated list from the environment with blanks dropped."""
    default = list(default or [])
    value = os.getenv(key, "")
    items = [part.strip() for part in value.split(",") if part.strip()]
    return items or default


def parse_frequencies(labels: List[str]) -> List[Frequency]:
    frequencies = []
    for label in labels:
        frequency = Frequency.from_label(label)
        if frequency is None:
            logger.warning(f"Ignoring unknown frequency {label!r}")
            continue
        if frequency not in frequencies:
            frequencies.append(frequency)
    return frequencies


def load_operator_config(mode: str = "direct") -> OperatorConfig:
    """Load operator configuration from environment variables (and a .env file)."""
    if mode not in MODES:
        raise ValueError(f"Invalid mode: {mode}. Must be one of: {', '.join(MODES)}")

    load_dotenv()

    retention = {
        frequency: get_env_count(f"MAX_{frequency.name}_SNAPSHOTS", default)
        for frequency, default in DEFAULT_RETENTION.items()
    }

    interval = get_env_int("FREQUENT_INTERVAL_MINUTES", DEFAULT_FREQUENT_INTERVAL_MINUTES)
    if interval <= 0 or 60 % interval != 0:
        logger.warning(f"FREQUENT_INTERVAL_MINUTES must divide 60, using {DEFAULT_FREQUENT_INTERVAL_MINUTES}")
        interval = DEFAULT_FREQUENT_INTERVAL_MINUTES

    log_level = get_env_str("LOG_LEVEL", "info").lower()
    if log_level not in LOG_LEVELS:
        logger.warning(f"Unknown LOG_LEVEL {log_level!r}, using info")
        log_level = "info"

    return OperatorConfig(
        mode=mode,
        log_level=log_level,
        dry_run=get_env_bool("DRY_RUN", False),
        max_deletions_per_run=get_env_int("MAX_DELETIONS_PER_RUN", 100),
        lock_enabled=get_env_bool("LOCK_ENABLED", True),
        lock_file_path=get_env_str("LOCK_FILE_PATH", "/tmp/zfs-snapshot-operator.lock"),
        snapshot_prefix=get_env_str("SNAPSHOT_PREFIX", "autosnap"),
        frequencies=parse_frequencies(
            get_env_list("FREQUENCIES", [f.value for f in STANDARD_FREQUENCIES])
        ),
        retention=retention,
        frequent_interval_minutes=interval,
        pool_whitelist=get_env_list("POOL_WHITELIST"),
        filesystem_whitelist=get_env_list("FILESYSTEM_WHITELIST"),
        scrub_age_threshold_days=get_env_int("SCRUB_AGE_THRESHOLD_DAYS", 90),
        chroot_host_path=get_env_str("CHROOT_HOST_PATH", "/host"),
        chroot_bin_path=get_env_str("CHROOT_BIN_PATH", "/usr/local/sbin"),
        test_fixtures_dir=get_env_str("TEST_FIXTURES_DIR", "test"),
        command_timeout=get_env_int("COMMAND_TIMEOUT", 300),
        metrics_textfile=get_env_str("METRICS_TEXTFILE", ""),
    )
