#!/usr/bin/env python3
"""
Command-line entry point for the ZFS snapshot operator.
Runs one snapshot management pass, or shows pool and snapshot status.
"""

import argparse
import json
import logging
import sys
from typing import Dict, List, Optional

from tabulate import tabulate

from zfs_snapshot_operator import __version__
from zfs_snapshot_operator.config.base_config import LOG_LEVELS, MODES, OperatorConfig, load_operator_config
from zfs_snapshot_operator.operator.coordinator import SnapshotOperator
from zfs_snapshot_operator.storage.interfaces import SnapshotBackend
from zfs_snapshot_operator.storage.zfs_manager import ZFSManager
from zfs_snapshot_operator.utils.errors import handle_operator_errors

logger = logging.getLogger(__name__)


def setup_logging(level: str = "info"):
    """Configure logging with consistent format."""
    log_level = logging.DEBUG if level == "debug" else logging.INFO
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    # basicConfig is a no-op once handlers exist
    logging.getLogger().setLevel(log_level)


def parse_args(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description='ZFS snapshot operator')
    parser.add_argument('--mode', choices=MODES, default='direct',
                        help='Operation mode: test, direct, or chroot')
    parser.add_argument('--log-level', choices=LOG_LEVELS, default=None,
                        help='Log level (overrides LOG_LEVEL)')
    parser.add_argument('--dry-run', action='store_true',
                        help='Log what would be created or deleted without changing anything')
    parser.add_argument('--version', action='store_true',
                        help='Show version and exit')
    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    subparsers.add_parser('run', help='Create and prune snapshots (default)')

    status_parser = subparsers.add_parser('status', help='Show pools, health and snapshot counts')
    status_parser.add_argument('--format', choices=['table', 'json'], default='table',
                               help='Output format')

    return parser.parse_args(argv)


def build_config(args) -> OperatorConfig:
    config = load_operator_config(args.mode)
    if args.log_level:
        config.log_level = args.log_level
    if args.dry_run:
        config.dry_run = True
        logger.info("Dry-run mode enabled via command-line flag")
    return config


def collect_status(config: OperatorConfig, backend: SnapshotBackend) -> List[Dict]:
    """One row per listed volume with its health and per-frequency snapshot counts."""
    statuses = backend.get_health_status()
    snapshots = backend.list_snapshots()

    rows = []
    for pool in backend.list_volumes():
        status = statuses.get(pool.pool_name)
        row = {
            'volume': pool.display_name,
            'type': 'pool' if pool.is_root else 'filesystem',
            'state': status.state if status else 'UNKNOWN',
            'healthy': bool(status and status.is_healthy()),
            'used': pool.used,
            'avail': pool.avail,
        }
        for frequency in config.frequencies:
            row[frequency.value] = sum(
                1 for s in snapshots
                if not pool.is_root and s.filesystem_name == pool.filesystem_name and s.frequency is frequency
            )
        rows.append(row)
    return rows


def print_status_table(rows: List[Dict]):
    """Print status in table format."""
    if not rows:
        print("No pools found")
        return

    headers = rows[0].keys()
    print(tabulate([r.values() for r in rows], headers=headers, tablefmt='grid'))


@handle_operator_errors
def run_operator(config: OperatorConfig) -> int:
    state = SnapshotOperator(config).run()
    return 0 if state.succeeded else 1


@handle_operator_errors
def show_status(config: OperatorConfig, output_format: str) -> int:
    rows = collect_status(config, ZFSManager(config))
    if output_format == 'table':
        print_status_table(rows)
    else:
        print(json.dumps(rows, indent=2))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the snapshot operator."""
    args = parse_args(argv)

    if args.version:
        print(f"zfs-snapshot-operator version {__version__}")
        return 0

    setup_logging(args.log_level or "info")
    try:
        config = build_config(args)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    setup_logging(config.log_level)
    logger.info(
        f"Starting zfs-snapshot-operator version {__version__} in {config.mode} mode "
        f"with {config.log_level} log level"
    )

    try:
        if args.command == 'status':
            return show_status(config, args.format)
        return run_operator(config)
    except KeyboardInterrupt:
        logger.info("Operation stopped by user")
        return 130


if __name__ == '__main__':
    sys.exit(main())
