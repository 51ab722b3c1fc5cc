"""
Decoding of ``zfs list -j`` and ``zpool status -j`` output.

Both commands emit a versioned envelope::

    {"output_version": {"command": "zfs list", ...},
     "datasets": {"tank/data@autosnap_2024-01-15_10:00:00_hourly": {...}}}

Results are returned in key order so callers see a stable sequence.
"""

import json
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from zfs_snapshot_operator.models.models import EPOCH, Frequency, Pool, PoolStatus, Snapshot
from zfs_snapshot_operator.utils.errors import ParseError

SNAPSHOT_TIME_FORMAT = "%Y-%m-%d_%H:%M:%S"
SCAN_TIME_FORMAT = "%a %b %d %H:%M:%S %Y"

FREQUENCY_PATTERN = re.compile(r".*_(yearly|monthly|weekly|daily|hourly|frequently)$")
DATETIME_PATTERN = re.compile(r"(\d{4}-\d{2}-\d{2}_\d{2}:\d{2}:\d{2})")


def _load(data, section: str) -> Dict[str, Any]:
    if isinstance(data, bytes):
        data = data.decode("utf-8", errors="replace")
    try:
        response = json.loads(data)
    except (TypeError, ValueError) as e:
        raise ParseError(f"failed to parse JSON: {e}")
    if not isinstance(response, dict):
        raise ParseError("failed to parse JSON: top level is not an object")
    entries = response.get(section) or {}
    if not isinstance(entries, dict):
        raise ParseError(f"failed to parse JSON: '{section}' is not an object")
    return entries


def parse_snapshot_name(name: str, prefix: Optional[str] = None) -> Tuple[datetime, Optional[Frequency]]:
    """Extract creation time and frequency from an operator snapshot name."""
    frequency = None
    match = FREQUENCY_PATTERN.match(name)
    if match and (not prefix or name.startswith(f"{prefix}_")):
        frequency = Frequency.from_label(match.group(1))

    date_time = EPOCH
    match = DATETIME_PATTERN.search(name)
    if match:
        try:
            date_time = datetime.strptime(match.group(1), SNAPSHOT_TIME_FORMAT).replace(tzinfo=timezone.utc)
        except ValueError:
            pass
    return date_time, frequency


def format_snapshot_name(prefix: str, t: datetime, frequency: Frequency) -> str:
    """Build the name of a snapshot the operator creates."""
    return f"{prefix}_{t.strftime(SNAPSHOT_TIME_FORMAT)}_{frequency.value}"


def parse_snapshots_json(data, prefix: Optional[str] = None) -> List[Snapshot]:
    """Parse ``zfs list -j -t snapshot`` output."""
    snapshots = []
    datasets = _load(data, "datasets")
    for key in sorted(datasets):
        dataset = datasets[key] or {}
        if dataset.get("type") != "SNAPSHOT":
            continue

        name = dataset.get("name", key)
        snapshot_name = dataset.get("snapshot_name") or name.partition("@")[2]
        filesystem_name = dataset.get("dataset") or name.partition("@")[0]
        pool_name = dataset.get("pool") or filesystem_name.split("/")[0]

        date_time, frequency = parse_snapshot_name(snapshot_name, prefix)
        snapshots.append(Snapshot(
            pool_name=pool_name,
            filesystem_name=filesystem_name,
            snapshot_name=snapshot_name,
            date_time=date_time,
            frequency=frequency,
        ))
    return snapshots


def _property(dataset: Dict[str, Any], name: str) -> str:
    prop = (dataset.get("properties") or {}).get(name) or {}
    value = prop.get("value", "")
    return "" if value is None else str(value)


def parse_pools_json(data) -> List[Pool]:
    """Parse ``zfs list -j`` output into pool roots and filesystems."""
    pools = []
    datasets = _load(data, "datasets")
    for key in sorted(datasets):
        dataset = datasets[key] or {}
        if dataset.get("type") != "FILESYSTEM":
            continue

        name = dataset.get("name", key)
        pool_name = dataset.get("pool") or name.split("/")[0]
        pools.append(Pool(
            pool_name=pool_name,
            filesystem_name="" if name == pool_name else name,
            used=_property(dataset, "used"),
            avail=_property(dataset, "available"),
            mountpoint=_property(dataset, "mountpoint"),
        ))
    return pools


def _scan_time(value) -> int:
    """Scan times come as epoch numbers or as ctime-like text."""
    if value is None or value == "":
        return 0
    if isinstance(value, (int, float)):
        return int(value)
    text = str(value).strip()
    if text.isdigit():
        return int(text)
    try:
        parsed = datetime.strptime(" ".join(text.split()), SCAN_TIME_FORMAT)
    except ValueError:
        return 0
    return int(parsed.replace(tzinfo=timezone.utc).timestamp())


def _text(value) -> str:
    return "" if value is None else str(value)


def parse_pool_status_json(data) -> Dict[str, PoolStatus]:
    """Parse ``zpool status -j`` output, keyed by pool name."""
    status_map = {}
    pools = _load(data, "pools")
    for pool_name in sorted(pools):
        pool = pools[pool_name] or {}
        status = PoolStatus(
            name=_text(pool.get("name") or pool_name),
            state=_text(pool.get("state")),
            status=_text(pool.get("status")),
            action=_text(pool.get("action")),
            error_count=_text(pool.get("error_count")),
        )

        root_vdev = (pool.get("vdevs") or {}).get(pool_name)
        if root_vdev:
            status.alloc_space = _text(root_vdev.get("alloc_space"))
            status.total_space = _text(root_vdev.get("total_space"))
            status.read_errors = _text(root_vdev.get("read_errors"))
            status.write_errors = _text(root_vdev.get("write_errors"))
            status.checksum_errors = _text(root_vdev.get("checksum_errors"))

        scan = pool.get("scan") or pool.get("scan_stats")
        if scan:
            status.scrub_function = _text(scan.get("function")).lower()
            status.scrub_state = _text(scan.get("state")).lower() or "none"
            status.last_scrub_time = _scan_time(scan.get("end_time"))
            if status.last_scrub_time == 0:
                status.last_scrub_time = _scan_time(scan.get("start_time"))
        else:
            status.scrub_state = "none"

        status_map[pool_name] = status
    return status_map


def parse_version_json(data) -> Tuple[str, str]:
    """Parse ``zfs version -j`` output into (userland, kernel)."""
    if isinstance(data, bytes):
        data = data.decode("utf-8", errors="replace")
    try:
        response = json.loads(data)
    except (TypeError, ValueError) as e:
        raise ParseError(f"failed to parse version JSON: {e}")
    if not isinstance(response, dict):
        raise ParseError("failed to parse version JSON: top level is not an object")
    version = response.get("zfs_version") or {}
    return _text(version.get("userland")), _text(version.get("kernel"))
