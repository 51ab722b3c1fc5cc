"""Snapshot operator: run coordination, per-frequency sequencing and run bookkeeping."""
from .run_state import RunState, FrequencyOutcome
from .lock import LockFile
from .sequencer import FrequencySequencer
from .reporting import PoolReporter, parse_size
from .coordinator import SnapshotOperator

__all__ = [
    'RunState',
    'FrequencyOutcome',
    'LockFile',
    'FrequencySequencer',
    'PoolReporter',
    'parse_size',
    'SnapshotOperator',
]
