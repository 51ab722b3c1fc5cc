"""Models package for the snapshot operator."""
from .models import (
    Frequency,
    STANDARD_FREQUENCIES,
    Snapshot,
    Pool,
    PoolStatus,
    EPOCH,
)

__all__ = [
    'Frequency',
    'STANDARD_FREQUENCIES',
    'Snapshot',
    'Pool',
    'PoolStatus',
    'EPOCH',
]
