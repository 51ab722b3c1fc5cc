"""Retention engine: period bucketing, retention policy and classification."""
from .period import time_period_key, same_period, to_utc
from .policy import RetentionPolicy, PERIOD_LENGTHS
from .classifier import (
    Classification,
    classify_snapshots,
    apply_safety_guard,
    snapshot_order,
)

__all__ = [
    'time_period_key',
    'same_period',
    'to_utc',
    'RetentionPolicy',
    'PERIOD_LENGTHS',
    'Classification',
    'classify_snapshots',
    'apply_safety_guard',
    'snapshot_order',
]
