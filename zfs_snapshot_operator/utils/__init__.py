"""Utility modules for the snapshot operator."""
from .errors import (
    OperatorError,
    LockError,
    CommandError,
    ParseError,
    ListingError,
    SnapshotCreateError,
    SnapshotDeleteError,
    UnhealthyPoolError,
    handle_operator_errors,
)

__all__ = [
    'OperatorError',
    'LockError',
    'CommandError',
    'ParseError',
    'ListingError',
    'SnapshotCreateError',
    'SnapshotDeleteError',
    'UnhealthyPoolError',
    'handle_operator_errors',
]
