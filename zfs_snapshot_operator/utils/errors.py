"""Error types for the snapshot operator."""

import logging
from functools import wraps

logger = logging.getLogger(__name__)


class OperatorError(Exception):
    """Base class for snapshot operator errors."""
    def __init__(self, message, code='OperatorError'):
        super().__init__(message)
        self.message = message
        self.code = code


class LockError(OperatorError):
    """Another instance holds the lock, or the lock file cannot be created."""
    def __init__(self, message):
        super().__init__(message, "LockError")


class CommandError(OperatorError):
    """An external zfs/zpool command failed."""
    def __init__(self, args, exit_code=None, output=""):
        command = " ".join(args)
        message = f"command '{command}' failed"
        if exit_code is not None:
            message += f" with exit code {exit_code}"
        if output:
            message += f", output: {output.strip()}"
        super().__init__(message, "CommandError")
        self.args_list = list(args)
        self.exit_code = exit_code
        self.output = output


class ParseError(OperatorError):
    """Command output could not be decoded."""
    def __init__(self, message):
        super().__init__(message, "ParseError")


class ListingError(OperatorError):
    """Volumes, snapshots or pool status could not be enumerated."""
    def __init__(self, message):
        super().__init__(message, "ListingError")


class SnapshotCreateError(OperatorError):
    """A snapshot could not be created."""
    def __init__(self, snapshot_name, reason):
        super().__init__(f"failed to create snapshot {snapshot_name}: {reason}", "SnapshotCreateError")
        self.snapshot_name = snapshot_name


class SnapshotDeleteError(OperatorError):
    """A snapshot could not be destroyed."""
    def __init__(self, snapshot_name, reason):
        super().__init__(f"failed to delete snapshot {snapshot_name}: {reason}", "SnapshotDeleteError")
        self.snapshot_name = snapshot_name


class UnhealthyPoolError(OperatorError):
    """A pool failed its health check."""
    def __init__(self, pool_name, problems=None):
        detail = f" ({', '.join(problems)})" if problems else ""
        super().__init__(f"pool {pool_name} is not healthy{detail}", "UnhealthyPool")
        self.pool_name = pool_name


def handle_operator_errors(f):
    """Decorator for CLI commands: log operator errors and return exit status 1."""
    @wraps(f)
    def wrapped(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except OperatorError as e:
            logger.error(f"{e.code} in {f.__name__}: {e.message}")
            return 1
    return wrapped
