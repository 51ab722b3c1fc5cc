from .metrics import RunMetrics, record_run

__all__ = ['RunMetrics', 'record_run']
