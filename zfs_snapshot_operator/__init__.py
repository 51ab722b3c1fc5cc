"""ZFS snapshot operator: periodic snapshot creation and retention for ZFS datasets."""

__version__ = "0.1.0"
