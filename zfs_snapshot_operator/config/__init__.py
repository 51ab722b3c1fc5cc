"""Configuration package for the snapshot operator."""
from .base_config import (
    OperatorConfig,
    ZFSCommands,
    build_commands,
    load_operator_config,
)

__all__ = ['OperatorConfig', 'ZFSCommands', 'build_commands', 'load_operator_config']
