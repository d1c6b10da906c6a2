"""Application configuration helpers."""

from __future__ import annotations

from .env import (
    optional_env_bool,
    optional_env_float,
    optional_env_int,
    optional_env_str,
)
from .errors import ConfigurationError, InvalidConfigurationError
from .logging import configure_logging
from .output import DEFAULT_OUTPUT_PATH, OutputConfig, get_output_config
from .reconciliation import get_reconciliation_config

__all__ = [
    "DEFAULT_OUTPUT_PATH",
    "ConfigurationError",
    "InvalidConfigurationError",
    "OutputConfig",
    "configure_logging",
    "get_output_config",
    "get_reconciliation_config",
    "optional_env_bool",
    "optional_env_float",
    "optional_env_int",
    "optional_env_str",
]
