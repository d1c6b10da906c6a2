"""Environment variable loaders for configuration."""

from __future__ import annotations

import os
from typing import Final

from .errors import InvalidConfigurationError

_TRUE_VALUES: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES: Final[frozenset[str]] = frozenset({"0", "false", "no", "off"})


def optional_env_str(name: str) -> str | None:
    """Return the stripped value of ``name``, or ``None`` when unset or blank."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def optional_env_float(name: str) -> float | None:
    value = optional_env_str(name)
    if value is None:
        return None
    try:
        return float(value)
    except ValueError as exc:
        raise InvalidConfigurationError(f"{name} must be a number, got {value!r}") from exc


def optional_env_int(name: str) -> int | None:
    value = optional_env_str(name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError as exc:
        raise InvalidConfigurationError(f"{name} must be an integer, got {value!r}") from exc


def optional_env_bool(name: str) -> bool | None:
    value = optional_env_str(name)
    if value is None:
        return None
    lowered = value.casefold()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise InvalidConfigurationError(f"{name} must be a boolean flag, got {value!r}")
