"""Environment variable loaders for configuration."""

from __future__ import annotations

import os
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING

from .errors import ConfigurationError, MissingConfigurationError

if TYPE_CHECKING:
    from collections.abc import Sequence


def require_env_vars(names: Sequence[str]) -> dict[str, str]:
    """Return the given environment variables or raise if any are missing/blank."""

    missing: list[str] = []
    values: dict[str, str] = {}
    for name in names:
        value = os.getenv(name)
        if value is None or not value.strip():
            missing.append(name)
            continue
        values[name] = value

    if missing:
        missing_list = ", ".join(sorted(missing))
        raise MissingConfigurationError(f"Missing configuration for: {missing_list}")

    return values


def require_env_var(name: str) -> str:
    """Return a required environment variable by name."""

    return require_env_vars([name])[name]


def optional_env_var(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def env_float(name: str, default: float) -> float:
    value = optional_env_var(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from exc


def env_int(name: str, default: int) -> int:
    value = optional_env_var(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from exc


def env_decimal(name: str, default: Decimal) -> Decimal:
    value = optional_env_var(name)
    if value is None:
        return default
    try:
        return Decimal(value)
    except InvalidOperation as exc:
        raise ConfigurationError(f"{name} must be a decimal number, got {value!r}") from exc


def env_flag(name: str, *, default: bool) -> bool:
    value = optional_env_var(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes", "on"}
