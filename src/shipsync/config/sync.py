"""Reconciliation defaults for the open-order sync cycle."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from shipsync.domain.payment import COLLECT_ADVANCE_RATE, COLLECT_TAG

from .carrier import DEFAULT_MAX_PAGES
from .env import env_decimal, env_flag, env_int, optional_env_var
from .errors import ConfigurationError

DEFAULT_COLLECT_TAG = COLLECT_TAG
DEFAULT_COLLECT_ADVANCE_RATE = COLLECT_ADVANCE_RATE


@dataclass(frozen=True, slots=True)
class SyncConfig:
    max_pages: int = DEFAULT_MAX_PAGES
    collect_tag: str = DEFAULT_COLLECT_TAG
    collect_advance_rate: Decimal = DEFAULT_COLLECT_ADVANCE_RATE
    distribute_remainder: bool = False
    enhance: bool = True


def get_sync_config() -> SyncConfig:
    rate = env_decimal("SHIPSYNC_COLLECT_ADVANCE_RATE", DEFAULT_COLLECT_ADVANCE_RATE)
    if not Decimal(0) <= rate <= Decimal(1):
        raise ConfigurationError("SHIPSYNC_COLLECT_ADVANCE_RATE must be between 0 and 1")
    return SyncConfig(
        max_pages=env_int("CARRIER_MAX_PAGES", DEFAULT_MAX_PAGES),
        collect_tag=optional_env_var("SHIPSYNC_COLLECT_TAG") or DEFAULT_COLLECT_TAG,
        collect_advance_rate=rate,
        distribute_remainder=env_flag("SHIPSYNC_DISTRIBUTE_REMAINDER", default=False),
        enhance=env_flag("SHIPSYNC_ENHANCE", default=True),
    )
