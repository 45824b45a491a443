"""Carrier (open-order API) configuration values."""

from __future__ import annotations

import base64
from dataclasses import dataclass, field

from .env import env_float, env_int, optional_env_var, require_env_vars
from .errors import ConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

CARRIER_BASE_URL = "https://app.shipway.com/api"
CARRIER_TIMEOUT_SECONDS = 15.0
OPEN_ORDER_STATUS = "O"
DEFAULT_MAX_PAGES = 1


@dataclass(frozen=True)
class CarrierConfig:
    """Holds the carrier API endpoint, credentials and transport settings."""

    auth_header: str
    base_url: str = CARRIER_BASE_URL
    open_status: str = OPEN_ORDER_STATUS
    max_pages: int = DEFAULT_MAX_PAGES
    resilience: ResilienceConfig = field(
        default_factory=lambda: ResilienceConfig(
            name="carrier",
            base_url=CARRIER_BASE_URL,
            timeout_seconds=CARRIER_TIMEOUT_SECONDS,
        )
    )

    @property
    def orders_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/getorders"


def basic_auth_header(username: str, password: str) -> str:
    token = base64.b64encode(f"{username}:{password}".encode()).decode("ascii")
    return f"Basic {token}"


def _resolve_auth_header() -> str:
    header = optional_env_var("CARRIER_BASIC_AUTH_HEADER")
    if header is not None:
        return header
    values = require_env_vars(("CARRIER_USERNAME", "CARRIER_PASSWORD"))
    return basic_auth_header(values["CARRIER_USERNAME"], values["CARRIER_PASSWORD"])


def get_carrier_config(
    *,
    max_pages: int | None = None,
    resilience: ResilienceConfig | None = None,
) -> CarrierConfig:
    base_url = optional_env_var("CARRIER_API_BASE_URL") or CARRIER_BASE_URL
    timeout = env_float("CARRIER_TIMEOUT_SECONDS", CARRIER_TIMEOUT_SECONDS)
    if timeout <= 0:
        raise ConfigurationError("CARRIER_TIMEOUT_SECONDS must be positive")
    retries = env_int("CARRIER_MAX_RETRIES", 0)
    if retries < 0:
        raise ConfigurationError("CARRIER_MAX_RETRIES must be non-negative")
    pages = max_pages if max_pages is not None else env_int("CARRIER_MAX_PAGES", DEFAULT_MAX_PAGES)
    if pages < 1:
        raise ConfigurationError("At least one page of open orders must be requested")

    return CarrierConfig(
        auth_header=_resolve_auth_header(),
        base_url=base_url,
        open_status=optional_env_var("CARRIER_OPEN_STATUS") or OPEN_ORDER_STATUS,
        max_pages=pages,
        resilience=resilience
        or ResilienceConfig(
            name="carrier",
            base_url=base_url,
            timeout_seconds=timeout,
            retry=RetryPolicy(total=retries),
            ratelimit=RateLimit(max_calls=2, per_seconds=1.0),
            default_headers={"Content-Type": "application/json"},
        ),
    )
