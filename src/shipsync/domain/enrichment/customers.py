"""Customer display names for order lines."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

log = getLogger(__name__)


def customer_display_name(first_name: str | None, last_name: str | None) -> str:
    return f"{first_name or ''} {last_name or ''}".strip()


def build_customer_name_map(
    entries: Iterable[tuple[str, str | None, str | None]],
) -> dict[str, str]:
    """Map ``order_id`` to ``"first last"`` for entries that carry a name.

    Later entries for the same order win, matching how a re-fetched page
    supersedes an earlier one.
    """

    names: dict[str, str] = {}
    for order_id, first_name, last_name in entries:
        name = customer_display_name(first_name, last_name)
        if order_id and name:
            names[order_id] = name
    log.debug("Built customer name map with %s entries", len(names))
    return names
