"""Port definitions for best-effort order enrichment."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Protocol, runtime_checkable

CustomerNameSource = Callable[[Sequence[str]], Mapping[str, str]]
"""Build ``order_id -> customer name`` from cached raw upstream pages."""


@runtime_checkable
class ProductMatcher(Protocol):
    """Resolve a product name to an image reference, or ``None`` when unknown."""

    def image_for(self, product_name: str) -> str | None: ...


ProductMatcherFactory = Callable[[Mapping[str, str]], ProductMatcher]
