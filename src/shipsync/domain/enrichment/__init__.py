"""Best-effort enrichment of order lines."""

from __future__ import annotations

from .customers import build_customer_name_map, customer_display_name
from .pipeline import EnhancementPipeline, EnhancementResult
from .products import FuzzyProductMatcher, product_variations, remove_size, similarity

__all__ = [
    "EnhancementPipeline",
    "EnhancementResult",
    "FuzzyProductMatcher",
    "build_customer_name_map",
    "customer_display_name",
    "product_variations",
    "remove_size",
    "similarity",
]
