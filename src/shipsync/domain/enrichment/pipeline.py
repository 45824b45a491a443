"""Best-effort backfill of customer names and product images."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from shipsync.domain.model import (
    CUSTOMER_NAME_PLACEHOLDER,
    PRODUCT_IMAGE_PLACEHOLDER,
    OrderLineRecord,
)

from .products import FuzzyProductMatcher

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from shipsync.domain.ports.enrichment import (
        CustomerNameSource,
        ProductMatcher,
        ProductMatcherFactory,
    )

log = getLogger(__name__)


@dataclass(slots=True)
class EnhancementResult:
    names_filled: int = 0
    name_misses: int = 0
    images_filled: int = 0
    image_misses: int = 0
    failed: bool = False
    updated: list[OrderLineRecord] = field(default_factory=list[OrderLineRecord])

    @property
    def misses(self) -> int:
        return self.name_misses + self.image_misses


def _no_customer_names(raw_pages: Sequence[str]) -> dict[str, str]:
    del raw_pages
    return {}


@dataclass(slots=True)
class EnhancementPipeline:
    """Fill missing enrichment fields on order lines, in place.

    Nothing here raises: a lookup that fails or misses leaves the documented
    placeholder in the field and is counted as a miss.
    """

    customer_names: CustomerNameSource = _no_customer_names
    matcher_factory: ProductMatcherFactory = FuzzyProductMatcher

    def run(
        self,
        records: Iterable[OrderLineRecord],
        raw_pages: Sequence[str],
        catalog: Mapping[str, str] | None = None,
    ) -> EnhancementResult:
        result = EnhancementResult()
        pending = [
            record
            for record in records
            if record.needs_customer_name or record.needs_product_image
        ]
        if not pending:
            return result

        names: Mapping[str, str] = {}
        if any(record.needs_customer_name for record in pending):
            names = self._load_customer_names(raw_pages)
        matcher: ProductMatcher | None = None
        if any(record.needs_product_image for record in pending):
            matcher = self._build_matcher(catalog or {})

        for record in pending:
            before = (record.customer_name, record.product_image)
            if record.needs_customer_name:
                self._fill_customer_name(record, names, result)
            if record.needs_product_image:
                self._fill_product_image(record, matcher, result)
            if (record.customer_name, record.product_image) != before:
                result.updated.append(record)

        log.info(
            "Enhanced %s order lines (names %s filled/%s missed, images %s filled/%s missed)",
            len(result.updated),
            result.names_filled,
            result.name_misses,
            result.images_filled,
            result.image_misses,
        )
        return result

    def _load_customer_names(self, raw_pages: Sequence[str]) -> Mapping[str, str]:
        if not raw_pages:
            log.warning("No cached upstream payload; customer names fall back to placeholder")
            return {}
        try:
            return self.customer_names(raw_pages)
        except Exception:
            log.exception("Failed to read customer names from cached payload")
            return {}

    def _build_matcher(self, catalog: Mapping[str, str]) -> ProductMatcher | None:
        if not catalog:
            log.warning("Product catalog is empty; product images fall back to placeholder")
            return None
        try:
            return self.matcher_factory(catalog)
        except Exception:
            log.exception("Failed to index product catalog")
            return None

    @staticmethod
    def _fill_customer_name(
        record: OrderLineRecord,
        names: Mapping[str, str],
        result: EnhancementResult,
    ) -> None:
        name = names.get(record.order_id)
        if name:
            record.customer_name = name
            result.names_filled += 1
        else:
            record.customer_name = CUSTOMER_NAME_PLACEHOLDER
            result.name_misses += 1

    @staticmethod
    def _fill_product_image(
        record: OrderLineRecord,
        matcher: ProductMatcher | None,
        result: EnhancementResult,
    ) -> None:
        image: str | None = None
        if matcher is not None:
            try:
                image = matcher.image_for(record.product_name)
            except Exception:
                log.exception("Product image lookup failed for %r", record.product_name)
        if image:
            record.product_image = image
            result.images_filled += 1
        else:
            log.debug("No image found for %r", record.product_name)
            record.product_image = PRODUCT_IMAGE_PLACEHOLDER
            result.image_misses += 1
