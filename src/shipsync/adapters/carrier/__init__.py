"""Public interface for the carrier adapter."""

from __future__ import annotations

from .client import CarrierFetcher
from .schema import OrderPayload, ProductPayload, extract_order_payloads
from .translator import extract_customer_names, parse_open_order, parse_open_orders

__all__ = [
    "CarrierFetcher",
    "OrderPayload",
    "ProductPayload",
    "extract_customer_names",
    "extract_order_payloads",
    "parse_open_order",
    "parse_open_orders",
]
