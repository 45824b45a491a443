"""Pydantic models describing the carrier's open-order payloads."""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import cast

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from shipsync.domain.ports.fetching import MalformedResponseError


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _to_text(value: object) -> object:
    if isinstance(value, int | float) and not isinstance(value, bool):
        return str(value)
    return _blank_to_none(value)


def _to_decimal(value: object) -> Decimal:
    """Lenient money parsing; missing or unparseable amounts count as zero."""

    if value is None or isinstance(value, bool):
        return Decimal(0)
    text = str(value).strip().replace(",", "")
    if not text:
        return Decimal(0)
    try:
        return Decimal(text)
    except InvalidOperation:
        return Decimal(0)


class CarrierBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ProductPayload(CarrierBaseModel):
    name: str = Field(default="", validation_alias=AliasChoices("product", "name"))
    product_code: str | None = None
    price: Decimal = Decimal(0)
    quantity: int = Field(default=1, validation_alias=AliasChoices("amount", "quantity"))

    _normalize_code = field_validator("product_code", mode="before")(_to_text)
    _normalize_price = field_validator("price", mode="before")(_to_decimal)

    @field_validator("name", mode="before")
    @classmethod
    def _name_or_blank(cls, value: object) -> str:
        return "" if value is None else str(value).strip()

    @field_validator("quantity", mode="before")
    @classmethod
    def _parse_quantity(cls, value: object) -> int:
        try:
            quantity = int(str(value).strip())
        except (TypeError, ValueError):
            return 1
        return max(quantity, 1)


class OrderPayload(CarrierBaseModel):
    order_id: str
    order_date: str | None = None
    order_total: Decimal = Decimal(0)
    order_tags: list[str] = Field(default_factory=list[str])
    products: list[ProductPayload] = Field(default_factory=list[ProductPayload])
    s_firstname: str | None = None
    s_lastname: str | None = None
    pincode: str | None = Field(
        default=None,
        validation_alias=AliasChoices("s_zipcode", "pincode", "s_pincode"),
    )

    _normalize_ids = field_validator("order_id", "pincode", mode="before")(_to_text)
    _normalize_text = field_validator(
        "order_date", "s_firstname", "s_lastname", mode="before"
    )(_blank_to_none)
    _normalize_total = field_validator("order_total", mode="before")(_to_decimal)

    @field_validator("order_tags", mode="before")
    @classmethod
    def _split_tags(cls, value: object) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return [tag.strip() for tag in value.split(",") if tag.strip()]
        if isinstance(value, list):
            return [str(tag).strip() for tag in cast(list[object], value) if str(tag).strip()]
        return []


class CustomerNamePayload(CarrierBaseModel):
    order_id: str | None = None
    s_firstname: str | None = None
    s_lastname: str | None = None

    _normalize_id = field_validator("order_id", mode="before")(_to_text)


def extract_order_payloads(payload: object) -> list[object]:
    """Return the list of raw orders from any accepted envelope shape.

    Accepted shapes: a bare list, ``{"orders": [...]}``,
    ``{"success": ..., "message": [...]}`` and
    ``{"success": ..., "data": {"orders": [...]}}``.
    """

    if isinstance(payload, list):
        return cast(list[object], payload)
    if isinstance(payload, Mapping):
        envelope = cast(Mapping[str, object], payload)
        orders = envelope.get("orders")
        if isinstance(orders, list):
            return cast(list[object], orders)
        message = envelope.get("message")
        if "success" in envelope and isinstance(message, list):
            return cast(list[object], message)
        data = envelope.get("data")
        if isinstance(data, Mapping):
            nested = cast(Mapping[str, object], data).get("orders")
            if isinstance(nested, list):
                return cast(list[object], nested)
    raise MalformedResponseError("Unrecognised open-orders payload shape")
