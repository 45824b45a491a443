"""SQLAlchemy table metadata for the order-line record store."""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Final

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    DateTime,
    Dialect,
    Enum,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
)

from shipsync.domain.model import ClaimStatus, PaymentType

if TYPE_CHECKING:
    from enum import StrEnum

NAMING_CONVENTION: Final[dict[str, str]] = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_N_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=NAMING_CONVENTION)

SURROGATE_HIGH_WATER_KEY: Final[str] = "order_line.surrogate_high_water"


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class Money(TypeDecorator[Decimal]):
    """Decimal amounts stored as integer cents."""

    impl = BigInteger
    cache_ok = True

    def process_bind_param(self, value: Decimal | None, dialect: Dialect) -> int | None:
        _ = dialect
        if value is None:
            return None
        return int((Decimal(value) * 100).to_integral_value())

    def process_result_value(self, value: int | None, dialect: Dialect) -> Decimal | None:
        _ = dialect
        if value is None:
            return None
        return (Decimal(value) / 100).quantize(Decimal("0.01"))


def _enum_values(enum_type: type[StrEnum]) -> list[str]:
    return [member.value for member in enum_type]


order_line_table = Table(
    "order_line",
    metadata,
    Column("surrogate_id", Integer, primary_key=True, autoincrement=False),
    Column("order_id", String(64), nullable=False),
    Column("product_code", String(128), nullable=False),
    Column("product_name", String(512), nullable=False, default=""),
    Column("order_date", UTCDateTime(), nullable=True),
    Column("quantity", Integer, nullable=False, default=1),
    Column("pincode", String(16), nullable=True),
    Column("selling_price", Money(), nullable=False),
    Column("order_total", Money(), nullable=False),
    Column(
        "payment_type",
        Enum(
            PaymentType,
            name="payment_type",
            native_enum=False,
            values_callable=_enum_values,
            length=16,
        ),
        nullable=False,
    ),
    Column("prepaid_amount", Money(), nullable=False),
    Column("allocation_ratio", Integer, nullable=False, default=1),
    Column("allocated_total", Money(), nullable=False),
    Column("collectable_amount", Money(), nullable=False),
    Column(
        "status",
        Enum(
            ClaimStatus,
            name="claim_status",
            native_enum=False,
            values_callable=_enum_values,
            length=32,
        ),
        nullable=False,
        default=ClaimStatus.UNCLAIMED,
    ),
    Column("claimed_by", String(128), nullable=True),
    Column("claimed_at", UTCDateTime(), nullable=True),
    Column("last_claimed_by", String(128), nullable=True),
    Column("last_claimed_at", UTCDateTime(), nullable=True),
    Column("clone_status", String(32), nullable=True),
    Column("cloned_order_id", String(64), nullable=True),
    Column("is_cloned_row", Boolean, nullable=False, default=False),
    Column("label_downloaded", Boolean, nullable=False, default=False),
    Column("handover_at", UTCDateTime(), nullable=True),
    Column("customer_name", String(256), nullable=True),
    Column("product_image", String(1024), nullable=True),
    Column("version", Integer, nullable=False, default=1),
    UniqueConstraint("order_id", "product_code"),
)

sync_state_table = Table(
    "sync_state",
    metadata,
    Column("key", String(128), primary_key=True),
    Column("value", Integer, nullable=False),
)

raw_payload_table = Table(
    "raw_payload",
    metadata,
    Column("page", Integer, primary_key=True, autoincrement=False),
    Column("body", Text, nullable=False),
    Column("fetched_at", UTCDateTime(), nullable=False),
)

product_catalog_table = Table(
    "product_catalog",
    metadata,
    Column("name", String(512), primary_key=True),
    Column("image", String(1024), nullable=False),
)

ORDER_LINE_COLUMNS: Final[tuple[str, ...]] = tuple(
    column.name for column in order_line_table.columns
)
