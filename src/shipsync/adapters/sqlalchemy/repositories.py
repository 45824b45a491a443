"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import delete, func, insert, or_, select, update

from shipsync.adapters.sqlalchemy.mappings import (
    ORDER_LINE_COLUMNS,
    SURROGATE_HIGH_WATER_KEY,
    order_line_table,
    product_catalog_table,
    raw_payload_table,
    sync_state_table,
)
from shipsync.domain.model import (
    CUSTOMER_NAME_PLACEHOLDER,
    PRODUCT_IMAGE_PLACEHOLDER,
    WORKFLOW_FIELDS,
    OrderLineRecord,
)
from shipsync.domain.ports.persistence import ConcurrentModificationError, RecordNotFoundError

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from datetime import datetime

    from sqlalchemy import CursorResult
    from sqlalchemy.orm import Session
    from sqlalchemy.sql.elements import ColumnElement

log = getLogger(__name__)

_COLUMNS = order_line_table.c


def _record_values(record: OrderLineRecord) -> dict[str, Any]:
    return {name: getattr(record, name) for name in ORDER_LINE_COLUMNS}


def _to_record(row: Mapping[str, Any]) -> OrderLineRecord:
    return OrderLineRecord(**{name: row[name] for name in ORDER_LINE_COLUMNS})


def _missing(column: ColumnElement[Any], placeholder: str) -> ColumnElement[bool]:
    return or_(column.is_(None), column == "", column == placeholder)


def _rowcount(result: object) -> int:
    return cast("CursorResult[Any]", result).rowcount


class SqlAlchemyOrderLineRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def list_all(self) -> list[OrderLineRecord]:
        stmt = select(order_line_table).order_by(_COLUMNS.surrogate_id)
        return [_to_record(row) for row in self.session.execute(stmt).mappings()]

    def get(self, surrogate_id: int) -> OrderLineRecord:
        stmt = select(order_line_table).where(_COLUMNS.surrogate_id == surrogate_id)
        row = self.session.execute(stmt).mappings().one_or_none()
        if row is None:
            raise RecordNotFoundError(f"No order line with surrogate id {surrogate_id}")
        return _to_record(row)

    def list_by_order(self, order_id: str) -> list[OrderLineRecord]:
        stmt = (
            select(order_line_table)
            .where(_COLUMNS.order_id == order_id)
            .order_by(_COLUMNS.surrogate_id)
        )
        return [_to_record(row) for row in self.session.execute(stmt).mappings()]

    def list_missing_enrichment(self) -> list[OrderLineRecord]:
        stmt = (
            select(order_line_table)
            .where(
                or_(
                    _missing(_COLUMNS.customer_name, CUSTOMER_NAME_PLACEHOLDER),
                    _missing(_COLUMNS.product_image, PRODUCT_IMAGE_PLACEHOLDER),
                )
            )
            .order_by(_COLUMNS.surrogate_id)
        )
        return [_to_record(row) for row in self.session.execute(stmt).mappings()]

    def surrogate_high_water(self) -> int:
        stored = self.session.execute(
            select(sync_state_table.c.value).where(
                sync_state_table.c.key == SURROGATE_HIGH_WATER_KEY
            )
        ).scalar_one_or_none()
        current = self.session.execute(select(func.max(_COLUMNS.surrogate_id))).scalar()
        return max(stored or 0, current or 0)

    def replace_all(self, rows: Sequence[OrderLineRecord]) -> None:
        """Make ``rows`` the complete stored set, checking row versions.

        Stored rows whose id is absent from ``rows`` are deleted. A row whose
        stored version differs from the version it was read with raises
        ``ConcurrentModificationError``; the caller's transaction must then be
        rolled back. Rows identical to what is stored are left untouched.
        """

        stored = {
            row["surrogate_id"]: dict(row)
            for row in self.session.execute(select(order_line_table)).mappings()
        }
        incoming_ids = {record.surrogate_id for record in rows}
        stale = [surrogate_id for surrogate_id in stored if surrogate_id not in incoming_ids]
        if stale:
            self.session.execute(delete(order_line_table).where(_COLUMNS.surrogate_id.in_(stale)))

        new_versions: list[tuple[OrderLineRecord, int]] = []
        for record in rows:
            current = stored.get(record.surrogate_id)
            values = _record_values(record)
            if current is None:
                values["version"] = 1
                self.session.execute(insert(order_line_table).values(**values))
                new_versions.append((record, 1))
                continue
            if current["version"] != record.version:
                raise ConcurrentModificationError(
                    f"Order line {record.surrogate_id} changed since it was read "
                    f"(version {record.version}, stored {current['version']})",
                    surrogate_id=record.surrogate_id,
                )
            if all(values[name] == current[name] for name in ORDER_LINE_COLUMNS):
                continue
            self._versioned_update(record, {**values, "version": record.version + 1})
            new_versions.append((record, record.version + 1))

        self._raise_high_water(max(incoming_ids, default=0))
        for record, version in new_versions:
            record.version = version
        log.debug(
            "Replaced order lines: %s deleted, %s written",
            len(stale),
            len(new_versions),
        )

    def update_workflow(self, record: OrderLineRecord) -> None:
        """Persist claim workflow fields, guarded by the record's version."""

        values: dict[str, Any] = {name: getattr(record, name) for name in WORKFLOW_FIELDS}
        values["version"] = record.version + 1
        self._versioned_update(record, values)
        record.version += 1

    def update_enrichment(self, record: OrderLineRecord) -> None:
        result = self.session.execute(
            update(order_line_table)
            .where(_COLUMNS.surrogate_id == record.surrogate_id)
            .values(customer_name=record.customer_name, product_image=record.product_image)
        )
        if _rowcount(result) != 1:
            raise RecordNotFoundError(f"No order line with surrogate id {record.surrogate_id}")

    def _versioned_update(self, record: OrderLineRecord, values: dict[str, Any]) -> None:
        values.pop("surrogate_id", None)
        result = self.session.execute(
            update(order_line_table)
            .where(_COLUMNS.surrogate_id == record.surrogate_id)
            .where(_COLUMNS.version == record.version)
            .values(**values)
        )
        if _rowcount(result) == 1:
            return
        stored_version = self.session.execute(
            select(_COLUMNS.version).where(_COLUMNS.surrogate_id == record.surrogate_id)
        ).scalar_one_or_none()
        if stored_version is None:
            raise RecordNotFoundError(f"No order line with surrogate id {record.surrogate_id}")
        raise ConcurrentModificationError(
            f"Order line {record.surrogate_id} changed since it was read "
            f"(version {record.version}, stored {stored_version})",
            surrogate_id=record.surrogate_id,
        )

    def _raise_high_water(self, candidate: int) -> None:
        stored = self.session.execute(
            select(sync_state_table.c.value).where(
                sync_state_table.c.key == SURROGATE_HIGH_WATER_KEY
            )
        ).scalar_one_or_none()
        if stored is None:
            self.session.execute(
                insert(sync_state_table).values(key=SURROGATE_HIGH_WATER_KEY, value=candidate)
            )
        elif candidate > stored:
            self.session.execute(
                update(sync_state_table)
                .where(sync_state_table.c.key == SURROGATE_HIGH_WATER_KEY)
                .values(value=candidate)
            )


class SqlAlchemyRawPayloadRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def replace(self, pages: Sequence[str], *, fetched_at: datetime) -> None:
        self.session.execute(delete(raw_payload_table))
        for page, body in enumerate(pages, start=1):
            self.session.execute(
                insert(raw_payload_table).values(page=page, body=body, fetched_at=fetched_at)
            )

    def latest(self) -> list[str]:
        stmt = select(raw_payload_table.c.body).order_by(raw_payload_table.c.page)
        return list(self.session.execute(stmt).scalars())

    def fetched_at(self) -> datetime | None:
        return self.session.execute(select(func.max(raw_payload_table.c.fetched_at))).scalar()


class SqlAlchemyProductCatalogRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, name: str, image: str) -> None:
        exists = self.session.execute(
            select(product_catalog_table.c.name).where(product_catalog_table.c.name == name)
        ).scalar_one_or_none()
        if exists is None:
            self.session.execute(insert(product_catalog_table).values(name=name, image=image))
        else:
            self.session.execute(
                update(product_catalog_table)
                .where(product_catalog_table.c.name == name)
                .values(image=image)
            )

    def image_map(self) -> dict[str, str]:
        stmt = select(product_catalog_table.c.name, product_catalog_table.c.image).order_by(
            product_catalog_table.c.name
        )
        return {name: image for name, image in self.session.execute(stmt)}
