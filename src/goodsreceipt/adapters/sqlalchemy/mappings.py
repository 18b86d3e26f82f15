"""SQLAlchemy table metadata for the goods-receipt stores.

Domain objects are frozen dataclasses, so rows are translated by the repositories
instead of being mapped imperatively.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Dialect,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    TypeDecorator,
    UniqueConstraint,
    func,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


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


class DecimalText(TypeDecorator[Decimal]):
    """Exact decimal stored as text; SQLite has no native decimal type."""

    impl = String
    cache_ok = True

    def process_bind_param(self, value: Decimal | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return str(value)

    def process_result_value(self, value: str | None, dialect: Dialect) -> Decimal | None:
        _ = dialect
        if value is None:
            return None
        try:
            return Decimal(value)
        except InvalidOperation:
            log.warning("Discarding non-numeric stored quantity %r", value)
            return None


metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_label)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

# Core tables -----------------------------------------------------------------

purchase_order_table = Table(
    "purchase_order",
    metadata,
    Column("id", String, primary_key=True),
    Column("number", String, nullable=True, index=True),
    Column("created_at", UTCDateTime, nullable=False, server_default=func.now()),
)

purchase_order_item_table = Table(
    "purchase_order_item",
    metadata,
    Column("row_id", Integer, primary_key=True, autoincrement=True),
    Column(
        "order_id",
        String,
        ForeignKey("purchase_order.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("item_id", String, nullable=False),
    Column("position", Integer, nullable=False),
    Column("name", String, nullable=False, default=""),
    Column("quantity", DecimalText, nullable=False),
    Column("unit", String, nullable=True),
    Column("inventory_item_id", String, nullable=True),
    Column("received_quantity", DecimalText, nullable=False),
    Column("unit_price", DecimalText, nullable=True),
    UniqueConstraint("order_id", "item_id"),
)

unloading_report_table = Table(
    "unloading_report",
    metadata,
    Column("id", String, primary_key=True),
    Column("po_number", String, nullable=True, index=True),
    Column("filled_at", UTCDateTime, nullable=True),
    Column("selected_items", JSON, nullable=False),
)

inventory_batch_table = Table(
    "inventory_batch",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("line_item_id", String, nullable=False, index=True),
    Column("order_id", String, nullable=True),
    Column("lot_number", String, nullable=True),
    Column("quantity", DecimalText, nullable=True),
    Column("created_at", UTCDateTime, nullable=False, server_default=func.now()),
)


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the goods-receipt metadata."""

    log.info("Creating all tables")
    metadata.create_all(engine)
