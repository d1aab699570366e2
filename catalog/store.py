"""
catalog/store.py -- SQLAlchemy-backed persistence layer for products.

Uses SQLAlchemy Core (not ORM) so the Product dataclass in catalog/models.py
remains the authoritative domain representation. Swapping SQLite for
PostgreSQL is a connection string change, not a rewrite.

Pattern: Repository + Data Mapper. ProductRepository is the contract the
routes depend on; ProductStore is the SQLAlchemy variant. _row_to_product is
the mapper, and it re-validates every row it builds.

Errors:
  get/update/delete of an unknown id raise NotFoundError.
  SQLAlchemyError and rows that fail Product.validate() raise StoreError.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = ProductStore("sqlite:///storefront.db")
    store.create_product(Product.create("Keyboard", 49.9))
    page = store.list_products(page=1, limit=20, sort="desc")
    store.close()
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Protocol

from sqlalchemy import Column, Float, MetaData, String, Table, create_engine, event
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from catalog.models import Product
from core.errors import NotFoundError, StoreError, ValidationError

logger = logging.getLogger("storefront.catalog.store")

SORT_ORDERS = ("asc", "desc")

# ---------------------------------------------------------------------------
# Contract
# ---------------------------------------------------------------------------


class ProductRepository(Protocol):
    """What the product routes need from a resource store."""

    def create_product(self, product: Product) -> None: ...

    def get_product(self, product_id: str) -> Product: ...

    def list_products(self, page: int = 0, limit: int = 0, sort: str = "asc") -> list[Product]: ...

    def update_product(self, product: Product) -> None: ...

    def delete_product(self, product_id: str) -> None: ...


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_products = Table(
    "products",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("name", String(255), nullable=False),
    Column("price", Float),
    Column("created_at", String(32), nullable=False),  # ISO 8601, UTC
)


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class ProductStore:
    """SQLAlchemy-backed ProductRepository."""

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        metadata.create_all(self.engine)

    @contextmanager
    def _connect(self, operation: str) -> Iterator[Connection]:
        try:
            with self.engine.connect() as conn:
                yield conn
        except SQLAlchemyError as exc:
            logger.error("product store %s failed: %s", operation, type(exc).__name__)
            raise StoreError(f"product store {operation} failed") from exc

    def create_product(self, product: Product) -> None:
        with self._connect("create") as conn:
            conn.execute(
                _products.insert().values(
                    id=product.id,
                    name=product.name,
                    price=product.price,
                    created_at=product.created_at.isoformat(),
                )
            )
            conn.commit()

    def get_product(self, product_id: str) -> Product:
        """Return the product with this id. Raises NotFoundError if there is none."""
        with self._connect("get") as conn:
            row = conn.execute(_products.select().where(_products.c.id == product_id)).fetchone()
        if row is None:
            raise NotFoundError("product", product_id)
        return _row_to_product(row)

    def list_products(self, page: int = 0, limit: int = 0, sort: str = "asc") -> list[Product]:
        """Return products ordered by created_at.

        page is 1-based. Paging applies only when both page and limit are
        positive; otherwise every product is returned. Unknown sort values
        fall back to ascending.
        """
        order = _products.c.created_at.desc() if sort == "desc" else _products.c.created_at.asc()
        query = _products.select().order_by(order, _products.c.id)
        if page > 0 and limit > 0:
            query = query.limit(limit).offset((page - 1) * limit)
        with self._connect("list") as conn:
            rows = conn.execute(query).fetchall()
        return [_row_to_product(r) for r in rows]

    def update_product(self, product: Product) -> None:
        """Persist name and price. id and created_at are never written."""
        with self._connect("update") as conn:
            result = conn.execute(
                _products.update()
                .where(_products.c.id == product.id)
                .values(name=product.name, price=product.price)
            )
            conn.commit()
        if result.rowcount == 0:
            raise NotFoundError("product", product.id)

    def delete_product(self, product_id: str) -> None:
        with self._connect("delete") as conn:
            result = conn.execute(_products.delete().where(_products.c.id == product_id))
            conn.commit()
        if result.rowcount == 0:
            raise NotFoundError("product", product_id)

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _parse_timestamp(value: str) -> datetime:
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        # Naive timestamps are stored UTC
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _row_to_product(row) -> Product:
    try:
        product = Product(
            id=row.id,
            name=row.name,
            price=row.price,
            created_at=_parse_timestamp(row.created_at),
        )
        product.validate()
    except (ValidationError, ValueError, TypeError) as exc:
        logger.error("Corrupted product record %r: %s", row.id, exc)
        raise StoreError(f"corrupted product record {row.id!r}") from exc
    return product
