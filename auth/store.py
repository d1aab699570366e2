"""
auth/store.py -- SQLAlchemy Core persistence layer for identities.

Pattern: Repository + Data Mapper (same as catalog/store.py).
UserRepository is the contract the rest of the code depends on; UserStore is
the SQLAlchemy variant of it and _row_to_user is the mapper. Route code never
touches SQL directly.

Errors:
  Lookups that find nothing raise NotFoundError. Any SQLAlchemyError,
  including the UNIQUE(email) violation on a duplicate registration, is
  re-raised as StoreError with the driver exception chained for the logs.

Security:
  All queries use bound parameters. No f-strings in SQL.

Layer rule: no imports from api/ or catalog/.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Protocol

from sqlalchemy import Column, MetaData, String, Table, Text, create_engine, event, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from auth.models import User
from core.errors import NotFoundError, StoreError

logger = logging.getLogger("storefront.auth.store")

# ---------------------------------------------------------------------------
# Contract
# ---------------------------------------------------------------------------


class UserRepository(Protocol):
    """What the token endpoint and registration need from a credential store."""

    def create_user(self, user: User) -> None: ...

    def get_by_email(self, email: str) -> User: ...

    def get_by_id(self, user_id: str) -> User: ...


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", String(36), primary_key=True),
    Column("name", String(255), nullable=False),
    Column("email", String(255), nullable=False, unique=True),
    Column("password", Text, nullable=False),  # bcrypt digest
)


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode so readers do not block behind a writer.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """SQLAlchemy-backed UserRepository.

    Usage:
        store = UserStore("sqlite:///storefront.db")
        store.create_user(User.register("Alice", "a@x.com", "secret"))
        user = store.get_by_email("a@x.com")
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    @contextmanager
    def _connect(self, operation: str) -> Iterator[Connection]:
        try:
            with self.engine.connect() as conn:
                yield conn
        except SQLAlchemyError as exc:
            logger.error("user store %s failed: %s", operation, type(exc).__name__)
            raise StoreError(f"user store {operation} failed") from exc

    def create_user(self, user: User) -> None:
        """Insert a new user.

        Raises StoreError if the email (or id) already exists.
        """
        with self._connect("create") as conn:
            conn.execute(
                _users.insert().values(
                    id=user.id,
                    name=user.name,
                    email=user.email,
                    password=user.password,
                )
            )
            conn.commit()

    def get_by_email(self, email: str) -> User:
        """Look up a user by exact email (case-sensitive)."""
        with self._connect("get_by_email") as conn:
            row = conn.execute(_users.select().where(_users.c.email == email)).fetchone()
        if row is None:
            raise NotFoundError("user", email)
        return _row_to_user(row)

    def get_by_id(self, user_id: str) -> User:
        with self._connect("get_by_id") as conn:
            row = conn.execute(_users.select().where(_users.c.id == user_id)).fetchone()
        if row is None:
            raise NotFoundError("user", user_id)
        return _row_to_user(row)

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError:
            logger.warning("user store ping failed", exc_info=True)
            return False
        return True

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(id=row.id, name=row.name, email=row.email, password=row.password)
