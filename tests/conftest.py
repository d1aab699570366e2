"""
tests/conftest.py -- Shared test fixtures for Storefront tests.

This module provides:
  - _make_test_stores(): isolated in-memory databases for users + products
  - _patch_lifespan(): wires test stores and a TokenService into app.state
  - token_service: TokenService with a fixed key for unit tests
  - api_client: TestClient plus a registered user and a valid bearer token

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker
thread. The named URI format (file:name?mode=memory&cache=shared&uri=true)
shares one in-memory instance across all connections in the same process.

DEBUG and RATE_LIMIT_ENABLED must be set before any api/ import: the limiter
and the app read Settings at import time.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: Set before any api/core import so get_settings() auto-generates
# SECRET_KEY in dev mode and the token endpoint is not throttled mid-suite.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.models import User
from auth.store import UserStore
from auth.tokens import TokenService
from catalog.store import ProductStore

TEST_SECRET = "test-secret-key-with-at-least-32-characters"

ALICE = {"name": "Alice", "email": "alice@example.com", "password": "secret"}

_STATE_KEYS = ("user_store", "product_store", "token_service")

# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _make_test_stores(db_suffix: str) -> tuple[UserStore, ProductStore]:
    """Create isolated named shared-memory SQLite stores.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state (e.g. 'api', 'e2e').
    """
    users_url = f"sqlite:///file:test_users_{db_suffix}?mode=memory&cache=shared&uri=true"
    products_url = f"sqlite:///file:test_products_{db_suffix}?mode=memory&cache=shared&uri=true"
    return UserStore(users_url), ProductStore(products_url)


def _patch_lifespan(user_store: UserStore, product_store: ProductStore, token_service: TokenService):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.product_store = product_store
        app.state.token_service = token_service
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(TEST_SECRET, expire_seconds=3600)


@pytest.fixture
def client_factory():
    """Yield a function that starts a TestClient on fresh stores.

    Each call gets its own named in-memory databases, so tests that need an
    empty catalog are not affected by products other tests created.
    """
    opened: list[tuple[TestClient, UserStore, ProductStore]] = []
    # A module-scoped api_client may already be wired into app.state.
    saved = {key: getattr(app.state, key, None) for key in _STATE_KEYS}

    def _start(db_suffix: str) -> tuple[TestClient, UserStore, ProductStore, TokenService]:
        user_store, product_store = _make_test_stores(f"{db_suffix}_{uuid.uuid4().hex}")
        tokens = TokenService(TEST_SECRET, expire_seconds=3600)
        app.router.lifespan_context = _patch_lifespan(user_store, product_store, tokens)
        client = TestClient(app, raise_server_exceptions=True)
        client.__enter__()
        opened.append((client, user_store, product_store))
        return client, user_store, product_store, tokens

    yield _start

    for client, user_store, product_store in opened:
        client.__exit__(None, None, None)
        user_store.close()
        product_store.close()
    for key, value in saved.items():
        setattr(app.state, key, value)


@pytest.fixture(scope="module")
def api_client() -> Generator[tuple[TestClient, str, str], None, None]:
    """Yield (client, token, user_id) for API integration tests.

    Alice is registered before the client starts and a token is issued for
    her, so protected routes can be called with Authorization: Bearer <token>.
    """
    user_store, product_store = _make_test_stores(f"api_{uuid.uuid4().hex}")
    tokens = TokenService(TEST_SECRET, expire_seconds=3600)

    alice = User.register(ALICE["name"], ALICE["email"], ALICE["password"])
    user_store.create_user(alice)
    token = tokens.issue(alice.id)

    app.router.lifespan_context = _patch_lifespan(user_store, product_store, tokens)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, token, alice.id

    user_store.close()
    product_store.close()
