"""Unit tests for auth/store.py and catalog/store.py.

Covers:
- UserStore: create + lookup by email/id, NotFoundError on miss,
  duplicate email surfaces as StoreError
- ProductStore: create/get/update/delete, NotFoundError on unknown ids,
  paged and ordered listing, corrupted rows detected on load
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import text

from auth.models import User
from auth.store import UserStore
from catalog.models import Product
from catalog.store import ProductStore
from core.errors import NotFoundError, StoreError

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def users():
    s = UserStore("sqlite:///:memory:")
    yield s
    s.close()


@pytest.fixture
def products():
    s = ProductStore("sqlite:///:memory:")
    yield s
    s.close()


def _product_at(name: str, minutes_ago: int) -> Product:
    product = Product.create(name, 10.0)
    product.created_at = datetime.now(timezone.utc) - timedelta(minutes=minutes_ago)
    return product


# ---------------------------------------------------------------------------
# UserStore
# ---------------------------------------------------------------------------


class TestUserStore:
    def test_create_and_get_by_email(self, users: UserStore) -> None:
        alice = User.register("Alice", "a@x.com", "secret")
        users.create_user(alice)

        loaded = users.get_by_email("a@x.com")
        assert loaded == alice
        assert loaded.verify_password("secret")

    def test_get_by_id(self, users: UserStore) -> None:
        alice = User.register("Alice", "a@x.com", "secret")
        users.create_user(alice)
        assert users.get_by_id(alice.id).email == "a@x.com"

    def test_unknown_email_raises_not_found(self, users: UserStore) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            users.get_by_email("nobody@x.com")
        assert exc_info.value.entity == "user"

    def test_duplicate_email_is_a_store_error(self, users: UserStore) -> None:
        users.create_user(User.register("Alice", "a@x.com", "secret"))
        with pytest.raises(StoreError):
            users.create_user(User.register("Alice Again", "a@x.com", "other"))

    def test_plaintext_is_never_stored(self, users: UserStore) -> None:
        users.create_user(User.register("Alice", "a@x.com", "plaintext-marker"))
        with users.engine.connect() as conn:
            stored = conn.execute(text("SELECT password FROM users")).scalar()
        assert "plaintext-marker" not in stored

    def test_ping(self, users: UserStore) -> None:
        assert users.ping() is True


# ---------------------------------------------------------------------------
# ProductStore
# ---------------------------------------------------------------------------


class TestProductStoreCrud:
    def test_create_and_get(self, products: ProductStore) -> None:
        product = Product.create("Keyboard", 49.9)
        products.create_product(product)

        loaded = products.get_product(product.id)
        assert loaded.id == product.id
        assert loaded.name == "Keyboard"
        assert loaded.price == 49.9
        assert loaded.created_at == product.created_at

    def test_get_unknown_raises_not_found(self, products: ProductStore) -> None:
        with pytest.raises(NotFoundError):
            products.get_product("00000000-0000-4000-8000-000000000000")

    def test_update(self, products: ProductStore) -> None:
        product = Product.create("Keyboard", 49.9)
        products.create_product(product)

        product.update("Mechanical keyboard", 89.0)
        products.update_product(product)

        loaded = products.get_product(product.id)
        assert loaded.name == "Mechanical keyboard"
        assert loaded.price == 89.0
        assert loaded.created_at == product.created_at

    def test_update_unknown_raises_not_found(self, products: ProductStore) -> None:
        with pytest.raises(NotFoundError):
            products.update_product(Product.create("Ghost", 1.0))

    def test_delete(self, products: ProductStore) -> None:
        product = Product.create("Keyboard", 49.9)
        products.create_product(product)
        products.delete_product(product.id)
        with pytest.raises(NotFoundError):
            products.get_product(product.id)

    def test_delete_unknown_raises_not_found(self, products: ProductStore) -> None:
        with pytest.raises(NotFoundError):
            products.delete_product("00000000-0000-4000-8000-000000000000")

    def test_empty_list(self, products: ProductStore) -> None:
        assert products.list_products() == []


class TestProductStoreListing:
    @pytest.fixture
    def stocked(self, products: ProductStore) -> ProductStore:
        # p1 oldest, p5 newest
        for i in range(1, 6):
            products.create_product(_product_at(f"p{i}", minutes_ago=10 - i))
        return products

    def test_default_is_everything_oldest_first(self, stocked: ProductStore) -> None:
        names = [p.name for p in stocked.list_products()]
        assert names == ["p1", "p2", "p3", "p4", "p5"]

    def test_descending(self, stocked: ProductStore) -> None:
        names = [p.name for p in stocked.list_products(sort="desc")]
        assert names == ["p5", "p4", "p3", "p2", "p1"]

    def test_pages(self, stocked: ProductStore) -> None:
        assert [p.name for p in stocked.list_products(page=1, limit=2)] == ["p1", "p2"]
        assert [p.name for p in stocked.list_products(page=2, limit=2)] == ["p3", "p4"]
        assert [p.name for p in stocked.list_products(page=3, limit=2)] == ["p5"]
        assert stocked.list_products(page=4, limit=2) == []

    def test_limit_without_page_returns_everything(self, stocked: ProductStore) -> None:
        assert len(stocked.list_products(page=0, limit=2)) == 5


class TestCorruptedRecords:
    def test_zero_price_row_is_a_store_error(self, products: ProductStore) -> None:
        product = Product.create("Keyboard", 49.9)
        products.create_product(product)
        with products.engine.connect() as conn:
            conn.execute(text("UPDATE products SET price = 0 WHERE id = :id"), {"id": product.id})
            conn.commit()

        with pytest.raises(StoreError):
            products.get_product(product.id)

    def test_bad_id_row_is_a_store_error(self, products: ProductStore) -> None:
        with products.engine.connect() as conn:
            conn.execute(
                text("INSERT INTO products (id, name, price, created_at) VALUES ('bogus', 'x', 1.0, :ts)"),
                {"ts": datetime.now(timezone.utc).isoformat()},
            )
            conn.commit()

        with pytest.raises(StoreError):
            products.list_products()
