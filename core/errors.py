"""
core/errors.py -- Exception taxonomy shared by every Storefront layer.

Entities, stores and the token service raise these; api/main.py owns the
translation to HTTP status codes. Nothing here knows about FastAPI.

  ValidationError      -> 400  (entity rule broken; carries a Violation)
  AuthenticationError  -> 401  (bad credentials at token issuance)
  TokenError           -> 401  (raised by TokenService, mapped by the gate)
  NotFoundError        -> 404  (store lookup miss)
  StoreError           -> 500  (persistence failure, detail never sent to clients)

Layer rule: core/ is the kernel. No imports from api/, auth/, or catalog/.
"""

from __future__ import annotations

from enum import Enum


class Violation(Enum):
    """Field-level reasons an entity refuses its input.

    Each member carries a stable machine code and the client-facing message.
    """

    ID_REQUIRED = ("id_required", "id is required")
    INVALID_ID = ("invalid_id", "invalid id")
    NAME_REQUIRED = ("name_required", "name is required")
    EMAIL_REQUIRED = ("email_required", "email is required")
    PASSWORD_REQUIRED = ("password_required", "password is required")
    PASSWORD_TOO_LONG = ("password_too_long", "password must be at most 72 bytes")
    PRICE_REQUIRED = ("price_required", "price is required")
    INVALID_PRICE = ("invalid_price", "invalid price")

    @property
    def code(self) -> str:
        return self.value[0]

    @property
    def message(self) -> str:
        return self.value[1]


class StorefrontError(Exception):
    """Base class for every domain error raised by Storefront."""


class ValidationError(StorefrontError):
    """An entity factory or update received input that breaks its invariants."""

    def __init__(self, violation: Violation) -> None:
        super().__init__(violation.message)
        self.violation = violation


class AuthenticationError(StorefrontError):
    """Credentials did not match. Deliberately says nothing about which part failed."""


class NotFoundError(StorefrontError):
    """A store lookup found no record for the given key."""

    def __init__(self, entity: str, key: str) -> None:
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.key = key


class StoreError(StorefrontError):
    """The persistence layer failed. The message is for logs only."""


class TokenError(StorefrontError):
    """Bearer token verification failed."""


class TokenMalformed(TokenError):
    """The token could not be parsed, its signature did not match, or it has no subject."""


class TokenExpired(TokenError):
    """The token was valid once but its expiry instant has passed."""
