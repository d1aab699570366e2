"""
auth/tokens.py -- Password hashing, JWT issuance/verification, credential check.

Security design decisions:
  JWT: python-jose with HS256. Tokens carry only the identity id ("sub") and
       an absolute expiry ("exp"). No server-side session state: a token is
       valid iff its signature matches and exp has not passed.

  TokenService: built once at startup with the signing key and default TTL
       as constructor arguments (see api/main.py lifespan). No module in this
       package reads configuration on its own.

  Passwords: bcrypt directly, no passlib wrapper. bcrypt reads at most 72
       bytes, so longer passwords are refused outright rather than cut:
       hash_password() raises and verify_password() returns False for them.

  Timing: authenticate_user() always runs one bcrypt check, against a dummy
       hash when the email is unknown, so response time does not reveal
       which emails are registered.

Layer rule: no imports from api/ or catalog/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt

from core.errors import AuthenticationError, NotFoundError, TokenExpired, TokenMalformed

if TYPE_CHECKING:
    from auth.models import User
    from auth.store import UserRepository

logger = logging.getLogger("storefront.auth")

ALGORITHM = "HS256"

_BCRYPT_MAX_BYTES = 72

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------


def password_fits(plain: str) -> bool:
    """Return True if plain is within bcrypt's 72-byte input limit."""
    return len(plain.encode("utf-8")) <= _BCRYPT_MAX_BYTES


def hash_password(plain: str) -> str:
    """Return a salted bcrypt hash of the given plaintext password.

    Raises ValueError for input over 72 UTF-8 bytes.
    """
    if not password_fits(plain):
        raise ValueError("password exceeds 72 bytes")
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    bcrypt.checkpw compares digests in constant time. Any error (malformed
    hash, non-string input) counts as a mismatch, and so does input over 72
    bytes: no stored hash can have come from it.
    """
    try:
        if not password_fits(plain):
            return False
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except (TypeError, ValueError, AttributeError):
        return False


# Computed once at import so the first unknown-email attempt costs the same
# as every later one.
_DUMMY_HASH: str = hash_password("storefront_timing_dummy")


# ---------------------------------------------------------------------------
# Token service
# ---------------------------------------------------------------------------


class TokenService:
    """Issues and verifies signed, time-limited bearer tokens.

    Usage:
        tokens = TokenService(settings.secret_key, settings.token_expire_seconds)
        token = tokens.issue(user.id)
        subject = tokens.verify(token)   # raises TokenExpired / TokenMalformed

    clock returns the current time in epoch seconds and exists so tests can
    issue tokens "in the past". Verification uses python-jose's own clock.
    """

    def __init__(
        self,
        secret_key: str,
        expire_seconds: int,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not secret_key:
            raise ValueError("TokenService requires a signing key.")
        if expire_seconds <= 0:
            raise ValueError("Token lifetime must be a positive number of seconds.")
        self._secret_key = secret_key
        self.expire_seconds = expire_seconds
        self._clock = clock

    def issue(self, subject: str, ttl_seconds: int | None = None) -> str:
        """Sign a token asserting subject, expiring ttl_seconds from now.

        ttl_seconds defaults to the configured lifetime.
        """
        duration = self.expire_seconds if ttl_seconds is None else ttl_seconds
        payload = {
            "sub": subject,
            "exp": int(self._clock()) + duration,
        }
        return jwt.encode(payload, self._secret_key, algorithm=ALGORITHM)

    def verify(self, token: str) -> str:
        """Return the subject of a valid token.

        Raises TokenExpired once the expiry instant has passed, TokenMalformed
        for anything else: unparsable input, a signature that does not match
        exactly, a different algorithm, or a missing subject claim.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[ALGORITHM],
                options={"require_exp": True, "require_sub": True},
            )
        except ExpiredSignatureError as exc:
            raise TokenExpired("token has expired") from exc
        except (JWTError, AttributeError, TypeError) as exc:
            raise TokenMalformed("token could not be verified") from exc

        subject = payload.get("sub")
        if not isinstance(subject, str) or not subject:
            raise TokenMalformed("token has no subject")
        return subject


# ---------------------------------------------------------------------------
# Credential check (constant-time)
# ---------------------------------------------------------------------------


def authenticate_user(store: UserRepository, email: str, password: str) -> User:
    """Return the User whose email and password match, else raise AuthenticationError.

    Unknown email and wrong password raise the same exception with the same
    message. A bcrypt check runs in both cases:
    - Unknown email: against _DUMMY_HASH
    - Wrong password: against the stored hash
    """
    try:
        user = store.get_by_email(email)
    except NotFoundError:
        verify_password(password, _DUMMY_HASH)
        raise AuthenticationError("invalid email or password") from None
    if not user.verify_password(password):
        raise AuthenticationError("invalid email or password")
    return user
