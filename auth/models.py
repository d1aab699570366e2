"""
auth/models.py -- The Identity entity.

Unlike a plain data container, User owns two rules: how it is created
(register() hashes, then validates) and how a password is checked against it
(verify_password()). Stores persist it; routes never build one by hand.

Email uniqueness is NOT checked here. The users table carries a UNIQUE
constraint and the store reports a violation as StoreError.

Layer rule: no imports from api/ or catalog/.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field

from auth.tokens import hash_password, password_fits
from auth.tokens import verify_password as _check_password
from core.errors import ValidationError, Violation


@dataclass(frozen=True)
class User:
    """A registered account.

    password holds the bcrypt digest, never plaintext. repr=False keeps the
    digest out of logs and tracebacks.
    """

    id: str
    name: str
    email: str
    password: str = field(repr=False)

    @classmethod
    def register(cls, name: str, email: str, password: str) -> User:
        """Build a new User with a fresh id and a hashed password.

        The password is hashed before any field is checked, so every call pays
        the same bcrypt cost whether or not validation then fails.

        A password over bcrypt's 72-byte limit is refused, not truncated. It
        still costs one hash (of the empty string) before the refusal.

        Raises ValidationError(NAME_REQUIRED | EMAIL_REQUIRED |
        PASSWORD_REQUIRED | PASSWORD_TOO_LONG).
        """
        fits = password_fits(password or "")
        hashed = hash_password(password if password and fits else "")
        if not name:
            raise ValidationError(Violation.NAME_REQUIRED)
        if not email:
            raise ValidationError(Violation.EMAIL_REQUIRED)
        if not password:
            raise ValidationError(Violation.PASSWORD_REQUIRED)
        if not fits:
            raise ValidationError(Violation.PASSWORD_TOO_LONG)
        return cls(id=str(uuid.uuid4()), name=name, email=email, password=hashed)

    def verify_password(self, plain: str) -> bool:
        """Return True iff plain is the password this account registered with."""
        if not plain:
            return False
        return _check_password(plain, self.password)
