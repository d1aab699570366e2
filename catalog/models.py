"""
catalog/models.py -- The Product entity.

Product validates itself. create() runs validate() before handing the
instance out, and catalog/store.py runs validate() again on every row it
loads, so a corrupted record is caught before it is served.

Price rules (checked in this order):
  missing or exactly 0  -> PRICE_REQUIRED
  negative              -> INVALID_PRICE
Zero is reported as "required", not "invalid". Clients rely on that code.

Layer rule: no imports from api/ or auth/.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from core.errors import ValidationError, Violation


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Product:
    """A catalog item. id and created_at never change after create()."""

    id: str
    name: str
    price: Optional[float]
    created_at: datetime = field(default_factory=_now)

    @classmethod
    def create(cls, name: str, price: Optional[float]) -> Product:
        """Build a new Product with a fresh id and timestamp.

        Raises ValidationError if name or price is unacceptable.
        """
        product = cls(id=str(uuid.uuid4()), name=name, price=price, created_at=_now())
        product.validate()
        return product

    def validate(self) -> None:
        """Re-check every invariant. Raises ValidationError on the first broken one."""
        if not self.id:
            raise ValidationError(Violation.ID_REQUIRED)
        try:
            uuid.UUID(self.id)
        except (ValueError, TypeError, AttributeError):
            raise ValidationError(Violation.INVALID_ID) from None
        _check_fields(self.name, self.price)

    def update(self, name: str, price: Optional[float]) -> None:
        """Replace name and price. The instance is untouched if validation fails."""
        _check_fields(name, price)
        self.name = name
        self.price = price


def _check_fields(name: str, price: Optional[float]) -> None:
    if not name:
        raise ValidationError(Violation.NAME_REQUIRED)
    if price is None or price == 0:
        raise ValidationError(Violation.PRICE_REQUIRED)
    if price < 0:
        raise ValidationError(Violation.INVALID_PRICE)
