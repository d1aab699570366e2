"""
API request and response models for Storefront REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the entities in auth/models.py and
catalog/models.py, which own the domain rules. Route handlers map between the
two.

Request models only check shape (types, JSON structure). Empty names, empty
passwords, zero or negative prices are let through on purpose so the entity
reports them with its own violation code.
"""

from datetime import datetime
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

from catalog.models import Product

# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


# name and email lose surrounding whitespace the same way at registration and
# at login. Passwords are taken byte for byte.
TrimmedStr = Annotated[str, StringConstraints(strip_whitespace=True, max_length=255)]


class CreateUserRequest(BaseModel):
    """Request body for POST /users."""

    name: TrimmedStr = ""
    email: TrimmedStr = ""
    password: str = Field(default="", max_length=255, json_schema_extra={"format": "password"})


class GenerateTokenRequest(BaseModel):
    """Request body for POST /users/generate_token."""

    email: TrimmedStr = ""
    password: str = Field(default="", max_length=255)


class TokenResponse(BaseModel):
    """Response body for a successful POST /users/generate_token."""

    model_config = ConfigDict(frozen=True)

    access_token: str
    token_type: str = "bearer"
    expires_in: int


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------


class ProductRequest(BaseModel):
    """Request body for POST /products and PUT /products/{id}."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(default="", max_length=255)
    price: Optional[float] = Field(default=None, allow_inf_nan=False)


class ProductResponse(BaseModel):
    """One product as returned by every product endpoint."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    price: float
    created_at: datetime

    @classmethod
    def from_product(cls, product: Product) -> "ProductResponse":
        return cls(
            id=product.id,
            name=product.name,
            price=product.price,
            created_at=product.created_at,
        )


# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorResponse(BaseModel):
    """Error body returned on every 4xx/5xx response."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class HealthResponse(BaseModel):
    """Response for GET /health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str]
