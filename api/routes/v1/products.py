"""
api/routes/v1/products.py -- Product CRUD routes.

Routes:
  POST   /products           -- create a product; 201 + product
  GET    /products           -- list products (?page=&limit=&sort=asc|desc)
  GET    /products/{id}      -- one product or 404
  PUT    /products/{id}      -- replace name and price; 404 if unknown
  DELETE /products/{id}      -- remove a product; 404 if unknown

Every route requires a bearer token. The gate is a router-level dependency,
so it runs before any handler and handlers don't each repeat it.

Domain errors propagate to the handlers in api/main.py:
  ValidationError -> 400, NotFoundError -> 404, StoreError -> 500.
"""

from __future__ import annotations

import logging
from typing import Literal

from fastapi import APIRouter, Depends, Query, Request, Response

from api.models import ErrorResponse, ProductRequest, ProductResponse
from auth.dependencies import get_current_subject
from catalog.models import Product
from catalog.store import ProductRepository

logger = logging.getLogger("storefront.api.products")

router = APIRouter(
    prefix="/products",
    dependencies=[Depends(get_current_subject)],
    responses={401: {"model": ErrorResponse}},
)


@router.post("", response_model=ProductResponse, status_code=201, responses={400: {"model": ErrorResponse}})
def create_product(
    request: Request,
    body: ProductRequest,
    subject: str = Depends(get_current_subject),
) -> ProductResponse:
    """Create a product. Product.create() rejects an empty name or a price <= 0."""
    store: ProductRepository = request.app.state.product_store
    product = Product.create(body.name, body.price)
    store.create_product(product)
    logger.info("Product %s created by %s", product.id, subject)
    return ProductResponse.from_product(product)


@router.get("", response_model=list[ProductResponse])
def list_products(
    request: Request,
    page: int = Query(default=0, ge=0),
    limit: int = Query(default=0, ge=0, le=1000),
    sort: Literal["asc", "desc"] = "asc",
) -> list[ProductResponse]:
    """Return products ordered by creation time.

    page is 1-based and only applies together with limit; page=0 or limit=0
    returns everything.
    """
    store: ProductRepository = request.app.state.product_store
    products = store.list_products(page=page, limit=limit, sort=sort)
    return [ProductResponse.from_product(p) for p in products]


@router.get("/{product_id}", response_model=ProductResponse, responses={404: {"model": ErrorResponse}})
def get_product(request: Request, product_id: str) -> ProductResponse:
    store: ProductRepository = request.app.state.product_store
    return ProductResponse.from_product(store.get_product(product_id))


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def update_product(request: Request, product_id: str, body: ProductRequest) -> ProductResponse:
    """Replace a product's name and price.

    The lookup runs first, so an unknown id is 404 even when the body would
    also fail validation. id and created_at are kept from the stored record.
    """
    store: ProductRepository = request.app.state.product_store
    product = store.get_product(product_id)
    product.update(body.name, body.price)
    store.update_product(product)
    logger.info("Product %s updated", product.id)
    return ProductResponse.from_product(product)


@router.delete("/{product_id}", status_code=200, response_class=Response, responses={404: {"model": ErrorResponse}})
def delete_product(request: Request, product_id: str) -> Response:
    store: ProductRepository = request.app.state.product_store
    store.delete_product(product_id)
    logger.info("Product %s deleted", product_id)
    return Response(status_code=200)
