"""
api/routes/v1/users.py -- Registration and token issuance.

Routes:
  POST /users                 -- register an account; 201, empty body
  POST /users/generate_token  -- exchange email + password for a bearer token

Both routes are public: they are how a client gets a token in the first place.

Security:
  Unknown email and wrong password return the same 401 body, and
  authenticate_user() runs bcrypt in both cases, so neither the response nor
  its timing tells a caller which emails are registered.
  POST /users/generate_token is rate-limited per client IP.
  Cache-Control: no-store on token responses.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse

from api.limiter import LOGIN_RATE_LIMIT, limiter
from api.models import CreateUserRequest, ErrorResponse, GenerateTokenRequest, TokenResponse
from auth.models import User
from auth.store import UserRepository
from auth.tokens import TokenService, authenticate_user
from core.errors import AuthenticationError

logger = logging.getLogger("storefront.api.users")

router = APIRouter()


@router.post(
    "/users",
    status_code=201,
    response_class=Response,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def create_user(request: Request, body: CreateUserRequest) -> Response:
    """Register a new account.

    User.register() raises ValidationError for an empty name, email or
    password (400). A duplicate email is a store failure (500).
    """
    user_store: UserRepository = request.app.state.user_store
    user = User.register(body.name, body.email, body.password)
    user_store.create_user(user)
    logger.info("Registered user %s", user.id)
    return Response(status_code=201)


@router.post(
    "/users/generate_token",
    response_model=TokenResponse,
    responses={401: {"model": ErrorResponse}, 429: {"model": ErrorResponse}},
)
@limiter.limit(LOGIN_RATE_LIMIT)  # below @router, or the route points at the unwrapped function
def generate_token(request: Request, body: GenerateTokenRequest) -> JSONResponse:
    """Return a signed bearer token for valid credentials."""
    user_store: UserRepository = request.app.state.user_store
    token_service: TokenService = request.app.state.token_service

    try:
        user = authenticate_user(user_store, body.email, body.password)
    except AuthenticationError:
        logger.info("Token request rejected from %s", request.client.host if request.client else "unknown")
        resp = JSONResponse(
            status_code=401,
            content=ErrorResponse(code="bad_credentials", message="Invalid email or password.").model_dump(),
        )
        resp.headers["Cache-Control"] = "no-store"
        return resp

    token = token_service.issue(user.id)
    resp = JSONResponse(
        status_code=200,
        content=TokenResponse(access_token=token, expires_in=token_service.expire_seconds).model_dump(),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp
