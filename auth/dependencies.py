"""
auth/dependencies.py -- The authentication gate, as a FastAPI dependency.

Each protected request goes Unauthenticated -> Authenticated exactly once:
  1. Read "Authorization: Bearer <token>".
  2. TokenService.verify(token) -- signature and expiry only, no I/O.
  3. Hand the verified subject id to the route handler.

Any failure raises HTTP 401 before the handler runs, so no side effect can
happen on an unauthenticated request. The gate keeps no state between
requests; the TokenService it uses is the one the lifespan placed on
app.state at startup.

Layer rule: no imports from api/ or catalog/. auth/dependencies.py may import
from fastapi because it is part of the dependency injection system.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, Request

from auth.tokens import TokenService
from core.errors import TokenExpired, TokenMalformed

logger = logging.getLogger("storefront.auth")

_BEARER_PREFIX = "bearer "
_CHALLENGE = {"WWW-Authenticate": "Bearer"}


def _unauthorized(code: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=401,
        detail={"code": code, "message": message},
        headers=_CHALLENGE,
    )


def bearer_token(request: Request) -> str | None:
    """Return the raw token from the Authorization header, or None.

    The scheme name is matched case-insensitively (RFC 7235).
    """
    header = request.headers.get("Authorization", "")
    if not header.lower().startswith(_BEARER_PREFIX):
        return None
    token = header[len(_BEARER_PREFIX) :].strip()
    return token or None


def get_current_subject(request: Request) -> str:
    """Require a valid bearer token. Returns the verified identity id.

    Use as a FastAPI dependency:
        router = APIRouter(dependencies=[Depends(get_current_subject)])
        async def route(subject: str = Depends(get_current_subject)): ...
    """
    token = bearer_token(request)
    if token is None:
        raise _unauthorized("unauthorized", "Authentication required.")

    token_service: TokenService = request.app.state.token_service
    try:
        return token_service.verify(token)
    except TokenExpired:
        logger.info("Rejected expired token on %s %s", request.method, request.url.path)
        raise _unauthorized("token_expired", "Token has expired.") from None
    except TokenMalformed:
        logger.info("Rejected invalid token on %s %s", request.method, request.url.path)
        raise _unauthorized("invalid_token", "Invalid token.") from None
