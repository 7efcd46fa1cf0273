"""
Authentication and Authorization Module

Two kinds of callers reach this API:

- External schedulers calling the cron endpoints. They present the shared
  secret (CRON_API_SECRET) in the Authorization header, either as
  ``Bearer <secret>`` or as the bare value. The secret is compared in constant
  time and an unset secret rejects every request.
- Signed-in users, identified by a JWT access token issued by the auth service.
  Some endpoints (public profiles) also accept anonymous viewers.
"""

import logging
from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from camboconnect.core.config import settings
from camboconnect.core.security import decode_token, secrets_match

logger = logging.getLogger(__name__)

security = HTTPBearer(
    auto_error=False,
    description="JWT Bearer token issued by the CamboConnect auth service",
)


# ============================================
# Cron shared-secret guard
# ============================================


class CronAuthenticationError(Exception):
    """Raised when a cron request lacks or mismatches the shared secret."""


def _extract_secret(authorization: str) -> str:
    scheme, _, value = authorization.partition(" ")
    if value and scheme.lower() == "bearer":
        return value.strip()
    return authorization.strip()


async def verify_cron_secret(
    authorization: str | None = Header(default=None),
) -> None:
    """
    FastAPI dependency guarding the cron endpoints.

    Raises:
        CronAuthenticationError: If the header is missing, the secret is not
            configured, or the presented secret does not match
    """
    expected = settings.cron_api_secret

    if not expected:
        logger.error("CRON_API_SECRET is not configured; rejecting cron request")
        raise CronAuthenticationError()

    if not authorization:
        logger.warning("Cron request without Authorization header")
        raise CronAuthenticationError()

    if not secrets_match(_extract_secret(authorization), expected):
        logger.warning("Cron request with invalid secret")
        raise CronAuthenticationError()


async def cron_auth_exception_handler(
    _request: Request, _exc: CronAuthenticationError
) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content={"error": "Unauthorized"})


# ============================================
# Viewer identity
# ============================================


@dataclass
class Viewer:
    """
    A signed-in user, populated from access token claims.

    Attributes:
        id: User id (the token's ``sub`` claim)
        email: Email claim, if present
    """

    id: str
    email: str | None = None


def _unauthorized(error: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"error": error, "message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


def _viewer_from_token(token: str) -> Viewer:
    payload = decode_token(token)

    if payload is None:
        raise _unauthorized("INVALID_TOKEN", "Invalid or expired authentication token.")

    if payload.get("type", "access") != "access":
        logger.warning(f"Invalid token type: {payload.get('type')}")
        raise _unauthorized("INVALID_TOKEN_TYPE", "This endpoint requires an access token.")

    user_id = payload.get("sub")
    if not user_id:
        raise _unauthorized("INVALID_TOKEN_CLAIMS", "Token contains invalid or missing claims.")

    return Viewer(id=str(user_id), email=payload.get("email"))


async def get_current_viewer(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> Viewer:
    """
    FastAPI dependency returning the signed-in viewer.

    Raises:
        HTTPException 401: If the token is missing, invalid or expired
    """
    if credentials is None:
        raise _unauthorized("NOT_AUTHENTICATED", "Authentication is required.")

    return _viewer_from_token(credentials.credentials)


async def get_optional_viewer(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> Viewer | None:
    """
    Optional authentication dependency.

    Returns the viewer when a valid token is provided and None otherwise, so
    that invalid tokens degrade to anonymous access.
    """
    if credentials is None:
        return None

    try:
        return _viewer_from_token(credentials.credentials)
    except HTTPException:
        return None


__all__ = [
    "CronAuthenticationError",
    "Viewer",
    "cron_auth_exception_handler",
    "get_current_viewer",
    "get_optional_viewer",
    "verify_cron_secret",
]
