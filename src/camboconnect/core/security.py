"""
Token utilities.

Access tokens are issued by the auth service; this API only decodes them to
learn who the viewer is.
"""

import logging
import secrets
from typing import Any

from jose import JWTError, jwt

from camboconnect.core.config import settings

logger = logging.getLogger(__name__)


def decode_token(token: str) -> dict[str, Any] | None:
    """
    Decode and verify a token.

    Returns:
        The claims, or None if the signature, algorithm or expiry check fails
    """
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.debug(f"Token rejected: {e}")
        return None


def secrets_match(provided: str, expected: str) -> bool:
    """Constant-time comparison of two shared secrets."""
    return secrets.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))
