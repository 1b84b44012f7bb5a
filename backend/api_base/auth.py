"""
API Base — JWT Bearer Authentication
=====================================

What:  FastAPI dependency that verifies HS256 access tokens.
Why:   Protected routers declare `dependencies=[Depends(authenticate)]` and
       get token checks without touching handler code.
How:   python-jose verifies signature, expiry, issuer and audience. The
       guard is a no-op unless AUTH_ENABLED is true, so the starter stays
       usable without an identity provider.

Header formats accepted:
    Authorization: Bearer <token>
    Authorization: <token>

Failure messages (all 401):
    "Access token is required"   header missing or empty
    "Access token has expired"   exp in the past
    "Invalid access token"       bad signature, issuer, audience or format
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Request
from jose import ExpiredSignatureError, JWTError, jwt

from api_base.config import settings
from api_base.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def extract_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    if authorization.startswith(BEARER_PREFIX):
        return authorization[len(BEARER_PREFIX):].strip() or None
    return authorization.strip() or None


def create_access_token(subject: str, extra: Optional[Dict[str, Any]] = None) -> str:
    """Issue a signed access token for `subject` using the configured JWT settings."""
    now = datetime.now(timezone.utc)
    claims: Dict[str, Any] = dict(extra or {})
    claims.update(
        sub=subject,
        iat=now,
        exp=now + timedelta(minutes=settings.jwt_access_expires_minutes),
        iss=settings.jwt_issuer,
        aud=settings.jwt_audience,
    )
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> Dict[str, Any]:
    """
    Decode and validate a token.

    Raises:
        AuthenticationError: expired or otherwise invalid token
    """
    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
        )
    except ExpiredSignatureError:
        raise AuthenticationError("Access token has expired")
    except JWTError as e:
        logger.warning("Authentication failed: invalid token - %s", str(e))
        raise AuthenticationError("Invalid access token")


async def authenticate(request: Request) -> Optional[Dict[str, Any]]:
    """
    Router-level dependency enforcing bearer tokens when AUTH_ENABLED is set.

    Stores the verified claims on request.state.user and returns them.
    """
    if not settings.auth_enabled:
        return None

    token = extract_token(request.headers.get("authorization"))
    if token is None:
        logger.warning("Authentication failed: no token provided for %s", request.url.path)
        raise AuthenticationError("Access token is required")

    claims = verify_token(token)
    request.state.user = claims
    logger.debug("Authentication successful for subject: %s", claims.get("sub"))
    return claims


def request_is_authorized(request: Request) -> bool:
    """Non-raising variant used by the response cache before serving a hit."""
    if not settings.auth_enabled:
        return True
    token = extract_token(request.headers.get("authorization"))
    if token is None:
        return False
    try:
        verify_token(token)
    except AuthenticationError:
        return False
    return True
