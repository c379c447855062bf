"""
FastAPI dependencies for authentication.
Bearer tokens are RS256 JWTs verified against a configured public key.
"""
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from pydantic import ValidationError
from typing import Optional
import logging

from statics.api.auth.models import TokenPayload
from statics.api.config import Settings, get_settings
from statics.api.errors import UnauthorizedError

logger = logging.getLogger(__name__)

# HTTP Bearer token security scheme (extracts "Bearer <token>" from Authorization header)
security = HTTPBearer(auto_error=False)


async def verify_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    settings: Settings = Depends(get_settings),
) -> TokenPayload:
    """
    Validate the bearer token of a request.

    Expiry is checked with `JWT_LEEWAY` seconds of tolerance.

    Args:
        credentials: HTTP Bearer credentials from Authorization header
        settings: Service settings holding the public key and leeway

    Returns:
        TokenPayload of a valid token

    Raises:
        UnauthorizedError: if the token is missing, invalid or expired
        HTTPException: 500 if the public key is not configured
    """
    if not credentials:
        raise UnauthorizedError("Missing token")

    try:
        public_key = settings.load_jwt_public_key()
    except (RuntimeError, OSError) as e:
        logger.error(f"JWT public key unavailable: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Authentication not configured"
        )

    try:
        payload = jwt.decode(
            credentials.credentials,
            public_key,
            algorithms=["RS256"],
            options={"leeway": settings.jwt_leeway, "require_exp": True},
        )
        return TokenPayload(**payload)

    except (JWTError, ValidationError) as e:
        logger.warning(f"JWT validation failed: {str(e)}")
        raise UnauthorizedError(f"Failed to parse JWT token: {e}") from e
