"""
Authentication module.
Provides RS256 JWT validation of bearer tokens.
"""
from statics.api.auth.models import TokenPayload
from statics.api.auth.dependencies import verify_token

__all__ = [
    "TokenPayload",
    "verify_token",
]
