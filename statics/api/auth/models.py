"""
Authentication models for JWT payloads.
"""
from pydantic import BaseModel


class TokenPayload(BaseModel):
    """JWT token payload issued by the users service"""
    user_id: int
    exp: int  # Expiration timestamp

    class Config:
        frozen = True  # Immutable
