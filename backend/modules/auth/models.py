"""
Authentication module data models.

Users are created either from an anonymous device id or from a Google
sign-in; both kinds carry a credit balance.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field

# Starting balance for every new user
DEFAULT_CREDITS = 500


def _now() -> datetime:
    return datetime.now(timezone.utc)


class User(BaseModel):
    """
    A persisted user.

    ``device_id`` holds the sha256 hash of the device identifier, never the
    raw value.
    """

    id: str = Field(..., description="User ID")
    email: Optional[str] = Field(None, description="Email (Google users only)")
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    device_id: Optional[str] = Field(None, description="Hashed device identifier")
    credits: int = Field(default=DEFAULT_CREDITS, description="Credit balance")
    stripe_customer_id: Optional[str] = None
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)


class JWTPayload(BaseModel):
    """Claims of the bearer tokens this service signs."""

    sub: str = Field(..., description="Subject (user ID)")
    email: Optional[str] = Field(None, description="User's email")
    exp: int = Field(..., description="Expiration timestamp")
    iat: int = Field(..., description="Issued at timestamp")


class GoogleProfile(BaseModel):
    """Subset of Google's OpenID userinfo response."""

    sub: str
    email: Optional[str] = None
    email_verified: bool = False
    given_name: Optional[str] = None
    family_name: Optional[str] = None
    picture: Optional[str] = None


class AuthTokenResponse(BaseModel):
    """Returned after a successful Google sign-in."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Token lifetime in seconds")
    user: User


class CreditsResponse(BaseModel):
    credits: int


class LogoutResponse(BaseModel):
    success: bool = True
