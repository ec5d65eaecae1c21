"""
Shared data models used across modules.

These models are shared infrastructure, not business logic.
Module-specific models should stay in their respective module directories.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field


class AuthenticatedUser(BaseModel):
    """
    Represents an authenticated user in the system.

    Populated either from a signed JWT (Google sign-in) or from the
    anonymous device header, and made available to route handlers via
    dependency injection.
    """

    id: str = Field(..., description="User ID")
    email: Optional[EmailStr] = Field(None, description="User's email address (absent for device users)")
    email_verified: bool = Field(default=False, description="Whether email is verified")
    auth_method: str = Field(default="jwt", description="'jwt' or 'device'")

    last_sign_in: Optional[datetime] = Field(None, description="Last sign-in time")

    model_config = {
        "frozen": True,
        "extra": "ignore",
    }
