"""
Shared data models used across modules.

These models are shared infrastructure, not business logic.
Module-specific models should stay in their respective module directories.
"""

from typing import Optional
from pydantic import BaseModel, Field


class AuthenticatedUser(BaseModel):
    """
    Represents an authenticated caller in the system.

    This model is populated from verified access-token claims and made
    available to route handlers via dependency injection.
    """

    id: str = Field(..., description="User ID (access token subject)")
    first_name: Optional[str] = Field(None, description="Given name at issuance")
    last_name: Optional[str] = Field(None, description="Family name at issuance")
    role: str = Field(default="user", description="User role at issuance")

    model_config = {
        "frozen": True,  # Make immutable for safety
        "extra": "ignore",  # Ignore extra claims
    }
