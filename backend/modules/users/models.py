"""
User records module data models.

User is the full stored record, including credential material and the
refresh token collection. UserOut is the public projection returned by
the API and never carries the hash, salt or tokens.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class User(BaseModel):
    """
    A stored user record.

    refresh_tokens keeps insertion order; any entry present is a valid
    refresh token until it is removed.
    """

    id: str = Field(..., description="User ID")
    email: EmailStr = Field(..., description="Login email, unique")
    password_hash: str = Field(..., description="Hex Argon2id digest")
    password_salt: str = Field(..., description="Hex per-user salt")
    first_name: str = Field(..., description="Given name")
    last_name: str = Field(..., description="Family name")
    role: str = Field(default="user", description="Role claim placed in tokens")
    refresh_tokens: list[str] = Field(default_factory=list, description="Valid refresh tokens")
    created_at: Optional[datetime] = Field(None, description="Creation time")
    updated_at: Optional[datetime] = Field(None, description="Last update time")


class UserCreate(BaseModel):
    """Request body for registering a user. New users always get the user role."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=255)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)


class UserUpdate(BaseModel):
    """
    Request body for a partial user update. Omitted fields are left alone.

    Only admins may set role.
    """

    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=1, max_length=255)
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    role: Optional[str] = Field(None, min_length=1, max_length=30)


class UserOut(BaseModel):
    """Public view of a user."""

    id: str
    email: EmailStr
    first_name: str
    last_name: str
    role: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_user(cls, user: User) -> "UserOut":
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            role=user.role,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class UserListResponse(BaseModel):
    """Paginated list of users. Empty when the offset is past the end."""

    users: list[UserOut]
    offset: int
    limit: int
