"""
User records module.

Stores user identity and credential material and exposes the
collaborator interface the auth module persists refresh tokens through.

Public API:
- IUserStore: Persistence interface (in-memory and Supabase implementations)
- IUserService: CRUD interface for the API layer
- User, UserCreate, UserUpdate, UserOut, UserListResponse: Models
- User exceptions: UserNotFoundError, DuplicateUserError, UserAccessDeniedError
"""

from .interfaces import IUserStore, IUserService
from .models import User, UserCreate, UserUpdate, UserOut, UserListResponse
from .exceptions import UserNotFoundError, DuplicateUserError, UserAccessDeniedError

__all__ = [
    # Interfaces
    "IUserStore",
    "IUserService",
    # Models
    "User",
    "UserCreate",
    "UserUpdate",
    "UserOut",
    "UserListResponse",
    # Exceptions
    "UserNotFoundError",
    "DuplicateUserError",
    "UserAccessDeniedError",
]
