"""
User records module exceptions.
"""

from typing import Optional

from shared.exceptions import AuthorizationError, ConflictError, NotFoundError


class UserNotFoundError(NotFoundError):
    """Raised when a user record does not exist."""

    def __init__(self, user_id: str):
        super().__init__(
            "User not found",
            code="USER_NOT_FOUND",
            details={"user_id": user_id},
        )


class DuplicateUserError(ConflictError):
    """Raised when a unique field (email) is already taken."""

    def __init__(self, fields: list[str]):
        super().__init__(
            f"Duplicate value(s): {', '.join(fields)} already taken",
            code="DUPLICATE_USER",
            details={"fields": fields},
        )


class UserAccessDeniedError(AuthorizationError):
    """Raised when the caller may not read or change a user record."""

    def __init__(self, actor_id: str, user_id: Optional[str] = None, action: str = "access"):
        super().__init__(
            f"Not allowed to {action} this user",
            code="USER_ACCESS_DENIED",
            details={"user_id": user_id, "actor_id": actor_id, "action": action},
        )
