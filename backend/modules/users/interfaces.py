"""
User records module interfaces.

IUserStore is the persistence collaborator the auth module works against.
Two implementations ship: InMemoryUserStore and SupabaseUserRepository.
Refresh token mutations are part of the store contract because each one
must be a single atomic update of the user record.

IUserService is the CRUD surface exposed to the API layer. Every call
except register takes the authenticated caller: users may act on their own
record, admins on any record.
"""

from typing import Any, Optional, Protocol, runtime_checkable

from shared.models import AuthenticatedUser

from .models import User, UserCreate, UserListResponse, UserOut, UserUpdate


@runtime_checkable
class IUserStore(Protocol):
    """
    Interface for user record persistence.

    Filters accepted by get(): id, email, refresh_token.
    """

    async def get(self, **filters: Any) -> Optional[User]:
        """
        Get the first user matching every filter.

        Raises:
            ValueError: If an unknown filter key is passed
        """
        ...

    async def list(self, offset: int = 0, limit: int = 20) -> list[User]:
        """List users ordered by creation time."""
        ...

    async def create(self, user: User) -> User:
        """
        Insert a new user record.

        Raises:
            DuplicateUserError: If the email is already taken
        """
        ...

    async def update(self, user_id: str, fields: dict[str, Any]) -> Optional[User]:
        """
        Update fields on a user record.

        Returns:
            The updated user, or None if user_id does not exist
        """
        ...

    async def delete(self, user_id: str) -> bool:
        """Delete a user. Returns True if a record was removed."""
        ...

    async def append_refresh_token(
        self,
        user_id: str,
        token: str,
        cap: Optional[int] = None,
    ) -> bool:
        """
        Atomically append a token to the user's refresh_tokens.

        Duplicates are allowed. When cap is set, only the newest `cap`
        tokens are kept.

        Returns:
            True if the user existed and the token was stored
        """
        ...

    async def find_by_refresh_token(self, token: str) -> Optional[User]:
        """Return the user whose refresh_tokens contains token, or None."""
        ...

    async def clear_refresh_tokens(self, user_id: str) -> bool:
        """Atomically empty the user's refresh_tokens. True if the user existed."""
        ...

    async def ping(self) -> bool:
        """Return True if the store is reachable."""
        ...


@runtime_checkable
class IUserService(Protocol):
    """
    Interface for user record management.
    """

    async def register(self, request: UserCreate) -> UserOut:
        """
        Create a user with a freshly salted password hash.

        Raises:
            DuplicateUserError: If the email is already taken
        """
        ...

    async def get_user(self, actor: AuthenticatedUser, user_id: str) -> UserOut:
        """
        Raises:
            UserAccessDeniedError: If actor is neither the user nor an admin
            UserNotFoundError: If the user does not exist
        """
        ...

    async def update_user(
        self, actor: AuthenticatedUser, user_id: str, request: UserUpdate
    ) -> UserOut:
        """
        Apply a partial update. A new password is re-hashed with a new salt.

        Raises:
            UserAccessDeniedError: If actor is neither the user nor an admin,
                or a non-admin tries to change a role
            UserNotFoundError: If the user does not exist
            DuplicateUserError: If the new email is already taken
        """
        ...

    async def remove_user(self, actor: AuthenticatedUser, user_id: str) -> None:
        """
        Raises:
            UserAccessDeniedError: If actor is neither the user nor an admin
            UserNotFoundError: If the user does not exist
        """
        ...

    async def list_users(
        self, actor: AuthenticatedUser, offset: int = 0, limit: int = 20
    ) -> UserListResponse:
        """
        List users; an empty page is not an error.

        Raises:
            UserAccessDeniedError: If actor is not an admin
        """
        ...
