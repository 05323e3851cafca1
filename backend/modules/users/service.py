"""
User records service implementation.

Thin CRUD layer over IUserStore. Registration and password changes hash
the plaintext with a new salt; the plaintext is never stored.

Callers may read, update or delete only their own record unless their
access token carries the admin role. Listing and role changes are admin
only. Admin accounts are provisioned directly in the store.
"""

import logging
import uuid
from typing import Any

from modules.auth.passwords import hash_password
from shared.models import AuthenticatedUser
from shared.timeouts import call_with_timeout

from .exceptions import UserAccessDeniedError, UserNotFoundError
from .interfaces import IUserService, IUserStore
from .models import User, UserCreate, UserListResponse, UserOut, UserUpdate

logger = logging.getLogger(__name__)

STORE_SERVICE = "user-store"
ADMIN_ROLE = "admin"
DEFAULT_ROLE = "user"


def is_admin(actor: AuthenticatedUser) -> bool:
    return actor.role == ADMIN_ROLE


class UserService(IUserService):
    """
    Implementation of the user records service.
    """

    def __init__(self, store: IUserStore, timeout: float = 5.0):
        self._store = store
        self._timeout = timeout

    async def register(self, request: UserCreate) -> UserOut:
        password_hash, password_salt = hash_password(request.password)
        user = User(
            id=str(uuid.uuid4()),
            email=request.email,
            password_hash=password_hash,
            password_salt=password_salt,
            first_name=request.first_name,
            last_name=request.last_name,
            role=DEFAULT_ROLE,
        )
        created = await call_with_timeout(self._store.create(user), self._timeout, STORE_SERVICE)
        logger.info(f"Registered user {created.id}")
        return UserOut.from_user(created)

    async def get_user(self, actor: AuthenticatedUser, user_id: str) -> UserOut:
        self._check_access(actor, user_id, "read")
        user = await call_with_timeout(self._store.get(id=user_id), self._timeout, STORE_SERVICE)
        if user is None:
            raise UserNotFoundError(user_id)
        return UserOut.from_user(user)

    async def update_user(
        self, actor: AuthenticatedUser, user_id: str, request: UserUpdate
    ) -> UserOut:
        self._check_access(actor, user_id, "update")
        if request.role is not None and not is_admin(actor):
            logger.warning(f"User {actor.id} tried to change the role of user {user_id}")
            raise UserAccessDeniedError(actor.id, user_id, "change the role of")

        fields: dict[str, Any] = request.model_dump(exclude_none=True, exclude={"password"})
        if request.password is not None:
            fields["password_hash"], fields["password_salt"] = hash_password(request.password)

        if not fields:
            return await self.get_user(actor, user_id)

        user = await call_with_timeout(
            self._store.update(user_id, fields), self._timeout, STORE_SERVICE
        )
        if user is None:
            raise UserNotFoundError(user_id)
        return UserOut.from_user(user)

    async def remove_user(self, actor: AuthenticatedUser, user_id: str) -> None:
        self._check_access(actor, user_id, "delete")
        deleted = await call_with_timeout(self._store.delete(user_id), self._timeout, STORE_SERVICE)
        if not deleted:
            raise UserNotFoundError(user_id)
        logger.info(f"Removed user {user_id}")

    async def list_users(
        self, actor: AuthenticatedUser, offset: int = 0, limit: int = 20
    ) -> UserListResponse:
        if not is_admin(actor):
            logger.warning(f"User {actor.id} tried to list users")
            raise UserAccessDeniedError(actor.id, action="list")
        users = await call_with_timeout(
            self._store.list(offset=offset, limit=limit), self._timeout, STORE_SERVICE
        )
        return UserListResponse(
            users=[UserOut.from_user(u) for u in users],
            offset=offset,
            limit=limit,
        )

    def _check_access(self, actor: AuthenticatedUser, user_id: str, action: str) -> None:
        if actor.id != user_id and not is_admin(actor):
            logger.warning(f"User {actor.id} denied {action} on user {user_id}")
            raise UserAccessDeniedError(actor.id, user_id, action)
