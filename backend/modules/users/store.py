"""
In-process user store.

Default backend for development and tests. Records live in a dict keyed
by user ID. Every read returns a deep copy and every write happens under
one lock with no await inside, so each update is atomic with respect to
concurrent requests (including requests served from other threads).
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Any, Optional

from .exceptions import DuplicateUserError
from .interfaces import IUserStore
from .models import User

logger = logging.getLogger(__name__)

_FILTER_KEYS = {"id", "email", "refresh_token"}
_UPDATABLE_FIELDS = {
    "email",
    "password_hash",
    "password_salt",
    "first_name",
    "last_name",
    "role",
    "refresh_tokens",
}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _matches(user: User, filters: dict[str, Any]) -> bool:
    for key, value in filters.items():
        if key == "refresh_token":
            if value not in user.refresh_tokens:
                return False
        elif getattr(user, key) != value:
            return False
    return True


class InMemoryUserStore(IUserStore):
    """
    Dict-backed implementation of IUserStore.

    Usage:
        store = InMemoryUserStore()
        await store.create(User(...))
        user = await store.get(email="a@example.com")
    """

    def __init__(self, users: Optional[list[User]] = None) -> None:
        self._users: dict[str, User] = {}
        self._lock = threading.Lock()
        for user in users or []:
            self._users[user.id] = user.model_copy(deep=True)

    async def get(self, **filters: Any) -> Optional[User]:
        unknown = set(filters) - _FILTER_KEYS
        if unknown:
            raise ValueError(f"Unknown user filter keys: {unknown!r}")
        with self._lock:
            for user in self._users.values():
                if _matches(user, filters):
                    return user.model_copy(deep=True)
        return None

    async def list(self, offset: int = 0, limit: int = 20) -> list[User]:
        with self._lock:
            users = sorted(
                self._users.values(),
                key=lambda u: u.created_at or datetime.min.replace(tzinfo=timezone.utc),
            )
            return [u.model_copy(deep=True) for u in users[offset : offset + limit]]

    async def create(self, user: User) -> User:
        with self._lock:
            if any(u.email == user.email for u in self._users.values()):
                raise DuplicateUserError(["email"])
            now = _now()
            stored = user.model_copy(
                deep=True,
                update={"created_at": user.created_at or now, "updated_at": now},
            )
            self._users[stored.id] = stored
            return stored.model_copy(deep=True)

    async def update(self, user_id: str, fields: dict[str, Any]) -> Optional[User]:
        unknown = set(fields) - _UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown user fields: {unknown!r}")
        with self._lock:
            current = self._users.get(user_id)
            if current is None:
                return None
            new_email = fields.get("email")
            if new_email is not None and any(
                u.email == new_email and u.id != user_id for u in self._users.values()
            ):
                raise DuplicateUserError(["email"])
            updated = current.model_copy(deep=True, update={**fields, "updated_at": _now()})
            self._users[user_id] = updated
            return updated.model_copy(deep=True)

    async def delete(self, user_id: str) -> bool:
        with self._lock:
            return self._users.pop(user_id, None) is not None

    async def append_refresh_token(
        self,
        user_id: str,
        token: str,
        cap: Optional[int] = None,
    ) -> bool:
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return False
            tokens = [*user.refresh_tokens, token]
            if cap is not None:
                tokens = tokens[-cap:]
            self._users[user_id] = user.model_copy(update={"refresh_tokens": tokens})
            return True

    async def find_by_refresh_token(self, token: str) -> Optional[User]:
        return await self.get(refresh_token=token)

    async def clear_refresh_tokens(self, user_id: str) -> bool:
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return False
            self._users[user_id] = user.model_copy(update={"refresh_tokens": []})
            return True

    async def ping(self) -> bool:
        return True
