"""
User repository for Supabase.

Encapsulates all queries and data mapping for the users table. Refresh
token mutations are single statements: the append goes through the
append_refresh_token SQL function (migrations/001_users.sql), which does
the read-modify-write inside Postgres, and the clear is one UPDATE.
"""

import logging
from typing import Any, Optional

from postgrest.exceptions import APIError
from supabase import Client

from shared.exceptions import UpstreamUnavailableError
from shared.repository import BaseRepository

from .exceptions import DuplicateUserError
from .interfaces import IUserStore
from .models import User

logger = logging.getLogger(__name__)

USERS_TABLE = "users"
UNIQUE_VIOLATION = "23505"

_FILTER_COLUMNS = {"id": "id", "email": "email"}


class SupabaseUserRepository(BaseRepository[User], IUserStore):
    """
    Supabase-backed implementation of IUserStore.

    Note: This repository does NOT perform authorization checks.
    The service layer decides who may read or change a record.
    """

    service_name = "user-store"

    def __init__(self, db: Client) -> None:
        super().__init__(db)

    # -------------------------------------------------------------------------
    # CRUD
    # -------------------------------------------------------------------------

    async def get(self, **filters: Any) -> Optional[User]:
        unknown = set(filters) - set(_FILTER_COLUMNS) - {"refresh_token"}
        if unknown:
            raise ValueError(f"Unknown user filter keys: {unknown!r}")

        query = self._db.table(USERS_TABLE).select("*")
        for key, value in filters.items():
            if key == "refresh_token":
                query = query.contains("refresh_tokens", [value])
            else:
                query = query.eq(_FILTER_COLUMNS[key], value)

        result = await self._run(query.limit(1), "get")
        if not result.data:
            return None
        return self._map_to_user(result.data[0])

    async def list(self, offset: int = 0, limit: int = 20) -> list[User]:
        query = (
            self._db.table(USERS_TABLE)
            .select("*")
            .order("created_at")
            .range(offset, offset + limit - 1)
        )
        result = await self._run(query, "list")
        return [self._map_to_user(row) for row in result.data]

    async def create(self, user: User) -> User:
        data = user.model_dump(mode="json", exclude={"created_at", "updated_at"})
        result = await self._run(self._db.table(USERS_TABLE).insert(data), "create")
        return self._map_to_user(result.data[0])

    async def update(self, user_id: str, fields: dict[str, Any]) -> Optional[User]:
        query = self._db.table(USERS_TABLE).update(fields).eq("id", user_id)
        result = await self._run(query, "update")
        if not result.data:
            return None
        return self._map_to_user(result.data[0])

    async def delete(self, user_id: str) -> bool:
        query = self._db.table(USERS_TABLE).delete().eq("id", user_id)
        result = await self._run(query, "delete")
        return bool(result.data)

    # -------------------------------------------------------------------------
    # Refresh tokens
    # -------------------------------------------------------------------------

    async def append_refresh_token(
        self,
        user_id: str,
        token: str,
        cap: Optional[int] = None,
    ) -> bool:
        query = self._db.rpc(
            "append_refresh_token",
            {"p_user_id": user_id, "p_token": token, "p_cap": cap},
        )
        result = await self._run(query, "append_refresh_token")
        return bool(result.data)

    async def find_by_refresh_token(self, token: str) -> Optional[User]:
        return await self.get(refresh_token=token)

    async def clear_refresh_tokens(self, user_id: str) -> bool:
        query = (
            self._db.table(USERS_TABLE)
            .update({"refresh_tokens": []})
            .eq("id", user_id)
        )
        result = await self._run(query, "clear_refresh_tokens")
        return bool(result.data)

    async def ping(self) -> bool:
        try:
            await self._run(self._db.table(USERS_TABLE).select("id").limit(1), "ping")
        except UpstreamUnavailableError:
            return False
        return True

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def _run(self, query: Any, operation: str) -> Any:
        """Execute a query, mapping Postgres errors onto domain exceptions."""
        try:
            return await self._execute(query, operation)
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                raise DuplicateUserError(["email"]) from e
            logger.warning(f"user store {operation} rejected: {e.message}")
            raise UpstreamUnavailableError(
                f"user store rejected {operation}",
                service=self.service_name,
                details={"operation": operation, "db_code": e.code},
            ) from e

    def _map_to_user(self, data: dict[str, Any]) -> User:
        """Map a database row to a User."""
        return User(
            id=str(data["id"]),
            email=data["email"],
            password_hash=data["password_hash"],
            password_salt=data["password_salt"],
            first_name=data["first_name"],
            last_name=data["last_name"],
            role=data.get("role") or "user",
            refresh_tokens=list(data.get("refresh_tokens") or []),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )
