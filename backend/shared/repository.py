"""
Base repository class for database access.

Provides a common abstraction layer for all repositories, encapsulating
Supabase client access and translating transport failures into the
shared exception hierarchy.
"""

import asyncio
import logging
from typing import Any, TypeVar, Generic

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from .exceptions import UpstreamUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Base class for all repositories.

    Provides common functionality for database operations:
    - Supabase client access via self._db
    - Generic type parameter for model type hints
    - _execute() for running a query with uniform error translation

    Subclasses should implement domain-specific data access methods
    and handle dict-to-Pydantic model mapping internally.

    Example:
        class UserRepository(BaseRepository[User]):
            async def get(self, **filters) -> Optional[User]:
                query = self._db.table("users").select("*").eq("email", filters["email"])
                result = await self._execute(query, "get")
                if not result.data:
                    return None
                return self._map_to_user(result.data[0])
    """

    service_name = "database"

    def __init__(self, db: Client) -> None:
        """
        Initialize the repository with a Supabase client.

        Args:
            db: Supabase client instance for database operations.
        """
        self._db = db

    async def _execute(self, query: Any, operation: str) -> Any:
        """
        Run a PostgREST query builder and return its response.

        APIError responses are re-raised untouched so subclasses can
        inspect the Postgres error code; transport failures become
        UpstreamUnavailableError.

        The client is synchronous, so the query runs in a worker thread and
        a caller-side timeout can abandon it.
        """
        try:
            return await asyncio.to_thread(query.execute)
        except APIError:
            raise
        except httpx.HTTPError as e:
            logger.warning(f"{self.service_name} {operation} failed: {e}")
            raise UpstreamUnavailableError(
                f"{self.service_name} unavailable during {operation}",
                service=self.service_name,
                details={"operation": operation},
            ) from e
