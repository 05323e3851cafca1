"""
Refresh token store.

A refresh token is valid exactly while it sits in its owner's
refresh_tokens collection. This class is the auth module's view of that
collection; persistence and per-record atomicity belong to the IUserStore.
"""

import logging
from typing import Optional

from modules.users.interfaces import IUserStore
from modules.users.models import User
from shared.timeouts import call_with_timeout

logger = logging.getLogger(__name__)

STORE_SERVICE = "user-store"


class RefreshTokenStore:
    """
    Append, look up and clear refresh tokens on user records.

    Every call is bounded by `timeout` seconds and raises
    UpstreamUnavailableError when the store is slow or down.

    Args:
        users: The user record store
        timeout: Per-call limit in seconds
        cap: Optional limit on tokens kept per user (oldest dropped first).
            None keeps all tokens until logout.
    """

    def __init__(self, users: IUserStore, timeout: float = 5.0, cap: Optional[int] = None):
        self._users = users
        self._timeout = timeout
        self._cap = cap

    async def append(self, user_id: str, token: str) -> bool:
        """Add a token to the user's collection. False if the user is gone."""
        stored = await call_with_timeout(
            self._users.append_refresh_token(user_id, token, cap=self._cap),
            self._timeout,
            STORE_SERVICE,
        )
        if not stored:
            logger.warning(f"Refresh token not stored: user {user_id} not found")
        return stored

    async def find_by_token(self, token: str) -> Optional[User]:
        """Return the user holding this token, or None."""
        return await call_with_timeout(
            self._users.find_by_refresh_token(token),
            self._timeout,
            STORE_SERVICE,
        )

    async def clear_all(self, user_id: str) -> bool:
        """Remove every token the user holds. False if the user is gone."""
        return await call_with_timeout(
            self._users.clear_refresh_tokens(user_id),
            self._timeout,
            STORE_SERVICE,
        )

