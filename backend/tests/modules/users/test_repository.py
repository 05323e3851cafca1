"""Tests for the Supabase user repository."""

import time
from datetime import datetime, timezone
from unittest.mock import MagicMock

import httpx
import pytest
from postgrest.exceptions import APIError

from modules.auth.models import AuthErrorKind, SessionState
from modules.auth.service import AuthService
from modules.auth.token_store import RefreshTokenStore
from modules.users.exceptions import DuplicateUserError
from modules.users.repository import SupabaseUserRepository
from shared.exceptions import UpstreamUnavailableError


def create_mock_user_data(
    user_id: str = "u1",
    email: str = "ada@example.com",
    refresh_tokens: list = None,
) -> dict:
    """Helper to create a users table row."""
    now = datetime.now(timezone.utc).isoformat()
    return {
        "id": user_id,
        "email": email,
        "password_hash": "ab" * 32,
        "password_salt": "cd" * 16,
        "first_name": "Ada",
        "last_name": "Lovelace",
        "role": "user",
        "refresh_tokens": refresh_tokens,
        "created_at": now,
        "updated_at": now,
    }


@pytest.fixture
def mock_db():
    """Supabase client whose query builders chain back to themselves."""
    db = MagicMock()
    query = MagicMock()
    for method in ("select", "eq", "contains", "limit", "order", "range", "insert", "update", "delete"):
        getattr(query, method).return_value = query
    db.table.return_value = query
    db.query = query
    return db


@pytest.fixture
def repo(mock_db) -> SupabaseUserRepository:
    return SupabaseUserRepository(mock_db)


class TestGet:

    @pytest.mark.asyncio
    async def test_get_by_email(self, repo, mock_db):
        mock_db.query.execute.return_value = MagicMock(data=[create_mock_user_data()])

        user = await repo.get(email="ada@example.com")

        assert user.id == "u1"
        assert user.refresh_tokens == []
        mock_db.table.assert_called_with("users")
        mock_db.query.eq.assert_called_with("email", "ada@example.com")

    @pytest.mark.asyncio
    async def test_get_by_refresh_token(self, repo, mock_db):
        mock_db.query.execute.return_value = MagicMock(
            data=[create_mock_user_data(refresh_tokens=["t1"])]
        )

        user = await repo.find_by_refresh_token("t1")

        assert user.refresh_tokens == ["t1"]
        mock_db.query.contains.assert_called_with("refresh_tokens", ["t1"])

    @pytest.mark.asyncio
    async def test_get_not_found(self, repo, mock_db):
        mock_db.query.execute.return_value = MagicMock(data=[])
        assert await repo.get(id="ghost") is None

    @pytest.mark.asyncio
    async def test_unknown_filter(self, repo):
        with pytest.raises(ValueError):
            await repo.get(role="admin")


class TestMutations:

    @pytest.mark.asyncio
    async def test_append_uses_rpc(self, repo, mock_db):
        mock_db.rpc.return_value.execute.return_value = MagicMock(data=True)

        assert await repo.append_refresh_token("u1", "t1", cap=3) is True

        mock_db.rpc.assert_called_once_with(
            "append_refresh_token",
            {"p_user_id": "u1", "p_token": "t1", "p_cap": 3},
        )

    @pytest.mark.asyncio
    async def test_append_missing_user(self, repo, mock_db):
        mock_db.rpc.return_value.execute.return_value = MagicMock(data=False)
        assert await repo.append_refresh_token("ghost", "t1") is False

    @pytest.mark.asyncio
    async def test_clear(self, repo, mock_db):
        mock_db.query.execute.return_value = MagicMock(data=[create_mock_user_data()])

        assert await repo.clear_refresh_tokens("u1") is True

        mock_db.query.update.assert_called_once_with({"refresh_tokens": []})
        mock_db.query.eq.assert_called_with("id", "u1")

    @pytest.mark.asyncio
    async def test_delete_missing(self, repo, mock_db):
        mock_db.query.execute.return_value = MagicMock(data=[])
        assert await repo.delete("ghost") is False


class TestErrorMapping:

    @pytest.mark.asyncio
    async def test_unique_violation(self, repo, mock_db, user_factory):
        mock_db.query.execute.side_effect = APIError(
            {"message": "duplicate key", "code": "23505", "hint": None, "details": None}
        )
        with pytest.raises(DuplicateUserError):
            await repo.create(user_factory())

    @pytest.mark.asyncio
    async def test_other_api_error(self, repo, mock_db):
        mock_db.query.execute.side_effect = APIError(
            {"message": "boom", "code": "XX000", "hint": None, "details": None}
        )
        with pytest.raises(UpstreamUnavailableError) as exc_info:
            await repo.get(id="u1")
        assert exc_info.value.details["db_code"] == "XX000"

    @pytest.mark.asyncio
    async def test_transport_error(self, repo, mock_db):
        mock_db.query.execute.side_effect = httpx.ConnectError("refused")
        with pytest.raises(UpstreamUnavailableError):
            await repo.get(id="u1")

    @pytest.mark.asyncio
    async def test_ping(self, repo, mock_db):
        mock_db.query.execute.return_value = MagicMock(data=[])
        assert await repo.ping() is True
        mock_db.query.execute.side_effect = httpx.ConnectError("refused")
        assert await repo.ping() is False


class TestSlowStore:
    """A stalled Supabase call must not hold the event loop past the timeout."""

    STALL_SECONDS = 0.5

    def _stall(self, *args, **kwargs):
        time.sleep(self.STALL_SECONDS)
        return MagicMock(data=[])

    @pytest.mark.asyncio
    async def test_find_times_out(self, repo, mock_db):
        mock_db.query.execute.side_effect = self._stall
        store = RefreshTokenStore(repo, timeout=0.05)

        started = time.monotonic()
        with pytest.raises(UpstreamUnavailableError) as exc_info:
            await store.find_by_token("t1")
        elapsed = time.monotonic() - started

        assert elapsed < self.STALL_SECONDS / 2
        assert exc_info.value.retryable is True

    @pytest.mark.asyncio
    async def test_append_times_out(self, repo, mock_db):
        mock_db.rpc.return_value.execute.side_effect = self._stall
        store = RefreshTokenStore(repo, timeout=0.05)

        with pytest.raises(UpstreamUnavailableError):
            await store.append("u1", "t1")

    @pytest.mark.asyncio
    async def test_login_rejected_as_retryable(self, repo, mock_db, issuer):
        mock_db.query.execute.side_effect = self._stall
        service = AuthService(
            users=repo,
            issuer=issuer,
            tokens=RefreshTokenStore(repo, timeout=0.05),
            store_timeout=0.05,
        )

        started = time.monotonic()
        result = await service.login("ada@example.com", "correct")
        elapsed = time.monotonic() - started

        assert result.state == SessionState.REJECTED
        assert result.failure.kind == AuthErrorKind.UPSTREAM_UNAVAILABLE
        assert result.failure.retryable is True
        assert elapsed < self.STALL_SECONDS / 2

    @pytest.mark.asyncio
    async def test_refresh_rejected_as_retryable(self, repo, mock_db, issuer):
        mock_db.query.execute.side_effect = self._stall
        service = AuthService(
            users=repo,
            issuer=issuer,
            tokens=RefreshTokenStore(repo, timeout=0.05),
            store_timeout=0.05,
        )

        result = await service.refresh("t1")

        assert result.failure.kind == AuthErrorKind.UPSTREAM_UNAVAILABLE
