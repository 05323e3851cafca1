"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules.
The signing secrets must be in the environment before `api` is imported,
because the application instance is built at import time.
"""

import os

os.environ.setdefault("TURNSTILE_ACCESS_TOKEN_SECRET", "test-access-secret-for-testing-only-0001")
os.environ.setdefault("TURNSTILE_REFRESH_TOKEN_SECRET", "test-refresh-secret-for-testing-only-0002")
os.environ.setdefault("TURNSTILE_USER_STORE_BACKEND", "memory")

from datetime import datetime, timedelta, timezone

import jwt  # PyJWT
import pytest

from api.dependencies import reset_container
from modules.auth.models import TokenIssuerConfig
from modules.auth.passwords import hash_password
from modules.auth.service import AuthService
from modules.auth.signing import TokenIssuer
from modules.auth.token_store import RefreshTokenStore
from modules.users.models import User
from modules.users.store import InMemoryUserStore
from shared.config import get_settings


TEST_ACCESS_SECRET = os.environ["TURNSTILE_ACCESS_TOKEN_SECRET"]
TEST_REFRESH_SECRET = os.environ["TURNSTILE_REFRESH_TOKEN_SECRET"]
TEST_PASSWORD = "correct"


def create_test_token(
    user_id: str = "u1",
    first_name: str = "Ada",
    last_name: str = "Lovelace",
    role: str = "user",
    expired: bool = False,
    secret: str = TEST_ACCESS_SECRET,
) -> str:
    """
    Create an access token the way the issuer would.

    Args:
        user_id: Subject claim
        expired: If True, creates a token that expired an hour ago
        secret: Signing secret (defaults to the test access secret)

    Returns:
        JWT token string
    """
    now = datetime.now(timezone.utc)
    exp = now - timedelta(hours=1) if expired else now + timedelta(hours=1)
    payload = {
        "sub": user_id,
        "firstName": first_name,
        "lastName": last_name,
        "role": role,
        "iat": int(now.timestamp() * 1000),
        "jti": "test-jti",
        "exp": int(exp.timestamp()),
    }
    return jwt.encode(payload, secret, algorithm="HS256")


def make_user(
    user_id: str = "u1",
    email: str = "ada@example.com",
    password: str = TEST_PASSWORD,
    role: str = "user",
    refresh_tokens: list[str] | None = None,
) -> User:
    """Build a user record with a real password hash."""
    password_hash, password_salt = hash_password(password)
    return User(
        id=user_id,
        email=email,
        password_hash=password_hash,
        password_salt=password_salt,
        first_name="Ada",
        last_name="Lovelace",
        role=role,
        refresh_tokens=refresh_tokens or [],
    )


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset cached settings and the service container around each test."""
    get_settings.cache_clear()
    reset_container()
    yield
    get_settings.cache_clear()
    reset_container()


@pytest.fixture
def test_user() -> User:
    """Provide the u1 user with password 'correct'."""
    return make_user()


@pytest.fixture
def user_store(test_user: User) -> InMemoryUserStore:
    """In-memory store seeded with u1."""
    return InMemoryUserStore([test_user])


@pytest.fixture
def issuer_config() -> TokenIssuerConfig:
    return TokenIssuerConfig(
        access_secret=TEST_ACCESS_SECRET,
        refresh_secret=TEST_REFRESH_SECRET,
    )


@pytest.fixture
def issuer(issuer_config: TokenIssuerConfig) -> TokenIssuer:
    return TokenIssuer(issuer_config)


@pytest.fixture
def token_store(user_store: InMemoryUserStore) -> RefreshTokenStore:
    return RefreshTokenStore(user_store, timeout=1.0)


@pytest.fixture
def auth_service(
    user_store: InMemoryUserStore,
    issuer: TokenIssuer,
    token_store: RefreshTokenStore,
) -> AuthService:
    return AuthService(users=user_store, issuer=issuer, tokens=token_store, store_timeout=1.0)


@pytest.fixture
def auth_token() -> str:
    """Create a valid access token for u1."""
    return create_test_token()


@pytest.fixture
def auth_headers(auth_token: str) -> dict[str, str]:
    """Create authorization headers with a valid token."""
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
def user_factory():
    """Provide make_user to tests that need extra users."""
    return make_user


@pytest.fixture
def token_factory():
    """Provide create_test_token to tests that need custom access tokens."""
    return create_test_token
