"""
Centralized configuration for the Turnstile backend.

All settings are loaded from environment variables with sensible defaults.
Every variable is prefixed with TURNSTILE_ (e.g. TURNSTILE_ACCESS_TOKEN_SECRET).

The two signing secrets have no default: the process refuses to start
without them, and they are read exactly once through get_settings().
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="TURNSTILE_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Turnstile API"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False

    # CORS settings
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    # Token signing
    access_token_secret: str = Field(..., min_length=1)
    refresh_token_secret: str = Field(..., min_length=1)
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = Field(default=60, gt=0)
    # Unset means refresh tokens carry no exp claim; store membership decides.
    refresh_token_expire_minutes: Optional[int] = Field(default=None, gt=0)

    # Refresh token policy. Unset keeps every token until logout.
    refresh_token_cap: Optional[int] = Field(default=None, gt=0)

    # Upstream timeouts (seconds)
    store_timeout_seconds: float = Field(default=5.0, gt=0)
    signing_timeout_seconds: float = Field(default=2.0, gt=0)

    # User record store
    user_store_backend: Literal["memory", "supabase"] = "memory"
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    supabase_db_url: str = ""

    @model_validator(mode="after")
    def validate_secrets(self) -> "Settings":
        """Reject blank or shared signing secrets.

        A shared secret would let a leaked access-token key mint refresh
        tokens, so both keys must be present and different.
        """
        if not self.access_token_secret.strip() or not self.refresh_token_secret.strip():
            raise ValueError("Access and refresh token secrets must be non-empty.")
        if self.access_token_secret == self.refresh_token_secret:
            raise ValueError("Access and refresh token secrets must differ.")
        return self


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
