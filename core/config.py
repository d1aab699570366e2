"""
core/config.py -- Storefront settings, read once from the environment.

Every tunable (signing key, token lifetime, database URL, bind address,
login throttle) is a field on Settings. Other modules ask get_settings()
for the cached instance and never touch os.environ themselves.

Field names double as env var names: secret_key <- SECRET_KEY,
token_expire_seconds <- TOKEN_EXPIRE_SECONDS, database_url <- DATABASE_URL.
A .env file in the working directory is read as well, if present.

The signing key and token TTL are read here exactly once. The API lifespan
hands them to TokenService as constructor arguments; nothing else reads them.

Layer rule: core/ is the kernel. This module may not import from api/,
auth/, or catalog/.
"""

import logging
import secrets
from functools import lru_cache
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("storefront.config")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'storefront.db'}"


class Settings(BaseSettings):
    """Typed view of the process environment.

    Only secret_key lacks a usable default; see validate_secret_key.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    log_level: str = "INFO"
    # "" means unset. validate_secret_key replaces or rejects it.
    secret_key: str = ""

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    token_expire_seconds: int = Field(default=3600, gt=0)
    login_rate_limit: str = "10/minute"
    rate_limit_enabled: bool = True

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    database_url: str = _DEFAULT_DB_URL

    # ------------------------------------------------------------------
    # HTTP server
    # ------------------------------------------------------------------

    host: str = "127.0.0.1"
    port: int = 8000
    cors_origins: list[str] = ["http://localhost", "http://localhost:3000", "http://127.0.0.1"]

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Fill in or reject the signing key.

        With DEBUG on, a missing key is replaced by a random one, so tokens
        die with the process. With DEBUG off, a missing key is fatal. Any key
        under 32 characters is rejected.
        """
        if not self.secret_key:
            if self.debug:
                self.secret_key = secrets.token_hex(32)
                logger.warning("Using auto-generated SECRET_KEY. Issued tokens will not survive a restart.")
            else:
                raise ValueError(
                    "SECRET_KEY is required when DEBUG is off. "
                    "Export a key of 32+ characters or set DEBUG=true for a throwaway one."
                )
        if len(self.secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide Settings, built on first call.

    Tests that change the environment must call get_settings.cache_clear().
    """
    return Settings()
