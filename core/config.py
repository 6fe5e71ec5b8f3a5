"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads happen here. No module should call os.getenv()
or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call. This is
      the FastAPI dependency injection pattern for config.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file. Field names map to env var names
      (e.g. secret_password -> SECRET_PASSWORD). Type coercion is built in.

  @model_validator(mode="after"): Cross-field validation once every field is
      resolved. Production mode refuses to start without SECRET_PASSWORD;
      development mode starts anyway and warns that every login will fail.

Layer rule: core/ is the kernel. This module may not import from api/ or auth/.
"""

import logging
from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("admingate.config")

DEV_ORIGINS = ("http://localhost:3000", "http://localhost:5173")


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in tests
    without a real .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    production: bool = False
    frontend_url: str = "http://localhost:3000"
    log_level: str = "INFO"
    # Use the first X-Forwarded-For hop as the client identity. Only enable
    # behind a proxy that overwrites the header.
    trust_proxy: bool = False

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    # Empty string is the sentinel for "not configured".
    secret_password: str = ""
    session_duration_seconds: int = 24 * 60 * 60
    session_inactivity_seconds: int = 2 * 60 * 60
    login_max_attempts: int = 5
    login_lockout_seconds: int = 15 * 60

    # ------------------------------------------------------------------
    # Rate limiting
    # ------------------------------------------------------------------

    rate_limit_window_seconds: int = 15 * 60
    rate_limit_max_requests: int = 100

    # ------------------------------------------------------------------
    # Background sweeps
    # ------------------------------------------------------------------

    rate_limit_sweep_seconds: int = 5 * 60
    session_sweep_seconds: int = 60 * 60
    sweep_lock_timeout_seconds: float = 1.0

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def cors_origins(self) -> list[str]:
        if self.production:
            return [self.frontend_url]
        return list(DEV_ORIGINS)

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_limits(self) -> "Settings":
        """Reject non-positive durations and limits, and enforce the secret policy."""
        for name in (
            "session_duration_seconds",
            "session_inactivity_seconds",
            "login_max_attempts",
            "login_lockout_seconds",
            "rate_limit_window_seconds",
            "rate_limit_max_requests",
            "rate_limit_sweep_seconds",
            "session_sweep_seconds",
            "sweep_lock_timeout_seconds",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name.upper()} must be positive.")

        if not self.secret_password:
            if self.production:
                raise ValueError(
                    "SECRET_PASSWORD is required in production mode. "
                    "Set SECRET_PASSWORD in your environment or .env file."
                )
            logger.warning("WARNING: SECRET_PASSWORD is not set. Every login attempt will be rejected.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
