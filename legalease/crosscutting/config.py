"""
Name: Application Configuration (Settings)

Responsibilities:
  - Centralized, typed configuration using pydantic-settings
  - Validate environment variables at startup
  - Provide defaults that match the original browser behavior

Collaborators:
  - container.py: picks the record store backend and password scheme
  - crosscutting/logger.py: log level and format
  - application/seed_admin.py: default administrator account

Constraints:
  - Configuration only, no business logic

Notes:
  - Uses pydantic-settings for env parsing and validation
  - Singleton via lru_cache; tests build Settings(...) directly
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ALLOWED_STORE_BACKENDS = frozenset({"sqlite", "memory"})
ALLOWED_PASSWORD_SCHEMES = frozenset({"legacy", "argon2"})


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        app_env: Application environment (development/test/production)
        log_level: Root log level (default: INFO)
        log_json: Emit JSON log lines (default: True)
        store_backend: "sqlite" (durable) or "memory" (tests / throwaway)
        store_path: SQLite file backing the record store
        store_busy_timeout_seconds: SQLite busy timeout per connection
        store_open_max_attempts: Attempts when opening the store
        store_open_base_delay_seconds: Initial backoff between open attempts
        store_open_max_delay_seconds: Backoff ceiling between open attempts
        admin_email: Email that grants is_admin at user creation
        admin_password: Password for the seeded default admin
        admin_phone: Phone for the seeded default admin
        seed_default_admin: Create the default admin on startup
        password_scheme: "legacy" fingerprint or opt-in "argon2"
        recent_activity_limit: Activities shown on the dashboard
    """

    # Environment
    app_env: str = "development"

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # Record store
    store_backend: str = "sqlite"
    store_path: str = "legalease.db"
    store_busy_timeout_seconds: float = 5.0
    store_open_max_attempts: int = 3
    store_open_base_delay_seconds: float = 0.1
    store_open_max_delay_seconds: float = 2.0

    # Administrator (is_admin is fixed at creation by email match)
    admin_email: str = "admin@legalease.com"
    admin_password: str = "Admin@123"
    admin_phone: str = "+91 9876543210"
    seed_default_admin: bool = True

    # Credentials
    password_scheme: str = "legacy"

    # Dashboard
    recent_activity_limit: int = 5

    @field_validator("store_backend")
    @classmethod
    def store_backend_valid(cls, v: str) -> str:
        backend = (v or "sqlite").strip().lower()
        if backend not in ALLOWED_STORE_BACKENDS:
            raise ValueError("store_backend must be sqlite or memory")
        return backend

    @field_validator("password_scheme")
    @classmethod
    def password_scheme_valid(cls, v: str) -> str:
        scheme = (v or "legacy").strip().lower()
        if scheme not in ALLOWED_PASSWORD_SCHEMES:
            raise ValueError("password_scheme must be legacy or argon2")
        return scheme

    @field_validator("store_open_max_attempts", "recent_activity_limit")
    @classmethod
    def must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("value must be greater than 0")
        return v

    @field_validator("store_open_base_delay_seconds", "store_busy_timeout_seconds")
    @classmethod
    def must_be_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("value must be >= 0")
        return v

    def is_production(self) -> bool:
        return self.app_env.strip().lower() == "production"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get singleton Settings instance.

    Raises:
        ValidationError: If env vars are invalid
    """
    return Settings()
