"""Engine configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Cross-field rules (email provider credentials,
positive timeouts) are validated at load time.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_EMAIL_PROVIDERS = ("log", "resend")


class Settings(BaseSettings):
    """Engine settings loaded from environment and .env.

    database_url may be empty for processes that never touch SQL; the
    database module raises SqlNotConfiguredException on first use instead.
    """

    # App
    app_name: str = "opsflow"
    app_version: str = "1.0.0"
    debug: bool = False
    # Base URL used to build links in email variables (invoice, project, dashboard).
    app_url: str = "https://app.opsflow.local"

    # Database (PostgreSQL via asyncpg)
    database_url: str = ""
    database_echo: bool = False
    db_pool_size: int | None = None
    db_max_overflow: int | None = None
    db_command_timeout: int | None = None

    # Email delivery: "log" writes messages to the log, "resend" calls the Resend API.
    email_provider: str = "log"
    email_from: str = ""
    resend_api_key: SecretStr | None = None
    resend_api_url: str = "https://api.resend.com/emails"
    email_timeout_seconds: float = 10.0

    # Workflows: per-handler deadline (None disables)
    workflow_handler_timeout_seconds: float | None = 30.0

    # OpenTelemetry
    telemetry_enabled: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_email_and_timeouts(self) -> "Settings":
        """Validate email provider and timeout settings.

        - email_provider must be 'log' or 'resend'.
        - Resend: RESEND_API_KEY and EMAIL_FROM required.
        - Timeouts must be positive.
        """
        if self.email_provider not in _EMAIL_PROVIDERS:
            raise ValueError(
                f"email_provider must be one of {_EMAIL_PROVIDERS}, got: {self.email_provider!r}"
            )
        if self.email_provider == "resend":
            has_key = self.resend_api_key and self.resend_api_key.get_secret_value()
            if not has_key:
                raise ValueError(
                    "RESEND_API_KEY is required when email_provider is 'resend'. "
                    "Set in environment or .env file."
                )
            if not self.email_from:
                raise ValueError(
                    "EMAIL_FROM is required when email_provider is 'resend' "
                    "(e.g. 'Opsflow <no-reply@example.com>')."
                )
        if self.email_timeout_seconds <= 0:
            raise ValueError("email_timeout_seconds must be positive")
        handler_timeout = self.workflow_handler_timeout_seconds
        if handler_timeout is not None and handler_timeout <= 0:
            raise ValueError("workflow_handler_timeout_seconds must be positive")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached engine settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
