"""Application settings and configuration.

This module defines all configuration options for the Flying With Joel API.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _clamp(value: int, lower: int, upper: int) -> int:
    return max(lower, min(upper, int(value)))


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Every component receives the values it needs at construction time; the
    module-level ``settings`` instance is only read while wiring the app.
    """

    # Application metadata
    app_name: str = Field(default="Flying With Joel API", alias="APP_NAME")
    app_version: str = Field(default="1.0.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Key-value store (redis://, rediss:// or memory://)
    kv_url: str | None = Field(default=None, alias="KV_URL")

    # Operator credentials shared by every protected write
    admin_username: str | None = Field(default=None, alias="ADMIN_USERNAME")
    admin_password: str | None = Field(default=None, alias="ADMIN_PASSWORD")

    # Failed-credential lockout
    auth_failure_window_seconds: int = Field(default=600, alias="AUTH_FAILURE_WINDOW_SECONDS")
    auth_max_attempts: int = Field(default=12, alias="AUTH_MAX_ATTEMPTS")

    # Per-identity submission cooldowns
    data_request_cooldown_seconds: int = Field(
        default=120,
        alias="DATA_REQUEST_COOLDOWN_SECONDS",
    )
    suggestion_cooldown_seconds: int = Field(default=120, alias="SUGGESTION_COOLDOWN_SECONDS")

    # Outbound email (HTTP email API)
    email_api_url: str = Field(default="https://api.resend.com/emails", alias="EMAIL_API_URL")
    email_api_key: str | None = Field(default=None, alias="EMAIL_API_KEY")
    email_from: str | None = Field(default=None, alias="EMAIL_FROM")
    email_timeout_seconds: float = Field(default=10.0, alias="EMAIL_TIMEOUT_SECONDS")

    # Discord webhooks
    incident_webhook_url: str | None = Field(default=None, alias="INCIDENT_WEBHOOK_URL")
    suggestions_webhook_url: str | None = Field(default=None, alias="SUGGESTIONS_WEBHOOK_URL")
    webhook_timeout_seconds: float = Field(default=10.0, alias="WEBHOOK_TIMEOUT_SECONDS")
    incident_alert_email: str | None = Field(default=None, alias="INCIDENT_ALERT_EMAIL")

    # Public URLs used in notifications and emailed links
    public_site_url: str = Field(default="https://flyingwithjoel.co.uk", alias="PUBLIC_SITE_URL")
    status_page_path: str = Field(default="/pages/status.html", alias="STATUS_PAGE_PATH")
    public_api_url: str = Field(default="https://flyingwithjoel.co.uk", alias="PUBLIC_API_URL")

    # Cloudflare Turnstile (suggestion form captcha)
    turnstile_secret_key: str | None = Field(default=None, alias="TURNSTILE_SECRET_KEY")

    # Twitch integration
    twitch_client_id: str | None = Field(default=None, alias="TWITCH_CLIENT_ID")
    twitch_client_secret: str | None = Field(default=None, alias="TWITCH_CLIENT_SECRET")
    twitch_channel_login: str = Field(default="flyingwithjoel", alias="TWITCH_CHANNEL_LOGIN")
    live_status_cache_seconds: int = Field(default=60, alias="LIVE_STATUS_CACHE_SECONDS")
    follower_cache_seconds: int = Field(default=300, alias="FOLLOWER_CACHE_SECONDS")

    # CORS configuration for the public site
    cors_origins: list[str] = Field(
        default=[
            "https://flyingwithjoel.co.uk",
            "https://www.flyingwithjoel.co.uk",
        ],
        alias="CORS_ORIGINS",
    )
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["content-type", "authorization"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("auth_failure_window_seconds")
    @classmethod
    def _clamp_auth_window(cls, value: int) -> int:
        return _clamp(value, 60, 3600)

    @field_validator("auth_max_attempts")
    @classmethod
    def _clamp_auth_attempts(cls, value: int) -> int:
        return _clamp(value, 3, 100)

    @field_validator("data_request_cooldown_seconds", "suggestion_cooldown_seconds")
    @classmethod
    def _clamp_cooldown(cls, value: int) -> int:
        return _clamp(value, 5, 600)

    @property
    def status_page_url(self) -> str:
        """Return the absolute URL of the public status page."""
        return self.public_site_url.rstrip("/") + self.status_page_path

    @property
    def data_request_confirm_url(self) -> str:
        """Return the absolute URL users visit to confirm a data request."""
        return self.public_api_url.rstrip("/") + "/api/data-requests/confirm"

    @property
    def email_configured(self) -> bool:
        """Return True when the outbound email sender can be built."""
        return bool(self.email_api_key and self.email_from)


settings = Settings()
