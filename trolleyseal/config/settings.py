from typing import Literal, Optional
from urllib.parse import quote_plus

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseConfig(BaseSettings):
    """Database configuration"""

    host: str = "localhost"
    port: int = 5432
    username: str = "postgres"
    password: SecretStr = Field(default=SecretStr("postgres"))
    database: str = "trolley_seal"
    schema_name: Optional[str] = None
    serverless: bool = Field(
        default=True,
        description="If true, disable connection pooling so serverless DBs can pause.",
    )

    @property
    def url(self) -> str:
        """Get database URL"""
        username = quote_plus(self.username)
        password = quote_plus(self.password.get_secret_value())
        return (
            "postgresql+asyncpg://"
            f"{username}:{password}"
            f"@{self.host}:{self.port}/{self.database}"
        )

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class SecurityConfig(BaseSettings):
    """JWT and application security configuration."""

    jwt_secret_key: SecretStr = Field(
        default=SecretStr("change-me"),
        validation_alias="JWT_SECRET",
    )
    jwt_algorithm: str = Field(default="HS256", validation_alias="JWT_ALGORITHM")
    access_token_expires_minutes: int = Field(
        default=12 * 60,
        validation_alias="JWT_EXPIRATION_MINUTES",
        ge=1,
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class MailConfig(BaseSettings):
    """Transactional email provider configuration."""

    api_url: str = "https://api.resend.com/emails"
    api_key: SecretStr | None = None
    sender: str = "Trolley Seal System <onboarding@resend.dev>"
    admin_recipient: str = "ground-ops-admin@example.com"
    timeout_seconds: float = Field(default=10.0, gt=0)

    def is_configured(self) -> bool:
        return bool(self.api_url and self.api_key and self.admin_recipient)

    model_config = SettingsConfigDict(
        env_prefix="MAIL_",
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class ReportSettings(BaseSettings):
    """Printable report layout defaults."""

    line_width: int = Field(default=50, ge=10)
    target_rows: int = Field(default=25, ge=1)
    group_order: Literal["first-seen", "catalog"] = "first-seen"

    model_config = SettingsConfigDict(
        env_prefix="REPORT_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class Settings(BaseSettings):
    """Application settings"""

    app_name: str = "Trolley Seal Backend"
    app_version: str = "1.0.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000
    log_file: str = "logs/app.log"
    seal_log_file: str = "logs/seals.log"
    persist_request_logs: bool = False

    # Remote store behaviour
    remote_timeout_seconds: float = Field(default=15.0, gt=0)
    active_window_hours: int = Field(default=6, ge=1)
    flight_number_prefix: str = "TR"

    # Account requests
    account_request_limit: int = Field(default=5, ge=1)
    account_request_window_minutes: int = Field(default=60, ge=1)

    # Database
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)

    # Security
    security: SecurityConfig = Field(default_factory=SecurityConfig)

    # Mail
    mail: MailConfig = Field(default_factory=MailConfig)

    # Report
    report: ReportSettings = Field(default_factory=ReportSettings)

    # CORS
    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
settings = Settings()
