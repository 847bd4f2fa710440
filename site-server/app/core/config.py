"""Application configuration using pydantic settings with structured sections."""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CC_EMAILS: dict[str, str] = {
    "ai-ml-consulting": "ai@didc.com",
    "enterprise-software": "software@didc.com",
    "digital-transformation": "transformation@didc.com",
    "cloud-services": "cloud@didc.com",
    "data-analytics": "analytics@didc.com",
    "cybersecurity": "security@didc.com",
    "partnership": "partnerships@didc.com",
    "careers": "careers@didc.com",
    "media": "press@didc.com",
}


class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False


class DatabaseSettings(BaseModel):
    url: str = Field(default="sqlite+aiosqlite:///./site.db", alias="url")
    echo: bool = False
    pool_size: Optional[int] = None
    max_overflow: Optional[int] = None


class MailSettings(BaseModel):
    backend: Literal["smtp", "console"] = "smtp"
    host: str = "smtp.didc.com"
    port: int = 587
    username: Optional[str] = "noreply@didc.com"
    password: Optional[str] = None
    use_tls: bool = True
    timeout: float = 15.0
    from_email: str = "noreply@didc.com"
    from_name: str = "DIDC Contact Form"
    to_email: str = "hello@didc.com"


class ContactSettings(BaseModel):
    cc_emails: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_CC_EMAILS))
    upload_dir: Path = Field(default=Path("storage/uploads"))
    max_file_size: int = 10 * 1024 * 1024
    allowed_extensions: list[str] = Field(
        default_factory=lambda: ["pdf", "doc", "docx", "txt", "jpg", "jpeg", "png"]
    )
    audit_log_path: Path = Field(default=Path("storage/logs/contact_submissions.log"))
    site_url: str = "https://didc.com"
    quick_min_message_length: int = 10
    notification_timeout: float = 20.0


class RateLimitSettings(BaseModel):
    backend: Literal["memory", "database"] = "database"
    window_seconds: int = 60 * 60
    max_submissions: int = 5


class IntegrationSettings(BaseModel):
    slack_webhook_url: Optional[str] = None
    hubspot_api_key: Optional[str] = None
    hubspot_base_url: str = "https://api.hubapi.com"
    timeout: float = 10.0


class Settings(BaseSettings):
    """Top-level application settings with nested sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"
    project_name: str = "DIDC Website"
    api_prefix: str = "/api"
    cors_origins: list[str] = Field(default_factory=lambda: ["https://didc.com"])

    server: ServerSettings = ServerSettings()
    database: DatabaseSettings = DatabaseSettings()
    mail: MailSettings = MailSettings()
    contact: ContactSettings = ContactSettings()
    rate_limit: RateLimitSettings = RateLimitSettings()
    integrations: IntegrationSettings = IntegrationSettings()

    site_dir: Path = Path("../dist")

    @property
    def database_url(self) -> str:
        return self.database.url

    @property
    def host(self) -> str:
        return self.server.host

    @property
    def port(self) -> int:
        return self.server.port

    @property
    def webhook_enabled(self) -> bool:
        return bool(self.integrations.slack_webhook_url)

    @property
    def crm_enabled(self) -> bool:
        return bool(self.integrations.hubspot_api_key)


@lru_cache()
def get_settings() -> Settings:
    return Settings()
