"""Application settings and configuration helpers."""
from functools import lru_cache
import os
from pydantic import BaseModel, Field
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseModel):
    """Runtime configuration loaded from environment variables."""

    database_url: str = Field(
        default="sqlite+aiosqlite:///./lumitrack.db", alias="DATABASE_URL"
    )
    secret_key: str = Field(default="change-me", alias="SECRET_KEY")
    web_token_expires_minutes: int = Field(default=15, alias="WEB_TOKEN_EXPIRES_MINUTES")
    password_reset_expires_minutes: int = Field(
        default=60, alias="PASSWORD_RESET_EXPIRES_MINUTES"
    )
    frontend_url: str = Field(default="http://localhost:3000", alias="FRONTEND_URL")
    cors_origin: str = Field(default="http://localhost:3000", alias="CORS_ORIGIN")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    mailgun_api_key: str = Field(default="", alias="MAILGUN_API_KEY")
    mailgun_domain: str = Field(default="", alias="MAILGUN_DOMAIN")
    mailgun_base_url: str = Field(default="https://api.mailgun.net", alias="MAILGUN_BASE_URL")
    mail_from: str = Field(default="LumiTrack <noreply@lumitrack.local>", alias="MAIL_FROM")

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
    }

    @property
    def mailgun_configured(self) -> bool:
        return bool(self.mailgun_api_key.strip() and self.mailgun_domain.strip())


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    env = {
        name: os.environ[field.alias]
        for name, field in Settings.model_fields.items()
        if field.alias and field.alias in os.environ
    }
    return Settings(**env)
