"""Application configuration via Pydantic Settings."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings

# Resolve .env from the project root regardless of CWD
_ENV_FILE = Path(__file__).resolve().parents[3] / ".env"


class Settings(BaseSettings):
    """Central configuration loaded from environment variables / .env file."""

    # Database
    database_url: str = "sqlite+aiosqlite:///./zephvault.db"

    # AI
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"

    # Object storage (Supabase Storage REST API)
    supabase_url: str = ""
    supabase_service_key: str = ""
    storage_bucket: str = "documents"

    # Cron / internal calls
    cron_secret: str = ""
    app_url: str = ""
    reminder_send_delay_seconds: float = 1.0

    # Email
    sendgrid_api_key: str = ""
    firm_name: str = "AN. Zeph and Associates"
    firm_email: str = "admin@anzeph.com"

    # CORS / Frontend
    cors_origins: str = "http://localhost:3000"

    # General
    debug: bool = True

    model_config = {"env_file": str(_ENV_FILE), "env_file_encoding": "utf-8", "extra": "ignore"}

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list.

        In debug mode, returns ["*"] to allow any origin.
        """
        if self.debug:
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Return cached Settings instance."""
    return Settings()
