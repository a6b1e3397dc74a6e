"""
Application configuration management.

Uses pydantic-settings for type-safe environment variable parsing.
All configuration is centralized here; the settings object is built once
at startup and handed to the storage factory and gateway explicitly, so
nothing below the bootstrap calls os.getenv() or get_settings().
"""

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_ADMIN_SECRET = "changeme"


class Settings(BaseSettings):
    """
    Application settings with validation and type coercion.

    Values are loaded from environment variables or .env file.
    All fields have sensible defaults for local development.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Shared secret required by the write endpoints; blank means the default
    admin_secret: str = DEFAULT_ADMIN_SECRET

    # Local file backend (used when remote credentials are absent)
    data_file: str = "data/cards.json"
    fallback_data_file: str = "/tmp/cards.json"

    # Logical name of the single live document
    document_key: str = "cards"

    # Remote table backend (Supabase / PostgREST)
    supabase_url: str = ""
    supabase_service_role: str = ""
    remote_table: str = "configs"
    remote_history_table: str = "configs_history"
    remote_timeout_seconds: float = 10.0

    # CORS: comma-separated list, empty means any origin
    allowed_origins: str = ""

    # Server
    server_host: str = "0.0.0.0"
    server_port: int = Field(default=5175, validation_alias=AliasChoices("port", "server_port"))
    debug: bool = False

    # Environment
    environment: Literal["development", "staging", "production"] = "development"

    @field_validator("admin_secret")
    @classmethod
    def default_blank_admin_secret(cls, v: str) -> str:
        if not v.strip():
            return DEFAULT_ADMIN_SECRET
        return v

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def has_remote_credentials(self) -> bool:
        """Both remote endpoint and credential are present and non-empty."""
        return bool(self.supabase_url.strip() and self.supabase_service_role.strip())

    def get_origins_list(self) -> list[str]:
        """Parse comma-separated origins into a list."""
        return [
            origin.strip()
            for origin in self.allowed_origins.split(",")
            if origin.strip()
        ]


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings singleton.

    Only the application bootstrap should call this; everything else
    receives the settings (or the values it needs) as arguments.
    """
    return Settings()
