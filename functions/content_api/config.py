"""
Configuration and settings for the content API.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEVELOPMENT_JWT_SECRET = "development-only-jwt-secret-change-me"


class Settings(BaseSettings):
    """Environment-backed settings shared by the server and the function."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")
    environment: str = Field(default="development")

    # Durable store; absent means the in-memory fallback is used.
    database_url: Optional[str] = Field(default=None)
    database_name: Optional[str] = Field(default=None)

    # Token verification (tokens are issued elsewhere)
    jwt_secret: str = Field(default=DEVELOPMENT_JWT_SECRET)
    jwt_algorithm: str = Field(default="HS256")
    admin_user: str = Field(default="admin")

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)
    seed_sample_content: bool = Field(default=False)

    cors_origins: str = Field(default="*")

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
