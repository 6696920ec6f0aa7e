"""
Application configuration using Pydantic settings
"""

from enum import Enum
from functools import lru_cache
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


SUPPORTED_LANGUAGES = ("es", "en", "pt")


class SEOPlugin(str, Enum):
    """SEO extension whose fields receive meta title/description/focus keyword"""

    YOAST = "yoast"
    RANK_MATH = "rank_math"
    NONE = "none"


class Settings(BaseSettings):
    """Application settings from environment variables (TAXOAI_*)"""

    # Application
    app_name: str = "TaxoAI Connector"
    version: str = "1.0.0"
    environment: str = "development"
    debug: bool = False
    api_v1_prefix: str = "/api/v1"
    host: str = "0.0.0.0"
    port: int = 8000

    # Remote classification service
    api_key: str = ""
    api_url: str = "https://api.taxoai.dev"
    request_timeout: float = 15.0

    # Analysis behaviour
    language: str = "es"
    auto_analyze: bool = False
    confidence_threshold: float = 0.7
    auto_map_categories: bool = False
    analyze_images: bool = False
    update_title: bool = False
    update_description: bool = False
    seo_plugin: SEOPlugin = SEOPlugin.NONE

    # Batch jobs run only the store step unless this is enabled
    batch_apply_integrators: bool = False
    job_map_ttl: int = 3600
    poll_interval: float = 3.0

    # Usage / quota
    free_tier_limit: int = 25
    usage_cache_ttl: int = 300

    # Storage
    database_url: str = "sqlite+aiosqlite:///./taxoai.db"
    db_echo: bool = False
    redis_url: Optional[str] = None

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"

    model_config = SettingsConfigDict(
        env_prefix="TAXOAI_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("api_key", mode="before")
    @classmethod
    def strip_api_key(cls, value):
        return (value or "").strip()

    @field_validator("language", mode="before")
    @classmethod
    def sanitize_language(cls, value):
        return value if value in SUPPORTED_LANGUAGES else "es"

    @field_validator("confidence_threshold", mode="before")
    @classmethod
    def clamp_threshold(cls, value):
        try:
            value = float(value)
        except (TypeError, ValueError):
            return 0.0
        return max(0.0, min(1.0, value))

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
