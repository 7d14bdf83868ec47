"""Configuration management for the URL shortener service.

This module provides centralized configuration management using Pydantic BaseSettings
with environment variable support and caching for performance.

Flow Diagram — get_settings()
=============================
::
    ┌─────────────┐
    │  Call get_  │
    │  settings() │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Check cache  │
    │ (lru_cache)  │
    └──────┬──────┘
    HIT?  │
    ┌─────┴─────┐
    │ NO         │ YES
    ▼            ▼
┌─────────┐  ┌─────────┐
│ Create  │  │ Return  │
│ Settings│  │ cached  │
│ instance│  │ value   │
└─────────┘  └─────────┘

How to Use
===========
**Step 1 — Import**::
    from shortener.config import get_settings

**Step 2 — Get settings**::
    settings = get_settings()
    base_url = settings.BASE_URL

**Step 3 — Override from the environment**::
    BASE_URL=https://sho.rt PORT=9000 python -m shortener

Key Behaviours
===============
- Settings are cached after first access.
- Environment variables (and a local .env file) override defaults.
- Invalid values (e.g. a non-integer PORT) raise ValidationError at startup.

Classes:
    Settings:  Pydantic model for all configuration values.

"""

__all__ = ["Settings", "get_settings"]

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    APP_NAME: str = "url-shortener"

    # Public origin prepended to every short code
    BASE_URL: str = "http://localhost:8080"

    # uvicorn bind address
    HOST: str = "0.0.0.0"
    PORT: int = 8080

    # Short code generation
    SHORT_CODE_LENGTH: int = Field(default=6, gt=0)
    SHORTEN_MAX_ATTEMPTS: int = Field(default=5, gt=0)

    # Reject strings that are not well-formed URLs (validators.url)
    VALIDATE_URLS: bool = False

    LOG_LEVEL: str = "INFO"
    METRICS_ENABLED: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
