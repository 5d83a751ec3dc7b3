"""Configuration settings for the backend API."""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="SCHEMAFORGE_API_",
        extra="ignore"  # Ignore extra environment variables
    )

    # API
    api_title: str = "SchemaForge Backend API"
    api_version: str = "0.1.0"
    # Default to common local dev origins (Vite=5173, CRA=3000).
    # Can be overridden via env var: SCHEMAFORGE_API_CORS_ORIGINS='["http://localhost:5173"]'
    cors_origins: List[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Overrides the logging level from schemaforge/config/config.yaml when set
    log_level: Optional[str] = None

    # Projects live in process memory only
    max_projects: int = 256


settings = Settings()
