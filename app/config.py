"""
Application configuration using environment variables.
"""
import os
from functools import lru_cache
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "ListingHub API"
    debug: bool = False
    environment: str = "development"

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./listinghub.db")

    # CORS
    cors_origins: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # Automation workflow (n8n)
    n8n_webhook_url: Optional[str] = None
    n8n_api_key: Optional[str] = None  # shared secret, sent and verified as X-API-Key
    n8n_timeout_seconds: Optional[float] = None
    public_base_url: Optional[str] = None  # advertised to the workflow for callbacks

    # Object storage (Supabase)
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    supabase_bucket_manual: str = "manual-uploads"
    supabase_bucket_ai: str = "ai-generated-content"

    # Uploads
    max_image_size: int = 10 * 1024 * 1024  # 10MB
    max_video_size: int = 50 * 1024 * 1024  # 50MB
    upload_rate_limit: str = "30/minute"

    # Consumed by the workflow itself, never by this service
    openai_api_key: Optional[str] = None
    video_api_key: Optional[str] = None

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def validate_settings(settings: Settings) -> None:
    """Refuse to start a production deployment that accepts unauthenticated callbacks."""
    if settings.environment == "production" and not settings.n8n_api_key:
        raise ValueError(
            "N8N_API_KEY must be set in production! "
            "Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(32))\""
        )
