"""
Centralized configuration for the ModelCompare backend.

All settings are loaded from environment variables with sensible defaults.
Module-specific settings are namespaced (e.g., STRIPE_*, CIRCUIT_BREAKER_*).
"""

from functools import lru_cache
from pathlib import Path
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# backend/docs/prompts ships the markdown templates
DEFAULT_TEMPLATES_PATH = str(Path(__file__).parent.parent / "docs" / "prompts")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "ModelCompare API"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 5000
    reload: bool = False

    # CORS settings
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    # Database (empty URL selects in-memory storage)
    database_url: str = ""
    database_max_connections: int = Field(default=10, ge=1, le=100)

    # Auth
    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"
    jwt_expiry_hours: int = 24 * 7
    google_client_id: str = ""
    google_client_secret: str = ""
    google_callback_url: str = "http://localhost:5000/api/auth/google/callback"

    # Stripe (loaded by billing module)
    stripe_secret_key: str = ""
    stripe_webhook_secret: str = ""

    # Frontend URLs (for redirects)
    frontend_url: str = "http://localhost:5173"

    # LLM Provider API Keys
    openai_api_key: str = ""
    anthropic_api_key: str = ""
    gemini_api_key: str = ""
    deepseek_api_key: str = ""
    openrouter_api_key: str = ""
    grok_api_key: str = ""

    # Circuit breaker tuning (milliseconds, matching the env contract)
    circuit_breaker_failure_threshold: int = Field(default=3, ge=1, le=20)
    circuit_breaker_recovery_timeout: int = Field(default=30000, ge=1000, le=300000)
    circuit_breaker_monitoring_period: int = Field(default=60000, ge=1000, le=3600000)

    # Templates
    templates_path: str = DEFAULT_TEMPLATES_PATH
    validate_templates_at_startup: bool = True
    template_validation_strict: bool = False

    # Health checks
    health_check_timeout: float = 5.0

    # Feature Flags
    streaming_enabled: bool = True
    enable_billing: bool = True

    # Credits charged per successful model call
    credits_per_call: int = 5


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
