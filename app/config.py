"""Application configuration using pydantic-settings."""

from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Keys
    gemini_api_key: str = ""

    # Server
    port: int = 8080
    host: str = "0.0.0.0"
    public_base_url: str = "http://localhost:8080/"

    # Logging
    log_level: str = "INFO"

    # HTTP Settings
    http_timeout: int = 60  # seconds, per Gemini request
    max_request_size: int = 10 * 1024 * 1024  # 10MB

    # Rate Limiting
    rate_limit_per_hour: int = 100

    # CORS
    cors_origins: str = "*"  # Comma-separated origins or "*" for all

    # Gemini Settings
    gemini_text_model: str = "gemini-2.5-flash"
    gemini_image_model: str = "imagen-4.0-generate-001"

    # Retry / pacing
    retry_base_delay: float = 3.0  # seconds, doubled on every retry
    recipe_max_attempts: int = 5
    image_max_attempts: int = 4
    identify_max_attempts: int = 5
    translate_max_attempts: int = 1
    image_cooldown_seconds: float = 2.0

    # Storage ("" keeps everything in memory)
    storage_dir: str = ""
    max_batches: int = 20  # finished batches beyond this are dropped, oldest first

    # Connectivity check ("" disables it)
    connectivity_check_url: str = "https://generativelanguage.googleapis.com"
    connectivity_timeout: float = 3.0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """Get list of CORS origins."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",")]


# Global settings instance
settings = Settings()
