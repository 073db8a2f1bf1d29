"""Configuration management for shelfscan."""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=("../.env", ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    environment: str = "development"
    log_level: str = "info"

    # Paths
    data_dir: str = "./data"

    # OpenAI (receipt item categorization)
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"

    # Open Food Facts
    off_base_url: str = "https://world.openfoodfacts.org/api/v2"
    off_timeout_seconds: float = 15.0

    # Expiry learning
    max_learned_offset_days: int = 120

    # Feature Flags
    feature_receipt_ocr: bool = True
    feature_ai_categorization: bool = True

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def ai_categorization_enabled(self) -> bool:
        """Check if AI categorization of receipt items is configured."""
        return self.feature_ai_categorization and bool(self.openai_api_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
