"""Configuration management using Pydantic Settings"""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Data source
    data_source: Literal["file", "http"] = "file"
    data_dir: str = "data"
    data_api_base: str = "http://localhost:8001"

    # Service
    service_name: str = "finquery"
    environment: str = "development"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 5.0

    # Fetch retry policy
    fetch_max_retries: int = 3
    fetch_backoff_base: float = 1.0  # Exponential backoff base in seconds
    fetch_timeout_seconds: float = 30.0  # Overall deadline across all attempts, 0 disables it

    # Query engine
    cache_ttl_seconds: float = 300.0
    max_page_size: int = 100

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


settings = Settings()
