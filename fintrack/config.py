"""Configuration management using Pydantic Settings"""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_prefix="FINTRACK_", env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Storage: "memory" keeps records in process, "sql" uses database_url
    storage_backend: Literal["memory", "sql"] = "memory"
    database_url: str = "sqlite:///./fintrack.db"

    # Service
    service_name: str = "fintrack"
    log_level: str = "INFO"


settings = Settings()
