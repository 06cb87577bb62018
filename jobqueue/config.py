"""Application configuration using Pydantic Settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = "sqlite:///./jobs.db"

    # Job file storage (logs and outputs)
    JOB_STORAGE_DIR: str = "./JobBlobs"

    # Worker
    WORKER_POLL_INTERVAL: int = 5
    WORKER_ENABLED: bool = True

    # Listing
    JOBS_PAGE_SIZE: int = 20

    # Derive composite job status from its children
    COMPOSITE_AGGREGATION: bool = True

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)


# Global settings instance
settings = Settings()
