"""Application settings using Pydantic Settings."""

from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database Configuration
    mongodb_url: str = "mongodb://localhost:27017/exercise_tracker"
    server_selection_timeout_ms: int = 5000

    # "mongo" for MongoDB, "memory" for a process-local store (dev/tests)
    store_backend: str = "mongo"

    # Application Configuration
    app_name: str = "Exercise Tracker"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Server Configuration
    host: str = "0.0.0.0"
    port: int = 3000

    # CORS Configuration
    cors_origins: List[str] = ["*"]

    # Frontend files
    views_dir: str = "views"
    static_dir: str = "public"

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
