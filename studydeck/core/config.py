from pydantic_settings import BaseSettings
import logging
import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

_logger = logging.getLogger(__name__)

# Look for .env in the project root (parent of the studydeck package), then the
# current directory
_project_dir = Path(__file__).parent.parent.parent
_env_path = _project_dir / ".env"

if _env_path.exists():
    load_dotenv(_env_path, override=False)
    _logger.info(f"Loaded .env file from: {_env_path}")
elif Path(".env").exists():
    load_dotenv(Path(".env"), override=False)
    _logger.info(f"Loaded .env file from: {Path('.env').absolute()}")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = "sqlite:///./studydeck.db"

    # API
    api_prefix: str = "/api"

    # CORS
    cors_origins: List[str] = ["http://localhost:5173"]

    # Runtime
    environment: str = "production"
    log_level: str = "INFO"

    # Client library
    client_base_url: str = "http://localhost:3001"
    client_timeout: float = 10.0
    client_retries: int = 1  # Single transport-level retry on connection errors

    # Local key-value area used by the offline gateway
    local_store_path: str = ""

    class Config:
        env_file = ".env"
        env_prefix = "STUDYDECK_"
        case_sensitive = False

    def __init__(self, **kwargs):
        # Hosting platforms provide DATABASE_URL without our prefix
        if (
            not kwargs.get("database_url")
            and not os.getenv("STUDYDECK_DATABASE_URL")
            and os.getenv("DATABASE_URL")
        ):
            kwargs["database_url"] = os.getenv("DATABASE_URL")
        super().__init__(**kwargs)

    @property
    def is_development(self) -> bool:
        return self.environment.lower() in ("development", "dev", "local")

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return settings


# Create settings instance
settings = Settings()
