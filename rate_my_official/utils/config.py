"""Configuration management using environment variables."""

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database Configuration
    db_path: str = Field(default="rate_my_official.sqlite", description="Path to SQLite database")
    db_timeout: float = Field(default=3.0, description="Seconds to wait on a locked database")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="console", description="Log format (json or console)")
    log_dir: str = Field(default="logs", description="Directory for log files")

    # Listings
    officials_page_size: int = Field(default=20, ge=1, description="Officials per listing page")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid option."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format is a valid option."""
        if v not in {"json", "console"}:
            raise ValueError("log_format must be 'json' or 'console'")
        return v

    @field_validator("db_timeout")
    @classmethod
    def validate_db_timeout(cls, v: float) -> float:
        """Keep the busy timeout in the low single-digit seconds range."""
        if v <= 0 or v > 30:
            raise ValueError("db_timeout must be greater than 0 and at most 30 seconds")
        return v

    class Config:
        """Pydantic configuration."""

        env_prefix = ""
        case_sensitive = False
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Application settings.
    """
    return Settings()


def ensure_directories() -> None:
    """
    Ensure all required directories exist.

    This creates the logs and database directories if they don't exist.
    """
    settings = get_settings()

    Path(settings.log_dir).mkdir(parents=True, exist_ok=True)

    # Ensure database parent directory exists
    db_path = Path(settings.db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
