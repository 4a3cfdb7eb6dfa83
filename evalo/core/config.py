from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Union
import logging

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load the project-level .env before Settings is instantiated
base_path = Path(__file__).resolve().parent.parent.parent
env_path = base_path / ".env"

try:
    loaded = load_dotenv(env_path)
    if loaded:
        logging.info(f"Loaded environment file: {env_path}")
    else:
        logging.warning(f"Environment file {env_path} not loaded, using defaults and process environment")
except Exception as e:
    logging.error(f"Failed to load environment file: {e}")


class Settings(BaseSettings):
    """
    Application settings using Pydantic v2 settings management

    Values come from the process environment (populated from .env by
    python-dotenv). Every field has a default so the app imports without one.
    """
    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    # API
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Evalo feedback API"

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:8000"]
    )

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> Union[List[str], str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    # Access tokens issued by the external auth provider
    AUTH_JWT_SECRET: str = Field("change-me", description="Shared secret used to verify provider-issued JWTs")
    AUTH_JWT_ALGORITHM: str = "HS256"
    AUTH_JWT_AUDIENCE: Optional[str] = "authenticated"

    # Database
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "evalo"
    SQLALCHEMY_DATABASE_URI: Optional[str] = Field(None, validate_default=True)
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20

    # Sentiment classification service
    SENTIMENT_API_URL: str = "http://localhost:8000/analyze"
    SENTIMENT_TIMEOUT: float = Field(10.0, gt=0)
    SENTIMENT_SHOW_DETAILS: bool = True

    # Feedback submission
    FEEDBACK_MAX_LENGTH: int = Field(5000, gt=0)
    ENTRY_CODE_MAX_ATTEMPTS: int = Field(20, gt=0)

    # Celery
    CELERY_BROKER_URL: str = "redis://localhost:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/0"
    COUNTER_RECONCILE_INTERVAL: int = Field(900, gt=0, description="Seconds between counter reconciliation runs")

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan> - <level>{message}</level>"
    LOG_FILE: Optional[str] = "logs/app.log"
    LOG_ROTATION: str = "500 MB"
    LOG_RETENTION: str = "10 days"

    @field_validator("SQLALCHEMY_DATABASE_URI", mode="after")
    def assemble_db_connection(cls, v: Optional[str], info: ValidationInfo) -> str:
        if v:
            return v

        values = info.data
        return (
            f"postgresql+asyncpg://{values.get('POSTGRES_USER')}:{values.get('POSTGRES_PASSWORD')}"
            f"@{values.get('POSTGRES_SERVER')}:{values.get('POSTGRES_PORT')}/{values.get('POSTGRES_DB')}"
        )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings to avoid reloading .env file on each request
    """
    return Settings()
