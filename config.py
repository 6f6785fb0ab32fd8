"""
Centralized configuration.

Values come from the environment (or a local .env file) and are validated here.
"""
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )

    # API
    API_HOST: str = Field(default="0.0.0.0")
    API_PORT: int = Field(default=8081)

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="text")  # json or text

    # Environment
    ENVIRONMENT: str = Field(default="development")
    DEBUG: bool = Field(default=False)
    CORS_ORIGINS: Optional[str] = Field(default=None)

    # Views
    ELITE_SCORE_THRESHOLD: int = Field(default=900)
    TOP_COUNTRIES_LIMIT: int = Field(default=5, ge=1)
    # "literal" keeps the historical per-day rule, "logins" counts login entries
    ACTIVE_DAYS_MODE: str = Field(default="literal", pattern="^(literal|logins)$")

    # Self-evaluation
    EVALUATION_BASE_URL: str = Field(default="http://localhost:8081")
    EVALUATION_DATASET_PATH: str = Field(default="usuarios.json")
    EVALUATION_TIMEOUT_S: float = Field(default=10.0)


settings = Settings()
