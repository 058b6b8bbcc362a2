"""
Configuration module for the Pullwise analysis service.

Loads environment variables and provides centralized settings.
Every analysis threshold can be tuned through the environment or a .env file.
"""

from typing import Annotated, List
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Thresholds default to the values the dashboard has always used;
    changing them changes the issues an analysis reports.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    ENVIRONMENT: str = Field(default="development")
    PORT: int = Field(default=8000)
    ALLOWED_ORIGINS: Annotated[List[str], NoDecode] = Field(default=["*"])

    # Complexity bands (inclusive upper bounds)
    COMPLEXITY_LOW_MAX: int = Field(default=3)
    COMPLEXITY_MEDIUM_MAX: int = Field(default=7)
    COMPLEXITY_HIGH_MAX: int = Field(default=15)

    # Duplication detection
    DUPLICATION_WINDOW: int = Field(default=5, ge=1)
    DUPLICATION_MIN_DISTANCE: int = Field(default=5, ge=0)

    # Change grouping and PR-level heuristics
    DIRECTORY_FILE_THRESHOLD: int = Field(default=5)
    MANY_FILES_THRESHOLD: int = Field(default=10)
    LARGE_CHANGE_LINES: int = Field(default=500)
    LARGE_FUNCTION_LINES: int = Field(default=30)
    IMPORT_FAN_IN_THRESHOLD: int = Field(default=5)
    TEST_PATH_MARKERS: Annotated[List[str], NoDecode] = Field(default=["test", "spec"])

    # File impact scoring
    MAX_FILE_IMPACT: float = Field(default=100.0)
    TEST_FILE_WEIGHT: float = Field(default=0.5)
    STYLE_FILE_WEIGHT: float = Field(default=0.7)
    DOC_FILE_WEIGHT: float = Field(default=0.3)

    # Observability
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="text")
    ENABLE_METRICS: bool = Field(default=True)
    ERROR_TRACKING_ENABLED: bool = Field(default=True)

    @field_validator("ALLOWED_ORIGINS", "TEST_PATH_MARKERS", mode="before")
    @classmethod
    def parse_comma_separated(cls, v):
        """Parse comma-separated values into a list."""
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @field_validator("COMPLEXITY_HIGH_MAX")
    @classmethod
    def validate_band_order(cls, v, info):
        """Bands must be increasing or classification becomes ambiguous."""
        low = info.data.get("COMPLEXITY_LOW_MAX", 0)
        medium = info.data.get("COMPLEXITY_MEDIUM_MAX", 0)
        if not low <= medium <= v:
            raise ValueError(
                "Complexity bands must satisfy LOW_MAX <= MEDIUM_MAX <= HIGH_MAX"
            )
        return v


# Global settings instance
settings = Settings()
