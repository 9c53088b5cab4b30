import logging
from datetime import time
from functools import lru_cache
from typing import List

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    # === App Metadata ===
    PROJECT_NAME: str = "Slot Scheduler"
    ENVIRONMENT: str = Field("dev")  # dev, staging, prod
    APP_VERSION: str = "1.0.0"

    # === Logging ===
    LOG_LEVEL: str = Field("INFO")
    ENABLE_JSON_LOGS: bool = Field(False)

    @property
    def LOG_LEVEL_NUMERIC(self) -> int:
        return getattr(logging, self.LOG_LEVEL.upper(), logging.INFO)

    # === Slot Grid ===
    SLOT_DURATION_MINUTES: int = Field(15, gt=0)
    DAY_START: time = Field(time(9, 0))
    DAY_END: time = Field(time(17, 0))
    HORIZON_DAYS: int = Field(14, ge=1)
    DEFAULT_SEARCH_COUNT: int = Field(5, ge=1)

    # === Display ===
    SHOW_CALENDAR_ON_CHANGE: bool = Field(False)

    # === CORS ===
    CORS_ORIGINS: List[str] = Field(default_factory=lambda: ["http://localhost:3000"])

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, env: str) -> str:
        if env.lower() not in ("dev", "staging", "prod", "test"):
            raise ValueError("ENVIRONMENT must be one of: dev, staging, prod, test")
        return env.lower()

    @model_validator(mode="after")
    def validate_working_day(self) -> "AppConfig":
        if self.DAY_START >= self.DAY_END:
            raise ValueError("DAY_START must be before DAY_END")
        day_minutes = (self.DAY_END.hour * 60 + self.DAY_END.minute) - (
            self.DAY_START.hour * 60 + self.DAY_START.minute
        )
        if day_minutes < self.SLOT_DURATION_MINUTES:
            raise ValueError("Working day is shorter than a single slot")
        return self

    # === Environment Shortcuts ===
    @property
    def IS_PROD(self) -> bool:
        return self.ENVIRONMENT == "prod"

    @property
    def IS_DEV(self) -> bool:
        return self.ENVIRONMENT == "dev"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> AppConfig:
    return AppConfig()


# Global config instance
settings = get_settings()
