import re
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_HH_MM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Maintenance Automation"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"

    # Database
    DATABASE_URL: str = "sqlite:///./maintenance.db"
    DATABASE_ECHO: bool = False

    # Observability Configuration
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"  # "json" or "console"
    LOG_SQL: bool = False
    ENABLE_METRICS: bool = True
    METRICS_PORT: int = 8001

    # Automation defaults, used when no automation_config row exists yet
    AUTOMATION_DEFAULT_ACTIVE: bool = True
    AUTOMATION_DEFAULT_LEAD_TIME_DAYS: int = 3
    AUTOMATION_DEFAULT_AUTO_WORK_ORDERS: bool = True
    AUTOMATION_DEFAULT_EXECUTION_TIME: str = "06:00"

    # Technician load balancing
    LOAD_WINDOW_DAYS: int = 30
    PENDING_WEIGHT: float = 2.0
    COMPLETED_WEIGHT: float = 0.5
    ANTI_REPETITION_MARGIN: int = 2
    LOAD_LOW_MAX: int = 3  # pending <= 3 is low
    LOAD_MEDIUM_MAX: int = 6  # pending <= 6 is medium
    DEFAULT_PRIORITY_ORDER: int = 999

    # Work order sequencing
    WORK_ORDER_PREFIX: str = "OS"
    SEQUENCER_MAX_RETRIES: int = 3

    @field_validator("AUTOMATION_DEFAULT_EXECUTION_TIME")
    @classmethod
    def _check_execution_time(cls, v: str) -> str:
        if not _HH_MM.match(v):
            raise ValueError(f"expected HH:mm, got {v!r}")
        return v


settings = Settings()  # type: ignore
