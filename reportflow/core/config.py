# reportflow/core/config.py
import logging
from typing import List, Optional
from pydantic import Field
from pydantic_settings import BaseSettings

# Default matches the 30 minute window report handlers have always used
DEFAULT_STATE_MAX_AGE_MS = 30 * 60 * 1000


class Settings(BaseSettings):
    """Application settings, read from the environment and .env"""
    APP_NAME: str = "ReportFlow"
    DEBUG: bool = False

    # Validation state store
    VALIDATION_STATE_MAX_AGE_MS: int = Field(default=DEFAULT_STATE_MAX_AGE_MS)
    # Unset means the background sweeper is not started
    VALIDATION_SWEEP_INTERVAL_SECONDS: Optional[float] = Field(default=None)

    # Validation result cache
    VALIDATION_CACHE_TTL_SECONDS: int = 300

    # HTTP surface
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_TIER: str = "default"
    ALLOWED_ORIGINS: List[str] = Field(default_factory=lambda: ["http://localhost:3000"])

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore"
    }


settings = Settings()


def validate_required_settings(current: Optional[Settings] = None) -> bool:
    """Check settings for missing or nonsensical values; warn, never raise"""
    current = current or settings
    logger = logging.getLogger(__name__)
    problems = []

    if current.VALIDATION_STATE_MAX_AGE_MS <= 0:
        problems.append("VALIDATION_STATE_MAX_AGE_MS must be positive")

    if current.VALIDATION_CACHE_TTL_SECONDS <= 0:
        problems.append("VALIDATION_CACHE_TTL_SECONDS must be positive")

    interval = current.VALIDATION_SWEEP_INTERVAL_SECONDS
    if interval is not None and interval <= 0:
        problems.append("VALIDATION_SWEEP_INTERVAL_SECONDS must be positive when set")

    if problems:
        logger.warning(f"Invalid settings: {'; '.join(problems)}")
        return False

    if interval is None:
        logger.info("Validation sweeper disabled (VALIDATION_SWEEP_INTERVAL_SECONDS not set)")

    return True
