"""Application configuration."""

import logging
import os
from decimal import Decimal

from dotenv import load_dotenv
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class AppConfig(BaseModel):
    """
    Application configuration.

    Rates are fractions (0.40 = 40%). Only DATABASE_URL is required; every
    other value has a default suitable for a single shop in Brazil.
    """

    database_url: str = Field(
        ...,
        description="PostgreSQL DSN",
        min_length=1,
    )
    base_path: str = Field(
        default="/",
        description="Deployment base path the API is mounted under",
    )
    timezone: str = Field(
        default="America/Sao_Paulo",
        description="Shop-local zone for month/week boundaries and CSV times",
    )
    default_commission_rate: Decimal = Field(
        default=Decimal("0.40"),
        description="Commission rate used before settings are saved",
        ge=0,
        le=1,
    )
    max_filter_values: int = Field(
        default=10,
        description="Largest staff-id set sent in a single IN filter",
        ge=1,
        le=500,
    )
    history_days: int = Field(
        default=365,
        description="How far back a staff member's history view reaches",
        ge=1,
    )
    app_name: str = Field(
        default="Barbearia",
        description="Application name shown in exports and the API title",
    )


_ENV_FIELDS = {
    "database_url": "DATABASE_URL",
    "base_path": "APP_BASE_PATH",
    "timezone": "APP_TIMEZONE",
    "default_commission_rate": "DEFAULT_COMMISSION_RATE",
    "max_filter_values": "MAX_FILTER_VALUES",
    "history_days": "HISTORY_DAYS",
    "app_name": "APP_NAME",
}


def load_config(env_file: str | None = None) -> AppConfig:
    """
    Build AppConfig from environment variables.

    A .env file is loaded first if present (shell variables win). Fails fast
    when DATABASE_URL is missing.

    Raises:
        ValueError: If DATABASE_URL is not set
        pydantic.ValidationError: If a value is out of range
    """
    load_dotenv(env_file)

    if not os.getenv("DATABASE_URL"):
        raise ValueError("DATABASE_URL environment variable is required")

    values = {}
    for field, env_name in _ENV_FIELDS.items():
        raw = os.getenv(env_name)
        if raw is not None and raw != "":
            values[field] = raw

    config = AppConfig(**values)
    logger.info(f"Configuration loaded (timezone={config.timezone}, base_path={config.base_path})")
    return config
