"""System settings (single row, id 'global')."""

import logging
from decimal import Decimal

import psycopg2

from clients.postgres_client import PostgresClient
from core.commission import DEFAULT_COMMISSION_RATE, normalize_rate
from core.exceptions import WriteError
from core.models import SystemSettings

logger = logging.getLogger(__name__)

SETTINGS_ID = "global"


class SettingsService:
    """Read and save the global commission rate."""

    def __init__(self, postgres: PostgresClient, default_rate: Decimal = DEFAULT_COMMISSION_RATE):
        self.postgres = postgres
        self.default_rate = default_rate

    def get(self) -> SystemSettings:
        """Current settings; defaults when nothing has been saved yet."""
        row = self.postgres.execute_single(
            "SELECT commission_rate FROM settings WHERE id = %s",
            (SETTINGS_ID,)
        )

        if row is None or row.get("commission_rate") is None:
            return SystemSettings(commission_rate=self.default_rate)

        return SystemSettings.model_validate(row)

    def save(self, commission_rate: Decimal) -> SystemSettings:
        """
        Store a new global commission rate (fraction).

        Only affects sales recorded afterwards.

        Raises:
            InvalidRateError: If the rate is outside 0-1
            WriteError: If the upsert fails
        """
        rate = normalize_rate(commission_rate)

        try:
            row = self.postgres.execute_returning(
                """
                INSERT INTO settings (id, commission_rate)
                VALUES (%s, %s)
                ON CONFLICT (id) DO UPDATE SET commission_rate = EXCLUDED.commission_rate
                RETURNING commission_rate
                """,
                (SETTINGS_ID, rate)
            )[0]
        except psycopg2.Error as e:
            raise WriteError(f"Could not save settings: {e}") from e

        logger.info(f"Commission rate set to {rate}")
        return SystemSettings.model_validate(row)
