"""
Catalog service for the service menu (haircut, beard, ...).

Services carry a price and a commission percentage. Deletes are hard and do
not cascade: transactions keep the dangling id and reports show it as an
unknown service.
"""

import logging
from uuid import uuid4

import psycopg2

from clients.postgres_client import PostgresClient
from core.exceptions import NotFoundError, WriteError
from core.models import Service, ServiceCreate, ServiceUpdate

logger = logging.getLogger(__name__)

_UPDATABLE_COLUMNS = {"name", "price", "commission_percent"}


class CatalogService:
    """Service for service catalog operations."""

    def __init__(self, postgres: PostgresClient):
        self.postgres = postgres

    def create(self, data: ServiceCreate) -> Service:
        """
        Create a new service in the catalog.

        Raises:
            WriteError: If the insert fails
        """
        try:
            row = self.postgres.execute_returning(
                """
                INSERT INTO services (id, name, price, commission_percent)
                VALUES (%s, %s, %s, %s)
                RETURNING *
                """,
                (uuid4().hex, data.name, data.price, data.commission_percent)
            )[0]
        except psycopg2.Error as e:
            raise WriteError(f"Could not create service: {e}") from e

        service = Service.model_validate(row)
        logger.info(f"Service {service.id} created ({service.name})")
        return service

    def get_by_id(self, service_id: str) -> Service | None:
        """Get service by ID, None if it does not exist."""
        row = self.postgres.execute_single(
            "SELECT * FROM services WHERE id = %s",
            (service_id,)
        )

        if row is None:
            return None

        return Service.model_validate(row)

    def get_many(self, service_ids: list[str]) -> dict[str, Service]:
        """
        Look up several services at once.

        Returns:
            Map of id -> Service for the ids that exist. Missing ids are
            simply absent.
        """
        if not service_ids:
            return {}

        rows = self.postgres.execute(
            "SELECT * FROM services WHERE id = ANY(%s)",
            (list(service_ids),)
        )

        return {row["id"]: Service.model_validate(row) for row in rows}

    def list_all(self) -> list[Service]:
        """List the whole catalog ordered by name."""
        rows = self.postgres.execute(
            "SELECT * FROM services ORDER BY name ASC"
        )

        return [Service.model_validate(row) for row in rows]

    def update(self, service_id: str, data: ServiceUpdate) -> Service:
        """
        Update service fields.

        Raises:
            NotFoundError: If the service does not exist
            WriteError: If the update fails
        """
        current = self.get_by_id(service_id)
        if current is None:
            raise NotFoundError("service", service_id)

        updates = {
            k: v for k, v in data.model_dump(exclude_none=True).items()
            if k in _UPDATABLE_COLUMNS
        }
        if not updates:
            return current

        set_parts = [f"{field} = %s" for field in updates]
        params = list(updates.values())
        params.append(service_id)

        try:
            row = self.postgres.execute_returning(
                f"""
                UPDATE services
                SET {', '.join(set_parts)}
                WHERE id = %s
                RETURNING *
                """,
                tuple(params)
            )[0]
        except psycopg2.Error as e:
            raise WriteError(f"Could not update service {service_id}: {e}") from e

        return Service.model_validate(row)

    def delete(self, service_id: str) -> bool:
        """
        Delete a service.

        Returns:
            True if deleted, False if not found

        Raises:
            WriteError: If the delete fails
        """
        try:
            rows = self.postgres.execute_returning(
                "DELETE FROM services WHERE id = %s RETURNING id",
                (service_id,)
            )
        except psycopg2.Error as e:
            raise WriteError(f"Could not delete service {service_id}: {e}") from e

        if rows:
            logger.info(f"Service {service_id} deleted")
        return bool(rows)
