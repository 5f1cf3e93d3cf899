"""
Staff roster service.

Roster rows live in ``users``. Two kinds coexist: self-serve profiles keyed
by the identity provider's uid, created on first sign-in, and
manager-created placeholders with a generated id that the person may never
log in as. The identity resolver bridges the two.
"""

import logging
from uuid import uuid4

import psycopg2

from auth.types import VerifiedIdentity
from clients.postgres_client import PostgresClient
from core.exceptions import NotFoundError, WriteError
from core.models import StaffRecord, StaffCreate, StaffUpdate, StaffRole

logger = logging.getLogger(__name__)

_UPDATABLE_COLUMNS = {"name", "email", "role", "is_active"}


class StaffService:
    """Service for roster operations."""

    def __init__(self, postgres: PostgresClient):
        self.postgres = postgres

    def create(self, data: StaffCreate) -> StaffRecord:
        """
        Add a placeholder roster record with a generated id.

        Raises:
            WriteError: If the insert fails
        """
        try:
            row = self.postgres.execute_returning(
                """
                INSERT INTO users (id, name, email, role, is_active)
                VALUES (%s, %s, %s, %s, %s)
                RETURNING *
                """,
                (uuid4().hex, data.name, str(data.email), data.role.value, data.is_active)
            )[0]
        except psycopg2.Error as e:
            raise WriteError(f"Could not create staff record: {e}") from e

        record = StaffRecord.model_validate(row)
        logger.info(f"Staff record {record.id} created ({record.display_name})")
        return record

    def ensure_profile(self, identity: VerifiedIdentity) -> StaffRecord:
        """
        Return the roster record keyed by the identity's uid, creating it if needed.

        First sign-in creates a barber profile from the provider's name and
        email. Existing profiles are returned untouched, so a manager's
        promotion to admin survives later sign-ins.

        Raises:
            WriteError: If the insert fails
        """
        existing = self.get_by_id(identity.uid)
        if existing is not None:
            return existing

        try:
            rows = self.postgres.execute_returning(
                """
                INSERT INTO users (id, name, email, role, is_active)
                VALUES (%s, %s, %s, %s, %s)
                ON CONFLICT (id) DO NOTHING
                RETURNING *
                """,
                (identity.uid, identity.display_name, identity.email, StaffRole.BARBER.value, True)
            )
        except psycopg2.Error as e:
            raise WriteError(f"Could not create profile for {identity.uid}: {e}") from e

        if not rows:
            # Another request created it first.
            return self.get_by_id(identity.uid)

        logger.info(f"Self-serve profile created for {identity.uid}")
        return StaffRecord.model_validate(rows[0])

    def get_by_id(self, staff_id: str) -> StaffRecord | None:
        """Get roster record by ID, None if it does not exist."""
        row = self.postgres.execute_single(
            "SELECT * FROM users WHERE id = %s",
            (staff_id,)
        )

        if row is None:
            return None

        return StaffRecord.model_validate(row)

    def list_roster(self) -> list[StaffRecord]:
        """Every roster record, admins included, ordered by name."""
        rows = self.postgres.execute(
            "SELECT * FROM users ORDER BY name ASC NULLS LAST"
        )

        return [StaffRecord.model_validate(row) for row in rows]

    def list_barbers(self, active_only: bool = False) -> list[StaffRecord]:
        """
        Records with role barber.

        Args:
            active_only: Drop deactivated staff (new-sale pickers). History
                and reports still need them.
        """
        rows = self.postgres.execute(
            "SELECT * FROM users WHERE role = %s ORDER BY name ASC NULLS LAST",
            (StaffRole.BARBER.value,)
        )

        barbers = [StaffRecord.model_validate(row) for row in rows]
        if active_only:
            barbers = [b for b in barbers if b.is_active]
        return barbers

    def update(self, staff_id: str, data: StaffUpdate) -> StaffRecord:
        """
        Update roster fields.

        Raises:
            NotFoundError: If the record does not exist
            WriteError: If the update fails
        """
        current = self.get_by_id(staff_id)
        if current is None:
            raise NotFoundError("staff", staff_id)

        updates = data.model_dump(exclude_none=True, mode="json")
        valid_updates = {k: v for k, v in updates.items() if k in _UPDATABLE_COLUMNS}
        if not valid_updates:
            return current

        set_parts = [f"{field} = %s" for field in valid_updates]
        params = list(valid_updates.values())
        params.append(staff_id)

        try:
            row = self.postgres.execute_returning(
                f"""
                UPDATE users
                SET {', '.join(set_parts)}
                WHERE id = %s
                RETURNING *
                """,
                tuple(params)
            )[0]
        except psycopg2.Error as e:
            raise WriteError(f"Could not update staff {staff_id}: {e}") from e

        return StaffRecord.model_validate(row)

    def delete(self, staff_id: str) -> bool:
        """
        Remove a roster record. Their transactions stay.

        Returns:
            True if deleted, False if not found
        """
        try:
            rows = self.postgres.execute_returning(
                "DELETE FROM users WHERE id = %s RETURNING id",
                (staff_id,)
            )
        except psycopg2.Error as e:
            raise WriteError(f"Could not delete staff {staff_id}: {e}") from e

        return bool(rows)
