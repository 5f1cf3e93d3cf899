"""Pydantic models for the auth boundary."""

from pydantic import BaseModel, Field

from core.models.staff import StaffRole


class VerifiedIdentity(BaseModel):
    """What the external identity provider vouches for after a sign-in."""

    uid: str = Field(..., min_length=1, description="Provider user id")
    email: str | None = None
    display_name: str | None = None


class Session(BaseModel):
    """
    The logged-in person, passed explicitly to every component that needs it.

    ``role`` comes from the staff roster, not from the identity provider.
    """

    user_id: str = Field(..., min_length=1)
    email: str | None = None
    display_name: str | None = None
    role: StaffRole = StaffRole.BARBER

    model_config = {"frozen": True}

    @property
    def is_admin(self) -> bool:
        return self.role == StaffRole.ADMIN
