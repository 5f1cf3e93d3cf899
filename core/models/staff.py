"""Staff roster domain models."""

from enum import Enum

from pydantic import BaseModel, EmailStr, Field, field_validator


class StaffRole(str, Enum):
    """What a roster entry may do."""

    BARBER = "barber"
    ADMIN = "admin"


class StaffCreate(BaseModel):
    """Manager-entered roster record (not yet linked to a login)."""

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    role: StaffRole = StaffRole.BARBER
    is_active: bool = True


class StaffUpdate(BaseModel):
    """Data that can be updated on a roster record. All fields optional."""

    name: str | None = Field(None, min_length=1, max_length=255)
    email: EmailStr | None = None
    role: StaffRole | None = None
    is_active: bool | None = None


class StaffRecord(BaseModel):
    """
    Roster entry as stored in ``users``.

    ``id`` is either the identity provider's uid (self-serve signup) or a
    generated id (manager-created placeholder). Name and email are optional
    on read; older rows may lack either.
    """

    id: str
    name: str | None = None
    email: str | None = None
    is_active: bool = True
    role: StaffRole = StaffRole.BARBER

    model_config = {"from_attributes": True}

    @field_validator("is_active", mode="before")
    @classmethod
    def active_by_default(cls, value):
        return True if value is None else value

    @field_validator("role", mode="before")
    @classmethod
    def barber_by_default(cls, value):
        return StaffRole.BARBER if value is None else value

    @property
    def display_name(self) -> str:
        """Name for reports: name, else email, else id."""
        return self.name or self.email or self.id
