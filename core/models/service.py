"""Service catalog domain models.

Prices are Decimal currency units (R$). The catalog persists commission as a
percentage (40 = 40%); commission_rate exposes it as the fraction used
everywhere else.
"""

from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from core.commission import RateUnit, normalize_rate, percent_or_default, coerce_decimal


class ServiceCreate(BaseModel):
    """Data required to create a service."""

    name: str = Field(..., min_length=1, max_length=255)
    price: Decimal = Field(..., ge=0)
    commission_percent: Decimal = Field(Decimal("40"), ge=0, le=100)


class ServiceUpdate(BaseModel):
    """Data that can be updated on a service. All fields optional."""

    name: str | None = Field(None, min_length=1, max_length=255)
    price: Decimal | None = Field(None, ge=0)
    commission_percent: Decimal | None = Field(None, ge=0, le=100)


class Service(BaseModel):
    """Full service entity as stored."""

    id: str
    name: str
    price: Decimal = Decimal("0")
    commission_percent: Decimal = Decimal("40")

    model_config = {"from_attributes": True}

    @field_validator("price", mode="before")
    @classmethod
    def lenient_price(cls, value):
        return coerce_decimal(value)

    @field_validator("commission_percent", mode="before")
    @classmethod
    def default_percent(cls, value):
        return percent_or_default(value)

    @property
    def commission_rate(self) -> Decimal:
        """Commission as a fraction (0-1)."""
        return normalize_rate(self.commission_percent, RateUnit.PERCENT)
