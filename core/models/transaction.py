"""Transaction (completed sale) domain models.

Commission rate, commission amount and house revenue are snapshotted when
the sale is written and never recomputed from later settings changes. Rows
written before commission tracking existed have no snapshot at all; reads
keep those fields as None and reporting falls back to the default rate.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from core.commission import coerce_decimal, to_cents, validate_amount


class PaymentMethod(str, Enum):
    """Payment methods accepted for new sales."""

    DINHEIRO = "dinheiro"
    PIX = "pix"
    DEBITO = "debito"
    CREDITO = "credito"


# Older rows used a single "cartao" for any card payment.
LEGACY_METHODS = {"cartao"}


class NewTransaction(BaseModel):
    """Sale as handed to the store. Commission is computed by the store."""

    barber_id: str = Field(..., min_length=1)
    service_ids: list[str] = Field(..., min_length=1)
    total: Decimal
    method: PaymentMethod
    registered_by: str | None = None

    @field_validator("total", mode="before")
    @classmethod
    def valid_total(cls, value):
        return to_cents(validate_amount(value))


class SaleRequest(BaseModel):
    """
    What the sale form submits, for both new sales and edits.

    Barber and services are optional here so that SaleService can report
    their absence as a business ValidationError. ``total`` overrides the
    catalog sum when set.
    """

    barber_id: str | None = None
    service_ids: list[str] = Field(default_factory=list)
    method: PaymentMethod = PaymentMethod.PIX
    total: Decimal | None = None


class TransactionUpdate(BaseModel):
    """
    Replace-style edit. Only fields that are set are written.

    ``date`` and ``registered_by`` are deliberately absent: they are fixed
    at creation.
    """

    barber_id: str | None = Field(None, min_length=1)
    service_ids: list[str] | None = Field(None, min_length=1)
    total: Decimal | None = None
    method: PaymentMethod | None = None
    commission_rate: Decimal | None = Field(None, ge=0, le=1)
    commission_amount: Decimal | None = None
    revenue_amount: Decimal | None = None

    @field_validator("total", mode="before")
    @classmethod
    def valid_total(cls, value):
        if value is None:
            return None
        return to_cents(validate_amount(value))


class Transaction(BaseModel):
    """Full transaction entity as stored."""

    id: str
    barber_id: str | None = None
    service_ids: list[str] = Field(default_factory=list)
    total: Decimal = Decimal("0")
    method: str | None = None
    commission_rate: Decimal | None = None
    commission_amount: Decimal | None = None
    revenue_amount: Decimal | None = None
    date: datetime
    registered_by: str | None = None

    model_config = {"from_attributes": True}

    @field_validator("total", mode="before")
    @classmethod
    def lenient_total(cls, value):
        return coerce_decimal(value)

    @field_validator("commission_rate", "commission_amount", "revenue_amount", mode="before")
    @classmethod
    def lenient_snapshot(cls, value):
        return coerce_decimal(value, default=None)

    @field_validator("service_ids", mode="before")
    @classmethod
    def list_of_ids(cls, value):
        return [] if value is None else value

    @field_validator("method", mode="before")
    @classmethod
    def lowercase_method(cls, value):
        if value is None:
            return None
        return str(value).strip().lower() or None
