"""System settings singleton."""

from decimal import Decimal

from pydantic import BaseModel, Field

from core.commission import DEFAULT_COMMISSION_RATE


class SystemSettings(BaseModel):
    """
    Global parameters edited by managers.

    commission_rate is a fraction and is snapshotted into every new sale.
    """

    commission_rate: Decimal = Field(DEFAULT_COMMISSION_RATE, ge=0, le=1)

    model_config = {"from_attributes": True}
