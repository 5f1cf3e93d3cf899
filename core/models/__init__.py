"""Core domain models."""

from core.models.service import Service, ServiceCreate, ServiceUpdate
from core.models.staff import StaffRecord, StaffCreate, StaffUpdate, StaffRole
from core.models.transaction import (
    Transaction,
    NewTransaction,
    SaleRequest,
    TransactionUpdate,
    PaymentMethod,
    LEGACY_METHODS,
)
from core.models.settings import SystemSettings

__all__ = [
    # Service
    "Service", "ServiceCreate", "ServiceUpdate",
    # Staff
    "StaffRecord", "StaffCreate", "StaffUpdate", "StaffRole",
    # Transaction
    "Transaction", "NewTransaction", "SaleRequest", "TransactionUpdate", "PaymentMethod", "LEGACY_METHODS",
    # Settings
    "SystemSettings",
]
