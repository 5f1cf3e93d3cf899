"""
Sale workflow: record, edit and delete transactions.

Creation and edit split commission differently, on purpose:
- record_sale snapshots the global settings rate and applies it to the
  charged total.
- edit_sale recomputes commission from the catalog, per selected service
  (price * that service's rate), independent of the charged total.
"""

import logging
from decimal import Decimal

from auth.types import Session
from core.commission import service_commission, to_cents
from core.exceptions import NotFoundError, ValidationError
from core.models import (
    NewTransaction,
    SaleRequest,
    Service,
    Transaction,
    TransactionUpdate,
)
from core.services.catalog_service import CatalogService
from core.services.settings_service import SettingsService
from core.services.staff_service import StaffService
from core.services.transaction_store import TransactionStore

logger = logging.getLogger(__name__)


class SaleService:
    """Validates sale forms and hands them to the transaction store."""

    def __init__(
        self,
        store: TransactionStore,
        catalog: CatalogService,
        staff: StaffService,
        settings: SettingsService,
    ):
        self.store = store
        self.catalog = catalog
        self.staff = staff
        self.settings = settings

    def _validate(self, request: SaleRequest, require_active: bool = False) -> None:
        """
        Raises:
            ValidationError: If barber or services are missing, the barber is
                not on the roster, or (with require_active) is deactivated
        """
        if not request.barber_id:
            raise ValidationError("Select a barber")
        if not request.service_ids:
            raise ValidationError("Select at least one service")
        barber = self.staff.get_by_id(request.barber_id)
        if barber is None:
            raise ValidationError(f"Unknown barber {request.barber_id}")
        if require_active and not barber.is_active:
            raise ValidationError(f"{barber.display_name} is inactive")

    @staticmethod
    def _catalog_total(services: list[Service]) -> Decimal:
        return sum((s.price for s in services), Decimal("0"))

    def record_sale(self, session: Session, request: SaleRequest) -> Transaction:
        """
        Record a completed sale.

        The total defaults to the sum of the selected services' catalog
        prices. Commission uses the current global rate, snapshotted.

        Raises:
            ValidationError: Missing, unknown or inactive barber, or bad services
            InvalidAmountError: Negative or non-numeric total override
            WriteError: Store failure, not retried
        """
        self._validate(request, require_active=True)

        catalog = self.catalog.get_many(request.service_ids)
        unknown = [sid for sid in request.service_ids if sid not in catalog]
        if unknown:
            raise ValidationError(f"Unknown services: {', '.join(unknown)}")

        selected = [catalog[sid] for sid in request.service_ids]
        total = request.total if request.total is not None else self._catalog_total(selected)
        rate = self.settings.get().commission_rate

        data = NewTransaction(
            barber_id=request.barber_id,
            service_ids=request.service_ids,
            total=total,
            method=request.method,
            registered_by=session.user_id,
        )
        return self.store.create(data, rate)

    def edit_sale(self, transaction_id: str, request: SaleRequest) -> Transaction:
        """
        Replace barber, services, method and total of an existing sale.

        Commission is recomputed from the catalog's current prices and rates
        for the selected services; revenue is total minus that commission.
        Service ids no longer in the catalog are kept on the record but
        contribute nothing. The stored rate snapshot and the date are left
        untouched.

        Raises:
            NotFoundError: If the sale does not exist
            ValidationError: Missing/unknown barber or no services
            WriteError: Store failure, not retried
        """
        if self.store.get_by_id(transaction_id) is None:
            raise NotFoundError("transaction", transaction_id)

        self._validate(request)

        catalog = self.catalog.get_many(request.service_ids)
        selected = [catalog[sid] for sid in request.service_ids if sid in catalog]
        if len(selected) < len(request.service_ids):
            logger.warning(
                f"Transaction {transaction_id} references services missing from the catalog"
            )

        total = request.total if request.total is not None else self._catalog_total(selected)
        total = to_cents(total)
        commission = service_commission(selected)

        update = TransactionUpdate(
            barber_id=request.barber_id,
            service_ids=request.service_ids,
            method=request.method,
            total=total,
            commission_amount=commission,
            revenue_amount=Decimal(total) - commission,
        )
        return self.store.update(transaction_id, update)

    def delete_sale(self, transaction_id: str) -> None:
        """
        Raises:
            NotFoundError: If the sale does not exist
            WriteError: Store failure
        """
        self.store.delete(transaction_id)
