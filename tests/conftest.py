"""Shared test fixtures for the barbershop POS test suite.

No test touches a real database. Services get a Mock(spec=PostgresClient);
range queries against ``transactions`` are answered by FakeTransactionTable,
which applies the same named parameters the real SQL would.
"""

from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import Mock

import pytest

from auth.types import Session
from clients.postgres_client import PostgresClient
from core.models import StaffRecord, StaffRole, Transaction


# =============================================================================
# CONSTANTS
# =============================================================================

TZ = "America/Sao_Paulo"

ADMIN_ID = "admin-uid"
BARBER_UID = "luiz-auth-uid"
BARBER_ROSTER_ID = "luiz-roster-id"
OTHER_BARBER_ID = "carlos-roster-id"


def utc(year, month, day, hour=12, minute=0) -> datetime:
    """Aware UTC datetime shorthand."""
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


def make_row(
    id: str,
    date: datetime,
    total="100",
    barber_id: str | None = BARBER_ROSTER_ID,
    method: str | None = "pix",
    commission_rate="0.40",
    commission_amount=None,
    revenue_amount=None,
    service_ids=None,
) -> dict:
    """A ``transactions`` row as RealDictCursor would return it."""
    total_dec = Decimal(total)
    rate = Decimal(commission_rate) if commission_rate is not None else None
    if commission_amount is None and rate is not None:
        commission_amount = total_dec * rate
    if revenue_amount is None and commission_amount is not None:
        revenue_amount = total_dec - Decimal(commission_amount)
    return {
        "id": id,
        "barber_id": barber_id,
        "service_ids": service_ids if service_ids is not None else ["corte"],
        "total": total_dec,
        "method": method,
        "commission_rate": rate,
        "commission_amount": commission_amount,
        "revenue_amount": revenue_amount,
        "date": date,
        "registered_by": barber_id,
    }


def make_transaction(id: str, date: datetime, **kwargs) -> Transaction:
    return Transaction.model_validate(make_row(id, date, **kwargs))


class FakeTransactionTable:
    """
    Answers TransactionStore range queries from an in-memory row list.

    Understands the named parameters the store sends: start, end,
    barber_ids, cursor_date/cursor_id and limit. Every call is recorded.
    """

    def __init__(self, rows: list[dict] | None = None):
        self.rows = list(rows or [])
        self.calls: list[dict] = []

    def __call__(self, query, params=None):
        params = dict(params or {})
        self.calls.append(params)

        matched = [
            row for row in self.rows
            if params["start"] <= row["date"] <= params["end"]
        ]
        if "barber_ids" in params:
            matched = [row for row in matched if row["barber_id"] in params["barber_ids"]]
        if "cursor_date" in params:
            after = (params["cursor_date"], params["cursor_id"])
            matched = [row for row in matched if (row["date"], row["id"]) < after]

        matched.sort(key=lambda row: (row["date"], row["id"]), reverse=True)
        if "limit" in params:
            matched = matched[:params["limit"]]
        return matched


# =============================================================================
# SESSION / ROSTER FIXTURES
# =============================================================================


@pytest.fixture
def tz() -> str:
    return TZ


@pytest.fixture
def admin_session() -> Session:
    return Session(
        user_id=ADMIN_ID,
        email="dono@barbearia.com",
        display_name="Dono da Barbearia",
        role=StaffRole.ADMIN,
    )


@pytest.fixture
def barber_session() -> Session:
    """Luiz at sign-in: short display name, personal email."""
    return Session(
        user_id=BARBER_UID,
        email="luizkosse@gmail.com",
        display_name="Luiz Kosse",
        role=StaffRole.BARBER,
    )


@pytest.fixture
def roster() -> list[StaffRecord]:
    return [
        StaffRecord(id=ADMIN_ID, name="Dono da Barbearia", email="dono@barbearia.com", role=StaffRole.ADMIN),
        StaffRecord(id=BARBER_UID, name="Luiz Kosse", email="luizkosse@gmail.com"),
        StaffRecord(id=BARBER_ROSTER_ID, name="Luiz Felipe Marçal Kosse", email="luiz@barbearia.com"),
        StaffRecord(id=OTHER_BARBER_ID, name="Carlos Souza", email="carlos@barbearia.com"),
    ]


# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture
def db() -> Mock:
    """PostgresClient stand-in; configure return values per test."""
    return Mock(spec=PostgresClient)


@pytest.fixture
def transaction_table() -> FakeTransactionTable:
    return FakeTransactionTable()


@pytest.fixture
def table_db(transaction_table) -> Mock:
    """PostgresClient whose execute() is served by transaction_table."""
    mock = Mock(spec=PostgresClient)
    mock.execute.side_effect = transaction_table
    return mock


# =============================================================================
# FACTORY FIXTURES
# =============================================================================


@pytest.fixture
def row_factory():
    """make_row(id, date, **fields) -> raw ``transactions`` row."""
    return make_row


@pytest.fixture
def transaction_factory():
    """make_transaction(id, date, **fields) -> Transaction."""
    return make_transaction
