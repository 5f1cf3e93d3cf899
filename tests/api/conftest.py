"""API test fixtures: TestClient over create_app with mocked services."""

from unittest.mock import Mock

import pytest
from starlette.testclient import TestClient

from api.app import create_app
from auth.exceptions import InvalidTokenError
from auth.types import VerifiedIdentity
from core.config import AppConfig
from core.models import StaffRecord, StaffRole
from core.services.catalog_service import CatalogService
from core.services.report_service import ReportService
from core.services.sale_service import SaleService
from core.services.settings_service import SettingsService
from core.services.staff_service import StaffService
from core.services.transaction_store import TransactionStore
from core.staleness import SelectionRegistry

TOKENS = {
    "admin-token": VerifiedIdentity(uid="admin-uid", email="dono@barbearia.com", display_name="Dono"),
    "barber-token": VerifiedIdentity(uid="luiz-auth-uid", email="luizkosse@gmail.com", display_name="Luiz Kosse"),
}

ADMIN_HEADERS = {"Authorization": "Bearer admin-token"}
BARBER_HEADERS = {"Authorization": "Bearer barber-token"}


class FakeVerifier:
    """Identity provider stand-in: fixed tokens, everything else rejected."""

    def verify(self, token: str) -> VerifiedIdentity:
        if token not in TOKENS:
            raise InvalidTokenError("Unknown token")
        return TOKENS[token]


# =============================================================================
# SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def staff_service():
    mock = Mock(spec=StaffService)
    mock.ensure_profile.side_effect = lambda identity: StaffRecord(
        id=identity.uid,
        name=identity.display_name,
        email=identity.email,
        role=StaffRole.ADMIN if identity.uid == "admin-uid" else StaffRole.BARBER,
    )
    return mock


@pytest.fixture
def services(staff_service):
    return {
        "catalog": Mock(spec=CatalogService),
        "staff": staff_service,
        "settings": Mock(spec=SettingsService),
        "store": Mock(spec=TransactionStore),
        "sale": Mock(spec=SaleService),
        "report": Mock(spec=ReportService),
        "selections": SelectionRegistry(),
    }


# =============================================================================
# APP & CLIENT FIXTURES
# =============================================================================


@pytest.fixture
def config():
    return AppConfig(database_url="postgresql://test/pos")


@pytest.fixture
def app(config, services):
    """FastAPI app with auth middleware, error handlers, and data/actions routes."""
    return create_app(config, FakeVerifier(), services=services)


@pytest.fixture
def client(app):
    """Test client; pass ADMIN_HEADERS or BARBER_HEADERS per request."""
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def admin_headers():
    return ADMIN_HEADERS


@pytest.fixture
def barber_headers():
    return BARBER_HEADERS
