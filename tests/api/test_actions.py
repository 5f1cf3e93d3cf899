"""Tests for POST /api/actions unified mutation endpoint."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from core.exceptions import InvalidAmountError, NotFoundError, ValidationError, WriteError
from core.models import (
    SaleRequest,
    Service,
    ServiceCreate,
    StaffRecord,
    SystemSettings,
    Transaction,
)


def sale(**overrides):
    data = {"barber_id": "luiz", "service_ids": ["corte"], "method": "pix"}
    data.update(overrides)
    return data


@pytest.fixture
def recorded():
    return Transaction(
        id="t1", barber_id="luiz", service_ids=["corte"], total=Decimal("50"), method="pix",
        commission_rate=Decimal("0.40"), commission_amount=Decimal("20"), revenue_amount=Decimal("30"),
        date=datetime(2024, 5, 1, 15, tzinfo=timezone.utc), registered_by="luiz-auth-uid",
    )


# =============================================================================
# AUTHENTICATION & VALIDATION
# =============================================================================


class TestActionsAuthentication:

    def test_unauthenticated_returns_401(self, client):
        response = client.post("/api/actions", json={"domain": "sale", "action": "create", "data": sale()})
        assert response.status_code == 401


class TestActionsValidation:

    def test_unknown_domain(self, client, admin_headers):
        response = client.post(
            "/api/actions", json={"domain": "invoice", "action": "create", "data": {}}, headers=admin_headers,
        )
        assert response.status_code == 400
        assert "Unknown domain" in response.json()["error"]["message"]

    def test_unknown_action(self, client, admin_headers):
        response = client.post(
            "/api/actions", json={"domain": "sale", "action": "refund", "data": {}}, headers=admin_headers,
        )
        assert response.status_code == 400
        assert "not allowed" in response.json()["error"]["message"]

    def test_plain_value_error_is_400_whatever_its_text(self, client, services, barber_headers):
        services["sale"].record_sale.side_effect = ValueError("barber not found in form")

        response = client.post(
            "/api/actions", json={"domain": "sale", "action": "create", "data": sale()}, headers=barber_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"

    def test_missing_body_fields(self, client, admin_headers):
        response = client.post("/api/actions", json={"domain": "sale"}, headers=admin_headers)
        assert response.status_code == 422


# =============================================================================
# SALES
# =============================================================================


class TestSaleActions:

    def test_barber_records_sale(self, client, services, barber_headers, recorded):
        services["sale"].record_sale.return_value = recorded

        response = client.post(
            "/api/actions", json={"domain": "sale", "action": "create", "data": sale()}, headers=barber_headers,
        )

        assert response.status_code == 200
        assert response.json()["data"]["commission_amount"] == "20"
        session, request = services["sale"].record_sale.call_args[0]
        assert session.user_id == "luiz-auth-uid"
        assert request == SaleRequest(barber_id="luiz", service_ids=["corte"], method="pix")

    def test_business_validation_is_400(self, client, services, barber_headers):
        services["sale"].record_sale.side_effect = ValidationError("Select a barber")

        response = client.post(
            "/api/actions", json={"domain": "sale", "action": "create", "data": sale(barber_id=None)},
            headers=barber_headers,
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"]["code"] == "VALIDATION_ERROR"
        assert body["error"]["message"] == "Select a barber"

    def test_invalid_amount_is_400(self, client, services, barber_headers):
        services["sale"].record_sale.side_effect = InvalidAmountError("-5")

        response = client.post(
            "/api/actions", json={"domain": "sale", "action": "create", "data": sale(total="-5")},
            headers=barber_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_unknown_payment_method_is_400(self, client, services, barber_headers):
        response = client.post(
            "/api/actions", json={"domain": "sale", "action": "create", "data": sale(method="cheque")},
            headers=barber_headers,
        )
        assert response.status_code == 400
        services["sale"].record_sale.assert_not_called()

    def test_write_failure_is_503(self, client, services, barber_headers):
        services["sale"].record_sale.side_effect = WriteError("connection lost")

        response = client.post(
            "/api/actions", json={"domain": "sale", "action": "create", "data": sale()}, headers=barber_headers,
        )

        assert response.status_code == 503
        assert response.json()["error"]["code"] == "WRITE_FAILED"

    def test_barber_cannot_edit(self, client, services, barber_headers):
        response = client.post(
            "/api/actions", json={"domain": "sale", "action": "update", "data": sale(id="t1")},
            headers=barber_headers,
        )
        assert response.status_code == 403
        services["sale"].edit_sale.assert_not_called()

    def test_admin_edits(self, client, services, admin_headers, recorded):
        services["sale"].edit_sale.return_value = recorded

        response = client.post(
            "/api/actions", json={"domain": "sale", "action": "update", "data": sale(id="t1", total="70")},
            headers=admin_headers,
        )

        assert response.status_code == 200
        transaction_id, request = services["sale"].edit_sale.call_args[0]
        assert transaction_id == "t1"
        assert request.total == Decimal("70")

    def test_update_requires_id(self, client, admin_headers):
        response = client.post(
            "/api/actions", json={"domain": "sale", "action": "update", "data": sale()}, headers=admin_headers,
        )
        assert response.status_code == 400

    def test_delete_missing_is_404(self, client, services, admin_headers):
        services["sale"].delete_sale.side_effect = NotFoundError("transaction", "gone")

        response = client.post(
            "/api/actions", json={"domain": "sale", "action": "delete", "data": {"id": "gone"}},
            headers=admin_headers,
        )

        assert response.status_code == 404
        assert response.json()["error"]["message"] == "Transaction gone not found"


# =============================================================================
# CATALOG / STAFF / SETTINGS
# =============================================================================


class TestCatalogActions:

    def test_admin_creates_service(self, client, services, admin_headers):
        services["catalog"].create.return_value = Service(id="corte", name="Corte", price=Decimal("50"))

        response = client.post(
            "/api/actions",
            json={"domain": "service", "action": "create", "data": {"name": "Corte", "price": "50"}},
            headers=admin_headers,
        )

        assert response.status_code == 200
        services["catalog"].create.assert_called_once_with(ServiceCreate(name="Corte", price=Decimal("50")))

    def test_barber_cannot_touch_catalog(self, client, services, barber_headers):
        response = client.post(
            "/api/actions",
            json={"domain": "service", "action": "create", "data": {"name": "Corte", "price": "50"}},
            headers=barber_headers,
        )
        assert response.status_code == 403

    def test_delete_missing_service_is_404(self, client, services, admin_headers):
        services["catalog"].delete.return_value = False

        response = client.post(
            "/api/actions", json={"domain": "service", "action": "delete", "data": {"id": "gone"}},
            headers=admin_headers,
        )

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"


class TestStaffActions:

    def test_admin_promotes(self, client, services, admin_headers):
        services["staff"].update.return_value = StaffRecord(id="luiz", role="admin")

        response = client.post(
            "/api/actions",
            json={"domain": "staff", "action": "update", "data": {"id": "luiz", "role": "admin"}},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["data"]["role"] == "admin"

    def test_delete_missing_staff_is_404(self, client, services, admin_headers):
        services["staff"].delete.return_value = False

        response = client.post(
            "/api/actions", json={"domain": "staff", "action": "delete", "data": {"id": "gone"}},
            headers=admin_headers,
        )

        assert response.status_code == 404
        assert response.json()["error"] == {"code": "NOT_FOUND", "message": "Staff gone not found"}

    def test_invalid_email_is_400(self, client, admin_headers):
        response = client.post(
            "/api/actions",
            json={"domain": "staff", "action": "create", "data": {"name": "Carlos", "email": "nope"}},
            headers=admin_headers,
        )
        assert response.status_code == 400


class TestSettingsActions:

    def test_admin_saves_rate(self, client, services, admin_headers):
        services["settings"].save.return_value = SystemSettings(commission_rate=Decimal("0.35"))

        response = client.post(
            "/api/actions",
            json={"domain": "settings", "action": "save", "data": {"commission_rate": "0.35"}},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["data"]["commission_rate"] == "0.35"
        services["settings"].save.assert_called_once_with("0.35")

    def test_barber_cannot_change_rate(self, client, services, barber_headers):
        response = client.post(
            "/api/actions",
            json={"domain": "settings", "action": "save", "data": {"commission_rate": "0.9"}},
            headers=barber_headers,
        )
        assert response.status_code == 403
        services["settings"].save.assert_not_called()
