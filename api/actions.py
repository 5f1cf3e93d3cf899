"""POST /api/actions: unified mutation endpoint."""

from fastapi import APIRouter, Request
from pydantic import BaseModel

from api.base import request_id_of, success_response
from auth.service import require_admin
from auth.types import Session
from core.exceptions import NotFoundError
from core.models import (
    SaleRequest,
    ServiceCreate, ServiceUpdate,
    StaffCreate, StaffUpdate,
)


class ActionRequest(BaseModel):
    domain: str
    action: str
    data: dict


def create_actions_router(services: dict) -> APIRouter:
    router = APIRouter()

    handlers = {
        "sale": SaleHandler(services["sale"]),
        "service": CatalogHandler(services["catalog"]),
        "staff": StaffHandler(services["staff"]),
        "settings": SettingsHandler(services["settings"]),
    }

    @router.post("/actions")
    async def perform_action(request: Request, body: ActionRequest):
        handler = handlers.get(body.domain)
        if handler is None:
            raise ValueError(
                f"Unknown domain '{body.domain}'. "
                f"Valid domains: {', '.join(sorted(handlers.keys()))}"
            )

        if body.action not in handler.ALLOWED_ACTIONS:
            raise ValueError(
                f"Action '{body.action}' not allowed on '{body.domain}'. "
                f"Allowed: {', '.join(sorted(handler.ALLOWED_ACTIONS))}"
            )

        session: Session = request.state.session
        if body.action in handler.ADMIN_ACTIONS:
            require_admin(session, f"{body.domain}.{body.action}")

        method = getattr(handler, f"_handle_{body.action}")
        result = method(session, dict(body.data))
        return success_response(result, request_id_of(request)).model_dump(mode="json")

    return router


def _require_id(data: dict) -> str:
    value = data.pop("id", None)
    if not value:
        raise ValueError("'id' is required")
    return str(value)


# =============================================================================
# HANDLER CLASSES
# =============================================================================


class SaleHandler:
    ALLOWED_ACTIONS = {"create", "update", "delete"}
    ADMIN_ACTIONS = {"update", "delete"}

    def __init__(self, service):
        self.service = service

    def _handle_create(self, session: Session, data: dict):
        transaction = self.service.record_sale(session, SaleRequest(**data))
        return transaction.model_dump(mode="json")

    def _handle_update(self, session: Session, data: dict):
        transaction_id = _require_id(data)
        transaction = self.service.edit_sale(transaction_id, SaleRequest(**data))
        return transaction.model_dump(mode="json")

    def _handle_delete(self, session: Session, data: dict):
        self.service.delete_sale(_require_id(data))
        return {"deleted": True}


class CatalogHandler:
    ALLOWED_ACTIONS = {"create", "update", "delete"}
    ADMIN_ACTIONS = ALLOWED_ACTIONS

    def __init__(self, service):
        self.service = service

    def _handle_create(self, session: Session, data: dict):
        service = self.service.create(ServiceCreate(**data))
        return service.model_dump(mode="json")

    def _handle_update(self, session: Session, data: dict):
        service_id = _require_id(data)
        service = self.service.update(service_id, ServiceUpdate(**data))
        return service.model_dump(mode="json")

    def _handle_delete(self, session: Session, data: dict):
        service_id = _require_id(data)
        deleted = self.service.delete(service_id)
        if not deleted:
            raise NotFoundError("service", service_id)
        return {"deleted": True}


class StaffHandler:
    ALLOWED_ACTIONS = {"create", "update", "delete"}
    ADMIN_ACTIONS = ALLOWED_ACTIONS

    def __init__(self, service):
        self.service = service

    def _handle_create(self, session: Session, data: dict):
        record = self.service.create(StaffCreate(**data))
        return record.model_dump(mode="json")

    def _handle_update(self, session: Session, data: dict):
        staff_id = _require_id(data)
        record = self.service.update(staff_id, StaffUpdate(**data))
        return record.model_dump(mode="json")

    def _handle_delete(self, session: Session, data: dict):
        staff_id = _require_id(data)
        deleted = self.service.delete(staff_id)
        if not deleted:
            raise NotFoundError("staff", staff_id)
        return {"deleted": True}


class SettingsHandler:
    ALLOWED_ACTIONS = {"save"}
    ADMIN_ACTIONS = ALLOWED_ACTIONS

    def __init__(self, service):
        self.service = service

    def _handle_save(self, session: Session, data: dict):
        if "commission_rate" not in data:
            raise ValueError("'commission_rate' is required")
        settings = self.service.save(data["commission_rate"])
        return settings.model_dump(mode="json")
