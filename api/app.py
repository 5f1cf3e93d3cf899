"""FastAPI application assembly."""

import logging

from fastapi import FastAPI

from api.actions import create_actions_router
from api.data import create_data_router
from api.errors import register_error_handlers
from api.middleware import RequestIDMiddleware
from auth.security_middleware import AuthMiddleware
from auth.service import AuthService, IdentityVerifier
from clients.postgres_client import PostgresClient
from core.config import AppConfig
from core.services.catalog_service import CatalogService
from core.services.report_service import ReportService
from core.services.sale_service import SaleService
from core.services.settings_service import SettingsService
from core.services.staff_service import StaffService
from core.services.transaction_store import TransactionStore
from core.staleness import SelectionRegistry

logger = logging.getLogger(__name__)


def build_services(config: AppConfig, postgres: PostgresClient) -> dict:
    """Wire every service against one database client."""
    catalog = CatalogService(postgres)
    staff = StaffService(postgres)
    settings = SettingsService(postgres, config.default_commission_rate)
    store = TransactionStore(postgres, config.max_filter_values)

    return {
        "catalog": catalog,
        "staff": staff,
        "settings": settings,
        "store": store,
        "sale": SaleService(store, catalog, staff, settings),
        "report": ReportService(store, staff, catalog, config),
        "selections": SelectionRegistry(),
    }


def create_app(
    config: AppConfig,
    identity_verifier: IdentityVerifier,
    services: dict | None = None,
) -> FastAPI:
    """
    FastAPI app with auth middleware, error handlers, and data/actions routes.

    Args:
        config: Loaded application configuration
        identity_verifier: Checks bearer tokens with the identity provider
        services: Prebuilt services dict; built from config.database_url if omitted
    """
    if services is None:
        services = build_services(config, PostgresClient(config.database_url))

    root_path = config.base_path.rstrip("/")
    app = FastAPI(title=config.app_name, root_path=root_path)

    auth_service = AuthService(identity_verifier, services["staff"])
    # Last added runs first: request IDs must exist before auth can reject.
    app.add_middleware(AuthMiddleware, auth_service=auth_service)
    app.add_middleware(RequestIDMiddleware)
    register_error_handlers(app)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    app.include_router(create_data_router(services, config.timezone), prefix="/api")
    app.include_router(create_actions_router(services), prefix="/api")

    logger.info(f"{config.app_name} API ready (base path {config.base_path})")
    return app
