"""GET /api/data: unified read endpoint, plus the CSV export."""

from dataclasses import asdict

from fastapi import APIRouter, Query, Request
from fastapi.responses import Response

from api.base import request_id_of, success_response
from auth.service import require_admin
from auth.types import Session
from core.periods import month_range_for
from utils.timezone import local_now


VALID_TYPES = {
    "services", "staff", "settings", "transactions",
    "dashboard", "revenue", "commissions",
    "history", "history_totals", "weekly_commission",
}

ADMIN_TYPES = {"transactions", "dashboard", "revenue", "commissions"}

# Views whose result depends on a user selection (month, page, staff member).
SELECTION_TYPES = {"transactions", "revenue", "commissions", "history", "weekly_commission"}


def _page_data(page) -> dict:
    return {
        "items": [t.model_dump(mode="json") for t in page.items],
        "next_cursor": page.next_cursor,
    }


def create_data_router(services: dict, timezone: str) -> APIRouter:
    router = APIRouter()

    catalog_svc = services["catalog"]
    staff_svc = services["staff"]
    settings_svc = services["settings"]
    store = services["store"]
    report_svc = services["report"]
    selections = services["selections"]

    def _year_month(year: int | None, month: int | None) -> tuple[int, int]:
        now = local_now(timezone)
        return (year or now.year, month or now.month)

    # Plain def: runs in the threadpool, so one user's fetches can overlap.
    @router.get("/data")
    def get_data(
        request: Request,
        type: str | None = Query(None),
        filter: str | None = Query(None),
        staff_id: str | None = Query(None),
        year: int | None = Query(None, ge=2000, le=2100),
        month: int | None = Query(None, ge=1, le=12),
        cursor: str | None = Query(None),
        limit: int = Query(20, ge=1, le=500),
    ):
        if type is None:
            raise ValueError("'type' query parameter is required")

        if type not in VALID_TYPES:
            raise ValueError(f"Unknown type '{type}'. Valid types: {', '.join(sorted(VALID_TYPES))}")

        session: Session = request.state.session
        if type in ADMIN_TYPES:
            require_admin(session, f"read {type}")

        year, month = _year_month(year, month)

        tracker = tag = selection = None
        if type in SELECTION_TYPES:
            selection = {"type": type, "year": year, "month": month, "staff_id": staff_id, "cursor": cursor}
            tracker = selections.tracker(session.user_id, type)
            tag = tracker.issue(tuple(selection.items()))

        if type == "services":
            data = [s.model_dump(mode="json") for s in catalog_svc.list_all()]

        elif type == "staff":
            if filter == "barbers":
                records = staff_svc.list_barbers()
            elif filter == "active":
                records = staff_svc.list_barbers(active_only=True)
            else:
                records = staff_svc.list_roster()
            data = [r.model_dump(mode="json") for r in records]

        elif type == "settings":
            data = settings_svc.get().model_dump(mode="json")

        elif type == "transactions":
            period = month_range_for(year, month, timezone)
            page = store.query_range(period.start, period.end, cursor=cursor, page_size=limit)
            data = _page_data(page)

        elif type == "dashboard":
            data = asdict(report_svc.dashboard())

        elif type == "revenue":
            data = asdict(report_svc.revenue_report(year, month))

        elif type == "commissions":
            data = asdict(report_svc.commission_report(year, month))

        elif type == "history":
            data = _page_data(report_svc.history(session, cursor=cursor, page_size=limit))

        elif type == "history_totals":
            data = asdict(report_svc.history_totals(session))

        else:
            target = staff_id or session.user_id
            if target != session.user_id:
                require_admin(session, "read another staff member's commission")
            data = report_svc.staff_weekly_commission(target, year, month)

        stale = False
        if tag is not None:
            data = tracker.accept(tag, data)
            stale = data is None
            selection["sequence"] = tag.sequence

        return success_response(
            data, request_id_of(request), selection=selection, stale=stale,
        ).model_dump(mode="json")

    @router.get("/export")
    def export_month(
        request: Request,
        year: int | None = Query(None, ge=2000, le=2100),
        month: int | None = Query(None, ge=1, le=12),
    ):
        require_admin(request.state.session, "export")

        filename, content = report_svc.export_month(*_year_month(year, month))
        return Response(
            content=content,
            media_type="text/csv; charset=utf-8",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    return router
