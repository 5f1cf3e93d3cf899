"""
Report workflows: fetch a period from the store, reduce it with
core.reporting.

Every report is a single range query. Staff members only ever see
transactions recorded against ids the identity resolver ties to them;
admins see everything.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal

from auth.types import Session
from core.config import AppConfig
from core.exceptions import NotFoundError
from core.identity import StaffMatcher, resolve_my_staff_ids
from core.models import StaffRecord, Transaction
from core.periods import DateRange, day_range, month_range, month_range_for, week_start
from core.reporting import (
    MethodShare,
    PeriodSummary,
    StaffRanking,
    WeekRevenue,
    commission_by_staff,
    export_csv,
    export_filename,
    payment_breakdown,
    summarize,
    top_barbers,
    weekly_commission,
    weekly_revenue,
)
from core.services.catalog_service import CatalogService
from core.services.staff_service import StaffService
from core.services.transaction_store import TransactionPage, TransactionStore
from utils.timezone import local_now, to_local

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20


@dataclass
class HistoryTotals:
    today: Decimal
    week: Decimal
    month: Decimal


@dataclass
class Dashboard:
    today: PeriodSummary
    week: PeriodSummary
    month: PeriodSummary
    top_barbers: list[StaffRanking] = field(default_factory=list)


@dataclass
class RevenueReport:
    period: DateRange
    summary: PeriodSummary
    methods: list[MethodShare]
    weeks: list[WeekRevenue]


@dataclass
class CommissionReport:
    period: DateRange
    summary: PeriodSummary
    by_staff: dict[str, Decimal]


def _within(transactions: list[Transaction], window: DateRange) -> list[Transaction]:
    return [t for t in transactions if window.contains(t.date)]


class ReportService:
    """Dashboards, revenue and commission reports, history and export."""

    def __init__(
        self,
        store: TransactionStore,
        staff: StaffService,
        catalog: CatalogService,
        config: AppConfig,
        matcher: StaffMatcher | None = None,
    ):
        self.store = store
        self.staff = staff
        self.catalog = catalog
        self.config = config
        self.matcher = matcher

    @property
    def tz(self) -> str:
        return self.config.timezone

    def _now(self, now: datetime | None) -> datetime:
        return to_local(now, self.tz) if now is not None else local_now(self.tz)

    def _fetch_all(self, start: datetime, end: datetime, id_filter=None) -> list[Transaction]:
        return self.store.query_range(start, end, id_filter=id_filter).items

    def _roster_map(self) -> dict[str, StaffRecord]:
        return {record.id: record for record in self.staff.list_roster()}

    # -------------------------------------------------------------------------
    # Per-person views
    # -------------------------------------------------------------------------

    def staff_filter(self, session: Session) -> frozenset[str] | None:
        """
        Barber ids the session may see; None means no restriction (admins).
        """
        if session.is_admin:
            return None
        return resolve_my_staff_ids(session, self.staff.list_roster(), self.matcher)

    def history(
        self,
        session: Session,
        cursor: str | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        now: datetime | None = None,
    ) -> TransactionPage:
        """
        The caller's own sales, newest first, one page at a time.

        Reaches back ``config.history_days`` days.
        """
        end = day_range(self._now(now), self.tz).end
        start = end - timedelta(days=self.config.history_days)
        return self.store.query_range(
            start, end,
            id_filter=self.staff_filter(session),
            cursor=cursor,
            page_size=page_size,
        )

    def history_totals(self, session: Session, now: datetime | None = None) -> HistoryTotals:
        """Gross sold by the caller today, this week (from Sunday) and this month."""
        current = self._now(now)
        today = day_range(current, self.tz)
        week = DateRange(start=week_start(current, self.tz), end=today.end)
        month = DateRange(start=month_range(current, self.tz).start, end=today.end)

        transactions = self._fetch_all(
            min(week.start, month.start), today.end, self.staff_filter(session)
        )
        return HistoryTotals(
            today=summarize(_within(transactions, today)).gross,
            week=summarize(_within(transactions, week)).gross,
            month=summarize(_within(transactions, month)).gross,
        )

    def staff_weekly_commission(self, staff_id: str, year: int, month: int) -> list[Decimal]:
        """
        Commission per week bucket for one staff member in one month.

        The member's roster record is resolved like a login would be, so
        sales recorded against their self-serve profile and their
        placeholder record both count.

        Raises:
            NotFoundError: If staff_id is not on the roster
        """
        roster = self.staff.list_roster()
        record = next((r for r in roster if r.id == staff_id), None)
        if record is None:
            raise NotFoundError("staff", staff_id)

        as_session = Session(
            user_id=record.id,
            email=record.email,
            display_name=record.name,
            role=record.role,
        )
        ids = resolve_my_staff_ids(as_session, roster, self.matcher)

        period = month_range_for(year, month, self.tz)
        transactions = self._fetch_all(period.start, period.end, ids)
        return weekly_commission(transactions, ids, year, month, self.tz)

    # -------------------------------------------------------------------------
    # Manager views
    # -------------------------------------------------------------------------

    def dashboard(self, now: datetime | None = None) -> Dashboard:
        """Today, this week and this month at a glance, plus the month's ranking."""
        current = self._now(now)
        today = day_range(current, self.tz)
        week = DateRange(start=week_start(current, self.tz), end=today.end)
        month = DateRange(start=month_range(current, self.tz).start, end=today.end)

        transactions = self._fetch_all(min(week.start, month.start), today.end)
        month_transactions = _within(transactions, month)

        return Dashboard(
            today=summarize(_within(transactions, today)),
            week=summarize(_within(transactions, week)),
            month=summarize(month_transactions),
            top_barbers=top_barbers(month_transactions, self._roster_map()),
        )

    def revenue_report(self, year: int, month: int) -> RevenueReport:
        """Month gross by payment method and by week."""
        period = month_range_for(year, month, self.tz)
        transactions = self._fetch_all(period.start, period.end)
        return RevenueReport(
            period=period,
            summary=summarize(transactions),
            methods=payment_breakdown(transactions),
            weeks=weekly_revenue(transactions, year, month, self.tz),
        )

    def commission_report(self, year: int, month: int) -> CommissionReport:
        """Month totals and the pay run (commission per staff member)."""
        period = month_range_for(year, month, self.tz)
        transactions = self._fetch_all(period.start, period.end)
        return CommissionReport(
            period=period,
            summary=summarize(transactions),
            by_staff=commission_by_staff(transactions, self._roster_map()),
        )

    def export_month(self, year: int, month: int) -> tuple[str, str]:
        """
        CSV export of a month.

        Returns:
            (filename, csv text)
        """
        period = month_range_for(year, month, self.tz)
        transactions = self._fetch_all(period.start, period.end)

        service_ids = sorted({sid for t in transactions for sid in t.service_ids})
        services = self.catalog.get_many(service_ids)

        logger.info(f"Exporting {len(transactions)} transactions for {month:02d}/{year}")
        return (
            export_filename(year, month),
            export_csv(transactions, self._roster_map(), services, self.tz),
        )
