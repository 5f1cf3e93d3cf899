"""
Reporting aggregator: pure reductions over a fetched transaction list.

Nothing here touches the database. Inputs are a list of transactions plus
lookup maps for staff and services; outputs are totals, per-staff and
per-week breakdowns and the CSV export.

Historical rows are not trusted. Numeric fields that are missing or
malformed are coerced (see core.commission.coerce_decimal) so that one bad
record cannot break a monthly report:
- missing commission_amount -> total * 0.40
- missing revenue_amount -> total - commission
"""

import csv
import io
from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Collection, Iterable, Mapping

from core.commission import DEFAULT_COMMISSION_RATE, coerce_decimal
from core.models import PaymentMethod, Service, StaffRecord, Transaction
from core.periods import WEEKS_PER_MONTH, DateRange, week_of_month, week_ranges
from utils.formatting import format_decimal_br, format_percent_br
from utils.timezone import to_local

ZERO = Decimal("0")

OTHER_METHOD = "outros"
REPORTED_METHODS = [m.value for m in PaymentMethod] + [OTHER_METHOD]

UNKNOWN_STAFF = "Desconhecido"
UNKNOWN_SERVICE = "Serviço desconhecido"

CSV_HEADER = [
    "Data", "Hora", "Barbeiro", "Serviços", "Valor Total",
    "Método", "Comissão %", "Comissão R$", "Lucro Casa",
]
CSV_DELIMITER = ";"


# =============================================================================
# PER-TRANSACTION AMOUNTS
# =============================================================================


def gross_of(transaction: Transaction) -> Decimal:
    return coerce_decimal(transaction.total)


def commission_of(transaction: Transaction) -> Decimal:
    """Snapshotted commission, or total * 0.40 for rows that predate it."""
    amount = coerce_decimal(transaction.commission_amount, default=None)
    if amount is None:
        return gross_of(transaction) * DEFAULT_COMMISSION_RATE
    return amount


def house_of(transaction: Transaction) -> Decimal:
    """Snapshotted house revenue, or total - commission."""
    amount = coerce_decimal(transaction.revenue_amount, default=None)
    if amount is None:
        return gross_of(transaction) - commission_of(transaction)
    return amount


def rate_of(transaction: Transaction) -> Decimal:
    """
    Commission rate to show for a transaction.

    The snapshot when present; otherwise derived from the amounts, and the
    default rate when the total is zero.
    """
    rate = coerce_decimal(transaction.commission_rate, default=None)
    if rate is not None:
        return rate
    gross = gross_of(transaction)
    if gross == ZERO:
        return DEFAULT_COMMISSION_RATE
    return commission_of(transaction) / gross


def method_bucket(transaction: Transaction) -> str:
    """Reported payment bucket; legacy or unknown methods land in 'outros'."""
    method = (transaction.method or "").lower()
    return method if method in REPORTED_METHODS else OTHER_METHOD


# =============================================================================
# TOTALS
# =============================================================================


@dataclass(frozen=True)
class PeriodSummary:
    """Totals for a list of transactions."""

    gross: Decimal = ZERO
    commission: Decimal = ZERO
    house: Decimal = ZERO
    count: int = 0


def summarize(transactions: Iterable[Transaction]) -> PeriodSummary:
    """Gross, commission and house totals plus the transaction count."""
    gross = commission = house = ZERO
    count = 0
    for t in transactions:
        gross += gross_of(t)
        commission += commission_of(t)
        house += house_of(t)
        count += 1
    return PeriodSummary(gross=gross, commission=commission, house=house, count=count)


def staff_name(staff_id: str | None, staff: Mapping[str, StaffRecord]) -> str:
    record = staff.get(staff_id) if staff_id else None
    return record.display_name if record else UNKNOWN_STAFF


def commission_by_staff(
    transactions: Iterable[Transaction],
    staff: Mapping[str, StaffRecord],
) -> dict[str, Decimal]:
    """
    Pay run: staff display name -> summed commission, largest first.

    Transactions whose barber is not on the roster are grouped under
    "Desconhecido".
    """
    totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for t in transactions:
        totals[staff_name(t.barber_id, staff)] += commission_of(t)
    return dict(sorted(totals.items(), key=lambda item: item[1], reverse=True))


def weekly_commission(
    transactions: Iterable[Transaction],
    staff_ids: Collection[str],
    year: int,
    month: int,
    tz_name: str,
) -> list[Decimal]:
    """
    Commission per week bucket (5 slots) for one staff member in one month.

    ``staff_ids`` is every id that belongs to the person (see
    core.identity.resolve_my_staff_ids). Transactions outside the month are
    ignored, so the buckets always sum to the month's commission.
    """
    buckets = [ZERO] * WEEKS_PER_MONTH
    for t in transactions:
        if t.barber_id not in staff_ids:
            continue
        local = to_local(t.date, tz_name)
        if (local.year, local.month) != (year, month):
            continue
        buckets[week_of_month(local, tz_name)] += commission_of(t)
    return buckets


# =============================================================================
# PAYMENT METHODS / WEEKLY REVENUE
# =============================================================================


@dataclass(frozen=True)
class MethodShare:
    method: str
    total: Decimal
    percent: Decimal


def _empty_methods() -> dict[str, Decimal]:
    return {method: ZERO for method in REPORTED_METHODS}


def payment_breakdown(transactions: Iterable[Transaction]) -> list[MethodShare]:
    """Gross per payment method with its share of the period (percent, 0-100)."""
    totals = _empty_methods()
    for t in transactions:
        totals[method_bucket(t)] += gross_of(t)

    grand_total = sum(totals.values(), ZERO)
    return [
        MethodShare(
            method=method,
            total=amount,
            percent=(amount / grand_total * 100) if grand_total > ZERO else ZERO,
        )
        for method, amount in totals.items()
    ]


@dataclass
class WeekRevenue:
    """One week bucket of a month's revenue."""

    index: int
    period: DateRange
    total: Decimal = ZERO
    methods: dict[str, Decimal] = field(default_factory=_empty_methods)


def weekly_revenue(
    transactions: Iterable[Transaction],
    year: int,
    month: int,
    tz_name: str,
) -> list[WeekRevenue]:
    """Gross per week bucket and payment method for a month."""
    weeks = [
        WeekRevenue(index=i, period=period)
        for i, period in enumerate(week_ranges(year, month, tz_name))
    ]
    for t in transactions:
        local = to_local(t.date, tz_name)
        if (local.year, local.month) != (year, month):
            continue
        week = weeks[week_of_month(local, tz_name)]
        value = gross_of(t)
        week.total += value
        week.methods[method_bucket(t)] += value
    return weeks


# =============================================================================
# RANKING
# =============================================================================


@dataclass(frozen=True)
class StaffRanking:
    staff_id: str
    name: str
    revenue: Decimal
    percent: Decimal


def top_barbers(
    transactions: Iterable[Transaction],
    staff: Mapping[str, StaffRecord],
) -> list[StaffRanking]:
    """
    Roster members ranked by gross, with share of the period's gross.

    Members with nothing sold are dropped; sales by ids not on the roster
    count toward the period total but are not ranked.
    """
    per_staff: dict[str, Decimal] = defaultdict(lambda: ZERO)
    period_total = ZERO
    for t in transactions:
        value = gross_of(t)
        period_total += value
        if t.barber_id:
            per_staff[t.barber_id] += value

    ranking = [
        StaffRanking(
            staff_id=record.id,
            name=record.display_name,
            revenue=per_staff[record.id],
            percent=(per_staff[record.id] / period_total * 100) if period_total > ZERO else ZERO,
        )
        for record in staff.values()
        if per_staff.get(record.id, ZERO) > ZERO
    ]
    ranking.sort(key=lambda r: r.revenue, reverse=True)
    return ranking


# =============================================================================
# CSV EXPORT
# =============================================================================


def export_rows(
    transactions: Iterable[Transaction],
    staff: Mapping[str, StaffRecord],
    services: Mapping[str, Service],
    tz_name: str,
) -> list[list[str]]:
    """One row of display strings per transaction, in input order."""
    rows = []
    for t in transactions:
        local = to_local(t.date, tz_name)
        service_names = ", ".join(
            services[sid].name if sid in services else UNKNOWN_SERVICE
            for sid in t.service_ids
        )
        rows.append([
            local.strftime("%d/%m/%Y"),
            local.strftime("%H:%M"),
            staff_name(t.barber_id, staff),
            service_names,
            format_decimal_br(gross_of(t)),
            t.method or "",
            format_percent_br(rate_of(t)),
            format_decimal_br(commission_of(t)),
            format_decimal_br(house_of(t)),
        ])
    return rows


def export_csv(
    transactions: Iterable[Transaction],
    staff: Mapping[str, StaffRecord],
    services: Mapping[str, Service],
    tz_name: str,
) -> str:
    """
    Semicolon-delimited export with a header row.

    Semicolons because the decimal separator is a comma.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=CSV_DELIMITER, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    writer.writerows(export_rows(transactions, staff, services, tz_name))
    return buffer.getvalue()


def export_filename(year: int, month: int) -> str:
    """faturamento_<MM>_<YYYY>.csv"""
    return f"faturamento_{month:02d}_{year}.csv"
