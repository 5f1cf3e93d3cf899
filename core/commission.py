"""
Commission and house-revenue arithmetic.

Every rate inside the application is a fraction (0.40 = 40%). The service
catalog is the one place that persists percentages; those pass through
normalize_rate(..., RateUnit.PERCENT) on their way in. Charged totals are
whole cents (to_cents) before they are split; commission and revenue keep
full Decimal precision and only the display/export layer rounds them.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import Any, Iterable, Protocol

from core.exceptions import InvalidAmountError, InvalidRateError

DEFAULT_COMMISSION_RATE = Decimal("0.40")
DEFAULT_COMMISSION_PERCENT = Decimal("40")

_ZERO = Decimal("0")
_ONE = Decimal("1")
_HUNDRED = Decimal("100")
_CENT = Decimal("0.01")


class RateUnit(str, Enum):
    """Unit a commission rate is expressed in."""

    FRACTION = "fraction"  # 0-1, settings and transactions
    PERCENT = "percent"    # 0-100, service catalog


@dataclass(frozen=True)
class CommissionSplit:
    """How a charged total divides between staff member and house."""

    commission_amount: Decimal
    revenue_amount: Decimal


class PricedService(Protocol):
    """Anything with a price and a fractional commission rate."""

    price: Decimal

    @property
    def commission_rate(self) -> Decimal: ...


def coerce_decimal(value: Any, default: Decimal | None = _ZERO) -> Decimal | None:
    """
    Lenient numeric conversion for historical data.

    None, unparseable strings, NaN and infinities all become ``default``.
    Floats go through str() so 0.1 stays 0.1 rather than its binary expansion.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return default
    if not result.is_finite():
        return default
    return result


def _strict_decimal(value: Any) -> Decimal | None:
    """Decimal conversion that reports failure as None instead of defaulting."""
    if value is None or isinstance(value, bool):
        return None
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    return result if result.is_finite() else None


def validate_amount(total: Any) -> Decimal:
    """
    Check a charged total before it is written.

    Raises:
        InvalidAmountError: If total is not a finite, non-negative number
    """
    amount = _strict_decimal(total)
    if amount is None or amount < _ZERO:
        raise InvalidAmountError(total)
    return amount


def to_cents(amount: Decimal) -> Decimal:
    """Round a charged total half-up to whole cents, the precision it is stored at."""
    return amount.quantize(_CENT, rounding=ROUND_HALF_UP)


def normalize_rate(rate: Any, unit: RateUnit = RateUnit.FRACTION) -> Decimal:
    """
    Convert a rate to the canonical fraction.

    Args:
        rate: Rate value in ``unit``
        unit: FRACTION for 0-1 values, PERCENT for 0-100 values

    Returns:
        Rate as a Decimal fraction in [0, 1]

    Raises:
        InvalidRateError: If the value is not numeric or out of range
    """
    value = _strict_decimal(rate)
    if value is None:
        raise InvalidRateError(rate)
    if unit == RateUnit.PERCENT:
        value = value / _HUNDRED
    if value < _ZERO or value > _ONE:
        raise InvalidRateError(rate)
    return value


def percent_or_default(value: Any) -> Decimal:
    """Catalog percentage, with the 40% default for absent or unparseable values."""
    percent = coerce_decimal(value, default=None)
    if percent is None or percent < _ZERO or percent > _HUNDRED:
        return DEFAULT_COMMISSION_PERCENT
    return percent


def compute_split(total: Any, rate: Any, unit: RateUnit = RateUnit.FRACTION) -> CommissionSplit:
    """
    Split a charged total into commission and house revenue.

    commission = total * rate; revenue = total - commission. The two always
    add back up to total exactly.

    Args:
        total: Amount charged, finite and >= 0
        rate: Commission rate expressed in ``unit``
        unit: Unit of ``rate`` (fraction by default)

    Raises:
        InvalidAmountError: If total is invalid
        InvalidRateError: If rate is invalid
    """
    amount = validate_amount(total)
    fraction = normalize_rate(rate, unit)
    commission = amount * fraction
    return CommissionSplit(
        commission_amount=commission,
        revenue_amount=amount - commission,
    )


def service_commission(services: Iterable[PricedService]) -> Decimal:
    """
    Sum of price * rate over the selected services.

    Used when a sale is edited: commission follows catalog prices and
    per-service rates, not the charged total, so a manual price override
    changes what the customer paid but not the staff member's share.
    """
    return sum(
        (Decimal(service.price) * service.commission_rate for service in services),
        _ZERO,
    )
