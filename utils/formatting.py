"""pt-BR number formatting for exports and display."""

from decimal import Decimal, ROUND_HALF_UP


def format_decimal_br(value: Decimal, places: int = 2) -> str:
    """
    Format a number with comma as decimal separator and no grouping.

    Rounds half-up to ``places``. Used inside CSV cells, where a thousands
    separator would only get in the way of spreadsheet parsing.

        >>> format_decimal_br(Decimal("1234.5"))
        '1234,50'
    """
    quantum = Decimal(1).scaleb(-places)
    rounded = Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP)
    return f"{rounded:f}".replace(".", ",")


def format_percent_br(rate: Decimal, places: int = 1) -> str:
    """Fraction to percentage text: ``Decimal("0.4")`` -> ``'40,0'``."""
    return format_decimal_br(Decimal(rate) * 100, places)
