"""Utility modules for cross-cutting concerns."""

from utils.timezone import now_utc, to_utc, to_local, local_now, get_zone, parse_iso
from utils.formatting import format_decimal_br, format_percent_br
