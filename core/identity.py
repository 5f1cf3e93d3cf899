"""
Reconcile a logged-in person with the staff roster.

Staff sign in through an external identity provider whose account rarely
matches the manager-entered roster record exactly: different capitalization,
a shorter name, an alternate email. Matching on the auth id alone would hide
sales recorded against the roster record, so the resolver collects every
roster id that plausibly belongs to the same person.

Matching is approximate by nature. It sits behind the StaffMatcher protocol
so an explicit account-linking table can replace it without touching callers.
"""

import logging
import unicodedata
from typing import Iterable, Protocol

from auth.types import Session
from core.models.staff import StaffRecord

logger = logging.getLogger(__name__)

MIN_TOKEN_LENGTH = 3        # tokens of length <= 2 ("de", "da") are connectors
MIN_SHARED_TOKENS = 2
MIN_SINGLE_NAME_LENGTH = 4


def normalize_text(value: str | None) -> str:
    """Lowercase, trim and strip diacritics ("Marçal" -> "marcal")."""
    if not value:
        return ""
    decomposed = unicodedata.normalize("NFD", value.strip().lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def significant_tokens(name: str | None) -> set[str]:
    """Whitespace tokens of a normalized name, connectors dropped."""
    return {
        token for token in normalize_text(name).split()
        if len(token) >= MIN_TOKEN_LENGTH
    }


class StaffMatcher(Protocol):
    """Decides whether a roster record represents the logged-in person."""

    def matches(self, session: Session, record: StaffRecord) -> bool: ...


class FuzzyStaffMatcher:
    """
    Email and name-token heuristic.

    - Same normalized email: match.
    - Both names have two or more significant tokens: match when at least
      two are shared ("Luiz Kosse" vs "Luiz Felipe Marçal Kosse").
    - Otherwise the whole normalized names must be equal and at least four
      characters long, so "Lu" never matches "Lu".
    """

    def matches(self, session: Session, record: StaffRecord) -> bool:
        user_email = normalize_text(session.email)
        if user_email and user_email == normalize_text(record.email):
            return True

        return self._names_match(session.display_name, record.name)

    def _names_match(self, display_name: str | None, record_name: str | None) -> bool:
        user_tokens = significant_tokens(display_name)
        record_tokens = significant_tokens(record_name)

        if len(user_tokens) <= 1 or len(record_tokens) <= 1:
            user_full = normalize_text(display_name)
            return (
                len(user_full) >= MIN_SINGLE_NAME_LENGTH
                and user_full == normalize_text(record_name)
            )

        return len(user_tokens & record_tokens) >= MIN_SHARED_TOKENS


def resolve_my_staff_ids(
    session: Session,
    roster: Iterable[StaffRecord],
    matcher: StaffMatcher | None = None,
) -> frozenset[str]:
    """
    Every staff-record id that represents the logged-in person.

    Always contains the session's own auth id, even for an empty roster.
    The result feeds TransactionStore.query_range as its id filter.

    Args:
        session: The logged-in user
        roster: Staff records to search
        matcher: Matching strategy (FuzzyStaffMatcher by default)
    """
    matcher = matcher or FuzzyStaffMatcher()
    ids = {session.user_id}

    for record in roster:
        if record.id in ids:
            continue
        if matcher.matches(session, record):
            ids.add(record.id)

    if len(ids) > 1:
        logger.debug(f"Resolved {len(ids)} staff ids for user {session.user_id}")
    return frozenset(ids)
