"""
Discard results that arrive for a selection the user already left.

A report view issues a fetch for its current parameters (month, staff
filter, ...). If the selection changes before the fetch completes, the late
result must not overwrite what is on screen. Each fetch is tagged with the
parameters it was issued for plus a sequence number; only the newest tag
for the current parameters is accepted.
"""

import itertools
import logging
import threading
from dataclasses import dataclass
from typing import Hashable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class FetchTag:
    """Identifies one issued fetch."""

    params: Hashable
    sequence: int


class SelectionTracker:
    """
    Tracks the current selection and the latest fetch issued for it.

    Usage:
        tracker = SelectionTracker()
        tag = tracker.issue(("revenue", 2024, 5))
        result = fetch(...)
        result = tracker.accept(tag, result)  # None if stale
    """

    def __init__(self):
        self._counter = itertools.count(1)
        self._current: FetchTag | None = None
        self._lock = threading.Lock()

    def issue(self, params: Hashable) -> FetchTag:
        """Mark ``params`` as the current selection and tag a new fetch for it."""
        with self._lock:
            tag = FetchTag(params=params, sequence=next(self._counter))
            self._current = tag
            return tag

    def is_current(self, tag: FetchTag) -> bool:
        """True while no newer fetch has been issued."""
        with self._lock:
            return self._current == tag

    def accept(self, tag: FetchTag, result: T) -> T | None:
        """
        Return ``result`` if its fetch is still current, else None.

        Stale results are logged at debug level and dropped; nothing is
        raised.
        """
        if self.is_current(tag):
            return result

        logger.debug(
            f"Discarding stale result for {tag.params!r} (fetch #{tag.sequence})"
        )
        return None


class SelectionRegistry:
    """
    One SelectionTracker per (user, view), created on first use.

    Views are independent: a dashboard fetch never makes a revenue fetch
    stale, only a newer revenue selection by the same user does.
    """

    def __init__(self):
        self._trackers: dict[tuple[str, str], SelectionTracker] = {}
        self._lock = threading.Lock()

    def tracker(self, user_id: str, view: str) -> SelectionTracker:
        with self._lock:
            tracker = self._trackers.get((user_id, view))
            if tracker is None:
                tracker = SelectionTracker()
                self._trackers[(user_id, view)] = tracker
            return tracker
