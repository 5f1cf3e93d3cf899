"""
Transaction store: writes and range queries over ``transactions``.

Range queries return newest first, ordered by (date DESC, id DESC). The id
tiebreaker makes the order total, which is what lets pagination use a
keyset cursor: the cursor is the (date, id) of the last item handed out, and
the next page is every row strictly "older" than it.

Staff-id filters are sent in chunks of at most ``max_filter_values`` ids.
Each chunk query fetches at most page_size + 1 rows past the cursor. The
true next page is made of the newest rows across all chunks, and each
chunk's contribution to it can't be larger than what that chunk fetched, so
merging and cutting to page_size gives the same page an unchunked query
would. The extra row tells whether anything remains.
"""

import base64
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Collection
from uuid import uuid4

import psycopg2

from clients.postgres_client import PostgresClient
from core.commission import compute_split, normalize_rate
from core.exceptions import NotFoundError, WriteError
from core.models import NewTransaction, Transaction, TransactionUpdate
from utils.timezone import parse_iso, to_utc

logger = logging.getLogger(__name__)

DEFAULT_MAX_FILTER_VALUES = 10

_UPDATABLE_COLUMNS = {
    "barber_id", "service_ids", "total", "method",
    "commission_rate", "commission_amount", "revenue_amount",
}


@dataclass
class TransactionPage:
    """One page of a range query."""

    items: list[Transaction] = field(default_factory=list)
    next_cursor: str | None = None


def encode_cursor(transaction: Transaction) -> str:
    """Opaque cursor pointing just past ``transaction``."""
    payload = json.dumps({"d": to_utc(transaction.date).isoformat(), "i": transaction.id})
    return base64.urlsafe_b64encode(payload.encode()).decode()


def decode_cursor(cursor: str) -> tuple[datetime, str]:
    """
    Inverse of encode_cursor.

    Raises:
        ValueError: If the cursor was not produced by encode_cursor
    """
    try:
        payload = json.loads(base64.urlsafe_b64decode(cursor.encode()).decode())
        return parse_iso(payload["d"]), str(payload["i"])
    except (ValueError, KeyError, TypeError) as e:
        raise ValueError(f"Invalid cursor: {cursor!r}") from e


def _sort_key(transaction: Transaction) -> tuple[datetime, str]:
    return (to_utc(transaction.date), transaction.id)


class TransactionStore:
    """Create, edit, delete and range-query sales."""

    def __init__(self, postgres: PostgresClient, max_filter_values: int = DEFAULT_MAX_FILTER_VALUES):
        if max_filter_values < 1:
            raise ValueError("max_filter_values must be at least 1")
        self.postgres = postgres
        self.max_filter_values = max_filter_values

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def create(self, data: NewTransaction, commission_rate: Decimal) -> Transaction:
        """
        Persist a new sale with its commission snapshot.

        The date is stamped by the database. The rate is whatever the caller
        passes (normally the current system setting) and is stored alongside
        the computed amounts; later settings changes never touch it.

        Args:
            data: Validated sale
            commission_rate: Fraction (0-1) to snapshot

        Raises:
            InvalidRateError: If commission_rate is outside 0-1
            WriteError: If the insert fails
        """
        rate = normalize_rate(commission_rate)
        split = compute_split(data.total, rate)

        try:
            row = self.postgres.execute_returning(
                """
                INSERT INTO transactions (
                    id, barber_id, service_ids, total, method,
                    commission_rate, commission_amount, revenue_amount,
                    date, registered_by
                ) VALUES (
                    %(id)s, %(barber_id)s, %(service_ids)s, %(total)s, %(method)s,
                    %(commission_rate)s, %(commission_amount)s, %(revenue_amount)s,
                    now(), %(registered_by)s
                )
                RETURNING *
                """,
                {
                    "id": uuid4().hex,
                    "barber_id": data.barber_id,
                    "service_ids": list(data.service_ids),
                    "total": data.total,
                    "method": data.method.value,
                    "commission_rate": rate,
                    "commission_amount": split.commission_amount,
                    "revenue_amount": split.revenue_amount,
                    "registered_by": data.registered_by,
                }
            )[0]
        except psycopg2.Error as e:
            raise WriteError(f"Could not record sale: {e}") from e

        transaction = Transaction.model_validate(row)
        logger.info(
            f"Transaction {transaction.id} recorded: barber={transaction.barber_id} "
            f"total={transaction.total} method={transaction.method}"
        )
        return transaction

    def update(self, transaction_id: str, data: TransactionUpdate) -> Transaction:
        """
        Replace the fields set on ``data``; leave everything else alone.

        Raises:
            NotFoundError: If the transaction does not exist
            WriteError: If the update fails
        """
        updates = {
            k: v for k, v in data.model_dump(exclude_none=True).items()
            if k in _UPDATABLE_COLUMNS
        }
        if "method" in updates and hasattr(updates["method"], "value"):
            updates["method"] = updates["method"].value

        if not updates:
            current = self.get_by_id(transaction_id)
            if current is None:
                raise NotFoundError("transaction", transaction_id)
            return current

        set_parts = [f"{column} = %({column})s" for column in updates]
        params = dict(updates)
        params["id"] = transaction_id

        try:
            rows = self.postgres.execute_returning(
                f"""
                UPDATE transactions
                SET {', '.join(set_parts)}
                WHERE id = %(id)s
                RETURNING *
                """,
                params
            )
        except psycopg2.Error as e:
            raise WriteError(f"Could not update transaction {transaction_id}: {e}") from e

        if not rows:
            raise NotFoundError("transaction", transaction_id)

        logger.info(f"Transaction {transaction_id} updated: {sorted(updates)}")
        return Transaction.model_validate(rows[0])

    def delete(self, transaction_id: str) -> None:
        """
        Remove a sale.

        Raises:
            NotFoundError: If the transaction does not exist
            WriteError: If the delete fails
        """
        try:
            rows = self.postgres.execute_returning(
                "DELETE FROM transactions WHERE id = %(id)s RETURNING id",
                {"id": transaction_id}
            )
        except psycopg2.Error as e:
            raise WriteError(f"Could not delete transaction {transaction_id}: {e}") from e

        if not rows:
            raise NotFoundError("transaction", transaction_id)

        logger.info(f"Transaction {transaction_id} deleted")

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_by_id(self, transaction_id: str) -> Transaction | None:
        """Get transaction by ID, None if it does not exist."""
        row = self.postgres.execute_single(
            "SELECT * FROM transactions WHERE id = %(id)s",
            {"id": transaction_id}
        )

        if row is None:
            return None

        return Transaction.model_validate(row)

    def query_range(
        self,
        start: datetime,
        end: datetime,
        id_filter: Collection[str] | None = None,
        cursor: str | None = None,
        page_size: int | None = None,
    ) -> TransactionPage:
        """
        Transactions dated within [start, end], newest first.

        Args:
            start: Inclusive lower bound (aware)
            end: Inclusive upper bound (aware)
            id_filter: Restrict to these barber ids. An empty collection
                matches nothing and skips the database entirely.
            cursor: next_cursor from a previous page; None for the first page
            page_size: Maximum items; None returns every match (exports only)

        Raises:
            ValueError: On a malformed cursor or non-positive page_size
        """
        if page_size is not None and page_size < 1:
            raise ValueError("page_size must be at least 1")

        if id_filter is not None and len(id_filter) == 0:
            return TransactionPage(items=[], next_cursor=None)

        after = decode_cursor(cursor) if cursor else None
        limit = page_size + 1 if page_size is not None else None

        if id_filter is None:
            chunks: list[list[str] | None] = [None]
        else:
            ids = sorted(set(id_filter))
            chunks = [
                ids[i:i + self.max_filter_values]
                for i in range(0, len(ids), self.max_filter_values)
            ]

        results = [
            self._query_chunk(to_utc(start), to_utc(end), chunk, after, limit)
            for chunk in chunks
        ]
        if len(results) == 1:
            merged = results[0]
        else:
            merged = sorted(
                (item for chunk in results for item in chunk),
                key=_sort_key,
                reverse=True,
            )

        if page_size is None or len(merged) <= page_size:
            return TransactionPage(items=merged, next_cursor=None)

        items = merged[:page_size]
        return TransactionPage(items=items, next_cursor=encode_cursor(items[-1]))

    def _query_chunk(
        self,
        start: datetime,
        end: datetime,
        barber_ids: list[str] | None,
        after: tuple[datetime, str] | None,
        limit: int | None,
    ) -> list[Transaction]:
        """One SELECT for one slice of the id filter."""
        conditions = ["date >= %(start)s", "date <= %(end)s"]
        params: dict = {"start": start, "end": end}

        if barber_ids is not None:
            conditions.append("barber_id = ANY(%(barber_ids)s)")
            params["barber_ids"] = barber_ids

        if after is not None:
            conditions.append("(date, id) < (%(cursor_date)s, %(cursor_id)s)")
            params["cursor_date"], params["cursor_id"] = after

        query = f"""
            SELECT * FROM transactions
            WHERE {' AND '.join(conditions)}
            ORDER BY date DESC, id DESC
        """
        if limit is not None:
            query += " LIMIT %(limit)s"
            params["limit"] = limit

        rows = self.postgres.execute(query, params)
        return [Transaction.model_validate(row) for row in rows]
