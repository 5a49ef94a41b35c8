"""Month-filtered transaction queries and aggregations.

All four read operations match a calendar month in any year.  The month name
is resolved before the store is touched, so an invalid month never reaches
SQLite.  Results are plain dataclasses; the API layer turns them into
response models.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from utils.errors import StoreOperationError
from utils.months import month_number
from utils.query import DEFAULT_ORDER, build_where_clause, page_count, page_offset

logger = logging.getLogger(__name__)

PRICE_BOUNDARIES: tuple[int, ...] = (0, 100, 200, 300, 400, 500, 600, 700, 800, 900, 1000)
OVERFLOW_LABEL = f"{PRICE_BOUNDARIES[-1]}-above"

_SELECT_COLUMNS = """
    id, title, description, price, category, sold, date_of_sale, image
"""


# ── Result types ──────────────────────────────────────────────────────────────

@dataclass
class Transaction:
    id: str
    title: str
    description: str
    price: float
    category: str | None
    sold: bool
    date_of_sale: str
    image: str | None = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Transaction":
        d = dict(row)
        d["sold"] = bool(d["sold"])
        return cls(**d)


@dataclass
class TransactionPage:
    """One page of matches plus the count of every match."""

    items: list[Transaction]
    total: int
    page: int
    per_page: int

    @property
    def page_count(self) -> int:
        return page_count(self.total, self.per_page)


@dataclass
class Statistics:
    total_sales: float = 0.0
    total_sold_items: int = 0
    total_not_sold_items: int = 0

    @property
    def total_items(self) -> int:
        return self.total_sold_items + self.total_not_sold_items


@dataclass
class PriceBucket:
    """Count of transactions with ``lower_bound <= price < upper_bound``.

    ``upper_bound`` is None for the overflow bucket.
    """

    label: str
    lower_bound: float
    upper_bound: float | None
    count: int = 0


@dataclass
class SoldGroup:
    sold: bool
    count: int


# ── Helpers ───────────────────────────────────────────────────────────────────

@contextmanager
def _store_errors(operation: str) -> Iterator[None]:
    """Translate sqlite3 errors raised inside the block into StoreOperationError."""
    try:
        yield
    except sqlite3.Error as exc:
        logger.error("%s failed: %s", operation, exc)
        raise StoreOperationError(f"Error {operation}: {exc}") from exc


def empty_buckets() -> list[PriceBucket]:
    """Return every configured price bucket with a zero count, overflow last."""
    buckets = [
        PriceBucket(label=f"{lo}-{hi}", lower_bound=lo, upper_bound=hi)
        for lo, hi in zip(PRICE_BOUNDARIES, PRICE_BOUNDARIES[1:])
    ]
    buckets.append(
        PriceBucket(label=OVERFLOW_LABEL, lower_bound=PRICE_BOUNDARIES[-1],
                    upper_bound=None)
    )
    return buckets


def _bucket_case_sql() -> str:
    """CASE expression mapping price to its bucket index (overflow last)."""
    whens = [
        f"WHEN price < {hi} THEN {i}"
        for i, hi in enumerate(PRICE_BOUNDARIES[1:])
    ]
    return "CASE " + " ".join(whens) + f" ELSE {len(PRICE_BOUNDARIES) - 1} END"


# ── Query engine ──────────────────────────────────────────────────────────────

def query_transactions(
    conn: sqlite3.Connection,
    month: str,
    page: int = 1,
    per_page: int = 10,
    search: str | None = "",
) -> TransactionPage:
    """Return one page of transactions sold in *month* (any year).

    Matches title OR description against *search*, case-insensitively.
    ``total`` comes from a separate COUNT over the same predicate, so it does
    not depend on the page requested.

    Raises:
        InvalidMonthError: *month* is not a canonical month name.
        ValueError: *page* or *per_page* is below 1.
        StoreOperationError: The database query failed.
    """
    sale_month = month_number(month)
    offset = page_offset(page, per_page)
    where, params = build_where_clause(sale_month=sale_month, search=search)
    logger.debug(
        "query month=%s page=%d perPage=%d search=%r",
        month, page, per_page, search,
    )

    with _store_errors("fetching transactions"):
        rows = conn.execute(
            f"SELECT {_SELECT_COLUMNS} FROM transactions {where} "
            f"{DEFAULT_ORDER} LIMIT ? OFFSET ?",
            params + [per_page, offset],
        ).fetchall()
        total = conn.execute(
            f"SELECT COUNT(*) FROM transactions {where}", params
        ).fetchone()[0]

    items = [Transaction.from_row(r) for r in rows]
    logger.debug("fetched %d transactions, total=%d", len(items), total)
    return TransactionPage(items=items, total=total, page=page, per_page=per_page)


# ── Aggregations ──────────────────────────────────────────────────────────────

def compute_statistics(conn: sqlite3.Connection, month: str) -> Statistics:
    """Total sales plus sold / not-sold counts for *month* across all years."""
    sale_month = month_number(month)
    where, params = build_where_clause(sale_month=sale_month)

    with _store_errors("fetching statistics"):
        row = conn.execute(
            f"""
            SELECT COALESCE(SUM(price), 0) AS total_sales,
                   COALESCE(SUM(sold), 0)  AS sold_count,
                   COUNT(*)                AS row_count
            FROM transactions {where}
            """,
            params,
        ).fetchone()

    sold = int(row["sold_count"])
    stats = Statistics(
        total_sales=float(row["total_sales"]),
        total_sold_items=sold,
        total_not_sold_items=int(row["row_count"]) - sold,
    )
    logger.debug("statistics month=%s %s", month, stats)
    return stats


def bar_chart(conn: sqlite3.Connection, month: str) -> list[PriceBucket]:
    """Histogram of prices for *month*, one entry per configured bucket."""
    sale_month = month_number(month)
    where, params = build_where_clause(sale_month=sale_month)

    with _store_errors("fetching bar chart data"):
        rows = conn.execute(
            f"""
            SELECT {_bucket_case_sql()} AS bucket, COUNT(*) AS count
            FROM transactions {where}
            GROUP BY bucket
            """,
            params,
        ).fetchall()

    buckets = empty_buckets()
    for r in rows:
        buckets[r["bucket"]].count = r["count"]
    return buckets


def pie_chart(conn: sqlite3.Connection, month: str) -> list[SoldGroup]:
    """Count of sold and unsold transactions for *month*.

    Only groups that actually occur are returned.
    """
    sale_month = month_number(month)
    where, params = build_where_clause(sale_month=sale_month)

    with _store_errors("fetching pie chart data"):
        rows = conn.execute(
            f"""
            SELECT sold, COUNT(*) AS count
            FROM transactions {where}
            GROUP BY sold
            ORDER BY sold DESC
            """,
            params,
        ).fetchall()

    return [SoldGroup(sold=bool(r["sold"]), count=r["count"]) for r in rows]
