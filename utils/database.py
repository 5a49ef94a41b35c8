"""Database utilities for the transaction store.

Provides reusable functions for:
- Opening SQLite connections with the standard pragmas
- Creating the ``transactions`` schema and its month index
- Bulk inserting transaction records (caller controls the transaction)
- Small helpers for counts and schema introspection
"""

import logging
import sqlite3
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable

logger = logging.getLogger(__name__)

TRANSACTIONS_TABLE = "transactions"

# seq gives the store's natural order; sale_month is derived from
# date_of_sale (in UTC) when a row is written.
SCHEMA_SQL = """
    CREATE TABLE IF NOT EXISTS transactions (
        seq          INTEGER PRIMARY KEY AUTOINCREMENT,
        id           TEXT NOT NULL UNIQUE,
        title        TEXT NOT NULL DEFAULT '',
        description  TEXT NOT NULL DEFAULT '',
        price        REAL NOT NULL CHECK (price >= 0),
        category     TEXT,
        sold         INTEGER NOT NULL DEFAULT 0 CHECK (sold IN (0, 1)),
        date_of_sale TEXT NOT NULL,
        sale_month   INTEGER NOT NULL CHECK (sale_month BETWEEN 1 AND 12),
        image        TEXT
    );
    CREATE INDEX IF NOT EXISTS idx_transactions_sale_month
        ON transactions (sale_month);
"""

_INSERT_SQL = """
    INSERT INTO transactions
        (id, title, description, price, category, sold,
         date_of_sale, sale_month, image)
    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
"""


def init_pragmas(conn: sqlite3.Connection) -> None:
    """Initialize SQLite pragmas for concurrent readers and one writer.

    - WAL mode so readers keep a consistent snapshot while a seed runs
    - NORMAL synchronous mode for speed without data loss
    - busy_timeout so a reader waits instead of failing on a locked file

    Args:
        conn: SQLite connection to configure
    """
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA synchronous=NORMAL")
    conn.execute("PRAGMA busy_timeout=5000")


def _casefold(value: Any) -> Any:
    return value.casefold() if isinstance(value, str) else value


def register_functions(conn: sqlite3.Connection) -> None:
    """Register ``casefold(text)`` so searches fold non-ASCII letters too."""
    conn.create_function("casefold", 1, _casefold, deterministic=True)


def connect(db_path: Path, read_only: bool = False) -> sqlite3.Connection:
    """Open a SQLite connection with ``sqlite3.Row`` rows and standard pragmas.

    Args:
        db_path: Path to the SQLite database file.
        read_only: If True, open in read-only mode via URI (no WAL pragma).
    """
    if read_only:
        uri = f"file:{db_path}?mode=ro"
        conn = sqlite3.connect(uri, uri=True, check_same_thread=False,
                               timeout=10)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA busy_timeout=5000")
        register_functions(conn)
        return conn
    conn = sqlite3.connect(str(db_path), check_same_thread=False, timeout=10)
    conn.row_factory = sqlite3.Row
    init_pragmas(conn)
    register_functions(conn)
    return conn


def init_schema(conn: sqlite3.Connection) -> None:
    """Create the transactions table and index if they do not exist."""
    conn.executescript(SCHEMA_SQL)
    conn.commit()


def normalize_sale_date(value: Any) -> tuple[str, int]:
    """Return ``(iso_string, month)`` for a sale date, normalized to UTC.

    Accepts a ``datetime``, a ``date`` or an ISO 8601 string.  Naive values
    are taken to be UTC already.

    Raises:
        ValueError: If *value* cannot be interpreted as a date.
    """
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        moment = datetime(value.year, value.month, value.day)
    else:
        raise ValueError(f"Unsupported sale date: {value!r}")
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    else:
        moment = moment.astimezone(timezone.utc)
    return moment.isoformat(), moment.month


def _to_row(record: Dict[str, Any]) -> tuple:
    date_of_sale, sale_month = normalize_sale_date(record["date_of_sale"])
    return (
        record["id"],
        record.get("title") or "",
        record.get("description") or "",
        float(record["price"]),
        record.get("category"),
        1 if record.get("sold") else 0,
        date_of_sale,
        sale_month,
        record.get("image"),
    )


def insert_transactions(conn: sqlite3.Connection,
                        records: Iterable[Dict[str, Any]]) -> int:
    """Insert transaction records without committing.

    Each record is a dict with keys ``id``, ``title``, ``description``,
    ``price``, ``category``, ``sold``, ``date_of_sale`` and ``image``.
    The caller owns the surrounding transaction, so a replace-all can run
    the delete and this insert as one unit.

    Returns:
        Number of rows inserted
    """
    rows = [_to_row(r) for r in records]
    conn.executemany(_INSERT_SQL, rows)
    return len(rows)


def delete_all_transactions(conn: sqlite3.Connection) -> int:
    """Delete every transaction without committing; return the count removed."""
    cursor = conn.execute(f"DELETE FROM {TRANSACTIONS_TABLE}")
    return cursor.rowcount


def get_table_count(conn: sqlite3.Connection, table: str = TRANSACTIONS_TABLE) -> int:
    """Get row count for a table.

    Args:
        conn: SQLite connection
        table: Table name

    Returns:
        Number of rows in table
    """
    result = conn.execute(f"SELECT COUNT(*) AS cnt FROM {table}").fetchone()
    return result[0] if result else 0


def table_exists(conn: sqlite3.Connection, table: str) -> bool:
    """Check if a table exists in the database."""
    cursor = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
        (table,)
    )
    return cursor.fetchone() is not None
