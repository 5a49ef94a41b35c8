"""
Database connection management for the API.

Provides a get_db() dependency that opens a per-request SQLite connection and
closes it after the response is sent.  Each app keeps its own database path
on ``app.state.db_path`` (set by create_app() from the db_path argument or
APP_DB_PATH, default: transactions.sqlite).
"""

import logging
import sqlite3
from collections.abc import Generator
from pathlib import Path

from fastapi import Request

from utils.database import connect, init_schema
from utils.errors import StoreUnavailableError

logger = logging.getLogger(__name__)


def get_db_path(request: Request) -> Path:
    """Return the database path of the app serving *request*."""
    return request.app.state.db_path


def ensure_database(db_path: Path) -> Path:
    """Create the database file and schema if they are missing.

    Returns:
        The path that was initialized.
    """
    path = Path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = connect(path)
    try:
        init_schema(conn)
    finally:
        conn.close()
    logger.info("Transaction store ready at %s", path)
    return path


def get_db(request: Request) -> Generator[sqlite3.Connection, None, None]:
    """FastAPI dependency: yield a SQLite connection, close on exit.

    Connections are opened with WAL mode, busy_timeout and NORMAL
    synchronous, so readers keep a consistent snapshot while a seed runs.
    Raises StoreUnavailableError (HTTP 503) if the database file is missing
    or cannot be opened.

    Usage in a route::

        @router.get("/example")
        def example(conn=Depends(get_db)):
            ...
    """
    db_path = get_db_path(request)
    if not db_path.exists():
        raise StoreUnavailableError(
            f"Database not found at '{db_path}'. "
            "Run 'python seed_transactions.py' or start the API to create it."
        )
    try:
        conn = connect(db_path)
    except sqlite3.Error as exc:
        raise StoreUnavailableError(f"Cannot open database '{db_path}': {exc}") from exc
    try:
        yield conn
    finally:
        conn.close()
