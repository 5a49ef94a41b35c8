"""Replace-all seeding of the transaction store from a remote JSON feed.

The feed is a JSON array of objects with ``title``, ``description``,
``price``, ``category``, optional ``sold``, ``dateOfSale`` and ``image``.
Every item is validated before the store is touched.  The delete and the
bulk insert then run in one SQLite transaction, so a failed write leaves the
previous data set in place.
"""

from __future__ import annotations

import logging
import math
import sqlite3
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import requests
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from utils.database import delete_all_transactions, insert_transactions
from utils.errors import SeedSourceError, SeedWriteError
from utils.http import DEFAULT_TIMEOUT, SessionManager, fetch_json

logger = logging.getLogger(__name__)

DEFAULT_SOURCE_URL = "https://s3.amazonaws.com/roxiler.com/product_transaction.json"


class SourceTransaction(BaseModel):
    """One item of the seed feed, coerced to store types."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = ""
    description: str = ""
    price: float = Field(..., ge=0)
    category: str | None = None
    sold: bool = False
    date_of_sale: datetime = Field(..., alias="dateOfSale")
    image: str | None = None

    @field_validator("title", "description", mode="before")
    @classmethod
    def _null_text_is_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("sold", mode="before")
    @classmethod
    def _missing_sold_is_false(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("price")
    @classmethod
    def _finite_price(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("price must be a finite number")
        return value

    def to_record(self) -> dict[str, Any]:
        """Return an insertable record with a freshly assigned id."""
        return {
            "id": str(uuid.uuid4()),
            "title": self.title,
            "description": self.description,
            "price": self.price,
            "category": self.category,
            "sold": self.sold,
            "date_of_sale": self.date_of_sale,
            "image": self.image,
        }


_SOURCE_ITEMS = TypeAdapter(list[SourceTransaction])


@dataclass
class SeedResult:
    initialized_count: int
    deleted_count: int = 0


def fetch_source_items(
    source_url: str,
    session: requests.Session | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> Any:
    """Fetch the raw feed body.

    Raises:
        SeedSourceError: Network failure, non-2xx status or invalid JSON.
    """
    try:
        if session is not None:
            return fetch_json(session, source_url, timeout=timeout)
        with SessionManager() as manager:
            return fetch_json(manager.session, source_url, timeout=timeout)
    except (requests.RequestException, ValueError) as exc:
        logger.error("Error fetching seed data from %s: %s", source_url, exc)
        raise SeedSourceError(
            f"Failed to fetch data from the source: {exc}"
        ) from exc


def parse_source_items(items: Any) -> list[dict[str, Any]]:
    """Validate the feed body and return insertable records.

    Raises:
        SeedSourceError: Body is not a list, or any item is malformed.
    """
    try:
        parsed = _SOURCE_ITEMS.validate_python(items)
    except ValidationError as exc:
        raise SeedSourceError(
            f"Malformed seed data ({exc.error_count()} errors): "
            f"{exc.errors()[0]['loc']} {exc.errors()[0]['msg']}"
        ) from exc
    return [item.to_record() for item in parsed]


def replace_all(conn: sqlite3.Connection, records: list[dict[str, Any]]) -> SeedResult:
    """Delete every transaction and insert *records* in one transaction.

    Raises:
        SeedWriteError: The delete or insert failed; nothing was changed.
    """
    try:
        with conn:
            deleted = delete_all_transactions(conn)
            logger.info("%d records deleted from the database.", deleted)
            inserted = insert_transactions(conn, records)
    except (sqlite3.Error, ValueError) as exc:
        logger.error("Replace-all failed, rolled back: %s", exc)
        raise SeedWriteError(f"Error initializing database: {exc}") from exc
    logger.info("%d records inserted successfully.", inserted)
    return SeedResult(initialized_count=inserted, deleted_count=deleted)


def initialize_transactions(
    conn: sqlite3.Connection,
    source_url: str = DEFAULT_SOURCE_URL,
    session: requests.Session | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> SeedResult:
    """Fetch the seed feed and replace the whole transaction store with it."""
    logger.info("Initialization started from %s", source_url)
    items = fetch_source_items(source_url, session=session, timeout=timeout)
    records = parse_source_items(items)
    logger.info("Fetched %d records from the data source.", len(records))
    return replace_all(conn, records)
