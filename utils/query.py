"""Shared SQL query builder utilities for the transaction routes.

Provides the WHERE clause used by the list endpoint and every aggregation,
plus the pagination arithmetic the list endpoint reports back to clients.
"""

from typing import Any

LIKE_ESCAPE = "\\"

# Columns the free-text search looks at.
SEARCH_COLUMNS = ("title", "description")

DEFAULT_ORDER = "ORDER BY seq ASC"


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so *term* matches literally.

    >>> escape_like("50%_off")
    '50\\\\%\\\\_off'
    """
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def build_where_clause(
    sale_month: int | None = None,
    search: str | None = None,
) -> tuple[str, list[Any]]:
    """Build a SQL WHERE clause from filter parameters.

    Args:
        sale_month: Calendar month 1-12 to match, in any year.
        search: Case-insensitive substring matched against title OR
            description.  Empty or None matches everything.

    Returns:
        Tuple of (where_clause_string, params_list). The where_clause_string
        starts with "WHERE " if any conditions exist, or is "" if none.
    """
    conditions: list[str] = []
    params: list[Any] = []

    if sale_month is not None:
        conditions.append("sale_month = ?")
        params.append(sale_month)

    if search:
        pattern = f"%{escape_like(search.casefold())}%"
        # casefold() is registered on every connection by utils.database.connect
        conditions.append(
            "(" + " OR ".join(
                f"casefold({col}) LIKE ? ESCAPE '{LIKE_ESCAPE}'"
                for col in SEARCH_COLUMNS
            ) + ")"
        )
        params.extend([pattern] * len(SEARCH_COLUMNS))

    where = "WHERE " + " AND ".join(conditions) if conditions else ""
    return where, params


def page_offset(page: int, per_page: int) -> int:
    """Return the number of rows to skip for a 1-based *page*.

    Raises:
        ValueError: If page or per_page is below 1.
    """
    if page < 1:
        raise ValueError(f"page must be >= 1, got {page}")
    if per_page < 1:
        raise ValueError(f"perPage must be >= 1, got {per_page}")
    return (page - 1) * per_page


def page_count(total: int, per_page: int) -> int:
    """Return the number of pages needed for *total* rows (at least 1)."""
    return max(1, (total + per_page - 1) // per_page)
