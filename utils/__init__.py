"""Shared utilities for the transaction dashboard API.

The month-filtered query and aggregation core lives here so it can be used
without the HTTP layer (see ``seed_transactions.py``).
"""

# Errors
from utils.errors import (
    TransactionError,
    InvalidMonthError,
    StoreUnavailableError,
    StoreOperationError,
    SeedSourceError,
    SeedWriteError,
)

# Month resolution
from utils.months import MONTH_NAMES, resolve_month, month_number

# Database utilities
from utils.database import (
    connect,
    init_pragmas,
    register_functions,
    init_schema,
    insert_transactions,
    delete_all_transactions,
    get_table_count,
    table_exists,
)

# Query building
from utils.query import build_where_clause, escape_like, page_count, page_offset

# Queries and aggregations
from utils.transactions import (
    PRICE_BOUNDARIES,
    Transaction,
    TransactionPage,
    Statistics,
    PriceBucket,
    SoldGroup,
    query_transactions,
    compute_statistics,
    bar_chart,
    pie_chart,
)

# HTTP utilities
from utils.http import SessionManager, fetch_json

# Seeding
from utils.seeding import SeedResult, SourceTransaction, initialize_transactions

# Configuration
from utils.config import AppConfig

__all__ = [
    # Errors
    "TransactionError",
    "InvalidMonthError",
    "StoreUnavailableError",
    "StoreOperationError",
    "SeedSourceError",
    "SeedWriteError",
    # Months
    "MONTH_NAMES",
    "resolve_month",
    "month_number",
    # Database
    "connect",
    "init_pragmas",
    "register_functions",
    "init_schema",
    "insert_transactions",
    "delete_all_transactions",
    "get_table_count",
    "table_exists",
    # Query
    "build_where_clause",
    "escape_like",
    "page_count",
    "page_offset",
    # Transactions
    "PRICE_BOUNDARIES",
    "Transaction",
    "TransactionPage",
    "Statistics",
    "PriceBucket",
    "SoldGroup",
    "query_transactions",
    "compute_statistics",
    "bar_chart",
    "pie_chart",
    # HTTP
    "SessionManager",
    "fetch_json",
    # Seeding
    "SeedResult",
    "SourceTransaction",
    "initialize_transactions",
    # Config
    "AppConfig",
]
