"""Exception classes for the transaction query and seeding layer.

Every error carries a machine-checkable ``kind`` and a human-readable
``detail``.  The API layer maps each class to an HTTP status code; callers
outside HTTP can branch on ``kind`` directly.
"""


class TransactionError(Exception):
    """Base exception for the transaction core."""

    kind = "transaction_error"
    status_code = 500

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail

    def to_dict(self) -> dict:
        return {"kind": self.kind, "detail": self.detail}


class InvalidMonthError(TransactionError, ValueError):
    """Month string is not one of the twelve canonical month names."""

    kind = "invalid_month"
    status_code = 400

    def __init__(self, value) -> None:
        super().__init__(f"Invalid month value: {value}")
        self.value = value


class StoreUnavailableError(TransactionError):
    """The database file is missing or cannot be opened."""

    kind = "store_unavailable"
    status_code = 503


class StoreOperationError(TransactionError):
    """A query or aggregation failed inside the database."""

    kind = "store_operation_failed"
    status_code = 500


class SeedSourceError(TransactionError):
    """The seed feed could not be fetched or returned malformed data."""

    kind = "seed_source_unreachable"
    status_code = 502


class SeedWriteError(TransactionError):
    """Replace-all failed after the fetch; the previous data set is kept."""

    kind = "partial_seed_failure"
    status_code = 500
