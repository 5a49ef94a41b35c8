"""Month-name resolution shared by every month-filtered query.

Only the twelve full English month names are accepted, spelled and
capitalized exactly.  The table is fixed so results never depend on the
host locale.
"""

from utils.errors import InvalidMonthError

MONTH_NAMES: tuple[str, ...] = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

_MONTH_INDEX: dict[str, int] = {name: i for i, name in enumerate(MONTH_NAMES)}


def resolve_month(name) -> int:
    """Return the zero-based month index (0 = January) for *name*.

    Raises:
        InvalidMonthError: If *name* is not a canonical month name.
    """
    if not isinstance(name, str):
        raise InvalidMonthError(name)
    try:
        return _MONTH_INDEX[name]
    except KeyError:
        raise InvalidMonthError(name) from None


def month_number(name) -> int:
    """Return the 1-based calendar month for *name* (1 = January)."""
    return resolve_month(name) + 1
