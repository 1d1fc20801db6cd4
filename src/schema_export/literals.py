"""
MySQL literal rendering for strings, decimals and timestamps.
"""

from datetime import datetime
from decimal import Decimal

NULL_LITERAL = "null"

# Value stored by the import when LOAD_FILE() cannot find a large object file
IMPORT_ERROR_SENTINEL = "iMpOrTeRrOr"

# Characters with a two-character escape in MySQL string literals; every
# other character is written as is.
_ESCAPES = str.maketrans({
    "'": "\\'",
    "\\": "\\\\",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
})


def mysql_string(value: str) -> str:
    """
    Render a string as a quoted MySQL literal

    Example:
        >>> mysql_string("O'Brien")
        "'O\\\\'Brien'"
    """
    return "'" + value.translate(_ESCAPES) + "'"


def decimal_text(value: Decimal) -> str:
    """
    Exact plain-notation rendering of a decimal

    No exponent, no grouping, trailing zeros kept: ``Decimal("1E-7")`` gives
    ``0.0000001`` and ``Decimal("1.50")`` gives ``1.50``.
    """
    return format(value, "f")


def mysql_timestamp(value: datetime) -> str:
    """
    Render a datetime as a quoted MySQL timestamp literal

    Nine fractional digits; the driver delivers microseconds, so the last
    three digits are always zero.
    """
    # strftime does not zero-pad years below 1000 on every platform
    return (
        f"'{value.year:04d}-{value.month:02d}-{value.day:02d} "
        f"{value.hour:02d}:{value.minute:02d}:{value.second:02d}."
        f"{value.microsecond:06d}000'"
    )
