"""
Identifier escaping for the target dialect and quoting for source queries.

Target (MySQL) names are lower-cased for readability; names that are not
plain ``[a-z0-9_]`` after lower-casing (Oracle allows ``#`` and ``$``) are
wrapped in backticks.
"""

import re

PLAIN_MYSQL_NAME = re.compile(r"[a-z0-9_]+")


def escape_mysql_name(name: str) -> str:
    """
    Lower-case a table or column name and quote it if needed

    Args:
        name: Source table or column name

    Returns:
        Name usable unquoted in MySQL, or a backtick-quoted name

    Example:
        >>> escape_mysql_name("CUSTOMERS")
        'customers'
        >>> escape_mysql_name("ORDER#ITEMS")
        '`order#items`'
    """
    lower = name.lower()
    if PLAIN_MYSQL_NAME.fullmatch(lower):
        return lower
    return "`" + lower.replace("`", "``") + "`"


def quote_oracle_identifier(name: str) -> str:
    """
    Double-quote a source name for queries against Oracle

    Names come from the data dictionary in their stored case, so quoting
    them keeps case and special characters intact.
    """
    return '"' + name.replace('"', '""') + '"'
