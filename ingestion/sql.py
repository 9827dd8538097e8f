"""
SQL text for the import.

Identifiers (table, ordering column) cannot be bound, so they are stripped
down to [A-Za-z0-9_] before being interpolated. Values are always bound.
"""

import re

from core.exceptions import ConfigurationError

_UNSAFE_IDENT_RE = re.compile(r"[^A-Za-z0-9_]+")

ROW_COUNT_COLUMN = "ROW_COUNT"


def sanitize_sql_identifier(name: str, *, what: str = "identifier") -> str:
    cleaned = _UNSAFE_IDENT_RE.sub("", name or "")
    if not cleaned:
        raise ConfigurationError(
            f"Invalid {what}: {name!r} has no usable characters",
            context={"config_key": what, "value": name}
        )
    return cleaned


def build_row_count_query(table: str) -> str:
    return (
        f"SELECT COUNT(1) AS {ROW_COUNT_COLUMN} "
        f"FROM {sanitize_sql_identifier(table, what='table')}"
    )


def build_batch_query(table: str, order_by: str, limit: int) -> str:
    """
    One page of the source table in a deterministic order.

    The offset is left as the bound parameter :offset.
    """
    if int(limit) <= 0:
        raise ConfigurationError(
            "Batch size must be positive",
            context={"config_key": "batchSize", "value": limit}
        )
    return (
        f"SELECT * FROM {sanitize_sql_identifier(table, what='table')} "
        f"ORDER BY {sanitize_sql_identifier(order_by, what='orderBy')} ASC "
        f"LIMIT {int(limit)} "
        f"OFFSET :offset"
    )
