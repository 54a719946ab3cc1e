"""Record mapper — engine rows → typed domain records.

Lossy by policy: a row with any missing or unparseable required field is
dropped, never represented with a placeholder and never fatal to the query.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Any

import pyarrow as pa

from bulkfeed.datasets.schema import ColumnKind, DatasetSchema

logger = logging.getLogger(__name__)


def parse_time(value: Any) -> datetime | None:
    """ISO-8601 text or a native datetime → aware UTC datetime."""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return None
    if not isinstance(value, datetime):
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(result) else result


def parse_text(value: Any) -> str | None:
    return value if isinstance(value, str) else None


_PARSERS = {
    ColumnKind.ISO_TIME: parse_time,
    ColumnKind.TIMESTAMP: parse_time,
    ColumnKind.FLOAT: parse_float,
    ColumnKind.TEXT: parse_text,
}


def map_row(row: dict[str, Any], schema: DatasetSchema, record_type: type):
    """Build one record from a row, or None if any required field is unusable."""
    values = {}
    for column in schema.columns:
        parsed = _PARSERS[column.kind](row.get(column.name))
        if parsed is None:
            return None
        values[column.field] = parsed
    return record_type(**values)


def _python_rows(table: pa.Table) -> list[dict[str, Any]]:
    # Microsecond timestamps convert to plain datetimes (ns would need pandas)
    for index, field in enumerate(table.schema):
        if pa.types.is_timestamp(field.type) and field.type.unit == "ns":
            table = table.set_column(
                index, field.name, table.column(index).cast(pa.timestamp("us", tz=field.type.tz), safe=False)
            )
    return table.to_pylist()


def map_records(table: pa.Table, schema: DatasetSchema, record_type: type) -> list:
    """Map every row of a query result, preserving order and dropping bad rows."""
    records = []
    for row in _python_rows(table):
        record = map_row(row, schema, record_type)
        if record is not None:
            records.append(record)

    dropped = table.num_rows - len(records)
    if dropped:
        logger.debug("Dropped %d of %d rows with missing or invalid fields", dropped, table.num_rows)
    return records
