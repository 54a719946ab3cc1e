"""Query engine — projected, time-filtered, sorted, limited artifact scans.

Stages, in order:
1. Project the schema's columns (others are never materialized)
2. Filter time >= bound, pushed down into the Parquet scan
3. Sort ascending by time (ties in no particular order)
4. Limit to ``max_results`` rows

The bound is expressed in the artifact's own time representation: ISO-8601
text columns compare lexicographically against the bound rendered in the same
format, timestamp columns compare against the bound scaled to their unit.
"""

import logging
from pathlib import Path

import pyarrow as pa
import pyarrow.dataset as ds

from bulkfeed.datasets.partitions import ms_to_datetime
from bulkfeed.datasets.schema import ColumnKind, DatasetSchema
from bulkfeed.errors import StorageError

logger = logging.getLogger(__name__)

_MS_PER_UNIT = {"s": 1000}
_UNITS_PER_MS = {"ms": 1, "us": 1000, "ns": 1_000_000}


def iso_bound(from_time_ms: int) -> str:
    """Bound in the USGS text format: YYYY-MM-DDTHH:MM:SS.mmmZ."""
    dt = ms_to_datetime(from_time_ms)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def timestamp_bound(from_time_ms: int, arrow_type: pa.TimestampType) -> pa.Scalar:
    """Bound as a scalar of the column's own timestamp type.

    For second resolution the bound rounds up, keeping the filter inclusive
    and exact: t_s >= ceil(ms / 1000) iff t_s * 1000 >= ms.
    """
    unit = arrow_type.unit
    if unit in _MS_PER_UNIT:
        value = -(-from_time_ms // _MS_PER_UNIT[unit])
    else:
        value = from_time_ms * _UNITS_PER_MS[unit]
    return pa.scalar(value, type=pa.int64()).cast(arrow_type)


def time_filter(schema: DatasetSchema, arrow_schema: pa.Schema, from_time_ms: int) -> ds.Expression:
    """Filter expression ``time >= from_time_ms`` in the artifact's native unit."""
    field = ds.field(schema.time_column)
    if schema.time_kind is ColumnKind.ISO_TIME:
        return field >= iso_bound(from_time_ms)
    arrow_type = arrow_schema.field(schema.time_column).type
    return field >= timestamp_bound(from_time_ms, arrow_type)


def open_artifact(path: Path, schema: DatasetSchema) -> ds.Dataset:
    """Open an artifact lazily and validate it against the schema.

    Raises:
        StorageError: If the file is missing, unreadable or not Parquet
        SchemaMismatchError: If required columns are absent or mistyped
    """
    try:
        dataset = ds.dataset(str(path), format="parquet")
    except (OSError, pa.ArrowException) as e:
        raise StorageError(f"Cannot open artifact {path}: {e}") from e
    schema.validate(dataset.schema)
    return dataset


def query_artifact(
    path: Path,
    schema: DatasetSchema,
    from_time_ms: int,
    max_results: int,
) -> pa.Table:
    """Run projection, filter, sort and limit over one artifact.

    Args:
        path: Parquet artifact
        schema: Dataset schema (columns to project, time column)
        from_time_ms: Inclusive lower bound, epoch milliseconds
        max_results: Maximum rows returned (0 yields an empty table)

    Returns:
        Table with the schema's columns, ascending by time
    """
    path = Path(path)
    dataset = open_artifact(path, schema)
    if max_results == 0:
        return dataset.schema.empty_table().select(schema.names)

    expr = time_filter(schema, dataset.schema, from_time_ms)
    try:
        table = dataset.to_table(columns=schema.names, filter=expr)
    except (OSError, pa.ArrowException) as e:
        raise StorageError(f"Cannot scan artifact {path}: {e}") from e

    matched = table.num_rows
    table = table.sort_by(schema.time_column).slice(0, max_results)
    logger.debug("%s: %d rows matched, returning %d", path.name, matched, table.num_rows)
    return table
