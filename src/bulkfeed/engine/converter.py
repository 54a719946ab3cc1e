"""Format converter — raw upstream payload → Parquet artifact.

Runs once per partition per cache lifetime. The artifact keeps every row and
every column of the payload; only the declared columns get a fixed type.

CSV payloads are parsed with pandas. Declared columns use the static schema;
the types of all other columns are inferred from the first
``schema_infer_rows`` rows (integers widened to float64 so that later blank
cells still fit). A later row that does not fit an inferred type fails the
conversion.
"""

import logging
import os
from pathlib import Path
from uuid import uuid4

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from bulkfeed.config import settings
from bulkfeed.datasets.base import Dataset, RawFormat
from bulkfeed.datasets.schema import ColumnKind, DatasetSchema
from bulkfeed.errors import ConversionError

logger = logging.getLogger(__name__)

_PANDAS_DTYPES = {
    ColumnKind.TEXT: "string",
    ColumnKind.ISO_TIME: "string",
    ColumnKind.FLOAT: "float64",
}


def write_artifact(table: pa.Table, artifact_path: Path, compression: str | None = None) -> Path:
    """Write a table as Parquet, atomically.

    The file is written under a unique temporary name and renamed into place,
    so readers never observe a partial artifact and concurrent writers simply
    replace each other's complete file.
    """
    codec = compression or settings.artifact_compression
    artifact_path = Path(artifact_path)
    artifact_path.parent.mkdir(parents=True, exist_ok=True)
    tmp = artifact_path.with_name(f".{artifact_path.name}.{uuid4().hex}.tmp")
    try:
        pq.write_table(
            table,
            tmp,
            compression=codec,
            use_dictionary=True,  # Efficient for repeated values
            write_statistics=True,  # Enables row-group pruning on the time filter
        )
        os.replace(tmp, artifact_path)
    finally:
        tmp.unlink(missing_ok=True)
    return artifact_path


def infer_csv_dtypes(raw_path: Path, schema: DatasetSchema, infer_rows: int) -> dict[str, str]:
    """Column dtypes for a CSV payload: declared kinds, else prefix inference."""
    sample = pd.read_csv(raw_path, nrows=infer_rows)

    missing = [name for name in schema.names if name not in sample.columns]
    if missing:
        raise ConversionError(f"CSV payload {raw_path} lacks columns {missing}")

    dtypes: dict[str, str] = {}
    for name, dtype in sample.dtypes.items():
        if name in schema.names:
            dtypes[name] = _PANDAS_DTYPES[schema.column(name).kind]
        elif pd.api.types.is_integer_dtype(dtype):
            dtypes[name] = "float64"
        elif pd.api.types.is_float_dtype(dtype):
            dtypes[name] = "float64"
        elif pd.api.types.is_bool_dtype(dtype):
            dtypes[name] = "boolean"
        else:
            dtypes[name] = "string"
    return dtypes


def convert_csv(
    raw_path: Path,
    artifact_path: Path,
    schema: DatasetSchema,
    infer_rows: int | None = None,
) -> Path:
    """Convert a CSV payload with a header row into a Parquet artifact.

    Raises:
        ConversionError: If the payload is empty, malformed, lacks a declared
            column, or a value does not fit its column type
    """
    infer_rows = infer_rows or settings.schema_infer_rows
    try:
        dtypes = infer_csv_dtypes(raw_path, schema, infer_rows)
        frame = pd.read_csv(raw_path, dtype=dtypes, float_precision="round_trip")
        table = pa.Table.from_pandas(frame, preserve_index=False)
    except ConversionError:
        raise
    except (pd.errors.ParserError, pd.errors.EmptyDataError, OSError, ValueError,
            TypeError, UnicodeDecodeError, pa.ArrowException) as e:
        raise ConversionError(f"Cannot parse CSV payload {raw_path}: {e}") from e

    logger.info("Parsed %d rows x %d columns from %s", table.num_rows, table.num_columns, raw_path)
    return write_artifact(table, artifact_path)


def convert_parquet(raw_path: Path, artifact_path: Path, schema: DatasetSchema) -> Path:
    """Normalize an upstream Parquet payload into an artifact.

    Declared float columns are cast to float64; declared timestamp columns
    keep their native unit but must be timestamps.

    Raises:
        ConversionError: If the payload is unreadable, lacks a declared column
            or a declared column has an incompatible type
    """
    try:
        table = pq.read_table(raw_path)
    except (OSError, pa.ArrowException) as e:
        raise ConversionError(f"Cannot read Parquet payload {raw_path}: {e}") from e

    missing = [name for name in schema.names if name not in table.column_names]
    if missing:
        raise ConversionError(f"Parquet payload {raw_path} lacks columns {missing}")

    for c in schema.columns:
        index = table.column_names.index(c.name)
        column = table.column(index)
        if c.kind is ColumnKind.FLOAT and not pa.types.is_float64(column.type):
            try:
                table = table.set_column(index, c.name, column.cast(pa.float64()))
            except pa.ArrowException as e:
                raise ConversionError(f"Column {c.name!r} is not numeric: {e}") from e
        elif not c.kind.accepts(column.type):
            raise ConversionError(
                f"Column {c.name!r} has type {column.type}, expected {c.kind.value}"
            )

    logger.info("Read %d rows x %d columns from %s", table.num_rows, table.num_columns, raw_path)
    return write_artifact(table, artifact_path)


def convert(raw_path: Path, artifact_path: Path, dataset: Dataset) -> Path:
    """Convert a dataset's raw payload into its columnar artifact.

    Returns:
        ``artifact_path``
    """
    logger.info("Converting %s payload %s -> %s", dataset.raw_format.value, raw_path, artifact_path)
    if dataset.raw_format is RawFormat.CSV:
        return convert_csv(raw_path, artifact_path, dataset.schema)
    return convert_parquet(raw_path, artifact_path, dataset.schema)
