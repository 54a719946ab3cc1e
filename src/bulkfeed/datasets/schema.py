"""Static column schemas for cached artifacts.

Each dataset declares the columns its domain record needs, the record field
each column feeds, and the column's logical kind. An artifact is validated
against the schema once, when it is opened, so a missing column or a wrong
type surfaces as a single SchemaMismatchError instead of failing deep inside a
scan.
"""

from dataclasses import dataclass
from enum import Enum

import pyarrow as pa

from bulkfeed.errors import SchemaMismatchError


class ColumnKind(str, Enum):
    """Logical column kinds understood by the converter, engine and mapper."""

    TEXT = "text"
    FLOAT = "float"
    ISO_TIME = "iso_time"  # ISO-8601 UTC text, e.g. 2024-07-01T12:00:21.123Z
    TIMESTAMP = "timestamp"  # native Arrow timestamp, any unit

    def accepts(self, arrow_type: pa.DataType) -> bool:
        """Whether an Arrow type is a valid physical type for this kind."""
        if self in (ColumnKind.TEXT, ColumnKind.ISO_TIME):
            return pa.types.is_string(arrow_type) or pa.types.is_large_string(arrow_type)
        if self is ColumnKind.FLOAT:
            return pa.types.is_floating(arrow_type) or pa.types.is_integer(arrow_type)
        return pa.types.is_timestamp(arrow_type)


@dataclass(frozen=True)
class Column:
    """One required column: source name, target record field, logical kind."""

    name: str
    field: str
    kind: ColumnKind


@dataclass(frozen=True)
class DatasetSchema:
    """Required columns of a dataset's artifact.

    Args:
        columns: Columns in record field order
        time_column: Name of the column used for filtering and sorting
    """

    columns: tuple[Column, ...]
    time_column: str

    def __post_init__(self) -> None:
        if self.time_column not in self.names:
            raise ValueError(f"time column {self.time_column!r} is not a declared column")
        if self.time_kind not in (ColumnKind.ISO_TIME, ColumnKind.TIMESTAMP):
            raise ValueError(f"time column {self.time_column!r} must be a time kind")

    @property
    def names(self) -> list[str]:
        return [c.name for c in self.columns]

    def column(self, name: str) -> Column:
        for c in self.columns:
            if c.name == name:
                return c
        raise KeyError(name)

    @property
    def time_kind(self) -> ColumnKind:
        return self.column(self.time_column).kind

    def validate(self, arrow_schema: pa.Schema) -> None:
        """Check an artifact's Arrow schema against the declared columns.

        Raises:
            SchemaMismatchError: Listing every missing column and every column
                whose physical type does not match its kind
        """
        missing = [c.name for c in self.columns if arrow_schema.get_field_index(c.name) < 0]
        mismatched = {}
        for c in self.columns:
            if c.name in missing:
                continue
            arrow_type = arrow_schema.field(c.name).type
            if not c.kind.accepts(arrow_type):
                mismatched[c.name] = f"expected {c.kind.value}, got {arrow_type}"

        if missing or mismatched:
            parts = []
            if missing:
                parts.append(f"missing columns {missing}")
            if mismatched:
                parts.append(f"mismatched types {mismatched}")
            raise SchemaMismatchError(
                f"Artifact schema mismatch: {'; '.join(parts)}",
                missing=missing,
                mismatched=mismatched,
            )
