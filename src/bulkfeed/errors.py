"""Exception taxonomy for the query pipeline.

Every pipeline-level failure derives from PipelineError and propagates to the
caller unwrapped. Row-level problems never raise: the mapper drops the row.
"""


class PipelineError(Exception):
    """Base exception for pipeline failures."""


class FetchError(PipelineError):
    """Upstream download failed (transport error, timeout or non-success status)."""

    def __init__(
        self,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
        response_body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.response_body = response_body


class ConversionError(PipelineError):
    """Raw payload could not be parsed into a columnar artifact."""


class SchemaMismatchError(PipelineError):
    """Cached artifact lacks required columns or has unexpected column types."""

    def __init__(
        self,
        message: str,
        missing: list[str] | None = None,
        mismatched: dict[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.missing = missing or []
        self.mismatched = mismatched or {}


class StorageError(PipelineError):
    """Cached artifact is missing, unreadable or corrupt."""


class InvalidQueryError(PipelineError, ValueError):
    """Query window arguments are invalid (e.g. negative result limit)."""
