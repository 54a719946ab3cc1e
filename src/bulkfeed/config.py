"""Configuration management for bulkfeed.

Loads settings from environment variables (and an optional .env file) using
pydantic-settings. Nothing is required: every field has a default suited to a
single-node scratch cache.

Usage:
    from bulkfeed.config import settings

    print(settings.cache_dir)
    print(settings.feed_max_age)
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Summary feeds published by the USGS, as {magnitude}_{window}.csv
USGS_FEEDS = {
    f"{magnitude}_{window}"
    for magnitude in ("significant", "4.5", "2.5", "1.0", "all")
    for window in ("hour", "day", "week", "month")
}

PARQUET_COMPRESSIONS = {"snappy", "zstd", "gzip", "brotli", "lz4", "none"}


class Settings(BaseSettings):
    """bulkfeed configuration from environment variables.

    Attributes:
        log_level: Logging verbosity (DEBUG, INFO, WARNING, ERROR)
        cache_dir: Scratch directory holding raw payloads and Parquet artifacts
        usgs_base_url: Base URL of the USGS summary feeds
        usgs_feed: Which rolling summary feed to cache (e.g. all_month)
        tlc_base_url: Base URL of the NYC TLC trip-record archive
        http_timeout: Per-operation HTTP timeout (seconds)
        fetch_timeout: Upper bound for one fetch + convert cycle (seconds)
        feed_max_age: Age after which the rolling feed artifact is re-fetched
        schema_infer_rows: CSV rows sampled to infer undeclared column types
        artifact_compression: Parquet codec for converted artifacts
        keep_raw_payload: Keep the downloaded raw file next to the artifact
        default_n_results: Result limit used by the CLI when none is given
        default_lookback_ms: Window start used by the CLI (now - lookback)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore unknown env vars
    )

    # System Settings
    log_level: str = Field(default="INFO", description="Logging level")
    cache_dir: str = Field(default="/tmp/bulkfeed", description="Local cache directory")

    # Upstream sources
    usgs_base_url: str = Field(
        default="https://earthquake.usgs.gov/earthquakes/feed/v1.0/summary",
        description="USGS summary feed base URL",
    )
    usgs_feed: str = Field(default="all_month", description="USGS rolling feed name")
    tlc_base_url: str = Field(
        default="https://d37ci6vzurychx.cloudfront.net/trip-data",
        description="NYC TLC trip-record archive base URL",
    )

    # Timeouts
    http_timeout: float = Field(default=30.0, gt=0, description="HTTP timeout (seconds)")
    fetch_timeout: float = Field(
        default=300.0,
        gt=0,
        description="Bound on a whole fetch + convert cycle (seconds)",
    )

    # Cache policy
    feed_max_age: float = Field(
        default=300.0,
        ge=0,
        description="Max age of the rolling feed artifact before re-fetch (seconds)",
    )
    schema_infer_rows: int = Field(
        default=100,
        ge=1,
        description="Rows sampled for CSV schema inference",
    )
    artifact_compression: str = Field(default="snappy", description="Parquet compression codec")
    keep_raw_payload: bool = Field(default=True, description="Keep raw payload after conversion")

    # Query defaults (CLI)
    default_n_results: int = Field(default=100, ge=0, description="Default result limit")
    default_lookback_ms: int = Field(
        default=24 * 60 * 60 * 1000,
        ge=0,
        description="Default query window start, relative to now (ms)",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid:
            raise ValueError(f"log_level must be one of {valid}, got {v}")
        return v_upper

    @field_validator("usgs_feed")
    @classmethod
    def validate_usgs_feed(cls, v: str) -> str:
        """Ensure the feed is one the USGS actually publishes."""
        v_lower = v.lower()
        if v_lower not in USGS_FEEDS:
            raise ValueError(f"usgs_feed must be one of {sorted(USGS_FEEDS)}, got '{v}'")
        return v_lower

    @field_validator("artifact_compression")
    @classmethod
    def validate_compression(cls, v: str) -> str:
        """Ensure the Parquet codec is supported."""
        v_lower = v.lower()
        if v_lower not in PARQUET_COMPRESSIONS:
            raise ValueError(
                f"artifact_compression must be one of {sorted(PARQUET_COMPRESSIONS)}, got '{v}'"
            )
        return v_lower

    @field_validator("usgs_base_url", "tlc_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


# Global settings instance — loaded once at import
settings = Settings()
