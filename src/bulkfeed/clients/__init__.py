"""Upstream download clients for bulkfeed.

Async HTTP clients for fetching bulk dataset files from:
- USGS: rolling earthquake summary feeds (CSV)
- NYC TLC: monthly taxi trip archives (Parquet)
"""

from bulkfeed.clients.base import BaseAsyncClient
from bulkfeed.clients.tlc import TLCTripClient
from bulkfeed.clients.usgs import USGSFeedClient
from bulkfeed.errors import FetchError

__all__ = [
    "BaseAsyncClient",
    "FetchError",
    "TLCTripClient",
    "USGSFeedClient",
]
