"""NYC Taxi & Limousine Commission trip-record archive client.

Trip records are published as one Parquet file per month, usually with a
delay of about two months. Months that are not published yet answer with a
non-success status (403 from the CDN), which surfaces as FetchError.

Archive page: https://www.nyc.gov/site/tlc/about/tlc-trip-record-data.page
"""

from pathlib import Path

from bulkfeed.clients.base import BaseAsyncClient
from bulkfeed.config import settings


class TLCTripClient(BaseAsyncClient):
    """Async client for the monthly yellow-taxi trip files.

    Args:
        base_url: Archive base URL (default: from settings)
        timeout: Per-operation timeout in seconds (default: from settings)
    """

    def __init__(self, base_url: str | None = None, timeout: float | None = None) -> None:
        super().__init__(
            base_url=base_url or settings.tlc_base_url,
            timeout=timeout or settings.http_timeout,
        )

    @staticmethod
    def month_endpoint(year: int, month: int) -> str:
        """Archive path for one month, with zero-padded month."""
        return f"/yellow_tripdata_{year}-{month:02d}.parquet"

    async def download_month(self, year: int, month: int, dest: Path) -> Path:
        """Download the trip file for ``year``/``month`` to ``dest``."""
        return await self.download(self.month_endpoint(year, month), dest)
