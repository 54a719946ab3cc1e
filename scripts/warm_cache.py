#!/usr/bin/env python3
"""bulkfeed — Cache warmer.

Pre-fetches and converts partitions so that first queries do not pay the
download. Months are fetched one after another; a month that is not
published yet is reported and skipped.

Usage:
    python scripts/warm_cache.py --months 2024-01 2024-02
    python scripts/warm_cache.py --earthquakes
    python scripts/warm_cache.py --months 2024-06 --earthquakes --cache-dir /data/bulkfeed
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Ensure project root is on sys.path so 'bulkfeed' is importable
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

# Load .env before importing bulkfeed (pydantic-settings reads env at import)
try:
    from dotenv import load_dotenv
    load_dotenv(PROJECT_ROOT / ".env")
except ImportError:
    pass  # python-dotenv not installed — env vars must be set externally

from bulkfeed.cache import ArtifactStore, CacheManager
from bulkfeed.config import settings
from bulkfeed.datasets import EarthquakeFeed, MonthPartition, TaxiTrips
from bulkfeed.errors import PipelineError

logger = logging.getLogger("warm_cache")


def parse_month(value: str) -> MonthPartition:
    """Parse YYYY-MM into a MonthPartition."""
    try:
        year, month = (int(part) for part in value.split("-"))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM, got {value!r}") from None
    if not 1 <= month <= 12:
        raise argparse.ArgumentTypeError(f"month out of range in {value!r}")
    return MonthPartition(year, month)


async def warm(months: list[MonthPartition], earthquakes: bool, cache_dir: str) -> int:
    """Ensure every requested partition is cached. Returns the failure count."""
    manager = CacheManager(ArtifactStore(cache_dir))
    failures = 0

    targets = [(TaxiTrips(), m) for m in months]
    if earthquakes:
        feed = EarthquakeFeed()
        targets.append((feed, feed.resolve(0)))

    for dataset, partition in targets:
        try:
            path = await manager.ensure_available(dataset, partition)
            logger.info("%s/%s ready: %s", dataset.name, partition.key, path)
        except PipelineError as e:
            failures += 1
            logger.error("%s/%s failed: %s", dataset.name, partition.key, e)

    return failures


def main() -> int:
    parser = argparse.ArgumentParser(description="Pre-fetch bulkfeed partitions")
    parser.add_argument("--months", nargs="*", type=parse_month, default=[],
                        help="Trip archive months as YYYY-MM")
    parser.add_argument("--earthquakes", action="store_true",
                        help="Also refresh the earthquake feed")
    parser.add_argument("--cache-dir", type=str, default=settings.cache_dir,
                        help=f"Cache directory (default: {settings.cache_dir})")
    args = parser.parse_args()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    failures = asyncio.run(warm(args.months, args.earthquakes, args.cache_dir))
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
