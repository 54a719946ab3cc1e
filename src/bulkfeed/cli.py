"""Command-line interface for bulkfeed.

Thin shell over the query pipeline: parses parameters, runs a query and prints
the records as JSON.

Usage:
    bulkfeed earthquakes
    bulkfeed earthquakes --from-ms 1719783621000 --n-results 5
    bulkfeed trips --from-ms 1704067200000 --n-results 10
    bulkfeed cache stats
    bulkfeed cache clear --dataset trips
"""

import argparse
import asyncio
import json
import logging
import sys
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from bulkfeed import __version__
from bulkfeed.cache import ArtifactStore
from bulkfeed.config import settings
from bulkfeed.datasets import DATASETS, get_dataset
from bulkfeed.errors import PipelineError
from bulkfeed.pipeline import QueryPipeline, get_earthquakes, get_trips, now_ms

logger = logging.getLogger(__name__)

_executor = ThreadPoolExecutor(max_workers=1)

_QUERIES = {
    "earthquakes": get_earthquakes,
    "trips": get_trips,
}


def _non_negative_int(value: str) -> int:
    n = int(value)
    if n < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {n}")
    return n


def create_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser.

    Returns:
        Configured ArgumentParser with all commands and arguments.
    """
    parser = argparse.ArgumentParser(
        prog="bulkfeed",
        description="bulkfeed — time-windowed queries over cached bulk datasets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  bulkfeed earthquakes --n-results 5
  bulkfeed trips --from-ms 1704067200000 --n-results 10
  bulkfeed cache stats
        """,
    )
    parser.add_argument(
        "--cache-dir",
        type=str,
        default=None,
        help=f"Cache directory (default: {settings.cache_dir})",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    for name in _QUERIES:
        query_parser = subparsers.add_parser(
            name,
            help=f"Query {name} at or after a timestamp",
        )
        query_parser.add_argument(
            "--from-ms",
            type=int,
            default=None,
            help="Inclusive lower bound, epoch milliseconds (default: 24 hours ago)",
        )
        query_parser.add_argument(
            "--n-results",
            type=_non_negative_int,
            default=settings.default_n_results,
            help=f"Maximum number of records (default: {settings.default_n_results})",
        )
        query_parser.add_argument(
            "--fake",
            action="store_true",
            help="Return synthetic records instead of real data",
        )

    cache_parser = subparsers.add_parser("cache", help="Inspect or clear the local cache")
    cache_parser.add_argument("action", choices=["stats", "clear"])
    cache_parser.add_argument(
        "--dataset",
        choices=sorted(DATASETS),
        default=None,
        help="Restrict to one dataset (default: all)",
    )

    subparsers.add_parser("version", help="Show version information")

    return parser


def _run_async(coro):
    """Run an async coroutine from synchronous CLI context.

    Spins up a new event loop in a dedicated thread to avoid conflicts
    with any existing event loop.
    """
    def _target():
        loop = asyncio.new_event_loop()
        try:
            return loop.run_until_complete(coro)
        finally:
            loop.close()

    future = _executor.submit(_target)
    return future.result()


def cmd_query(args: argparse.Namespace) -> int:
    """Execute the earthquakes / trips commands.

    Returns:
        Exit code (0 for success, 1 for pipeline failure)
    """
    from_ms = args.from_ms if args.from_ms is not None else now_ms() - settings.default_lookback_ms
    query = _QUERIES[args.command]
    pipeline = QueryPipeline(cache_dir=args.cache_dir)

    try:
        records = _run_async(
            query(from_ms, args.n_results, fake_data=args.fake, pipeline=pipeline)
        )
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 130
    except PipelineError as e:
        logger.error("Query failed: %s", e, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(json.dumps([r.to_dict() for r in records], indent=2))
    return 0


def cmd_cache(args: argparse.Namespace) -> int:
    """Execute the cache command.

    Returns:
        Exit code (0 for success)
    """
    store = ArtifactStore(args.cache_dir or settings.cache_dir)
    names = [args.dataset] if args.dataset else sorted(DATASETS)

    if args.action == "stats":
        stats = {name: _run_async(store.get_cache_stats(get_dataset(name))) for name in names}
        print(json.dumps(stats, indent=2))
    else:
        for name in names:
            removed = _run_async(store.clear(get_dataset(name)))
            print(f"{name}: removed {removed} files")
    return 0


def cmd_version(args: argparse.Namespace) -> int:
    """Execute the version command."""
    print(f"bulkfeed v{__version__}")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    parser = create_parser()
    args = parser.parse_args(argv)

    # Route to command handler
    if args.command in _QUERIES:
        return cmd_query(args)
    elif args.command == "cache":
        return cmd_cache(args)
    elif args.command == "version":
        return cmd_version(args)
    else:
        parser.print_help()
        return 0


def cli_entry() -> None:
    """Console script entry point for setuptools."""
    sys.exit(main())


if __name__ == "__main__":
    cli_entry()
