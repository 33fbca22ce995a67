"""Command line interface."""

import sys
import logging
import argparse
from typing import List, Optional

from . import __version__
from .config import (
    DEFAULT_CONCURRENCY, DEFAULT_LOG_FILE, DEFAULT_OUTPUT_DIR, DEFAULT_QUEUE_SIZE,
    EFFECTIVE_TLDS_URL, MAX_CONCURRENCY, MIN_CONCURRENCY, TLDS_URL, Config,
)
from .fetcher import DEFAULT_FETCH_ATTEMPTS, DEFAULT_FETCH_DELAY, DEFAULT_TIMEOUT
from .pipeline import BlocklistUpdater
from .resolver import DEFAULT_RESOLVE_ATTEMPTS, DEFAULT_RESOLVE_DELAY, DEFAULT_RESOLVER_URL

logger = logging.getLogger(__name__)


def configure_logging(log_file: Optional[str] = DEFAULT_LOG_FILE,
                      verbose: bool = False, quiet: bool = False) -> None:
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=handlers,
    )

    package_logger = logging.getLogger('blocklist_updater')
    if verbose:
        package_logger.setLevel(logging.DEBUG)
    elif quiet:
        package_logger.setLevel(logging.ERROR)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="blocklist-updater",
        description=f"Blocklist Updater v{__version__}",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    parser.add_argument("-s", "--sources", default=None,
                        help="Sources file (url | hosts | address, or url | domains); built-in list if omitted")
    parser.add_argument("-w", "--whitelist", default=None,
                        help="Extra whitelist rules file (kind:pattern per line)")
    parser.add_argument("-o", "--output-dir", default=DEFAULT_OUTPUT_DIR,
                        help="Output directory")
    parser.add_argument("--tlds-url", default=TLDS_URL,
                        help="TLD list URL")
    parser.add_argument("--effective-tlds-url", default=EFFECTIVE_TLDS_URL,
                        help="Public suffix list URL")
    parser.add_argument("--resolver-url", default=DEFAULT_RESOLVER_URL,
                        help="DNS-over-HTTPS JSON resolver endpoint")
    parser.add_argument("-t", "--concurrency", type=int, default=DEFAULT_CONCURRENCY,
                        help=f"Concurrent resolver queries ({MIN_CONCURRENCY}-{MAX_CONCURRENCY})")
    parser.add_argument("--queue-size", type=int, default=DEFAULT_QUEUE_SIZE,
                        help="Buffer size of the verified domain queue")
    parser.add_argument("--timeout", type=int, default=DEFAULT_TIMEOUT,
                        help="HTTP timeout in seconds")
    parser.add_argument("--fetch-attempts", type=int, default=DEFAULT_FETCH_ATTEMPTS,
                        help="Download attempts per source")
    parser.add_argument("--fetch-delay", type=float, default=DEFAULT_FETCH_DELAY,
                        help="Seconds between download attempts")
    parser.add_argument("--resolve-attempts", type=int, default=DEFAULT_RESOLVE_ATTEMPTS,
                        help="Resolver attempts per domain")
    parser.add_argument("--resolve-delay", type=float, default=DEFAULT_RESOLVE_DELAY,
                        help="Seconds between resolver attempts")
    parser.add_argument("--skip-verify", action="store_true",
                        help="Skip the resolver existence check")
    parser.add_argument("--dry-run", action="store_true",
                        help="Do not write output files")
    parser.add_argument("--log-file", default=DEFAULT_LOG_FILE,
                        help="Log file ('' to disable)")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Verbose logging")
    parser.add_argument("-q", "--quiet", action="store_true",
                        help="Quiet mode")
    parser.add_argument("--version", action="version", version=f"Blocklist Updater v{__version__}")
    return parser


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def config_from_args(args: argparse.Namespace) -> Config:
    return Config(
        sources_file=args.sources,
        whitelist_file=args.whitelist,
        output_dir=args.output_dir,
        tlds_url=args.tlds_url,
        effective_tlds_url=args.effective_tlds_url,
        resolver_url=args.resolver_url,
        timeout=args.timeout,
        fetch_attempts=args.fetch_attempts,
        fetch_delay=args.fetch_delay,
        resolve_attempts=args.resolve_attempts,
        resolve_delay=args.resolve_delay,
        max_concurrent_checks=args.concurrency,
        queue_size=args.queue_size,
        skip_verify=args.skip_verify,
        dry_run=args.dry_run,
        quiet=args.quiet,
        verbose=args.verbose,
    )


def print_summary(stats: dict) -> None:
    print("\n" + "=" * 60)
    print(" " * 25 + "SUMMARY")
    print("=" * 60)
    print(f"Total sources:      {stats['total_sources']}")
    print(f"Successful:         {stats['successful']}")
    print(f"Failed:             {stats['failed']}")
    print(f"Candidate domains:  {stats['candidate_domains']:,}")
    print(f"Non-existent:       {stats['nonexistent_domains']:,}")
    print(f"Final domains:      {stats['final_domains']:,}")
    print(f"Optimized domains:  {stats['optimized_domains']:,}")
    if stats.get('whitelist_hits'):
        print("Whitelist hits:")
        for rule, count in list(stats['whitelist_hits'].items())[:10]:
            print(f"  {rule:<40} {count:,}")
    print(f"Runtime:            {stats.get('elapsed_time', 'N/A')}")
    print("=" * 60 + "\n")


def main(argv: Optional[List[str]] = None) -> int:
    """Main function."""
    args = parse_arguments(argv)
    configure_logging(args.log_file or None, args.verbose, args.quiet)
    config = config_from_args(args)

    if not config.quiet:
        print("\n" + "=" * 60)
        print(" " * 16 + f"BLOCKLIST UPDATER v{__version__}")
        print("=" * 60 + "\n")

    try:
        updater = BlocklistUpdater(config)
        stats = updater.run()

        if not config.quiet:
            print_summary(stats)
            for failed in updater.failed_sources:
                print(f"Failed: {failed.url} ({failed.error})")

        return 0

    except KeyboardInterrupt:
        logger.info("\nOperation cancelled by user.")
        return 1
    except Exception as e:
        logger.error(f"An error occurred: {e}")
        if config.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
