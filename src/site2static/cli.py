"""Command-line entry point for site2static."""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Optional, Sequence

from .archiver import archive_site
from .config import (
    ASSET_FETCHERS,
    ASSET_TIMEOUT,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_USER_AGENT,
    RENDER_TIMEOUT,
    SETTLE_DELAY,
    ArchiveConfig,
)

logger = logging.getLogger('site2static.cli')


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description='Render a website with Playwright and save it as an offline, static copy.',
    )
    parser.add_argument('start_url', help='URL the crawl starts from')
    parser.add_argument(
        '--domain',
        default=None,
        help='Exact host to archive (default: host of the start URL)',
    )
    parser.add_argument(
        '--output',
        default=DEFAULT_OUTPUT_DIR,
        type=Path,
        help='Directory the static site is written to',
    )
    parser.add_argument(
        '--timeout',
        type=float,
        default=RENDER_TIMEOUT,
        help='Seconds to wait for a page to reach network idle',
    )
    parser.add_argument(
        '--wait',
        type=float,
        default=SETTLE_DELAY,
        help='Seconds to wait after network idle for lazily-loaded content',
    )
    parser.add_argument(
        '--asset-timeout',
        type=float,
        default=ASSET_TIMEOUT,
        help='Seconds to wait for a single asset download',
    )
    parser.add_argument(
        '--max-pages',
        type=int,
        default=None,
        help='Stop after this many pages (default: no limit)',
    )
    parser.add_argument(
        '--delay',
        type=float,
        default=0.0,
        help='Seconds to pause between pages',
    )
    parser.add_argument(
        '--fetcher',
        choices=ASSET_FETCHERS,
        default='browser',
        help='Download assets through the browser context or plain HTTP',
    )
    parser.add_argument('--user-agent', default=DEFAULT_USER_AGENT, help='User-Agent header to send')
    parser.add_argument('--headed', action='store_true', help='Show the browser window')
    parser.add_argument('--verbose', action='store_true', help='Enable verbose logging')
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> ArchiveConfig:
    overrides = dict(
        render_timeout=args.timeout,
        settle_delay=args.wait,
        asset_timeout=args.asset_timeout,
        user_agent=args.user_agent,
        headless=not args.headed,
        asset_fetcher=args.fetcher,
        max_pages=args.max_pages,
        delay=args.delay,
    )
    if args.domain:
        return ArchiveConfig(
            target_domain=args.domain.lower(),
            start_url=args.start_url,
            output_dir=args.output,
            **overrides,
        )
    return ArchiveConfig.from_start_url(args.start_url, args.output, **overrides)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )

    try:
        config = build_config(args)
    except ValueError as exc:
        logger.error('%s', exc)
        sys.exit(2)

    start = time.perf_counter()
    try:
        archive_site(config)
    except OSError as exc:
        logger.error('Archive aborted, could not write output: %s', exc)
        sys.exit(1)
    logger.info('Finished in %.2fs', time.perf_counter() - start)


if __name__ == '__main__':
    main()
