"""Run configuration and crawl-wide constants."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

DEFAULT_OUTPUT_DIR = 'output'
DEFAULT_USER_AGENT = 'Mozilla/5.0 (compatible; site2static/0.1)'
RENDER_TIMEOUT = 60.0
SETTLE_DELAY = 2.0
ASSET_TIMEOUT = 30.0
ASSET_FETCHERS = ('browser', 'http')

ASSET_EXTENSIONS = frozenset({
    '.css', '.js', '.mjs', '.json',
    '.png', '.jpg', '.jpeg', '.gif', '.svg', '.webp', '.avif', '.ico',
    '.woff', '.woff2', '.ttf', '.otf', '.eot',
    '.mp4', '.webm',
})


@dataclass
class ArchiveConfig:
    """Settings for one archive run. Fixed for the lifetime of the crawl.

    Timeouts and delays are in seconds.
    """

    target_domain: str
    start_url: str
    output_dir: Path
    render_timeout: float = RENDER_TIMEOUT
    settle_delay: float = SETTLE_DELAY
    asset_timeout: float = ASSET_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT
    headless: bool = True
    asset_fetcher: str = 'browser'
    max_pages: Optional[int] = None
    delay: float = 0.0

    def __post_init__(self):
        self.output_dir = Path(self.output_dir)
        if self.asset_fetcher not in ASSET_FETCHERS:
            raise ValueError(
                f'Unknown asset fetcher {self.asset_fetcher!r} '
                f"(expected one of {', '.join(ASSET_FETCHERS)})"
            )

    @classmethod
    def from_start_url(cls, start_url: str, output_dir=DEFAULT_OUTPUT_DIR, **overrides) -> 'ArchiveConfig':
        """Build a config whose target domain is the start URL's host."""
        hostname = urlparse(start_url).hostname
        if not hostname:
            raise ValueError(f'Start URL has no host: {start_url}')
        return cls(target_domain=hostname, start_url=start_url, output_dir=output_dir, **overrides)
