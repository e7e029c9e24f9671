"""Crawl orchestration: the frontier and the per-page pipeline."""

import logging
import time
from typing import Dict, Optional, Set

from .assets import AssetStore
from .config import ArchiveConfig
from .extract import extract_references
from .fetch import HttpFetcher
from .models import CrawlSummary
from .output import OutputTree, OutsideOutputError
from .paths import get_local_path
from .render import PlaywrightRenderer, RenderError
from .rewriter import HtmlRewriter
from .urls import is_target_domain, normalize_url, resolve_http_url

logger = logging.getLogger('site2static.archiver')


class CrawlFrontier:
    """Visited set plus the queue of discovered, not yet processed URLs.

    A URL moves unseen -> queued -> visited and never back. Queue order is
    insertion order.
    """

    def __init__(self):
        self.visited: Set[str] = set()
        # dict keys as an insertion-ordered set
        self.pending: Dict[str, None] = {}

    def __len__(self) -> int:
        return len(self.pending)

    def add(self, url: str) -> bool:
        """Queue url unless it is already queued or visited."""
        if url in self.visited or url in self.pending:
            return False
        self.pending[url] = None
        return True

    def pop(self) -> Optional[str]:
        """Remove and return the next URL to process, or None when empty."""
        if not self.pending:
            return None
        url = next(iter(self.pending))
        del self.pending[url]
        return url

    def is_visited(self, url: str) -> bool:
        """Check if url has already been taken for processing."""
        return url in self.visited

    def mark_visited(self, url: str) -> bool:
        """Mark url visited. Returns False if it already was."""
        if url in self.visited:
            return False
        self.visited.add(url)
        self.pending.pop(url, None)
        return True


class SiteArchiver:
    """Archives one domain into a static, offline-browsable tree."""

    def __init__(self, config: ArchiveConfig, renderer, fetcher=None):
        """
        Initialize the archiver.

        Args:
            config: Run configuration
            renderer: Object with ``render(url) -> RenderedPage``
            fetcher: Object with ``fetch(url) -> FetchResponse`` used for
                assets; defaults to the renderer
        """
        self.config = config
        self.renderer = renderer
        self.output = OutputTree(config.output_dir)
        self.assets = AssetStore(self.output, fetcher or renderer, config.target_domain)
        self.rewriter = HtmlRewriter(config.target_domain)
        self.frontier = CrawlFrontier()
        self.pages_failed = 0

    def crawl_page(self, url: str) -> bool:
        """Render, rewrite and save one page, then fetch its assets.

        Returns:
            True if the page was saved
        """
        if not self.frontier.mark_visited(url):
            return False

        logger.info('Crawling: %s', url)
        try:
            rendered = self.renderer.render(url)
        except RenderError as exc:
            self.pages_failed += 1
            logger.error('  Error crawling %s: %s', url, exc)
            return False

        refs = extract_references(rendered.html)

        queued = 0
        for link in refs.links:
            resolved = self._absolute(link, rendered.url)
            if resolved is None:
                continue
            normalized = normalize_url(resolved)
            if not is_target_domain(normalized, self.config.target_domain):
                continue
            if not self.frontier.is_visited(normalized) and self.frontier.add(normalized):
                queued += 1
        logger.debug('  Queued %d new link(s), %d pending', queued, len(self.frontier))

        local_path = get_local_path(url)
        if local_path:
            html = self.rewriter.rewrite(rendered.html, url, base_url=rendered.url)
            try:
                self.output.write_text(local_path, html)
                logger.info('  Saved: %s', local_path)
            except OutsideOutputError as exc:
                logger.error('  Not saving %s: %s', url, exc)
                local_path = None

        base_url = rendered.url
        for href in refs.asset_hrefs:
            self.assets.download_http_asset(href, base_url, label='asset href', require_asset_extension=True)
        for css_url in refs.stylesheets:
            self.assets.download_http_asset(css_url, base_url, label='stylesheet')
        for js_url in refs.scripts:
            self.assets.download_http_asset(js_url, base_url, label='script')
        for img_url in refs.images:
            self.assets.download_http_asset(img_url, base_url, label='image')
        for img_url in refs.srcset_images:
            self.assets.download_http_asset(img_url, base_url, label='srcset image')
        for font_url in refs.fonts:
            self.assets.download_http_asset(font_url, base_url, label='font')

        return local_path is not None

    def _absolute(self, href: str, base_url: str) -> Optional[str]:
        resolved = resolve_http_url(href, base_url)
        return resolved.absolute_url if resolved else None

    def crawl(self) -> CrawlSummary:
        """Process queued URLs until none are left."""
        self.frontier.add(normalize_url(self.config.start_url))
        logger.info('Starting archive of %s', self.config.start_url)
        logger.info('Output directory: %s', self.config.output_dir)

        while len(self.frontier):
            if self.config.max_pages is not None and len(self.frontier.visited) >= self.config.max_pages:
                logger.info('Reached max pages limit (%d), %d URL(s) left unvisited',
                            self.config.max_pages, len(self.frontier))
                break
            url = self.frontier.pop()
            self.crawl_page(url)
            if self.config.delay and len(self.frontier):
                time.sleep(self.config.delay)

        summary = self.summary()
        logger.info('=== Crawl Summary ===')
        logger.info('Pages crawled: %d', summary.pages_visited)
        logger.info('Assets downloaded: %d', summary.assets_downloaded)
        if summary.pages_failed or summary.assets_failed:
            logger.info('Failed pages: %d, failed asset downloads: %d',
                        summary.pages_failed, summary.assets_failed)
        logger.info('Output directory: %s', summary.output_dir)
        return summary

    def summary(self) -> CrawlSummary:
        """Counts for the run so far."""
        return CrawlSummary(
            pages_visited=len(self.frontier.visited),
            assets_downloaded=len(self.assets),
            pages_failed=self.pages_failed,
            assets_failed=self.assets.failed_attempts,
            output_dir=self.config.output_dir,
        )


def archive_site(config: ArchiveConfig) -> CrawlSummary:
    """Launch a browser and archive config.target_domain into config.output_dir."""
    with PlaywrightRenderer(config) as renderer:
        fetcher = None
        if config.asset_fetcher == 'http':
            fetcher = HttpFetcher(user_agent=config.user_agent, timeout=config.asset_timeout)
        try:
            return SiteArchiver(config, renderer, fetcher=fetcher).crawl()
        finally:
            if fetcher is not None:
                fetcher.close()
