"""Browser rendering backed by Playwright Chromium."""

import logging

from playwright.sync_api import (
    Error as PlaywrightError,
    TimeoutError as PlaywrightTimeout,
    sync_playwright,
)

from .config import ArchiveConfig
from .fetch import FetchError
from .models import FetchResponse, RenderedPage

logger = logging.getLogger('site2static.render')


class RenderError(Exception):
    """A page could not be rendered (navigation error or timeout)."""


class PlaywrightRenderer:
    """Renders pages and fetches assets through one browser context.

    Use as a context manager; the browser is launched on enter and closed on
    exit.
    """

    def __init__(self, config: ArchiveConfig):
        self.config = config
        self._playwright = None
        self._browser = None
        self._context = None

    def __enter__(self) -> 'PlaywrightRenderer':
        self._playwright = sync_playwright().start()
        try:
            self._browser = self._playwright.chromium.launch(headless=self.config.headless)
            self._context = self._browser.new_context(user_agent=self.config.user_agent)
        except Exception:
            self.close()
            raise
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        if self._context is not None:
            self._context.close()
            self._context = None
        if self._browser is not None:
            self._browser.close()
            self._browser = None
        if self._playwright is not None:
            self._playwright.stop()
            self._playwright = None

    def render(self, url: str) -> RenderedPage:
        """Load url, wait for the network to go idle and return the final DOM."""
        page = None
        try:
            page = self._context.new_page()
            page.goto(
                url,
                wait_until='networkidle',
                timeout=self.config.render_timeout * 1000,
            )
            # Lazily-loaded content often arrives after network idle.
            if self.config.settle_delay:
                page.wait_for_timeout(self.config.settle_delay * 1000)
            return RenderedPage(url=page.url, html=page.content())
        except PlaywrightTimeout as exc:
            raise RenderError(f'Timed out loading {url}') from exc
        except PlaywrightError as exc:
            raise RenderError(f'Could not load {url}: {exc.message}') from exc
        finally:
            if page is not None:
                self._close_page(page)

    def _close_page(self, page):
        """Close a page, tolerating a browser that has already gone away."""
        try:
            page.close()
        except PlaywrightError as exc:
            logger.debug('  Could not close page: %s', exc.message)

    def fetch(self, url: str) -> FetchResponse:
        """Fetch a single resource with the browser context's cookies and headers."""
        try:
            response = self._context.request.get(url, timeout=self.config.asset_timeout * 1000)
            try:
                body = response.body() if response.ok else b''
                return FetchResponse(url=url, status=response.status, ok=response.ok, body=body)
            finally:
                response.dispose()
        except PlaywrightTimeout as exc:
            raise FetchError(f'Timed out fetching {url}') from exc
        except PlaywrightError as exc:
            raise FetchError(f'{url}: {exc.message}') from exc
