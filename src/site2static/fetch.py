"""Plain-HTTP resource fetching.

Anything with a ``fetch(url) -> FetchResponse`` method that raises
FetchError on transport failure can back the asset store. The browser
renderer is one such fetcher; HttpFetcher is a lighter one that skips the
browser entirely.
"""

import logging

import requests

from .config import ASSET_TIMEOUT, DEFAULT_USER_AGENT
from .models import FetchResponse

logger = logging.getLogger('site2static.fetch')


class FetchError(Exception):
    """A resource could not be fetched (network error, timeout, ...)."""


class HttpFetcher:
    """Fetches resources with a shared requests session."""

    def __init__(self, user_agent: str = DEFAULT_USER_AGENT, timeout: float = ASSET_TIMEOUT):
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({'User-Agent': user_agent})

    def fetch(self, url: str) -> FetchResponse:
        """GET url once. Non-ok responses are returned; transport errors raise FetchError."""
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise FetchError(f'{url}: {exc}') from exc

        logger.debug('GET %s -> %s', url, response.status_code)
        return FetchResponse(
            url=url,
            status=response.status_code,
            ok=response.ok,
            body=response.content if response.ok else b'',
        )

    def close(self):
        """Release pooled connections."""
        self.session.close()
