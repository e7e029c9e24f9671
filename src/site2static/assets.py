"""Deduplicating asset downloader."""

import logging
from typing import Dict, Optional

from .fetch import FetchError
from .output import OutputTree, OutsideOutputError
from .paths import get_asset_local_path
from .urls import is_asset_url, resolve_http_url

logger = logging.getLogger('site2static.assets')


class AssetStore:
    """Downloads each asset URL at most once and remembers where it was saved.

    Only successful downloads are registered. A failed URL is fetched again
    the next time something references it.
    """

    def __init__(self, output: OutputTree, fetcher, target_domain: str):
        self.output = output
        self.fetcher = fetcher
        self.target_domain = target_domain
        self.registry: Dict[str, str] = {}
        self.failed_attempts = 0

    def __len__(self) -> int:
        return len(self.registry)

    def __contains__(self, url: str) -> bool:
        return url in self.registry

    def download_asset(self, url: str, local_path: Optional[str]) -> Optional[str]:
        """Download url to local_path unless it was already downloaded.

        Returns:
            The local path the asset is stored at, or None if it could not
            be downloaded
        """
        if not local_path:
            logger.warning('  Skipping asset without resolved local path: %s', url)
            return None

        if url in self.registry:
            logger.debug('  Already downloaded: %s', url)
            return self.registry[url]

        try:
            destination = self.output.ensure_parent(local_path)
        except OutsideOutputError as exc:
            logger.warning('  Skipping asset %s: %s', url, exc)
            return None

        try:
            response = self.fetcher.fetch(url)
        except FetchError as exc:
            self.failed_attempts += 1
            logger.warning('  Failed to download asset %s: %s', url, exc)
            return None

        if not response.ok:
            self.failed_attempts += 1
            logger.warning('  Failed to download asset %s: HTTP %s', url, response.status)
            return None

        destination.write_bytes(response.body)
        self.registry[url] = local_path
        logger.info('  Downloaded asset: %s -> %s', url, local_path)
        return local_path

    def download_http_asset(self, url: str, base_url: str, label: Optional[str] = None,
                            require_asset_extension: bool = False) -> Optional[str]:
        """Resolve a raw reference found on a page and download it.

        Args:
            url: Reference as written in the page (possibly relative)
            base_url: URL the reference is relative to
            label: Kind of reference, used when logging invalid URLs
            require_asset_extension: Skip URLs without a recognized asset extension
        """
        resolved = resolve_http_url(url, base_url)
        if resolved is None:
            if label:
                logger.warning('  Skipping invalid %s URL: %s', label, url)
            return None

        if require_asset_extension and not is_asset_url(resolved.parsed):
            return None

        local_path = get_asset_local_path(resolved.absolute_url, self.target_domain)
        return self.download_asset(resolved.absolute_url, local_path)
