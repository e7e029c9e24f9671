"""URL classification and normalization.

Every function here is pure and never raises on malformed input: a URL that
cannot be parsed is simply 'not applicable'.
"""

import posixpath
from typing import Optional
from urllib.parse import ParseResult, urljoin, urlparse, urlunparse

from .config import ASSET_EXTENSIONS
from .models import ResolvedUrl

HTTP_SCHEMES = ('http', 'https')


def remove_dot_segments(path: str) -> str:
    """Collapse '.' and '..' segments so a URL path can never climb above '/'.

    A trailing slash is kept, since it marks a directory index.
    """
    if not path:
        return path
    cleaned = posixpath.normpath('/' + path.lstrip('/'))
    if cleaned != '/' and (path.endswith('/') or posixpath.basename(path) in ('.', '..')):
        cleaned += '/'
    return cleaned


def is_target_domain(url: str, target_domain: str) -> bool:
    """Check if URL's host is exactly the target domain (subdomains excluded)."""
    try:
        return urlparse(url).hostname == target_domain
    except ValueError:
        return False


def normalize_url(url: str) -> str:
    """Normalize URL by removing fragments and trailing slashes."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return url

    path = remove_dot_segments(parsed.path) if parsed.netloc else parsed.path
    if not path and parsed.netloc:
        path = '/'
    elif len(path) > 1:
        path = path.rstrip('/') or '/'

    return urlunparse((
        parsed.scheme,
        parsed.netloc,
        path,
        parsed.params,
        parsed.query,
        '',  # Remove fragment
    ))


def resolve_http_url(url: str, base_url: str) -> Optional[ResolvedUrl]:
    """Resolve url against base_url, keeping it only if it is http(s)."""
    try:
        absolute_url = urljoin(base_url, url.strip())
        parsed = urlparse(absolute_url)
    except ValueError:
        return None

    if parsed.scheme not in HTTP_SCHEMES or not parsed.netloc:
        return None

    # urljoin leaves dot segments alone in already-absolute references
    clean_path = remove_dot_segments(parsed.path)
    if clean_path != parsed.path:
        parsed = parsed._replace(path=clean_path)
        absolute_url = urlunparse(parsed)
    return ResolvedUrl(absolute_url, parsed)


def is_asset_url(parsed: ParseResult) -> bool:
    """Check if the URL path ends in a recognized asset extension."""
    ext = posixpath.splitext(parsed.path)[1].lower()
    return ext in ASSET_EXTENSIONS
