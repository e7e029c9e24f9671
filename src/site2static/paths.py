"""Mapping from URLs to paths inside the output tree.

These functions are the single source of truth for where a page or asset
lives on disk. The crawler saves pages with them and the rewriter points
links at them, so both always agree.
"""

import posixpath
from typing import Optional
from urllib.parse import unquote, urlparse

from .urls import is_target_domain, remove_dot_segments

EXTERNAL_DIR = 'external'
INDEX_FILE = 'index.html'
MAX_EXTENSION_LENGTH = 5


def get_local_path(url: str) -> Optional[str]:
    """Map a URL to a relative path in the output tree.

    Extensionless paths are treated as directories holding an index.html,
    so ``/about`` becomes ``about/index.html``. So are paths whose
    'extension' is longer than MAX_EXTENSION_LENGTH characters, which are
    usually slugs containing a dot.

    The path is percent-decoded, so ``/caf%C3%A9`` is stored as
    ``café/index.html``; links to it are quoted again when rewritten.
    Dot segments are removed after decoding, so the result never leaves
    the output tree.
    """
    try:
        raw_path = urlparse(url).path
    except ValueError:
        return None

    path = remove_dot_segments(unquote(raw_path).replace('\x00', ''))

    if path in ('', '/'):
        return INDEX_FILE

    relative = path[1:] if path.startswith('/') else path
    if path.endswith('/'):
        return relative + INDEX_FILE

    ext = posixpath.splitext(path)[1]
    if not ext or len(ext) - 1 > MAX_EXTENSION_LENGTH:
        return f'{relative}/{INDEX_FILE}'

    return relative


def get_asset_local_path(url: str, target_domain: str) -> Optional[str]:
    """Map an asset URL to its path, isolating other hosts under external/."""
    base_path = get_local_path(url)
    if base_path is None:
        return None

    if is_target_domain(url, target_domain):
        return base_path

    try:
        hostname = urlparse(url).hostname
    except ValueError:
        return None
    if not hostname or hostname in ('.', '..'):
        return None
    return posixpath.join(EXTERNAL_DIR, hostname, base_path)


def get_relative_path(current_local_path: Optional[str], target_local_path: str) -> str:
    """Compute the link from one output file to another.

    Args:
        current_local_path: Local path of the page holding the link, or None
            if it could not be determined
        target_local_path: Local path the link should point to

    Returns:
        A forward-slash path relative to the current page's directory
    """
    target = target_local_path.replace('\\', '/')
    if not current_local_path:
        return target

    current_dir = posixpath.dirname(current_local_path.replace('\\', '/'))
    if current_dir in ('', '.'):
        return target
    return posixpath.relpath(target, current_dir)
