"""Rewrite links and asset references in saved pages to local relative paths."""

import html as html_lib
import logging
import re
from typing import Callable, NamedTuple, Optional
from urllib.parse import quote, urlparse

from .paths import get_asset_local_path, get_local_path, get_relative_path
from .urls import is_asset_url, is_target_domain, normalize_url, resolve_http_url

logger = logging.getLogger('site2static.rewriter')


def _attribute_re(name: str):
    # Quoted values only; the lookbehind keeps data-src and friends out.
    return re.compile(
        r'(?<![\w-])(?P<name>' + name + r')(?P<eq>\s*=\s*)'
        r"(?:\"(?P<dq>[^\"]*)\"|'(?P<sq>[^']*)')",
        re.IGNORECASE,
    )


HREF_RE = _attribute_re('href')
SRC_RE = _attribute_re('src')
SRCSET_RE = _attribute_re('srcset')
# Left unescaped in rewritten links; ':' is excluded so no segment reads as a scheme
LINK_SAFE_CHARS = "/@!$&'()*+,;=~"


class RewriteContext(NamedTuple):
    """Where the page being rewritten came from and where it is saved."""

    base_url: str
    local_path: Optional[str]

    def relative(self, target_local_path: str) -> str:
        """Page-relative link to a local path, percent-encoded for use in an href."""
        return quote(get_relative_path(self.local_path, target_local_path), safe=LINK_SAFE_CHARS)


class HtmlRewriter:
    """Points same-domain links and downloadable assets at the output tree.

    External navigational links and anything that cannot be resolved are
    left exactly as they were.
    """

    def __init__(self, target_domain: str):
        self.target_domain = target_domain

    def rewrite(self, html: str, page_url: str, base_url: Optional[str] = None) -> str:
        """Rewrite href, src and srcset attributes of a page.

        Args:
            html: Markup of the page
            page_url: Canonical URL the page is saved under
            base_url: URL relative references resolve against; defaults to page_url
        """
        context = RewriteContext(base_url or page_url, get_local_path(page_url))
        rewritten = self._sub(HREF_RE, html, context, self._rewrite_href)
        rewritten = self._sub(SRC_RE, rewritten, context, self._rewrite_src)
        rewritten = self._sub(SRCSET_RE, rewritten, context, self._rewrite_srcset)
        return rewritten

    def _sub(self, pattern, html: str, context: RewriteContext,
             rewrite_value: Callable[[str, RewriteContext], Optional[str]]) -> str:
        def replace(match):
            quote_char = '"' if match.group('dq') is not None else "'"
            raw = match.group('dq') if quote_char == '"' else match.group('sq')
            if not raw.strip():
                return match.group(0)
            try:
                new_value = rewrite_value(html_lib.unescape(raw), context)
            except ValueError as exc:
                logger.debug('  Leaving %s=%r unchanged: %s', match.group('name'), raw, exc)
                return match.group(0)
            if new_value is None:
                return match.group(0)
            return f"{match.group('name')}{match.group('eq')}{quote_char}{html_lib.escape(new_value)}{quote_char}"

        return pattern.sub(replace, html)

    def _rewrite_href(self, value: str, context: RewriteContext) -> Optional[str]:
        resolved = resolve_http_url(value, context.base_url)
        if resolved is None:
            return None

        normalized = normalize_url(resolved.absolute_url)
        if is_target_domain(normalized, self.target_domain):
            local_path = get_local_path(normalized)
            if local_path:
                relative = context.relative(local_path)
                fragment = urlparse(value).fragment
                return f'{relative}#{fragment}' if fragment else relative

        if is_asset_url(resolved.parsed):
            return self._asset_path(resolved.absolute_url, context)
        return None

    def _rewrite_src(self, value: str, context: RewriteContext) -> Optional[str]:
        resolved = resolve_http_url(value, context.base_url)
        if resolved is None:
            return None
        return self._asset_path(resolved.absolute_url, context)

    def _rewrite_srcset(self, value: str, context: RewriteContext) -> Optional[str]:
        entries = []
        for entry in value.split(','):
            parts = entry.split()
            if not parts:
                entries.append(entry)
                continue
            try:
                local = self._rewrite_src(parts[0], context)
            except ValueError:
                local = None
            if local is None:
                entries.append(entry.strip())
                continue
            descriptor = ' '.join(parts[1:])
            entries.append(f'{local} {descriptor}' if descriptor else local)
        return ', '.join(entries)

    def _asset_path(self, absolute_url: str, context: RewriteContext) -> Optional[str]:
        local_path = get_asset_local_path(absolute_url, self.target_domain)
        if local_path is None:
            return None
        return context.relative(local_path)
