"""Data models exchanged between the archiver components."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, NamedTuple
from urllib.parse import ParseResult


class ResolvedUrl(NamedTuple):
    """An absolute http(s) URL together with its parsed form."""

    absolute_url: str
    parsed: ParseResult


@dataclass
class RenderedPage:
    """Final DOM of a page after the browser finished loading it."""

    url: str
    html: str


@dataclass
class FetchResponse:
    """Outcome of fetching a single resource."""

    url: str
    status: int
    ok: bool
    body: bytes = b''


@dataclass
class PageReferences:
    """Raw reference values found in a rendered page, grouped by kind."""

    links: List[str] = field(default_factory=list)
    asset_hrefs: List[str] = field(default_factory=list)
    stylesheets: List[str] = field(default_factory=list)
    scripts: List[str] = field(default_factory=list)
    images: List[str] = field(default_factory=list)
    srcset_images: List[str] = field(default_factory=list)
    fonts: List[str] = field(default_factory=list)


@dataclass
class CrawlSummary:
    """Counts reported at the end of a crawl."""

    pages_visited: int
    assets_downloaded: int
    pages_failed: int
    assets_failed: int
    output_dir: Path
