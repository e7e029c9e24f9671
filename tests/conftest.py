"""Shared fakes standing in for the browser."""

import pytest

from site2static.fetch import FetchError
from site2static.models import FetchResponse, RenderedPage
from site2static.render import RenderError


class FakeRenderer:
    """Serves pages and assets from dicts and records every call."""

    def __init__(self, pages=None, assets=None, redirects=None):
        self.pages = dict(pages or {})
        self.assets = dict(assets or {})
        self.redirects = dict(redirects or {})
        self.rendered = []
        self.fetched = []

    def render(self, url):
        self.rendered.append(url)
        if url not in self.pages:
            raise RenderError(f"Could not load {url}")
        return RenderedPage(url=self.redirects.get(url, url), html=self.pages[url])

    def fetch(self, url):
        self.fetched.append(url)
        asset = self.assets.get(url)
        if asset is None:
            return FetchResponse(url=url, status=404, ok=False)
        if isinstance(asset, Exception):
            raise asset
        return FetchResponse(url=url, status=200, ok=True, body=asset)


@pytest.fixture
def renderer():
    return FakeRenderer()


@pytest.fixture
def fetch_error():
    return FetchError("connection reset")
