"""Tests for the crawl frontier and the end-to-end archive pass."""

import tempfile
from pathlib import Path

from site2static import ArchiveConfig, CrawlFrontier, SiteArchiver, __version__

from conftest import FakeRenderer

HOME_HTML = """<!DOCTYPE html>
<html>
<head>
  <title>Test Page</title>
  <link rel="stylesheet" href="style.css">
</head>
<body>
  <h1>Test Page</h1>
  <a href="/about">About</a>
  <a href="https://external.com">External Link</a>
  <img src="image.jpg" alt="Test">
</body>
</html>
"""

ABOUT_HTML = """<html><body>
  <a href="/">Home</a>
  <a href="/about/#team">Team</a>
  <img src="/image.jpg">
</body></html>
"""


def make_archiver(output_dir, pages, assets=None, **overrides):
    config = ArchiveConfig.from_start_url("https://example.com", output_dir, settle_delay=0, **overrides)
    renderer = FakeRenderer(pages=pages, assets=assets)
    return SiteArchiver(config, renderer), renderer


def test_version():
    """Test that version is defined."""
    assert __version__ == "0.1.0"


def test_frontier_states():
    """URLs move unseen -> queued -> visited and are never queued twice."""
    frontier = CrawlFrontier()
    assert frontier.add("https://example.com/")
    assert not frontier.add("https://example.com/")
    assert len(frontier) == 1

    assert frontier.pop() == "https://example.com/"
    assert frontier.pop() is None

    assert frontier.mark_visited("https://example.com/")
    assert not frontier.mark_visited("https://example.com/")
    assert not frontier.add("https://example.com/")
    assert frontier.is_visited("https://example.com/")


def test_frontier_mark_visited_drops_pending_entry():
    frontier = CrawlFrontier()
    frontier.add("https://example.com/a")
    frontier.mark_visited("https://example.com/a")
    assert len(frontier) == 0


def test_archive_end_to_end():
    """Two pages and two assets are saved, with links rewritten locally."""
    with tempfile.TemporaryDirectory() as tmpdir:
        archiver, renderer = make_archiver(
            tmpdir,
            pages={"https://example.com/": HOME_HTML, "https://example.com/about": ABOUT_HTML},
            assets={
                "https://example.com/style.css": b"h1 { color: red; }",
                "https://example.com/image.jpg": b"\xff\xd8\xff",
            },
        )

        summary = archiver.crawl()

        out = Path(tmpdir)
        index = (out / "index.html").read_text(encoding="utf-8")
        assert 'href="about/index.html"' in index
        assert 'href="https://external.com"' in index
        assert 'href="style.css"' in index
        assert 'src="image.jpg"' in index

        about = (out / "about" / "index.html").read_text(encoding="utf-8")
        assert 'href="../index.html"' in about
        assert 'href="index.html#team"' in about
        assert 'src="../image.jpg"' in about

        assert (out / "style.css").read_bytes() == b"h1 { color: red; }"
        assert (out / "image.jpg").read_bytes() == b"\xff\xd8\xff"

        assert summary.pages_visited == 2
        assert summary.assets_downloaded == 2
        assert summary.pages_failed == 0
        assert len(archiver.frontier) == 0

        # image.jpg is referenced from both pages but fetched once
        assert renderer.fetched.count("https://example.com/image.jpg") == 1
        assert renderer.rendered == ["https://example.com/", "https://example.com/about"]


def test_crawl_reaches_fixpoint_over_link_graph(tmp_path):
    """Every reachable page is visited exactly once, cycles included."""
    pages = {
        "https://example.com/": '<a href="/a">a</a><a href="/b/">b</a>',
        "https://example.com/a": '<a href="/b">b</a><a href="/">home</a><a href="/a#x">self</a>',
        "https://example.com/b": '<a href="/c">c</a><a href="https://www.example.com/d">sub</a>',
        "https://example.com/c": '<a href="/a/">a</a>',
        "https://example.com/unlinked": "",
    }
    archiver, renderer = make_archiver(tmp_path, pages)

    summary = archiver.crawl()

    expected = {
        "https://example.com/",
        "https://example.com/a",
        "https://example.com/b",
        "https://example.com/c",
    }
    assert archiver.frontier.visited == expected
    assert sorted(renderer.rendered) == sorted(expected)
    assert summary.pages_visited == 4
    assert (tmp_path / "c" / "index.html").is_file()
    assert not (tmp_path / "unlinked").exists()


def test_render_failure_does_not_stop_crawl(tmp_path):
    pages = {
        "https://example.com/": '<a href="/broken">x</a><a href="/ok">y</a>',
        "https://example.com/ok": "<p>fine</p>",
    }
    archiver, renderer = make_archiver(tmp_path, pages)

    summary = archiver.crawl()

    assert summary.pages_visited == 3
    assert summary.pages_failed == 1
    assert (tmp_path / "ok" / "index.html").is_file()
    assert not (tmp_path / "broken").exists()


def test_crawl_page_skips_visited_url(tmp_path):
    archiver, renderer = make_archiver(tmp_path, {"https://example.com/": "<p>hi</p>"})

    assert archiver.crawl_page("https://example.com/")
    assert not archiver.crawl_page("https://example.com/")
    assert renderer.rendered == ["https://example.com/"]


def test_asset_categories_are_downloaded(tmp_path):
    """Icons, scripts, srcset candidates, fonts and cross-origin assets are fetched."""
    html = """<html><head>
      <link rel="icon" href="/favicon.ico">
      <link rel="canonical" href="https://example.com/">
      <link rel="preload" as="font" href="/fonts/body.woff2" crossorigin>
      <link rel="stylesheet" href="https://cdn.other.com/lib.css">
      <script src="/js/app.js"></script>
    </head><body>
      <img src="/img/a.png" srcset="/img/a.png 1x, /img/a@2x.png 2x">
      <picture><source srcset="/img/b.webp"></picture>
      <a href="/files/data.json" download>data</a>
      <img src="/img/missing.png">
    </body></html>"""
    assets = {
        "https://example.com/favicon.ico": b"ico",
        "https://example.com/fonts/body.woff2": b"font",
        "https://cdn.other.com/lib.css": b"css",
        "https://example.com/js/app.js": b"js",
        "https://example.com/img/a.png": b"a",
        "https://example.com/img/a@2x.png": b"a2",
        "https://example.com/img/b.webp": b"b",
        "https://example.com/files/data.json": b"{}",
    }
    archiver, renderer = make_archiver(tmp_path, {"https://example.com/": html}, assets)

    summary = archiver.crawl()

    for local in [
        "favicon.ico",
        "fonts/body.woff2",
        "external/cdn.other.com/lib.css",
        "js/app.js",
        "img/a.png",
        "img/a@2x.png",
        "img/b.webp",
        "files/data.json",
    ]:
        assert (tmp_path / local).is_file(), local

    assert summary.assets_downloaded == 8
    assert summary.assets_failed == 1
    assert "https://example.com/" not in renderer.fetched
    assert renderer.fetched.count("https://example.com/img/a.png") == 1
    assert renderer.fetched.count("https://example.com/fonts/body.woff2") == 1

    index = (tmp_path / "index.html").read_text(encoding="utf-8")
    assert 'href="external/cdn.other.com/lib.css"' in index
    assert 'srcset="img/a.png 1x, img/a@2x.png 2x"' in index


def test_max_pages_limits_crawl(tmp_path):
    pages = {
        "https://example.com/": '<a href="/a">a</a><a href="/b">b</a>',
        "https://example.com/a": "",
        "https://example.com/b": "",
    }
    archiver, renderer = make_archiver(tmp_path, pages, max_pages=2)

    summary = archiver.crawl()

    assert summary.pages_visited == 2
    assert len(archiver.frontier) == 1


def test_links_resolve_against_final_url(tmp_path):
    """After a redirect to a trailing-slash URL, relative links follow the browser."""
    pages = {
        "https://example.com/": '<a href="/docs">docs</a>',
        "https://example.com/docs": '<a href="intro">intro</a>',
        "https://example.com/docs/intro": "<p>intro</p>",
    }
    archiver, renderer = make_archiver(tmp_path, pages)
    archiver.renderer.redirects["https://example.com/docs"] = "https://example.com/docs/"

    archiver.crawl()

    assert "https://example.com/docs/intro" in archiver.frontier.visited
    docs = (tmp_path / "docs" / "index.html").read_text(encoding="utf-8")
    assert 'href="intro/index.html"' in docs


def test_crawl_keeps_everything_inside_output_dir(tmp_path):
    """Pages and assets reached through ".." URLs are written under the output root."""
    out = tmp_path / "site" / "out"
    pages = {
        "https://example.com/": (
            '<img src="https://example.com/../../pwned.png">'
            '<a href="https://example.com/../../p">p</a>'
            '<script src="//evil.com/../../../x.js"></script>'
        ),
        "https://example.com/p": "<p>p</p>",
    }
    assets = {
        "https://example.com/pwned.png": b"png",
        "https://evil.com/x.js": b"js",
    }
    archiver, renderer = make_archiver(out, pages, assets)

    summary = archiver.crawl()

    assert "https://example.com/p" in archiver.frontier.visited
    assert summary.pages_visited == 2
    assert (out / "pwned.png").read_bytes() == b"png"
    assert (out / "p" / "index.html").is_file()
    assert (out / "external" / "evil.com" / "x.js").read_bytes() == b"js"
    assert not (tmp_path / "pwned.png").exists()
    assert not (tmp_path / "p").exists()
    assert not (tmp_path / "x.js").exists()

    index = (out / "index.html").read_text(encoding="utf-8")
    assert 'src="pwned.png"' in index
    assert 'href="p/index.html"' in index
    assert 'src="external/evil.com/x.js"' in index


def test_percent_encoded_pages_link_to_decoded_files(tmp_path):
    """Saved under the decoded name, linked with the encoded one."""
    pages = {
        "https://example.com/": '<a href="/caf%C3%A9">cafe</a>',
        "https://example.com/caf%C3%A9": "<p>menu</p>",
    }
    archiver, renderer = make_archiver(tmp_path, pages)

    archiver.crawl()

    assert (tmp_path / "café" / "index.html").is_file()
    index = (tmp_path / "index.html").read_text(encoding="utf-8")
    assert 'href="caf%C3%A9/index.html"' in index
