"""Enumerate links and asset references in rendered markup."""

from typing import List

from bs4 import BeautifulSoup

from .models import PageReferences


def _rel_values(tag) -> List[str]:
    rel = tag.get('rel') or []
    if isinstance(rel, str):
        rel = rel.split()
    return [value.lower() for value in rel]


def split_srcset(srcset: str) -> List[str]:
    """Return the candidate URLs of a srcset attribute, descriptors dropped."""
    urls = []
    for entry in srcset.split(','):
        parts = entry.split()
        if parts:
            urls.append(parts[0])
    return urls


def extract_references(html: str) -> PageReferences:
    """Collect raw href/src values from a page, grouped the way they are downloaded.

    Values are returned exactly as written; callers resolve them against the
    page URL.
    """
    soup = BeautifulSoup(html, 'html.parser')
    refs = PageReferences()

    for anchor in soup.find_all('a', href=True):
        refs.links.append(anchor['href'])
        if anchor.has_attr('download'):
            refs.asset_hrefs.append(anchor['href'])

    for link in soup.find_all('link', href=True):
        rel = _rel_values(link)
        if 'stylesheet' in rel:
            refs.stylesheets.append(link['href'])
            continue
        refs.asset_hrefs.append(link['href'])
        if 'preload' in rel and (link.get('as') or '').lower() == 'font':
            refs.fonts.append(link['href'])

    for script in soup.find_all('script', src=True):
        refs.scripts.append(script['src'])

    for img in soup.find_all('img', src=True):
        refs.images.append(img['src'])

    for tag in soup.find_all(['img', 'source'], srcset=True):
        refs.srcset_images.extend(split_srcset(tag['srcset']))

    return refs
