"""Internal link extraction and sampling for the links check."""

from __future__ import annotations

import random
from html.parser import HTMLParser
from urllib.parse import urljoin, urlparse

SKIPPED_PREFIXES: tuple[str, ...] = ("#", "javascript:", "mailto:", "tel:")
MAX_PROBED_LINKS = 10


class _AnchorExtractor(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.hrefs: list[str] = []

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag != "a":
            return
        for name, value in attrs:
            if name == "href" and value:
                self.hrefs.append(value.strip())


def is_skipped(href: str) -> bool:
    """True for fragments and non-navigational schemes."""
    return not href or href.lower().startswith(SKIPPED_PREFIXES)


def extract_links(html: str, base_url: str) -> list[str]:
    """Return absolute same-host link targets found in *html*, in page order.

    Fragment, ``javascript:``, ``mailto:`` and ``tel:`` hrefs are dropped
    before resolution; relative hrefs are resolved against *base_url*.
    """
    parser = _AnchorExtractor()
    parser.feed(html)
    parser.close()

    base_host = urlparse(base_url).hostname
    links: list[str] = []
    for href in parser.hrefs:
        if is_skipped(href):
            continue
        resolved = urljoin(base_url, href)
        if urlparse(resolved).hostname == base_host:
            links.append(resolved)
    return links


def select_links(
    links: list[str],
    limit: int = MAX_PROBED_LINKS,
    rng: random.Random | None = None,
) -> list[str]:
    """All links when there are at most *limit*, else a uniform sample of *limit*."""
    if len(links) <= limit:
        return list(links)
    return (rng or random.Random()).sample(links, limit)
