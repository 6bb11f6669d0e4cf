"""Anchor extraction from HTML pages."""

from dataclasses import dataclass
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup


@dataclass(frozen=True)
class Anchor:
    """A link on a page: resolved absolute URL plus its visible text."""

    href: str
    text: str

    @property
    def hostname(self) -> str:
        return (urlparse(self.href).hostname or "").lower()


def extract_anchors(html: str, base_url: str) -> list[Anchor]:
    """Return every ``<a href>`` on the page in document order.

    Relative hrefs are resolved against ``base_url``; anchor text is
    whitespace-normalized.
    """
    soup = BeautifulSoup(html, "html.parser")
    anchors: list[Anchor] = []
    for tag in soup.find_all("a", href=True):
        href = str(tag["href"]).strip()
        if not href or href.startswith(("#", "javascript:", "mailto:")):
            continue
        text = " ".join(tag.get_text(" ").split())
        anchors.append(Anchor(href=urljoin(base_url, href), text=text))
    return anchors


def has_domain_suffix(url: str, suffixes: list[str]) -> bool:
    """True if the URL's hostname ends with one of ``suffixes``."""
    hostname = (urlparse(url).hostname or "").lower()
    if not hostname:
        return False
    return any(hostname.endswith(s.lower()) for s in suffixes)
