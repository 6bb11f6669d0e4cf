"""URL slug helpers."""

import re

_WHITESPACE_RE = re.compile(r"\s+")
_NON_SLUG_RE = re.compile(r"[^\w-]+", re.ASCII)
_DASHES_RE = re.compile(r"-{2,}")


def slugify(text: str) -> str:
    """Lowercase, hyphen-separated, ASCII word characters only.

    >>> slugify("UPSC Civil Services 2026: Apply Online!")
    'upsc-civil-services-2026-apply-online'
    """
    slug = _WHITESPACE_RE.sub("-", str(text).lower().strip())
    slug = _NON_SLUG_RE.sub("", slug)
    slug = slug.replace("_", "-")
    slug = _DASHES_RE.sub("-", slug)
    return slug.strip("-")
