"""Minimal robots.txt check: only a blanket ``Disallow: /`` blocks a site."""

import logging
import re
from urllib.parse import urljoin

from src.web.session import FetchError, HttpSession

logger = logging.getLogger(__name__)

_DISALLOW_ALL_RE = re.compile(r"^\s*Disallow:\s*/\s*$", re.IGNORECASE | re.MULTILINE)


def disallows_all(robots_txt: str) -> bool:
    """True if the robots.txt body contains a ``Disallow: /`` rule."""
    return _DISALLOW_ALL_RE.search(robots_txt) is not None


async def is_allowed_by_robots(session: HttpSession, base_url: str, *, timeout: float) -> bool:
    """Check a site's robots.txt.

    A missing or unreachable robots.txt is treated as allowing everything.
    """
    robots_url = urljoin(base_url, "/robots.txt")
    try:
        body = await session.get_text(robots_url, timeout=timeout)
    except FetchError as e:
        logger.debug("No usable robots.txt at %s (%s) - assuming allowed", robots_url, e.reason)
        return True
    return not disallows_all(body)
