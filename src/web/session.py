"""HTTP session management using httpx.

Rules:
  - One AsyncClient per run, constant User-Agent
  - Every request carries its own timeout
  - Transport errors and HTTP error statuses surface as FetchError
"""

import logging
from types import TracebackType

import httpx

from src.core.config import HttpConfig

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """Raised when a URL cannot be fetched."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


class HttpSession:
    """Async context manager that owns one httpx client.

    Usage::

        async with HttpSession(config) as session:
            html = await session.get_text("https://...", timeout=15)
            pdf = await session.get_bytes("https://.../notice.pdf", timeout=20)
    """

    def __init__(
        self,
        config: HttpConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """The underlying client. Raises if not entered."""
        if self._client is None:
            msg = "HttpSession not entered, use 'async with'"
            raise RuntimeError(msg)
        return self._client

    async def __aenter__(self) -> "HttpSession":
        self._client = httpx.AsyncClient(
            headers={"User-Agent": self._config.user_agent},
            follow_redirects=True,
            max_redirects=self._config.max_redirects,
            transport=self._transport,
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def get_text(self, url: str, *, timeout: float) -> str:
        """GET ``url`` and return the decoded body."""
        response = await self._get(url, timeout)
        return response.text

    async def get_bytes(self, url: str, *, timeout: float) -> bytes:
        """GET ``url`` and return the raw body (e.g. a PDF)."""
        response = await self._get(url, timeout)
        return response.content

    async def _get(self, url: str, timeout: float) -> httpx.Response:
        try:
            response = await self.client.get(url, timeout=timeout)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise FetchError(url, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise FetchError(url, str(e) or type(e).__name__) from e
        logger.debug("GET %s -> %d (%d bytes)", url, response.status_code, len(response.content))
        return response
