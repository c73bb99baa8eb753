# src/scrapers/page_renderer.py

"""Page rendering collaborators consumed by the price extractor.

A renderer turns a URL into a :class:`RenderedPage` that can be queried
by CSS selector.  Pages are handed out through an async context manager
so their resources are released on every exit path.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from pathlib import Path
from urllib.parse import urlparse

from bs4 import BeautifulSoup
from curl_cffi import requests as curl_requests

from src.config.settings import Settings
from src.models.errors import RenderError

logger = logging.getLogger("price_alert.renderer")


class RenderedPage:
    """A parsed product page queryable by CSS selector."""

    def __init__(self, url: str, html: str) -> None:
        self.url = url
        self._soup: BeautifulSoup | None = BeautifulSoup(html, "lxml")

    def select_text(self, selector: str) -> str | None:
        """Return the stripped text of the first match, or ``None``."""
        if self._soup is None:
            raise RuntimeError(f"Page for {self.url} already closed")
        element = self._soup.select_one(selector)
        if element is None:
            return None
        return element.get_text(strip=True)

    def close(self) -> None:
        """Drop the parsed tree."""
        if self._soup is not None:
            self._soup.decompose()
            self._soup = None


class PageRenderer(ABC):
    """Abstract collaborator that loads and releases product pages."""

    @abstractmethod
    def open(
        self, url: str,
    ) -> AbstractAsyncContextManager[RenderedPage]:
        """Load ``url`` and yield a queryable page; release it on exit."""
        ...


class HttpPageRenderer(PageRenderer):
    """Fetches pages with a browser-impersonating curl_cffi session.

    Each page gets its own session which is closed when the page
    context exits, whether the caller succeeded or raised.
    """

    def __init__(
        self,
        request_timeout: int | None = None,
        settle_delay: float | None = None,
    ) -> None:
        self.settings = Settings()
        self._request_timeout: int = (
            request_timeout
            if request_timeout is not None
            else self.settings.REQUEST_TIMEOUT
        )
        self._settle_delay: float = (
            settle_delay
            if settle_delay is not None
            else self.settings.SETTLE_DELAY
        )

    def _fetch(
        self, session: curl_requests.Session, url: str,
    ) -> str:
        """Blocking GET returning the body; raises RenderError on failure."""
        try:
            resp = session.get(
                url,
                headers=self.settings.DEFAULT_HEADERS,
                timeout=self._request_timeout,
            )
        except Exception as exc:
            raise RenderError(
                f"Failed to load {url}: {exc}", url
            ) from exc
        if resp.status_code != 200:
            raise RenderError(
                f"HTTP {resp.status_code} loading {url}", url
            )
        return resp.text

    def _dump_debug_html(self, url: str, html: str) -> None:
        """Save the fetched HTML next to the run logs for selector work."""
        host = urlparse(url).hostname or "page"
        path: Path = self.settings.LOGS_DIR / f"debug-{host}.html"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(html, encoding="utf-8")
        logger.debug("Saved debug HTML for %s to %s", url, path)

    @asynccontextmanager
    async def open(  # type: ignore[override]
        self, url: str,
    ) -> AsyncIterator[RenderedPage]:
        session = curl_requests.Session(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )
        page: RenderedPage | None = None
        try:
            html = await asyncio.to_thread(self._fetch, session, url)
            # Let late content settle before anyone queries the page
            await asyncio.sleep(self._settle_delay)
            if self.settings.DEBUG_SCRAPER:
                self._dump_debug_html(url, html)
            page = RenderedPage(url, html)
            yield page
        finally:
            if page is not None:
                page.close()
            session.close()
            logger.debug("Released page resources for %s", url)
