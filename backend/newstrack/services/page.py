"""Shared page layer: parsed documents and the session interface strategies use."""

import asyncio
import logging
from typing import Callable, List, Optional, TypeVar
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from .. import config
from .errors import UpstreamUnreachable


logger = logging.getLogger(__name__)

T = TypeVar("T")

Document = BeautifulSoup


def parse_html(html: str) -> Document:
    """Parse HTML into a queryable tree. Scripts are kept as inert text."""
    return BeautifulSoup(html or "", "html.parser")


def absolute_url(base_url: str, href: Optional[str]) -> Optional[str]:
    """Resolve href against base_url; None for non-http links."""
    if not href:
        return None
    href = href.strip()
    if href.startswith(("javascript:", "mailto:", "tel:", "#")):
        return None
    resolved = urljoin(base_url, href)
    if urlparse(resolved).scheme not in ("http", "https"):
        return None
    return resolved


def normalize_site_url(url: str) -> str:
    """Add a scheme to bare hosts ("bbc.com" -> "https://bbc.com")."""
    url = (url or "").strip()
    if not url:
        return url
    if not url.lower().startswith(("http://", "https://")):
        url = f"https://{url}"
    return url


def outlet_host(url: str) -> str:
    """Hostname without a leading www."""
    host = (urlparse(url).hostname or "").lower()
    if host.startswith("www."):
        host = host[4:]
    return host


class PageSession:
    """A way of turning URLs into parsed documents.

    Subclasses implement ``load``. ``evaluate`` and ``sub_crawl`` only ever
    hand plain Python data back to the caller.
    """

    kind = "base"

    def __init__(self) -> None:
        self.current: Optional[Document] = None
        self.current_url: Optional[str] = None

    async def load(self, url: str, sub_page: bool = False) -> Document:
        raise NotImplementedError

    async def evaluate(self, extractor: Callable[[Document, str], T]) -> T:
        """Run extractor against the currently loaded document."""
        if self.current is None or self.current_url is None:
            raise RuntimeError("No page loaded in this session")
        return extractor(self.current, self.current_url)

    async def sub_crawl(
        self,
        urls: List[str],
        extractor: Callable[[Document, str], List[T]],
        limit: Optional[int] = None,
    ) -> List[T]:
        """Visit article pages one at a time and accumulate extractor output.

        A failing page is logged and skipped.
        """
        limit = config.MAX_SUBPAGES if limit is None else limit
        results: List[T] = []
        visited = 0
        for url in urls[:limit]:
            try:
                await self.load(url, sub_page=True)
                found = await self.evaluate(extractor)
            except asyncio.CancelledError:
                raise
            except UpstreamUnreachable as exc:
                logger.info("Skipped article %s: %s", url, exc)
                continue
            except Exception as exc:
                logger.warning("Byline extraction failed on %s: %s", url, exc)
                continue
            visited += 1
            if found:
                results.extend(found)
                logger.debug("Article %d (%s): %d bylines", visited, url, len(found))
        logger.info("Sub-crawl visited %d/%d article pages", visited, min(len(urls), limit))
        return results

    async def __aenter__(self) -> "PageSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        return None
