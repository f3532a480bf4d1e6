"""Static page fetching over plain HTTP (no script execution)."""

import logging
from typing import Optional

import httpx

from .. import config
from .errors import FetchError
from .page import Document, PageSession, parse_html


logger = logging.getLogger(__name__)


def browser_headers() -> dict:
    """Headers that make a plain GET look like a desktop browser."""
    return {
        "User-Agent": config.USER_AGENT,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
    }


async def fetch_html(
    url: str,
    client: Optional[httpx.AsyncClient] = None,
    timeout: Optional[float] = None,
) -> str:
    """GET url and return the body text, raising FetchError on any failure."""
    timeout = config.FETCH_TIMEOUT if timeout is None else timeout
    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(
            timeout=timeout, follow_redirects=True, headers=browser_headers()
        )
    try:
        response = await client.get(url, timeout=timeout, headers=browser_headers())
        response.raise_for_status()
        return response.text
    except httpx.HTTPStatusError as e:
        raise FetchError(url, f"HTTP {e.response.status_code}") from e
    except httpx.TimeoutException as e:
        raise FetchError(url, "request timed out") from e
    except httpx.HTTPError as e:
        raise FetchError(url, f"network error: {e}") from e
    except httpx.InvalidURL as e:
        raise FetchError(url, f"invalid URL: {e}") from e
    finally:
        if owns_client:
            await client.aclose()


async def fetch_document(
    url: str,
    client: Optional[httpx.AsyncClient] = None,
    timeout: Optional[float] = None,
) -> Document:
    """Fetch url and parse it into a document tree."""
    html = await fetch_html(url, client=client, timeout=timeout)
    return parse_html(html)


class StaticPageSession(PageSession):
    """PageSession backed by plain HTTP GETs sharing one client."""

    kind = "static"

    def __init__(self, client: Optional[httpx.AsyncClient] = None) -> None:
        super().__init__()
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=config.FETCH_TIMEOUT,
            follow_redirects=True,
            headers=browser_headers(),
        )

    async def load(self, url: str, sub_page: bool = False) -> Document:
        timeout = config.SUBPAGE_TIMEOUT if sub_page else config.FETCH_TIMEOUT
        self.current = await fetch_document(url, client=self.client, timeout=timeout)
        self.current_url = url
        return self.current

    async def close(self) -> None:
        if self._owns_client:
            await self.client.aclose()
