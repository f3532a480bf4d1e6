"""Resolve an outlet name ("The Hindu") to its official website root.

Resolution order: a small table of well-known outlets, then a DuckDuckGo
HTML search, then guessing "<name>.com" and probing it. Every path fails
closed: an outlet that cannot be confirmed resolves to None.
"""

import logging
import re
from typing import Dict, Optional
from urllib.parse import parse_qs, quote_plus, urlencode, urlparse, urlunparse

import httpx

from .. import config
from .fetcher import browser_headers
from .page import parse_html


logger = logging.getLogger(__name__)

SEARCH_URL = "https://html.duckduckgo.com/html/?q={query}"

KNOWN_OUTLETS: Dict[str, str] = {
    "the hindu": "https://www.thehindu.com",
    "hindu": "https://www.thehindu.com",
    "ndtv": "https://www.ndtv.com",
    "aaj tak": "https://www.aajtak.in",
    "aajtak": "https://www.aajtak.in",
    "times of india": "https://timesofindia.indiatimes.com",
    "toi": "https://timesofindia.indiatimes.com",
    "the indian express": "https://indianexpress.com",
    "indian express": "https://indianexpress.com",
    "hindustan times": "https://www.hindustantimes.com",
    "news18": "https://www.news18.com",
    "bbc": "https://www.bbc.com",
    "bbc news": "https://www.bbc.com",
    "cnn": "https://www.cnn.com",
    "the new york times": "https://www.nytimes.com",
    "new york times": "https://www.nytimes.com",
    "nyt": "https://www.nytimes.com",
    "the guardian": "https://www.theguardian.com",
    "guardian": "https://www.theguardian.com",
    "reuters": "https://www.reuters.com",
}

# Results on these hosts are never an outlet's own site.
SKIPPED_RESULT_HOSTS = (
    "duckduckgo.com", "wikipedia.org", "wikidata.org", "facebook.com",
    "twitter.com", "x.com", "instagram.com", "youtube.com", "linkedin.com",
    "reddit.com", "play.google.com", "apps.apple.com",
)

TRACKING_PARAMS = ("fbclid", "gclid", "msclkid", "ref", "ref_src")


def _key(name: str) -> str:
    return " ".join(name.lower().split())


def strip_tracking(url: str) -> str:
    """Drop utm_* and click-id query parameters."""
    parsed = urlparse(url)
    if not parsed.query:
        return url
    params = parse_qs(parsed.query, keep_blank_values=True)
    kept = {
        k: v for k, v in params.items()
        if not k.lower().startswith("utm_") and k.lower() not in TRACKING_PARAMS
    }
    return urlunparse(parsed._replace(query=urlencode(kept, doseq=True)))


def unwrap_result_link(href: str) -> Optional[str]:
    """Turn a DuckDuckGo result href into the real destination URL."""
    if not href:
        return None
    if href.startswith("//"):
        href = "https:" + href
    parsed = urlparse(href)
    if parsed.hostname and parsed.hostname.endswith("duckduckgo.com") and parsed.path.startswith("/l/"):
        target = parse_qs(parsed.query).get("uddg")
        if not target:
            return None
        href = target[0]
        parsed = urlparse(href)
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        return None
    return strip_tracking(href)


def site_root(url: str) -> str:
    """scheme://host of url."""
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.hostname}"


def _skipped(host: str) -> bool:
    host = host.lower()
    return any(host == skip or host.endswith("." + skip) for skip in SKIPPED_RESULT_HOSTS)


async def search_official_site(name: str, client: httpx.AsyncClient) -> Optional[str]:
    """First organic DuckDuckGo result that is not a social/reference site."""
    url = SEARCH_URL.format(query=quote_plus(f"{name} news official website"))
    try:
        response = await client.get(url, timeout=config.SEARCH_TIMEOUT, headers=browser_headers())
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning("Search for %r failed: %s", name, e)
        return None

    doc = parse_html(response.text)
    for anchor in doc.select("a.result__a"):
        target = unwrap_result_link(anchor.get("href"))
        if not target:
            continue
        host = urlparse(target).hostname or ""
        if _skipped(host):
            continue
        return site_root(target)
    logger.info("No usable search result for %r", name)
    return None


async def probe(url: str, client: httpx.AsyncClient) -> bool:
    """True if url answers with a non-error status (HEAD, GET if HEAD is refused)."""
    try:
        response = await client.head(url, timeout=config.PROBE_TIMEOUT, headers=browser_headers())
        if response.status_code in (403, 405, 501):
            response = await client.get(url, timeout=config.PROBE_TIMEOUT, headers=browser_headers())
    except httpx.HTTPError as e:
        logger.debug("Probe of %s failed: %s", url, e)
        return False
    return response.status_code < 400


def guess_domain(name: str) -> Optional[str]:
    """Pattern guess: "The Daily Planet" becomes https://www.thedailyplanet.com."""
    slug = re.sub(r"[^a-z0-9]", "", name.lower())
    if not slug:
        return None
    return f"https://www.{slug}.com"


async def locate(name: str, client: Optional[httpx.AsyncClient] = None) -> Optional[str]:
    """Best-effort lookup of an outlet's official website root.

    Returns None when nothing could be confirmed.
    """
    key = _key(name or "")
    if not key:
        return None
    if key in KNOWN_OUTLETS:
        return KNOWN_OUTLETS[key]

    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(follow_redirects=True)
    try:
        found = await search_official_site(name, client)
        if found:
            logger.info("Located %r via search: %s", name, found)
            return found

        guess = guess_domain(name)
        if guess and await probe(guess, client):
            logger.info("Located %r by domain guess: %s", name, guess)
            return guess
    finally:
        if owns_client:
            await client.aclose()

    logger.info("Could not locate a website for %r", name)
    return None
