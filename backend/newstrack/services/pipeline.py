"""End-to-end scrape: locate, extract (with escalation), clean, enrich, persist."""

import asyncio
import logging
import random
from datetime import datetime
from typing import List, Optional, Tuple
from urllib.parse import urlparse

import httpx

from .. import config
from ..db.cache import get_cached_result, set_cached_result
from ..db.journalist_store import save_journalists
from ..models.schemas import ExtractionSummary, JournalistRecord, OutletResult, RawRecord
from .analyzer import derive_keywords_and_topics, most_active, top_section
from .browser import BrowserPool
from .cleaner import clean, is_valid_name, normalize_name
from .errors import EmptyResult, InputError, PersistenceUnavailable, UpstreamUnreachable
from .extraction import LastResortStrategy, OutletStrategy, get_strategy, try_strategy
from .fetcher import StaticPageSession
from .locator import locate
from .outlets import GENERIC, OutletProfile, classify
from .page import normalize_site_url, outlet_host


logger = logging.getLogger(__name__)


def looks_like_url(target: str) -> bool:
    """A target with a scheme, or a dotted token without spaces, is a URL."""
    if target.lower().startswith(("http://", "https://")):
        return True
    return " " not in target and "." in target.strip(".")


async def resolve_target(target: str, client: Optional[httpx.AsyncClient] = None) -> str:
    """Turn a URL or outlet name into a site URL."""
    if looks_like_url(target):
        url = normalize_site_url(target)
        try:
            hostname = urlparse(url).hostname
            httpx.URL(url)
        except (ValueError, httpx.InvalidURL) as e:
            raise InputError(f"Not a valid website URL: {target}") from e
        if not hostname:
            raise InputError(f"Not a valid website URL: {target}")
        return url

    website = await locate(target, client=client)
    if not website:
        raise UpstreamUnreachable(
            f"Could not find an official website for '{target}'",
            suggestion="Enter the outlet's website URL directly.",
        )
    logger.info("Resolved %r to %s", target, website)
    return website


def has_usable_names(records: List[RawRecord]) -> bool:
    """True when at least one candidate would survive name cleaning."""
    return any(is_valid_name(normalize_name(r.name)) for r in records)


async def run_strategies(
    url: str,
    profile: OutletProfile,
    rng: random.Random,
    pool: Optional[BrowserPool] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> Tuple[List[RawRecord], str, bool]:
    """Escalate through strategies until one yields usable names.

    Order: outlet strategy over static HTTP, the same over a rendered
    session, the generic strategy (rendered when available), then a
    last-resort static re-fetch. Returns (records, method label, reached).
    """
    rendering = pool is not None and pool.started
    plan: List[Tuple[OutletStrategy, bool]] = [(get_strategy(profile), False)]
    if rendering:
        plan.append((get_strategy(profile), True))
    if not profile.is_generic:
        plan.append((get_strategy(GENERIC), rendering))
    plan.append((LastResortStrategy(), False))

    reached = False
    for strategy, rendered in plan:
        session_scope = pool.session() if rendered else StaticPageSession(client)
        logger.info("Trying %s (%s) on %s", strategy.label, "rendered" if rendered else "static", url)
        try:
            async with session_scope as session:
                records, ok = await try_strategy(strategy, session, url, rng)
        except UpstreamUnreachable as e:
            logger.warning("Could not open a session for %s: %s", strategy.label, e)
            records, ok = [], False
        reached = reached or ok
        if has_usable_names(records):
            return records, strategy.label, reached
        logger.info("%s found nothing on %s, escalating", strategy.label, url)
    return [], "None", reached


def build_result(
    host: str,
    website: str,
    journalists: List[JournalistRecord],
    method: str,
    persisted: bool,
) -> OutletResult:
    """Aggregate analytics over a cleaned batch."""
    total_articles = sum(j.article_count for j in journalists)
    return OutletResult(
        outlet=host,
        detected_website=website,
        journalists=journalists,
        total_articles=total_articles,
        top_section=top_section(journalists, total_articles),
        most_active=most_active(journalists),
        summary=ExtractionSummary(
            outlet=host,
            total_journalists=len(journalists),
            extraction_method=method,
            timestamp=datetime.now(),
            persisted=persisted,
        ),
    )


async def _scrape(
    target: str,
    pool: Optional[BrowserPool],
    rng: random.Random,
    client: Optional[httpx.AsyncClient],
    persist: bool,
) -> OutletResult:
    website = await resolve_target(target, client=client)
    host = outlet_host(website)
    profile = classify(host)
    logger.info("Scraping %s with profile %s", website, profile.key)

    records, method, reached = await run_strategies(website, profile, rng, pool=pool, client=client)
    journalists = clean(records, host, rng=rng, profile=profile)
    if not journalists:
        if not reached:
            raise UpstreamUnreachable(f"Could not load {website}")
        raise EmptyResult(f"No journalist profiles found on {host}")

    try:
        journalists = await asyncio.to_thread(derive_keywords_and_topics, journalists)
    except Exception as e:
        logger.warning("Keyword enrichment failed for %s: %s", host, e)

    persisted = False
    if persist:
        try:
            await asyncio.to_thread(save_journalists, host, journalists)
            persisted = True
        except PersistenceUnavailable as e:
            logger.warning("Results for %s not saved: %s", host, e)

    result = build_result(host, website, journalists, method, persisted)
    logger.info(
        "Extracted %d journalists from %s via %s", len(journalists), host, method
    )
    return result


async def scrape(
    target: Optional[str],
    pool: Optional[BrowserPool] = None,
    rng: Optional[random.Random] = None,
    client: Optional[httpx.AsyncClient] = None,
    persist: bool = True,
    refresh: bool = False,
) -> OutletResult:
    """Scrape journalists for a website URL or outlet name.

    Raises InputError, UpstreamUnreachable or EmptyResult. Fresh cached
    results are returned unless refresh is set.
    """
    target = (target or "").strip()
    if not target:
        raise InputError("No website URL or outlet name provided")

    if not refresh:
        cached = get_cached_result(target)
        if cached:
            result = OutletResult.model_validate(cached)
            result.summary.cached = True
            logger.info("Serving cached result for %r", target)
            return result

    try:
        result = await asyncio.wait_for(
            _scrape(target, pool, rng or random.Random(), client, persist),
            timeout=config.REQUEST_DEADLINE,
        )
    except asyncio.TimeoutError as e:
        raise UpstreamUnreachable(
            f"Scraping '{target}' exceeded {config.REQUEST_DEADLINE:.0f}s",
            suggestion="The site is slow to respond. Try again or use a more specific URL.",
        ) from e

    set_cached_result(target, result.model_dump(mode="json"))
    return result
