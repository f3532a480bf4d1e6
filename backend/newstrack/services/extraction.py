"""Byline extraction strategies.

Each strategy loads an outlet's front page through a PageSession, reads
candidate bylines out of it (structured data first, then CSS selectors),
optionally follows article links to read bylines off article pages, and
returns RawRecords. Strategies never decide the final record set; that is
the cleaner's job.
"""

import asyncio
import json
import logging
import random
import re
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from bs4 import Tag
from soupsieve import SelectorSyntaxError

from .. import config
from ..models.schemas import RawRecord
from .cleaner import is_blacklisted, normalize_name
from .errors import UpstreamUnreachable
from .outlets import GENERIC, LAST_RESORT_SELECTORS, PROFILES, OutletProfile
from .page import Document, PageSession, absolute_url, outlet_host
from .sections import assign_section


logger = logging.getLogger(__name__)

MAX_CANDIDATE_LENGTH = 100
BYLINE_SPLIT_RE = re.compile(r"\s*(?:,|&|\band\b|\s\|\s)\s*", re.IGNORECASE)


def split_byline(text: str) -> List[str]:
    """Split a shared byline ("By A, B and C") into individual names."""
    text = " ".join((text or "").split())
    text = re.sub(r"^by\s+", "", text, flags=re.IGNORECASE)
    return [part for part in (p.strip() for p in BYLINE_SPLIT_RE.split(text)) if part]


def _iter_jsonld_nodes(data) -> Iterator[dict]:
    if isinstance(data, list):
        for item in data:
            yield from _iter_jsonld_nodes(item)
    elif isinstance(data, dict):
        yield data
        if "@graph" in data:
            yield from _iter_jsonld_nodes(data["@graph"])


def _author_entries(author) -> Iterator[Tuple[str, Optional[str]]]:
    if isinstance(author, str):
        yield author, None
    elif isinstance(author, list):
        for item in author:
            yield from _author_entries(item)
    elif isinstance(author, dict):
        if author.get("@type") == "Organization":
            return
        name = author.get("name")
        if isinstance(name, str):
            yield name, author.get("url") or author.get("@id")


def _section_value(node: dict) -> Optional[str]:
    section = node.get("articleSection")
    if isinstance(section, list):
        section = section[0] if section else None
    if not isinstance(section, str) or not section.strip():
        return None
    return section.strip().replace("-", " ").title()


def extract_structured_authors(doc: Document, base_url: str) -> List[RawRecord]:
    """Authors from JSON-LD blocks plus author meta tags."""
    records: List[RawRecord] = []
    for script in doc.find_all("script", attrs={"type": "application/ld+json"}):
        text = script.string or script.get_text()
        if not text:
            continue
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            logger.debug("Skipping malformed JSON-LD block on %s", base_url)
            continue
        for node in _iter_jsonld_nodes(data):
            section = _section_value(node)
            for author in ("author", "creator"):
                for raw_name, url in _author_entries(node.get(author)):
                    for name in split_byline(raw_name):
                        records.append(
                            RawRecord(
                                name=name,
                                profile_url=absolute_url(base_url, url),
                                section_hint=section,
                                section_provenance="measured" if section else None,
                                context=section,
                            )
                        )

    for meta in doc.find_all("meta", attrs={"name": "author"}) + doc.find_all(
        "meta", attrs={"property": "article:author"}
    ):
        content = (meta.get("content") or "").strip()
        if not content or content.lower().startswith(("http://", "https://")):
            continue
        for name in split_byline(content):
            records.append(RawRecord(name=name))
    return records


def _element_text(element: Tag) -> str:
    if element.name == "meta":
        return (element.get("content") or "").strip()
    return element.get_text(" ", strip=True)


def _element_link(element: Tag) -> Optional[Tag]:
    if element.name == "a":
        return element
    return element.find_parent("a")


def extract_selector_authors(
    doc: Document, base_url: str, selectors: Sequence[str]
) -> List[RawRecord]:
    """Byline candidates matched by CSS selectors.

    A candidate carries a profile link when the element is a link or sits
    inside one.
    """
    records: List[RawRecord] = []
    for selector in selectors:
        try:
            elements = doc.select(selector)
        except SelectorSyntaxError as exc:
            logger.warning("Bad selector %r: %s", selector, exc)
            continue
        for element in elements:
            text = _element_text(element)
            if not text or len(text) > MAX_CANDIDATE_LENGTH:
                continue
            link = _element_link(element)
            href = link.get("href") if link is not None else None
            profile_url = absolute_url(base_url, href)
            context = " ".join(filter(None, [" ".join(element.get("class", [])), href]))
            for name in split_byline(text):
                records.append(
                    RawRecord(name=name, profile_url=profile_url, context=context or None)
                )
    return records


def collect_article_links(
    doc: Document,
    base_url: str,
    selectors: Sequence[str],
    excluded_terms: Sequence[str] = (),
    limit: Optional[int] = None,
) -> List[str]:
    """Same-site article URLs, de-duplicated in document order."""
    limit = config.MAX_ARTICLE_LINKS if limit is None else limit
    host = outlet_host(base_url)
    seen = set()
    links: List[str] = []
    for selector in selectors:
        try:
            anchors = doc.select(selector)
        except SelectorSyntaxError as exc:
            logger.warning("Bad selector %r: %s", selector, exc)
            continue
        for anchor in anchors:
            url = absolute_url(base_url, anchor.get("href"))
            if not url:
                continue
            url = url.split("#", 1)[0]
            if url in seen or url.rstrip("/") == base_url.rstrip("/"):
                continue
            link_host = outlet_host(url)
            if link_host != host and not link_host.endswith("." + host):
                continue
            if any(term in url.lower() for term in excluded_terms):
                continue
            seen.add(url)
            links.append(url)
            if len(links) >= limit:
                return links
    return links


def headline(doc: Document) -> Optional[str]:
    """Article headline from og:title, then h1, then the title tag."""
    og = doc.find("meta", attrs={"property": "og:title"})
    if og and og.get("content"):
        return og["content"].strip()
    h1 = doc.find("h1")
    if h1:
        text = h1.get_text(" ", strip=True)
        if text:
            return text
    if doc.title and doc.title.string:
        return doc.title.string.strip()
    return None


def article_extractor(selectors: Sequence[str]):
    """Build the per-article extractor used during sub-crawls.

    Each byline found on an article page counts as one article for that
    author and carries the page headline and URL as context.
    """

    def extract(doc: Document, url: str) -> List[RawRecord]:
        title = headline(doc)
        found = extract_structured_authors(doc, url) + extract_selector_authors(
            doc, url, selectors
        )
        records = []
        seen = set()
        for record in found:
            key = normalize_name(record.name).lower()
            if key in seen:
                continue
            seen.add(key)
            records.append(
                record.model_copy(
                    update={
                        "context": " ".join(filter(None, [record.context, url])),
                        "article_count": 1,
                        "latest_article": title,
                    }
                )
            )
        return records

    return extract


def merge_candidates(records: Sequence[RawRecord]) -> List[RawRecord]:
    """Collapse repeated bylines by case-insensitive name.

    First occurrence keeps its position. A profile link, section, headline
    and context are filled from later occurrences; article counts from
    article pages are summed.
    """
    merged: Dict[str, RawRecord] = {}
    for record in records:
        name = normalize_name(record.name)
        if not name:
            continue
        key = name.lower()
        existing = merged.get(key)
        if existing is None:
            merged[key] = record.model_copy(update={"name": name})
            continue

        update = {}
        if record.profile_url and not existing.profile_url:
            update["profile_url"] = record.profile_url
        if record.section_hint and not existing.section_hint:
            update["section_hint"] = record.section_hint
            update["section_provenance"] = record.section_provenance
        if record.latest_article and not existing.latest_article:
            update["latest_article"] = record.latest_article
        if record.article_count is not None:
            update["article_count"] = (existing.article_count or 0) + record.article_count
        if record.context and record.context not in (existing.context or ""):
            update["context"] = " ".join(filter(None, [existing.context, record.context]))
        if update:
            merged[key] = existing.model_copy(update=update)
    return list(merged.values())


class ExtractionStrategy:
    """Common capability: (session, root url, rng) -> raw byline records."""

    name = "base"

    async def extract(
        self, session: PageSession, root_url: str, rng: random.Random
    ) -> List[RawRecord]:
        raise NotImplementedError


class OutletStrategy(ExtractionStrategy):
    """Profile-driven extraction for a recognized outlet (or the generic one)."""

    def __init__(self, profile: OutletProfile) -> None:
        self.profile = profile

    @property
    def name(self) -> str:
        return self.profile.key

    @property
    def label(self) -> str:
        if self.profile.is_generic:
            return "Universal"
        return f"Specialized ({self.profile.key})"

    def _root_candidates(self, doc: Document, url: str) -> List[RawRecord]:
        return extract_structured_authors(doc, url) + extract_selector_authors(
            doc, url, self.profile.author_selectors
        )

    def _article_links(self, doc: Document, url: str) -> List[str]:
        return collect_article_links(
            doc, url, self.profile.article_link_selectors, self.profile.excluded_link_terms
        )

    def finalize(self, records: Sequence[RawRecord], rng: random.Random) -> List[RawRecord]:
        """Drop blacklisted names and attach a section hint to every record."""
        result = []
        for record in records:
            if is_blacklisted(record.name, self.profile.blacklist_terms):
                logger.debug("%s: dropped blacklisted byline %r", self.name, record.name)
                continue
            if not record.section_hint:
                section, provenance = assign_section(
                    record.name,
                    record.context,
                    rng,
                    self.profile.section_rules,
                    self.profile.section_weights,
                )
                record = record.model_copy(
                    update={"section_hint": section, "section_provenance": provenance}
                )
            result.append(record)
        return result

    async def extract(
        self, session: PageSession, root_url: str, rng: random.Random
    ) -> List[RawRecord]:
        """Run the profile against root_url.

        Load failures propagate as UpstreamUnreachable so the caller can
        escalate; anything that goes wrong while reading the page yields [].
        """
        await session.load(root_url)
        base_url = session.current_url or root_url
        try:
            candidates = await session.evaluate(self._root_candidates)
            links = await session.evaluate(self._article_links) if self.profile.crawl else []
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.error("%s extraction failed on %s: %s", self.name, base_url, exc)
            return []
        logger.info(
            "%s: %d candidates on %s (%s), %d article links",
            self.name, len(candidates), base_url, session.kind, len(links),
        )

        if links:
            candidates += await session.sub_crawl(
                links, article_extractor(self.profile.article_author_selectors)
            )

        records = self.finalize(merge_candidates(candidates), rng)
        logger.info("%s: %d bylines after merge", self.name, len(records))
        return records


class LastResortStrategy(OutletStrategy):
    """A handful of near-universal byline markers, no crawling."""

    def __init__(self, profile: OutletProfile = GENERIC) -> None:
        super().__init__(profile)

    @property
    def name(self) -> str:
        return "last-resort"

    @property
    def label(self) -> str:
        return "Last resort"

    def _root_candidates(self, doc: Document, url: str) -> List[RawRecord]:
        return extract_selector_authors(doc, url, LAST_RESORT_SELECTORS)

    def _article_links(self, doc: Document, url: str) -> List[str]:
        return []


STRATEGIES: Dict[str, OutletStrategy] = {
    profile.key: OutletStrategy(profile) for profile in PROFILES + (GENERIC,)
}


def get_strategy(profile: OutletProfile) -> OutletStrategy:
    """Strategy registered for profile, else the generic one."""
    return STRATEGIES.get(profile.key, STRATEGIES[GENERIC.key])


async def try_strategy(
    strategy: ExtractionStrategy,
    session: PageSession,
    root_url: str,
    rng: random.Random,
) -> Tuple[List[RawRecord], bool]:
    """Run strategy and report (records, whether the site was reached)."""
    try:
        records = await strategy.extract(session, root_url, rng)
    except UpstreamUnreachable as exc:
        logger.warning("%s (%s) could not load %s: %s", strategy.name, session.kind, root_url, exc)
        return [], False
    return records, True
