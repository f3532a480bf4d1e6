"""Filter, deduplicate and enrich raw byline candidates into journalist records.

Filtering is purely regex/heuristic: a candidate survives only if it looks like
a person's name and not like navigation chrome, a date, or a section label.
Everything the page did not tell us (article counts, contact guesses, sections
for plain bylines) is filled from an injectable random source and tagged
``estimated`` in the record's provenance map.
"""

import logging
import random
import re
import unicodedata
from datetime import date
from typing import List, Optional, Sequence, Tuple, Union

from .. import config
from ..models.schemas import JournalistRecord, RawRecord
from .outlets import OutletProfile, classify
from .sections import SECTION_LABELS, assign_section


logger = logging.getLogger(__name__)

Candidate = Union[RawRecord, JournalistRecord]

MIN_NAME_LENGTH = 3
MAX_NAME_LENGTH = 100
MIN_SINGLE_WORD_LENGTH = 15
MAX_DIGIT_RATIO = 0.3

BLACKLIST = (
    # social platforms
    "whatsapp", "twitter", "facebook", "reddit", "linkedin", "instagram",
    "telegram", "youtube", "pinterest", "tiktok",
    # navigation / UX chrome
    "share", "follow", "subscribe", "newsletter", "email", "rss", "feed",
    "search", "menu", "login", "log in", "signup", "sign up", "sign in",
    "contact", "about", "privacy", "terms", "copyright", "show more",
    "read more", "click here", "advertisement", "cookie", "download",
    # roles and collective bylines
    "team", "staff", "guest", "bureau", "desk", "unknown", "service",
    "agencies", "correspondent",
)
BLACKLIST_RE = re.compile("|".join(re.escape(term) for term in BLACKLIST), re.IGNORECASE)
BYLINE_VERB_RE = re.compile(r"^(posted|updated|published|edited)\b", re.IGNORECASE)

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
MONTHS = (
    "january", "february", "march", "july", "september", "october",
    "november", "december",
)
# Month names that are also common given names ("April Ryan") and
# abbreviations ("Jan", "Mar") only count as dates next to a number.
AMBIGUOUS_DATE_WORDS = (
    "april", "may", "june", "august",
    "jan", "feb", "mar", "apr", "jun", "jul", "aug", "sep", "sept", "oct",
    "nov", "dec", "mon", "tue", "tues", "wed", "thu", "thur", "thurs", "fri",
    "sat", "sun",
)
DATE_WORD_RE = re.compile(r"\b(" + "|".join(WEEKDAYS + MONTHS) + r")\b", re.IGNORECASE)
AMBIGUOUS_DATE_RE = re.compile(
    r"(\d[\s,.]*\b(" + "|".join(AMBIGUOUS_DATE_WORDS) + r")\b"
    r"|\b(" + "|".join(AMBIGUOUS_DATE_WORDS) + r")\b\.?[\s,]*\d)",
    re.IGNORECASE,
)
MERIDIEM_TZ_RE = re.compile(
    r"(?<![\w.])(a\.m\.|p\.m\.|am|pm|ist|gmt|utc|est|edt|cst|cdt|mst|mdt|pst|pdt|bst|cet|cest|aest)(?![\w])",
    re.IGNORECASE,
)
EDGE_DIGITS_RE = re.compile(r"^\d+|\d+$")
YEAR_RE = re.compile(r"(?<!\d)\d{4}(?!\d)")
TIME_RE = re.compile(r"(?<!\d)\d{1,2}:\d{2}(?!\d)")

BY_PREFIX_RE = re.compile(r"^(written|reported|edited|posted)?\s*by\s*[:\-]?\s+", re.IGNORECASE)
PARENTHETICAL_RE = re.compile(r"\([^)]*\)|\[[^\]]*\]")
NAME_PUNCTUATION = set(" .'-’")


def normalize_name(raw: str) -> str:
    """Collapse whitespace, drop "By" prefixes, parentheticals and trailing roles."""
    name = " ".join((raw or "").split())
    previous = None
    # Repeat until stable so "(Photo) By X" and "By By X" both reduce to "X".
    while name != previous:
        previous = name
        name = PARENTHETICAL_RE.sub(" ", name)
        name = " ".join(name.split())
        name = BY_PREFIX_RE.sub("", name)
        for separator in ("|", "•", ","):
            name = name.split(separator, 1)[0]
        name = " ".join(name.split())
        name = name.strip(" -–—:;")
    return name


def _has_name_shape(name: str) -> bool:
    first = name[0]
    if not first.isalpha() or first.islower():
        return False
    for ch in name:
        if ch in NAME_PUNCTUATION:
            continue
        if unicodedata.category(ch)[0] not in ("L", "M"):
            return False
    return True


def rejection_reason(name: str) -> Optional[str]:
    """Return why name is not a plausible journalist name, or None if it is."""
    if len(name) < MIN_NAME_LENGTH or len(name) > MAX_NAME_LENGTH:
        return "length"
    if not any(ch.isalpha() for ch in name):
        return "no letters"
    if BLACKLIST_RE.search(name) or BYLINE_VERB_RE.search(name):
        return "blacklisted"
    if DATE_WORD_RE.search(name) or AMBIGUOUS_DATE_RE.search(name) or MERIDIEM_TZ_RE.search(name):
        return "date"
    if EDGE_DIGITS_RE.search(name) or YEAR_RE.search(name) or TIME_RE.search(name):
        return "digits"
    if sum(ch.isdigit() for ch in name) / len(name) > MAX_DIGIT_RATIO:
        return "digit ratio"
    words = name.split()
    if len(words) == 1 and name.lower() in SECTION_LABELS:
        return "section label"
    if len(words) == 1 and len(name) < MIN_SINGLE_WORD_LENGTH:
        return "single word"
    if not _has_name_shape(name):
        return "not a name"
    return None


def is_valid_name(name: str) -> bool:
    return rejection_reason(name) is None


def is_blacklisted(name: str, extra_terms: Sequence[str] = ()) -> bool:
    """Blacklist check used inline by strategies (substring + outlet words)."""
    if BLACKLIST_RE.search(name):
        return True
    lowered = name.lower()
    return any(re.search(rf"\b{re.escape(term)}\b", lowered) for term in extra_terms)


def _ascii_parts(name: str) -> List[str]:
    ascii_name = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode()
    return re.findall(r"[a-z]+", ascii_name.lower())


def guess_email(name: str, domain: str) -> Optional[str]:
    """firstname.lastname@domain, or None when the name has no latin letters."""
    parts = _ascii_parts(name)
    if not parts or not domain:
        return None
    local = f"{parts[0]}.{parts[-1]}" if len(parts) > 1 else parts[0]
    return f"{local}@{domain}"


def guess_twitter(name: str) -> Optional[str]:
    parts = _ascii_parts(name)
    if not parts:
        return None
    return "@" + "".join(part.capitalize() for part in parts)


def _unique(items: Sequence[str]) -> List[str]:
    seen = set()
    result = []
    for item in items:
        if item and item.lower() not in seen:
            seen.add(item.lower())
            result.append(item)
    return result


def _build_record(
    record_id: int,
    name: str,
    candidate: RawRecord,
    outlet_host: str,
    profile: OutletProfile,
    rng: random.Random,
) -> JournalistRecord:
    provenance = {}

    if candidate.section_hint:
        section = candidate.section_hint
        provenance["section"] = candidate.section_provenance or "inferred"
    else:
        section, provenance["section"] = assign_section(
            name, candidate.context, rng, profile.section_rules, profile.section_weights
        )

    if candidate.article_count is not None:
        article_count = candidate.article_count
        provenance["article_count"] = "measured"
    else:
        low, high = profile.article_count_range
        article_count = rng.randint(low, high)
        provenance["article_count"] = "estimated"

    if candidate.latest_article:
        latest_article = candidate.latest_article
        provenance["latest_article"] = "measured"
    else:
        latest_article = f"Latest {section} Coverage"
        provenance["latest_article"] = "estimated"

    email = guess_email(name, profile.email_domain or outlet_host)
    twitter = guess_twitter(name)
    if email:
        provenance["email"] = "estimated"
        provenance["contact"] = "estimated"
    if twitter:
        provenance["twitter"] = "estimated"

    return JournalistRecord(
        id=record_id,
        name=name,
        profile_url=candidate.profile_url,
        section=section,
        beat=section,
        article_count=article_count,
        latest_article=latest_article,
        date=date.today(),
        topics=_unique([section, *profile.default_topics]),
        keywords=_unique([*profile.default_keywords, section.lower()]),
        expertise=_unique([section, "Reporting"]),
        contact=email,
        email=email,
        twitter=twitter,
        source=outlet_host,
        provenance=provenance,
    )


def clean(
    candidates: Sequence[Candidate],
    outlet_host: str,
    rng: Optional[random.Random] = None,
    profile: Optional[OutletProfile] = None,
) -> List[JournalistRecord]:
    """Turn raw candidates into at most 50 unique, valid journalist records.

    Accepts already-cleaned records too; those keep their fields and only get
    renumbered, so cleaning its own output is a no-op.
    """
    rng = rng or random.Random()
    profile = profile or classify(outlet_host)

    kept: List[Tuple[str, Candidate]] = []
    positions = {}
    for candidate in candidates:
        name = normalize_name(candidate.name)
        reason = rejection_reason(name)
        if reason:
            logger.debug("Rejected %r (%s)", candidate.name, reason)
            continue

        key = name.lower()
        if key in positions:
            index = positions[key]
            existing = kept[index][1]
            if candidate.profile_url and not existing.profile_url:
                kept[index] = (name, candidate)
            continue
        positions[key] = len(kept)
        kept.append((name, candidate))

    if len(kept) > config.MAX_RECORDS:
        logger.info("Truncating %d journalists to %d", len(kept), config.MAX_RECORDS)
        kept = kept[: config.MAX_RECORDS]

    records = []
    for record_id, (name, candidate) in enumerate(kept, start=1):
        if isinstance(candidate, JournalistRecord):
            records.append(candidate.model_copy(update={"id": record_id, "name": name}))
        else:
            records.append(_build_record(record_id, name, candidate, outlet_host, profile, rng))
    return records
