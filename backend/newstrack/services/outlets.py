"""Outlet profiles: per-outlet extraction recipes and hostname classification."""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .sections import (
    DEFAULT_SECTION_RULES,
    GENERIC_WEIGHTS,
    SectionRule,
    SectionWeights,
    validate_weights,
)


EXCLUDED_LINK_TERMS = ("video", "photo", "livetv", "/live", "gallery", "podcast")


@dataclass(frozen=True)
class OutletProfile:
    """A named extraction recipe."""

    key: str
    display_name: str
    markers: Tuple[str, ...] = ()
    email_domain: Optional[str] = None
    author_selectors: Tuple[str, ...] = ()
    article_author_selectors: Tuple[str, ...] = ()
    article_link_selectors: Tuple[str, ...] = ()
    excluded_link_terms: Tuple[str, ...] = EXCLUDED_LINK_TERMS
    blacklist_terms: Tuple[str, ...] = ()
    section_rules: Tuple[SectionRule, ...] = DEFAULT_SECTION_RULES
    section_weights: SectionWeights = GENERIC_WEIGHTS
    article_count_range: Tuple[int, int] = (5, 50)
    crawl: bool = True
    default_topics: Tuple[str, ...] = ("News",)
    default_keywords: Tuple[str, ...] = ("journalism",)

    def __post_init__(self) -> None:
        validate_weights(self.section_weights)
        low, high = self.article_count_range
        if low < 0 or high < low:
            raise ValueError(f"Invalid article count range for {self.key}: {low}..{high}")

    @property
    def is_generic(self) -> bool:
        return self.key == "generic"


COMMON_ARTICLE_AUTHOR_SELECTORS = (
    'span[itemprop="author"]',
    'a[rel="author"]',
    'a[href*="/author/"]',
    ".byline a",
    '[class*="author-name"]',
)

GENERIC = OutletProfile(
    key="generic",
    display_name="Universal",
    author_selectors=(
        'a[href*="author"]',
        'a[rel="author"]',
        '[itemprop="author"]',
        ".author",
        ".author-name",
        ".byline",
        ".writer",
    ),
    article_count_range=(8, 37),
    crawl=False,
)

# Tried when every other strategy came back empty.
LAST_RESORT_SELECTORS = ('meta[name="author"]', '[rel="author"]', ".byline")

PROFILES: Tuple[OutletProfile, ...] = (
    OutletProfile(
        key="ndtv",
        display_name="NDTV",
        markers=("ndtv",),
        email_domain="ndtv.com",
        author_selectors=(
            ".pst-by_ln a", ".pst-by a", ".author-name", ".article-author a",
            ".ins_storybody .posted_by a",
            'span[itemprop="author"] span[itemprop="name"]',
            ".auth_detail a", 'a[href*="/author/"]', 'a[href*="/people/"]',
            ".byline a", '[class*="author"] a', '[class*="byline"]',
            'div[class*="author-"]', 'span[class*="author-"]',
        ),
        article_author_selectors=(
            ".pst-by_ln a", ".pst-by a", 'span[itemprop="author"]',
            'a[href*="/author/"]', 'a[href*="/people/"]', ".byline a",
            ".story-author", '[class*="author-name"]',
        ),
        article_link_selectors=(
            'a[href*="/news/"]', 'a[href*="/article/"]', 'a[href*="/story/"]',
            'a[href*="/india/"]', 'a[href*="/world/"]', 'a[href*="/opinion/"]',
        ),
        blacklist_terms=("ndtv", "desk", "bureau"),
        section_weights=(
            ("Politics", 0.4), ("Business", 0.2), ("Technology", 0.15),
            ("Sports", 0.1), ("Entertainment", 0.1), ("Health", 0.05),
        ),
        article_count_range=(10, 54),
        default_topics=("Breaking News", "Analysis"),
        default_keywords=("news", "india"),
    ),
    OutletProfile(
        key="aajtak",
        display_name="Aaj Tak",
        markers=("aajtak", "aaj-tak"),
        email_domain="aajtak.in",
        author_selectors=(
            ".author-name", ".byline a", 'span[itemprop="author"]',
            'a[href*="/author/"]',
        ),
        article_author_selectors=COMMON_ARTICLE_AUTHOR_SELECTORS,
        article_link_selectors=(
            'a[href*="/story/"]', 'a[href*="/india/"]', 'a[href*="/world/"]',
            'a[href*="/sports/"]', 'a[href*="/entertainment/"]',
        ),
        blacklist_terms=("aajtak",),
        section_rules=(
            ("Sports", ("sport",)),
            ("Entertainment", ("entertain",)),
            ("Technology", ("tech",)),
            ("Business", ("business",)),
        ),
        section_weights=(
            ("Politics", 0.4), ("Entertainment", 0.2), ("Sports", 0.2),
            ("National", 0.2),
        ),
        article_count_range=(10, 49),
        default_topics=("News",),
        default_keywords=("hindi", "news"),
    ),
    OutletProfile(
        key="thehindu",
        display_name="The Hindu",
        markers=("thehindu",),
        email_domain="thehindu.co.in",
        author_selectors=(
            ".author-name a", 'a[href*="/profile/author/"]', 'a[href*="/author/"]',
            'span[itemprop="author"] a',
        ),
        article_author_selectors=(
            ".author-name a", 'a[href*="/profile/author/"]', 'a[href*="/author/"]',
            'span[itemprop="author"] a', ".person-name",
        ),
        article_link_selectors=(
            'a[href*="/news/"]', 'a[href*="/opinion/"]', 'a[href*="/business/"]',
            'a[href*="/sci-tech/"]', 'a[href*="/sport/"]',
        ),
        blacklist_terms=("desk",),
        section_rules=(
            ("Sports", ("sport",)),
            ("Technology", ("tech",)),
            ("Economy", ("business", "econom")),
            ("International", ("international",)),
            ("Opinion", ("opinion",)),
        ),
        section_weights=(
            ("Politics", 0.4), ("Economy", 0.2), ("International", 0.15),
            ("Opinion", 0.1), ("Sports", 0.15),
        ),
        article_count_range=(15, 74),
        default_topics=("Analysis",),
        default_keywords=("journalism",),
    ),
    OutletProfile(
        key="toi",
        display_name="Times of India",
        markers=("timesofindia", "indiatimes"),
        email_domain="timesgroup.com",
        author_selectors=(
            ".byline a", 'span[itemprop="author"]', ".author a",
            'a[href*="/toireporter/author-"]',
        ),
        article_author_selectors=(
            ".byline a", 'span[itemprop="author"]', 'a[href*="/toireporter/"]',
            'a[href*="/author/"]',
        ),
        article_link_selectors=(
            'a[href*="/articleshow/"]', 'a[href*="/city/"]', 'a[href*="/india/"]',
            'a[href*="/business/"]',
        ),
        blacklist_terms=("toi", "times"),
        section_rules=(
            ("Sports", ("sport",)),
            ("Business", ("business",)),
            ("Entertainment", ("entertain",)),
        ),
        section_weights=(
            ("City", 0.35), ("India", 0.25), ("Business", 0.15),
            ("Sports", 0.1), ("Entertainment", 0.15),
        ),
        article_count_range=(12, 61),
        default_topics=("Breaking",),
        default_keywords=("times",),
    ),
    OutletProfile(
        key="indianexpress",
        display_name="The Indian Express",
        markers=("indianexpress",),
        email_domain="indianexpress.com",
        author_selectors=(
            'a[href*="/profile/author/"]', ".editor a", "#written_by1 a",
            'span[itemprop="author"]',
        ),
        article_author_selectors=(
            'a[href*="/profile/author/"]', ".editor a", "#written_by1 a",
            'span[itemprop="author"]',
        ),
        article_link_selectors=('a[href*="/article/"]',),
        blacklist_terms=("express", "desk"),
        section_weights=(
            ("India", 0.3), ("Politics", 0.25), ("Business", 0.15),
            ("Explained", 0.1), ("Opinion", 0.1), ("Sports", 0.1),
        ),
        article_count_range=(10, 50),
        default_keywords=("news", "india"),
    ),
    OutletProfile(
        key="hindustantimes",
        display_name="Hindustan Times",
        markers=("hindustantimes",),
        email_domain="hindustantimes.com",
        author_selectors=(
            ".storyBy a", 'a[href*="/author/"]', ".authorName", 'span[itemprop="author"]',
        ),
        article_author_selectors=(
            ".storyBy a", 'a[href*="/author/"]', ".authorName", ".dateTime + a",
        ),
        article_link_selectors=(
            'a[href*="-news/"]', 'a[href*="/opinion/"]', 'a[href*="/cities/"]',
        ),
        blacklist_terms=("hindustan", "desk"),
        section_weights=(
            ("India", 0.3), ("Cities", 0.2), ("World", 0.15), ("Business", 0.15),
            ("Entertainment", 0.1), ("Sports", 0.1),
        ),
        article_count_range=(10, 50),
        default_keywords=("news", "india"),
    ),
    OutletProfile(
        key="news18",
        display_name="News18",
        markers=("news18",),
        email_domain="news18.com",
        author_selectors=(
            ".article_byline a", 'a[href*="/byline/"]', 'a[href*="/author/"]',
            ".rptby a",
        ),
        article_author_selectors=(
            ".article_byline a", 'a[href*="/byline/"]', 'a[href*="/author/"]',
            ".rptby a",
        ),
        article_link_selectors=('a[href*="/news/"]',),
        blacklist_terms=("news18", "desk"),
        section_weights=(
            ("India", 0.35), ("Politics", 0.25), ("Entertainment", 0.15),
            ("Sports", 0.15), ("Business", 0.1),
        ),
        article_count_range=(10, 50),
        default_keywords=("news", "india"),
    ),
    OutletProfile(
        key="bbc",
        display_name="BBC",
        markers=("bbc.com", "bbc.co.uk"),
        email_domain="bbc.com",
        author_selectors=(
            '[data-component="byline-block"] a',
            ".ssrcss-68pt20-Text-TextContributorName",
            'a[href*="/news/correspondents/"]',
            ".qa-contributor-name",
            '[class*="Contributor"]',
        ),
        article_author_selectors=(
            '[data-component="byline-block"] a',
            ".ssrcss-68pt20-Text-TextContributorName",
            'a[href*="/correspondents/"]',
            '[data-testid="byline-new-contributors"] span',
        ),
        article_link_selectors=('a[href*="/news/"]',),
        blacklist_terms=("bbc", "editor"),
        section_weights=(
            ("World", 0.2), ("UK", 0.2), ("Business", 0.2), ("Politics", 0.2),
            ("Technology", 0.2),
        ),
        article_count_range=(10, 49),
        default_topics=("News",),
        default_keywords=("bbc",),
    ),
    OutletProfile(
        key="cnn",
        display_name="CNN",
        markers=("cnn.com",),
        email_domain="cnn.com",
        author_selectors=(
            ".byline__name", 'a[href*="/profiles/"]', ".metadata__byline__author",
        ),
        article_author_selectors=(
            ".byline__name", 'a[href*="/profiles/"]', ".metadata__byline__author",
        ),
        article_link_selectors=(
            'a[href*="/politics/"]', 'a[href*="/world/"]', 'a[href*="/business/"]',
            'a[href*="/us/"]',
        ),
        blacklist_terms=("cnn",),
        section_weights=(
            ("Politics", 0.3), ("World", 0.25), ("US", 0.2), ("Business", 0.15),
            ("Health", 0.1),
        ),
        article_count_range=(10, 50),
    ),
    OutletProfile(
        key="nytimes",
        display_name="The New York Times",
        markers=("nytimes.com",),
        email_domain="nytimes.com",
        author_selectors=(
            'a[href*="/by/"]', 'span[itemprop="name"]', ".css-1baulvz", '[class*="byline"] a',
        ),
        article_author_selectors=(
            'a[href*="/by/"]', 'span[itemprop="name"]', '[class*="byline"] a',
        ),
        article_link_selectors=(
            'a[href*="/20"]',  # dated article paths: /2024/05/01/...
        ),
        blacklist_terms=("new york times",),
        section_weights=(
            ("U.S.", 0.3), ("World", 0.25), ("Business", 0.15), ("Opinion", 0.15),
            ("Arts", 0.15),
        ),
        article_count_range=(10, 50),
    ),
    OutletProfile(
        key="guardian",
        display_name="The Guardian",
        markers=("theguardian.com",),
        email_domain="theguardian.com",
        author_selectors=(
            'a[rel="author"]', 'a[href*="/profile/"]', '[data-link-name="byline"] a',
        ),
        article_author_selectors=(
            'a[rel="author"]', 'a[href*="/profile/"]', '[data-link-name="byline"] a',
        ),
        article_link_selectors=(
            'a[href*="/20"]',
        ),
        blacklist_terms=("guardian",),
        section_weights=(
            ("UK", 0.25), ("World", 0.25), ("Politics", 0.2), ("Opinion", 0.15),
            ("Culture", 0.15),
        ),
        article_count_range=(10, 50),
    ),
    OutletProfile(
        key="reuters",
        display_name="Reuters",
        markers=("reuters.com",),
        email_domain="thomsonreuters.com",
        author_selectors=(
            'a[href*="/authors/"]', '[data-testid="AuthorName"]', '[class*="author-name"]',
        ),
        article_author_selectors=(
            'a[href*="/authors/"]', '[data-testid="AuthorName"]', '[class*="author-name"]',
        ),
        article_link_selectors=(
            'a[href*="/world/"]', 'a[href*="/business/"]', 'a[href*="/markets/"]',
            'a[href*="/technology/"]',
        ),
        blacklist_terms=("reuters",),
        section_weights=(
            ("World", 0.3), ("Business", 0.3), ("Markets", 0.2), ("Technology", 0.1),
            ("Legal", 0.1),
        ),
        article_count_range=(10, 50),
    ),
)

PROFILES_BY_KEY: Dict[str, OutletProfile] = {p.key: p for p in PROFILES}
PROFILES_BY_KEY[GENERIC.key] = GENERIC


def classify(hostname: str) -> OutletProfile:
    """Map a hostname to the first matching outlet profile, else generic."""
    host = (hostname or "").lower()
    for profile in PROFILES:
        if any(marker in host for marker in profile.markers):
            return profile
    return GENERIC


def get_profile(key: str) -> OutletProfile:
    """Look up a profile by key."""
    return PROFILES_BY_KEY.get(key, GENERIC)
