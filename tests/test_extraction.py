"""Tests for byline extraction strategies against canned HTML."""

import random

import pytest

from newstrack.models.schemas import RawRecord
from newstrack.services.extraction import (
    LastResortStrategy,
    collect_article_links,
    extract_selector_authors,
    extract_structured_authors,
    get_strategy,
    merge_candidates,
    split_byline,
    try_strategy,
)
from newstrack.services.outlets import GENERIC, classify
from newstrack.services.page import parse_html


ROOT = "https://www.ndtv.com"
STORY_1 = "https://www.ndtv.com/news/india/story-1"
STORY_2 = "https://www.ndtv.com/news/world/story-2"

NDTV_HOME = """
<html><head>
<script type="application/ld+json">
{"@context": "https://schema.org", "@graph": [
  {"@type": "NewsArticle", "articleSection": "Politics",
   "author": [{"@type": "Person", "name": "Priya Sharma", "url": "/author/priya-sharma"},
              {"@type": "Organization", "name": "NDTV"}]}
]}
</script>
</head><body>
<div class="pst-by"><a href="/author/rahul-verma">Rahul Verma</a></div>
<span class="author-name">NDTV News Desk</span>
<a href="/news/india/story-1">Story one</a>
<a href="/news/world/story-2#comments">Story two</a>
<a href="/video/news/clip-3">Clip</a>
<a href="https://other.example/news/x">Elsewhere</a>
</body></html>
"""

STORY_1_HTML = """
<html><head><meta property="og:title" content="Parliament passes budget bill"></head>
<body><div class="pst-by"><a href="/author/rahul-verma">Rahul Verma</a></div></body></html>
"""

STORY_2_HTML = """
<html><body><h1>Floods in Assam</h1>
<span itemprop="author">Anjali Mehta</span>
<div class="pst-by"><a href="/author/rahul-verma">Rahul Verma</a></div>
</body></html>
"""


def by_name(records):
    return {r.name: r for r in records}


@pytest.mark.asyncio
async def test_outlet_strategy_reads_structured_data_selectors_and_articles(fake_session):
    session = fake_session({ROOT: NDTV_HOME, STORY_1: STORY_1_HTML, STORY_2: STORY_2_HTML})
    strategy = get_strategy(classify("ndtv.com"))

    records = await strategy.extract(session, ROOT, random.Random(0))
    found = by_name(records)

    assert set(found) == {"Priya Sharma", "Rahul Verma", "Anjali Mehta"}
    assert session.loaded == [ROOT, STORY_1, STORY_2]

    priya = found["Priya Sharma"]
    assert priya.profile_url == "https://www.ndtv.com/author/priya-sharma"
    assert (priya.section_hint, priya.section_provenance) == ("Politics", "measured")

    rahul = found["Rahul Verma"]
    assert rahul.profile_url == "https://www.ndtv.com/author/rahul-verma"
    assert rahul.article_count == 2
    assert rahul.latest_article == "Parliament passes budget bill"

    anjali = found["Anjali Mehta"]
    assert anjali.article_count == 1
    assert anjali.latest_article == "Floods in Assam"
    assert all(r.section_hint for r in records)


@pytest.mark.asyncio
async def test_generic_strategy_does_not_crawl(fake_session):
    home = """
    <a rel="author" href="/people/jane-roe">Jane Roe</a>
    <a href="/news/story">A story</a>
    """
    session = fake_session({"https://example.com": home})
    records = await get_strategy(GENERIC).extract(session, "https://example.com", random.Random(0))
    assert [r.name for r in records] == ["Jane Roe"]
    assert records[0].profile_url == "https://example.com/people/jane-roe"
    assert session.loaded == ["https://example.com"]


@pytest.mark.asyncio
async def test_evaluation_failure_yields_empty_list(fake_session):
    class Broken(fake_session):
        async def evaluate(self, extractor):
            raise ValueError("bad markup")

    session = Broken({ROOT: NDTV_HOME})
    assert await get_strategy(classify("ndtv.com")).extract(session, ROOT, random.Random(0)) == []


@pytest.mark.asyncio
async def test_unreachable_root_is_reported(fake_session):
    records, reached = await try_strategy(get_strategy(GENERIC), fake_session({}), ROOT, random.Random(0))
    assert records == []
    assert reached is False


@pytest.mark.asyncio
async def test_last_resort_uses_narrow_selectors(fake_session):
    home = """
    <html><head><meta name="author" content="Jane Roe"></head>
    <body><p class="byline">Amit Shah</p><a href="/author/x">Not Picked</a></body></html>
    """
    session = fake_session({"https://example.com": home})
    records = await LastResortStrategy().extract(session, "https://example.com", random.Random(0))
    assert [r.name for r in records] == ["Jane Roe", "Amit Shah"]


def test_structured_authors_handle_strings_lists_and_meta():
    doc = parse_html("""
    <script type="application/ld+json">[{"author": "Jane Roe"}, {"creator": ["Amit Shah"]}]</script>
    <script type="application/ld+json">{not json</script>
    <meta name="author" content="By Lena Park and Omar Haddad">
    <meta property="article:author" content="https://facebook.com/someone">
    """)
    names = [r.name for r in extract_structured_authors(doc, "https://example.com")]
    assert names == ["Jane Roe", "Amit Shah", "Lena Park", "Omar Haddad"]


def test_selector_authors_pick_up_wrapping_links():
    doc = parse_html('<a href="/author/jane"><span class="author">Jane Roe</span></a>'
                     '<span class="author">Amit Shah</span>')
    records = extract_selector_authors(doc, "https://example.com/news/", [".author"])
    assert [(r.name, r.profile_url) for r in records] == [
        ("Jane Roe", "https://example.com/author/jane"),
        ("Amit Shah", None),
    ]


def test_collect_article_links_filters_and_limits():
    doc = parse_html("".join(f'<a href="/news/story-{i}">s</a>' for i in range(40))
                     + '<a href="/news/video-1">v</a>')
    links = collect_article_links(doc, "https://example.com", ['a[href*="/news/"]'], ("video",))
    assert len(links) == 30
    assert links[0] == "https://example.com/news/story-0"
    assert not any("video" in link for link in links)


def test_split_byline():
    assert split_byline("By Jane Roe, John Doe and Amit Shah") == ["Jane Roe", "John Doe", "Amit Shah"]
    assert split_byline("Ferdinand Andrews") == ["Ferdinand Andrews"]


def test_merge_prefers_profile_link_and_sums_article_counts():
    merged = merge_candidates([
        RawRecord(name="Jane Roe"),
        RawRecord(name="jane roe", profile_url="https://example.com/author/jane", article_count=1),
        RawRecord(name="Jane  Roe", article_count=1, latest_article="Later headline"),
        RawRecord(name="Amit Shah"),
    ])
    assert [r.name for r in merged] == ["Jane Roe", "Amit Shah"]
    assert merged[0].profile_url == "https://example.com/author/jane"
    assert merged[0].article_count == 2
    assert merged[0].latest_article == "Later headline"
    assert merged[1].article_count is None
