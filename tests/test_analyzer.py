"""Tests for keyword/topic enrichment and outlet analytics."""

from newstrack.services import analyzer
from newstrack.services.analyzer import (
    derive_keywords_and_topics,
    extract_entities,
    extract_keywords,
    most_active,
    top_section,
)


def measured(record, headline):
    provenance = dict(record.provenance, latest_article="measured")
    return record.model_copy(update={"latest_article": headline, "provenance": provenance})


def test_extract_keywords_skips_stopwords_and_short_terms():
    keywords = extract_keywords(["Parliament passes the landmark budget bill on Friday"])
    assert 0 < len(keywords) <= 5
    assert "parliament" in keywords
    assert all(len(k) >= 4 for k in keywords)
    assert "the" not in keywords


def test_extract_keywords_handles_empty_input():
    assert extract_keywords([]) == []
    assert extract_keywords(["", "   "]) == []
    assert extract_keywords(["the and of it"]) == []


def test_extract_entities_skips_first_token():
    assert extract_entities("Floods hit Assam as Brahmaputra rises in Assam") == ["Assam", "Brahmaputra"]
    assert extract_entities("") == []


def test_derive_uses_measured_headlines_only(make_record):
    with_headline = measured(make_record(1, "Priya Sharma"), "Parliament passes landmark budget bill")
    without = make_record(2, "Rahul Verma", section="Sports", keywords=["news", "sports"])

    enriched = derive_keywords_and_topics([with_headline, without], use_llm=False)

    assert "parliament" in enriched[0].keywords
    assert enriched[0].topics[0] == "Politics"
    assert enriched[0].provenance["topics"] == "inferred"
    assert enriched[1].keywords == ["news", "sports"]
    assert enriched[1].topics == ["Sports", "Analysis"]
    assert enriched[1].provenance["topics"] == "estimated"


def test_llm_labels_are_merged_into_topics(make_record, monkeypatch):
    record = measured(make_record(1, "Priya Sharma"), "Parliament passes landmark budget bill")
    monkeypatch.setattr(analyzer, "label_topics_with_claude", lambda records: {"Priya Sharma": ["Union Budget"]})

    [enriched] = derive_keywords_and_topics([record], use_llm=True)
    assert enriched.topics[:2] == ["Politics", "Union Budget"]
    assert "Union Budget" in enriched.expertise


def test_llm_failure_falls_back_to_tfidf(make_record, monkeypatch):
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    record = measured(make_record(1, "Priya Sharma"), "Parliament passes landmark budget bill")
    [enriched] = derive_keywords_and_topics([record], use_llm=True)
    assert "parliament" in enriched.keywords


def test_top_section_excludes_unknown_and_rounds(make_record):
    records = [
        make_record(1, "Priya Sharma", section="Politics", article_count=20),
        make_record(2, "Rahul Verma", section="Sports", article_count=10),
        make_record(3, "Anjali Mehta", section="Unknown", article_count=40),
        make_record(4, "Amit Shah", section="Politics", article_count=5),
    ]
    section = top_section(records, total_articles=75)
    assert section.name == "Politics"
    assert section.percentage == 33


def test_top_section_defaults():
    assert top_section([], 0).name == "Unknown"
    assert top_section([], 0).percentage == 0


def test_most_active(make_record):
    records = [
        make_record(1, "Priya Sharma", article_count=12),
        make_record(2, "Rahul Verma", article_count=30),
        make_record(3, "Anjali Mehta", article_count=30),
    ]
    best = most_active(records)
    assert (best.name, best.count) == ("Rahul Verma", 30)
    assert most_active([]).name == "N/A"
