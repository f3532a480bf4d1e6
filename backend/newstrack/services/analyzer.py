"""Keyword/topic enrichment and outlet-level analytics.

Keywords come from TF-IDF over the headlines actually read for a journalist.
When ANTHROPIC_API_KEY is set, Claude Haiku labels topics in one batched call;
any API or parsing failure falls back to the TF-IDF/entity heuristic.
"""

import json
import logging
import os
import re
from collections import Counter
from typing import Dict, List, Optional, Sequence

import anthropic
from sklearn.feature_extraction.text import TfidfVectorizer

from .. import config
from ..models.schemas import JournalistRecord, MostActive, TopSection
from .sections import UNCLASSIFIED


logger = logging.getLogger(__name__)

MODEL = "claude-3-haiku-20240307"

TOP_KEYWORDS = 5
MIN_TERM_LENGTH = 4
MIN_ENTITY_LENGTH = 3
LLM_TOPICS_PER_JOURNALIST = 3

# Sections that say nothing about what a newsroom covers.
UNINFORMATIVE_SECTIONS = {"Unknown", UNCLASSIFIED}


def get_client() -> anthropic.Anthropic:
    """Get Anthropic client."""
    api_key = os.getenv("ANTHROPIC_API_KEY")
    if not api_key:
        raise ValueError("ANTHROPIC_API_KEY environment variable not set")
    return anthropic.Anthropic(api_key=api_key)


def extract_keywords(texts: Sequence[str], top_n: int = TOP_KEYWORDS) -> List[str]:
    """Highest-scoring TF-IDF terms (4+ letters, English stopwords removed)."""
    docs = [t for t in texts if t and t.strip()]
    if not docs:
        return []
    vectorizer = TfidfVectorizer(
        stop_words="english",
        lowercase=True,
        token_pattern=rf"(?u)\b[^\W\d_]{{{MIN_TERM_LENGTH},}}\b",
    )
    try:
        matrix = vectorizer.fit_transform(docs)
    except ValueError:
        # empty vocabulary: every token was a stopword or too short
        return []
    scores = matrix.sum(axis=0).A1
    terms = vectorizer.get_feature_names_out()
    ranked = sorted(zip(terms, scores), key=lambda pair: (-pair[1], pair[0]))
    return [term for term, _ in ranked[:top_n]]


def extract_entities(text: str) -> List[str]:
    """Capitalized words after the first token, a rough proper-noun pass."""
    tokens = re.findall(r"[^\W\d_][\w'-]*", text or "")
    entities = []
    for token in tokens[1:]:
        if len(token) >= MIN_ENTITY_LENGTH and token[0].isupper() and token not in entities:
            entities.append(token)
    return entities


def _unique(items: Sequence[str]) -> List[str]:
    seen = set()
    result = []
    for item in items:
        if item and item.lower() not in seen:
            seen.add(item.lower())
            result.append(item)
    return result


def _measured_headline(record: JournalistRecord) -> Optional[str]:
    if record.provenance.get("latest_article") == "measured":
        return record.latest_article
    return None


def label_topics_with_claude(records: Sequence[JournalistRecord]) -> Dict[str, List[str]]:
    """Ask Claude for short topic labels per journalist, keyed by name.

    Raises on API or parsing failure; callers fall back to heuristics.
    """
    lines = []
    for record in records:
        title = _measured_headline(record)
        if title:
            lines.append(f"- {record.name} ({record.section}): {title}")
    if not lines:
        return {}

    prompt = f"""You are tagging journalists with the topics they cover, based on a recent headline by each.

{chr(10).join(lines)}

For each journalist give up to {LLM_TOPICS_PER_JOURNALIST} short topic labels (1-3 words, Title Case).

Respond in this exact JSON format, using the names exactly as given:
{{"Jane Doe": ["Elections", "Parliament"]}}"""

    client = get_client()
    response = client.messages.create(
        model=MODEL,
        max_tokens=1024,
        messages=[{"role": "user", "content": prompt}],
    )
    response_text = response.content[0].text.strip()

    # Strip markdown code blocks
    if response_text.startswith("```"):
        response_text = response_text.split("\n", 1)[1].rsplit("```", 1)[0].strip()

    data = json.loads(response_text)
    if not isinstance(data, dict):
        raise ValueError("Expected a JSON object of name -> topics")
    return {
        str(name): [str(t) for t in topics][:LLM_TOPICS_PER_JOURNALIST]
        for name, topics in data.items()
        if isinstance(topics, list)
    }


def derive_keywords_and_topics(
    records: Sequence[JournalistRecord], use_llm: Optional[bool] = None
) -> List[JournalistRecord]:
    """Attach keywords, topics and expertise derived from each record's headline.

    Records with no measured headline keep their default keywords.
    """
    use_llm = config.ANALYZER_USE_LLM if use_llm is None else use_llm

    llm_topics: Dict[str, List[str]] = {}
    if use_llm:
        try:
            llm_topics = label_topics_with_claude(records)
        except (anthropic.APIError, json.JSONDecodeError, ValueError, KeyError, IndexError) as e:
            logger.info("Topic labelling unavailable, using TF-IDF only: %s", e)

    enriched = []
    for record in records:
        title = _measured_headline(record)
        keywords = extract_keywords([title]) if title else []
        entities = extract_entities(title) if title else []
        labels = llm_topics.get(record.name, [])

        provenance = dict(record.provenance)
        if not (labels or keywords or entities):
            provenance["topics"] = "estimated"
            enriched.append(record.model_copy(update={"provenance": provenance}))
            continue

        provenance["topics"] = "inferred"
        update = {
            "topics": _unique([record.section, *labels, *keywords[:2], *entities[:1]]),
            "provenance": provenance,
        }
        if keywords:
            update["keywords"] = keywords
        if labels or keywords:
            update["expertise"] = _unique([record.section, *labels[:1], *keywords[:1]])
        enriched.append(record.model_copy(update=update))
    return enriched


def top_section(records: Sequence[JournalistRecord], total_articles: int) -> TopSection:
    """Section with the most articles, as a share of all articles."""
    counts: Counter = Counter()
    for record in records:
        if record.section not in UNINFORMATIVE_SECTIONS:
            counts[record.section] += record.article_count
    if not counts or total_articles <= 0:
        return TopSection()
    name, count = counts.most_common(1)[0]
    return TopSection(name=name, percentage=round(count / total_articles * 100))


def most_active(records: Sequence[JournalistRecord]) -> MostActive:
    """Journalist with the highest article count (first one wins ties)."""
    if not records:
        return MostActive()
    best = max(records, key=lambda r: r.article_count)
    return MostActive(name=best.name, count=best.article_count)
