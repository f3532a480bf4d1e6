"""Section (beat) assignment for bylines that carry no explicit section."""

import random
from typing import Optional, Sequence, Tuple

from .. import config


SectionRule = Tuple[str, Tuple[str, ...]]
SectionWeights = Tuple[Tuple[str, float], ...]

UNCLASSIFIED = "Unclassified"

# Checked in order; the first label with a matching substring wins.
DEFAULT_SECTION_RULES: Tuple[SectionRule, ...] = (
    ("Sports", ("sport", "cricket", "football", "tennis")),
    ("Technology", ("tech", "innovation", "digital", "gadget")),
    ("Business", ("business", "econom", "finance", "market")),
    ("Entertainment", ("entertain", "cinema", "bollywood", "movie", "culture")),
    ("Health", ("health", "medical", "wellness")),
    ("Opinion", ("opinion", "editorial", "column")),
    ("Politics", ("politic", "election")),
    ("International", ("international", "world-news", "/world/")),
)

GENERIC_WEIGHTS: SectionWeights = (
    ("News", 0.5),
    ("General", 0.2),
    ("Features", 0.15),
    ("Opinion", 0.15),
)

# Single words that are category labels, never names.
SECTION_LABELS = frozenset(
    label.lower()
    for label in (
        "Politics", "Business", "Technology", "Tech", "Sports", "Sport",
        "Entertainment", "Health", "Economy", "International", "Opinion",
        "National", "City", "Cities", "India", "World", "UK", "US", "News",
        "General", "Features", "Science", "Lifestyle", "Education",
        "Environment", "Culture", "Travel", "Markets", "Local", "Weather",
        "Crime", "Analysis", "Editorial", "Trending", "Latest", "Videos",
        "Photos", "Cricket", "Football", "Bollywood", "Movies", "Auto",
        "Unclassified",
    )
)


def validate_weights(weights: SectionWeights) -> None:
    """Weights must sum to 1.0 and contain at least two categories."""
    total = sum(weight for _, weight in weights)
    if abs(total - 1.0) > 0.001:
        raise ValueError(f"Section weights must sum to 1.0, got {total}")
    if len(weights) < 2:
        raise ValueError("Section weights need a long-tail category")


def match_section(
    text: str, rules: Sequence[SectionRule] = DEFAULT_SECTION_RULES
) -> Optional[str]:
    """Return the first section whose keyword occurs in text."""
    lowered = (text or "").lower()
    for label, keywords in rules:
        if any(keyword in lowered for keyword in keywords):
            return label
    return None


def draw_section(weights: SectionWeights, rng: random.Random) -> str:
    """Draw a section from a cumulative weighted distribution."""
    r = rng.random()
    cumulative = 0.0
    for label, weight in weights:
        cumulative += weight
        if r < cumulative:
            return label
    return weights[-1][0]


def assign_section(
    name: str,
    context: Optional[str],
    rng: random.Random,
    rules: Sequence[SectionRule] = DEFAULT_SECTION_RULES,
    weights: SectionWeights = GENERIC_WEIGHTS,
) -> Tuple[str, str]:
    """Pick a section for a byline and say where it came from.

    Returns (section, provenance).
    """
    matched = match_section(f"{name} {context or ''}", rules)
    if matched:
        return matched, "inferred"
    if config.SECTION_FALLBACK == "unclassified":
        return UNCLASSIFIED, "estimated"
    return draw_section(weights, rng), "estimated"
