"""Tests for outlet classification and section assignment."""

import random

import pytest

from newstrack import config
from newstrack.services.outlets import GENERIC, PROFILES, OutletProfile, classify, get_profile
from newstrack.services.sections import (
    GENERIC_WEIGHTS,
    assign_section,
    draw_section,
    match_section,
    validate_weights,
)


class FixedRandom(random.Random):
    def __init__(self, value):
        super().__init__()
        self.value = value

    def random(self):
        return self.value


@pytest.mark.parametrize(
    "host,key",
    [
        ("www.ndtv.com", "ndtv"),
        ("hindi.ndtv.com", "ndtv"),
        ("www.aajtak.in", "aajtak"),
        ("thehindu.com", "thehindu"),
        ("timesofindia.indiatimes.com", "toi"),
        ("indianexpress.com", "indianexpress"),
        ("www.hindustantimes.com", "hindustantimes"),
        ("www.news18.com", "news18"),
        ("www.bbc.co.uk", "bbc"),
        ("edition.cnn.com", "cnn"),
        ("www.nytimes.com", "nytimes"),
        ("www.theguardian.com", "guardian"),
        ("www.reuters.com", "reuters"),
        ("www.example.org", "generic"),
        ("", "generic"),
    ],
)
def test_classify(host, key):
    assert classify(host).key == key


def test_classify_is_pure():
    assert classify("www.ndtv.com") is classify("www.ndtv.com")


def test_get_profile_defaults_to_generic():
    assert get_profile("nope") is GENERIC
    assert get_profile("bbc").display_name == "BBC"


def test_every_profile_has_a_valid_distribution():
    for profile in PROFILES + (GENERIC,):
        assert abs(sum(w for _, w in profile.section_weights) - 1.0) <= 0.001
        assert len(profile.section_weights) >= 2


def test_profile_rejects_bad_weights():
    with pytest.raises(ValueError):
        OutletProfile(key="bad", display_name="Bad", section_weights=(("News", 0.5), ("Opinion", 0.2)))
    with pytest.raises(ValueError):
        validate_weights((("News", 1.0),))


def test_match_section_first_rule_wins():
    assert match_section("/sports/cricket/world-cup") == "Sports"
    assert match_section("/business/tech-stocks") == "Technology"
    assert match_section("/lifestyle/recipes") is None


def test_assign_section_infers_from_context():
    section, provenance = assign_section("Priya Sharma", "/business/markets", random.Random(0))
    assert (section, provenance) == ("Business", "inferred")


def test_assign_section_draws_from_weights():
    section, provenance = assign_section("Priya Sharma", None, FixedRandom(0.0))
    assert (section, provenance) == ("News", "estimated")


def test_assign_section_unclassified_mode(monkeypatch):
    monkeypatch.setattr(config, "SECTION_FALLBACK", "unclassified")
    assert assign_section("Priya Sharma", None, random.Random(0)) == ("Unclassified", "estimated")


def test_draw_section_is_cumulative():
    assert draw_section(GENERIC_WEIGHTS, FixedRandom(0.0)) == "News"
    assert draw_section(GENERIC_WEIGHTS, FixedRandom(0.6)) == "General"
    assert draw_section(GENERIC_WEIGHTS, FixedRandom(0.75)) == "Features"
    assert draw_section(GENERIC_WEIGHTS, FixedRandom(0.9999)) == "Opinion"


def test_draw_section_only_returns_known_labels():
    rng = random.Random(42)
    labels = {label for label, _ in GENERIC_WEIGHTS}
    assert {draw_section(GENERIC_WEIGHTS, rng) for _ in range(200)} <= labels
