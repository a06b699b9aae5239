"""Tests for SWAPI name matching."""

from swbrowser.enrichment.matcher import MatchKind, find_match, match_name


CANDIDATES = [
    {"name": "Darth Vader"},
    {"name": "Leia Organa"},
    {"name": "Luke Skywalker"},
]


def test_exact_match_ignores_case():
    assert match_name("leia ORGANA", CANDIDATES) == {"name": "Leia Organa"}


def test_exact_match_preferred_over_earlier_partial():
    candidates = [{"name": "Luke Skywalker"}, {"name": "Luke"}]
    record, kind = find_match("Luke", candidates)
    assert record == {"name": "Luke"}
    assert kind == MatchKind.EXACT


def test_candidate_contains_target():
    record, kind = find_match("Vader", CANDIDATES)
    assert record == {"name": "Darth Vader"}
    assert kind == MatchKind.PARTIAL


def test_target_contains_candidate():
    candidates = [{"name": "X-wing"}]
    record, kind = find_match("T-65B X-wing starfighter", candidates)
    assert record == {"name": "X-wing"}
    assert kind == MatchKind.PARTIAL


def test_falls_back_to_first_candidate():
    record, kind = find_match("Sy Snootles", CANDIDATES)
    assert record == {"name": "Darth Vader"}
    assert kind == MatchKind.FALLBACK


def test_fallback_can_be_disabled():
    assert match_name("Sy Snootles", CANDIDATES, fallback_to_first=False) is None


def test_empty_candidates_return_none():
    assert match_name("Leia Organa", []) is None
    assert find_match("Leia Organa", []) == (None, None)


def test_candidates_without_names_are_skipped_by_name_rules():
    candidates = [{"title": "A New Hope"}, {"name": None}, {"name": "Yoda"}]
    assert match_name("yoda", candidates, fallback_to_first=False) == {"name": "Yoda"}


def test_matching_is_deterministic():
    first = match_name("Luke", CANDIDATES)
    assert all(match_name("Luke", CANDIDATES) is first for _ in range(5))
