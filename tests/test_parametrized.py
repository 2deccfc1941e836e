"""Parametrized unit tests: broader coverage via @pytest.mark.parametrize."""
import pytest

from ctph.compare import compare, eliminate_sequences
from ctph.constants import MIN_BLOCKSIZE, SPAMSUM_LENGTH
from ctph.edit_distance import EditDistanceScorer, default_scorer
from ctph.hashing import fuzzy_hasher


# ---------------------------------------------------------------------------
# Fuzzy hash: parametrized inputs
# ---------------------------------------------------------------------------

class TestFuzzyHashParametrized:
    @pytest.mark.parametrize("data", [
        b"A" * 100,
        b"B" * 1000,
        b"Hello World " * 200,
        bytes(range(256)) * 20,
        b"\x00" * 500,
    ])
    def test_hash_format(self, data):
        result = fuzzy_hasher.hash(data)
        parts = result.split(":")
        assert len(parts) == 3, f"Hash should have 3 colon-separated parts: {result}"
        assert int(parts[0]) >= MIN_BLOCKSIZE
        assert len(parts[1]) <= SPAMSUM_LENGTH
        assert len(parts[2]) <= SPAMSUM_LENGTH // 2

    @pytest.mark.parametrize("data", [
        b"deterministic " * 100,
        b"\xff" * 200,
        bytes(range(256)),
    ])
    def test_deterministic(self, data):
        assert fuzzy_hasher.hash(data) == fuzzy_hasher.hash(data)

    @pytest.mark.parametrize("data", [
        b"The quick brown fox jumps over the lazy dog. " * 50,
        b"Lorem ipsum dolor sit amet, consectetur adipiscing elit. " * 80,
        bytes(range(1, 256)) * 10,
    ])
    def test_self_compare(self, data):
        h = fuzzy_hasher.hash(data)
        assert compare(h, h) == 100


# ---------------------------------------------------------------------------
# Edit distance: parametrized
# ---------------------------------------------------------------------------

class TestEditDistanceParametrized:
    @pytest.mark.parametrize("s1,s2,expected", [
        ("", "", 0),
        ("abc", "abc", 0),
        ("abc", "", 3),
        ("", "abc", 3),
        ("abc", "abd", 1),
        ("abc", "abcd", 1),
        ("kitten", "sitting", 3),
        ("a", "b", 1),
    ])
    def test_known_distances(self, s1, s2, expected):
        assert default_scorer.distance(s1, s2) == expected
        assert default_scorer.distance(s2, s1) == expected

    @pytest.mark.parametrize("s1,s2,expected", [
        ("abc", "abd", 2),
        ("kitten", "sitting", 5),
        ("abc", "abcd", 1),
        ("", "abc", 3),
    ])
    def test_replace_cost_two(self, s1, s2, expected):
        assert EditDistanceScorer(replace_cost=2).distance(s1, s2) == expected

    def test_asymmetric_costs_rejected(self):
        with pytest.raises(ValueError):
            EditDistanceScorer(insert_cost=1, delete_cost=2)

    def test_negative_costs_rejected(self):
        with pytest.raises(ValueError):
            EditDistanceScorer(replace_cost=-1)


# ---------------------------------------------------------------------------
# Canonicalisation: parametrized
# ---------------------------------------------------------------------------

class TestEliminateSequencesParametrized:
    @pytest.mark.parametrize("digest,expected", [
        ("", ""),
        ("aaa", "aaa"),
        ("aaaa", "aaa"),
        ("aaaaaa", "aaa"),
        ("aaabaaaa", "aaabaaa"),
        ("abababab", "abababab"),
        ("AAAA+/////", "AAA+///"),
    ])
    def test_collapse(self, digest, expected):
        assert eliminate_sequences(digest) == expected
        assert eliminate_sequences(expected) == expected
