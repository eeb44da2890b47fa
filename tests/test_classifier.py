"""Tests for hidden-gem classification and community scoring."""

from __future__ import annotations

import pytest
from conftest import make_candidate

from package_suggest.application.recommendation.classifier import CommunityScorer, StatisticalClassifier
from package_suggest.domain.entities import SourceKind


class TestHiddenGems:
    """Gem iff relevance > 0.8*mean, downloads < 0.7*mean and downloads > 100."""

    def _classify_subject(self, relevance: float, downloads: int):
        # Nine fixed candidates plus the subject, tuned so the means stay at 0.5 / 200
        others = [make_candidate(f"P{i}", relevance=0.5, downloads=200) for i in range(9)]
        subject = make_candidate("Subject", relevance=relevance, downloads=downloads)
        # Offset P0 against the subject so the means are exact
        others[0].relevance_score = 0.5 + (0.5 - relevance)
        others[0].record = make_candidate("P0", downloads=200 + (200 - downloads)).record
        candidates = [*others, subject]
        StatisticalClassifier().classify(candidates)
        return subject

    def test_relevance_threshold(self):
        # mean relevance 0.5: must be above 0.4
        assert self._classify_subject(0.45, 110).is_hidden_gem
        assert not self._classify_subject(0.39, 110).is_hidden_gem
        assert not self._classify_subject(0.35, 110).is_hidden_gem

    def test_download_threshold(self):
        # mean downloads 200: must be below 140
        assert self._classify_subject(0.9, 139).is_hidden_gem
        assert not self._classify_subject(0.9, 141).is_hidden_gem
        assert not self._classify_subject(0.9, 150).is_hidden_gem

    def test_minimum_adoption(self):
        assert not self._classify_subject(0.9, 100).is_hidden_gem
        assert self._classify_subject(0.9, 101).is_hidden_gem

    def test_monotonic_in_downloads(self):
        flips = [self._classify_subject(0.9, d).is_hidden_gem for d in range(101, 300, 7)]
        # Once false it stays false as downloads grow
        first_false = flips.index(False)
        assert not any(flips[first_false:])

    def test_empty_is_noop(self):
        assert StatisticalClassifier().classify([]) == 0

    def test_recomputed_each_run(self):
        candidate = make_candidate("Solo", relevance=0.9, downloads=150)
        candidate.is_hidden_gem = True
        StatisticalClassifier().classify([candidate])
        # A single candidate equals the mean downloads, so it cannot be a gem
        assert candidate.is_hidden_gem is False

    def test_returns_gem_count(self):
        candidates = [
            make_candidate("Big", relevance=0.2, downloads=10_000),
            make_candidate("Gem", relevance=0.9, downloads=500),
            make_candidate("Tiny", relevance=0.9, downloads=50),
        ]
        assert StatisticalClassifier().classify(candidates) == 1
        assert [c.is_hidden_gem for c in candidates] == [False, True, False]


class TestCommunityScore:
    def test_formula(self):
        candidate = make_candidate("X", relevance=0.5, downloads=50_000)
        assert CommunityScorer().score(candidate) == pytest.approx(0.2 + 0.15)

    def test_gem_and_compatibility_bonuses(self):
        candidate = make_candidate(
            "X", relevance=0.5, downloads=0, source=SourceKind.MARKETPLACE, compatibility=("13",)
        )
        candidate.is_hidden_gem = True
        assert CommunityScorer().score(candidate) == pytest.approx(0.15 + 0.3 + 0.1)

    def test_download_term_uncapped_before_final_min(self):
        candidate = make_candidate("X", relevance=0.0, downloads=200_000)
        assert CommunityScorer().score(candidate) == pytest.approx(0.8)
        candidate = make_candidate("Y", relevance=0.0, downloads=1_000_000)
        assert CommunityScorer().score(candidate) == 1.0

    def test_apply_sets_scores(self):
        candidates = [make_candidate("A", relevance=1.0), make_candidate("B", relevance=0.0)]
        CommunityScorer().apply(candidates)
        assert [c.community_score for c in candidates] == [pytest.approx(0.3), 0.0]
