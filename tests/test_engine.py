"""End-to-end tests for RecommendationEngine with in-memory registries."""

from __future__ import annotations

import json
import math

import pytest
from conftest import FakeLanguageModel, FakeSource, make_record

from package_suggest.application.recommendation import RecommendationEngine
from package_suggest.domain.entities import ProjectSignals, SourceKind

R = SourceKind.REGISTRY
M = SourceKind.MARKETPLACE


def _ranking_fields(candidate):
    return (
        candidate.id,
        candidate.relevance_score,
        candidate.community_score,
        candidate.is_hidden_gem,
        candidate.reason,
        candidate.implementation_steps,
    )


@pytest.fixture
def sources():
    nuget = FakeSource(
        R,
        {
            "umbraco 13": [
                make_record("Umbraco.Cms", downloads=5_000_000),
                make_record("Our.Umbraco.Seo", downloads=120_000, tags=("umbraco", "seo")),
                make_record("Random.Lib", downloads=10),
            ],
            "umbraco forms": [make_record("Umbraco.Forms.Extras", downloads=4_000, tags=("forms",))],
            "umbraco seo": [make_record("Our.Umbraco.Seo", downloads=120_000, tags=("umbraco", "seo"))],
        },
    )
    marketplace = FakeSource(
        M,
        {
            "umbraco 13": [
                make_record("Contentment", source=M, downloads=60_000, compatibility=("13",), tags=("forms",)),
            ],
        },
    )
    return nuget, marketplace


class TestRecommendationEngine:
    async def test_pipeline_without_model(self, sources, signals):
        engine = RecommendationEngine(sources)

        result = await engine.recommend(signals)

        ids = [c.id for c in result.candidates]
        assert "Umbraco.Cms" not in ids  # installed
        assert sorted(ids) == sorted(["Our.Umbraco.Seo", "Random.Lib", "Umbraco.Forms.Extras", "Contentment"])
        assert result.llm_enabled is False
        assert result.stats.filtered_installed == 1
        assert result.stats.boosts_applied == 1
        keys = [(c.relevance_score, c.community_score, c.downloads) for c in result.candidates]
        assert keys == sorted(keys, reverse=True)

    async def test_scores_in_bounds_and_steps_attached(self, sources, signals):
        candidates = await RecommendationEngine(sources).get_recommendations(signals)
        for candidate in candidates:
            assert 0.0 <= candidate.relevance_score <= 1.0
            assert 0.0 <= candidate.community_score <= 1.0
            assert candidate.implementation_steps[0].startswith("Install package")
            assert candidate.implementation_steps[-1] == "Verify compatibility with Umbraco 13"

    async def test_all_sources_failing_gives_empty_list(self, signals):
        nuget, marketplace = FakeSource(R), FakeSource(M)
        nuget.fail_on = {"umbraco 13", "umbraco forms", "umbraco seo"}
        marketplace.fail_on = {"umbraco 13", "forms", "seo"}

        result = await RecommendationEngine([nuget, marketplace], FakeLanguageModel()).recommend(signals)

        assert result.candidates == []
        assert result.stats.failed_queries == 6

    async def test_empty_signals_use_plain_base_query(self, sources, empty_signals):
        nuget, marketplace = sources
        await RecommendationEngine(sources).get_recommendations(empty_signals)
        assert nuget.calls == [("umbraco", 30)]
        assert marketplace.calls == [("umbraco", 50)]

    async def test_model_rescores(self, sources, signals):
        model = FakeLanguageModel(json.dumps([{"packageId": "Random.Lib", "relevanceScore": 1.0}]))
        engine = RecommendationEngine(sources, language_model=model)

        candidates = await engine.get_recommendations(signals)

        assert engine.llm_enabled is True
        assert candidates[0].id == "Random.Lib"
        assert len(model.prompts) == 1

    async def test_failing_model_matches_no_model(self, sources, signals):
        baseline = await RecommendationEngine(sources).get_recommendations(signals)
        broken = RecommendationEngine(sources, language_model=FakeLanguageModel(RuntimeError("down")))

        candidates = await broken.get_recommendations(signals)

        assert [_ranking_fields(c) for c in candidates] == [_ranking_fields(c) for c in baseline]

    async def test_non_finite_model_score_matches_no_model(self, sources, signals):
        baseline = await RecommendationEngine(sources).get_recommendations(signals)
        model = FakeLanguageModel('[{"packageId": "Random.Lib", "relevanceScore": NaN}]')

        candidates = await RecommendationEngine(sources, language_model=model).get_recommendations(signals)

        assert [_ranking_fields(c) for c in candidates] == [_ranking_fields(c) for c in baseline]
        assert all(math.isfinite(c.relevance_score) for c in candidates)

    async def test_disable_llm(self, monkeypatch, sources, signals):
        monkeypatch.setenv("DISABLE_LLM", "true")
        model = FakeLanguageModel()
        engine = RecommendationEngine(sources, language_model=model)

        await engine.get_recommendations(signals)

        assert engine.llm_enabled is False
        assert model.prompts == []

    async def test_installed_ids_never_recommended(self, sources):
        signals = ProjectSignals(installed_package_ids=frozenset({"our.umbraco.seo", "CONTENTMENT"}))
        nuget, marketplace = sources
        nuget.responses["umbraco"] = nuget.responses["umbraco 13"]
        marketplace.responses["umbraco"] = marketplace.responses["umbraco 13"]

        candidates = await RecommendationEngine(sources).get_recommendations(signals)

        assert {c.id for c in candidates} == {"Umbraco.Cms", "Random.Lib"}
