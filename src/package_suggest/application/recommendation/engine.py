"""
RecommendationEngine - the recommendation pipeline entry point.

Pipeline:
    aggregate (both registries, dedup + boost, clamp)
    -> rescore (language model or no-op)
    -> classify hidden gems
    -> community scores
    -> stable rank

`get_recommendations()` never raises for well-formed signals: registry
failures yield fewer candidates, rescoring failures keep rule-based scores.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .aggregator import AggregationStats, CandidateAggregator
from .classifier import CommunityScorer, StatisticalClassifier
from .implementation_steps import implementation_steps
from .ranking import rank
from .rescoring import DEFAULT_LLM_TIMEOUT, LLMScorer, select_scorer

if TYPE_CHECKING:
    from collections.abc import Sequence

    from package_suggest.domain.entities import Candidate, ProjectSignals
    from package_suggest.infrastructure.llm import LanguageModel

    from .aggregator import RegistrySource

logger = logging.getLogger(__name__)


@dataclass
class RecommendationResult:
    candidates: list[Candidate]
    stats: AggregationStats
    llm_enabled: bool
    elapsed_seconds: float


class RecommendationEngine:
    """
    Ranks registry packages for one project.

    The rescoring strategy is fixed at construction: passing a language
    model enables rescoring unless ``DISABLE_LLM=true``.
    """

    def __init__(
        self,
        sources: Sequence[RegistrySource],
        language_model: LanguageModel | None = None,
        llm_timeout: float = DEFAULT_LLM_TIMEOUT,
    ) -> None:
        self._aggregator = CandidateAggregator(sources)
        self._scorer = select_scorer(language_model, timeout=llm_timeout)
        self._classifier = StatisticalClassifier()
        self._community = CommunityScorer()

    @property
    def llm_enabled(self) -> bool:
        return isinstance(self._scorer, LLMScorer)

    async def get_recommendations(self, signals: ProjectSignals) -> list[Candidate]:
        """Ranked candidates, best first; empty when nothing was found."""
        result = await self.recommend(signals)
        return result.candidates

    async def recommend(self, signals: ProjectSignals) -> RecommendationResult:
        """Run the full pipeline and keep the aggregation statistics."""
        started = time.monotonic()
        candidates, stats = await self._aggregator.aggregate(signals)

        if candidates:
            await self._scorer.rescore(candidates, signals)
            self._classifier.classify(candidates)
            self._community.apply(candidates)
            for candidate in candidates:
                candidate.implementation_steps = implementation_steps(candidate.id, signals)

        ranked = rank(candidates)
        elapsed = time.monotonic() - started
        logger.info(f"Recommended {len(ranked)} packages in {elapsed:.2f}s (llm={self.llm_enabled})")
        return RecommendationResult(ranked, stats, self.llm_enabled, elapsed)
