"""
CandidateAggregator - Multi-Registry Candidate Collection

Queries every registry with a base query plus one query per detected
feature, then folds the results into a single deduplicated candidate list:

1. All queries run concurrently (they are independent read-only calls)
2. Results are merged sequentially in a fixed order once every fetch returns
3. Installed packages are dropped before scoring
4. A package seen again in a feature query gets its registry's boost
5. Relevance is clamped to [0, 1] once, after all boosts are applied

Architecture Decision:
    The aggregator owns the only mutable map of candidates, keyed by the
    lower-cased package id across both registries. Fetching never touches
    that map, so no locking is needed.

Example:
    >>> aggregator = CandidateAggregator([nuget_client, marketplace_client])
    >>> candidates, stats = await aggregator.aggregate(signals)
    >>> stats.unique_candidates
    42
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

from package_suggest.core.async_utils import gather_with_errors
from package_suggest.domain.entities import Candidate, ProjectSignals, RawPackageRecord, SourceKind

from .relevance import RelevanceScorer, weights_for

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)

BASE_QUERY_KEYWORD = "umbraco"


class RegistrySource(Protocol):
    """A package registry that can be searched; must never raise."""

    source_kind: SourceKind

    async def search(self, query: str, limit: int) -> list[RawPackageRecord]: ...


# =============================================================================
# Data Classes
# =============================================================================


@dataclass(frozen=True)
class QueryPlan:
    """Page sizes and query templates for one registry."""

    base_page_size: int
    feature_page_size: int
    feature_query_template: str  # formatted with ``feature=``


DEFAULT_QUERY_PLANS: dict[SourceKind, QueryPlan] = {
    SourceKind.REGISTRY: QueryPlan(base_page_size=30, feature_page_size=10, feature_query_template="umbraco {feature}"),
    SourceKind.MARKETPLACE: QueryPlan(base_page_size=50, feature_page_size=20, feature_query_template="{feature}"),
}


@dataclass
class _Query:
    source: RegistrySource
    text: str
    limit: int
    feature: str | None = None  # None for the base query


@dataclass
class AggregationStats:
    """Statistics from one aggregation run."""

    total_raw: int = 0
    filtered_installed: int = 0
    unique_candidates: int = 0
    boosts_applied: int = 0
    failed_queries: int = 0
    by_source: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_raw": self.total_raw,
            "filtered_installed": self.filtered_installed,
            "unique_candidates": self.unique_candidates,
            "boosts_applied": self.boosts_applied,
            "failed_queries": self.failed_queries,
            "by_source": dict(self.by_source),
        }


# =============================================================================
# Aggregator
# =============================================================================


def build_base_query(signals: ProjectSignals) -> str:
    if signals.platform_version:
        return f"{BASE_QUERY_KEYWORD} {signals.platform_version}"
    return BASE_QUERY_KEYWORD


class CandidateAggregator:
    """Collects, deduplicates and boosts candidates from several registries."""

    def __init__(
        self,
        sources: Sequence[RegistrySource],
        scorer: RelevanceScorer | None = None,
        query_plans: dict[SourceKind, QueryPlan] | None = None,
    ) -> None:
        self._sources = list(sources)
        self._scorer = scorer or RelevanceScorer()
        self._plans = query_plans or DEFAULT_QUERY_PLANS

    def plan_queries(self, signals: ProjectSignals) -> list[_Query]:
        """Base queries for every source first, then each feature across sources."""
        base_text = build_base_query(signals)
        queries = [
            _Query(source, base_text, self._plans[source.source_kind].base_page_size) for source in self._sources
        ]
        for feature in signals.detected_features:
            for source in self._sources:
                plan = self._plans[source.source_kind]
                queries.append(
                    _Query(source, plan.feature_query_template.format(feature=feature), plan.feature_page_size, feature)
                )
        return queries

    async def aggregate(self, signals: ProjectSignals) -> tuple[list[Candidate], AggregationStats]:
        """
        Run every planned query and merge the results.

        Returns:
            Candidates in first-sighting order, with relevance clamped to [0, 1],
            and the run statistics.
        """
        stats = AggregationStats()
        queries = self.plan_queries(signals)
        results = await gather_with_errors(*(q.source.search(q.text, q.limit) for q in queries))

        candidates: dict[str, Candidate] = {}
        for query, result in zip(queries, results, strict=True):
            if isinstance(result, Exception):
                stats.failed_queries += 1
                logger.warning(f"{query.source.source_kind.value} query '{query.text}' failed: {result}")
                continue
            self._merge(candidates, query, result, signals, stats)

        for candidate in candidates.values():
            candidate.clamp_relevance()

        stats.unique_candidates = len(candidates)
        logger.info(
            f"Aggregated {stats.total_raw} records into {stats.unique_candidates} candidates "
            f"({stats.filtered_installed} installed filtered, {stats.boosts_applied} boosts)"
        )
        return list(candidates.values()), stats

    def _merge(
        self,
        candidates: dict[str, Candidate],
        query: _Query,
        records: list[RawPackageRecord],
        signals: ProjectSignals,
        stats: AggregationStats,
    ) -> None:
        kind = query.source.source_kind.value
        stats.by_source[kind] = stats.by_source.get(kind, 0) + len(records)
        stats.total_raw += len(records)

        for record in records:
            if signals.is_installed(record.id):
                stats.filtered_installed += 1
                continue

            existing = candidates.get(record.key)
            if existing is None:
                score, reason = self._scorer.score(record, signals)
                candidates[record.key] = Candidate(record=record, relevance_score=score, reason=reason)
            elif query.feature is not None:
                existing.merge_boost(weights_for(record.source_kind).repeat_boost)
                stats.boosts_applied += 1
