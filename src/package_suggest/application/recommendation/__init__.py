"""
Package recommendation pipeline.

Components:
- RelevanceScorer: rule-based per-record score and reason
- CandidateAggregator: multi-registry dedup and boosting
- StatisticalClassifier / CommunityScorer: population statistics
- NullScorer / LLMScorer: optional language-model rescoring
- rank: stable final ordering
- ImpactSimulator: language-model simulation of installing packages
- RecommendationEngine: the pipeline entry point
"""

from .aggregator import AggregationStats, CandidateAggregator, RegistrySource, build_base_query
from .classifier import CommunityScorer, StatisticalClassifier
from .engine import RecommendationEngine, RecommendationResult
from .impact import ImpactSimulator, parse_simulation_response
from .implementation_steps import implementation_steps
from .marketplace_map import build_marketplace_map
from .ranking import rank
from .relevance import RelevanceScorer
from .rescoring import CandidateScorer, LLMScorer, NullScorer, parse_rescore_response, select_scorer

__all__ = [
    "AggregationStats",
    "CandidateAggregator",
    "CandidateScorer",
    "CommunityScorer",
    "ImpactSimulator",
    "LLMScorer",
    "NullScorer",
    "RecommendationEngine",
    "RecommendationResult",
    "RegistrySource",
    "RelevanceScorer",
    "StatisticalClassifier",
    "build_base_query",
    "build_marketplace_map",
    "implementation_steps",
    "parse_rescore_response",
    "parse_simulation_response",
    "rank",
    "select_scorer",
]
