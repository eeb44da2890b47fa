"""
Domain Entities: RawPackageRecord and Candidate

RawPackageRecord is a registry search hit normalised across NuGet and the
Umbraco Marketplace. Candidate wraps one record with the scores and
annotations the recommendation pipeline accumulates for it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class SourceKind(str, Enum):
    """Registry that reported a package."""

    REGISTRY = "nuget"
    MARKETPLACE = "marketplace"


@dataclass(frozen=True)
class RawPackageRecord:
    """One package as reported by a registry search."""

    id: str
    display_name: str
    source_kind: SourceKind
    description: str | None = None
    tags: tuple[str, ...] = ()
    downloads: int = 0
    version: str | None = None
    compatibility_tags: tuple[str, ...] = ()  # marketplace only
    project_url: str | None = None
    package_type: str | None = None  # marketplace only

    def __post_init__(self) -> None:
        object.__setattr__(self, "downloads", max(0, int(self.downloads or 0)))
        object.__setattr__(self, "tags", tuple(self.tags))
        object.__setattr__(self, "compatibility_tags", tuple(self.compatibility_tags))

    @property
    def key(self) -> str:
        """Identity key used for deduplication."""
        return self.id.lower()

    def searchable_text(self) -> str:
        """Lower-cased tags plus description, the text relevance matching runs on."""
        return f"{' '.join(self.tags)} {self.description or ''}".lower()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.display_name,
            "source": self.source_kind.value,
            "description": self.description,
            "tags": list(self.tags),
            "downloads": self.downloads,
            "version": self.version,
            "compatibility": list(self.compatibility_tags),
            "url": self.project_url,
            "package_type": self.package_type,
        }


@dataclass
class PerformancePrediction:
    """Qualitative impact estimate returned by the language model."""

    seo_boost: float | None = None  # 0-1
    speed_improvement: float | None = None  # percent
    editor_usability: float | None = None  # 0-1
    predicted_benefits: list[str] = field(default_factory=list)


@dataclass
class Candidate:
    """
    A package under consideration for recommendation.

    ``relevance_score`` may exceed 1.0 while the aggregator is adding
    boosts; it is clamped once when aggregation finishes.
    """

    record: RawPackageRecord
    relevance_score: float = 0.0
    community_score: float = 0.0
    is_hidden_gem: bool = False
    reason: str = ""

    # Language-model enrichment
    llm_reasoning: str | None = None
    personality_description: str | None = None
    use_cases: list[str] = field(default_factory=list)
    integration_points: list[str] = field(default_factory=list)
    impacted_components: list[str] = field(default_factory=list)
    performance_prediction: PerformancePrediction | None = None

    implementation_steps: list[str] = field(default_factory=list)

    @property
    def id(self) -> str:
        return self.record.id

    @property
    def downloads(self) -> int:
        return self.record.downloads

    @property
    def has_compatibility(self) -> bool:
        return bool(self.record.compatibility_tags)

    def merge_boost(self, boost: float) -> None:
        """Add a repeat-sighting boost to the unclamped relevance accumulator."""
        self.relevance_score += boost

    def clamp_relevance(self) -> None:
        self.relevance_score = min(max(self.relevance_score, 0.0), 1.0)

    def to_dict(self, detailed: bool = True) -> dict[str, Any]:
        """Serialize for tool output; ``detailed=False`` drops the enrichment fields."""
        result = self.record.to_dict()
        result.update(
            {
                "relevance_score": round(self.relevance_score, 3),
                "community_score": round(self.community_score, 3),
                "is_hidden_gem": self.is_hidden_gem,
                "reason": self.reason,
            }
        )
        if not detailed:
            return result

        result["implementation_steps"] = list(self.implementation_steps)
        if self.llm_reasoning is not None:
            result["llm_reasoning"] = self.llm_reasoning
        if self.personality_description is not None:
            result["personality"] = self.personality_description
        if self.use_cases:
            result["use_cases"] = list(self.use_cases)
        if self.integration_points:
            result["integration_points"] = list(self.integration_points)
        if self.impacted_components:
            result["impacted_components"] = list(self.impacted_components)
        if self.performance_prediction is not None:
            pp = self.performance_prediction
            result["performance_prediction"] = {
                "seo_boost": pp.seo_boost,
                "speed_improvement": pp.speed_improvement,
                "editor_usability": pp.editor_usability,
                "predicted_benefits": list(pp.predicted_benefits),
            }
        return result
