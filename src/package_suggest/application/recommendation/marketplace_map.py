"""
Marketplace map: ranked candidates grouped into discovery clusters.

Clusters:
- mainstream_winners: relevant and widely used
- hidden_gems: relevant gems the community has not found yet
- specialized_tools: packages that declare version compatibility
- community_favorites: highest community scores
"""

from __future__ import annotations

from collections import Counter
from statistics import fmean
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Sequence

    from package_suggest.domain.entities import Candidate, ProjectSignals

CLUSTER_COLORS = {
    "mainstream_winners": "#3B82F6",
    "hidden_gems": "#10B981",
    "specialized_tools": "#F59E0B",
    "community_favorites": "#EF4444",
}


def _entry(candidate: Candidate, category: str, **extra: Any) -> dict[str, Any]:
    entry = {
        "package_id": candidate.id,
        "package_name": candidate.record.display_name,
        "source": candidate.record.source_kind.value,
        "relevance_score": round(candidate.relevance_score, 2),
        "is_hidden_gem": candidate.is_hidden_gem,
        "personality": candidate.personality_description,
        "category": category,
    }
    entry.update(extra)
    return entry


def _top(candidates: Sequence[Candidate], predicate, key, limit: int) -> list[Candidate]:
    return sorted((c for c in candidates if predicate(c)), key=key, reverse=True)[:limit]


def build_marketplace_map(candidates: Sequence[Candidate], signals: ProjectSignals) -> dict[str, Any]:
    """Group ranked candidates into clusters plus summary insights."""
    mainstream = _top(
        candidates,
        lambda c: c.relevance_score > 0.7 and c.downloads > 10_000,
        lambda c: c.relevance_score,
        8,
    )
    gems = _top(candidates, lambda c: c.is_hidden_gem and c.relevance_score > 0.6, lambda c: c.relevance_score, 6)
    specialized = _top(
        candidates,
        lambda c: c.has_compatibility and c.relevance_score > 0.5,
        lambda c: len(c.record.compatibility_tags),
        5,
    )
    favorites = _top(candidates, lambda c: c.community_score > 0.7, lambda c: c.community_score, 5)

    tag_counts = Counter(tag for c in candidates for tag in c.record.tags)

    return {
        "project_overview": {
            "framework": signals.framework_id,
            "umbraco_version": signals.platform_version,
            "installed_package_count": len(signals.installed_package_ids),
            "key_features": list(signals.detected_features[:5]),
            "architecture_style": signals.architecture_patterns[0] if signals.architecture_patterns else "Standard",
        },
        "package_clusters": {
            "mainstream_winners": [
                _entry(c, "Mainstream Winner", popularity_score=min(c.downloads / 100_000, 1.0)) for c in mainstream
            ],
            "hidden_gems": [_entry(c, "Hidden Gem", popularity_score=min(c.downloads / 10_000, 1.0)) for c in gems],
            "specialized_tools": [
                _entry(c, "Specialized Tool", compatibility_versions=list(c.record.compatibility_tags))
                for c in specialized
            ],
            "community_favorites": [
                _entry(c, "Community Favorite", community_score=round(c.community_score, 2)) for c in favorites
            ],
        },
        "discovery_insights": {
            "total_packages_analyzed": len(candidates),
            "hidden_gems_found": sum(1 for c in candidates if c.is_hidden_gem),
            "high_compatibility_packages": sum(1 for c in candidates if c.has_compatibility),
            "average_relevance_score": round(fmean(c.relevance_score for c in candidates), 2) if candidates else 0.0,
            "top_categories": [{"category": tag, "count": count} for tag, count in tag_counts.most_common(5)],
        },
        "visualization_hints": {
            "dimensions": ["relevance", "popularity", "compatibility", "community"],
            "color_scheme": CLUSTER_COLORS,
            "size_scaling": "downloads",
        },
    }
