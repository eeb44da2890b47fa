"""
Rule-based relevance scoring.

Maps one registry record plus the project signals to a score in [0, 1] and
a short human-readable reason. The weights differ per registry because the
marketplace has far fewer downloads and carries explicit compatibility tags.
"""

from __future__ import annotations

from dataclasses import dataclass

from package_suggest.domain.entities import ProjectSignals, RawPackageRecord, SourceKind

# Ids containing any of these belong to the established Umbraco ecosystem
ECOSYSTEM_ID_MARKERS: tuple[str, ...] = ("umbraco", "our", "skybrud", "ucommerce", "articulate")


@dataclass(frozen=True)
class SourceWeights:
    """Scoring weights for one registry."""

    popularity_norm: float  # downloads at which popularity saturates
    popularity_weight: float
    version_weight: float
    feature_weight: float
    ecosystem_bonus: float
    popular_threshold: int  # downloads above which the reason says "popular"
    popular_label: str
    repeat_boost: float  # added on each repeat sighting in a feature pass


REGISTRY_WEIGHTS = SourceWeights(
    popularity_norm=1_000_000,
    popularity_weight=0.3,
    version_weight=0.4,
    feature_weight=0.1,
    ecosystem_bonus=0.2,
    popular_threshold=100_000,
    popular_label="highly popular",
    repeat_boost=0.2,
)

MARKETPLACE_WEIGHTS = SourceWeights(
    popularity_norm=10_000,
    popularity_weight=0.3,
    version_weight=0.4,
    feature_weight=0.15,
    ecosystem_bonus=0.0,
    popular_threshold=1_000,
    popular_label="popular marketplace package",
    repeat_boost=0.3,
)

FALLBACK_REASON = "general package"


def weights_for(source: SourceKind) -> SourceWeights:
    return MARKETPLACE_WEIGHTS if source is SourceKind.MARKETPLACE else REGISTRY_WEIGHTS


class RelevanceScorer:
    """
    Pure scorer: ``score(record, signals) -> (score, reason)``.

    Components, summed then capped at 1.0:
    - popularity: ``min(downloads / norm, 1) * 0.3``
    - version: ``+0.4`` when the platform version appears in tags or
      description (marketplace: also in a compatibility tag)
    - features: a per-feature bonus for each detected feature mentioned
    - ecosystem: ``+0.2`` for well-known NuGet id prefixes
    """

    def score(self, record: RawPackageRecord, signals: ProjectSignals) -> tuple[float, str]:
        weights = weights_for(record.source_kind)
        text = record.searchable_text()

        total = min(record.downloads / weights.popularity_norm, 1.0) * weights.popularity_weight

        version_matched = self._version_matches(record, signals.platform_version, text)
        if version_matched:
            total += weights.version_weight

        matched_features = [f for f in signals.detected_features if f.lower() in text]
        total += weights.feature_weight * len(matched_features)

        record_id = record.id.lower()
        if weights.ecosystem_bonus and any(marker in record_id for marker in ECOSYSTEM_ID_MARKERS):
            total += weights.ecosystem_bonus

        matched_version = signals.platform_version if version_matched else None
        reason = self._build_reason(record, weights, matched_version, matched_features)
        return min(total, 1.0), reason

    @staticmethod
    def _version_matches(record: RawPackageRecord, version: str | None, text: str) -> bool:
        if not version:
            return False
        token = version.lower()
        if token in text:
            return True
        if record.source_kind is SourceKind.MARKETPLACE:
            return any(token in tag.lower() for tag in record.compatibility_tags)
        return False

    @staticmethod
    def _build_reason(
        record: RawPackageRecord,
        weights: SourceWeights,
        matched_version: str | None,
        matched_features: list[str],
    ) -> str:
        clauses = []
        if record.downloads > weights.popular_threshold:
            clauses.append(weights.popular_label)
        if matched_version:
            clauses.append(f"compatible with version {matched_version}")
        if matched_features:
            clauses.append(f"relevant for: {', '.join(matched_features)}")
        return "; ".join(clauses) if clauses else FALLBACK_REASON
