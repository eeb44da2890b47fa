"""
Population statistics over the candidate list.

- Hidden gems: relevant packages that the community has not discovered yet
- Community score: a secondary 0-1 score blending adoption and relevance
"""

from __future__ import annotations

import logging
from statistics import fmean
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from package_suggest.domain.entities import Candidate

logger = logging.getLogger(__name__)

# Hidden gem thresholds, relative to the population means
GEM_RELEVANCE_RATIO = 0.8
GEM_DOWNLOAD_RATIO = 0.7
GEM_MIN_DOWNLOADS = 100

# Community score weights
COMMUNITY_DOWNLOAD_NORM = 100_000
COMMUNITY_DOWNLOAD_WEIGHT = 0.4
COMMUNITY_RELEVANCE_WEIGHT = 0.3
COMMUNITY_GEM_BONUS = 0.3
COMMUNITY_COMPAT_BONUS = 0.1


class StatisticalClassifier:
    """Flags hidden gems relative to the current candidate population."""

    def classify(self, candidates: Sequence[Candidate]) -> int:
        """
        Set ``is_hidden_gem`` on every candidate.

        A gem is more relevant than 0.8x the mean relevance, less downloaded
        than 0.7x the mean downloads, and has more than 100 downloads.

        Returns:
            Number of hidden gems found
        """
        if not candidates:
            return 0

        mean_relevance = fmean(c.relevance_score for c in candidates)
        mean_downloads = fmean(c.downloads for c in candidates)

        gems = 0
        for candidate in candidates:
            candidate.is_hidden_gem = (
                candidate.relevance_score > mean_relevance * GEM_RELEVANCE_RATIO
                and candidate.downloads < mean_downloads * GEM_DOWNLOAD_RATIO
                and candidate.downloads > GEM_MIN_DOWNLOADS
            )
            gems += candidate.is_hidden_gem

        logger.debug(
            f"Hidden gems: {gems}/{len(candidates)} "
            f"(mean relevance {mean_relevance:.2f}, mean downloads {mean_downloads:.0f})"
        )
        return gems


class CommunityScorer:
    """Scores adoption: downloads, relevance, gem status and compatibility info."""

    def score(self, candidate: Candidate) -> float:
        total = (
            candidate.downloads / COMMUNITY_DOWNLOAD_NORM * COMMUNITY_DOWNLOAD_WEIGHT
            + candidate.relevance_score * COMMUNITY_RELEVANCE_WEIGHT
        )
        if candidate.is_hidden_gem:
            total += COMMUNITY_GEM_BONUS
        if candidate.has_compatibility:
            total += COMMUNITY_COMPAT_BONUS
        return min(total, 1.0)

    def apply(self, candidates: Sequence[Candidate]) -> None:
        for candidate in candidates:
            candidate.community_score = self.score(candidate)
