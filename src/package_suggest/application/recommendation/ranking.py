"""Final ordering of recommendations."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from package_suggest.domain.entities import Candidate


def rank_key(candidate: Candidate) -> tuple[float, float, int]:
    return candidate.relevance_score, candidate.community_score, candidate.downloads


def rank(candidates: Iterable[Candidate]) -> list[Candidate]:
    """
    Sort by relevance, then community score, then downloads, all descending.

    ``sorted`` is stable and ``reverse=True`` preserves the input order of
    candidates whose keys are equal.
    """
    return sorted(candidates, key=rank_key, reverse=True)
