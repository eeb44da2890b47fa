"""
Optional language-model rescoring.

The engine picks one `CandidateScorer` when it is built:

- `LLMScorer` when a language model is available and ``DISABLE_LLM`` is not
  set. Candidates are sent in batches of 10; each batch gets a prompt with
  the project context and the packages' metadata, and the JSON array reply
  overrides scores and adds qualitative fields.
- `NullScorer` otherwise; it leaves the rule-based scores untouched.

A failing batch (timeout, transport error, unparseable reply) is logged and
skipped, so its candidates keep their rule-based scores.
"""

from __future__ import annotations

import asyncio
import json
import logging
import math
import os
from typing import TYPE_CHECKING, Any, Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from package_suggest.core.exceptions import ParseError
from package_suggest.domain.entities import PerformancePrediction

if TYPE_CHECKING:
    from collections.abc import Sequence

    from package_suggest.domain.entities import Candidate, ProjectSignals
    from package_suggest.infrastructure.llm import LanguageModel

logger = logging.getLogger(__name__)

BATCH_SIZE = 10
MAX_TOKENS = 3000
TEMPERATURE = 0.2
DEFAULT_LLM_TIMEOUT = 60.0


def llm_disabled() -> bool:
    """Privacy opt-out: ``DISABLE_LLM=true`` keeps project data away from the model."""
    return os.environ.get("DISABLE_LLM", "").strip().lower() == "true"


class CandidateScorer(Protocol):
    async def rescore(self, candidates: Sequence[Candidate], signals: ProjectSignals) -> None: ...


class NullScorer:
    """Keeps rule-based scores."""

    async def rescore(self, candidates: Sequence[Candidate], signals: ProjectSignals) -> None:
        return None


# =============================================================================
# Response schema
# =============================================================================


def _optional_number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    try:
        number = float(value)
    except OverflowError:
        return None
    # json.loads accepts NaN and Infinity
    return number if math.isfinite(number) else None


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if isinstance(v, str | int | float) and str(v)]


class PerformanceImpactItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    seo_boost: float | None = Field(default=None, alias="seoBoost")
    speed_improvement: float | None = Field(default=None, alias="speedImprovement")
    editor_usability: float | None = Field(default=None, alias="editorUsability")
    predicted_benefits: list[str] = Field(default_factory=list, alias="predictedBenefits")

    @field_validator("seo_boost", "speed_improvement", "editor_usability", mode="before")
    @classmethod
    def _numbers(cls, value: Any) -> float | None:
        return _optional_number(value)

    @field_validator("predicted_benefits", mode="before")
    @classmethod
    def _benefits(cls, value: Any) -> list[str]:
        return _string_list(value)


class RescoreItem(BaseModel):
    """One element of the model's JSON array reply."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    package_id: str = Field(alias="packageId")
    relevance_score: float | None = Field(default=None, alias="relevanceScore")
    reasoning: str | None = None
    use_cases: list[str] = Field(default_factory=list, alias="useCases")
    personality: str | None = Field(default=None, alias="packagePersonality")
    integration_points: list[str] = Field(default_factory=list, alias="integrationPoints")
    impacted_components: list[str] = Field(default_factory=list, alias="impactedComponents")
    performance_impact: PerformanceImpactItem | None = Field(default=None, alias="performanceImpact")

    @field_validator("relevance_score", mode="before")
    @classmethod
    def _clamped_score(cls, value: Any) -> float | None:
        number = _optional_number(value)
        if number is None:
            return None
        return min(max(number, 0.0), 1.0)

    @field_validator("use_cases", "integration_points", "impacted_components", mode="before")
    @classmethod
    def _lists(cls, value: Any) -> list[str]:
        return _string_list(value)

    @field_validator("reasoning", "personality", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str | None:
        return value if isinstance(value, str) else None

    @field_validator("performance_impact", mode="before")
    @classmethod
    def _impact(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else None


def parse_rescore_response(text: str) -> list[RescoreItem]:
    """
    Extract the JSON array from a free-form reply.

    The slice from the first ``[`` to the last ``]`` is decoded; elements
    that do not validate (e.g. no ``packageId``) are skipped.

    Raises:
        ParseError: No JSON array could be decoded
    """
    start = text.find("[")
    end = text.rfind("]")
    if start < 0 or end <= start:
        raise ParseError("no JSON array in response", source="llm")
    try:
        payload = json.loads(text[start : end + 1])
    except json.JSONDecodeError as e:
        raise ParseError(str(e), source="llm") from e
    if not isinstance(payload, list):
        raise ParseError("response is not a JSON array", source="llm")

    items = []
    for raw in payload:
        try:
            items.append(RescoreItem.model_validate(raw))
        except ValidationError:
            logger.debug(f"Skipping malformed rescoring item: {raw!r}")
    return items


# =============================================================================
# Prompt
# =============================================================================


def _joined(values: Sequence[str] | frozenset[str]) -> str:
    return ", ".join(values) if values else "none"


def build_project_context(signals: ProjectSignals) -> str:
    return "\n".join(
        [
            f"Project Framework: {signals.framework_id or 'unknown'}",
            f"Umbraco Version: {signals.platform_version or 'unknown'}",
            f"Installed Packages: {_joined(sorted(signals.installed_package_ids))}",
            f"Detected Features: {_joined(signals.detected_features)}",
            f"Architecture Patterns: {_joined(signals.architecture_patterns)}",
            f"Business Domain: {_joined(signals.business_domain)}",
            f"Code Patterns: {_joined(signals.code_patterns)}",
            f"Project Summary: {signals.narrative or 'n/a'}",
        ]
    )


def build_prompt(batch: Sequence[Candidate], signals: ProjectSignals) -> str:
    packages = "\n".join(
        f"{i}. {c.record.display_name} ({c.id})\n"
        f"   Description: {c.record.description or ''}\n"
        f"   Tags: {', '.join(c.record.tags)}\n"
        f"   Downloads: {c.downloads}\n"
        f"   Source: {c.record.source_kind.value}"
        for i, c in enumerate(batch, start=1)
    )
    return f"""You are an expert Umbraco .NET developer. Evaluate how well each package below fits this Umbraco project.

Project Context:
{build_project_context(signals)}

Packages to Evaluate:
{packages}

For each package provide:
1. relevanceScore between 0.0 and 1.0 for this project's needs
2. reasoning explaining why the package fits or does not fit
3. useCases where the package would help
4. packagePersonality: a short, human description with an analogy
5. integrationPoints: 2-3 places in a typical Umbraco codebase it plugs into
6. impactedComponents: what the package would enhance
7. performanceImpact: seoBoost (0-1), speedImprovement (percent), editorUsability (0-1), predictedBenefits

Reply with a JSON array only, using the packageId values given above:
[
  {{
    "packageId": "package-id",
    "relevanceScore": 0.85,
    "reasoning": "...",
    "useCases": ["..."],
    "packagePersonality": "...",
    "integrationPoints": ["Controllers", "Property Editors"],
    "impactedComponents": ["Document Types"],
    "performanceImpact": {{
      "seoBoost": 0.3,
      "speedImprovement": 10.0,
      "editorUsability": 0.7,
      "predictedBenefits": ["..."]
    }}
  }}
]"""


# =============================================================================
# LLM scorer
# =============================================================================


class LLMScorer:
    """Rescores candidates with a language model, one batch at a time."""

    def __init__(
        self,
        model: LanguageModel,
        batch_size: int = BATCH_SIZE,
        timeout: float = DEFAULT_LLM_TIMEOUT,
    ) -> None:
        self._model = model
        self._batch_size = batch_size
        self._timeout = timeout

    async def rescore(self, candidates: Sequence[Candidate], signals: ProjectSignals) -> None:
        if not candidates:
            return
        for index, start in enumerate(range(0, len(candidates), self._batch_size)):
            batch = candidates[start : start + self._batch_size]
            try:
                await self._rescore_batch(batch, signals)
            except Exception as e:
                logger.warning(f"LLM rescoring batch {index} failed, keeping rule-based scores: {e}")

    async def _rescore_batch(self, batch: Sequence[Candidate], signals: ProjectSignals) -> None:
        prompt = build_prompt(batch, signals)
        reply = await asyncio.wait_for(
            self._model.complete(prompt, max_tokens=MAX_TOKENS, temperature=TEMPERATURE),
            timeout=self._timeout,
        )
        items = parse_rescore_response(reply)

        # Everything is parsed before any candidate is touched
        by_id = {c.id: c for c in batch}
        for item in items:
            candidate = by_id.get(item.package_id)
            if candidate is not None:
                apply_rescore(candidate, item)


def apply_rescore(candidate: Candidate, item: RescoreItem) -> None:
    if item.relevance_score is not None:
        candidate.relevance_score = item.relevance_score
    if item.reasoning:
        candidate.llm_reasoning = item.reasoning
        candidate.reason = item.reasoning
    if item.use_cases:
        candidate.use_cases = item.use_cases
    if item.personality:
        candidate.personality_description = item.personality
    if item.integration_points:
        candidate.integration_points = item.integration_points
    if item.impacted_components:
        candidate.impacted_components = item.impacted_components
    if item.performance_impact is not None:
        impact = item.performance_impact
        candidate.performance_prediction = PerformancePrediction(
            seo_boost=impact.seo_boost,
            speed_improvement=impact.speed_improvement,
            editor_usability=impact.editor_usability,
            predicted_benefits=impact.predicted_benefits,
        )


def select_scorer(model: LanguageModel | None, timeout: float = DEFAULT_LLM_TIMEOUT) -> CandidateScorer:
    """LLMScorer when a model is available and not opted out, else NullScorer."""
    if model is not None and not llm_disabled():
        return LLMScorer(model, timeout=timeout)
    return NullScorer()
