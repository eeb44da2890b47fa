"""
Package impact simulation with the client's language model.

The model is asked what installing a set of packages would change in the
project. The reply's JSON object is returned as-is; a reply without one is
wrapped as ``{"simulation": <text>}``.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from package_suggest.core.async_utils import timeout_with_fallback
from package_suggest.core.exceptions import ServiceUnavailableError

from .rescoring import DEFAULT_LLM_TIMEOUT, build_project_context

if TYPE_CHECKING:
    from collections.abc import Sequence

    from package_suggest.domain.entities import ProjectSignals
    from package_suggest.infrastructure.llm import LanguageModel

logger = logging.getLogger(__name__)

SIMULATION_MAX_TOKENS = 2000
SIMULATION_TEMPERATURE = 0.3


def build_simulation_prompt(package_ids: Sequence[str], signals: ProjectSignals) -> str:
    packages = "\n".join(f"- {package_id}" for package_id in package_ids)
    return f"""You are an expert Umbraco developer. Simulate installing the following packages into this project.

PACKAGES TO INSTALL:
{packages}

PROJECT CONTEXT:
{build_project_context(signals)}

Respond with a single JSON object:
{{
  "packages": [
    {{
      "packageId": "exact package id",
      "affectedAreas": ["controllers, views or services that change"],
      "configurationChanges": ["settings to add or modify"],
      "risks": ["compatibility or upgrade risks"],
      "performanceImpact": "expected effect on performance"
    }}
  ],
  "conflicts": ["packages that overlap with installed ones"],
  "overallRisk": "Low|Medium|High",
  "summary": "two or three sentences"
}}"""


def parse_simulation_response(text: str) -> dict[str, Any]:
    """The JSON object between the first ``{`` and the last ``}``, else the raw text."""
    start = text.find("{")
    end = text.rfind("}")
    if start >= 0 and end > start:
        try:
            # NaN and Infinity become null so the result stays valid JSON
            payload = json.loads(text[start : end + 1], parse_constant=lambda _: None)
        except json.JSONDecodeError:
            logger.debug("Simulation reply has no decodable JSON object")
        else:
            if isinstance(payload, dict):
                return payload
    return {"simulation": text}


class ImpactSimulator:
    """Runs one simulation prompt against a language model."""

    def __init__(self, model: LanguageModel, timeout: float = DEFAULT_LLM_TIMEOUT) -> None:
        self._model = model
        self._timeout = timeout

    async def simulate(self, package_ids: Sequence[str], signals: ProjectSignals) -> dict[str, Any]:
        """
        Raises:
            ServiceUnavailableError: The model did not answer within the timeout
        """
        prompt = build_simulation_prompt(package_ids, signals)
        reply = await timeout_with_fallback(
            self._model.complete(prompt, max_tokens=SIMULATION_MAX_TOKENS, temperature=SIMULATION_TEMPERATURE),
            timeout=self._timeout,
            fallback=None,
        )
        if reply is None:
            raise ServiceUnavailableError(
                f"no simulation reply within {self._timeout:.0f}s", service="Language model"
            )
        logger.info(f"Simulated impact of {len(package_ids)} packages")
        return parse_simulation_response(reply)
