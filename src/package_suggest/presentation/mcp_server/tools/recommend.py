"""
Recommendation MCP Tools - project analysis and package suggestions

Provides:
- suggest_packages: ranked NuGet + Marketplace packages for a project
- generate_marketplace_map: the same ranking grouped into discovery clusters
- analyze_project: the heuristic signals only, no registry calls

The Context parameter stays a runtime annotation so FastMCP can inject it.
"""

import asyncio
import logging
from typing import TYPE_CHECKING

from mcp.server.fastmcp import Context

from package_suggest.application.recommendation import build_marketplace_map
from package_suggest.core.exceptions import PackageSuggestError
from package_suggest.infrastructure.llm import language_model_from_context

from ._common import InputNormalizer, ResponseFormatter

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP

    from package_suggest.application.recommendation import RecommendationResult
    from package_suggest.container import ApplicationContainer
    from package_suggest.domain.entities import ProjectSignals

logger = logging.getLogger(__name__)

DEPTHS = ("detailed", "simple")


def register_recommend_tools(mcp: "FastMCP", container: "ApplicationContainer") -> None:
    """Register recommendation tools (3 tools)."""

    async def _analyze(project_path: str) -> "ProjectSignals":
        analyzer = container.project_analyzer()
        return await asyncio.to_thread(analyzer.analyze, project_path)

    async def _recommend(signals: "ProjectSignals", ctx: Context | None) -> "RecommendationResult":
        engine = container.recommendation_engine(language_model=language_model_from_context(ctx))
        return await engine.recommend(signals)

    @mcp.tool()
    async def suggest_packages(project_path: str, depth: str = "detailed", ctx: Context = None) -> str:  # type: ignore[assignment]
        """
        Suggest NuGet and Umbraco Marketplace packages for an Umbraco project.

        Analyzes the project's .csproj and sources, searches both registries
        for the Umbraco version and each detected feature, and returns a
        ranked list. Already-installed packages are never suggested.

        When the client supports sampling and DISABLE_LLM is not "true",
        scores are refined by the language model with reasoning, use cases
        and integration points.

        Args:
            project_path: Absolute path of the project directory
            depth: "detailed" (default) includes implementation steps and
                   language-model insights; "simple" returns scores only

        Returns:
            JSON with project signals, ranked recommendations and statistics.

        Example:
            suggest_packages(project_path="C:/src/MySite.Web", depth="simple")
        """
        detail = InputNormalizer.normalize_choice(depth, DEPTHS, "detailed")
        try:
            signals = await _analyze(project_path)
            result = await _recommend(signals, ctx)
        except PackageSuggestError as e:
            return ResponseFormatter.error(e, tool_name="suggest_packages")
        except Exception as e:
            logger.exception(f"Package suggestion failed: {e}")
            return ResponseFormatter.error(
                e,
                suggestion="Check the project path and network connection",
                tool_name="suggest_packages",
            )

        detailed = detail == "detailed"
        return ResponseFormatter.success(
            {
                "project": signals.to_dict(),
                "recommendations": [c.to_dict(detailed=detailed) for c in result.candidates],
                "count": len(result.candidates),
                "hidden_gems": sum(1 for c in result.candidates if c.is_hidden_gem),
                "llm_enabled": result.llm_enabled,
                "statistics": result.stats.to_dict(),
            }
        )

    @mcp.tool()
    async def generate_marketplace_map(project_path: str, ctx: Context = None) -> str:  # type: ignore[assignment]
        """
        Build a marketplace map for an Umbraco project.

        Groups the ranked packages into clusters: mainstream winners, hidden
        gems (relevant but little known), specialized tools (explicit
        version compatibility) and community favorites, plus summary
        insights such as the most common tags.

        Args:
            project_path: Absolute path of the project directory

        Returns:
            JSON marketplace map with clusters and discovery insights.
        """
        try:
            signals = await _analyze(project_path)
            result = await _recommend(signals, ctx)
        except PackageSuggestError as e:
            return ResponseFormatter.error(e, tool_name="generate_marketplace_map")
        except Exception as e:
            logger.exception(f"Marketplace map failed: {e}")
            return ResponseFormatter.error(e, tool_name="generate_marketplace_map")

        return ResponseFormatter.success(build_marketplace_map(result.candidates, signals))

    @mcp.tool()
    async def analyze_project(project_path: str) -> str:
        """
        Analyze an Umbraco project without querying any registry.

        Returns the target framework, Umbraco version, installed packages,
        detected features, architecture patterns, business domain and code
        patterns found by keyword heuristics.

        Args:
            project_path: Absolute path of the project directory
        """
        try:
            signals = await _analyze(project_path)
        except PackageSuggestError as e:
            return ResponseFormatter.error(e, tool_name="analyze_project")
        except Exception as e:
            logger.exception(f"Project analysis failed: {e}")
            return ResponseFormatter.error(e, tool_name="analyze_project")
        return ResponseFormatter.success(signals.to_dict())
