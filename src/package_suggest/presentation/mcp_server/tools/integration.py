"""
Integration MCP Tools - planning work for packages before installing them

Provides:
- simulate_package_impact: language-model simulation of installing packages
- get_code_integration_hints: rule-based hints with concrete project files
- perform_deep_project_analysis: structured architecture/quality report

The Context parameter stays a runtime annotation so FastMCP can inject it.
"""

import asyncio
import logging
from typing import TYPE_CHECKING

from mcp.server.fastmcp import Context

from package_suggest.application.analysis import build_deep_analysis, build_integration_hints
from package_suggest.application.recommendation.rescoring import llm_disabled
from package_suggest.core.exceptions import ConfigurationError, ErrorContext, PackageSuggestError
from package_suggest.infrastructure.llm import language_model_from_context

from ._common import InputNormalizer, ResponseFormatter

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP

    from package_suggest.container import ApplicationContainer

logger = logging.getLogger(__name__)


def register_integration_tools(mcp: "FastMCP", container: "ApplicationContainer") -> None:
    """Register integration planning tools (3 tools)."""

    @mcp.tool()
    async def simulate_package_impact(
        project_path: str,
        package_ids: list[str] | str,
        ctx: Context = None,  # type: ignore[assignment]
    ) -> str:
        """
        Simulate what installing packages would change in an Umbraco project.

        Sends the project signals and the package ids to the client's
        language model (MCP sampling) and returns its assessment: affected
        areas, configuration changes, risks, conflicts and overall risk.
        Requires a client that supports sampling; DISABLE_LLM=true turns
        this tool off.

        Args:
            project_path: Absolute path of the project directory
            package_ids: Package ids, as a list or a comma-separated string

        Returns:
            JSON with the packages and the simulation.

        Example:
            simulate_package_impact(project_path="C:/src/MySite.Web",
                                    package_ids="Umbraco.Forms,Our.Umbraco.Meta")
        """
        try:
            ids = InputNormalizer.normalize_package_ids(package_ids)
            model = language_model_from_context(ctx)
            if model is None or llm_disabled():
                raise ConfigurationError(
                    "Impact simulation needs a language model",
                    context=ErrorContext(
                        suggestion="Use a client with sampling support and unset DISABLE_LLM, "
                        "or call get_code_integration_hints instead"
                    ),
                )
            analyzer = container.project_analyzer()
            signals = await asyncio.to_thread(analyzer.analyze, project_path)
            simulation = await container.impact_simulator(language_model=model).simulate(ids, signals)
        except PackageSuggestError as e:
            return ResponseFormatter.error(e, tool_name="simulate_package_impact")
        except Exception as e:
            logger.exception(f"Impact simulation failed: {e}")
            return ResponseFormatter.error(e, tool_name="simulate_package_impact")

        return ResponseFormatter.success({"package_ids": ids, "simulation": simulation})

    @mcp.tool()
    async def get_code_integration_hints(project_path: str, package_ids: list[str] | str) -> str:
        """
        Where and how to integrate packages into an Umbraco project.

        For each package: integration points, implementation steps, the
        project files where the work lands (surface controllers, services,
        composers, ...), a quick start and an effort estimate.

        Args:
            project_path: Absolute path of the project directory
            package_ids: Package ids, as a list or a comma-separated string
        """
        try:
            ids = InputNormalizer.normalize_package_ids(package_ids)
            analyzer = container.project_analyzer()
            structure = await asyncio.to_thread(analyzer.scan_structure, project_path)
        except PackageSuggestError as e:
            return ResponseFormatter.error(e, tool_name="get_code_integration_hints")
        except Exception as e:
            logger.exception(f"Integration hints failed: {e}")
            return ResponseFormatter.error(e, tool_name="get_code_integration_hints")

        hints = build_integration_hints(ids, structure)
        return ResponseFormatter.success(
            {
                "hints": [hint.to_dict() for hint in hints],
                "count": len(hints),
                "project_structure": structure.to_dict(),
            }
        )

    @mcp.tool()
    async def perform_deep_project_analysis(project_path: str) -> str:
        """
        Structured deep analysis of an Umbraco project.

        Sections: project overview, architectural assessment (layers and
        building blocks), code quality, performance profile, business logic
        and recommended next steps. Built from the source tree only; no
        registry or language-model calls.

        Args:
            project_path: Absolute path of the project directory
        """
        analyzer = container.project_analyzer()
        try:
            signals = await asyncio.to_thread(analyzer.analyze, project_path)
            structure = await asyncio.to_thread(analyzer.scan_structure, project_path)
        except PackageSuggestError as e:
            return ResponseFormatter.error(e, tool_name="perform_deep_project_analysis")
        except Exception as e:
            logger.exception(f"Deep analysis failed: {e}")
            return ResponseFormatter.error(e, tool_name="perform_deep_project_analysis")

        return ResponseFormatter.success(build_deep_analysis(signals, structure))
