"""
Tool Registry - central MCP tool registration and lookup.

Usage:
    from .tool_registry import register_all_mcp_tools, list_registered_tools

    register_all_mcp_tools(mcp, container)
    tools = list_registered_tools()
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP

    from package_suggest.container import ApplicationContainer

logger = logging.getLogger(__name__)


# ============================================================================
# Tool Categories
# ============================================================================

TOOL_CATEGORIES: dict[str, dict[str, object]] = {
    "recommendation": {
        "name": "Recommendations",
        "description": "Project analysis and ranked package suggestions",
        "tools": ["suggest_packages", "generate_marketplace_map", "analyze_project"],
    },
    "registry": {
        "name": "Registry lookups",
        "description": "Direct NuGet and Umbraco Marketplace queries",
        "tools": [
            "search_nuget_packages",
            "search_umbraco_marketplace",
            "get_package_versions",
            "get_umbraco_templates",
        ],
    },
    "integration": {
        "name": "Integration planning",
        "description": "Impact simulation, integration hints and deep project analysis",
        "tools": [
            "simulate_package_impact",
            "get_code_integration_hints",
            "perform_deep_project_analysis",
        ],
    },
}


# ============================================================================
# Registration Functions
# ============================================================================


def register_all_mcp_tools(mcp: FastMCP, container: ApplicationContainer) -> dict[str, int]:
    """
    Register all MCP tools.

    Returns:
        Dict with category names and tool counts
    """
    from .tools import register_all_tools

    logger.info("Registering tools...")
    stats = register_all_tools(mcp, container)
    logger.info(f"Total registered: {sum(stats.values())} tools")
    return stats


def list_registered_tools() -> dict[str, list[str]]:
    """All defined tools grouped by category."""
    return {cat_id: list(cat_info["tools"]) for cat_id, cat_info in TOOL_CATEGORIES.items()}


def get_tool_info(tool_name: str) -> dict[str, str] | None:
    """Category information for one tool, or None if unknown."""
    for cat_id, cat_info in TOOL_CATEGORIES.items():
        if tool_name in cat_info["tools"]:
            return {
                "name": tool_name,
                "category": str(cat_info["name"]),
                "category_id": cat_id,
                "category_description": str(cat_info["description"]),
            }
    return None
