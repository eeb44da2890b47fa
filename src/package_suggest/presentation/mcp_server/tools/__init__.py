"""
Umbraco Package Suggest MCP Tools

Recommendation (3):
- suggest_packages, generate_marketplace_map, analyze_project

Registry lookups (4):
- search_nuget_packages, search_umbraco_marketplace
- get_package_versions, get_umbraco_templates

Integration planning (3):
- simulate_package_impact, get_code_integration_hints
- perform_deep_project_analysis

Usage:
    from .tools import register_all_tools
    register_all_tools(mcp, container)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .integration import register_integration_tools
from .recommend import register_recommend_tools
from .registry_search import register_registry_tools

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP

    from package_suggest.container import ApplicationContainer


def register_all_tools(mcp: FastMCP, container: ApplicationContainer) -> dict[str, int]:
    """Register every tool module; returns tool counts per module."""
    register_recommend_tools(mcp, container)
    register_registry_tools(mcp, container)
    register_integration_tools(mcp, container)
    return {"recommendation": 3, "registry": 4, "integration": 3}


__all__ = [
    "register_all_tools",
    "register_integration_tools",
    "register_recommend_tools",
    "register_registry_tools",
]
