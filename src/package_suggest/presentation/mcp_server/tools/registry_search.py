"""
Registry MCP Tools - direct NuGet and Umbraco Marketplace lookups

Provides:
- search_nuget_packages: free-text NuGet search
- search_umbraco_marketplace: free-text Marketplace search
- get_package_versions: published NuGet versions, newest first
- get_umbraco_templates: most downloaded Marketplace templates
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ._common import InputNormalizer, ResponseFormatter

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP

    from package_suggest.container import ApplicationContainer
    from package_suggest.domain.entities import RawPackageRecord

logger = logging.getLogger(__name__)


def _records_response(records: list[RawPackageRecord], query: str | None = None) -> str:
    if not records:
        return ResponseFormatter.no_results(query=query)
    payload: dict = {"results": [r.to_dict() for r in records], "count": len(records)}
    if query:
        payload["query"] = query
    return ResponseFormatter.success(payload)


def register_registry_tools(mcp: FastMCP, container: ApplicationContainer) -> None:
    """Register registry lookup tools (4 tools)."""

    @mcp.tool()
    async def search_nuget_packages(query: str, max_results: int = 20) -> str:
        """
        Search NuGet.org packages.

        Args:
            query: Search terms, e.g. "umbraco forms" (NuGet syntax such as
                   "packageid:Umbraco.Forms" is supported)
            max_results: Maximum number of results (1-100, default 20)
        """
        query = InputNormalizer.normalize_query(query)
        if not query:
            return ResponseFormatter.error(
                "Empty query",
                suggestion="Provide search terms",
                example='search_nuget_packages(query="umbraco seo")',
                tool_name="search_nuget_packages",
            )
        limit = InputNormalizer.normalize_limit(max_results, default=20)
        try:
            records = await container.nuget_client().search(query, limit=limit)
        except Exception as e:
            logger.exception(f"NuGet search failed: {e}")
            return ResponseFormatter.error(e, tool_name="search_nuget_packages")
        return _records_response(records, query)

    @mcp.tool()
    async def search_umbraco_marketplace(query: str, max_results: int = 20) -> str:
        """
        Search the Umbraco Marketplace.

        Marketplace results include the package type and the Umbraco
        versions each package declares compatibility with.

        Args:
            query: Search terms, e.g. "seo"
            max_results: Maximum number of results (1-100, default 20)
        """
        query = InputNormalizer.normalize_query(query)
        if not query:
            return ResponseFormatter.error(
                "Empty query",
                suggestion="Provide search terms",
                example='search_umbraco_marketplace(query="forms")',
                tool_name="search_umbraco_marketplace",
            )
        limit = InputNormalizer.normalize_limit(max_results, default=20)
        try:
            records = await container.marketplace_client().search(query, limit=limit)
        except Exception as e:
            logger.exception(f"Marketplace search failed: {e}")
            return ResponseFormatter.error(e, tool_name="search_umbraco_marketplace")
        return _records_response(records, query)

    @mcp.tool()
    async def get_package_versions(package_id: str) -> str:
        """
        List published versions of a NuGet package, newest first.

        Args:
            package_id: Exact package id, e.g. "Umbraco.Forms"
        """
        package_id = InputNormalizer.normalize_query(package_id)
        if not package_id:
            return ResponseFormatter.error(
                "Empty package id",
                example='get_package_versions(package_id="Umbraco.Forms")',
                tool_name="get_package_versions",
            )
        try:
            versions = await container.nuget_client().get_versions(package_id)
        except Exception as e:
            logger.exception(f"Version lookup failed: {e}")
            return ResponseFormatter.error(e, tool_name="get_package_versions")
        if not versions:
            return ResponseFormatter.error(
                f"No versions found for '{package_id}'",
                suggestion="Check the package id with search_nuget_packages",
                tool_name="get_package_versions",
            )
        return ResponseFormatter.success(
            {"package_id": package_id, "latest": versions[0], "versions": versions, "count": len(versions)}
        )

    @mcp.tool()
    async def get_umbraco_templates(max_results: int = 20) -> str:
        """
        List the most downloaded Umbraco site templates and starter kits.

        Args:
            max_results: Maximum number of templates (1-100, default 20)
        """
        limit = InputNormalizer.normalize_limit(max_results, default=20)
        try:
            records = await container.marketplace_client().get_templates(page_size=limit)
        except Exception as e:
            logger.exception(f"Template listing failed: {e}")
            return ResponseFormatter.error(e, tool_name="get_umbraco_templates")
        return _records_response(records)
