"""
Umbraco Package Suggest - recommend NuGet and Umbraco Marketplace packages
for an Umbraco project.

Entry points:
- `RecommendationEngine.get_recommendations(signals)` for library use
- `umbraco-package-suggest-mcp` console script for the MCP server
"""

__version__ = "0.1.0"
