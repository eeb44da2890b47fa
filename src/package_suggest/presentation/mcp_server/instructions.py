"""
MCP Server Instructions - usage guide for AI agents.
"""

from __future__ import annotations

SERVER_INSTRUCTIONS = """
Umbraco Package Suggest - package recommendations for Umbraco projects

## Typical flow
1. analyze_project(project_path) to see what the heuristics detect
2. suggest_packages(project_path) for a ranked list of NuGet and
   Umbraco Marketplace packages; depth="simple" returns scores only
3. generate_marketplace_map(project_path) to present the results as
   clusters (mainstream winners, hidden gems, specialized tools,
   community favorites)

## Before installing
- get_code_integration_hints(project_path, package_ids) for the files and
  steps each package touches
- simulate_package_impact(project_path, package_ids) for a language-model
  assessment of risks and conflicts (needs sampling)
- perform_deep_project_analysis(project_path) for an architecture, quality
  and performance report

## Direct lookups
- search_nuget_packages(query) / search_umbraco_marketplace(query)
- get_package_versions(package_id) before pinning a version
- get_umbraco_templates() for starter kits

## Notes
- Installed packages are never suggested.
- A hidden gem is relevant to the project but less downloaded than the
  average candidate.
- When sampling is available, scores are refined by the language model.
  Set DISABLE_LLM=true on the server to keep project data local.
- Registry outages reduce the number of results; they are not errors.
"""
