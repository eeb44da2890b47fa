"""
Deep project analysis: a structured report built from the keyword signals
and the per-file structure scan.

Everything here is derived from what `ProjectAnalyzer` found on disk; no
language model is involved.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from package_suggest.domain.entities import ProjectSignals, ProjectStructure

# layer -> building-block categories that make it present
LAYERS: dict[str, tuple[str, ...]] = {
    "presentation": ("SurfaceControllers", "RenderControllers", "ApiControllers", "Controllers", "Views"),
    "application": ("Services", "NotificationHandlers"),
    "data": ("Repositories", "ContentModels"),
    "composition": ("Composers",),
}

LARGE_FILE_LINES = 500


def _architecture_style(structure: ProjectStructure) -> str:
    present = [layer for layer, categories in LAYERS.items() if structure.has(*categories)]
    if len(present) >= 3:
        return "layered"
    if structure.has("Services") or structure.has("Repositories"):
        return "service-oriented"
    if present == ["presentation"]:
        return "controller-centric"
    return "minimal"


def _performance_opportunities(signals: ProjectSignals, structure: ProjectStructure) -> list[str]:
    opportunities = []
    if "caching" not in signals.detected_features:
        opportunities.append("Introduce output or data caching for frequently rendered content")
    if structure.source_files and structure.async_methods == 0:
        opportunities.append("Use async controller actions and services for I/O-bound work")
    if "search" in signals.detected_features and not structure.has("NotificationHandlers"):
        opportunities.append("Keep search indexes fresh with content notification handlers")
    return opportunities


def _next_steps(signals: ProjectSignals, structure: ProjectStructure) -> list[str]:
    steps = []
    if structure.has("Services") and not structure.has("Composers"):
        steps.append("Register services through a composer instead of ad-hoc construction")
    if structure.has("Controllers", "SurfaceControllers") and not structure.has("Services"):
        steps.append("Move business logic out of controllers into services")
    if "seo" not in signals.detected_features:
        steps.append("Add SEO metadata and sitemap support")
    if signals.platform_version is None:
        steps.append("Pin the Umbraco.Cms package reference so upgrades are explicit")
    if not steps:
        steps.append("Review package recommendations for gaps in the current feature set")
    return steps


def build_deep_analysis(signals: ProjectSignals, structure: ProjectStructure) -> dict[str, Any]:
    layers = {layer: structure.has(*categories) for layer, categories in LAYERS.items()}
    files = structure.source_files
    largest = structure.largest_files()

    return {
        "project_overview": {
            "framework": signals.framework_id,
            "umbraco_version": signals.platform_version,
            "installed_packages": len(signals.installed_package_ids),
            "source_files": files,
            "total_lines": structure.total_lines,
        },
        "architectural_assessment": {
            "style": _architecture_style(structure),
            "layer_completeness": layers,
            "detected_patterns": list(signals.architecture_patterns),
            "building_blocks": {k: len(v) for k, v in structure.code_locations.items()},
        },
        "code_quality": {
            "average_lines_per_file": round(structure.total_lines / files, 1) if files else 0.0,
            "largest_files": [{"path": path, "lines": lines} for path, lines in largest],
            "large_files": sum(1 for lines in structure.file_lines.values() if lines > LARGE_FILE_LINES),
            "code_patterns": list(signals.code_patterns),
        },
        "performance_profile": {
            "caching_in_use": "caching" in signals.detected_features,
            "async_methods": structure.async_methods,
            "optimization_opportunities": _performance_opportunities(signals, structure),
        },
        "business_logic": {
            "domains": list(signals.business_domain),
            "features": list(signals.detected_features),
            "service_files": len(structure.files("Services")),
            "notification_handlers": len(structure.files("NotificationHandlers")),
        },
        "recommended_next_steps": _next_steps(signals, structure),
        "narrative": signals.narrative,
    }
