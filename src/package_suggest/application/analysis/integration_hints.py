"""
Rule-based integration hints for packages a project is about to install.

Each package id is matched against `HINT_RULES` (first match wins, with
`DEFAULT_RULE` as the catch-all). The project's scanned structure supplies
the concrete files where integration work would land.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Sequence

    from package_suggest.domain.entities import ProjectStructure


@dataclass(frozen=True)
class HintRule:
    keywords: tuple[str, ...]
    integration_points: tuple[str, ...]
    implementation_steps: tuple[str, ...]


HINT_RULES: tuple[HintRule, ...] = (
    HintRule(
        keywords=("seo", "meta", "opengraph"),
        integration_points=(
            "Content rendering controllers for dynamic meta tags",
            "Custom property editors for SEO field configuration",
            "View components for meta tag injection",
        ),
        implementation_steps=(
            "Register SEO services in a composer",
            "Inject meta tag helpers in your layout templates",
            "Configure SEO settings in appsettings.json",
        ),
    ),
    HintRule(
        keywords=("form", "contact"),
        integration_points=(
            "Surface controllers for form processing",
            "Content models with form data properties",
            "Partial views for form rendering",
        ),
        implementation_steps=(
            "Create surface controller inheriting from SurfaceController",
            "Add form validation using ModelState",
            "Configure SMTP settings for email delivery",
        ),
    ),
    HintRule(
        keywords=("cache", "performance", "outputcache"),
        integration_points=(
            "Service layer for cache management",
            "Custom middleware for response caching",
            "Composer for cache service registration",
        ),
        implementation_steps=(
            "Implement caching interfaces in your services",
            "Register cache services in dependency injection",
            "Add cache invalidation on content changes",
        ),
    ),
    HintRule(
        keywords=("auth", "member", "login"),
        integration_points=(
            "Surface controllers for login/logout",
            "Custom middleware for authentication",
            "Member property editors for profile management",
        ),
        implementation_steps=(
            "Configure member types in Umbraco backoffice",
            "Create surface controllers for auth endpoints",
            "Implement custom authentication middleware",
        ),
    ),
)

DEFAULT_RULE = HintRule(
    keywords=(),
    integration_points=(
        "Composer for service registration",
        "Appropriate controllers based on package functionality",
        "Configuration in appsettings.json",
    ),
    implementation_steps=(
        "Review package documentation for specific integration requirements",
        "Register services in a composer class",
        "Configure package settings appropriately",
    ),
)

# category -> how many files to surface
LOCATION_LIMITS: dict[str, int] = {
    "SurfaceControllers": 3,
    "Controllers": 3,
    "Services": 3,
    "ContentModels": 3,
    "Composers": 2,
}

COMPOSER_STEP = "Add a composer class to register the package's services"


@dataclass
class IntegrationHint:
    package_id: str
    integration_points: list[str]
    implementation_steps: list[str]
    code_locations: dict[str, list[str]] = field(default_factory=dict)

    @property
    def effort(self) -> str:
        steps = len(self.implementation_steps)
        if steps <= 3:
            return "Low"
        if steps <= 6:
            return "Medium"
        return "High"

    @property
    def confidence(self) -> str:
        return "High" if self.code_locations else "Medium"

    def to_dict(self) -> dict[str, Any]:
        key_files = [path for paths in self.code_locations.values() for path in paths][:3]
        return {
            "package_id": self.package_id,
            "integration_points": self.integration_points,
            "implementation_steps": self.implementation_steps,
            "code_locations": self.code_locations,
            "quick_start": {
                "primary_integration_point": (
                    self.integration_points[0] if self.integration_points else "Review package documentation"
                ),
                "key_files": key_files,
                "estimated_effort": self.effort,
            },
            "confidence": self.confidence,
        }


def match_rule(package_id: str) -> HintRule:
    lowered = package_id.lower()
    for rule in HINT_RULES:
        if any(keyword in lowered for keyword in rule.keywords):
            return rule
    return DEFAULT_RULE


def build_integration_hint(package_id: str, structure: ProjectStructure) -> IntegrationHint:
    rule = match_rule(package_id)
    steps = list(rule.implementation_steps)
    # Services already exist but nothing registers them
    if structure.has("Services") and not structure.has("Composers"):
        steps.append(COMPOSER_STEP)

    locations = {
        category: structure.files(category)[:limit]
        for category, limit in LOCATION_LIMITS.items()
        if structure.has(category)
    }
    return IntegrationHint(
        package_id=package_id,
        integration_points=list(rule.integration_points),
        implementation_steps=steps,
        code_locations=locations,
    )


def build_integration_hints(package_ids: Sequence[str], structure: ProjectStructure) -> list[IntegrationHint]:
    return [build_integration_hint(package_id, structure) for package_id in package_ids]
