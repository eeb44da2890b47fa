"""
Domain Entity: ProjectSignals

Heuristic facts about an Umbraco project, produced by the project analyzer
and consumed read-only by the recommendation pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ProjectSignals:
    """
    Signals extracted from a project source tree.

    The narrative fields (architecture patterns, business domain, code
    patterns, narrative) are only ever forwarded to the language model;
    rule-based scoring never looks at them.
    """

    framework_id: str | None = None  # e.g. "net8.0"
    platform_version: str | None = None  # Umbraco major version, e.g. "13"
    installed_package_ids: frozenset[str] = field(default_factory=frozenset)
    detected_features: tuple[str, ...] = ()

    # Opaque context for rescoring
    architecture_patterns: tuple[str, ...] = ()
    business_domain: tuple[str, ...] = ()
    code_patterns: tuple[str, ...] = ()
    narrative: str | None = None
    project_path: str | None = None

    def __post_init__(self) -> None:
        # Normalise so membership is case-insensitive and callers may pass lists
        object.__setattr__(
            self,
            "installed_package_ids",
            frozenset(pkg.lower() for pkg in self.installed_package_ids),
        )
        object.__setattr__(self, "detected_features", tuple(self.detected_features))
        object.__setattr__(self, "architecture_patterns", tuple(self.architecture_patterns))
        object.__setattr__(self, "business_domain", tuple(self.business_domain))
        object.__setattr__(self, "code_patterns", tuple(self.code_patterns))

    def is_installed(self, package_id: str) -> bool:
        """Case-insensitive installed-package check."""
        return package_id.lower() in self.installed_package_ids

    def to_dict(self) -> dict[str, Any]:
        return {
            "framework": self.framework_id,
            "umbraco_version": self.platform_version,
            "installed_packages": sorted(self.installed_package_ids),
            "detected_features": list(self.detected_features),
            "architecture_patterns": list(self.architecture_patterns),
            "business_domain": list(self.business_domain),
            "code_patterns": list(self.code_patterns),
            "narrative": self.narrative,
            "project_path": self.project_path,
        }


@dataclass
class ProjectStructure:
    """
    Where the Umbraco building blocks of a project live.

    ``code_locations`` maps a category (e.g. "SurfaceControllers",
    "Composers") to relative file paths in scan order; ``file_lines`` holds
    the line count of every scanned source file.
    """

    code_locations: dict[str, list[str]] = field(default_factory=dict)
    file_lines: dict[str, int] = field(default_factory=dict)
    async_methods: int = 0

    @property
    def source_files(self) -> int:
        return len(self.file_lines)

    @property
    def total_lines(self) -> int:
        return sum(self.file_lines.values())

    def files(self, category: str) -> list[str]:
        return self.code_locations.get(category, [])

    def has(self, *categories: str) -> bool:
        """True when any of the categories has at least one file."""
        return any(self.code_locations.get(c) for c in categories)

    def largest_files(self, limit: int = 3) -> list[tuple[str, int]]:
        return sorted(self.file_lines.items(), key=lambda item: item[1], reverse=True)[:limit]

    def to_dict(self) -> dict[str, Any]:
        return {
            "code_locations": {k: list(v) for k, v in self.code_locations.items()},
            "source_files": self.source_files,
            "total_lines": self.total_lines,
            "async_methods": self.async_methods,
        }
