"""
Domain Entities

Core business objects for package recommendation.
"""

from __future__ import annotations

from .package import Candidate, PerformancePrediction, RawPackageRecord, SourceKind
from .project import ProjectSignals, ProjectStructure

__all__ = [
    # Project
    "ProjectSignals",
    "ProjectStructure",
    # Packages
    "RawPackageRecord",
    "SourceKind",
    "Candidate",
    "PerformancePrediction",
]
