"""Domain layer: pure data objects shared by every other layer."""

from .entities import (
    Candidate,
    PerformancePrediction,
    ProjectSignals,
    ProjectStructure,
    RawPackageRecord,
    SourceKind,
)

__all__ = [
    "Candidate",
    "PerformancePrediction",
    "ProjectSignals",
    "ProjectStructure",
    "RawPackageRecord",
    "SourceKind",
]
