"""Project analysis: turns a source tree into ProjectSignals and ProjectStructure."""

from .deep_analysis import build_deep_analysis
from .integration_hints import IntegrationHint, build_integration_hints
from .project_analyzer import ProjectAnalyzer

__all__ = ["IntegrationHint", "ProjectAnalyzer", "build_deep_analysis", "build_integration_hints"]
