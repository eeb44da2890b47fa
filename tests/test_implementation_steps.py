"""Tests for rule-based implementation steps."""

from __future__ import annotations

from package_suggest.application.recommendation.implementation_steps import (
    GENERIC_DOC_STEPS,
    INSTALL_STEP,
    UMBRACO_STEPS,
    implementation_steps,
)
from package_suggest.domain.entities import ProjectSignals


class TestImplementationSteps:
    def test_known_package(self, signals):
        steps = implementation_steps("Umbraco.Forms.Extras", signals)

        assert steps[0] == INSTALL_STEP
        assert "docs.umbraco.com/umbraco-forms" in steps[1]
        assert all(step in steps for step in UMBRACO_STEPS)
        assert steps[-2:] == [
            "Ensure compatibility with your .NET net8.0 project",
            "Verify compatibility with Umbraco 13",
        ]

    def test_first_known_match_wins(self, empty_signals):
        steps = implementation_steps("Our.Umbraco.Forms.Seo", empty_signals)
        assert any("umbraco-forms" in step for step in steps)
        assert not any("SeoToolkit" in step for step in steps)

    def test_generic_package(self, empty_signals):
        steps = implementation_steps("Serilog.Sinks.File", empty_signals)
        assert steps == [INSTALL_STEP, *GENERIC_DOC_STEPS]

    def test_non_dotnet_framework_skipped(self):
        steps = implementation_steps("Some.Lib", ProjectSignals(framework_id="unknown", platform_version="10"))
        assert steps[-1] == "Verify compatibility with Umbraco 10"
        assert not any(".NET" in step for step in steps)
