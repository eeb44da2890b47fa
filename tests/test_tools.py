"""Tests for the MCP tool functions with in-memory registries."""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest
from conftest import FakeLanguageModel, FakeSource, make_record
from dependency_injector import providers

from package_suggest.container import DEFAULT_CONFIG, ApplicationContainer
from package_suggest.core.exceptions import InvalidParameterError
from package_suggest.domain.entities import SourceKind
from package_suggest.presentation.mcp_server.tools import register_all_tools
from package_suggest.presentation.mcp_server.tools._common import InputNormalizer, ResponseFormatter


class FakeMCP:
    """Collects functions registered with ``@mcp.tool()``."""

    def __init__(self):
        self.tools = {}

    def tool(self):
        def decorator(func):
            self.tools[func.__name__] = func
            return func

        return decorator


class FakeRegistry(FakeSource):
    def __init__(self, kind, responses=None, versions=None, templates=None):
        super().__init__(kind, responses)
        self.versions = versions or {}
        self.templates = templates or []
        self.template_page_sizes = []

    async def get_versions(self, package_id):
        return list(self.versions.get(package_id, []))

    async def get_templates(self, page_size=50):
        self.template_page_sizes.append(page_size)
        return list(self.templates)


@pytest.fixture
def nuget():
    return FakeRegistry(
        SourceKind.REGISTRY,
        {
            "umbraco 13": [make_record("Our.Umbraco.Seo", downloads=50_000, tags=("seo",))],
            "umbraco seo": [make_record("Our.Umbraco.Seo", downloads=50_000, tags=("seo",))],
            "umbraco forms": [make_record("Forms.Helper", downloads=300, tags=("forms",))],
        },
        versions={"Umbraco.Forms": ["13.1.1", "13.0.0"]},
    )


@pytest.fixture
def marketplace():
    return FakeRegistry(
        SourceKind.MARKETPLACE,
        {"seo": [make_record("SeoToolkit", source=SourceKind.MARKETPLACE, downloads=2_000, compatibility=("13",))]},
        templates=[make_record("Clean.Starter", source=SourceKind.MARKETPLACE, package_type="Template")],
    )


@pytest.fixture
def tools(nuget, marketplace):
    container = ApplicationContainer()
    container.config.from_dict(DEFAULT_CONFIG)
    container.nuget_client.override(providers.Object(nuget))
    container.marketplace_client.override(providers.Object(marketplace))
    mcp = FakeMCP()
    assert register_all_tools(mcp, container) == {"recommendation": 3, "registry": 4, "integration": 3}
    return mcp.tools


class TestRecommendTools:
    async def test_registered(self, tools):
        assert set(tools) == {
            "suggest_packages",
            "generate_marketplace_map",
            "analyze_project",
            "search_nuget_packages",
            "search_umbraco_marketplace",
            "get_package_versions",
            "get_umbraco_templates",
            "simulate_package_impact",
            "get_code_integration_hints",
            "perform_deep_project_analysis",
        }

    async def test_suggest_packages(self, tools, umbraco_project):
        result = json.loads(await tools["suggest_packages"](str(umbraco_project)))

        assert result["project"]["umbraco_version"] == "13"
        assert result["llm_enabled"] is False
        ids = [r["id"] for r in result["recommendations"]]
        assert set(ids) == {"Our.Umbraco.Seo", "Forms.Helper", "SeoToolkit"}
        assert result["count"] == 3
        assert "implementation_steps" in result["recommendations"][0]
        assert result["statistics"]["boosts_applied"] == 1

    async def test_suggest_packages_simple(self, tools, umbraco_project):
        result = json.loads(await tools["suggest_packages"](str(umbraco_project), depth="SIMPLE"))
        assert all("implementation_steps" not in r for r in result["recommendations"])

    async def test_missing_project(self, tools, tmp_path):
        result = json.loads(await tools["suggest_packages"](str(tmp_path / "missing")))
        assert "does not exist" in result["error"]
        assert result["category"] == "validation"
        assert result["tool"] == "suggest_packages"
        assert result["suggestion"]

    async def test_marketplace_map(self, tools, umbraco_project):
        result = json.loads(await tools["generate_marketplace_map"](str(umbraco_project)))
        assert result["discovery_insights"]["total_packages_analyzed"] == 3
        assert set(result["package_clusters"]) == {
            "mainstream_winners",
            "hidden_gems",
            "specialized_tools",
            "community_favorites",
        }

    async def test_analyze_project_makes_no_registry_calls(self, tools, nuget, umbraco_project):
        result = json.loads(await tools["analyze_project"](str(umbraco_project)))
        assert result["framework"] == "net8.0"
        assert result["detected_features"] == ["forms", "seo"]
        assert nuget.calls == []


class TestRegistryTools:
    async def test_search_nuget(self, tools, nuget):
        result = json.loads(await tools["search_nuget_packages"]("  umbraco   seo ", max_results=500))
        assert nuget.calls == [("umbraco seo", 100)]
        assert result["count"] == 1
        assert result["results"][0]["id"] == "Our.Umbraco.Seo"

    async def test_search_no_results(self, tools):
        result = json.loads(await tools["search_umbraco_marketplace"]("nothing"))
        assert result["results"] == []
        assert result["query"] == "nothing"

    @pytest.mark.parametrize("tool", ["search_nuget_packages", "search_umbraco_marketplace"])
    async def test_empty_query(self, tools, tool):
        result = json.loads(await tools[tool]("   "))
        assert result["error"] == "Empty query"
        assert result["category"] == "input"

    async def test_versions(self, tools):
        result = json.loads(await tools["get_package_versions"]("Umbraco.Forms"))
        assert result == {
            "package_id": "Umbraco.Forms",
            "latest": "13.1.1",
            "versions": ["13.1.1", "13.0.0"],
            "count": 2,
        }

    async def test_unknown_versions(self, tools):
        result = json.loads(await tools["get_package_versions"]("Nope"))
        assert "No versions found" in result["error"]

    async def test_templates(self, tools, marketplace):
        result = json.loads(await tools["get_umbraco_templates"](max_results="5"))
        assert marketplace.template_page_sizes == [5]
        assert result["results"][0]["package_type"] == "Template"


MODEL_FROM_CONTEXT = "package_suggest.presentation.mcp_server.tools.integration.language_model_from_context"


class TestIntegrationTools:
    async def test_simulate_package_impact(self, tools, umbraco_project):
        model = FakeLanguageModel('Here you go: {"overallRisk": "Low", "summary": "Safe to install"} Done.')

        with patch(MODEL_FROM_CONTEXT, return_value=model):
            result = json.loads(
                await tools["simulate_package_impact"](str(umbraco_project), "Umbraco.Forms, Our.Umbraco.Meta")
            )

        assert result == {
            "package_ids": ["Umbraco.Forms", "Our.Umbraco.Meta"],
            "simulation": {"overallRisk": "Low", "summary": "Safe to install"},
        }
        assert model.settings == [(2000, 0.3)]
        assert "- Our.Umbraco.Meta" in model.prompts[0]
        assert "Umbraco Version: 13" in model.prompts[0]

    async def test_simulate_without_model(self, tools, umbraco_project):
        with patch(MODEL_FROM_CONTEXT, return_value=None):
            result = json.loads(await tools["simulate_package_impact"](str(umbraco_project), ["Umbraco.Forms"]))

        assert result["category"] == "config"
        assert result["tool"] == "simulate_package_impact"
        assert "get_code_integration_hints" in result["suggestion"]

    async def test_simulate_opted_out(self, tools, umbraco_project, monkeypatch):
        monkeypatch.setenv("DISABLE_LLM", "true")
        model = FakeLanguageModel()

        with patch(MODEL_FROM_CONTEXT, return_value=model):
            result = json.loads(await tools["simulate_package_impact"](str(umbraco_project), ["Umbraco.Forms"]))

        assert result["category"] == "config"
        assert model.prompts == []

    async def test_integration_hints(self, tools, nuget, umbraco_project):
        result = json.loads(
            await tools["get_code_integration_hints"](str(umbraco_project), ["Our.Umbraco.Seo", "Umbraco.Forms"])
        )

        assert result["count"] == 2
        seo, forms = result["hints"]
        assert seo["integration_points"][0] == "Content rendering controllers for dynamic meta tags"
        assert forms["implementation_steps"][0] == "Create surface controller inheriting from SurfaceController"
        assert forms["code_locations"] == {"SurfaceControllers": ["Controllers/ContactSurfaceController.cs"]}
        assert forms["quick_start"] == {
            "primary_integration_point": "Surface controllers for form processing",
            "key_files": ["Controllers/ContactSurfaceController.cs"],
            "estimated_effort": "Low",
        }
        assert forms["confidence"] == "High"
        assert result["project_structure"]["source_files"] == 2
        assert nuget.calls == []

    async def test_integration_hints_need_package_ids(self, tools, umbraco_project):
        result = json.loads(await tools["get_code_integration_hints"](str(umbraco_project), " , "))
        assert result["category"] == "validation"
        assert "package_ids" in result["error"]

    async def test_deep_project_analysis(self, tools, umbraco_project):
        result = json.loads(await tools["perform_deep_project_analysis"](str(umbraco_project)))

        assert result["project_overview"]["umbraco_version"] == "13"
        assert result["architectural_assessment"]["style"] == "controller-centric"
        assert result["performance_profile"]["async_methods"] == 1
        assert result["recommended_next_steps"] == ["Move business logic out of controllers into services"]

    async def test_deep_project_analysis_missing_project(self, tools, tmp_path):
        result = json.loads(await tools["perform_deep_project_analysis"](str(tmp_path / "missing")))
        assert "does not exist" in result["error"]
        assert result["tool"] == "perform_deep_project_analysis"


class TestCommon:
    @pytest.mark.parametrize(("value", "expected"), [(None, 20), ("abc", 20), (0, 1), (7, 7), (1000, 100)])
    def test_normalize_limit(self, value, expected):
        assert InputNormalizer.normalize_limit(value) == expected

    def test_normalize_choice(self):
        assert InputNormalizer.normalize_choice(" Simple ", ("detailed", "simple"), "detailed") == "simple"
        assert InputNormalizer.normalize_choice("weird", ("detailed", "simple"), "detailed") == "detailed"

    def test_error_from_exception(self):
        result = json.loads(ResponseFormatter.error(RuntimeError("boom"), suggestion="retry"))
        assert result == {"error": "boom", "category": "internal", "suggestion": "retry"}

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("Umbraco.Forms, umbraco.forms ,Our.Umbraco.Meta", ["Umbraco.Forms", "Our.Umbraco.Meta"]),
            (["SeoToolkit", " ", "SeoToolkit"], ["SeoToolkit"]),
        ],
    )
    def test_normalize_package_ids(self, value, expected):
        assert InputNormalizer.normalize_package_ids(value) == expected

    @pytest.mark.parametrize("value", [None, "", " , ", []])
    def test_normalize_package_ids_empty(self, value):
        with pytest.raises(InvalidParameterError, match="package_ids"):
            InputNormalizer.normalize_package_ids(value)
