"""
Pytest configuration and shared fixtures.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from package_suggest.domain.entities import Candidate, ProjectSignals, RawPackageRecord, SourceKind

# ============================================================
# Builders
# ============================================================


def make_record(
    package_id: str = "Foo.Bar",
    source: SourceKind = SourceKind.REGISTRY,
    downloads: int = 0,
    description: str | None = None,
    tags: tuple[str, ...] = (),
    compatibility: tuple[str, ...] = (),
    **kwargs,
) -> RawPackageRecord:
    return RawPackageRecord(
        id=package_id,
        display_name=kwargs.pop("display_name", package_id),
        source_kind=source,
        description=description,
        tags=tags,
        downloads=downloads,
        compatibility_tags=compatibility,
        **kwargs,
    )


def make_candidate(
    package_id: str = "Foo.Bar",
    relevance: float = 0.5,
    downloads: int = 0,
    community: float = 0.0,
    **kwargs,
) -> Candidate:
    return Candidate(
        record=make_record(package_id, downloads=downloads, **kwargs),
        relevance_score=relevance,
        community_score=community,
    )


class FakeSource:
    """In-memory registry: query text -> records, with a call log."""

    def __init__(self, kind: SourceKind, responses: dict[str, list[RawPackageRecord]] | None = None):
        self.source_kind = kind
        self.responses = responses or {}
        self.calls: list[tuple[str, int]] = []
        self.fail_on: set[str] = set()

    async def search(self, query: str, limit: int) -> list[RawPackageRecord]:
        self.calls.append((query, limit))
        if query in self.fail_on:
            raise RuntimeError(f"boom: {query}")
        return list(self.responses.get(query, []))


class FakeLanguageModel:
    """Returns queued replies (or raises queued exceptions) in order."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.prompts: list[str] = []
        self.settings: list[tuple[int, float]] = []

    async def complete(self, prompt: str, max_tokens: int, temperature: float) -> str:
        self.prompts.append(prompt)
        self.settings.append((max_tokens, temperature))
        reply = self.replies.pop(0) if self.replies else "[]"
        if isinstance(reply, BaseException):
            raise reply
        return reply


# ============================================================
# Fixtures
# ============================================================


@pytest.fixture
def signals():
    """Umbraco 13 project using forms and seo."""
    return ProjectSignals(
        framework_id="net8.0",
        platform_version="13",
        installed_package_ids=frozenset({"Umbraco.Cms", "Umbraco.Forms"}),
        detected_features=("forms", "seo"),
    )


@pytest.fixture
def empty_signals():
    return ProjectSignals()


@pytest.fixture(autouse=True)
def _llm_enabled(monkeypatch):
    """Tests decide about the language model explicitly."""
    monkeypatch.delenv("DISABLE_LLM", raising=False)


@pytest.fixture
def umbraco_project(tmp_path: Path) -> Path:
    """A minimal Umbraco 13 web project on disk."""
    web = tmp_path / "MySite.Web"
    web.mkdir()
    (web / "MySite.Web.csproj").write_text(
        """<Project Sdk="Microsoft.NET.Sdk.Web">
  <PropertyGroup>
    <TargetFramework>net8.0</TargetFramework>
  </PropertyGroup>
  <ItemGroup>
    <PackageReference Include="Umbraco.Cms" Version="13.2.0" />
    <PackageReference Include="Umbraco.Forms" Version="13.1.1" />
    <PackageReference Include="Our.Umbraco.Community.Contentment" Version="5.0.0" />
  </ItemGroup>
</Project>
""",
        encoding="utf-8",
    )
    controllers = web / "Controllers"
    controllers.mkdir()
    (controllers / "ContactSurfaceController.cs").write_text(
        """using Microsoft.Extensions.Logging;
public class ContactSurfaceController : SurfaceController
{
    private readonly ILogger<ContactSurfaceController> _logger;
    public async Task<IActionResult> Submit(ContactForm model)
    {
        _logger.LogInformation("Submitting");
        await Task.CompletedTask;
        return RedirectToCurrentUmbracoPage();
    }
}
""",
        encoding="utf-8",
    )
    views = web / "Views"
    views.mkdir()
    (views / "Layout.cshtml").write_text(
        '<meta name="description" content="@Model.MetaDescription" />\n<link rel="canonical" />',
        encoding="utf-8",
    )
    # Build output must be ignored
    obj = web / "obj"
    obj.mkdir()
    (obj / "Stale.csproj").write_text("<Project><TargetFramework>net6.0</TargetFramework></Project>")
    (obj / "Generated.cs").write_text("class Checkout { }  // shoppingcart")
    return web
