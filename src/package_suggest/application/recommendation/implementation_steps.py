"""Rule-based integration guidance attached to each recommendation."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from package_suggest.domain.entities import ProjectSignals

INSTALL_STEP = "Install package via NuGet Package Manager or the dotnet CLI"

# (id fragments, documentation steps); first match wins
KNOWN_PACKAGE_DOCS: tuple[tuple[tuple[str, ...], tuple[str, ...]], ...] = (
    (
        ("umbraco.forms",),
        (
            "Official Umbraco Forms documentation: https://docs.umbraco.com/umbraco-forms/",
            "Quick setup: install the package, configure form types, add forms to content",
        ),
    ),
    (
        ("seo",),
        (
            "SEO Toolkit on GitHub: https://github.com/patrickdemooij9/SeoToolkit.Umbraco",
            "Setup: install, configure SEO settings, add SEO properties to document types",
        ),
    ),
    (
        ("deploy",),
        (
            "Umbraco Deploy documentation: https://docs.umbraco.com/umbraco-deploy/",
            "Setup: configure connection strings, set up environments, deploy",
        ),
    ),
    (
        ("contentment",),
        (
            "Contentment on GitHub: https://github.com/leekelleher/umbraco-contentment",
            "Setup: install, add data sources, configure property editors",
        ),
    ),
    (
        ("heartcore",),
        (
            "Umbraco Heartcore documentation: https://docs.umbraco.com/umbraco-heartcore/",
            "Setup: create a Heartcore project, configure API keys, implement the client",
        ),
    ),
)

GENERIC_DOC_STEPS: tuple[str, ...] = (
    "Search for the package documentation on NuGet.org or GitHub",
    "Look for a README or docs folder in the package repository",
    "Check the package issues and discussions for setup help",
)

UMBRACO_STEPS: tuple[str, ...] = (
    "Umbraco packages typically require composer registration",
    "Configure settings in the Umbraco backoffice after installation",
)


def implementation_steps(package_id: str, signals: ProjectSignals) -> list[str]:
    """Installation, documentation and compatibility steps for one package."""
    name = package_id.lower()
    steps = [INSTALL_STEP]

    for fragments, docs in KNOWN_PACKAGE_DOCS:
        if any(fragment in name for fragment in fragments):
            steps.extend(docs)
            break
    else:
        steps.extend(GENERIC_DOC_STEPS)

    if "umbraco" in name or "cms" in name:
        steps.extend(UMBRACO_STEPS)

    if signals.framework_id and "net" in signals.framework_id:
        steps.append(f"Ensure compatibility with your .NET {signals.framework_id} project")
    if signals.platform_version:
        steps.append(f"Verify compatibility with Umbraco {signals.platform_version}")
    return steps
