"""
ProjectAnalyzer - heuristic signals from an Umbraco source tree.

Reads the first ``*.csproj`` for the target framework and package
references, then scans C# and Razor sources with keyword tables to detect
features, architecture patterns, business domain and code patterns.
`scan_structure()` classifies individual C# files into Umbraco building
blocks (controllers, composers, services, ...) for integration hints.

No C# parsing happens here: everything is regex or substring matching,
which is good enough to steer registry queries.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import TYPE_CHECKING

from package_suggest.core.exceptions import ProjectNotFoundError
from package_suggest.domain.entities import ProjectSignals, ProjectStructure

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)

EXCLUDED_DIRS = frozenset({"bin", "obj", ".git", ".vs", "node_modules"})
SOURCE_SUFFIXES = (".cs", ".cshtml")
MAX_SOURCE_FILES = 500
MAX_FILE_BYTES = 200_000

_TARGET_FRAMEWORK = re.compile(r"<TargetFrameworks?[^>]*>(.*?)</TargetFrameworks?>", re.IGNORECASE | re.DOTALL)
_PACKAGE_REFERENCE = re.compile(r"<PackageReference\s+([^>]*)>", re.IGNORECASE)
_ATTRIBUTE = re.compile(r'(\w+)\s*=\s*"([^"]*)"')
_MAJOR_VERSION = re.compile(r"\d+")

# feature -> keywords found in source text or referenced package ids
FEATURE_KEYWORDS: dict[str, tuple[str, ...]] = {
    "forms": ("umbraco.forms", "formsurfacecontroller", "<form", "contactform"),
    "seo": ("seo", "metadescription", "sitemap", "robots.txt", "canonical"),
    "search": ("examine", "isearcher", "searchcontroller", "lucene"),
    "commerce": ("ucommerce", "vendr", "umbraco.commerce", "checkout", "shoppingcart", "basket"),
    "caching": ("imemorycache", "idistributedcache", "appcaches", "outputcache"),
    "members": ("imemberservice", "membermanager", "memberlogin", "ipublishedmembercache"),
    "media": ("imediaservice", "imagecropper", "getcropurl", "mediapicker"),
    "multilingual": ("ilocalizationservice", "culture", "dictionaryvalue", "variationcontext"),
    "api": ("apicontroller", "umbracoapicontroller", "[httpget]", "[httppost]", "deliveryapi"),
    "blog": ("articulate", "blogpost", "blogpostpage"),
    "analytics": ("googleanalytics", "gtag(", "tagmanager", "matomo"),
    "email": ("iemailsender", "smtpclient", "mailkit", "sendgrid"),
}

ARCHITECTURE_KEYWORDS: dict[str, tuple[str, ...]] = {
    "repository": ("repository",),
    "dependency-injection": ("iservicecollection", "addscoped", "addsingleton", "addtransient"),
    "composer": ("icomposer", ": composer"),
    "notification-handlers": ("inotificationhandler", "inotificationasynchandler"),
    "surface-controllers": ("surfacecontroller",),
    "api-controllers": ("umbracoapicontroller", "controllerbase", "[apicontroller]"),
    "view-components": ("viewcomponent",),
}

BUSINESS_DOMAIN_KEYWORDS: dict[str, tuple[str, ...]] = {
    "ecommerce": ("product", "order", "checkout", "basket"),
    "publishing": ("article", "blogpost", "newsitem"),
    "events": ("event", "booking", "ticket"),
    "membership": ("member", "subscription"),
    "education": ("course", "lesson", "student"),
    "real-estate": ("property listing", "realestate"),
}

CODE_PATTERN_KEYWORDS: dict[str, tuple[str, ...]] = {
    "async-await": ("async task", "await "),
    "logging": ("ilogger", "_logger."),
    "custom-exceptions": (": exception",),
    "linq": ("using system.linq", ".where(", ".select("),
}


# Controller kinds are exclusive: the first matching kind wins
CONTROLLER_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("SurfaceControllers", re.compile(r":\s*surfacecontroller\b")),
    ("RenderControllers", re.compile(r":\s*rendercontroller\b")),
    ("ApiControllers", re.compile(r":\s*(umbracoapicontroller|controllerbase)\b|\[apicontroller\]")),
    ("Controllers", re.compile(r":\s*(umbraco)?controller\b")),
)

BUILDING_BLOCK_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("ContentModels", re.compile(r"publishedcontentmodel\b|:\s*ipublishedcontent\b")),
    ("Services", re.compile(r"\b(class|interface)\s+\w*service\b")),
    ("Repositories", re.compile(r"\bclass\s+\w*repository\b")),
    ("Composers", re.compile(r"\bicomposer\b|:\s*composer\b")),
    ("NotificationHandlers", re.compile(r"\binotification(async)?handler<")),
    ("PropertyEditors", re.compile(r"\[dataeditor\b|:\s*\w*(dataeditor|propertyeditor)\b")),
    ("ViewComponents", re.compile(r":\s*viewcomponent\b")),
    ("Middleware", re.compile(r":\s*imiddleware\b|\binvokeasync\s*\(\s*httpcontext\b")),
)

_ASYNC_METHOD = re.compile(r"\basync\s+(task|valuetask)\b")


def _match_keywords(table: dict[str, tuple[str, ...]], text: str) -> tuple[str, ...]:
    return tuple(name for name, keywords in table.items() if any(k in text for k in keywords))


def _walk_files(root: Path, suffixes: tuple[str, ...]) -> Iterator[Path]:
    """Matching files in a stable order; excluded directories are never entered."""
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in EXCLUDED_DIRS)
        for name in sorted(filenames):
            if name.lower().endswith(suffixes):
                yield Path(dirpath) / name


def classify_source(content: str) -> list[str]:
    """Building-block categories of one lower-cased C# file."""
    categories = []
    for category, pattern in CONTROLLER_PATTERNS:
        if pattern.search(content):
            categories.append(category)
            break
    categories.extend(category for category, pattern in BUILDING_BLOCK_PATTERNS if pattern.search(content))
    return categories


class ProjectAnalyzer:
    """
    Produces ProjectSignals for a project directory.

    Usage:
        analyzer = ProjectAnalyzer()
        signals = analyzer.analyze("/src/MySite.Web")
        structure = analyzer.scan_structure("/src/MySite.Web")
    """

    def analyze(self, project_path: str) -> ProjectSignals:
        """
        Analyze a project directory.

        Raises:
            ProjectNotFoundError: The path does not exist, is not a directory,
                or cannot be read
        """
        root = self._resolve(project_path)

        try:
            csproj = self._find_project_file(root)
            framework, packages = self._read_project_file(csproj) if csproj else (None, {})
            source_text = "\n".join(text for _, text in self._read_sources(root))
        except OSError as e:
            raise ProjectNotFoundError(project_path, f"Project could not be read ({e.strerror or e})") from e

        if csproj is None:
            logger.warning(f"No .csproj found under {root}")

        platform_version = self._platform_version(packages)
        package_text = " ".join(packages).lower()
        features = _match_keywords(FEATURE_KEYWORDS, f"{source_text}\n{package_text}")
        architecture = _match_keywords(ARCHITECTURE_KEYWORDS, source_text)
        domain = _match_keywords(BUSINESS_DOMAIN_KEYWORDS, source_text)
        code_patterns = _match_keywords(CODE_PATTERN_KEYWORDS, source_text)

        signals = ProjectSignals(
            framework_id=framework,
            platform_version=platform_version,
            installed_package_ids=frozenset(packages),
            detected_features=features,
            architecture_patterns=architecture,
            business_domain=domain,
            code_patterns=code_patterns,
            narrative=self._narrative(framework, platform_version, packages, features, architecture, domain),
            project_path=str(root),
        )
        logger.info(
            f"Analyzed {root}: framework={framework}, umbraco={platform_version}, "
            f"{len(packages)} packages, features={list(features)}"
        )
        return signals

    def scan_structure(self, project_path: str) -> ProjectStructure:
        """
        Locate Umbraco building blocks file by file.

        Razor views are listed under "Views"; C# files are classified with
        `classify_source()`.

        Raises:
            ProjectNotFoundError: Same conditions as `analyze()`
        """
        root = self._resolve(project_path)
        structure = ProjectStructure()
        try:
            sources = self._read_sources(root)
        except OSError as e:
            raise ProjectNotFoundError(project_path, f"Project could not be read ({e.strerror or e})") from e

        for relative_path, text in sources:
            structure.file_lines[relative_path] = text.count("\n") + 1
            if relative_path.lower().endswith(".cshtml"):
                categories = ["Views"]
            else:
                categories = classify_source(text)
                structure.async_methods += len(_ASYNC_METHOD.findall(text))
            for category in categories:
                structure.code_locations.setdefault(category, []).append(relative_path)

        counts = {category: len(paths) for category, paths in structure.code_locations.items()}
        logger.info(f"Scanned {structure.source_files} source files under {root}: {counts}")
        return structure

    @staticmethod
    def _resolve(project_path: str) -> Path:
        root = Path(project_path).expanduser()
        if not root.exists():
            raise ProjectNotFoundError(project_path)
        if not root.is_dir():
            raise ProjectNotFoundError(project_path, "Project path is not a directory")
        return root

    # -------------------------------------------------------------------------
    # Project file
    # -------------------------------------------------------------------------

    @staticmethod
    def _find_project_file(root: Path) -> Path | None:
        return next(_walk_files(root, (".csproj",)), None)

    @staticmethod
    def _read_project_file(csproj: Path) -> tuple[str | None, dict[str, str | None]]:
        """Target framework and ``{package id: version}`` from a project file."""
        content = csproj.read_text(encoding="utf-8", errors="replace")

        framework = None
        if match := _TARGET_FRAMEWORK.search(content):
            framework = match.group(1).split(";")[0].strip() or None

        packages: dict[str, str | None] = {}
        for ref in _PACKAGE_REFERENCE.finditer(content):
            attrs = {k.lower(): v for k, v in _ATTRIBUTE.findall(ref.group(1))}
            if package_id := attrs.get("include"):
                packages[package_id] = attrs.get("version")
        return framework, packages

    @staticmethod
    def _platform_version(packages: dict[str, str | None]) -> str | None:
        """Umbraco major version from the ``Umbraco.Cms*`` references."""
        for package_id, version in packages.items():
            if package_id.lower().startswith("umbraco.cms") and version:
                if match := _MAJOR_VERSION.search(version):
                    return match.group(0)
        return None

    # -------------------------------------------------------------------------
    # Sources
    # -------------------------------------------------------------------------

    @staticmethod
    def _read_sources(root: Path) -> list[tuple[str, str]]:
        """``(relative posix path, lower-cased text)`` for C# and Razor files (bounded)."""
        sources = []
        for path in _walk_files(root, SOURCE_SUFFIXES):
            if len(sources) >= MAX_SOURCE_FILES:
                break
            try:
                text = path.read_text(encoding="utf-8", errors="replace")[:MAX_FILE_BYTES].lower()
            except OSError as e:
                logger.debug(f"Skipping unreadable file {path}: {e}")
                continue
            sources.append((path.relative_to(root).as_posix(), text))
        return sources

    @staticmethod
    def _narrative(
        framework: str | None,
        platform_version: str | None,
        packages: dict[str, str | None],
        features: tuple[str, ...],
        architecture: tuple[str, ...],
        domain: tuple[str, ...],
    ) -> str:
        parts = [
            f"Umbraco {platform_version or '(version unknown)'} site on {framework or 'an unknown framework'}",
            f"with {len(packages)} package references",
        ]
        if features:
            parts.append(f"using {', '.join(features)}")
        if architecture:
            parts.append(f"structured around {', '.join(architecture)}")
        if domain:
            parts.append(f"in the {', '.join(domain)} domain")
        return " ".join(parts) + "."
