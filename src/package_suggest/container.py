"""
Application DI Container (dependency-injector).

Owns the long-lived services: both registry clients and the project
analyzer. Recommendation engines are built per request because the
language model depends on the calling MCP client.

Usage::

    from package_suggest.container import ApplicationContainer

    container = ApplicationContainer()
    container.config.from_dict({"http_timeout": 15.0, "llm_timeout": 60.0})

    engine = container.recommendation_engine(language_model=None)

    # In tests, override any provider:
    container.nuget_client.override(providers.Object(fake_nuget))
"""

from __future__ import annotations

import logging

from dependency_injector import containers, providers

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = {
    "http_timeout": 15.0,
    "llm_timeout": 60.0,
    "nuget_search_url": "https://azuresearch-usnc.nuget.org/query",
    "marketplace_url": "https://api.marketplace.umbraco.com/api/v1.0",
}


def _create_nuget_client(search_url: str | None, timeout: float | None) -> object:
    """Lazy factory for NuGetClient (avoids top-level httpx import)."""
    from package_suggest.infrastructure.sources import NuGetClient

    return NuGetClient(
        search_url=search_url or DEFAULT_CONFIG["nuget_search_url"],
        timeout=timeout or DEFAULT_CONFIG["http_timeout"],
    )


def _create_marketplace_client(base_url: str | None, timeout: float | None) -> object:
    """Lazy factory for MarketplaceClient."""
    from package_suggest.infrastructure.sources import MarketplaceClient

    return MarketplaceClient(
        base_url=base_url or DEFAULT_CONFIG["marketplace_url"],
        timeout=timeout or DEFAULT_CONFIG["http_timeout"],
    )


def _create_project_analyzer() -> object:
    from package_suggest.application.analysis import ProjectAnalyzer

    return ProjectAnalyzer()


def _create_recommendation_engine(sources: list, llm_timeout: float | None, language_model: object = None) -> object:
    from package_suggest.application.recommendation import RecommendationEngine

    return RecommendationEngine(
        sources,
        language_model=language_model,
        llm_timeout=llm_timeout or DEFAULT_CONFIG["llm_timeout"],
    )


def _create_impact_simulator(language_model: object, llm_timeout: float | None) -> object:
    from package_suggest.application.recommendation import ImpactSimulator

    return ImpactSimulator(language_model, timeout=llm_timeout or DEFAULT_CONFIG["llm_timeout"])


class ApplicationContainer(containers.DeclarativeContainer):
    """Central DI container for Umbraco Package Suggest.

    - ``nuget_client``: NuGet gallery client (singleton)
    - ``marketplace_client``: Umbraco Marketplace client (singleton)
    - ``project_analyzer``: heuristic project analyzer (singleton)
    - ``recommendation_engine``: per-request pipeline (factory)
    - ``impact_simulator``: per-request language-model simulation (factory)
    """

    config = providers.Configuration()

    nuget_client = providers.Singleton(
        _create_nuget_client,
        search_url=config.nuget_search_url,
        timeout=config.http_timeout,
    )

    marketplace_client = providers.Singleton(
        _create_marketplace_client,
        base_url=config.marketplace_url,
        timeout=config.http_timeout,
    )

    project_analyzer = providers.Singleton(_create_project_analyzer)

    recommendation_engine = providers.Factory(
        _create_recommendation_engine,
        sources=providers.List(nuget_client, marketplace_client),
        llm_timeout=config.llm_timeout,
    )

    impact_simulator = providers.Factory(
        _create_impact_simulator,
        llm_timeout=config.llm_timeout,
    )


__all__ = ["DEFAULT_CONFIG", "ApplicationContainer"]
