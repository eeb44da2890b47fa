"""
Umbraco Package Suggest MCP Server

Architecture:
- instructions.py: SERVER_INSTRUCTIONS for AI agents
- tool_registry.py: centralized tool registration
- tools/: tool implementations by category
- container: DI container (dependency-injector) for service lifecycle

Configuration (environment):
- DISABLE_LLM: "true" keeps project data away from the language model
- PACKAGE_SUGGEST_HTTP_TIMEOUT: registry timeout in seconds (default 15)
- PACKAGE_SUGGEST_LLM_TIMEOUT: language-model timeout in seconds (default 60)
- NUGET_SEARCH_URL / UMBRACO_MARKETPLACE_URL: registry endpoints
- MCP_TRANSPORT: "stdio" (default), "sse" or "streamable-http"
"""

from __future__ import annotations

import logging
import os
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import TYPE_CHECKING, Any

from mcp.server.fastmcp import FastMCP

from package_suggest.container import DEFAULT_CONFIG, ApplicationContainer
from package_suggest.core.exceptions import ConfigurationError

from .instructions import SERVER_INSTRUCTIONS
from .tool_registry import register_all_mcp_tools

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

logger = logging.getLogger(__name__)

TRANSPORTS = ("stdio", "sse", "streamable-http")

# ── Module-level DI container ──────────────────────────────────────────────
_container: ApplicationContainer | None = None


def get_container() -> ApplicationContainer:
    """Get the application DI container.

    Raises:
        RuntimeError: If ``create_server()`` has not been called yet.
    """
    if _container is None:
        msg = "Container not initialized. Call create_server() first."
        raise RuntimeError(msg)
    return _container


def _make_lifespan(
    container: ApplicationContainer,
) -> Callable[[FastMCP[Any]], AbstractAsyncContextManager[ApplicationContainer]]:
    """Create a FastMCP lifespan handler bound to *container*."""

    @asynccontextmanager
    async def _lifespan(server: FastMCP[Any]) -> AsyncIterator[ApplicationContainer]:
        logger.info("Lifecycle: startup")
        try:
            yield container
        finally:
            await container.nuget_client().close()
            await container.marketplace_client().close()
            logger.info("Lifecycle: shutdown, registry clients closed")

    return _lifespan


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number of seconds, got {raw!r}") from e
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {raw!r}")
    return value


def load_config_from_env() -> dict[str, Any]:
    """Container configuration from environment variables."""
    return {
        "http_timeout": _env_float("PACKAGE_SUGGEST_HTTP_TIMEOUT", DEFAULT_CONFIG["http_timeout"]),
        "llm_timeout": _env_float("PACKAGE_SUGGEST_LLM_TIMEOUT", DEFAULT_CONFIG["llm_timeout"]),
        "nuget_search_url": os.environ.get("NUGET_SEARCH_URL", "").strip() or DEFAULT_CONFIG["nuget_search_url"],
        "marketplace_url": os.environ.get("UMBRACO_MARKETPLACE_URL", "").strip() or DEFAULT_CONFIG["marketplace_url"],
    }


def create_server(config: dict[str, Any] | None = None, name: str = "umbraco-package-suggest") -> FastMCP:
    """
    Create and configure the MCP server.

    Args:
        config: Container configuration; defaults to ``DEFAULT_CONFIG``
        name: Server name

    Returns:
        Configured FastMCP server instance.
    """
    global _container
    logger.info("Initializing Umbraco Package Suggest MCP Server...")

    _container = ApplicationContainer()
    _container.config.from_dict({**DEFAULT_CONFIG, **(config or {})})

    mcp = FastMCP(
        name,
        instructions=SERVER_INSTRUCTIONS,
        lifespan=_make_lifespan(_container),
    )

    stats = register_all_mcp_tools(mcp, _container)
    logger.info("Tool registration complete: %s", stats)

    if os.environ.get("DISABLE_LLM", "").strip().lower() == "true":
        logger.info("DISABLE_LLM=true: language-model rescoring disabled")

    return mcp


def main() -> None:
    """Run the MCP server."""
    # stdout carries the protocol; basicConfig logs to stderr
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    transport = os.environ.get("MCP_TRANSPORT", "stdio").strip().lower() or "stdio"
    if transport not in TRANSPORTS:
        raise ConfigurationError(f"MCP_TRANSPORT must be one of {', '.join(TRANSPORTS)}, got {transport!r}")

    server = create_server(config=load_config_from_env())
    server.run(transport=transport)


if __name__ == "__main__":
    main()
