"""
Language model access through MCP sampling.

The server has no model of its own: it asks the connected MCP client to run
a completion (``sampling/createMessage``). Clients that do not advertise the
sampling capability get no adapter, and rescoring is skipped.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from mcp.types import ClientCapabilities, SamplingCapability, SamplingMessage, TextContent

if TYPE_CHECKING:
    from mcp.server.fastmcp import Context
    from mcp.server.session import ServerSession

logger = logging.getLogger(__name__)


class LanguageModel(Protocol):
    """Minimal completion interface used by the rescoring stage."""

    async def complete(self, prompt: str, max_tokens: int, temperature: float) -> str: ...


class SamplingLanguageModel:
    """LanguageModel backed by the MCP client's sampling capability."""

    def __init__(self, session: ServerSession) -> None:
        self._session = session

    async def complete(self, prompt: str, max_tokens: int, temperature: float) -> str:
        result = await self._session.create_message(
            messages=[SamplingMessage(role="user", content=TextContent(type="text", text=prompt))],
            max_tokens=max_tokens,
            temperature=temperature,
        )
        content = result.content
        if isinstance(content, TextContent):
            return content.text
        return ""


def language_model_from_context(ctx: Context | None) -> LanguageModel | None:
    """
    Build a sampling adapter for the calling client, if it supports sampling.

    Returns None outside a request or when the client lacks the capability.
    """
    if ctx is None:
        return None
    try:
        session = ctx.session
    except ValueError:
        # Context used outside of a request
        return None

    if not session.check_client_capability(ClientCapabilities(sampling=SamplingCapability())):
        logger.info("Client does not support sampling; using rule-based scores only")
        return None
    return SamplingLanguageModel(session)
