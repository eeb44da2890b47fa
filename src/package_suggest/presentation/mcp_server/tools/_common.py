"""
Shared helpers for MCP tools: input normalisation and JSON responses.

Every tool returns JSON text. Failures are reported as a JSON object with
an ``error`` key instead of raising, so the agent can read and act on them.
"""

from __future__ import annotations

import json
from typing import Any

from package_suggest.core.exceptions import InvalidParameterError, PackageSuggestError


class InputNormalizer:
    """Lenient coercion of agent-supplied arguments."""

    @staticmethod
    def normalize_limit(value: Any, default: int = 20, min_val: int = 1, max_val: int = 100) -> int:
        try:
            limit = int(value)
        except (TypeError, ValueError):
            return default
        return max(min_val, min(limit, max_val))

    @staticmethod
    def normalize_query(value: Any) -> str:
        if value is None:
            return ""
        return " ".join(str(value).split())

    @staticmethod
    def normalize_choice(value: Any, choices: tuple[str, ...], default: str) -> str:
        text = str(value or "").strip().lower()
        return text if text in choices else default

    @staticmethod
    def normalize_package_ids(value: Any) -> list[str]:
        """
        Package ids from a list or a comma-separated string, de-duplicated
        case-insensitively in order.

        Raises:
            InvalidParameterError: No package id remains
        """
        items = value.split(",") if isinstance(value, str) else list(value or [])
        ids: list[str] = []
        seen: set[str] = set()
        for item in items:
            package_id = str(item).strip()
            if package_id and package_id.lower() not in seen:
                seen.add(package_id.lower())
                ids.append(package_id)
        if not ids:
            raise InvalidParameterError("package_ids", value, "one or more package ids")
        return ids


class ResponseFormatter:
    """JSON response builders."""

    @staticmethod
    def success(data: dict[str, Any]) -> str:
        return json.dumps(data, indent=2, ensure_ascii=False)

    @staticmethod
    def error(
        error: Exception | str,
        *,
        suggestion: str | None = None,
        example: str | None = None,
        tool_name: str | None = None,
    ) -> str:
        """
        Structured error object.

        Package Suggest errors contribute their own category, retry and
        suggestion fields; explicit keyword arguments take precedence.
        """
        if isinstance(error, PackageSuggestError):
            payload = error.to_dict()
        else:
            payload = {"error": str(error), "category": "internal" if isinstance(error, Exception) else "input"}
        if suggestion:
            payload["suggestion"] = suggestion
        if example:
            payload["example"] = example
        if tool_name:
            payload["tool"] = tool_name
        return json.dumps(payload, indent=2, ensure_ascii=False)

    @staticmethod
    def no_results(query: str | None = None, suggestion: str | None = None) -> str:
        payload: dict[str, Any] = {"results": [], "count": 0, "message": "No packages found"}
        if query:
            payload["query"] = query
        payload["suggestion"] = suggestion or "Try a broader or different query"
        return json.dumps(payload, indent=2, ensure_ascii=False)
