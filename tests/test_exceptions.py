"""Tests for the exception hierarchy and structured error payloads."""

from __future__ import annotations

import pytest

from package_suggest.core.exceptions import (
    APIError,
    ConfigurationError,
    DataError,
    ErrorContext,
    InvalidParameterError,
    PackageSuggestError,
    ParseError,
    ProjectNotFoundError,
    RateLimitError,
    ServiceUnavailableError,
    ValidationError,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        ("error", "parent"),
        [
            (RateLimitError(), APIError),
            (ServiceUnavailableError(), APIError),
            (ProjectNotFoundError("/x"), ValidationError),
            (InvalidParameterError("depth", "deep", "detailed or simple"), ValidationError),
            (ParseError("bad"), DataError),
            (ConfigurationError("bad"), PackageSuggestError),
        ],
    )
    def test_parents(self, error, parent):
        assert isinstance(error, parent)
        assert isinstance(error, PackageSuggestError)

    def test_retryable_flags(self):
        assert RateLimitError().retryable
        assert ServiceUnavailableError().retryable
        assert not InvalidParameterError("depth", "deep", "detailed or simple").retryable
        assert not ProjectNotFoundError("/x").retryable
        assert not ParseError("bad").retryable


class TestFormatting:
    def test_project_not_found(self):
        error = ProjectNotFoundError("/src/site")
        data = error.to_dict()
        assert data["error"] == "Project directory does not exist: /src/site"
        assert data["category"] == "validation"
        assert data["severity"] == "warning"
        assert "csproj" in data["suggestion"]
        assert error.context.input_value == "/src/site"

    def test_parse_error_source(self):
        assert str(ParseError("no array", source="llm")) == "Parse error (llm): no array"
        assert str(ParseError("no array")) == "Parse error: no array"

    def test_service_unavailable_prefix(self):
        assert str(ServiceUnavailableError(service="UmbracoMarketplace")).startswith("UmbracoMarketplace:")
        assert str(ServiceUnavailableError("no reply")) == "Language model: no reply"

    def test_invalid_parameter(self):
        data = InvalidParameterError("package_ids", "", "one or more package ids").to_dict()
        assert data["error"] == "Invalid parameter 'package_ids': '' (expected one or more package ids)"
        assert data["category"] == "validation"
        assert data["suggestion"] == "Expected one or more package ids"

    def test_rate_limit_payload(self):
        error = RateLimitError(retry_after=5.0, context=ErrorContext(tool_name="search_nuget_packages"))
        assert error.to_dict()["suggestion"] == "Wait and retry the request"
        assert error.to_dict()["tool"] == "search_nuget_packages"
        assert error.to_dict()["retry_after_seconds"] == 5.0

