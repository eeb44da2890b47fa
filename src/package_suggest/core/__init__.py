"""
Core module for Umbraco Package Suggest.

Provides:
- Unified exception hierarchy
- Async utilities for registry and language-model calls
"""

from .async_utils import CircuitBreaker, gather_with_errors, timeout_with_fallback
from .exceptions import (
    # Base
    PackageSuggestError,
    ErrorContext,
    ErrorSeverity,
    ErrorCategory,
    # API errors
    APIError,
    RateLimitError,
    ServiceUnavailableError,
    # Validation errors
    ValidationError,
    ProjectNotFoundError,
    InvalidParameterError,
    # Data errors
    DataError,
    ParseError,
    # Config errors
    ConfigurationError,
)

__all__ = [
    "PackageSuggestError",
    "ErrorContext",
    "ErrorSeverity",
    "ErrorCategory",
    "APIError",
    "RateLimitError",
    "ServiceUnavailableError",
    "ValidationError",
    "ProjectNotFoundError",
    "InvalidParameterError",
    "DataError",
    "ParseError",
    "ConfigurationError",
    "CircuitBreaker",
    "gather_with_errors",
    "timeout_with_fallback",
]
