"""
Package registry clients.

- NuGetClient: nuget.org search and flat container
- MarketplaceClient: Umbraco Marketplace API
"""

from .base_client import BaseRegistryClient
from .marketplace import MarketplaceClient
from .nuget import NuGetClient

__all__ = [
    "BaseRegistryClient",
    "MarketplaceClient",
    "NuGetClient",
]
