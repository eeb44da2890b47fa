"""
NuGet Registry Client

Searches the public NuGet gallery and lists package versions.

API:
- Search: https://azuresearch-usnc.nuget.org/query
- Flat container (versions): https://api.nuget.org/v3-flatcontainer/{id}/index.json

Both endpoints are anonymous; no key is required.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any

from package_suggest.domain.entities import RawPackageRecord, SourceKind
from package_suggest.infrastructure.sources.base_client import _CONTINUE, DEFAULT_HTTP_TIMEOUT, BaseRegistryClient

if TYPE_CHECKING:
    import httpx

logger = logging.getLogger(__name__)

NUGET_SEARCH_URL = "https://azuresearch-usnc.nuget.org/query"
NUGET_FLAT_CONTAINER_URL = "https://api.nuget.org/v3-flatcontainer"

_VERSION_NUMBER = re.compile(r"\d+")


class NuGetClient(BaseRegistryClient):
    """
    NuGet gallery client.

    Usage:
        async with NuGetClient() as client:
            records = await client.search("umbraco forms", limit=10)
            versions = await client.get_versions("Umbraco.Forms")
    """

    _service_name = "NuGet"
    source_kind = SourceKind.REGISTRY

    def __init__(
        self,
        search_url: str = NUGET_SEARCH_URL,
        flat_container_url: str = NUGET_FLAT_CONTAINER_URL,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._search_url = search_url
        self._flat_container_url = flat_container_url.rstrip("/")
        super().__init__(timeout=timeout, transport=transport)

    def _handle_expected_status(self, response: httpx.Response, url: str) -> Any:
        """Unknown package ids return 404 from the flat container."""
        if response.status_code == 404:
            logger.debug(f"NuGet: not found - {url}")
            return None
        return _CONTINUE

    async def search(self, query: str, limit: int = 20, skip: int = 0) -> list[RawPackageRecord]:
        """
        Search the gallery.

        Args:
            query: Free-text query (supports NuGet syntax such as ``packageid:X``)
            limit: Maximum results (``take``)
            skip: Results offset

        Returns:
            Normalised records; empty on any failure
        """
        params = {"q": query, "take": str(limit), "skip": str(skip), "prerelease": "false"}
        data = await self._make_request(self._search_url, params=params)
        if data is None:
            return []

        records = []
        for item in data.get("data") or []:
            record = self._parse_package(item)
            if record is not None:
                records.append(record)
        logger.debug(f"NuGet search '{query}' returned {len(records)} packages")
        return records

    async def get_versions(self, package_id: str) -> list[str]:
        """
        List published versions, newest first.

        Returns:
            Version strings; empty when the package is unknown or the call fails
        """
        url = f"{self._flat_container_url}/{package_id.lower()}/index.json"
        data = await self._make_request(url)
        if data is None:
            return []
        versions = [v for v in data.get("versions") or [] if isinstance(v, str) and v]
        return sorted(versions, key=_version_sort_key, reverse=True)

    @staticmethod
    def _parse_package(item: Any) -> RawPackageRecord | None:
        if not isinstance(item, dict) or not item.get("id"):
            return None
        tags = item.get("tags") or []
        if isinstance(tags, str):
            tags = tags.split()
        return RawPackageRecord(
            id=str(item["id"]),
            display_name=str(item.get("title") or item["id"]),
            source_kind=SourceKind.REGISTRY,
            description=item.get("description"),
            tags=tuple(str(t) for t in tags),
            downloads=_as_int(item.get("totalDownloads")),
            version=item.get("version"),
            project_url=item.get("projectUrl"),
        )


def _as_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _version_sort_key(version: str) -> tuple[tuple[int, ...], bool]:
    """Numeric release prefix, with stable releases ahead of their pre-releases."""
    release, _, prerelease = version.partition("-")
    numbers = tuple(int(n) for n in _VERSION_NUMBER.findall(release))
    return numbers, not prerelease
