"""
Umbraco Marketplace Client

Searches and lists packages on https://marketplace.umbraco.com through its
public JSON API (https://api.marketplace.umbraco.com/api/v1.0).

Marketplace entries carry Umbraco-specific metadata NuGet lacks, such as the
package type (Package, Template, Integration) and explicit version
compatibility tags.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from package_suggest.domain.entities import RawPackageRecord, SourceKind
from package_suggest.infrastructure.sources.base_client import DEFAULT_HTTP_TIMEOUT, BaseRegistryClient

if TYPE_CHECKING:
    import httpx

logger = logging.getLogger(__name__)

UMBRACO_MARKETPLACE_URL = "https://api.marketplace.umbraco.com/api/v1.0"
MARKETPLACE_FIELDS = "id,name,description,packageType,downloads,tags,compatibility,version,packageUrl"


class MarketplaceClient(BaseRegistryClient):
    """Umbraco Marketplace client."""

    _service_name = "UmbracoMarketplace"
    source_kind = SourceKind.MARKETPLACE

    def __init__(
        self,
        base_url: str = UMBRACO_MARKETPLACE_URL,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(base_url=base_url, timeout=timeout, transport=transport)

    async def search(self, query: str, limit: int = 50) -> list[RawPackageRecord]:
        """Free-text search; empty on any failure."""
        params = {"search": query, "pageSize": str(limit), "fields": MARKETPLACE_FIELDS}
        return await self._fetch_items(params, label=f"search '{query}'")

    async def list_packages(
        self,
        package_type: str | None = None,
        order_by: str = "MostDownloads",
        page_size: int = 50,
        page_number: int = 1,
    ) -> list[RawPackageRecord]:
        """
        Browse the catalogue.

        Args:
            package_type: Optional filter such as "Package" or "Template"
            order_by: Marketplace ordering, e.g. "MostDownloads"
            page_size: Items per page
            page_number: 1-based page index
        """
        params = {
            "orderBy": order_by,
            "pageSize": str(page_size),
            "pageNumber": str(page_number),
            "fields": MARKETPLACE_FIELDS,
        }
        if package_type:
            params["packageType"] = package_type
        return await self._fetch_items(params, label=f"list {package_type or 'all'}")

    async def get_templates(self, page_size: int = 50) -> list[RawPackageRecord]:
        """Starter-kit and site templates, most downloaded first."""
        return await self.list_packages(package_type="Template", page_size=page_size)

    async def _fetch_items(self, params: dict[str, str], label: str) -> list[RawPackageRecord]:
        data = await self._make_request("/packages", params=params)
        if data is None:
            return []
        records = [r for r in (self._parse_package(item) for item in data.get("items") or []) if r is not None]
        logger.debug(f"Marketplace {label} returned {len(records)} packages")
        return records

    @staticmethod
    def _parse_package(item: Any) -> RawPackageRecord | None:
        if not isinstance(item, dict) or not item.get("id"):
            return None
        try:
            downloads = int(item.get("downloads") or 0)
        except (TypeError, ValueError):
            downloads = 0
        return RawPackageRecord(
            id=str(item["id"]),
            display_name=str(item.get("name") or item["id"]),
            source_kind=SourceKind.MARKETPLACE,
            description=item.get("description"),
            tags=tuple(str(t) for t in item.get("tags") or []),
            downloads=downloads,
            version=item.get("version"),
            compatibility_tags=tuple(str(c) for c in item.get("compatibility") or []),
            project_url=item.get("packageUrl"),
            package_type=item.get("packageType"),
        )
