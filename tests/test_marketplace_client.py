"""Tests for MarketplaceClient using an in-process httpx transport."""

from __future__ import annotations

import httpx

from package_suggest.domain.entities import SourceKind
from package_suggest.infrastructure.sources import MarketplaceClient
from package_suggest.infrastructure.sources.marketplace import MARKETPLACE_FIELDS

ITEMS = {
    "items": [
        {
            "id": "Umbraco.Community.Contentment",
            "name": "Contentment",
            "description": "Property editors",
            "packageType": "Package",
            "downloads": 250000,
            "tags": ["property editors"],
            "compatibility": ["10", "13"],
            "version": "5.0.0",
            "packageUrl": "https://marketplace.umbraco.com/package/contentment",
        },
        {"id": "Starter.Kit", "packageType": "Template", "downloads": None},
        "not an object",
    ]
}


def _recording_client(seen: list, body=ITEMS) -> MarketplaceClient:
    def handler(request):
        seen.append(request)
        return httpx.Response(200, json=body)

    return MarketplaceClient(transport=httpx.MockTransport(handler))


class TestMarketplaceClient:
    async def test_search(self):
        seen = []
        async with _recording_client(seen) as client:
            records = await client.search("forms", limit=20)

        request = seen[0]
        assert request.url.path == "/api/v1.0/packages"
        assert request.url.params["search"] == "forms"
        assert request.url.params["pageSize"] == "20"
        assert request.url.params["fields"] == MARKETPLACE_FIELDS

        assert [r.id for r in records] == ["Umbraco.Community.Contentment", "Starter.Kit"]
        contentment, kit = records
        assert contentment.source_kind is SourceKind.MARKETPLACE
        assert contentment.display_name == "Contentment"
        assert contentment.compatibility_tags == ("10", "13")
        assert contentment.downloads == 250_000
        assert contentment.package_type == "Package"
        assert kit.display_name == "Starter.Kit"
        assert kit.downloads == 0

    async def test_list_packages(self):
        seen = []
        async with _recording_client(seen) as client:
            await client.list_packages(package_type="Integration", page_size=10, page_number=2)

        params = seen[0].url.params
        assert params["orderBy"] == "MostDownloads"
        assert params["packageType"] == "Integration"
        assert params["pageSize"] == "10"
        assert params["pageNumber"] == "2"

    async def test_list_packages_without_type(self):
        seen = []
        async with _recording_client(seen) as client:
            await client.list_packages()
        assert "packageType" not in seen[0].url.params

    async def test_templates(self):
        seen = []
        async with _recording_client(seen) as client:
            await client.get_templates(page_size=5)
        assert seen[0].url.params["packageType"] == "Template"
        assert seen[0].url.params["pageSize"] == "5"

    async def test_non_object_body(self):
        async with _recording_client([], body=[1, 2, 3]) as client:
            assert await client.search("x") == []

    async def test_server_error(self):
        client = MarketplaceClient(transport=httpx.MockTransport(lambda request: httpx.Response(502)))
        async with client:
            assert await client.search("x") == []
