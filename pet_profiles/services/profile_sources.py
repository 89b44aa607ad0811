"""
Page sources for profile collection.

A page source hands the collector one page of raw customer nodes at a
time. Two strategies reach the same data:

- ``SegmentMemberSource`` pages the members of a customer segment
  (looked up by name, or given by ID). Email and timestamps are not
  available on segment members.
- ``CustomerQuerySource`` pages every customer of the shop with the
  profile metafields aliased onto each node.

``build_page_source`` picks one from configuration. Sources are cheap and
meant to be built fresh for every collection run.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

from pet_profiles.config.settings import CollectionConfig, PROFILE_SOURCES
from pet_profiles.services.shopify_graphql import ShopifyGraphQLClient
from pet_profiles.utils.logger import get_logger

logger = get_logger(__name__)


class SegmentNotFoundError(Exception):
    """The configured customer segment does not exist in the shop."""

    def __init__(self, segment_name: str):
        self.segment_name = segment_name
        super().__init__(f"{segment_name} segment not found")


@dataclass
class ProfilePage:
    entries: List[Dict[str, Any]] = field(default_factory=list)
    has_next_page: bool = False
    end_cursor: Optional[str] = None


class ProfilePageSource(Protocol):
    async def fetch_page(self, size: int, cursor: Optional[str]) -> ProfilePage:
        ...


def _page_from_connection(connection: Dict[str, Any]) -> ProfilePage:
    page_info = connection.get("pageInfo") or {}
    entries = [
        edge["node"]
        for edge in connection.get("edges") or []
        if edge and edge.get("node")
    ]
    return ProfilePage(
        entries=entries,
        has_next_page=bool(page_info.get("hasNextPage", False)),
        end_cursor=page_info.get("endCursor"),
    )


class SegmentMemberSource:
    """Pages ``customerSegmentMembers`` of one segment."""

    def __init__(
        self,
        client: ShopifyGraphQLClient,
        segment_name: str,
        segment_id: Optional[str] = None,
    ):
        self.client = client
        self.segment_name = segment_name
        self.segment_id = segment_id or None

    async def _resolve_segment_id(self) -> str:
        if self.segment_id is None:
            segment = await self.client.find_segment(self.segment_name)
            if segment is None:
                raise SegmentNotFoundError(self.segment_name)
            self.segment_id = segment["id"]
        return self.segment_id

    async def fetch_page(self, size: int, cursor: Optional[str]) -> ProfilePage:
        segment_id = await self._resolve_segment_id()
        connection = await self.client.fetch_segment_members(segment_id, size, cursor)
        return _page_from_connection(connection)


class CustomerQuerySource:
    """Pages the shop's ``customers`` connection."""

    def __init__(self, client: ShopifyGraphQLClient):
        self.client = client

    async def fetch_page(self, size: int, cursor: Optional[str]) -> ProfilePage:
        connection = await self.client.fetch_customers(size, cursor)
        return _page_from_connection(connection)


def build_page_source(
    client: ShopifyGraphQLClient, config: CollectionConfig
) -> ProfilePageSource:
    """Build the page source selected by ``PROFILE_SOURCE``."""
    source = config.source
    if source not in PROFILE_SOURCES:
        logger.warning("Unknown profile source, using segment", source=source)
        source = "segment"

    if source == "customers":
        return CustomerQuerySource(client)
    return SegmentMemberSource(client, config.segment_name, config.segment_id)
