"""
Shopify GraphQL Admin API client for pet profile data.

Covers the handful of operations the service needs:
- Looking up a customer segment by name
- Cursor-paginating segment members or customers with their
  ``variables`` metafields
- Writing profile metafields back with ``metafieldsSet``
"""

from typing import Optional, Dict, Any, List

import httpx

from pet_profiles.config.settings import Settings
from pet_profiles.utils.logger import get_logger
from pet_profiles.utils.timezone import ISO_TIMESTAMP_RE, get_shop_timezone, to_shop_time

logger = get_logger(__name__)

METAFIELD_NAMESPACE = "variables"
METAFIELD_TYPE = "single_line_text_field"

# Shopify's per-request ceiling for connection page sizes
MAX_PAGE_SIZE = 250


class ShopifyAPIError(Exception):
    """Raised when the Admin API answers with a GraphQL ``errors`` payload."""

    def __init__(self, messages: List[str]):
        self.messages = messages
        super().__init__(f"GraphQL errors: {'; '.join(messages)}")


SEGMENTS_QUERY = """
query FindSegment($query: String!) {
    segments(first: 10, query: $query) {
        edges {
            node { id name query }
        }
    }
}
"""

SEGMENT_MEMBERS_QUERY = """
query GetSegmentMembers($segmentId: ID!, $first: Int!, $after: String) {
    customerSegmentMembers(segmentId: $segmentId, first: $first, after: $after) {
        pageInfo { hasNextPage endCursor }
        edges {
            node {
                id
                firstName
                lastName
                displayName
                numberOfOrders
                amountSpent { amount currencyCode }
                metafields(namespace: "variables") {
                    edges {
                        node { key value }
                    }
                }
            }
        }
    }
}
"""

CUSTOMERS_QUERY = """
query GetCustomersWithPetProfiles($first: Int!, $after: String) {
    customers(first: $first, after: $after) {
        pageInfo { hasNextPage endCursor }
        edges {
            node {
                id
                firstName
                lastName
                displayName
                email
                createdAt
                updatedAt
                state
                verifiedEmail
                numberOfOrders
                pet_type: metafield(namespace: "variables", key: "pet_type") { value }
                stress_level: metafield(namespace: "variables", key: "stress_level") { value }
                drug_usage: metafield(namespace: "variables", key: "drug_usage") { value }
                pet_age: metafield(namespace: "variables", key: "pet_age") { value }
                pet_weight: metafield(namespace: "variables", key: "pet_weight") { value }
            }
        }
    }
}
"""

METAFIELDS_SET_MUTATION = """
mutation SavePetProfile($metafields: [MetafieldsSetInput!]!) {
    metafieldsSet(metafields: $metafields) {
        metafields { key value }
        userErrors { field message }
    }
}
"""


class ShopifyGraphQLClient:
    """Async Shopify GraphQL Admin API client for profile queries."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        # Normalize shop domain: strip protocol, trailing slashes
        domain = settings.shopify.shop_domain.strip()
        domain = domain.replace("https://", "").replace("http://", "").rstrip("/")

        self.shop_domain = domain
        self.access_token = settings.shopify.access_token
        self.api_version = settings.shopify.api_version
        self.timezone = get_shop_timezone(settings.shopify.timezone)
        self.endpoint = (
            f"https://{self.shop_domain}/admin/api/{self.api_version}/graphql.json"
        )
        self.headers = {
            "X-Shopify-Access-Token": self.access_token,
            "Content-Type": "application/json",
        }
        self._client = httpx.AsyncClient(
            timeout=30.0,
            limits=httpx.Limits(max_keepalive_connections=20, max_connections=40),
            transport=transport,
        )
        logger.info(
            "ShopifyGraphQLClient initialized",
            shop_domain=self.shop_domain,
            api_version=self.api_version,
        )

    async def close(self):
        """Close the underlying HTTPX client."""
        await self._client.aclose()

    async def execute_query(
        self, query: str, variables: Optional[Dict] = None
    ) -> Dict[str, Any]:
        """Execute a GraphQL document against the Shopify Admin API.

        Raises:
            httpx.HTTPStatusError: On a non-2xx response.
            ShopifyAPIError: When the response carries an ``errors`` payload.
        """
        payload = {"query": query}
        if variables:
            payload["variables"] = variables

        logger.debug("Executing GraphQL query", variables=variables)

        response = await self._client.post(
            self.endpoint,
            headers=self.headers,
            json=payload,
        )
        response.raise_for_status()
        data = response.json()

        if data.get("errors"):
            error_messages = [
                e.get("message", str(e)) if isinstance(e, dict) else str(e)
                for e in data["errors"]
            ]
            logger.error("GraphQL errors", errors=error_messages)
            raise ShopifyAPIError(error_messages)

        result = data.get("data") or {}
        self._convert_timestamps(result)
        return result

    def _convert_timestamps(self, obj: Any) -> None:
        """Recursively convert ``*At`` UTC timestamps to the shop timezone in place."""
        if isinstance(obj, dict):
            for key, value in obj.items():
                if (
                    isinstance(value, str)
                    and key.endswith("At")
                    and ISO_TIMESTAMP_RE.match(value)
                ):
                    obj[key] = to_shop_time(value, self.timezone)
                else:
                    self._convert_timestamps(value)
        elif isinstance(obj, list):
            for item in obj:
                self._convert_timestamps(item)

    # ── Segments ────────────────────────────────────────────────────

    async def find_segment(self, name: str) -> Optional[Dict[str, Any]]:
        """Return the segment node whose name is exactly *name*, or None.

        Shopify's ``name:`` search is fuzzy, so the match is re-checked here.
        """
        data = await self.execute_query(SEGMENTS_QUERY, {"query": f"name:{name}"})
        for edge in data.get("segments", {}).get("edges", []):
            node = edge.get("node") or {}
            if node.get("name") == name:
                logger.info("Found segment", segment_id=node.get("id"), query=node.get("query"))
                return node
        logger.warning("Segment not found", segment_name=name)
        return None

    async def fetch_segment_members(
        self, segment_id: str, first: int, after: Optional[str] = None
    ) -> Dict[str, Any]:
        """Fetch one page of ``customerSegmentMembers``.

        Returns:
            The connection dict with ``edges`` and ``pageInfo``.
        """
        variables = {
            "segmentId": segment_id,
            "first": min(first, MAX_PAGE_SIZE),
            "after": after,
        }
        data = await self.execute_query(SEGMENT_MEMBERS_QUERY, variables)
        return data.get("customerSegmentMembers") or {}

    # ── Customers ───────────────────────────────────────────────────

    async def fetch_customers(
        self, first: int, after: Optional[str] = None
    ) -> Dict[str, Any]:
        """Fetch one page of ``customers`` with aliased profile metafields."""
        variables = {"first": min(first, MAX_PAGE_SIZE), "after": after}
        data = await self.execute_query(CUSTOMERS_QUERY, variables)
        return data.get("customers") or {}

    # ── Metafields ──────────────────────────────────────────────────

    async def set_metafields(self, metafields: List[Dict[str, str]]) -> Dict[str, Any]:
        """Run ``metafieldsSet`` and return its payload (metafields, userErrors)."""
        logger.info(
            "Setting metafields",
            keys=[m.get("key") for m in metafields],
            owner_ids=sorted({m.get("ownerId") or "" for m in metafields}),
        )
        data = await self.execute_query(METAFIELDS_SET_MUTATION, {"metafields": metafields})
        return data.get("metafieldsSet") or {}
