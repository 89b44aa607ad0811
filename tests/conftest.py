"""Pytest configuration and shared fixtures for Pet Profiles tests."""

import time

import jwt
import pytest
from unittest.mock import AsyncMock

from pet_profiles.config.settings import Settings
from pet_profiles.services.profile_sources import ProfilePage

TEST_API_KEY = "test-api-key"
TEST_API_SECRET = "test-api-secret-0123456789abcdef0123456789"
TEST_SHOP = "test-shop.myshopify.com"


@pytest.fixture
def test_settings():
    """Settings with deterministic Shopify credentials and collection limits."""
    s = Settings()
    s.shopify.shop_domain = TEST_SHOP
    s.shopify.access_token = "shpat_test_token"
    s.shopify.api_key = TEST_API_KEY
    s.shopify.api_secret = TEST_API_SECRET
    s.shopify.timezone = "UTC"
    s.collection.source = "segment"
    s.collection.segment_name = "Pet Profile"
    s.collection.segment_id = ""
    s.collection.max_customers = 1000
    s.collection.batch_size = 100
    s.extension.heading = ""
    s.extension.show_weight = True
    s.extension.show_drug_usage = True
    s.server.cors_allow_origins = ["*"]
    return s


def make_session_token(sub="gid://shopify/Customer/42", dest=f"https://{TEST_SHOP}",
                       secret=TEST_API_SECRET, aud=TEST_API_KEY, expires_in=60):
    """Sign a Shopify-style session token the way Shopify would."""
    now = int(time.time())
    payload = {
        "iss": f"{dest}/admin" if dest else "",
        "dest": dest,
        "aud": aud,
        "sub": sub,
        "exp": now + expires_in,
        "nbf": now - 5,
        "iat": now,
    }
    payload = {k: v for k, v in payload.items() if v is not None}
    return jwt.encode(payload, secret, algorithm="HS256")


@pytest.fixture
def session_token():
    return make_session_token()


def customer_node(customer_id, email="", pet_type=None, stress_level=None,
                  drug_usage=None, pet_age=None, pet_weight=None, **extra):
    """A ``customers`` query node with aliased metafields (None = unset)."""
    def metafield(value):
        return None if value is None else {"value": value}

    node = {
        "id": f"gid://shopify/Customer/{customer_id}",
        "firstName": extra.pop("firstName", "Pat"),
        "lastName": extra.pop("lastName", f"Owner{customer_id}"),
        "email": email,
        "verifiedEmail": extra.pop("verifiedEmail", True),
        "numberOfOrders": extra.pop("numberOfOrders", "2"),
        "state": extra.pop("state", "ENABLED"),
        "createdAt": extra.pop("createdAt", "2026-01-10T12:00:00+00:00"),
        "updatedAt": extra.pop("updatedAt", "2026-02-01T12:00:00+00:00"),
        "pet_type": metafield(pet_type),
        "stress_level": metafield(stress_level),
        "drug_usage": metafield(drug_usage),
        "pet_age": metafield(pet_age),
        "pet_weight": metafield(pet_weight),
    }
    node.update(extra)
    return node


def segment_member_node(customer_id, **metafields):
    """A ``customerSegmentMembers`` node with a metafield connection."""
    return {
        "id": f"gid://shopify/CustomerSegmentMember/{customer_id}",
        "firstName": "Sam",
        "lastName": f"Member{customer_id}",
        "displayName": f"Sam Member{customer_id}",
        "numberOfOrders": "1",
        "amountSpent": {"amount": "42.50", "currencyCode": "CAD"},
        "metafields": {
            "edges": [
                {"node": {"key": key, "value": value}}
                for key, value in metafields.items()
            ]
        },
    }


class SimulatedRemote:
    """In-memory cursor-paginated collection of ``total`` customer nodes.

    Honors the requested page size up to ``max_page`` and reports
    ``hasNextPage`` until the collection is exhausted. ``fail_on_call``
    makes the Nth request raise ``error``.
    """

    def __init__(self, total, max_page=250, fail_on_call=None, error=None):
        self.nodes = [
            customer_node(i, email=f"owner{i}@example.com", pet_type="Dog")
            for i in range(1, total + 1)
        ]
        self.max_page = max_page
        self.fail_on_call = fail_on_call
        self.error = error
        self.calls = []

    async def fetch_page(self, size, cursor):
        self.calls.append((size, cursor))
        if self.fail_on_call == len(self.calls):
            raise self.error
        start = int(cursor) if cursor else 0
        end = min(start + min(size, self.max_page), len(self.nodes))
        return ProfilePage(
            entries=self.nodes[start:end],
            has_next_page=end < len(self.nodes),
            end_cursor=str(end),
        )


class ScriptedSource:
    """Returns the given pages in order, regardless of requested size."""

    def __init__(self, pages):
        self.pages = list(pages)
        self.calls = []

    async def fetch_page(self, size, cursor):
        self.calls.append((size, cursor))
        page = self.pages[len(self.calls) - 1]
        if isinstance(page, Exception):
            raise page
        return page


@pytest.fixture
def no_delay(monkeypatch):
    """Replace the inter-page courtesy delay with a recording AsyncMock."""
    sleep = AsyncMock()
    monkeypatch.setattr("pet_profiles.services.profile_collector.asyncio.sleep", sleep)
    return sleep


@pytest.fixture
def mock_graphql_client():
    """Return a mock ShopifyGraphQLClient for testing without external dependencies.

    Uses AsyncMock to support async methods. By default the "Pet Profile"
    segment exists and has no members.
    """
    mock = AsyncMock()
    mock.find_segment = AsyncMock(return_value={
        "id": "gid://shopify/Segment/7",
        "name": "Pet Profile",
        "query": "metafields.variables.pet_type IS NOT NULL",
    })
    mock.fetch_segment_members = AsyncMock(return_value={
        "edges": [],
        "pageInfo": {"hasNextPage": False, "endCursor": None},
    })
    mock.fetch_customers = AsyncMock(return_value={
        "edges": [],
        "pageInfo": {"hasNextPage": False, "endCursor": None},
    })
    mock.set_metafields = AsyncMock(return_value={"metafields": [], "userErrors": []})
    mock.close = AsyncMock()
    return mock
