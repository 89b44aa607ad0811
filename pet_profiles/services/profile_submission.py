"""Writing edited pet profile fields back to Shopify as customer metafields."""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from pet_profiles.services.profile_records import PROFILE_FIELDS
from pet_profiles.services.shopify_graphql import (
    METAFIELD_NAMESPACE,
    METAFIELD_TYPE,
    ShopifyGraphQLClient,
)
from pet_profiles.utils.logger import get_logger
from pet_profiles.utils.sanitizer import sanitize_metafield_value

logger = get_logger(__name__)


@dataclass
class SubmissionResult:
    success: bool
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        if self.success:
            return {"success": True}
        return {"error": self.error}


def build_metafields_input(customer_gid: str, fields: Mapping[str, Any]) -> List[Dict[str, str]]:
    """Build ``MetafieldsSetInput`` entries for the submitted profile attributes.

    Attributes that are absent, not strings or blank after trimming are
    left out, so their stored metafields stay as they are.
    """
    metafields = []
    for name in PROFILE_FIELDS:
        value = sanitize_metafield_value(fields.get(name))
        if not value:
            continue
        metafields.append({
            "ownerId": customer_gid,
            "namespace": METAFIELD_NAMESPACE,
            "key": name,
            "value": value,
            "type": METAFIELD_TYPE,
        })
    return metafields


class ProfileSubmissionService:
    """Saves the profile block's five fields for one customer."""

    def __init__(self, client: ShopifyGraphQLClient):
        self.client = client

    async def save_profile(
        self, customer_gid: str, fields: Mapping[str, Any]
    ) -> SubmissionResult:
        """
        Write the submitted profile attributes for ``customer_gid``.

        Args:
            customer_gid: Customer GID, e.g. ``gid://shopify/Customer/123``.
            fields: Submitted values keyed by attribute name. Blank or
                missing attributes are not written; other keys are ignored.

        Returns:
            SubmissionResult; on failure ``error`` is the first user error
            reported by Shopify, or the transport/query error message.
        """
        if not customer_gid:
            return SubmissionResult(success=False, error="Missing customerId")

        metafields = build_metafields_input(customer_gid, fields)
        if not metafields:
            return SubmissionResult(success=False, error="No profile fields to save")

        try:
            payload = await self.client.set_metafields(metafields)
        except Exception as e:
            logger.error(
                "Error saving metafields",
                customer_gid=customer_gid,
                error=str(e),
                exc_info=True,
            )
            return SubmissionResult(success=False, error=str(e) or e.__class__.__name__)

        user_errors = payload.get("userErrors") or []
        if user_errors:
            first = user_errors[0].get("message") or "Unknown error"
            logger.warning(
                "Metafield user errors",
                customer_gid=customer_gid,
                errors=[e.get("message") for e in user_errors],
            )
            return SubmissionResult(success=False, error=first)

        logger.info("Saved pet profile", customer_gid=customer_gid)
        return SubmissionResult(success=True)
