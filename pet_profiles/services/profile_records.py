"""
Profile record model and assembly from raw GraphQL nodes.

A raw node arrives in one of two shapes depending on the collection
strategy:

- ``customers`` query: each profile attribute is an aliased single
  metafield, e.g. ``{"pet_type": {"value": "Dog"}}`` (or ``None``).
- ``customerSegmentMembers`` query: attributes live in a
  ``metafields.edges[].node{key, value}`` connection.

Both are flattened into a ``ProfileRecord`` whose five attributes are
always strings.
"""

import re
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional

from pet_profiles.utils.logger import get_logger
from pet_profiles.utils.sanitizer import sanitize_metafield_value

logger = get_logger(__name__)

PROFILE_FIELDS = ("pet_type", "stress_level", "drug_usage", "pet_age", "pet_weight")

# gid://shopify/Customer/1234567890 -> 1234567890
_GID_RE = re.compile(r"^gid://[^/]+/[^/]+/([^/?#]+)$")


@dataclass
class ProfileRecord:
    id: str
    gid: str = ""
    display_name: str = ""
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    state: str = ""
    verified_email: bool = False
    number_of_orders: int = 0
    amount_spent: Optional[Dict[str, str]] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    pet_type: str = ""
    stress_level: str = ""
    drug_usage: str = ""
    pet_age: str = ""
    pet_weight: str = ""

    def profile_values(self) -> Dict[str, str]:
        return {name: getattr(self, name) for name in PROFILE_FIELDS}

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def extract_local_id(gid: Any) -> str:
    """Return the trailing identifier of a Shopify GID.

    Identifiers that don't look like ``gid://<app>/<Type>/<id>`` are
    returned unchanged; missing ones become ``""``.
    """
    if not isinstance(gid, str) or not gid:
        return ""
    match = _GID_RE.match(gid)
    return match.group(1) if match else gid


def _raw_profile_values(node: Dict[str, Any]) -> Dict[str, Any]:
    """Pull the unsanitized profile attribute values out of either node shape."""
    connection = node.get("metafields")
    if isinstance(connection, dict):
        by_key = {}
        for edge in connection.get("edges") or []:
            metafield = (edge or {}).get("node") or {}
            key = metafield.get("key")
            if key:
                by_key[key] = metafield.get("value")
        return {name: by_key.get(name) for name in PROFILE_FIELDS}

    values = {}
    for name in PROFILE_FIELDS:
        aliased = node.get(name)
        values[name] = aliased.get("value") if isinstance(aliased, dict) else aliased
    return values


def _order_count(value: Any) -> int:
    # numberOfOrders is an UnsignedInt64 scalar, serialized as a string
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def _amount_spent(node: Dict[str, Any]) -> Optional[Dict[str, str]]:
    money = node.get("amountSpent")
    if not money:
        return None
    return {
        "amount": money.get("amount") or "0.0",
        "currency_code": money.get("currencyCode") or "USD",
    }


def validate_record(
    record: ProfileRecord, raw_values: Optional[Dict[str, Any]] = None
) -> List[str]:
    """Check a record for required fields and raw attribute types.

    Args:
        record: The assembled record.
        raw_values: The attribute values as they came off the wire; an
            attribute whose raw value is neither a string nor absent is
            reported. When omitted, the record's own values are checked.

    Returns:
        One message per violated rule, empty when the record is valid.
    """
    errors = []
    if not record.email:
        errors.append("Missing email")
    if not record.id:
        errors.append("Missing customer ID")

    values = raw_values if raw_values is not None else record.profile_values()
    for name in PROFILE_FIELDS:
        value = values.get(name)
        if value is not None and not isinstance(value, str):
            errors.append(f"Invalid {name} data type")
    return errors


def assemble_record(node: Dict[str, Any]) -> ProfileRecord:
    """Flatten one raw customer / segment-member node into a ProfileRecord.

    Validation problems are logged and never stop assembly.
    """
    node = node or {}
    gid = node.get("id") or ""
    first_name = node.get("firstName") or ""
    last_name = node.get("lastName") or ""
    raw_values = _raw_profile_values(node)

    record = ProfileRecord(
        id=extract_local_id(gid),
        gid=gid,
        display_name=node.get("displayName") or f"{first_name} {last_name}".strip(),
        first_name=first_name,
        last_name=last_name,
        email=node.get("email") or "",
        state=node.get("state") or "",
        verified_email=bool(node.get("verifiedEmail") or False),
        number_of_orders=_order_count(node.get("numberOfOrders")),
        amount_spent=_amount_spent(node),
        created_at=node.get("createdAt"),
        updated_at=node.get("updatedAt"),
        **{name: sanitize_metafield_value(raw_values[name]) for name in PROFILE_FIELDS},
    )

    validation_errors = validate_record(record, raw_values)
    if validation_errors:
        logger.warning(
            "Customer record has validation errors",
            customer_id=record.id,
            errors=validation_errors,
        )
    return record
