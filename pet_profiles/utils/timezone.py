"""Timezone helpers for presenting Shopify UTC timestamps in the shop's local time."""

import re
from datetime import datetime
from typing import Optional

import pytz

from pet_profiles.utils.logger import get_logger

logger = get_logger(__name__)

# ISO-8601 pattern that matches Shopify UTC timestamps like:
# "2026-02-08T18:45:00Z" or "2026-02-08T18:45:00+00:00"
ISO_TIMESTAMP_RE = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d{3}|\.\d{6})?(?:Z|[+-]\d{2}:\d{2})$"
)


def get_shop_timezone(name: str):
    """Resolve a tz database name, falling back to UTC for unknown names."""
    try:
        return pytz.timezone(name or "UTC")
    except pytz.UnknownTimeZoneError:
        logger.warning("Unknown shop timezone, using UTC", timezone=name)
        return pytz.utc


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a Shopify ISO timestamp into an aware datetime, or ``None``."""
    if not isinstance(value, str) or not ISO_TIMESTAMP_RE.match(value):
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def to_shop_time(value: Optional[str], tz) -> Optional[str]:
    """Convert an ISO UTC timestamp to *tz*, returning an ISO string.

    Values that are not timestamps are returned unchanged.
    """
    dt = parse_timestamp(value)
    if dt is None:
        return value
    return dt.astimezone(tz).isoformat()
