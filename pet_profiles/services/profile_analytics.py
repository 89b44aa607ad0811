"""
Scoring, quality metrics and chart aggregation over collected profile records.

Everything here is a pure function of the records handed in; nothing is
cached between calls.
"""

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional, Sequence

import pytz

from pet_profiles.services.profile_records import PROFILE_FIELDS, ProfileRecord
from pet_profiles.utils.logger import get_logger
from pet_profiles.utils.timezone import parse_timestamp

logger = get_logger(__name__)


def _round_half_up(value: Decimal, places: str = "1") -> Decimal:
    return value.quantize(Decimal(places), rounding=ROUND_HALF_UP)


def _is_filled(value: Optional[str]) -> bool:
    return bool(value) and value.strip() != ""


# ── Completeness ────────────────────────────────────────────────────


def profile_completeness(record: ProfileRecord) -> int:
    """Percentage (0-100) of the five profile attributes that are filled in."""
    filled = sum(1 for name in PROFILE_FIELDS if _is_filled(getattr(record, name)))
    percentage = Decimal(filled * 100) / Decimal(len(PROFILE_FIELDS))
    return int(_round_half_up(percentage))


def is_complete_profile(record: ProfileRecord) -> bool:
    return profile_completeness(record) == 100


def calculate_data_quality(records: Sequence[ProfileRecord]) -> Dict[str, Any]:
    """
    Count complete vs. incomplete profiles and missing values per attribute.

    Returns:
        Dictionary containing:
            - complete_profiles: records with all five attributes filled
            - incomplete_profiles: the rest
            - missing_data: attribute name -> number of records missing it
    """
    complete = sum(1 for r in records if is_complete_profile(r))
    missing = {
        name: sum(1 for r in records if not _is_filled(getattr(r, name)))
        for name in PROFILE_FIELDS
    }
    return {
        "complete_profiles": complete,
        "incomplete_profiles": len(records) - complete,
        "missing_data": missing,
    }


def overall_completeness(records: Sequence[ProfileRecord]) -> float:
    """Filled attribute slots across all records, as a one-decimal percentage."""
    total_slots = len(records) * len(PROFILE_FIELDS)
    if total_slots == 0:
        return 0.0
    filled = sum(
        1 for r in records for name in PROFILE_FIELDS if _is_filled(getattr(r, name))
    )
    return float(_round_half_up(Decimal(filled * 100) / Decimal(total_slots), "0.1"))


def email_verification_stats(records: Sequence[ProfileRecord]) -> Dict[str, Any]:
    verified = sum(1 for r in records if r.verified_email)
    total = len(records)
    rate = (
        float(_round_half_up(Decimal(verified * 100) / Decimal(total), "0.1"))
        if total
        else 0.0
    )
    return {
        "verified": verified,
        "unverified": total - verified,
        "verification_rate": rate,
    }


def monthly_trends(
    records: Sequence[ProfileRecord],
    now: Optional[datetime] = None,
    months: int = 6,
) -> List[Dict[str, Any]]:
    """
    Verified / unverified customer sign-ups per calendar month.

    Covers the ``months`` months ending with the month of ``now``, oldest
    first. Records without a parseable ``created_at`` are skipped; this is
    always the case for segment-member records, which carry no timestamps.
    """
    now = now or datetime.now(pytz.utc)

    buckets: Dict[tuple, Dict[str, int]] = {}
    order = []
    month_index = now.year * 12 + now.month - 1
    for offset in range(months - 1, -1, -1):
        year, month0 = divmod(month_index - offset, 12)
        key = (year, month0 + 1)
        buckets[key] = {"verified": 0, "unverified": 0}
        order.append(key)

    for record in records:
        created = parse_timestamp(record.created_at)
        if created is None:
            continue
        bucket = buckets.get((created.year, created.month))
        if bucket is None:
            continue
        bucket["verified" if record.verified_email else "unverified"] += 1

    return [
        {
            "month": datetime(year, month, 1).strftime("%b"),
            "year": year,
            "verified": buckets[(year, month)]["verified"],
            "unverified": buckets[(year, month)]["unverified"],
        }
        for year, month in order
    ]


# ── Dimensional aggregation ─────────────────────────────────────────

# (label, stored value) pairs per attribute; the stored value is what the
# customer-account block writes into the metafield.
DIMENSION_CATEGORIES: Dict[str, List[tuple]] = {
    "pet_age": [
        ("1-6", "1-6"),
        ("7-12", "7-12"),
        ("13-20", "13-20"),
    ],
    "drug_usage": [
        ("Allergies", "allergies"),
        ("Gut Health and Immune Support", "Gut Health and Immune Support"),
        ("Hip and Joint Health", "Hip and Joint Health"),
        ("Longevity", "Longevity"),
        ("Anxiety", "Anxiety"),
        ("Skin or Paw Irritation", "Skin or Paw Irritation"),
    ],
    "pet_weight": [
        ("Under 20lbs", "under 20lbs"),
        ("20-50lbs", "20-50lbs"),
        ("50+lbs", "50+lbs"),
    ],
    "pet_type": [
        ("Dog", "Dog"),
        ("Cat", "Cat"),
        ("Small Animal", "small animal"),
    ],
    "stress_level": [
        ("Low", "low discomfort or stress"),
        ("2", "2"),
        ("Moderate", "moderate discomfort or stress"),
        ("4", "4"),
        ("Severe", "severe discomfort or stress"),
    ],
}

# Attributes whose zero-count categories are dropped from the output
SPARSE_DIMENSIONS = {"drug_usage", "stress_level"}


def _matches(attribute: str, label: str, expected: str, value: str) -> bool:
    # Allergies is free text ("Seasonal allergies", ...), so it matches on
    # containment; every other category is an exact value.
    if attribute == "drug_usage" and label == "Allergies":
        return expected in value.lower()
    return value == expected


def categorize(attribute: str, value: str) -> Optional[str]:
    """Return the category label *value* falls into, or None."""
    if not value:
        return None
    for label, expected in DIMENSION_CATEGORIES[attribute]:
        if _matches(attribute, label, expected, value):
            return label
    return None


def generate_dimension_data(
    records: Iterable[ProfileRecord],
) -> Dict[str, List[Dict[str, Any]]]:
    """
    Bucket records into the fixed chart categories of each profile attribute.

    Returns:
        Attribute name -> list of ``{"category": label, "count": n}`` in the
        fixed category order. ``pet_age``, ``pet_weight`` and ``pet_type``
        always list every category; ``drug_usage`` and ``stress_level``
        omit empty ones. Values matching no category are not counted.
    """
    counts = {
        attribute: {label: 0 for label, _ in categories}
        for attribute, categories in DIMENSION_CATEGORIES.items()
    }
    total = 0
    for record in records:
        total += 1
        for attribute in DIMENSION_CATEGORIES:
            label = categorize(attribute, getattr(record, attribute))
            if label is not None:
                counts[attribute][label] += 1

    if total == 0:
        return {attribute: [] for attribute in DIMENSION_CATEGORIES}

    dimensions = {}
    for attribute, categories in DIMENSION_CATEGORIES.items():
        buckets = [
            {"category": label, "count": counts[attribute][label]}
            for label, _ in categories
        ]
        if attribute in SPARSE_DIMENSIONS:
            buckets = [b for b in buckets if b["count"] > 0]
        dimensions[attribute] = buckets
    return dimensions


# ── Table view helpers ──────────────────────────────────────────────


def filter_records(
    records: Sequence[ProfileRecord],
    query: str = "",
    pet_types: Sequence[str] = (),
    stress_levels: Sequence[str] = (),
    has_fields: Sequence[str] = (),
) -> List[ProfileRecord]:
    """
    Apply the profile table's search and filters.

    Args:
        query: Case-insensitive substring of first name, last name or email.
        pet_types: Keep records whose pet_type is one of these.
        stress_levels: Keep records whose stress_level is one of these.
        has_fields: Profile attributes that must be filled in.
    """
    filtered = list(records)

    if query:
        term = query.lower()
        filtered = [
            r for r in filtered
            if term in r.first_name.lower()
            or term in r.last_name.lower()
            or term in r.email.lower()
        ]
    if pet_types:
        filtered = [r for r in filtered if r.pet_type in pet_types]
    if stress_levels:
        filtered = [r for r in filtered if r.stress_level in stress_levels]
    for name in has_fields:
        if name not in PROFILE_FIELDS:
            logger.warning("Ignoring unknown attribute filter", attribute=name)
            continue
        filtered = [r for r in filtered if _is_filled(getattr(r, name))]

    return filtered


def paginate(records: Sequence[Any], page: int = 1, limit: int = 50) -> List[Any]:
    """Return the 1-based ``page`` of ``records`` with ``limit`` rows per page."""
    page = max(page, 1)
    start = (page - 1) * limit
    return list(records[start:start + limit])
