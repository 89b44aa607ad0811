"""Tests for profile scoring, quality metrics and dimension aggregation."""

import itertools
import random
from datetime import datetime

import pytest
import pytz

from pet_profiles.services.profile_analytics import (
    DIMENSION_CATEGORIES,
    calculate_data_quality,
    categorize,
    email_verification_stats,
    filter_records,
    generate_dimension_data,
    is_complete_profile,
    monthly_trends,
    overall_completeness,
    paginate,
    profile_completeness,
)
from pet_profiles.services.profile_records import PROFILE_FIELDS, ProfileRecord


def _record(**fields):
    fields.setdefault("id", "1")
    return ProfileRecord(**fields)


class TestProfileCompleteness:
    """Test suite for profile_completeness and is_complete_profile."""

    @pytest.mark.parametrize("mask", list(itertools.product([False, True], repeat=5)))
    def test_every_fill_combination(self, mask):
        values = {name: ("x" if filled else "") for name, filled in zip(PROFILE_FIELDS, mask)}
        record = _record(**values)

        score = profile_completeness(record)

        assert score == sum(mask) * 20
        assert is_complete_profile(record) is (score == 100)

    def test_whitespace_counts_as_empty(self):
        record = _record(pet_type="  ", stress_level="2")
        assert profile_completeness(record) == 20


class TestCategorize:
    """Test suite for category matching."""

    def test_allergies_substring_case_insensitive(self):
        assert categorize("drug_usage", "Seasonal ALLERGIES flare") == "Allergies"
        assert categorize("drug_usage", "allergies") == "Allergies"

    def test_allergy_singular_not_counted(self):
        assert categorize("drug_usage", "allergy") is None

    def test_exact_match_elsewhere(self):
        assert categorize("pet_type", "small animal") == "Small Animal"
        assert categorize("pet_type", "Small animal") is None
        assert categorize("stress_level", "moderate discomfort or stress") == "Moderate"
        assert categorize("pet_weight", "under 20lbs") == "Under 20lbs"

    def test_empty_value(self):
        assert categorize("pet_age", "") is None


class TestGenerateDimensionData:
    """Test suite for generate_dimension_data."""

    def test_empty_input(self):
        assert generate_dimension_data([]) == {
            "pet_age": [],
            "drug_usage": [],
            "pet_weight": [],
            "pet_type": [],
            "stress_level": [],
        }

    def test_always_included_and_sparse_categories(self):
        records = [
            _record(id="1", pet_type="Dog", stress_level="2", drug_usage="Seasonal allergies"),
            _record(id="2", pet_type="Dog", pet_age="1-6"),
            _record(id="3", pet_type="Cat", pet_weight="Over 9000"),
        ]

        dimensions = generate_dimension_data(records)

        assert dimensions["pet_type"] == [
            {"category": "Dog", "count": 2},
            {"category": "Cat", "count": 1},
            {"category": "Small Animal", "count": 0},
        ]
        assert dimensions["pet_age"] == [
            {"category": "1-6", "count": 1},
            {"category": "7-12", "count": 0},
            {"category": "13-20", "count": 0},
        ]
        # Unrecognized value is not counted anywhere
        assert [b["count"] for b in dimensions["pet_weight"]] == [0, 0, 0]
        assert dimensions["stress_level"] == [{"category": "2", "count": 1}]
        assert dimensions["drug_usage"] == [{"category": "Allergies", "count": 1}]

    def test_category_order_is_fixed(self):
        records = [_record(id=str(i), stress_level=v) for i, v in enumerate(
            ["severe discomfort or stress", "4", "low discomfort or stress"]
        )]

        labels = [b["category"] for b in generate_dimension_data(records)["stress_level"]]

        assert labels == ["Low", "4", "Severe"]

    def test_counts_bounded_by_record_count(self):
        records = [
            _record(id=str(i), pet_type=random.choice(["Dog", "Cat", "Fish", ""]))
            for i in range(40)
        ]

        for attribute, buckets in generate_dimension_data(records).items():
            assert sum(b["count"] for b in buckets) <= len(records)
            assert [b["category"] for b in buckets] == [
                label for label, _ in DIMENSION_CATEGORIES[attribute]
                if label in {b["category"] for b in buckets}
            ]

    def test_idempotent_and_order_independent(self):
        records = [
            _record(id="1", pet_type="Dog", drug_usage="Anxiety", pet_age="7-12"),
            _record(id="2", pet_type="small animal", drug_usage="Longevity"),
            _record(id="3", pet_type="Cat", pet_weight="20-50lbs", stress_level="4"),
        ]
        shuffled = list(reversed(records))

        first = generate_dimension_data(records)

        assert generate_dimension_data(records) == first
        assert generate_dimension_data(shuffled) == first


class TestDataQuality:
    """Test suite for quality metrics."""

    @pytest.fixture
    def records(self):
        full = dict(pet_type="Dog", stress_level="2", drug_usage="Anxiety",
                    pet_age="1-6", pet_weight="50+lbs")
        return [
            _record(id="1", verified_email=True, **full),
            _record(id="2", verified_email=False, pet_type="Cat"),
            _record(id="3", verified_email=True),
            _record(id="4", verified_email=False, **full),
        ]

    def test_calculate_data_quality(self, records):
        quality = calculate_data_quality(records)

        assert quality["complete_profiles"] == 2
        assert quality["incomplete_profiles"] == 2
        assert quality["missing_data"] == {
            "pet_type": 1,
            "stress_level": 2,
            "drug_usage": 2,
            "pet_age": 2,
            "pet_weight": 2,
        }

    def test_overall_completeness(self, records):
        # 11 of 20 attribute slots filled
        assert overall_completeness(records) == 55.0
        assert overall_completeness([]) == 0.0

    def test_overall_completeness_rounds_to_one_decimal(self):
        records = [_record(id="1", pet_type="Dog"), _record(id="2"), _record(id="3")]
        assert overall_completeness(records) == 6.7

    def test_email_verification_stats(self, records):
        assert email_verification_stats(records) == {
            "verified": 2,
            "unverified": 2,
            "verification_rate": 50.0,
        }
        assert email_verification_stats([])["verification_rate"] == 0.0


class TestMonthlyTrends:
    """Test suite for monthly_trends."""

    def test_six_month_window(self):
        now = datetime(2026, 3, 15, tzinfo=pytz.utc)
        records = [
            _record(id="1", verified_email=True, created_at="2026-03-01T08:00:00+00:00"),
            _record(id="2", verified_email=False, created_at="2026-03-20T08:00:00Z"),
            _record(id="3", verified_email=True, created_at="2025-10-31T23:00:00+00:00"),
            _record(id="4", verified_email=True, created_at="2025-09-30T08:00:00+00:00"),
            _record(id="5", verified_email=True, created_at=None),
            _record(id="6", verified_email=True, created_at="not a date"),
        ]

        trends = monthly_trends(records, now=now)

        assert [(t["month"], t["year"]) for t in trends] == [
            ("Oct", 2025), ("Nov", 2025), ("Dec", 2025),
            ("Jan", 2026), ("Feb", 2026), ("Mar", 2026),
        ]
        assert trends[0] == {"month": "Oct", "year": 2025, "verified": 1, "unverified": 0}
        assert trends[-1] == {"month": "Mar", "year": 2026, "verified": 1, "unverified": 1}
        assert sum(t["verified"] + t["unverified"] for t in trends) == 3

    def test_no_records(self):
        trends = monthly_trends([], now=datetime(2026, 1, 5, tzinfo=pytz.utc), months=3)
        assert [(t["month"], t["year"]) for t in trends] == [
            ("Nov", 2025), ("Dec", 2025), ("Jan", 2026),
        ]
        assert all(t["verified"] == 0 and t["unverified"] == 0 for t in trends)


class TestTableHelpers:
    """Test suite for filter_records and paginate."""

    @pytest.fixture
    def records(self):
        return [
            _record(id="1", first_name="Alice", last_name="Barker", email="alice@dogs.com",
                    pet_type="Dog", stress_level="2"),
            _record(id="2", first_name="Bob", last_name="Whiskers", email="bob@cats.com",
                    pet_type="Cat", pet_weight="under 20lbs"),
            _record(id="3", first_name="Carol", last_name="Hutch", email="carol@example.com",
                    pet_type="small animal", stress_level="4", pet_weight="under 20lbs"),
        ]

    def test_search_matches_name_and_email(self, records):
        assert [r.id for r in filter_records(records, query="WHISK")] == ["2"]
        assert [r.id for r in filter_records(records, query="dogs.com")] == ["1"]
        assert [r.id for r in filter_records(records, query="car")] == ["3"]

    def test_attribute_filters(self, records):
        assert [r.id for r in filter_records(records, pet_types=["Dog", "Cat"])] == ["1", "2"]
        assert [r.id for r in filter_records(records, stress_levels=["4"])] == ["3"]
        assert [r.id for r in filter_records(records, has_fields=["pet_weight"])] == ["2", "3"]
        assert [r.id for r in filter_records(
            records, has_fields=["pet_weight", "stress_level"]
        )] == ["3"]

    def test_unknown_has_filter_ignored(self, records):
        assert len(filter_records(records, has_fields=["favorite_toy"])) == 3

    def test_paginate(self):
        items = list(range(120))

        assert paginate(items, 1, 50) == list(range(50))
        assert paginate(items, 3, 50) == list(range(100, 120))
        assert paginate(items, 4, 50) == []
        assert paginate(items, 0, 50) == list(range(50))
