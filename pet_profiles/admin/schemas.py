"""Pydantic schemas for the admin and app-proxy APIs."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------

class PaginationInfoOut(BaseModel):
    has_more: bool = False
    total_fetched: int = 0
    cap: Optional[int] = None


class AmountSpentOut(BaseModel):
    amount: str
    currency_code: str


class ProfileRow(BaseModel):
    id: str
    gid: str = ""
    display_name: str = ""
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    state: str = ""
    verified_email: bool = False
    number_of_orders: int = 0
    amount_spent: Optional[AmountSpentOut] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    pet_type: str = ""
    stress_level: str = ""
    drug_usage: str = ""
    pet_age: str = ""
    pet_weight: str = ""
    completeness: int = 0
    is_complete: bool = False


class ProfileTable(BaseModel):
    records: list[ProfileRow]
    total_customers: int = 0
    filtered_count: int = 0
    page: int = 1
    limit: int = 50
    error: Optional[str] = None
    pagination_info: PaginationInfoOut
    limit_reached: bool = False


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------

class DimensionBucket(BaseModel):
    category: str
    count: int


class DataQuality(BaseModel):
    complete_profiles: int = 0
    incomplete_profiles: int = 0
    missing_data: dict[str, int] = {}


class EmailVerification(BaseModel):
    verified: int = 0
    unverified: int = 0
    verification_rate: float = 0.0


class MonthlyTrend(BaseModel):
    month: str
    year: int
    verified: int = 0
    unverified: int = 0


class DashboardSummary(BaseModel):
    total_customers: int = 0
    error: Optional[str] = None
    data_quality: DataQuality
    email_verification: EmailVerification
    overall_completeness: float = 0.0
    monthly_trends: list[MonthlyTrend] = []
    dimensions: dict[str, list[DimensionBucket]] = {}
    pagination_info: PaginationInfoOut
    limit_reached: bool = False


class DimensionsOut(BaseModel):
    error: Optional[str] = None
    dimensions: dict[str, list[DimensionBucket]] = {}


# ---------------------------------------------------------------------------
# Customer-account extension
# ---------------------------------------------------------------------------

class ExtensionField(BaseModel):
    key: str
    label: str


class ExtensionSettingsOut(BaseModel):
    heading: str
    show_weight: bool = True
    show_drug_usage: bool = True
    fields: list[ExtensionField] = []


class ProfileSubmission(BaseModel):
    """Body posted by the profile block. Values are sanitized server-side."""

    model_config = ConfigDict(extra="ignore")

    pet_type: Any = None
    stress_level: Any = None
    drug_usage: Any = None
    pet_age: Any = None
    pet_weight: Any = None
