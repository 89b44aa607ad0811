"""Data loader behind the admin dashboard and profile table."""

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from pet_profiles.config.settings import Settings
from pet_profiles.services.profile_analytics import (
    calculate_data_quality,
    email_verification_stats,
    filter_records,
    generate_dimension_data,
    is_complete_profile,
    monthly_trends,
    overall_completeness,
    paginate,
    profile_completeness,
)
from pet_profiles.services.profile_collector import CollectionResult, collect_profiles
from pet_profiles.services.profile_records import PROFILE_FIELDS
from pet_profiles.services.profile_sources import build_page_source
from pet_profiles.services.shopify_graphql import ShopifyGraphQLClient
from pet_profiles.utils.logger import get_logger
from pet_profiles.utils.timezone import get_shop_timezone

logger = get_logger(__name__)


class ProfileDashboardService:
    """Runs one profile collection per page load and shapes it for display."""

    def __init__(self, client: ShopifyGraphQLClient, settings: Settings):
        """
        Initialize the dashboard service.

        Args:
            client: GraphQL client used by the page sources
            settings: Application settings (collection strategy and limits)
        """
        self.client = client
        self.settings = settings

    async def load_profiles(self) -> CollectionResult:
        """Collect profiles with the configured strategy, cap and batch size."""
        config = self.settings.collection
        source = build_page_source(self.client, config)
        logger.info(
            "Loading profiles",
            source=type(source).__name__,
            max_customers=config.max_customers,
            batch_size=config.batch_size,
        )
        return await collect_profiles(
            source, cap=config.max_customers, page_size=config.batch_size
        )

    def build_table(
        self,
        result: CollectionResult,
        query: str = "",
        pet_types: Sequence[str] = (),
        stress_levels: Sequence[str] = (),
        has_fields: Sequence[str] = (),
        page: int = 1,
        limit: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Filter, paginate and score collected records for the table view."""
        limit = limit or self.settings.table_page_size
        filtered = filter_records(
            result.records,
            query=query,
            pet_types=pet_types,
            stress_levels=stress_levels,
            has_fields=has_fields,
        )
        rows = []
        for record in paginate(filtered, page, limit):
            row = record.to_dict()
            row["completeness"] = profile_completeness(record)
            row["is_complete"] = is_complete_profile(record)
            rows.append(row)

        return {
            "records": rows,
            "total_customers": result.total_count,
            "filtered_count": len(filtered),
            "page": max(page, 1),
            "limit": limit,
            "error": result.error,
            "pagination_info": result.pagination_info.to_dict(),
            "limit_reached": result.limit_reached,
        }

    def build_summary(
        self, result: CollectionResult, now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """Dashboard metrics; all zeroed when the collection failed."""
        if result.error:
            return {
                "total_customers": 0,
                "error": result.error,
                "data_quality": {
                    "complete_profiles": 0,
                    "incomplete_profiles": 0,
                    "missing_data": {name: 0 for name in PROFILE_FIELDS},
                },
                "email_verification": email_verification_stats([]),
                "overall_completeness": 0.0,
                "monthly_trends": [],
                "dimensions": generate_dimension_data([]),
                "pagination_info": result.pagination_info.to_dict(),
                "limit_reached": False,
            }

        records = result.records
        return {
            "total_customers": result.total_count,
            "error": None,
            "data_quality": calculate_data_quality(records),
            "email_verification": email_verification_stats(records),
            "overall_completeness": overall_completeness(records),
            "monthly_trends": monthly_trends(
                records,
                now=now or datetime.now(get_shop_timezone(self.settings.shopify.timezone)),
            ),
            "dimensions": generate_dimension_data(records),
            "pagination_info": result.pagination_info.to_dict(),
            "limit_reached": result.limit_reached,
        }
