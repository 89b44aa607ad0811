"""
Bounded cursor-pagination over a profile page source.

``collect_profiles`` walks a page source until the remote reports no more
pages or the record cap is reached, assembling every node into a
ProfileRecord. A failed page ends the run: the result carries the error
message and no records.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pet_profiles.services.profile_records import ProfileRecord, assemble_record
from pet_profiles.services.profile_sources import ProfilePageSource
from pet_profiles.services.shopify_graphql import MAX_PAGE_SIZE
from pet_profiles.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_CUSTOMERS = 1000
DEFAULT_BATCH_SIZE = 100

# Fixed pause between pages to stay clear of the Admin API rate limiter
PAGE_DELAY_SECONDS = 0.1


@dataclass
class PaginationInfo:
    has_more: bool
    total_fetched: int
    cap: Optional[int]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "has_more": self.has_more,
            "total_fetched": self.total_fetched,
            "cap": self.cap,
        }


@dataclass
class CollectionResult:
    records: List[ProfileRecord] = field(default_factory=list)
    total_count: int = 0
    error: Optional[str] = None
    pagination_info: PaginationInfo = field(
        default_factory=lambda: PaginationInfo(False, 0, None)
    )

    @property
    def limit_reached(self) -> bool:
        """True when the cap cut the run short while more pages existed."""
        info = self.pagination_info
        return (
            info.has_more
            and info.cap is not None
            and info.total_fetched >= info.cap
        )


async def collect_profiles(
    source: ProfilePageSource,
    cap: int = DEFAULT_MAX_CUSTOMERS,
    page_size: int = DEFAULT_BATCH_SIZE,
) -> CollectionResult:
    """
    Collect up to ``cap`` profile records from ``source``, page by page.

    Args:
        source: Page source to read from.
        cap: Maximum number of records to return.
        page_size: Records requested per round trip; clamped to 250.

    Returns:
        CollectionResult. On any page failure ``error`` is set, ``records``
        is empty and ``pagination_info.has_more`` is False.
    """
    if cap <= 0:
        return CollectionResult(pagination_info=PaginationInfo(False, 0, cap))

    page_size = min(page_size, MAX_PAGE_SIZE)

    records: List[ProfileRecord] = []
    cursor = None
    has_next_page = True
    fetched = 0
    pages = 0

    try:
        while has_next_page and fetched < cap:
            size = min(page_size, cap - fetched)
            if size <= 0:
                break

            page = await source.fetch_page(size, cursor)
            pages += 1

            records.extend(assemble_record(node) for node in page.entries)
            cursor = page.end_cursor
            has_next_page = page.has_next_page
            fetched += len(page.entries)

            logger.info(
                "Fetched profile page",
                page=pages,
                page_count=len(page.entries),
                total=fetched,
                has_next_page=has_next_page,
            )

            if has_next_page and fetched < cap:
                await asyncio.sleep(PAGE_DELAY_SECONDS)

    except Exception as e:
        logger.error(
            "Profile collection aborted",
            error=str(e),
            pages_completed=pages,
            discarded=fetched,
            exc_info=True,
        )
        return CollectionResult(
            records=[],
            total_count=0,
            error=str(e) or e.__class__.__name__,
            pagination_info=PaginationInfo(False, 0, cap),
        )

    logger.info(
        "Profile collection complete",
        total_fetched=fetched,
        pages=pages,
        has_more=has_next_page,
        cap=cap,
    )
    return CollectionResult(
        records=records,
        total_count=fetched,
        error=None,
        pagination_info=PaginationInfo(has_next_page, fetched, cap),
    )
