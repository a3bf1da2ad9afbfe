"""
Record assembler.

Wraps one category's validated records with a retrieval timestamp and
the source URL. Categories are assembled independently.
"""

from datetime import datetime, timezone
from typing import Optional

from .core.models import Category, FetchResult, PriceRecord


def assemble(
    category: Category,
    records: list[PriceRecord],
    source: str,
    strategy: Optional[str] = None,
    include_fetched_at: bool = True,
    now: Optional[datetime] = None,
) -> FetchResult:
    """
    Build the FetchResult for one category.

    Args:
        category: Category the records belong to
        records: Records in extraction order
        source: URL the records were read from
        strategy: Name of the strategy that produced them
        include_fetched_at: Add the ISO-8601 fetch time
        now: Fixed clock (tests)

    Returns:
        FetchResult with ``lastUpdate`` in epoch milliseconds
    """
    now = now or datetime.now(timezone.utc)

    return FetchResult(
        category=category,
        source=source,
        last_update=int(now.timestamp() * 1000),
        records=list(records),
        fetched_at=now.isoformat() if include_fetched_at else None,
        strategy=strategy,
    )
