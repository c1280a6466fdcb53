"""Skip/limit pagination shared by the list endpoints."""

import math
from typing import List, Tuple
from sqlalchemy.orm import Query

MAX_PAGE_LIMIT = 100
# Keeps the row offset inside SQLite's 64-bit integer range
MAX_PAGE = (2**63 - 1) // MAX_PAGE_LIMIT


def effective_limit(limit: int) -> int:
    """Clamp a requested page size to MAX_PAGE_LIMIT."""
    return min(limit, MAX_PAGE_LIMIT)


def paginate(query: Query, page: int, limit: int) -> Tuple[int, int, List]:
    """
    Apply skip/limit to an ordered query.

    Args:
        query: Filtered and ordered SQLAlchemy query
        page: 1-based page number
        limit: Page size, already clamped

    Returns:
        Tuple of (total matching rows, total pages, rows on the page)
    """
    total = query.order_by(None).count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    return total, math.ceil(total / limit), items
