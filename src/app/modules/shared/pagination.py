"""
Pagination helpers for page/limit style listings.
"""

import math
from dataclasses import dataclass
from typing import Any

from app.core.config import settings


@dataclass(frozen=True)
class PageParams:
    """Validated page/limit pair."""

    page: int = 1
    limit: int = 10

    @classmethod
    def create(cls, page: int | None, limit: int | None) -> "PageParams":
        """Clamp page to >= 1 and limit to [1, max_page_size]."""
        page = max(1, page or 1)
        limit = limit or settings.default_page_size
        limit = min(max(1, limit), settings.max_page_size)
        return cls(page=page, limit=limit)

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


def build_page(items: list[Any], total: int, params: PageParams) -> dict[str, Any]:
    """
    Build the paginated envelope returned by list endpoints.

    Args:
        items: Items on the current page
        total: Total number of matching items
        params: The page/limit used for the query

    Returns:
        Dict with docs, total_docs, limit, page, total_pages and
        next/prev navigation fields
    """
    total_pages = math.ceil(total / params.limit) if total else 0
    has_next = params.page < total_pages
    has_prev = params.page > 1

    return {
        "docs": items,
        "total_docs": total,
        "limit": params.limit,
        "page": params.page,
        "total_pages": total_pages,
        "has_next_page": has_next,
        "has_prev_page": has_prev,
        "next_page": params.page + 1 if has_next else None,
        "prev_page": params.page - 1 if has_prev else None,
    }
