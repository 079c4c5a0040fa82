# app/services/pagination.py
"""Page-number pagination shared by every listing."""

import math
from dataclasses import dataclass
from typing import Any, List, Optional

from app.config import settings


@dataclass
class Page:
    items: List[Any]
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    def meta(self) -> dict:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "pages": self.pages,
            "has_next": self.page < self.pages,
            "has_prev": self.page > 1,
        }


def clamp(page: Optional[int], limit: Optional[int]):
    page = max(1, int(page or 1))
    limit = int(limit or settings.DEFAULT_PAGE_SIZE)
    limit = max(1, min(limit, settings.MAX_PAGE_SIZE))
    return page, limit


def paginate(query, page: Optional[int] = None, limit: Optional[int] = None) -> Page:
    """Apply offset/limit to an ordered query and count the unpaged total."""
    page, limit = clamp(page, limit)
    total = query.order_by(None).count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    return Page(items=items, page=page, limit=limit, total=total)
