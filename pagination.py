"""
Page/limit windowing over a composed query.

A page is the slice ``[(page-1)*limit, page*limit)`` of the full ordered
result; ``totalDocs`` counts the filtered set before windowing.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, List, Optional

from pymongo.database import Database

from config import DEFAULT_LIMIT, DEFAULT_PAGE
from queries import Query

logger = logging.getLogger(__name__)

MAX_WINDOW_VALUE = 2 ** 31 - 1


@dataclass
class Page:
    page: int
    limit: int
    totalDocs: int
    docs: List[dict] = field(default_factory=list)

    @property
    def totalPages(self) -> int:
        return math.ceil(self.totalDocs / self.limit) if self.totalDocs else 0

    @property
    def hasNextPage(self) -> bool:
        return self.page * self.limit < self.totalDocs

    @property
    def hasPrevPage(self) -> bool:
        return self.page > 1

    def to_dict(self, key: str = "docs") -> dict:
        return {
            key: self.docs,
            "page": self.page,
            "limit": self.limit,
            "totalDocs": self.totalDocs,
            "totalPages": self.totalPages,
            "hasNextPage": self.hasNextPage,
            "hasPrevPage": self.hasPrevPage,
        }


def coerce_positive(value: Any, default: int) -> int:
    """Read a page/limit parameter; anything missing, non-numeric or below 1 gets the default."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        try:
            number = int(float(value))
        except (TypeError, ValueError, OverflowError):
            return default
    if number < 1:
        return default
    # keeps (page-1)*limit inside BSON int64
    return min(number, MAX_WINDOW_VALUE)


def paginate(database: Database, query: Query, page: Optional[Any] = None,
             limit: Optional[Any] = None) -> Page:
    page = coerce_positive(page, DEFAULT_PAGE)
    limit = coerce_positive(limit, DEFAULT_LIMIT)
    total = query.count(database)
    docs = query.fetch(database, skip=(page - 1) * limit, limit=limit) if (page - 1) * limit < total else []
    logger.debug("Paginated %s: page=%d limit=%d total=%d", query.collection, page, limit, total)
    return Page(page=page, limit=limit, totalDocs=total, docs=docs)
