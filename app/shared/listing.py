"""Pagination and sorting shared by list endpoints"""

import math
from typing import Any, Callable, Optional, Union

from sqlalchemy.orm import Query

MAX_PAGE_SIZE = 100


def paginate(source: Union[Query, list], page: int = 1, limit: int = 20) -> tuple[list, dict]:
    """
    Slice a query or an in-memory list.

    Returns (items, {"page", "limit", "total", "pages"}); page is at least 1 and
    limit is clamped to 1..100.
    """
    page = max(1, page or 1)
    limit = min(max(1, limit or 1), MAX_PAGE_SIZE)
    offset = (page - 1) * limit

    if isinstance(source, Query):
        total = source.order_by(None).count()
        items = source.offset(offset).limit(limit).all()
    else:
        total = len(source)
        items = source[offset : offset + limit]

    pagination = {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit) if total else 0,
    }
    return items, pagination


def sort_records(
    items: list,
    sort_by: Optional[str],
    direction: str = "desc",
    key: Optional[Callable[[Any], Any]] = None,
) -> list:
    """
    Sort dicts or objects by a field; records missing the field always go last.
    """
    if not sort_by and key is None:
        return list(items)

    def read(item):
        if key is not None:
            return key(item)
        if isinstance(item, dict):
            return item.get(sort_by)
        return getattr(item, sort_by, None)

    present = [item for item in items if read(item) is not None]
    missing = [item for item in items if read(item) is None]

    def sort_key(item):
        value = read(item)
        return value.lower() if isinstance(value, str) else value

    present.sort(key=sort_key, reverse=direction == "desc")
    return present + missing
