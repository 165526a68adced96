from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class PageResult:
    items: list[Any]
    total: int
    page: int
    page_size: int

    def to_dict(self) -> dict[str, Any]:
        return {"items": self.items, "total": self.total, "page": self.page, "page_size": self.page_size}


def clamp(
    page: int | None,
    page_size: int | None,
    *,
    default_page_size: int = DEFAULT_PAGE_SIZE,
    max_page_size: int = MAX_PAGE_SIZE,
) -> tuple[int, int]:
    """
    Bound a requested window: page >= 1, 1 <= page_size <= max_page_size <= 100.

    A missing or non-positive page size falls back to the default rather than 1.
    """

    page = page if page and page >= 1 else 1
    if not page_size or page_size < 1:
        page_size = default_page_size
    return page, min(page_size, max_page_size, MAX_PAGE_SIZE)


def paginate(
    db: Session,
    stmt: Select[Any],
    page: int | None,
    page_size: int | None,
    *,
    default_page_size: int = DEFAULT_PAGE_SIZE,
    max_page_size: int = MAX_PAGE_SIZE,
) -> PageResult:
    """
    Count and fetch one window of an already scoped statement.

    `total` is the size of the whole scoped set, independent of the window.
    """

    page, page_size = clamp(page, page_size, default_page_size=default_page_size, max_page_size=max_page_size)

    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    total = db.scalar(count_stmt) or 0

    window = stmt.offset((page - 1) * page_size).limit(page_size)
    items = list(db.scalars(window).all())
    return PageResult(items=items, total=total, page=page, page_size=page_size)
