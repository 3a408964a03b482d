import math
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession


@dataclass
class Page:
    """One page of a result set plus the numbers needed to describe it."""

    items: list[Any] = field(default_factory=list)
    total: int = 0
    current_page: int = 1
    per_page: int = 10

    @property
    def last_page(self) -> int:
        return max(math.ceil(self.total / self.per_page), 1)

    @property
    def first_item(self) -> int | None:
        if not self.items:
            return None
        return (self.current_page - 1) * self.per_page + 1

    @property
    def last_item(self) -> int | None:
        if not self.items:
            return None
        return self.first_item + len(self.items) - 1

    @property
    def has_more_pages(self) -> bool:
        return self.current_page < self.last_page


async def paginate(db: AsyncSession, stmt: Select, page: int = 1, per_page: int = 10) -> Page:
    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    total = (await db.execute(count_stmt)).scalar_one()

    result = await db.execute(stmt.limit(per_page).offset((page - 1) * per_page))
    items = list(result.scalars().unique().all())
    return Page(items=items, total=total, current_page=page, per_page=per_page)
