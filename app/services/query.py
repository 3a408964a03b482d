"""
Task query planning.

Every task listing goes through ``build_task_query``: a visibility scope,
the optional filters and search term, then ordering. Trashed tasks never
appear in these listings.
"""
import logging

from sqlalchemy import ColumnElement, Select, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.tasks import Task
from app.models.user import User
from app.schemas.task import TaskFilters
from app.services.pagination import Page, paginate

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = {
    "due_date": Task.due_date,
    "created_at": Task.created_at,
}
DEFAULT_SORT = "-created_at"


def visible_to(principal_id: int) -> ColumnElement[bool]:
    """Tasks the principal created or is assigned to."""
    return or_(
        Task.creator_id == principal_id,
        Task.assignees.any(User.user_id == principal_id),
    )


def assigned_to(user_id: int) -> ColumnElement[bool]:
    return Task.assignees.any(User.user_id == user_id)


def parse_sort(sort: str | None) -> tuple[str, bool]:
    """
    Resolve a sort expression like ``due_date`` or ``-created_at`` into
    ``(field, descending)``. Unknown fields fall back to the default.
    """
    if sort:
        descending = sort.startswith("-")
        name = sort.lstrip("-").strip()
        if name in SORTABLE_FIELDS:
            return name, descending
    return DEFAULT_SORT.lstrip("-"), True


def apply_filters(stmt: Select, filters: TaskFilters) -> Select:
    if filters.status is not None:
        stmt = stmt.where(Task.status == filters.status)
    if filters.priority is not None:
        stmt = stmt.where(Task.priority == filters.priority)
    if filters.due_date is not None:
        stmt = stmt.where(Task.due_date == filters.due_date)

    term = (filters.search or "").strip()
    if term:
        stmt = stmt.where(
            or_(
                Task.title.icontains(term, autoescape=True),
                Task.description.icontains(term, autoescape=True),
            )
        )
    return stmt


def apply_sort(stmt: Select, sort: str | None) -> Select:
    name, descending = parse_sort(sort)
    column = SORTABLE_FIELDS[name]
    if descending:
        return stmt.order_by(column.desc().nulls_last(), Task.task_id.desc())
    return stmt.order_by(column.asc().nulls_last(), Task.task_id.asc())


def build_task_query(scope: ColumnElement[bool], filters: TaskFilters) -> Select:
    stmt = (
        select(Task)
        .options(selectinload(Task.creator), selectinload(Task.assignees))
        .where(Task.deleted_at.is_(None), scope)
        .execution_options(populate_existing=True)
    )
    stmt = apply_filters(stmt, filters)
    return apply_sort(stmt, filters.sort)


async def list_visible_tasks(db: AsyncSession, principal_id: int, filters: TaskFilters) -> Page:
    stmt = build_task_query(visible_to(principal_id), filters)
    page = await paginate(db, stmt, filters.page, filters.per_page)
    logger.debug(
        "[QUERY] principal=%s filters=%s -> %s of %s",
        principal_id, filters.model_dump(exclude_none=True), len(page.items), page.total,
    )
    return page
