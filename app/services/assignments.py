import logging

from sqlalchemy import delete, func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.exceptions import NotFoundError
from app.models.tasks import Task, task_assignments
from app.schemas.task import TaskFilters
from app.services.pagination import Page, paginate
from app.services.query import assigned_to, build_task_query
from app.services.users import get_user

logger = logging.getLogger(__name__)

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


async def _active_task_ids(db: AsyncSession, task_ids: list[int]) -> set[int]:
    result = await db.execute(
        select(Task.task_id).filter(Task.task_id.in_(task_ids), Task.deleted_at.is_(None))
    )
    return set(result.scalars().all())


async def _attach(db: AsyncSession, task_ids: list[int], user_id: int) -> int:
    """
    Insert (task, user) pairs, leaving pairs that already exist alone.

    The conflict is resolved by the unique key on the association table, so
    concurrent attaches of the same pair both succeed and only one row is
    written. Returns the number of new rows.
    """
    dialect = db.get_bind().dialect.name
    insert = _INSERT_BY_DIALECT.get(dialect)
    if insert is None:
        raise NotImplementedError(f"Assignments are not supported on {dialect!r}")

    stmt = (
        insert(task_assignments)
        .values([{"task_id": task_id, "user_id": user_id} for task_id in task_ids])
        .on_conflict_do_nothing(index_elements=["task_id", "user_id"])
    )
    result = await db.execute(stmt)
    await db.commit()
    return max(result.rowcount, 0)


async def assign_task_to_user(db: AsyncSession, task_id: int, user_id: int) -> bool:
    """
    Attach ``user_id`` to the task's assignees.

    Returns True when a new assignment row was created and False when the
    pair already existed.
    """
    if not await _active_task_ids(db, [task_id]):
        logger.warning("[ASSIGN] Task %s not found", task_id)
        raise NotFoundError("Task not found.")
    await get_user(db, user_id)

    created = await _attach(db, [task_id], user_id) > 0
    logger.info("[ASSIGN] Task %s -> user %s (%s)", task_id, user_id, "new" if created else "unchanged")
    return created


async def assign_tasks_to_user(db: AsyncSession, task_ids: list[int], user_id: int) -> int:
    """
    Attach one user to several tasks.

    Every id is checked before anything is written: one unknown or trashed
    task rejects the whole request. Returns the number of new assignments.
    """
    await get_user(db, user_id)

    wanted = list(dict.fromkeys(task_ids))
    found = await _active_task_ids(db, wanted)
    missing = [tid for tid in wanted if tid not in found]
    if missing:
        logger.warning("[ASSIGN] Bulk assign to user %s rejected, missing tasks %s", user_id, missing)
        raise NotFoundError(f"Tasks not found: {', '.join(str(m) for m in missing)}.")

    created = await _attach(db, wanted, user_id)
    logger.info("[ASSIGN] %s task(s) -> user %s, %s new", len(wanted), user_id, created)
    return created


async def unassign_task_from_user(db: AsyncSession, task_id: int, user_id: int) -> bool:
    if not await _active_task_ids(db, [task_id]):
        raise NotFoundError("Task not found.")
    await get_user(db, user_id)

    result = await db.execute(
        delete(task_assignments).where(
            task_assignments.c.task_id == task_id,
            task_assignments.c.user_id == user_id,
        )
    )
    await db.commit()
    removed = result.rowcount > 0
    if removed:
        logger.info("[ASSIGN] User %s removed from task %s", user_id, task_id)
    return removed


async def count_assigned_tasks(db: AsyncSession, user_id: int) -> int:
    """Active tasks assigned to the user; trashed tasks are not counted."""
    await get_user(db, user_id)
    result = await db.execute(
        select(func.count(Task.task_id)).filter(Task.deleted_at.is_(None), assigned_to(user_id))
    )
    return result.scalar_one()


async def list_assigned_tasks(db: AsyncSession, user_id: int, filters: TaskFilters) -> Page:
    await get_user(db, user_id)
    stmt = build_task_query(assigned_to(user_id), filters)
    return await paginate(db, stmt, filters.page, filters.per_page)
