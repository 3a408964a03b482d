"""
Soft-delete lifecycle for tasks.

    ACTIVE --delete--> TRASHED --restore--> ACTIVE
    TRASHED --force_delete--> (erased)

Transitions not listed above are rejected with NotFoundError, the same
signal the caller gets for a task that does not exist.
"""
import enum
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import NotFoundError
from app.models.base import utcnow
from app.models.tasks import Task, TaskState
from app.services.pagination import Page, paginate
from app.services.tasks import get_task, task_select

logger = logging.getLogger(__name__)


class Action(str, enum.Enum):
    DELETE = "delete"
    RESTORE = "restore"
    FORCE_DELETE = "force_delete"


# action -> (required state, resulting state); None means the row is erased
TRANSITIONS: dict[Action, tuple[TaskState, TaskState | None]] = {
    Action.DELETE: (TaskState.ACTIVE, TaskState.TRASHED),
    Action.RESTORE: (TaskState.TRASHED, TaskState.ACTIVE),
    Action.FORCE_DELETE: (TaskState.TRASHED, None),
}


def transition(task: Task | None, action: Action) -> TaskState | None:
    """Check that ``action`` is allowed from the task's current state."""
    required, target = TRANSITIONS[action]
    if task is None or task.state is not required:
        raise NotFoundError("Task not found.")
    return target


async def _get_trashed(db: AsyncSession, task_id: int, principal_id: int | None) -> Task | None:
    criteria = [Task.task_id == task_id, Task.deleted_at.is_not(None)]
    if principal_id is not None:
        criteria.append(Task.creator_id == principal_id)
    result = await db.execute(task_select(*criteria))
    return result.scalars().first()


async def soft_delete(db: AsyncSession, task_id: int, principal_id: int | None = None) -> None:
    task = await get_task(db, task_id, principal_id)
    transition(task, Action.DELETE)

    task.deleted_at = utcnow()
    await db.commit()
    logger.info("[LIFECYCLE] Task %s moved to trash", task_id)


async def restore(db: AsyncSession, task_id: int, principal_id: int | None = None) -> Task:
    task = await _get_trashed(db, task_id, principal_id)
    try:
        transition(task, Action.RESTORE)
    except NotFoundError:
        logger.warning("[LIFECYCLE] Restore rejected: task %s is not in trash", task_id)
        raise

    task.deleted_at = None
    await db.commit()
    logger.info("[LIFECYCLE] Task %s restored", task_id)
    return await get_task(db, task_id)


async def force_delete(db: AsyncSession, task_id: int, principal_id: int | None = None) -> None:
    task = await _get_trashed(db, task_id, principal_id)
    try:
        transition(task, Action.FORCE_DELETE)
    except NotFoundError:
        logger.warning("[LIFECYCLE] Force delete rejected: task %s is not in trash", task_id)
        raise

    # assignees are loaded, so the ORM removes the association rows with the task
    await db.delete(task)
    await db.commit()
    logger.info("[LIFECYCLE] Task %s permanently deleted", task_id)


async def list_trashed(db: AsyncSession, principal_id: int, page: int = 1, per_page: int = 10) -> Page:
    stmt = (
        task_select(Task.deleted_at.is_not(None), Task.creator_id == principal_id)
        .order_by(Task.deleted_at.desc(), Task.task_id.desc())
    )
    return await paginate(db, stmt, page, per_page)

