import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from app.exceptions import NotFoundError
from app.models.tasks import Task
from app.schemas.task import TaskCreate, TaskUpdate
from app.services.query import visible_to

logger = logging.getLogger(__name__)


def task_select(*criteria):
    """Task select with creator and assignees eager-loaded (async sessions cannot lazy load)."""
    return (
        select(Task)
        .options(selectinload(Task.creator), selectinload(Task.assignees))
        .filter(*criteria)
        .execution_options(populate_existing=True)
    )


async def create_task(db: AsyncSession, task_data: TaskCreate, creator_id: int) -> Task:
    new_task = Task(
        title=task_data.title,
        description=task_data.description,
        due_date=task_data.due_date,
        status=task_data.status,
        priority=task_data.priority,
        creator_id=creator_id,
    )
    db.add(new_task)
    await db.commit()
    logger.info("[TASKS] Created task %s for user %s", new_task.task_id, creator_id)
    return await get_task(db, new_task.task_id)


async def get_task(db: AsyncSession, task_id: int, principal_id: int | None = None) -> Task:
    """
    Fetch an active task. With ``principal_id`` the task must also be
    visible to that user (creator or assignee).
    """
    criteria = [Task.task_id == task_id, Task.deleted_at.is_(None)]
    if principal_id is not None:
        criteria.append(visible_to(principal_id))

    result = await db.execute(task_select(*criteria))
    task = result.scalars().first()
    if not task:
        logger.warning("[TASKS] Task %s not found (principal=%s)", task_id, principal_id)
        raise NotFoundError("Task not found.")
    return task


async def update_task(
    db: AsyncSession, task_id: int, update_data: TaskUpdate, principal_id: int | None = None
) -> Task:
    task = await get_task(db, task_id, principal_id)

    changes = update_data.model_dump(exclude_unset=True)
    for key, value in changes.items():
        setattr(task, key, value)

    await db.commit()
    logger.info("[TASKS] Updated task %s fields=%s", task_id, sorted(changes))
    return await get_task(db, task_id)
