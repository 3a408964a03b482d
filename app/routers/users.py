from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.dependencies import get_db, get_current_user, get_task_filters
from app.models.user import User as UserModel
from app.responses import api_response, paginated_response
from app.schemas.common import ApiResponse, PaginatedResponse
from app.schemas.task import AssignTasks, AssignedTasksCount, Task as TaskSchema, TaskFilters
from app.services import assignments as assignment_service

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/{user_id}/assign-tasks", response_model=ApiResponse[None])
async def assign_tasks(
    user_id: int,
    payload: AssignTasks,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    await assignment_service.assign_tasks_to_user(db, payload.task_ids, user_id)
    return api_response(None, "Tasks have been assigned successfully.")


@router.get("/{user_id}/assigned-tasks-count", response_model=ApiResponse[AssignedTasksCount])
async def assigned_tasks_count(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    count = await assignment_service.count_assigned_tasks(db, user_id)
    return api_response(
        AssignedTasksCount(user_id=user_id, assigned_tasks_count=count),
        "Assigned tasks count fetched successfully.",
    )


@router.get("/{user_id}/assigned-tasks", response_model=PaginatedResponse[TaskSchema])
async def assigned_tasks(
    user_id: int,
    request: Request,
    filters: TaskFilters = Depends(get_task_filters),
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    page = await assignment_service.list_assigned_tasks(db, user_id, filters)
    return paginated_response(page, request, "Assigned tasks fetched successfully.")
