from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.dependencies import get_db, get_current_user, get_task_filters
from app.models.user import User as UserModel
from app.responses import api_response, paginated_response
from app.schemas.common import ApiResponse, PaginatedResponse
from app.schemas.task import AssignUser, Task as TaskSchema, TaskCreate, TaskFilters, TaskUpdate
from app.services import assignments as assignment_service
from app.services import lifecycle as lifecycle_service
from app.services import query as query_service
from app.services import tasks as task_service

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("", response_model=PaginatedResponse[TaskSchema])
async def list_tasks(
    request: Request,
    filters: TaskFilters = Depends(get_task_filters),
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    page = await query_service.list_visible_tasks(db, current_user.user_id, filters)
    return paginated_response(page, request)


@router.post("", response_model=ApiResponse[TaskSchema], status_code=status.HTTP_201_CREATED)
async def create_task(
    task_data: TaskCreate,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    task = await task_service.create_task(db, task_data, current_user.user_id)
    return api_response(
        TaskSchema.model_validate(task),
        "Task has been created successfully.",
        status.HTTP_201_CREATED,
    )


# Declared before /{task_id} so "trashed" is not parsed as an id
@router.get("/trashed", response_model=PaginatedResponse[TaskSchema])
async def list_trashed_tasks(
    request: Request,
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.DEFAULT_PER_PAGE, ge=1, le=settings.MAX_PER_PAGE),
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    result = await lifecycle_service.list_trashed(db, current_user.user_id, page, per_page)
    return paginated_response(result, request, "Trashed tasks fetched successfully.")


@router.get("/{task_id}", response_model=ApiResponse[TaskSchema])
async def get_task(
    task_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    task = await task_service.get_task(db, task_id, current_user.user_id)
    return api_response(TaskSchema.model_validate(task), "Task has been fetched successfully.")


@router.put("/{task_id}", response_model=ApiResponse[TaskSchema])
@router.patch("/{task_id}", response_model=ApiResponse[TaskSchema])
async def update_task(
    task_id: int,
    update_data: TaskUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    task = await task_service.update_task(db, task_id, update_data, current_user.user_id)
    return api_response(TaskSchema.model_validate(task), "Task has been updated successfully.")


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    await lifecycle_service.soft_delete(db, task_id, current_user.user_id)
    return None


@router.post("/{task_id}/assign", response_model=ApiResponse[None])
async def assign_task(
    task_id: int,
    payload: AssignUser,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    await assignment_service.assign_task_to_user(db, task_id, payload.user_id)
    return api_response(None, "Task has been assigned successfully.")


@router.delete("/{task_id}/assign/{user_id}", response_model=ApiResponse[None])
async def unassign_task(
    task_id: int,
    user_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    await assignment_service.unassign_task_from_user(db, task_id, user_id)
    return api_response(None, "Task has been unassigned successfully.")


@router.post("/{task_id}/restore", response_model=ApiResponse[TaskSchema])
async def restore_task(
    task_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    task = await lifecycle_service.restore(db, task_id, current_user.user_id)
    return api_response(TaskSchema.model_validate(task), "Task has been restored successfully.")


@router.delete("/{task_id}/force-delete", response_model=ApiResponse[None])
async def force_delete_task(
    task_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    await lifecycle_service.force_delete(db, task_id, current_user.user_id)
    return api_response(None, "Task has been permanently deleted.")
