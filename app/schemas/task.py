from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import date, datetime
from app.models.tasks import TaskStatus, TaskPriority
from app.utils.sanitization import sanitize_string
from app.schemas.user import UserResponse, UserSummary


class TaskBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=150)
    description: str | None = None
    due_date: date | None = None

    @field_validator("title", "description", mode="before")
    @classmethod
    def sanitize(cls, v):
        return sanitize_string(v)


class TaskCreate(TaskBase):
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM


class TaskUpdate(BaseModel):
    # Only fields present in the payload are applied
    title: str | None = Field(None, min_length=1, max_length=150)
    description: str | None = None
    due_date: date | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None

    @field_validator("title", "description", mode="before")
    @classmethod
    def sanitize(cls, v):
        return sanitize_string(v)

    @field_validator("title", "status", "priority")
    @classmethod
    def not_null(cls, v, info):
        if v is None:
            raise ValueError(f"The {info.field_name} field may not be null.")
        return v


class Task(TaskBase):
    task_id: int
    status: TaskStatus
    priority: TaskPriority
    created_by: UserSummary | None = Field(None, validation_alias="creator")
    assigned_users: list[UserResponse] = Field(default_factory=list, validation_alias="assignees")
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class TaskFilters(BaseModel):
    """Filter, search, sort and pagination options for one task listing."""

    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    due_date: date | None = None
    search: str | None = None
    sort: str | None = None
    page: int = Field(1, ge=1)
    per_page: int = Field(10, ge=1)

    model_config = ConfigDict(frozen=True)


class AssignUser(BaseModel):
    user_id: int


class AssignTasks(BaseModel):
    task_ids: list[int] = Field(..., min_length=1)


class AssignedTasksCount(BaseModel):
    user_id: int
    assigned_tasks_count: int
