from typing import Generic, TypeVar
from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    message: str
    success: bool = True
    error: bool = False
    statusCode: int = 200
    data: T | None = None


class PageLinks(BaseModel):
    first: str
    last: str
    prev: str | None = None
    next: str | None = None


class PageMeta(BaseModel):
    current_page: int
    from_: int | None = Field(None, alias="from")
    last_page: int
    path: str
    per_page: int
    to: int | None = None
    total: int

    model_config = ConfigDict(populate_by_name=True)


class PaginatedResponse(BaseModel, Generic[T]):
    message: str
    success: bool = True
    error: bool = False
    statusCode: int = 200
    data: list[T] = Field(default_factory=list)
    links: PageLinks
    meta: PageMeta
