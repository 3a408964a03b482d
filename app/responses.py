from fastapi import Request

from app.schemas.common import PageLinks, PageMeta
from app.schemas.task import Task as TaskSchema
from app.services.pagination import Page


def api_response(data=None, message: str = "", status_code: int = 200) -> dict:
    return {
        "message": message,
        "success": True,
        "error": False,
        "statusCode": status_code,
        "data": data,
    }


def error_response(message: str, status_code: int, errors: dict | None = None) -> dict:
    body = {
        "message": message,
        "success": False,
        "error": True,
        "statusCode": status_code,
        "data": None,
    }
    if errors:
        body["errors"] = errors
    return body


def _page_url(request: Request, page: int) -> str:
    return str(request.url.include_query_params(page=page))


def paginated_response(page: Page, request: Request, message: str = "Tasks fetched successfully.") -> dict:
    """Envelope for a task page, with first/last/prev/next links that keep the other query params."""
    links = PageLinks(
        first=_page_url(request, 1),
        last=_page_url(request, page.last_page),
        prev=_page_url(request, page.current_page - 1) if page.current_page > 1 else None,
        next=_page_url(request, page.current_page + 1) if page.has_more_pages else None,
    )
    meta = PageMeta(
        current_page=page.current_page,
        from_=page.first_item,
        last_page=page.last_page,
        path=str(request.url.replace(query="")),
        per_page=page.per_page,
        to=page.last_item,
        total=page.total,
    )
    return {
        **api_response([TaskSchema.model_validate(t) for t in page.items], message),
        "links": links,
        "meta": meta,
    }
