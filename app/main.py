import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import settings
from app.database import init_models
from app.exceptions import TaskManagerError, ValidationError
from app.logging_setup import setup_logging
from app.responses import error_response
from app.routers.auth import router as auth_router
from app.routers.tasks import router as tasks_router
from app.routers.users import router as users_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    await init_models()
    logger.info("[STARTUP] Task API ready")
    yield
    logger.info("[SHUTDOWN] Task API stopping")


app = FastAPI(
    lifespan=lifespan,
    title="Task Manager API",
    description="Multi-user task management with assignment, filtering and soft delete",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(TaskManagerError)
async def task_manager_error_handler(request: Request, exc: TaskManagerError):
    errors = exc.errors if isinstance(exc, ValidationError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(exc.message, exc.status_code, errors),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors: dict[str, list[str]] = {}
    for err in exc.errors():
        # drop the "body"/"query"/"path" location prefix
        loc = [str(part) for part in err.get("loc", ())[1:]] or ["request"]
        errors.setdefault(".".join(loc), []).append(err.get("msg", "Invalid value"))
    logger.warning("[VALIDATION] %s %s rejected: %s", request.method, request.url.path, errors)
    return JSONResponse(
        status_code=422,
        content=jsonable_encoder(error_response("The given data was invalid.", 422, errors)),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(str(exc.detail), exc.status_code),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("[DB] %s %s failed", request.method, request.url.path)
    return JSONResponse(status_code=500, content=error_response("Internal Server Error", 500))


# Global handler so unexpected failures never leak internals
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("[ERROR] Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=error_response("Internal Server Error", 500))


app.include_router(auth_router, prefix="/api/v1")
app.include_router(tasks_router, prefix="/api/v1")
app.include_router(users_router, prefix="/api/v1")


@app.get("/")
def root():
    return {"message": "Task Manager API running"}
