from datetime import date

from fastapi import Depends, HTTPException, Query, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from jose import JWTError, jwt
from app.database import get_db as db_session
from app.config import settings
from app.models.tasks import TaskStatus, TaskPriority
from app.models.user import User as UserModel
from app.schemas.task import TaskFilters
from app.schemas.user import TokenData

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token")

def get_db(db: AsyncSession = Depends(db_session)):
    return db

async def get_current_user(
    db: AsyncSession = Depends(get_db),
    token: str = Depends(oauth2_scheme)
):
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        subject = payload.get("sub")
        if subject is None:
            raise credentials_exception
        token_data = TokenData(user_id=int(subject))
    except (JWTError, ValueError):
        raise credentials_exception

    result = await db.execute(select(UserModel).filter(UserModel.user_id == token_data.user_id))
    user = result.scalars().first()
    if user is None:
        raise credentials_exception
    return user

def get_task_filters(
    status: TaskStatus | None = None,
    priority: TaskPriority | None = None,
    due_date: date | None = None,
    search: str | None = Query(None, max_length=255),
    sort: str | None = Query(None, description="due_date or created_at, prefix with - for descending"),
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.DEFAULT_PER_PAGE, ge=1, le=settings.MAX_PER_PAGE),
) -> TaskFilters:
    return TaskFilters(
        status=status,
        priority=priority,
        due_date=due_date,
        search=search,
        sort=sort,
        page=page,
        per_page=per_page,
    )
