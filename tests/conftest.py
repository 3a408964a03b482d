from datetime import date, datetime

import pytest
from faker import Faker
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.database import Base, get_db
from app.main import app
from app.models.tasks import Task, TaskPriority, TaskStatus, task_assignments
from app.models.user import User
from app.utils.security import create_access_token, get_password_hash

fake = Faker()

PASSWORD = "password"


@pytest.fixture(scope="session")
def password_hash() -> str:
    # bcrypt is slow, hash once for every user the tests create
    return get_password_hash(PASSWORD)


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db, password_hash):
    async def _make_user(name: str | None = None, email: str | None = None) -> User:
        user = User(
            name=name or fake.name(),
            email=(email or fake.unique.email()).lower(),
            hashed_password=password_hash,
        )
        db.add(user)
        await db.commit()
        return user

    return _make_user


@pytest.fixture
def make_task(db):
    async def _make_task(
        creator: User,
        assignees: tuple[User, ...] = (),
        title: str | None = None,
        description: str | None = None,
        status: TaskStatus = TaskStatus.TODO,
        priority: TaskPriority = TaskPriority.MEDIUM,
        due_date: date | None = None,
        created_at: datetime | None = None,
        deleted_at: datetime | None = None,
    ) -> Task:
        task = Task(
            title=title or f"Task {fake.unique.random_int(min=1, max=10**6)}",
            description=description if description is not None else "Generated task",
            status=status,
            priority=priority,
            due_date=due_date,
            creator_id=creator.user_id,
            deleted_at=deleted_at,
        )
        if created_at is not None:
            task.created_at = created_at
        task.assignees = list(assignees)
        db.add(task)
        await db.commit()
        return task

    return _make_task


@pytest.fixture
def auth_headers():
    def _auth_headers(user: User) -> dict[str, str]:
        token = create_access_token({"sub": str(user.user_id)})
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers


@pytest.fixture
def count_assignments(session_factory):
    """Count assignment rows with a fresh session, optionally for one task and/or user."""
    async def _count(task_id: int | None = None, user_id: int | None = None) -> int:
        stmt = select(func.count()).select_from(task_assignments)
        if task_id is not None:
            stmt = stmt.where(task_assignments.c.task_id == task_id)
        if user_id is not None:
            stmt = stmt.where(task_assignments.c.user_id == user_id)
        async with session_factory() as session:
            return (await session.execute(stmt)).scalar_one()

    return _count
