"""
Seed the database with users, tasks and assignments for local development.

    python -m app.scripts.populate_data --users 8 --tasks 60
"""
import argparse
import asyncio
import logging
import random
from datetime import date, timedelta

from faker import Faker

from app.database import AsyncSessionLocal, init_models
from app.logging_setup import setup_logging
from app.models.base import utcnow
from app.models.tasks import Task, TaskPriority, TaskStatus
from app.models.user import User
from app.utils.security import get_password_hash

logger = logging.getLogger(__name__)

fake = Faker()

DEFAULT_PASSWORD = "password"

TASK_TITLES = [
    "Prepare sprint review notes",
    "Fix login redirect loop",
    "Write onboarding checklist",
    "Migrate reports to new schema",
    "Review vendor contract",
    "Update API documentation",
    "Plan quarterly roadmap",
    "Clean up stale feature flags",
    "Audit access permissions",
    "Draft customer newsletter",
]


async def populate(num_users: int, num_tasks: int, trash_ratio: float) -> None:
    await init_models()
    hashed = get_password_hash(DEFAULT_PASSWORD)

    async with AsyncSessionLocal() as db:
        users = [
            User(name=fake.name(), email=fake.unique.email(), hashed_password=hashed)
            for _ in range(num_users)
        ]
        db.add_all(users)
        await db.flush()

        today = date.today()
        for _ in range(num_tasks):
            creator = random.choice(users)
            task = Task(
                title=random.choice(TASK_TITLES),
                description=fake.paragraph(),
                due_date=today + timedelta(days=random.randint(-10, 30)) if random.random() < 0.8 else None,
                status=random.choice(list(TaskStatus)),
                priority=random.choice(list(TaskPriority)),
                creator=creator,
            )
            others = [u for u in users if u is not creator]
            task.assignees = random.sample(others, k=min(len(others), random.randint(0, 3)))
            if random.random() < trash_ratio:
                task.deleted_at = utcnow()
            db.add(task)

        await db.commit()

    logger.info("[SEED] Created %s users and %s tasks (password: %r)", num_users, num_tasks, DEFAULT_PASSWORD)


def main() -> None:
    parser = argparse.ArgumentParser(description="Populate the task database with sample data")
    parser.add_argument("--users", type=int, default=8)
    parser.add_argument("--tasks", type=int, default=60)
    parser.add_argument("--trash-ratio", type=float, default=0.1)
    args = parser.parse_args()

    setup_logging()
    asyncio.run(populate(args.users, args.tasks, args.trash_ratio))


if __name__ == "__main__":
    main()
