import asyncio
from datetime import datetime, timezone

import pytest

from app.exceptions import NotFoundError
from app.schemas.task import TaskFilters
from app.services.assignments import (
    assign_task_to_user,
    assign_tasks_to_user,
    count_assigned_tasks,
    list_assigned_tasks,
    unassign_task_from_user,
)
from app.services.tasks import get_task

TRASHED_AT = datetime(2026, 2, 1, tzinfo=timezone.utc)


class TestAssignTaskToUser:
    async def test_assign_creates_one_row(self, db, make_user, make_task, count_assignments):
        owner, assignee = await make_user(), await make_user()
        task = await make_task(owner)

        assert await assign_task_to_user(db, task.task_id, assignee.user_id) is True
        assert await count_assignments(task.task_id, assignee.user_id) == 1

    async def test_assign_twice_is_idempotent(self, db, make_user, make_task, count_assignments):
        owner, assignee = await make_user(), await make_user()
        task = await make_task(owner)

        await assign_task_to_user(db, task.task_id, assignee.user_id)
        assert await assign_task_to_user(db, task.task_id, assignee.user_id) is False
        assert await count_assignments(task.task_id, assignee.user_id) == 1

    async def test_concurrent_assign_of_same_pair(self, session_factory, make_user, make_task, count_assignments):
        owner, assignee = await make_user(), await make_user()
        task = await make_task(owner)

        async def attach():
            async with session_factory() as session:
                return await assign_task_to_user(session, task.task_id, assignee.user_id)

        results = await asyncio.gather(attach(), attach())

        assert sorted(results) == [False, True]
        assert await count_assignments(task.task_id, assignee.user_id) == 1

    async def test_assignee_visible_on_reload_in_same_session(self, db, make_user, make_task):
        owner, assignee = await make_user(), await make_user()
        task = await make_task(owner)

        await assign_task_to_user(db, task.task_id, assignee.user_id)

        reloaded = await get_task(db, task.task_id)
        assert [u.user_id for u in reloaded.assignees] == [assignee.user_id]

    async def test_existing_assignees_are_kept(self, db, make_user, make_task, count_assignments):
        owner, first, second = await make_user(), await make_user(), await make_user()
        task = await make_task(owner, assignees=(first,))

        await assign_task_to_user(db, task.task_id, second.user_id)
        assert await count_assignments(task.task_id) == 2

    async def test_unknown_task(self, db, make_user):
        user = await make_user()
        with pytest.raises(NotFoundError):
            await assign_task_to_user(db, 9999, user.user_id)

    async def test_trashed_task(self, db, make_user, make_task, count_assignments):
        owner, assignee = await make_user(), await make_user()
        task = await make_task(owner, deleted_at=TRASHED_AT)

        with pytest.raises(NotFoundError):
            await assign_task_to_user(db, task.task_id, assignee.user_id)
        assert await count_assignments(task.task_id) == 0

    async def test_unknown_user(self, db, make_user, make_task):
        task = await make_task(await make_user())
        with pytest.raises(NotFoundError):
            await assign_task_to_user(db, task.task_id, 9999)


class TestAssignTasksToUser:
    async def test_bulk_assign(self, db, make_user, make_task, count_assignments):
        owner, assignee = await make_user(), await make_user()
        t1, t2 = await make_task(owner), await make_task(owner)

        created = await assign_tasks_to_user(db, [t1.task_id, t2.task_id, t1.task_id], assignee.user_id)
        assert created == 2
        assert await count_assignments(user_id=assignee.user_id) == 2

    async def test_bulk_assign_skips_existing_pairs(self, db, make_user, make_task, count_assignments):
        owner, assignee = await make_user(), await make_user()
        t1 = await make_task(owner, assignees=(assignee,))
        t2 = await make_task(owner)

        assert await assign_tasks_to_user(db, [t1.task_id, t2.task_id], assignee.user_id) == 1
        assert await count_assignments(user_id=assignee.user_id) == 2

    async def test_missing_task_rejects_whole_batch(self, db, make_user, make_task, count_assignments):
        owner, assignee = await make_user(), await make_user()
        t1, t3 = await make_task(owner), await make_task(owner)

        with pytest.raises(NotFoundError) as excinfo:
            await assign_tasks_to_user(db, [t1.task_id, 9999, t3.task_id], assignee.user_id)

        assert "9999" in excinfo.value.message
        assert await count_assignments(user_id=assignee.user_id) == 0

    async def test_trashed_task_rejects_whole_batch(self, db, make_user, make_task, count_assignments):
        owner, assignee = await make_user(), await make_user()
        t1 = await make_task(owner)
        trashed = await make_task(owner, deleted_at=TRASHED_AT)

        with pytest.raises(NotFoundError):
            await assign_tasks_to_user(db, [t1.task_id, trashed.task_id], assignee.user_id)
        assert await count_assignments(user_id=assignee.user_id) == 0

    async def test_unknown_user(self, db, make_user, make_task):
        task = await make_task(await make_user())
        with pytest.raises(NotFoundError):
            await assign_tasks_to_user(db, [task.task_id], 9999)


class TestUnassign:
    async def test_unassign_keeps_other_assignees(self, db, make_user, make_task, count_assignments):
        owner, a, b = await make_user(), await make_user(), await make_user()
        task = await make_task(owner, assignees=(a, b))

        assert await unassign_task_from_user(db, task.task_id, a.user_id) is True
        assert await count_assignments(task.task_id) == 1
        assert await count_assignments(task.task_id, b.user_id) == 1

    async def test_unassign_absent_pair_is_noop(self, db, make_user, make_task):
        owner, other = await make_user(), await make_user()
        task = await make_task(owner)

        assert await unassign_task_from_user(db, task.task_id, other.user_id) is False


class TestAssignedTasks:
    async def test_count_excludes_trashed(self, db, make_user, make_task):
        owner, assignee = await make_user(), await make_user()
        await make_task(owner, assignees=(assignee,))
        await make_task(owner, assignees=(assignee,))
        await make_task(owner, assignees=(assignee,), deleted_at=TRASHED_AT)
        await make_task(assignee)  # created, not assigned

        assert await count_assigned_tasks(db, assignee.user_id) == 2

    async def test_count_unknown_user(self, db):
        with pytest.raises(NotFoundError):
            await count_assigned_tasks(db, 9999)

    async def test_list_uses_assignee_scope_only(self, db, make_user, make_task):
        owner, assignee = await make_user(), await make_user()
        await make_task(owner, assignees=(assignee,), title="Assigned")
        await make_task(assignee, title="Own task")

        page = await list_assigned_tasks(db, assignee.user_id, TaskFilters())
        assert [t.title for t in page.items] == ["Assigned"]

    async def test_list_applies_search(self, db, make_user, make_task):
        owner, assignee = await make_user(), await make_user()
        await make_task(owner, assignees=(assignee,), title="Invoice run")
        await make_task(owner, assignees=(assignee,), title="Team lunch")

        page = await list_assigned_tasks(db, assignee.user_id, TaskFilters(search="invoice"))
        assert [t.title for t in page.items] == ["Invoice run"]
