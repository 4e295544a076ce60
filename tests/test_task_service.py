"""
Tests for task CRUD scoped by the authenticated identity.
"""

import uuid
from datetime import date
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from auth.gateway import register_user
from auth.models import AuthenticatedIdentity
from core import task_service
from core.errors import NotFound, StorageError
from database.models import TaskStatus
from database.tasks import get_task
from utils.schemas import TaskCreate, TaskUpdate


async def _identity(session, name: str, email: str, phone: str) -> AuthenticatedIdentity:
    user = await register_user(session, name, email, phone, "pw")
    await session.commit()
    return AuthenticatedIdentity(user_id=user.user_id)


def _new_task(**overrides) -> TaskCreate:
    fields = {
        "title": "Write report",
        "description": "Quarterly numbers",
        "dueDate": "2026-11-01",
    }
    fields.update(overrides)
    return TaskCreate.model_validate(fields)


class TestCreateAndList:
    @pytest.mark.asyncio
    async def test_create_defaults_to_pending_and_owner(self, session):
        alice = await _identity(session, "alice", "a@x.com", "555")

        task = await task_service.create_task(session, alice, _new_task())

        assert task.owner_id == alice.user_id
        assert task.status is TaskStatus.PENDING
        assert task.due_date == date(2026, 11, 1)

    @pytest.mark.asyncio
    async def test_explicit_status_is_kept(self, session):
        alice = await _identity(session, "alice", "a@x.com", "555")
        task = await task_service.create_task(
            session, alice, _new_task(status="InProgress")
        )
        assert task.status is TaskStatus.IN_PROGRESS

    @pytest.mark.asyncio
    async def test_list_is_scoped_to_owner(self, session):
        alice = await _identity(session, "alice", "a@x.com", "555")
        bob = await _identity(session, "bob", "b@x.com", "777")

        task = await task_service.create_task(session, alice, _new_task())
        await session.commit()

        alice_tasks = await task_service.list_tasks(session, alice)
        bob_tasks = await task_service.list_tasks(session, bob)

        assert [t.task_id for t in alice_tasks] == [task.task_id]
        assert bob_tasks == []


class TestUpdate:
    @pytest.mark.asyncio
    async def test_status_only_update_leaves_other_fields(self, session):
        alice = await _identity(session, "alice", "a@x.com", "555")
        task = await task_service.create_task(session, alice, _new_task())
        await session.commit()

        updated = await task_service.update_task(
            session, alice, str(task.task_id),
            TaskUpdate.model_validate({"status": "Completed"}),
        )

        assert updated.status is TaskStatus.COMPLETED
        assert updated.title == "Write report"
        assert updated.description == "Quarterly numbers"
        assert updated.due_date == date(2026, 11, 1)

    @pytest.mark.asyncio
    async def test_empty_update_is_a_no_op(self, session):
        alice = await _identity(session, "alice", "a@x.com", "555")
        task = await task_service.create_task(session, alice, _new_task())

        updated = await task_service.update_task(
            session, alice, str(task.task_id), TaskUpdate.model_validate({}),
        )
        assert updated.title == "Write report"
        assert updated.status is TaskStatus.PENDING

    @pytest.mark.asyncio
    async def test_unknown_id_is_not_found(self, session):
        alice = await _identity(session, "alice", "a@x.com", "555")
        with pytest.raises(NotFound):
            await task_service.update_task(
                session, alice, str(uuid.uuid4()),
                TaskUpdate.model_validate({"title": "x"}),
            )

    @pytest.mark.asyncio
    async def test_malformed_id_is_not_found(self, session):
        alice = await _identity(session, "alice", "a@x.com", "555")
        with pytest.raises(NotFound):
            await task_service.update_task(
                session, alice, "not-a-uuid", TaskUpdate.model_validate({}),
            )


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete_twice_is_not_found(self, session):
        alice = await _identity(session, "alice", "a@x.com", "555")
        task = await task_service.create_task(session, alice, _new_task())
        await session.commit()

        await task_service.delete_task(session, alice, str(task.task_id))
        await session.commit()
        assert await get_task(session, task.task_id) is None

        with pytest.raises(NotFound):
            await task_service.delete_task(session, alice, str(task.task_id))

    @pytest.mark.asyncio
    async def test_unknown_id_is_not_found(self, session):
        alice = await _identity(session, "alice", "a@x.com", "555")
        with pytest.raises(NotFound):
            await task_service.delete_task(session, alice, str(uuid.uuid4()))


class TestOwnershipOnMutation:
    """
    Update/delete look tasks up by id alone unless ownership enforcement is
    switched on.  Both behaviours are pinned here as a deliberate decision.
    """

    @pytest.mark.asyncio
    async def test_non_owner_may_update_when_not_enforced(self, session):
        alice = await _identity(session, "alice", "a@x.com", "555")
        bob = await _identity(session, "bob", "b@x.com", "777")
        task = await task_service.create_task(session, alice, _new_task())

        updated = await task_service.update_task(
            session, bob, str(task.task_id),
            TaskUpdate.model_validate({"title": "Hijacked"}),
            enforce_ownership=False,
        )
        assert updated.title == "Hijacked"
        assert updated.owner_id == alice.user_id

    @pytest.mark.asyncio
    async def test_non_owner_update_is_not_found_when_enforced(self, session):
        alice = await _identity(session, "alice", "a@x.com", "555")
        bob = await _identity(session, "bob", "b@x.com", "777")
        task = await task_service.create_task(session, alice, _new_task())

        with pytest.raises(NotFound):
            await task_service.update_task(
                session, bob, str(task.task_id),
                TaskUpdate.model_validate({"title": "Hijacked"}),
                enforce_ownership=True,
            )

    @pytest.mark.asyncio
    async def test_non_owner_delete_is_not_found_when_enforced(self, session):
        alice = await _identity(session, "alice", "a@x.com", "555")
        bob = await _identity(session, "bob", "b@x.com", "777")
        task = await task_service.create_task(session, alice, _new_task())

        with pytest.raises(NotFound):
            await task_service.delete_task(
                session, bob, str(task.task_id), enforce_ownership=True,
            )
        assert await get_task(session, task.task_id) is not None

    @pytest.mark.asyncio
    async def test_owner_may_delete_when_enforced(self, session):
        alice = await _identity(session, "alice", "a@x.com", "555")
        task = await task_service.create_task(session, alice, _new_task())

        await task_service.delete_task(
            session, alice, str(task.task_id), enforce_ownership=True,
        )
        assert await get_task(session, task.task_id) is None


class TestStorageFailures:
    @pytest.mark.asyncio
    async def test_failed_insert_raises_storage_error_and_rolls_back(self, session):
        alice = await _identity(session, "alice", "a@x.com", "555")

        with patch.object(session, "flush", AsyncMock(side_effect=SQLAlchemyError("disk full"))):
            with pytest.raises(StorageError):
                await task_service.create_task(session, alice, _new_task())

        assert await task_service.list_tasks(session, alice) == []

    @pytest.mark.asyncio
    async def test_failed_read_raises_storage_error(self, session):
        alice = await _identity(session, "alice", "a@x.com", "555")
        down = OperationalError("SELECT", {}, Exception("database is locked"))

        with patch.object(session, "execute", AsyncMock(side_effect=down)):
            with pytest.raises(StorageError):
                await task_service.list_tasks(session, alice)
            with pytest.raises(StorageError):
                await task_service.delete_task(session, alice, str(uuid.uuid4()))
