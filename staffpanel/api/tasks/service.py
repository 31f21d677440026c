"""Tasks: admins create and edit; assignees move status only."""

from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from staffpanel.auth.models import User
from staffpanel.auth.schemas import CurrentUser
from staffpanel.auth.services import user_to_response
from staffpanel.core.enums import TaskStatus
from staffpanel.core.exceptions import bad_request, forbidden, not_found
from staffpanel.core.models import Task

from .schemas import TaskCreate, TaskUpdate, TaskWithUsers

STATUS_FIELD = "status"


def _task_to_response(t: Task) -> TaskWithUsers:
    return TaskWithUsers(
        id=t.id,
        title=t.title,
        description=t.description,
        priority=t.priority,
        status=t.status,
        assigned_to=t.assigned_to,
        created_by=t.created_by,
        due_date=t.due_date,
        created_at=t.created_at,
        assignee=user_to_response(t.assignee) if t.assignee is not None else None,
        creator=user_to_response(t.creator),
    )


def _with_users():
    return (
        selectinload(Task.assignee).selectinload(User.role),
        selectinload(Task.creator).selectinload(User.role),
    )


async def get_task(db: AsyncSession, task_id: int) -> Optional[Task]:
    return await db.get(Task, task_id)


async def get_task_with_users(db: AsyncSession, task_id: int) -> Optional[TaskWithUsers]:
    result = await db.execute(
        select(Task)
        .options(*_with_users())
        .where(Task.id == task_id)
        .execution_options(populate_existing=True)
    )
    task = result.scalar_one_or_none()
    return _task_to_response(task) if task is not None else None


async def list_all_tasks(db: AsyncSession) -> List[TaskWithUsers]:
    result = await db.execute(
        select(Task).options(*_with_users()).order_by(Task.created_at.desc(), Task.id.desc())
    )
    return [_task_to_response(t) for t in result.scalars().all()]


async def list_tasks_for_user(db: AsyncSession, user_id: int) -> List[TaskWithUsers]:
    result = await db.execute(
        select(Task)
        .options(*_with_users())
        .where(Task.assigned_to == user_id)
        .order_by(Task.created_at.desc(), Task.id.desc())
    )
    return [_task_to_response(t) for t in result.scalars().all()]


async def _ensure_user_exists(db: AsyncSession, user_id: int) -> None:
    if await db.get(User, user_id) is None:
        raise bad_request("Assigned user does not exist")


async def create_task(db: AsyncSession, creator_id: int, payload: TaskCreate) -> TaskWithUsers:
    if payload.assigned_to is not None:
        await _ensure_user_exists(db, payload.assigned_to)
    task = Task(
        title=payload.title,
        description=payload.description or None,
        priority=payload.priority.value,
        status=TaskStatus.PENDING.value,
        assigned_to=payload.assigned_to,
        created_by=creator_id,
        due_date=payload.due_date,
    )
    db.add(task)
    await db.commit()
    return await get_task_with_users(db, task.id)


async def _apply_details(db: AsyncSession, task: Task, payload: TaskUpdate) -> None:
    """Admin edit of everything except status; only fields present in the payload change.

    Validates before touching the row and leaves the commit to the caller.
    """
    fields = payload.model_fields_set - {STATUS_FIELD}
    if "title" in fields and not payload.title:
        raise bad_request("Title is required")
    if "assigned_to" in fields and payload.assigned_to is not None:
        await _ensure_user_exists(db, payload.assigned_to)

    if "title" in fields:
        task.title = payload.title
    if "description" in fields:
        task.description = payload.description or None
    if "priority" in fields and payload.priority is not None:
        task.priority = payload.priority.value
    if "assigned_to" in fields:
        task.assigned_to = payload.assigned_to
    if "due_date" in fields:
        task.due_date = payload.due_date


async def update_task(
    db: AsyncSession,
    current_user: CurrentUser,
    task_id: int,
    payload: TaskUpdate,
) -> Tuple[TaskWithUsers, bool]:
    """Apply an update as current_user. Returns (task, reassigned)."""
    task = await get_task(db, task_id)
    if task is None:
        raise not_found("Task")

    is_assignee = task.assigned_to is not None and task.assigned_to == current_user.id
    if not current_user.is_admin and not is_assignee:
        raise forbidden()

    detail_fields = payload.model_fields_set - {STATUS_FIELD}
    if detail_fields and not current_user.is_admin:
        raise forbidden("Only status can be changed by the assignee")

    status_sent = STATUS_FIELD in payload.model_fields_set
    if status_sent and payload.status is None:
        raise bad_request("status must be one of pending, in_progress, completed")

    previous_assignee = task.assigned_to
    if detail_fields:
        await _apply_details(db, task, payload)
    if status_sent:
        task.status = payload.status.value
    if detail_fields or status_sent:
        await db.commit()

    reassigned = task.assigned_to is not None and task.assigned_to != previous_assignee
    return await get_task_with_users(db, task_id), reassigned
