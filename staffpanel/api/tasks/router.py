from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from staffpanel.auth.dependencies import get_current_user
from staffpanel.auth.rbac import require_admin
from staffpanel.auth.schemas import CurrentUser
from staffpanel.core.email import send_task_assigned_email
from staffpanel.core.exceptions import ServiceError
from staffpanel.core.outbox import Outbox, get_outbox
from staffpanel.db.session import get_db

from . import service
from .schemas import TaskCreate, TaskUpdate, TaskWithUsers

router = APIRouter(prefix="/api/tasks", tags=["tasks"])

MY_TASKS = "my"


def _notify_assignee(outbox: Outbox, task: TaskWithUsers) -> None:
    assignee = task.assignee
    if assignee is None or not assignee.email:
        return
    outbox.add(
        send_task_assigned_email,
        assignee.email,
        assignee.name or assignee.username,
        task.title,
        task.description,
        task.due_date,
    )


@router.get("", response_model=List[TaskWithUsers])
async def list_tasks(
    my: Optional[str] = Query(None, description='"my" limits the list to tasks assigned to me'),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> List[TaskWithUsers]:
    """Admin: all tasks (unless my=my). Others: tasks assigned to them."""
    if current_user.is_admin and my != MY_TASKS:
        return await service.list_all_tasks(db)
    return await service.list_tasks_for_user(db, current_user.id)


@router.post("", response_model=TaskWithUsers, status_code=status.HTTP_201_CREATED)
async def create_task(
    payload: TaskCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
    outbox: Outbox = Depends(get_outbox),
) -> TaskWithUsers:
    try:
        task = await service.create_task(db, current_user.id, payload)
    except ServiceError as e:
        raise e.to_http()
    _notify_assignee(outbox, task)
    return task


@router.patch("/{task_id}", response_model=TaskWithUsers)
async def update_task(
    task_id: int,
    payload: TaskUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
    outbox: Outbox = Depends(get_outbox),
) -> TaskWithUsers:
    """Admin: any field. Assignee: status only."""
    try:
        task, reassigned = await service.update_task(db, current_user, task_id, payload)
    except ServiceError as e:
        raise e.to_http()
    if reassigned:
        _notify_assignee(outbox, task)
    return task
