# taskhub/routers/tasks.py
# PURPOSE: /tasks CRUD; every route is owner-scoped to the bearer's user.

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from ..api.deps import get_task_filter
from ..auth import get_current_user
from ..db import get_db
from ..errors import NotFoundError
from ..filters import TaskFilter
from ..models import CurrentUser, DeleteResult, Task, TaskCreate, TaskPage, TaskUpdate
from ..store_db import (
    create_task as db_create_task,
    delete_task as db_delete_task,
    get_task as db_get_task,
    list_tasks as db_list_tasks,
    update_task as db_update_task,
)

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("", response_model=TaskPage)
def list_tasks(
    flt: TaskFilter = Depends(get_task_filter),
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    rows, total = db_list_tasks(db, user.user_id, flt)
    return {"data": rows, "meta": flt.meta(total)}


@router.post("", response_model=Task, status_code=status.HTTP_201_CREATED)
def create_task(
    item: TaskCreate,
    response: Response,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    task = db_create_task(db, item, owner_id=user.user_id)
    response.headers["Location"] = f"/tasks/{task.id}"
    return task


@router.get("/{task_id}", response_model=Task)
def get_task(
    task_id: str,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    task = db_get_task(db, task_id, owner_id=user.user_id)
    if task is None:
        raise NotFoundError("Task", task_id)
    return task


@router.patch("/{task_id}", response_model=Task)
def patch_task(
    task_id: str,
    item: TaskUpdate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    updated = db_update_task(db, task_id, item, owner_id=user.user_id)
    if updated is None:
        raise NotFoundError("Task", task_id)
    return updated


@router.delete("/{task_id}", response_model=DeleteResult)
def delete_task(
    task_id: str,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    if not db_delete_task(db, task_id, owner_id=user.user_id):
        raise NotFoundError("Task", task_id)
    return DeleteResult(success=True, message="Task deleted successfully")
