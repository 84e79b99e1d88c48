# PURPOSE: task and user persistence on top of a SQLAlchemy session.
# Every task operation takes owner_id; rows owned by someone else look absent.

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from sqlalchemy import func, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .db_models import TaskDB, UserDB, now_utc
from .errors import ConflictError, StorageUnavailable
from .filters import TaskFilter, apply_ordering
from .models import TaskCreate, TaskUpdate, as_utc

logger = logging.getLogger(__name__)

# Columns that may not be cleared by PATCH with an explicit null.
_REQUIRED_TASK_FIELDS = ("title", "status", "priority")


def _storage_failure(db: Session, exc: SQLAlchemyError) -> StorageUnavailable:
    db.rollback()
    logger.error("storage error: %s", exc.__class__.__name__)
    return StorageUnavailable()


def ping(db: Session) -> None:
    """Round-trip to the database; StorageUnavailable when it cannot answer."""
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        raise _storage_failure(db, exc) from exc


# --- Tasks: queries ------------------------------------------------------------


def list_tasks(db: Session, owner_id: str, flt: TaskFilter) -> Tuple[List[TaskDB], int]:
    """Return (rows for the requested page, total matching rows)."""
    clauses = flt.predicates(owner_id)
    try:
        total = int(db.query(func.count(TaskDB.id)).filter(*clauses).scalar() or 0)
        if flt.skip >= total:
            # past the last page; also keeps huge offsets out of the SQL
            return [], total
        query = apply_ordering(db.query(TaskDB).filter(*clauses))
        rows = query.offset(flt.skip).limit(min(flt.limit, total - flt.skip)).all()
    except SQLAlchemyError as exc:
        raise _storage_failure(db, exc) from exc
    return rows, total


def get_task(db: Session, task_id: str, *, owner_id: str) -> Optional[TaskDB]:
    """Fetch a single task owned by owner_id."""
    try:
        return (
            db.query(TaskDB)
            .filter(TaskDB.id == task_id, TaskDB.user_id == owner_id)
            .one_or_none()
        )
    except SQLAlchemyError as exc:
        raise _storage_failure(db, exc) from exc


# --- Tasks: writes -------------------------------------------------------------


def create_task(db: Session, data: TaskCreate, *, owner_id: str) -> TaskDB:
    now = now_utc()
    row = TaskDB(
        title=data.title,
        description=data.description,
        due_date=as_utc(data.due_date),
        status=data.status,
        priority=data.priority,
        notification_sent=False,
        user_id=owner_id,
        created_at=now,
        updated_at=now,
    )
    try:
        db.add(row)
        db.commit()
        db.refresh(row)
    except SQLAlchemyError as exc:
        raise _storage_failure(db, exc) from exc
    return row


def update_task(db: Session, task_id: str, data: TaskUpdate, *, owner_id: str) -> Optional[TaskDB]:
    """Partial update (PATCH). Returns updated row or None if not found.

    Only fields present in the body are touched; description and dueDate may
    be cleared with null, the required columns ignore null.
    """
    row = get_task(db, task_id, owner_id=owner_id)
    if row is None:
        return None
    for field, value in data.model_dump(exclude_unset=True).items():
        if value is None and field in _REQUIRED_TASK_FIELDS:
            continue
        if field == "due_date":
            value = as_utc(value)
        setattr(row, field, value)
    row.updated_at = now_utc()
    try:
        db.add(row)
        db.commit()
        db.refresh(row)
    except SQLAlchemyError as exc:
        raise _storage_failure(db, exc) from exc
    return row


def delete_task(db: Session, task_id: str, *, owner_id: str) -> bool:
    """Delete a task; returns True if deleted, False if not found."""
    row = get_task(db, task_id, owner_id=owner_id)
    if row is None:
        return False
    try:
        db.delete(row)
        db.commit()
    except SQLAlchemyError as exc:
        raise _storage_failure(db, exc) from exc
    return True


# --- Users ---------------------------------------------------------------------


def get_user_by_email(db: Session, email: str) -> Optional[UserDB]:
    try:
        return db.query(UserDB).filter(UserDB.email == email).one_or_none()
    except SQLAlchemyError as exc:
        raise _storage_failure(db, exc) from exc


def get_user(db: Session, user_id: str) -> Optional[UserDB]:
    try:
        return db.get(UserDB, user_id)
    except SQLAlchemyError as exc:
        raise _storage_failure(db, exc) from exc


def create_user(
    db: Session,
    *,
    name: str,
    email: str,
    password_hash: str,
    role: str = "USER",
    email_notifications: bool = True,
) -> UserDB:
    now = now_utc()
    row = UserDB(
        name=name,
        email=email,
        password_hash=password_hash,
        role=role,
        email_notifications=email_notifications,
        created_at=now,
        updated_at=now,
    )
    try:
        db.add(row)
        db.commit()
        db.refresh(row)
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("Email already registered") from exc
    except SQLAlchemyError as exc:
        raise _storage_failure(db, exc) from exc
    return row


def update_user(db: Session, row: UserDB, **fields) -> UserDB:
    for field, value in fields.items():
        setattr(row, field, value)
    row.updated_at = now_utc()
    try:
        db.add(row)
        db.commit()
        db.refresh(row)
    except SQLAlchemyError as exc:
        raise _storage_failure(db, exc) from exc
    return row
