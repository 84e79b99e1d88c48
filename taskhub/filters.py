"""Task query builder: turns raw list parameters into SQL predicates and paging.

``TaskFilter.from_params`` accepts the untyped values a client sends
(``search``, ``status``, ``priority``, ``page``, ``limit``) and validates them
before anything touches the database. The resulting filter yields the
owner-scoped predicate list, the offset, and the ``meta`` block of the page
envelope.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy import or_

from .config import settings
from .db_models import TaskDB
from .errors import ValidationError
from .models import PRIORITIES, STATUSES

DEFAULT_PAGE = 1


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _parse_enum(field: str, value: Any, allowed: tuple[str, ...]) -> Optional[str]:
    if _blank(value):
        return None
    if value in allowed:
        return value
    raise ValidationError(field, f"{field} must be one of: {', '.join(allowed)}", value)


def _parse_int(field: str, value: Any) -> Optional[int]:
    if _blank(value):
        return None
    if isinstance(value, bool):
        raise ValidationError(field, "Input should be a valid integer", value)
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError as err:
        raise ValidationError(
            field, "Input should be a valid integer, unable to parse string as an integer", value
        ) from err


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def last_page(total: int, limit: int) -> int:
    """ceil(total / limit); 0 when there is nothing to show."""
    if total <= 0:
        return 0
    return -(-total // limit)


def page_meta(total: int, page: int, limit: int) -> dict[str, int]:
    return {"total": total, "page": page, "last_page": last_page(total, limit)}


@dataclass(frozen=True)
class TaskFilter:
    search: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    page: int = DEFAULT_PAGE
    limit: int = 10

    @classmethod
    def from_params(
        cls,
        *,
        search: Any = None,
        status: Any = None,
        priority: Any = None,
        page: Any = None,
        limit: Any = None,
    ) -> "TaskFilter":
        """Validate raw parameters; raise ValidationError naming the bad field."""
        status_v = _parse_enum("status", status, STATUSES)
        priority_v = _parse_enum("priority", priority, PRIORITIES)

        page_v = _parse_int("page", page)
        if page_v is None or page_v < 1:
            page_v = DEFAULT_PAGE

        limit_v = _parse_int("limit", limit)
        if limit_v is None or limit_v <= 0:
            limit_v = settings.TASKS_DEFAULT_LIMIT

        # blank check only; surrounding spaces are part of the substring
        search_v = None if _blank(search) else str(search)
        return cls(
            search=search_v,
            status=status_v,
            priority=priority_v,
            page=page_v,
            limit=limit_v,
        )

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def predicates(self, owner_id: str) -> list:
        """Owner scope AND every constraint the caller supplied."""
        clauses = [TaskDB.user_id == owner_id]
        if self.status:
            clauses.append(TaskDB.status == self.status)
        if self.priority:
            clauses.append(TaskDB.priority == self.priority)
        if self.search:
            like = f"%{_escape_like(self.search)}%"
            clauses.append(
                or_(
                    TaskDB.title.ilike(like, escape="\\"),
                    TaskDB.description.ilike(like, escape="\\"),
                )
            )
        return clauses

    def meta(self, total: int) -> dict[str, int]:
        return page_meta(total, self.page, self.limit)


def apply_ordering(query):
    """Newest first; id breaks ties so pages never overlap or skip rows."""
    return query.order_by(TaskDB.created_at.desc(), TaskDB.id.desc())
