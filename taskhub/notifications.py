"""
Due-soon notifications.

Two pieces:
- evaluate_due_soon(): a pure function over a task snapshot that returns one
  notification per task due today or tomorrow (calendar days, local time).
- NotificationPoller: a small polling loop that re-fetches the snapshot on a
  fixed interval and replaces its notification list with the fresh result.

Nothing here is persisted. The same task yields the same notification on every
cycle until it is completed, its due date moves, or the window passes.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from typing import Any, Awaitable, Callable, Iterable, Mapping, Sequence

from .errors import SnapshotFetchFailure

logger = logging.getLogger(__name__)

# CANCELLED is not excluded; only completion silences a task.
EXCLUDED_STATUS = "COMPLETED"


@dataclass(slots=True, frozen=True)
class Notification:
    id: str
    task_id: str
    message: str
    due_date: datetime

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "taskId": self.task_id,
            "message": self.message,
            "dueDate": self.due_date.isoformat(),
        }


def _field(task: Any, *names: str) -> Any:
    """Read a task field from a mapping (API JSON) or an object (ORM/pydantic)."""
    for name in names:
        if isinstance(task, Mapping):
            if name in task:
                return task[name]
        elif hasattr(task, name):
            return getattr(task, name)
    return None


def _parse_datetime(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        logger.warning("ignoring unparseable due date %r", value)
        return None


def local_date(moment: datetime, tz: tzinfo | None = None) -> date:
    """Calendar day of `moment` in local time.

    Aware datetimes are converted to `tz` (system local zone when None);
    naive datetimes are taken as already local.
    """
    if moment.tzinfo is not None:
        moment = moment.astimezone(tz)
    return moment.date()


def due_message(title: str, due_day: date, today: date) -> str | None:
    if due_day == today:
        return f'The task "{title}" is due today'
    if due_day == today + timedelta(days=1):
        return f'The task "{title}" is due tomorrow'
    return None


def due_label(due_date: datetime, now: datetime, tz: tzinfo | None = None) -> str:
    """Short relative label for a due date: Today, Tomorrow, or the ISO date."""
    today = local_date(now, tz)
    due_day = local_date(due_date, tz)
    if due_day == today:
        return "Today"
    if due_day == today + timedelta(days=1):
        return "Tomorrow"
    return due_day.isoformat()


def evaluate_due_soon(
    tasks: Iterable[Any],
    now: datetime,
    tz: tzinfo | None = None,
) -> list[Notification]:
    """Return notifications for tasks due today or tomorrow.

    A task is eligible when it is not COMPLETED, has a due date, and that due
    date falls on [today, today + 2 days) by calendar day. Output keeps the
    snapshot order.
    """
    today = local_date(now, tz)
    day_after_tomorrow = today + timedelta(days=2)

    out: list[Notification] = []
    for task in tasks:
        if _field(task, "status") == EXCLUDED_STATUS:
            continue
        due = _parse_datetime(_field(task, "due_date", "dueDate"))
        if due is None:
            continue
        due_day = local_date(due, tz)
        if not (today <= due_day < day_after_tomorrow):
            continue

        title = _field(task, "title") or ""
        message = due_message(title, due_day, today)
        if message is None:
            continue
        task_id = str(_field(task, "id"))
        out.append(Notification(id=task_id, task_id=task_id, message=message, due_date=due))
    return out


FetchSnapshot = Callable[[], Awaitable[Sequence[Any]]]


class NotificationPoller:
    """
    Periodic re-fetch-and-recompute loop.

    Every interval_seconds:
    - await fetch() for the caller's task snapshot,
    - recompute notifications with evaluate_due_soon(),
    - replace the current list.

    A failed fetch or evaluation is logged and the cycle is skipped; the previous
    notifications stay until the next successful cycle. To stop the loop,
    cancel the task running run().
    """

    def __init__(
        self,
        fetch: FetchSnapshot,
        *,
        interval_seconds: float = 60.0,
        clock: Callable[[], datetime] = datetime.now,
        tz: tzinfo | None = None,
    ) -> None:
        self._fetch = fetch
        self.interval_seconds = max(0.01, float(interval_seconds))
        self._clock = clock
        self._tz = tz
        self.notifications: list[Notification] = []
        self.last_error: Exception | None = None

    @property
    def count(self) -> int:
        return len(self.notifications)

    async def refresh(self) -> bool:
        """Run one cycle. Returns False when the cycle failed and nothing changed."""
        try:
            tasks = await self._fetch()
        except SnapshotFetchFailure as exc:
            self.last_error = exc
            logger.warning("due-soon cycle skipped: %s", exc)
            return False
        except Exception as exc:
            self.last_error = exc
            logger.exception("due-soon cycle skipped: unexpected fetch error")
            return False

        try:
            fresh = evaluate_due_soon(tasks, self._clock(), self._tz)
        except Exception as exc:
            self.last_error = exc
            logger.exception("due-soon cycle skipped: could not evaluate snapshot")
            return False

        self.notifications = fresh
        self.last_error = None
        logger.debug("due-soon cycle ok notifications=%d", len(self.notifications))
        return True

    async def run(self) -> None:
        """Refresh immediately, then on every tick until cancelled."""
        while True:
            await self.refresh()
            await asyncio.sleep(self.interval_seconds)
