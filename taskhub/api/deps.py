from fastapi import Query

from ..filters import TaskFilter


def get_task_filter(
    search: str | None = Query(None, description="Search in title or description"),
    status: str | None = Query(None, description="PENDING | IN_PROGRESS | COMPLETED | CANCELLED"),
    priority: str | None = Query(None, description="LOW | MEDIUM | HIGH"),
    page: str | None = Query(None, description="Page number (1-based)"),
    limit: str | None = Query(None, description="Items per page"),
) -> TaskFilter:
    # Raw strings on purpose: TaskFilter owns defaults and validation.
    return TaskFilter.from_params(
        search=search,
        status=status,
        priority=priority,
        page=page,
        limit=limit,
    )
