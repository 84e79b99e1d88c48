# PURPOSE: Python client for the Taskhub REST API, plus the due-soon poller wiring.

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx

from .config import settings
from .errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    SnapshotFetchFailure,
    StorageUnavailable,
    TaskhubError,
    ValidationError,
)
from .notifications import NotificationPoller

logger = logging.getLogger(__name__)

# Page size used when walking every page for a full snapshot.
SNAPSHOT_PAGE_SIZE = 100


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return body["error"]
    return response.reason_phrase


def raise_for_api_error(response: httpx.Response, *, resource_id: Any = None) -> None:
    """Map an error response back onto the shared error taxonomy."""
    if response.is_success:
        return
    code = response.status_code
    message = _error_message(response)
    if code == 401:
        raise AuthorizationError(message)
    if code == 404:
        raise NotFoundError("Task", resource_id) if resource_id is not None else TaskhubError(message)
    if code == 422:
        field, value = "body", None
        try:
            details = response.json().get("details") or []
            if details:
                loc = details[0].get("loc") or []
                field = str(loc[-1]) if loc else field
                value = details[0].get("input")
        except (ValueError, AttributeError):
            pass
        raise ValidationError(field, message, value)
    if code == 400:
        raise ConflictError(message)
    if code == 503:
        raise StorageUnavailable(message)
    err = TaskhubError(message)
    err.status_code = code
    raise err


class TaskhubClient:
    """Thin synchronous wrapper over the REST API.

    Pass `http` to reuse an existing httpx.Client (FastAPI's TestClient works);
    otherwise one is created for `base_url`.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        http: Optional[httpx.Client] = None,
        timeout: float = 10.0,
    ):
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self._owns_http = http is None
        self.http = http or httpx.Client(base_url=self.base_url, timeout=timeout)
        self.token: Optional[str] = None
        self.user: Optional[Dict[str, Any]] = None

    def close(self) -> None:
        if self._owns_http:
            self.http.close()

    def __enter__(self) -> "TaskhubClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def _request(self, method: str, path: str, *, resource_id: Any = None, **kwargs) -> httpx.Response:
        response = self.http.request(method, path, headers=self._headers(), **kwargs)
        raise_for_api_error(response, resource_id=resource_id)
        return response

    # ---------- auth ----------
    def register(self, name: str, email: str, password: str, **extra) -> Dict[str, Any]:
        payload = {"name": name, "email": email, "password": password, **extra}
        return self._request("POST", "/users", json=payload).json()

    def login(self, email: str, password: str) -> Dict[str, Any]:
        data = self._request("POST", "/auth/login", json={"email": email, "password": password}).json()
        self.token = data["access_token"]
        self.user = data["user"]
        return data

    def logout(self) -> None:
        self.token = None
        self.user = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def me(self) -> Dict[str, Any]:
        return self._request("GET", "/auth/me").json()

    def get_profile(self) -> Dict[str, Any]:
        return self._request("GET", "/users/profile").json()

    def update_profile(self, **fields) -> Dict[str, Any]:
        return self._request("PATCH", "/users/profile", json=fields).json()

    # ---------- tasks ----------
    def list_tasks(self, **filters) -> Dict[str, Any]:
        """One page: {"data": [...], "meta": {"total", "page", "lastPage"}}."""
        params = {k: v for k, v in filters.items() if v is not None}
        return self._request("GET", "/tasks", params=params).json()

    def fetch_all_tasks(self) -> List[Dict[str, Any]]:
        """Every task of the logged-in user, walking all pages."""
        tasks: List[Dict[str, Any]] = []
        page = 1
        try:
            while True:
                body = self.list_tasks(page=page, limit=SNAPSHOT_PAGE_SIZE)
                tasks.extend(body["data"])
                if page >= body["meta"]["lastPage"]:
                    return tasks
                page += 1
        except httpx.HTTPError as exc:
            raise SnapshotFetchFailure(f"transport error: {exc.__class__.__name__}") from exc
        except TaskhubError as exc:
            raise SnapshotFetchFailure(exc.message) from exc

    def get_task(self, task_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/tasks/{task_id}", resource_id=task_id).json()

    def create_task(self, title: str, **fields) -> Dict[str, Any]:
        return self._request("POST", "/tasks", json={"title": title, **fields}).json()

    def update_task(self, task_id: str, **fields) -> Dict[str, Any]:
        return self._request("PATCH", f"/tasks/{task_id}", resource_id=task_id, json=fields).json()

    def delete_task(self, task_id: str) -> Dict[str, Any]:
        return self._request("DELETE", f"/tasks/{task_id}", resource_id=task_id).json()

    # ---------- notifications ----------
    async def fetch_snapshot(self) -> List[Dict[str, Any]]:
        # httpx.Client is blocking; keep the event loop free
        return await asyncio.to_thread(self.fetch_all_tasks)

    def notification_poller(self, interval_seconds: Optional[float] = None, **kwargs) -> NotificationPoller:
        interval = settings.NOTIFICATION_POLL_SECONDS if interval_seconds is None else interval_seconds
        return NotificationPoller(self.fetch_snapshot, interval_seconds=interval, **kwargs)
