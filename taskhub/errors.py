"""Error taxonomy shared by the API and the client.

Each error carries the HTTP status it maps to; the API renders them through
``taskhub.api.errors`` and the client raises them back from responses.
"""

from typing import Any


class TaskhubError(Exception):
    status_code = 500
    default_message = "Internal error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def details(self) -> list[dict[str, Any]] | None:
        return None


class ValidationError(TaskhubError):
    """A field is malformed, missing, or not one of the allowed values."""

    status_code = 422
    default_message = "ValidationError"

    def __init__(self, field: str, message: str, value: Any = None, *, loc: str = "query"):
        self.field = field
        self.value = value
        self.loc = loc
        super().__init__(f"{field}: {message}")
        self.reason = message

    def details(self) -> list[dict[str, Any]]:
        return [{"loc": [self.loc, self.field], "msg": self.reason, "input": self.value}]


class AuthorizationError(TaskhubError):
    """Bad credentials or a missing/invalid/expired token; never says which."""

    status_code = 401
    default_message = "Could not validate credentials"


class NotFoundError(TaskhubError):
    status_code = 404
    default_message = "Not found"

    def __init__(self, resource: str, ident: Any):
        self.resource = resource
        self.ident = ident
        super().__init__(f"{resource} with ID {ident} not found")


class ConflictError(TaskhubError):
    status_code = 400
    default_message = "Conflict"


class StorageUnavailable(TaskhubError):
    status_code = 503
    default_message = "Storage unavailable"


class SnapshotFetchFailure(TaskhubError):
    """The client could not fetch a task snapshot (transport or server error)."""

    status_code = 502
    default_message = "Could not fetch tasks"
