# PURPOSE: pydantic schemas for request bodies and responses.
# JSON uses camelCase (dueDate, createdAt, ...); bodies also accept snake_case.

from datetime import UTC, datetime
from typing import Literal, get_args

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

Status = Literal["PENDING", "IN_PROGRESS", "COMPLETED", "CANCELLED"]
Priority = Literal["LOW", "MEDIUM", "HIGH"]
Role = Literal["USER", "ADMIN"]

STATUSES: tuple[str, ...] = get_args(Status)
PRIORITIES: tuple[str, ...] = get_args(Priority)
ROLES: tuple[str, ...] = get_args(Role)


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes (SQLite drops tzinfo), convert aware ones."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _strip_title(value):
    if isinstance(value, str):
        value = value.strip()
    return value


# --- Task schemas -----------------------------------------------------------


class TaskCreate(CamelModel):
    title: str = Field(min_length=1, max_length=200)
    description: str | None = None
    due_date: datetime | None = None
    status: Status = "PENDING"
    priority: Priority = "MEDIUM"
    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "examples": [
                {"title": "Deploy service", "priority": "HIGH"},
                {
                    "title": "Write release notes",
                    "description": "Summarize the sprint",
                    "dueDate": "2025-12-31T18:00:00Z",
                },
            ]
        },
    )

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, value):
        return _strip_title(value)


class TaskUpdate(CamelModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    due_date: datetime | None = None
    status: Status | None = None
    priority: Priority | None = None
    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "examples": [
                {"status": "IN_PROGRESS"},
                {"priority": "LOW"},
                {"dueDate": None},
            ]
        },
    )

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, value):
        return _strip_title(value)


class Task(CamelModel):
    id: str
    title: str
    description: str | None
    due_date: datetime | None
    status: Status
    priority: Priority
    notification_sent: bool
    created_at: datetime
    updated_at: datetime
    user_id: str

    model_config = ConfigDict(from_attributes=True)  # ORM -> schema

    @field_validator("due_date", "created_at", "updated_at")
    @classmethod
    def ensure_utc(cls, value):
        return as_utc(value)


class PageMeta(CamelModel):
    total: int
    page: int
    last_page: int


class TaskPage(CamelModel):
    data: list[Task]
    meta: PageMeta


class DeleteResult(BaseModel):
    success: bool
    message: str


# --- User / Auth schemas ----------------------------------------------------


class UserCreate(CamelModel):
    name: str = Field(min_length=3, max_length=120)
    email: EmailStr
    # Raw password only in create request
    password: str = Field(min_length=6, max_length=128)
    role: Role = "USER"
    email_notifications: bool = True
    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "examples": [{"name": "Ana Lima", "email": "ana@example.com", "password": "secret123"}]
        },
    )


class UserUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=3, max_length=120)
    password: str | None = Field(default=None, min_length=6, max_length=128)
    email_notifications: bool | None = None
    model_config = ConfigDict(extra="ignore")


class UserPublic(CamelModel):
    id: str
    name: str
    email: EmailStr
    role: Role
    email_notifications: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)  # allow ORM -> schema

    @field_validator("created_at", "updated_at")
    @classmethod
    def ensure_utc(cls, value):
        return as_utc(value)


class CurrentUser(BaseModel):
    """Identity attached to an authenticated request."""

    user_id: str
    email: str
    role: Role


class LoginRequest(BaseModel):
    email: str
    password: str
    model_config = ConfigDict(
        json_schema_extra={"examples": [{"email": "ana@example.com", "password": "secret123"}]}
    )


class TokenResponse(BaseModel):
    access_token: str
    token_type: Literal["bearer"] = "bearer"
    user: UserPublic
