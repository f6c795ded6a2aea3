"""Pydantic schemas for taskhub.

Request models are consumed by the services; response models are what the
API returns. No response model declares a password field.
"""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from taskhub.db.models import TaskCategory, TaskPriority, TaskStatus


# ========== Common Schemas ==========

class BaseResponse(BaseModel):
    """Base response with common fields."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    created_at: datetime
    updated_at: datetime | None = None


class ErrorResponse(BaseModel):
    """Error body returned for every RBAC error."""

    error: dict[str, str | None]


# ========== Organization / Role Schemas ==========

class OrganizationResponse(BaseResponse):
    name: str
    parent_id: UUID | None = None


class RoleResponse(BaseResponse):
    name: str
    level: int
    description: str | None = None


# ========== Task Schemas ==========

class TaskCreate(BaseModel):
    """Request to create a task.

    Ownership fields are not accepted: ``organization_id`` and
    ``created_by_id`` always come from the caller's principal.
    """

    model_config = ConfigDict(extra="ignore")

    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    status: TaskStatus = TaskStatus.TODO
    category: TaskCategory
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: datetime | None = None
    assigned_to_id: UUID | None = None
    sort_order: int = 0


class TaskUpdate(BaseModel):
    """Partial update; only fields present in the request are applied."""

    model_config = ConfigDict(extra="ignore")

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    status: TaskStatus | None = None
    category: TaskCategory | None = None
    priority: TaskPriority | None = None
    due_date: datetime | None = None
    assigned_to_id: UUID | None = None
    sort_order: int | None = None


class TaskFilter(BaseModel):
    """Query filters for listing tasks. Applied after the closure filter."""

    status: TaskStatus | None = None
    category: TaskCategory | None = None
    priority: TaskPriority | None = None
    assigned_to_id: UUID | None = None
    created_by_id: UUID | None = None
    search: str | None = None
    sort_by: Literal["created_at", "due_date", "priority", "sort_order"] = "created_at"
    sort_order: Literal["ASC", "DESC"] = "DESC"


class TaskResponse(BaseResponse):
    title: str
    description: str | None
    status: str
    category: str
    priority: str
    due_date: datetime | None
    sort_order: int
    organization_id: UUID
    created_by_id: UUID
    assigned_to_id: UUID | None


# ========== User Schemas ==========

class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    organization_id: UUID
    role_id: UUID


class UserUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    email: EmailStr | None = None
    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    role_id: UUID | None = None


class UserResponse(BaseResponse):
    email: str
    first_name: str
    last_name: str
    organization_id: UUID
    role_id: UUID
    role: RoleResponse | None = None


# ========== Auth Schemas ==========

class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


# ========== Audit Schemas ==========

class AuditLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    action: str
    resource: str
    resource_id: UUID | None
    details: str | None
    ip_address: str | None
    user_agent: str | None
    timestamp: datetime
