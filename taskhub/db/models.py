"""Database models for taskhub.

This module defines all SQLAlchemy models for the multi-tenant task system:
- Organizations: a forest of tenants linked by ``parent_id``
- Roles: Owner / Admin / Viewer, ordered by ``level``
- Users: belong to exactly one organization and hold exactly one role
- Tasks: owned by exactly one organization
- Audit Logs: append-only record of who did what to which resource
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import List, Optional

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from taskhub.db.base import Base, TimestampMixin, UUIDMixin, utcnow


class TaskStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "in-progress"
    DONE = "done"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskCategory(str, Enum):
    WORK = "Work"
    PERSONAL = "Personal"
    SHOPPING = "Shopping"
    HEALTH = "Health"
    OTHER = "Other"


class AuditAction(str, Enum):
    CREATE = "CREATE"
    READ = "READ"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"


class AuditResource(str, Enum):
    TASK = "TASK"
    USER = "USER"
    ORGANIZATION = "ORGANIZATION"
    AUTH = "AUTH"


class Organization(Base, UUIDMixin, TimestampMixin):
    """Organization model - a tenant node.

    Organizations form a forest: ``parent_id`` is NULL for roots and
    otherwise references an existing organization.
    """

    __tablename__ = "organizations"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Organization display name",
    )
    parent_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("organizations.id"),
        nullable=True,
        index=True,
        comment="Parent organization (NULL for roots)",
    )

    # Relationships
    parent: Mapped[Optional["Organization"]] = relationship(
        "Organization",
        remote_side="Organization.id",
        back_populates="children",
    )
    children: Mapped[List["Organization"]] = relationship(
        "Organization",
        back_populates="parent",
    )

    def __repr__(self) -> str:
        return f"<Organization(id={self.id}, name={self.name}, parent_id={self.parent_id})>"


class Role(Base, UUIDMixin, TimestampMixin):
    """Role model. Privilege comparisons use ``level`` only."""

    __tablename__ = "roles"

    name: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        nullable=False,
        comment="Role name (Owner, Admin, Viewer)",
    )
    level: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Privilege level (Owner=3, Admin=2, Viewer=1)",
    )
    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Role description",
    )

    def __repr__(self) -> str:
        return f"<Role(id={self.id}, name={self.name}, level={self.level})>"


class User(Base, UUIDMixin, TimestampMixin):
    """User model.

    ``password_hash`` never leaves the persistence layer: response schemas
    do not declare it and audit details never mention it.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        comment="User email address (unique)",
    )
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Hashed password",
    )
    first_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        comment="User's first name",
    )
    last_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        comment="User's last name",
    )
    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("organizations.id"),
        nullable=False,
        index=True,
        comment="Organization the user belongs to",
    )
    role_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("roles.id"),
        nullable=False,
        comment="Role held by the user",
    )

    # Relationships
    organization: Mapped["Organization"] = relationship("Organization", lazy="selectin")
    role: Mapped["Role"] = relationship("Role", lazy="selectin")

    @property
    def full_name(self) -> str:
        """Return user's full name."""
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"


class Task(Base, UUIDMixin, TimestampMixin):
    """Task model.

    ``organization_id`` and ``created_by_id`` are set from the creating
    principal and never change afterwards.
    """

    __tablename__ = "tasks"

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Task title",
    )
    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Task description",
    )
    status: Mapped[str] = mapped_column(
        String(20),
        default=TaskStatus.TODO.value,
        nullable=False,
        index=True,
        comment="todo, in-progress, done",
    )
    category: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="Work, Personal, Shopping, Health, Other",
    )
    priority: Mapped[str] = mapped_column(
        String(10),
        default=TaskPriority.MEDIUM.value,
        nullable=False,
        comment="low, medium, high",
    )
    due_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="Optional due date",
    )
    sort_order: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
        comment="Manual ordering within a list",
    )
    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("organizations.id"),
        nullable=False,
        index=True,
        comment="Owning organization",
    )
    created_by_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id"),
        nullable=False,
        index=True,
        comment="Authorial owner",
    )
    assigned_to_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id"),
        nullable=True,
        index=True,
        comment="Assignee",
    )

    def __repr__(self) -> str:
        return f"<Task(id={self.id}, title={self.title}, org_id={self.organization_id})>"


class AuditLog(Base, UUIDMixin):
    """Audit log for compliance and security.

    Append-only: the engine never updates or deletes these rows.
    """

    __tablename__ = "audit_logs"
    __table_args__ = (
        Index("ix_audit_logs_resource", "resource", "resource_id"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        nullable=False,
        index=True,
        comment="User who performed the action",
    )
    action: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="CREATE, READ, UPDATE, DELETE, LOGIN, LOGOUT",
    )
    resource: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="TASK, USER, ORGANIZATION, AUTH",
    )
    resource_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        nullable=True,
        comment="ID of resource affected",
    )
    details: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Human-readable summary",
    )
    ip_address: Mapped[Optional[str]] = mapped_column(
        String(45),  # IPv6 max length
        nullable=True,
        comment="Client IP address",
    )
    user_agent: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Client user agent",
    )
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
        index=True,
        comment="When the action occurred",
    )

    def __repr__(self) -> str:
        return f"<AuditLog(id={self.id}, action={self.action}, resource={self.resource})>"
