"""Database layer for taskhub."""

from taskhub.db.base import Base
from taskhub.db.models import (
    AuditAction,
    AuditLog,
    AuditResource,
    Organization,
    Role,
    Task,
    TaskCategory,
    TaskPriority,
    TaskStatus,
    User,
)
from taskhub.db.session import (
    close_db,
    create_tables,
    get_db_session,
    get_engine,
    get_session,
    init_db,
)

__all__ = [
    "Base",
    "AuditAction",
    "AuditLog",
    "AuditResource",
    "Organization",
    "Role",
    "Task",
    "TaskCategory",
    "TaskPriority",
    "TaskStatus",
    "User",
    "close_db",
    "create_tables",
    "get_db_session",
    "get_engine",
    "get_session",
    "init_db",
]
