"""Audit logging for task, user and auth operations.

This module provides the AuditLogger class which appends immutable audit
records and serves filtered retrieval of them.

Writes are best-effort: the primary action has already committed by the time
the record is written, so a failed audit write is reported next to the
primary result and never rolls that action back.
"""

import logging
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.db.base import utcnow
from taskhub.db.models import AuditAction, AuditLog, AuditResource
from taskhub.rbac.roles import RoleLevel, at_least

logger = logging.getLogger(__name__)
audit_events = structlog.get_logger("taskhub.audit")

ALL_LOGS_LIMIT = 100
USER_LOGS_LIMIT = 50

T = TypeVar("T")


@dataclass
class AuditedResult(Generic[T]):
    """A primary result plus the outcome of its audit write."""
    value: T
    audit_log: Optional[AuditLog] = None
    audit_error: Optional[str] = None

    @property
    def audit_failed(self) -> bool:
        return self.audit_error is not None


class AuditLogger:
    """Recorder and reader for audit events.

    Example:
        async with get_session() as session:
            audit = AuditLogger(session)
            result = await audit.record(
                task,
                user_id=principal.user_id,
                action=AuditAction.CREATE,
                resource=AuditResource.TASK,
                resource_id=task.id,
                details=f"Created task: {task.title}",
            )
    """

    def __init__(self, session: AsyncSession):
        """Initialize the audit logger.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def _persist(self, entry: AuditLog) -> None:
        # A SAVEPOINT keeps a failed audit insert from touching anything
        # else in the session.
        async with self.session.begin_nested():
            self.session.add(entry)

    async def log(
        self,
        user_id: UUID,
        action: AuditAction,
        resource: AuditResource,
        resource_id: Optional[UUID] = None,
        details: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> AuditLog:
        """Append an audit log entry.

        Args:
            user_id: The user who performed the action
            action: The action performed
            resource: Kind of resource affected
            resource_id: ID of the resource affected
            details: Human-readable summary (never contains secrets)
            ip_address: Client IP address
            user_agent: Client user agent

        Returns:
            The stored AuditLog entry with its id and server timestamp

        Raises:
            SQLAlchemyError: If the audit store rejects the write
        """
        entry = AuditLog(
            user_id=user_id,
            action=AuditAction(action).value,
            resource=AuditResource(resource).value,
            resource_id=resource_id,
            details=details,
            ip_address=ip_address,
            user_agent=user_agent,
            timestamp=utcnow(),
        )
        await self._persist(entry)

        audit_events.info(
            "audit_record",
            action=entry.action,
            resource=entry.resource,
            user_id=str(user_id),
            resource_id=str(resource_id) if resource_id else None,
            details=details,
        )
        return entry

    async def record(
        self,
        value: T,
        *,
        user_id: UUID,
        action: AuditAction,
        resource: AuditResource,
        resource_id: Optional[UUID] = None,
        details: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> AuditedResult[T]:
        """Log an event for an already-completed action, without failing it."""
        try:
            entry = await self.log(
                user_id=user_id,
                action=action,
                resource=resource,
                resource_id=resource_id,
                details=details,
                ip_address=ip_address,
                user_agent=user_agent,
            )
        except SQLAlchemyError as e:
            logger.error(
                "Audit write failed for %s %s by user %s: %s",
                AuditAction(action).value,
                AuditResource(resource).value,
                user_id,
                e,
            )
            return AuditedResult(value=value, audit_error=str(e))
        return AuditedResult(value=value, audit_log=entry)

    async def list_all(self, requester_role_level: int, limit: int = ALL_LOGS_LIMIT) -> list[AuditLog]:
        """Most recent records across all users, newest first.

        Returns an empty list for requesters below Admin.
        """
        if not at_least(requester_role_level, RoleLevel.ADMIN):
            return []

        result = await self.session.execute(
            select(AuditLog)
            .order_by(AuditLog.timestamp.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def list_for_user(self, user_id: UUID, limit: int = USER_LOGS_LIMIT) -> list[AuditLog]:
        """Most recent records performed by ``user_id``, newest first."""
        result = await self.session.execute(
            select(AuditLog)
            .where(AuditLog.user_id == user_id)
            .order_by(AuditLog.timestamp.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
