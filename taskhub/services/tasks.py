"""Task service: authorized CRUD over tasks with an audit trail."""

import logging
from enum import Enum
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import case, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.db.models import AuditAction, AuditResource, Task, TaskPriority, User
from taskhub.rbac import policy
from taskhub.rbac.audit import AuditedResult, AuditLogger
from taskhub.rbac.exceptions import TaskNotFoundError, UserNotFoundError
from taskhub.rbac.organizations import OrganizationClosureResolver
from taskhub.rbac.principal import Principal
from taskhub.schemas import TaskCreate, TaskFilter, TaskUpdate

logger = logging.getLogger(__name__)

_PRIORITY_RANK = case(
    {
        TaskPriority.LOW.value: 1,
        TaskPriority.MEDIUM.value: 2,
        TaskPriority.HIGH.value: 3,
    },
    value=Task.priority,
    else_=0,
)

_SORT_COLUMNS = {
    "created_at": Task.created_at,
    "due_date": Task.due_date,
    "priority": _PRIORITY_RANK,
    "sort_order": Task.sort_order,
}


def _column_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


class TaskService:
    """Task operations gated by the closure set and the ownership override.

    Each mutation commits first, then appends its audit record. Reads are
    audited too.
    """

    def __init__(
        self,
        session: AsyncSession,
        audit: Optional[AuditLogger] = None,
        resolver: Optional[OrganizationClosureResolver] = None,
    ):
        self.session = session
        self.audit = audit or AuditLogger(session)
        self.resolver = resolver or OrganizationClosureResolver(session)

    async def _load(self, task_id: UUID) -> Task:
        task = await self.session.get(Task, task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    async def _check_assignee(
        self, principal: Principal, assignee_id: UUID, closure: frozenset[UUID]
    ) -> None:
        assignee = await self.session.get(User, assignee_id)
        if assignee is None:
            raise UserNotFoundError(assignee_id)
        policy.check_task_assignment(principal, assignee, closure)

    async def create_task(self, principal: Principal, data: TaskCreate) -> AuditedResult[Task]:
        if data.assigned_to_id is not None:
            await self._check_assignee(
                principal, data.assigned_to_id, await self.resolver.resolve(principal)
            )

        fields = {key: _column_value(value) for key, value in data.model_dump().items()}
        # Ownership always comes from the principal.
        fields["organization_id"] = principal.organization_id
        fields["created_by_id"] = principal.user_id

        task = Task(**fields)
        self.session.add(task)
        await self.session.commit()
        logger.info("Task %s created in org %s by %s", task.id, task.organization_id, principal.user_id)

        return await self.audit.record(
            task,
            user_id=principal.user_id,
            action=AuditAction.CREATE,
            resource=AuditResource.TASK,
            resource_id=task.id,
            details=f"Created task: {task.title}",
        )

    async def list_tasks(
        self,
        principal: Principal,
        filters: Optional[TaskFilter] = None,
    ) -> AuditedResult[list[Task]]:
        filters = filters or TaskFilter()
        closure = await self.resolver.resolve(principal)

        query = select(Task).where(Task.organization_id.in_(list(closure)))

        if filters.status:
            query = query.where(Task.status == filters.status.value)
        if filters.category:
            query = query.where(Task.category == filters.category.value)
        if filters.priority:
            query = query.where(Task.priority == filters.priority.value)
        if filters.assigned_to_id:
            query = query.where(Task.assigned_to_id == filters.assigned_to_id)
        if filters.created_by_id:
            query = query.where(Task.created_by_id == filters.created_by_id)
        if filters.search:
            query = query.where(
                or_(
                    Task.title.icontains(filters.search, autoescape=True),
                    Task.description.icontains(filters.search, autoescape=True),
                )
            )

        sort_column = _SORT_COLUMNS[filters.sort_by]
        query = query.order_by(
            sort_column.asc() if filters.sort_order == "ASC" else sort_column.desc()
        )

        result = await self.session.execute(query)
        tasks = list(result.scalars().all())

        return await self.audit.record(
            tasks,
            user_id=principal.user_id,
            action=AuditAction.READ,
            resource=AuditResource.TASK,
            details=f"Retrieved {len(tasks)} tasks",
        )

    async def get_task(self, principal: Principal, task_id: UUID) -> AuditedResult[Task]:
        task = await self._load(task_id)
        policy.check_task_read(principal, task, await self.resolver.resolve(principal))

        return await self.audit.record(
            task,
            user_id=principal.user_id,
            action=AuditAction.READ,
            resource=AuditResource.TASK,
            resource_id=task.id,
            details=f"Viewed task: {task.title}",
        )

    async def update_task(
        self,
        principal: Principal,
        task_id: UUID,
        data: TaskUpdate,
    ) -> AuditedResult[Task]:
        task = await self._load(task_id)
        closure = await self.resolver.resolve(principal)
        policy.check_task_update(principal, task, closure)
        if data.assigned_to_id is not None:
            await self._check_assignee(principal, data.assigned_to_id, closure)

        # Merge: only fields present in the request overwrite the task.
        for key, value in data.model_dump(exclude_unset=True).items():
            if value is None and key in ("title", "status", "category", "priority", "sort_order"):
                continue
            setattr(task, key, _column_value(value))

        await self.session.commit()
        logger.info("Task %s updated by %s", task.id, principal.user_id)

        return await self.audit.record(
            task,
            user_id=principal.user_id,
            action=AuditAction.UPDATE,
            resource=AuditResource.TASK,
            resource_id=task.id,
            details=f"Updated task: {task.title}",
        )

    async def delete_task(self, principal: Principal, task_id: UUID) -> AuditedResult[UUID]:
        task = await self._load(task_id)
        policy.check_task_delete(principal, task, await self.resolver.resolve(principal))

        title = task.title
        await self.session.delete(task)
        await self.session.commit()
        logger.info("Task %s deleted by %s", task_id, principal.user_id)

        return await self.audit.record(
            task_id,
            user_id=principal.user_id,
            action=AuditAction.DELETE,
            resource=AuditResource.TASK,
            resource_id=task_id,
            details=f"Deleted task: {title}",
        )
