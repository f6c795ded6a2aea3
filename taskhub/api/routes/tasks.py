"""Task routes."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from taskhub.api.dependencies import (
    CurrentPrincipal,
    DbSession,
    get_audit_logger,
    get_resolver,
    unwrap,
)
from taskhub.rbac.audit import AuditLogger
from taskhub.rbac.organizations import OrganizationClosureResolver
from taskhub.schemas import ErrorResponse, TaskCreate, TaskFilter, TaskResponse, TaskUpdate
from taskhub.services.tasks import TaskService

router = APIRouter(
    prefix="/tasks",
    tags=["Tasks"],
    responses={
        401: {"model": ErrorResponse, "description": "Unauthorized"},
        403: {"model": ErrorResponse, "description": "Permission denied"},
    },
)


def get_task_service(
    db: DbSession,
    audit: Annotated[AuditLogger, Depends(get_audit_logger)],
    resolver: Annotated[OrganizationClosureResolver, Depends(get_resolver)],
) -> TaskService:
    return TaskService(db, audit=audit, resolver=resolver)


Tasks = Annotated[TaskService, Depends(get_task_service)]


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(body: TaskCreate, response: Response, principal: CurrentPrincipal, service: Tasks):
    """Create a task in the caller's own organization."""
    return unwrap(await service.create_task(principal, body), response)


@router.get("", response_model=list[TaskResponse])
async def list_tasks(
    response: Response,
    principal: CurrentPrincipal,
    service: Tasks,
    filters: Annotated[TaskFilter, Depends()],
):
    """List tasks in every organization the caller can see."""
    return unwrap(await service.list_tasks(principal, filters), response)


@router.get(
    "/{task_id}",
    response_model=TaskResponse,
    responses={404: {"model": ErrorResponse, "description": "Task not found"}},
)
async def get_task(task_id: UUID, response: Response, principal: CurrentPrincipal, service: Tasks):
    return unwrap(await service.get_task(principal, task_id), response)


@router.put(
    "/{task_id}",
    response_model=TaskResponse,
    responses={404: {"model": ErrorResponse, "description": "Task not found"}},
)
async def update_task(
    task_id: UUID,
    body: TaskUpdate,
    response: Response,
    principal: CurrentPrincipal,
    service: Tasks,
):
    return unwrap(await service.update_task(principal, task_id, body), response)


@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse, "description": "Task not found"}},
)
async def delete_task(task_id: UUID, response: Response, principal: CurrentPrincipal, service: Tasks):
    unwrap(await service.delete_task(principal, task_id), response)
    return None
