"""User management routes.

Create, update and delete sit behind the Admin capability gate; the
service then applies the organization and role-hierarchy rules.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from taskhub.api.dependencies import (
    CurrentPrincipal,
    DbSession,
    get_audit_logger,
    get_resolver,
    require_role_level,
    unwrap,
)
from taskhub.rbac.audit import AuditLogger
from taskhub.rbac.organizations import OrganizationClosureResolver
from taskhub.rbac.principal import Principal
from taskhub.rbac.roles import RoleLevel
from taskhub.schemas import ErrorResponse, UserCreate, UserResponse, UserUpdate
from taskhub.services.users import UserService

router = APIRouter(
    prefix="/users",
    tags=["Users"],
    responses={
        401: {"model": ErrorResponse, "description": "Unauthorized"},
        403: {"model": ErrorResponse, "description": "Permission denied"},
    },
)

AdminPrincipal = Annotated[Principal, Depends(require_role_level(RoleLevel.ADMIN))]


def get_user_service(
    db: DbSession,
    audit: Annotated[AuditLogger, Depends(get_audit_logger)],
    resolver: Annotated[OrganizationClosureResolver, Depends(get_resolver)],
) -> UserService:
    return UserService(db, audit=audit, resolver=resolver)


Users = Annotated[UserService, Depends(get_user_service)]


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse, "description": "Email already in use"}},
)
async def create_user(body: UserCreate, response: Response, principal: AdminPrincipal, service: Users):
    return unwrap(await service.create_user(principal, body), response)


@router.get("", response_model=list[UserResponse])
async def list_users(principal: CurrentPrincipal, service: Users):
    return await service.list_users(principal)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: UUID, principal: CurrentPrincipal, service: Users):
    return await service.get_user(principal, user_id)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: UUID,
    body: UserUpdate,
    response: Response,
    principal: AdminPrincipal,
    service: Users,
):
    return unwrap(await service.update_user(principal, user_id, body), response)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: UUID, response: Response, principal: AdminPrincipal, service: Users):
    unwrap(await service.delete_user(principal, user_id), response)
    return None
