"""Audit log routes."""

from typing import Annotated

from fastapi import APIRouter, Depends

from taskhub.api.dependencies import CurrentPrincipal, get_audit_logger, require_role_level
from taskhub.rbac.audit import AuditLogger
from taskhub.rbac.principal import Principal
from taskhub.rbac.roles import RoleLevel
from taskhub.schemas import AuditLogResponse, ErrorResponse

router = APIRouter(
    prefix="/audit-log",
    tags=["Audit Logs"],
    responses={401: {"model": ErrorResponse, "description": "Unauthorized"}},
)


@router.get(
    "",
    response_model=list[AuditLogResponse],
    responses={403: {"model": ErrorResponse, "description": "Permission denied"}},
)
async def list_audit_logs(
    principal: Annotated[Principal, Depends(require_role_level(RoleLevel.ADMIN))],
    audit: Annotated[AuditLogger, Depends(get_audit_logger)],
):
    """The 100 most recent audit records across all users (Admin and Owner only)."""
    return await audit.list_all(principal.role_level)


@router.get("/my-logs", response_model=list[AuditLogResponse])
async def list_my_logs(
    principal: CurrentPrincipal,
    audit: Annotated[AuditLogger, Depends(get_audit_logger)],
):
    """The caller's own 50 most recent audit records."""
    return await audit.list_for_user(principal.user_id)
