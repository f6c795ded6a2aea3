"""Authentication and authorization dependencies for taskhub routes.

Every protected route depends on :func:`get_principal`, which rebuilds the
caller's :class:`Principal` from a verified bearer token. Routes behind the
capability gate depend on :func:`require_role_level` instead.
"""

from typing import Annotated, Callable, Optional, TypeVar

from fastapi import Depends, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.auth.tokens import TokenService
from taskhub.db.session import get_db_session
from taskhub.rbac import policy
from taskhub.rbac.audit import AuditedResult, AuditLogger
from taskhub.rbac.exceptions import AuthenticationError
from taskhub.rbac.organizations import OrganizationClosureResolver
from taskhub.rbac.principal import Principal

# Security scheme for Bearer token extraction
security = HTTPBearer(auto_error=False)

AUDIT_STATUS_HEADER = "X-Audit-Status"

T = TypeVar("T")

DbSession = Annotated[AsyncSession, Depends(get_db_session)]


def get_token_service(request: Request) -> TokenService:
    """Get the token service from app state."""
    return request.app.state.token_service


async def get_principal(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> Principal:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Not authenticated")
    return tokens.decode(credentials.credentials)


CurrentPrincipal = Annotated[Principal, Depends(get_principal)]


def require_role_level(level: int) -> Callable[..., Principal]:
    """Capability gate: reject principals below ``level`` before the route runs."""

    async def dependency(principal: CurrentPrincipal) -> Principal:
        policy.check_min_role_level(principal, level)
        return principal

    return dependency


def get_resolver(db: DbSession) -> OrganizationClosureResolver:
    # One resolver per request, never shared.
    return OrganizationClosureResolver(db)


def get_audit_logger(db: DbSession) -> AuditLogger:
    return AuditLogger(db)


def client_info(request: Request) -> tuple[Optional[str], Optional[str]]:
    """Client IP and user agent for audit records."""
    ip_address = request.client.host if request.client else None
    return ip_address, request.headers.get("user-agent")


def unwrap(result: AuditedResult[T], response: Response) -> T:
    """Return the primary value, flagging a failed audit write on the response."""
    if result.audit_failed:
        response.headers[AUDIT_STATUS_HEADER] = "failed"
    return result.value
