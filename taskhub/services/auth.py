"""Login, logout and profile lookups."""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.auth.passwords import verify_password
from taskhub.auth.tokens import TokenService
from taskhub.db.models import AuditAction, AuditResource, User
from taskhub.rbac.audit import AuditedResult, AuditLogger
from taskhub.rbac.exceptions import AuthenticationError, UserNotFoundError
from taskhub.rbac.principal import Principal

logger = logging.getLogger(__name__)


@dataclass
class LoginResult:
    access_token: str
    user: User


def principal_for(user: User) -> Principal:
    """Build the principal a user's token will carry."""
    return Principal(
        user_id=user.id,
        organization_id=user.organization_id,
        role_id=user.role_id,
        role_level=user.role.level,
        email=user.email,
        role_name=user.role.name,
    )


class AuthService:
    def __init__(
        self,
        session: AsyncSession,
        tokens: TokenService,
        audit: Optional[AuditLogger] = None,
    ):
        self.session = session
        self.tokens = tokens
        self.audit = audit or AuditLogger(session)

    async def login(
        self,
        email: str,
        password: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> AuditedResult[LoginResult]:
        """Verify credentials and issue a bearer token.

        Unknown emails and wrong passwords fail the same way so the response
        does not reveal which accounts exist.
        """
        result = await self.session.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        if user is None or not verify_password(password, user.password_hash):
            logger.info("Failed login attempt for %s", email)
            raise AuthenticationError("Invalid email or password")

        token = self.tokens.issue(principal_for(user))
        logger.info("User %s logged in", user.id)

        return await self.audit.record(
            LoginResult(access_token=token, user=user),
            user_id=user.id,
            action=AuditAction.LOGIN,
            resource=AuditResource.AUTH,
            resource_id=user.id,
            details=f"User logged in: {user.email}",
            ip_address=ip_address,
            user_agent=user_agent,
        )

    async def logout(
        self,
        principal: Principal,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> AuditedResult[None]:
        # Tokens are stateless; logout only leaves a trail.
        return await self.audit.record(
            None,
            user_id=principal.user_id,
            action=AuditAction.LOGOUT,
            resource=AuditResource.AUTH,
            resource_id=principal.user_id,
            details=f"User logged out: {principal.email}",
            ip_address=ip_address,
            user_agent=user_agent,
        )

    async def me(self, principal: Principal) -> User:
        user = await self.session.get(User, principal.user_id)
        if user is None:
            raise UserNotFoundError(principal.user_id)
        return user
