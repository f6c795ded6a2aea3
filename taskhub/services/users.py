"""User service: authorized user management with an audit trail.

Role changes are bounded by the role hierarchy: a principal can only create,
promote to, or delete roles strictly below its own level. Passwords are
hashed before storage and never appear in responses, audit details or logs.
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.auth.passwords import hash_password
from taskhub.db.models import AuditAction, AuditResource, Organization, Role, User
from taskhub.rbac import policy
from taskhub.rbac.audit import AuditedResult, AuditLogger
from taskhub.rbac.exceptions import (
    ConflictError,
    DuplicateEmailError,
    OrganizationNotFoundError,
    RoleNotFoundError,
    UserNotFoundError,
)
from taskhub.rbac.organizations import OrganizationClosureResolver
from taskhub.rbac.principal import Principal
from taskhub.schemas import UserCreate, UserUpdate

logger = logging.getLogger(__name__)


class UserService:
    """User operations gated by the closure set and the role hierarchy.

    The capability gate (role level >= Admin for create/update/delete) runs
    at the API boundary before these methods are called.
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

    async def _load(self, user_id: UUID) -> User:
        user = await self.session.get(User, user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    async def _load_role(self, role_id: UUID) -> Role:
        role = await self.session.get(Role, role_id)
        if role is None:
            raise RoleNotFoundError(role_id)
        return role

    async def _ensure_email_free(self, email: str) -> None:
        result = await self.session.execute(select(User.id).where(User.email == email))
        if result.scalar_one_or_none() is not None:
            raise DuplicateEmailError(email)

    async def create_user(self, principal: Principal, data: UserCreate) -> AuditedResult[User]:
        await self._ensure_email_free(data.email)

        organization = await self.session.get(Organization, data.organization_id)
        if organization is None:
            raise OrganizationNotFoundError(data.organization_id)

        closure = await self.resolver.resolve(principal)
        policy.check_organization_access(
            principal, organization.id, closure, "You cannot create users in this organization"
        )

        role = await self._load_role(data.role_id)
        policy.check_user_create(principal, organization.id, role.level, closure)

        user = User(
            email=data.email,
            password_hash=hash_password(data.password),
            first_name=data.first_name,
            last_name=data.last_name,
            organization_id=organization.id,
            role_id=role.id,
        )
        user.organization = organization
        user.role = role
        self.session.add(user)
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise DuplicateEmailError(data.email) from e
        logger.info("User %s created in org %s by %s", user.id, organization.id, principal.user_id)

        return await self.audit.record(
            user,
            user_id=principal.user_id,
            action=AuditAction.CREATE,
            resource=AuditResource.USER,
            resource_id=user.id,
            details=f"Created user: {user.email}",
        )

    async def list_users(self, principal: Principal) -> list[User]:
        closure = await self.resolver.resolve(principal)
        result = await self.session.execute(
            select(User)
            .where(User.organization_id.in_(list(closure)))
            .order_by(User.email)
        )
        return list(result.scalars().all())

    async def get_user(self, principal: Principal, user_id: UUID) -> User:
        user = await self._load(user_id)
        policy.check_user_read(principal, user, await self.resolver.resolve(principal))
        return user

    async def update_user(
        self,
        principal: Principal,
        user_id: UUID,
        data: UserUpdate,
    ) -> AuditedResult[User]:
        user = await self._load(user_id)
        closure = await self.resolver.resolve(principal)
        changes = {
            key: value
            for key, value in data.model_dump(exclude_unset=True).items()
            if value is not None
        }

        new_role: Role | None = None
        if "role_id" in changes:
            new_role = await self._load_role(changes["role_id"])
        policy.check_user_update(
            principal,
            user,
            closure,
            new_role_level=new_role.level if new_role else None,
        )

        if "email" in changes and changes["email"] != user.email:
            await self._ensure_email_free(changes["email"])

        for key, value in changes.items():
            setattr(user, key, value)
        if new_role is not None:
            user.role = new_role

        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise DuplicateEmailError(changes.get("email", user.email)) from e
        logger.info("User %s updated by %s (fields: %s)", user.id, principal.user_id, sorted(changes))

        return await self.audit.record(
            user,
            user_id=principal.user_id,
            action=AuditAction.UPDATE,
            resource=AuditResource.USER,
            resource_id=user.id,
            details=f"Updated user: {user.email}",
        )

    async def delete_user(self, principal: Principal, user_id: UUID) -> AuditedResult[UUID]:
        user = await self._load(user_id)
        policy.check_user_delete(
            principal, user, user.role.level, await self.resolver.resolve(principal)
        )

        email = user.email
        await self.session.delete(user)
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise ConflictError(
                f"User {user_id} is still referenced by tasks", code="USER_IN_USE"
            ) from e
        logger.info("User %s deleted by %s", user_id, principal.user_id)

        return await self.audit.record(
            user_id,
            user_id=principal.user_id,
            action=AuditAction.DELETE,
            resource=AuditResource.USER,
            resource_id=user_id,
            details=f"Deleted user: {email}",
        )
