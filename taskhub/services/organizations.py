"""Read-only organization and role queries."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.db.models import Organization, Role
from taskhub.rbac.organizations import OrganizationClosureResolver
from taskhub.rbac.principal import Principal


class OrganizationService:
    def __init__(
        self,
        session: AsyncSession,
        resolver: Optional[OrganizationClosureResolver] = None,
    ):
        self.session = session
        self.resolver = resolver or OrganizationClosureResolver(session)

    async def list_visible(self, principal: Principal) -> list[Organization]:
        """Organizations in the principal's closure set, ordered by name."""
        closure = await self.resolver.resolve(principal)
        result = await self.session.execute(
            select(Organization)
            .where(Organization.id.in_(list(closure)))
            .order_by(Organization.name)
        )
        return list(result.scalars().all())

    async def list_roles(self) -> list[Role]:
        result = await self.session.execute(select(Role).order_by(Role.level.desc()))
        return list(result.scalars().all())
