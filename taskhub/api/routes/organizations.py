"""Organization and role listing routes."""

from typing import Annotated

from fastapi import APIRouter, Depends

from taskhub.api.dependencies import CurrentPrincipal, DbSession, get_resolver
from taskhub.rbac.organizations import OrganizationClosureResolver
from taskhub.schemas import OrganizationResponse, RoleResponse
from taskhub.services.organizations import OrganizationService

router = APIRouter(tags=["Organizations"])


def get_organization_service(
    db: DbSession,
    resolver: Annotated[OrganizationClosureResolver, Depends(get_resolver)],
) -> OrganizationService:
    return OrganizationService(db, resolver=resolver)


Organizations = Annotated[OrganizationService, Depends(get_organization_service)]


@router.get("/organizations", response_model=list[OrganizationResponse])
async def list_organizations(principal: CurrentPrincipal, service: Organizations):
    """Organizations the caller can act within, ordered by name."""
    return await service.list_visible(principal)


@router.get("/roles", response_model=list[RoleResponse])
async def list_roles(principal: CurrentPrincipal, service: Organizations):
    return await service.list_roles()
