from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from foodbank.api.auth import Principal, require_principal, require_role
from foodbank.domain.errors import store_errors
from foodbank.domain.organizations import schemas, service
from foodbank.domain.users.db_models import UserRole
from foodbank.infra.db import get_db_session

router = APIRouter(prefix="/api/organizations", tags=["organizations"])


def _organization_not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Organization not found")


@router.get("", response_model=schemas.OrganizationResponse)
async def get_organization(
    principal: Principal = Depends(require_principal),
    session: AsyncSession = Depends(get_db_session),
) -> schemas.OrganizationResponse:
    """The caller's own organization."""
    organization = await service.get_organization(session, principal.organization_id)
    if organization is None:
        raise _organization_not_found()
    return schemas.OrganizationResponse.model_validate(organization)


@router.put("", response_model=schemas.OrganizationResponse)
async def update_organization(
    data: schemas.OrganizationUpdate,
    principal: Principal = Depends(require_role(UserRole.ADMIN)),
    session: AsyncSession = Depends(get_db_session),
) -> schemas.OrganizationResponse:
    """Update the caller's organization. Admins only."""
    with store_errors("Failed to update organization", status_code=status.HTTP_400_BAD_REQUEST):
        organization = await service.update_organization(session, principal.organization_id, data)
        if organization is None:
            raise _organization_not_found()
        await session.commit()
    return schemas.OrganizationResponse.model_validate(organization)


@router.get("/stats", response_model=schemas.OrganizationStatsResponse)
async def get_organization_stats(
    principal: Principal = Depends(require_principal),
    session: AsyncSession = Depends(get_db_session),
) -> schemas.OrganizationStatsResponse:
    """Dashboard counts and the latest inventory activity."""
    with store_errors("Failed to fetch organization stats"):
        return await service.get_organization_stats(session, principal.organization_id)
