from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from foodbank.api.auth import Principal, require_principal
from foodbank.api.envelope import Envelope
from foodbank.domain.errors import store_errors
from foodbank.domain.volunteers import schemas, service
from foodbank.infra.db import get_db_session

router = APIRouter(prefix="/api/volunteers", tags=["volunteers"])


def _volunteer_not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Volunteer not found")


@router.get("", response_model=Envelope[list[schemas.VolunteerResponse]])
async def list_volunteers(
    status_filter: schemas.VolunteerStatus | None = Query(None, alias="status"),
    skill: str | None = None,
    principal: Principal = Depends(require_principal),
    session: AsyncSession = Depends(get_db_session),
) -> Envelope[list[schemas.VolunteerResponse]]:
    """
    List volunteers.

    Query parameters:
    - status: Filter by status (optional)
    - skill: Only volunteers listing this skill (optional)
    """
    with store_errors("Failed to fetch volunteers"):
        volunteers = await service.list_volunteers(
            session,
            principal.organization_id,
            status=status_filter,
            skill=skill,
        )
    return Envelope(data=[schemas.VolunteerResponse.model_validate(v) for v in volunteers])


@router.get("/{volunteer_id}", response_model=Envelope[schemas.VolunteerResponse])
async def get_volunteer(
    volunteer_id: uuid.UUID,
    principal: Principal = Depends(require_principal),
    session: AsyncSession = Depends(get_db_session),
) -> Envelope[schemas.VolunteerResponse]:
    volunteer = await service.get_volunteer(session, principal.organization_id, volunteer_id)
    if volunteer is None:
        raise _volunteer_not_found()
    return Envelope(data=schemas.VolunteerResponse.model_validate(volunteer))


@router.post(
    "",
    response_model=Envelope[schemas.VolunteerResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_volunteer(
    data: schemas.VolunteerCreate,
    principal: Principal = Depends(require_principal),
    session: AsyncSession = Depends(get_db_session),
) -> Envelope[schemas.VolunteerResponse]:
    """Register a volunteer. New volunteers always start active."""
    with store_errors("Failed to create volunteer"):
        volunteer = await service.create_volunteer(session, principal.organization_id, data)
        await session.commit()
    return Envelope(
        data=schemas.VolunteerResponse.model_validate(volunteer),
        message="Volunteer created successfully",
    )


@router.put("/{volunteer_id}", response_model=Envelope[schemas.VolunteerResponse])
async def update_volunteer(
    volunteer_id: uuid.UUID,
    data: schemas.VolunteerUpdate,
    principal: Principal = Depends(require_principal),
    session: AsyncSession = Depends(get_db_session),
) -> Envelope[schemas.VolunteerResponse]:
    with store_errors("Failed to update volunteer"):
        volunteer = await service.update_volunteer(session, principal.organization_id, volunteer_id, data)
        if volunteer is None:
            raise _volunteer_not_found()
        await session.commit()
    return Envelope(
        data=schemas.VolunteerResponse.model_validate(volunteer),
        message="Volunteer updated successfully",
    )


@router.delete("/{volunteer_id}", response_model=Envelope[schemas.VolunteerResponse])
async def delete_volunteer(
    volunteer_id: uuid.UUID,
    principal: Principal = Depends(require_principal),
    session: AsyncSession = Depends(get_db_session),
) -> Envelope[schemas.VolunteerResponse]:
    """Deactivate a volunteer. The record is kept."""
    with store_errors("Failed to deactivate volunteer"):
        volunteer = await service.deactivate_volunteer(session, principal.organization_id, volunteer_id)
        if volunteer is None:
            raise _volunteer_not_found()
        await session.commit()
    return Envelope(
        data=schemas.VolunteerResponse.model_validate(volunteer),
        message="Volunteer deactivated successfully",
    )


@router.get(
    "/{volunteer_id}/availability",
    response_model=Envelope[list[schemas.AvailabilitySlot]],
)
async def get_volunteer_availability(
    volunteer_id: uuid.UUID,
    principal: Principal = Depends(require_principal),
    session: AsyncSession = Depends(get_db_session),
) -> Envelope[list[schemas.AvailabilitySlot]]:
    volunteer = await service.get_volunteer(session, principal.organization_id, volunteer_id)
    if volunteer is None:
        raise _volunteer_not_found()
    slots = [schemas.AvailabilitySlot.model_validate(slot) for slot in volunteer.availability or []]
    return Envelope(data=slots)


@router.put(
    "/{volunteer_id}/availability",
    response_model=Envelope[list[schemas.AvailabilitySlot]],
)
async def update_volunteer_availability(
    volunteer_id: uuid.UUID,
    data: schemas.AvailabilityUpdate,
    principal: Principal = Depends(require_principal),
    session: AsyncSession = Depends(get_db_session),
) -> Envelope[list[schemas.AvailabilitySlot]]:
    """Replace the volunteer's availability with the submitted slots."""
    with store_errors("Failed to update availability"):
        volunteer = await service.set_availability(
            session,
            principal.organization_id,
            volunteer_id,
            data.availability,
        )
        if volunteer is None:
            raise _volunteer_not_found()
        await session.commit()
    return Envelope(data=data.availability, message="Availability updated successfully")
