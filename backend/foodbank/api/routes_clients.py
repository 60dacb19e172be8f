from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from foodbank.api.auth import Principal, require_principal
from foodbank.api.envelope import Envelope
from foodbank.domain.clients import schemas, service
from foodbank.domain.errors import store_errors
from foodbank.infra.db import get_db_session

router = APIRouter(prefix="/api/clients", tags=["clients"])


def _client_not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found")


@router.get("", response_model=Envelope[list[schemas.ClientResponse]])
async def list_clients(
    status_filter: schemas.ClientStatus | None = Query(None, alias="status"),
    principal: Principal = Depends(require_principal),
    session: AsyncSession = Depends(get_db_session),
) -> Envelope[list[schemas.ClientResponse]]:
    with store_errors("Failed to fetch clients"):
        clients = await service.list_clients(session, principal.organization_id, status=status_filter)
    return Envelope(data=[schemas.ClientResponse.model_validate(c) for c in clients])


@router.get("/{client_id}", response_model=Envelope[schemas.ClientResponse])
async def get_client(
    client_id: uuid.UUID,
    principal: Principal = Depends(require_principal),
    session: AsyncSession = Depends(get_db_session),
) -> Envelope[schemas.ClientResponse]:
    client = await service.get_client(session, principal.organization_id, client_id)
    if client is None:
        raise _client_not_found()
    return Envelope(data=schemas.ClientResponse.model_validate(client))


@router.post("", response_model=Envelope[schemas.ClientResponse], status_code=status.HTTP_201_CREATED)
async def create_client(
    data: schemas.ClientCreate,
    principal: Principal = Depends(require_principal),
    session: AsyncSession = Depends(get_db_session),
) -> Envelope[schemas.ClientResponse]:
    with store_errors("Failed to create client"):
        client = await service.create_client(session, principal.organization_id, data)
        await session.commit()
    return Envelope(data=schemas.ClientResponse.model_validate(client), message="Client created successfully")


@router.put("/{client_id}", response_model=Envelope[schemas.ClientResponse])
async def update_client(
    client_id: uuid.UUID,
    data: schemas.ClientUpdate,
    principal: Principal = Depends(require_principal),
    session: AsyncSession = Depends(get_db_session),
) -> Envelope[schemas.ClientResponse]:
    with store_errors("Failed to update client"):
        client = await service.update_client(session, principal.organization_id, client_id, data)
        if client is None:
            raise _client_not_found()
        await session.commit()
    return Envelope(data=schemas.ClientResponse.model_validate(client), message="Client updated successfully")


@router.delete("/{client_id}", response_model=Envelope[schemas.ClientResponse])
async def delete_client(
    client_id: uuid.UUID,
    principal: Principal = Depends(require_principal),
    session: AsyncSession = Depends(get_db_session),
) -> Envelope[schemas.ClientResponse]:
    """Deactivate a client. Visit history is kept."""
    with store_errors("Failed to deactivate client"):
        client = await service.deactivate_client(session, principal.organization_id, client_id)
        if client is None:
            raise _client_not_found()
        await session.commit()
    return Envelope(
        data=schemas.ClientResponse.model_validate(client),
        message="Client deactivated successfully",
    )


@router.get("/{client_id}/visits", response_model=Envelope[list[schemas.ClientVisitResponse]])
async def list_client_visits(
    client_id: uuid.UUID,
    principal: Principal = Depends(require_principal),
    session: AsyncSession = Depends(get_db_session),
) -> Envelope[list[schemas.ClientVisitResponse]]:
    """Visits for a client, newest first."""
    client = await service.get_client(session, principal.organization_id, client_id)
    if client is None:
        raise _client_not_found()
    with store_errors("Failed to fetch visits"):
        visits = await service.list_visits(session, principal.organization_id, client_id)
    return Envelope(data=[schemas.ClientVisitResponse.model_validate(v) for v in visits])


@router.post(
    "/{client_id}/visits",
    response_model=Envelope[schemas.ClientVisitResponse],
    status_code=status.HTTP_201_CREATED,
)
async def record_client_visit(
    client_id: uuid.UUID,
    data: schemas.ClientVisitCreate,
    principal: Principal = Depends(require_principal),
    session: AsyncSession = Depends(get_db_session),
) -> Envelope[schemas.ClientVisitResponse]:
    """Record a visit served by the calling user."""
    client = await service.get_client(session, principal.organization_id, client_id)
    if client is None:
        raise _client_not_found()
    with store_errors("Failed to record visit"):
        visit = await service.record_visit(
            session,
            principal.organization_id,
            client_id,
            principal.user_id,
            data,
        )
        await session.commit()
    return Envelope(data=schemas.ClientVisitResponse.model_validate(visit), message="Visit recorded successfully")
