"""Client registry and visit log. Client deletes are soft; visits are append-only."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from foodbank.domain.clients import db_models, schemas

NULLABLE_FIELDS = {"email", "phone", "notes"}


def _clean_restrictions(values: list[str]) -> list[str]:
    return [value.strip() for value in values if value and value.strip()]


async def list_clients(
    session: AsyncSession,
    org_id: uuid.UUID,
    *,
    status: str | None = None,
) -> list[db_models.Client]:
    stmt = (
        select(db_models.Client)
        .where(db_models.Client.organization_id == org_id)
        .order_by(db_models.Client.last_name.asc(), db_models.Client.first_name.asc())
    )
    if status:
        stmt = stmt.where(db_models.Client.status == status)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_client(
    session: AsyncSession,
    org_id: uuid.UUID,
    client_id: uuid.UUID,
) -> db_models.Client | None:
    stmt = select(db_models.Client).where(
        db_models.Client.organization_id == org_id,
        db_models.Client.id == client_id,
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def create_client(
    session: AsyncSession,
    org_id: uuid.UUID,
    data: schemas.ClientCreate,
) -> db_models.Client:
    now = datetime.now(timezone.utc)
    client = db_models.Client(
        id=uuid.uuid4(),
        organization_id=org_id,
        first_name=data.first_name.strip(),
        last_name=data.last_name.strip(),
        email=data.email.strip().lower() if data.email else None,
        phone=data.phone,
        address=data.address.strip(),
        household_size=data.household_size,
        dietary_restrictions=_clean_restrictions(data.dietary_restrictions),
        status="active",
        notes=data.notes,
        created_at=now,
        updated_at=now,
    )
    session.add(client)
    await session.flush()
    return client


async def update_client(
    session: AsyncSession,
    org_id: uuid.UUID,
    client_id: uuid.UUID,
    data: schemas.ClientUpdate,
) -> db_models.Client | None:
    client = await get_client(session, org_id, client_id)
    if client is None:
        return None

    updates = data.model_dump(exclude_unset=True)
    for field, value in updates.items():
        if value is None and field not in NULLABLE_FIELDS:
            continue
        if field == "dietary_restrictions":
            value = _clean_restrictions(value)
        setattr(client, field, value)
    client.updated_at = datetime.now(timezone.utc)

    await session.flush()
    return client


async def deactivate_client(
    session: AsyncSession,
    org_id: uuid.UUID,
    client_id: uuid.UUID,
) -> db_models.Client | None:
    client = await get_client(session, org_id, client_id)
    if client is None:
        return None
    client.status = "inactive"
    client.updated_at = datetime.now(timezone.utc)
    await session.flush()
    return client


async def list_visits(
    session: AsyncSession,
    org_id: uuid.UUID,
    client_id: uuid.UUID,
) -> list[db_models.ClientVisit]:
    stmt = (
        select(db_models.ClientVisit)
        .where(
            db_models.ClientVisit.organization_id == org_id,
            db_models.ClientVisit.client_id == client_id,
        )
        .order_by(db_models.ClientVisit.visit_date.desc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def record_visit(
    session: AsyncSession,
    org_id: uuid.UUID,
    client_id: uuid.UUID,
    served_by: uuid.UUID | None,
    data: schemas.ClientVisitCreate,
) -> db_models.ClientVisit:
    visit = db_models.ClientVisit(
        id=uuid.uuid4(),
        organization_id=org_id,
        client_id=client_id,
        visit_date=data.visit_date or datetime.now(timezone.utc),
        notes=data.notes,
        served_by=served_by,
    )
    session.add(visit)
    await session.flush()
    return visit
