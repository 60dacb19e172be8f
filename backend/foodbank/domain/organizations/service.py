from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from foodbank.domain.clients.db_models import Client
from foodbank.domain.inventory.db_models import InventoryItem, InventoryTransaction
from foodbank.domain.organizations import db_models, schemas
from foodbank.domain.volunteers.db_models import Volunteer
from foodbank.settings import settings


async def get_organization(
    session: AsyncSession,
    org_id: uuid.UUID,
) -> db_models.Organization | None:
    return await session.get(db_models.Organization, org_id)


async def update_organization(
    session: AsyncSession,
    org_id: uuid.UUID,
    data: schemas.OrganizationUpdate,
) -> db_models.Organization | None:
    organization = await get_organization(session, org_id)
    if organization is None:
        return None

    updates = data.model_dump(exclude_unset=True)
    for field, value in updates.items():
        if value is None and field in {"name", "status"}:
            continue
        setattr(organization, field, value)
    organization.updated_at = datetime.now(timezone.utc)

    await session.flush()
    return organization


async def _count(session: AsyncSession, model, org_id: uuid.UUID) -> int:  # noqa: ANN001
    stmt = select(func.count()).select_from(model).where(model.organization_id == org_id)
    result = await session.execute(stmt)
    return int(result.scalar_one())


async def get_organization_stats(
    session: AsyncSession,
    org_id: uuid.UUID,
    *,
    recent_limit: int | None = None,
) -> schemas.OrganizationStatsResponse:
    """Dashboard counts plus the most recent inventory transactions."""
    counts = schemas.OrganizationCounts(
        volunteers=await _count(session, Volunteer, org_id),
        clients=await _count(session, Client, org_id),
        inventory=await _count(session, InventoryItem, org_id),
    )

    limit = settings.stats_recent_activity_limit if recent_limit is None else recent_limit
    stmt = (
        select(
            InventoryTransaction.id,
            InventoryTransaction.item_id,
            InventoryItem.name.label("item_name"),
            InventoryTransaction.transaction_type,
            InventoryTransaction.quantity,
            InventoryTransaction.transaction_date,
        )
        .join(InventoryItem, InventoryItem.id == InventoryTransaction.item_id)
        .where(
            InventoryTransaction.organization_id == org_id,
            InventoryItem.organization_id == org_id,
        )
        .order_by(InventoryTransaction.transaction_date.desc())
        .limit(limit)
    )
    rows = (await session.execute(stmt)).all()
    recent = [schemas.RecentActivity.model_validate(dict(row._mapping)) for row in rows]

    return schemas.OrganizationStatsResponse(stats=counts, recent_activity=recent)
