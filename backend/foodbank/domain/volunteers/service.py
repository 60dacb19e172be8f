"""Volunteer roster service. Deletes are soft: the row stays with status inactive."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from foodbank.domain.volunteers import db_models, schemas

NULLABLE_FIELDS = {"phone", "notes"}


def _clean_skills(skills: list[str]) -> list[str]:
    cleaned: list[str] = []
    for skill in skills:
        value = skill.strip()
        if value and value not in cleaned:
            cleaned.append(value)
    return cleaned


def _dump_availability(slots: list[schemas.AvailabilitySlot]) -> list[dict]:
    return [slot.model_dump() for slot in slots]


async def list_volunteers(
    session: AsyncSession,
    org_id: uuid.UUID,
    *,
    status: str | None = None,
    skill: str | None = None,
) -> list[db_models.Volunteer]:
    stmt = (
        select(db_models.Volunteer)
        .where(db_models.Volunteer.organization_id == org_id)
        .order_by(db_models.Volunteer.last_name.asc(), db_models.Volunteer.first_name.asc())
    )
    if status:
        stmt = stmt.where(db_models.Volunteer.status == status)

    volunteers = list((await session.execute(stmt)).scalars().all())
    if skill:
        # skills is a JSON list; matching in Python keeps this portable across backends.
        needle = skill.strip().lower()
        volunteers = [
            volunteer
            for volunteer in volunteers
            if any(entry.lower() == needle for entry in volunteer.skills or [])
        ]
    return volunteers


async def get_volunteer(
    session: AsyncSession,
    org_id: uuid.UUID,
    volunteer_id: uuid.UUID,
) -> db_models.Volunteer | None:
    stmt = select(db_models.Volunteer).where(
        db_models.Volunteer.organization_id == org_id,
        db_models.Volunteer.id == volunteer_id,
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def create_volunteer(
    session: AsyncSession,
    org_id: uuid.UUID,
    data: schemas.VolunteerCreate,
) -> db_models.Volunteer:
    now = datetime.now(timezone.utc)
    volunteer = db_models.Volunteer(
        id=uuid.uuid4(),
        organization_id=org_id,
        first_name=data.first_name.strip(),
        last_name=data.last_name.strip(),
        email=data.email.strip().lower(),
        phone=data.phone,
        status="active",
        skills=_clean_skills(data.skills),
        availability=_dump_availability(data.availability),
        notes=data.notes,
        created_at=now,
        updated_at=now,
    )
    session.add(volunteer)
    await session.flush()
    return volunteer


async def update_volunteer(
    session: AsyncSession,
    org_id: uuid.UUID,
    volunteer_id: uuid.UUID,
    data: schemas.VolunteerUpdate,
) -> db_models.Volunteer | None:
    volunteer = await get_volunteer(session, org_id, volunteer_id)
    if volunteer is None:
        return None

    updates = data.model_dump(exclude_unset=True)
    for field, value in updates.items():
        if value is None and field not in NULLABLE_FIELDS:
            continue
        if field == "skills":
            value = _clean_skills(value)
        elif field == "availability":
            value = _dump_availability(data.availability or [])
        elif field == "email":
            value = value.strip().lower()
        setattr(volunteer, field, value)
    volunteer.updated_at = datetime.now(timezone.utc)

    await session.flush()
    return volunteer


async def deactivate_volunteer(
    session: AsyncSession,
    org_id: uuid.UUID,
    volunteer_id: uuid.UUID,
) -> db_models.Volunteer | None:
    volunteer = await get_volunteer(session, org_id, volunteer_id)
    if volunteer is None:
        return None
    volunteer.status = "inactive"
    volunteer.updated_at = datetime.now(timezone.utc)
    await session.flush()
    return volunteer


async def set_availability(
    session: AsyncSession,
    org_id: uuid.UUID,
    volunteer_id: uuid.UUID,
    slots: list[schemas.AvailabilitySlot],
) -> db_models.Volunteer | None:
    """Replace the volunteer's whole availability list."""
    volunteer = await get_volunteer(session, org_id, volunteer_id)
    if volunteer is None:
        return None
    volunteer.availability = _dump_availability(slots)
    volunteer.updated_at = datetime.now(timezone.utc)
    await session.flush()
    return volunteer
