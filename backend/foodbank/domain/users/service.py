from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from foodbank.domain.errors import ConflictError
from foodbank.domain.users import db_models, schemas


def _normalize_email(email: str) -> str:
    return email.strip().lower()


async def list_users(session: AsyncSession, org_id: uuid.UUID) -> list[db_models.User]:
    stmt = (
        select(db_models.User)
        .where(db_models.User.organization_id == org_id)
        .order_by(db_models.User.last_name.asc(), db_models.User.first_name.asc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_user(
    session: AsyncSession,
    org_id: uuid.UUID,
    user_id: uuid.UUID,
) -> db_models.User | None:
    stmt = select(db_models.User).where(
        db_models.User.organization_id == org_id,
        db_models.User.id == user_id,
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def get_user_by_id(session: AsyncSession, user_id: uuid.UUID) -> db_models.User | None:
    """Unscoped lookup used only to resolve a token subject to its organization."""
    return await session.get(db_models.User, user_id)


async def _ensure_email_available(
    session: AsyncSession,
    email: str,
    *,
    exclude_user_id: uuid.UUID | None = None,
) -> None:
    # Emails are unique across all organizations.
    stmt = select(db_models.User.id).where(func.lower(db_models.User.email) == email)
    if exclude_user_id is not None:
        stmt = stmt.where(db_models.User.id != exclude_user_id)
    existing = (await session.execute(stmt)).scalar_one_or_none()
    if existing is not None:
        raise ConflictError(detail="A user with this email already exists")


async def create_user(
    session: AsyncSession,
    org_id: uuid.UUID,
    data: schemas.UserCreate,
) -> db_models.User:
    email = _normalize_email(data.email)
    await _ensure_email_available(session, email)

    now = datetime.now(timezone.utc)
    user = db_models.User(
        id=uuid.uuid4(),
        organization_id=org_id,
        email=email,
        role=data.role,
        first_name=data.first_name.strip(),
        last_name=data.last_name.strip(),
        phone=data.phone,
        created_at=now,
        updated_at=now,
    )
    session.add(user)
    await session.flush()
    return user


async def update_user(
    session: AsyncSession,
    org_id: uuid.UUID,
    user_id: uuid.UUID,
    data: schemas.UserUpdate,
) -> db_models.User | None:
    user = await get_user(session, org_id, user_id)
    if user is None:
        return None

    updates = data.model_dump(exclude_unset=True)
    if updates.get("email") is not None:
        updates["email"] = _normalize_email(updates["email"])
        if updates["email"] != user.email:
            await _ensure_email_available(session, updates["email"], exclude_user_id=user.id)

    for field, value in updates.items():
        if value is None and field != "phone":
            continue
        setattr(user, field, value)
    user.updated_at = datetime.now(timezone.utc)

    await session.flush()
    return user


async def delete_user(
    session: AsyncSession,
    org_id: uuid.UUID,
    user_id: uuid.UUID,
) -> bool:
    user = await get_user(session, org_id, user_id)
    if user is None:
        return False
    await session.delete(user)
    await session.flush()
    return True
