from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from foodbank.api.auth import Principal, require_principal
from foodbank.api.envelope import Envelope, MessageEnvelope
from foodbank.domain.errors import store_errors
from foodbank.domain.users import schemas, service
from foodbank.infra.db import get_db_session

router = APIRouter(prefix="/api/users", tags=["users"])


def _user_not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")


@router.get("", response_model=Envelope[list[schemas.UserResponse]])
async def list_users(
    principal: Principal = Depends(require_principal),
    session: AsyncSession = Depends(get_db_session),
) -> Envelope[list[schemas.UserResponse]]:
    with store_errors("Failed to fetch users"):
        users = await service.list_users(session, principal.organization_id)
    return Envelope(data=[schemas.UserResponse.model_validate(user) for user in users])


@router.get("/{user_id}", response_model=Envelope[schemas.UserResponse])
async def get_user(
    user_id: uuid.UUID,
    principal: Principal = Depends(require_principal),
    session: AsyncSession = Depends(get_db_session),
) -> Envelope[schemas.UserResponse]:
    user = await service.get_user(session, principal.organization_id, user_id)
    if user is None:
        raise _user_not_found()
    return Envelope(data=schemas.UserResponse.model_validate(user))


@router.post("", response_model=Envelope[schemas.UserResponse], status_code=status.HTTP_201_CREATED)
async def create_user(
    data: schemas.UserCreate,
    principal: Principal = Depends(require_principal),
    session: AsyncSession = Depends(get_db_session),
) -> Envelope[schemas.UserResponse]:
    """Create a user in the caller's organization."""
    with store_errors("Failed to create user"):
        user = await service.create_user(session, principal.organization_id, data)
        await session.commit()
    return Envelope(data=schemas.UserResponse.model_validate(user), message="User created successfully")


@router.put("/{user_id}", response_model=Envelope[schemas.UserResponse])
async def update_user(
    user_id: uuid.UUID,
    data: schemas.UserUpdate,
    principal: Principal = Depends(require_principal),
    session: AsyncSession = Depends(get_db_session),
) -> Envelope[schemas.UserResponse]:
    with store_errors("Failed to update user"):
        user = await service.update_user(session, principal.organization_id, user_id, data)
        if user is None:
            raise _user_not_found()
        await session.commit()
    return Envelope(data=schemas.UserResponse.model_validate(user), message="User updated successfully")


@router.delete("/{user_id}", response_model=MessageEnvelope)
async def delete_user(
    user_id: uuid.UUID,
    principal: Principal = Depends(require_principal),
    session: AsyncSession = Depends(get_db_session),
) -> MessageEnvelope:
    with store_errors("Failed to delete user"):
        deleted = await service.delete_user(session, principal.organization_id, user_id)
        if not deleted:
            raise _user_not_found()
        await session.commit()
    return MessageEnvelope(message="User deleted successfully")
