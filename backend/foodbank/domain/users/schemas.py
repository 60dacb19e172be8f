from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from foodbank.domain.users.db_models import UserRole


class UserResponse(BaseModel):
    id: UUID
    organization_id: UUID
    email: str
    role: UserRole
    first_name: str
    last_name: str
    phone: str | None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class UserCreate(BaseModel):
    """New staff account. The organization always comes from the caller."""

    email: EmailStr
    role: UserRole
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone: str | None = Field(None, max_length=50)


class UserUpdate(BaseModel):
    email: EmailStr | None = None
    role: UserRole | None = None
    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    phone: str | None = Field(None, max_length=50)
