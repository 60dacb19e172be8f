from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

ClientStatus = Literal["active", "inactive"]


class ClientResponse(BaseModel):
    id: UUID
    organization_id: UUID
    first_name: str
    last_name: str
    email: str | None
    phone: str | None
    address: str
    household_size: int
    dietary_restrictions: list[str]
    status: str
    notes: str | None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ClientCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=50)
    address: str = Field(..., min_length=1, max_length=500)
    household_size: int = Field(..., gt=0)
    dietary_restrictions: list[str] = Field(default_factory=list)
    notes: str | None = None


class ClientUpdate(BaseModel):
    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=50)
    address: str | None = Field(None, min_length=1, max_length=500)
    household_size: int | None = Field(None, gt=0)
    dietary_restrictions: list[str] | None = None
    status: ClientStatus | None = None
    notes: str | None = None


class ClientVisitCreate(BaseModel):
    visit_date: datetime | None = None
    notes: str | None = None


class ClientVisitResponse(BaseModel):
    id: UUID
    organization_id: UUID
    client_id: UUID
    visit_date: datetime
    notes: str | None
    served_by: UUID | None

    class Config:
        from_attributes = True
