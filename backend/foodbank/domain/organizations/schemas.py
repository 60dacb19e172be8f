from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field


class OrganizationResponse(BaseModel):
    id: UUID
    name: str
    address: str | None
    phone: str | None
    email: str | None
    website: str | None
    status: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class OrganizationUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    address: str | None = Field(None, max_length=500)
    phone: str | None = Field(None, max_length=50)
    email: str | None = Field(None, max_length=255)
    website: str | None = Field(None, max_length=500)
    status: Literal["active", "inactive"] | None = None


class OrganizationCounts(BaseModel):
    volunteers: int
    clients: int
    inventory: int


class RecentActivity(BaseModel):
    """A recent ledger entry joined with the name of its item."""

    id: UUID
    item_id: UUID
    item_name: str
    transaction_type: str
    quantity: int
    transaction_date: datetime


class OrganizationStatsResponse(BaseModel):
    stats: OrganizationCounts
    recent_activity: list[RecentActivity] = Field(..., alias="recentActivity")

    class Config:
        populate_by_name = True
