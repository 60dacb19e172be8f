from __future__ import annotations

import re
from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

Weekday = Literal["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]
VolunteerStatus = Literal["active", "inactive", "pending"]

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class AvailabilitySlot(BaseModel):
    day: Weekday
    start_time: str
    end_time: str

    @field_validator("day", mode="before")
    @classmethod
    def lower_day(cls, value: object) -> object:
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, value: str) -> str:
        if not _TIME_RE.match(value):
            raise ValueError("time must be HH:MM (24-hour)")
        return value

    @model_validator(mode="after")
    def validate_range(self) -> "AvailabilitySlot":
        # Zero-padded HH:MM strings compare in time order.
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self


class VolunteerResponse(BaseModel):
    id: UUID
    organization_id: UUID
    first_name: str
    last_name: str
    email: str
    phone: str | None
    status: str
    skills: list[str]
    availability: list[AvailabilitySlot]
    notes: str | None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class VolunteerCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: str | None = Field(None, max_length=50)
    skills: list[str] = Field(default_factory=list)
    availability: list[AvailabilitySlot] = Field(default_factory=list)
    notes: str | None = None


class VolunteerUpdate(BaseModel):
    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=50)
    status: VolunteerStatus | None = None
    skills: list[str] | None = None
    availability: list[AvailabilitySlot] | None = None
    notes: str | None = None


class AvailabilityUpdate(BaseModel):
    availability: list[AvailabilitySlot]
