from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    """Response wrapper used by the people-facing routers (users, volunteers, clients)."""

    success: bool = True
    data: T
    message: str | None = None


class MessageEnvelope(BaseModel):
    success: bool = True
    message: str
