import uuid
from contextvars import ContextVar

_current_org_id: ContextVar[uuid.UUID | None] = ContextVar("current_org_id", default=None)


def set_current_org_id(org_id: uuid.UUID | None) -> None:
    _current_org_id.set(org_id)


def get_current_org_id() -> uuid.UUID | None:
    return _current_org_id.get()

