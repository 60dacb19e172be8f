from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, List

from sqlalchemy.exc import SQLAlchemyError


@dataclass(eq=False)
class DomainError(Exception):
    detail: str
    title: str = "Domain Error"
    type: str = "https://example.com/problems/domain-error"
    errors: List[dict] | None = None
    status_code: int = 400

    def __str__(self) -> str:
        return self.detail


@dataclass(eq=False)
class ValidationError(DomainError):
    title: str = "Invalid Input"
    type: str = "https://example.com/problems/validation-error"
    status_code: int = 400


@dataclass(eq=False)
class AuthError(DomainError):
    title: str = "Unauthorized"
    type: str = "https://example.com/problems/unauthorized"
    status_code: int = 401


@dataclass(eq=False)
class ForbiddenError(DomainError):
    title: str = "Forbidden"
    type: str = "https://example.com/problems/forbidden"
    status_code: int = 403


@dataclass(eq=False)
class NotFoundError(DomainError):
    title: str = "Not Found"
    type: str = "https://example.com/problems/not-found"
    status_code: int = 404


@dataclass(eq=False)
class ConflictError(DomainError):
    title: str = "Conflict"
    type: str = "https://example.com/problems/conflict"
    status_code: int = 409


@dataclass(eq=False)
class StoreError(DomainError):
    title: str = "Store Error"
    type: str = "https://example.com/problems/store-error"
    status_code: int = 500


@contextmanager
def store_errors(detail: str, *, status_code: int = 500) -> Iterator[None]:
    """Re-raise persistence failures as a StoreError carrying an HTTP status."""
    try:
        yield
    except SQLAlchemyError as exc:
        raise StoreError(detail=detail, status_code=status_code) from exc
